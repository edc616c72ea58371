from __future__ import annotations

from typing import Iterable

from .models import ALL_ROUNDER, BATSMAN, BOWLER, WICKET_KEEPER, Player, ScoredPlayer

BATTING_WEIGHTS = {"batting_average": 0.5, "strike_rate": 0.3, "catches": 0.2}
BOWLING_WEIGHTS = {"wickets": 0.6, "bowling_economy": -0.2, "catches": 0.2}
KEEPING_WEIGHTS = {"batting_average": 0.4, "strike_rate": 0.2, "catches": 0.4}


def _stat(player: Player, name: str) -> float:
    value = getattr(player, name)
    if value is None:
        return 0.0
    return float(value)


def _weighted(player: Player, weights: dict[str, float]) -> float:
    return sum(_stat(player, stat) * weight for stat, weight in weights.items())


def batting_component(player: Player) -> float:
    return _weighted(player, BATTING_WEIGHTS)


def bowling_component(player: Player) -> float:
    return _weighted(player, BOWLING_WEIGHTS)


def keeping_component(player: Player) -> float:
    return _weighted(player, KEEPING_WEIGHTS)


def composite_score(player: Player) -> float:
    """Role-dependent score rounded to 2 decimals.

    All-rounders average their batting and bowling components. Missing stats
    count as zero and an unrecognised role scores zero.
    """
    if player.role == BATSMAN:
        score = batting_component(player)
    elif player.role == BOWLER:
        score = bowling_component(player)
    elif player.role == ALL_ROUNDER:
        score = (batting_component(player) + bowling_component(player)) / 2
    elif player.role == WICKET_KEEPER:
        score = keeping_component(player)
    else:
        score = 0.0
    return round(score, 2)


def score_player(player: Player) -> ScoredPlayer:
    return ScoredPlayer(player=player, composite_score=composite_score(player))


def score_players(players: Iterable[Player]) -> list[ScoredPlayer]:
    return [score_player(p) for p in players]


def rank_players(players: Iterable[Player]) -> list[ScoredPlayer]:
    # sorted() is stable, so equal scores keep their input order.
    return sorted(score_players(players), key=lambda p: p.composite_score, reverse=True)
