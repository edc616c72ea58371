"""Shared fixtures for lineup optimizer tests."""
import itertools

import pytest

from lineup_optimizer.models import ALL_ROUNDER, BATSMAN, BOWLER, WICKET_KEEPER, Player

_ids = itertools.count(1000)


def _make_player(role, overseas=False, player_id=None, **stats):
    if role in (BOWLER, ALL_ROUNDER):
        stats.setdefault("bowling_economy", 0.0)
        stats.setdefault("wickets", 0)
    return Player(
        id=next(_ids) if player_id is None else player_id,
        name=stats.pop("name", f"{role} {overseas}"),
        role=role,
        overseas=overseas,
        **stats,
    )


@pytest.fixture
def make_player():
    """Factory for players with zeroed stats unless overridden."""
    return _make_player


@pytest.fixture
def sample_squad():
    """The five-player sample squad: three of them overseas."""
    return [
        Player(1, "Virat Kohli", BATSMAN, False, 38.2, 137.9, None, None, 92, "Bangalore"),
        Player(2, "Jasprit Bumrah", BOWLER, False, 8.2, 90.5, 6.7, 145, 21, "Bangalore"),
        Player(3, "Jos Buttler", WICKET_KEEPER, True, 34.1, 149.8, None, None, 105, "Bangalore"),
        Player(4, "Andre Russell", ALL_ROUNDER, True, 25.3, 176.2, 8.9, 89, 67, "Bangalore"),
        Player(5, "Quinton de Kock", WICKET_KEEPER, True, 31.5, 138.7, None, None, 115, "Bangalore"),
    ]


SQUAD_CSV = """Player Name,Team,Role,Overseas,Batting Avg,SR,Economy,Wkts,Catches
Virat Kohli,Bangalore,Batter,No,38.2,137.9,,,92
Jasprit Bumrah,Bangalore,Bowler,No,8.2,90.5,6.7,145,21
Jos Buttler,Bangalore,WK,Yes,34.1,149.8,,,105
Andre Russell,Bangalore,All-Rounder,Yes,25.3,176.2,8.9,89,67
Quinton de Kock,Bangalore,Wicket-Keeper,Yes,31.5,138.7,,,115
"""


@pytest.fixture
def squad_csv(tmp_path):
    path = tmp_path / "squad.csv"
    path.write_text(SQUAD_CSV, encoding="utf-8")
    return path
