from __future__ import annotations

import logging
from collections import Counter
from typing import Iterable

from .models import ROLES, Player, ScoredPlayer, SelectionConstraints, SelectionResult
from .scoring import score_player

logger = logging.getLogger(__name__)

DEFAULT_CONSTRAINTS = SelectionConstraints()
UNKNOWN_TEAM = "Unknown Team"


class _Selection:
    """Running XI with its overseas and per-role tallies."""

    def __init__(self, constraints: SelectionConstraints) -> None:
        self.constraints = constraints
        self.players: list[ScoredPlayer] = []
        self.role_counts: Counter[str] = Counter()
        self.overseas_count = 0

    def __len__(self) -> int:
        return len(self.players)

    @property
    def is_full(self) -> bool:
        return len(self.players) >= self.constraints.team_size

    def overseas_blocked(self, candidate: ScoredPlayer) -> bool:
        return candidate.overseas and not self.constraints.allows_overseas(self.overseas_count)

    def role_full(self, candidate: ScoredPlayer) -> bool:
        return self.role_counts[candidate.role] >= self.constraints.bounds_for(candidate.role).maximum

    def add(self, candidate: ScoredPlayer) -> None:
        self.players.append(candidate)
        self.role_counts[candidate.role] += 1
        if candidate.overseas:
            self.overseas_count += 1


def _team_name(players: list[Player]) -> str:
    if players and players[0].team.strip():
        return players[0].team
    return UNKNOWN_TEAM


def _bucket_by_role(players: list[Player]) -> dict[str, list[ScoredPlayer]]:
    buckets: dict[str, list[ScoredPlayer]] = {role: [] for role in ROLES}
    seen_ids: set[int] = set()
    for player in players:
        if player.role not in buckets:
            logger.debug("Ignoring %s: unknown role %r", player.name, player.role)
            continue
        if player.id in seen_ids:
            logger.warning("Ignoring %s: duplicate player id %s", player.name, player.id)
            continue
        seen_ids.add(player.id)
        buckets[player.role].append(score_player(player))

    for role in ROLES:
        buckets[role].sort(key=lambda p: p.composite_score, reverse=True)
    return buckets


def _fill_minimums(
    buckets: dict[str, list[ScoredPlayer]],
    selection: _Selection,
) -> dict[str, int]:
    shortfalls: dict[str, int] = {}
    for role in ROLES:
        minimum = selection.constraints.bounds_for(role).minimum
        taken: list[ScoredPlayer] = []
        for candidate in buckets[role]:
            if len(taken) >= minimum:
                break
            if selection.overseas_blocked(candidate):
                logger.debug("Minimum fill skipped %s: overseas cap reached", candidate.player.name)
                continue
            selection.add(candidate)
            taken.append(candidate)

        taken_ids = {p.id for p in taken}
        buckets[role] = [p for p in buckets[role] if p.id not in taken_ids]
        if len(taken) < minimum:
            shortfalls[role] = minimum - len(taken)
        logger.debug("Minimum fill %s: took %d of %d", role, len(taken), minimum)
    return shortfalls


def _fill_remaining(
    buckets: dict[str, list[ScoredPlayer]],
    selection: _Selection,
) -> None:
    # Buckets are joined in role order before a stable sort, so score ties
    # favour the earlier role, then input order within that role.
    remaining = [p for role in ROLES for p in buckets[role]]
    remaining.sort(key=lambda p: p.composite_score, reverse=True)

    for candidate in remaining:
        if selection.is_full:
            break
        if selection.overseas_blocked(candidate):
            logger.debug("Fill skipped %s: overseas cap reached", candidate.player.name)
            continue
        if selection.role_full(candidate):
            logger.debug("Fill skipped %s: %s maximum reached", candidate.player.name, candidate.role)
            continue
        selection.add(candidate)


def select_lineup(
    players: Iterable[Player],
    constraints: SelectionConstraints = DEFAULT_CONSTRAINTS,
) -> SelectionResult:
    """Pick up to ``team_size`` players with a two-phase greedy pass.

    Role minimums are filled first in the fixed role order, then the best
    remaining players are added in a single forward pass that respects the
    overseas cap and role maximums. Nothing is backtracked, and a squad that
    cannot satisfy the constraints yields a smaller XI rather than an error.
    """
    squad = list(players)
    buckets = _bucket_by_role(squad)

    selection = _Selection(constraints)
    shortfalls = _fill_minimums(buckets, selection)
    _fill_remaining(buckets, selection)

    if len(selection) < constraints.team_size:
        logger.info("Selected %d of %d players", len(selection), constraints.team_size)

    total = round(sum((p.composite_score for p in selection.players), 0.0), 2)
    return SelectionResult(
        selected_players=list(selection.players),
        total_score=total,
        team_name=_team_name(squad),
        shortfalls=shortfalls,
    )
