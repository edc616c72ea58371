from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

BATSMAN = "Batsman"
BOWLER = "Bowler"
ALL_ROUNDER = "All-Rounder"
WICKET_KEEPER = "Wicket-Keeper"

# Minimum-fill processing order. Changing it changes output on constrained squads.
ROLES = (BATSMAN, BOWLER, ALL_ROUNDER, WICKET_KEEPER)
BOWLING_ROLES = frozenset({BOWLER, ALL_ROUNDER})


@dataclass(frozen=True)
class Player:
    id: int
    name: str
    role: str
    overseas: bool
    batting_average: float = 0.0
    strike_rate: float = 0.0
    bowling_economy: float | None = None
    wickets: int | None = None
    catches: int = 0
    team: str = ""


@dataclass(frozen=True)
class ScoredPlayer:
    player: Player
    composite_score: float

    @property
    def id(self) -> int:
        return self.player.id

    @property
    def role(self) -> str:
        return self.player.role

    @property
    def overseas(self) -> bool:
        return self.player.overseas


@dataclass(frozen=True)
class RoleBounds:
    minimum: int
    maximum: int


@dataclass(frozen=True)
class SelectionConstraints:
    """Size, overseas cap and per-role bounds for a playing XI.

    ``max_overseas`` of ``None`` disables the overseas cap.
    """

    team_size: int = 11
    max_overseas: int | None = 4
    role_bounds: Mapping[str, RoleBounds] = field(
        default_factory=lambda: MappingProxyType(
            {
                BATSMAN: RoleBounds(3, 6),
                BOWLER: RoleBounds(3, 6),
                ALL_ROUNDER: RoleBounds(1, 4),
                WICKET_KEEPER: RoleBounds(1, 2),
            }
        )
    )

    def bounds_for(self, role: str) -> RoleBounds:
        return self.role_bounds.get(role, RoleBounds(0, 0))

    def allows_overseas(self, current_count: int) -> bool:
        return self.max_overseas is None or current_count < self.max_overseas


@dataclass(frozen=True)
class SelectionResult:
    selected_players: list[ScoredPlayer]
    total_score: float
    team_name: str
    shortfalls: dict[str, int] = field(default_factory=dict)

    @property
    def player_ids(self) -> list[int]:
        return [p.id for p in self.selected_players]

    @property
    def overseas_count(self) -> int:
        return sum(1 for p in self.selected_players if p.overseas)

    def role_counts(self) -> Counter[str]:
        return Counter(p.role for p in self.selected_players)
