from __future__ import annotations

from typing import Iterable

import pandas as pd

from .models import ROLES, ScoredPlayer, SelectionConstraints, SelectionResult

PLAYER_COLUMNS = [
    "id",
    "name",
    "team",
    "role",
    "overseas",
    "batting_average",
    "strike_rate",
    "bowling_economy",
    "wickets",
    "catches",
    "composite_score",
]


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def _player_row(entry: ScoredPlayer) -> dict[str, object]:
    p = entry.player
    return {
        "id": p.id,
        "name": p.name,
        "team": p.team,
        "role": p.role,
        "overseas": _yes_no(p.overseas),
        "batting_average": p.batting_average,
        "strike_rate": p.strike_rate,
        "bowling_economy": p.bowling_economy,
        "wickets": p.wickets,
        "catches": p.catches,
        "composite_score": entry.composite_score,
    }


def squad_frame(players: Iterable[ScoredPlayer]) -> pd.DataFrame:
    return pd.DataFrame([_player_row(p) for p in players], columns=PLAYER_COLUMNS)


def lineup_frame(result: SelectionResult) -> pd.DataFrame:
    """Selected players in selection order, numbered from 1."""
    frame = squad_frame(result.selected_players)
    frame.insert(0, "slot", range(1, len(frame) + 1))
    return frame


def summary_frame(result: SelectionResult, constraints: SelectionConstraints) -> pd.DataFrame:
    counts = result.role_counts()
    rows = []
    for role in ROLES:
        bounds = constraints.bounds_for(role)
        rows.append(
            {
                "role": role,
                "selected": counts.get(role, 0),
                "minimum": bounds.minimum,
                "maximum": bounds.maximum,
                "shortfall": result.shortfalls.get(role, 0),
            }
        )
    return pd.DataFrame(rows)


def lineup_csv(result: SelectionResult) -> str:
    summary = pd.DataFrame(
        [
            {
                "team_name": result.team_name,
                "total_score": f"{result.total_score:.2f}",
                "selected_count": len(result.selected_players),
                "overseas_count": result.overseas_count,
            }
        ]
    )
    out = [
        "summary",
        summary.to_csv(index=False).strip(),
        "",
        "playing_xi",
        lineup_frame(result).to_csv(index=False).strip(),
    ]
    return "\n".join(out) + "\n"
