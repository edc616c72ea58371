from __future__ import annotations

import csv
import logging
import re
from pathlib import Path
from typing import Any, Iterable, Mapping

from .models import ALL_ROUNDER, BATSMAN, BOWLER, WICKET_KEEPER, Player
from .validation import PlayerValidationError, build_player

logger = logging.getLogger(__name__)

CANONICAL_COLUMNS = {
    "name": ["name", "player_name", "player name", "player"],
    "role": ["role"],
    "overseas": ["overseas", "is_overseas", "overseas_player", "foreign"],
    "batting_average": ["batting_average", "batting avg", "batting_avg", "bat_avg", "average"],
    "strike_rate": ["strike_rate", "strike rate", "batting_strike_rate", "sr"],
    "bowling_economy": ["bowling_economy", "bowling economy", "economy", "econ"],
    "wickets": ["wickets", "wkts", "bowling_wickets", "bowling wkts"],
    "catches": ["catches", "ct", "fielding_catches"],
}

OPTIONAL_COLUMNS = {
    "id": ["id", "player_id", "player id"],
    "team": ["team", "team_name", "team name", "squad"],
}

ROLE_ALIASES = {
    "batsman": BATSMAN,
    "batter": BATSMAN,
    "bat": BATSMAN,
    "bowler": BOWLER,
    "bowl": BOWLER,
    "all_rounder": ALL_ROUNDER,
    "allrounder": ALL_ROUNDER,
    "ar": ALL_ROUNDER,
    "wicket_keeper": WICKET_KEEPER,
    "wicketkeeper": WICKET_KEEPER,
    "wk": WICKET_KEEPER,
    "keeper": WICKET_KEEPER,
}


def _normalize_column(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", name.strip().lower()).strip("_")


def _find_column(aliases: list[str], normalized_to_original: dict[str, str]) -> str | None:
    for alias in aliases:
        normalized_alias = _normalize_column(alias)
        if normalized_alias in normalized_to_original:
            return normalized_to_original[normalized_alias]
    return None


def _resolve_columns(fieldnames: list[str]) -> dict[str, str]:
    normalized_to_original = {_normalize_column(col): col for col in fieldnames}
    resolved: dict[str, str] = {}
    missing: list[str] = []

    for canonical, aliases in CANONICAL_COLUMNS.items():
        actual = _find_column(aliases, normalized_to_original)
        if actual is None:
            missing.append(canonical)
        else:
            resolved[canonical] = actual

    if missing:
        raise ValueError(f"Missing required columns: {missing}")

    for canonical, aliases in OPTIONAL_COLUMNS.items():
        actual = _find_column(aliases, normalized_to_original)
        if actual is not None:
            resolved[canonical] = actual

    return resolved


def normalize_role(role: str) -> str:
    key = _normalize_column(role)
    if key in ROLE_ALIASES:
        return ROLE_ALIASES[key]
    raise ValueError("Invalid role. Use: Batsman, Bowler, All-Rounder, Wicket-Keeper")


def _to_id(value: str, row_number: int) -> int:
    token = value.strip()
    if not re.fullmatch(r"-?\d+", token):
        raise ValueError(f"Row {row_number}: cannot parse player id from '{value}'")
    return int(token)


def players_from_rows(rows: Iterable[Mapping[str, Any]], column_map: dict[str, str]) -> list[Player]:
    """Build players from CSV-style rows keyed by their original column names.

    Rows are numbered from 2 in error messages so they match a spreadsheet
    view of the file, header included. Rows without an id are numbered after
    the largest explicit id.
    """
    rows = list(rows)
    id_column = column_map.get("id")
    explicit_ids: dict[int, int] = {}
    for row_number, row in enumerate(rows, start=2):
        raw_id = row.get(id_column) if id_column else None
        if raw_id is not None and str(raw_id).strip() != "":
            explicit_ids[row_number] = _to_id(str(raw_id), row_number)
    next_id = max(explicit_ids.values(), default=0) + 1

    players: list[Player] = []
    seen_ids: set[int] = set()
    for row_number, row in enumerate(rows, start=2):
        fields = {canonical: row.get(column) for canonical, column in column_map.items()}
        raw_role = fields.get("role") or ""
        try:
            fields["role"] = normalize_role(str(raw_role))
        except ValueError:
            fields["role"] = str(raw_role).strip()

        fields.pop("id", None)
        if row_number in explicit_ids:
            player_id = explicit_ids[row_number]
        else:
            player_id = next_id
            next_id += 1
        if player_id in seen_ids:
            raise ValueError(f"Row {row_number}: duplicate player id {player_id}")

        try:
            player = build_player(player_id, fields)
        except PlayerValidationError as exc:
            raise PlayerValidationError([f"Row {row_number}: {e}" for e in exc.errors]) from exc

        seen_ids.add(player_id)
        players.append(player)

    return players


def load_squad(csv_path: str | Path) -> list[Player]:
    path = Path(csv_path)
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None:
            raise ValueError("CSV has no header")
        column_map = _resolve_columns(reader.fieldnames)
        players = players_from_rows(reader, column_map)

    logger.info("Loaded %d players from %s", len(players), path)
    return players
