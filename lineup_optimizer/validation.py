from __future__ import annotations

import math
from typing import Any, Mapping

from .models import BOWLING_ROLES, ROLES, Player

BASE_FIELDS = ("name", "role", "overseas")
STAT_FIELDS = ("batting_average", "strike_rate", "catches")
BOWLING_FIELDS = ("bowling_economy", "wickets")

TRUE_TOKENS = {"yes", "y", "true", "1"}
FALSE_TOKENS = {"no", "n", "false", "0"}


class PlayerValidationError(ValueError):
    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


def required_fields(role: str) -> tuple[str, ...]:
    """Fields a player of ``role`` must supply before it can be built.

    Batting and fielding stats may be left blank and count as zero.
    """
    if role in BOWLING_ROLES:
        return BASE_FIELDS + BOWLING_FIELDS
    return BASE_FIELDS


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def parse_overseas(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    token = str(value).strip().lower()
    if token in TRUE_TOKENS:
        return True
    if token in FALSE_TOKENS:
        return False
    raise ValueError(f"Cannot parse overseas flag from '{value}'. Use Yes or No.")


def _non_negative(name: str, value: Any, errors: list[str]) -> float | None:
    if _is_blank(value):
        return None
    try:
        number = float(value.replace(",", "")) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        errors.append(f"{name} must be a number, got '{value}'")
        return None
    if math.isnan(number) or number < 0:
        errors.append(f"{name} must be 0 or greater")
        return None
    return number


def validate_player_fields(fields: Mapping[str, Any]) -> list[str]:
    """Return every problem with ``fields``; an empty list means they are valid."""
    errors: list[str] = []

    role = fields.get("role")
    for key in required_fields(role):
        if _is_blank(fields.get(key)):
            errors.append(f"{key} is required for {role}" if key in BOWLING_FIELDS else f"{key} is required")

    name = fields.get("name")
    if not _is_blank(name) and len(str(name).strip()) < 2:
        errors.append("name must be at least 2 characters")

    if not _is_blank(role) and role not in ROLES:
        errors.append(f"role must be one of {', '.join(ROLES)}, got '{role}'")

    overseas = fields.get("overseas")
    if not _is_blank(overseas):
        try:
            parse_overseas(overseas)
        except ValueError as exc:
            errors.append(str(exc))

    for key in STAT_FIELDS + BOWLING_FIELDS:
        _non_negative(key, fields.get(key), errors)

    return errors


def build_player(player_id: int, fields: Mapping[str, Any]) -> Player:
    """Validate raw form or CSV fields and construct a :class:`Player`.

    Bowling stats are dropped for roles that do not bowl. Blank batting and
    fielding stats default to zero.
    """
    errors = validate_player_fields(fields)
    if errors:
        raise PlayerValidationError(errors)

    role = fields["role"]
    scratch: list[str] = []

    def number(key: str) -> float:
        value = _non_negative(key, fields.get(key), scratch)
        return 0.0 if value is None else value

    bowling_economy: float | None = None
    wickets: int | None = None
    if role in BOWLING_ROLES:
        bowling_economy = number("bowling_economy")
        wickets = int(number("wickets"))

    team = fields.get("team")
    return Player(
        id=int(player_id),
        name=str(fields["name"]).strip(),
        role=role,
        overseas=parse_overseas(fields["overseas"]),
        batting_average=number("batting_average"),
        strike_rate=number("strike_rate"),
        bowling_economy=bowling_economy,
        wickets=wickets,
        catches=int(number("catches")),
        team="" if _is_blank(team) else str(team).strip(),
    )
