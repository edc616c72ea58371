from __future__ import annotations

import json
import os
from dataclasses import replace
from pathlib import Path
from types import MappingProxyType
from typing import Any

from dotenv import load_dotenv

from .loader import normalize_role
from .models import ROLES, RoleBounds, SelectionConstraints
from .selector import DEFAULT_CONSTRAINTS

LEAGUE = "league"
NORMAL = "normal"
TEAM_FORMATS = (LEAGUE, NORMAL)

CONFIG_PATH_SETTING = "LINEUP_CONFIG_PATH"
TEAM_FORMAT_SETTING = "LINEUP_TEAM_FORMAT"
DEFAULT_CONFIG_PATH = Path("configs/lineup_constraints.json")


def load_env_files() -> None:
    """Load `.env` from the working directory when it exists."""
    env_path = Path(".env")
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=False)


def get_setting(name: str, default: str | None = None) -> str | None:
    """Read a setting from the environment first, then Streamlit secrets."""
    value = os.getenv(name)
    if value:
        return value

    import streamlit as st
    from streamlit.errors import StreamlitAPIException

    try:
        secret_value = st.secrets.get(name)
    except (FileNotFoundError, StreamlitAPIException):
        return default

    if secret_value is None:
        return default
    return str(secret_value)


def constraints_to_dict(constraints: SelectionConstraints) -> dict[str, Any]:
    return {
        "team_size": constraints.team_size,
        "max_overseas": constraints.max_overseas,
        "role_bounds": {
            role: {"min": bounds.minimum, "max": bounds.maximum}
            for role, bounds in constraints.role_bounds.items()
        },
    }


def _to_int(key: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"'{key}' must be a whole number, got {value!r}") from exc


def validate_constraints(constraints: SelectionConstraints) -> SelectionConstraints:
    """Reject a team size that cannot hold every role minimum."""
    minimums = sum(bounds.minimum for bounds in constraints.role_bounds.values())
    if constraints.team_size < minimums:
        raise ValueError(
            f"'team_size' of {constraints.team_size} is smaller than the role minimums ({minimums})"
        )
    return constraints


def _parse_role_bounds(raw: Any, current: SelectionConstraints) -> dict[str, RoleBounds]:
    if not isinstance(raw, dict):
        raise ValueError("'role_bounds' must be a JSON object in constraints config")

    bounds = dict(current.role_bounds)
    for key, value in raw.items():
        role = normalize_role(str(key))
        if not isinstance(value, dict):
            raise ValueError(f"Bounds for {role} must be an object with 'min' and 'max'")
        existing = bounds.get(role, RoleBounds(0, 0))
        minimum = _to_int(f"{role} min", value.get("min", existing.minimum))
        maximum = _to_int(f"{role} max", value.get("max", existing.maximum))
        if minimum < 0 or maximum < minimum:
            raise ValueError(f"Invalid bounds for {role}: min={minimum}, max={maximum}")
        bounds[role] = RoleBounds(minimum, maximum)
    return {role: bounds[role] for role in ROLES if role in bounds}


def constraints_from_dict(
    payload: dict[str, Any],
    base: SelectionConstraints = DEFAULT_CONSTRAINTS,
) -> SelectionConstraints:
    if not isinstance(payload, dict):
        raise ValueError("Constraints config must be a JSON object")

    constraints = base
    if "team_size" in payload:
        team_size = _to_int("team_size", payload["team_size"])
        if team_size < 0:
            raise ValueError("'team_size' must be 0 or greater")
        constraints = replace(constraints, team_size=team_size)
    if "max_overseas" in payload:
        raw_cap = payload["max_overseas"]
        max_overseas = None if raw_cap is None else _to_int("max_overseas", raw_cap)
        if max_overseas is not None and max_overseas < 0:
            raise ValueError("'max_overseas' must be 0 or greater, or null for no cap")
        constraints = replace(constraints, max_overseas=max_overseas)
    if "role_bounds" in payload:
        bounds = _parse_role_bounds(payload["role_bounds"], constraints)
        constraints = replace(constraints, role_bounds=MappingProxyType(bounds))
    return validate_constraints(constraints)


def apply_team_format(constraints: SelectionConstraints, team_format: str) -> SelectionConstraints:
    """League sides keep the overseas cap; normal sides drop it."""
    token = team_format.strip().lower()
    if token not in TEAM_FORMATS:
        raise ValueError(f"Unknown team format '{team_format}'. Use: {', '.join(TEAM_FORMATS)}")
    if token == NORMAL:
        return replace(constraints, max_overseas=None)
    return constraints


def load_constraints(path: str | Path | None = None, team_format: str = LEAGUE) -> SelectionConstraints:
    if path is None:
        constraints = DEFAULT_CONSTRAINTS
    else:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
        constraints = constraints_from_dict(payload)
    return apply_team_format(constraints, team_format)


def save_constraints(constraints: SelectionConstraints, path: str | Path = DEFAULT_CONFIG_PATH) -> None:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(constraints_to_dict(constraints), indent=2), encoding="utf-8")


def constraints_path_from_settings() -> Path | None:
    """Constraints file named by the environment, else the saved default if present."""
    path = get_setting(CONFIG_PATH_SETTING)
    if path:
        return Path(path)
    if DEFAULT_CONFIG_PATH.exists():
        return DEFAULT_CONFIG_PATH
    return None


def team_format_from_settings() -> str:
    return get_setting(TEAM_FORMAT_SETTING, LEAGUE) or LEAGUE
