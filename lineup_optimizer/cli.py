from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import (
    CONFIG_PATH_SETTING,
    TEAM_FORMATS,
    constraints_path_from_settings,
    load_constraints,
    load_env_files,
    team_format_from_settings,
)
from .export import lineup_csv, squad_frame
from .loader import load_squad
from .scoring import rank_players
from .selector import select_lineup

load_env_files()


def _write(payload: str, output_path: str | None) -> None:
    if output_path:
        Path(output_path).write_text(payload, encoding="utf-8")
    else:
        print(payload, end="")


def run_score(squad_path: str, output_path: str | None) -> int:
    players = load_squad(squad_path)
    frame = squad_frame(rank_players(players))
    _write(frame.to_csv(index=False), output_path)
    return 0


def run_select(
    squad_path: str,
    config_path: str | Path | None,
    team_format: str,
    output_path: str | None,
) -> int:
    players = load_squad(squad_path)
    constraints = load_constraints(config_path, team_format)

    if len(players) < constraints.team_size:
        print(
            f"WARNING: Squad has {len(players)} players; "
            f"a full side needs {constraints.team_size}.",
            file=sys.stderr,
        )

    result = select_lineup(players, constraints)

    if result.shortfalls:
        warning_parts = [f"{role}:{count}" for role, count in sorted(result.shortfalls.items())]
        print(
            "WARNING: Could not fully satisfy role minimums. "
            f"Shortfalls -> {', '.join(warning_parts)}",
            file=sys.stderr,
        )

    _write(lineup_csv(result), output_path)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Cricket playing XI optimizer")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log selection steps to stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    score_cmd = sub.add_parser("score", help="Score every player in a squad CSV")
    score_cmd.add_argument("--squad", required=True, help="Path to squad CSV")
    score_cmd.add_argument("--output", required=False, help="Optional output CSV path")

    select_cmd = sub.add_parser("select", help="Select the playing XI from a squad CSV")
    select_cmd.add_argument("--squad", required=True, help="Path to squad CSV")
    select_cmd.add_argument(
        "--config",
        required=False,
        default=constraints_path_from_settings(),
        help=f"Optional JSON constraints config (default: ${CONFIG_PATH_SETTING} or configs/lineup_constraints.json)",
    )
    select_cmd.add_argument(
        "--format",
        dest="team_format",
        choices=TEAM_FORMATS,
        default=team_format_from_settings(),
        help="league applies the overseas cap, normal does not",
    )
    select_cmd.add_argument("--output", required=False, help="Optional output CSV path")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "score":
            return run_score(args.squad, args.output)
        if args.command == "select":
            return run_select(args.squad, args.config, args.team_format, args.output)
    except (OSError, ValueError) as exc:
        parser.error(str(exc))

    parser.print_help()
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
