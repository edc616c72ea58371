from __future__ import annotations

import tempfile
from io import BytesIO
from pathlib import Path

import pandas as pd
import streamlit as st

from lineup_optimizer.config import (
    DEFAULT_CONFIG_PATH,
    LEAGUE,
    NORMAL,
    apply_team_format,
    constraints_path_from_settings,
    constraints_to_dict,
    load_constraints,
    load_env_files,
    save_constraints,
    team_format_from_settings,
    validate_constraints,
)
from lineup_optimizer.export import lineup_csv, lineup_frame, squad_frame, summary_frame
from lineup_optimizer.loader import load_squad
from lineup_optimizer.models import ROLES, RoleBounds, SelectionConstraints
from lineup_optimizer.scoring import rank_players
from lineup_optimizer.selector import select_lineup

load_env_files()


def _load_players_from_dataframe(raw_df: pd.DataFrame) -> list:
    raw_text = raw_df.to_csv(index=False)
    with tempfile.NamedTemporaryFile("w", suffix=".csv", delete=False, encoding="utf-8") as tmp:
        tmp.write(raw_text)
        tmp_path = tmp.name
    try:
        players = load_squad(tmp_path)
    finally:
        Path(tmp_path).unlink(missing_ok=True)
    return players


def _read_uploaded_csv(uploaded_file) -> pd.DataFrame:
    return pd.read_csv(BytesIO(uploaded_file.getvalue()), dtype=str, keep_default_na=False)


def _load_default_constraints() -> SelectionConstraints:
    return load_constraints(constraints_path_from_settings())


def _constraints_editor(current: SelectionConstraints) -> SelectionConstraints:
    st.subheader("Selection Constraints")
    st.caption("Role minimums are filled first; maximums are never exceeded.")

    c1, c2 = st.columns(2)
    team_size = int(
        c1.number_input(
            "Team size",
            min_value=0,
            value=current.team_size,
            step=1,
            key="cfg_team_size",
            help="Number of players in the playing XI.",
        )
    )
    max_overseas = int(
        c2.number_input(
            "Overseas cap",
            min_value=0,
            value=4 if current.max_overseas is None else current.max_overseas,
            step=1,
            key="cfg_max_overseas",
            help="Maximum overseas players in a league side.",
        )
    )

    bounds: dict[str, RoleBounds] = {}
    columns = st.columns(len(ROLES))
    for column, role in zip(columns, ROLES):
        existing = current.bounds_for(role)
        column.markdown(f"**{role}**")
        minimum = int(
            column.number_input(
                "Minimum",
                min_value=0,
                value=existing.minimum,
                step=1,
                key=f"cfg_{role}_min",
            )
        )
        maximum = int(
            column.number_input(
                "Maximum",
                min_value=0,
                value=existing.maximum,
                step=1,
                key=f"cfg_{role}_max",
            )
        )
        bounds[role] = RoleBounds(minimum, max(minimum, maximum))

    return SelectionConstraints(team_size=team_size, max_overseas=max_overseas, role_bounds=bounds)


def main() -> None:
    st.set_page_config(page_title="Playing XI Optimizer", layout="wide")
    st.title("Playing XI Optimizer")
    st.write("Upload a squad CSV to score players and pick the best eleven.")

    if "active_constraints" not in st.session_state:
        try:
            st.session_state.active_constraints = _load_default_constraints()
        except (OSError, ValueError) as exc:
            st.error(f"Failed to load default constraints: {exc}")
            return

    uploaded_file = st.file_uploader("Squad CSV", type=["csv"])
    if uploaded_file is None:
        st.info("Please upload a CSV file to continue.")
        return

    upload_token = f"{uploaded_file.name}:{uploaded_file.size}"
    try:
        if st.session_state.get("uploaded_file_token") != upload_token:
            st.session_state.uploaded_file_token = upload_token
            st.session_state.raw_df = _read_uploaded_csv(uploaded_file)

        raw_df = st.session_state.raw_df
    except (OSError, ValueError) as exc:
        st.error(f"Failed to parse uploaded CSV: {exc}")
        return

    team_format = st.radio(
        "Team format",
        options=[LEAGUE, NORMAL],
        index=1 if team_format_from_settings() == NORMAL else 0,
        format_func=lambda v: "League (overseas cap)" if v == LEAGUE else "Normal (no overseas cap)",
        horizontal=True,
    )
    constraints = apply_team_format(st.session_state.active_constraints, team_format)

    tab_team, tab_score, tab_raw, tab_config = st.tabs(
        ["Playing XI", "Player Scores", "Raw Input", "Constraints"]
    )

    with tab_score:
        try:
            players = _load_players_from_dataframe(raw_df)
            score_df = squad_frame(rank_players(players))
            st.dataframe(score_df, use_container_width=True, hide_index=True)
            st.download_button(
                label="Download Scores CSV",
                data=score_df.to_csv(index=False),
                file_name="player_scores.csv",
                mime="text/csv",
            )
        except ValueError as exc:
            st.error(f"Failed to score players: {exc}")

    with tab_team:
        try:
            players = _load_players_from_dataframe(raw_df)
            if len(players) < constraints.team_size:
                st.warning(
                    f"You need at least {constraints.team_size} players in your squad. "
                    f"Currently you have {len(players)}."
                )
            result = select_lineup(players, constraints)
            st.subheader(result.team_name)
            c1, c2, c3 = st.columns(3)
            c1.metric("Total score", f"{result.total_score:.2f}")
            c2.metric("Players", len(result.selected_players))
            c3.metric("Overseas", result.overseas_count)
            st.dataframe(
                lineup_frame(result),
                use_container_width=True,
                hide_index=True,
                column_config={
                    "composite_score": st.column_config.NumberColumn(
                        "Composite Score",
                        help="Role-weighted score recomputed from the raw stats.",
                        format="%.2f",
                    ),
                },
            )
            st.subheader("Role Balance")
            st.dataframe(summary_frame(result, constraints), use_container_width=True, hide_index=True)
            st.download_button(
                label="Download Team CSV",
                data=lineup_csv(result),
                file_name="playing_xi.csv",
                mime="text/csv",
            )
        except ValueError as exc:
            st.error(f"Failed to select team: {exc}")

    with tab_raw:
        edited_raw_df = st.data_editor(
            raw_df,
            num_rows="dynamic",
            use_container_width=True,
            key="raw_input_editor",
        )
        c1, c2 = st.columns(2)
        if c1.button("Apply Raw Input Edits", use_container_width=True):
            st.session_state.raw_df = edited_raw_df
            st.success("Raw input updated. Score and Team tabs now use edited data.")
            st.rerun()
        if c2.button("Reset Raw Input to Uploaded File", use_container_width=True):
            st.session_state.raw_df = _read_uploaded_csv(uploaded_file)
            st.success("Raw input reset to uploaded CSV.")
            st.rerun()

    with tab_config:
        updated = _constraints_editor(st.session_state.active_constraints)
        st.json(constraints_to_dict(updated))

        c1, c2 = st.columns(2)
        if c1.button("Apply Constraints", use_container_width=True):
            try:
                st.session_state.active_constraints = validate_constraints(updated)
                st.success("Constraints applied for this session.")
            except ValueError as exc:
                st.error(f"Invalid constraints: {exc}")

        if c2.button("Save as Default Constraints", use_container_width=True):
            try:
                save_constraints(validate_constraints(updated))
                st.session_state.active_constraints = updated
                st.success(f"Saved to {DEFAULT_CONFIG_PATH}.")
            except (OSError, ValueError) as exc:
                st.error(f"Failed to save constraints: {exc}")


if __name__ == "__main__":
    main()
