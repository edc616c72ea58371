"""Tests for playing XI selection."""
from types import MappingProxyType

import pytest

from lineup_optimizer.models import (
    ALL_ROUNDER,
    BATSMAN,
    BOWLER,
    WICKET_KEEPER,
    RoleBounds,
    SelectionConstraints,
)
from lineup_optimizer.scoring import composite_score
from lineup_optimizer.selector import UNKNOWN_TEAM, select_lineup

ROLE_MAXIMUMS = {BATSMAN: 6, BOWLER: 6, ALL_ROUNDER: 4, WICKET_KEEPER: 2}


def _assert_invariants(result, squad):
    ids = result.player_ids
    assert len(ids) <= 11
    assert len(ids) == len(set(ids))
    assert set(ids) <= {p.id for p in squad}
    assert result.overseas_count <= 4
    for role, count in result.role_counts().items():
        assert count <= ROLE_MAXIMUMS[role]
    expected = round(sum(composite_score(p.player) for p in result.selected_players), 2)
    assert result.total_score == expected


@pytest.fixture
def full_squad(make_player):
    """Twenty players with more talent than slots in every role."""
    squad = []
    for i in range(6):
        squad.append(make_player(BATSMAN, overseas=i % 3 == 0, batting_average=30 + i, strike_rate=120 + i, catches=10))
    for i in range(6):
        squad.append(make_player(BOWLER, overseas=i % 2 == 0, wickets=60 + 5 * i, bowling_economy=7.5, catches=8))
    for i in range(5):
        squad.append(make_player(ALL_ROUNDER, overseas=i == 4, batting_average=22 + i, strike_rate=130, wickets=40, bowling_economy=8.0, catches=12))
    for i in range(3):
        squad.append(make_player(WICKET_KEEPER, overseas=i == 0, batting_average=28 + i, strike_rate=125, catches=40 + i))
    return squad


def test_sample_squad_selects_everyone(sample_squad):
    result = select_lineup(sample_squad)
    assert sorted(result.player_ids) == [1, 2, 3, 4, 5]
    assert result.overseas_count == 3
    assert result.team_name == "Bangalore"
    expected = round(sum(composite_score(p) for p in sample_squad), 2)
    assert result.total_score == expected
    _assert_invariants(result, sample_squad)


def test_sample_squad_reports_unmet_minimums(sample_squad):
    result = select_lineup(sample_squad)
    assert result.shortfalls == {BATSMAN: 2, BOWLER: 2}


def test_sample_squad_selection_order(sample_squad):
    """Minimums are filled role by role before the best remaining player."""
    result = select_lineup(sample_squad)
    assert result.player_ids == [1, 2, 4, 5, 3]


def test_empty_squad():
    result = select_lineup([])
    assert result.selected_players == []
    assert result.total_score == 0
    assert result.team_name == UNKNOWN_TEAM


def test_full_squad_picks_eleven(full_squad):
    result = select_lineup(full_squad)
    assert len(result.selected_players) == 11
    assert result.shortfalls == {}
    counts = result.role_counts()
    assert counts[BATSMAN] >= 3
    assert counts[BOWLER] >= 3
    assert counts[ALL_ROUNDER] >= 1
    assert counts[WICKET_KEEPER] >= 1
    _assert_invariants(result, full_squad)


def test_overseas_batsmen_capped_at_four(make_player):
    """Six overseas batsmen out-score everyone, yet only four make the side."""
    stars = [
        make_player(BATSMAN, overseas=True, batting_average=60, strike_rate=180, catches=50 + i)
        for i in range(6)
    ]
    others = (
        [make_player(BATSMAN, batting_average=25, strike_rate=110, catches=5) for _ in range(2)]
        + [make_player(BOWLER, wickets=50, bowling_economy=8, catches=5) for _ in range(5)]
        + [make_player(ALL_ROUNDER, batting_average=20, strike_rate=120, wickets=30, bowling_economy=8.5, catches=5) for _ in range(4)]
        + [make_player(WICKET_KEEPER, batting_average=25, strike_rate=115, catches=30) for _ in range(3)]
    )
    squad = stars + others
    assert len(squad) == 20

    result = select_lineup(squad)
    star_ids = {p.id for p in stars}
    assert len(result.selected_players) == 11
    assert len(star_ids & set(result.player_ids)) == 4
    assert result.overseas_count == 4
    _assert_invariants(result, squad)


def test_minimum_fill_skips_overseas_once_cap_reached(make_player):
    batsmen = [make_player(BATSMAN, overseas=True, batting_average=50, catches=i) for i in range(4)]
    bowlers = [make_player(BOWLER, overseas=True, wickets=80 - i, catches=0) for i in range(2)]
    domestic_bowlers = [make_player(BOWLER, wickets=20 - i) for i in range(3)]
    squad = batsmen + bowlers + domestic_bowlers

    result = select_lineup(squad)
    selected = set(result.player_ids)
    # Three overseas batsmen fill the minimum, the best overseas bowler takes
    # the last overseas slot and the second is skipped.
    assert bowlers[0].id in selected
    assert bowlers[1].id not in selected
    assert result.overseas_count == 4
    assert {p.id for p in domestic_bowlers} <= selected


def test_missing_wicket_keeper_is_not_an_error(make_player):
    squad = (
        [make_player(BATSMAN, batting_average=30 + i, strike_rate=120) for i in range(5)]
        + [make_player(BOWLER, wickets=50 + i, bowling_economy=7) for i in range(5)]
        + [make_player(ALL_ROUNDER, batting_average=20, wickets=30 + i) for i in range(4)]
    )
    result = select_lineup(squad)
    assert len(result.selected_players) == 11
    assert result.role_counts()[WICKET_KEEPER] == 0
    assert result.shortfalls == {WICKET_KEEPER: 1}
    _assert_invariants(result, squad)


def test_role_maximum_is_never_exceeded(make_player):
    squad = [make_player(BATSMAN, batting_average=60, strike_rate=150) for _ in range(10)]
    squad.append(make_player(BOWLER, wickets=10))
    result = select_lineup(squad)
    assert result.role_counts()[BATSMAN] == 6
    assert len(result.selected_players) == 7
    assert result.shortfalls == {BOWLER: 2, ALL_ROUNDER: 1, WICKET_KEEPER: 1}


def test_wicket_keeper_maximum_applies_in_fill_phase(make_player):
    keepers = [make_player(WICKET_KEEPER, batting_average=50, strike_rate=150, catches=100) for _ in range(4)]
    batsmen = [make_player(BATSMAN, batting_average=20, strike_rate=100) for _ in range(3)]
    result = select_lineup(keepers + batsmen)
    assert result.role_counts()[WICKET_KEEPER] == 2
    assert len(result.selected_players) == 5


def test_fill_phase_does_not_reconsider_skipped_players(make_player):
    """Greedy pass: a skipped overseas star stays out even after slots free up."""
    constraints = SelectionConstraints(
        team_size=3,
        max_overseas=1,
        role_bounds=MappingProxyType({BATSMAN: RoleBounds(0, 3)}),
    )
    first = make_player(BATSMAN, overseas=True, batting_average=90)
    second = make_player(BATSMAN, overseas=True, batting_average=80)
    third = make_player(BATSMAN, batting_average=10)
    result = select_lineup([third, second, first], constraints)
    assert result.player_ids == [first.id, third.id]


def test_ties_keep_input_order_within_role(make_player):
    constraints = SelectionConstraints(
        team_size=2,
        role_bounds=MappingProxyType({BATSMAN: RoleBounds(1, 6)}),
    )
    squad = [make_player(BATSMAN, player_id=pid, catches=10) for pid in (10, 3, 7)]
    result = select_lineup(squad, constraints)
    assert result.player_ids == [10, 3]


def test_fill_ties_favour_earlier_role_bucket(make_player):
    """Equal scores across roles go to the earlier role, not the earlier row."""
    constraints = SelectionConstraints(
        team_size=1,
        role_bounds=MappingProxyType({BATSMAN: RoleBounds(0, 6), BOWLER: RoleBounds(0, 6)}),
    )
    bowler = make_player(BOWLER, player_id=2, catches=10)
    batsman = make_player(BATSMAN, player_id=1, catches=10)
    result = select_lineup([bowler, batsman], constraints)
    assert result.player_ids == [1]


def test_fill_tie_for_last_slot_goes_to_batsman(make_player):
    tied_bowler = make_player(BOWLER, player_id=900, catches=50)
    tied_batsman = make_player(BATSMAN, player_id=901, catches=50)
    squad = (
        [tied_bowler, tied_batsman]
        + [make_player(BATSMAN, batting_average=60) for _ in range(5)]
        + [make_player(BOWLER, wickets=100) for _ in range(3)]
        + [make_player(ALL_ROUNDER, batting_average=60, wickets=100)]
        + [make_player(WICKET_KEEPER, batting_average=60, catches=50)]
    )
    result = select_lineup(squad)
    assert len(result.selected_players) == 11
    assert result.player_ids[-1] == 901
    assert 900 not in result.player_ids


def test_no_overseas_cap(make_player):
    constraints = SelectionConstraints(max_overseas=None)
    squad = [make_player(BATSMAN, overseas=True, batting_average=40) for _ in range(6)]
    squad += [make_player(BOWLER, overseas=True, wickets=40) for _ in range(5)]
    result = select_lineup(squad, constraints)
    assert result.overseas_count == 11


def test_duplicate_ids_selected_once(make_player):
    first = make_player(BATSMAN, player_id=1, batting_average=40)
    clone = make_player(BATSMAN, player_id=1, batting_average=45)
    result = select_lineup([first, clone])
    assert result.player_ids == [1]
    assert result.selected_players[0].player is first


def test_unknown_roles_are_ignored(make_player):
    squad = [make_player("Coach"), make_player(BATSMAN, batting_average=30)]
    result = select_lineup(squad)
    assert [p.role for p in result.selected_players] == [BATSMAN]


def test_team_name_defaults_when_blank(make_player):
    result = select_lineup([make_player(BATSMAN, team="  ")])
    assert result.team_name == UNKNOWN_TEAM


def test_input_is_not_mutated(sample_squad):
    snapshot = list(sample_squad)
    select_lineup(sample_squad)
    assert sample_squad == snapshot


def test_accepts_any_iterable(sample_squad):
    result = select_lineup(p for p in sample_squad)
    assert len(result.selected_players) == 5
