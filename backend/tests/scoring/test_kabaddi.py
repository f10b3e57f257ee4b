import copy

import pytest

from livescore.scoring import kabaddi


def _roster(count=7):
    return {
        side: [{"id": f"{side.lower()}{i}", "name": f"{side}{i}"} for i in range(1, count + 1)]
        for side in ("A", "B")
    }


@pytest.fixture()
def state():
    return kabaddi.init_state({}, roster=_roster())


def _point(state, side, kind, player_id=None):
    event = {"type": "POINT", "by": side, "kind": kind}
    if player_id:
        event["playerId"] = player_id
    return kabaddi.apply(event, state)


def test_last_player_off_court_synthesizes_all_out(state):
    for i in range(1, 7):
        state = kabaddi.apply({"type": "TOGGLE_PLAYER", "side": "B", "playerId": f"b{i}"}, state)
    assert kabaddi.on_court(state, "B") == 1
    assert state["points"] == {"A": 0, "B": 0}

    state = kabaddi.apply({"type": "TOGGLE_PLAYER", "side": "B", "playerId": "b7"}, state)

    assert state["points"] == {"A": 2, "B": 0}
    assert kabaddi.on_court(state, "B") == 7
    assert state["stats"]["A"]["allOuts"] == 1


def test_explicit_all_out_awards_configured_points():
    state = kabaddi.init_state({"allOutPoints": 3}, roster=_roster())
    state = kabaddi.apply({"type": "TOGGLE_PLAYER", "side": "A", "playerId": "a1"}, state)
    state = kabaddi.apply({"type": "ALL_OUT", "side": "A"}, state)
    assert state["points"] == {"A": 0, "B": 3}
    assert kabaddi.on_court(state, "A") == 7


def test_toggle_back_on_court_does_not_score(state):
    state = kabaddi.apply({"type": "TOGGLE_PLAYER", "side": "A", "playerId": "a1"}, state)
    state = kabaddi.apply({"type": "TOGGLE_PLAYER", "side": "A", "playerId": "a1"}, state)
    assert kabaddi.on_court(state, "A") == 7
    assert state["points"] == {"A": 0, "B": 0}


def test_points_are_attributed_by_kind_and_player(state):
    state = _point(state, "A", "raid", "a3")
    state = _point(state, "A", "bonus", "a3")
    state = _point(state, "B", "tackle", "b1")

    assert state["points"] == {"A": 2, "B": 1}
    raider = next(p for p in state["players"]["A"] if p["id"] == "a3")
    assert raider["raidPoints"] == 1
    assert raider["bonusPoints"] == 1
    assert raider["totalPoints"] == 2
    assert state["stats"]["A"]["successfulRaids"] == 1
    assert state["stats"]["B"]["tackles"] == 1


def test_unknown_point_kind_is_ignored(state):
    before = copy.deepcopy(state)
    assert _point(state, "A", "penalty") == before
    assert kabaddi.apply({"type": "POINT", "by": "A"}, state) == before


def test_raid_outcomes(state):
    state = kabaddi.apply({"type": "START_RAID", "by": "A", "playerId": "a2"}, state)
    assert state["raid"]["active"] is True
    assert state["raid"]["raiderId"] == "a2"

    state = kabaddi.apply({"type": "END_RAID", "outcome": "success"}, state)
    assert state["points"] == {"A": 1, "B": 0}
    assert state["raid"]["active"] is False
    assert state["holder"] == "B"

    state = kabaddi.apply({"type": "START_RAID", "by": "B"}, state)
    state = kabaddi.apply({"type": "END_RAID", "outcome": "failure", "playerId": "a5"}, state)
    assert state["points"] == {"A": 2, "B": 0}
    assert state["stats"]["B"]["raids"] == 1
    assert state["stats"]["A"]["tackles"] == 1

    state = kabaddi.apply({"type": "START_RAID", "by": "A"}, state)
    state = kabaddi.apply({"type": "END_RAID", "outcome": "empty"}, state)
    assert state["points"] == {"A": 2, "B": 0}
    assert state["stats"]["A"]["raids"] == 2


def test_end_raid_without_active_raid_is_ignored(state):
    before = copy.deepcopy(state)
    assert kabaddi.apply({"type": "END_RAID", "outcome": "success"}, state) == before


def test_halftime_keeps_running_totals(state):
    state = _point(state, "A", "raid")
    state = _point(state, "A", "raid")
    state = _point(state, "B", "tackle")

    state = kabaddi.apply({"type": "END_PERIOD"}, state)
    assert state["status"] == "period_over"
    assert state["currentPeriod"] == 2
    assert state["halftimeScore"] == {"A": 2, "B": 1}
    assert state["periodsWon"] == ["A", None]
    assert state["holder"] == "B"

    # no scoring during the interval
    assert _point(state, "A", "raid")["points"] == {"A": 2, "B": 1}

    state = kabaddi.apply({"type": "START_PERIOD"}, state)
    state = _point(state, "B", "raid")
    state = _point(state, "B", "raid")
    assert state["points"] == {"A": 2, "B": 3}

    state = kabaddi.apply({"type": "END_PERIOD"}, state)
    assert state["status"] == "completed"
    assert state["winner"] == "B"
    assert state["periodScores"] == [{"A": 2, "B": 1}, {"A": 0, "B": 2}]
    assert kabaddi.describe_result(state, {"A": "Tigers", "B": "Lions"}) == "Lions won by 1 point"


def test_level_full_time_is_a_draw(state):
    state = _point(state, "A", "raid")
    state = kabaddi.apply({"type": "END_PERIOD"}, state)
    state = kabaddi.apply({"type": "START_PERIOD"}, state)
    state = _point(state, "B", "tackle")
    state = kabaddi.apply({"type": "END_PERIOD"}, state)

    assert state["status"] == "completed"
    assert state["winner"] is None
    assert state["periodsWon"] == ["A", "B"]
    assert kabaddi.describe_result(state, {"A": "Tigers", "B": "Lions"}) == "Match ended in a draw"


def test_team_level_scoring_without_roster():
    state = kabaddi.init_state({})
    state = kabaddi.apply({"type": "TOGGLE_PLAYER", "side": "A", "playerId": "x"}, state)
    assert state["points"] == {"A": 0, "B": 0}
    state = _point(state, "A", "raid", "x")
    assert state["points"] == {"A": 1, "B": 0}
    assert kabaddi.summary(state)["players"] == {"A": [], "B": []}
