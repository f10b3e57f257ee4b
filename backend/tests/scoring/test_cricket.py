import copy

from livescore.scoring import cricket

NAMES = {"A": "Rovers", "B": "United"}


def _roster(count):
    return {
        side: [{"id": f"{side.lower()}{i}", "name": f"{side}{i}"} for i in range(1, count + 1)]
        for side in ("A", "B")
    }


def _apply(state, *events):
    for event in events:
        state = cricket.apply(event, state)
    return state


def _balls(state, *runs):
    return _apply(state, *({"type": "DELIVERY", "runs": r} for r in runs))


def _ready(state, striker="a1", non_striker="a2", bowler="b1"):
    return _apply(
        state,
        {"type": "SET_BATTERS", "striker": striker, "nonStriker": non_striker},
        {"type": "SET_BOWLER", "playerId": bowler},
    )


def test_odd_runs_and_over_end_rotate_strike():
    state = _ready(cricket.init_state({"overs": 2}, roster=_roster(4)))
    state = _balls(state, 1)
    assert state["striker"] == "a2"

    state = _balls(state, 0, 0, 0, 0, 0)
    summary = cricket.summary(state)
    assert summary["innings"][0]["overs"] == "1.0"
    assert state["striker"] == "a1"
    assert state["nonStriker"] == "a2"
    # a new bowler is needed for every over
    assert state["bowler"] is None

    card = state["innings"][0]
    assert card["batters"]["a1"]["runs"] == 1
    assert card["batters"]["a2"]["balls"] == 5
    assert card["bowlers"]["b1"] == {"balls": 6, "runs": 1, "wickets": 0, "maidens": 0}


def test_maiden_over_is_credited():
    state = _ready(cricket.init_state({"overs": 2}, roster=_roster(4)), bowler="b2")
    state = _balls(state, 0, 0, 0, 0, 0, 0)
    assert state["innings"][0]["bowlers"]["b2"]["maidens"] == 1


def test_extras_are_scored_and_wides_are_not_legal_balls():
    state = _ready(cricket.init_state({}, roster=_roster(4)))
    state = _apply(
        state,
        {"type": "EXTRA", "kind": "wide"},
        {"type": "EXTRA", "kind": "no_ball", "runs": 4},
        {"type": "EXTRA", "kind": "bye", "runs": 2},
    )
    card = state["innings"][0]
    assert card["runs"] == 8
    assert state["points"] == {"A": 8, "B": 0}
    assert card["balls"] == 1
    assert card["extras"] == {"wides": 1, "noBalls": 1, "byes": 2, "legByes": 0}
    assert card["batters"]["a1"]["runs"] == 4
    assert card["batters"]["a1"]["balls"] == 2
    assert card["bowlers"]["b1"] == {"balls": 1, "runs": 6, "wickets": 0, "maidens": 0}


def test_invalid_deliveries_are_ignored():
    state = cricket.init_state({})
    before = copy.deepcopy(state)
    assert cricket.apply({"type": "DELIVERY", "runs": 9}, state) == before
    assert cricket.apply({"type": "DELIVERY"}, state) == before
    assert cricket.apply({"type": "EXTRA", "kind": "overthrow"}, state) == before
    assert cricket.apply({"type": "POINT", "by": "A"}, state) == before


def test_overs_exhausted_close_innings_and_chase_wins():
    state = cricket.init_state({"overs": 1})
    state = _balls(state, 4, 0, 1, 0, 6, 2)

    assert state["status"] == "period_over"
    assert state["target"] == 14
    assert state["periodsWon"] == ["A", None]
    assert state["currentPeriod"] == 2
    assert _balls(state, 6)["points"] == {"A": 13, "B": 0}

    state = cricket.apply({"type": "START_PERIOD"}, state)
    assert state["holder"] == "B"
    state = _balls(state, 6, 6, 1)
    assert state["flags"]["matchPoint"] is True
    assert state["flags"]["pointFor"] == ["B"]
    assert cricket.summary(state)["requiredRuns"] == 1

    state = _balls(state, 1)
    assert state["status"] == "completed"
    assert state["winner"] == "B"
    assert cricket.describe_result(state, NAMES) == "United won by 10 wickets"


def test_defending_side_wins_by_runs():
    state = cricket.init_state({"overs": 1})
    state = _balls(state, 4, 6, 0, 0, 0, 0)
    state = cricket.apply({"type": "START_PERIOD"}, state)
    state = _balls(state, 1, 1, 1, 1, 1, 1)

    assert state["status"] == "completed"
    assert state["winner"] == "A"
    assert cricket.describe_result(state, NAMES) == "Rovers won by 4 runs"


def test_level_scores_are_a_tie():
    state = cricket.init_state({"overs": 1})
    state = _balls(state, 6, 0, 0, 0, 0, 0)
    state = cricket.apply({"type": "START_PERIOD"}, state)
    state = _balls(state, 0, 0, 0, 0, 0, 6)

    assert state["status"] == "completed"
    assert state["winner"] is None
    assert state["periodsWon"] == ["A", "draw"]
    assert cricket.describe_result(state, NAMES) == "Match tied"


def test_all_out_uses_roster_size():
    state = _ready(cricket.init_state({}, roster=_roster(3)))
    assert cricket.wicket_limit(state, "A") == 2

    state = cricket.apply({"type": "WICKET", "dismissal": "bowled", "incoming": "a3"}, state)
    assert state["striker"] == "a3"
    assert state["innings"][0]["bowlers"]["b1"]["wickets"] == 1

    # a dismissed batter cannot come back
    before = copy.deepcopy(state)
    assert cricket.apply({"type": "SET_BATTERS", "striker": "a1", "nonStriker": "a2"}, state) == before

    state = cricket.apply({"type": "WICKET", "dismissal": "run_out"}, state)
    card = state["innings"][0]
    assert card["wickets"] == 2
    assert card["bowlers"]["b1"]["wickets"] == 1
    assert [f["playerId"] for f in card["fallOfWickets"]] == ["a1", "a3"]
    assert state["status"] == "period_over"
    assert state["target"] == 1


def test_bowler_must_come_from_fielding_side():
    state = cricket.init_state({}, roster=_roster(4))
    before = copy.deepcopy(state)
    assert cricket.apply({"type": "SET_BOWLER", "playerId": "a1"}, state) == before
    state = cricket.apply({"type": "SET_BOWLER", "playerId": "b4"}, state)
    assert state["bowler"] == "b4"


def test_manual_end_of_innings_and_batting_first_config():
    state = cricket.init_state({"battingFirst": "B"})
    assert state["holder"] == "B"
    state = _balls(state, 2)
    state = cricket.apply({"type": "END_PERIOD"}, state)
    assert state["status"] == "period_over"
    assert state["target"] == 3
    assert state["periodScores"] == [{"A": 0, "B": 2}]

    state = cricket.apply({"type": "START_PERIOD"}, state)
    assert cricket.summary(state)["battingSide"] == "A"
