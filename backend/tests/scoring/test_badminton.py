import random

import pytest

from livescore.scoring import badminton
from livescore.services.validation import ValidationError


def _points(state, *sides):
    for side in sides:
        state = badminton.apply({"type": "POINT", "by": side}, state)
    return state


def _rally_to(state, a, b):
    """Alternate points until the score reaches ``a``-``b`` (no game ends)."""

    for _ in range(min(a, b)):
        state = _points(state, "A", "B")
    return _points(state, *(["A"] * (a - b) if a > b else ["B"] * (b - a)))


def test_game_ends_21_19_for_the_leader():
    state = _rally_to(badminton.init_state({}), 20, 19)
    assert state["status"] == "in_progress"

    state = _points(state, "A")

    assert state["periodScores"] == [{"A": 21, "B": 19}]
    assert state["periodsWon"] == ["A", None, None]
    assert state["points"] == {"A": 0, "B": 0}
    assert state["status"] == "period_over"


def test_requires_two_point_gap_and_caps_at_30():
    state = _rally_to(badminton.init_state({}), 29, 29)
    assert state["periodScores"] == []
    assert state["flags"]["deuce"] is True

    state = _points(state, "A")

    assert state["periodScores"] == [{"A": 30, "B": 29}]
    assert state["periodsWon"][0] == "A"


def test_no_game_point_at_29_all():
    state = _rally_to(badminton.init_state({}), 29, 29)
    assert state["flags"]["deuce"] is True
    assert state["flags"]["setPoint"] is False
    assert state["flags"]["matchPoint"] is False
    assert state["flags"]["pointFor"] == []

    state = _points(state, "B", "A")
    assert state["periodsWon"][0] == "B"


def test_end_to_end_first_game_leaves_period_over():
    state = badminton.init_state({})
    state = _points(state, *(["A"] * 21 + ["B"] * 19))

    assert state["status"] == "period_over"
    assert state["periodsWon"] == ["A", None, None]
    assert state["currentPeriod"] == 2
    # rallies between games are not scored until the next game starts
    assert state["points"] == {"A": 0, "B": 0}


def test_next_game_needs_explicit_start_and_winner_serves():
    state = _points(badminton.init_state({"firstServer": "B"}), *(["A"] * 21))
    assert state["holder"] == "A"

    state = badminton.apply({"type": "START_PERIOD"}, state)
    assert state["status"] == "in_progress"
    state = _points(state, "B")
    assert state["points"] == {"A": 0, "B": 1}
    assert state["holder"] == "B"


def test_best_of_three_halts_after_two_wins():
    state = badminton.init_state({"bestOf": 3})
    state = _points(state, *(["A"] * 21))
    state = badminton.apply({"type": "START_PERIOD"}, state)
    state = _points(state, *(["A"] * 21))

    assert state["status"] == "completed"
    assert state["winner"] == "A"
    assert state["periodsWon"] == ["A", "A", None]
    assert badminton.is_match_over(state)

    after = _points(state, "B")
    assert after == state
    assert badminton.apply({"type": "START_PERIOD"}, state) == state


def test_deciding_game_completes_match():
    state = badminton.init_state({})
    state = _points(state, *(["A"] * 21))
    state = badminton.apply({"type": "START_PERIOD"}, state)
    state = _points(state, *(["B"] * 21))
    state = badminton.apply({"type": "START_PERIOD"}, state)
    state = _points(state, *(["B"] * 21))

    assert state["periodsWon"] == ["A", "B", "B"]
    assert state["winner"] == "B"
    assert state["currentPeriod"] == 3


def test_game_point_and_match_point_flags():
    state = _rally_to(badminton.init_state({}), 20, 18)
    assert state["flags"]["setPoint"] is True
    assert state["flags"]["pointFor"] == ["A"]
    assert state["flags"]["matchPoint"] is False

    state = _points(state, "A")
    state = badminton.apply({"type": "START_PERIOD"}, state)
    state = _rally_to(state, 20, 10)
    assert state["flags"]["matchPoint"] is True


def test_deuce_flag_without_game_point_when_level():
    state = _rally_to(badminton.init_state({}), 20, 20)
    assert state["flags"]["deuce"] is True
    assert state["flags"]["setPoint"] is False

    state = _points(state, "B")
    assert state["flags"]["setPoint"] is True
    assert state["flags"]["pointFor"] == ["B"]


def test_serve_follows_rally_winner_and_toggle():
    state = badminton.init_state({})
    assert state["holder"] == "A"
    state = _points(state, "B")
    assert state["holder"] == "B"
    state = badminton.apply({"type": "TOGGLE_SERVICE"}, state)
    assert state["holder"] == "A"


def test_end_period_concedes_game_to_leader():
    state = _rally_to(badminton.init_state({}), 10, 12)
    state = badminton.apply({"type": "END_PERIOD"}, state)
    assert state["periodsWon"][0] == "B"
    assert state["periodScores"] == [{"A": 10, "B": 12}]

    level = _rally_to(badminton.init_state({}), 5, 5)
    assert badminton.apply({"type": "END_PERIOD"}, level) == level


def test_unknown_events_and_sides_are_ignored():
    state = badminton.init_state({})
    snapshot = badminton.init_state({})
    assert badminton.apply({"type": "WICKET", "dismissal": "bowled"}, state) == snapshot
    assert badminton.apply({"type": "POINT", "by": "C"}, state) == snapshot


def test_random_rallies_respect_period_invariants():
    rng = random.Random(7)
    state = badminton.init_state({})
    needed = 2
    for _ in range(400):
        if state["status"] == "period_over":
            state = badminton.apply({"type": "START_PERIOD"}, state)
        state = _points(state, rng.choice("AB"))

        won = [w for w in state["periodsWon"] if w is not None]
        assert max(won.count("A"), won.count("B"), 0) <= needed
        for index, winner in enumerate(state["periodsWon"]):
            closed = index < state["currentPeriod"] - 1 or (
                state["status"] == "completed" and index < len(state["periodScores"])
            )
            assert (winner is not None) == closed
        completed = won.count("A") == needed or won.count("B") == needed
        assert (state["status"] == "completed") == completed

    assert state["status"] == "completed"


def test_summary_and_result_text():
    _, state = badminton.record_sets([(21, 19), (18, 21), (21, 15)])
    summary = badminton.summary(state)
    assert summary["games"] == {"A": 2, "B": 1}
    assert badminton.describe_result(state, {"A": "Ann", "B": "Bob"}) == (
        "Ann won 2-1 (21-19, 18-21, 21-15)"
    )


def test_record_sets_generates_events():
    events, state = badminton.record_sets([(21, 19), (30, 29)])
    assert state["status"] == "completed"
    assert state["periodScores"] == [{"A": 21, "B": 19}, {"A": 30, "B": 29}]
    assert {"type": "START_PERIOD"} in events
    assert sum(1 for e in events if e.get("by") == "A") == 51


@pytest.mark.parametrize(
    "sets",
    [
        [(21, 20)],
        [(25, 20)],
        [(21, 19), (21, 19), (21, 19)],
        [(31, 29)],
    ],
    ids=["no-margin", "overshoot", "after-completion", "past-cap"],
)
def test_record_sets_rejects_illegal_scores(sets):
    with pytest.raises(ValidationError):
        badminton.record_sets(sets)
