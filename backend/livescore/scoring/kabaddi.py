"""Kabaddi scoring engine.

Two halves with running point totals (points are not reset at halftime).
Points come from successful raids, tackles, bonus lines and all-outs. An
all-out is worth ``allOutPoints`` (default ``2``) to the opposing side and
puts every player of the conceding side back on court. It is triggered
either explicitly or as soon as the last player of a side leaves the court.
"""

from typing import Dict, List, Optional

from .common import (
    COMPLETED,
    DRAW,
    SIDES,
    base_state,
    close_period,
    empty_flags,
    initial_side,
    is_live,
    is_match_over,
    is_period_over,
    leader,
    other,
    period_breakdown,
    side_of,
    start_period,
)

SPORT = "kabaddi"

POINT_KINDS = ("raid", "tackle", "bonus")
RAID_OUTCOMES = ("success", "failure", "empty")


def _team_stats() -> Dict:
    return {"raids": 0, "successfulRaids": 0, "tackles": 0, "allOuts": 0, "bonusPoints": 0}


def _player_entry(player: Dict) -> Dict:
    return {
        "id": str(player["id"]),
        "name": player.get("name") or str(player["id"]),
        "number": player.get("number"),
        "position": player.get("position"),
        "raidPoints": 0,
        "tacklePoints": 0,
        "bonusPoints": 0,
        "totalPoints": 0,
        "onCourt": bool(player.get("onCourt", True)),
    }


def _idle_raid(cfg: Dict) -> Dict:
    return {"active": False, "raider": None, "raiderId": None, "timeLeft": cfg["raidSeconds"]}


def init_state(config: Dict, roster: Optional[Dict] = None) -> Dict:
    """Initialise scoreboard state for kabaddi.

    ``roster`` maps each side to a list of player dicts (``id``, ``name`` and
    optionally ``onCourt``). Without a roster scoring works at team level
    only and all-outs can only be recorded explicitly.
    """

    cfg = {
        "halves": config.get("halves", 2),
        "allOutPoints": config.get("allOutPoints", 2),
        "raidSeconds": config.get("raidSeconds", 30),
        "firstRaider": initial_side(config, "firstRaider"),
    }
    roster = roster or {}
    state = base_state(SPORT, cfg, cfg["halves"], cfg["firstRaider"])
    state["stats"] = {side: _team_stats() for side in SIDES}
    state["players"] = {
        side: [_player_entry(p) for p in roster.get(side) or []] for side in SIDES
    }
    state["halftimeScore"] = None
    state["raid"] = _idle_raid(cfg)
    return state


def _find_player(state: Dict, side: str, player_id) -> Optional[Dict]:
    if player_id is None:
        return None
    for player in state["players"][side]:
        if player["id"] == str(player_id):
            return player
    return None


def _award(state: Dict, side: str, kind: str, player_id=None) -> None:
    state["points"][side] += 1
    stats = state["stats"][side]
    if kind == "raid":
        stats["raids"] += 1
        stats["successfulRaids"] += 1
    elif kind == "tackle":
        stats["tackles"] += 1
    else:
        stats["bonusPoints"] += 1

    player = _find_player(state, side, player_id)
    if player is not None:
        player[f"{kind}Points"] += 1
        player["totalPoints"] += 1


def _all_out(state: Dict, conceding: str) -> None:
    scorer = other(conceding)
    state["points"][scorer] += state["config"]["allOutPoints"]
    state["stats"][scorer]["allOuts"] += 1
    for player in state["players"][conceding]:
        player["onCourt"] = True


def _is_all_out(state: Dict, side: str) -> bool:
    players = state["players"][side]
    return bool(players) and not any(p["onCourt"] for p in players)


def _half_points(state: Dict) -> Dict:
    base = state["halftimeScore"] if state["currentPeriod"] > 1 else None
    base = base or {"A": 0, "B": 0}
    return {side: state["points"][side] - base[side] for side in SIDES}


def _end_half(state: Dict) -> None:
    half = _half_points(state)
    state["raid"] = _idle_raid(state["config"])
    if state["currentPeriod"] < len(state["periodsWon"]):
        state["halftimeScore"] = dict(state["points"])
        close_period(state, leader(half), half, None)
        # raids alternate: the side that received the first raid opens the half
        state["holder"] = other(state["config"]["firstRaider"])
        return

    close_period(state, leader(half), half, None)
    winner = leader(state["points"])
    state["winner"] = winner if winner in SIDES else None


def apply(event: Dict, state: Dict) -> Dict:
    """Apply an event to the current state.

    Handles ``POINT``, ``ALL_OUT``, ``TOGGLE_PLAYER``, ``START_RAID``,
    ``END_RAID``, ``TOGGLE_SERVICE``, ``END_PERIOD`` and ``START_PERIOD``.
    """

    etype = event.get("type")

    if etype == "POINT":
        side = side_of(event)
        kind = event.get("kind")
        if side is None or kind not in POINT_KINDS or not is_live(state):
            return state
        _award(state, side, kind, event.get("playerId"))

    elif etype == "ALL_OUT":
        side = side_of(event, "side")
        if side is None or not is_live(state):
            return state
        _all_out(state, side)

    elif etype == "TOGGLE_PLAYER":
        side = side_of(event, "side")
        if side is None or not is_live(state):
            return state
        player = _find_player(state, side, event.get("playerId"))
        if player is None:
            return state
        player["onCourt"] = not player["onCourt"]
        if _is_all_out(state, side):
            _all_out(state, side)

    elif etype == "START_RAID":
        side = side_of(event)
        if side is None or not is_live(state) or state["raid"]["active"]:
            return state
        raider = _find_player(state, side, event.get("playerId"))
        state["raid"] = {
            "active": True,
            "raider": side,
            "raiderId": raider["id"] if raider else None,
            "timeLeft": state["config"]["raidSeconds"],
        }
        state["holder"] = side

    elif etype == "END_RAID":
        outcome = event.get("outcome")
        raid = state["raid"]
        if not raid["active"] or outcome not in RAID_OUTCOMES or not is_live(state):
            return state
        raider = raid["raider"]
        if outcome == "success":
            _award(state, raider, "raid", raid["raiderId"])
        else:
            state["stats"][raider]["raids"] += 1
            if outcome == "failure":
                _award(state, other(raider), "tackle", event.get("playerId"))
        state["raid"] = _idle_raid(state["config"])
        state["holder"] = other(raider)

    elif etype == "TOGGLE_SERVICE":
        if state["status"] == COMPLETED or state["raid"]["active"]:
            return state
        state["holder"] = other(state["holder"])

    elif etype == "END_PERIOD":
        if not is_live(state):
            return state
        _end_half(state)

    elif etype == "START_PERIOD":
        if not start_period(state):
            return state

    else:
        return state

    state["flags"] = empty_flags()
    return state


def on_court(state: Dict, side: str) -> int:
    return sum(1 for p in state["players"][side] if p["onCourt"])


def summary(state: Dict) -> Dict:
    return {
        "points": state["points"],
        "half": state["currentPeriod"],
        "halftimeScore": state["halftimeScore"],
        "stats": state["stats"],
        "players": state["players"],
        "raid": state["raid"],
        "raiding": state["holder"],
        "config": state["config"],
    }


def breakdown(state: Dict) -> List[Dict]:
    return period_breakdown(state)


def describe_result(state: Dict, names: Dict[str, str]) -> str:
    if state["status"] != COMPLETED:
        return "Match in progress"
    winner = state.get("winner")
    if winner not in SIDES or leader(state["points"]) == DRAW:
        return "Match ended in a draw"
    margin = state["points"][winner] - state["points"][other(winner)]
    unit = "point" if margin == 1 else "points"
    return f"{names[winner]} won by {margin} {unit}"
