"""Limited-overs cricket scoring engine.

Two innings, one per side. An innings closes when the batting side is all
out, its overs are exhausted, the chasing side passes the target, or the
scorer closes it manually. Runs accumulate in ``points`` per side; each
innings keeps its own card (runs, wickets, balls, extras, batters, bowlers).
"""

from typing import Dict, List, Optional

from .common import (
    COMPLETED,
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
    start_period,
)

SPORT = "cricket"

EXTRA_KINDS = {"wide": "wides", "no_ball": "noBalls", "bye": "byes", "leg_bye": "legByes"}
# dismissals not credited to the bowler
NON_BOWLER_DISMISSALS = {"run_out", "retired_hurt", "obstructing_the_field"}
DEFAULT_WICKETS = 10


def _new_innings(batting: str) -> Dict:
    return {
        "batting": batting,
        "bowling": other(batting),
        "runs": 0,
        "wickets": 0,
        "balls": 0,
        "extras": {"wides": 0, "noBalls": 0, "byes": 0, "legByes": 0},
        "batters": {},
        "bowlers": {},
        "fallOfWickets": [],
        "overRuns": 0,
    }


def init_state(config: Dict, roster: Optional[Dict] = None) -> Dict:
    """Initialise scoreboard state for cricket.

    ``config`` may contain ``overs`` (default ``20``), ``ballsPerOver``
    (default ``6``), ``wickets`` (default: roster size - 1, or ``10``) and
    ``battingFirst``.
    """

    cfg = {
        "overs": config.get("overs", 20),
        "ballsPerOver": config.get("ballsPerOver", 6),
        "wickets": config.get("wickets"),
        "battingFirst": initial_side(config, "battingFirst"),
    }
    roster = roster or {}
    state = base_state(SPORT, cfg, 2, cfg["battingFirst"])
    state["players"] = {
        side: [
            {"id": str(p["id"]), "name": p.get("name") or str(p["id"])}
            for p in roster.get(side) or []
        ]
        for side in SIDES
    }
    state["innings"] = [_new_innings(cfg["battingFirst"])]
    state["target"] = None
    state["striker"] = None
    state["nonStriker"] = None
    state["bowler"] = None
    return state


def wicket_limit(state: Dict, side: str) -> int:
    configured = state["config"].get("wickets")
    if isinstance(configured, int) and configured > 0:
        return configured
    size = len(state["players"][side])
    return size - 1 if size >= 2 else DEFAULT_WICKETS


def _current(state: Dict) -> Dict:
    return state["innings"][-1]


def _in_roster(state: Dict, side: str, player_id) -> bool:
    players = state["players"][side]
    if not players:
        return True
    return any(p["id"] == str(player_id) for p in players)


def _batter(inn: Dict, player_id) -> Optional[Dict]:
    if player_id is None:
        return None
    key = str(player_id)
    if key not in inn["batters"]:
        inn["batters"][key] = {
            "runs": 0,
            "balls": 0,
            "fours": 0,
            "sixes": 0,
            "out": False,
            "dismissal": None,
            "order": len(inn["batters"]) + 1,
        }
    return inn["batters"][key]


def _bowler(inn: Dict, player_id) -> Optional[Dict]:
    if player_id is None:
        return None
    key = str(player_id)
    if key not in inn["bowlers"]:
        inn["bowlers"][key] = {"balls": 0, "runs": 0, "wickets": 0, "maidens": 0}
    return inn["bowlers"][key]


def _swap_strike(state: Dict) -> None:
    state["striker"], state["nonStriker"] = state["nonStriker"], state["striker"]


def _add_runs(state: Dict, runs: int) -> None:
    inn = _current(state)
    inn["runs"] += runs
    state["points"][inn["batting"]] += runs


def _charge_bowler(state: Dict, runs: int, legal: bool) -> None:
    inn = _current(state)
    inn["overRuns"] += runs
    bowler = _bowler(inn, state["bowler"])
    if bowler is not None:
        bowler["runs"] += runs
        if legal:
            bowler["balls"] += 1


def _legal_ball(state: Dict) -> None:
    inn = _current(state)
    inn["balls"] += 1
    if inn["balls"] % state["config"]["ballsPerOver"] == 0:
        bowler = _bowler(inn, state["bowler"])
        if bowler is not None and inn["overRuns"] == 0:
            bowler["maidens"] += 1
        inn["overRuns"] = 0
        state["bowler"] = None
        _swap_strike(state)


def _innings_over(state: Dict) -> bool:
    inn = _current(state)
    cfg = state["config"]
    if inn["wickets"] >= wicket_limit(state, inn["batting"]):
        return True
    if inn["balls"] >= cfg["overs"] * cfg["ballsPerOver"]:
        return True
    target = state["target"]
    return target is not None and inn["runs"] >= target


def _end_innings(state: Dict) -> None:
    inn = _current(state)
    score = {"A": 0, "B": 0}
    score[inn["batting"]] = inn["runs"]
    state["striker"] = state["nonStriker"] = state["bowler"] = None

    if state["currentPeriod"] == 1:
        state["target"] = inn["runs"] + 1
        close_period(state, leader(state["points"]), score, None)
        return

    close_period(state, leader(state["points"]), score, None)
    winner = leader(state["points"])
    state["winner"] = winner if winner in SIDES else None


def _refresh_flags(state: Dict) -> None:
    flags = empty_flags()
    target = state["target"]
    if is_live(state) and target is not None:
        inn = _current(state)
        if target - inn["runs"] == 1:
            flags["matchPoint"] = True
            flags["pointFor"] = [inn["batting"]]
    state["flags"] = flags


def _runs(event: Dict, default: Optional[int] = None) -> Optional[int]:
    value = event.get("runs", default)
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 7:
        return None
    return value


def apply(event: Dict, state: Dict) -> Dict:
    """Apply an event to the current state.

    Handles ``DELIVERY``, ``EXTRA``, ``WICKET``, ``SWAP_STRIKE``,
    ``SET_BATTERS``, ``SET_BOWLER``, ``END_PERIOD`` and ``START_PERIOD``.
    """

    etype = event.get("type")

    if etype == "START_PERIOD":
        if not start_period(state):
            return state
        batting = other(_current(state)["batting"])
        state["innings"].append(_new_innings(batting))
        state["holder"] = batting
        _refresh_flags(state)
        return state

    if not is_live(state):
        return state
    inn = _current(state)

    if etype == "DELIVERY":
        runs = _runs(event)
        if runs is None:
            return state
        _add_runs(state, runs)
        batter = _batter(inn, state["striker"])
        if batter is not None:
            batter["runs"] += runs
            batter["balls"] += 1
            if runs == 4:
                batter["fours"] += 1
            elif runs == 6:
                batter["sixes"] += 1
        _charge_bowler(state, runs, legal=True)
        if runs % 2 == 1:
            _swap_strike(state)
        _legal_ball(state)

    elif etype == "EXTRA":
        kind = event.get("kind")
        runs = _runs(event, 0)
        if kind not in EXTRA_KINDS or runs is None:
            return state
        legal = kind in ("bye", "leg_bye")
        penalty = 0 if legal else 1
        _add_runs(state, penalty + runs)
        batter = _batter(inn, state["striker"])
        if kind == "no_ball":
            inn["extras"]["noBalls"] += penalty
            if batter is not None:
                batter["runs"] += runs
                batter["balls"] += 1
        else:
            inn["extras"][EXTRA_KINDS[kind]] += penalty + runs
            if legal and batter is not None:
                batter["balls"] += 1
        _charge_bowler(state, 0 if legal else penalty + runs, legal=legal)
        if runs % 2 == 1:
            _swap_strike(state)
        if legal:
            _legal_ball(state)

    elif etype == "WICKET":
        dismissal = event.get("dismissal")
        if not isinstance(dismissal, str) or not dismissal:
            return state
        inn["wickets"] += 1
        batter = _batter(inn, state["striker"])
        if batter is not None:
            batter["balls"] += 1
            batter["out"] = True
            batter["dismissal"] = dismissal
        bowler = _bowler(inn, state["bowler"])
        if bowler is not None and dismissal not in NON_BOWLER_DISMISSALS:
            bowler["wickets"] += 1
        _charge_bowler(state, 0, legal=True)
        inn["fallOfWickets"].append(
            {"wicket": inn["wickets"], "runs": inn["runs"], "balls": inn["balls"] + 1, "playerId": state["striker"]}
        )
        incoming = event.get("incoming")
        state["striker"] = None
        if incoming is not None and _can_bat(state, incoming):
            state["striker"] = str(incoming)
            _batter(inn, incoming)
        _legal_ball(state)

    elif etype == "SWAP_STRIKE":
        _swap_strike(state)

    elif etype == "SET_BATTERS":
        striker, non_striker = event.get("striker"), event.get("nonStriker")
        if striker is None or non_striker is None or str(striker) == str(non_striker):
            return state
        if not (_can_bat(state, striker) and _can_bat(state, non_striker)):
            return state
        state["striker"], state["nonStriker"] = str(striker), str(non_striker)
        _batter(inn, striker)
        _batter(inn, non_striker)

    elif etype == "SET_BOWLER":
        player_id = event.get("playerId")
        if player_id is None or not _in_roster(state, inn["bowling"], player_id):
            return state
        state["bowler"] = str(player_id)
        _bowler(inn, player_id)

    elif etype == "END_PERIOD":
        _end_innings(state)
        _refresh_flags(state)
        return state

    else:
        return state

    if _innings_over(state):
        _end_innings(state)
    _refresh_flags(state)
    return state


def _can_bat(state: Dict, player_id) -> bool:
    inn = _current(state)
    if not _in_roster(state, inn["batting"], player_id):
        return False
    card = inn["batters"].get(str(player_id))
    return card is None or not card["out"]


def overs_text(balls: int, balls_per_over: int = 6) -> str:
    """Overs in the usual ``overs.balls`` notation, e.g. ``4.3``."""

    return f"{balls // balls_per_over}.{balls % balls_per_over}"


def run_rate(runs: int, balls: int, balls_per_over: int = 6) -> float:
    if balls <= 0:
        return 0.0
    return round(runs * balls_per_over / balls, 2)


def summary(state: Dict) -> Dict:
    bpo = state["config"]["ballsPerOver"]
    inn = _current(state)
    cards = []
    for number, card in enumerate(state["innings"], start=1):
        cards.append(
            {
                "innings": number,
                "batting": card["batting"],
                "runs": card["runs"],
                "wickets": card["wickets"],
                "overs": overs_text(card["balls"], bpo),
                "runRate": run_rate(card["runs"], card["balls"], bpo),
                "extras": card["extras"],
                "batters": card["batters"],
                "bowlers": card["bowlers"],
                "fallOfWickets": card["fallOfWickets"],
            }
        )
    out = {
        "points": state["points"],
        "innings": cards,
        "battingSide": inn["batting"],
        "target": state["target"],
        "striker": state["striker"],
        "nonStriker": state["nonStriker"],
        "bowler": state["bowler"],
        "config": state["config"],
    }
    if state["target"] is not None and state["currentPeriod"] == 2:
        out["requiredRuns"] = max(state["target"] - inn["runs"], 0)
        out["ballsLeft"] = max(state["config"]["overs"] * bpo - inn["balls"], 0)
    return out


def breakdown(state: Dict) -> List[Dict]:
    return period_breakdown(state)


def describe_result(state: Dict, names: Dict[str, str]) -> str:
    if state["status"] != COMPLETED:
        return "Match in progress"
    winner = state.get("winner")
    if winner not in SIDES:
        return "Match tied"
    chase = state["innings"][-1]
    if len(state["innings"]) == 2 and chase["batting"] == winner:
        margin = wicket_limit(state, winner) - chase["wickets"]
        unit = "wicket" if margin == 1 else "wickets"
    else:
        margin = state["points"][winner] - state["points"][other(winner)]
        unit = "run" if margin == 1 else "runs"
    return f"{names[winner]} won by {margin} {unit}"
