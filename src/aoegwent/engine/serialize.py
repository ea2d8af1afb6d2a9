from __future__ import annotations

from collections.abc import Mapping

from .actions import Action, PassTurnAction, PlaceCardAction
from .errors import InvalidAction
from .scoring import aggregate
from .state import CardInstance, MatchState, PlayerState
from .types import ROWS


def action_to_dict(a: Action) -> dict[str, object]:
    if isinstance(a, PlaceCardAction):
        return {"type": "place_card", "card": a.card, "target_row": a.target_row}
    if isinstance(a, PassTurnAction):
        return {"type": "pass_turn"}
    raise InvalidAction(f"Unknown action: {a!r}")


def action_from_dict(raw: Mapping[str, object]) -> Action:
    t = raw.get("type")
    if t == "pass_turn":
        return PassTurnAction()
    if t == "place_card":
        card = raw.get("card")
        row = raw.get("target_row")
        if not isinstance(card, int) or isinstance(card, bool):
            raise InvalidAction("place_card needs an integer 'card'")
        if row not in (*ROWS, "weather"):
            raise InvalidAction(f"Unknown target row: {row!r}")
        return PlaceCardAction(card=card, target_row=row)  # type: ignore[arg-type]
    raise InvalidAction(f"Unknown action type: {t!r}")


def _card_to_dict(c: CardInstance) -> dict[str, object]:
    return {
        "uid": c.uid,
        "card_id": c.card_id,
        "name": c.name,
        "type": c.type,
        "base_score": c.base_score,
        "current_score": c.current_score,
    }


def _player_to_dict(state: MatchState, p: PlayerState, *, show_hand: bool) -> dict[str, object]:
    out: dict[str, object] = {
        "id": p.id,
        "name": p.name,
        "hand_size": len(p.hand),
        "deck_size": len(p.deck),
        "discard": list(p.discard),
        "rows": {row: [_card_to_dict(state.arena[uid]) for uid in p.rows[row]] for row in ROWS},
        "has_passed": p.has_passed,
        "round_wins": p.round_wins,
    }
    if show_hand:
        out["hand"] = [_card_to_dict(state.arena[uid]) for uid in p.hand]
    return out


def snapshot(state: MatchState, viewer: str | None = None) -> dict[str, object]:
    """Return a JSON-serializable snapshot of the match.

    Hand contents are included only for `viewer`'s own seat; other seats show
    the hand size alone.
    """
    board = aggregate(state)
    weather = state.weather
    return {
        "seed": state.seed,
        "phase": state.phase,
        "current_turn": state.current_turn,
        "round": state.round_number,
        "players": [
            _player_to_dict(state, state.players[pid], show_hand=pid == viewer) for pid in state.player_ids
        ],
        "row_scores": {pid: dict(rows) for pid, rows in board.rows.items()},
        "totals": dict(board.totals),
        "weather": {
            "card": _card_to_dict(state.arena[weather.card]) if weather.card is not None else None,
            "owner": weather.owner,
            "rows": sorted(weather.rows),
        },
        "history": [
            {"round": r.round_number, "scores": dict(r.scores), "winner": r.winner} for r in state.history
        ],
        "result": state.result,
        "failure": state.failure,
        "action_log": [{"player": pid, **action_to_dict(a)} for pid, a in state.action_log],
    }
