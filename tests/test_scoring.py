from __future__ import annotations

from aoegwent.engine.actions import PlaceCardAction
from aoegwent.engine.match import submit_action
from aoegwent.engine.scoring import aggregate, recompute, round_winner

PLAYER = "player"
BOT = "bot"


def _uid(state, pid: str, card_id: str) -> int:
    for uid in state.players[pid].hand:
        if state.arena[uid].card_id == card_id:
            return uid
    raise AssertionError(f"{card_id} not in {pid}'s hand")


def _play(state, pid: str, card_id: str, row: str) -> int:
    uid = _uid(state, pid, card_id)
    res = submit_action(state, pid, PlaceCardAction(card=uid, target_row=row))
    assert res.accepted, res.detail
    return uid


def test_auras_on_the_same_row_stack(make_match) -> None:
    state = make_match(["obuch", "obuch", "militia"], ["knight", "archer", "archer"])
    _play(state, PLAYER, "obuch", "melee")
    knight = _play(state, BOT, "knight", "melee")
    assert state.arena[knight].current_score == 4
    _play(state, PLAYER, "obuch", "melee")

    assert state.arena[knight].current_score == 3
    board = aggregate(state)
    assert board.totals == {PLAYER: 14, BOT: 3}
    assert board.rows[BOT]["melee"] == 3


def test_debuffs_never_drop_a_card_below_one(make_match) -> None:
    state = make_match(["obuch", "obuch", "militia"], ["militia", "archer", "archer"])
    _play(state, PLAYER, "obuch", "melee")
    militia = _play(state, BOT, "militia", "melee")
    _play(state, PLAYER, "obuch", "melee")
    assert state.arena[militia].current_score == 1


def test_weather_pins_rows_and_clear_restores_them(make_match) -> None:
    state = make_match(["knight", "frost", "clear", "militia"], ["teutonic_knight", "archer", "archer"])
    knight = _play(state, PLAYER, "knight", "melee")
    teutonic = _play(state, BOT, "teutonic_knight", "melee")
    frost = _play(state, PLAYER, "frost", "weather")

    assert state.arena[knight].current_score == 1
    assert state.arena[teutonic].current_score == 1
    assert state.weather.card == frost
    assert state.weather.rows == {"melee"}

    archer = _play(state, BOT, "archer", "ranged")
    # Ranged rows are untouched by Frost.
    assert state.arena[archer].current_score == 2

    clear = _play(state, PLAYER, "clear", "weather")
    assert state.arena[knight].current_score == 5
    assert state.arena[teutonic].current_score == 10
    assert state.weather.card is None
    assert state.weather.rows == set()
    assert frost in state.players[PLAYER].discard
    assert clear in state.players[PLAYER].discard


def test_weather_and_aura_combined_stay_at_floor(make_match) -> None:
    state = make_match(["obuch", "frost", "militia"], ["knight", "archer", "archer"])
    _play(state, PLAYER, "obuch", "melee")
    knight = _play(state, BOT, "knight", "melee")
    _play(state, PLAYER, "frost", "weather")
    assert state.arena[knight].current_score == 1


def test_later_weather_replaces_the_held_card(make_match) -> None:
    state = make_match(["frost", "fog", "militia"], ["archer", "archer", "knight"])
    frost = _play(state, PLAYER, "frost", "weather")
    _play(state, BOT, "archer", "ranged")
    fog = _play(state, PLAYER, "fog", "weather")
    assert state.weather.card == fog
    assert state.weather.rows == {"melee", "ranged"}
    assert frost in state.players[PLAYER].discard


def test_self_effects(make_match) -> None:
    state = make_match(
        ["pikeman", "monaspa", "knight", "skirmisher", "militia"],
        ["knight", "archer", "militia", "militia"],
        first=BOT,
    )
    _play(state, BOT, "knight", "melee")
    pikeman = _play(state, PLAYER, "pikeman", "melee")
    assert state.arena[pikeman].current_score == 5

    _play(state, BOT, "militia", "melee")
    monaspa = _play(state, PLAYER, "monaspa", "melee")
    assert state.arena[monaspa].current_score == 6
    _play(state, BOT, "militia", "melee")
    _play(state, PLAYER, "knight", "melee")
    assert state.arena[monaspa].current_score == 7

    _play(state, BOT, "archer", "ranged")
    skirmisher = _play(state, PLAYER, "skirmisher", "ranged")
    assert state.arena[skirmisher].current_score == 4


def test_recompute_is_idempotent(make_match) -> None:
    state = make_match(["obuch", "frost", "pikeman"], ["knight", "archer", "obuch"])
    _play(state, PLAYER, "obuch", "melee")
    _play(state, BOT, "knight", "melee")
    _play(state, PLAYER, "pikeman", "melee")
    _play(state, BOT, "obuch", "melee")

    first = recompute(state)
    scores = {uid: c.current_score for uid, c in state.arena.items()}
    second = recompute(state)
    assert first == second
    assert scores == {uid: c.current_score for uid, c in state.arena.items()}


def test_round_winner() -> None:
    assert round_winner({"a": 7, "b": 8}) == "b"
    assert round_winner({"a": 9, "b": 8}) == "a"
    assert round_winner({"a": 0, "b": 0}) == "tie"
