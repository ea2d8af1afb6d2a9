from __future__ import annotations

import asyncio
import random

from aoegwent.engine.actions import PassTurnAction, PlaceCardAction
from aoegwent.engine.ai import BotPlayer, BotSpec, decide_action
from aoegwent.engine.match import submit_action
from aoegwent.engine.state import BattlefieldView, PlayerState, WeatherZone

PLAYER = "player"
BOT = "bot"


def _place_first(state, pid: str, card_id: str, row: str) -> None:
    uid = next(u for u in state.players[pid].hand if state.arena[u].card_id == card_id)
    res = submit_action(state, pid, PlaceCardAction(card=uid, target_row=row))
    assert res.accepted, res.detail


def test_empty_hand_passes() -> None:
    view = BattlefieldView(
        player=PlayerState(id=BOT, name="Bot"),
        enemy=PlayerState(id=PLAYER, name="Player"),
        arena={},
        weather=WeatherZone(),
    )
    assert decide_action(view, BotSpec(), random.Random(0)) == PassTurnAction()


def test_passes_only_with_a_big_lead_and_enough_cards(make_match) -> None:
    state = make_match(["militia"] * 4, ["teutonic_knight"] * 4, first=BOT)
    spec = BotSpec(thinking_delay=0)
    rng = random.Random(3)

    _place_first(state, BOT, "teutonic_knight", "melee")
    _place_first(state, PLAYER, "militia", "melee")
    _place_first(state, BOT, "teutonic_knight", "melee")
    _place_first(state, PLAYER, "militia", "melee")
    # 20 vs 2 is a big lead, but only two cards are committed.
    assert isinstance(decide_action(state.view_for(BOT), spec, rng), PlaceCardAction)

    _place_first(state, BOT, "teutonic_knight", "melee")
    _place_first(state, PLAYER, "militia", "melee")
    assert decide_action(state.view_for(BOT), spec, rng) == PassTurnAction()

    # Without the lead it keeps playing.
    strict = BotSpec(lead_margin=100, thinking_delay=0)
    assert isinstance(decide_action(state.view_for(BOT), strict, rng), PlaceCardAction)


def test_cards_go_to_their_default_row(make_match) -> None:
    state = make_match(["militia"], ["mounted_archer", "war_banner", "frost", "mangonel"], first=BOT)
    spec = BotSpec(thinking_delay=0)
    rows = {"mounted_archer": "melee", "war_banner": "melee", "frost": "weather", "mangonel": "siege"}
    for seed in range(20):
        action = decide_action(state.view_for(BOT), spec, random.Random(seed))
        assert isinstance(action, PlaceCardAction)
        assert action.target_row == rows[state.arena[action.card].card_id]


def test_bot_player_is_seeded_and_awaits_its_delay(make_match) -> None:
    state = make_match(["militia"], ["knight", "archer", "mangonel", "militia"], first=BOT)
    view = state.view_for(BOT)

    a = BotPlayer(BOT, BotSpec(thinking_delay=0.01, seed=5))
    b = BotPlayer(BOT, BotSpec(thinking_delay=0, seed=5))
    picks_a = [asyncio.run(a.next_action(view)) for _ in range(5)]
    picks_b = [b.decide(view) for _ in range(5)]
    assert picks_a == picks_b
