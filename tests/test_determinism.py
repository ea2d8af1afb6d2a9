from __future__ import annotations

from aoegwent.engine.ai import BotPlayer, BotSpec
from aoegwent.engine.match import new_match, replay, submit_action
from aoegwent.engine.serialize import snapshot
from aoegwent.paths import get_paths
from aoegwent.services.content import ContentService

PLAYER = "player"
BOT = "bot"


def _load_cards():
    paths = get_paths()
    content = ContentService(paths.data_dir, paths.schema_dir)
    return content.load_cards_db()


def _play_out(state, seed: int) -> None:
    bots = {
        PLAYER: BotPlayer(PLAYER, BotSpec(thinking_delay=0, seed=seed)),
        BOT: BotPlayer(BOT, BotSpec(thinking_delay=0, seed=seed + 1)),
    }
    for _ in range(200):
        if state.phase == "RESOLUTION":
            break
        acting = state.current_turn
        submit_action(state, acting, bots[acting].decide(state.view_for(acting)))


def test_engine_determinism_replay() -> None:
    cards = _load_cards()
    seed = 424242
    state1 = new_match(cards, (PLAYER, BOT), seed)
    _play_out(state1, seed)
    snap1 = snapshot(state1, PLAYER)

    state2 = replay(cards, (PLAYER, BOT), seed, list(state1.action_log))
    snap2 = snapshot(state2, PLAYER)

    assert snap1 == snap2
    assert state1.event_log == state2.event_log


def test_same_seed_same_deal() -> None:
    cards = _load_cards()
    a = new_match(cards, (PLAYER, BOT), 99)
    b = new_match(cards, (PLAYER, BOT), 99)
    assert snapshot(a, PLAYER) == snapshot(b, PLAYER)
    assert a.current_turn == b.current_turn
