from __future__ import annotations

import asyncio

from aoegwent.engine.actions import PassTurnAction, PlaceCardAction
from aoegwent.engine.ai import BotPlayer, BotSpec
from aoegwent.engine.match import can_act, new_match
from aoegwent.engine.runner import QueuedActionSource, run_match
from aoegwent.services.host import MatchHost

PLAYER = "player"
BOT = "bot"


def test_bots_play_a_full_match(catalog) -> None:
    state = new_match(catalog, (PLAYER, BOT), seed=21)
    sources = {
        PLAYER: BotPlayer(PLAYER, BotSpec(thinking_delay=0, seed=1)),
        BOT: BotPlayer(BOT, BotSpec(thinking_delay=0, seed=2)),
    }
    result = asyncio.run(run_match(state, sources))
    assert result in (PLAYER, BOT, "tie")
    assert state.phase == "RESOLUTION"
    assert result == state.result


def test_queued_source_against_bot(make_match) -> None:
    state = make_match(["knight", "archer", "militia"], ["mangonel", "militia"])
    knight = state.players[PLAYER].hand[0]
    human = QueuedActionSource(
        [
            PlaceCardAction(card=knight, target_row="melee"),
            PassTurnAction(),
            PassTurnAction(),
            PassTurnAction(),
        ]
    )
    bot = BotPlayer(BOT, BotSpec(thinking_delay=0, seed=4))
    result = asyncio.run(run_match(state, {PLAYER: human, BOT: bot}))
    assert result == state.result
    assert state.phase == "RESOLUTION"
    assert state.history[0].scores[PLAYER] == 5


def test_externally_driven_seat(catalog) -> None:
    host = MatchHost(catalog)
    match_id = host.create_match((PLAYER, BOT), seed=3)
    state = host.get(match_id)

    async def scenario() -> str | None:
        bot = BotPlayer(BOT, BotSpec(thinking_delay=0, seed=9))
        task = asyncio.create_task(host.run(match_id, {PLAYER: None, BOT: bot}))
        while not task.done():
            if can_act(state, PLAYER):
                res = host.submit_action(match_id, PLAYER, PassTurnAction())
                assert res.accepted
            await asyncio.sleep(0)
        return await task

    result = asyncio.run(scenario())
    assert state.phase == "RESOLUTION"
    assert result == state.result
    # A player who only passes loses the first round to any card on the board.
    assert state.history[0].winner == BOT
