"""Async driver that feeds actions from each seat's source into a match.

The controller itself is synchronous; this module is the only place that
awaits. Seats without a source are driven externally (for example through
`MatchHost.submit_action`) and the runner simply waits for the state to move.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping
from typing import Protocol

from .actions import Action
from .match import can_act, submit_action, subscribe
from .state import BattlefieldView, MatchState

logger = logging.getLogger(__name__)


class ActionSource(Protocol):
    async def next_action(self, view: BattlefieldView) -> Action: ...


class QueuedActionSource:
    """Action source fed from the outside, e.g. by a UI or a test."""

    def __init__(self, actions: Iterable[Action] = ()) -> None:
        self._queue: asyncio.Queue[Action] = asyncio.Queue()
        for action in actions:
            self._queue.put_nowait(action)

    def put(self, action: Action) -> None:
        self._queue.put_nowait(action)

    async def next_action(self, view: BattlefieldView) -> Action:
        return await self._queue.get()


def is_finished(state: MatchState) -> bool:
    return state.phase == "RESOLUTION" or state.failure is not None


async def run_match(state: MatchState, sources: Mapping[str, ActionSource | None]) -> str | None:
    """Drive `state` until the match resolves or halts.

    Returns the match result (a player id or "tie"), or None if it halted.
    """
    changed = asyncio.Event()
    unsubscribe = subscribe(state, lambda _event: changed.set())
    try:
        while not is_finished(state):
            acting = state.current_turn
            source = sources.get(acting)
            if source is None:
                changed.clear()
                await changed.wait()
                continue

            action = await source.next_action(state.view_for(acting))
            if not can_act(state, acting):
                # The state moved on while the source was deciding.
                continue
            result = submit_action(state, acting, action)
            if not result.accepted:
                logger.warning("Action from %s rejected (%s): %s", acting, result.reason, result.detail)
    finally:
        unsubscribe()

    if state.failure is not None:
        logger.error("Match halted: %s", state.failure)
        return None
    return state.result
