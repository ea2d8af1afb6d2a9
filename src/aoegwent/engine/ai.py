from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass

from .actions import Action, PassTurnAction, PlaceCardAction
from .state import BattlefieldView
from .types import default_row_for

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BotSpec:
    """Bot tuning parameters.

    lead_margin: pass once the bot leads by more than this many points
    min_committed: ...but only after at least this many cards are on its rows
    thinking_delay: seconds awaited before each decision
    seed: seed of the bot's own RNG (kept apart from the match RNG)
    """

    lead_margin: int = 10
    min_committed: int = 3
    thinking_delay: float = 1.0
    seed: int | None = None


def should_pass(view: BattlefieldView, spec: BotSpec) -> bool:
    if not view.player.hand:
        return True
    own = view.total("self")
    other = view.total("enemy")
    return own > other + spec.lead_margin and view.committed("self") >= spec.min_committed


def decide_action(view: BattlefieldView, spec: BotSpec, rng: random.Random) -> Action:
    """Pick the bot's next action from a read-only view of its side."""
    if should_pass(view, spec):
        return PassTurnAction()
    card = rng.choice(view.hand())
    return PlaceCardAction(card=card.uid, target_row=default_row_for(card.type))


class BotPlayer:
    """Action source that decides on behalf of one seat after a short delay."""

    def __init__(self, player_id: str, spec: BotSpec | None = None) -> None:
        self.player_id = player_id
        self.spec = spec or BotSpec()
        self.rng = random.Random(self.spec.seed)

    def decide(self, view: BattlefieldView) -> Action:
        action = decide_action(view, self.spec, self.rng)
        logger.debug("Bot %s chose %s", self.player_id, action)
        return action

    async def next_action(self, view: BattlefieldView) -> Action:
        if self.spec.thinking_delay > 0:
            await asyncio.sleep(self.spec.thinking_delay)
        return self.decide(view)
