from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence

from aoegwent.engine.actions import Action
from aoegwent.engine.errors import InvalidAction
from aoegwent.engine.match import StepResult, new_match, rematch, submit_action, subscribe
from aoegwent.engine.runner import ActionSource, run_match
from aoegwent.engine.serialize import action_from_dict, snapshot
from aoegwent.engine.state import Event, MatchConfig, MatchState
from aoegwent.engine.types import CardDatabase

from .telemetry import TelemetryService

logger = logging.getLogger(__name__)


class MatchHost:
    """Holds any number of independent matches keyed by match id.

    Matches share only the immutable card catalog. A failure in one match
    never touches the others.
    """

    def __init__(
        self,
        cards: CardDatabase,
        *,
        config: MatchConfig | None = None,
        telemetry: TelemetryService | None = None,
    ) -> None:
        self.cards = cards
        self.config = config or MatchConfig()
        self.telemetry = telemetry
        self._matches: dict[str, MatchState] = {}
        self._next_id = 1

    def create_match(
        self,
        player_ids: Sequence[str] = ("player", "bot"),
        seed: int = 0,
        *,
        names: Sequence[str] | None = None,
        decks: Sequence[Sequence[str]] | None = None,
        first_player: str | None = None,
        match_id: str | None = None,
    ) -> str:
        if match_id is None:
            match_id = f"m{self._next_id}"
            self._next_id += 1
        if match_id in self._matches:
            raise ValueError(f"Match id already in use: {match_id}")

        state = new_match(
            self.cards,
            player_ids,
            seed,
            names=names,
            decks=decks,
            first_player=first_player,
            config=self.config,
        )
        if self.telemetry is not None:
            # Events emitted during setup happened before we could subscribe.
            record = self.telemetry.subscriber(match_id)
            for event in state.event_log:
                record(event)
            subscribe(state, record)
        self._matches[match_id] = state
        logger.info("Created match %s (seed=%s)", match_id, seed)
        return match_id

    def get(self, match_id: str) -> MatchState:
        try:
            return self._matches[match_id]
        except KeyError:
            raise KeyError(f"Unknown match id: {match_id}") from None

    def match_ids(self) -> list[str]:
        return list(self._matches)

    def remove(self, match_id: str) -> None:
        self.get(match_id)
        del self._matches[match_id]

    def submit_action(self, match_id: str, player_id: str, action: Action) -> StepResult:
        return submit_action(self.get(match_id), player_id, action)

    def submit_wire(self, match_id: str, player_id: str, raw: Mapping[str, object]) -> StepResult:
        """Like `submit_action`, but takes the wire dict form of the action."""
        state = self.get(match_id)
        try:
            action = action_from_dict(raw)
        except InvalidAction as e:
            logger.warning("Malformed action from %s in %s: %s", player_id, match_id, e)
            return StepResult(accepted=False, events=[], reason=e.reason, detail=str(e))
        return submit_action(state, player_id, action)

    def get_snapshot(self, match_id: str, viewer: str | None = None) -> dict[str, object]:
        return snapshot(self.get(match_id), viewer)

    def subscribe(self, match_id: str, callback: Callable[[Event], None]) -> Callable[[], None]:
        return subscribe(self.get(match_id), callback)

    def rematch(
        self,
        match_id: str,
        *,
        seed: int | None = None,
        decks: Sequence[Sequence[str]] | None = None,
    ) -> None:
        rematch(self.get(match_id), seed=seed, decks=decks)

    async def run(self, match_id: str, sources: Mapping[str, ActionSource | None]) -> str | None:
        return await run_match(self.get(match_id), sources)
