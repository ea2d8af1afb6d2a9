"""Error taxonomy for the rules engine.

Each error carries a stable `reason` code which `submit_action` surfaces to
callers in a rejected `StepResult`.
"""

from __future__ import annotations


class EngineError(RuntimeError):
    reason = "engine_error"


class InvalidAction(EngineError):
    """The action names a card or row the acting player cannot use."""

    reason = "invalid_action"


class OutOfTurn(EngineError):
    """The acting player does not hold the turn or has already passed."""

    reason = "out_of_turn"


class InvalidTransition(EngineError):
    """The state machine produced a transition outside its table. Fatal."""

    reason = "invalid_transition"

    def __init__(self, source: str, target: str) -> None:
        super().__init__(f"Invalid state transition: {source} -> {target}")
        self.source = source
        self.target = target


class MissingEffectData(EngineError):
    """A placed card references an effect the catalog cannot resolve. Fatal."""

    reason = "missing_effect_data"


class MatchHalted(EngineError):
    reason = "match_failed"


class MatchEnded(EngineError):
    reason = "match_ended"
