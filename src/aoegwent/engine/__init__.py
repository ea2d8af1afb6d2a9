"""Deterministic, headless rules engine for aoegwent.

The controller is synchronous; `runner.run_match` is the only async entry point.
"""

from .actions import Action, PassTurnAction, PlaceCardAction
from .ai import BotPlayer, BotSpec, decide_action
from .errors import (
    EngineError,
    InvalidAction,
    InvalidTransition,
    MatchEnded,
    MatchHalted,
    MissingEffectData,
    OutOfTurn,
)
from .match import StepResult, can_act, new_match, rematch, replay, submit_action, subscribe
from .runner import ActionSource, QueuedActionSource, run_match
from .state import BattlefieldView, MatchConfig, MatchState
from .types import CardDatabase, CardDefinition, CardType, EffectDefinition, RowName, TargetRow

__all__ = [
    "Action",
    "ActionSource",
    "BattlefieldView",
    "BotPlayer",
    "BotSpec",
    "CardDatabase",
    "CardDefinition",
    "CardType",
    "EffectDefinition",
    "EngineError",
    "InvalidAction",
    "InvalidTransition",
    "MatchConfig",
    "MatchEnded",
    "MatchHalted",
    "MatchState",
    "MissingEffectData",
    "OutOfTurn",
    "PassTurnAction",
    "PlaceCardAction",
    "QueuedActionSource",
    "RowName",
    "StepResult",
    "TargetRow",
    "can_act",
    "decide_action",
    "new_match",
    "rematch",
    "replay",
    "run_match",
    "submit_action",
    "subscribe",
]
