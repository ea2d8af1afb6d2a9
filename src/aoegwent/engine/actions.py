from __future__ import annotations

from dataclasses import dataclass

from .types import TargetRow


@dataclass(frozen=True)
class PlaceCardAction:
    card: int  # uid of the card instance in the acting player's hand
    target_row: TargetRow


@dataclass(frozen=True)
class PassTurnAction:
    pass


Action = PlaceCardAction | PassTurnAction
