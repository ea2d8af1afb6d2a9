from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Literal

CardType = Literal["melee", "ranged", "siege", "ranged_melee", "weather", "special"]
CardTag = Literal["infantry", "cavalry", "archer", "siege", "hero"]

RowName = Literal["melee", "ranged", "siege"]
TargetRow = Literal["melee", "ranged", "siege", "weather"]

EffectKind = Literal["self", "aura", "trigger"]

ROWS: tuple[RowName, ...] = ("melee", "ranged", "siege")

# Rows a card of each type may be placed into.
ALLOWED_TARGETS: dict[str, tuple[TargetRow, ...]] = {
    "melee": ("melee",),
    "ranged": ("ranged",),
    "siege": ("siege",),
    "ranged_melee": ("melee", "ranged"),
    "weather": ("weather",),
    "special": ("melee", "ranged", "siege"),
}


def default_row_for(card_type: CardType) -> TargetRow:
    return ALLOWED_TARGETS[card_type][0]


@dataclass(frozen=True)
class EffectDefinition:
    """Static description of one effect.

    `rule` names a pure evaluator registered in `engine.effects` for the
    given `kind`; `params` are handed to it unchanged.
    """

    id: str
    kind: EffectKind
    rule: str
    params: Mapping[str, object] = field(default_factory=dict)
    description: str = ""


@dataclass(frozen=True)
class CardDefinition:
    id: str
    name: str
    type: CardType
    base_score: int
    tags: tuple[CardTag, ...] = ()
    self_effect: str | None = None
    aura_effect: str | None = None
    trigger_effect: str | None = None
    description: str = ""

    @property
    def is_weather(self) -> bool:
        return self.type == "weather"

    def allowed_targets(self) -> tuple[TargetRow, ...]:
        return ALLOWED_TARGETS[self.type]


@dataclass(frozen=True)
class CardDatabase:
    """Immutable card catalog used by the engine."""

    cards: dict[str, CardDefinition]
    effects: dict[str, EffectDefinition] = field(default_factory=dict)

    def get(self, card_id: str) -> CardDefinition:
        return self.cards[card_id]

    def effect(self, effect_id: str) -> EffectDefinition | None:
        return self.effects.get(effect_id)

    def all_ids(self) -> Sequence[str]:
        return list(self.cards.keys())
