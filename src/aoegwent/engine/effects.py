"""Effect algebra: registries of pure evaluators keyed by rule name.

Cards reference effects by id; the catalog maps each id to an
`EffectDefinition` (kind + rule + params). Evaluators never mutate the
battlefield: self rules return a score delta, aura rules return a row delta,
and trigger rules return commands that the match controller applies.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import cast

from .errors import MissingEffectData
from .state import BattlefieldView, CardInstance, Side
from .types import ROWS, CardDatabase, EffectDefinition, EffectKind, RowName, TargetRow

Params = Mapping[str, object]


@dataclass(frozen=True)
class AuraDelta:
    side: Side  # relative to the card's owner
    row: RowName
    delta: int


@dataclass(frozen=True)
class SummonCards:
    uids: tuple[int, ...]
    row: RowName


@dataclass(frozen=True)
class ApplyWeather:
    rows: tuple[RowName, ...]


@dataclass(frozen=True)
class ClearWeather:
    pass


TriggerCommand = SummonCards | ApplyWeather | ClearWeather

SelfRule = Callable[[CardInstance, BattlefieldView, Params], int]
AuraRule = Callable[[BattlefieldView, Params], AuraDelta]
TriggerRule = Callable[[CardInstance, TargetRow, BattlefieldView, Params], list[TriggerCommand]]

SELF_RULES: dict[str, SelfRule] = {}
AURA_RULES: dict[str, AuraRule] = {}
TRIGGER_RULES: dict[str, TriggerRule] = {}

_REGISTRIES: dict[EffectKind, dict[str, Callable[..., object]]] = {
    "self": SELF_RULES,  # type: ignore[dict-item]
    "aura": AURA_RULES,  # type: ignore[dict-item]
    "trigger": TRIGGER_RULES,  # type: ignore[dict-item]
}


def register_rule(kind: EffectKind, name: str):
    """Decorator to register an evaluator for `kind` under `name`."""

    def decorator(fn):
        _REGISTRIES[kind][name] = fn
        return fn

    return decorator


def known_rules(kind: EffectKind) -> list[str]:
    return sorted(_REGISTRIES[kind])


def resolve_effect(cards: CardDatabase, effect_id: str, kind: EffectKind) -> EffectDefinition:
    effect = cards.effect(effect_id)
    if effect is None:
        raise MissingEffectData(f"No effect data for '{effect_id}'")
    if effect.kind != kind:
        raise MissingEffectData(
            f"Effect '{effect_id}' is bound as {kind} but defined as {effect.kind}"
        )
    if effect.rule not in _REGISTRIES[kind]:
        raise MissingEffectData(f"Effect '{effect_id}' uses unknown {kind} rule '{effect.rule}'")
    return effect


def evaluate_self(effect: EffectDefinition, card: CardInstance, view: BattlefieldView) -> int:
    return SELF_RULES[effect.rule](card, view, effect.params)


def evaluate_aura(effect: EffectDefinition, view: BattlefieldView) -> AuraDelta:
    return AURA_RULES[effect.rule](view, effect.params)


def evaluate_trigger(
    effect: EffectDefinition, card: CardInstance, row: TargetRow, view: BattlefieldView
) -> list[TriggerCommand]:
    return TRIGGER_RULES[effect.rule](card, row, view, effect.params)


# ---------------------------------------------------------------------------
# Param helpers
# ---------------------------------------------------------------------------


def _int(params: Params, key: str, default: int = 0) -> int:
    v = params.get(key, default)
    if not isinstance(v, int):
        raise MissingEffectData(f"Effect param '{key}' must be an int")
    return v


def _row(params: Params, key: str = "row") -> RowName:
    v = params.get(key)
    if v not in ROWS:
        raise MissingEffectData(f"Effect param '{key}' must be one of {ROWS}")
    return cast(RowName, v)


def _side(params: Params) -> Side:
    v = params.get("side", "enemy")
    if v not in ("self", "enemy"):
        raise MissingEffectData("Effect param 'side' must be 'self' or 'enemy'")
    return cast(Side, v)


# ---------------------------------------------------------------------------
# Self rules
# ---------------------------------------------------------------------------


@register_rule("self", "per_ally_in_row")
def _per_ally_in_row(card: CardInstance, view: BattlefieldView, params: Params) -> int:
    """+amount for every other card named in `names` sharing this card's row."""
    row = view.player.row_of(card.uid)
    if row is None:
        return 0
    names = params.get("names", [])
    if not isinstance(names, (list, tuple)):
        raise MissingEffectData("Effect param 'names' must be a list")
    amount = _int(params, "amount", 1)
    allies = [c for c in view.row("self", row) if c.uid != card.uid and c.name in names]
    return amount * len(allies)


@register_rule("self", "enemy_row_occupied")
def _enemy_row_occupied(card: CardInstance, view: BattlefieldView, params: Params) -> int:
    return _int(params, "amount") if view.row("enemy", _row(params)) else 0


@register_rule("self", "enemy_row_has_tag")
def _enemy_row_has_tag(card: CardInstance, view: BattlefieldView, params: Params) -> int:
    tag = params.get("tag")
    for enemy_card in view.row("enemy", _row(params)):
        if tag in enemy_card.tags:
            return _int(params, "amount")
    return 0


# ---------------------------------------------------------------------------
# Aura rules
# ---------------------------------------------------------------------------


@register_rule("aura", "row_modifier")
def _row_modifier(view: BattlefieldView, params: Params) -> AuraDelta:
    return AuraDelta(side=_side(params), row=_row(params), delta=_int(params, "delta"))


# ---------------------------------------------------------------------------
# Trigger rules
# ---------------------------------------------------------------------------


@register_rule("trigger", "summon_copies")
def _summon_copies(
    card: CardInstance, row: TargetRow, view: BattlefieldView, params: Params
) -> list[TriggerCommand]:
    """Pull every other copy of this card from hand and deck into its row."""
    if row == "weather":
        return []
    pool = list(view.player.hand) + list(view.player.deck)
    copies = tuple(
        uid for uid in pool if uid != card.uid and view.arena[uid].card_id == card.card_id
    )
    if not copies:
        return []
    return [SummonCards(uids=copies, row=row)]


@register_rule("trigger", "weather")
def _weather(
    card: CardInstance, row: TargetRow, view: BattlefieldView, params: Params
) -> list[TriggerCommand]:
    rows = params.get("rows", [])
    if not isinstance(rows, (list, tuple)) or any(r not in ROWS for r in rows):
        raise MissingEffectData(f"Weather effect rows must be a subset of {ROWS}")
    return [ApplyWeather(rows=tuple(cast(RowName, r) for r in rows))]


@register_rule("trigger", "clear_weather")
def _clear_weather(
    card: CardInstance, row: TargetRow, view: BattlefieldView, params: Params
) -> list[TriggerCommand]:
    return [ClearWeather()]
