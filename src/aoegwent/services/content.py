from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Mapping

from jsonschema import Draft202012Validator

from aoegwent.engine.effects import known_rules
from aoegwent.engine.types import CardDatabase, CardDefinition, CardTag, EffectDefinition

logger = logging.getLogger(__name__)

_EFFECT_SLOTS = (("self_effect", "self"), ("aura_effect", "aura"), ("trigger_effect", "trigger"))


class ContentError(RuntimeError):
    pass


def _load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ContentError(f"Missing content file: {path}") from e
    except json.JSONDecodeError as e:
        raise ContentError(f"Invalid JSON in {path}: {e}") from e


def validate_json(instance: object, schema: object, *, context: str) -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: list(e.absolute_path))
    if errors:
        lines = [f"Schema validation failed for {context}:"]
        for err in errors[:10]:
            loc = "/".join(str(p) for p in err.absolute_path)
            lines.append(f"- {loc}: {err.message}")
        raise ContentError("\n".join(lines))


def _require_str(obj: Mapping[str, object], key: str) -> str:
    v = obj.get(key)
    if not isinstance(v, str):
        raise ContentError(f"Expected string for {key}")
    return v


def _require_int(obj: Mapping[str, object], key: str) -> int:
    v = obj.get(key)
    if not isinstance(v, int):
        raise ContentError(f"Expected int for {key}")
    return v


def _optional_str(obj: Mapping[str, object], key: str) -> str | None:
    v = obj.get(key)
    if v is None:
        return None
    if not isinstance(v, str):
        raise ContentError(f"Expected string for {key}")
    return v


def _parse_tags(raw: object) -> tuple[CardTag, ...]:
    if not isinstance(raw, list):
        raise ContentError("tags must be a list")
    # trust schema for allowed values
    return tuple(t for t in raw if isinstance(t, str))  # type: ignore[misc]


def _parse_effect(raw: Mapping[str, object]) -> EffectDefinition:
    params = raw.get("params", {})
    if not isinstance(params, dict):
        raise ContentError("Effect params must be an object")
    return EffectDefinition(
        id=_require_str(raw, "id"),
        kind=_require_str(raw, "kind"),  # type: ignore[arg-type]
        rule=_require_str(raw, "rule"),
        params=dict(params),
        description=_optional_str(raw, "description") or "",
    )


def _parse_card(raw: Mapping[str, object], effects: Mapping[str, EffectDefinition]) -> CardDefinition:
    card = CardDefinition(
        id=_require_str(raw, "id"),
        name=_require_str(raw, "name"),
        type=_require_str(raw, "type"),  # type: ignore[arg-type]
        base_score=_require_int(raw, "base_score"),
        tags=_parse_tags(raw.get("tags", [])),
        self_effect=_optional_str(raw, "self_effect"),
        aura_effect=_optional_str(raw, "aura_effect"),
        trigger_effect=_optional_str(raw, "trigger_effect"),
        description=_optional_str(raw, "description") or "",
    )
    if not card.description:
        # Fall back to the effect text so every card has something to show.
        texts = [effects[eid].description for eid in _bound_effects(card) if eid in effects]
        if texts:
            card = replace(card, description=" ".join(texts))
    return card


def _bound_effects(card: CardDefinition) -> list[str]:
    return [eid for eid in (card.self_effect, card.aura_effect, card.trigger_effect) if eid is not None]


def check_references(db: CardDatabase) -> None:
    """Every effect id a card names must exist with the matching kind and a known rule."""
    problems: list[str] = []
    for effect in db.effects.values():
        if effect.rule not in known_rules(effect.kind):
            problems.append(f"effect {effect.id}: unknown {effect.kind} rule '{effect.rule}'")
    for card in db.cards.values():
        for attr, kind in _EFFECT_SLOTS:
            effect_id = getattr(card, attr)
            if effect_id is None:
                continue
            effect = db.effects.get(effect_id)
            if effect is None:
                problems.append(f"card {card.id}: {attr} '{effect_id}' is not defined")
            elif effect.kind != kind:
                problems.append(f"card {card.id}: {attr} '{effect_id}' is a {effect.kind} effect")
    if problems:
        raise ContentError("Card catalog references are broken:\n" + "\n".join(f"- {p}" for p in problems))


class ContentService:
    def __init__(self, data_dir: Path, schema_dir: Path) -> None:
        self._data_dir = data_dir
        self._schema_dir = schema_dir

    def load_cards_db(self) -> CardDatabase:
        cards_path = self._data_dir / "cards.json"
        schema_path = self._schema_dir / "cards.schema.json"
        raw = _load_json(cards_path)
        schema = _load_json(schema_path)
        validate_json(raw, schema, context=str(cards_path))

        if not isinstance(raw, dict):
            raise ContentError("cards.json must be an object")
        raw_effects = raw.get("effects", [])
        raw_cards = raw.get("cards")
        if not isinstance(raw_effects, list):
            raise ContentError("cards.json.effects must be a list")
        if not isinstance(raw_cards, list):
            raise ContentError("cards.json.cards must be a list")

        effects: dict[str, EffectDefinition] = {}
        for item in raw_effects:
            if not isinstance(item, dict):
                continue
            effect = _parse_effect(item)
            if effect.id in effects:
                raise ContentError(f"Duplicate effect id: {effect.id}")
            effects[effect.id] = effect

        cards: dict[str, CardDefinition] = {}
        for item in raw_cards:
            if not isinstance(item, dict):
                continue
            card = _parse_card(item, effects)
            if card.id in cards:
                raise ContentError(f"Duplicate card id: {card.id}")
            cards[card.id] = card

        db = CardDatabase(cards=cards, effects=effects)
        check_references(db)
        logger.debug("Loaded %d cards and %d effects from %s", len(cards), len(effects), cards_path)
        return db

    def validate_all(self) -> None:
        # Load is validation (schema + parse + references)
        _ = self.load_cards_db()
