from __future__ import annotations

from collections.abc import Callable, Sequence

import pytest

from aoegwent.engine.match import new_match
from aoegwent.engine.state import MatchConfig, MatchState
from aoegwent.engine.types import CardDatabase, CardDefinition, EffectDefinition
from aoegwent.paths import get_paths
from aoegwent.services.content import ContentService

PLAYER = "player"
BOT = "bot"


def _small_catalog() -> CardDatabase:
    effects = [
        EffectDefinition("obuch_debuff", "aura", "row_modifier", {"side": "enemy", "row": "melee", "delta": -1}),
        EffectDefinition("karambit_summon", "trigger", "summon_copies", {}),
        EffectDefinition("freeze_effect", "trigger", "weather", {"rows": ["melee"]}),
        EffectDefinition("fog_effect", "trigger", "weather", {"rows": ["ranged"]}),
        EffectDefinition("clear_effect", "trigger", "clear_weather", {}),
        EffectDefinition(
            "pikeman_bonus", "self", "enemy_row_has_tag", {"row": "melee", "tag": "cavalry", "amount": 2}
        ),
        EffectDefinition("monaspa_bonus", "self", "per_ally_in_row", {"names": ["Monaspa", "Knight"], "amount": 1}),
        EffectDefinition("skirmisher_bonus", "self", "enemy_row_occupied", {"row": "ranged", "amount": 2}),
    ]
    cards = [
        CardDefinition("knight", "Knight", "melee", 5, ("cavalry",)),
        CardDefinition("archer", "Archer", "ranged", 2, ("archer",)),
        CardDefinition("mangonel", "Mangonel", "siege", 8),
        CardDefinition("militia", "Militia", "melee", 1, ("infantry",)),
        CardDefinition("teutonic_knight", "Teutonic Knight", "melee", 10, ("infantry",)),
        CardDefinition("obuch", "Obuch", "melee", 7, ("infantry",), aura_effect="obuch_debuff"),
        CardDefinition("karambit", "Karambit Warrior", "melee", 2, ("infantry",), trigger_effect="karambit_summon"),
        CardDefinition("pikeman", "Pikeman", "melee", 3, ("infantry",), self_effect="pikeman_bonus"),
        CardDefinition("monaspa", "Monaspa", "melee", 6, ("cavalry",), self_effect="monaspa_bonus"),
        CardDefinition("skirmisher", "Skirmisher", "ranged", 2, ("archer",), self_effect="skirmisher_bonus"),
        CardDefinition("mounted_archer", "Mounted Archer", "ranged_melee", 4, ("cavalry", "archer")),
        CardDefinition("war_banner", "War Banner", "special", 3),
        CardDefinition("frost", "Frost", "weather", 0, trigger_effect="freeze_effect"),
        CardDefinition("fog", "Fog", "weather", 0, trigger_effect="fog_effect"),
        CardDefinition("clear", "Clear", "weather", 0, trigger_effect="clear_effect"),
        CardDefinition("broken", "Broken Idol", "melee", 4, self_effect="missing_effect"),
    ]
    return CardDatabase(cards={c.id: c for c in cards}, effects={e.id: e for e in effects})


@pytest.fixture
def cards() -> CardDatabase:
    return _small_catalog()


@pytest.fixture
def catalog() -> CardDatabase:
    """The bundled card catalog."""
    paths = get_paths()
    return ContentService(paths.data_dir, paths.schema_dir).load_cards_db()


@pytest.fixture
def make_match(cards: CardDatabase) -> Callable[..., MatchState]:
    """Build a match with fixed decks; every listed card is dealt to hand."""

    def build(
        player_deck: Sequence[str],
        bot_deck: Sequence[str],
        *,
        first: str = PLAYER,
        hand_size: int = 10,
        seed: int = 0,
    ) -> MatchState:
        return new_match(
            cards,
            (PLAYER, BOT),
            seed,
            names=("Player", "Bot"),
            decks=[list(player_deck), list(bot_deck)],
            first_player=first,
            config=MatchConfig(hand_size=hand_size),
        )

    return build
