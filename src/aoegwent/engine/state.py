from __future__ import annotations

import random
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Literal

from .actions import Action
from .rounds import RoundManager
from .turns import TurnManager
from .types import ROWS, CardDatabase, CardDefinition, CardTag, CardType, RowName

Phase = Literal[
    "SETUP",
    "GAME_START",
    "ROUND_START",
    "PLAYER_ACTION",
    "ENEMY_ACTION",
    "ROUND_END",
    "RESOLUTION",
]
ACTION_PHASES: tuple[Phase, ...] = ("PLAYER_ACTION", "ENEMY_ACTION")

Side = Literal["self", "enemy"]
Event = dict[str, object]
Subscriber = Callable[[Event], None]


@dataclass(frozen=True)
class MatchConfig:
    deck_size: int = 50
    hand_size: int = 10
    rounds_to_win: int = 2
    max_rounds: int = 3


@dataclass
class CardInstance:
    uid: int
    definition: CardDefinition
    current_score: int = 0  # derived; written only by the score calculator

    @property
    def card_id(self) -> str:
        return self.definition.id

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def base_score(self) -> int:
        return self.definition.base_score

    @property
    def type(self) -> CardType:
        return self.definition.type

    @property
    def tags(self) -> tuple[CardTag, ...]:
        return self.definition.tags


def _empty_rows() -> dict[RowName, list[int]]:
    return {row: [] for row in ROWS}


@dataclass
class PlayerState:
    id: str
    name: str
    hand: list[int] = field(default_factory=list)
    rows: dict[RowName, list[int]] = field(default_factory=_empty_rows)
    discard: list[int] = field(default_factory=list)
    deck: list[int] = field(default_factory=list)
    has_passed: bool = False
    round_wins: int = 0

    def board(self) -> list[int]:
        return [uid for row in ROWS for uid in self.rows[row]]

    def zones(self) -> Iterator[tuple[str, list[int]]]:
        yield "hand", self.hand
        for row in ROWS:
            yield row, self.rows[row]
        yield "discard", self.discard
        yield "deck", self.deck

    def row_of(self, uid: int) -> RowName | None:
        for row in ROWS:
            if uid in self.rows[row]:
                return row
        return None

    def reset(self) -> None:
        self.hand.clear()
        for row in ROWS:
            self.rows[row].clear()
        self.discard.clear()
        self.deck.clear()
        self.has_passed = False
        self.round_wins = 0


@dataclass
class WeatherZone:
    """Shared zone: the last weather card played and the rows it penalizes."""

    card: int | None = None
    owner: str | None = None
    rows: set[RowName] = field(default_factory=set)

    def is_penalized(self, row: RowName) -> bool:
        return row in self.rows


@dataclass(frozen=True)
class RoundRecord:
    round_number: int
    scores: dict[str, int]
    winner: str  # player id or "tie"


@dataclass(frozen=True)
class BattlefieldView:
    """Read-only battlefield seen from one player's side.

    Effect evaluators and the bot only ever receive this view; they must not
    mutate anything reachable from it.
    """

    player: PlayerState
    enemy: PlayerState
    arena: Mapping[int, CardInstance]
    weather: WeatherZone

    def side(self, side: Side) -> PlayerState:
        return self.player if side == "self" else self.enemy

    def row(self, side: Side, row: RowName) -> list[CardInstance]:
        return [self.arena[uid] for uid in self.side(side).rows[row]]

    def hand(self) -> list[CardInstance]:
        return [self.arena[uid] for uid in self.player.hand]

    def committed(self, side: Side) -> int:
        return len(self.side(side).board())

    def total(self, side: Side) -> int:
        return sum(self.arena[uid].current_score for uid in self.side(side).board())


@dataclass
class MatchState:
    cards: CardDatabase
    config: MatchConfig
    seed: int
    rng: random.Random
    player_ids: tuple[str, str]
    players: dict[str, PlayerState]
    turns: TurnManager
    rounds: RoundManager
    arena: dict[int, CardInstance] = field(default_factory=dict)
    weather: WeatherZone = field(default_factory=WeatherZone)
    phase: Phase = "SETUP"
    round_starter: str | None = None
    history: list[RoundRecord] = field(default_factory=list)
    result: str | None = None
    failure: str | None = None
    next_uid: int = 1
    action_log: list[tuple[str, Action]] = field(default_factory=list)
    event_log: list[Event] = field(default_factory=list)
    subscribers: list[Subscriber] = field(default_factory=list)

    @property
    def current_turn(self) -> str:
        return self.turns.current_turn

    @property
    def round_number(self) -> int:
        return self.rounds.round_number

    def opponent(self, player_id: str) -> str:
        return self.turns.opponent_of(player_id)

    def alloc_uid(self) -> int:
        uid = self.next_uid
        self.next_uid += 1
        return uid

    def view_for(self, player_id: str) -> BattlefieldView:
        return BattlefieldView(
            player=self.players[player_id],
            enemy=self.players[self.opponent(player_id)],
            arena=self.arena,
            weather=self.weather,
        )

    def action_phase_for(self, player_id: str) -> Phase:
        return "PLAYER_ACTION" if player_id == self.player_ids[0] else "ENEMY_ACTION"
