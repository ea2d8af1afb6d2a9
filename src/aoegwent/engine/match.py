from __future__ import annotations

import logging
import random
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from .actions import Action, PassTurnAction, PlaceCardAction
from .effects import (
    ApplyWeather,
    ClearWeather,
    SummonCards,
    TriggerCommand,
    evaluate_trigger,
    resolve_effect,
)
from .errors import (
    EngineError,
    InvalidAction,
    InvalidTransition,
    MatchEnded,
    MatchHalted,
    MissingEffectData,
    OutOfTurn,
)
from .rounds import TIE, RoundManager
from .scoring import recompute, round_winner
from .state import (
    ACTION_PHASES,
    CardInstance,
    Event,
    MatchConfig,
    MatchState,
    Phase,
    PlayerState,
    RoundRecord,
    Subscriber,
)
from .turns import TurnManager
from .types import ROWS, CardDatabase, RowName

logger = logging.getLogger(__name__)

# Closed transition table. SETUP and GAME_START are only passed through once.
TRANSITIONS: dict[Phase, tuple[Phase, ...]] = {
    "SETUP": ("GAME_START",),
    "GAME_START": ("ROUND_START",),
    "ROUND_START": ("PLAYER_ACTION", "ENEMY_ACTION"),
    "PLAYER_ACTION": ("PLAYER_ACTION", "ENEMY_ACTION", "ROUND_END"),
    "ENEMY_ACTION": ("ENEMY_ACTION", "PLAYER_ACTION", "ROUND_END"),
    "ROUND_END": ("ROUND_START", "RESOLUTION"),
    "RESOLUTION": ("ROUND_START",),
}


@dataclass
class StepResult:
    accepted: bool
    events: list[Event]
    reason: str | None = None
    detail: str | None = None


# ---------------------------------------------------------------------------
# Events and transitions
# ---------------------------------------------------------------------------


def subscribe(state: MatchState, callback: Subscriber) -> Callable[[], None]:
    """Register `callback` for every future event. Returns an unsubscribe hook."""
    state.subscribers.append(callback)

    def unsubscribe() -> None:
        if callback in state.subscribers:
            state.subscribers.remove(callback)

    return unsubscribe


def _emit(state: MatchState, event: Event) -> None:
    state.event_log.append(event)
    for callback in list(state.subscribers):
        callback(event)


def _transition(state: MatchState, target: Phase) -> None:
    if target not in TRANSITIONS.get(state.phase, ()):
        raise InvalidTransition(state.phase, target)
    logger.debug("Phase %s -> %s", state.phase, target)
    state.phase = target


def _halt(state: MatchState, error: EngineError) -> None:
    state.failure = str(error)
    logger.error("Match halted in phase %s: %s", state.phase, error)
    _emit(state, {"type": "MATCH_FAILED", "phase": state.phase, "reason": error.reason, "detail": str(error)})


def _sync_player_flags(state: MatchState) -> None:
    for pid in state.player_ids:
        player = state.players[pid]
        player.has_passed = pid in state.turns.passed
        player.round_wins = state.rounds.round_wins(pid)


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def _new_instance(state: MatchState, card_id: str) -> CardInstance:
    definition = state.cards.get(card_id)
    inst = CardInstance(uid=state.alloc_uid(), definition=definition, current_score=definition.base_score)
    state.arena[inst.uid] = inst
    return inst


def _deal(state: MatchState, decks: Sequence[Sequence[str]] | None) -> None:
    all_ids = list(state.cards.all_ids())
    for seat, pid in enumerate(state.player_ids):
        player = state.players[pid]
        if decks is not None:
            card_ids = list(decks[seat])
        else:
            card_ids = [state.rng.choice(all_ids) for _ in range(state.config.deck_size)]
        for card_id in card_ids:
            player.deck.append(_new_instance(state, card_id).uid)
        for _ in range(min(state.config.hand_size, len(player.deck))):
            player.hand.append(player.deck.pop(0))


def new_match(
    cards: CardDatabase,
    player_ids: Sequence[str] = ("player", "bot"),
    seed: int = 0,
    *,
    names: Sequence[str] | None = None,
    decks: Sequence[Sequence[str]] | None = None,
    first_player: str | None = None,
    config: MatchConfig | None = None,
) -> MatchState:
    """Create a match, deal both hands and open round 1.

    `decks` gives each seat's card ids in draw order; when omitted each seat
    gets `config.deck_size` cards drawn at random from the catalog. The first
    turn holder is `first_player` or a seeded coin flip.
    """
    cfg = config or MatchConfig()
    if len(player_ids) != 2 or player_ids[0] == player_ids[1]:
        raise ValueError("A match needs two distinct player ids.")
    if decks is not None:
        if len(decks) != 2:
            raise ValueError("Provide exactly one deck per player.")
        for deck in decks:
            for card_id in deck:
                if card_id not in cards.cards:
                    raise ValueError(f"Unknown card id in deck: {card_id}")
    if first_player is not None and first_player not in player_ids:
        raise ValueError(f"Unknown first player: {first_player}")

    rng = random.Random(seed)
    ids = (player_ids[0], player_ids[1])
    seat_names = list(names) if names is not None else list(ids)
    starting = first_player if first_player is not None else rng.choice(ids)

    state = MatchState(
        cards=cards,
        config=cfg,
        seed=seed,
        rng=rng,
        player_ids=ids,
        players={pid: PlayerState(id=pid, name=seat_names[i]) for i, pid in enumerate(ids)},
        turns=TurnManager(ids, starting),
        rounds=RoundManager(ids, rounds_to_win=cfg.rounds_to_win, max_rounds=cfg.max_rounds),
    )

    _deal(state, decks)
    _transition(state, "GAME_START")
    _emit(
        state,
        {
            "type": "MATCH_STARTED",
            "players": list(ids),
            "hand_sizes": {pid: len(state.players[pid].hand) for pid in ids},
            "first_player": starting,
        },
    )
    logger.info("Match started: %s vs %s (seed=%s)", ids[0], ids[1], seed)
    _transition(state, "ROUND_START")
    _start_round(state, starting)
    return state


def rematch(
    state: MatchState,
    *,
    seed: int | None = None,
    decks: Sequence[Sequence[str]] | None = None,
    first_player: str | None = None,
) -> None:
    """Reset both players and start a new match on the same state.

    The rematch starts from a fresh seed (drawn from the old RNG unless given)
    and an empty action log, so `replay` with `state.seed` rebuilds it exactly
    like a match created by `new_match`.
    """
    if state.failure is not None:
        raise MatchHalted(state.failure)
    if state.phase != "RESOLUTION":
        raise InvalidAction("A rematch can only start once the match is decided.")

    for player in state.players.values():
        player.reset()
    state.arena.clear()
    state.weather.card = None
    state.weather.owner = None
    state.weather.rows.clear()
    state.rounds.reset()
    state.history.clear()
    state.result = None
    state.action_log.clear()
    state.next_uid = 1

    state.seed = seed if seed is not None else state.rng.randrange(2**31)
    state.rng = random.Random(state.seed)
    starting = first_player if first_player is not None else state.rng.choice(state.player_ids)
    _deal(state, decks)
    _transition(state, "ROUND_START")
    _emit(state, {"type": "MATCH_STARTED", "players": list(state.player_ids), "first_player": starting})
    logger.info("Rematch started, %s goes first (seed=%s)", starting, state.seed)
    _start_round(state, starting)


# ---------------------------------------------------------------------------
# Round flow
# ---------------------------------------------------------------------------


def _start_round(state: MatchState, starting_player: str) -> None:
    state.turns.reset_round(starting_player)
    state.round_starter = starting_player
    _sync_player_flags(state)
    recompute(state)
    _emit(
        state,
        {"type": "ROUND_STARTED", "round": state.round_number, "starting_player": starting_player},
    )
    logger.info("Round %d starts, %s goes first", state.round_number, starting_player)
    _advance(state)


def _switch_turn(state: MatchState) -> None:
    before = state.turns.current_turn
    state.turns.switch_turn()
    after = state.turns.current_turn
    if after != before:
        _emit(state, {"type": "TURN_SWITCHED", "from": before, "to": after})


def _advance(state: MatchState) -> None:
    """Move to the next phase after an action, auto-passing empty hands."""
    while True:
        if state.turns.both_passed():
            _sync_player_flags(state)
            _transition(state, "ROUND_END")
            _end_round(state)
            return

        acting = state.turns.current_turn
        _transition(state, state.action_phase_for(acting))
        if state.players[acting].hand:
            _sync_player_flags(state)
            return

        if state.turns.auto_pass(acting, 0):
            _emit(state, {"type": "PLAYER_PASSED", "player": acting, "auto": True})
            logger.debug("%s auto-passed (no cards left)", acting)
        if not state.turns.both_passed():
            _switch_turn(state)


def _end_round(state: MatchState) -> None:
    board = recompute(state)
    winner = round_winner(board.totals)
    round_number = state.round_number
    outcome = state.rounds.record_round_winner(winner)
    state.history.append(RoundRecord(round_number=round_number, scores=dict(board.totals), winner=winner))
    _sync_player_flags(state)

    _emit(
        state,
        {
            "type": "ROUND_ENDED",
            "round": round_number,
            "scores": dict(board.totals),
            "winner": winner,
            "round_wins": dict(state.rounds.wins),
        },
    )
    logger.info("Round %d ended: %s, winner=%s", round_number, board.totals, winner)

    if outcome.match_ended:
        state.result = outcome.match_winner
        _transition(state, "RESOLUTION")
        _emit(state, {"type": "MATCH_ENDED", "winner": state.result, "round_wins": dict(state.rounds.wins)})
        logger.info("Match ended, winner=%s", state.result)
        return

    _clear_board(state)
    _transition(state, "ROUND_START")
    if winner == TIE:
        starting = state.opponent(state.round_starter or state.player_ids[0])
    else:
        starting = state.opponent(winner)
    _start_round(state, starting)


def _clear_board(state: MatchState) -> None:
    for pid in state.player_ids:
        player = state.players[pid]
        for row in ROWS:
            player.discard.extend(player.rows[row])
            player.rows[row].clear()
    _discard_weather_card(state)
    state.weather.rows.clear()


def _discard_weather_card(state: MatchState) -> None:
    weather = state.weather
    if weather.card is not None and weather.owner is not None:
        state.players[weather.owner].discard.append(weather.card)
    weather.card = None
    weather.owner = None


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


def can_act(state: MatchState, player_id: str) -> bool:
    return (
        state.failure is None
        and state.phase in ACTION_PHASES
        and player_id in state.players
        and state.turns.can_act(player_id)
    )


def _check_turn(state: MatchState, player_id: str) -> None:
    if state.failure is not None:
        raise MatchHalted(f"Match halted: {state.failure}")
    if state.phase == "RESOLUTION":
        raise MatchEnded("Match already ended.")
    if player_id not in state.players:
        raise InvalidAction(f"Unknown player: {player_id}")
    if state.phase not in ACTION_PHASES:
        raise InvalidAction(f"No action is accepted during {state.phase}.")
    if not state.turns.can_act(player_id):
        raise OutOfTurn("Not your turn or you have already passed.")


def _validate_placement(state: MatchState, player: PlayerState, action: PlaceCardAction) -> CardInstance:
    if action.card not in player.hand:
        raise InvalidAction("Card not in hand.")
    card = state.arena[action.card]
    allowed = card.definition.allowed_targets()
    if action.target_row not in allowed:
        raise InvalidAction(
            f"{card.name} ({card.type}) cannot be placed on {action.target_row}; allowed: {', '.join(allowed)}."
        )
    return card


def _apply_trigger_commands(
    state: MatchState, player: PlayerState, card: CardInstance, commands: Iterable[TriggerCommand]
) -> None:
    for command in commands:
        if isinstance(command, SummonCards):
            moved: list[int] = []
            for uid in command.uids:
                if uid in player.hand:
                    player.hand.remove(uid)
                elif uid in player.deck:
                    player.deck.remove(uid)
                else:
                    continue
                player.rows[command.row].append(uid)
                moved.append(uid)
            if moved:
                _emit(
                    state,
                    {"type": "CARDS_SUMMONED", "player": player.id, "row": command.row, "cards": moved},
                )
        elif isinstance(command, ApplyWeather):
            if state.weather.card is not None and state.weather.card != card.uid:
                _discard_weather_card(state)
            state.weather.card = card.uid
            state.weather.owner = player.id
            state.weather.rows.update(command.rows)
            _emit(
                state,
                {
                    "type": "WEATHER_APPLIED",
                    "player": player.id,
                    "card": card.uid,
                    "rows": sorted(command.rows),
                },
            )
        elif isinstance(command, ClearWeather):
            _discard_weather_card(state)
            state.weather.rows.clear()
            _emit(state, {"type": "WEATHER_CLEARED", "player": player.id, "card": card.uid})


def _place_card(state: MatchState, player_id: str, action: PlaceCardAction) -> None:
    player = state.players[player_id]
    card = _validate_placement(state, player, action)
    state.action_log.append((player_id, action))

    player.hand.remove(card.uid)
    if action.target_row != "weather":
        row: RowName = action.target_row
        player.rows[row].append(card.uid)
    _emit(
        state,
        {
            "type": "CARD_PLACED",
            "player": player_id,
            "card": card.uid,
            "card_id": card.card_id,
            "row": action.target_row,
        },
    )
    logger.debug("%s placed %s on %s", player_id, card.name, action.target_row)
    recompute(state)

    trigger_id = card.definition.trigger_effect
    if trigger_id is not None:
        effect = resolve_effect(state.cards, trigger_id, "trigger")
        commands = evaluate_trigger(effect, card, action.target_row, state.view_for(player_id))
        _apply_trigger_commands(state, player, card, commands)
        recompute(state)

    # Weather-zone cards that did not settle in the zone are spent.
    if action.target_row == "weather" and state.weather.card != card.uid:
        player.discard.append(card.uid)

    if state.turns.auto_pass(player_id, len(player.hand)):
        _emit(state, {"type": "PLAYER_PASSED", "player": player_id, "auto": True})
        logger.debug("%s auto-passed (no cards left)", player_id)
    if not state.turns.both_passed():
        _switch_turn(state)
    _advance(state)


def _pass_turn(state: MatchState, player_id: str) -> None:
    state.action_log.append((player_id, PassTurnAction()))
    state.turns.mark_passed(player_id)
    _emit(state, {"type": "PLAYER_PASSED", "player": player_id, "auto": False})
    logger.debug("%s passed", player_id)
    if not state.turns.both_passed():
        _switch_turn(state)
    _advance(state)


def submit_action(state: MatchState, player_id: str, action: Action) -> StepResult:
    """Apply a single action from `player_id`.

    Rejected actions leave the state untouched. An accepted action runs to
    completion, including any round end and the auto-passes that follow.
    Internal defects halt this match and are reported in the result.
    """
    mark = len(state.event_log)
    try:
        _check_turn(state, player_id)
        if isinstance(action, PlaceCardAction):
            _place_card(state, player_id, action)
        elif isinstance(action, PassTurnAction):
            _pass_turn(state, player_id)
        else:
            raise InvalidAction(f"Unknown action: {action!r}")
    except (InvalidTransition, MissingEffectData) as e:
        _halt(state, e)
        return StepResult(accepted=False, events=state.event_log[mark:], reason=e.reason, detail=str(e))
    except EngineError as e:
        logger.warning("Rejected action from %s: %s", player_id, e)
        return StepResult(accepted=False, events=[], reason=e.reason, detail=str(e))

    _sync_player_flags(state)
    return StepResult(accepted=True, events=state.event_log[mark:])


def replay(
    cards: CardDatabase,
    player_ids: Sequence[str],
    seed: int,
    actions: Iterable[tuple[str, Action]],
    *,
    names: Sequence[str] | None = None,
    decks: Sequence[Sequence[str]] | None = None,
    first_player: str | None = None,
    config: MatchConfig | None = None,
) -> MatchState:
    state = new_match(
        cards, player_ids, seed, names=names, decks=decks, first_player=first_player, config=config
    )
    for player_id, action in actions:
        submit_action(state, player_id, action)
        if state.phase == "RESOLUTION" or state.failure is not None:
            break
    return state
