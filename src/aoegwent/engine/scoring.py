from __future__ import annotations

import logging
from dataclasses import dataclass

from .effects import evaluate_aura, evaluate_self, resolve_effect
from .state import MatchState
from .types import ROWS, RowName

logger = logging.getLogger(__name__)

MIN_SCORE = 1


@dataclass(frozen=True)
class ScoreBoard:
    rows: dict[str, dict[RowName, int]]
    totals: dict[str, int]


def recompute(state: MatchState) -> ScoreBoard:
    """Recompute every placed card's current score, then aggregate.

    The passes run in a fixed order: reset (weather pins to 1), aura
    collection, aura application, self effects. Auras targeting the same row
    stack additively. Only cards on battle rows are scored.
    """
    # Reset
    for pid in state.player_ids:
        player = state.players[pid]
        for row in ROWS:
            pinned = state.weather.is_penalized(row)
            for uid in player.rows[row]:
                card = state.arena[uid]
                card.current_score = MIN_SCORE if pinned else card.base_score

    # Aura collection
    row_buffs: dict[tuple[str, RowName], int] = {}
    for pid in state.player_ids:
        view = state.view_for(pid)
        for uid in state.players[pid].board():
            effect_id = state.arena[uid].definition.aura_effect
            if effect_id is None:
                continue
            aura = evaluate_aura(resolve_effect(state.cards, effect_id, "aura"), view)
            target = pid if aura.side == "self" else state.opponent(pid)
            key = (target, aura.row)
            row_buffs[key] = row_buffs.get(key, 0) + aura.delta

    # Aura application
    for (pid, row), delta in row_buffs.items():
        for uid in state.players[pid].rows[row]:
            card = state.arena[uid]
            card.current_score = max(MIN_SCORE, card.current_score + delta)

    # Self effects
    for pid in state.player_ids:
        view = state.view_for(pid)
        for uid in state.players[pid].board():
            card = state.arena[uid]
            effect_id = card.definition.self_effect
            delta = 0
            if effect_id is not None:
                delta = evaluate_self(resolve_effect(state.cards, effect_id, "self"), card, view)
            card.current_score = max(MIN_SCORE, card.current_score + delta)

    board = aggregate(state)
    logger.debug("Recomputed scores: %s", board.totals)
    return board


def aggregate(state: MatchState) -> ScoreBoard:
    rows: dict[str, dict[RowName, int]] = {}
    totals: dict[str, int] = {}
    for pid in state.player_ids:
        player = state.players[pid]
        per_row = {
            row: sum(state.arena[uid].current_score for uid in player.rows[row]) for row in ROWS
        }
        rows[pid] = per_row
        totals[pid] = sum(per_row.values())
    return ScoreBoard(rows=rows, totals=totals)


def round_winner(totals: dict[str, int]) -> str:
    """Return the player id with the highest total, or "tie"."""
    best: str | None = None
    best_score = -1
    tied = False
    for pid, score in totals.items():
        if score > best_score:
            best, best_score, tied = pid, score, False
        elif score == best_score:
            tied = True
    if best is None or tied:
        return "tie"
    return best
