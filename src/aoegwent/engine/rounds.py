from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

TIE = "tie"


@dataclass(frozen=True)
class RoundOutcome:
    match_ended: bool
    match_winner: str | None  # player id, "tie", or None while undecided


class RoundManager:
    """Round counter and best-of-three bookkeeping.

    A tied round awards a round win to both players. Two players reaching the
    threshold together is reported as a tied match.
    """

    def __init__(
        self,
        player_ids: Sequence[str],
        *,
        rounds_to_win: int = 2,
        max_rounds: int = 3,
    ) -> None:
        if len(player_ids) != 2:
            raise ValueError("RoundManager needs exactly two players")
        self._player_ids = (player_ids[0], player_ids[1])
        self.rounds_to_win = rounds_to_win
        self.max_rounds = max_rounds
        self.round_number = 1
        self.wins: dict[str, int] = {pid: 0 for pid in self._player_ids}

    def round_wins(self, player_id: str) -> int:
        return self.wins[player_id]

    def record_round_winner(self, winner: str) -> RoundOutcome:
        if winner == TIE:
            for pid in self._player_ids:
                self.wins[pid] += 1
        elif winner in self.wins:
            self.wins[winner] += 1
        else:
            raise ValueError(f"Unknown round winner: {winner}")

        self.round_number += 1
        return self.check_match_end()

    def check_match_end(self) -> RoundOutcome:
        a, b = self._player_ids
        wins_a = self.wins[a]
        wins_b = self.wins[b]

        if wins_a >= self.rounds_to_win and wins_b >= self.rounds_to_win:
            return RoundOutcome(match_ended=True, match_winner=TIE)
        if wins_a >= self.rounds_to_win:
            return RoundOutcome(match_ended=True, match_winner=a)
        if wins_b >= self.rounds_to_win:
            return RoundOutcome(match_ended=True, match_winner=b)

        # Safety net; normally decided above.
        if self.round_number > self.max_rounds:
            if wins_a > wins_b:
                return RoundOutcome(match_ended=True, match_winner=a)
            if wins_b > wins_a:
                return RoundOutcome(match_ended=True, match_winner=b)
            return RoundOutcome(match_ended=True, match_winner=TIE)

        return RoundOutcome(match_ended=False, match_winner=None)

    def reset(self) -> None:
        self.round_number = 1
        for pid in self._player_ids:
            self.wins[pid] = 0
