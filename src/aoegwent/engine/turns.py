from __future__ import annotations

from collections.abc import Sequence


class TurnManager:
    """Tracks whose turn it is and which players have passed this round.

    A player whose opponent has already passed keeps the turn after every
    action, so they can play out the rest of their hand.
    """

    def __init__(self, player_ids: Sequence[str], starting_player: str) -> None:
        if len(player_ids) != 2:
            raise ValueError("TurnManager needs exactly two players")
        if starting_player not in player_ids:
            raise ValueError(f"Unknown starting player: {starting_player}")
        self._player_ids = (player_ids[0], player_ids[1])
        self.current_turn = starting_player
        self.passed: set[str] = set()

    def opponent_of(self, player_id: str) -> str:
        if player_id == self._player_ids[0]:
            return self._player_ids[1]
        if player_id == self._player_ids[1]:
            return self._player_ids[0]
        raise ValueError(f"Invalid player id: {player_id}")

    def can_act(self, player_id: str) -> bool:
        return player_id == self.current_turn and player_id not in self.passed

    def switch_turn(self) -> None:
        other = self.opponent_of(self.current_turn)
        if other in self.passed:
            return
        self.current_turn = other

    def mark_passed(self, player_id: str) -> None:
        self.opponent_of(player_id)  # validates the id
        self.passed.add(player_id)

    def both_passed(self) -> bool:
        return len(self.passed) == 2

    def auto_pass(self, player_id: str, hand_size: int) -> bool:
        """Mark `player_id` passed if their hand is empty.

        Returns True when the pass was applied now, so the caller can announce it.
        """
        if hand_size == 0 and player_id not in self.passed:
            self.mark_passed(player_id)
            return True
        return False

    def reset_round(self, starting_player: str) -> None:
        self.opponent_of(starting_player)
        self.passed.clear()
        self.current_turn = starting_player
