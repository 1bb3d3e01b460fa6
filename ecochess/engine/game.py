from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from ..economy.market import Market
from ..economy.state import EconomicBoard
from .board import Board, IllegalMoveError
from .geometry import Color
from .move import Move


@dataclass
class Game:
    """Game wrapper around an economic board with helper operations.

    Responsibility: track state, expose legal moves, apply and undo moves.
    Undo restores a snapshot taken before each move, balances included.
    """

    state: EconomicBoard
    move_stack: List[Move] = field(default_factory=list)
    _snapshots: List[EconomicBoard] = field(default_factory=list, repr=False)

    @classmethod
    def new(cls, market: Optional[Market] = None) -> "Game":
        return cls(state=EconomicBoard.new(market))

    @classmethod
    def from_fen(cls, fen: str, market: Optional[Market] = None) -> "Game":
        return cls(state=EconomicBoard.new(market, Board.from_fen(fen)))

    @property
    def board(self) -> Board:
        return self.state.board

    def to_fen(self) -> str:
        return self.state.to_fen()

    def turn(self) -> Color:
        return self.state.whose_turn()

    def legal_moves(self) -> List[Move]:
        return self.state.legal_moves()

    def apply_move(self, move: Move) -> None:
        if self.winner() is not None:
            raise IllegalMoveError("game is over")
        snapshot = self.state.copy()
        self.state.apply(move)
        self._snapshots.append(snapshot)
        self.move_stack.append(move)

    def undo_move(self) -> None:
        if not self.move_stack:
            raise ValueError("no moves to undo")
        self.state = self._snapshots.pop()
        self.move_stack.pop()

    # --- State flags for protocol ---
    def in_check(self) -> bool:
        return self.state.is_in_check(self.turn())

    def checkmate(self) -> bool:
        return self.state.is_in_checkmate(self.turn())

    def stalemate(self) -> bool:
        return self.state.is_stalemate()

    def winner(self) -> Optional[Color]:
        return self.state.winner

    def move_history_text(self) -> List[str]:
        return [str(m) for m in self.move_stack]
