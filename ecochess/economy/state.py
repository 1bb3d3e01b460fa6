from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..engine.board import Board, IllegalMoveError
from ..engine.geometry import Color, Piece, Tile, is_home_sector
from ..engine.move import Many, Move, Pass, Purchase
from ..engine.movegen import legal_purchases
from .bank import Bank
from .currency import Currency
from .market import Market


logger = logging.getLogger(__name__)


@dataclass
class EconomicBoard:
    """A board whose moves cost money and whose territory pays income.

    Each side pays for its move from its bank; after every move the opponent
    collects income from the sectors it controls. The side to move at creation
    takes the first census.
    """

    board: Board
    market: Market
    banks: Dict[Color, Bank]

    @classmethod
    def new(cls, market: Optional[Market] = None, board: Optional[Board] = None) -> "EconomicBoard":
        market = market or Market()
        state = cls(
            board=board if board is not None else Board.startpos(),
            market=market,
            banks={color: Bank(color, market) for color in (Color.WHITE, Color.BLACK)},
        )
        state.perform_census(state.whose_turn())
        return state

    def copy(self) -> "EconomicBoard":
        return EconomicBoard(
            board=self.board.copy(),
            market=self.market,
            banks={color: bank.copy() for color, bank in self.banks.items()},
        )

    # --- collaborator surface --------------------------------------------

    def whose_turn(self) -> Color:
        return self.board.whose_turn()

    def get_piece(self, tile: Tile) -> Optional[Piece]:
        return self.board.get_piece(tile)

    def get_bank(self, color: Color) -> Bank:
        return self.banks[color]

    def get_balance(self, color: Color) -> Currency:
        return self.banks[color].balance

    def get_move_cost(self, move: Move) -> Currency:
        return self.market.get_move_value(move)

    def perform_census(self, color: Color) -> None:
        self.banks[color].perform_census(self.board)

    # --- legality ---------------------------------------------------------

    def is_legal_move(self, move: Move) -> bool:
        """Whether ``move`` is legal on the board and affordable for the mover."""
        if not self._is_legal_step(move):
            return False
        bank = self.banks[self.whose_turn()]
        if not bank.can_afford(move):
            logger.debug("%s cannot afford %s", bank.color.label, move)
            return False
        return True

    def _is_legal_step(self, move: Move) -> bool:
        color = self.whose_turn()
        if isinstance(move, Purchase):
            if self.board.has_piece_on(move.to_tile):
                logger.debug("purchase target %s is occupied", move.to_tile)
                return False
            if not is_home_sector(move.to_tile.sector, color):
                logger.debug("purchase target %s is outside the home sectors", move.to_tile)
                return False
            return not self.board.is_in_check(color)
        if isinstance(move, Pass):
            return True
        if isinstance(move, Many):
            if not move.moves:
                return False
            probe = self.copy()
            for sub in move.moves:
                probe.board.set_turn(color)
                if not probe._is_legal_step(sub):
                    logger.debug("compound step %s is illegal", sub)
                    return False
                probe._play(sub)
            return True
        return self.board.is_legal_move(move)

    def legal_moves(self) -> List[Move]:
        """Affordable purchases, then board moves when a board move is affordable."""
        color = self.whose_turn()
        bank = self.banks[color]
        moves: List[Move] = legal_purchases(
            self.board, lambda kind: bank.balance >= self.market.get_piece_price(kind)
        )
        for move in self.board.legal_moves():
            if bank.can_afford(move):
                moves.append(move)
        return moves

    # --- application ------------------------------------------------------

    def apply(self, move: Move) -> None:
        """Pay for and play ``move``, then let the opponent take a census.

        Raises:
            IllegalMoveError: If the move is illegal or unaffordable. The state
                is unchanged in that case.
        """
        if not self.is_legal_move(move):
            raise IllegalMoveError(f"illegal move {move}")
        mover = self.whose_turn()
        self.banks[mover].purchase(move)
        self._play(move)
        self.perform_census(mover.enemy)

    def _play(self, move: Move) -> None:
        if isinstance(move, Purchase):
            self.board.spawn(move.kind, move.to_tile)
            self.board.apply(Pass())
            logger.info("%s bought %s on %s", self.board.turn.enemy.label, move.kind.name.lower(), move.to_tile)
        elif isinstance(move, Many):
            turn = self.whose_turn()
            for sub in move.moves:
                self.board.set_turn(turn)
                self._play(sub)
            self.board.set_turn(turn.enemy)
        else:
            self.board.apply(move)

    # --- status -----------------------------------------------------------

    def is_in_check(self, color: Color) -> bool:
        return self.board.is_in_check(color)

    def is_in_checkmate(self, color: Color) -> bool:
        return self.board.is_in_checkmate(color)

    def is_stalemate(self) -> bool:
        return self.board.is_stalemate()

    @property
    def winner(self) -> Optional[Color]:
        return self.board.winner

    def to_fen(self) -> str:
        return self.board.to_fen()
