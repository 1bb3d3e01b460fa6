"""Legal move enumeration.

Ordering is part of the contract: tiles in index order, then each piece's
candidate order, then promotions N, B, R, Q, then king-side and queen-side
castling. Purchases come from ``legal_purchases`` and are listed by the
economy layer ahead of board moves.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, List

from .geometry import (
    CANDIDATES,
    PROMOTIONS,
    PURCHASES,
    TILES,
    CastlingSide,
    PieceType,
    is_home_sector,
    king_start,
    rook_start,
)
from .move import Castling, FromTo, Move, Purchase

if TYPE_CHECKING:
    from .board import Board


def legal_moves(board: "Board") -> List[Move]:
    """Return every legal move for the side to move, in generation order."""
    color = board.whose_turn()
    moves: List[Move] = []
    for tile, piece in board.pieces(color):
        for to in CANDIDATES[piece.index][tile.index]:
            if not board.is_legal_piece_move(tile, to):
                continue
            if piece.kind is PieceType.PAWN and board.is_valid_promotion(tile, to):
                moves.extend(FromTo(tile, to, kind) for kind in PROMOTIONS)
            else:
                moves.append(FromTo(tile, to))

    king = king_start(color)
    for side in (CastlingSide.KING, CastlingSide.QUEEN):
        if board.can_castle(king, rook_start(color, side)):
            moves.append(Castling(side))
    return moves


def legal_purchases(board: "Board", can_afford: Callable[[PieceType], bool]) -> List[Move]:
    """Purchases open to the side to move.

    Args:
        board (Board): Position to buy into.
        can_afford (Callable[[PieceType], bool]): Whether the buyer's funds cover
            a piece of the given kind.

    Returns:
        List[Move]: One ``Purchase`` per empty home-sector tile (index order)
        and affordable piece kind (P, N, B, R, Q, K). Empty while the buyer is
        in check.
    """
    color = board.whose_turn()
    if board.is_in_check(color):
        return []
    kinds = [kind for kind in PURCHASES if can_afford(kind)]
    if not kinds:
        return []
    occ = board.occupancy()
    moves: List[Move] = []
    for tile in TILES:
        if occ & tile.bit or not is_home_sector(tile.sector, color):
            continue
        moves.extend(Purchase(kind, tile) for kind in kinds)
    return moves
