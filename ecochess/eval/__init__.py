"""Evaluation terms for economic chess positions.

Pure, deterministic, and side-effect free. Every term is scored from the point
of view of ``color``: positive is good for ``color``.
"""

from __future__ import annotations

from typing import Final, Mapping, Optional, Union

from ecochess.economy.market import Market
from ecochess.economy.state import EconomicBoard
from ecochess.engine.board import Board
from ecochess.engine.geometry import PIECES, Color, PieceType


Position = Union[Board, EconomicBoard]

# Default material weights, in pawns
DEFAULT_WEIGHTS: Final[Mapping[PieceType, float]] = {kind: kind.base_value for kind in PieceType}

# Weight applied to the balance differential by the simple evaluation
BALANCE_WEIGHT: Final = 0.5
# Market price multiplier applied to each piece by the simple evaluation
PRICE_WEIGHT: Final = 2
# Pawns per penny when mixing balances into material scores (a pawn costs 20)
PENNY_WEIGHT: Final = 0.05

_DEFAULT_MARKET: Final = Market()


def board_of(position: Position) -> Board:
    return position.board if isinstance(position, EconomicBoard) else position


def market_of(position: Position) -> Market:
    return position.market if isinstance(position, EconomicBoard) else _DEFAULT_MARKET


def material_balance(
    position: Position, color: Color, weights: Optional[Mapping[PieceType, float]] = None
) -> float:
    """Weighted piece count of ``color`` minus that of its opponent."""
    weights = weights or DEFAULT_WEIGHTS
    bb = board_of(position).bb
    own = opp = 0.0
    for piece in PIECES:
        n = bb[piece.index].bit_count()
        if not n:
            continue
        value = n * weights.get(piece.kind, 0.0)
        if piece.color is color:
            own += value
        else:
            opp += value
    return own - opp


def market_material(position: Position, color: Color) -> float:
    """Own pieces at ``PRICE_WEIGHT`` times their market price, minus the opponent's."""
    market = market_of(position)
    bb = board_of(position).bb
    own = opp = 0.0
    for piece in PIECES:
        n = bb[piece.index].bit_count()
        if not n:
            continue
        value = n * market.get_piece_price(piece.kind).amount * PRICE_WEIGHT
        if piece.color is color:
            own += value
        else:
            opp += value
    return own - opp


def economic_balance(position: Position, color: Color) -> float:
    """Own balance minus the opponent's, in pennies. Zero on a plain board."""
    if not isinstance(position, EconomicBoard):
        return 0.0
    return float(position.get_balance(color).amount - position.get_balance(color.enemy).amount)


def evaluate_simple(position: Position, color: Color) -> float:
    return market_material(position, color) + economic_balance(position, color) * BALANCE_WEIGHT


def evaluate_material(
    position: Position,
    color: Color,
    weights: Optional[Mapping[PieceType, float]] = None,
    balance_weight: float = PENNY_WEIGHT,
) -> float:
    return material_balance(position, color, weights) + economic_balance(position, color) * balance_weight
