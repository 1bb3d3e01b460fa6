from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict

from ..engine.geometry import PieceType, is_center_sector
from ..engine.move import Castling, FromTo, Many, Move, Pass, PieceTo, Purchase, Resign
from .currency import Currency


def _default_prices() -> Dict[PieceType, Currency]:
    return {kind: Currency.doubloon() * kind.base_value * 2 for kind in PieceType}


@dataclass(frozen=True)
class Market:
    """Prices of moves and pieces, and sector income.

    Defaults: a piece costs two doubloons per unit of value (P 20, N 60,
    B 62, R 100, Q 180, K 2000), a board move costs one doubloon, castling
    two, passing nothing. Centre sectors pay two doubloons per census, outer
    sectors one. The ``i``-th step of a compound turn costs ``rate ** i`` times
    its own price.
    """

    piece_prices: Dict[PieceType, Currency] = field(default_factory=_default_prices)
    base_move_cost: Currency = Currency.doubloon()
    castling_cost: Currency = Currency.doubloon() * 2
    pass_cost: Currency = Currency.zero()
    center_sector_income: Currency = Currency.doubloon() * 2
    outer_sector_income: Currency = Currency.doubloon()
    move_interest_rate: float = 2.0

    def with_piece_price(self, kind: PieceType, price: Currency) -> "Market":
        prices = dict(self.piece_prices)
        prices[kind] = price
        return replace(self, piece_prices=prices)

    def with_base_move_cost(self, cost: Currency) -> "Market":
        return replace(self, base_move_cost=cost)

    def with_castling_cost(self, cost: Currency) -> "Market":
        return replace(self, castling_cost=cost)

    def with_pass_cost(self, cost: Currency) -> "Market":
        return replace(self, pass_cost=cost)

    def with_center_sector_income(self, income: Currency) -> "Market":
        return replace(self, center_sector_income=income)

    def with_outer_sector_income(self, income: Currency) -> "Market":
        return replace(self, outer_sector_income=income)

    def with_interest_rate(self, rate: float) -> "Market":
        return replace(self, move_interest_rate=rate)

    def get_piece_price(self, kind: PieceType) -> Currency:
        return self.piece_prices[kind]

    def get_move_value(self, move: Move) -> Currency:
        if isinstance(move, (FromTo, PieceTo)):
            return self.base_move_cost
        if isinstance(move, Purchase):
            return self.get_piece_price(move.kind)
        if isinstance(move, Castling):
            return self.castling_cost
        if isinstance(move, Pass):
            return self.pass_cost
        if isinstance(move, Resign):
            return Currency.zero()
        assert isinstance(move, Many)
        total = Currency.zero()
        for i, sub in enumerate(move.moves):
            total += self.get_move_value(sub) * self.move_interest_rate ** i
        return total

    def get_sector_value(self, sector: int) -> Currency:
        if is_center_sector(sector):
            return self.center_sector_income
        return self.outer_sector_income
