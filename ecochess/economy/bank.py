from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List

from ..engine.geometry import NUM_SECTORS, Color, is_home_sector
from ..engine.move import Move
from .currency import Currency
from .market import Market

if TYPE_CHECKING:
    from ..engine.board import Board


logger = logging.getLogger(__name__)


class InsufficientFundsError(ValueError):
    """Raised when a withdrawal exceeds the balance."""


@dataclass
class Bank:
    """One side's purse and the sectors it collected income from last census."""

    color: Color
    market: Market = field(default_factory=Market)
    balance: Currency = Currency.zero()
    sectors: List[bool] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.sectors:
            self.sectors = [is_home_sector(s, self.color) for s in range(NUM_SECTORS)]

    def copy(self) -> "Bank":
        return Bank(self.color, self.market, self.balance, list(self.sectors))

    def can_afford(self, move: Move) -> bool:
        return self.balance >= self.market.get_move_value(move)

    def deposit(self, amount: Currency) -> None:
        self.balance += amount

    def withdraw(self, amount: Currency) -> None:
        """Take ``amount`` out of the balance.

        Raises:
            InsufficientFundsError: If the balance is short; nothing is taken.
        """
        if self.balance < amount:
            logger.error("%s bank cannot withdraw %s from %s", self.color.label, amount, self.balance)
            raise InsufficientFundsError(f"{self.color.label} cannot afford {amount}")
        self.balance -= amount

    def purchase(self, move: Move) -> None:
        cost = self.market.get_move_value(move)
        logger.info("%s pays %s for %s", self.color.label, cost, move)
        self.withdraw(cost)

    def perform_census(self, board: "Board") -> Currency:
        """Recount controlled sectors on ``board`` and deposit their income."""
        self.sectors = board.get_controlled_sectors(self.color)
        income = self.calculate_income()
        self.balance += income
        logger.debug("%s census: %d sectors, income %s", self.color.label, sum(self.sectors), income)
        return income

    def calculate_income(self) -> Currency:
        income = Currency.zero()
        for sector, owned in enumerate(self.sectors):
            if owned:
                income += self.market.get_sector_value(sector)
        return income
