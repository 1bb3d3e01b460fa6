from __future__ import annotations

import logging

import pytest

from ecochess.economy.bank import Bank, InsufficientFundsError
from ecochess.economy.currency import Currency
from ecochess.economy.market import Market
from ecochess.engine.board import Board
from ecochess.engine.geometry import Color
from ecochess.engine.move import parse_move


def test_new_bank_holds_home_sectors() -> None:
    bank = Bank(Color.BLACK)
    assert bank.balance == Currency.zero()
    assert [s for s, owned in enumerate(bank.sectors) if owned] == [12, 13, 14, 15]
    assert bank.calculate_income() == Currency(40)


def test_census_deposits_income_for_controlled_sectors() -> None:
    board = Board.from_fen("4k3/8/8/8/4P3/8/8/4K3 w - - 0 1")
    bank = Bank(Color.WHITE)
    income = bank.perform_census(board)
    assert income == Currency(30)  # e1 outer, e4 centre
    assert bank.balance == Currency(30)
    assert [s for s, owned in enumerate(bank.sectors) if owned] == [2, 6]


def test_withdraw_refuses_overdraft(caplog: pytest.LogCaptureFixture) -> None:
    bank = Bank(Color.WHITE, balance=Currency(15))
    with caplog.at_level(logging.ERROR, logger="ecochess.economy.bank"):
        with pytest.raises(InsufficientFundsError):
            bank.withdraw(Currency(20))
    assert bank.balance == Currency(15)
    assert "cannot withdraw" in caplog.text


def test_purchase_charges_market_value() -> None:
    bank = Bank(Color.WHITE, Market(), Currency(100))
    assert bank.can_afford(parse_move("$Nc1"))
    bank.purchase(parse_move("$Nc1"))
    assert bank.balance == Currency(40)
    assert not bank.can_afford(parse_move("$Nc1"))
    bank.deposit(Currency(20))
    assert bank.can_afford(parse_move("$Nc1"))


def test_copy_is_independent() -> None:
    bank = Bank(Color.WHITE, balance=Currency(5))
    other = bank.copy()
    other.deposit(Currency(5))
    other.sectors[0] = False
    assert bank.balance == Currency(5)
    assert bank.sectors[0]
