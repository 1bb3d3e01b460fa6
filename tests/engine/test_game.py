from __future__ import annotations

import pytest

from ecochess.engine.board import IllegalMoveError
from ecochess.engine.game import Game
from ecochess.engine.geometry import Color
from ecochess.engine.move import Resign, parse_move


def test_apply_and_undo_restore_board_and_balances() -> None:
    g = Game.new()
    start_fen = g.to_fen()
    g.apply_move(parse_move("e2e4"))
    g.apply_move(parse_move("e7e5"))
    assert g.move_history_text() == ["e2e4", "e7e5"]
    assert g.turn() is Color.WHITE

    g.undo_move()
    assert g.turn() is Color.BLACK
    assert g.state.get_balance(Color.WHITE).amount == 30
    assert g.state.get_balance(Color.BLACK).amount == 40
    g.undo_move()
    assert g.to_fen() == start_fen
    assert g.state.get_balance(Color.WHITE).amount == 40
    assert g.state.get_balance(Color.BLACK).amount == 0
    assert g.move_stack == []


def test_undo_on_fresh_game_raises() -> None:
    with pytest.raises(ValueError, match="no moves"):
        Game.new().undo_move()


def test_rejected_move_is_not_recorded() -> None:
    g = Game.new()
    with pytest.raises(IllegalMoveError):
        g.apply_move(parse_move("e2e5"))
    assert g.move_stack == []
    assert g.turn() is Color.WHITE


def test_resignation_ends_the_game() -> None:
    g = Game.new()
    g.apply_move(Resign())
    assert g.winner() is Color.BLACK
    with pytest.raises(IllegalMoveError):
        g.apply_move(parse_move("e7e5"))


def test_status_flags() -> None:
    g = Game.from_fen("7k/8/8/8/8/8/5PPP/r5K1 w - - 0 1")
    assert g.in_check()
    assert g.checkmate()
    assert not g.stalemate()
