from __future__ import annotations

from typing import List

from ecochess.engine.game import Game
from ecochess.engine.geometry import Color
from ecochess.protocol.console.loop import ConsoleSession
from ecochess.protocol.console.render import render_bank, render_board, render_state
from ecochess.search.engine import RandomEngine


def _run(session: ConsoleSession, *lines: str) -> List[str]:
    out: List[str] = []
    session.run(lines, out.append)
    return out


def test_two_humans_take_turns() -> None:
    session = ConsoleSession(engine=None, color_output=False)
    out = _run(session, "e2e4", "e7e5", "exit")
    assert session.game.move_history_text() == ["e2e4", "e7e5"]
    assert out.count("Enter a move:\n> ") == 3
    assert "1. b1c3 (¢10)" in out


def test_bad_input_is_reported_and_the_loop_continues() -> None:
    session = ConsoleSession(engine=None, color_output=False)
    out = _run(session, "zz", "e2e5", "", "e2e4")
    assert "Invalid move!" in out
    assert "Illegal move!" in out
    assert session.game.move_history_text() == ["e2e4"]


def test_engine_replies_and_undo_takes_back_both_moves() -> None:
    engine = RandomEngine(seed=1, depth=1, max_workers=1)
    session = ConsoleSession(engine=engine, engine_color=Color.BLACK, color_output=False)
    out = _run(session, "e2e4", "undo", "exit")
    assert any(line.startswith("Engine move: ") for line in out)
    assert session.game.move_stack == []
    assert session.game.turn() is Color.WHITE


def test_undo_with_nothing_to_undo() -> None:
    session = ConsoleSession(engine=None, color_output=False)
    out = _run(session, "undo")
    assert "no moves to undo" in out


def test_finished_game_prints_the_outcome() -> None:
    game = Game.from_fen("7k/8/8/8/8/8/5PPP/r5K1 w - - 0 1")
    out = _run(ConsoleSession(engine=None, game=game, color_output=False))
    assert out[-1] == "Checkmate, Black wins"


def test_resignation_outcome() -> None:
    session = ConsoleSession(engine=None, color_output=False)
    out = _run(session, "resign")
    assert out[-1] == "Black wins by resignation"


def test_plain_and_colored_rendering() -> None:
    game = Game.new()
    plain = render_board(game.board, color=False)
    assert plain.splitlines()[0] == "8 r n b q k b n r"
    assert plain.splitlines()[-1] == "  a b c d e f g h"
    assert "\033[" in render_board(game.board)
    bank = render_bank(game.state.get_bank(Color.WHITE))
    assert "White" in bank and "¢40" in bank
    stacked = render_state(game.state, color=False).splitlines()
    assert "Black" in stacked[1]
    assert "White" in stacked[-2]
