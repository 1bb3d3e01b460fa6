from __future__ import annotations

import logging
import sys
from typing import Callable, Iterable, Iterator, Optional

from ...engine.board import IllegalMoveError
from ...engine.game import Game
from ...engine.geometry import Color
from ...engine.move import MoveParseError, parse_move
from ...search.engine import Engine
from .render import render_state


logger = logging.getLogger(__name__)

Writer = Callable[[str], None]


class ConsoleSession:
    """Human-versus-engine console adapter around a game.

    Notes:
    - Core remains pure; I/O is isolated here.
    - Commands: any move text, ``undo``, ``exit``.
    """

    def __init__(
        self,
        engine: Optional[Engine] = None,
        engine_color: Optional[Color] = Color.BLACK,
        game: Optional[Game] = None,
        color_output: bool = True,
    ) -> None:
        self.game = game or Game.new()
        self.engine = engine
        self.engine_color = engine_color if engine is not None else None
        self.color_output = color_output

    # ---- Output ----
    def show(self, write: Writer) -> None:
        state = self.game.state
        for i, move in enumerate(self.game.legal_moves(), start=1):
            write(f"{i}. {move} ({state.get_move_cost(move)})")
        write(render_state(state, self.color_output))

    def game_over(self) -> Optional[str]:
        winner = self.game.winner()
        if winner is not None:
            return f"{winner.label} wins by resignation"
        if self.game.checkmate():
            return f"Checkmate, {self.game.turn().enemy.label} wins"
        if self.game.stalemate():
            return "Stalemate"
        return None

    # ---- Command handlers ----
    def cmd_engine(self, write: Writer) -> None:
        assert self.engine is not None
        write("Engine is thinking...")
        result = self.engine.search(self.game.state)
        if result.best_move is None:
            write("Engine has no move")
            return
        write(f"Engine move: {result.best_move}")
        self.game.apply_move(result.best_move)

    def cmd_move(self, text: str, write: Writer) -> None:
        try:
            move = parse_move(text)
        except MoveParseError:
            write("Invalid move!")
            return
        try:
            self.game.apply_move(move)
        except IllegalMoveError:
            write("Illegal move!")
            return
        logger.debug("played %s", move)

    def cmd_undo(self, write: Writer) -> None:
        try:
            self.game.undo_move()
            if self.engine_color is not None and self.game.turn() is self.engine_color:
                self.game.undo_move()
        except ValueError as e:
            write(str(e))

    def engine_to_move(self) -> bool:
        return self.engine_color is not None and self.game.turn() is self.engine_color

    def run(self, lines: Iterable[str], write: Writer) -> None:
        """Play until the game ends, ``exit`` is read, or input runs out."""
        source: Iterator[str] = iter(lines)
        while True:
            self.show(write)
            outcome = self.game_over()
            if outcome is not None:
                write(outcome)
                return
            if self.engine_to_move():
                self.cmd_engine(write)
                continue
            write("Enter a move:\n> ")
            try:
                line = next(source).strip()
            except StopIteration:
                return
            if line == "exit":
                return
            if line == "undo":
                self.cmd_undo(write)
            elif line:
                self.cmd_move(line, write)


def _default_writer(line: str) -> None:
    # Ensure newline termination and immediate flush
    sys.stdout.write(line + "\n")
    sys.stdout.flush()


def run_console(session: Optional[ConsoleSession] = None) -> None:
    (session or ConsoleSession()).run(sys.stdin, _default_writer)
