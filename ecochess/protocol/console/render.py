from __future__ import annotations

from typing import List

from ...economy.bank import Bank
from ...economy.state import EconomicBoard
from ...engine.board import Board
from ...engine.geometry import FILES, TILES, Color

RESET = "\033[0m"
BLACK_FG = "\033[30m"
# Light / dark squares, and the same squares inside a sector held by the side not to move
LIGHT = "\033[0;45m"
DARK = "\033[0;46m"
HELD_LIGHT = "\033[0;41m"
HELD_DARK = "\033[0;44m"


def render_board(board: Board, color: bool = True) -> str:
    """Draw the board with rank 8 on top.

    With ``color`` the squares are shaded, and sectors controlled by the side
    that just moved are drawn in the alternate palette.
    """
    if not color:
        return str(board)
    holder = board.whose_turn().enemy
    header = "  " + " ".join(FILES)
    lines: List[str] = [header]
    for rank in range(7, -1, -1):
        row = f"{rank + 1} "
        for file in range(8):
            tile = TILES[rank * 8 + file]
            held = board.who_controls_sector(tile.sector) is holder
            if (rank + file) % 2 == 0:
                bg = HELD_DARK if held else DARK
            else:
                bg = HELD_LIGHT if held else LIGHT
            piece = board.get_piece(tile)
            row += f"{bg}{BLACK_FG}{piece.char if piece else ' '} {RESET}"
        lines.append(f"{row} {rank + 1}")
    lines.append(header)
    return "\n".join(lines)


def render_bank(bank: Bank) -> str:
    label = f"{bank.color.label:<5} {str(bank.balance):>7}"
    edge = "═" * (len(label) + 2)
    return f"╔{edge}╗\n║ {label} ║\n╚{edge}╝"


def render_state(state: EconomicBoard, color: bool = True) -> str:
    """Black's bank, the board, then White's bank."""
    return "\n".join(
        [
            render_bank(state.get_bank(Color.BLACK)),
            render_board(state.board, color),
            render_bank(state.get_bank(Color.WHITE)),
        ]
    )
