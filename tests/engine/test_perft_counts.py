from __future__ import annotations

import pytest

from ecochess.engine.board import STARTPOS_FEN, Board
from ecochess.engine.perft import divide, perft


KIWIPETE = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"
ENDGAME = "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1"


@pytest.mark.parametrize(
    ("fen", "depth", "expected"),
    [
        (STARTPOS_FEN, 0, 1),
        (STARTPOS_FEN, 1, 20),
        (STARTPOS_FEN, 2, 400),
        (KIWIPETE, 1, 48),
        (ENDGAME, 1, 14),
        (ENDGAME, 2, 191),
    ],
)
def test_perft_matches_reference_counts(fen: str, depth: int, expected: int) -> None:
    assert perft(Board.from_fen(fen), depth) == expected


def test_divide_sums_to_perft() -> None:
    b = Board.from_fen(STARTPOS_FEN)
    counts = divide(b, 2)
    assert len(counts) == 20
    assert all(n == 20 for n in counts.values())
    assert sum(counts.values()) == perft(b, 2)


def test_perft_leaves_position_untouched() -> None:
    b = Board.from_fen(KIWIPETE)
    before = b.to_fen()
    perft(b, 2)
    assert b.to_fen() == before


def test_negative_depth_is_rejected() -> None:
    with pytest.raises(ValueError):
        perft(Board.startpos(), -1)
