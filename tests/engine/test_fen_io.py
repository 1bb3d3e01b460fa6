from __future__ import annotations

import pytest

from ecochess.engine.board import STARTPOS_FEN, Board
from ecochess.engine.geometry import Color, Tile
from ecochess.engine.move import parse_move


def test_startpos_roundtrip() -> None:
    b = Board.from_fen(STARTPOS_FEN)
    assert b.to_fen() == "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq -"
    assert Board.from_fen(b.to_fen()) == b


def test_four_field_fen_is_accepted() -> None:
    fen = "4k3/8/8/3pP3/8/8/8/4K3 w - d6"
    b = Board.from_fen(fen)
    assert b.en_passant == Tile.parse("d6")
    assert b.to_fen() == fen


def test_double_push_shows_up_in_fen() -> None:
    b = Board.startpos()
    b.apply(parse_move("e2e4"))
    assert b.to_fen() == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3"
    b.apply(parse_move("Nf6"))
    assert b.to_fen().endswith(" w KQkq -")
    assert b.whose_turn() is Color.WHITE


@pytest.mark.parametrize(
    "fen",
    [
        "",
        "8/8/8/8/8/8/8 w - - 0 1",
        "9/8/8/8/8/8/8/8 w - - 0 1",
        "8/8/8/8/8/8/8/7X w - - 0 1",
        "8/8/8/8/8/8/8/8 x - - 0 1",
        "8/8/8/8/8/8/8/8 w Z - 0 1",
        "8/8/8/8/8/8/8/8 w - e9 0 1",
        "8/8/8/8/8/8/8/8 w - - 0",
        "8/8/8/8/8/8/8/8 w - - a 1",
    ],
)
def test_malformed_fen_is_rejected(fen: str) -> None:
    with pytest.raises(ValueError):
        Board.from_fen(fen)


@pytest.mark.parametrize(
    "fen",
    [
        "4k3/8/8/8/8/8/8/4K3 w K - 0 1",
        "4k2r/8/8/8/8/8/8/4K3 w q - 0 1",
        "4k3/8/8/8/8/8/8/4K3 w - e3 0 1",
        "4k3/8/8/8/4P3/8/8/4K3 w - e4 0 1",
        "4k3/8/8/8/4P3/8/8/4K3 w - e3 0 1",
        "4k3/8/8/3p4/8/8/8/4K3 b - d6 0 1",
    ],
)
def test_inconsistent_fen_is_rejected(fen: str) -> None:
    with pytest.raises(ValueError):
        Board.from_fen(fen)


def test_en_passant_target_must_belong_to_the_side_that_just_moved() -> None:
    b = Board.from_fen("4k3/8/8/8/4P3/8/8/4K3 b - e3 0 1")
    assert b.en_passant == Tile.parse("e3")
    assert b.sanity_check()
    b.set_turn(Color.WHITE)
    assert b.en_passant is None
