from __future__ import annotations

import logging
import math
from typing import List

import pytest

from ecochess.economy.state import EconomicBoard
from ecochess.engine.board import Board
from ecochess.engine.geometry import Color
from ecochess.engine.move import Move, Pass, parse_move
from ecochess.eval import Position
from ecochess.search.engine import Engine, MaterialEngine, RandomEngine, SimpleEngine


class FlatEngine(Engine):
    """Scores every leaf the same, so the first generated move always wins."""

    name = "flat"

    def evaluate(self, position: Position, color: Color) -> float:
        return 0.0


class NoisyGenerator(FlatEngine):
    def legal_moves(self, position: Position) -> List[Move]:
        return [parse_move("e2e5")] + super().legal_moves(position)


def test_finds_back_rank_mate() -> None:
    b = Board.from_fen("6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1")
    res = SimpleEngine(depth=2).search(b)
    assert res.best_move == parse_move("a1a8")
    assert res.score == math.inf
    assert res.depth == 2


def test_depth_one_picks_the_capture() -> None:
    b = Board.from_fen("4k3/8/8/3q4/8/8/8/3RK3 w - - 0 1")
    res = MaterialEngine(depth=1, max_workers=1).search(b)
    assert res.best_move == parse_move("d1d5")
    assert res.score == 5.0


def test_no_moves_scores_negative_infinity() -> None:
    b = Board.from_fen("8/8/8/8/8/6r1/K7/1r5r w - - 0 1")
    assert b.legal_moves() == []
    score, move = SimpleEngine(depth=2).minimax(b, 2)
    assert score == -math.inf
    assert move == Pass()


def test_depth_zero_returns_the_static_score_and_given_move() -> None:
    state = EconomicBoard.new()
    marker = parse_move("e2e4")
    score, move = SimpleEngine().minimax(state, 0, marker)
    assert score == 20
    assert move == marker


def test_ties_go_to_the_first_generated_move() -> None:
    b = Board.startpos()
    first = b.legal_moves()[0]
    for workers in (1, 4):
        for depth in (1, 2):
            assert FlatEngine(depth=depth, max_workers=workers).best_move(b) == first


def test_parallel_and_sequential_searches_agree() -> None:
    state = EconomicBoard.new()
    seq = SimpleEngine(depth=2, max_workers=1).search(state)
    par = SimpleEngine(depth=2, max_workers=4, parallel_plies=2).search(state)
    assert (seq.best_move, seq.score, seq.nodes) == (par.best_move, par.score, par.nodes)


def test_node_count_includes_root_and_leaves() -> None:
    res = SimpleEngine(depth=1).search(EconomicBoard.new())
    assert res.nodes == 21
    assert res.best_move in EconomicBoard.new().legal_moves()


def test_search_does_not_mutate_the_position() -> None:
    state = EconomicBoard.new()
    SimpleEngine(depth=2).search(state)
    assert state.whose_turn() is Color.WHITE
    assert state.get_balance(Color.WHITE).amount == 40


def test_unplayable_generated_move_is_skipped(caplog: pytest.LogCaptureFixture) -> None:
    b = Board.startpos()
    with caplog.at_level(logging.WARNING, logger="ecochess.search.engine"):
        res = NoisyGenerator(depth=1, max_workers=1).search(b)
    assert res.best_move == b.legal_moves()[0]
    assert "could not be applied" in caplog.text


def test_seeded_random_engine_repeats_on_one_worker() -> None:
    b = Board.startpos()
    a = RandomEngine(seed=7, depth=2, max_workers=1).best_move(b)
    c = RandomEngine(seed=7, depth=2, max_workers=1).best_move(b)
    assert a == c
    assert a in b.legal_moves()


def test_depth_must_be_positive() -> None:
    with pytest.raises(ValueError):
        SimpleEngine(depth=0)
    with pytest.raises(ValueError):
        SimpleEngine().search(Board.startpos(), depth=0)
