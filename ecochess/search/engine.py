from __future__ import annotations

import logging
import math
import random
import time
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Mapping, Optional, Tuple

from ..engine.board import IllegalMoveError
from ..engine.geometry import Color, PieceType
from ..engine.move import Move, Pass
from ..eval import Position, evaluate_material, evaluate_simple


logger = logging.getLogger(__name__)

DEFAULT_DEPTH = 4


@dataclass
class SearchResult:
    best_move: Optional[Move]
    score: float
    nodes: int
    depth: int
    time_ms: int


class Engine(ABC):
    """Pluggable evaluation on top of a full-width negamax search.

    Subclasses supply ``name`` and ``evaluate``. The search explores every
    legal move to a fixed depth with no pruning; sibling branches at plies
    shallower than ``parallel_plies`` are fanned out over a thread pool, each
    on its own copy of the position, and joined in generation order.
    """

    name = "engine"

    def __init__(
        self,
        depth: int = DEFAULT_DEPTH,
        max_workers: Optional[int] = None,
        parallel_plies: int = 1,
    ) -> None:
        if depth < 1:
            raise ValueError("depth must be >= 1")
        self.depth = depth
        self.max_workers = max_workers
        self.parallel_plies = parallel_plies

    @abstractmethod
    def evaluate(self, position: Position, color: Color) -> float:
        """Static score of ``position`` for ``color``; higher is better for ``color``."""

    def legal_moves(self, position: Position) -> List[Move]:
        return list(position.legal_moves())

    def best_move(self, position: Position) -> Optional[Move]:
        return self.search(position).best_move

    def search(self, position: Position, depth: Optional[int] = None) -> SearchResult:
        depth = self.depth if depth is None else depth
        if depth < 1:
            raise ValueError("depth must be >= 1")
        start = time.perf_counter()
        score, move, nodes = self._negamax(position, depth, None, 0)
        time_ms = int((time.perf_counter() - start) * 1000)
        logger.info(
            "%s searched depth %d: %s (score %s, %d nodes, %d ms)",
            self.name, depth, move, score, nodes, time_ms,
        )
        return SearchResult(best_move=move, score=score, nodes=nodes, depth=depth, time_ms=time_ms)

    def minimax(
        self, position: Position, depth: int, original_move: Optional[Move] = None
    ) -> Tuple[float, Optional[Move]]:
        """Negamax value of ``position`` for the side to move, and the move achieving it.

        At depth 0 the static evaluation is returned with ``original_move``.
        With no legal moves the result is ``(-inf, Pass())``.
        """
        score, move, _ = self._negamax(position, depth, original_move, 0)
        return score, move

    def _negamax(
        self, position: Position, depth: int, original_move: Optional[Move], ply: int
    ) -> Tuple[float, Optional[Move], int]:
        if depth == 0:
            return self.evaluate(position, position.whose_turn()), original_move, 1

        moves = self.legal_moves(position)
        if not moves:
            return -math.inf, Pass(), 1

        if ply < self.parallel_plies and len(moves) > 1 and self.max_workers != 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                futures = [
                    pool.submit(self._branch, position, m, depth, original_move, ply) for m in moves
                ]
                results = [f.result() for f in futures]
        else:
            results = [self._branch(position, m, depth, original_move, ply) for m in moves]

        # max() keeps the first of equal scores, i.e. generation order.
        best_score, best_move, _ = max(results, key=lambda r: r[0])
        nodes = 1 + sum(r[2] for r in results)
        return best_score, best_move, nodes

    def _branch(
        self, position: Position, move: Move, depth: int, original_move: Optional[Move], ply: int
    ) -> Tuple[float, Move, int]:
        child = position.copy()
        try:
            child.apply(move)
        except IllegalMoveError:
            logger.warning("generated move %s could not be applied", move)
            return -math.inf, move, 0
        score, _, nodes = self._negamax(child, depth - 1, original_move or move, ply + 1)
        return -score, move, nodes


class SimpleEngine(Engine):
    """Market-priced material plus half the balance differential."""

    name = "simple"

    def evaluate(self, position: Position, color: Color) -> float:
        return evaluate_simple(position, color)


class MaterialEngine(Engine):
    """Weighted material plus a small share of the balance differential."""

    name = "material"

    def __init__(
        self,
        weights: Optional[Mapping[PieceType, float]] = None,
        balance_weight: float = 0.05,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.weights = weights
        self.balance_weight = balance_weight

    def evaluate(self, position: Position, color: Color) -> float:
        return evaluate_material(position, color, self.weights, self.balance_weight)


class RandomEngine(Engine):
    """Scores every leaf with a random number.

    ``seed`` makes it repeatable when searching on a single worker.
    """

    name = "random"

    def __init__(self, seed: Optional[int] = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self._rng = random.Random(seed)

    def evaluate(self, position: Position, color: Color) -> float:
        return self._rng.random()
