from __future__ import annotations

import logging
from typing import Dict, Optional, Type

from ..eval import Position
from .engine import DEFAULT_DEPTH, Engine, MaterialEngine, RandomEngine, SearchResult, SimpleEngine


logger = logging.getLogger(__name__)

ENGINES: Dict[str, Type[Engine]] = {
    SimpleEngine.name: SimpleEngine,
    MaterialEngine.name: MaterialEngine,
    RandomEngine.name: RandomEngine,
}


def make_engine(name: str, depth: int = DEFAULT_DEPTH, max_workers: Optional[int] = None) -> Engine:
    """Build a registered engine by name.

    Raises:
        ValueError: If ``name`` is not registered or ``depth`` < 1.
    """
    try:
        cls = ENGINES[name]
    except KeyError:
        raise ValueError(f"unknown engine: {name!r}") from None
    return cls(depth=depth, max_workers=max_workers)


class SearchService:
    """Runs a named engine on a position.

    Thin seam between the protocols and the engines: resolves the engine,
    applies depth defaults and reports the result.
    """

    def __init__(self, max_workers: Optional[int] = None) -> None:
        self.max_workers = max_workers

    def search(self, position: Position, depth: int = DEFAULT_DEPTH, engine: str = "simple") -> SearchResult:
        searcher = make_engine(engine, depth=depth, max_workers=self.max_workers)
        logger.debug("searching with %s to depth %d", engine, depth)
        return searcher.search(position)
