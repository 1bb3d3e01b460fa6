from __future__ import annotations

import pytest

from ecochess.economy.state import EconomicBoard
from ecochess.search.engine import MaterialEngine, RandomEngine, SimpleEngine
from ecochess.search.service import ENGINES, SearchService, make_engine


def test_registry_names() -> None:
    assert ENGINES == {"simple": SimpleEngine, "material": MaterialEngine, "random": RandomEngine}


def test_make_engine_passes_depth_and_workers() -> None:
    engine = make_engine("material", depth=3, max_workers=2)
    assert isinstance(engine, MaterialEngine)
    assert engine.depth == 3
    assert engine.max_workers == 2


def test_unknown_engine_is_rejected() -> None:
    with pytest.raises(ValueError, match="unknown engine"):
        make_engine("stockfish")


def test_service_search_reports_depth_and_nodes() -> None:
    state = EconomicBoard.new()
    res = SearchService(max_workers=1).search(state, depth=1, engine="material")
    assert res.depth == 1
    assert res.nodes == 21
    assert res.best_move in state.legal_moves()
    assert res.time_ms >= 0
