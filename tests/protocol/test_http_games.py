from __future__ import annotations

from fastapi.testclient import TestClient

from ecochess.economy.currency import Currency
from ecochess.economy.market import Market
from ecochess.engine.geometry import PieceType
from ecochess.protocol.http.app import create_app


def _client(market: Market | None = None) -> TestClient:
    return TestClient(create_app(market))


def _new_game(client: TestClient) -> str:
    r = client.post("/api/games")
    assert r.status_code == 200
    return r.json()["game_id"]


def test_healthz() -> None:
    r = _client().get("/healthz")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_new_game_state() -> None:
    client = _client()
    game_id = _new_game(client)
    state = client.get(f"/api/games/{game_id}/state").json()
    assert state["game_id"] == game_id
    assert state["fen"] == "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq -"
    assert state["turn"] == "w"
    assert len(state["legal_moves"]) == 20
    assert state["balances"] == {"w": 40, "b": 0}
    assert state["controlled_sectors"]["w"][:4] == [True] * 4
    assert state["in_check"] is False
    assert state["winner"] is None
    assert state["last_move"] is None


def test_move_pays_and_collects() -> None:
    client = _client()
    game_id = _new_game(client)
    r = client.post(f"/api/games/{game_id}/move", json={"move": "e4"})
    assert r.status_code == 200
    state = r.json()
    assert state["turn"] == "b"
    assert state["last_move"] == "Pe4"
    assert state["move_history"] == ["Pe4"]
    assert state["balances"] == {"w": 30, "b": 40}
    assert state["fen"].endswith(" b KQkq e3")


def test_undo_restores_prior_state() -> None:
    client = _client()
    game_id = _new_game(client)
    start = client.get(f"/api/games/{game_id}/state").json()
    client.post(f"/api/games/{game_id}/move", json={"move": "e2e4"})

    r = client.post(f"/api/games/{game_id}/undo")
    assert r.status_code == 200
    state = r.json()
    assert state["fen"] == start["fen"]
    assert state["balances"] == start["balances"]
    assert state["move_history"] == []


def test_purchase_through_the_api() -> None:
    client = _client(Market().with_piece_price(PieceType.QUEEN, Currency(5)))
    game_id = _new_game(client)
    r = client.post(f"/api/games/{game_id}/position", json={"fen": "4k3/8/8/8/8/8/8/4K3 w - - 0 1"})
    assert r.status_code == 200
    assert "$Qd1" in r.json()["legal_moves"]

    r = client.post(f"/api/games/{game_id}/move", json={"move": "$Qd1"})
    assert r.status_code == 200
    state = r.json()
    assert state["fen"] == "4k3/8/8/8/8/8/8/3QK3 b - -"
    assert state["balances"] == {"w": 5, "b": 10}


def test_set_position_reports_check() -> None:
    client = _client()
    game_id = _new_game(client)
    r = client.post(f"/api/games/{game_id}/position", json={"fen": "7k/8/8/8/8/8/5PPP/r5K1 w - - 0 1"})
    state = r.json()
    assert state["in_check"] is True
    assert state["checkmate"] is True
    assert state["stalemate"] is False


def test_resign_sets_winner() -> None:
    client = _client()
    game_id = _new_game(client)
    state = client.post(f"/api/games/{game_id}/move", json={"move": "resign"}).json()
    assert state["winner"] == "b"
    r = client.post(f"/api/games/{game_id}/move", json={"move": "e7e5"})
    assert r.status_code == 400


def test_search_returns_a_legal_move() -> None:
    client = _client()
    game_id = _new_game(client)
    r = client.post(f"/api/games/{game_id}/search", json={"depth": 1, "engine": "material"})
    assert r.status_code == 200
    body = r.json()
    legal = client.get(f"/api/games/{game_id}/state").json()["legal_moves"]
    assert body["best_move"] in legal
    assert body["nodes"] == 21
    assert body["depth"] == 1
    assert body["engine"] == "material"
    assert body["terminal"] is False


def test_search_on_stalemate_is_terminal() -> None:
    client = _client()
    game_id = _new_game(client)
    client.post(f"/api/games/{game_id}/position", json={"fen": "8/8/8/8/8/6r1/K7/1r5r w - - 0 1"})
    body = client.post(f"/api/games/{game_id}/search", json={"depth": 1}).json()
    assert body["best_move"] == "pass"
    assert body["terminal"] is True
    assert body["score"] is None


def test_perft_endpoint() -> None:
    client = _client()
    fen = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
    r = client.post("/api/perft", json={"fen": fen, "depth": 2})
    assert r.status_code == 200
    assert r.json() == {"nodes": 400, "depth": 2}


def test_delete_game() -> None:
    client = _client()
    game_id = _new_game(client)
    assert client.delete(f"/api/games/{game_id}").status_code == 200
    assert client.get(f"/api/games/{game_id}/state").status_code == 404
    assert client.delete(f"/api/games/{game_id}").status_code == 404
