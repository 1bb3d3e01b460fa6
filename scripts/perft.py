#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import os
import sys
import time

# Allow running this script directly via `python scripts/perft.py`
# by adding the repo root (which contains `ecochess/`) to sys.path.
REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from ecochess.economy.state import EconomicBoard
from ecochess.engine.board import STARTPOS_FEN, Board
from ecochess.engine.perft import divide, perft


def main() -> None:
    parser = argparse.ArgumentParser(description="Run perft on a given FEN and depth")
    parser.add_argument(
        "--fen", type=str, default=STARTPOS_FEN, help="FEN string (default: startpos)"
    )
    parser.add_argument("--depth", type=int, default=3, help="Perft depth (default: 3)")
    parser.add_argument("--divide", action="store_true", help="Print counts per root move")
    parser.add_argument(
        "--economic", action="store_true", help="Count moves of the economic game (costs, purchases)"
    )
    args = parser.parse_args()

    board = Board.from_fen(args.fen)
    position = EconomicBoard.new(board=board) if args.economic else board
    start = time.perf_counter()
    if args.divide:
        counts = divide(position, args.depth)
        for move, n in counts.items():
            print(f"{move}: {n}")
        nodes = sum(counts.values())
    else:
        nodes = perft(position, args.depth)
    dt = time.perf_counter() - start
    print(f"nodes={nodes} depth={args.depth} time_ms={int(dt*1000)} nps={int(nodes/max(dt,1e-9))}")


if __name__ == "__main__":
    main()
