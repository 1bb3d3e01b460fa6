from __future__ import annotations

from typing import Dict, Protocol, Sequence

from .move import Move


class Position(Protocol):
    def legal_moves(self) -> Sequence[Move]: ...

    def copy(self) -> "Position": ...

    def apply(self, move: Move) -> None: ...


def perft(position: Position, depth: int) -> int:
    """Compute the perft node count for ``position`` at ``depth``.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).

    Works for plain boards and economic boards alike; each child is played on
    its own copy.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1
    moves = position.legal_moves()
    if depth == 1:
        return len(moves)
    nodes = 0
    for m in moves:
        child = position.copy()
        child.apply(m)
        nodes += perft(child, depth - 1)
    return nodes


def divide(position: Position, depth: int) -> Dict[str, int]:
    """Per-root-move perft counts keyed by move text."""
    if depth < 1:
        raise ValueError("depth must be >= 1")
    out: Dict[str, int] = {}
    for m in position.legal_moves():
        child = position.copy()
        child.apply(m)
        out[str(m)] = perft(child, depth - 1)
    return out
