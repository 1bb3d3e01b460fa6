from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from .geometry import (
    CastlingSide,
    Color,
    Tile,
    king_castling_destination,
    king_start,
    rook_start,
)


@dataclass(frozen=True)
class CastlingRights:
    """Four one-way castling flags.

    Flags only ever go from ``True`` to ``False``; every mutator returns a new
    value so a board copy never shares rights with its origin.
    """

    white_king_side: bool = True
    white_queen_side: bool = True
    black_king_side: bool = True
    black_queen_side: bool = True

    @classmethod
    def all(cls) -> "CastlingRights":
        return cls()

    @classmethod
    def none(cls) -> "CastlingRights":
        return cls(False, False, False, False)

    @classmethod
    def from_fen(cls, field: str) -> "CastlingRights":
        """Parse the castling field of a FEN string (``KQkq`` subset or ``-``).

        Raises:
            ValueError: On unknown characters.
        """
        if field == "-":
            return cls.none()
        if not field or any(ch not in "KQkq" for ch in field):
            raise ValueError("invalid castling rights")
        return cls("K" in field, "Q" in field, "k" in field, "q" in field)

    def to_fen(self) -> str:
        out = ""
        if self.white_king_side:
            out += "K"
        if self.white_queen_side:
            out += "Q"
        if self.black_king_side:
            out += "k"
        if self.black_queen_side:
            out += "q"
        return out or "-"

    def can_castle(self, color: Color, side: CastlingSide) -> bool:
        return getattr(self, _flag(color, side))

    def disable(self, color: Color, side: CastlingSide) -> "CastlingRights":
        return replace(self, **{_flag(color, side): False})

    def disable_color(self, color: Color) -> "CastlingRights":
        return self.disable(color, CastlingSide.KING).disable(color, CastlingSide.QUEEN)

    def after_move(self, from_tile: Tile, to_tile: Tile) -> "CastlingRights":
        """Rights left after a piece leaves ``from_tile`` and lands on ``to_tile``.

        A king leaving its home square drops both of its flags; a rook leaving
        (or being captured on) its home square drops that side's flag.
        """
        rights = self
        for color in (Color.WHITE, Color.BLACK):
            if from_tile == king_start(color):
                rights = rights.disable_color(color)
            for side in (CastlingSide.KING, CastlingSide.QUEEN):
                home = rook_start(color, side)
                if from_tile == home or to_tile == home:
                    rights = rights.disable(color, side)
        return rights

    def is_castling_move(self, color: Color, king: Tile, to: Tile) -> bool:
        """Whether ``king -> to`` encodes a still-permitted castling for ``color``."""
        side = castling_side_for(color, king, to)
        return side is not None and self.can_castle(color, side)


def castling_side_for(color: Color, king: Tile, to: Tile) -> Optional[CastlingSide]:
    """Resolve a king-to-square pseudo-move into a castling side.

    The destination may be either the rook's home square or the king's
    post-castling square. Returns ``None`` when the pair encodes no castling.
    """
    if king != king_start(color):
        return None
    for side in (CastlingSide.KING, CastlingSide.QUEEN):
        if to == rook_start(color, side) or to == king_castling_destination(color, side):
            return side
    return None


def _flag(color: Color, side: CastlingSide) -> str:
    prefix = "white" if color is Color.WHITE else "black"
    suffix = "king_side" if side is CastlingSide.KING else "queen_side"
    return f"{prefix}_{suffix}"
