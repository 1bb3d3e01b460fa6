from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .geometry import PROMOTIONS, CastlingSide, PieceType, Tile


class MoveParseError(ValueError):
    """Raised when a line of move text does not follow the move grammar."""


@dataclass(frozen=True)
class FromTo:
    """Move whatever stands on ``from_tile`` to ``to_tile``.

    Attributes:
        from_tile (Tile): Origin square.
        to_tile (Tile): Destination square. For castling this may be the rook's
            home square or the king's destination.
        promotion (Optional[PieceType]): Piece a pawn becomes on the last rank;
            queen when omitted.
    """

    from_tile: Tile
    to_tile: Tile
    promotion: Optional[PieceType] = None

    def __str__(self) -> str:
        promo = self.promotion.letter if self.promotion else ""
        return f"{self.from_tile}{self.to_tile}{promo}"


@dataclass(frozen=True)
class PieceTo:
    """Move a piece of ``kind`` to ``to_tile``; the board resolves which one."""

    kind: PieceType
    to_tile: Tile
    promotion: Optional[PieceType] = None

    def __str__(self) -> str:
        promo = self.promotion.letter if self.promotion else ""
        return f"{self.kind.letter}{self.to_tile}{promo}"


@dataclass(frozen=True)
class Purchase:
    """Buy a piece of ``kind`` and place it on ``to_tile``. Economy only."""

    kind: PieceType
    to_tile: Tile

    def __str__(self) -> str:
        return f"${self.kind.letter}{self.to_tile}"


@dataclass(frozen=True)
class Castling:
    side: CastlingSide

    def __str__(self) -> str:
        return self.side.value


@dataclass(frozen=True)
class Pass:
    def __str__(self) -> str:
        return "pass"


@dataclass(frozen=True)
class Resign:
    def __str__(self) -> str:
        return "resign"


@dataclass(frozen=True)
class Many:
    """Compound turn: sub-moves played in order by the same side."""

    moves: Tuple["Move", ...]

    def __str__(self) -> str:
        return " ".join(str(m) for m in self.moves)


Move = Union[FromTo, PieceTo, Purchase, Castling, Pass, Resign, Many]


_FROM_TO_RE = re.compile(r"^([a-h][1-8])([a-h][1-8])([NBRQnbrq])?$")
_PIECE_TO_RE = re.compile(r"^([PNBRQK])([a-h][1-8])([NBRQnbrq])?$")
_PAWN_TO_RE = re.compile(r"^([a-h][1-8])([NBRQnbrq])?$")
_PURCHASE_RE = re.compile(r"^\$([PNBRQK])([a-h][1-8])$")


def parse_move(text: str) -> Move:
    """Parse one line of move text.

    Args:
        text (str): Whitespace-separated tokens such as ``"e2e4"``, ``"Nf3"``,
            ``"e4"``, ``"$Qe8"``, ``"O-O"``, ``"pass"`` or ``"resign"``.

    Returns:
        Move: The single move, or a ``Many`` when the line has several tokens.

    Raises:
        MoveParseError: If the line is empty or any token is malformed.
    """
    tokens = text.split()
    if not tokens:
        raise MoveParseError("empty move")
    moves = tuple(parse_token(tok) for tok in tokens)
    if len(moves) == 1:
        return moves[0]
    return Many(moves)


def parse_token(token: str) -> Move:
    """Parse a single move token; see ``parse_move``."""
    if token == "O-O":
        return Castling(CastlingSide.KING)
    if token == "O-O-O":
        return Castling(CastlingSide.QUEEN)
    if token == "pass":
        return Pass()
    if token == "resign":
        return Resign()

    m = _PURCHASE_RE.match(token)
    if m:
        return Purchase(PieceType.from_letter(m.group(1)), Tile.parse(m.group(2)))
    m = _FROM_TO_RE.match(token)
    if m:
        return FromTo(Tile.parse(m.group(1)), Tile.parse(m.group(2)), _promotion(m.group(3)))
    m = _PIECE_TO_RE.match(token)
    if m:
        return PieceTo(PieceType.from_letter(m.group(1)), Tile.parse(m.group(2)), _promotion(m.group(3)))
    m = _PAWN_TO_RE.match(token)
    if m:
        return PieceTo(PieceType.PAWN, Tile.parse(m.group(1)), _promotion(m.group(2)))
    raise MoveParseError(f"invalid move: {token!r}")


def _promotion(letter: Optional[str]) -> Optional[PieceType]:
    if not letter:
        return None
    kind = PieceType.from_letter(letter)
    if kind not in PROMOTIONS:
        raise MoveParseError(f"invalid promotion piece: {letter!r}")
    return kind


def describe(move: Move) -> str:
    """Human readable phrase for ``move``."""
    if isinstance(move, FromTo):
        text = f"move {move.from_tile} to {move.to_tile}"
    elif isinstance(move, PieceTo):
        text = f"move {move.kind.name.lower()} to {move.to_tile}"
    elif isinstance(move, Purchase):
        return f"purchase {move.kind.letter} at {move.to_tile}"
    elif isinstance(move, Castling):
        return "castling kingside" if move.side is CastlingSide.KING else "castling queenside"
    elif isinstance(move, Pass):
        return "pass"
    elif isinstance(move, Resign):
        return "resign"
    else:
        return ", then ".join(describe(m) for m in move.moves)
    if move.promotion is not None:
        text += f" promoting to {move.promotion.name.lower()}"
    return text
