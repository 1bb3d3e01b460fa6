"""Board addressing: colors, piece kinds, tiles, sectors and per-tile move tables.

Everything here is pure. The lookup tables are built once at import time and
indexed by square (0..63, a1=0 .. h8=63, rank-major).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Tuple


FILES = "abcdefgh"
RANKS = "12345678"

PAWN_START_RANK = {"w": 1, "b": 6}
BACK_RANK = {"w": 0, "b": 7}

KING_FILE = 4
KINGSIDE_ROOK_FILE = 7
QUEENSIDE_ROOK_FILE = 0

CENTER_SECTORS = frozenset({5, 6, 9, 10})
NUM_SECTORS = 16


class Color(str, Enum):
    WHITE = "w"
    BLACK = "b"

    @property
    def enemy(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE

    @property
    def direction(self) -> int:
        """Rank delta of a forward step for this color."""
        return 1 if self is Color.WHITE else -1

    @property
    def label(self) -> str:
        return "White" if self is Color.WHITE else "Black"


class PieceType(Enum):
    PAWN = 0
    KNIGHT = 1
    BISHOP = 2
    ROOK = 3
    QUEEN = 4
    KING = 5

    @property
    def letter(self) -> str:
        return "PNBRQK"[self.value]

    @property
    def base_value(self) -> float:
        return _BASE_VALUES[self]

    @classmethod
    def from_letter(cls, letter: str) -> "PieceType":
        """Resolve an upper- or lower-case piece letter.

        Raises:
            ValueError: If ``letter`` is not one of ``PNBRQK``.
        """
        idx = "PNBRQK".find(letter.upper()) if len(letter) == 1 else -1
        if idx < 0:
            raise ValueError(f"invalid piece letter: {letter!r}")
        return cls(idx)


_BASE_VALUES: Dict[PieceType, float] = {
    PieceType.PAWN: 1.0,
    PieceType.KNIGHT: 3.0,
    PieceType.BISHOP: 3.15,
    PieceType.ROOK: 5.0,
    PieceType.QUEEN: 9.0,
    PieceType.KING: 100.0,
}

PROMOTIONS: Tuple[PieceType, ...] = (
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.ROOK,
    PieceType.QUEEN,
)
PURCHASES: Tuple[PieceType, ...] = tuple(PieceType)


class CastlingSide(Enum):
    KING = "O-O"
    QUEEN = "O-O-O"

    @property
    def rook_file(self) -> int:
        return KINGSIDE_ROOK_FILE if self is CastlingSide.KING else QUEENSIDE_ROOK_FILE

    @property
    def king_destination_file(self) -> int:
        return 6 if self is CastlingSide.KING else 2

    @property
    def rook_destination_file(self) -> int:
        return 5 if self is CastlingSide.KING else 3


@dataclass(frozen=True)
class Piece:
    """A colored piece. ``index`` is its slot in the board's twelve masks."""

    color: Color
    kind: PieceType

    @property
    def index(self) -> int:
        return self.kind.value + (0 if self.color is Color.WHITE else 6)

    @property
    def char(self) -> str:
        letter = self.kind.letter
        return letter if self.color is Color.WHITE else letter.lower()

    @property
    def base_value(self) -> float:
        return self.kind.base_value

    @classmethod
    def from_index(cls, index: int) -> "Piece":
        return PIECES[index]

    @classmethod
    def from_char(cls, ch: str) -> "Piece":
        kind = PieceType.from_letter(ch)
        return cls(Color.WHITE if ch.isupper() else Color.BLACK, kind)

    def can_move(
        self, from_tile: "Tile", to_tile: "Tile", is_attack: bool, en_passant: Optional["Tile"]
    ) -> bool:
        """Whether the piece's movement pattern allows ``from_tile -> to_tile``.

        Geometry only: occupancy between the squares and king safety are the
        board's concern.
        """
        dr = to_tile.rank - from_tile.rank
        df = to_tile.file - from_tile.file
        adr, adf = abs(dr), abs(df)
        kind = self.kind
        if kind is PieceType.PAWN:
            return _pawn_can_move(self.color, from_tile, to_tile, is_attack, en_passant)
        if kind is PieceType.KNIGHT:
            return (adr, adf) in ((1, 2), (2, 1))
        if kind is PieceType.BISHOP:
            return adr == adf and adr > 0
        if kind is PieceType.ROOK:
            return (adr == 0) != (adf == 0)
        if kind is PieceType.QUEEN:
            return (adr == adf and adr > 0) or ((adr == 0) != (adf == 0))
        return max(adr, adf) == 1

    def __str__(self) -> str:
        return self.char


def _pawn_can_move(
    color: Color, from_tile: "Tile", to_tile: "Tile", is_attack: bool, en_passant: Optional["Tile"]
) -> bool:
    forward = color.direction
    dr = to_tile.rank - from_tile.rank
    adf = abs(to_tile.file - from_tile.file)
    if is_attack:
        return dr == forward and adf == 1
    if en_passant is not None and to_tile == en_passant and dr == forward and adf == 1:
        return True
    if adf != 0:
        return False
    if dr == forward:
        return True
    return dr == 2 * forward and from_tile.rank == PAWN_START_RANK[color.value]


PIECES: Tuple[Piece, ...] = tuple(
    Piece(color, kind) for color in (Color.WHITE, Color.BLACK) for kind in PieceType
)


@dataclass(frozen=True)
class Tile:
    """A board square addressed by (rank, file), both 0..7."""

    rank: int
    file: int

    def __post_init__(self) -> None:
        if not (0 <= self.rank < 8 and 0 <= self.file < 8):
            raise ValueError(f"tile out of range: rank={self.rank} file={self.file}")

    @property
    def index(self) -> int:
        return self.rank * 8 + self.file

    @property
    def bit(self) -> int:
        return 1 << (self.rank * 8 + self.file)

    @property
    def sector(self) -> int:
        return (self.rank // 2) * 4 + self.file // 2

    @property
    def player_side(self) -> Color:
        """The half of the board this tile lies on."""
        return Color.WHITE if self.rank <= 3 else Color.BLACK

    @property
    def castling_side(self) -> CastlingSide:
        return CastlingSide.QUEEN if self.file < 4 else CastlingSide.KING

    @classmethod
    def from_index(cls, index: int) -> "Tile":
        if index < 0 or index > 63:
            raise ValueError(f"invalid square index: {index}")
        return TILES[index]

    @classmethod
    def parse(cls, text: str) -> "Tile":
        """Parse algebraic notation such as ``"e4"``.

        Raises:
            ValueError: If ``text`` is not a valid square.
        """
        if len(text) != 2 or text[0] not in FILES or text[1] not in RANKS:
            raise ValueError(f"invalid square: {text!r}")
        return TILES[RANKS.index(text[1]) * 8 + FILES.index(text[0])]

    def move_by(self, drank: int, dfile: int) -> Optional["Tile"]:
        rank, file = self.rank + drank, self.file + dfile
        if 0 <= rank < 8 and 0 <= file < 8:
            return TILES[rank * 8 + file]
        return None

    def advance(self, color: Color, count: int) -> "Tile":
        """Step ``count`` ranks forward from ``color``'s point of view.

        Raises:
            ValueError: If the step leaves the board.
        """
        tile = self.move_by(color.direction * count, 0)
        if tile is None:
            raise ValueError(f"cannot advance {self} by {count} for {color.label}")
        return tile

    def step_towards(self, target: "Tile") -> "Tile":
        """One unit step toward ``target``; diagonal when both deltas are non-zero."""
        dr = (target.rank > self.rank) - (target.rank < self.rank)
        df = (target.file > self.file) - (target.file < self.file)
        return TILES[(self.rank + dr) * 8 + self.file + df]

    def __str__(self) -> str:
        return FILES[self.file] + RANKS[self.rank]


TILES: Tuple[Tile, ...] = tuple(Tile(i // 8, i % 8) for i in range(64))


def king_start(color: Color) -> Tile:
    return TILES[BACK_RANK[color.value] * 8 + KING_FILE]


def rook_start(color: Color, side: CastlingSide) -> Tile:
    return TILES[BACK_RANK[color.value] * 8 + side.rook_file]


def king_castling_destination(color: Color, side: CastlingSide) -> Tile:
    return TILES[BACK_RANK[color.value] * 8 + side.king_destination_file]


def rook_castling_destination(color: Color, side: CastlingSide) -> Tile:
    return TILES[BACK_RANK[color.value] * 8 + side.rook_destination_file]


def iter_bits(mask: int) -> Iterator[int]:
    """Yield set bit indices of ``mask`` in ascending order."""
    while mask:
        lsb = mask & -mask
        yield lsb.bit_length() - 1
        mask ^= lsb


def popcount(mask: int) -> int:
    return mask.bit_count()


def mask_of(tiles: Iterable[Tile]) -> int:
    m = 0
    for t in tiles:
        m |= t.bit
    return m


# --- sectors ---------------------------------------------------------------

def sector_mask(sector: int) -> int:
    """Bit mask of the four tiles of a 2x2 sector."""
    if sector < 0 or sector >= NUM_SECTORS:
        raise ValueError(f"invalid sector: {sector}")
    rank0 = (sector // 4) * 2
    file0 = (sector % 4) * 2
    sq = rank0 * 8 + file0
    return (0b11 << sq) | (0b11 << (sq + 8))


def is_center_sector(sector: int) -> bool:
    return sector in CENTER_SECTORS


def is_home_sector(sector: int, color: Color) -> bool:
    """White owns the bottom row of sectors, Black the top row."""
    if color is Color.WHITE:
        return 0 <= sector <= 3
    return 12 <= sector <= 15


SECTOR_MASKS: Tuple[int, ...] = tuple(sector_mask(s) for s in range(NUM_SECTORS))


# --- candidate destinations and attack masks -------------------------------

_KNIGHT_STEPS = ((2, 1), (2, -1), (-2, 1), (-2, -1), (1, 2), (1, -2), (-1, 2), (-1, -2))
_KING_STEPS = ((1, 1), (1, -1), (-1, 1), (-1, -1), (1, 0), (-1, 0), (0, 1), (0, -1))


def _steps(tile: Tile, steps: Iterable[Tuple[int, int]]) -> List[Tile]:
    out = []
    for dr, df in steps:
        t = tile.move_by(dr, df)
        if t is not None:
            out.append(t)
    return out


def _rook_candidates(tile: Tile) -> List[Tile]:
    same_file = [TILES[r * 8 + tile.file] for r in range(8)]
    same_rank = [TILES[tile.rank * 8 + f] for f in range(8)]
    return same_file + same_rank


def _bishop_candidates(tile: Tile) -> List[Tile]:
    return [t for t in TILES if abs(t.rank - tile.rank) == abs(t.file - tile.file)]


def _pawn_candidates(color: Color, tile: Tile) -> List[Tile]:
    fwd = color.direction
    steps = [(fwd, 1), (fwd, -1), (fwd, 0)]
    if tile.rank in PAWN_START_RANK.values():
        steps.append((2 * fwd, 0))
    return _steps(tile, steps)


def _candidates_for(piece: Piece, tile: Tile) -> List[Tile]:
    kind = piece.kind
    if kind is PieceType.PAWN:
        return _pawn_candidates(piece.color, tile)
    if kind is PieceType.KNIGHT:
        return _steps(tile, _KNIGHT_STEPS)
    if kind is PieceType.BISHOP:
        return _bishop_candidates(tile)
    if kind is PieceType.ROOK:
        return _rook_candidates(tile)
    if kind is PieceType.QUEEN:
        return _rook_candidates(tile) + _bishop_candidates(tile)
    return _steps(tile, _KING_STEPS)


def _attack_mask_for(piece: Piece, tile: Tile) -> int:
    if piece.kind is PieceType.PAWN:
        fwd = piece.color.direction
        return mask_of(_steps(tile, ((fwd, 1), (fwd, -1))))
    # Slider candidates list their own tile; it is not attacked.
    return mask_of(_candidates_for(piece, tile)) & ~tile.bit


CANDIDATES: Tuple[Tuple[Tuple[Tile, ...], ...], ...] = tuple(
    tuple(tuple(_candidates_for(p, t)) for t in TILES) for p in PIECES
)
ATTACK_MASKS: Tuple[Tuple[int, ...], ...] = tuple(
    tuple(_attack_mask_for(p, t) for t in TILES) for p in PIECES
)


def candidate_tiles(piece: Piece, tile: Tile) -> Tuple[Tile, ...]:
    """Destinations to test for ``piece`` on ``tile``, in generation order.

    Unfiltered by legality: a rook gets its whole file then its whole rank.
    """
    return CANDIDATES[piece.index][tile.index]


def _between(a: Tile, b: Tile) -> int:
    mask = 0
    cur = a
    for _ in range(8):
        if cur == b:
            break
        cur = cur.step_towards(b)
        if cur == b:
            break
        mask |= cur.bit
    return mask


# BETWEEN[a][b]: tiles strictly between a and b along the step_towards walk.
BETWEEN: Tuple[Tuple[int, ...], ...] = tuple(
    tuple(_between(a, b) for b in TILES) for a in TILES
)
