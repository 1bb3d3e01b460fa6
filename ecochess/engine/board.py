from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from .castling import CastlingRights, castling_side_for
from .geometry import (
    ATTACK_MASKS,
    BACK_RANK,
    BETWEEN,
    CANDIDATES,
    NUM_SECTORS,
    PROMOTIONS,
    SECTOR_MASKS,
    TILES,
    CastlingSide,
    Color,
    Piece,
    PieceType,
    Tile,
    iter_bits,
    king_castling_destination,
    king_start,
    rook_castling_destination,
    rook_start,
)
from .move import Castling, FromTo, Many, Move, Pass, PieceTo, Purchase, Resign
from .movegen import legal_moves as generate_legal_moves


logger = logging.getLogger(__name__)


STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

# Invariant checking runs only in debug interpreters (disabled by ``python -O``).
INSERT_SANITY_CHECKS = __debug__

# Piece indices for the twelve masks
WP, WN, WB, WR, WQ, WK, BP, BN, BB, BR, BQ, BK = range(12)

_KING_INDEX = {Color.WHITE: WK, Color.BLACK: BK}
_KNIGHT_INDICES = (WN, BN)


class IllegalMoveError(ValueError):
    """Raised by ``apply`` when a move is not legal in the current position."""


@dataclass
class Board:
    """Bitboard position with legality, check and move application.

    Notes:
    - Squares are 0..63 (a1=0 .. h8=63), rank-major from white's perspective.
    - ``bb`` holds one mask per colored piece kind, indexed WP..BK.
    - A board is cheap to ``copy``; speculative moves are tried on copies.
    """

    bb: List[int]
    turn: Color = Color.WHITE
    castling: CastlingRights = field(default_factory=CastlingRights.none)
    en_passant: Optional[Tile] = None
    winner: Optional[Color] = None

    # --- construction -----------------------------------------------------

    @classmethod
    def empty(cls) -> "Board":
        """Board with no pieces, no castling rights and White to move."""
        return cls(bb=[0] * 12)

    @classmethod
    def startpos(cls) -> "Board":
        return cls.from_fen(STARTPOS_FEN)

    @classmethod
    def from_fen(cls, fen: str) -> "Board":
        """Create a board from a FEN string.

        Args:
            fen (str): Full six-field FEN, or just its first four fields. Move
                counters are validated but not kept.

        Returns:
            Board: Board holding the encoded position.

        Raises:
            ValueError: If ``fen`` is empty, has the wrong number of fields,
                contains invalid placement, side, castling or en-passant data,
                or describes castling rights or an en-passant target that the
                placement cannot support.
        """
        if not fen or not isinstance(fen, str):
            raise ValueError("FEN must be a non-empty string")
        parts = fen.strip().split()
        if len(parts) not in (4, 6):
            raise ValueError("FEN must have 4 or 6 fields")
        placement, stm, castling, ep = parts[:4]

        ranks = placement.split("/")
        if len(ranks) != 8:
            raise ValueError("FEN board must have 8 ranks")
        bb = [0] * 12
        for rank_idx, rank in enumerate(ranks[::-1]):
            file_idx = 0
            for ch in rank:
                if ch.isdigit():
                    n = int(ch)
                    if n < 1 or n > 8:
                        raise ValueError("invalid empty count in FEN rank")
                    file_idx += n
                else:
                    if ch not in "PNBRQKpnbrqk":
                        raise ValueError(f"invalid piece in FEN: {ch!r}")
                    if file_idx >= 8:
                        raise ValueError("too many squares in FEN rank")
                    p = Piece.from_char(ch)
                    bb[p.index] |= 1 << (rank_idx * 8 + file_idx)
                    file_idx += 1
            if file_idx != 8:
                raise ValueError("rank does not sum to 8 squares in FEN")

        if stm not in ("w", "b"):
            raise ValueError("side to move must be 'w' or 'b'")

        rights = CastlingRights.from_fen(castling)

        en_passant: Optional[Tile] = None
        if ep != "-":
            en_passant = Tile.parse(ep)

        if len(parts) == 6:
            halfmove, fullmove = parts[4:]
            if not halfmove.isdigit() or not fullmove.isdigit() or int(fullmove) < 1:
                raise ValueError("invalid move counters in FEN")

        board = cls(bb=bb, turn=Color(stm), castling=rights, en_passant=en_passant)
        problems = board.invariant_violations()
        if problems:
            raise ValueError(problems[0])
        return board

    def to_fen(self) -> str:
        """Serialize placement, side to move, castling and en-passant fields."""
        rows = []
        for rank in range(7, -1, -1):
            row = ""
            empty = 0
            for file in range(8):
                piece = self.get_piece(TILES[rank * 8 + file])
                if piece is None:
                    empty += 1
                    continue
                if empty:
                    row += str(empty)
                    empty = 0
                row += piece.char
            if empty:
                row += str(empty)
            rows.append(row)
        ep = str(self.en_passant) if self.en_passant is not None else "-"
        return f"{'/'.join(rows)} {self.turn.value} {self.castling.to_fen()} {ep}"

    def copy(self) -> "Board":
        return Board(
            bb=list(self.bb),
            turn=self.turn,
            castling=self.castling,
            en_passant=self.en_passant,
            winner=self.winner,
        )

    # --- invariants -------------------------------------------------------

    def invariant_violations(self) -> List[str]:
        problems: List[str] = []
        seen = 0
        for i, mask in enumerate(self.bb):
            if seen & mask:
                problems.append(f"overlapping occupancy on mask {Piece.from_index(i).char}")
            seen |= mask

        for color in (Color.WHITE, Color.BLACK):
            for side in (CastlingSide.KING, CastlingSide.QUEEN):
                if not self.castling.can_castle(color, side):
                    continue
                if self.get_piece(king_start(color)) != Piece(color, PieceType.KING):
                    problems.append(f"{color.label} king is off its home square but may castle")
                if self.get_piece(rook_start(color, side)) != Piece(color, PieceType.ROOK):
                    problems.append(
                        f"{color.label} rook is off {rook_start(color, side)} but may castle"
                    )

        ep = self.en_passant
        if ep is not None:
            if ep.rank not in (2, 5):
                problems.append(f"invalid en-passant target {ep}")
            else:
                owner = ep.player_side
                if self.get_piece(ep.advance(owner, 1)) != Piece(owner, PieceType.PAWN):
                    problems.append(f"en-passant target {ep} has no pawn in front of it")
                if owner is self.turn:
                    problems.append(f"en-passant target {ep} belongs to the side to move")
        return problems

    def sanity_check(self) -> bool:
        """Return ``True`` when masks, castling rights and en passant are consistent.

        Every violation is logged at ERROR level.
        """
        problems = self.invariant_violations()
        for problem in problems:
            logger.error("board invariant violated: %s", problem)
        if problems:
            logger.error("offending position:\n%s", self)
        return not problems

    # --- mask primitives --------------------------------------------------

    def get_piece(self, tile: Tile) -> Optional[Piece]:
        bit = tile.bit
        for i, mask in enumerate(self.bb):
            if mask & bit:
                return Piece.from_index(i)
        return None

    def has_piece_on(self, tile: Tile) -> bool:
        return bool(self.occupancy() & tile.bit)

    def remove_piece(self, tile: Tile) -> Optional[Piece]:
        piece = self.get_piece(tile)
        clear = ~tile.bit
        for i in range(12):
            self.bb[i] &= clear
        return piece

    def move_piece(self, from_tile: Tile, to_tile: Tile) -> None:
        """Relocate whatever stands on ``from_tile``, replacing any occupant of ``to_tile``."""
        _move_bits(self.bb, from_tile.index, to_tile.index)

    def place_piece(self, tile: Tile, piece: Piece) -> None:
        self.remove_piece(tile)
        self.bb[piece.index] |= tile.bit

    def spawn(self, kind: PieceType, tile: Tile) -> None:
        """Place a ``kind`` piece of the side to move on ``tile``, clearing it first."""
        self.place_piece(tile, Piece(self.turn, kind))

    def occupancy(self) -> int:
        occ = 0
        for mask in self.bb:
            occ |= mask
        return occ

    def color_occupancy(self, color: Color) -> int:
        start = 0 if color is Color.WHITE else 6
        occ = 0
        for mask in self.bb[start:start + 6]:
            occ |= mask
        return occ

    def pieces(self, color: Optional[Color] = None) -> Iterator[Tuple[Tile, Piece]]:
        """Yield (tile, piece) pairs in tile-index order."""
        occ = self.occupancy() if color is None else self.color_occupancy(color)
        for sq in iter_bits(occ):
            tile = TILES[sq]
            piece = self.get_piece(tile)
            if piece is not None:
                yield tile, piece

    def piece_count(self, color: Color, kind: PieceType) -> int:
        return self.bb[Piece(color, kind).index].bit_count()

    # --- turn and state accessors ----------------------------------------

    def whose_turn(self) -> Color:
        return self.turn

    def set_turn(self, color: Color) -> None:
        """Hand the move to ``color``, dropping an en-passant target it cannot take."""
        self.turn = color
        if self.en_passant is not None and self.en_passant.player_side is color:
            self.en_passant = None

    def get_castling_rights(self) -> CastlingRights:
        return self.castling

    def get_en_passant(self) -> Optional[Tile]:
        return self.en_passant

    # --- attacks and check ------------------------------------------------

    def is_blocked(self, from_tile: Tile, to_tile: Tile) -> bool:
        """True if any piece stands strictly between the two tiles on the walk from one to the other."""
        return bool(BETWEEN[from_tile.index][to_tile.index] & self.occupancy())

    def attacking_bits(self, color: Color) -> int:
        """Union of squares attacked by ``color``.

        Knight attacks are taken raw; every other attack square is kept only
        when the straight path to it is free of pieces of either color.
        """
        occ = self.occupancy()
        start = 0 if color is Color.WHITE else 6
        attacks = 0
        for idx in range(start, start + 6):
            table = ATTACK_MASKS[idx]
            for sq in iter_bits(self.bb[idx]):
                mask = table[sq]
                if idx in _KNIGHT_INDICES:
                    attacks |= mask
                    continue
                between = BETWEEN[sq]
                for target in iter_bits(mask & ~attacks):
                    if not between[target] & occ:
                        attacks |= 1 << target
        return attacks

    def white_attacking_bits(self) -> int:
        return self.attacking_bits(Color.WHITE)

    def black_attacking_bits(self) -> int:
        return self.attacking_bits(Color.BLACK)

    def is_in_check(self, color: Color) -> bool:
        king = self.bb[_KING_INDEX[color]]
        return bool(king and king & self.attacking_bits(color.enemy))

    def is_in_checkmate(self, color: Color) -> bool:
        """``color`` is in check and no piece of ``color`` has a legal move."""
        if not self.is_in_check(color):
            return False
        return not self._has_legal_piece_move(color)

    def is_stalemate(self) -> bool:
        """The side to move is not in check and has no legal move."""
        color = self.turn
        if self.is_in_check(color):
            return False
        if self._has_legal_piece_move(color):
            return False
        king = king_start(color)
        return not any(
            self.can_castle(king, rook_start(color, side))
            for side in (CastlingSide.KING, CastlingSide.QUEEN)
        )

    def _has_legal_piece_move(self, color: Color) -> bool:
        probe = self
        if self.turn is not color:
            probe = self.copy()
            probe.set_turn(color)
        for tile, piece in probe.pieces(color):
            for to in CANDIDATES[piece.index][tile.index]:
                if probe.is_legal_piece_move(tile, to):
                    return True
        return False

    def _is_in_check_after_move(self, color: Color, from_tile: Tile, to_tile: Tile) -> bool:
        probe = self.copy()
        if self._is_en_passant_capture(from_tile, to_tile):
            probe.remove_piece(self.en_passant.advance(self.turn, -1))  # type: ignore[union-attr]
        probe.move_piece(from_tile, to_tile)
        return probe.is_in_check(color)

    # --- castling ---------------------------------------------------------

    def is_castling_move(self, from_tile: Tile, to_tile: Tile) -> bool:
        piece = self.get_piece(from_tile)
        if piece is None or piece.kind is not PieceType.KING:
            return False
        return self.castling.is_castling_move(piece.color, from_tile, to_tile)

    def can_castle(self, king: Tile, rook: Tile) -> bool:
        """Whether the king on ``king`` may castle toward ``rook``.

        ``rook`` may be the rook's home square or the king's destination.
        Requires a live right, a king and rook of the same color on their home
        squares, the king out of check, and every square between them empty
        and unattacked.
        """
        piece = self.get_piece(king)
        if piece is None or piece.kind is not PieceType.KING:
            return False
        color = piece.color
        side = castling_side_for(color, king, rook)
        if side is None or not self.castling.can_castle(color, side):
            return False
        rook_home = rook_start(color, side)
        if self.get_piece(rook_home) != Piece(color, PieceType.ROOK):
            return False
        if self.is_in_check(color):
            return False
        path = BETWEEN[king.index][rook_home.index]
        return not path & (self.occupancy() | self.attacking_bits(color.enemy))

    # --- legality ---------------------------------------------------------

    def is_legal_piece_move(self, from_tile: Tile, to_tile: Tile) -> bool:
        """Whether moving the piece on ``from_tile`` to ``to_tile`` is legal.

        Castling is encoded as the king's square to the rook's square (or to
        the king's destination).
        """
        piece = self.get_piece(from_tile)
        if piece is None or piece.color is not self.turn:
            return False
        target = self.get_piece(to_tile)
        if target is not None and target.color is piece.color:
            return self.is_castling_move(from_tile, to_tile) and self.can_castle(from_tile, to_tile)
        if self.is_castling_move(from_tile, to_tile):
            return self.can_castle(from_tile, to_tile)
        if not piece.can_move(from_tile, to_tile, target is not None, self.en_passant):
            return False
        if piece.kind is not PieceType.KNIGHT and self.is_blocked(from_tile, to_tile):
            return False
        return not self._is_in_check_after_move(piece.color, from_tile, to_tile)

    def resolve_piece_to(self, kind: PieceType, to_tile: Tile) -> Optional[Tile]:
        """First tile, in index order, whose ``kind`` piece may legally move to ``to_tile``."""
        mask = self.bb[Piece(self.turn, kind).index]
        for sq in iter_bits(mask):
            if self.is_legal_piece_move(TILES[sq], to_tile):
                return TILES[sq]
        return None

    def is_valid_promotion(self, from_tile: Tile, to_tile: Tile) -> bool:
        piece = self.get_piece(from_tile)
        return (
            piece is not None
            and piece.kind is PieceType.PAWN
            and to_tile.rank == BACK_RANK[piece.color.enemy.value]
        )

    def is_legal_move(self, move: Move) -> bool:
        """Whether ``move`` may be applied in the current position.

        Purchases and passes are never legal on a bare board; a compound move
        is legal when each step is legal after the previous ones were played.
        """
        if isinstance(move, Castling):
            return self.can_castle(king_start(self.turn), rook_start(self.turn, move.side))
        if isinstance(move, FromTo):
            if move.promotion is not None and move.promotion not in PROMOTIONS:
                return False
            return self.is_legal_piece_move(move.from_tile, move.to_tile)
        if isinstance(move, PieceTo):
            if move.promotion is not None and move.promotion not in PROMOTIONS:
                return False
            return self.resolve_piece_to(move.kind, move.to_tile) is not None
        if isinstance(move, Resign):
            return True
        if isinstance(move, (Pass, Purchase)):
            return False
        if not move.moves:
            return False
        turn = self.turn
        probe = self.copy()
        for sub in move.moves:
            probe.set_turn(turn)
            if not probe.is_legal_move(sub):
                return False
            probe.apply(sub)
        return True

    def legal_moves(self) -> List[Move]:
        return generate_legal_moves(self)

    # --- application ------------------------------------------------------

    def apply(self, move: Move) -> None:
        """Play ``move`` for the side to move.

        Raises:
            IllegalMoveError: If the move is not legal. Single moves leave the
                board untouched; a compound move keeps the sub-moves applied
                before the failing one.
        """
        if INSERT_SANITY_CHECKS:
            assert self.sanity_check(), "board invariants violated"
        logger.debug("applying %s for %s", move, self.turn.label)

        if isinstance(move, Many):
            if not move.moves:
                return
            turn = self.turn
            for sub in move.moves:
                self.set_turn(turn)
                self.apply(sub)
            self.set_turn(turn.enemy)
            return

        if isinstance(move, FromTo):
            self._apply_from_to(move.from_tile, move.to_tile, move.promotion)
        elif isinstance(move, PieceTo):
            from_tile = self.resolve_piece_to(move.kind, move.to_tile)
            if from_tile is None:
                raise IllegalMoveError(f"no {move.kind.name.lower()} can reach {move.to_tile}")
            self._apply_from_to(from_tile, move.to_tile, move.promotion)
        elif isinstance(move, Castling):
            king = king_start(self.turn)
            rook = rook_start(self.turn, move.side)
            if not self.can_castle(king, rook):
                raise IllegalMoveError("castling not allowed")
            self._perform_castling(move.side)
        elif isinstance(move, Pass):
            self.en_passant = None
        elif isinstance(move, Resign):
            self.en_passant = None
            self.winner = self.turn.enemy
            logger.info("%s resigned", self.turn.label)
        else:
            raise IllegalMoveError("purchases require an economy")
        self.turn = self.turn.enemy

    def _apply_from_to(self, from_tile: Tile, to_tile: Tile, promotion: Optional[PieceType]) -> None:
        if promotion is not None and promotion not in PROMOTIONS:
            raise IllegalMoveError(f"cannot promote to {promotion.name.lower()}")
        if not self.is_legal_piece_move(from_tile, to_tile):
            raise IllegalMoveError(f"illegal move {from_tile}{to_tile}")
        if self.is_castling_move(from_tile, to_tile):
            side = castling_side_for(self.turn, from_tile, to_tile)
            assert side is not None
            self._perform_castling(side)
        else:
            self._perform_move(from_tile, to_tile, promotion)

    def _perform_castling(self, side: CastlingSide) -> None:
        color = self.turn
        self.move_piece(king_start(color), king_castling_destination(color, side))
        self.move_piece(rook_start(color, side), rook_castling_destination(color, side))
        self.castling = self.castling.disable_color(color)
        self.en_passant = None
        logger.debug("%s castled %s", color.label, side.value)

    def _is_en_passant_capture(self, from_tile: Tile, to_tile: Tile) -> bool:
        return (
            self.en_passant is not None
            and to_tile == self.en_passant
            and from_tile.file != to_tile.file
            and self.bb[Piece(self.turn, PieceType.PAWN).index] & from_tile.bit != 0
            and not self.has_piece_on(to_tile)
        )

    def _perform_move(self, from_tile: Tile, to_tile: Tile, promotion: Optional[PieceType]) -> None:
        piece = self.get_piece(from_tile)
        assert piece is not None
        rights = self.castling.after_move(from_tile, to_tile)
        if rights != self.castling:
            logger.debug("castling rights now %s", rights.to_fen())
        self.castling = rights

        if self._is_en_passant_capture(from_tile, to_tile):
            captured = self.en_passant.advance(self.turn, -1)  # type: ignore[union-attr]
            self.remove_piece(captured)
            self.move_piece(from_tile, to_tile)
        elif self.is_valid_promotion(from_tile, to_tile):
            self.remove_piece(from_tile)
            self.spawn(promotion or PieceType.QUEEN, to_tile)
            logger.info("%s promoted on %s", self.turn.label, to_tile)
        else:
            self.move_piece(from_tile, to_tile)

        self.en_passant = None
        if piece.kind is PieceType.PAWN and abs(to_tile.rank - from_tile.rank) == 2:
            self.en_passant = from_tile.advance(piece.color, 1)
            logger.debug("en passant possible on %s", self.en_passant)

    # --- territory --------------------------------------------------------

    def get_controlled_sectors(self, color: Color) -> List[bool]:
        """For each of the 16 sectors, whether ``color`` has the larger material there.

        Material is counted in whole units (fractional values truncate); ties
        leave the sector uncontrolled.
        """
        return [self.who_controls_sector(s) is color for s in range(NUM_SECTORS)]

    def who_controls_sector(self, sector: int) -> Optional[Color]:
        mask = SECTOR_MASKS[sector]
        totals = {Color.WHITE: 0, Color.BLACK: 0}
        for idx, bits in enumerate(self.bb):
            n = (bits & mask).bit_count()
            if n:
                piece = Piece.from_index(idx)
                totals[piece.color] += n * int(piece.base_value)
        if totals[Color.WHITE] > totals[Color.BLACK]:
            return Color.WHITE
        if totals[Color.BLACK] > totals[Color.WHITE]:
            return Color.BLACK
        return None

    def __str__(self) -> str:
        lines = []
        for rank in range(7, -1, -1):
            row = []
            for file in range(8):
                piece = self.get_piece(TILES[rank * 8 + file])
                row.append(piece.char if piece else ".")
            lines.append(f"{rank + 1} {' '.join(row)}")
        lines.append("  a b c d e f g h")
        return "\n".join(lines)


def _move_bits(bb: List[int], src: int, dst: int) -> None:
    src_bit = 1 << src
    dst_bit = 1 << dst
    for i in range(12):
        bb[i] &= ~dst_bit
    for i in range(12):
        if bb[i] & src_bit:
            bb[i] = (bb[i] & ~src_bit) | dst_bit
