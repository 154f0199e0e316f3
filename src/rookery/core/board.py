"""Board - piece placement on an 8x8 board."""

from __future__ import annotations

from rookery.core.enums import Color, PieceType
from rookery.core.move import Move
from rookery.core.piece import Piece
from rookery.core.types import Square, file_of, make_square, rank_of, row_of

_PIECE_TYPE_COUNT = 6
_COLOR_COUNT = 2

_BACK_RANK: tuple[PieceType, ...] = (
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
)
_ID_LETTERS: dict[PieceType, str] = {
    PieceType.PAWN: "p",
    PieceType.KNIGHT: "n",
    PieceType.BISHOP: "b",
    PieceType.ROOK: "r",
    PieceType.QUEEN: "q",
    PieceType.KING: "k",
}


def home_row(color: Color) -> int:
    """Row of *color*'s back rank."""
    return 7 if color == Color.WHITE else 0


def pawn_row(color: Color) -> int:
    """Row *color*'s pawns start on."""
    return 6 if color == Color.WHITE else 1


def castling_rook_squares(king_from: Square, king_to: Square) -> tuple[Square, Square]:
    """Rook origin and destination for a castling king move."""
    row = row_of(king_from)
    if file_of(king_to) > file_of(king_from):
        return make_square(7, row), make_square(5, row)
    return make_square(0, row), make_square(3, row)


class Board:
    """Mutable 64-square board with incremental piece indexes.

    Positions own their board and never mutate it after construction;
    mutation is reserved for building successors and scratch copies.
    """

    __slots__ = ("_squares", "_piece_bitboards", "_color_bitboards", "_king_squares")

    def __init__(self) -> None:
        self._squares: list[Piece | None] = [None] * 64
        # [color][piece_type-1] -> bitboard of occupied squares.
        self._piece_bitboards: list[list[int]] = [
            [0] * _PIECE_TYPE_COUNT for _ in range(_COLOR_COUNT)
        ]
        # [color] -> bitboard of all occupied squares for that color.
        self._color_bitboards: list[int] = [0] * _COLOR_COUNT
        # [color] -> king square cache (None if king missing).
        self._king_squares: list[Square | None] = [None] * _COLOR_COUNT

    @staticmethod
    def _piece_type_index(piece_type: PieceType) -> int:
        return int(piece_type) - 1

    @staticmethod
    def _squares_from_bitboard(bitboard: int) -> list[Square]:
        squares: list[Square] = []
        while bitboard:
            lsb = bitboard & -bitboard
            squares.append(lsb.bit_length() - 1)
            bitboard ^= lsb
        return squares

    # -- Element access -----------------------------------------------------

    def __getitem__(self, sq: Square) -> Piece | None:
        return self._squares[sq]

    def __setitem__(self, sq: Square, piece: Piece | None) -> None:
        old_piece = self._squares[sq]
        if old_piece == piece:
            return

        mask = 1 << sq

        if old_piece is not None:
            old_color_idx = int(old_piece.color)
            old_piece_idx = self._piece_type_index(old_piece.piece_type)
            self._piece_bitboards[old_color_idx][old_piece_idx] &= ~mask
            self._color_bitboards[old_color_idx] &= ~mask
            if (
                old_piece.piece_type == PieceType.KING
                and self._king_squares[old_color_idx] == sq
            ):
                self._king_squares[old_color_idx] = None

        self._squares[sq] = piece

        if piece is None:
            return

        color_idx = int(piece.color)
        piece_idx = self._piece_type_index(piece.piece_type)
        self._piece_bitboards[color_idx][piece_idx] |= mask
        self._color_bitboards[color_idx] |= mask
        if piece.piece_type == PieceType.KING:
            self._king_squares[color_idx] = sq

    def is_empty(self, sq: Square) -> bool:
        return self._squares[sq] is None

    # -- Query helpers ------------------------------------------------------

    def pieces(self, color: Color, piece_type: PieceType) -> list[Square]:
        """Squares occupied by *color*'s *piece_type*."""
        bitboard = self._piece_bitboards[int(color)][self._piece_type_index(piece_type)]
        return self._squares_from_bitboard(bitboard)

    def pieces_bitboard(self, color: Color, piece_type: PieceType) -> int:
        """Bitboard of squares occupied by *color*'s *piece_type*."""
        return self._piece_bitboards[int(color)][self._piece_type_index(piece_type)]

    def has_piece(self, color: Color, piece_type: PieceType) -> bool:
        """Whether *color* has at least one piece of *piece_type*."""
        return bool(self.pieces_bitboard(color, piece_type))

    def all_pieces_bitboard(self, color: Color) -> int:
        """Bitboard of all squares occupied by *color*."""
        return self._color_bitboards[int(color)]

    def all_pieces(self, color: Color) -> list[Square]:
        """All squares occupied by *color*."""
        return self._squares_from_bitboard(self.all_pieces_bitboard(color))

    def occupied(self) -> list[tuple[Square, Piece]]:
        """Every (square, piece) pair on the board."""
        return [(sq, p) for sq, p in enumerate(self._squares) if p is not None]

    def has_king(self, color: Color) -> bool:
        return self._king_squares[int(color)] is not None

    def king_square(self, color: Color) -> Square:
        """Return the single king square for *color*."""
        sq = self._king_squares[int(color)]
        if sq is None:
            raise ValueError(f"No {color.name} king on board")
        return sq

    # -- Mutation / copying -------------------------------------------------

    def play(self, move: Move) -> None:
        """Carry out *move* in place, including rook and en-passant side effects."""
        self[move.from_sq] = None
        if move.is_en_passant:
            self[make_square(file_of(move.to_sq), row_of(move.from_sq))] = None

        moved = move.piece.moved_to(move.to_sq)
        if move.promotion is not None:
            moved = moved.promoted(move.promotion)
        self[move.to_sq] = moved

        if move.is_castling:
            rook_from, rook_to = castling_rook_squares(move.from_sq, move.to_sq)
            rook = self[rook_from]
            if rook is not None:
                self[rook_from] = None
                self[rook_to] = rook.moved_to(rook_to)

    def copy(self) -> Board:
        b = Board()
        b._squares = self._squares.copy()
        b._piece_bitboards = [row.copy() for row in self._piece_bitboards]
        b._color_bitboards = self._color_bitboards.copy()
        b._king_squares = self._king_squares.copy()
        return b

    # -- Factory ------------------------------------------------------------

    @classmethod
    def initial(cls) -> Board:
        """Standard starting position with stable piece ids."""
        b = cls()
        for color in (Color.WHITE, Color.BLACK):
            prefix = "w" if color == Color.WHITE else "b"
            counters: dict[PieceType, int] = {}
            back = home_row(color)
            for f, pt in enumerate(_BACK_RANK):
                counters[pt] = counters.get(pt, 0) + 1
                sq = make_square(f, back)
                piece_id = f"{prefix}{_ID_LETTERS[pt]}{counters[pt]}"
                b[sq] = Piece(color, pt, piece_id, sq)
            pawns = pawn_row(color)
            for f in range(8):
                sq = make_square(f, pawns)
                b[sq] = Piece(color, PieceType.PAWN, f"{prefix}p{f + 1}", sq)
        return b

    # -- Dunder helpers -----------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._squares == other._squares

    def __repr__(self) -> str:
        rows: list[str] = []
        for row in range(8):
            cells = []
            for file in range(8):
                sq = make_square(file, row)
                p = self[sq]
                cells.append(str(p) if p else ".")
            rows.append(f"{rank_of(make_square(0, row))} {' '.join(cells)}")
        rows.append("  a b c d e f g h")
        return "\n".join(rows)
