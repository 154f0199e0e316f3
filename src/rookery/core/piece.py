"""Piece value object."""

from __future__ import annotations

from dataclasses import dataclass, replace

from rookery.core.enums import Color, PieceType
from rookery.core.types import Square

# FEN character ↔ (Color, PieceType)
_CHAR_MAP: dict[str, tuple[Color, PieceType]] = {
    "P": (Color.WHITE, PieceType.PAWN),
    "N": (Color.WHITE, PieceType.KNIGHT),
    "B": (Color.WHITE, PieceType.BISHOP),
    "R": (Color.WHITE, PieceType.ROOK),
    "Q": (Color.WHITE, PieceType.QUEEN),
    "K": (Color.WHITE, PieceType.KING),
    "p": (Color.BLACK, PieceType.PAWN),
    "n": (Color.BLACK, PieceType.KNIGHT),
    "b": (Color.BLACK, PieceType.BISHOP),
    "r": (Color.BLACK, PieceType.ROOK),
    "q": (Color.BLACK, PieceType.QUEEN),
    "k": (Color.BLACK, PieceType.KING),
}

_UNICODE: dict[tuple[Color, PieceType], str] = {
    (Color.WHITE, PieceType.PAWN): "♙",
    (Color.WHITE, PieceType.KNIGHT): "♘",
    (Color.WHITE, PieceType.BISHOP): "♗",
    (Color.WHITE, PieceType.ROOK): "♖",
    (Color.WHITE, PieceType.QUEEN): "♕",
    (Color.WHITE, PieceType.KING): "♔",
    (Color.BLACK, PieceType.PAWN): "♟",
    (Color.BLACK, PieceType.KNIGHT): "♞",
    (Color.BLACK, PieceType.BISHOP): "♝",
    (Color.BLACK, PieceType.ROOK): "♜",
    (Color.BLACK, PieceType.QUEEN): "♛",
    (Color.BLACK, PieceType.KING): "♚",
}

_FEN_CHARS: dict[tuple[Color, PieceType], str] = {v: k for k, v in _CHAR_MAP.items()}


@dataclass(frozen=True, slots=True)
class Piece:
    """Immutable value object representing a chess piece.

    ``id`` is stable for the whole game (``"wn1"``, ``"bp5"`` ...) so that a
    front end can follow a piece across positions. ``square`` and
    ``has_moved`` describe the piece as it stands in one position; moving
    a piece produces a new value via :meth:`moved_to`.
    """

    color: Color
    piece_type: PieceType
    id: str = ""
    square: Square | None = None
    has_moved: bool = False

    # ── Derived values ───────────────────────────────────────────────────

    def moved_to(self, sq: Square) -> Piece:
        """This piece after travelling to *sq*."""
        return replace(self, square=sq, has_moved=True)

    def promoted(self, piece_type: PieceType) -> Piece:
        """This piece after promoting to *piece_type* (keeps its id)."""
        return replace(self, piece_type=piece_type)

    def placed(self, sq: Square, has_moved: bool | None = None) -> Piece:
        """This piece standing on *sq* without counting as a move."""
        moved = self.has_moved if has_moved is None else has_moved
        return replace(self, square=sq, has_moved=moved)

    # ── Serialisation ────────────────────────────────────────────────────

    def __str__(self) -> str:
        """FEN character (uppercase = white, lowercase = black)."""
        return _FEN_CHARS[(self.color, self.piece_type)]

    @classmethod
    def from_char(cls, char: str) -> Piece:
        """Create piece from FEN character, e.g. 'N' → white knight."""
        try:
            color, ptype = _CHAR_MAP[char]
        except KeyError:
            raise ValueError(f"Invalid piece character: {char!r}") from None
        return cls(color, ptype)

    @property
    def symbol(self) -> str:
        """Unicode chess symbol, e.g. ♞."""
        return _UNICODE[(self.color, self.piece_type)]
