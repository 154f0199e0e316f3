"""Move value object."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from rookery.core.enums import PieceType
from rookery.core.piece import Piece
from rookery.core.types import Square, file_of, square_name

_PROMO_CHARS: dict[PieceType, str] = {
    PieceType.KNIGHT: "n",
    PieceType.BISHOP: "b",
    PieceType.ROOK: "r",
    PieceType.QUEEN: "q",
}


@dataclass(frozen=True, slots=True)
class Move:
    """Immutable description of one transition between positions.

    ``piece`` is the mover as it stood before the move and ``captured`` the
    piece it removed (the passed pawn for en passant). Equality ignores the
    presentation fields: notation, timestamp and player label.
    """

    from_sq: Square
    to_sq: Square
    piece: Piece
    captured: Piece | None = None
    promotion: PieceType | None = None
    is_castling: bool = False
    is_en_passant: bool = False
    notation: str = field(default="", compare=False)
    timestamp: float = field(default=0.0, compare=False)
    player: str = field(default="", compare=False)

    # ── Classification ───────────────────────────────────────────────────

    @property
    def is_capture(self) -> bool:
        return self.captured is not None

    @property
    def is_promotion(self) -> bool:
        return self.promotion is not None

    @property
    def is_kingside_castle(self) -> bool:
        return self.is_castling and file_of(self.to_sq) > file_of(self.from_sq)

    @property
    def is_double_pawn_push(self) -> bool:
        return (
            self.piece.piece_type == PieceType.PAWN
            and abs(self.to_sq - self.from_sq) == 16
        )

    def stamped(
        self,
        *,
        notation: str | None = None,
        timestamp: float | None = None,
        player: str | None = None,
    ) -> Move:
        """Copy with presentation fields filled in."""
        return replace(
            self,
            notation=self.notation if notation is None else notation,
            timestamp=self.timestamp if timestamp is None else timestamp,
            player=self.player if player is None else player,
        )

    # ── Display ──────────────────────────────────────────────────────────

    def __str__(self) -> str:
        return self.notation or self.uci

    @property
    def uci(self) -> str:
        """Long-algebraic coordinates, e.g. ``e2e4`` or ``e7e8q``."""
        base = f"{square_name(self.from_sq)}{square_name(self.to_sq)}"
        if self.promotion is not None:
            base += _PROMO_CHARS.get(self.promotion, "")
        return base
