"""Opening book: named lines plus a general-principles fallback."""

from __future__ import annotations

import logging
import random
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Final

from rookery.core.algebraic import normalize, parse_notation
from rookery.core.board import home_row, pawn_row
from rookery.core.enums import CastlingRights, Color, PieceType
from rookery.core.move import Move
from rookery.core.position import Position
from rookery.core.types import D4, D5, E4, E5, file_of, row_of

_LOGGER = logging.getLogger(__name__)

MAX_OPENING_MOVES: Final = 20
MAX_DEVELOPED_PIECES: Final = 6
RANDOM_BOOK_MOVES: Final = 2
RANDOM_PRINCIPLE_MOVES: Final = 3

DEVELOPMENT_BONUS: Final = 30
CENTER_BONUS: Final = 20
CASTLING_BONUS: Final = 25
CENTRAL_PAWN_BONUS: Final = 15
REPETITION_PENALTY: Final = 10

DEVELOPMENT_WEIGHT: Final = 10
CENTER_WEIGHT: Final = 15
KING_SAFETY_BONUS: Final = 10
CENTRAL_PAWN_POINTS: Final = 5

CENTER_SQUARES: Final = frozenset((D4, E4, D5, E5))

# Starting files of each non-pawn piece type on its home row.
_HOME_FILES: Final[dict[PieceType, tuple[int, ...]]] = {
    PieceType.KNIGHT: (1, 6),
    PieceType.BISHOP: (2, 5),
    PieceType.ROOK: (0, 7),
    PieceType.QUEEN: (3,),
}


@dataclass(frozen=True, slots=True)
class OpeningLine:
    """A named move sequence and the known answers to its continuations.

    ``replies`` maps each reply of the side to move at the end of ``moves``
    to the preferred continuations for the opponent, best first.
    """

    name: str
    moves: tuple[str, ...]
    replies: Mapping[str, tuple[str, ...]] = field(default_factory=dict)


# fmt: off
OPENING_LINES: Final[tuple[OpeningLine, ...]] = (
    OpeningLine("King's Pawn", ("e4",), {
        "e5": ("Nf3", "Bc4", "d3"),
        "c5": ("Nf3", "d3", "Bb5"),
        "e6": ("d4", "Nf3", "Nc3"),
        "c6": ("d4", "Nc3", "Nf3"),
    }),
    OpeningLine("Queen's Pawn", ("d4",), {
        "d5": ("c4", "Nf3", "Bg5"),
        "Nf6": ("c4", "Nf3", "Bg5"),
        "f5": ("c4", "Nf3", "g3"),
    }),
    OpeningLine("English Opening", ("c4",), {
        "e5": ("Nc3", "g3", "Nf3"),
        "Nf6": ("Nc3", "d4", "Nf3"),
        "c5": ("Nc3", "g3", "Nf3"),
    }),
    OpeningLine("Sicilian Defence", ("e4", "c5", "Nf3"), {
        "d6": ("d4", "Bb5", "c3"),
        "Nc6": ("d4", "Bb5", "Nc3"),
        "e6": ("d4", "c3", "Nc3"),
    }),
    OpeningLine("French Defence", ("e4", "e6", "d4", "d5"), {
        "Nc3": ("Bb4", "Nf6", "dxe4"),
        "Nd2": ("Nf6", "c5", "dxe4"),
        "e5": ("c5", "Nc6", "Qb6"),
    }),
    OpeningLine("Caro-Kann Defence", ("e4", "c6", "d4", "d5"), {
        "Nc3": ("dxe4", "g6", "Nf6"),
        "e5": ("Bf5", "c5", "e6"),
        "exd5": ("cxd5", "Qxd5", "Nf6"),
    }),
    OpeningLine("Ruy Lopez", ("e4", "e5", "Nf3", "Nc6", "Bb5"), {
        "a6": ("Ba4", "Bxc6", "Bc4"),
        "f5": ("d3", "Nc3", "exf5"),
        "Nf6": ("O-O", "d3", "Re1"),
    }),
    OpeningLine("Italian Game", ("e4", "e5", "Nf3", "Nc6", "Bc4"), {
        "Bc5": ("d3", "c3", "O-O"),
        "f5": ("d3", "Ng5", "Qh5"),
        "Be7": ("d3", "O-O", "Re1"),
    }),
    OpeningLine("Queen's Gambit", ("d4", "d5", "c4"), {
        "dxc4": ("e3", "Nf3", "Bxc4"),
        "e6": ("Nc3", "Nf3", "Bg5"),
        "c6": ("Nf3", "Nc3", "e3"),
    }),
)
# fmt: on


def is_piece_developed(piece_type: PieceType, color: Color, sq: int, has_moved: bool) -> bool:
    """Whether a piece has left its starting square (kings: ever moved)."""
    if piece_type == PieceType.PAWN:
        return row_of(sq) != pawn_row(color)
    if piece_type == PieceType.KING:
        return has_moved
    return not (row_of(sq) == home_row(color) and file_of(sq) in _HOME_FILES[piece_type])


def count_developed(position: Position, color: Color | None = None) -> int:
    count = 0
    for sq, piece in position.board.occupied():
        if color is not None and piece.color != color:
            continue
        if is_piece_developed(piece.piece_type, piece.color, sq, piece.has_moved):
            count += 1
    return count


class OpeningBook:
    """Move suggestions for the opening phase of a game.

    Book lines are matched against the notation of the moves played so far.
    When no line applies, moves are scored by general opening principles.
    Random choices come from the injected ``rng`` so games can be replayed.
    """

    __slots__ = ("_lines", "_rng")

    def __init__(
        self,
        rng: random.Random | None = None,
        lines: tuple[OpeningLine, ...] = OPENING_LINES,
    ) -> None:
        self._rng = rng or random.Random()
        self._lines = lines

    @property
    def lines(self) -> tuple[OpeningLine, ...]:
        return self._lines

    # ── Phase / naming ───────────────────────────────────────────────────

    def is_in_opening_phase(self, position: Position) -> bool:
        return (
            len(position.moves) < MAX_OPENING_MOVES
            and count_developed(position) < MAX_DEVELOPED_PIECES
        )

    def opening_name(self, position: Position) -> str | None:
        """Name of the longest book line the game has followed, if any."""
        history = _history(position)
        best: OpeningLine | None = None
        for line in self._lines:
            n = len(line.moves)
            if history[:n] == line.moves and (best is None or n > len(best.moves)):
                best = line
        return best.name if best is not None else None

    # ── Move selection ───────────────────────────────────────────────────

    def get_book_move(self, position: Position) -> Move | None:
        """A book or principled move for the side to move, ``None`` if stuck."""
        if not position.legal_moves:
            return None

        candidates = self.book_candidates(position)
        if candidates:
            choice = self._rng.choice(candidates[:RANDOM_BOOK_MOVES])
            _LOGGER.debug("Book move %s from %d candidates", choice.notation, len(candidates))
            return choice
        return self._principled_move(position)

    def book_candidates(self, position: Position) -> list[Move]:
        """Legal book continuations for *position*, most specific first."""
        history = _history(position)
        size = len(history)
        specific: list[str] = []
        following: list[str] = []

        for line in self._lines:
            n = len(line.moves)
            if history == line.moves:
                specific.extend(line.replies)
            elif size == n + 1 and history[:n] == line.moves:
                specific.extend(line.replies.get(history[-1], ()))
            elif size < n and line.moves[:size] == history:
                following.append(line.moves[size])

        moves: list[Move] = []
        seen: set[str] = set()
        for token in specific + following:
            if token in seen:
                continue
            seen.add(token)
            try:
                moves.append(parse_notation(position, token))
            except ValueError:
                _LOGGER.debug("Book move %s is not playable here", token)
        return moves

    def _principled_move(self, position: Position) -> Move | None:
        legal = position.legal_moves
        if not legal:
            return None
        scored = sorted(
            legal,
            key=lambda m: principle_score(position, m),
            reverse=True,
        )
        return self._rng.choice(scored[:RANDOM_PRINCIPLE_MOVES])

    # ── Evaluation ───────────────────────────────────────────────────────

    def opening_evaluation(self, position: Position) -> int:
        """Opening-specific score in centipawns, positive favouring white."""
        board = position.board
        score = (
            count_developed(position, Color.WHITE) - count_developed(position, Color.BLACK)
        ) * DEVELOPMENT_WEIGHT

        center = 0
        for sq in CENTER_SQUARES:
            piece = board[sq]
            if piece is not None:
                center += 1 if piece.color == Color.WHITE else -1
        score += center * CENTER_WEIGHT

        for color, sign in ((Color.WHITE, 1), (Color.BLACK, -1)):
            king_moved = any(
                m.piece.piece_type == PieceType.KING and m.piece.color == color
                for m in position.moves
            )
            if not king_moved and position.castling & CastlingRights.kingside(color):
                score += sign * KING_SAFETY_BONUS

        for sq, color, sign in (
            (E4, Color.WHITE, 1),
            (D4, Color.WHITE, 1),
            (E5, Color.BLACK, -1),
            (D5, Color.BLACK, -1),
        ):
            piece = board[sq]
            if piece is not None and piece.piece_type == PieceType.PAWN and piece.color == color:
                score += sign * CENTRAL_PAWN_POINTS
        return score


def principle_score(position: Position, move: Move) -> int:
    """Score of *move* by general opening principles."""
    piece = move.piece
    score = 0
    if piece.piece_type in (PieceType.KNIGHT, PieceType.BISHOP):
        score += DEVELOPMENT_BONUS
    if move.to_sq in CENTER_SQUARES:
        score += CENTER_BONUS
        if piece.piece_type == PieceType.PAWN:
            score += CENTRAL_PAWN_BONUS
    if move.is_castling:
        score += CASTLING_BONUS
    repeats = sum(
        1
        for m in position.moves
        if m.piece.piece_type == piece.piece_type and m.piece.color == piece.color
    )
    score -= repeats * REPETITION_PENALTY
    return score


def _history(position: Position) -> tuple[str, ...]:
    return tuple(normalize(m.notation) for m in position.moves)
