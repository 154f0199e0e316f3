"""Algebraic notation for move records.

Notation is produced from the full legal move list of the position the
moves belong to, since disambiguation depends on which other pieces of the
same type can reach the destination. Check and mate suffixes are left to
higher layers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rookery.core.enums import PieceType
from rookery.core.move import Move
from rookery.core.types import FILE_NAMES, file_of, rank_of, square_name

if TYPE_CHECKING:
    from rookery.core.position import Position

KINGSIDE_CASTLE = "O-O"
QUEENSIDE_CASTLE = "O-O-O"

PIECE_LETTERS: dict[PieceType, str] = {
    PieceType.KNIGHT: "N",
    PieceType.BISHOP: "B",
    PieceType.ROOK: "R",
    PieceType.QUEEN: "Q",
    PieceType.KING: "K",
}
_LETTER_PIECES: dict[str, PieceType] = {v: k for k, v in PIECE_LETTERS.items()}


def move_notation(move: Move, rivals: list[Move] | tuple[Move, ...] = ()) -> str:
    """Notation for *move*; *rivals* are other legal moves to the same square."""
    if move.is_castling:
        return KINGSIDE_CASTLE if move.is_kingside_castle else QUEENSIDE_CASTLE

    piece_type = move.piece.piece_type
    text = ""
    if piece_type == PieceType.PAWN:
        if move.is_capture:
            text += FILE_NAMES[file_of(move.from_sq)]
    else:
        text += PIECE_LETTERS[piece_type]
        others = [
            m
            for m in rivals
            if m.from_sq != move.from_sq
            and m.to_sq == move.to_sq
            and m.piece.piece_type == piece_type
        ]
        if others:
            same_file = any(file_of(m.from_sq) == file_of(move.from_sq) for m in others)
            same_rank = any(rank_of(m.from_sq) == rank_of(move.from_sq) for m in others)
            if not same_file:
                text += FILE_NAMES[file_of(move.from_sq)]
            elif not same_rank:
                text += str(rank_of(move.from_sq))
            else:
                text += square_name(move.from_sq)

    if move.is_capture:
        text += "x"
    text += square_name(move.to_sq)

    if move.promotion is not None:
        text += "=" + PIECE_LETTERS[move.promotion]
    return text


def annotate(moves: list[Move]) -> list[Move]:
    """Return *moves* with their notation filled in."""
    by_target: dict[tuple[PieceType, int], list[Move]] = {}
    for move in moves:
        key = (move.piece.piece_type, move.to_sq)
        by_target.setdefault(key, []).append(move)

    annotated: list[Move] = []
    for move in moves:
        rivals = by_target[(move.piece.piece_type, move.to_sq)]
        annotated.append(move.stamped(notation=move_notation(move, rivals)))
    return annotated


def normalize(token: str) -> str:
    """Strip check marks and annotation glyphs, accept zero-style castling."""
    clean = token.strip().rstrip("+#!?")
    if clean in ("0-0", "O-O"):
        return KINGSIDE_CASTLE
    if clean in ("0-0-0", "O-O-O"):
        return QUEENSIDE_CASTLE
    return clean


def parse_notation(position: Position, token: str) -> Move:
    """Resolve a notation *token* to the matching legal move of *position*.

    Accepts what :func:`move_notation` produces plus the usual slack: check
    suffixes, zero-style castling, redundant disambiguation and a missing
    promotion suffix (which selects the queen).
    """
    clean = normalize(token)
    legal = position.legal_moves
    for move in legal:
        if move.notation == clean:
            return move

    promotion: PieceType | None = None
    if "=" in clean:
        promotion = _LETTER_PIECES.get(clean[-1])
        if promotion is None:
            raise ValueError(f"Invalid promotion in move: {token!r}")
        clean = clean[: clean.index("=")]

    if len(clean) < 2:
        raise ValueError(f"Invalid move notation: {token!r}")
    dest = clean[-2:]
    body = clean[:-2].replace("x", "")
    piece_type = PieceType.PAWN
    if body and body[0] in _LETTER_PIECES:
        piece_type = _LETTER_PIECES[body[0]]
        body = body[1:]

    candidates: list[Move] = []
    for m in legal:
        if m.piece.piece_type != piece_type or square_name(m.to_sq) != dest:
            continue
        origin = square_name(m.from_sq)
        if len(body) == 2 and origin != body:
            continue
        if len(body) == 1 and body not in origin:
            continue
        if m.promotion is not None and m.promotion != (promotion or PieceType.QUEEN):
            continue
        candidates.append(m)

    if len(candidates) == 1:
        return candidates[0]
    if not candidates:
        raise ValueError(f"Illegal move: {token!r}")
    raise ValueError(f"Ambiguous move: {token!r}")
