"""Static position evaluation in centipawns, positive favouring white."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from rookery.core.enums import CastlingRights, Color, PieceType
from rookery.core.move_generator import king_targets

if TYPE_CHECKING:
    from rookery.core.board import Board
    from rookery.core.position import Position

PIECE_VALUES: Final[dict[PieceType, int]] = {
    PieceType.PAWN: 100,
    PieceType.KNIGHT: 320,
    PieceType.BISHOP: 330,
    PieceType.ROOK: 500,
    PieceType.QUEEN: 900,
    PieceType.KING: 0,
}

ENDGAME_MATERIAL_THRESHOLD: Final = 1300
KING_FRIEND_BONUS: Final = 5
KING_EXPOSURE_PENALTY: Final = 10
CASTLING_RIGHTS_BONUS: Final = 20
DOUBLED_PAWN_PENALTY: Final = 10
ISOLATED_PAWN_PENALTY: Final = 15
PASSED_PAWN_BONUS: Final = 20
CENTER_OCCUPANCY_BONUS: Final = 10
KING_CENTRALITY_WEIGHT: Final = 5

# d5, e5, d4, e4
CENTER_SQUARES: Final = (27, 28, 35, 36)

# fmt: off
# Piece-square tables from white's point of view, rank 8 first, so a white
# piece reads ``table[sq]`` and a black piece the vertically mirrored entry.
_PAWN_TABLE = (
    0, 0, 0, 0, 0, 0, 0, 0,
    50, 50, 50, 50, 50, 50, 50, 50,
    10, 10, 20, 30, 30, 20, 10, 10,
    5, 5, 10, 25, 25, 10, 5, 5,
    0, 0, 0, 20, 20, 0, 0, 0,
    5, -5, -10, 0, 0, -10, -5, 5,
    5, 10, 10, -20, -20, 10, 10, 5,
    0, 0, 0, 0, 0, 0, 0, 0,
)

_KNIGHT_TABLE = (
    -50, -40, -30, -30, -30, -30, -40, -50,
    -40, -20, 0, 0, 0, 0, -20, -40,
    -30, 0, 10, 15, 15, 10, 0, -30,
    -30, 5, 15, 20, 20, 15, 5, -30,
    -30, 0, 15, 20, 20, 15, 0, -30,
    -30, 5, 10, 15, 15, 10, 5, -30,
    -40, -20, 0, 5, 5, 0, -20, -40,
    -50, -40, -30, -30, -30, -30, -40, -50,
)

_BISHOP_TABLE = (
    -20, -10, -10, -10, -10, -10, -10, -20,
    -10, 0, 0, 0, 0, 0, 0, -10,
    -10, 0, 5, 10, 10, 5, 0, -10,
    -10, 5, 5, 10, 10, 5, 5, -10,
    -10, 0, 10, 10, 10, 10, 0, -10,
    -10, 10, 10, 10, 10, 10, 10, -10,
    -10, 5, 0, 0, 0, 0, 5, -10,
    -20, -10, -10, -10, -10, -10, -10, -20,
)

_ROOK_TABLE = (
    0, 0, 0, 0, 0, 0, 0, 0,
    5, 10, 10, 10, 10, 10, 10, 5,
    -5, 0, 0, 0, 0, 0, 0, -5,
    -5, 0, 0, 0, 0, 0, 0, -5,
    -5, 0, 0, 0, 0, 0, 0, -5,
    -5, 0, 0, 0, 0, 0, 0, -5,
    -5, 0, 0, 0, 0, 0, 0, -5,
    0, 0, 0, 5, 5, 0, 0, 0,
)

_QUEEN_TABLE = (
    -20, -10, -10, -5, -5, -10, -10, -20,
    -10, 0, 0, 0, 0, 0, 0, -10,
    -10, 0, 5, 5, 5, 5, 0, -10,
    -5, 0, 5, 5, 5, 5, 0, -5,
    0, 0, 5, 5, 5, 5, 0, -5,
    -10, 5, 5, 5, 5, 5, 0, -10,
    -10, 0, 5, 0, 0, 0, 0, -10,
    -20, -10, -10, -5, -5, -10, -10, -20,
)

_KING_MIDDLEGAME_TABLE = (
    -30, -40, -40, -50, -50, -40, -40, -30,
    -30, -40, -40, -50, -50, -40, -40, -30,
    -30, -40, -40, -50, -50, -40, -40, -30,
    -30, -40, -40, -50, -50, -40, -40, -30,
    -20, -30, -30, -40, -40, -30, -30, -20,
    -10, -20, -20, -20, -20, -20, -20, -10,
    20, 20, 0, 0, 0, 0, 20, 20,
    20, 30, 10, 0, 0, 10, 30, 20,
)

_KING_ENDGAME_TABLE = (
    -50, -40, -30, -20, -20, -30, -40, -50,
    -30, -20, -10, 0, 0, -10, -20, -30,
    -30, -10, 20, 30, 30, 20, -10, -30,
    -30, -10, 30, 40, 40, 30, -10, -30,
    -30, -10, 30, 40, 40, 30, -10, -30,
    -30, -10, 20, 30, 30, 20, -10, -30,
    -30, -30, 0, 0, 0, 0, -30, -30,
    -50, -30, -30, -30, -30, -30, -30, -50,
)

# fmt: on

_TABLES: dict[PieceType, tuple[int, ...]] = {
    PieceType.PAWN: _PAWN_TABLE,
    PieceType.KNIGHT: _KNIGHT_TABLE,
    PieceType.BISHOP: _BISHOP_TABLE,
    PieceType.ROOK: _ROOK_TABLE,
    PieceType.QUEEN: _QUEEN_TABLE,
}


def piece_value(piece_type: PieceType) -> int:
    """Material value of *piece_type* (the king counts as zero)."""
    return PIECE_VALUES[piece_type]


def piece_square_value(
    piece_type: PieceType, color: Color, sq: int, endgame: bool = False
) -> int:
    """Table bonus for a piece on *sq*, from its owner's point of view."""
    index = sq if color == Color.WHITE else sq ^ 56
    if piece_type == PieceType.KING:
        table = _KING_ENDGAME_TABLE if endgame else _KING_MIDDLEGAME_TABLE
        return table[index]
    return _TABLES[piece_type][index]


def is_endgame(board: Board) -> bool:
    """Whether non-pawn, non-king material on the board is below the threshold."""
    material = 0
    for color in (Color.WHITE, Color.BLACK):
        for pt in (PieceType.KNIGHT, PieceType.BISHOP, PieceType.ROOK, PieceType.QUEEN):
            material += board.pieces_bitboard(color, pt).bit_count() * PIECE_VALUES[pt]
    return material < ENDGAME_MATERIAL_THRESHOLD


def evaluate(position: Position) -> int:
    """Deterministic static score of *position* from white's side."""
    board = position.board
    endgame = is_endgame(board)

    score = 0
    for sq, piece in board.occupied():
        value = PIECE_VALUES[piece.piece_type] + piece_square_value(
            piece.piece_type, piece.color, sq, endgame
        )
        score += value if piece.color == Color.WHITE else -value

    score += _king_safety(position)
    score += _pawn_structure(board)
    score += _center_occupancy(board)
    if endgame:
        score += _king_activity(board)
    return score


# ── Terms ────────────────────────────────────────────────────────────────────


def _king_safety(position: Position) -> int:
    board = position.board
    score = 0
    for color, sign in ((Color.WHITE, 1), (Color.BLACK, -1)):
        if not board.has_king(color):
            continue
        king_sq = board.king_square(color)
        shelter = 0
        for sq in king_targets(king_sq):
            neighbour = board[sq]
            if neighbour is not None and neighbour.color == color:
                shelter += KING_FRIEND_BONUS
            else:
                shelter -= KING_EXPOSURE_PENALTY
        score += sign * shelter

    castling = position.usable_castling
    if castling & CastlingRights.WHITE_BOTH:
        score += CASTLING_RIGHTS_BONUS
    if castling & CastlingRights.BLACK_BOTH:
        score -= CASTLING_RIGHTS_BONUS
    return score


def _pawn_structure(board: Board) -> int:
    white = board.pieces(Color.WHITE, PieceType.PAWN)
    black = board.pieces(Color.BLACK, PieceType.PAWN)
    score = 0
    score += _pawn_terms(white, black, Color.WHITE)
    score -= _pawn_terms(black, white, Color.BLACK)
    return score


def _pawn_terms(own: list[int], enemy: list[int], color: Color) -> int:
    files: dict[int, int] = {}
    for sq in own:
        files[sq & 7] = files.get(sq & 7, 0) + 1

    score = 0
    score -= sum(1 for count in files.values() if count > 1) * DOUBLED_PAWN_PENALTY
    for sq in own:
        file = sq & 7
        if (file - 1) not in files and (file + 1) not in files:
            score -= ISOLATED_PAWN_PENALTY
        if _is_passed(sq, enemy, color):
            score += PASSED_PAWN_BONUS
    return score


def _is_passed(sq: int, enemy_pawns: list[int], color: Color) -> bool:
    file = sq & 7
    row = sq >> 3
    for enemy in enemy_pawns:
        if abs((enemy & 7) - file) > 1:
            continue
        enemy_row = enemy >> 3
        # White advances toward row 0, black toward row 7.
        if (color == Color.WHITE and enemy_row < row) or (
            color == Color.BLACK and enemy_row > row
        ):
            return False
    return True


def _center_occupancy(board: Board) -> int:
    score = 0
    for sq in CENTER_SQUARES:
        piece = board[sq]
        if piece is not None:
            if piece.color == Color.WHITE:
                score += CENTER_OCCUPANCY_BONUS
            else:
                score -= CENTER_OCCUPANCY_BONUS
    return score


def _king_centrality(sq: int) -> float:
    return 7 - (abs((sq & 7) - 3.5) + abs((sq >> 3) - 3.5))


def _king_activity(board: Board) -> int:
    if not (board.has_king(Color.WHITE) and board.has_king(Color.BLACK)):
        return 0
    white = _king_centrality(board.king_square(Color.WHITE))
    black = _king_centrality(board.king_square(Color.BLACK))
    return int((white - black) * KING_CENTRALITY_WEIGHT)
