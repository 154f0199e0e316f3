"""Legal and pseudo-legal move generation + attack detection."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rookery.core.algebraic import annotate
from rookery.core.board import Board, castling_rook_squares, home_row
from rookery.core.enums import CastlingRights, Color, PieceType
from rookery.core.move import Move
from rookery.core.piece import Piece
from rookery.core.types import Square, make_square

if TYPE_CHECKING:
    from rookery.core.position import Position


KNIGHT_OFFSETS: tuple[tuple[int, int], ...] = (
    (-2, -1),
    (-2, 1),
    (-1, -2),
    (-1, 2),
    (1, -2),
    (1, 2),
    (2, -1),
    (2, 1),
)

KING_OFFSETS: tuple[tuple[int, int], ...] = (
    (-1, -1),
    (-1, 0),
    (-1, 1),
    (0, -1),
    (0, 1),
    (1, -1),
    (1, 0),
    (1, 1),
)

BISHOP_DIRS: tuple[tuple[int, int], ...] = ((-1, -1), (-1, 1), (1, -1), (1, 1))
ROOK_DIRS: tuple[tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))
QUEEN_DIRS: tuple[tuple[int, int], ...] = BISHOP_DIRS + ROOK_DIRS

PROMOTION_TYPES: tuple[PieceType, ...] = (
    PieceType.QUEEN,
    PieceType.ROOK,
    PieceType.BISHOP,
    PieceType.KNIGHT,
)
_COLOR_OPPOSITE: tuple[Color, Color] = (Color.BLACK, Color.WHITE)

# Row step of a pawn push and the row it promotes on, per color.
_PAWN_STEP: tuple[int, int] = (-8, 8)
_PAWN_START_ROW: tuple[int, int] = (6, 1)
_PROMOTION_ROW: tuple[int, int] = (0, 7)


# -- Precomputed lookup tables ---------------------------------------------


def _build_targets(
    offsets: tuple[tuple[int, int], ...],
) -> tuple[tuple[Square, ...], ...]:
    targets: list[tuple[Square, ...]] = []
    for sq in range(64):
        file_idx = sq & 7
        row_idx = sq >> 3
        moves: list[Square] = []
        for df, dr in offsets:
            af = file_idx + df
            ar = row_idx + dr
            if 0 <= af < 8 and 0 <= ar < 8:
                moves.append(make_square(af, ar))
        targets.append(tuple(moves))
    return tuple(targets)


def _build_attack_masks(targets: tuple[tuple[Square, ...], ...]) -> tuple[int, ...]:
    masks: list[int] = [0] * 64
    for sq in range(64):
        mask = 0
        for to_sq in targets[sq]:
            mask |= 1 << to_sq
        masks[sq] = mask
    return tuple(masks)


def _build_pawn_attacker_masks() -> tuple[tuple[int, ...], tuple[int, ...]]:
    # White pawns capture toward row 0, so a white attacker of sq sits one
    # row below it (row + 1); black attackers sit one row above.
    white_masks: list[int] = [0] * 64
    black_masks: list[int] = [0] * 64

    for sq in range(64):
        file_idx = sq & 7
        row_idx = sq >> 3

        white_mask = 0
        if row_idx < 7:
            if file_idx > 0:
                white_mask |= 1 << make_square(file_idx - 1, row_idx + 1)
            if file_idx < 7:
                white_mask |= 1 << make_square(file_idx + 1, row_idx + 1)

        black_mask = 0
        if row_idx > 0:
            if file_idx > 0:
                black_mask |= 1 << make_square(file_idx - 1, row_idx - 1)
            if file_idx < 7:
                black_mask |= 1 << make_square(file_idx + 1, row_idx - 1)

        white_masks[sq] = white_mask
        black_masks[sq] = black_mask

    return (tuple(white_masks), tuple(black_masks))


def _build_rays(
    directions: tuple[tuple[int, int], ...],
) -> tuple[tuple[tuple[Square, ...], ...], ...]:
    rays_per_square: list[tuple[tuple[Square, ...], ...]] = []
    for sq in range(64):
        file_idx = sq & 7
        row_idx = sq >> 3
        square_rays: list[tuple[Square, ...]] = []
        for df, dr in directions:
            af = file_idx + df
            ar = row_idx + dr
            ray: list[Square] = []
            while 0 <= af < 8 and 0 <= ar < 8:
                ray.append(make_square(af, ar))
                af += df
                ar += dr
            square_rays.append(tuple(ray))
        rays_per_square.append(tuple(square_rays))
    return tuple(rays_per_square)


_KNIGHT_TARGETS = _build_targets(KNIGHT_OFFSETS)
_KING_TARGETS = _build_targets(KING_OFFSETS)
_KNIGHT_ATTACK_MASKS = _build_attack_masks(_KNIGHT_TARGETS)
_KING_ATTACK_MASKS = _build_attack_masks(_KING_TARGETS)
_PAWN_ATTACKER_MASKS = _build_pawn_attacker_masks()

_BISHOP_RAYS = _build_rays(BISHOP_DIRS)
_ROOK_RAYS = _build_rays(ROOK_DIRS)
_QUEEN_RAYS = _build_rays(QUEEN_DIRS)


# -- Attack detection -------------------------------------------------------


def is_square_attacked(board: Board, sq: Square, by_color: Color) -> bool:
    """Is *sq* attacked by any piece of *by_color*?

    Attack patterns ignore whether the attacker itself is pinned.
    """
    by_idx = int(by_color)

    if board.pieces_bitboard(by_color, PieceType.PAWN) & _PAWN_ATTACKER_MASKS[by_idx][sq]:
        return True

    if board.pieces_bitboard(by_color, PieceType.KNIGHT) & _KNIGHT_ATTACK_MASKS[sq]:
        return True

    if board.pieces_bitboard(by_color, PieceType.KING) & _KING_ATTACK_MASKS[sq]:
        return True

    if board.pieces_bitboard(by_color, PieceType.BISHOP) or board.pieces_bitboard(
        by_color, PieceType.QUEEN
    ):
        for ray in _BISHOP_RAYS[sq]:
            for to_sq in ray:
                piece = board[to_sq]
                if piece is None:
                    continue
                if piece.color == by_color and piece.piece_type in (
                    PieceType.BISHOP,
                    PieceType.QUEEN,
                ):
                    return True
                break

    if board.pieces_bitboard(by_color, PieceType.ROOK) or board.pieces_bitboard(
        by_color, PieceType.QUEEN
    ):
        for ray in _ROOK_RAYS[sq]:
            for to_sq in ray:
                piece = board[to_sq]
                if piece is None:
                    continue
                if piece.color == by_color and piece.piece_type in (
                    PieceType.ROOK,
                    PieceType.QUEEN,
                ):
                    return True
                break

    return False


def is_in_check(board: Board, color: Color) -> bool:
    """Is *color*'s king attacked by the opponent?"""
    if not board.has_king(color):
        return False
    return is_square_attacked(
        board, board.king_square(color), _COLOR_OPPOSITE[int(color)]
    )


def king_targets(sq: Square) -> tuple[Square, ...]:
    """Squares a king on *sq* steps to (the 3×3 ring, clipped to the board)."""
    return _KING_TARGETS[sq]


class MoveGenerator:
    """Generates legal moves for one color of a :class:`Position`.

    Legality is decided by playing each pseudo-legal candidate on a scratch
    copy of the board and testing whether the mover's king is attacked
    afterwards. The position itself is never touched.
    """

    __slots__ = ("_pos", "_board", "_color")

    def __init__(self, position: Position, color: Color | None = None) -> None:
        self._pos = position
        self._board = position.board
        self._color = position.side_to_move if color is None else color

    # -- Public API ---------------------------------------------------------

    @property
    def color(self) -> Color:
        return self._color

    def generate_legal_moves(self) -> list[Move]:
        """All strictly legal moves for the generator's color, without notation."""
        legal: list[Move] = []
        moving_color = self._color
        append_legal = legal.append
        board = self._board

        for move in self.generate_pseudo_legal_moves():
            scratch = board.copy()
            scratch.play(move)
            if not is_in_check(scratch, moving_color):
                append_legal(move)
        return legal

    def generate_pseudo_legal_moves(self) -> list[Move]:
        """All pseudo-legal moves (may leave own king in check)."""
        moves: list[Move] = []
        color = self._color
        board = self._board

        pawns = board.pieces_bitboard(color, PieceType.PAWN)
        while pawns:
            lsb = pawns & -pawns
            self._gen_pawn(lsb.bit_length() - 1, color, moves)
            pawns ^= lsb

        knights = board.pieces_bitboard(color, PieceType.KNIGHT)
        while knights:
            lsb = knights & -knights
            self._gen_stepping(lsb.bit_length() - 1, color, _KNIGHT_TARGETS, moves)
            knights ^= lsb

        bishops = board.pieces_bitboard(color, PieceType.BISHOP)
        while bishops:
            lsb = bishops & -bishops
            sq = lsb.bit_length() - 1
            self._gen_sliding(sq, color, _BISHOP_RAYS[sq], moves)
            bishops ^= lsb

        rooks = board.pieces_bitboard(color, PieceType.ROOK)
        while rooks:
            lsb = rooks & -rooks
            sq = lsb.bit_length() - 1
            self._gen_sliding(sq, color, _ROOK_RAYS[sq], moves)
            rooks ^= lsb

        queens = board.pieces_bitboard(color, PieceType.QUEEN)
        while queens:
            lsb = queens & -queens
            sq = lsb.bit_length() - 1
            self._gen_sliding(sq, color, _QUEEN_RAYS[sq], moves)
            queens ^= lsb

        kings = board.pieces_bitboard(color, PieceType.KING)
        while kings:
            lsb = kings & -kings
            sq = lsb.bit_length() - 1
            self._gen_stepping(sq, color, _KING_TARGETS, moves)
            self._gen_castling(sq, color, moves)
            kings ^= lsb

        return moves

    # -- Attack detection (public) -----------------------------------------

    def is_in_check(self, color: Color) -> bool:
        """Is *color*'s king attacked by the opponent?"""
        return is_in_check(self._board, color)

    # -- Piece-specific generators (private) -------------------------------

    def _gen_pawn(self, sq: Square, color: Color, moves: list[Move]) -> None:
        board = self._board
        piece = board[sq]
        assert piece is not None
        color_idx = int(color)
        step = _PAWN_STEP[color_idx]
        file_idx = sq & 7
        promotion_row = _PROMOTION_ROW[color_idx]

        one_step = sq + step
        if 0 <= one_step < 64 and board.is_empty(one_step):
            self._add_pawn_move(piece, sq, one_step, None, promotion_row, moves)
            if (sq >> 3) == _PAWN_START_ROW[color_idx]:
                two_step = one_step + step
                if board.is_empty(two_step):
                    moves.append(Move(sq, two_step, piece))

        if not 0 <= one_step < 64:
            return

        for df in (-1, 1):
            cap_file = file_idx + df
            if not 0 <= cap_file < 8:
                continue
            cap_sq = one_step + df
            target = board[cap_sq]
            if target is not None:
                if target.color != color:
                    self._add_pawn_move(piece, sq, cap_sq, target, promotion_row, moves)
            elif cap_sq == self._pos.en_passant and color == self._pos.side_to_move:
                passed = board[make_square(cap_file, sq >> 3)]
                if (
                    passed is not None
                    and passed.color != color
                    and passed.piece_type == PieceType.PAWN
                ):
                    moves.append(
                        Move(sq, cap_sq, piece, captured=passed, is_en_passant=True)
                    )

    @staticmethod
    def _add_pawn_move(
        piece: Piece,
        from_sq: Square,
        to_sq: Square,
        captured: Piece | None,
        promotion_row: int,
        moves: list[Move],
    ) -> None:
        if (to_sq >> 3) == promotion_row:
            for pt in PROMOTION_TYPES:
                moves.append(Move(from_sq, to_sq, piece, captured, promotion=pt))
        else:
            moves.append(Move(from_sq, to_sq, piece, captured))

    def _gen_stepping(
        self,
        sq: Square,
        color: Color,
        targets: tuple[tuple[Square, ...], ...],
        moves: list[Move],
    ) -> None:
        board = self._board
        piece = board[sq]
        assert piece is not None
        for to_sq in targets[sq]:
            target = board[to_sq]
            if target is None:
                moves.append(Move(sq, to_sq, piece))
            elif target.color != color:
                moves.append(Move(sq, to_sq, piece, target))

    def _gen_sliding(
        self,
        sq: Square,
        color: Color,
        rays: tuple[tuple[Square, ...], ...],
        moves: list[Move],
    ) -> None:
        board = self._board
        piece = board[sq]
        assert piece is not None
        for ray in rays:
            for to_sq in ray:
                target = board[to_sq]
                if target is None:
                    moves.append(Move(sq, to_sq, piece))
                    continue
                if target.color != color:
                    moves.append(Move(sq, to_sq, piece, target))
                break

    def _gen_castling(self, king_sq: Square, color: Color, moves: list[Move]) -> None:
        board = self._board
        king = board[king_sq]
        row = home_row(color)
        if king is None or king.has_moved or king_sq != make_square(4, row):
            return
        if self.is_in_check(color):
            return

        castling = self._pos.castling
        if castling & CastlingRights.kingside(color):
            self._try_castle(king, king_sq, make_square(6, row), (5, 6), moves)
        if castling & CastlingRights.queenside(color):
            self._try_castle(king, king_sq, make_square(2, row), (1, 2, 3), moves)

    def _try_castle(
        self,
        king: Piece,
        king_sq: Square,
        to_sq: Square,
        between_files: tuple[int, ...],
        moves: list[Move],
    ) -> None:
        board = self._board
        row = king_sq >> 3
        rook_sq, _ = castling_rook_squares(king_sq, to_sq)
        rook = board[rook_sq]
        if (
            rook is None
            or rook.color != king.color
            or rook.piece_type != PieceType.ROOK
            or rook.has_moved
        ):
            return
        if any(not board.is_empty(make_square(f, row)) for f in between_files):
            return

        # Stand the king on every square it crosses and lands on.
        step = 1 if to_sq > king_sq else -1
        for transit in range(king_sq + step, to_sq + step, step):
            scratch = board.copy()
            scratch[king_sq] = None
            scratch[transit] = king.placed(transit)
            if is_in_check(scratch, king.color):
                return

        moves.append(Move(king_sq, to_sq, king, is_castling=True))


# -- Functional API ---------------------------------------------------------


def all_legal_moves(position: Position, color: Color | None = None) -> list[Move]:
    """Every legal move for *color* (default: the side to move)."""
    if color is None or color == position.side_to_move:
        return list(position.legal_moves)
    return annotate(MoveGenerator(position, color).generate_legal_moves())


def capturing_moves(position: Position, color: Color | None = None) -> list[Move]:
    """Legal moves that capture, en passant included."""
    return [m for m in all_legal_moves(position, color) if m.is_capture]


def checking_moves(position: Position, color: Color | None = None) -> list[Move]:
    """Legal moves that leave the opponent in check."""
    checking: list[Move] = []
    for move in all_legal_moves(position, color):
        scratch = position.board.copy()
        scratch.play(move)
        if is_in_check(scratch, move.piece.color.opposite):
            checking.append(move)
    return checking


def moves_from(position: Position, from_sq: Square) -> list[Move]:
    """Legal moves of the piece on *from_sq* (empty when it cannot move)."""
    piece = position.board[from_sq]
    if piece is None:
        return []
    return [m for m in all_legal_moves(position, piece.color) if m.from_sq == from_sq]
