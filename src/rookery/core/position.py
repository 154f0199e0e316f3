"""Position - an immutable snapshot of a game in progress."""

from __future__ import annotations

from rookery.core.algebraic import annotate, move_notation
from rookery.core.board import Board, home_row
from rookery.core.enums import CastlingRights, Color, PieceType
from rookery.core.move import Move
from rookery.core.move_generator import MoveGenerator, is_in_check
from rookery.core.types import Square, make_square, square_name

# Rook corner -> castling right lost when a rook leaves it.
_ROOK_CORNERS: dict[Square, CastlingRights] = {
    make_square(7, home_row(Color.WHITE)): CastlingRights.WHITE_KINGSIDE,
    make_square(0, home_row(Color.WHITE)): CastlingRights.WHITE_QUEENSIDE,
    make_square(7, home_row(Color.BLACK)): CastlingRights.BLACK_KINGSIDE,
    make_square(0, home_row(Color.BLACK)): CastlingRights.BLACK_QUEENSIDE,
}

_UNSET = object()


class Position:
    """Board, side to move, castling rights, en passant, clocks and history.

    A position is never modified after construction: :meth:`after` builds
    the successor. The legal-move list and the status flags derived from it
    are computed on first access and memoised, so asking a position the
    same question twice costs nothing.
    """

    __slots__ = (
        "_board",
        "_side_to_move",
        "_castling",
        "_en_passant",
        "_halfmove_clock",
        "_fullmove_number",
        "_game_id",
        "_players",
        "_moves",
        "_search_moves",
        "_legal_moves",
        "_legal_pairs",
        "_in_check",
    )

    def __init__(
        self,
        board: Board,
        side_to_move: Color = Color.WHITE,
        castling: CastlingRights = CastlingRights.ALL,
        en_passant: Square | None = None,
        halfmove_clock: int = 0,
        fullmove_number: int = 1,
        *,
        game_id: str = "",
        players: tuple[str, str] = ("White", "Black"),
        moves: tuple[Move, ...] = (),
    ) -> None:
        self._board = board
        self._side_to_move = side_to_move
        self._castling = castling
        self._en_passant = en_passant
        self._halfmove_clock = halfmove_clock
        self._fullmove_number = fullmove_number
        self._game_id = game_id
        self._players = players
        self._moves = moves
        self._search_moves: tuple[Move, ...] | None = None
        self._legal_moves: tuple[Move, ...] | None = None
        self._legal_pairs: frozenset[tuple[Square, Square]] | None = None
        self._in_check: bool | None = None

    # ── Factory ──────────────────────────────────────────────────────────

    @classmethod
    def initial(
        cls,
        game_id: str = "",
        white_label: str = "White",
        black_label: str = "Black",
    ) -> Position:
        """Standard starting position, white to move."""
        return cls(Board.initial(), game_id=game_id, players=(white_label, black_label))

    # ── Plain state ──────────────────────────────────────────────────────

    @property
    def board(self) -> Board:
        return self._board

    @property
    def side_to_move(self) -> Color:
        return self._side_to_move

    @property
    def castling(self) -> CastlingRights:
        return self._castling

    @property
    def en_passant(self) -> Square | None:
        return self._en_passant

    @property
    def halfmove_clock(self) -> int:
        return self._halfmove_clock

    @property
    def fullmove_number(self) -> int:
        return self._fullmove_number

    @property
    def game_id(self) -> str:
        return self._game_id

    @property
    def players(self) -> tuple[str, str]:
        """(white label, black label)."""
        return self._players

    def player_label(self, color: Color) -> str:
        return self._players[int(color)]

    @property
    def moves(self) -> tuple[Move, ...]:
        """Every move played from the initial position, oldest first."""
        return self._moves

    @property
    def last_move(self) -> Move | None:
        return self._moves[-1] if self._moves else None

    @property
    def white_king_side(self) -> bool:
        return bool(self._castling & CastlingRights.WHITE_KINGSIDE)

    @property
    def white_queen_side(self) -> bool:
        return bool(self._castling & CastlingRights.WHITE_QUEENSIDE)

    @property
    def black_king_side(self) -> bool:
        return bool(self._castling & CastlingRights.BLACK_KINGSIDE)

    @property
    def black_queen_side(self) -> bool:
        return bool(self._castling & CastlingRights.BLACK_QUEENSIDE)

    @property
    def usable_castling(self) -> CastlingRights:
        """Rights still backed by an unmoved king and corner rook.

        A rook captured on its corner leaves its flag in :attr:`castling`;
        this view drops such rights.
        """
        usable = CastlingRights.NONE
        board = self._board
        for corner, right in _ROOK_CORNERS.items():
            if not self._castling & right:
                continue
            color = Color.WHITE if right & CastlingRights.WHITE_BOTH else Color.BLACK
            rook = board[corner]
            king = board[make_square(4, home_row(color))]
            if (
                rook is not None
                and rook.piece_type == PieceType.ROOK
                and rook.color == color
                and not rook.has_moved
                and king is not None
                and king.piece_type == PieceType.KING
                and king.color == color
                and not king.has_moved
            ):
                usable |= right
        return usable

    # ── Derived, memoised ────────────────────────────────────────────────

    @property
    def search_moves(self) -> tuple[Move, ...]:
        """Legal moves for the side to move, without notation.

        Search walks these; :attr:`legal_moves` adds the SAN text.
        """
        if self._search_moves is None:
            self._search_moves = tuple(MoveGenerator(self).generate_legal_moves())
        return self._search_moves

    @property
    def legal_moves(self) -> tuple[Move, ...]:
        """Legal moves for the side to move, each with its SAN notation."""
        if self._legal_moves is None:
            self._legal_moves = tuple(annotate(list(self.search_moves)))
        return self._legal_moves

    def has_legal_move(self, from_sq: Square, to_sq: Square) -> bool:
        if self._legal_pairs is None:
            self._legal_pairs = frozenset((m.from_sq, m.to_sq) for m in self.search_moves)
        return (from_sq, to_sq) in self._legal_pairs

    @property
    def is_check(self) -> bool:
        """Whether the side to move is in check."""
        if self._in_check is None:
            self._in_check = is_in_check(self._board, self._side_to_move)
        return self._in_check

    @property
    def is_checkmate(self) -> bool:
        return self.is_check and not self.search_moves

    @property
    def is_stalemate(self) -> bool:
        return not self.is_check and not self.search_moves

    @property
    def is_game_over(self) -> bool:
        return not self.search_moves

    @property
    def winner(self) -> Color | None:
        """The side that delivered mate, if any."""
        if self.is_checkmate:
            return self._side_to_move.opposite
        return None

    # ── Successor ────────────────────────────────────────────────────────

    def after(
        self, move: Move, *, timestamp: float = 0.0, notate: bool = True
    ) -> Position:
        """The position reached by playing the legal *move*.

        The recorded move carries the acting player's label and *timestamp*.
        Its notation is filled in unless *notate* is false, which search
        uses to skip building SAN text for throwaway nodes.
        """
        board = self._board.copy()
        board.play(move)

        piece = move.piece
        castling = self._castling
        if piece.piece_type == PieceType.KING:
            castling &= ~CastlingRights.for_color(piece.color)
        elif piece.piece_type == PieceType.ROOK:
            lost = _ROOK_CORNERS.get(move.from_sq)
            if lost is not None and lost & CastlingRights.for_color(piece.color):
                castling &= ~lost

        en_passant: Square | None = None
        if move.is_double_pawn_push:
            en_passant = (move.from_sq + move.to_sq) // 2

        halfmove = self._halfmove_clock + 1
        if piece.piece_type == PieceType.PAWN or move.is_capture:
            halfmove = 0
        fullmove = self._fullmove_number
        if self._side_to_move == Color.BLACK:
            fullmove += 1

        notation = move.notation
        if not notation and notate:
            notation = move_notation(move, self.search_moves)
        record = move.stamped(
            notation=notation,
            timestamp=timestamp,
            player=self.player_label(piece.color),
        )
        return Position(
            board,
            self._side_to_move.opposite,
            CastlingRights(castling),
            en_passant,
            halfmove,
            fullmove,
            game_id=self._game_id,
            players=self._players,
            moves=self._moves + (record,),
        )

    def replace(
        self,
        *,
        side_to_move: Color | None = None,
        castling: CastlingRights | None = None,
        en_passant: object = _UNSET,
    ) -> Position:
        """Copy with some state fields changed (board shared, caches dropped)."""
        return Position(
            self._board,
            self._side_to_move if side_to_move is None else side_to_move,
            self._castling if castling is None else castling,
            self._en_passant if en_passant is _UNSET else en_passant,  # type: ignore[arg-type]
            self._halfmove_clock,
            self._fullmove_number,
            game_id=self._game_id,
            players=self._players,
            moves=self._moves,
        )

    # ── Dunder helpers ───────────────────────────────────────────────────

    def __repr__(self) -> str:
        side = "w" if self._side_to_move == Color.WHITE else "b"
        ep = "-" if self._en_passant is None else square_name(self._en_passant)
        return (
            f"Position(side={side}, castling={int(self._castling)}, ep={ep}, "
            f"ply={len(self._moves)})\n{self._board!r}"
        )
