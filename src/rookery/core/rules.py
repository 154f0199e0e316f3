"""High-level chess rules: validation, move application, game status."""

from __future__ import annotations

import time

from rookery.core import result as results
from rookery.core.enums import Color, PieceType
from rookery.core.move import Move
from rookery.core.move_generator import is_in_check
from rookery.core.position import Position
from rookery.core.result import GameResult
from rookery.core.types import Square, is_valid_square, square_name


class IllegalMoveError(ValueError):
    """Raised when a move that was never validated turns out to be illegal.

    Applying a move is only defined for pairs :meth:`Rules.is_legal_move`
    accepted; callers that skip validation get this error instead of a
    corrupted position.
    """


class Rules:
    """Static rule-checker that operates on a :class:`Position`."""

    @staticmethod
    def create_initial_position(
        game_id: str = "",
        white_label: str = "White",
        black_label: str = "Black",
    ) -> Position:
        """Standard setup, white to move, all castling rights, no history."""
        return Position.initial(game_id, white_label, black_label)

    @staticmethod
    def is_legal_move(position: Position, from_sq: Square, to_sq: Square) -> bool:
        """Whether the side to move may play *from_sq* → *to_sq*.

        Never raises: off-board squares, empty origins, the wrong color,
        blocked paths and moves into check all answer ``False``.
        """
        if not (is_valid_square(from_sq) and is_valid_square(to_sq)):
            return False
        piece = position.board[from_sq]
        if piece is None or piece.color != position.side_to_move:
            return False
        return position.has_legal_move(from_sq, to_sq)

    @staticmethod
    def legal_destinations(position: Position, from_sq: Square) -> list[Square]:
        """Destination squares the piece on *from_sq* may move to."""
        seen: list[Square] = []
        for move in position.legal_moves:
            if move.from_sq == from_sq and move.to_sq not in seen:
                seen.append(move.to_sq)
        return seen

    @staticmethod
    def find_move(
        position: Position,
        from_sq: Square,
        to_sq: Square,
        promotion: PieceType | None = None,
    ) -> Move | None:
        """The legal move record for a square pair, or ``None``.

        Promotions default to a queen when *promotion* is not given.
        """
        wanted = promotion or PieceType.QUEEN
        for move in position.legal_moves:
            if move.from_sq != from_sq or move.to_sq != to_sq:
                continue
            if move.promotion is None or move.promotion == wanted:
                return move
        return None

    @staticmethod
    def apply_move(
        position: Position,
        from_sq: Square,
        to_sq: Square,
        promotion: PieceType | None = None,
    ) -> Position:
        """Play a validated move and return the resulting position.

        Raises :class:`IllegalMoveError` when the pair is not legal.
        """
        move = Rules.find_move(position, from_sq, to_sq, promotion)
        if move is None:
            raise IllegalMoveError(
                f"Illegal move {_pair_name(from_sq, to_sq)} for {position.side_to_move}"
            )
        return position.after(move, timestamp=time.time())

    @staticmethod
    def play(position: Position, move: Move) -> Position:
        """Play a move record taken from ``position.legal_moves``."""
        if move not in position.legal_moves:
            raise IllegalMoveError(f"Illegal move {move.uci} for {position.side_to_move}")
        return position.after(move, timestamp=time.time())

    @staticmethod
    def is_king_in_check(position: Position, color: Color) -> bool:
        if color == position.side_to_move:
            return position.is_check
        return is_in_check(position.board, color)

    @staticmethod
    def is_checkmate(position: Position, color: Color | None = None) -> bool:
        """Whether *color* (default: the side to move) is mated."""
        return _as_mover(position, color).is_checkmate

    @staticmethod
    def is_stalemate(position: Position, color: Color | None = None) -> bool:
        """Whether *color* (default: the side to move) is stalemated."""
        return _as_mover(position, color).is_stalemate

    @staticmethod
    def game_result(position: Position) -> GameResult | None:
        """Result decided by the board alone, or ``None`` while play goes on."""
        if position.is_checkmate:
            return results.checkmate(position)
        if position.is_stalemate:
            return results.stalemate(position)
        return None

    @staticmethod
    def resign(position: Position, color: Color) -> GameResult:
        return results.resignation(position, color)

    @staticmethod
    def timeout(position: Position, color: Color) -> GameResult:
        return results.timeout(position, color)

    @staticmethod
    def agree_draw(position: Position) -> GameResult:
        return results.agreed_draw(position)


def _as_mover(position: Position, color: Color | None) -> Position:
    if color is None or color == position.side_to_move:
        return position
    return position.replace(side_to_move=color, en_passant=None)


def _pair_name(from_sq: Square, to_sq: Square) -> str:
    names = []
    for sq in (from_sq, to_sq):
        names.append(square_name(sq) if is_valid_square(sq) else str(sq))
    return "-".join(names)


create_initial_position = Rules.create_initial_position
is_legal_move = Rules.is_legal_move
legal_destinations = Rules.legal_destinations
apply_move = Rules.apply_move
is_king_in_check = Rules.is_king_in_check
is_checkmate = Rules.is_checkmate
is_stalemate = Rules.is_stalemate
