"""Core domain layer: pure chess logic with zero external dependencies.

Quick start::

    from rookery.core import Rules, parse_square

    pos = Rules.create_initial_position("game-1", "Alice", "Bob")
    pos = Rules.apply_move(pos, parse_square("e2"), parse_square("e4"))
    for move in pos.legal_moves:
        print(move.notation)
"""

from rookery.core.board import Board
from rookery.core.enums import CastlingRights, Color, GameStatus, PieceType
from rookery.core.move import Move
from rookery.core.move_generator import (
    MoveGenerator,
    all_legal_moves,
    capturing_moves,
    checking_moves,
    moves_from,
)
from rookery.core.notation import STARTING_FEN, position_from_fen, position_to_fen
from rookery.core.piece import Piece
from rookery.core.position import Position
from rookery.core.result import GameResult
from rookery.core.rules import IllegalMoveError, Rules
from rookery.core.types import (
    Square,
    file_of,
    make_square,
    parse_square,
    rank_of,
    row_of,
    square_name,
)

__all__ = [
    # Enums / flags
    "CastlingRights",
    "Color",
    "GameStatus",
    "PieceType",
    # Types / helpers
    "Square",
    "file_of",
    "make_square",
    "parse_square",
    "rank_of",
    "row_of",
    "square_name",
    # Domain objects
    "Board",
    "GameResult",
    "IllegalMoveError",
    "Move",
    "MoveGenerator",
    "Piece",
    "Position",
    "Rules",
    "all_legal_moves",
    "capturing_moves",
    "checking_moves",
    "moves_from",
    # Notation
    "STARTING_FEN",
    "position_from_fen",
    "position_to_fen",
]
