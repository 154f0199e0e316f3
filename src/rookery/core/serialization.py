"""Plain-data (dict) form of positions and moves.

The dict form is what a relay or storage layer ships around: JSON-safe
values only, squares by name, enums by lowercase name.
"""

from __future__ import annotations

from typing import Any

from rookery.core.board import Board
from rookery.core.enums import CastlingRights, Color, PieceType
from rookery.core.move import Move
from rookery.core.piece import Piece
from rookery.core.position import Position
from rookery.core.types import make_square, parse_square, square_name

_CASTLING_KEYS: dict[str, CastlingRights] = {
    "white_king_side": CastlingRights.WHITE_KINGSIDE,
    "white_queen_side": CastlingRights.WHITE_QUEENSIDE,
    "black_king_side": CastlingRights.BLACK_KINGSIDE,
    "black_queen_side": CastlingRights.BLACK_QUEENSIDE,
}


def _color(name: object) -> Color:
    try:
        return Color[str(name).upper()]
    except KeyError:
        raise ValueError(f"Invalid color: {name!r}") from None


def _piece_type(name: object) -> PieceType:
    try:
        return PieceType[str(name).upper()]
    except KeyError:
        raise ValueError(f"Invalid piece type: {name!r}") from None


def _field(data: dict[str, Any], key: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise ValueError(f"Missing field: {key!r}") from None


# ── Pieces ───────────────────────────────────────────────────────────────────


def piece_to_dict(piece: Piece) -> dict[str, Any]:
    return {
        "id": piece.id,
        "type": piece.piece_type.name.lower(),
        "color": str(piece.color),
        "square": square_name(piece.square) if piece.square is not None else None,
        "has_moved": piece.has_moved,
    }


def piece_from_dict(data: dict[str, Any]) -> Piece:
    square = data.get("square")
    return Piece(
        _color(_field(data, "color")),
        _piece_type(_field(data, "type")),
        str(data.get("id", "")),
        parse_square(square) if square is not None else None,
        bool(data.get("has_moved", False)),
    )


# ── Moves ────────────────────────────────────────────────────────────────────


def move_to_dict(move: Move) -> dict[str, Any]:
    return {
        "from": square_name(move.from_sq),
        "to": square_name(move.to_sq),
        "piece": piece_to_dict(move.piece),
        "captured": piece_to_dict(move.captured) if move.captured else None,
        "promotion": move.promotion.name.lower() if move.promotion else None,
        "is_castling": move.is_castling,
        "is_en_passant": move.is_en_passant,
        "notation": move.notation,
        "timestamp": move.timestamp,
        "player": move.player,
    }


def move_from_dict(data: dict[str, Any]) -> Move:
    captured = data.get("captured")
    promotion = data.get("promotion")
    return Move(
        parse_square(_field(data, "from")),
        parse_square(_field(data, "to")),
        piece_from_dict(_field(data, "piece")),
        piece_from_dict(captured) if captured else None,
        _piece_type(promotion) if promotion else None,
        bool(data.get("is_castling", False)),
        bool(data.get("is_en_passant", False)),
        str(data.get("notation", "")),
        float(data.get("timestamp", 0.0)),
        str(data.get("player", "")),
    )


# ── Positions ────────────────────────────────────────────────────────────────


def position_to_dict(position: Position) -> dict[str, Any]:
    """Full snapshot, including the derived status flags for display."""
    board = position.board
    grid: list[list[dict[str, Any] | None]] = []
    for row in range(8):
        cells: list[dict[str, Any] | None] = []
        for file in range(8):
            piece = board[make_square(file, row)]
            cells.append(piece_to_dict(piece) if piece is not None else None)
        grid.append(cells)
    winner = position.winner
    return {
        "game_id": position.game_id,
        "players": {"white": position.players[0], "black": position.players[1]},
        "board": grid,
        "side_to_move": str(position.side_to_move),
        "castling": {
            key: bool(position.castling & right) for key, right in _CASTLING_KEYS.items()
        },
        "en_passant": (
            square_name(position.en_passant) if position.en_passant is not None else None
        ),
        "halfmove_clock": position.halfmove_clock,
        "fullmove_number": position.fullmove_number,
        "moves": [move_to_dict(m) for m in position.moves],
        "is_check": position.is_check,
        "is_checkmate": position.is_checkmate,
        "is_stalemate": position.is_stalemate,
        "is_game_over": position.is_game_over,
        "winner": str(winner) if winner is not None else None,
    }


def position_from_dict(data: dict[str, Any]) -> Position:
    """Rebuild a position; status flags are recomputed, not trusted."""
    grid = _field(data, "board")
    if len(grid) != 8 or any(len(row) != 8 for row in grid):
        raise ValueError("Board must be 8 rows of 8 squares")

    board = Board()
    for row, cells in enumerate(grid):
        for file, cell in enumerate(cells):
            if cell is None:
                continue
            sq = make_square(file, row)
            board[sq] = piece_from_dict(cell).placed(sq)

    castling = CastlingRights.NONE
    for key, right in _CASTLING_KEYS.items():
        if _field(data, "castling").get(key, False):
            castling |= right

    ep = data.get("en_passant")
    players = data.get("players") or {}
    return Position(
        board,
        _color(_field(data, "side_to_move")),
        castling,
        parse_square(ep) if ep else None,
        int(data.get("halfmove_clock", 0)),
        int(data.get("fullmove_number", 1)),
        game_id=str(data.get("game_id", "")),
        players=(str(players.get("white", "White")), str(players.get("black", "Black"))),
        moves=tuple(move_from_dict(m) for m in data.get("moves", ())),
    )
