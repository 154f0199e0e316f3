"""FEN parsing and serialization."""

from __future__ import annotations

from rookery.core.board import Board, home_row, pawn_row
from rookery.core.enums import CastlingRights, Color, PieceType
from rookery.core.piece import Piece
from rookery.core.position import Position
from rookery.core.types import Square, make_square, parse_square, rank_of, square_name

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

_CASTLING_CHARS: dict[str, CastlingRights] = {
    "K": CastlingRights.WHITE_KINGSIDE,
    "Q": CastlingRights.WHITE_QUEENSIDE,
    "k": CastlingRights.BLACK_KINGSIDE,
    "q": CastlingRights.BLACK_QUEENSIDE,
}

# Files a piece type starts on; pieces elsewhere are taken to have moved.
_HOME_FILES: dict[PieceType, tuple[int, ...]] = {
    PieceType.KNIGHT: (1, 6),
    PieceType.BISHOP: (2, 5),
    PieceType.QUEEN: (3,),
}


def position_from_fen(
    fen: str,
    *,
    game_id: str = "",
    players: tuple[str, str] = ("White", "Black"),
) -> Position:
    """Parse a FEN string into a :class:`Position`.

    FEN carries no move history, so each piece's ``has_moved`` flag is
    inferred: pawns off their starting row, pieces off their home squares,
    and kings and rooks without a matching castling right count as moved.
    """
    parts = fen.split()
    if not (4 <= len(parts) <= 6):
        raise ValueError(f"Invalid FEN (need 4-6 fields): {fen!r}")

    placement, side_part, castling_part, ep_part = parts[:4]

    # 1. Side to move
    if side_part == "w":
        side = Color.WHITE
    elif side_part == "b":
        side = Color.BLACK
    else:
        raise ValueError(f"Invalid FEN side-to-move field: {side_part!r}")

    # 2. Castling
    castling = CastlingRights.NONE
    if castling_part != "-":
        seen: set[str] = set()
        for ch in castling_part:
            right = _CASTLING_CHARS.get(ch)
            if right is None or ch in seen:
                raise ValueError(f"Invalid FEN castling field: {castling_part!r}")
            seen.add(ch)
            castling |= right

    # 3. Piece placement, rank 8 first
    rows = placement.split("/")
    if len(rows) != 8:
        raise ValueError(f"Invalid FEN board (must contain 8 ranks): {fen!r}")
    board = Board()
    counters: dict[tuple[Color, PieceType], int] = {}
    for row, row_text in enumerate(rows):
        file = 0
        for ch in row_text:
            if ch.isdigit():
                step = int(ch)
                if not (1 <= step <= 8):
                    raise ValueError(f"Invalid FEN digit {ch!r}: {fen!r}")
                file += step
            else:
                if file >= 8:
                    raise ValueError(f"Invalid FEN rank width: {fen!r}")
                sq = make_square(file, row)
                piece = Piece.from_char(ch)
                key = (piece.color, piece.piece_type)
                counters[key] = counters.get(key, 0) + 1
                board[sq] = Piece(
                    piece.color,
                    piece.piece_type,
                    f"{'w' if piece.color == Color.WHITE else 'b'}"
                    f"{str(piece).lower()}{counters[key]}",
                    sq,
                    _infer_has_moved(piece, sq, castling),
                )
                file += 1
            if file > 8:
                raise ValueError(f"Invalid FEN rank width: {fen!r}")
        if file != 8:
            raise ValueError(f"Invalid FEN rank width: {fen!r}")

    # 4. En passant
    ep: Square | None = None
    if ep_part != "-":
        ep = parse_square(ep_part)
        expected_rank = 6 if side == Color.WHITE else 3
        if rank_of(ep) != expected_rank:
            raise ValueError(
                f"Invalid FEN en-passant square for side-to-move: {ep_part!r}"
            )

    # 5–6. Clocks (optional)
    try:
        halfmove = int(parts[4]) if len(parts) > 4 else 0
        fullmove = int(parts[5]) if len(parts) > 5 else 1
    except ValueError:
        raise ValueError(f"Invalid FEN move counters: {fen!r}") from None
    if halfmove < 0:
        raise ValueError(f"Invalid FEN halfmove clock: {parts[4]!r}")
    if fullmove < 1:
        raise ValueError(f"Invalid FEN fullmove number: {parts[5]!r}")

    return Position(
        board,
        side,
        castling,
        ep,
        halfmove,
        fullmove,
        game_id=game_id,
        players=players,
    )


def _infer_has_moved(piece: Piece, sq: Square, castling: CastlingRights) -> bool:
    color = piece.color
    row = sq >> 3
    file = sq & 7
    if piece.piece_type == PieceType.PAWN:
        return row != pawn_row(color)
    if row != home_row(color):
        return True
    if piece.piece_type == PieceType.KING:
        return file != 4 or not castling & CastlingRights.for_color(color)
    if piece.piece_type == PieceType.ROOK:
        if file == 7:
            return not castling & CastlingRights.kingside(color)
        if file == 0:
            return not castling & CastlingRights.queenside(color)
        return True
    return file not in _HOME_FILES[piece.piece_type]


def position_to_fen(pos: Position) -> str:
    """Serialise a :class:`Position` to FEN."""
    # 1. Board
    rows: list[str] = []
    for row in range(8):
        empty = 0
        text = ""
        for file in range(8):
            piece = pos.board[make_square(file, row)]
            if piece is None:
                empty += 1
            else:
                if empty:
                    text += str(empty)
                    empty = 0
                text += str(piece)
        if empty:
            text += str(empty)
        rows.append(text)
    board_str = "/".join(rows)

    # 2. Side
    side_str = "w" if pos.side_to_move == Color.WHITE else "b"

    # 3. Castling
    castling_str = "".join(
        ch for ch, right in _CASTLING_CHARS.items() if pos.usable_castling & right
    )
    if not castling_str:
        castling_str = "-"

    # 4. En passant
    ep_str = square_name(pos.en_passant) if pos.en_passant is not None else "-"

    return (
        f"{board_str} {side_str} {castling_str} {ep_str} "
        f"{pos.halfmove_clock} {pos.fullmove_number}"
    )
