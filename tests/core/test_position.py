"""Tests for Position successors and derived state."""

from rookery.core.enums import CastlingRights, Color, PieceType
from rookery.core.notation import STARTING_FEN, position_from_fen, position_to_fen
from rookery.core.position import Position
from rookery.core.rules import Rules
from rookery.core.types import (
    A1, A2, C1, D1, D5, D7, E1, E2, E4, F1, G1, H1,
    parse_square,
)

CASTLE_FEN = "r3k2r/pppppppp/8/8/8/8/PPPPPPPP/R3K2R w KQkq - 0 1"


def _find(pos: Position, from_sq: int, to_sq: int):
    move = Rules.find_move(pos, from_sq, to_sq)
    assert move is not None, f"{from_sq}->{to_sq} not legal"
    return move


class TestSuccessor:
    def test_side_switches(self) -> None:
        pos = Position.initial()
        after = pos.after(_find(pos, E2, E4))
        assert after.side_to_move == Color.BLACK

    def test_original_is_untouched(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        fen_before = position_to_fen(pos)
        for move in pos.legal_moves:
            pos.after(move)
        assert position_to_fen(pos) == fen_before
        assert pos.moves == ()

    def test_en_passant_set(self) -> None:
        pos = Position.initial()
        after = pos.after(_find(pos, E2, E4))
        assert after.en_passant == parse_square("e3")

    def test_en_passant_replaced(self) -> None:
        pos = Position.initial()
        pos = pos.after(_find(pos, E2, E4))
        pos = pos.after(_find(pos, D7, D5))
        assert pos.en_passant == parse_square("d6")

    def test_en_passant_cleared_after_quiet_move(self) -> None:
        pos = Position.initial()
        pos = pos.after(_find(pos, E2, E4))
        pos = pos.after(_find(pos, parse_square("g8"), parse_square("f6")))
        assert pos.en_passant is None

    def test_capture_records_victim(self) -> None:
        fen = "rnbqkbnr/ppp1pppp/8/3p4/4P3/8/PPPP1PPP/RNBQKBNR w KQkq d6 0 2"
        pos = position_from_fen(fen)
        after = pos.after(_find(pos, E4, D5))
        piece = after.board[D5]
        assert (piece.color, piece.piece_type) == (Color.WHITE, PieceType.PAWN)
        assert after.last_move.captured.color == Color.BLACK

    def test_history_and_labels(self) -> None:
        pos = Position.initial("g1", "Alice", "Bob")
        pos = pos.after(_find(pos, E2, E4), timestamp=12.5)
        pos = pos.after(_find(pos, D7, D5))
        assert [m.notation for m in pos.moves] == ["e4", "d5"]
        assert pos.moves[0].player == "Alice"
        assert pos.moves[0].timestamp == 12.5
        assert pos.moves[1].player == "Bob"
        assert pos.game_id == "g1"

    def test_clocks(self) -> None:
        pos = Position.initial()
        pos = pos.after(_find(pos, G1, parse_square("f3")))
        assert pos.halfmove_clock == 1
        assert pos.fullmove_number == 1
        pos = pos.after(_find(pos, D7, D5))
        assert pos.halfmove_clock == 0
        assert pos.fullmove_number == 2


class TestCastlingRightsUpdate:
    def test_king_move_removes_rights(self) -> None:
        pos = position_from_fen(CASTLE_FEN)
        after = pos.after(_find(pos, E1, F1))
        assert not after.white_king_side
        assert not after.white_queen_side
        assert after.black_king_side and after.black_queen_side

    def test_rook_move_removes_one_right(self) -> None:
        pos = position_from_fen("r3k2r/pppppppp/8/8/8/8/1PPPPPPP/R3K2R w KQkq - 0 1")
        after = pos.after(_find(pos, A1, A2))
        assert not (after.castling & CastlingRights.WHITE_QUEENSIDE)
        assert after.castling & CastlingRights.WHITE_KINGSIDE

    def test_castling_kingside(self) -> None:
        pos = position_from_fen(CASTLE_FEN)
        after = pos.after(_find(pos, E1, G1))
        assert after.board[G1].piece_type == PieceType.KING
        assert after.board[F1].piece_type == PieceType.ROOK
        assert after.board[H1] is None
        assert after.last_move.notation == "O-O"
        assert not after.white_king_side and not after.white_queen_side

    def test_castling_queenside(self) -> None:
        pos = position_from_fen(CASTLE_FEN)
        after = pos.after(_find(pos, E1, C1))
        assert after.board[C1].piece_type == PieceType.KING
        assert after.board[D1].piece_type == PieceType.ROOK
        assert after.board[A1] is None
        assert after.last_move.notation == "O-O-O"


class TestPromotion:
    def test_promote_to_queen(self) -> None:
        pos = position_from_fen("8/4P3/8/8/8/8/4k3/4K3 w - - 0 1")
        move = Rules.find_move(pos, parse_square("e7"), parse_square("e8"))
        after = pos.after(move)
        assert after.board[parse_square("e8")].piece_type == PieceType.QUEEN


class TestStatus:
    def test_legal_moves_are_memoised(self) -> None:
        pos = Position.initial()
        assert pos.legal_moves is pos.legal_moves

    def test_notation_only_on_legal_moves_and_history(self) -> None:
        pos = Position.initial()
        assert all(m.notation == "" for m in pos.search_moves)
        assert list(pos.search_moves) == list(pos.legal_moves)
        assert {m.notation for m in pos.legal_moves} >= {"e4", "Nf3"}

        bare = next(m for m in pos.search_moves if m.to_sq == E4)
        assert pos.after(bare).last_move.notation == "e4"
        assert pos.after(bare, notate=False).last_move.notation == ""

    def test_status_flags_at_start(self) -> None:
        pos = Position.initial()
        assert not pos.is_check
        assert not pos.is_checkmate
        assert not pos.is_stalemate
        assert not pos.is_game_over
        assert pos.winner is None

    def test_has_legal_move(self) -> None:
        pos = Position.initial()
        assert pos.has_legal_move(E2, E4)
        assert not pos.has_legal_move(E2, parse_square("e5"))

    def test_replace_drops_caches(self) -> None:
        pos = Position.initial()
        assert len(pos.legal_moves) == 20
        flipped = pos.replace(side_to_move=Color.BLACK)
        assert flipped.side_to_move == Color.BLACK
        assert all(m.piece.color == Color.BLACK for m in flipped.legal_moves)
