"""Tests for Rules: validation, application, checkmate and stalemate."""

import time

import pytest

from rookery.core import rules
from rookery.core.enums import Color, GameStatus, PieceType
from rookery.core.notation import position_from_fen
from rookery.core.rules import IllegalMoveError, Rules
from rookery.core.types import E2, E3, E4, E7, parse_square


class TestInitialPosition:
    def test_labels_and_rights(self) -> None:
        pos = Rules.create_initial_position("game-7", "Alice", "Bob")
        assert pos.game_id == "game-7"
        assert pos.players == ("Alice", "Bob")
        assert pos.side_to_move == Color.WHITE
        assert pos.white_king_side and pos.white_queen_side
        assert pos.black_king_side and pos.black_queen_side
        assert pos.en_passant is None
        assert pos.moves == ()

    def test_twenty_legal_moves(self) -> None:
        assert len(Rules.create_initial_position().legal_moves) == 20


class TestIsLegalMove:
    def test_pawn_push(self) -> None:
        pos = Rules.create_initial_position()
        assert Rules.is_legal_move(pos, E2, E4)
        assert Rules.is_legal_move(pos, E2, E3)
        assert not Rules.is_legal_move(pos, E2, parse_square("e5"))

    def test_wrong_color(self) -> None:
        pos = Rules.create_initial_position()
        assert not Rules.is_legal_move(pos, E7, parse_square("e5"))

    def test_never_raises_on_bad_squares(self) -> None:
        pos = Rules.create_initial_position()
        assert not Rules.is_legal_move(pos, -1, E4)
        assert not Rules.is_legal_move(pos, E2, 64)
        assert not Rules.is_legal_move(pos, E4, parse_square("e5"))

    def test_fast_enough_for_interactive_use(self) -> None:
        pos = Rules.create_initial_position()
        started = time.perf_counter()
        for i in range(1000):
            Rules.is_legal_move(pos, i % 64, (i * 7) % 64)
        assert time.perf_counter() - started < 1.0

    def test_legal_destinations(self) -> None:
        pos = Rules.create_initial_position()
        assert sorted(Rules.legal_destinations(pos, E2)) == sorted([E3, E4])


class TestApplyMove:
    def test_pawn_single_step(self) -> None:
        pos = Rules.create_initial_position()
        after = Rules.apply_move(pos, E2, E3)
        pawn = after.board[E3]
        assert pawn.piece_type == PieceType.PAWN
        assert pawn.has_moved
        assert after.board[E2] is None
        assert after.side_to_move == Color.BLACK
        assert after.last_move.notation == "e3"
        assert after.last_move.timestamp > 0

    def test_illegal_raises(self) -> None:
        pos = Rules.create_initial_position()
        with pytest.raises(IllegalMoveError):
            Rules.apply_move(pos, E2, parse_square("e5"))

    def test_illegal_error_is_value_error(self) -> None:
        pos = Rules.create_initial_position()
        with pytest.raises(ValueError):
            Rules.apply_move(pos, E4, parse_square("e5"))

    def test_promotion_defaults_to_queen(self) -> None:
        pos = position_from_fen("8/4P3/8/8/8/8/k7/4K3 w - - 0 1")
        after = Rules.apply_move(pos, parse_square("e7"), parse_square("e8"))
        assert after.board[parse_square("e8")].piece_type == PieceType.QUEEN
        assert after.last_move.notation == "e8=Q"

    def test_underpromotion(self) -> None:
        pos = position_from_fen("8/4P3/8/8/8/8/k7/4K3 w - - 0 1")
        after = Rules.apply_move(
            pos, parse_square("e7"), parse_square("e8"), PieceType.KNIGHT
        )
        assert after.board[parse_square("e8")].piece_type == PieceType.KNIGHT

    def test_en_passant_removes_pawn(self) -> None:
        pos = position_from_fen("4k3/8/8/3pP3/8/8/8/4K3 w - d6 0 2")
        after = Rules.apply_move(pos, parse_square("e5"), parse_square("d6"))
        assert after.board[parse_square("d5")] is None
        assert after.last_move.is_en_passant

    def test_castling_through_rules(self) -> None:
        pos = position_from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
        after = Rules.apply_move(pos, parse_square("e1"), parse_square("g1"))
        assert after.board[parse_square("f1")].piece_type == PieceType.ROOK
        assert not after.white_king_side
        assert not after.white_queen_side

    def test_module_aliases(self) -> None:
        pos = rules.create_initial_position()
        assert rules.is_legal_move(pos, E2, E4)
        assert rules.apply_move(pos, E2, E4).side_to_move == Color.BLACK


class TestCheck:
    def test_starting_not_in_check(self) -> None:
        pos = Rules.create_initial_position()
        assert not Rules.is_king_in_check(pos, Color.WHITE)
        assert not Rules.is_king_in_check(pos, Color.BLACK)

    def test_fools_mate_in_check(self) -> None:
        pos = position_from_fen(
            "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"
        )
        assert Rules.is_king_in_check(pos, Color.WHITE)
        assert not Rules.is_king_in_check(pos, Color.BLACK)


class TestCheckmate:
    def test_fools_mate(self) -> None:
        pos = position_from_fen(
            "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"
        )
        assert Rules.is_checkmate(pos)
        result = Rules.game_result(pos)
        assert result.status == GameStatus.CHECKMATE
        assert result.winner == Color.BLACK
        assert result.reason == "Checkmate! Black wins."

    def test_rook_mate(self) -> None:
        # Rook on a8 checks black king d8; white king d6 covers the escapes.
        pos = position_from_fen("R2k4/8/3K4/8/8/8/8/8 b - - 0 1")
        assert Rules.is_checkmate(pos)
        assert Rules.is_checkmate(pos, Color.BLACK)
        assert not Rules.is_checkmate(pos, Color.WHITE)
        assert Rules.game_result(pos).winner == Color.WHITE
        assert pos.legal_moves == ()

    def test_not_checkmate_when_can_escape(self) -> None:
        pos = position_from_fen("4k3/8/8/8/8/8/8/r3K3 w - - 0 1")
        assert not Rules.is_checkmate(pos)


class TestStalemate:
    def test_king_trapped(self) -> None:
        pos = position_from_fen("7k/8/5KQ1/8/8/8/8/8 b - - 0 1")
        assert Rules.is_stalemate(pos)
        assert not Rules.is_checkmate(pos)
        result = Rules.game_result(pos)
        assert result.status == GameStatus.STALEMATE
        assert result.winner is None
        assert result.reason == "Stalemate! Game is a draw."

    def test_not_stalemate_when_has_moves(self) -> None:
        pos = position_from_fen("7k/8/5K2/8/8/8/8/8 b - - 0 1")
        assert not Rules.is_stalemate(pos)


class TestGameResult:
    def test_in_progress_at_start(self) -> None:
        assert Rules.game_result(Rules.create_initial_position()) is None

    def test_resignation(self) -> None:
        result = Rules.resign(Rules.create_initial_position(), Color.WHITE)
        assert result.status == GameStatus.RESIGNATION
        assert result.winner == Color.BLACK
        assert result.score_token == "0-1"

    def test_timeout(self) -> None:
        result = Rules.timeout(Rules.create_initial_position(), Color.BLACK)
        assert result.status == GameStatus.TIMEOUT
        assert result.winner == Color.WHITE

    def test_agreed_draw(self) -> None:
        result = Rules.agree_draw(Rules.create_initial_position())
        assert result.is_draw
        assert result.score_token == "1/2-1/2"
