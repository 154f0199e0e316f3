"""Tests for FEN, PGN movetext and algebraic notation."""

import pytest

from rookery.core.algebraic import normalize, parse_notation
from rookery.core.enums import CastlingRights, Color, PieceType
from rookery.core.notation import (
    STARTING_FEN,
    build_pgn,
    movetext_tokens,
    pgn_movetext,
    position_from_fen,
    position_to_fen,
    replay_movetext,
)
from rookery.core.position import Position
from rookery.core.types import E1, E3, E8, parse_square


class TestFenParsing:
    def test_starting_side(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        assert pos.side_to_move == Color.WHITE

    def test_starting_castling(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        assert pos.castling == CastlingRights.ALL

    def test_starting_clocks(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        assert pos.halfmove_clock == 0
        assert pos.fullmove_number == 1

    def test_starting_kings(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        assert pos.board[E1].piece_type == PieceType.KING
        assert pos.board[E8].color == Color.BLACK

    def test_matches_initial_position(self) -> None:
        assert position_from_fen(STARTING_FEN).board == Position.initial().board

    def test_en_passant_square(self) -> None:
        fen = "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1"
        pos = position_from_fen(fen)
        assert pos.en_passant == E3

    def test_partial_castling(self) -> None:
        fen = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w Kq - 0 1"
        pos = position_from_fen(fen)
        assert pos.castling == (
            CastlingRights.WHITE_KINGSIDE | CastlingRights.BLACK_QUEENSIDE
        )

    def test_has_moved_inferred(self) -> None:
        fen = "r3k2r/8/8/8/4P3/8/8/R3K2R w Kq - 0 1"
        pos = position_from_fen(fen)
        assert pos.board[parse_square("e4")].has_moved
        assert not pos.board[parse_square("h1")].has_moved
        assert pos.board[parse_square("a1")].has_moved
        assert not pos.board[E1].has_moved

    def test_invalid_fen_raises(self) -> None:
        with pytest.raises(ValueError):
            position_from_fen("invalid")

    def test_invalid_side_to_move_raises(self) -> None:
        with pytest.raises(ValueError, match="side-to-move"):
            position_from_fen("8/8/8/8/8/8/8/8 x - - 0 1")

    def test_invalid_board_rank_count_raises(self) -> None:
        with pytest.raises(ValueError, match="8 ranks"):
            position_from_fen("8/8/8/8/8/8/8 w - - 0 1")

    def test_invalid_board_rank_width_raises(self) -> None:
        with pytest.raises(ValueError, match="Invalid FEN"):
            position_from_fen("9/8/8/8/8/8/8/8 w - - 0 1")

    def test_invalid_en_passant_rank_raises(self) -> None:
        with pytest.raises(ValueError, match="en-passant"):
            position_from_fen("4k3/8/8/8/4P3/8/8/4K3 w - e3 0 1")

    def test_invalid_counters_raise(self) -> None:
        with pytest.raises(ValueError, match="counters"):
            position_from_fen("4k3/8/8/8/8/8/8/4K3 w - - x 1")


class TestFenRoundTrip:
    @pytest.mark.parametrize(
        "fen",
        [
            STARTING_FEN,
            "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1",
            "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1",
            "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1",
        ],
    )
    def test_round_trip(self, fen: str) -> None:
        assert position_to_fen(position_from_fen(fen)) == fen

    def test_after_moves(self) -> None:
        pos = replay_movetext("1. e4 c5 2. Nf3")
        assert position_to_fen(pos) == (
            "rnbqkbnr/pp1ppppp/8/2p5/4P3/5N2/PPPP1PPP/RNBQKB1R b KQkq - 1 2"
        )

    def test_captured_corner_rook_drops_right(self) -> None:
        start = position_from_fen("r3k2r/6B1/8/7r/8/8/8/4K3 w kq - 0 1")
        pos = replay_movetext("Bxh8 Rxh8", start)
        g8 = parse_square("g8")
        assert pos.black_king_side
        assert not pos.usable_castling & CastlingRights.BLACK_KINGSIDE
        assert not pos.replace(side_to_move=Color.BLACK).has_legal_move(E8, g8)

        fen = position_to_fen(pos)
        assert fen == "r3k2r/8/8/8/8/8/8/4K3 w q - 0 2"
        reloaded = position_from_fen(fen.replace(" w ", " b "))
        assert not reloaded.has_legal_move(E8, g8)
        assert reloaded.has_legal_move(E8, parse_square("c8"))

    def test_quiet_pawn_move_keeps_rights(self) -> None:
        pos = replay_movetext("1. a3")
        assert pos.white_king_side and pos.white_queen_side
        assert position_to_fen(pos).split()[2] == "KQkq"


class TestAlgebraicParsing:
    def test_pawn_and_piece_moves(self) -> None:
        pos = Position.initial()
        assert parse_notation(pos, "e4").to_sq == parse_square("e4")
        assert parse_notation(pos, "Nf3").from_sq == parse_square("g1")

    def test_check_suffix_ignored(self) -> None:
        pos = Position.initial()
        assert parse_notation(pos, "Nc3+").to_sq == parse_square("c3")

    def test_zero_castling(self) -> None:
        pos = position_from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
        assert parse_notation(pos, "0-0").is_castling
        assert parse_notation(pos, "O-O-O").to_sq == parse_square("c1")

    def test_promotion_default_and_explicit(self) -> None:
        pos = position_from_fen("8/P6k/8/8/8/8/8/K7 w - - 0 1")
        assert parse_notation(pos, "a8").promotion == PieceType.QUEEN
        assert parse_notation(pos, "a8=N").promotion == PieceType.KNIGHT

    def test_redundant_disambiguation(self) -> None:
        pos = Position.initial()
        assert parse_notation(pos, "Ng1f3").to_sq == parse_square("f3")

    def test_ambiguous_move_rejected(self) -> None:
        pos = position_from_fen("7k/8/8/8/8/8/8/1N3N1K w - - 0 1")
        with pytest.raises(ValueError, match="Ambiguous"):
            parse_notation(pos, "Nd2")
        assert parse_notation(pos, "Nbd2").from_sq == parse_square("b1")

    def test_illegal_move_rejected(self) -> None:
        with pytest.raises(ValueError, match="Illegal"):
            parse_notation(Position.initial(), "e5")

    def test_normalize(self) -> None:
        assert normalize(" Qh5+ ") == "Qh5"
        assert normalize("Qxf7#") == "Qxf7"
        assert normalize("0-0-0") == "O-O-O"


class TestPgn:
    def test_movetext_numbering(self) -> None:
        pos = replay_movetext("1. e4 e5 2. Nf3")
        assert pgn_movetext(pos.moves) == "1. e4 e5 2. Nf3"

    def test_movetext_with_result(self) -> None:
        assert pgn_movetext(["e4", "e5"], "1-0") == "1. e4 e5 1-0"

    def test_invalid_result_token(self) -> None:
        with pytest.raises(ValueError):
            pgn_movetext(["e4"], "2-0")

    def test_tokens_skip_numbers_comments_and_result(self) -> None:
        text = "1. e4 {best by test} e5 2. Nf3 Nc6 ; aside\n3. Bb5 1/2-1/2"
        assert movetext_tokens(text) == ["e4", "e5", "Nf3", "Nc6", "Bb5"]

    def test_replay_reports_bad_token(self) -> None:
        with pytest.raises(ValueError, match="Qh5"):
            replay_movetext("1. e4 Qh5")

    def test_build_pgn(self) -> None:
        text = build_pgn({"White": "Alice", "Black": 'Bob "B"'}, ["d4", "d5"], "*")
        lines = text.splitlines()
        assert lines[0] == '[White "Alice"]'
        assert lines[1] == '[Black "Bob \\"B\\""]'
        assert lines[3] == "1. d4 d5 *"
