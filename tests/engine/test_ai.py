"""Tests for the AI player and difficulty presets."""

import logging
import random

import pytest

from rookery.core.enums import Color
from rookery.core.notation import STARTING_FEN, position_from_fen, replay_movetext
from rookery.core.position import Position
from rookery.engine.ai import ChessAI
from rookery.engine.difficulty import AIConfig, Difficulty
from rookery.engine.search import (
    CancelCheck,
    RankedMove,
    SearchLimits,
    SearchResult,
)

WHITE_MATES_IN_ONE = "6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1"


def _shuffled(fen: str, shuffle: str, rounds: int) -> Position:
    return replay_movetext(" ".join([shuffle] * rounds), position_from_fen(fen))


class _FailingEngine:
    def search(
        self,
        position: Position,
        limits: SearchLimits,
        is_cancelled: CancelCheck | None = None,
    ) -> SearchResult:
        raise RuntimeError("engine exploded")


class _RankingEngine:
    """Ranks legal moves in generation order; the first one is best."""

    def search(
        self,
        position: Position,
        limits: SearchLimits,
        is_cancelled: CancelCheck | None = None,
    ) -> SearchResult:
        ranked = tuple(
            RankedMove(move, 100 - i) for i, move in enumerate(position.legal_moves)
        )
        return SearchResult(ranked[0].move, 100, 1, len(ranked), ranked_moves=ranked)


class TestAIConfig:
    @pytest.mark.parametrize(
        ("difficulty", "depth", "time_ms", "randomness", "book"),
        [
            (Difficulty.BEGINNER, 2, 1000, 0.3, False),
            (Difficulty.INTERMEDIATE, 3, 2000, 0.1, True),
            (Difficulty.ADVANCED, 4, 5000, 0.05, True),
            (Difficulty.EXPERT, 5, 8000, 0.0, True),
            (Difficulty.MASTER, 6, 15000, 0.0, True),
        ],
    )
    def test_presets(
        self,
        difficulty: Difficulty,
        depth: int,
        time_ms: int,
        randomness: float,
        book: bool,
    ) -> None:
        config = AIConfig.for_difficulty(difficulty)
        assert config.difficulty == difficulty
        assert config.max_depth == depth
        assert config.time_limit_ms == time_ms
        assert config.randomness == randomness
        assert config.use_opening_book is book

    def test_preset_by_name(self) -> None:
        assert AIConfig.for_difficulty("advanced").difficulty == Difficulty.ADVANCED

    def test_unknown_preset(self) -> None:
        with pytest.raises(ValueError):
            AIConfig.for_difficulty("grandmaster")

    def test_overrides_copy(self) -> None:
        base = AIConfig.for_difficulty(Difficulty.EXPERT)
        quick = base.with_overrides(max_depth=2, time_limit_ms=300)
        assert (quick.max_depth, quick.time_limit_ms) == (2, 300)
        assert base.max_depth == 5

    @pytest.mark.parametrize(
        "changes",
        [{"max_depth": 0}, {"time_limit_ms": 0}, {"randomness": 1.5}, {"random_slice": 0.0}],
    )
    def test_invalid_values(self, changes: dict[str, object]) -> None:
        with pytest.raises(ValueError):
            AIConfig.for_difficulty(Difficulty.EXPERT).with_overrides(**changes)


class TestMoveChoice:
    def test_book_move_at_start(self, rng: random.Random) -> None:
        ai = ChessAI(Difficulty.INTERMEDIATE, rng=rng)
        result = ai.find_best_move(Position.initial())
        assert result.from_book
        assert result.best_move.notation in {"e4", "d4"}
        assert result.depth == 0
        assert ai.stats is result

    def test_beginner_skips_book_and_finds_mate(self, rng: random.Random) -> None:
        config = AIConfig.for_difficulty(Difficulty.BEGINNER).with_overrides(randomness=0.0)
        ai = ChessAI(config, rng=rng)
        result = ai.find_best_move(position_from_fen(WHITE_MATES_IN_ONE))
        assert not result.from_book
        assert result.best_move.notation == "Ra8"

    def test_no_legal_moves(self) -> None:
        ai = ChessAI(Difficulty.EXPERT)
        result = ai.find_best_move(position_from_fen("7k/8/5KQ1/8/8/8/8/8 b - - 0 1"))
        assert result.best_move is None

    def test_engine_failure_falls_back_to_random_move(
        self, rng: random.Random, caplog: pytest.LogCaptureFixture
    ) -> None:
        config = AIConfig.for_difficulty(Difficulty.EXPERT).with_overrides(
            use_opening_book=False
        )
        ai = ChessAI(config, rng=rng, engine=_FailingEngine())
        pos = position_from_fen(STARTING_FEN)

        with caplog.at_level(logging.ERROR, logger="rookery.engine.ai"):
            result = ai.find_best_move(pos)

        assert result.best_move in pos.legal_moves
        assert "Move search failed" in caplog.text

    def test_no_randomness_keeps_best(self, rng: random.Random) -> None:
        config = AIConfig.for_difficulty(Difficulty.EXPERT).with_overrides(
            use_opening_book=False
        )
        ai = ChessAI(config, rng=rng, engine=_RankingEngine())
        pos = position_from_fen(STARTING_FEN)
        for _ in range(10):
            assert ai.find_best_move(pos).best_move == pos.legal_moves[0]

    def test_randomness_picks_from_top_slice(self, rng: random.Random) -> None:
        config = AIConfig.for_difficulty(Difficulty.EXPERT).with_overrides(
            use_opening_book=False, randomness=1.0, random_slice=0.1
        )
        ai = ChessAI(config, rng=rng, engine=_RankingEngine())
        pos = position_from_fen(STARTING_FEN)
        # 20 moves at a 10% slice leaves the top two.
        top = set(pos.legal_moves[:2])
        picks = {ai.find_best_move(pos).best_move for _ in range(30)}
        assert picks <= top
        assert len(picks) == 2


class TestAnalysis:
    def test_analyze_position_orders_for_white(self) -> None:
        ai = ChessAI(Difficulty.EXPERT)
        pos = position_from_fen("4k3/8/8/3q4/4P3/8/8/4K3 w - - 0 1")
        ranked = ai.analyze_position(pos, count=3)
        assert len(ranked) == 3
        assert ranked[0].move.notation == "exd5"
        assert [r.score_cp for r in ranked] == sorted(
            (r.score_cp for r in ranked), reverse=True
        )

    def test_analyze_position_orders_for_black(self) -> None:
        ai = ChessAI(Difficulty.EXPERT)
        pos = position_from_fen("4k3/8/8/3p4/4Q3/8/8/4K3 b - - 0 1")
        ranked = ai.analyze_position(pos, count=2)
        assert ranked[0].move.notation == "dxe4"
        assert ranked[0].score_cp <= ranked[1].score_cp

    def test_evaluate_matches_static_eval(self) -> None:
        assert ChessAI().evaluate(Position.initial()) == 0

    def test_should_resign_only_when_lost_and_late(self) -> None:
        ai = ChessAI(Difficulty.INTERMEDIATE)
        fen = "7k/8/8/8/8/8/8/2QQ2K1 w - - 0 1"
        early = position_from_fen(fen)
        late = _shuffled(fen, "Kg2 Kh7 Kg1 Kh8", 6)

        assert not ai.should_resign(early, Color.BLACK)
        assert ai.should_resign(late, Color.BLACK)
        assert not ai.should_resign(late)

    def test_should_offer_draw_in_long_level_game(self) -> None:
        ai = ChessAI()
        fen = "4k3/8/8/8/8/8/8/4K3 w - - 0 1"
        assert not ai.should_offer_draw(position_from_fen(fen))
        assert ai.should_offer_draw(_shuffled(fen, "Ke2 Ke7 Ke1 Ke8", 11))


class TestConfiguration:
    def test_update_config(self) -> None:
        ai = ChessAI(Difficulty.ADVANCED)
        config = ai.update_config(max_depth=2)
        assert config.max_depth == 2
        assert ai.config is config
        assert config.difficulty == Difficulty.ADVANCED

    def test_update_config_rejects_bad_values(self) -> None:
        ai = ChessAI()
        with pytest.raises(ValueError):
            ai.update_config(max_depth=0)
        with pytest.raises(TypeError):
            ai.update_config(depth=3)

    def test_set_difficulty(self) -> None:
        ai = ChessAI(Difficulty.BEGINNER)
        ai.set_difficulty("master")
        assert ai.config == AIConfig.for_difficulty(Difficulty.MASTER)

    def test_reset_clears_cache_and_stats(self) -> None:
        config = AIConfig.for_difficulty(Difficulty.BEGINNER).with_overrides(randomness=0.0)
        ai = ChessAI(config)
        ai.find_best_move(position_from_fen(STARTING_FEN))
        assert len(ai.table) > 0
        assert ai.stats is not None

        ai.reset()

        assert len(ai.table) == 0
        assert ai.stats is None

    def test_separate_ais_have_separate_tables(self) -> None:
        assert ChessAI().table is not ChessAI().table
