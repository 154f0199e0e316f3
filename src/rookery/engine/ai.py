"""AI player: opening book, search and difficulty-based move choice."""

from __future__ import annotations

import logging
import math
import random
from dataclasses import replace
from time import perf_counter
from typing import Final

from rookery.core.enums import Color
from rookery.core.position import Position
from rookery.engine.difficulty import AIConfig, Difficulty
from rookery.engine.evaluator import evaluate
from rookery.engine.minimax import MinimaxSearchEngine
from rookery.engine.opening_book import OpeningBook
from rookery.engine.search import (
    CancelCheck,
    IEngine,
    RankedMove,
    SearchLimits,
    SearchResult,
)
from rookery.engine.transposition import TranspositionTable

_LOGGER = logging.getLogger(__name__)

ANALYSIS_MOVE_LIMIT: Final = 20
RESIGN_MIN_MOVES: Final = 20
DRAW_OFFER_MARGIN: Final = 50
DRAW_OFFER_MIN_MOVES: Final = 40


class ChessAI:
    """Computer opponent for one side of a game.

    Each instance owns its transposition table unless one is passed in, so
    two AIs only share cached results when they are given the same table.
    """

    __slots__ = ("_config", "_table", "_engine", "_book", "_rng", "_stats")

    def __init__(
        self,
        config: AIConfig | Difficulty | str = Difficulty.INTERMEDIATE,
        *,
        table: TranspositionTable | None = None,
        rng: random.Random | None = None,
        engine: IEngine | None = None,
    ) -> None:
        if not isinstance(config, AIConfig):
            config = AIConfig.for_difficulty(config)
        self._config = config
        self._table = table if table is not None else TranspositionTable()
        self._engine: IEngine = engine or MinimaxSearchEngine(self._table)
        self._rng = rng or random.Random()
        self._book = OpeningBook(self._rng)
        self._stats: SearchResult | None = None

    @property
    def config(self) -> AIConfig:
        return self._config

    @property
    def table(self) -> TranspositionTable:
        return self._table

    @property
    def book(self) -> OpeningBook:
        return self._book

    @property
    def stats(self) -> SearchResult | None:
        """Result of the most recent :meth:`find_best_move` call."""
        return self._stats

    # ── Move choice ──────────────────────────────────────────────────────

    def find_best_move(
        self,
        position: Position,
        is_cancelled: CancelCheck | None = None,
    ) -> SearchResult:
        """Pick a move for the side to move.

        ``best_move`` is ``None`` only when the side to move has no legal
        move. Failures inside the book or the search are logged and answered
        with a random legal move.
        """
        started = perf_counter()
        legal = position.legal_moves
        if not legal:
            result = SearchResult(None, evaluate(position), 0, 0)
            self._stats = result
            return result

        config = self._config
        try:
            result = None
            if config.use_opening_book and self._book.is_in_opening_phase(position):
                move = self._book.get_book_move(position)
                if move is not None:
                    result = SearchResult(
                        move,
                        self._book.opening_evaluation(position),
                        0,
                        0,
                        _elapsed_ms(started),
                        from_book=True,
                    )
                    _LOGGER.info("Book move %s", move.notation)
            if result is None:
                limits = SearchLimits(config.max_depth, config.time_limit_ms)
                result = self._apply_randomness(
                    self._engine.search(position, limits, is_cancelled)
                )
        except Exception:
            _LOGGER.exception("Move search failed, playing a random legal move")
            result = SearchResult(self._rng.choice(legal), 0, 0, 0, _elapsed_ms(started))

        self._stats = result
        return result

    def _apply_randomness(self, result: SearchResult) -> SearchResult:
        config = self._config
        ranked = result.ranked_moves
        if result.best_move is None or len(ranked) < 2 or config.randomness <= 0:
            return result
        if self._rng.random() >= config.randomness:
            return result

        pool = ranked[: max(1, math.ceil(len(ranked) * config.random_slice))]
        pick = self._rng.choice(pool)
        if pick.move != result.best_move:
            _LOGGER.debug(
                "Difficulty randomness: %s instead of %s",
                pick.move.notation,
                result.best_move.notation,
            )
        return replace(result, best_move=pick.move, score_cp=pick.score_cp)

    # ── Analysis helpers ─────────────────────────────────────────────────

    def analyze_position(self, position: Position, count: int = 3) -> list[RankedMove]:
        """Top *count* moves by static evaluation of the resulting position."""
        candidates = [
            RankedMove(move, evaluate(position.after(move)))
            for move in position.legal_moves[:ANALYSIS_MOVE_LIMIT]
        ]
        candidates.sort(
            key=lambda rm: rm.score_cp,
            reverse=position.side_to_move == Color.WHITE,
        )
        return candidates[:count]

    def evaluate(self, position: Position) -> int:
        return evaluate(position)

    def should_resign(self, position: Position, color: Color | None = None) -> bool:
        """Whether *color* (default: side to move) is hopelessly behind."""
        color = position.side_to_move if color is None else color
        score = evaluate(position)
        if color == Color.BLACK:
            score = -score
        return score < -self._config.resign_threshold and len(position.moves) > RESIGN_MIN_MOVES

    def should_offer_draw(self, position: Position) -> bool:
        return (
            abs(evaluate(position)) < DRAW_OFFER_MARGIN
            and len(position.moves) > DRAW_OFFER_MIN_MOVES
        )

    # ── Configuration ────────────────────────────────────────────────────

    def update_config(self, **overrides: object) -> AIConfig:
        self._config = self._config.with_overrides(**overrides)
        _LOGGER.debug("AI config updated: %s", self._config)
        return self._config

    def set_difficulty(self, difficulty: Difficulty | str) -> AIConfig:
        self._config = AIConfig.for_difficulty(difficulty)
        return self._config

    def reset(self) -> None:
        """Forget cached search results and statistics."""
        self._table.clear()
        self._stats = None


def _elapsed_ms(started: float) -> int:
    return int((perf_counter() - started) * 1000)
