"""Pure-Python minimax search with alpha-beta, quiescence and a shared TT."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from time import perf_counter, sleep
from typing import Final

from rookery.core.board import home_row
from rookery.core.enums import Color
from rookery.core.move import Move
from rookery.core.position import Position
from rookery.engine.evaluator import evaluate, piece_value
from rookery.engine.search import (
    MATE_SCORE,
    MATE_THRESHOLD,
    MAX_SEARCH_DEPTH,
    CancelCheck,
    IEngine,
    RankedMove,
    SearchLimits,
    SearchPhase,
    SearchResult,
)
from rookery.engine.transposition import NodeType, TranspositionTable

_LOGGER = logging.getLogger(__name__)

_INF_SCORE: Final = 1_000_000
QUIESCENCE_DEPTH: Final = 3
# A new iteration only starts while less than this share of the budget is spent.
_DEPTH_START_BUDGET: Final = 0.9
_YIELD_EVERY_NODES: Final = 4096

_TT_MOVE_BONUS: Final = 100_000
_CAPTURE_BASE: Final = 1000
_PROMOTION_BASE: Final = 800
_CASTLING_BONUS: Final = 500
_CENTER_WEIGHT: Final = 5
_DEVELOPMENT_BONUS: Final = 30


def _never_cancelled() -> bool:
    return False


def mate_score(side_to_move: Color, ply: int) -> int:
    """Score of a position where *side_to_move* is mated, *ply* from the root."""
    score = MATE_SCORE - ply
    return -score if side_to_move == Color.WHITE else score


def score_to_table(score: int, ply: int) -> int:
    """Mate scores become distances from the node at *ply* before storing."""
    if score > MATE_THRESHOLD:
        return score + ply
    if score < -MATE_THRESHOLD:
        return score - ply
    return score


def score_from_table(score: int, ply: int) -> int:
    """Inverse of :func:`score_to_table` for a probe at *ply*."""
    if score > MATE_THRESHOLD:
        return score - ply
    if score < -MATE_THRESHOLD:
        return score + ply
    return score


def move_order_score(move: Move, tt_move: str | None = None) -> int:
    """Additive ordering heuristic; higher is searched first."""
    score = 0
    if tt_move is not None and move.uci == tt_move:
        score += _TT_MOVE_BONUS

    if move.captured is not None:
        victim = piece_value(move.captured.piece_type)
        attacker = piece_value(move.piece.piece_type)
        score += (victim - attacker) * 10 + _CAPTURE_BASE

    if move.promotion is not None:
        score += piece_value(move.promotion) * 10 + _PROMOTION_BASE

    if move.is_castling:
        score += _CASTLING_BONUS

    to_sq = move.to_sq
    center_distance = abs((to_sq & 7) - 3.5) + abs((to_sq >> 3) - 3.5)
    score += int((7 - center_distance) * _CENTER_WEIGHT)

    back = home_row(move.piece.color)
    if (move.from_sq >> 3) == back and (to_sq >> 3) != back:
        score += _DEVELOPMENT_BONUS
    return score


def order_moves(moves: list[Move] | tuple[Move, ...], tt_move: str | None = None) -> list[Move]:
    return sorted(moves, key=lambda m: move_order_score(m, tt_move), reverse=True)


@dataclass(slots=True)
class _RootOutcome:
    scored: list[RankedMove]
    complete: bool


class MinimaxSearchEngine(IEngine):
    """Iterative-deepening minimax; white maximises, black minimises.

    Scores are always from white's point of view. A search that runs out of
    time or is cancelled keeps the result of the last completed depth; if
    not even depth 1 finished, the best fully searched root move so far is
    used, and failing that the first move in heuristic order.
    """

    __slots__ = (
        "_table",
        "_cancel_check",
        "_deadline",
        "_nodes",
        "_tt_hits",
        "_last_yield_nodes",
        "_phase",
        "_stopped_by",
    )

    def __init__(self, table: TranspositionTable | None = None) -> None:
        self._table = table if table is not None else TranspositionTable()
        self._cancel_check: CancelCheck = _never_cancelled
        self._deadline: float | None = None
        self._nodes = 0
        self._tt_hits = 0
        self._last_yield_nodes = 0
        self._phase = SearchPhase.IDLE
        self._stopped_by: SearchPhase | None = None

    @property
    def table(self) -> TranspositionTable:
        return self._table

    @property
    def phase(self) -> SearchPhase:
        return self._phase

    def search(
        self,
        position: Position,
        limits: SearchLimits,
        is_cancelled: CancelCheck | None = None,
    ) -> SearchResult:
        if limits.max_depth <= 0:
            raise ValueError("Search depth must be >= 1")

        started = perf_counter()
        self._nodes = 0
        self._tt_hits = 0
        self._last_yield_nodes = 0
        self._stopped_by = None
        self._cancel_check = is_cancelled or _never_cancelled
        self._deadline = None
        budget_s: float | None = None
        if limits.time_limit_ms is not None:
            budget_s = max(limits.time_limit_ms, 1) / 1000.0
            self._deadline = started + budget_s
        self._phase = SearchPhase.ITERATIVE_DEEPENING

        legal = position.legal_moves
        if not legal:
            self._phase = SearchPhase.DONE_DEPTH
            score = mate_score(position.side_to_move, 0) if position.is_check else 0
            return SearchResult(None, score, 0, 0, self._elapsed_ms(started))

        if len(legal) == 1:
            self._phase = SearchPhase.DONE_DEPTH
            only = legal[0]
            score = evaluate(position.after(only))
            return SearchResult(
                only,
                score,
                0,
                0,
                self._elapsed_ms(started),
                ranked_moves=(RankedMove(only, score),),
            )

        maximizing = position.side_to_move == Color.WHITE
        ordered = order_moves(legal)
        best_move = ordered[0]
        best_score = evaluate(position)
        ranked: tuple[RankedMove, ...] = ()
        completed_depth = 0
        final_phase = SearchPhase.DONE_DEPTH

        for depth in range(1, min(limits.max_depth, MAX_SEARCH_DEPTH) + 1):
            if budget_s is not None and perf_counter() - started > budget_s * _DEPTH_START_BUDGET:
                final_phase = SearchPhase.DONE_TIMEOUT
                break

            outcome = self._search_root(position, ordered, depth)
            if not outcome.complete:
                final_phase = self._stopped_by or SearchPhase.DONE_TIMEOUT
                if completed_depth == 0 and outcome.scored:
                    partial = self._rank(outcome.scored, maximizing)
                    best_move, best_score = partial[0].move, partial[0].score_cp
                    ranked = tuple(partial)
                break

            scored = self._rank(outcome.scored, maximizing)
            best_move, best_score = scored[0].move, scored[0].score_cp
            ranked = tuple(scored)
            completed_depth = depth
            ordered = [rm.move for rm in scored]
            _LOGGER.debug(
                "depth %d: best %s score %d nodes %d",
                depth,
                best_move.notation,
                best_score,
                self._nodes,
            )

            if abs(best_score) > MATE_THRESHOLD:
                final_phase = SearchPhase.DONE_MATE
                break

        self._phase = final_phase
        elapsed = self._elapsed_ms(started)
        _LOGGER.info(
            "Search finished (%s): %s score=%d depth=%d nodes=%d time=%dms",
            final_phase.value,
            best_move.notation,
            best_score,
            completed_depth,
            self._nodes,
            elapsed,
        )
        return SearchResult(
            best_move,
            best_score,
            completed_depth,
            self._nodes,
            elapsed,
            tt_hits=self._tt_hits,
            ranked_moves=ranked,
        )

    # ── Tree walk ────────────────────────────────────────────────────────

    def _search_root(
        self,
        position: Position,
        moves: list[Move],
        depth: int,
    ) -> _RootOutcome:
        maximizing = position.side_to_move == Color.WHITE
        alpha = -_INF_SCORE
        beta = _INF_SCORE
        scored: list[RankedMove] = []

        for move in moves:
            score = self._minimax(position.after(move), depth - 1, alpha, beta, ply=1)
            if score is None:
                return _RootOutcome(scored, complete=False)
            scored.append(RankedMove(move, score))
            if maximizing:
                alpha = max(alpha, score)
            else:
                beta = min(beta, score)

        return _RootOutcome(scored, complete=True)

    def _minimax(
        self,
        position: Position,
        depth: int,
        alpha: int,
        beta: int,
        ply: int,
    ) -> int | None:
        """Score of *position*, or ``None`` once the search must stop."""
        if depth <= 0:
            return self._quiescence(position, alpha, beta, ply, QUIESCENCE_DEPTH)
        if self._should_stop():
            return None

        self._nodes += 1
        table = self._table
        key = table.key(position)
        entry = table.probe(key, depth)
        if entry is not None:
            self._tt_hits += 1
            cached = score_from_table(entry.score, ply)
            if entry.node_type == NodeType.EXACT:
                return cached
            if entry.node_type == NodeType.LOWER_BOUND:
                alpha = max(alpha, cached)
            else:
                beta = min(beta, cached)
            if alpha >= beta:
                return cached

        legal = position.search_moves
        if not legal:
            return mate_score(position.side_to_move, ply) if position.is_check else 0

        stored = table.peek(key)
        tt_move = stored.best_move if stored is not None else None
        maximizing = position.side_to_move == Color.WHITE
        alpha_orig = alpha
        beta_orig = beta
        best_score = -_INF_SCORE if maximizing else _INF_SCORE
        best_move: Move | None = None

        for move in order_moves(legal, tt_move):
            child = position.after(move, notate=False)
            score = self._minimax(child, depth - 1, alpha, beta, ply + 1)
            if score is None:
                return None
            if maximizing:
                if score > best_score:
                    best_score = score
                    best_move = move
                alpha = max(alpha, score)
            else:
                if score < best_score:
                    best_score = score
                    best_move = move
                beta = min(beta, score)
            if alpha >= beta:
                break

        if best_score <= alpha_orig:
            node_type = NodeType.UPPER_BOUND
        elif best_score >= beta_orig:
            node_type = NodeType.LOWER_BOUND
        else:
            node_type = NodeType.EXACT
        table.store(
            key,
            depth,
            score_to_table(best_score, ply),
            best_move.uci if best_move is not None else None,
            node_type,
        )
        return best_score

    def _quiescence(
        self,
        position: Position,
        alpha: int,
        beta: int,
        ply: int,
        depth_left: int,
    ) -> int | None:
        if self._should_stop():
            return None

        self._nodes += 1
        legal = position.search_moves
        if not legal:
            return mate_score(position.side_to_move, ply) if position.is_check else 0

        stand_pat = evaluate(position)
        if depth_left <= 0:
            return stand_pat

        maximizing = position.side_to_move == Color.WHITE
        if maximizing:
            if stand_pat >= beta:
                return stand_pat
            alpha = max(alpha, stand_pat)
        else:
            if stand_pat <= alpha:
                return stand_pat
            beta = min(beta, stand_pat)

        best = stand_pat
        captures = [m for m in legal if m.is_capture]
        for move in order_moves(captures):
            score = self._quiescence(
                position.after(move, notate=False), alpha, beta, ply + 1, depth_left - 1
            )
            if score is None:
                return None
            if maximizing:
                best = max(best, score)
                alpha = max(alpha, score)
            else:
                best = min(best, score)
                beta = min(beta, score)
            if alpha >= beta:
                break
        return best

    # ── Helpers ──────────────────────────────────────────────────────────

    def _should_stop(self) -> bool:
        if self._nodes - self._last_yield_nodes >= _YIELD_EVERY_NODES:
            self._last_yield_nodes = self._nodes
            sleep(0.001)
        if self._cancel_check():
            self._stopped_by = SearchPhase.DONE_CANCELLED
            return True
        if self._deadline is not None and perf_counter() >= self._deadline:
            self._stopped_by = SearchPhase.DONE_TIMEOUT
            return True
        return False

    @staticmethod
    def _rank(scored: list[RankedMove], maximizing: bool) -> list[RankedMove]:
        return sorted(scored, key=lambda rm: rm.score_cp, reverse=maximizing)

    @staticmethod
    def _elapsed_ms(started: float) -> int:
        return int((perf_counter() - started) * 1000)


def find_best_move(
    position: Position,
    max_depth: int = 4,
    time_limit_ms: int | None = 5000,
    table: TranspositionTable | None = None,
) -> Move | None:
    """Best move for the side to move, ``None`` only when there is none.

    Without an explicit *table* each call starts from an empty cache, so
    repeated calls on the same position return the same move.
    """
    engine = MinimaxSearchEngine(table)
    return engine.search(position, SearchLimits(max_depth, time_limit_ms)).best_move
