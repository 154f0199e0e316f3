"""Qt bridge to run AI move searches in a worker thread."""

from __future__ import annotations

import threading

from PyQt6.QtCore import QObject, pyqtSignal, pyqtSlot

from rookery.core.position import Position
from rookery.engine.ai import ChessAI
from rookery.engine.difficulty import Difficulty


class EngineWorker(QObject):
    """Thread-affine worker that computes AI moves on demand."""

    best_move_ready = pyqtSignal(int, object, int, int, int)
    search_cancelled = pyqtSignal(int)
    search_no_move = pyqtSignal(int, int, int, int)
    search_error = pyqtSignal(int, str)

    __slots__ = ("_cancel_event", "_ai")

    def __init__(
        self,
        ai: ChessAI | None = None,
        *,
        difficulty: Difficulty | str = Difficulty.INTERMEDIATE,
    ) -> None:
        super().__init__()
        self._ai = ai if ai is not None else ChessAI(difficulty)
        self._cancel_event = threading.Event()

    @property
    def ai(self) -> ChessAI:
        return self._ai

    @pyqtSlot(object, int)
    def request_move(self, position_obj: object, request_id: int) -> None:
        """Search for the best move in *position_obj* and emit result."""
        if not isinstance(position_obj, Position):
            self.search_error.emit(request_id, "Engine received invalid position")
            return

        self._cancel_event.clear()
        try:
            result = self._ai.find_best_move(
                position_obj,
                is_cancelled=self._cancel_event.is_set,
            )
        except Exception as exc:
            self.search_error.emit(request_id, str(exc))
            return

        if self._cancel_event.is_set():
            self.search_cancelled.emit(request_id)
            return

        if result.best_move is None:
            self.search_no_move.emit(
                request_id,
                result.score_cp,
                result.depth,
                result.nodes,
            )
            return

        self.best_move_ready.emit(
            request_id,
            result.best_move,
            result.score_cp,
            result.depth,
            result.nodes,
        )

    @pyqtSlot()
    def cancel(self) -> None:
        """Request cancellation of the current search."""
        self._cancel_event.set()

    @pyqtSlot(int, int)
    def set_limits(self, max_depth: int, time_limit_ms: int) -> None:
        """Update search limits (takes effect on the next search)."""
        self._ai.update_config(max_depth=max_depth, time_limit_ms=time_limit_ms)

    @pyqtSlot(str)
    def set_difficulty(self, difficulty: str) -> None:
        """Switch to a difficulty preset (takes effect on the next search)."""
        self._ai.set_difficulty(difficulty)
