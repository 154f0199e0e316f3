"""Shared engine search models and protocol."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Final, Protocol

if TYPE_CHECKING:
    from rookery.core.move import Move
    from rookery.core.position import Position

CancelCheck = Callable[[], bool]

MAX_SEARCH_DEPTH: Final = 8
MATE_SCORE: Final = 10_000
# Scores beyond this are forced mates; deepening stops once one is found.
MATE_THRESHOLD: Final = 9_000


class SearchPhase(Enum):
    """Where a search invocation stands."""

    IDLE = "idle"
    ITERATIVE_DEEPENING = "iterative_deepening"
    DONE_DEPTH = "done_depth"
    DONE_TIMEOUT = "done_timeout"
    DONE_MATE = "done_mate"
    DONE_CANCELLED = "done_cancelled"


@dataclass(slots=True, frozen=True)
class SearchLimits:
    """Search constraints for a single move computation."""

    max_depth: int = 4
    time_limit_ms: int | None = 5000


@dataclass(slots=True, frozen=True)
class RankedMove:
    move: Move
    score_cp: int


@dataclass(slots=True, frozen=True)
class SearchResult:
    """Result produced by the engine search.

    ``score_cp`` is from white's point of view. ``ranked_moves`` lists the
    root moves of the last completed depth, best first for the side to move.
    """

    best_move: Move | None
    score_cp: int
    depth: int
    nodes: int
    time_ms: int = 0
    from_book: bool = False
    tt_hits: int = 0
    ranked_moves: tuple[RankedMove, ...] = field(default=())


class IEngine(Protocol):
    """Protocol for chess engines used by the AI manager and worker."""

    def search(
        self,
        position: Position,
        limits: SearchLimits,
        is_cancelled: CancelCheck | None = None,
    ) -> SearchResult: ...
