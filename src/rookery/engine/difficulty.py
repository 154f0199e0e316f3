"""Difficulty presets for the AI player."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum
from typing import Final


class Difficulty(StrEnum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"
    MASTER = "master"


DEFAULT_RANDOM_SLICE: Final = 0.3


@dataclass(frozen=True, slots=True)
class AIConfig:
    """Search limits and playing style for one AI player.

    With probability ``randomness`` the AI picks uniformly among the top
    ``random_slice`` share of ranked root moves instead of the best one.
    """

    difficulty: Difficulty
    max_depth: int
    time_limit_ms: int
    randomness: float
    use_opening_book: bool = True
    random_slice: float = DEFAULT_RANDOM_SLICE
    resign_threshold: int = 1000

    def __post_init__(self) -> None:
        if self.max_depth <= 0:
            raise ValueError("max_depth must be >= 1")
        if self.time_limit_ms <= 0:
            raise ValueError("time_limit_ms must be > 0")
        if not 0.0 <= self.randomness <= 1.0:
            raise ValueError("randomness must be within [0, 1]")
        if not 0.0 < self.random_slice <= 1.0:
            raise ValueError("random_slice must be within (0, 1]")

    @classmethod
    def for_difficulty(cls, difficulty: Difficulty | str) -> AIConfig:
        return _PRESETS[Difficulty(difficulty)]

    def with_overrides(self, **changes: object) -> AIConfig:
        """Copy with the given fields replaced; unknown names raise ``TypeError``."""
        return replace(self, **changes)


# ── Presets ──────────────────────────────────────────────────────────────────

_PRESETS: Final[dict[Difficulty, AIConfig]] = {
    Difficulty.BEGINNER: AIConfig(
        Difficulty.BEGINNER,
        max_depth=2,
        time_limit_ms=1000,
        randomness=0.3,
        use_opening_book=False,
        resign_threshold=2000,
    ),
    Difficulty.INTERMEDIATE: AIConfig(
        Difficulty.INTERMEDIATE,
        max_depth=3,
        time_limit_ms=2000,
        randomness=0.1,
        resign_threshold=1500,
    ),
    Difficulty.ADVANCED: AIConfig(
        Difficulty.ADVANCED,
        max_depth=4,
        time_limit_ms=5000,
        randomness=0.05,
        resign_threshold=1200,
    ),
    Difficulty.EXPERT: AIConfig(
        Difficulty.EXPERT,
        max_depth=5,
        time_limit_ms=8000,
        randomness=0.0,
        resign_threshold=1000,
    ),
    Difficulty.MASTER: AIConfig(
        Difficulty.MASTER,
        max_depth=6,
        time_limit_ms=15000,
        randomness=0.0,
        resign_threshold=800,
    ),
}
