"""Bounded transposition table keyed by Zobrist hash."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Any, Final

from rookery.engine.zobrist import ZobristHasher

if TYPE_CHECKING:
    from rookery.core.position import Position

_LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_SIZE: Final = 1_000_000
CLEANUP_THRESHOLD: Final = 0.8
CLEANUP_FRACTION: Final = 0.2
# Rough per-entry footprint used for the memory estimate.
_ENTRY_BYTES: Final = 200


class NodeType(IntEnum):
    """How a stored score relates to the true value."""

    EXACT = 0
    LOWER_BOUND = 1
    UPPER_BOUND = 2


@dataclass(slots=True)
class TTEntry:
    depth: int
    score: int
    best_move: str | None
    node_type: NodeType
    stamp: int


@dataclass(slots=True, frozen=True)
class TableStats:
    size: int
    max_size: int
    hits: int
    misses: int
    stores: int
    evictions: int

    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0


class TranspositionTable:
    """Position cache shared across the nodes of one or more searches.

    Hash collisions are tolerated: an entry is trusted on key equality
    alone. An entry is only replaced by a result searched at least as
    deep. Once the table holds more than 80 % of ``max_size`` entries, the
    oldest 20 % are dropped, shallow ones first among equally old.
    """

    __slots__ = (
        "_entries",
        "_max_size",
        "_hasher",
        "_clock",
        "_hits",
        "_misses",
        "_stores",
        "_evictions",
    )

    def __init__(
        self,
        max_size: int = DEFAULT_MAX_SIZE,
        hasher: ZobristHasher | None = None,
    ) -> None:
        if max_size <= 0:
            raise ValueError("Transposition table size must be >= 1")
        self._entries: dict[int, TTEntry] = {}
        self._max_size = max_size
        self._hasher = hasher or ZobristHasher()
        self._clock = 0
        self._hits = 0
        self._misses = 0
        self._stores = 0
        self._evictions = 0

    # ── Keys ─────────────────────────────────────────────────────────────

    @property
    def hasher(self) -> ZobristHasher:
        return self._hasher

    @property
    def max_size(self) -> int:
        return self._max_size

    def key(self, position: Position) -> int:
        return self._hasher.hash(position)

    # ── Lookup / store by key ────────────────────────────────────────────

    def probe(self, key: int, min_depth: int) -> TTEntry | None:
        """Entry for *key* searched to at least *min_depth*, else ``None``."""
        entry = self._entries.get(key)
        if entry is None or entry.depth < min_depth:
            self._misses += 1
            return None
        self._hits += 1
        return entry

    def peek(self, key: int) -> TTEntry | None:
        """Entry for *key* regardless of depth, without touching counters."""
        return self._entries.get(key)

    def store(
        self,
        key: int,
        depth: int,
        score: int,
        best_move: str | None = None,
        node_type: NodeType = NodeType.EXACT,
    ) -> bool:
        """Record a search result; returns whether the table changed."""
        existing = self._entries.get(key)
        if existing is not None and depth < existing.depth:
            return False

        self._clock += 1
        self._entries[key] = TTEntry(depth, score, best_move, node_type, self._clock)
        self._stores += 1
        if len(self._entries) > self._max_size * CLEANUP_THRESHOLD:
            self._cleanup()
        return True

    # ── Position-level convenience ───────────────────────────────────────

    def get(self, position: Position, min_depth: int = 0) -> TTEntry | None:
        return self.probe(self.key(position), min_depth)

    def set(
        self,
        position: Position,
        depth: int,
        score: int,
        best_move: str | None = None,
        node_type: NodeType = NodeType.EXACT,
    ) -> bool:
        return self.store(self.key(position), depth, score, best_move, node_type)

    def has(self, position: Position) -> bool:
        return self.key(position) in self._entries

    # ── Maintenance ──────────────────────────────────────────────────────

    def _cleanup(self) -> None:
        count = max(1, int(len(self._entries) * CLEANUP_FRACTION))
        oldest = sorted(
            self._entries.items(),
            key=lambda item: (item[1].stamp, item[1].depth),
        )[:count]
        for key, _entry in oldest:
            del self._entries[key]
        self._evictions += count
        _LOGGER.debug(
            "Transposition table cleanup: evicted %d entries, %d remain",
            count,
            len(self._entries),
        )

    def clear(self) -> None:
        self._entries.clear()
        self._clock = 0
        self._hits = 0
        self._misses = 0
        self._stores = 0
        self._evictions = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def stats(self) -> TableStats:
        return TableStats(
            size=len(self._entries),
            max_size=self._max_size,
            hits=self._hits,
            misses=self._misses,
            stores=self._stores,
            evictions=self._evictions,
        )

    def memory_usage_mb(self) -> float:
        """Rough size of the stored entries in megabytes."""
        return len(self._entries) * _ENTRY_BYTES / (1024 * 1024)

    # ── Snapshot ─────────────────────────────────────────────────────────

    def export(self) -> dict[str, dict[str, Any]]:
        """Plain-data snapshot of every entry, keyed by hex hash."""
        snapshot: dict[str, dict[str, Any]] = {}
        for key, entry in self._entries.items():
            data = asdict(entry)
            data["node_type"] = int(entry.node_type)
            snapshot[f"{key:016x}"] = data
        return snapshot

    def load(self, snapshot: dict[str, dict[str, Any]]) -> None:
        """Replace the contents with a snapshot produced by :meth:`export`."""
        entries: dict[int, TTEntry] = {}
        for hex_key, data in snapshot.items():
            try:
                entries[int(hex_key, 16)] = TTEntry(
                    depth=int(data["depth"]),
                    score=int(data["score"]),
                    best_move=data.get("best_move"),
                    node_type=NodeType(int(data["node_type"])),
                    stamp=int(data["stamp"]),
                )
            except (KeyError, ValueError) as exc:
                raise ValueError(f"Invalid table entry {hex_key!r}: {exc}") from None
        self._entries = entries
        self._clock = max((e.stamp for e in entries.values()), default=0)
