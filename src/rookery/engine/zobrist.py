"""Zobrist keys for transposition-table lookups."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from rookery.core.enums import CastlingRights, Color

if TYPE_CHECKING:
    from rookery.core.position import Position

DEFAULT_SEED: Final = 0xA5B3C7D9E1F23412
_MASK_64: Final = 0xFFFFFFFFFFFFFFFF
_CASTLING_FLAGS: Final = (
    CastlingRights.WHITE_KINGSIDE,
    CastlingRights.WHITE_QUEENSIDE,
    CastlingRights.BLACK_KINGSIDE,
    CastlingRights.BLACK_QUEENSIDE,
)


def _splitmix64(state: int) -> int:
    """Deterministic 64-bit bit-mixer suitable for static key generation."""
    z = (state + 0x9E3779B97F4A7C15) & _MASK_64
    z = ((z ^ (z >> 30)) * 0xBF58476D1CE4E5B9) & _MASK_64
    z = ((z ^ (z >> 27)) * 0x94D049BB133111EB) & _MASK_64
    return z ^ (z >> 31)


class ZobristHasher:
    """Key tables for one hashing scheme.

    Two hashers built from the same seed produce identical keys. Keys cover
    piece placement, side to move, each castling right and the en-passant
    file. Move counters and history are not hashed.
    """

    __slots__ = ("_seed", "_piece_keys", "_side_key", "_castling_keys", "_ep_keys")

    def __init__(self, seed: int = DEFAULT_SEED) -> None:
        self._seed = seed
        index = 0
        piece_keys: list[list[tuple[int, ...]]] = []
        for _color in range(2):
            per_type: list[tuple[int, ...]] = []
            for _ptype in range(6):
                per_type.append(tuple(self._nth_key(index + sq) for sq in range(64)))
                index += 64
            piece_keys.append(per_type)
        self._piece_keys = piece_keys
        self._side_key = self._nth_key(index)
        index += 1
        self._castling_keys = tuple(self._nth_key(index + i) for i in range(4))
        index += 4
        self._ep_keys = tuple(self._nth_key(index + f) for f in range(8))

    @property
    def seed(self) -> int:
        return self._seed

    def _nth_key(self, index: int) -> int:
        return _splitmix64(self._seed + index)

    def hash(self, position: Position) -> int:
        """64-bit key of *position*."""
        key = 0
        piece_keys = self._piece_keys
        for sq, piece in position.board.occupied():
            key ^= piece_keys[int(piece.color)][int(piece.piece_type) - 1][sq]
        if position.side_to_move == Color.BLACK:
            key ^= self._side_key
        castling = position.usable_castling
        for flag, flag_key in zip(_CASTLING_FLAGS, self._castling_keys):
            if castling & flag:
                key ^= flag_key
        if position.en_passant is not None:
            key ^= self._ep_keys[position.en_passant & 7]
        return key
