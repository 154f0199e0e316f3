"""Notation package: FEN and PGN text forms."""

from rookery.core.notation.fen import STARTING_FEN, position_from_fen, position_to_fen
from rookery.core.notation.pgn import (
    build_pgn,
    movetext_tokens,
    pgn_movetext,
    replay_movetext,
)

__all__ = [
    "STARTING_FEN",
    "position_from_fen",
    "position_to_fen",
    "build_pgn",
    "movetext_tokens",
    "pgn_movetext",
    "replay_movetext",
]
