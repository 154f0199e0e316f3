"""PGN movetext export and import helpers."""

from __future__ import annotations

import re
from collections.abc import Iterable

from rookery.core.algebraic import parse_notation
from rookery.core.move import Move
from rookery.core.position import Position

_PGN_RESULT_TOKENS = {"1-0", "0-1", "1/2-1/2", "*"}
_MOVE_NUMBER_RE = re.compile(r"^\d+\.(?:\.\.)?")
_COMMENT_RE = re.compile(r"\{[^}]*\}|;[^\n]*")


def pgn_movetext(moves: Iterable[Move | str], result_token: str | None = None) -> str:
    """Numbered movetext, e.g. ``1. e4 e5 2. Nf3``.

    Accepts move records or bare notation tokens. The result token is
    appended when given.
    """
    parts: list[str] = []
    for ply, move in enumerate(moves):
        if ply % 2 == 0:
            parts.append(f"{(ply // 2) + 1}.")
        parts.append(move if isinstance(move, str) else move.notation or move.uci)
    if result_token is not None:
        if result_token not in _PGN_RESULT_TOKENS:
            raise ValueError(f"Invalid PGN result token: {result_token!r}")
        parts.append(result_token)
    return " ".join(parts)


def build_pgn(
    headers: dict[str, str],
    moves: Iterable[Move | str],
    result_token: str = "*",
) -> str:
    """Build a single-game PGN document."""
    lines: list[str] = []
    for key, value in headers.items():
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        lines.append(f'[{key} "{escaped}"]')
    lines.append("")
    lines.append(pgn_movetext(moves, result_token))
    lines.append("")
    return "\n".join(lines)


def movetext_tokens(movetext: str) -> list[str]:
    """Notation tokens of a movetext string, without numbers or comments."""
    tokens: list[str] = []
    for raw in _COMMENT_RE.sub(" ", movetext).split():
        token = _MOVE_NUMBER_RE.sub("", raw)
        if not token or token in _PGN_RESULT_TOKENS:
            continue
        tokens.append(token)
    return tokens


def replay_movetext(movetext: str, start: Position | None = None) -> Position:
    """Play every move of *movetext* from *start* (default: initial position).

    Raises ``ValueError`` naming the first token that is not legal.
    """
    position = start if start is not None else Position.initial()
    for token in movetext_tokens(movetext):
        move = parse_notation(position, token)
        position = position.after(move)
    return position
