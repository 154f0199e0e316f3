"""GameSession: one game in progress, driven by humans and/or an AI.

Validates and applies moves, tracks draw offers and the final result, and
emits events via simple callbacks so UIs, relays and tests can subscribe.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from rookery.core.enums import Color, PieceType
from rookery.core.move import Move
from rookery.core.notation import build_pgn, pgn_movetext
from rookery.core.position import Position
from rookery.core.result import GameResult
from rookery.core.rules import Rules
from rookery.core.serialization import position_to_dict
from rookery.core.types import Square

if TYPE_CHECKING:
    from rookery.engine.ai import ChessAI
    from rookery.engine.search import CancelCheck

_LOGGER = logging.getLogger(__name__)

# ── Event definitions ────────────────────────────────────────────────────────

MoveCallback = Callable[[Move, Position], None]  # move, position after it
GameOverCallback = Callable[[GameResult], None]


@dataclass
class SessionEvents:
    """Observable callbacks. Multiple handlers per event."""

    on_move: list[MoveCallback] = field(default_factory=list)
    on_game_over: list[GameOverCallback] = field(default_factory=list)


# ── Session ──────────────────────────────────────────────────────────────────


class GameSession:
    """Owns the current position of a single game.

    Methods are meant to be called from one thread; AI moves computed on a
    worker thread come back through :meth:`play_move`.
    """

    __slots__ = ("_position", "_result", "_draw_offer_by", "events")

    def __init__(
        self,
        position: Position | None = None,
        *,
        game_id: str = "",
        white: str = "White",
        black: str = "Black",
    ) -> None:
        self._position = position or Rules.create_initial_position(game_id, white, black)
        self._result: GameResult | None = Rules.game_result(self._position)
        self._draw_offer_by: Color | None = None
        self.events = SessionEvents()

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def position(self) -> Position:
        return self._position

    @property
    def result(self) -> GameResult | None:
        return self._result

    @property
    def is_game_over(self) -> bool:
        return self._result is not None

    @property
    def side_to_move(self) -> Color:
        return self._position.side_to_move

    @property
    def draw_offer_by(self) -> Color | None:
        return self._draw_offer_by

    # ── Moves ────────────────────────────────────────────────────────────

    def submit_move(
        self,
        from_sq: Square,
        to_sq: Square,
        promotion: PieceType | None = None,
    ) -> bool:
        """Play *from_sq* → *to_sq* for the side to move; ``False`` if illegal."""
        if self.is_game_over:
            return False
        move = Rules.find_move(self._position, from_sq, to_sq, promotion)
        if move is None:
            return False
        self._advance(Rules.play(self._position, move))
        return True

    def play_move(self, move: Move) -> bool:
        """Play a move record, e.g. one produced by an engine worker."""
        if self.is_game_over or move not in self._position.legal_moves:
            return False
        self._advance(Rules.play(self._position, move))
        return True

    def play_ai_move(
        self,
        ai: ChessAI,
        is_cancelled: CancelCheck | None = None,
    ) -> Move | None:
        """Let *ai* move for the side to move; returns the played record."""
        if self.is_game_over:
            return None
        result = ai.find_best_move(self._position, is_cancelled)
        if result.best_move is None:
            return None
        self._advance(Rules.play(self._position, result.best_move))
        return self._position.last_move

    # ── Game end ─────────────────────────────────────────────────────────

    def resign(self, color: Color) -> None:
        if self.is_game_over:
            return
        self._finish(Rules.resign(self._position, color))

    def flag_fall(self, color: Color) -> None:
        """*color* ran out of time."""
        if self.is_game_over:
            return
        self._finish(Rules.timeout(self._position, color))

    def offer_draw(self, color: Color) -> None:
        if self.is_game_over or self._draw_offer_by is not None:
            return
        self._draw_offer_by = color

    def accept_draw(self, color: Color) -> bool:
        """Accept the opponent's pending offer; ``False`` if there is none."""
        if self.is_game_over or self._draw_offer_by in (None, color):
            return False
        self._draw_offer_by = None
        self._finish(Rules.agree_draw(self._position))
        return True

    def decline_draw(self) -> None:
        self._draw_offer_by = None

    # ── Export ───────────────────────────────────────────────────────────

    def export_notation(self) -> str:
        """PGN movetext of the game so far, with the result once decided."""
        token = self._result.score_token if self._result is not None else None
        return pgn_movetext(self._position.moves, token)

    def export_pgn(self, headers: dict[str, str] | None = None) -> str:
        white, black = self._position.players
        token = self._result.score_token if self._result is not None else "*"
        tags = {"White": white, "Black": black, "Result": token}
        if headers:
            tags.update(headers)
        return build_pgn(tags, self._position.moves, token)

    def to_dict(self) -> dict[str, Any]:
        data = position_to_dict(self._position)
        data["draw_offer_by"] = str(self._draw_offer_by) if self._draw_offer_by else None
        if self._result is None:
            data["result"] = None
        else:
            data["result"] = {
                "status": str(self._result.status),
                "winner": str(self._result.winner) if self._result.winner is not None else None,
                "reason": self._result.reason,
            }
        return data

    # ── Internal helpers ─────────────────────────────────────────────────

    def _advance(self, position: Position) -> None:
        self._position = position
        self._draw_offer_by = None
        move = position.last_move
        if move is not None:
            for cb in self.events.on_move:
                cb(move, position)
        result = Rules.game_result(position)
        if result is not None:
            self._finish(result)

    def _finish(self, result: GameResult) -> None:
        self._result = result
        _LOGGER.info("Game %s over: %s", self._position.game_id or "-", result.reason)
        for cb in self.events.on_game_over:
            cb(result)
