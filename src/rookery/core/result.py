"""Game result value object."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from rookery.core.enums import Color, GameStatus

if TYPE_CHECKING:
    from rookery.core.position import Position


@dataclass(frozen=True, slots=True)
class GameResult:
    """How a finished game ended."""

    status: GameStatus
    winner: Color | None
    reason: str
    final_position: Position

    @property
    def is_draw(self) -> bool:
        return self.winner is None

    @property
    def score_token(self) -> str:
        """PGN-style result token: ``1-0``, ``0-1`` or ``1/2-1/2``."""
        if self.winner == Color.WHITE:
            return "1-0"
        if self.winner == Color.BLACK:
            return "0-1"
        return "1/2-1/2"


def _side_name(color: Color) -> str:
    return "White" if color == Color.WHITE else "Black"


def checkmate(position: Position) -> GameResult:
    winner = position.side_to_move.opposite
    return GameResult(
        GameStatus.CHECKMATE,
        winner,
        f"Checkmate! {_side_name(winner)} wins.",
        position,
    )


def stalemate(position: Position) -> GameResult:
    return GameResult(GameStatus.STALEMATE, None, "Stalemate! Game is a draw.", position)


def resignation(position: Position, loser: Color) -> GameResult:
    winner = loser.opposite
    return GameResult(
        GameStatus.RESIGNATION,
        winner,
        f"{_side_name(loser)} resigned. {_side_name(winner)} wins.",
        position,
    )


def timeout(position: Position, loser: Color) -> GameResult:
    winner = loser.opposite
    return GameResult(
        GameStatus.TIMEOUT,
        winner,
        f"{_side_name(loser)} ran out of time. {_side_name(winner)} wins.",
        position,
    )


def agreed_draw(position: Position) -> GameResult:
    return GameResult(GameStatus.DRAW, None, "Draw agreed.", position)
