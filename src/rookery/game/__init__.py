"""Game management layer: a session driving one game.

Quick start::

    from rookery.core import parse_square
    from rookery.engine import ChessAI, Difficulty
    from rookery.game import GameSession

    session = GameSession(game_id="g1", white="Alice", black="Computer")
    session.submit_move(parse_square("e2"), parse_square("e4"))
    session.play_ai_move(ChessAI(Difficulty.BEGINNER))
"""

from rookery.game.session import GameSession, SessionEvents

__all__ = [
    "GameSession",
    "SessionEvents",
]
