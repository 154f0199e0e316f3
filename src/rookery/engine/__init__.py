"""Chess engine package: evaluation, search, opening book and AI player."""

from rookery.engine.ai import ChessAI
from rookery.engine.difficulty import AIConfig, Difficulty
from rookery.engine.evaluator import evaluate
from rookery.engine.minimax import MinimaxSearchEngine, find_best_move
from rookery.engine.opening_book import OpeningBook
from rookery.engine.search import IEngine, RankedMove, SearchLimits, SearchPhase, SearchResult
from rookery.engine.transposition import NodeType, TranspositionTable
from rookery.engine.zobrist import ZobristHasher

__all__ = [
    "AIConfig",
    "ChessAI",
    "Difficulty",
    "IEngine",
    "MinimaxSearchEngine",
    "NodeType",
    "OpeningBook",
    "RankedMove",
    "SearchLimits",
    "SearchPhase",
    "SearchResult",
    "TranspositionTable",
    "ZobristHasher",
    "evaluate",
    "find_best_move",
]
