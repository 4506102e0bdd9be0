"""
象棋规则引擎模块

包含棋局表示、走法验证、将军与将死检测、走子与悔棋等核心功能。
"""

from .piece import Piece, PieceType, Side
from .move import MoveRecord, parse_coordinate_notation, parse_square
from .game_state import GameState, NOT_FOUND
from .move_validator import MoveValidator
from .rule_engine import RuleEngine
from .board_validator import BoardValidator

__all__ = [
    'Piece', 'PieceType', 'Side',
    'MoveRecord', 'parse_coordinate_notation', 'parse_square',
    'GameState', 'NOT_FOUND',
    'MoveValidator', 'RuleEngine', 'BoardValidator',
]
