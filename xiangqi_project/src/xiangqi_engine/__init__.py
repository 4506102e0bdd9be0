"""
中国象棋规则引擎

维护棋局状态，验证各棋子走法，检测将军与将死，生成合法走法，
并支持走子、悔棋和重置。
"""

__version__ = "0.1.0"
__author__ = "Xiangqi Engine Team"

from .rules_engine import (
    GameState, Piece, PieceType, Side, MoveRecord, RuleEngine, MoveValidator, BoardValidator
)
from .config import ConfigManager, RulesConfig, SystemConfig
from .utils import setup_logger, get_logger, XiangqiError

__all__ = [
    "__version__", "__author__",
    "GameState", "Piece", "PieceType", "Side", "MoveRecord",
    "RuleEngine", "MoveValidator", "BoardValidator",
    "ConfigManager", "RulesConfig", "SystemConfig",
    "setup_logger", "get_logger", "XiangqiError",
]
