"""
中国象棋规则引擎 (Xiangqi)

棋局状态、走法验证、将军/将死检测、走子与悔棋，以及终端对弈界面。
"""

__version__ = "0.1.0"
__author__ = "Xiangqi Engine Team"
__description__ = "中国象棋规则引擎 - 走法验证、将军将死检测与悔棋"

from xiangqi_project.src import xiangqi_engine

__all__ = [
    "xiangqi_engine",
    "__version__",
    "__author__",
    "__description__",
]
