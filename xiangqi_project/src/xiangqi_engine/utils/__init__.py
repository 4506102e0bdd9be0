"""
工具模块

包含日志、异常处理等通用工具。
"""

from .logger import setup_logger, get_logger, LoggerMixin
from .exceptions import XiangqiError, InvalidMoveError, ConfigurationError, GameStateError

__all__ = [
    'setup_logger', 'get_logger', 'LoggerMixin',
    'XiangqiError', 'InvalidMoveError', 'ConfigurationError', 'GameStateError'
]
