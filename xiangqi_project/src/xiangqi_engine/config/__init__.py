"""
配置管理模块

包含规则配置和系统配置。
"""

from .config_manager import ConfigManager
from .rules_config import RulesConfig, SystemConfig

__all__ = ['ConfigManager', 'RulesConfig', 'SystemConfig']
