"""
配置数据结构

定义规则配置、系统配置和默认参数。
"""

from dataclasses import dataclass


@dataclass
class RulesConfig:
    """规则配置"""
    # 帅将对面：同一直线无子相隔时可以直接吃对方的帅/将
    flying_general: bool = True
    # 先手方 ('red', 'black')
    first_side: str = 'red'


@dataclass
class SystemConfig:
    """系统配置"""
    log_level: str = 'INFO'             # 日志级别
    log_file: str = ''                  # 日志文件，为空则只输出到控制台
    log_dir: str = 'logs'               # 日志目录
    log_max_size: int = 10              # 日志文件最大大小(MB)
    log_backup_count: int = 5           # 日志备份数量
    console_output: bool = True         # 是否输出到控制台


# 默认配置实例
DEFAULT_RULES_CONFIG = RulesConfig()
DEFAULT_SYSTEM_CONFIG = SystemConfig()
