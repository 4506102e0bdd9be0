"""
异常定义

定义象棋规则引擎的各种异常类型。

注意：非法走法不是异常，走子接口以返回 False 表示拒绝。
这里的异常只用于记法解析、配置和不变量被破坏等情况。
"""


class XiangqiError(Exception):
    """
    象棋引擎基础异常

    所有象棋引擎相关异常的基类。
    """

    def __init__(self, message: str, error_code: str = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__

    def __str__(self):
        return f"[{self.error_code}] {self.message}"


class InvalidMoveError(XiangqiError):
    """
    走法记法异常

    当走法字符串无法解析时抛出。
    """

    def __init__(self, move_str: str, reason: str = ""):
        message = f"无效走法: {move_str}"
        if reason:
            message += f" - {reason}"
        super().__init__(message, "INVALID_MOVE")
        self.move_str = move_str
        self.reason = reason


class ConfigurationError(XiangqiError):
    """
    配置错误异常

    当配置名称或参数无效时抛出。
    """

    def __init__(self, config_name: str, reason: str = ""):
        message = f"配置错误 - {config_name}"
        if reason:
            message += f": {reason}"
        super().__init__(message, "CONFIG_ERROR")
        self.config_name = config_name
        self.reason = reason


class GameStateError(XiangqiError):
    """
    游戏状态异常

    当棋局不变量被破坏时抛出，例如提交的走法会吃掉对方的帅/将。
    """

    def __init__(self, state_description: str, reason: str = ""):
        message = f"游戏状态错误: {state_description}"
        if reason:
            message += f" - {reason}"
        super().__init__(message, "GAME_STATE_ERROR")
        self.state_description = state_description
        self.reason = reason
