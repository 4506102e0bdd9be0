"""
象棋棋子数据结构

定义阵营、棋子类型以及棋子对象。
"""

from dataclasses import dataclass
from enum import IntEnum


class Side(IntEnum):
    """阵营 (沿用 1: 红方, -1: 黑方 的矩阵约定)"""
    RED = 1
    BLACK = -1

    @property
    def opponent(self) -> 'Side':
        """对方阵营"""
        return Side.BLACK if self is Side.RED else Side.RED

    @property
    def display_name(self) -> str:
        return '红方' if self is Side.RED else '黑方'


class PieceType(IntEnum):
    """棋子类型，数值即棋盘矩阵中的编码"""
    GENERAL = 1    # 帅/将
    ADVISOR = 2    # 仕/士
    ELEPHANT = 3   # 相/象
    HORSE = 4      # 马
    CHARIOT = 5    # 车
    CANNON = 6     # 炮
    SOLDIER = 7    # 兵/卒


# 棋子名称映射
PIECE_NAMES = {
    Side.RED: {
        PieceType.GENERAL: "帅", PieceType.ADVISOR: "仕", PieceType.ELEPHANT: "相",
        PieceType.HORSE: "马", PieceType.CHARIOT: "车", PieceType.CANNON: "炮",
        PieceType.SOLDIER: "兵",
    },
    Side.BLACK: {
        PieceType.GENERAL: "将", PieceType.ADVISOR: "士", PieceType.ELEPHANT: "象",
        PieceType.HORSE: "馬", PieceType.CHARIOT: "車", PieceType.CANNON: "砲",
        PieceType.SOLDIER: "卒",
    },
}

# FEN记法中的棋子符号 (红方大写)
FEN_SYMBOLS = {
    PieceType.GENERAL: 'k', PieceType.ADVISOR: 'a', PieceType.ELEPHANT: 'b',
    PieceType.HORSE: 'n', PieceType.CHARIOT: 'r', PieceType.CANNON: 'c',
    PieceType.SOLDIER: 'p',
}


@dataclass(eq=False)
class Piece:
    """
    象棋棋子

    只保存身份(类型、阵营)和当前坐标。相等性按对象身份比较，
    悔棋时恢复的是同一个被吃掉的棋子对象。
    """
    piece_type: PieceType
    side: Side
    x: int  # 列 0-8
    y: int  # 行 0-9

    @property
    def code(self) -> int:
        """矩阵编码：红方为正，黑方为负"""
        return int(self.piece_type) * int(self.side)

    @property
    def display_name(self) -> str:
        return PIECE_NAMES[self.side][self.piece_type]

    @property
    def fen_symbol(self) -> str:
        symbol = FEN_SYMBOLS[self.piece_type]
        return symbol.upper() if self.side is Side.RED else symbol

    @property
    def position(self):
        return (self.x, self.y)

    def __repr__(self) -> str:
        return (f"Piece({self.side.name} {self.piece_type.name} "
                f"at ({self.x}, {self.y}))")
