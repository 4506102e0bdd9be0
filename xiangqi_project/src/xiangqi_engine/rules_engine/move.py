"""
象棋走法记录

定义已提交走法的记录结构以及坐标记法的转换。
"""

import re
from dataclasses import dataclass
from typing import Optional, Tuple

from ..utils.exceptions import InvalidMoveError
from .piece import Piece, Side

# 坐标记法：列 a-i + 行 0-9，例如 "a6a5"
_NOTATION_PATTERN = re.compile(r'^([a-i])([0-9])([a-i])([0-9])$')
_SQUARE_PATTERN = re.compile(r'^([a-i])([0-9])$')


@dataclass(frozen=True)
class MoveRecord:
    """
    走法记录

    每次成功提交的走法生成一条记录，悔棋时弹出并逆向执行。
    """
    from_x: int
    from_y: int
    to_x: int
    to_y: int
    captured: Optional[Piece]  # 被吃掉的棋子，没有则为None
    mover: Side                # 走棋方

    @property
    def from_pos(self) -> Tuple[int, int]:
        return (self.from_x, self.from_y)

    @property
    def to_pos(self) -> Tuple[int, int]:
        return (self.to_x, self.to_y)

    def to_coordinate_notation(self) -> str:
        """
        转换为坐标记法

        Returns:
            str: 坐标记法字符串，如 "a6a5"
        """
        return format_coordinate_notation(self.from_pos, self.to_pos)

    def to_dict(self) -> dict:
        """转换为字典"""
        return {
            'from_pos': self.from_pos,
            'to_pos': self.to_pos,
            'captured': self.captured.code if self.captured else None,
            'mover': self.mover.name.lower(),
        }

    def __str__(self) -> str:
        return self.to_coordinate_notation()


def format_square(pos: Tuple[int, int]) -> str:
    x, y = pos
    return f"{chr(ord('a') + x)}{y}"


def format_coordinate_notation(from_pos: Tuple[int, int], to_pos: Tuple[int, int]) -> str:
    return format_square(from_pos) + format_square(to_pos)


def parse_square(text: str) -> Tuple[int, int]:
    """
    解析单个格子，如 "e9" -> (4, 9)

    Raises:
        InvalidMoveError: 格式无效
    """
    match = _SQUARE_PATTERN.match(text.strip().lower())
    if not match:
        raise InvalidMoveError(text, "格子应为列a-i加行0-9")

    col, row = match.groups()
    return (ord(col) - ord('a'), int(row))


def parse_coordinate_notation(notation: str) -> Tuple[Tuple[int, int], Tuple[int, int]]:
    """
    从坐标记法解析起止坐标

    Args:
        notation: 坐标记法字符串，如 "b9c7"

    Returns:
        ((from_x, from_y), (to_x, to_y))

    Raises:
        InvalidMoveError: 记法格式无效
    """
    match = _NOTATION_PATTERN.match(notation.strip().lower())
    if not match:
        raise InvalidMoveError(notation, "坐标记法应形如 a6a5")

    fc, fr, tc, tr = match.groups()
    return ((ord(fc) - ord('a'), int(fr)), (ord(tc) - ord('a'), int(tr)))
