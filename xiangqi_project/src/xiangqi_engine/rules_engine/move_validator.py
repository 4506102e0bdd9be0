"""
走法几何验证

按棋子类型检查走法的几何规则和占位规则，不考虑是否送将。
"""

from typing import Callable, Dict, Optional

from .game_state import GameState
from .piece import Piece, PieceType, Side

# 九宫范围
PALACE_COLUMNS = range(3, 6)
PALACE_ROWS = {
    Side.RED: range(7, 10),
    Side.BLACK: range(0, 3),
}


def own_half(side: Side, y: int) -> bool:
    """是否位于己方半场 (河界在 y=4 与 y=5 之间)"""
    return y >= 5 if side == Side.RED else y <= 4


def in_palace(side: Side, x: int, y: int) -> bool:
    return x in PALACE_COLUMNS and y in PALACE_ROWS[side]


def count_pieces_between(state: GameState, x1: int, y1: int, x2: int, y2: int) -> int:
    """
    统计同一直线上两点之间(不含端点)的棋子数
    """
    count = 0
    if x1 == x2:
        for y in range(min(y1, y2) + 1, max(y1, y2)):
            if state.grid[y, x1] is not None:
                count += 1
    else:
        for x in range(min(x1, x2) + 1, max(x1, x2)):
            if state.grid[y1, x] is not None:
                count += 1
    return count


RuleFunc = Callable[[GameState, Piece, int, int, Optional[Piece]], bool]


def chariot_rule(state, piece, x, y, target):
    """车：直线滑行，中间不能有子"""
    if piece.x != x and piece.y != y:
        return False
    return count_pieces_between(state, piece.x, piece.y, x, y) == 0


def horse_rule(state, piece, x, y, target):
    """马：走日字，蹩马腿的格子必须为空"""
    dx, dy = abs(x - piece.x), abs(y - piece.y)
    if not ((dx == 1 and dy == 2) or (dx == 2 and dy == 1)):
        return False
    # 马腿在走两格的方向上，紧挨起点
    eye_x = piece.x + ((x - piece.x) // 2 if dx == 2 else 0)
    eye_y = piece.y + ((y - piece.y) // 2 if dy == 2 else 0)
    return state.grid[eye_y, eye_x] is None


def cannon_rule(state, piece, x, y, target):
    """炮：移动时同车，吃子时中间恰好隔一个炮架"""
    if piece.x != x and piece.y != y:
        return False
    between = count_pieces_between(state, piece.x, piece.y, x, y)
    if target is None:
        return between == 0
    return between == 1


def elephant_rule(state, piece, x, y, target):
    """相/象：走田字，不能过河，田心不能有子"""
    if abs(x - piece.x) != 2 or abs(y - piece.y) != 2:
        return False
    if not own_half(piece.side, y):
        return False
    return state.grid[(piece.y + y) // 2, (piece.x + x) // 2] is None


def advisor_rule(state, piece, x, y, target):
    """仕/士：斜走一格，不出九宫"""
    if abs(x - piece.x) != 1 or abs(y - piece.y) != 1:
        return False
    return in_palace(piece.side, x, y)


def soldier_rule(state, piece, x, y, target):
    """兵/卒：每次一格，不能后退，过河后才能横走"""
    dx, dy = abs(x - piece.x), y - piece.y
    if dx + abs(dy) != 1:
        return False
    forward = -1 if piece.side == Side.RED else 1
    if dx == 0:
        return dy == forward
    return not own_half(piece.side, piece.y)


class MoveValidator:
    """
    走法几何验证器

    只读检查：不修改棋局。各棋子规则通过分派表查找。
    """

    def __init__(self, flying_general: bool = True):
        """
        Args:
            flying_general: 是否允许帅将对面时直接吃掉对方帅/将
        """
        self.flying_general = flying_general
        self.rules: Dict[PieceType, RuleFunc] = {
            PieceType.CHARIOT: chariot_rule,
            PieceType.HORSE: horse_rule,
            PieceType.CANNON: cannon_rule,
            PieceType.ELEPHANT: elephant_rule,
            PieceType.ADVISOR: advisor_rule,
            PieceType.GENERAL: self._general_rule,
            PieceType.SOLDIER: soldier_rule,
        }

    def is_valid_move(self, state: GameState, piece: Piece, x: int, y: int) -> bool:
        """
        检查棋子走到目标格是否符合几何和占位规则

        Args:
            state: 当前棋局
            piece: 要移动的棋子
            x, y: 目标坐标

        Returns:
            bool: 是否符合规则
        """
        if not state.in_bounds(x, y):
            return False
        if piece.x == x and piece.y == y:
            return False

        target = state.grid[y, x]
        if target is not None and target.side == piece.side:
            return False

        return self.rules[piece.piece_type](state, piece, x, y, target)

    def _general_rule(self, state, piece, x, y, target):
        """帅/将：九宫内直走一格；开启对面规则时可沿空直线吃对方帅/将"""
        if (self.flying_general and target is not None
                and target.piece_type == PieceType.GENERAL
                and piece.x == x
                and count_pieces_between(state, piece.x, piece.y, x, y) == 0):
            return True
        if abs(x - piece.x) + abs(y - piece.y) != 1:
            return False
        return in_palace(piece.side, x, y)
