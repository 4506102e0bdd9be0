"""
象棋棋局状态

定义棋盘网格、当前走棋方和走法历史，以及格式转换功能。
"""

import copy
from contextlib import contextmanager
from typing import Iterator, List, Optional, Tuple

import numpy as np

from ..utils.exceptions import GameStateError
from .move import MoveRecord
from .piece import FEN_SYMBOLS, Piece, PieceType, Side

BOARD_WIDTH = 9    # 列数 x: 0-8
BOARD_HEIGHT = 10  # 行数 y: 0-9

# 找不到棋子时返回的坐标
NOT_FOUND = (-1, -1)

# 底线棋子排列 (从 x=0 到 x=8)
BACK_RANK = [
    PieceType.CHARIOT, PieceType.HORSE, PieceType.ELEPHANT, PieceType.ADVISOR,
    PieceType.GENERAL,
    PieceType.ADVISOR, PieceType.ELEPHANT, PieceType.HORSE, PieceType.CHARIOT,
]
CANNON_COLUMNS = (1, 7)
SOLDIER_COLUMNS = (0, 2, 4, 6, 8)

# 各方底线、炮线、兵线的行号
HOME_ROWS = {
    Side.RED: {'back': 9, 'cannon': 7, 'soldier': 6},
    Side.BLACK: {'back': 0, 'cannon': 2, 'soldier': 3},
}

_FEN_TO_TYPE = {symbol: piece_type for piece_type, symbol in FEN_SYMBOLS.items()}


class GameState:
    """
    象棋棋局

    10x9 网格(按 [y, x] 索引)保存棋子引用，每个被占用格子上的棋子
    坐标必须与格子一致。棋局对象由调用方持有，可以同时存在多个互不相干的棋局。
    """

    def __init__(self, fen: Optional[str] = None, first_side: Side = Side.RED,
                 rule_engine=None):
        """
        初始化棋局

        Args:
            fen: FEN格式的局面字符串，如果为None则创建初始局面
            first_side: 先手方，重置棋局时使用
            rule_engine: 代理方法使用的规则引擎，None表示使用默认规则
        """
        self._rule_engine = rule_engine
        self.grid = np.empty((BOARD_HEIGHT, BOARD_WIDTH), dtype=object)
        self.first_side = Side(first_side)
        self.current_turn = self.first_side
        self.history: List[MoveRecord] = []

        if fen is not None:
            self._load_fen(fen)
        else:
            self.setup_initial_position()

    @classmethod
    def empty(cls, current_turn: Side = Side.RED, rule_engine=None) -> 'GameState':
        """创建空棋盘，用于摆放自定义局面"""
        state = cls(rule_engine=rule_engine)
        state.clear()
        state.current_turn = Side(current_turn)
        return state

    @classmethod
    def from_fen(cls, fen: str, first_side: Side = Side.RED, rule_engine=None) -> 'GameState':
        return cls(fen=fen, first_side=first_side, rule_engine=rule_engine)

    def setup_initial_position(self):
        """设置象棋初始局面"""
        for side, rows in HOME_ROWS.items():
            for x, piece_type in enumerate(BACK_RANK):
                self.place_piece(piece_type, side, x, rows['back'])
            for x in CANNON_COLUMNS:
                self.place_piece(PieceType.CANNON, side, x, rows['cannon'])
            for x in SOLDIER_COLUMNS:
                self.place_piece(PieceType.SOLDIER, side, x, rows['soldier'])

    def clear(self):
        """清空网格和走法历史"""
        self.grid.fill(None)
        self.history.clear()

    # ==================== 网格访问 ====================

    @staticmethod
    def in_bounds(x: int, y: int) -> bool:
        return 0 <= x < BOARD_WIDTH and 0 <= y < BOARD_HEIGHT

    def piece_at(self, x: int, y: int) -> Optional[Piece]:
        """
        获取指定坐标的棋子

        Returns:
            Optional[Piece]: 棋子，空格或越界返回None
        """
        if not self.in_bounds(x, y):
            return None
        return self.grid[y, x]

    def is_empty(self, x: int, y: int) -> bool:
        return self.piece_at(x, y) is None

    def place_piece(self, piece_type: PieceType, side: Side, x: int, y: int) -> Piece:
        """
        在空格上摆放一个新棋子

        Raises:
            ValueError: 坐标越界或格子已被占用
        """
        if not self.in_bounds(x, y):
            raise ValueError(f"无效的位置坐标: ({x}, {y})")
        if self.grid[y, x] is not None:
            raise ValueError(f"位置已被占用: ({x}, {y})")

        piece = Piece(PieceType(piece_type), Side(side), x, y)
        self.grid[y, x] = piece
        return piece

    def remove_piece(self, x: int, y: int) -> Optional[Piece]:
        """移除并返回指定坐标的棋子"""
        if not self.in_bounds(x, y):
            raise ValueError(f"无效的位置坐标: ({x}, {y})")
        piece = self.grid[y, x]
        self.grid[y, x] = None
        return piece

    def relocate(self, piece: Piece, x: int, y: int) -> Optional[Piece]:
        """
        把棋子移动到目标格，返回被覆盖(吃掉)的棋子

        Raises:
            GameStateError: 棋子不在其坐标所示的格子上
        """
        if self.piece_at(piece.x, piece.y) is not piece:
            raise GameStateError(repr(piece), "棋子坐标与网格不一致")

        captured = self.grid[y, x]
        self.grid[piece.y, piece.x] = None
        self.grid[y, x] = piece
        piece.x, piece.y = x, y
        return captured

    @contextmanager
    def speculative_move(self, piece: Piece, x: int, y: int) -> Iterator[Optional[Piece]]:
        """
        在当前网格上试走一步，退出时无条件还原

        只保存被改动的两个格子和棋子坐标；还原在 finally 中执行，
        提前返回或抛出异常时同样生效。

        Yields:
            Optional[Piece]: 试走时被吃掉的棋子
        """
        from_x, from_y = piece.x, piece.y
        captured = self.grid[y, x]
        try:
            self.grid[from_y, from_x] = None
            self.grid[y, x] = piece
            piece.x, piece.y = x, y
            yield captured
        finally:
            piece.x, piece.y = from_x, from_y
            self.grid[y, x] = captured
            self.grid[from_y, from_x] = piece

    def pieces(self, side: Optional[Side] = None) -> List[Piece]:
        """
        按行优先顺序获取棋子

        Args:
            side: 指定阵营，None表示所有棋子
        """
        return [
            piece for piece in self.grid.flat
            if piece is not None and (side is None or piece.side == side)
        ]

    def find_general(self, side: Side) -> Tuple[int, int]:
        """
        找到指定阵营帅/将的位置

        Returns:
            Tuple[int, int]: (x, y)，找不到返回 NOT_FOUND
        """
        for y in range(BOARD_HEIGHT):
            for x in range(BOARD_WIDTH):
                piece = self.grid[y, x]
                if piece is not None and piece.piece_type == PieceType.GENERAL and piece.side == side:
                    return (x, y)
        return NOT_FOUND

    # ==================== 走法历史 ====================

    def get_last_move(self) -> Optional[MoveRecord]:
        """获取最后一步走法，如果没有则返回None"""
        return self.history[-1] if self.history else None

    def get_move_count(self) -> int:
        return len(self.history)

    # ==================== 格式转换 ====================

    def to_matrix(self) -> np.ndarray:
        """
        转换为整数矩阵

        Returns:
            np.ndarray: 10x9 矩阵，红方为正，黑方为负，空格为0
        """
        matrix = np.zeros((BOARD_HEIGHT, BOARD_WIDTH), dtype=int)
        for piece in self.pieces():
            matrix[piece.y, piece.x] = piece.code
        return matrix

    def to_fen(self) -> str:
        """
        转换为FEN格式

        Returns:
            str: FEN格式字符串，从 y=0 行开始
        """
        fen_rows = []
        for y in range(BOARD_HEIGHT):
            fen_row = ""
            empty_count = 0
            for x in range(BOARD_WIDTH):
                piece = self.grid[y, x]
                if piece is None:
                    empty_count += 1
                    continue
                if empty_count:
                    fen_row += str(empty_count)
                    empty_count = 0
                fen_row += piece.fen_symbol
            if empty_count:
                fen_row += str(empty_count)
            fen_rows.append(fen_row)

        player_char = "w" if self.current_turn == Side.RED else "b"
        return f"{'/'.join(fen_rows)} {player_char}"

    def _load_fen(self, fen: str):
        """
        从FEN格式加载局面，清空走法历史

        Raises:
            ValueError: FEN格式无效
        """
        parts = fen.split()
        if len(parts) < 2:
            raise ValueError("无效的FEN格式")

        rows = parts[0].split("/")
        if len(rows) != BOARD_HEIGHT:
            raise ValueError("FEN格式应包含10行")
        if parts[1] not in ("w", "r", "b"):
            raise ValueError(f"无效的走棋方: {parts[1]}")

        self.clear()
        for y, row in enumerate(rows):
            x = 0
            for char in row:
                if char.isdigit():
                    x += int(char)
                    continue
                piece_type = _FEN_TO_TYPE.get(char.lower())
                if piece_type is None:
                    raise ValueError(f"无效的棋子符号: {char}")
                if x >= BOARD_WIDTH:
                    raise ValueError(f"第{y + 1}行列数超出范围")
                side = Side.RED if char.isupper() else Side.BLACK
                self.place_piece(piece_type, side, x, y)
                x += 1
            if x != BOARD_WIDTH:
                raise ValueError(f"第{y + 1}行列数应为{BOARD_WIDTH}")

        self.current_turn = Side.BLACK if parts[1] == "b" else Side.RED

    def to_visual_string(self) -> str:
        """
        转换为可视化字符串

        Returns:
            str: 可视化的棋盘字符串
        """
        lines = ["   a  b  c  d  e  f  g  h  i"]
        for y in range(BOARD_HEIGHT):
            cells = []
            for x in range(BOARD_WIDTH):
                piece = self.grid[y, x]
                cells.append(piece.display_name if piece else "．")
            lines.append(f"{y}  " + " ".join(cells))
            if y == 4:
                lines.append("   ~~~~~~~ 楚河  汉界 ~~~~~~~")
        lines.append(f"当前走棋方: {self.current_turn.display_name}")
        return "\n".join(lines)

    # ==================== 规则引擎代理 ====================

    @property
    def rule_engine(self):
        # 延迟导入，避免循环依赖
        if self._rule_engine is None:
            from .rule_engine import RuleEngine
            self._rule_engine = RuleEngine()
        return self._rule_engine

    def get_legal_moves(self, piece: Piece) -> List[Tuple[int, int]]:
        return self.rule_engine.get_legal_moves(self, piece)

    def is_in_check(self, side: Side) -> bool:
        return self.rule_engine.is_in_check(self, side)

    def is_checkmate(self, side: Side) -> bool:
        return self.rule_engine.is_checkmate(self, side)

    def move_piece(self, x1: int, y1: int, x2: int, y2: int) -> bool:
        return self.rule_engine.move_piece(self, x1, y1, x2, y2)

    def undo_move(self):
        self.rule_engine.undo_move(self)

    def reset_game(self):
        self.rule_engine.reset_game(self)

    # ==================== 实用工具方法 ====================

    def copy(self) -> 'GameState':
        """
        创建棋局的深拷贝，拷贝上的分析不会影响当前棋局
        """
        return copy.deepcopy(self)

    def __str__(self) -> str:
        return self.to_visual_string()

    def __eq__(self, other) -> bool:
        if not isinstance(other, GameState):
            return False
        return (np.array_equal(self.to_matrix(), other.to_matrix()) and
                self.current_turn == other.current_turn)

    def __hash__(self) -> int:
        return hash((self.to_matrix().tobytes(), int(self.current_turn)))
