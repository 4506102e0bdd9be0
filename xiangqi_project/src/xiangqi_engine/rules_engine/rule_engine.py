"""
象棋规则引擎

实现将军检测、合法走法生成、走子/悔棋/重置和终局状态检测。
"""

from typing import Any, Dict, List, Optional, Tuple

from ..config.rules_config import RulesConfig
from ..utils.exceptions import ConfigurationError, GameStateError
from ..utils.logger import LoggerMixin
from .game_state import BOARD_HEIGHT, BOARD_WIDTH, NOT_FOUND, GameState
from .move import MoveRecord
from .move_validator import MoveValidator
from .piece import Piece, PieceType, Side


class RuleEngine(LoggerMixin):
    """
    象棋规则引擎

    引擎本身不保存棋局，所有操作都作用于调用方传入的 GameState。
    同一个引擎可以服务多个棋局。
    """

    def __init__(self, config: Optional[RulesConfig] = None):
        """
        初始化规则引擎

        Args:
            config: 规则配置，None表示使用默认配置

        Raises:
            ConfigurationError: 先手方或帅将对面选项无效
        """
        self.config = config or RulesConfig()
        if self.config.first_side not in ('red', 'black'):
            raise ConfigurationError('rules', f"无效的先手方: {self.config.first_side!r}")
        if not isinstance(self.config.flying_general, bool):
            raise ConfigurationError('rules', f"flying_general 应为布尔值: {self.config.flying_general!r}")
        self.validator = MoveValidator(flying_general=self.config.flying_general)

    @property
    def first_side(self) -> Side:
        return Side.BLACK if self.config.first_side == 'black' else Side.RED

    def new_game(self) -> GameState:
        """按配置创建一局新棋"""
        return GameState(first_side=self.first_side, rule_engine=self)

    def is_valid_move(self, state: GameState, piece: Piece, x: int, y: int) -> bool:
        """几何与占位检查，不考虑送将"""
        return self.validator.is_valid_move(state, piece, x, y)

    # ==================== 将军检测 ====================

    def is_in_check(self, state: GameState, side: Side) -> bool:
        """
        检查指定阵营是否被将军

        找不到己方帅/将时视为未被将军。

        Args:
            state: 棋局
            side: 被检查的阵营

        Returns:
            bool: 是否被将军
        """
        general_pos = state.find_general(side)
        if general_pos == NOT_FOUND:
            return False

        gx, gy = general_pos
        return any(
            self.validator.is_valid_move(state, attacker, gx, gy)
            for attacker in state.pieces(Side(side).opponent)
        )

    # ==================== 合法走法生成 ====================

    def get_legal_moves(self, state: GameState, piece: Piece) -> List[Tuple[int, int]]:
        """
        生成棋子的所有合法目标格

        对每个几何上可行的目标格在当前网格上试走，检查己方是否被将军，
        然后无条件还原。调用前后棋局完全一致。

        Args:
            state: 棋局
            piece: 棋盘上的棋子

        Returns:
            List[Tuple[int, int]]: 按行优先顺序排列的 (x, y) 列表
        """
        if state.piece_at(piece.x, piece.y) is not piece:
            return []

        legal_moves = []
        for y in range(BOARD_HEIGHT):
            for x in range(BOARD_WIDTH):
                if not self.validator.is_valid_move(state, piece, x, y):
                    continue
                with state.speculative_move(piece, x, y):
                    exposes_general = self.is_in_check(state, piece.side)
                if not exposes_general:
                    legal_moves.append((x, y))

        return legal_moves

    def get_all_legal_moves(self, state: GameState, side: Optional[Side] = None
                            ) -> List[Tuple[Tuple[int, int], Tuple[int, int]]]:
        """
        生成指定阵营的所有合法走法

        Args:
            side: 阵营，None表示当前走棋方

        Returns:
            [((from_x, from_y), (to_x, to_y)), ...]
        """
        if side is None:
            side = state.current_turn

        return [
            (piece.position, target)
            for piece in state.pieces(side)
            for target in self.get_legal_moves(state, piece)
        ]

    def has_legal_move(self, state: GameState, side: Side) -> bool:
        return any(self.get_legal_moves(state, piece) for piece in state.pieces(side))

    # ==================== 走子、悔棋、重置 ====================

    def move_piece(self, state: GameState, x1: int, y1: int, x2: int, y2: int) -> bool:
        """
        提交一步走法

        起点必须有当前走棋方的棋子，且目标格在其合法走法中。
        否则不修改棋局并返回 False。

        Returns:
            bool: 是否成功

        Raises:
            GameStateError: 走法会吃掉对方帅/将 (正常对局中不可达)
        """
        notation = f"({x1},{y1})->({x2},{y2})"
        piece = state.piece_at(x1, y1)
        if piece is None:
            self.log_debug(f"拒绝走法 {notation}: 起点没有棋子")
            return False
        if piece.side != state.current_turn:
            self.log_debug(f"拒绝走法 {notation}: 未轮到{piece.side.display_name}")
            return False
        if (x2, y2) not in self.get_legal_moves(state, piece):
            self.log_debug(f"拒绝走法 {notation}: 不是合法走法")
            return False

        target = state.piece_at(x2, y2)
        if target is not None and target.piece_type == PieceType.GENERAL:
            self.log_error(f"走法 {notation} 会吃掉{target.side.display_name}的帅/将")
            raise GameStateError(notation, "帅/将不能被吃，对方此前已处于被将军状态")

        record = MoveRecord(
            from_x=x1, from_y=y1, to_x=x2, to_y=y2,
            captured=target,
            mover=state.current_turn
        )
        state.history.append(record)
        state.relocate(piece, x2, y2)
        state.current_turn = state.current_turn.opponent

        self.log_info(
            f"{record.mover.display_name} {piece.display_name} {record}"
            + (f" 吃{target.display_name}" if target else "")
        )
        return True

    def undo_move(self, state: GameState):
        """
        悔棋：撤销最后一步走法，历史为空时不做任何事
        """
        if not state.history:
            return

        last_move = state.history.pop()
        piece = state.grid[last_move.to_y, last_move.to_x]
        if piece is None:
            raise GameStateError(str(last_move), "目标格上没有可撤回的棋子")

        state.relocate(piece, last_move.from_x, last_move.from_y)
        if last_move.captured is not None:
            captured = last_move.captured
            captured.x, captured.y = last_move.to_x, last_move.to_y
            state.grid[last_move.to_y, last_move.to_x] = captured

        state.current_turn = last_move.mover
        self.log_info(f"撤销走法 {last_move}")

    def reset_game(self, state: GameState):
        """清空网格和历史，恢复初始局面，由先手方走棋"""
        state.clear()
        state.setup_initial_position()
        state.current_turn = state.first_side
        self.log_info("棋局已重置")

    # ==================== 终局检测 ====================

    def is_checkmate(self, state: GameState, side: Side) -> bool:
        """
        检查指定阵营是否被将死

        首先必须被将军，且己方所有棋子都没有合法走法。
        """
        if not self.is_in_check(state, side):
            return False
        return not self.has_legal_move(state, side)

    def is_stalemate(self, state: GameState, side: Side) -> bool:
        """
        检查指定阵营是否被困毙：没有被将军，但没有合法走法
        """
        if self.is_in_check(state, side):
            return False
        return not self.has_legal_move(state, side)

    def get_game_status(self, state: GameState) -> Dict[str, Any]:
        """
        获取当前走棋方视角的游戏状态

        象棋规则中困毙与将死同样判负。

        Returns:
            Dict: 游戏状态信息
        """
        side = state.current_turn
        in_check = self.is_in_check(state, side)
        legal_moves = self.get_all_legal_moves(state, side)
        no_moves = len(legal_moves) == 0

        status = {
            'current_turn': side,
            'current_turn_name': side.display_name,
            'in_check': in_check,
            'checkmate': in_check and no_moves,
            'stalemate': not in_check and no_moves,
            'game_over': no_moves,
            'winner': side.opponent if no_moves else None,
            'legal_moves_count': len(legal_moves),
            'last_move': state.get_last_move(),
        }

        if status['checkmate']:
            status['end_reason'] = '将死'
        elif status['stalemate']:
            status['end_reason'] = '困毙'

        return status
