"""
棋局合法性验证器

检查棋局结构不变量，用于导入局面和测试。
"""

from typing import Any, Dict, List, Tuple

from .game_state import BOARD_HEIGHT, BOARD_WIDTH, GameState, HOME_ROWS
from .move_validator import in_palace, own_half
from .piece import PieceType, Side


class BoardValidator:
    """
    棋局合法性验证器

    提供网格一致性、棋子数量、棋子位置等验证功能。
    """

    # 每方棋子数量上限
    PIECE_LIMITS = {
        PieceType.GENERAL: 1,
        PieceType.ADVISOR: 2,
        PieceType.ELEPHANT: 2,
        PieceType.HORSE: 2,
        PieceType.CHARIOT: 2,
        PieceType.CANNON: 2,
        PieceType.SOLDIER: 5,
    }

    def __init__(self, rule_engine=None):
        """
        Args:
            rule_engine: 用于将军检测的规则引擎，None表示使用默认规则
        """
        if rule_engine is None:
            from .rule_engine import RuleEngine
            rule_engine = RuleEngine()
        self.rule_engine = rule_engine

    def validate_grid_consistency(self, state: GameState) -> Tuple[bool, List[str]]:
        """
        验证网格结构：尺寸正确，且每个棋子的坐标与所在格子一致
        """
        errors = []

        if state.grid.shape != (BOARD_HEIGHT, BOARD_WIDTH):
            errors.append(f"棋盘尺寸错误: {state.grid.shape}, 应为({BOARD_HEIGHT}, {BOARD_WIDTH})")
            return False, errors

        seen = set()
        for y in range(BOARD_HEIGHT):
            for x in range(BOARD_WIDTH):
                piece = state.grid[y, x]
                if piece is None:
                    continue
                if (piece.x, piece.y) != (x, y):
                    errors.append(f"{piece.display_name}坐标({piece.x}, {piece.y})与格子({x}, {y})不一致")
                if id(piece) in seen:
                    errors.append(f"{piece.display_name}同时出现在多个格子上")
                seen.add(id(piece))

        if state.current_turn not in (Side.RED, Side.BLACK):
            errors.append(f"当前走棋方错误: {state.current_turn}")

        return len(errors) == 0, errors

    def validate_piece_counts(self, state: GameState) -> Tuple[bool, List[str]]:
        """
        验证棋子数量：不超过上限，且双方各有一个帅/将
        """
        errors = []

        for side in (Side.RED, Side.BLACK):
            counts: Dict[PieceType, int] = {}
            for piece in state.pieces(side):
                counts[piece.piece_type] = counts.get(piece.piece_type, 0) + 1

            for piece_type, limit in self.PIECE_LIMITS.items():
                count = counts.get(piece_type, 0)
                if count > limit:
                    errors.append(f"{side.display_name}{piece_type.name}数量超限: {count} > {limit}")

            if counts.get(PieceType.GENERAL, 0) != 1:
                errors.append(f"{side.display_name}帅/将数量错误: {counts.get(PieceType.GENERAL, 0)}, 应为1")

        return len(errors) == 0, errors

    def validate_piece_positions(self, state: GameState) -> Tuple[bool, List[str]]:
        """
        验证棋子位置：帅/将和仕/士在九宫内，相/象不过河，兵/卒不在起始线之后
        """
        errors = []

        for piece in state.pieces():
            side, x, y = piece.side, piece.x, piece.y
            if piece.piece_type in (PieceType.GENERAL, PieceType.ADVISOR):
                if not in_palace(side, x, y):
                    errors.append(f"{piece.display_name}位置错误: ({x}, {y}), 应在九宫内")
            elif piece.piece_type == PieceType.ELEPHANT:
                if not own_half(side, y):
                    errors.append(f"{piece.display_name}过河: ({x}, {y})")
            elif piece.piece_type == PieceType.SOLDIER:
                soldier_row = HOME_ROWS[side]['soldier']
                behind = y > soldier_row if side == Side.RED else y < soldier_row
                if behind:
                    errors.append(f"{piece.display_name}位置错误: ({x}, {y}), 兵卒不能后退")

        return len(errors) == 0, errors

    def validate_check_state(self, state: GameState) -> Tuple[bool, List[str]]:
        """
        验证非走棋方没有被将军 (否则走棋方可以直接吃掉帅/将)
        """
        errors = []
        waiting_side = state.current_turn.opponent
        if self.rule_engine.is_in_check(state, waiting_side):
            errors.append(f"{waiting_side.display_name}不走棋却处于被将军状态")
        return len(errors) == 0, errors

    def full_validation(self, state: GameState) -> Tuple[bool, List[str]]:
        """
        完整验证

        Returns:
            Tuple[bool, List[str]]: (是否合法, 错误信息列表)
        """
        errors = []
        for check in (self.validate_grid_consistency, self.validate_piece_counts,
                      self.validate_piece_positions, self.validate_check_state):
            _, check_errors = check(state)
            errors.extend(check_errors)
        return len(errors) == 0, errors

    def get_validation_report(self, state: GameState) -> Dict[str, Any]:
        """
        获取详细的验证报告
        """
        report: Dict[str, Any] = {}
        for name, check in (('grid', self.validate_grid_consistency),
                            ('piece_counts', self.validate_piece_counts),
                            ('piece_positions', self.validate_piece_positions),
                            ('check_state', self.validate_check_state)):
            is_valid, errors = check(state)
            report[name] = {'valid': is_valid, 'errors': errors}

        report['valid'] = all(section['valid'] for section in report.values())
        report['fen'] = state.to_fen()
        return report
