"""
测试RuleEngine类的功能

测试将军检测、合法走法生成、走子/悔棋/重置和终局检测等功能。
"""

import pytest
import numpy as np

from xiangqi_project.src.xiangqi_engine.config import RulesConfig
from xiangqi_project.src.xiangqi_engine.rules_engine import (
    GameState, PieceType, RuleEngine, Side
)
from xiangqi_project.src.xiangqi_engine.utils import GameStateError


def snapshot(state):
    """记录网格、棋子坐标、走棋方和历史长度"""
    return (
        state.to_matrix().copy(),
        [(id(p), p.x, p.y) for p in state.pieces()],
        state.current_turn,
        len(state.history),
    )


def assert_same_snapshot(before, after):
    assert np.array_equal(before[0], after[0])
    assert before[1:] == after[1:]


class TestRuleEngine:
    """RuleEngine类的测试"""

    def setup_method(self):
        """每个测试方法前的设置"""
        self.rule_engine = RuleEngine()
        self.state = self.rule_engine.new_game()

    def test_rule_engine_creation(self):
        """测试规则引擎创建"""
        assert self.rule_engine.config.flying_general is True
        assert self.rule_engine.first_side == Side.RED
        assert self.state.current_turn == Side.RED
        assert self.state.rule_engine is self.rule_engine

    def test_initial_legal_moves(self):
        """测试初始局面的合法走法"""
        red_moves = self.rule_engine.get_all_legal_moves(self.state, Side.RED)
        assert len(red_moves) == 44

        black_moves = self.rule_engine.get_all_legal_moves(self.state, Side.BLACK)
        assert len(black_moves) == 44

        assert ((0, 6), (0, 5)) in red_moves   # 一路兵进一
        assert ((1, 9), (2, 7)) in red_moves   # 马二进三
        assert ((7, 9), (6, 7)) in red_moves   # 马八进七
        assert ((1, 7), (1, 0)) in red_moves   # 炮打马

    def test_initial_general_moves(self):
        """初始局面帅只能向前一步"""
        general = self.state.piece_at(4, 9)
        assert self.rule_engine.get_legal_moves(self.state, general) == [(4, 8)]

    def test_legal_moves_row_major_order(self):
        """测试合法走法按行优先顺序排列"""
        cannon = self.state.piece_at(1, 7)
        moves = self.rule_engine.get_legal_moves(self.state, cannon)
        assert moves == sorted(moves, key=lambda pos: (pos[1], pos[0]))
        assert len(moves) == 12

    def test_legal_moves_leave_state_unchanged(self):
        """测试合法走法生成不改变棋局"""
        before = snapshot(self.state)
        for piece in self.state.pieces():
            self.rule_engine.get_legal_moves(self.state, piece)
        assert_same_snapshot(before, snapshot(self.state))

    def test_legal_moves_for_piece_off_board(self):
        """不在棋盘上的棋子没有合法走法"""
        piece = self.state.remove_piece(0, 6)
        assert self.rule_engine.get_legal_moves(self.state, piece) == []

    def test_initial_status(self):
        """测试初始局面的游戏状态"""
        status = self.rule_engine.get_game_status(self.state)
        assert status['current_turn'] == Side.RED
        assert status['current_turn_name'] == '红方'
        assert not status['in_check']
        assert not status['checkmate']
        assert not status['game_over']
        assert status['winner'] is None
        assert status['legal_moves_count'] == 44
        assert status['last_move'] is None

    def test_configured_first_side(self):
        """测试配置黑方先走"""
        engine = RuleEngine(RulesConfig(first_side='black'))
        state = engine.new_game()
        assert state.current_turn == Side.BLACK

        assert engine.move_piece(state, 0, 3, 0, 4)
        engine.reset_game(state)
        assert state.current_turn == Side.BLACK
        assert state.history == []


class TestCheckDetection:
    """将军检测的测试"""

    def setup_method(self):
        self.rule_engine = RuleEngine()

    def test_no_check_at_start(self):
        state = GameState()
        assert not self.rule_engine.is_in_check(state, Side.RED)
        assert not self.rule_engine.is_in_check(state, Side.BLACK)

    def test_chariot_check(self):
        state = GameState.empty(Side.BLACK)
        state.place_piece(PieceType.GENERAL, Side.BLACK, 4, 0)
        state.place_piece(PieceType.GENERAL, Side.RED, 3, 9)
        state.place_piece(PieceType.CHARIOT, Side.RED, 4, 5)
        assert self.rule_engine.is_in_check(state, Side.BLACK)
        assert not self.rule_engine.is_in_check(state, Side.RED)

    def test_check_blocked_by_interposition(self):
        """挡将后不再被将军"""
        state = GameState.empty(Side.BLACK)
        state.place_piece(PieceType.GENERAL, Side.BLACK, 4, 0)
        state.place_piece(PieceType.GENERAL, Side.RED, 3, 9)
        state.place_piece(PieceType.CHARIOT, Side.RED, 4, 5)
        state.place_piece(PieceType.CHARIOT, Side.BLACK, 0, 2)

        assert self.rule_engine.is_in_check(state, Side.BLACK)
        assert self.rule_engine.move_piece(state, 0, 2, 4, 2)
        assert not self.rule_engine.is_in_check(state, Side.BLACK)

    def test_flying_general_check(self):
        """帅将照面视为将军"""
        state = GameState.empty()
        state.place_piece(PieceType.GENERAL, Side.BLACK, 4, 0)
        state.place_piece(PieceType.GENERAL, Side.RED, 4, 9)
        assert self.rule_engine.is_in_check(state, Side.RED)
        assert self.rule_engine.is_in_check(state, Side.BLACK)

        engine = RuleEngine(RulesConfig(flying_general=False))
        assert not engine.is_in_check(state, Side.RED)

    def test_missing_general_is_not_check(self):
        state = GameState.empty()
        state.place_piece(PieceType.CHARIOT, Side.BLACK, 4, 0)
        assert not self.rule_engine.is_in_check(state, Side.RED)
        assert not self.rule_engine.is_checkmate(state, Side.RED)


class TestSelfCheckFilter:
    """不能送将的测试"""

    def setup_method(self):
        self.rule_engine = RuleEngine()

    def test_pinned_chariot(self):
        """被牵制的车只能沿牵制线移动"""
        state = GameState.empty()
        state.place_piece(PieceType.GENERAL, Side.RED, 4, 9)
        chariot = state.place_piece(PieceType.CHARIOT, Side.RED, 4, 7)
        state.place_piece(PieceType.CHARIOT, Side.BLACK, 4, 2)
        state.place_piece(PieceType.GENERAL, Side.BLACK, 3, 0)

        assert self.rule_engine.is_valid_move(state, chariot, 0, 7)
        assert self.rule_engine.get_legal_moves(state, chariot) == [
            (4, 2), (4, 3), (4, 4), (4, 5), (4, 6), (4, 8)
        ]

        before = snapshot(state)
        assert not self.rule_engine.move_piece(state, 4, 7, 0, 7)
        assert_same_snapshot(before, snapshot(state))

    def test_general_cannot_face_general(self):
        """将不能走到与帅照面的位置"""
        state = GameState.empty(Side.BLACK)
        black_general = state.place_piece(PieceType.GENERAL, Side.BLACK, 4, 0)
        state.place_piece(PieceType.GENERAL, Side.RED, 3, 9)
        state.place_piece(PieceType.CHARIOT, Side.RED, 4, 5)

        assert self.rule_engine.get_legal_moves(state, black_general) == [(5, 0)]

        engine = RuleEngine(RulesConfig(flying_general=False))
        assert engine.get_legal_moves(state, black_general) == [(3, 0), (5, 0)]

    def test_must_respond_to_check(self):
        """被将军时只能走解将的棋"""
        state = GameState.empty(Side.BLACK)
        state.place_piece(PieceType.GENERAL, Side.BLACK, 4, 0)
        state.place_piece(PieceType.GENERAL, Side.RED, 3, 9)
        state.place_piece(PieceType.CHARIOT, Side.RED, 4, 5)
        state.place_piece(PieceType.CHARIOT, Side.BLACK, 0, 2)

        moves = self.rule_engine.get_all_legal_moves(state)
        assert sorted(moves) == sorted([
            ((4, 0), (5, 0)),
            ((0, 2), (4, 2)),
        ])
        assert not self.rule_engine.move_piece(state, 0, 2, 0, 5)
        assert state.current_turn == Side.BLACK


class TestMovePiece:
    """走子的测试"""

    def setup_method(self):
        self.rule_engine = RuleEngine()
        self.state = self.rule_engine.new_game()

    def test_soldier_advance(self):
        """测试兵进一"""
        soldier = self.state.piece_at(0, 6)
        assert self.rule_engine.move_piece(self.state, 0, 6, 0, 5)

        assert self.state.piece_at(0, 5) is soldier
        assert self.state.is_empty(0, 6)
        assert soldier.position == (0, 5)
        assert self.state.current_turn == Side.BLACK

        last = self.state.get_last_move()
        assert last.from_pos == (0, 6)
        assert last.to_pos == (0, 5)
        assert last.captured is None
        assert last.mover == Side.RED
        assert str(last) == "a6a5"

    def test_horse_blocked_eye(self):
        """测试蹩马腿"""
        self.state.place_piece(PieceType.SOLDIER, Side.BLACK, 1, 8)
        before = snapshot(self.state)
        assert not self.rule_engine.move_piece(self.state, 1, 9, 2, 7)
        assert_same_snapshot(before, snapshot(self.state))

    def test_cannon_needs_screen_only_for_capture(self):
        """炮不吃子时不能越子"""
        assert not self.rule_engine.move_piece(self.state, 1, 7, 1, 1)
        assert self.state.current_turn == Side.RED

    def test_cannon_capture(self):
        horse = self.state.piece_at(1, 0)
        assert self.rule_engine.move_piece(self.state, 1, 7, 1, 0)
        assert self.state.get_last_move().captured is horse
        assert horse not in self.state.pieces()

    @pytest.mark.parametrize("move", [
        (4, 4, 4, 3),   # 起点为空
        (0, 3, 0, 4),   # 未轮到黑方
        (0, 6, 0, 4),   # 兵不能走两步
        (0, 9, 0, 6),   # 车不能吃己方棋子
        (9, 9, 8, 9),   # 起点越界
    ])
    def test_rejected_moves(self, move):
        """被拒绝的走法不改变棋局"""
        before = snapshot(self.state)
        assert not self.rule_engine.move_piece(self.state, *move)
        assert_same_snapshot(before, snapshot(self.state))

    def test_turn_alternation(self):
        """测试轮流走棋"""
        moves = [(7, 9, 6, 7), (7, 0, 6, 2), (0, 6, 0, 5), (0, 3, 0, 4)]
        expected_turns = [Side.BLACK, Side.RED, Side.BLACK, Side.RED]
        for move, expected in zip(moves, expected_turns):
            assert self.rule_engine.move_piece(self.state, *move)
            assert self.state.current_turn == expected
        assert self.state.get_move_count() == 4

    def test_general_capture_raises(self):
        """吃帅/将的走法抛出异常且不修改棋局"""
        state = GameState.empty(Side.RED)
        state.place_piece(PieceType.GENERAL, Side.RED, 3, 9)
        state.place_piece(PieceType.CHARIOT, Side.RED, 4, 5)
        state.place_piece(PieceType.GENERAL, Side.BLACK, 4, 0)

        before = snapshot(state)
        with pytest.raises(GameStateError):
            self.rule_engine.move_piece(state, 4, 5, 4, 0)
        assert_same_snapshot(before, snapshot(state))

    def test_independent_games(self):
        """同一个引擎服务多个棋局"""
        other = self.rule_engine.new_game()
        assert self.rule_engine.move_piece(self.state, 0, 6, 0, 5)
        assert other.current_turn == Side.RED
        assert other.piece_at(0, 6) is not None
        assert other.history == []


class TestUndoAndReset:
    """悔棋与重置的测试"""

    def setup_method(self):
        self.rule_engine = RuleEngine()
        self.state = self.rule_engine.new_game()

    def test_undo_empty_history(self):
        """历史为空时悔棋不做任何事"""
        before = snapshot(self.state)
        self.rule_engine.undo_move(self.state)
        assert_same_snapshot(before, snapshot(self.state))

    def test_undo_restores_capture(self):
        horse = self.state.piece_at(1, 0)
        cannon = self.state.piece_at(1, 7)
        assert self.rule_engine.move_piece(self.state, 1, 7, 1, 0)

        self.rule_engine.undo_move(self.state)
        assert self.state.piece_at(1, 0) is horse
        assert self.state.piece_at(1, 7) is cannon
        assert horse.position == (1, 0)
        assert cannon.position == (1, 7)
        assert self.state.current_turn == Side.RED

    def test_undo_round_trip(self):
        """连续悔棋恢复到初始局面"""
        initial = snapshot(self.state)
        moves = [
            (1, 7, 1, 0),   # 炮打马
            (0, 0, 1, 0),   # 车吃炮
            (7, 7, 4, 7),   # 炮八平五
            (7, 2, 4, 2),   # 炮8平5
        ]
        for move in moves:
            assert self.rule_engine.move_piece(self.state, *move)

        for _ in moves:
            self.rule_engine.undo_move(self.state)

        assert_same_snapshot(initial, snapshot(self.state))
        assert self.state == GameState()

    def test_reset_game(self):
        assert self.rule_engine.move_piece(self.state, 0, 6, 0, 5)
        assert self.rule_engine.move_piece(self.state, 0, 3, 0, 4)

        self.rule_engine.reset_game(self.state)
        assert np.array_equal(self.state.to_matrix(), GameState().to_matrix())
        assert self.state.history == []
        assert self.state.current_turn == Side.RED


class TestGameEnd:
    """将死与困毙的测试"""

    def setup_method(self):
        self.rule_engine = RuleEngine()
        self.state = GameState.empty(Side.BLACK)
        self.black_general = self.state.place_piece(PieceType.GENERAL, Side.BLACK, 4, 0)
        self.state.place_piece(PieceType.GENERAL, Side.RED, 5, 9)

    def test_check_with_single_escape(self):
        """只有一个出路时不是将死"""
        self.state.place_piece(PieceType.CHARIOT, Side.RED, 4, 5)
        assert self.rule_engine.is_in_check(self.state, Side.BLACK)
        assert self.rule_engine.get_legal_moves(self.state, self.black_general) == [(3, 0)]
        assert not self.rule_engine.is_checkmate(self.state, Side.BLACK)

    def test_checkmate_after_escape_covered(self):
        """封住唯一出路后成为将死"""
        self.state.place_piece(PieceType.CHARIOT, Side.RED, 4, 5)
        self.state.place_piece(PieceType.CHARIOT, Side.RED, 3, 5)
        assert self.rule_engine.is_checkmate(self.state, Side.BLACK)
        assert not self.rule_engine.is_stalemate(self.state, Side.BLACK)

        status = self.rule_engine.get_game_status(self.state)
        assert status['checkmate']
        assert status['game_over']
        assert status['winner'] == Side.RED
        assert status['end_reason'] == '将死'

    def test_checkmate_reached_by_move(self):
        """走子形成将死"""
        self.state.current_turn = Side.RED
        self.state.place_piece(PieceType.CHARIOT, Side.RED, 4, 5)
        self.state.place_piece(PieceType.CHARIOT, Side.RED, 2, 5)

        assert not self.rule_engine.is_checkmate(self.state, Side.BLACK)
        assert self.rule_engine.move_piece(self.state, 2, 5, 3, 5)
        assert self.rule_engine.is_checkmate(self.state, Side.BLACK)

    def test_stalemate(self):
        """没有被将军但无子可动"""
        self.state.place_piece(PieceType.CHARIOT, Side.RED, 0, 1)
        self.state.place_piece(PieceType.CHARIOT, Side.RED, 3, 5)

        assert not self.rule_engine.is_in_check(self.state, Side.BLACK)
        assert not self.rule_engine.is_checkmate(self.state, Side.BLACK)
        assert self.rule_engine.is_stalemate(self.state, Side.BLACK)

        status = self.rule_engine.get_game_status(self.state)
        assert status['stalemate']
        assert status['game_over']
        assert status['winner'] == Side.RED
        assert status['end_reason'] == '困毙'


class TestGameStateProxies:
    """棋局上的规则代理方法"""

    def test_proxies_use_default_engine(self):
        state = GameState()
        assert state.get_legal_moves(state.piece_at(4, 9)) == [(4, 8)]
        assert not state.is_in_check(Side.RED)
        assert not state.is_checkmate(Side.RED)

        assert state.move_piece(0, 6, 0, 5)
        assert state.current_turn == Side.BLACK
        state.undo_move()
        assert state.current_turn == Side.RED

        assert state.move_piece(0, 6, 0, 5)
        state.reset_game()
        assert state == GameState()
