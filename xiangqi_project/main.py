#!/usr/bin/env python3
"""
Xiangqi 主入口文件

提供终端对弈和局面查询的命令行接口。界面只读取棋局并调用规则引擎。
"""

import sys
from typing import Iterable, Optional, Tuple

import click
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from xiangqi_project import __version__, __description__
from xiangqi_project.src.xiangqi_engine.config import ConfigManager, RulesConfig, SystemConfig
from xiangqi_project.src.xiangqi_engine.rules_engine import (
    BoardValidator, GameState, RuleEngine, Side, parse_coordinate_notation, parse_square
)
from xiangqi_project.src.xiangqi_engine.rules_engine.move import format_square
from xiangqi_project.src.xiangqi_engine.utils import GameStateError, InvalidMoveError, setup_logger

console = Console()

HELP_TEXT = (
    "输入走法如 [bold]h9g7[/bold] (列a-i + 行0-9)；"
    "[bold]moves e6[/bold] 查看可走位置；[bold]undo[/bold] 悔棋；"
    "[bold]reset[/bold] 重新开始；[bold]quit[/bold] 退出"
)


def print_banner():
    """打印项目横幅"""
    banner_text = Text()
    banner_text.append("Xiangqi\n", style="bold blue")
    banner_text.append(f"版本: {__version__}\n", style="green")
    banner_text.append(__description__, style="white")

    console.print(Panel(
        banner_text,
        title="中国象棋",
        title_align="center",
        border_style="blue",
        padding=(1, 2)
    ))


def render_board(state: GameState, highlights: Iterable[Tuple[int, int]] = ()) -> Text:
    """
    把棋局渲染为带颜色的文本

    Args:
        state: 棋局
        highlights: 需要高亮的格子
    """
    marked = set(highlights)
    last = state.get_last_move()
    text = Text("   a  b  c  d  e  f  g  h  i\n", style="dim")

    for y in range(10):
        text.append(f"{y}  ", style="dim")
        for x in range(9):
            piece = state.piece_at(x, y)
            style = ""
            if piece is not None:
                style = "bold red" if piece.side == Side.RED else "bold"
                cell = piece.display_name
            else:
                cell = "＊" if (x, y) in marked else "．"
            if (x, y) in marked:
                style += " on green"
            elif last is not None and (x, y) in (last.from_pos, last.to_pos):
                style += " on grey23"
            text.append(cell, style=style.strip())
            text.append(" ")
        text.append("\n")
        if y == 4:
            text.append("   ~~~~~~~ 楚河  汉界 ~~~~~~~\n", style="cyan")

    return text


def describe_status(engine: RuleEngine, state: GameState) -> Text:
    """生成走棋方、将军、将死等状态描述"""
    status = engine.get_game_status(state)
    side = status['current_turn']
    text = Text(f"轮到: {side.display_name}", style="bold red" if side == Side.RED else "bold")

    last = status['last_move']
    if last is not None:
        captured = f" 吃{last.captured.display_name}" if last.captured else ""
        text.append(f"    上一步: {last.mover.display_name} {last}{captured}", style="white")

    if status['checkmate']:
        text.append(f"\n将死！{side.opponent.display_name}胜", style="bold yellow")
    elif status['stalemate']:
        text.append(f"\n困毙！{side.opponent.display_name}胜", style="bold yellow")
    elif status['in_check']:
        text.append("\n将军！必须保护你的帅/将", style="bold magenta")

    return text


def load_state(fen: Optional[str], engine: RuleEngine) -> GameState:
    """从FEN加载局面并检查其合法性，未给出FEN时开始新棋局"""
    if fen is None:
        return engine.new_game()

    try:
        state = GameState.from_fen(fen, rule_engine=engine)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint='--fen')

    is_valid, errors = BoardValidator(engine).full_validation(state)
    if not is_valid:
        raise click.BadParameter("; ".join(errors), param_hint='--fen')
    return state


def show_moves(engine: RuleEngine, state: GameState, square: str) -> bool:
    """显示一个格子上棋子的合法走法"""
    x, y = parse_square(square)
    piece = state.piece_at(x, y)
    if piece is None:
        console.print(f"[yellow]{square} 上没有棋子[/yellow]")
        return False

    targets = engine.get_legal_moves(state, piece)
    console.print(render_board(state, targets))
    names = " ".join(format_square(t) for t in targets) or "无"
    console.print(f"{piece.display_name} {square}: {names}")
    return True


@click.group()
@click.version_option(version=__version__, prog_name="Xiangqi")
@click.option('--debug', is_flag=True, help='启用调试日志')
@click.option('--config', 'config_dir', type=click.Path(file_okay=False), help='配置目录')
@click.pass_context
def cli(ctx: click.Context, debug: bool, config_dir: Optional[str]):
    """中国象棋规则引擎"""
    if config_dir:
        manager = ConfigManager(config_dir)
        rules_config = manager.get_rules_config()
        system_config = manager.get_system_config()
    else:
        rules_config, system_config = RulesConfig(), SystemConfig()

    setup_logger(
        level='DEBUG' if debug else system_config.log_level,
        log_file=system_config.log_file or None,
        log_dir=system_config.log_dir,
        max_size=system_config.log_max_size,
        backup_count=system_config.log_backup_count,
        console_output=system_config.console_output
    )
    if debug:
        console.print("[yellow]调试模式已启用[/yellow]")

    ctx.obj = RuleEngine(rules_config)


@cli.command()
@click.option('--fen', type=str, help='FEN格式的起始局面')
@click.pass_obj
def play(engine: RuleEngine, fen: Optional[str]):
    """双人终端对弈"""
    state = load_state(fen, engine)
    console.print(HELP_TEXT)

    while True:
        console.print(render_board(state))
        console.print(describe_status(engine, state))
        if engine.get_game_status(state)['game_over']:
            return

        command = click.prompt("走法", prompt_suffix="> ").strip()
        if command in ("quit", "q", "exit"):
            console.print("[yellow]再见[/yellow]")
            return
        if command == "undo":
            if state.get_last_move() is None:
                console.print("[yellow]没有可以撤销的走法[/yellow]")
            engine.undo_move(state)
            continue
        if command == "reset":
            if click.confirm("确定重新开始?", default=False):
                engine.reset_game(state)
                console.print(f"[green]棋局已重新开始，{state.current_turn.display_name}先走[/green]")
            continue
        if command in ("help", "?"):
            console.print(HELP_TEXT)
            continue

        try:
            if command.startswith("moves "):
                show_moves(engine, state, command.split(maxsplit=1)[1])
                continue
            (x1, y1), (x2, y2) = parse_coordinate_notation(command)
        except InvalidMoveError as e:
            console.print(f"[red]{e.message}[/red]")
            continue

        try:
            moved = engine.move_piece(state, x1, y1, x2, y2)
        except GameStateError as e:
            console.print(f"[red]{e.message}[/red]")
            continue
        if not moved:
            if engine.is_in_check(state, state.current_turn):
                console.print("[red]无效走法：你的帅/将仍处于被将军状态！[/red]")
            else:
                console.print(f"[red]无效走法: {command}[/red]")


@cli.command()
@click.argument('square')
@click.option('--fen', type=str, help='FEN格式的局面')
@click.pass_obj
def moves(engine: RuleEngine, square: str, fen: Optional[str]):
    """列出某个格子上棋子的合法走法"""
    state = load_state(fen, engine)
    try:
        found = show_moves(engine, state, square)
    except InvalidMoveError as e:
        raise click.BadParameter(e.message, param_hint='SQUARE')
    if not found:
        sys.exit(1)


@cli.command()
@click.option('--fen', type=str, help='FEN格式的局面')
@click.pass_obj
def status(engine: RuleEngine, fen: Optional[str]):
    """显示局面和游戏状态"""
    state = load_state(fen, engine)
    console.print(render_board(state))
    console.print(describe_status(engine, state))
    console.print(f"FEN: {state.to_fen()}")


@cli.command()
def info():
    """显示系统信息"""
    print_banner()
    console.print(HELP_TEXT)


def main():
    """主入口函数"""
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]程序被用户中断[/yellow]")
        sys.exit(0)


if __name__ == "__main__":
    main()
