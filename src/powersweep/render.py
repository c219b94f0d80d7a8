"""
Text presentation for the power-up Minesweeper engine.

Turns a session snapshot into plain strings for terminals and the
``ansi`` render mode of the environment.
"""
from typing import List, Optional

from .cell import FLAGGED_CODE, HIDDEN_CODE, MINE_CODE
from .powerups import PowerUpId
from .session import GameSession, GameStatus


STATUS_MESSAGES = {
    GameStatus.PLAYING: "Reveal cells, flag the mines you find",
    GameStatus.WON: "Congratulations! You won!",
    GameStatus.LOST: "Game Over! Try again.",
}


def format_time(seconds: int) -> str:
    """Format a timer value as mm:ss."""
    minutes, secs = divmod(seconds, 60)
    return f"{minutes:02d}:{secs:02d}"


def format_mine_counter(session: GameSession) -> str:
    """Remaining-mine counter, three digits wide."""
    return f"{session.remaining_mines:03d}"


def status_message(session: GameSession) -> str:
    return STATUS_MESSAGES[session.status]


def render_board(session: GameSession, show_coordinates: bool = False) -> str:
    """
    Render the board as ASCII.

    Hidden cells are ``.``, flags ``F``, revealed mines ``*``, empty
    cells a blank and numbered cells their digit. While x-ray is active
    hidden mines show as ``x``.
    """
    lines = []
    obs = session.board.get_observation()

    if show_coordinates:
        header = "   " + "".join(f"{col % 10} " for col in range(session.board.cols))
        lines.append(header.rstrip())

    for row in range(session.board.rows):
        row_str = f"{row:2d} " if show_coordinates else ""
        for col in range(session.board.cols):
            val = obs[row, col]
            if val == HIDDEN_CODE:
                is_mine = session.board.get_cell(row, col).is_mine
                row_str += "x" if session.xray_active and is_mine else "."
            elif val == FLAGGED_CODE:
                row_str += "F"
            elif val == MINE_CODE:
                row_str += "*"
            elif val == 0:
                row_str += " "
            else:
                row_str += str(val)
            row_str += " "
        lines.append(row_str.rstrip())

    return "\n".join(lines)


def render_header(session: GameSession) -> str:
    """Timer, difficulty, mine counter and status message."""
    return (
        f"[{format_time(session.elapsed_seconds)}]  "
        f"{session.difficulty.name}  "
        f"Mines: {format_mine_counter(session)}\n"
        f"{status_message(session)}"
    )


def render_power_ups(session: GameSession, now_ms: Optional[int] = None) -> str:
    """One line per ability with charges and status badge."""
    lines: List[str] = []
    for power_up in session.power_ups.values():
        active = (
            (power_up.id == PowerUpId.XRAY and session.xray_active)
            or (power_up.id == PowerUpId.TIME_FREEZE and session.time_frozen)
        )
        badge = power_up.badge(now_ms, active)
        line = (
            f"[{power_up.icon}] {power_up.id.value:<10} {power_up.name:<14} "
            f"{power_up.uses_remaining}/{power_up.max_uses}"
        )
        lines.append(f"{line} {badge}".rstrip())
    return "\n".join(lines)


def render_session(session: GameSession, now_ms: Optional[int] = None) -> str:
    """Header, board and power-up panel."""
    return "\n\n".join([
        render_header(session),
        render_board(session, show_coordinates=True),
        render_power_ups(session, now_ms),
    ])
