#!/usr/bin/env python3
"""
INFINITE STAIRS - Terminal Reflex Climber
==========================================
Climb a procedurally generated staircase before the clock runs out.

Controls:
    LEFT / A / H    - Left
    RIGHT / D / L   - Right
    R               - Restart after a fall
    Q / ESC         - Quit

Pressing the side you already face climbs; pressing the other side turns
around and climbs that way. A wrong guess ends the run.
"""

from dataclasses import dataclass
from typing import List, Optional
import argparse
import logging
import sys

from blessed import Terminal

from .components import RunState
from .config import RunConfig
from .engine import (
    TerminalScreen, AMBER_400, BLUE_400, CYAN_400, RED_500, SLATE_400,
    SLATE_700, SLATE_950, WHITE, YELLOW_400,
)
from .game import StairsEngine
from .loop import FrameTicker
from .player import InputHandler
from .storage import JsonHighScoreStore


logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

MIN_WIDTH = 40
MIN_HEIGHT = 16
TIME_BAR_WARNING = 20.0
COMBO_DISPLAY_MIN = 5

TITLE_ART = [
    r" ___ _  _ ___ ___ _  _ ___ _____ ___ ",
    r"|_ _| \| | __|_ _| \| |_ _|_   _| __|",
    r" | || .` | _| | || .` || |  | | | _| ",
    r"|___|_|\_|_| |___|_|\_|___| |_| |___|",
    r"      ___ _____ _   ___ ___  ___     ",
    r"     / __|_   _/_\ |_ _| _ \/ __|    ",
    r"     \__ \ | |/ _ \ | ||   /\__ \    ",
    r"     |___/ |_/_/ \_\___|_|_\|___/    ",
]


# =============================================================================
# HUD
# =============================================================================

@dataclass
class HudState:
    """What the engine last reported through its callbacks."""
    state: RunState = RunState.START
    score: int = 0
    high_score: int = 0
    combo: int = 0
    time_percent: float = 100.0

    def on_state_change(self, state: RunState, score: int, high_score: int, combo: int):
        self.state = state
        self.score = score
        self.high_score = high_score
        self.combo = combo

    def on_time_update(self, percent: float):
        self.time_percent = percent


def render_hud(screen: TerminalScreen, hud: HudState):
    """Score, best, time bar and combo over the top rows."""
    width = screen.width

    screen.put_string(2, 0, 'SCORE', BLUE_400)
    screen.put_string(2, 1, str(hud.score), WHITE)

    best = f'BEST {hud.high_score}'
    screen.put_string(width - len(best) - 2, 0, best, AMBER_400)

    bar_width = max(4, width - 6)
    filled = max(0, min(bar_width, int(round(hud.time_percent / 100.0 * bar_width))))
    color = RED_500 if hud.time_percent < TIME_BAR_WARNING else CYAN_400
    screen.put_string(2, 2, '[', SLATE_700)
    screen.put_string(3, 2, '=' * filled, color)
    screen.put_string(3 + filled, 2, '.' * (bar_width - filled), SLATE_700)
    screen.put_string(3 + bar_width, 2, ']', SLATE_700)

    if hud.combo >= COMBO_DISPLAY_MIN:
        screen.put_string(2, 3, f'COMBO x{hud.combo}', YELLOW_400)


def render_title_overlay(screen: TerminalScreen, frame: int):
    height = screen.height
    art_y = max(4, height // 2 - len(TITLE_ART) - 2)
    for i, line in enumerate(TITLE_ART):
        color = WHITE if i < 4 else CYAN_400
        screen.put_centered(art_y + i, line, color, SLATE_950)

    prompt_y = art_y + len(TITLE_ART) + 2
    if (frame // 30) % 2 == 0:
        screen.put_centered(prompt_y, '[ PRESS LEFT OR RIGHT TO START ]', YELLOW_400, SLATE_950)
    screen.put_centered(prompt_y + 2, 'LEFT/A/H - Left     RIGHT/D/L - Right', SLATE_400, SLATE_950)
    screen.put_centered(prompt_y + 3, 'Same side climbs, other side turns', SLATE_400, SLATE_950)


def render_game_over_overlay(screen: TerminalScreen, hud: HudState, frame: int):
    y = max(5, screen.height // 2 - 3)
    screen.put_centered(y, '  G A M E   O V E R  ', RED_500, SLATE_950)
    screen.put_centered(y + 2, f'SCORE {hud.score}', WHITE, SLATE_950)
    screen.put_centered(y + 3, f'BEST {hud.high_score}', AMBER_400, SLATE_950)
    if (frame // 30) % 2 == 0:
        screen.put_centered(y + 5, '[ R - RESTART ]    [ Q - QUIT ]', CYAN_400, SLATE_950)


# =============================================================================
# TERMINAL HOST
# =============================================================================

class TerminalHost:
    """Wires the terminal (keys, resizes, output) to a StairsEngine."""

    def __init__(self, term: Terminal, config: RunConfig):
        self.term = term
        self.config = config
        self.screen = TerminalScreen(term)
        self.input_handler = InputHandler()
        self.hud = HudState()
        self.store = JsonHighScoreStore(config.resolved_state_dir())
        self.engine = StairsEngine(
            self.screen.canvas,
            on_state_change=self.hud.on_state_change,
            on_time_update=self.hud.on_time_update,
            store=self.store,
            seed=config.seed,
            scale=config.scale,
        )
        self.ticker = FrameTicker(
            self.engine.step,
            self.engine.render,
            before_frame=self.before_frame,
            after_frame=self.after_frame,
            target_fps=config.target_fps,
        )
        self._watching_resize = True
        self.engine.add_teardown(self.ticker.stop)
        self.engine.add_teardown(self._stop_resize_watch)

    def _stop_resize_watch(self):
        self._watching_resize = False

    def poll_resize(self):
        if not self._watching_resize:
            return
        width, height = self.term.width, self.term.height
        if (width, height) != (self.screen.width, self.screen.height):
            logger.debug('Terminal resized to %dx%d', width, height)
            self.screen.resize(width, height)
            self.engine.resize(self.screen.canvas.width, self.screen.canvas.height)
            print(self.term.home + self.term.clear, end='', flush=True)

    def handle_input(self):
        """Drain all pending input from the terminal."""
        key = self.term.inkey(timeout=0)
        while key:
            self.input_handler.process_key(key)
            key = self.term.inkey(timeout=0)

        if self.input_handler.consume_quit():
            self.engine.destroy()
            return

        for direction in self.input_handler.consume_directions():
            self.engine.handle_direction(direction)

        if self.input_handler.consume_restart() and self.engine.state is RunState.GAMEOVER:
            self.engine.restart()

    def before_frame(self):
        self.handle_input()
        self.poll_resize()

    def after_frame(self):
        """HUD overlay and output, once the scene is painted."""
        screen = self.screen
        screen.compose()
        render_hud(screen, self.hud)
        if self.hud.state is RunState.START:
            render_title_overlay(screen, self.ticker.frames)
        elif self.hud.state is RunState.GAMEOVER and not self.engine.ctx.particles:
            render_game_over_overlay(screen, self.hud, self.ticker.frames)
        print(screen.present(), end='', flush=True)

    def run(self):
        try:
            self.ticker.run()
        finally:
            self.engine.destroy()


# =============================================================================
# ENTRY POINT
# =============================================================================

def parse_args(argv: Optional[List[str]] = None) -> RunConfig:
    defaults = RunConfig()
    parser = argparse.ArgumentParser(prog='infinite-stairs',
                                     description='Terminal reflex staircase climber.')
    parser.add_argument('--seed', type=int, default=None,
                        help='Seed for the staircase generator (default: random).')
    parser.add_argument('--fps', type=int, default=defaults.target_fps,
                        help=f'Target frame rate (default: {defaults.target_fps}).')
    parser.add_argument('--scale', type=float, default=defaults.scale,
                        help='World units per half-block pixel; smaller zooms in '
                             f'(default: {defaults.scale}).')
    parser.add_argument('--state-dir', default=None,
                        help='Directory for the high score file '
                             '(default: $INFINITE_STAIRS_STATE_DIR or ~/.infinite_stairs).')
    parser.add_argument('--log-file', default=None,
                        help='Write logs to this file (nothing is logged otherwise).')
    parser.add_argument('--log-level', default=defaults.log_level,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help=f'Log level for --log-file (default: {defaults.log_level}).')
    args = parser.parse_args(argv)
    if args.fps <= 0:
        parser.error('--fps must be positive')
    if args.scale <= 0:
        parser.error('--scale must be positive')
    return RunConfig(
        target_fps=args.fps,
        scale=args.scale,
        seed=args.seed,
        state_dir=args.state_dir,
        log_file=args.log_file,
        log_level=args.log_level,
    )


def configure_logging(config: RunConfig):
    """Log to a file when asked; never to the terminal we are drawing on."""
    if config.log_file:
        logging.basicConfig(
            filename=config.log_file,
            level=getattr(logging, config.log_level),
            format='%(asctime)s %(levelname)s %(name)s: %(message)s',
        )
    else:
        logging.getLogger().addHandler(logging.NullHandler())


def main(argv: Optional[List[str]] = None):
    """Entry point. Sets up the terminal and runs the frame loop."""
    config = parse_args(argv)
    configure_logging(config)

    term = Terminal()
    if term.width < MIN_WIDTH or term.height < MIN_HEIGHT:
        print(
            f'Terminal too small: {term.width}x{term.height}. '
            f'Minimum: {MIN_WIDTH}x{MIN_HEIGHT}'
        )
        sys.exit(1)

    with term.fullscreen(), term.cbreak(), term.hidden_cursor():
        # Initial clear (only time we clear the whole screen)
        print(term.home + term.clear, end='', flush=True)
        TerminalHost(term, config).run()

        # Restore terminal
        print(term.normal, end='', flush=True)


if __name__ == '__main__':
    main()
