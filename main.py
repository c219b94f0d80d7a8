#!/usr/bin/env python3
"""
Power-up Minesweeper - terminal entry point.

Usage:
    python main.py play [--difficulty {easy,medium,hard}] [--seed N]
    python main.py autoplay [--games N] [--delay S]
"""
import argparse
import logging
import time

import numpy as np

from src.powersweep.board import DIFFICULTIES, OutOfBounds, UnknownDifficulty
from src.powersweep.controller import GameController
from src.powersweep.environment import MinesweeperEnv
from src.powersweep.render import render_session

HELP = """Commands:
  r ROW COL   reveal a cell
  f ROW COL   toggle a flag
  p ID        use a power-up (xray, safeclick, autoflag, timefreeze)
  n           new game
  d KEY       change difficulty (easy, medium, hard)
  q           quit"""


def play(args: argparse.Namespace) -> None:
    """Play interactively in the terminal."""
    controller = GameController(args.difficulty, seed=args.seed)
    print(HELP)

    while True:
        controller.advance()
        print()
        print(render_session(controller.session, controller.clock()))

        try:
            command = input("> ").split()
        except EOFError:
            break
        if not command:
            continue

        action, params = command[0].lower(), command[1:]
        controller.advance()
        try:
            if action == "q":
                break
            elif action in ("r", "f") and len(params) == 2:
                row, col = int(params[0]), int(params[1])
                if action == "r":
                    controller.reveal(row, col)
                else:
                    controller.toggle_flag(row, col)
            elif action == "p" and len(params) == 1:
                controller.use_power_up(params[0])
            elif action == "n":
                controller.reset()
            elif action == "d" and len(params) == 1:
                controller.change_difficulty(params[0])
            else:
                print(HELP)
        except ValueError:
            print("Row and column must be numbers")
        except OutOfBounds as error:
            print(error)
        except UnknownDifficulty as error:
            print(f"{error}; choose from {', '.join(DIFFICULTIES)}")


def autoplay(args: argparse.Namespace) -> None:
    """Watch random moves play out."""
    env = MinesweeperEnv(args.difficulty, render_mode="ansi")
    rng = np.random.default_rng(args.seed)
    wins = 0

    for game in range(args.games):
        env.reset(seed=None if args.seed is None else args.seed + game)
        done = False
        info = {}

        while not done:
            valid_indices = np.where(env.get_action_mask())[0]
            action = int(rng.choice(valid_indices))
            _, _, terminated, truncated, info = env.step(action)
            done = terminated or truncated

            if args.delay:
                print(f"\n=== Game {game + 1}/{args.games} | Step {info['steps']} ===")
                print(env.render())
                time.sleep(args.delay)

        if info.get("game_state") == "WON":
            wins += 1
        print(f"Game {game + 1}: {info.get('game_state')} after {info.get('steps')} steps")

    print(f"\n=== Final: {wins}/{args.games} wins ===")


def main() -> None:
    """Parse arguments and run the appropriate command."""
    parser = argparse.ArgumentParser(
        description="Power-up Minesweeper in the terminal"
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Log engine events"
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    play_parser = subparsers.add_parser("play", help="Play interactively")
    play_parser.add_argument(
        "--difficulty", choices=list(DIFFICULTIES), default="easy",
        help="Board preset",
    )
    play_parser.add_argument(
        "--seed", type=int, default=None, help="Random seed"
    )

    autoplay_parser = subparsers.add_parser(
        "autoplay", help="Play random moves through the environment"
    )
    autoplay_parser.add_argument(
        "--difficulty", choices=list(DIFFICULTIES), default="easy",
        help="Board preset",
    )
    autoplay_parser.add_argument(
        "--games", type=int, default=5, help="Number of games"
    )
    autoplay_parser.add_argument(
        "--delay", type=float, default=0.0, help="Delay between moves"
    )
    autoplay_parser.add_argument(
        "--seed", type=int, default=None, help="Random seed"
    )

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if args.command == "play":
        play(args)
    elif args.command == "autoplay":
        autoplay(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
