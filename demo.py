#!/usr/bin/env python3
"""Watch a random player on the Minesweeper field."""
import logging
import os
import time

import numpy as np

from src.minefield import FieldConfig, MinesweeperEnv


def clear_screen():
    os.system('cls' if os.name == 'nt' else 'clear')


def demo(delay: float = 0.3, games: int = 5, size: int = 9, bombs: int = 10, seed=None):
    """Run demo games with a player picking random valid actions."""
    config = FieldConfig(size=size, bomb_count=bombs)
    env = MinesweeperEnv(config=config, render_mode="ansi")
    rng = np.random.default_rng(seed)

    print(f"Field: {size}x{size} with {bombs} bombs ({100*bombs/(size*size):.1f}% density)")
    print("Starting in 2 seconds...")
    time.sleep(2)

    wins = 0

    for game in range(games):
        obs, info = env.reset(seed=None if seed is None else seed + game)

        clear_screen()
        print(f"=== Game {game + 1}/{games} ===")
        print(f"Wins so far: {wins}\n")
        print(env.render())
        time.sleep(delay)

        done = False
        step = 0

        while not done:
            action = int(rng.choice(np.flatnonzero(env.get_action_mask())))
            cells = size * size
            verb = "Mark" if action >= cells else "Open"
            row, col = divmod(action % cells, size)

            obs, reward, terminated, truncated, info = env.step(action)
            done = terminated or truncated
            step += 1

            clear_screen()
            print(f"=== Game {game + 1}/{games} | Step {step} ===")
            print(f"Wins so far: {wins}")
            print(f"Last move: {verb} ({row}, {col})\n")
            print(env.render())

            if done:
                if info.get("game_state") == "WIN":
                    wins += 1
                    print(f"\n*** WIN! ***")
                else:
                    print(f"\n*** LOST (hit bomb) ***")

            time.sleep(delay)

        time.sleep(1.0)  # Pause between games

    print(f"\n=== Final: {wins}/{games} wins ({100*wins/games:.0f}%) ===")


if __name__ == "__main__":
    import argparse
    parser = argparse.ArgumentParser()
    parser.add_argument("--delay", type=float, default=0.3, help="Delay between moves")
    parser.add_argument("--games", type=int, default=5, help="Number of games")
    parser.add_argument("--size", type=int, default=9, help="Field size (NxN)")
    parser.add_argument("--bombs", type=int, default=None, help="Number of bombs (default: ~12%% of cells)")
    parser.add_argument("--seed", type=int, default=None, help="Seed for layouts and moves")
    parser.add_argument("--verbose", action="store_true", help="Log engine debug messages")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    # Default bombs to ~12% of cells (beginner density)
    bombs = args.bombs if args.bombs is not None else int(args.size * args.size * 0.12)

    demo(delay=args.delay, games=args.games, size=args.size, bombs=bombs, seed=args.seed)
