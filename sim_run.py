import argparse
import json
import os
import random
import time
from collections import deque
from datetime import datetime

import numpy as np

from pac_maze import BISCUIT, DIRECTIONS, PILL, CELL, next_cell, on_grid
from pac_session import Session
from pac_settings import load_config

DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data", "sim")
LOG_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "sim_log.jsonl")


def random_policy(session, rng):
    player = session.player
    if not on_grid(player.x, player.y):
        return player.due
    exits = player.floor_exits(session.grid)
    return rng.choice(exits) if exits else player.due


def greedy_policy(session, rng=None):
    """First step of a breadth-first path to the nearest biscuit or pill, avoiding dangerous ghosts."""
    player = session.player
    grid = session.grid
    if not on_grid(player.x, player.y):
        return player.due
    start = (player.x // CELL, player.y // CELL)
    if not grid.in_bounds(start):
        return player.due

    danger = set()
    for g in session.ghosts:
        if g.is_dangerous():
            gx, gy = (g.x + CELL // 2) // CELL, (g.y + CELL // 2) // CELL
            for dx, dy in [(0, 0)] + DIRECTIONS:
                danger.add((gx + dx, gy + dy))

    q = deque()
    seen = {start}
    for d in DIRECTIONS:
        cell = next_cell(player.new_coord(d, player.x, player.y), d)
        if grid.is_floor(cell) and cell not in danger and cell not in seen:
            seen.add(cell)
            q.append((cell, d))
    while q:
        cell, first = q.popleft()
        if grid.cell_kind(cell) in (BISCUIT, PILL):
            return first
        for dx, dy in DIRECTIONS:
            nxt = (cell[0] + dx, cell[1] + dy)
            if nxt in seen or nxt in danger or not grid.is_floor(nxt):
                continue
            seen.add(nxt)
            q.append((nxt, first))
    return player.due


POLICIES = {"random": random_policy, "greedy": greedy_policy}


def run_episode(config, policy="greedy", seed=None, lives=3, max_ticks=20000, obs_every=0):
    session = Session(config, seed=seed)
    session.start_new_game(lives)
    rng = random.Random(seed)
    choose = POLICIES[policy]

    observations = []
    final_score = None
    while session.tick < max_ticks:
        session.set_direction(choose(session, rng))
        session.step()
        if obs_every and session.tick % obs_every == 0:
            planes, _, _ = session.get_observation()
            observations.append(planes)
        for kind, value in session.drain_events():
            if kind == "game_over":
                final_score = value
        if final_score is not None:
            break

    return {
        "ticks": session.tick,
        "score": session.player.score,
        "level": session.level,
        "lives": session.player.lives,
        "game_over": final_score is not None,
        "obs": np.stack(observations, axis=0) if observations else None,
    }


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--episodes", type=int, default=1)
    parser.add_argument("--policy", choices=sorted(POLICIES), default="greedy")
    parser.add_argument("--lives", type=int, default=3)
    parser.add_argument("--max-ticks", type=int, default=20000)
    parser.add_argument("--obs-every", type=int, default=0)
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args()

    cfg = load_config()
    rng = random.Random(args.seed)
    if args.obs_every:
        os.makedirs(DATA_DIR, exist_ok=True)

    scores = []
    for episode in range(args.episodes):
        seed = rng.randint(0, 1_000_000) if args.seed is not None else None
        result = run_episode(
            cfg,
            policy=args.policy,
            seed=seed,
            lives=args.lives,
            max_ticks=args.max_ticks,
            obs_every=args.obs_every,
        )
        scores.append(result["score"])

        out_path = None
        if result["obs"] is not None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            out_path = os.path.join(DATA_DIR, f"sim_{timestamp}_{episode:03d}.npz")
            np.savez_compressed(out_path, obs=result["obs"])

        with open(LOG_PATH, "a", encoding="utf-8") as f:
            f.write(
                json.dumps(
                    {
                        "ts": time.time(),
                        "episode": episode,
                        "seed": seed,
                        "policy": args.policy,
                        "ticks": result["ticks"],
                        "score": result["score"],
                        "level": result["level"],
                        "lives": result["lives"],
                        "game_over": result["game_over"],
                        "file": out_path,
                    }
                )
                + "\n"
            )
        print(f"Episode {episode} | ticks={result['ticks']} score={result['score']} level={result['level']} lives={result['lives']}")

    print(f"Avg score: {float(np.mean(scores)):.1f} | max: {max(scores)} | episodes: {len(scores)}")


if __name__ == "__main__":
    main()
