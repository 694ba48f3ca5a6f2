import argparse
import json
import os
import statistics
from collections import defaultdict

import matplotlib.pyplot as plt

from sim_run import LOG_PATH

OUT_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "sim_progress.png")
POLICY_COLORS = {"greedy": "tab:orange", "random": "tab:purple"}


def read_log(path):
    if not os.path.exists(path):
        raise FileNotFoundError(f"Log not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        return [json.loads(line) for line in f if line.strip()]


def smooth(values, window):
    if window <= 1:
        return list(values)
    out = []
    total = 0.0
    for i, v in enumerate(values):
        total += v
        if i >= window:
            total -= values[i - window]
        out.append(total / min(i + 1, window))
    return out


def by_policy(rows):
    groups = defaultdict(list)
    for row in rows:
        groups[row.get("policy", "unknown")].append(row)
    return dict(groups)


def summarize(policy, rows):
    scores = [r["score"] for r in rows]
    levels = [r["level"] for r in rows]
    survived = sum(1 for r in rows if not r["game_over"])
    return (
        f"{policy}: runs={len(rows)} score avg={statistics.mean(scores):.1f} max={max(scores)}"
        f" | level max={max(levels)} | survived cap={survived}"
    )


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--log", default=LOG_PATH)
    parser.add_argument("--out", default=OUT_PATH)
    parser.add_argument("--window", type=int, default=10)
    args = parser.parse_args()

    rows = read_log(args.log)
    if not rows:
        print(f"No runs logged yet in {args.log}")
        return

    groups = by_policy(rows)
    fig, (score_ax, level_ax) = plt.subplots(2, 1, figsize=(10, 7), sharex=True)
    score_ax.set_title("Simulated games")
    score_ax.set_ylabel("Score")
    level_ax.set_ylabel("Level reached")
    level_ax.set_xlabel("Run")

    for policy, group in sorted(groups.items()):
        color = POLICY_COLORS.get(policy, "tab:gray")
        runs = list(range(1, len(group) + 1))
        scores = [r["score"] for r in group]
        score_ax.plot(runs, scores, color=color, alpha=0.25)
        score_ax.plot(runs, smooth(scores, args.window), color=color, label=f"{policy} (avg {args.window})")
        level_ax.step(runs, [r["level"] for r in group], color=color, where="mid", label=policy)
        print(summarize(policy, group))

    score_ax.legend(loc="upper left")
    level_ax.legend(loc="upper left")
    fig.tight_layout()
    fig.savefig(args.out, dpi=150)
    print(f"Saved plot to {args.out}")


if __name__ == "__main__":
    main()
