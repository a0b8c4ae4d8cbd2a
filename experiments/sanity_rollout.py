# /experiments/sanity_rollout.py
"""
Sanity rollouts for RunnerEnv:
- Runs RANDOM and/or TINY-HEURISTIC policies over fixed seeds
- Writes an episodes CSV for notebook analysis

Usage examples (from repo root):
  # Run both policies over 20 default seeds, frame_skip=4:
  python -m experiments.sanity_rollout --policies both

  # Only heuristic, custom seeds, mobile tuning:
  python -m experiments.sanity_rollout --policies heuristic --seeds 111,222,333 --preset mobile

  # Quick random-only smoke with fewer steps:
  python -m experiments.sanity_rollout --policies random --steps 300 --out-dir /tmp/sanity
"""

from __future__ import annotations
import argparse
import csv
from pathlib import Path
from typing import List, Tuple, Optional

import numpy as np

from bitrunner.env.runner_env import RunnerEnv
from bitrunner.game.config import PRESETS, DEFAULT_PRESET


# ------------------------ Policies ------------------------

def random_policy_init(action_seed: int, jump_prob: float = 0.1):
    rng = np.random.RandomState(action_seed)
    def act(_obs: np.ndarray) -> int:
        return int(rng.random_sample() < jump_prob)
    return act

def tiny_heuristic_policy_init(trigger_dx: float = 0.06):
    """
    Very small rule on the nearest obstacle (indices 5..7):
      - pass-below obstacle: never jump, stay low and run under it
      - otherwise jump from the ground once it is within `trigger_dx` of the player
    """
    def act(obs: np.ndarray) -> int:
        grounded = obs[2]
        dx, _top, pass_below = obs[5], obs[6], obs[7]
        if pass_below == 1.0:
            return 0
        return 1 if (grounded == 1.0 and dx <= trigger_dx) else 0
    return act


# ------------------------ Rollout core ------------------------

def ensure_dir(p: Path):
    p.mkdir(parents=True, exist_ok=True)

def write_episode_row(csv_path: Path, header: List[str], row: List):
    exists = csv_path.exists()
    with csv_path.open("a", newline="") as f:
        w = csv.writer(f)
        if not exists:
            w.writerow(header)
        w.writerow(row)

def run_one_episode(policy_name: str,
                    seed: int,
                    frame_skip: int,
                    steps_limit: int,
                    preset: str = DEFAULT_PRESET) -> Tuple[int, float, float, int, bool, bool, Optional[str]]:
    """
    Returns: (ep_len, ret_sum, score, bits, terminated, truncated, death_cause)
    """
    env = RunnerEnv(frame_skip=frame_skip, preset=preset)

    if policy_name == "random":
        # Make action RNG seed a function of seed for determinism
        policy = random_policy_init(10_000 + seed)
    elif policy_name == "heuristic":
        policy = tiny_heuristic_policy_init()
    else:
        raise ValueError(f"Unknown policy {policy_name!r}")

    ret_sum = 0.0
    ep_len = 0
    term = trunc = False
    info: dict = {}

    try:
        obs, info = env.reset(seed=seed)
        for _ in range(steps_limit):
            obs, r, term, trunc, info = env.step(policy(obs))
            ret_sum += float(r)
            ep_len += 1
            if term or trunc:
                break
    finally:
        env.close()

    return (ep_len, ret_sum, float(info.get("score", 0.0)), int(info.get("bits", 0)),
            bool(term), bool(trunc), info.get("death_cause", None))


def main(argv=None):
    ap = argparse.ArgumentParser()
    ap.add_argument("--policies", type=str, default="both",
                    choices=["random", "heuristic", "both"],
                    help="Which policy to run")
    ap.add_argument("--seeds", type=str, default="",
                    help="Comma-separated seeds. If empty, uses 20 defaults: 101..120")
    ap.add_argument("--frame-skip", type=int, default=4,
                    help="Sim frames per decision step")
    ap.add_argument("--steps", type=int, default=10_000,
                    help="Hard cap on decision steps (env may truncate earlier)")
    ap.add_argument("--preset", choices=sorted(PRESETS), default=DEFAULT_PRESET,
                    help="Speed/gravity tuning")
    ap.add_argument("--out-dir", type=str, default="experiments/runs",
                    help="Directory to store episodes.csv")
    args = ap.parse_args(argv)

    out_dir = Path(args.out_dir)
    ensure_dir(out_dir)

    if args.seeds.strip():
        seeds = [int(s) for s in args.seeds.split(",") if s.strip()]
    else:
        seeds = list(range(101, 121))  # 20 fixed eval seeds by default

    episodes_csv = out_dir / "episodes.csv"
    header = [
        "env_name", "preset", "policy_name", "seed",
        "frame_skip", "sim_fps", "decision_hz",
        "episode_len_decisions", "return_sum", "score", "bits",
        "terminated", "truncated", "death_cause",
    ]
    sim_fps = 60
    decision_hz = sim_fps / max(1, args.frame_skip)

    to_run = ["random", "heuristic"] if args.policies == "both" else [args.policies]

    print(f"Running policies={to_run} on {len(seeds)} seeds "
          f"(preset={args.preset}, frame_skip={args.frame_skip}, decision_hz≈{decision_hz:.1f})")
    print(f"Writing summaries to {episodes_csv}")

    for policy_name in to_run:
        for seed in seeds:
            ep_len, ret_sum, score, bits, terminated, truncated, death_cause = run_one_episode(
                policy_name=policy_name,
                seed=seed,
                frame_skip=args.frame_skip,
                steps_limit=args.steps,
                preset=args.preset,
            )

            row = [
                "RunnerEnv", args.preset, policy_name, seed,
                args.frame_skip, sim_fps, decision_hz,
                ep_len, f"{ret_sum:.1f}", f"{score:.1f}", bits,
                int(terminated), int(truncated), (death_cause or ""),
            ]
            write_episode_row(episodes_csv, header, row)

            print(f"[{policy_name}] seed={seed}  len={ep_len}  score={score:.1f}  bits={bits}  "
                  f"ret={ret_sum:.1f}  term={terminated} trunc={truncated}  cause={death_cause}")

    print("✓ Sanity rollouts complete")


if __name__ == "__main__":
    main()
