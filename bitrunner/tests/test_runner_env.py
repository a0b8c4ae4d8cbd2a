# bitrunner/tests/test_runner_env.py
"""
Quick tests for RunnerEnv (Gymnasium environment) and the rollout script.

Usage (from repo root):
  python -m bitrunner.tests.test_runner_env
  python -m bitrunner.tests.test_runner_env --render
  python -m bitrunner.tests.test_runner_env --no-api-check
"""

from __future__ import annotations
import argparse
import sys
from typing import List, Tuple

import numpy as np
from gymnasium.utils.env_checker import check_env

from bitrunner.env.runner_env import RunnerEnv
from bitrunner.env.observations import build_observation, OBS_SIZE
from bitrunner.game.config import WIDTH, HEIGHT, PRESETS, COLOR_BG, COLOR_OBSTACLE
from bitrunner.game.level import Obstacle, DataBit
from bitrunner.game.session import Session
from bitrunner.game.game import parse_args


def test_api_check(frame_skip: int = 4) -> None:
    """Verify Gym API contract (spaces, step/reset signatures, types)."""
    env = RunnerEnv(frame_skip=frame_skip)
    try:
        check_env(env, skip_render_check=True)
    finally:
        env.close()


def test_smoke(steps: int = 300, seed: int = 123, frame_skip: int = 4) -> None:
    """Short random rollout: no crashes, obs in space, reward type, proper terminations."""
    env = RunnerEnv(frame_skip=frame_skip)
    try:
        obs, info = env.reset(seed=seed)
        assert env.observation_space.contains(obs), "Initial observation not in space"
        assert info["seed"] == seed

        for t in range(steps):
            a = env.action_space.sample()
            obs, r, term, trunc, info = env.step(a)
            assert isinstance(r, float), "Reward must be a float"
            assert env.observation_space.contains(obs), f"Step {t}: observation out of bounds"
            if term:
                assert r == -1.0 and info["death_cause"] == "obstacle"
                break
            assert r >= 0.0, "Score never goes down while running"
            if trunc:
                break
    finally:
        env.close()


def test_determinism(steps: int = 300, seed: int = 123, frame_skip: int = 4) -> None:
    """Same seed + same action sequence => identical obs/reward/terminal flags."""
    def rollout(seed_val: int, action_seq: List[int]) -> List[Tuple[np.ndarray, float, bool, bool]]:
        env = RunnerEnv(frame_skip=frame_skip)
        traj: List[Tuple[np.ndarray, float, bool, bool]] = []
        try:
            obs, _ = env.reset(seed=seed_val)
            for a in action_seq:
                obs, r, term, trunc, _ = env.step(int(a))
                traj.append((obs.copy(), float(r), bool(term), bool(trunc)))
                if term or trunc:
                    break
        finally:
            env.close()
        return traj

    rng = np.random.RandomState(42)
    action_seq = [int(rng.randint(0, 2)) for _ in range(steps)]

    t1 = rollout(seed, action_seq)
    t2 = rollout(seed, action_seq)

    assert len(t1) == len(t2), "Determinism: trajectory length mismatch"
    for i, ((o1, r1, te1, tr1), (o2, r2, te2, tr2)) in enumerate(zip(t1, t2)):
        if not np.allclose(o1, o2):
            raise AssertionError(f"Determinism: obs mismatch at step {i}")
        if not (r1 == r2 and te1 == te2 and tr1 == tr2):
            raise AssertionError(f"Determinism: transition mismatch at step {i}")


def test_time_limit_truncates() -> None:
    env = RunnerEnv(frame_skip=1, time_limit_seconds=0.05)   # 3 decisions
    try:
        env.reset(seed=1)
        flags = [env.step(0)[3] for _ in range(3)]
        assert flags == [False, False, True]
    finally:
        env.close()


def test_observation_layout() -> None:
    session = Session(seed=3)
    s = session.state
    max_speed = PRESETS["desktop"].max_speed

    obs = build_observation(s, WIDTH, HEIGHT, max_speed)
    assert obs.dtype == np.float32 and obs.shape == (OBS_SIZE,)
    assert obs[0] == 1.0 and obs[2] == 1.0 and obs[3] == 1.0
    # nothing ahead: sentinels
    assert list(obs[5:]) == [1.0, 1.0, 0.0, 1.0, 1.0, 0.0, 1.0, 1.0]

    p = s.player
    right = p.x + p.width
    s.obstacles.append(Obstacle(x=right + 400, y=HEIGHT - 50, width=20, height=50))
    s.obstacles.append(Obstacle(x=right + 80, y=78, width=20, height=322, pass_below=True, gap=38))
    s.obstacles.append(Obstacle(x=p.x - 100, y=HEIGHT - 50, width=20, height=50))   # already behind
    s.bits.append(DataBit(x=right + 160, y=340))
    obs = build_observation(s, WIDTH, HEIGHT, max_speed)
    assert np.isclose(obs[5], 80 / WIDTH) and obs[7] == 1.0, "Nearest obstacle comes first"
    assert np.isclose(obs[8], 400 / WIDTH) and obs[10] == 0.0
    assert np.isclose(obs[11], 160 / WIDTH) and np.isclose(obs[12], 340 / HEIGHT)


def test_rgb_array_render() -> None:
    env = RunnerEnv(render_mode="rgb_array")
    try:
        env.reset(seed=5)
        env.step(1)
        frame = env.render()
        assert frame.shape == (HEIGHT, WIDTH, 3) and frame.dtype == np.uint8
        # player pixels are drawn in green at the fixed x
        px, py, _, _ = env.session.snapshot().player
        assert tuple(frame[int(py) + 5, int(px) + 5]) == (0, 255, 0)

        # duck-under obstacle: solid band 78..362 is red, the 38 px gap below stays background
        env.session.state.obstacles.append(
            Obstacle(x=400, y=78, width=20, height=322, pass_below=True, gap=38))
        frame = env.render()
        assert tuple(frame[200, 410]) == COLOR_OBSTACLE
        for row in (HEIGHT - 38, HEIGHT - 20, HEIGHT - 1):
            assert tuple(frame[row, 410]) == COLOR_BG, f"gap row {row} was drawn"

        env.session.state.running = False   # game-over overlay path
        assert env.render().shape == (HEIGHT, WIDTH, 3)
    finally:
        env.close()


def test_game_cli_args() -> None:
    args = parse_args(["--preset", "mobile", "--seed", "3"])
    assert (args.preset, args.seed) == ("mobile", 3)
    args = parse_args([])
    assert (args.preset, args.seed) == ("desktop", None)


def test_rollout_script() -> None:
    from experiments.sanity_rollout import run_one_episode
    for policy in ("random", "heuristic"):
        ep_len, ret_sum, score, bits, term, trunc, cause = run_one_episode(policy, seed=7, frame_skip=4,
                                                                         steps_limit=50)
        assert 1 <= ep_len <= 50
        assert score >= 0.0 and bits >= 0
        assert (cause == "obstacle") == term


def render_demo(steps: int, seed: int, frame_skip: int) -> None:
    """Open a window and run a short NOOP demo so you can visually verify behavior."""
    env = RunnerEnv(render_mode="human", frame_skip=frame_skip)
    try:
        obs, info = env.reset(seed=seed)
        for _ in range(steps):
            obs, r, term, trunc, info = env.step(0)
            if term or trunc:
                break
    finally:
        env.close()
    print("✓ Render demo finished")


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--seed", type=int, default=123, help="Episode seed for tests")
    ap.add_argument("--steps", type=int, default=300, help="Max decision steps per test")
    ap.add_argument("--frame-skip", type=int, default=4, help="Sim frames per decision step")
    ap.add_argument("--render", action="store_true", help="Run a short visual demo")
    ap.add_argument("--no-api-check", action="store_true", help="Skip Gym API compliance check")
    args = ap.parse_args()

    try:
        if not args.no_api_check:
            test_api_check(frame_skip=args.frame_skip)
            print("✓ API check ok")
        test_smoke(steps=args.steps, seed=args.seed, frame_skip=args.frame_skip)
        print("✓ Smoke test ok")
        test_determinism(steps=args.steps, seed=args.seed, frame_skip=args.frame_skip)
        print("✓ Determinism ok")
        test_time_limit_truncates()
        test_observation_layout()
        print("✓ Observation layout ok")
        test_rgb_array_render()
        test_game_cli_args()
        test_rollout_script()
        print("✓ Rollout script ok")
        if args.render:
            render_demo(steps=min(args.steps, 600), seed=args.seed, frame_skip=args.frame_skip)
    except AssertionError as e:
        print(f"✗ Test failed: {e}", file=sys.stderr)
        sys.exit(1)
    else:
        print("🎉 All selected tests passed")


if __name__ == "__main__":
    main()
