# bitrunner/env/runner_env.py
from __future__ import annotations
from typing import Optional, Dict, Any
import numpy as np
import gymnasium as gym
import pygame

from bitrunner.game.config import WIDTH, HEIGHT, DEFAULT_PRESET
from bitrunner.game.session import Session, InputEvents
from bitrunner.game.game import draw_state
from bitrunner.env.observations import build_observation, OBS_SIZE


class RunnerEnv(gym.Env):
    """
    Bit Runner Gymnasium environment (vector observations).
    - Simulation at 60 Hz (internal), one Session tick per frame.
    - Agent acts every `frame_skip` frames (default 4) -> 15 decisions/sec.
    - Observation: shape (13,), float32 (see observations.build_observation).
    - Reward: score gained during the decision step; -1 on the step the run ends.
    """
    metadata = {"render_modes": ["human", "rgb_array"], "render_fps": 60}

    def __init__(self,
                 render_mode: Optional[str] = None,
                 frame_skip: int = 4,
                 time_limit_seconds: Optional[float] = 30.0,
                 preset: str = DEFAULT_PRESET):
        super().__init__()
        assert frame_skip >= 1, "frame_skip must be >= 1"
        assert render_mode is None or render_mode in self.metadata["render_modes"], \
            f"Invalid render_mode {render_mode}"
        self.render_mode = render_mode
        self.frame_skip = int(frame_skip)
        self.preset = preset

        # Internal sim timing
        self.sim_fps = 60
        self.dt = 1.0 / self.sim_fps

        self.time_limit_decisions = None
        if time_limit_seconds is not None:
            # decisions per second = sim_fps / frame_skip
            self.time_limit_decisions = int(self.sim_fps * time_limit_seconds / self.frame_skip)

        # --- Gym spaces ---
        # Actions: 0 = NOOP, 1 = JUMP
        self.action_space = gym.spaces.Discrete(2)

        low = np.zeros(OBS_SIZE, dtype=np.float32)
        low[1] = -1.0  # dy_norm
        high = np.ones(OBS_SIZE, dtype=np.float32)
        self.observation_space = gym.spaces.Box(low=low, high=high, dtype=np.float32)

        # --- Runtime state ---
        self.session: Optional[Session] = None
        self.timestep: int = 0
        self.current_seed: Optional[int] = None
        self.jumps_taken: int = 0

        # Rendering
        self.screen = None
        self.clock = None
        self.font = None

    # -------------------- Core API --------------------

    def reset(self, *, seed: Optional[int] = None, options: Optional[Dict[str, Any]] = None):
        super().reset(seed=seed)  # initializes self.np_random

        # A given seed drives the spawner directly; otherwise draw one from np_random
        # so that unseeded resets stay reproducible after a seeded one.
        if seed is not None:
            level_seed = int(seed)
        else:
            level_seed = int(self.np_random.integers(0, 2**31 - 1))

        self.session = Session(preset=self.preset, seed=level_seed)
        self.current_seed = level_seed
        self.timestep = 0
        self.jumps_taken = 0

        obs = self._get_obs()
        info = {"seed": self.current_seed, "score": 0.0, "bits": 0}
        return obs, info

    def step(self, action: int):
        assert self.action_space.contains(action), f"Invalid action {action}"
        assert self.session is not None, "Call reset() before step()"

        s = self.session.state
        score_before = s.score

        # Apply action once at the start of the decision step
        inputs = InputEvents(jump=(int(action) == 1))
        if inputs.jump and s.running and s.player.can_jump():
            self.jumps_taken += 1

        for _ in range(self.frame_skip):
            self.session.tick(self.dt, inputs)
            inputs = None
            if not self.session.running:
                break

        s = self.session.state
        terminated = not s.running
        reward = -1.0 if terminated else float(s.score - score_before)

        self.timestep += 1
        truncated = False
        if (self.time_limit_decisions is not None) and (self.timestep >= self.time_limit_decisions):
            truncated = True

        obs = self._get_obs()
        info = {
            "score": s.score,
            "bits": s.bits_collected,
            "timestep": self.timestep,
            "seed": self.current_seed,
            "grounded": s.player.grounded,
            "game_speed": s.game_speed,
            "death_cause": s.death_cause,
            "jumps_taken": self.jumps_taken,
        }

        if self.render_mode == "human":
            self.render()

        return obs, reward, terminated, truncated, info

    # -------------------- Helpers --------------------

    def _get_obs(self) -> np.ndarray:
        assert self.session is not None
        return build_observation(self.session.state, self.session.width, self.session.height,
                                 self.session.preset.max_speed)

    # -------------------- Rendering --------------------

    def render(self):
        if self.render_mode is None or self.session is None:
            return None

        if self.screen is None:
            pygame.init()
            if self.render_mode == "human":
                self.screen = pygame.display.set_mode((WIDTH, HEIGHT))
                pygame.display.set_caption("Bit Runner — Gym Env")
                self.clock = pygame.time.Clock()
            else:
                self.screen = pygame.Surface((WIDTH, HEIGHT))
            self.font = pygame.font.Font(None, 24)

        draw_state(self.screen, self.session.snapshot(), self.font)

        if self.render_mode == "human":
            # Pump minimal event queue so the OS doesn't think we're hung
            pygame.event.pump()
            pygame.display.flip()
            if self.clock is not None:
                self.clock.tick(self.metadata.get("render_fps", 60))
            return None

        # Return an (H, W, 3) uint8 array
        arr = pygame.surfarray.array3d(self.screen)  # (W, H, 3)
        return np.transpose(arr, (1, 0, 2))

    def close(self):
        if self.screen is not None:
            if self.render_mode == "human":
                pygame.display.quit()
            pygame.quit()
            self.screen = None
            self.clock = None
            self.font = None
