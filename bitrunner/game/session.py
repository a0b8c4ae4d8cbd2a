# bitrunner/game/session.py
"""
Simulation loop for one play session.

A driver (pygame window, gym env, tests) calls `Session.tick(dt, inputs)` once
per frame and draws the returned `RenderState`. Order inside a running tick:

    difficulty -> player physics -> world scroll -> spawner -> collisions/score -> cull

While the run has ended everything is frozen; only a restart brings it back.
"""
from __future__ import annotations
import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .config import (
    WIDTH, HEIGHT, PLAYER_H, BIT_SPAWN_CHANCE, DEFAULT_PRESET,
    DUCK_GAP_PAD, DUCK_TOP_MARGIN, JUMP_REACH_FACTOR,
    TEXT_GAME_OVER, TEXT_SCORE_LINE, TEXT_RESTART, Preset, get_preset
)
from .collisions import resolve_tick, cull_offscreen
from .difficulty import speed_for_score
from .level import Obstacle, DataBit, Spawner, UniformSource, scroll
from .player import Player

PHASE_RUNNING = "running"
PHASE_ENDED = "ended"


@dataclass
class SessionState:
    player: Player
    game_speed: float
    obstacles: List[Obstacle] = field(default_factory=list)
    bits: List[DataBit] = field(default_factory=list)
    score: float = 0.0
    bits_collected: int = 0
    running: bool = True
    # read-only copy of Spawner.bits_since_last_obstacle, refreshed every tick
    bits_since_last_obstacle: int = 0
    ticks: int = 0
    death_cause: Optional[str] = None   # "obstacle" | None

    @property
    def phase(self) -> str:
        return PHASE_RUNNING if self.running else PHASE_ENDED


@dataclass(frozen=True)
class InputEvents:
    """Edge-triggered inputs gathered since the previous tick."""
    jump: bool = False
    restart: bool = False


@dataclass(frozen=True)
class RenderState:
    player: Tuple[float, float, float, float]
    obstacles: Tuple[Tuple[float, float, float, float, bool, float], ...]
    bits: Tuple[Tuple[float, float, float, float], ...]
    score: float
    bits_collected: int
    running: bool
    game_speed: float

    @property
    def display_score(self) -> int:
        return int(math.floor(self.score))

    def overlay_lines(self) -> Tuple[str, ...]:
        """Text shown over the frozen frame once the run ended (empty while running)."""
        if self.running:
            return ()
        return (
            TEXT_GAME_OVER,
            TEXT_SCORE_LINE.format(score=self.display_score, bits=self.bits_collected),
            TEXT_RESTART,
        )


def min_canvas_height(preset: Preset) -> float:
    """Heights at or below this give duck-under obstacles no body or push bits above the top edge."""
    duck_room = PLAYER_H + DUCK_GAP_PAD + DUCK_TOP_MARGIN
    bit_room = PLAYER_H + preset.jump_power * JUMP_REACH_FACTOR
    return max(duck_room, bit_room)


def _sanitize_dt(dt: float) -> float:
    dt = float(dt)
    if not math.isfinite(dt) or dt < 0.0:
        return 0.0
    return dt


class FrameClock:
    """Turns animation-frame timestamps (ms) into per-tick deltas (s)."""

    def __init__(self):
        self.last_ms: Optional[float] = None

    def reset(self):
        self.last_ms = None

    def delta(self, timestamp_ms: float) -> float:
        ts = float(timestamp_ms)
        if not math.isfinite(ts):
            return 0.0
        if self.last_ms is None:
            # first frame: no previous stamp, so no elapsed time
            self.last_ms = ts
            return 0.0
        dt = (ts - self.last_ms) / 1000.0
        self.last_ms = ts
        return max(0.0, dt)


class Session:
    def __init__(self,
                 preset: str | Preset = DEFAULT_PRESET,
                 width: float = WIDTH,
                 height: float = HEIGHT,
                 rng: Optional[UniformSource] = None,
                 seed: int | None = None):
        for name, value in (("width", width), ("height", height)):
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"canvas {name} must be a positive finite number, got {value}")
        self.preset = preset if isinstance(preset, Preset) else get_preset(preset)
        min_height = min_canvas_height(self.preset)
        if height <= min_height:
            raise ValueError(f"canvas height {height} must exceed {min_height} "
                             f"to fit duck-under obstacles and the bit band")
        self.width = float(width)
        self.height = float(height)
        self.spawner = Spawner(PLAYER_H, self.preset.jump_power, rng=rng, seed=seed)
        self.rng = self.spawner.rng
        self.state = self._fresh_state()

    def _fresh_state(self) -> SessionState:
        player = Player(y=self.height - PLAYER_H, jump_power=self.preset.jump_power)
        return SessionState(player=player, game_speed=self.preset.base_speed)

    # -------------------- Inputs --------------------

    @property
    def running(self) -> bool:
        return self.state.running

    def jump(self) -> bool:
        """Jump request; ignored once the run has ended or when out of jumps."""
        if not self.state.running:
            return False
        return self.state.player.try_jump()

    def restart(self):
        """Hard reset back to session-start values (same preset, same RNG stream)."""
        player = self.state.player
        player.reset(self.height - PLAYER_H)
        self.state = SessionState(player=player, game_speed=self.preset.base_speed)
        self.spawner.reset()

    def handle_input(self, inputs: Optional[InputEvents]):
        if inputs is None:
            return
        if inputs.restart and not self.state.running:
            self.restart()
        if inputs.jump and self.state.running:
            self.state.player.try_jump()

    # -------------------- Loop --------------------

    def tick(self, dt: float, inputs: Optional[InputEvents] = None) -> RenderState:
        self.handle_input(inputs)
        dt = _sanitize_dt(dt)
        s = self.state
        if not s.running:
            return self.snapshot()

        s.game_speed = speed_for_score(s.score, self.preset.base_speed, self.preset.max_speed)

        s.player.update_physics(self.preset.gravity, self.height)
        scroll(s.obstacles, s.game_speed)
        scroll(s.bits, s.game_speed)

        self.spawner.maybe_spawn_obstacle(self.width, self.height, s.game_speed, s.obstacles)
        if self.rng.random() < BIT_SPAWN_CHANCE:
            self.spawner.maybe_spawn_collectible(self.width, self.height, s.obstacles, s.bits)
        s.bits_since_last_obstacle = self.spawner.bits_since_last_obstacle

        resolve_tick(s, dt)

        cull_offscreen(s.obstacles)
        cull_offscreen(s.bits)
        s.ticks += 1
        return self.snapshot()

    def snapshot(self) -> RenderState:
        s = self.state
        p = s.player
        return RenderState(
            player=(p.x, p.y, p.width, p.height),
            obstacles=tuple((o.x, o.y, o.width, o.height, o.pass_below, o.gap) for o in s.obstacles),
            bits=tuple((b.x, b.y, b.width, b.height) for b in s.bits),
            score=s.score,
            bits_collected=s.bits_collected,
            running=s.running,
            game_speed=s.game_speed,
        )
