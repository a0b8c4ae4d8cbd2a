# bitrunner/game/level.py
from __future__ import annotations
import random
from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol
from .config import (
    OBSTACLE_W, SPAWN_MIN_DIST, SPAWN_MAX_DIST,
    SPAWN_MIN_DIST_PER_SPEED, SPAWN_MAX_DIST_PER_SPEED,
    DUCK_CHANCE, TALL_CHANCE, DUCK_GAP_PAD, DUCK_TOP_MARGIN,
    TALL_H_RANGE, SHORT_H_RANGE,
    BIT_SIZE, MAX_BITS_PER_OBSTACLE, MAX_LIVE_BITS, BIT_FLOOR_MARGIN,
    JUMP_REACH_FACTOR, BIT_PLACEMENT_ATTEMPTS, BIT_OBSTACLE_CLEARANCE
)


class UniformSource(Protocol):
    def random(self) -> float: ...


@dataclass
class Obstacle:
    x: float
    y: float
    width: float
    height: float
    pass_below: bool = False   # True: run under it through the bottom gap
    gap: float = 0.0           # height of the opening at the bottom (pass_below only)

    @property
    def solid_bottom(self) -> float:
        """Lowest y of the blocking part."""
        if self.pass_below:
            return self.y + self.height - self.gap
        return self.y + self.height

    @property
    def offscreen(self) -> bool:
        return self.x + self.width < 0


@dataclass
class DataBit:
    x: float
    y: float
    width: float = float(BIT_SIZE)
    height: float = float(BIT_SIZE)

    @property
    def offscreen(self) -> bool:
        return self.x + self.width < 0


def spawn_distance_range(game_speed: float) -> tuple[float, float]:
    """(min, max) distance past the right edge for the next obstacle at this speed."""
    return (SPAWN_MIN_DIST + game_speed * SPAWN_MIN_DIST_PER_SPEED,
            SPAWN_MAX_DIST + game_speed * SPAWN_MAX_DIST_PER_SPEED)


def scroll(entities: Iterable, game_speed: float):
    """Uniform world scroll: everything moves left by the current speed."""
    for e in entities:
        e.x -= game_speed


class Spawner:
    """
    Decides when and where obstacles and data bits appear.
    - at most one obstacle per call, spaced by a speed-scaled distance
    - at most 3 bits per obstacle interval and 3 bits alive at once
    """
    def __init__(self, player_height: float, jump_power: float,
                 rng: Optional[UniformSource] = None, seed: int | None = None):
        if rng is None:
            if seed is None:
                seed = random.randrange(0, 2**32 - 1)
            rng = random.Random(seed)
        self.seed = seed
        self.rng = rng
        self.player_height = float(player_height)
        self.jump_power = float(jump_power)
        self.bits_since_last_obstacle = 0

    def reset(self):
        self.bits_since_last_obstacle = 0

    def _uniform(self, lo: float, hi: float) -> float:
        return self.rng.random() * (hi - lo) + lo

    # -------------------- Obstacles --------------------

    def _create_obstacle(self, x: float, canvas_height: float) -> Obstacle:
        roll = self.rng.random()
        pass_below = False
        gap = 0.0

        if roll < DUCK_CHANCE:
            # tall enough that jumping over is impossible, only the bottom gap is free
            gap = self.player_height + DUCK_GAP_PAD
            height = canvas_height - gap - DUCK_TOP_MARGIN
            pass_below = True
        elif roll < TALL_CHANCE:
            height = self._uniform(*TALL_H_RANGE)
        else:
            height = self._uniform(*SHORT_H_RANGE)

        return Obstacle(
            x=x,
            y=canvas_height - height,
            width=float(OBSTACLE_W),
            height=height,
            pass_below=pass_below,
            gap=gap
        )

    def maybe_spawn_obstacle(self, world_width: float, canvas_height: float,
                             game_speed: float, obstacles: List[Obstacle]) -> Optional[Obstacle]:
        """Append one obstacle when the newest one has cleared min distance from the right edge."""
        min_d, max_d = spawn_distance_range(game_speed)
        if obstacles:
            last = obstacles[-1]
            if last.x + last.width >= world_width - min_d:
                return None

        distance = self._uniform(min_d, max_d)
        obs = self._create_obstacle(world_width + distance, canvas_height)
        obstacles.append(obs)
        self.bits_since_last_obstacle = 0
        return obs

    # -------------------- Data bits --------------------

    def bit_band(self, canvas_height: float) -> tuple[float, float]:
        """(top, bottom) y range a bit may spawn in: what the player can reach."""
        max_jump_height = self.jump_power * JUMP_REACH_FACTOR
        lowest = canvas_height - self.player_height - BIT_FLOOR_MARGIN
        highest = canvas_height - self.player_height - max_jump_height
        return highest, lowest

    def _blocked(self, x: float, y: float, obstacles: List[Obstacle]) -> bool:
        for obs in obstacles:
            if y + BIT_SIZE > obs.y and y < obs.solid_bottom:
                if (x + BIT_SIZE > obs.x - BIT_OBSTACLE_CLEARANCE
                        and x < obs.x + obs.width + BIT_OBSTACLE_CLEARANCE):
                    return True
        return False

    def maybe_spawn_collectible(self, world_width: float, canvas_height: float,
                                obstacles: List[Obstacle], bits: List[DataBit]) -> Optional[DataBit]:
        """
        Best-effort placement at the right edge: resample y until it clears every
        obstacle's solid band nearby; after the attempt budget the last y is kept.
        """
        if self.bits_since_last_obstacle >= MAX_BITS_PER_OBSTACLE:
            return None
        if len(bits) >= MAX_LIVE_BITS:
            return None

        top, bottom = self.bit_band(canvas_height)
        x = float(world_width)
        y = top
        for _ in range(BIT_PLACEMENT_ATTEMPTS):
            y = self._uniform(top, bottom)
            if not self._blocked(x, y, obstacles):
                break

        bit = DataBit(x=x, y=y)
        bits.append(bit)
        self.bits_since_last_obstacle += 1
        return bit
