# bitrunner/game/player.py
from __future__ import annotations
from dataclasses import dataclass
from .config import PLAYER_X, PLAYER_W, PLAYER_H, MAX_JUMPS

@dataclass
class Player:
    """
    Runner at a fixed x; only y moves.
    - dy > 0 means falling (screen y grows downward)
    - jump_power is negative: it is the upward impulse applied on a jump
    """
    y: float
    jump_power: float
    x: float = float(PLAYER_X)
    width: float = float(PLAYER_W)
    height: float = float(PLAYER_H)
    dy: float = 0.0
    grounded: bool = True
    jump_count: int = 0
    max_jumps: int = MAX_JUMPS

    def can_jump(self) -> bool:
        return self.grounded or self.jump_count < self.max_jumps

    def try_jump(self) -> bool:
        """Jump from the ground or mid-air while jumps remain. Returns True if performed."""
        if self.can_jump():
            self.dy = self.jump_power
            self.grounded = False
            self.jump_count += 1
            return True
        return False

    def update_physics(self, gravity: float, floor_y: float):
        """One tick of vertical motion, then snap to the floor if we went through it."""
        self.dy += gravity
        self.y += self.dy

        if self.y + self.height >= floor_y:
            self.y = floor_y - self.height
            self.dy = 0.0
            self.grounded = True
            self.jump_count = 0

    def reset(self, y: float):
        self.y = y
        self.dy = 0.0
        self.grounded = True
        self.jump_count = 0
