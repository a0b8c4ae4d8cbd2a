# bitrunner/env/observations.py
from __future__ import annotations
from typing import List
import numpy as np

OBS_SIZE = 13
# How many upcoming obstacles are described in the vector
N_OBSTACLES = 2

def _clamp01(x: float) -> float:
    return 0.0 if x < 0.0 else (1.0 if x > 1.0 else x)

def _ahead(player, items) -> list:
    """Entities whose right edge is still in front of the player's left edge, nearest first."""
    front = [e for e in items if e.x + e.width > player.x]
    return sorted(front, key=lambda e: e.x)

def build_observation(state, width: float, height: float, max_speed: float) -> np.ndarray:
    """
    Returns a fixed (13,) float32 vector:
      [ y_norm, dy_norm, grounded, jumps_left, speed_norm,
        dx@obs0, top@obs0, passBelow@obs0,
        dx@obs1, top@obs1, passBelow@obs1,
        dx@bit, y@bit ]
    - y_norm / top / y@bit in [0,1] (screen space, 0 = top)
    - dy_norm in [-1,1], scaled by the jump impulse
    - dx = gap between the player's right edge and the entity, over the canvas width;
      sentinel 1.0 (and top=1.0, passBelow=0.0) when nothing is ahead
    """
    p = state.player
    floor_top = max(1.0, height - p.height)
    dy_scale = max(1.0, abs(p.jump_power))

    feats: List[float] = [
        _clamp01(p.y / floor_top),
        max(-1.0, min(p.dy / dy_scale, 1.0)),
        1.0 if p.grounded else 0.0,
        _clamp01((p.max_jumps - p.jump_count) / max(1, p.max_jumps)),
        _clamp01(state.game_speed / max_speed),
    ]

    right = p.x + p.width
    obstacles = _ahead(p, state.obstacles)
    for i in range(N_OBSTACLES):
        if i < len(obstacles):
            o = obstacles[i]
            feats.extend([
                _clamp01((o.x - right) / width),
                _clamp01(o.y / height),
                1.0 if o.pass_below else 0.0,
            ])
        else:
            feats.extend([1.0, 1.0, 0.0])

    bits = _ahead(p, state.bits)
    if bits:
        b = bits[0]
        feats.extend([_clamp01((b.x - right) / width), _clamp01(b.y / height)])
    else:
        feats.extend([1.0, 1.0])

    return np.asarray(feats, dtype=np.float32)
