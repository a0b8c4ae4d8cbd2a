# bitrunner/game/collisions.py
from __future__ import annotations
from typing import List
from .config import BIT_SCORE, PASSIVE_SCORE_DIVISOR
from .level import Obstacle, DataBit
from .player import Player


def rects_overlap(a, b) -> bool:
    """Strict AABB test on anything with x, y, width, height (touching edges don't count)."""
    return (a.x < b.x + b.width and a.x + a.width > b.x
            and a.y < b.y + b.height and a.y + a.height > b.y)


def obstacle_hits_player(player: Player, obs: Obstacle) -> bool:
    """Only the solid band counts: for pass-below obstacles the bottom gap is free."""
    if not (player.x < obs.x + obs.width and player.x + player.width > obs.x):
        return False
    return player.y < obs.solid_bottom and player.y + player.height > obs.y


def collect_bits(player: Player, bits: List[DataBit]) -> int:
    """Remove every bit the player touches (in place). Returns how many were taken."""
    kept = [b for b in bits if not rects_overlap(player, b)]
    taken = len(bits) - len(kept)
    bits[:] = kept
    return taken


def cull_offscreen(items: List):
    items[:] = [e for e in items if not e.offscreen]


def resolve_tick(state, dt: float) -> int:
    """
    Scoring and collision pass for one tick, after positions were updated:
      1) passive score from time and speed
      2) any obstacle hit ends the run
      3) pickups: +BIT_SCORE and +1 bit each (still counted on the fatal tick)
    Returns the number of bits collected this tick.
    """
    if not state.running:
        return 0

    state.score += dt * (state.game_speed / PASSIVE_SCORE_DIVISOR)

    for obs in state.obstacles:
        if obstacle_hits_player(state.player, obs):
            state.running = False
            state.death_cause = "obstacle"
            break

    taken = collect_bits(state.player, state.bits)
    if taken:
        state.score += BIT_SCORE * taken
        state.bits_collected += taken
    return taken
