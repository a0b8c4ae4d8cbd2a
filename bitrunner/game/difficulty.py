# bitrunner/game/difficulty.py
import math
from .config import DIFFICULTY_SCALE


def speed_for_score(score: float, base_speed: float, max_speed: float,
                    scale: float = DIFFICULTY_SCALE) -> float:
    """
    Exponential approach from base_speed toward max_speed:
        speed = base + (max - base) * (1 - exp(-score / scale))
    Strictly below max_speed for any finite score (float rounding included).
    """
    if max_speed <= base_speed:
        raise ValueError(f"max_speed ({max_speed}) must be greater than base_speed ({base_speed})")
    if not score >= 0.0:   # also rejects NaN
        raise ValueError(f"score must be a non-negative number, got {score}")

    ramp = 1.0 - math.exp(-score / scale)
    speed = base_speed + (max_speed - base_speed) * ramp
    return min(speed, math.nextafter(max_speed, base_speed))
