from dataclasses import dataclass

# --- Display ---
WIDTH = 800
HEIGHT = 400
FPS = 60
MAX_FRAME_DT = 1.0 / 30.0    # driver-side clamp for stalled frames (sec)

# --- Player ---
PLAYER_X = 50                # player’s fixed x (world scrolls left)
PLAYER_W = 30
PLAYER_H = 30
MAX_JUMPS = 2                # double jump

# --- Obstacles ---
OBSTACLE_W = 20
SPAWN_MIN_DIST = 200.0       # + speed * SPAWN_MIN_DIST_PER_SPEED
SPAWN_MAX_DIST = 400.0       # + speed * SPAWN_MAX_DIST_PER_SPEED
SPAWN_MIN_DIST_PER_SPEED = 15.0
SPAWN_MAX_DIST_PER_SPEED = 25.0
DUCK_CHANCE = 0.2            # [0, 0.2) -> pass-below obstacle
TALL_CHANCE = 0.5            # [0.2, 0.5) -> tall, rest -> short
DUCK_GAP_PAD = 8             # gap = PLAYER_H + pad
DUCK_TOP_MARGIN = 40         # free space above a pass-below obstacle
TALL_H_RANGE = (60.0, 140.0)
SHORT_H_RANGE = (20.0, 50.0)

# --- Data bits ---
BIT_SIZE = 15
BIT_SPAWN_CHANCE = 0.01      # per tick
MAX_BITS_PER_OBSTACLE = 3
MAX_LIVE_BITS = 3
BIT_FLOOR_MARGIN = 10        # lowest bit sits this far above the player's floor y
JUMP_REACH_FACTOR = -2.5     # reachable height = jump_power * factor
BIT_PLACEMENT_ATTEMPTS = 20
BIT_OBSTACLE_CLEARANCE = 20  # lateral px kept clear around obstacles

# --- Scoring / difficulty ---
BIT_SCORE = 5.0
PASSIVE_SCORE_DIVISOR = 4.0  # score += dt * speed / divisor
DIFFICULTY_SCALE = 200.0     # score needed for ~63% of the speed ramp

# --- Colors (RGB) ---
COLOR_BG = (8, 10, 18)
COLOR_PLAYER = (0, 255, 0)
COLOR_OBSTACLE = (255, 0, 0)
COLOR_BIT = (0, 255, 255)
COLOR_HUD = (0, 255, 0)
COLOR_OVERLAY = (0, 0, 0, 153)
COLOR_GAME_OVER = (255, 85, 85)

# --- Overlay text ---
TEXT_GAME_OVER = "GAME OVER"
TEXT_SCORE_LINE = "Score: {score} | Bits: {bits}"
TEXT_RESTART = "Press R to restart"


@dataclass(frozen=True)
class Preset:
    """Per-device tuning, picked once when a session starts."""
    base_speed: float   # px/tick
    max_speed: float    # asymptote, never reached
    gravity: float      # px/tick^2
    jump_power: float   # negative impulse (px/tick)


PRESETS = {
    "desktop": Preset(base_speed=4.0, max_speed=12.0, gravity=0.6, jump_power=-12.0),
    "mobile": Preset(base_speed=3.0, max_speed=9.0, gravity=0.5, jump_power=-11.0),
}
DEFAULT_PRESET = "desktop"


def get_preset(name: str) -> Preset:
    try:
        return PRESETS[name]
    except KeyError:
        raise ValueError(f"Unknown preset {name!r} (expected one of {sorted(PRESETS)})") from None
