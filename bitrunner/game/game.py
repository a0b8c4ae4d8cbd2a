# bitrunner/game/game.py
import sys, argparse
import pygame
from pygame import K_SPACE, K_UP, K_ESCAPE, K_r
from .config import (
    WIDTH, HEIGHT, FPS, MAX_FRAME_DT, PRESETS, DEFAULT_PRESET,
    COLOR_BG, COLOR_PLAYER, COLOR_OBSTACLE, COLOR_BIT, COLOR_HUD,
    COLOR_OVERLAY, COLOR_GAME_OVER
)
from .session import Session, InputEvents, RenderState, FrameClock

DEBUG_TICK_LOGS = False

def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Bit Runner: endless runner, jump obstacles and grab data bits.")
    p.add_argument("--preset", choices=sorted(PRESETS), default=DEFAULT_PRESET,
                   help="Speed/gravity tuning for the session.")
    p.add_argument("--seed", type=int, default=None,
                   help="Spawner seed. Omit for a random layout each launch.")
    return p.parse_args(argv)

def draw_state(surf: pygame.Surface, state: RenderState, font, big_font=None):
    """Draw one frame from a RenderState snapshot (world, HUD and game-over overlay)."""
    surf.fill(COLOR_BG)

    px, py, pw, ph = state.player
    pygame.draw.rect(surf, COLOR_PLAYER, pygame.Rect(int(px), int(py), int(pw), int(ph)))

    for x, y, w, h, pass_below, gap in state.obstacles:
        # pass-below obstacles only draw their solid band; the gap stays empty
        solid_h = h - gap if pass_below else h
        pygame.draw.rect(surf, COLOR_OBSTACLE, pygame.Rect(int(x), int(y), int(w), int(solid_h)))

    for x, y, w, h in state.bits:
        pygame.draw.rect(surf, COLOR_BIT, pygame.Rect(int(x), int(y), int(w), int(h)))

    surf.blit(font.render(f"Score: {state.display_score}", True, COLOR_HUD), (10, 10))
    surf.blit(font.render(f"Bits: {state.bits_collected}", True, COLOR_HUD), (10, 36))

    if not state.running:
        big_font = big_font or font
        w, h = surf.get_size()
        panel = pygame.Surface((w, h), pygame.SRCALPHA)
        panel.fill(COLOR_OVERLAY)
        surf.blit(panel, (0, 0))

        title, score_line, prompt = state.overlay_lines()
        lines = [(big_font, title, h // 2 - 20), (font, score_line, h // 2 + 10), (font, prompt, h // 2 + 40)]
        for f, msg, cy in lines:
            txt = f.render(msg, True, COLOR_GAME_OVER)
            surf.blit(txt, (w // 2 - txt.get_width() // 2, cy - txt.get_height() // 2))

def run(argv=None):
    args = parse_args(argv)

    pygame.init()
    pygame.display.set_caption("Bit Runner")
    screen = pygame.display.set_mode((WIDTH, HEIGHT))
    clock = pygame.time.Clock()
    font = pygame.font.SysFont("monospace", 18)
    big_font = pygame.font.SysFont("monospace", 36)

    session = Session(preset=args.preset, seed=args.seed)
    frame_clock = FrameClock()
    print(f"Bit Runner: preset={args.preset} seed={session.spawner.seed}")

    _print_timer = 0.0 if DEBUG_TICK_LOGS else None
    best_score = 0

    while True:
        clock.tick(FPS)
        dt = frame_clock.delta(pygame.time.get_ticks())
        if dt > MAX_FRAME_DT:  # clamp stalls
            dt = MAX_FRAME_DT

        jump = restart = False
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                pygame.quit(); sys.exit()
            if event.type == pygame.KEYDOWN:
                if event.key == K_ESCAPE:
                    pygame.quit(); sys.exit()
                if event.key in (K_SPACE, K_UP):
                    jump = True
                if event.key == K_r:
                    restart = True
            # touch screens arrive as mouse clicks: jump while running, restart once ended
            if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                if session.running:
                    jump = True
                else:
                    restart = True

        was_running = session.running
        state = session.tick(dt, InputEvents(jump=jump, restart=restart))

        if was_running and not state.running:
            best_score = max(best_score, state.display_score)
            print(f"[GAME OVER] score={state.display_score} bits={state.bits_collected} "
                  f"speed={state.game_speed:.2f} best={best_score}")

        if _print_timer is not None and state.running:
            _print_timer -= dt
            if _print_timer <= 0.0:
                _print_timer = 0.5  # twice per second
                p = session.state.player
                print(f"TICK y={p.y:.1f} dy={p.dy:+.2f} jumps={p.jump_count} speed={state.game_speed:.2f} "
                      f"obs={len(state.obstacles)} bits={len(state.bits)} score={state.score:.2f}")

        draw_state(screen, state, font, big_font)
        pygame.display.flip()

if __name__ == "__main__":
    run()
