import os
import sys

import pygame

from pac_engine import MUTE, NEW_GAME, PAUSE, QUIT, Engine
from pac_maze import BISCUIT, GRID_H, GRID_W, PILL, WALL
from pac_settings import load_config


FOOTER = 30

BLACK = (0, 0, 0)
WALL_BLUE = (0, 0, 255)
WHITE = (255, 255, 255)
YELLOW = (255, 255, 0)
GREEN = (0, 255, 0)
RED = (255, 0, 0)
GREY = (120, 120, 120)
VULNERABLE_BLUE = (0, 0, 187)
RETURNING_GREY = (34, 34, 34)
LIFE_COLORS = [(0, 255, 222), (255, 105, 180), (0, 255, 120)]

SOUND_FILES = {
    "start": "opening_song",
    "die": "die",
    "eatghost": "eatghost",
    "eatpill": "eatpill",
}
SOUND_EXTENSIONS = (".ogg", ".mp3", ".wav")

KEY_COMMANDS = {
    pygame.K_UP: "up",
    pygame.K_DOWN: "down",
    pygame.K_LEFT: "left",
    pygame.K_RIGHT: "right",
    pygame.K_n: NEW_GAME,
    pygame.K_p: PAUSE,
    pygame.K_s: MUTE,
    pygame.K_q: QUIT,
    pygame.K_ESCAPE: QUIT,
}


class Audio:
    def __init__(self, audio_dir):
        self.sounds = {}
        self.error = ""
        try:
            pygame.mixer.init()
        except pygame.error as e:
            self.error = f"Audio unavailable ({e})"
            print(self.error)
            return
        missing = []
        for cue, stem in SOUND_FILES.items():
            sound = None
            for ext in SOUND_EXTENSIONS:
                path = os.path.join(audio_dir, stem + ext)
                if not os.path.exists(path):
                    continue
                try:
                    sound = pygame.mixer.Sound(path)
                    break
                except pygame.error:
                    continue
            if sound is None:
                missing.append(stem)
            else:
                self.sounds[cue] = sound
        if missing:
            self.error = f"Audio missing: {', '.join(missing)}"
            print(f"{self.error} (looked in {audio_dir})")

    def play(self, cue, muted=False):
        sound = self.sounds.get(cue)
        if muted or sound is None:
            return
        sound.play()

    def pause(self):
        if pygame.mixer.get_init():
            pygame.mixer.pause()

    def resume(self):
        if pygame.mixer.get_init():
            pygame.mixer.unpause()

    def stop(self):
        if pygame.mixer.get_init():
            pygame.mixer.stop()


def to_screen(v, tile):
    return int(v / 10 * tile)


def draw_maze(screen, rows, tick, tile):
    for y, row in enumerate(rows):
        for x, ch in enumerate(row):
            left, top = x * tile, y * tile
            center = (left + tile // 2, top + tile // 2)
            if ch == WALL:
                pygame.draw.rect(screen, WALL_BLUE, pygame.Rect(left + 2, top + 2, tile - 4, tile - 4), 2, border_radius=4)
            elif ch == BISCUIT:
                size = max(2, tile // 6)
                pygame.draw.rect(screen, WHITE, pygame.Rect(center[0] - size // 2, center[1] - size // 2, size, size))
            elif ch == PILL:
                # Pulses over a 31-tick cycle.
                radius = abs(5 - (tick % 31) / 3) * tile / 18
                pygame.draw.circle(screen, WHITE, center, max(2, int(radius)))


def mouth_points(center, radius, direction, open_):
    cx, cy = center
    if not open_:
        return None
    if direction == "right":
        return [center, (cx + radius, cy - radius), (cx + radius, cy + radius)]
    if direction == "left":
        return [center, (cx - radius, cy - radius), (cx - radius, cy + radius)]
    if direction == "up":
        return [center, (cx - radius, cy - radius), (cx + radius, cy - radius)]
    if direction == "down":
        return [center, (cx - radius, cy + radius), (cx + radius, cy + radius)]
    return None


def draw_player(screen, player, tile, dying=None):
    center = (to_screen(player["x"], tile) + tile // 2, to_screen(player["y"], tile) + tile // 2)
    radius = tile // 2
    if dying is not None:
        if dying >= 1:
            return
        pygame.draw.circle(screen, YELLOW, center, max(1, int(radius * (1 - dying))))
        return
    pygame.draw.circle(screen, YELLOW, center, radius)
    phase = player["x"] % 10 if player["dir"] in ("left", "right") else player["y"] % 10
    mouth = mouth_points(center, radius, player["dir"], phase < 5)
    if mouth:
        pygame.draw.polygon(screen, BLACK, mouth)


def ghost_color(ghost, tick):
    status = ghost["status"]
    if status == "flashing":
        return WHITE if tick % 20 > 10 else VULNERABLE_BLUE
    if status == "vulnerable":
        return VULNERABLE_BLUE
    if status == "returning":
        return RETURNING_GREY
    return ghost["color"]


def draw_ghost(screen, ghost, tick, tile):
    left = to_screen(ghost["x"], tile)
    top = to_screen(ghost["y"], tile)
    body_rect = pygame.Rect(left + 1, top + 1, tile - 2, tile - 2)
    pygame.draw.rect(screen, ghost_color(ghost, tick), body_rect, border_top_left_radius=tile // 2, border_top_right_radius=tile // 2)

    look = {"right": (1, 0), "left": (-1, 0), "up": (0, -1), "down": (0, 1)}.get(ghost["dir"], (0, 0))
    eye_radius = max(2, tile // 6)
    pupil_radius = max(1, tile // 15)
    for ex in (left + tile // 3, left + tile - tile // 3):
        ey = top + tile // 3
        pygame.draw.circle(screen, WHITE, (ex, ey), eye_radius)
        pygame.draw.circle(screen, BLACK, (ex + look[0] * 2, ey + look[1] * 2), pupil_radius)


def dialog(screen, font, text, tile, grid_w, grid_h):
    msg = font.render(text, True, YELLOW)
    screen.blit(msg, ((grid_w * tile - msg.get_width()) // 2, grid_h * tile // 2 + tile // 2))


def draw_footer(screen, font, snapshot, tile, grid_w, grid_h):
    top = grid_h * tile
    pygame.draw.rect(screen, BLACK, pygame.Rect(0, top, grid_w * tile, FOOTER))
    screen.blit(font.render(f"Score: {snapshot['player']['score']}", True, YELLOW), (10, top + 8))
    for i in range(snapshot["player"]["lives"]):
        pygame.draw.circle(screen, YELLOW, (int(grid_w * tile * 0.5) + 20 * i, top + FOOTER // 2), tile // 2 - 2)
    screen.blit(font.render(f"Lvl: {snapshot['level']}", True, YELLOW), (int(grid_w * tile * 0.7), top + 8))
    note_color = RED if snapshot["muted"] else GREEN
    screen.blit(font.render("S", True, note_color), (grid_w * tile - 24, top + 8))


def draw(screen, fonts, snapshot, tile, audio_error=""):
    rows = snapshot["grid"]
    grid_w, grid_h = len(rows[0]), len(rows)
    tick = snapshot["tick"]
    screen.fill(BLACK)
    draw_maze(screen, rows, tick, tile)
    for ghost in snapshot["ghosts"]:
        draw_ghost(screen, ghost, tick, tile)
    draw_player(screen, snapshot["player"], tile, snapshot["dying"])

    popup = snapshot["popup"]
    if popup:
        label = fonts["small"].render(str(popup["points"]), True, WHITE)
        screen.blit(label, (to_screen(popup["x"], tile), to_screen(popup["y"] + 5, tile)))
    if snapshot["overlay"]:
        dialog(screen, fonts["dialog"], snapshot["overlay"], tile, grid_w, grid_h)
    if audio_error:
        screen.blit(fonts["small"].render(audio_error, True, GREY), (4, 2))
    draw_footer(screen, fonts["small"], snapshot, tile, grid_w, grid_h)


def start_screen(screen, clock, fonts):
    """Blocks until a life count is chosen (1-3); None when the window closes."""
    choices = {pygame.K_1: 1, pygame.K_2: 2, pygame.K_3: 3}
    blink = 0
    while True:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return None
            if event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    return None
                if event.key in choices:
                    return choices[event.key]

        width = screen.get_width()
        screen.fill(BLACK)
        title = fonts["title"].render("PAC-MAN", True, YELLOW)
        screen.blit(title, ((width - title.get_width()) // 2, 60))
        blink = (blink + 1) % 40
        if blink < 20:
            coin = fonts["dialog"].render("INSERT COIN", True, RED)
            screen.blit(coin, ((width - coin.get_width()) // 2, 140))
        for i, label in enumerate(["1 COIN  - 1 LIFE", "2 COINS - 2 LIVES", "3 COINS - 3 LIVES"]):
            text = fonts["dialog"].render(f"[{i + 1}] {label}", True, LIFE_COLORS[i])
            screen.blit(text, ((width - text.get_width()) // 2, 220 + i * 40))
        hint = fonts["small"].render("ARROWS move  N new  P pause  S sound  Q quit", True, GREY)
        screen.blit(hint, ((width - hint.get_width()) // 2, 380))
        pygame.display.flip()
        clock.tick(30)


def game_over_screen(screen, clock, fonts, score):
    """True to go back to the start screen, False to exit."""
    while True:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            if event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    return False
                return True

        width = screen.get_width()
        screen.fill(BLACK)
        over = fonts["title"].render("GAME OVER", True, RED)
        screen.blit(over, ((width - over.get_width()) // 2, 100))
        text = fonts["dialog"].render(f"SCORE: {score}", True, YELLOW)
        screen.blit(text, ((width - text.get_width()) // 2, 200))
        again = fonts["small"].render("Press any key to play again", True, WHITE)
        screen.blit(again, ((width - again.get_width()) // 2, 280))
        pygame.display.flip()
        clock.tick(30)


def play(screen, clock, fonts, engine, audio, lives, tile):
    result = {"score": 0, "closed": False}
    last = {"state": None, "muted": engine.muted}

    def on_game_over(score):
        result["score"] = score

    def on_cue(name):
        audio.play(name, engine.muted)

    def poll():
        commands = []
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                result["closed"] = True
                commands.append(QUIT)
            elif event.type == pygame.KEYDOWN and event.key in KEY_COMMANDS:
                commands.append(KEY_COMMANDS[event.key])
        return commands

    def render(snapshot):
        if snapshot["state"] == "paused" and last["state"] != "paused":
            audio.pause()
        elif snapshot["state"] != "paused" and last["state"] == "paused":
            audio.resume()
        if snapshot["muted"] and not last["muted"]:
            audio.stop()
        last["state"] = snapshot["state"]
        last["muted"] = snapshot["muted"]
        draw(screen, fonts, snapshot, tile, audio.error)
        pygame.display.flip()

    engine.start(lives, on_game_over=on_game_over, on_cue=on_cue)
    engine.run(clock, poll=poll, render=render)
    audio.stop()
    return result


def main():
    cfg = load_config()
    tile = int(cfg["tile_size"])
    engine = Engine(cfg)

    pygame.init()
    screen = pygame.display.set_mode((GRID_W * tile, GRID_H * tile + FOOTER))
    pygame.display.set_caption("Pac-Man")
    clock = pygame.time.Clock()
    fonts = {
        "title": pygame.font.SysFont("Arial", 48, bold=True),
        "dialog": pygame.font.SysFont("Arial", 20, bold=True),
        "small": pygame.font.SysFont("Arial", 14),
    }
    audio = Audio(cfg["audio_dir"])

    running = True
    while running:
        lives = start_screen(screen, clock, fonts)
        if lives is None:
            break
        result = play(screen, clock, fonts, engine, audio, lives, tile)
        if result["closed"]:
            break
        running = game_over_screen(screen, clock, fonts, result["score"])

    pygame.quit()
    sys.exit()


if __name__ == "__main__":
    main()
