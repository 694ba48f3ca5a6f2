import math
import random

import numpy as np

from pac_actors import GHOST_COLORS, Ghost, Player
from pac_maze import BISCUIT, CELL, DIR_NAMES, PILL, WALL, Grid
from pac_settings import clamp_lives


WAITING = "waiting"
COUNTDOWN = "countdown"
PLAYING = "playing"
EATEN_PAUSE = "eaten_pause"
DYING = "dying"
PAUSED = "paused"

OBS_LABELS = ["walls", "biscuits", "pills", "player", "ghosts", "vulnerable", "returning"]


def collided(a, b):
    return math.hypot(a[0] - b[0], a[1] - b[1]) < CELL


class Session:
    def __init__(self, config, seed=None, grid=None):
        self.config = config
        self.fps = int(config["fps"])
        self.countdown_seconds = int(config["countdown_seconds"])
        self.dying_ticks = max(1, int(config["dying_seconds"] * self.fps))
        self.game_over_delay_ticks = int(config["game_over_delay_seconds"] * self.fps)
        self.rng = random.Random(seed)

        self.grid = grid or Grid()
        self.player = Player(clamp_lives(config["start_lives"]), int(config["extra_life_every"]))
        self.ghosts = [
            Ghost(
                color,
                self.rng,
                chase_accuracy=float(config["chase_accuracy"]),
                vulnerable_ticks=int(config["vulnerable_seconds"] * self.fps),
                warning_ticks=int(config["vulnerable_warning_seconds"] * self.fps),
                returning_ticks=int(config["returning_seconds"] * self.fps),
            )
            for color in GHOST_COLORS
        ]

        self.tick = 0
        self.state = WAITING
        self.stored = None
        self.level = 0
        self.timer_start = 0
        self.combo = 0
        self.game_over = False
        self.game_over_at = None
        self.popup = None
        self.events = []

    def cue(self, name):
        self.events.append(("cue", name))

    def drain_events(self):
        events, self.events = self.events, []
        return events

    def start_new_game(self, lives=None):
        if lives is not None:
            self.player.start_lives = clamp_lives(lives, self.player.start_lives)
        self.state = WAITING
        self.stored = None
        self.game_over = False
        self.game_over_at = None
        self.level = 1
        self.player.reset()
        self.grid.reset()
        self.start_level()

    def start_level(self):
        self.player.reset_position()
        for ghost in self.ghosts:
            ghost.reset(self.grid)
        self.popup = None
        self.cue("start")
        self.timer_start = self.tick
        self.state = COUNTDOWN

    def set_direction(self, d):
        if self.state == PAUSED:
            return
        self.player.set_intent(d)

    def toggle_pause(self):
        if self.state == PAUSED:
            self.state = self.stored
            self.stored = None
        else:
            self.stored = self.state
            self.state = PAUSED

    def countdown_remaining(self):
        return max(0, self.countdown_seconds - (self.tick - self.timer_start) // self.fps)

    def step(self):
        if self.state == PAUSED:
            return
        self.tick += 1
        for ghost in self.ghosts:
            ghost.expire(self.tick)

        if self.state == PLAYING:
            self.play()
        elif self.state == EATEN_PAUSE:
            if self.tick - self.timer_start > self.fps / 3:
                self.popup = None
                self.state = PLAYING
        elif self.state == DYING:
            if self.tick - self.timer_start > self.dying_ticks:
                self.lose_life()
        elif self.state == COUNTDOWN:
            if self.countdown_remaining() == 0:
                self.state = PLAYING
        elif self.game_over_at is not None:
            if self.tick - self.game_over_at >= self.game_over_delay_ticks:
                self.game_over_at = None
                self.events.append(("game_over", self.player.score))

    def play(self):
        moved = self.player.step(self.grid)
        if moved["level_completed"]:
            self.completed_level()
            return
        if moved["consumed"] == PILL:
            self.eaten_pill()

        target = (self.player.x, self.player.y)
        ghost_moves = [ghost.step(self.grid, target) for ghost in self.ghosts]

        ate = False
        died = False
        for ghost, move in zip(self.ghosts, ghost_moves):
            if not collided(target, move["new"]):
                continue
            if ghost.is_vulnerable():
                ghost.mark_eaten(self.tick)
                self.combo += 1
                points = 50 * self.combo
                self.player.add_score(points)
                self.popup = {"points": points, "x": move["new"][0], "y": move["new"][1]}
                self.cue("eatghost")
                ate = True
            elif ghost.is_dangerous():
                died = True

        if died:
            self.cue("die")
            self.state = DYING
            self.timer_start = self.tick
        elif ate:
            self.state = EATEN_PAUSE
            self.timer_start = self.tick

    def eaten_pill(self):
        self.cue("eatpill")
        self.timer_start = self.tick
        self.combo = 0
        for ghost in self.ghosts:
            ghost.make_vulnerable(self.tick)

    def completed_level(self):
        self.state = WAITING
        self.level += 1
        self.grid.reset()
        self.player.new_level()
        self.start_level()

    def lose_life(self):
        self.state = WAITING
        self.player.lose_life()
        if self.player.lives > 0:
            self.start_level()
        else:
            self.game_over = True
            self.game_over_at = self.tick

    def active_state(self):
        return self.stored if self.state == PAUSED else self.state

    def overlay(self):
        if self.state == PAUSED:
            return "Paused"
        if self.game_over:
            return "GAME OVER"
        if self.state == COUNTDOWN:
            return f"Starting in: {self.countdown_remaining()}"
        if self.state == WAITING:
            return "Press N to start a New game"
        return None

    def get_state(self):
        active = self.active_state()
        return {
            "tick": self.tick,
            "state": self.state,
            "level": self.level,
            "countdown": self.countdown_remaining() if active == COUNTDOWN else None,
            "overlay": self.overlay(),
            "grid": self.grid.rows(),
            "player": {
                "x": self.player.x,
                "y": self.player.y,
                "dir": DIR_NAMES[self.player.dir],
                "lives": self.player.lives,
                "score": self.player.score,
                "eaten": self.player.eaten,
            },
            "ghosts": [
                {
                    "x": g.x,
                    "y": g.y,
                    "dir": DIR_NAMES[g.dir],
                    "status": g.status(self.tick),
                    "color": g.color,
                }
                for g in self.ghosts
            ],
            "popup": dict(self.popup) if self.popup else None,
            "dying": min(1.0, (self.tick - self.timer_start) / self.dying_ticks) if active == DYING else None,
            "game_over": self.game_over,
        }

    def get_observation(self):
        h, w = self.grid.height, self.grid.width
        cells = np.array(self.grid.cells)
        planes = np.zeros((len(OBS_LABELS), h, w), dtype=np.float32)
        planes[0] = cells == WALL
        planes[1] = cells == BISCUIT
        planes[2] = cells == PILL

        def mark(plane, x, y):
            cx = (x + CELL // 2) // CELL
            cy = (y + CELL // 2) // CELL
            if 0 <= cx < w and 0 <= cy < h:
                planes[plane, cy, cx] = 1

        mark(3, self.player.x, self.player.y)
        for g in self.ghosts:
            if g.is_vulnerable():
                mark(5, g.x, g.y)
            elif g.is_returning():
                mark(6, g.x, g.y)
            else:
                mark(4, g.x, g.y)

        scalars = {
            "tick": self.tick,
            "level": self.level,
            "score": self.player.score,
            "lives": self.player.lives,
            "eaten": self.player.eaten / float(self.grid.total) if self.grid.total else 0.0,
            "game_over": 1.0 if self.game_over else 0.0,
        }
        return planes, OBS_LABELS, scalars
