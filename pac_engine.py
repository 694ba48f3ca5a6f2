from collections import deque

from pac_maze import DOWN, LEFT, RIGHT, UP
from pac_session import Session
from pac_settings import PREFS_PATH, clamp_lives, load_config, load_prefs, save_prefs


NEW_GAME = "new_game"
PAUSE = "pause"
MUTE = "mute"
QUIT = "quit"

COMMAND_DIRS = {"up": UP, "down": DOWN, "left": LEFT, "right": RIGHT}
COMMANDS = set(COMMAND_DIRS) | {NEW_GAME, PAUSE, MUTE, QUIT}


class Engine:
    """Owns one Session and drives it at a fixed tick rate.

    Input arrives as commands at any time and is applied at the start of the
    next tick; cues and the final score leave through callbacks.
    """

    def __init__(self, config=None, seed=None, prefs_path=PREFS_PATH):
        self.config = config or load_config()
        self.seed = seed
        self.prefs_path = prefs_path
        self.fps = int(self.config["fps"])
        self.muted = load_prefs(prefs_path)["sound_disabled"]
        self.session = None
        self.lives = clamp_lives(self.config["start_lives"])
        self.running = False
        self.pending = deque()
        self.on_game_over = None
        self.on_cue = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()
        return False

    def start(self, lives, on_game_over=None, on_cue=None):
        self.stop()
        self.lives = clamp_lives(lives, self.config["start_lives"])
        self.on_game_over = on_game_over
        self.on_cue = on_cue
        self.session = Session(self.config, seed=self.seed)
        self.session.start_new_game(self.lives)
        self.running = True
        self.dispatch()
        return self

    def stop(self):
        self.running = False
        self.pending.clear()
        self.on_game_over = None
        self.on_cue = None

    def send(self, command):
        if self.running and command in COMMANDS:
            self.pending.append(command)

    def apply(self, command):
        if command in COMMAND_DIRS:
            self.session.set_direction(COMMAND_DIRS[command])
        elif command == NEW_GAME:
            self.session.start_new_game(self.lives)
        elif command == PAUSE:
            self.session.toggle_pause()
        elif command == MUTE:
            self.toggle_mute()
        elif command == QUIT:
            self.quit()

    def toggle_mute(self):
        self.muted = not self.muted
        save_prefs({"sound_disabled": self.muted}, self.prefs_path)

    def quit(self):
        callback = self.on_game_over
        self.stop()
        if callback:
            callback(0)

    def tick(self):
        if not self.running:
            return None
        while self.pending and self.running:
            self.apply(self.pending.popleft())
        if not self.running:
            return None
        self.session.step()
        snapshot = self.snapshot()
        self.dispatch()
        return snapshot

    def dispatch(self):
        for kind, value in self.session.drain_events():
            if kind == "cue":
                if self.on_cue:
                    self.on_cue(value)
            elif kind == "game_over":
                callback = self.on_game_over
                self.stop()
                if callback:
                    callback(value)
                return

    def snapshot(self):
        state = self.session.get_state()
        state["muted"] = self.muted
        return state

    def run(self, clock, poll=None, render=None):
        try:
            while self.running:
                clock.tick(self.fps)
                if poll:
                    for command in poll():
                        self.send(command)
                snapshot = self.tick()
                if snapshot is not None and render:
                    render(snapshot)
        finally:
            self.stop()
