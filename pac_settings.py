import json
import os


BASE_DIR = os.path.dirname(os.path.abspath(__file__))
CONFIG_PATH = os.path.join(BASE_DIR, "config.json")
PREFS_PATH = os.path.join(BASE_DIR, "prefs.json")

DEFAULT_CONFIG = {
    "fps": 27,
    "tile_size": 20,
    "start_lives": 3,
    "countdown_seconds": 5,
    "vulnerable_seconds": 8,
    "vulnerable_warning_seconds": 5,
    "returning_seconds": 3,
    "dying_seconds": 2,
    "game_over_delay_seconds": 3,
    "chase_accuracy": 0.8,
    "extra_life_every": 10000,
    "audio_dir": os.path.join(BASE_DIR, "assets", "audio"),
}

DEFAULT_PREFS = {"sound_disabled": False}


def load_config(path=CONFIG_PATH):
    cfg = DEFAULT_CONFIG.copy()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
            if isinstance(data, dict):
                for k in cfg.keys():
                    if k in data:
                        cfg[k] = data[k]
    except FileNotFoundError:
        pass
    except json.JSONDecodeError:
        pass
    return cfg


def load_prefs(path=PREFS_PATH):
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
            if isinstance(data, dict):
                return {"sound_disabled": bool(data.get("sound_disabled", False))}
    except FileNotFoundError:
        pass
    except json.JSONDecodeError:
        pass
    return DEFAULT_PREFS.copy()


def save_prefs(prefs, path=PREFS_PATH):
    with open(path, "w", encoding="utf-8") as f:
        json.dump({"sound_disabled": bool(prefs.get("sound_disabled", False))}, f)


def clamp_lives(value, default=3):
    try:
        lives = int(value)
    except (TypeError, ValueError):
        lives = int(default)
    return max(1, lives)
