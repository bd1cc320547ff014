from .beatmap import Beatmap, Circle, Slider, Spinner, TimingPoint, HitObject, HoldNote
from .game_mode import GameMode
from .mod import Mod, Mods
from .position import Position
from . import osu, taiko

__version__ = "0.1.0"


__all__ = [
    "Beatmap",
    "GameMode",
    "Mod",
    "Mods",
    "Position",
    "Circle",
    "Slider",
    "Spinner",
    "TimingPoint",
    "HitObject",
    "HoldNote",
    "osu",
    "taiko",
]
