from .beatmap import Beatmap
from .difficulty import (
    DifficultyAttributes,
    Strains,
    calculate_difficulty,
    calculate_strains,
)
from .hit_object import Circle, HitObject, Slider, Spinner
from .mod import Mod, Mods, NO_MODS
from .performance import PerformanceAttributes, Score, calculate_performance
from .position import Position

__version__ = "0.1.0"


__all__ = [
    "Beatmap",
    "Circle",
    "DifficultyAttributes",
    "HitObject",
    "Mod",
    "Mods",
    "NO_MODS",
    "PerformanceAttributes",
    "Position",
    "Score",
    "Slider",
    "Spinner",
    "Strains",
    "calculate_difficulty",
    "calculate_performance",
    "calculate_strains",
]
