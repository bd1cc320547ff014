from .difficulty import DIFFICULTY_MULTIPLIER, TaikoDifficultyAttributes, stars
from .gradual import TaikoGradualDifficulty

__all__ = [
    "DIFFICULTY_MULTIPLIER",
    "TaikoDifficultyAttributes",
    "TaikoGradualDifficulty",
    "stars",
]
