from .difficulty import OsuDifficultyAttributes, StarsVersion, stars
from .hitresults import JudgementCounts
from .object import OsuObject
from .performance import (
    OsuPerformance,
    OsuPerformanceAttributes,
    OsuScoreState,
    performance_points,
)

__all__ = [
    "JudgementCounts",
    "OsuDifficultyAttributes",
    "OsuObject",
    "OsuPerformance",
    "OsuPerformanceAttributes",
    "OsuScoreState",
    "StarsVersion",
    "performance_points",
    "stars",
]
