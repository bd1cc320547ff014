from enum import IntEnum, unique


@unique
class GameMode(IntEnum):
    """The game modes a ``.osu`` file can be authored for.
    """
    osu = 0
    taiko = 1
    catch = 2
    mania = 3
