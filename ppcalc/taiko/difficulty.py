from collections import namedtuple
import logging
import math

from ..game_mode import GameMode
from ..mod import Mods, od_to_taiko_great
from .object import TaikoObject, difficulty_objects
from .skills import Peaks

log = logging.getLogger(__name__)

DIFFICULTY_MULTIPLIER = 1.35


class TaikoDifficultyAttributes(namedtuple(
        'TaikoDifficultyAttributes',
        'stamina rhythm colour peak hit_window stars max_combo')):
    """The difficulty of an osu!taiko map for one set of mods.

    Parameters
    ----------
    stamina, rhythm, colour : float
        The skill ratings.
    peak : float
        The combined rating of the three skills.
    hit_window : float
        The great hit window in milliseconds, adjusted for the clock rate.
    stars : float
        The star rating.
    max_combo : int
        The number of hits.
    """


def rescale(stars):
    """Compress high star ratings.
    """
    if stars < 0:
        return stars
    return 10.43 * math.log(stars / 8 + 1)


def is_convert(beatmap):
    """Was this map made for another game mode?
    """
    return beatmap.mode != GameMode.taiko


def hit_window(beatmap, mods=0):
    """The great hit window of a map in milliseconds.
    """
    mods = Mods.coerce(mods)
    od = beatmap.od(mods, adjust_clock_rate=False)
    return od_to_taiko_great(od) / mods.clock_rate


def rate(values, convert):
    """Turn the raw skill values into ratings and a star rating.

    Parameters
    ----------
    values : PeaksDifficultyValues
        The raw skill values.
    convert : bool
        Was the map made for another game mode?

    Returns
    -------
    ratings : PeaksDifficultyValues
        The scaled ratings.
    stars : float
        The star rating.
    """
    ratings = values._replace(**{
        field: value * DIFFICULTY_MULTIPLIER
        for field, value in values._asdict().items()
    })
    star_rating = rescale(ratings.combined * 1.4)

    # converts are easier to play with alternate input styles
    if convert:
        star_rating *= 0.925

        if ratings.colour < 2 and ratings.stamina > 8:
            star_rating *= 0.8

    return ratings, star_rating


def stars(beatmap, mods=0):
    """Compute the difficulty attributes of an osu!taiko map.

    Parameters
    ----------
    beatmap : Beatmap
        The map to rate. Maps for other modes are rated as converts.
    mods : int, str or Mods, optional
        The mods to apply.

    Returns
    -------
    attributes : TaikoDifficultyAttributes
        The difficulty attributes.
    """
    mods = Mods.coerce(mods)
    hit_objects = beatmap.hit_objects()

    max_combo = sum(
        TaikoObject.from_hit_object(ob).is_hit for ob in hit_objects
    )
    lists = difficulty_objects(hit_objects, mods.clock_rate)

    peaks = Peaks()
    for current in lists.all:
        peaks.process(current, lists)

    ratings, star_rating = rate(peaks.difficulty_values(), is_convert(beatmap))
    attributes = TaikoDifficultyAttributes(
        stamina=ratings.stamina,
        rhythm=ratings.rhythm,
        colour=ratings.colour,
        peak=ratings.combined,
        hit_window=hit_window(beatmap, mods),
        stars=star_rating,
        max_combo=max_combo,
    )
    log.debug('computed %r for %r with %r', attributes, beatmap, mods)
    return attributes
