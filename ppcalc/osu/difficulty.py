from collections import namedtuple
from enum import Enum
import logging
import math

from ..mod import Mods, circle_radius
from .object import ObjectCounts, OsuObject
from .skills import Aim, Flashlight, OsuDifficultyObject, Speed

log = logging.getLogger(__name__)


class StarsVersion(Enum):
    """The algorithm versions of the osu! star rating.

    Attributes
    ----------
    no_sliders_no_leniency
        Sliders are treated like circles; travel distance is ignored.
    no_leniency
        Slider travel is the raw displacement between visited slider points.
    all_included
        Slider travel only counts movement which leaves the follow circle.
    """
    no_sliders_no_leniency = 'no_sliders_no_leniency'
    no_leniency = 'no_leniency'
    all_included = 'all_included'

    @property
    def slider_travel(self):
        return self is not StarsVersion.no_sliders_no_leniency

    @property
    def follow_leniency(self):
        return self is StarsVersion.all_included


class OsuDifficultyAttributes(namedtuple(
        'OsuDifficultyAttributes',
        [
            'aim_strain',
            'speed_strain',
            'flashlight_rating',
            'ar',
            'od',
            'hp',
            'n_circles',
            'n_sliders',
            'n_spinners',
            'stars',
            'max_combo',
        ])):
    """The difficulty of an osu! standard map for one set of mods.

    Parameters
    ----------
    aim_strain : float
        The aim rating.
    speed_strain : float
        The speed rating.
    flashlight_rating : float
        The flashlight rating. This is computed whether or not the flashlight
        mod is active.
    ar, od, hp : float
        The mod adjusted map settings.
    n_circles, n_sliders, n_spinners : int
        The object kind counts.
    stars : float
        The star rating.
    max_combo : int
        The highest reachable combo.
    """
    @property
    def n_objects(self):
        return self.n_circles + self.n_sliders + self.n_spinners


# a buffer applied to very small circles to make up for the difficulty of
# hitting them
_circle_size_buffer_threshold = 30

_star_scaling_factor = 0.0675
_extreme_scaling_factor = 0.5


def scaling_factor(radius):
    """The factor which normalizes distances to a circle radius of 52.
    """
    factor = 52 / radius
    if radius < _circle_size_buffer_threshold:
        factor *= 1 + min(_circle_size_buffer_threshold - radius, 5) / 50
    return factor


def difficulty_objects(beatmap,
                       mods=0,
                       passed_objects=None,
                       version=StarsVersion.all_included):
    """Normalize a map's objects and build the difficulty object arena.

    Parameters
    ----------
    beatmap : Beatmap
        The map to read.
    mods : int, str or Mods, optional
        The mods to apply.
    passed_objects : int, optional
        Only use this many leading hit objects.
    version : StarsVersion, optional
        Which slider handling to use.

    Returns
    -------
    arena : list[OsuDifficultyObject]
        One entry per normalized object. The first entry has no predecessor
        and is never rated.
    counts : ObjectCounts
        The object kind counts and max combo.
    """
    mods = Mods.coerce(mods)
    version = StarsVersion(version)

    radius = circle_radius(beatmap.cs(mods))
    factor = scaling_factor(radius)
    clock_rate = mods.clock_rate

    hit_objects = beatmap.hit_objects()
    if passed_objects is not None:
        hit_objects = hit_objects[:passed_objects]

    counts = ObjectCounts()
    arena = []
    previous = None
    for hit_object in hit_objects:
        base = OsuObject.from_hit_object(
            hit_object,
            beatmap,
            radius,
            factor,
            counts,
            follow_leniency=version.follow_leniency,
            slider_travel=version.slider_travel,
        )
        if base is None:
            continue

        arena.append(OsuDifficultyObject(
            len(arena),
            base,
            previous,
            factor,
            clock_rate,
        ))
        previous = base

    return arena, counts


def stars(beatmap,
          mods=0,
          passed_objects=None,
          version=StarsVersion.all_included):
    """Compute the difficulty attributes of an osu! standard map.

    Parameters
    ----------
    beatmap : Beatmap
        The map to rate.
    mods : int, str or Mods, optional
        The mods to apply.
    passed_objects : int, optional
        Only rate this many leading hit objects, for failed plays.
    version : StarsVersion or str, optional
        The algorithm version to use.

    Returns
    -------
    attributes : OsuDifficultyAttributes
        The difficulty attributes.
    """
    mods = Mods.coerce(mods)
    arena, counts = difficulty_objects(
        beatmap,
        mods,
        passed_objects,
        version,
    )

    ar = beatmap.ar(mods)
    od = beatmap.od(mods)
    hp = beatmap.hp(mods)

    if len(arena) < 2:
        return OsuDifficultyAttributes(
            aim_strain=0.0,
            speed_strain=0.0,
            flashlight_rating=0.0,
            ar=ar,
            od=od,
            hp=hp,
            n_circles=counts.n_circles,
            n_sliders=counts.n_sliders,
            n_spinners=counts.n_spinners,
            stars=0.0,
            max_combo=counts.max_combo,
        )

    aim = Aim()
    speed = Speed()
    flashlight = Flashlight()
    for current in arena[1:]:
        aim.process(current, arena)
        speed.process(current, arena)
        flashlight.process(current, arena)

    aim_rating = math.sqrt(aim.difficulty_value()) * _star_scaling_factor
    speed_rating = math.sqrt(speed.difficulty_value()) * _star_scaling_factor
    flashlight_rating = (
        math.sqrt(flashlight.difficulty_value()) * _star_scaling_factor
    )

    star_rating = (
        aim_rating +
        speed_rating +
        abs(aim_rating - speed_rating) *
        _extreme_scaling_factor
    )

    attributes = OsuDifficultyAttributes(
        aim_strain=aim_rating,
        speed_strain=speed_rating,
        flashlight_rating=flashlight_rating,
        ar=ar,
        od=od,
        hp=hp,
        n_circles=counts.n_circles,
        n_sliders=counts.n_sliders,
        n_spinners=counts.n_spinners,
        stars=star_rating,
        max_combo=counts.max_combo,
    )
    log.debug('computed %r for %r with %r', attributes, beatmap, mods)
    return attributes
