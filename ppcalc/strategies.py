from datetime import timedelta

from hypothesis.strategies import (
    composite,
    floats as _floats,
    integers,
    lists,
    one_of,
    sampled_from,
)

from ppcalc import (
    Beatmap,
    Circle,
    GameMode,
    Position,
    Slider,
    Spinner,
    TimingPoint,
)
from ppcalc.curve import Curve
from ppcalc.mod import Mod


def floats(*args, **kwargs):
    # nan and inf are never valid map data
    return _floats(*args, allow_nan=False, allow_infinity=False, **kwargs)


@composite
def positions(draw):
    return Position(
        x=draw(integers(0, Position.x_max)),
        y=draw(integers(0, Position.y_max)),
    )


@composite
def timing_points(draw):
    return TimingPoint(
        offset=timedelta(),
        ms_per_beat=draw(floats(200, 1000)),
        meter=4,
        parent=None,
    )


@composite
def circles(draw, time):
    return Circle(
        position=draw(positions()),
        time=time,
        hitsound=draw(sampled_from([0, Circle.whistle, Circle.clap])),
    )


@composite
def spinners(draw, time):
    return Spinner(
        position=Position(256, 192),
        time=time,
        hitsound=0,
        end_time=time + timedelta(milliseconds=draw(integers(500, 3000))),
    )


@composite
def sliders(draw, time):
    start = draw(positions())
    end = draw(positions())
    length = max(abs(end.x - start.x), 1)
    return Slider(
        position=start,
        time=time,
        hitsound=0,
        curve=Curve.from_kind_and_points('L', [start, end], length),
        repeat=draw(integers(1, 3)),
        length=length,
    )


@composite
def hit_objects(draw, *, min_size=0, max_size=60, kinds=None):
    """A time ordered list of hit objects with distinct start times.
    """
    if kinds is None:
        kinds = [circles, sliders, spinners]

    gaps = draw(lists(
        integers(40, 600),
        min_size=min_size,
        max_size=max_size,
    ))

    objects = []
    time = 1000
    for gap in gaps:
        time += gap
        kind = draw(sampled_from(kinds))
        objects.append(draw(kind(timedelta(milliseconds=time))))

    return objects


@composite
def beatmaps(draw, *, mode=GameMode.osu, min_size=0, max_size=60):
    """Small but valid maps.

    Parameters
    ----------
    mode : GameMode, optional
        The mode of the map.
    min_size, max_size : int, optional
        Bounds on the number of hit objects.
    """
    return Beatmap(
        format_version=14,
        mode=mode,
        title='title',
        artist='artist',
        creator='creator',
        version='version',
        hp_drain_rate=draw(floats(0, 10)),
        circle_size=draw(floats(2, 7)),
        overall_difficulty=draw(floats(0, 10)),
        approach_rate=draw(floats(0, 10)),
        slider_multiplier=draw(floats(0.4, 3.6)),
        slider_tick_rate=draw(sampled_from([0.5, 1, 2, 4])),
        timing_points=[draw(timing_points())],
        hit_objects=draw(hit_objects(min_size=min_size, max_size=max_size)),
    )


def taiko_beatmaps(min_size=0, max_size=60):
    return one_of(
        beatmaps(mode=GameMode.taiko, min_size=min_size, max_size=max_size),
        beatmaps(mode=GameMode.osu, min_size=min_size, max_size=max_size),
    )


def mods():
    """Mod masks made of the mods which change ratings.
    """
    relevant = [
        Mod.no_fail,
        Mod.easy,
        Mod.touch_device,
        Mod.hidden,
        Mod.hard_rock,
        Mod.double_time,
        Mod.relax,
        Mod.half_time,
        Mod.flashlight,
        Mod.spun_out,
    ]
    return lists(sampled_from(relevant), unique=True).map(
        lambda ms: sum(ms, 0),
    ).filter(
        # mutually exclusive pairs
        lambda m: not (
            (m & Mod.easy and m & Mod.hard_rock) or
            (m & Mod.double_time and m & Mod.half_time)
        ),
    )


def accuracies(min_value=0, max_value=100):
    return floats(min_value, max_value)
