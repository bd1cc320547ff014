from datetime import timedelta

from hypothesis import given, settings
from hypothesis.strategies import integers
import pytest

from ppcalc.beatmap import Beatmap, Circle, Spinner, TimingPoint
from ppcalc.game_mode import GameMode
from ppcalc.mod import Mods, od_to_taiko_great
from ppcalc.position import Position
from ppcalc.strategies import circles, hit_objects, mods, taiko_beatmaps
from ppcalc.taiko import TaikoGradualDifficulty, stars
from ppcalc.taiko.difficulty import hit_window, rescale
from ppcalc.taiko.object import (
    TaikoObject,
    closest_rhythm,
    difficulty_objects,
)
from ppcalc.taiko.skills import Peaks, evaluate_colour


def make_beatmap(hit_objects, mode=GameMode.taiko):
    return Beatmap(
        format_version=14,
        mode=mode,
        title='title',
        artist='artist',
        creator='creator',
        version='version',
        hp_drain_rate=5,
        circle_size=5,
        overall_difficulty=5,
        approach_rate=5,
        slider_multiplier=1.4,
        slider_tick_rate=1,
        timing_points=[TimingPoint(timedelta(), 500, 4, None)],
        hit_objects=hit_objects,
    )


def hits(pattern, start=1000, gap=150):
    """Build hits from a string of ``d`` (don) and ``k`` (kat).
    """
    return [
        Circle(
            Position(256, 192),
            timedelta(milliseconds=start + ix * gap),
            Circle.clap if kind == 'k' else 0,
        )
        for ix, kind in enumerate(pattern)
    ]


# every object is a hit so gradual and one shot ratings see the same objects
all_hit_beatmaps = hit_objects(min_size=2, kinds=[circles]).map(make_beatmap)


def test_taiko_object():
    don, kat = hits('dk')
    assert TaikoObject.from_hit_object(don) == (1000, True, False)
    assert TaikoObject.from_hit_object(kat) == (1150, True, True)

    spinner = Spinner(
        Position(256, 192),
        timedelta(milliseconds=2000),
        Circle.clap,
        timedelta(milliseconds=3000),
    )
    assert TaikoObject.from_hit_object(spinner) == (2000, False, False)


def test_closest_rhythm():
    assert closest_rhythm(100, 100).ratio == 1
    assert closest_rhythm(100, 100).difficulty == 0
    assert closest_rhythm(100, 200).ratio == 0.5
    assert closest_rhythm(150, 100).ratio == 1.5
    assert closest_rhythm(310, 100).ratio == 3
    assert closest_rhythm(100, 0).ratio == 1


def test_difficulty_object_arena():
    lists = difficulty_objects(hits('dd' + 'ddkkddkk'), 1.0)

    assert len(lists) == 8
    assert lists.centres == [0, 1, 4, 5]
    assert lists.rims == [2, 3, 6, 7]
    assert lists.notes == list(range(8))

    assert lists.previous_mono(lists[4], 0) is lists[1]
    assert lists.previous_mono(lists[4], 1) is lists[0]
    assert lists.previous_mono(lists[4], 2) is None
    assert lists.previous_note(lists[4], 0) is lists[3]

    assert lists[0].delta_time == 150
    assert lists[0].start_time == 1300


def test_clock_rate():
    lists = difficulty_objects(hits('dddd'), 1.5)
    assert lists[0].delta_time == pytest.approx(100)
    assert lists[0].start_time == pytest.approx(1300 / 1.5)


def test_colour_encoding():
    lists = difficulty_objects(hits('dd' + 'ddkkddkk'), 1.0)

    colours = [ob.colour for ob in lists]
    assert all(colour is not None for colour in colours)

    assert colours[0].mono_streak is colours[1].mono_streak
    assert colours[0].mono_streak.run_length == 2
    assert colours[2].mono_streak.index == 1

    # one alternating pattern of equal length streaks
    assert all(
        colour.alternating_pattern is colours[0].alternating_pattern
        for colour in colours
    )
    assert len(colours[0].alternating_pattern.mono_streaks) == 4


def test_colour_difficulty():
    lists = difficulty_objects(hits('dd' + 'ddkkddkk'), 1.0)

    first = evaluate_colour(lists[0])
    second_streak = evaluate_colour(lists[2])

    # only the first hit of a streak is rated
    assert evaluate_colour(lists[1]) == 0
    assert first > second_streak > 0


def test_repetition_interval():
    lists = difficulty_objects(hits('dd' + 'dkk' + 'ddk' + 'dkk'), 1.0)

    # the last pattern repeats the one two patterns before it
    last = lists[-1].colour.repeating_pattern
    assert last.repetition_interval == 2


def test_non_hits_have_no_colour():
    objects = hits('dddd')
    objects.insert(3, Spinner(
        Position(256, 192),
        timedelta(milliseconds=1400),
        0,
        timedelta(milliseconds=1420),
    ))
    lists = difficulty_objects(objects, 1.0)

    assert lists[1].colour is None
    assert lists[1].mono_index is None
    assert evaluate_colour(lists[1]) == 0
    assert lists.notes == [0, 2]


def test_hit_window():
    beatmap = make_beatmap(hits('dd'))
    assert hit_window(beatmap) == pytest.approx(od_to_taiko_great(5))
    assert hit_window(beatmap, 'DT') == pytest.approx(
        od_to_taiko_great(5) / 1.5,
    )


def test_rescale():
    assert rescale(0) == 0
    assert rescale(-1) == -1
    assert rescale(8) == pytest.approx(10.43 * 0.6931471805599453)


def test_stars_too_short():
    for size in range(3):
        attributes = stars(make_beatmap(hits('d' * size)))
        assert attributes.stars == 0
        assert attributes.max_combo == size


def test_stars_max_combo():
    objects = hits('dkdkdk')
    objects.append(Spinner(
        Position(256, 192),
        timedelta(milliseconds=2500),
        0,
        timedelta(milliseconds=3500),
    ))
    attributes = stars(make_beatmap(objects))

    assert attributes.max_combo == 6
    assert attributes.stars > 0


def test_stars_mods():
    beatmap = make_beatmap(hits('ddkdkkdkddkd' * 8))

    nomod = stars(beatmap)
    assert stars(beatmap, 'DT').stars > nomod.stars
    assert stars(beatmap, 'HT').stars < nomod.stars


@given(all_hit_beatmaps)
@settings(max_examples=50, deadline=None)
def test_convert_penalty(beatmap):
    taiko = stars(beatmap)
    converted = stars(make_beatmap(beatmap.hit_objects(), GameMode.osu))

    assert converted.stamina == taiko.stamina
    assert converted.colour == taiko.colour

    penalty = 0.925
    if taiko.colour < 2 and taiko.stamina > 8:
        penalty *= 0.8
    assert converted.stars == pytest.approx(taiko.stars * penalty)


def test_peaks_copy():
    lists = difficulty_objects(hits('dd' + 'dkkdkdddkk' * 4), 1.0)

    peaks = Peaks()
    for ob in lists[:20]:
        peaks.process(ob, lists)

    copied = peaks.copy()
    snapshot = copied.difficulty_values()

    for ob in lists[20:]:
        peaks.process(ob, lists)

    assert copied.difficulty_values() == snapshot
    assert peaks.difficulty_values() != snapshot


def test_gradual_short_map():
    for size in range(2):
        gradual = TaikoGradualDifficulty(make_beatmap(hits('d' * size)))
        assert len(gradual) == 0
        assert gradual.step() is None
        assert list(gradual) == []


def test_gradual_skip():
    gradual = TaikoGradualDifficulty(make_beatmap(hits('dkdkdkdk')))

    assert gradual.skip(0) is None
    assert len(gradual) == 8

    with pytest.raises(ValueError):
        gradual.skip(-1)

    assert gradual.skip(5).max_combo == 5
    assert len(gradual) == 3

    assert gradual.skip(4) is None
    assert len(gradual) == 0
    assert gradual.step() is None


def test_gradual_priming():
    gradual = TaikoGradualDifficulty(make_beatmap(hits('dkdd')))

    first = gradual.step()
    second = gradual.step()

    # the first two hits have no difficulty object
    assert first.stars == second.stars == 0
    assert (first.max_combo, second.max_combo) == (1, 2)


def test_gradual_skips_non_hits():
    objects = hits('dkdkdk')
    objects.insert(3, Spinner(
        Position(256, 192),
        timedelta(milliseconds=1400),
        0,
        timedelta(milliseconds=1420),
    ))
    gradual = TaikoGradualDifficulty(make_beatmap(objects))

    assert len(gradual) == 6
    assert [a.max_combo for a in gradual] == [1, 2, 3, 4, 5, 6]


@given(taiko_beatmaps(), mods())
@settings(max_examples=50, deadline=None)
def test_gradual_len(beatmap, mods):
    gradual = TaikoGradualDifficulty(beatmap, mods)

    objects = beatmap.hit_objects()
    expected = 0
    if len(objects) >= 2:
        expected = sum(
            TaikoObject.from_hit_object(ob).is_hit for ob in objects
        )
    assert len(gradual) == expected

    while len(gradual):
        before = len(gradual)
        assert gradual.step() is not None
        assert len(gradual) == before - 1

    assert gradual.step() is None


@given(all_hit_beatmaps, mods())
@settings(max_examples=50, deadline=None)
def test_gradual_matches_one_shot(beatmap, mods):
    attributes = list(TaikoGradualDifficulty(beatmap, mods))

    assert len(attributes) == len(beatmap.hit_objects())
    assert attributes[-1] == stars(beatmap, mods)


@given(all_hit_beatmaps, integers(0, 70))
@settings(max_examples=50, deadline=None)
def test_gradual_skip_matches_steps(beatmap, n):
    stepped = TaikoGradualDifficulty(beatmap)
    skipped = TaikoGradualDifficulty(beatmap)

    expected = None
    for _ in range(n):
        expected = stepped.step()

    assert skipped.skip(n) == expected
    assert len(skipped) == len(stepped)


def test_gradual_mods_string():
    beatmap = make_beatmap(hits('dkkddk'))
    first = list(TaikoGradualDifficulty(beatmap, 'HR'))
    second = list(TaikoGradualDifficulty(beatmap, Mods.coerce('HR')))
    assert first == second
