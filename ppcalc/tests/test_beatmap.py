from datetime import timedelta

import pytest

import ppcalc.beatmap
from ppcalc.game_mode import GameMode
from ppcalc.mod import Mod
from ppcalc.position import Position


osu_text = """\
osu file format v14

[General]
AudioFilename: audio.mp3
Mode: 0

[Metadata]
Title:Example Song
Artist:Example Artist
Creator:mapper
Version:Hard

[Difficulty]
HPDrainRate:6
CircleSize:4
OverallDifficulty:8
ApproachRate:9
SliderMultiplier:1.4
SliderTickRate:1

[Events]
//Background and Video events
0,0,"bg.jpg",0,0

[TimingPoints]
0,500,4,2,1,60,1,0
2000,-50,4,2,1,60,0,1
4000,400,4,2,1,60,1,0

[HitObjects]
256,192,1000,1,0,0:0:0:0:
100,100,1500,6,2,L|300:100,1,200
256,192,2500,12,0,3500,0:0:0:0:
50,50,4500,1,8,0:0:0:0:
"""


@pytest.fixture
def beatmap():
    return ppcalc.beatmap.Beatmap.parse(osu_text)


def test_version(beatmap):
    assert beatmap.format_version == 14
    assert beatmap.mode == GameMode.osu


def test_display_name(beatmap):
    assert beatmap.display_name == 'Example Artist - Example Song [Hard]'


def test_parse_section_difficulty(beatmap):
    assert beatmap.hp_drain_rate == 6
    assert beatmap.circle_size == 4
    assert beatmap.overall_difficulty == 8
    assert beatmap.approach_rate == 9
    assert beatmap.slider_multiplier == 1.4
    assert beatmap.slider_tick_rate == 1


def test_parse_section_timing_points(beatmap):
    first, inherited, second = beatmap.timing_points

    assert first.offset == timedelta()
    assert first.ms_per_beat == 500
    assert first.bpm == 120
    assert not first.inherited

    assert inherited.parent is first
    assert inherited.beat_length == 500
    assert inherited.slider_velocity == 2
    assert inherited.kiai_mode

    assert second.bpm == 150
    assert not second.inherited


def test_parse_section_hit_objects(beatmap):
    circle, slider, spinner, rim = beatmap.hit_objects()

    assert isinstance(circle, ppcalc.beatmap.Circle)
    assert circle.position == Position(256, 192)
    assert circle.time == timedelta(milliseconds=1000)
    assert not circle.is_rim

    assert isinstance(slider, ppcalc.beatmap.Slider)
    assert slider.repeat == 1
    assert slider.length == 200
    assert slider.curve.points == [Position(100, 100), Position(300, 100)]

    assert isinstance(spinner, ppcalc.beatmap.Spinner)
    assert spinner.end_time == timedelta(milliseconds=3500)

    assert rim.is_rim


def test_hit_objects_filter(beatmap):
    assert len(beatmap.hit_objects(spinners=False)) == 3
    assert len(beatmap.hit_objects(circles=False, sliders=False)) == 1


def test_timing_point_at(beatmap):
    first, inherited, second = beatmap.timing_points

    assert beatmap.timing_point_at(timedelta(milliseconds=2500)) is first
    assert beatmap.timing_point_at(timedelta(milliseconds=4000)) is second
    # before the first timing point the first one is used
    assert beatmap.timing_point_at(timedelta(milliseconds=-100)) is first


def test_difficulty_point_at(beatmap):
    _, inherited, _ = beatmap.timing_points

    assert beatmap.difficulty_point_at(timedelta(milliseconds=1000)) is None
    assert beatmap.difficulty_point_at(
        timedelta(milliseconds=3000),
    ) is inherited
    assert beatmap.difficulty_point_at(timedelta(milliseconds=4500)) is None


def test_timing_point_lookups_cached(beatmap):
    uninherited, offsets = beatmap._uninherited_timing_points
    assert beatmap._uninherited_timing_points is \
        beatmap._uninherited_timing_points
    assert offsets == sorted(offsets)
    assert all(not tp.inherited for tp in uninherited)

    # repeated lookups give the same answers from the cached offsets
    for _ in range(2):
        assert beatmap.timing_point_at(
            timedelta(milliseconds=4000),
        ) is uninherited[-1]
        assert beatmap.difficulty_point_at(
            timedelta(milliseconds=3000),
        ) is beatmap.timing_points[1]


def test_ar(beatmap):
    assert beatmap.ar() == 9
    assert beatmap.ar(Mod.hard_rock) == 10
    assert beatmap.ar(Mod.easy) == 4.5
    assert beatmap.ar(Mod.double_time) == pytest.approx(10.33, abs=0.01)
    assert beatmap.ar('HT') < 9


def test_cs(beatmap):
    assert beatmap.cs() == 4
    assert beatmap.cs(Mod.hard_rock) == pytest.approx(5.2)
    assert beatmap.cs(Mod.easy) == 2


def test_hp(beatmap):
    assert beatmap.hp() == 6
    assert beatmap.hp(Mod.hard_rock) == pytest.approx(8.4)
    assert beatmap.hp(Mod.easy) == 3


def test_od(beatmap):
    assert beatmap.od() == 8
    assert beatmap.od(Mod.hard_rock) == 10
    assert beatmap.od(Mod.double_time) > 8
    assert beatmap.od(Mod.double_time, adjust_clock_rate=False) == 8


def test_parse_missing_version():
    with pytest.raises(ValueError):
        ppcalc.beatmap.Beatmap.parse('[General]\nMode: 0\n')


@pytest.mark.parametrize('line', [
    '256,192',
    'x,192,1000,1,0',
    '256,192,1000,0,0',
    '256,192,1000,2,0,L|300:100,x,200',
    '256,192,1000,2,0,L|300-100,1,200',
])
def test_parse_invalid_hit_object(line):
    with pytest.raises(ValueError):
        ppcalc.beatmap.HitObject.parse(line)


def test_parse_invalid_difficulty():
    text = osu_text.replace('CircleSize:4', 'CircleSize:big')
    with pytest.raises(ValueError, match='CircleSize'):
        ppcalc.beatmap.Beatmap.parse(text)


def test_ar_defaults_to_od():
    text = osu_text.replace('ApproachRate:9\n', '')
    assert ppcalc.beatmap.Beatmap.parse(text).approach_rate == 8


def test_from_path(tmp_path, beatmap):
    path = tmp_path / 'map.osu'
    path.write_text(osu_text, encoding='utf-8')
    assert ppcalc.beatmap.Beatmap.from_path(path).display_name == (
        beatmap.display_name
    )
