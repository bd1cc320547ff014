import math

from hypothesis import given, settings
from hypothesis.strategies import integers
import pytest

from ppcalc.mod import Mod, Mods
from ppcalc.osu import (
    OsuDifficultyAttributes,
    OsuPerformance,
    OsuPerformanceAttributes,
    performance_points,
    stars,
)
from ppcalc.osu.performance import (
    OsuScoreState,
    accuracy_value,
    aim_value,
    flashlight_value,
    no_fail_multiplier,
    performance,
    speed_value,
)
from ppcalc.strategies import accuracies, beatmaps, mods


@pytest.fixture
def attributes():
    return OsuDifficultyAttributes(
        aim_strain=2.8,
        speed_strain=2.4,
        flashlight_rating=2.1,
        ar=9.3,
        od=8.5,
        hp=5,
        n_circles=800,
        n_sliders=400,
        n_spinners=34,
        stars=5.8,
        max_combo=1700,
    )


def test_no_fail_multiplier():
    assert no_fail_multiplier(0) == 1
    assert no_fail_multiplier(2) == pytest.approx(0.96)
    assert no_fail_multiplier(5) == pytest.approx(0.9)
    assert no_fail_multiplier(50) == 0.9


def test_finalize_accuracy():
    state = OsuPerformance(accuracy=97.5).finalize(1234)

    assert (state.n300, state.n100, state.n50, state.misses) == (
        1188,
        45,
        1,
        0,
    )
    assert state.total_hits == 1234
    assert state.accuracy == pytest.approx(0.975, abs=1e-4)
    assert state.effective_misses is None


def test_finalize_counts():
    state = OsuPerformance(n300=1200, n100=20, n50=10).finalize(1234)
    assert (state.n300, state.n100, state.n50, state.misses) == (
        1204,
        20,
        10,
        0,
    )


def test_finalize_passed_objects():
    state = OsuPerformance(
        n300=500,
        misses=3,
        passed_objects=100,
    ).finalize(1234)

    assert state.total_hits == 100
    assert state.misses == 3
    assert state.n300 == 97


@pytest.mark.parametrize('kwargs', [
    {'accuracy': 100.5},
    {'accuracy': -1},
    {'combo': -1},
    {'passed_objects': -10},
])
def test_invalid_request(kwargs):
    with pytest.raises(ValueError):
        OsuPerformance(**kwargs)


def test_invalid_attributes():
    with pytest.raises(TypeError):
        OsuPerformance(attributes={'stars': 5})


def test_missing_beatmap():
    with pytest.raises(ValueError):
        OsuPerformance(accuracy=99).calculate()


def test_mods_are_coerced():
    assert OsuPerformance(mods='HDDT').mods == Mod.hidden | Mod.double_time


def test_calculate(attributes):
    result = OsuPerformance(
        mods='HD',
        accuracy=98,
        combo=1650,
        attributes=attributes,
    ).calculate()

    assert isinstance(result, OsuPerformanceAttributes)
    assert result.attributes is attributes
    assert result.stars == attributes.stars
    assert result.max_combo == attributes.max_combo
    assert result.pp > 0
    assert result.pp_flashlight == 0

    skill_norm = (
        result.pp_aim ** 1.1 +
        result.pp_speed ** 1.1 +
        result.pp_acc ** 1.1
    ) ** (1 / 1.1)
    assert result.pp == pytest.approx(skill_norm * 1.12)


def test_reuse_performance_attributes(attributes):
    request = OsuPerformance(accuracy=99, attributes=attributes)
    first = request.calculate()
    second = OsuPerformance(accuracy=99, attributes=first).calculate()

    assert first == second


def test_misses_lower_pp(attributes):
    clean = OsuPerformance(attributes=attributes).calculate()
    missed = OsuPerformance(misses=10, attributes=attributes).calculate()

    assert missed.effective_misses == 10
    assert missed.pp < clean.pp


def test_no_fail(attributes):
    base = OsuPerformance(misses=5, attributes=attributes).calculate()
    no_fail = OsuPerformance(
        mods='NF',
        misses=5,
        attributes=attributes,
    ).calculate()

    assert no_fail.pp == pytest.approx(base.pp * 0.9)


def test_relax_counts_misses(attributes):
    result = OsuPerformance(
        mods='RX',
        n100=20,
        n50=5,
        misses=2,
        attributes=attributes,
    ).calculate()

    assert result.effective_misses == 27
    assert result.pp_acc == 0


@given(mods(), accuracies(), integers(0, 100))
def test_skill_values_follow_mods(mods, accuracy, misses):
    attributes = OsuDifficultyAttributes(
        aim_strain=2.8,
        speed_strain=2.4,
        flashlight_rating=2.1,
        ar=9.3,
        od=8.5,
        hp=5,
        n_circles=800,
        n_sliders=400,
        n_spinners=34,
        stars=5.8,
        max_combo=1700,
    )
    result = OsuPerformance(
        mods=mods,
        accuracy=accuracy,
        misses=misses,
        attributes=attributes,
    ).calculate()

    assert math.isfinite(result.pp)
    assert result.pp >= 0

    if mods & Mod.relax:
        assert result.pp_acc == 0
    if not mods & Mod.flashlight:
        assert result.pp_flashlight == 0


@given(beatmaps(min_size=2), mods(), accuracies())
@settings(max_examples=25, deadline=None)
def test_beatmap_round_trip(beatmap, mods, accuracy):
    result = OsuPerformance(mods=mods, accuracy=accuracy).calculate(beatmap)

    assert result.attributes == stars(beatmap, mods)
    assert math.isfinite(result.pp)

    reused = OsuPerformance(
        mods=mods,
        accuracy=accuracy,
        attributes=result,
    ).calculate()
    assert reused == result

    assert performance_points(
        beatmap,
        mods=mods,
        accuracy=accuracy,
    ) == result.pp


def flat_attributes(**kwargs):
    """Attributes which leave every map dependent factor at 1 except the OD
    factors.
    """
    fields = dict(
        aim_strain=1.35,
        speed_strain=1.35,
        flashlight_rating=2.0,
        ar=9,
        od=10,
        hp=5,
        n_circles=2000,
        n_sliders=0,
        n_spinners=0,
        stars=2.7,
        max_combo=2000,
    )
    fields.update(kwargs)
    return OsuDifficultyAttributes(**fields)


def score_state(total_hits=2000, n50=0, misses=0, accuracy=1.0):
    return OsuScoreState(
        n300=total_hits - n50 - misses,
        n100=0,
        n50=n50,
        misses=misses,
        accuracy=accuracy,
        total_hits=total_hits,
        effective_misses=misses,
    )


def test_aim_value():
    # (5 * 20 - 4) ** 3 / 100000 with the full length bonus of 1.35 and an
    # OD factor of 1.02
    assert aim_value(
        flat_attributes(),
        Mods(),
        score_state(),
    ) == pytest.approx(12.18281, rel=1e-5)

    # 0.97 * (1 - (4 / 2000) ** 0.775) ** 4
    assert aim_value(
        flat_attributes(),
        Mods(),
        score_state(misses=4),
    ) == pytest.approx(11.43923, rel=1e-4)


def test_aim_combo_scaling():
    full = aim_value(flat_attributes(), Mods(), score_state())
    half = aim_value(flat_attributes(), Mods(), score_state(), combo=1000)
    assert half / full == pytest.approx(0.5 ** 0.8)


def test_aim_touch_device():
    dampened = aim_value(
        flat_attributes(),
        Mods(Mod.touch_device),
        score_state(),
    )
    expected = aim_value(
        flat_attributes(aim_strain=1.35 ** 0.8),
        Mods(),
        score_state(),
    )
    assert dampened == pytest.approx(expected)


@pytest.mark.parametrize('ar,bonus', [
    # the taper is exactly one half at 400 objects
    (11, 1 + (0.03 + 0.37 * 0.5) * 0.67),
    (7, 1 + (0.03 + 0.37 * 0.5) * 0.025),
    (9, 1),
])
def test_aim_ar_factor(ar, bonus):
    state = score_state(total_hits=400)
    base = aim_value(flat_attributes(ar=9), Mods(), state)
    value = aim_value(flat_attributes(ar=ar), Mods(), state)
    assert value / base == pytest.approx(bonus)


@pytest.mark.parametrize('ar,bonus', [
    (11, 1 + (0.03 + 0.37 * 0.5) * 0.67),
    # low AR only helps aim
    (7, 1),
])
def test_speed_ar_factor(ar, bonus):
    state = score_state(total_hits=400)
    base = speed_value(flat_attributes(ar=9), Mods(), state)
    value = speed_value(flat_attributes(ar=ar), Mods(), state)
    assert value / base == pytest.approx(bonus)


@pytest.mark.parametrize('value_of', [aim_value, speed_value])
def test_hidden_bonus(value_of):
    attributes = flat_attributes(ar=9.5)
    hidden = value_of(attributes, Mods(Mod.hidden), score_state())
    nomod = value_of(attributes, Mods(), score_state())
    assert hidden / nomod == pytest.approx(1.1)


def test_speed_excess_50s():
    # one 50 per 500 objects is free
    free = speed_value(flat_attributes(), Mods(), score_state(n50=0))
    assert speed_value(
        flat_attributes(),
        Mods(),
        score_state(n50=4),
    ) == pytest.approx(free)
    assert speed_value(
        flat_attributes(),
        Mods(),
        score_state(n50=5),
    ) == pytest.approx(free * 0.98)
    assert speed_value(
        flat_attributes(),
        Mods(),
        score_state(n50=14),
    ) == pytest.approx(free * 0.817073, rel=1e-5)


def test_accuracy_value():
    # 1.52163 ** 8 * 2.83 with the capped circle bonus
    attributes = flat_attributes(od=8)
    assert accuracy_value(
        attributes,
        Mods(),
        score_state(),
    ) == pytest.approx(93.531, rel=1e-3)

    few_circles = accuracy_value(
        flat_attributes(od=8, n_circles=500),
        Mods(),
        score_state(),
    )
    assert few_circles == pytest.approx(93.531 * 0.5 ** 0.3 / 1.15, rel=1e-3)


@pytest.mark.parametrize('mods,factor', [
    ('HD', 1.08),
    ('FL', 1.02),
    ('HDFL', 1.08 * 1.02),
])
def test_accuracy_value_mods(mods, factor):
    nomod = accuracy_value(flat_attributes(), Mods(), score_state())
    value = accuracy_value(
        flat_attributes(),
        Mods.coerce(mods),
        score_state(),
    )
    assert value == pytest.approx(nomod * factor)


@pytest.mark.parametrize('total_hits,value', [
    (100, 0.75 * 102),
    (200, 0.8 * 102),
    (300, 0.9 * 102),
    (2000, 102),
])
def test_flashlight_length(total_hits, value):
    # 2 ** 2 * 25 with an OD factor of 1.02
    assert flashlight_value(
        flat_attributes(),
        Mods(Mod.flashlight),
        score_state(total_hits=total_hits),
    ) == pytest.approx(value)


def test_flashlight_misses():
    # the miss penalty uses misses ** 0.875 as its exponent:
    # 102 * 0.97 * (1 - (4 / 2000) ** 0.775) ** (4 ** 0.875)
    assert flashlight_value(
        flat_attributes(),
        Mods(Mod.flashlight),
        score_state(misses=4),
    ) == pytest.approx(96.2712, rel=1e-4)


def test_flashlight_hidden_touch_device():
    nomod = flashlight_value(
        flat_attributes(),
        Mods(Mod.flashlight),
        score_state(),
    )
    hidden = flashlight_value(
        flat_attributes(),
        Mods.coerce('HDFL'),
        score_state(),
    )
    touch_device = flashlight_value(
        flat_attributes(),
        Mods.coerce('TDFL'),
        score_state(),
    )

    assert hidden == pytest.approx(nomod * 1.3)
    # 2 ** 0.8 squared
    assert touch_device == pytest.approx(nomod * 2 ** 1.6 / 4)


def test_spun_out():
    attributes = flat_attributes(n_spinners=34)
    state = score_state()

    nomod = performance(attributes, 0, state)
    spun_out = performance(attributes, Mod.spun_out, state)

    # 1 - (34 / 2000) ** 0.85
    assert spun_out.pp / nomod.pp == pytest.approx(0.968676, rel=1e-4)
    assert spun_out.pp_aim == nomod.pp_aim
