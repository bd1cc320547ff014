from collections import namedtuple
import logging
import math

from ..mod import Mods
from ..utils import weighted_accuracy
from .difficulty import OsuDifficultyAttributes, stars
from .hitresults import (
    complete_counts,
    effective_misses,
    solve_accuracy,
    trim_counts,
)

log = logging.getLogger(__name__)


class OsuScoreState(namedtuple(
        'OsuScoreState',
        'n300 n100 n50 misses accuracy total_hits effective_misses')):
    """The reconciled judgements of a play.

    Parameters
    ----------
    n300, n100, n50, misses : int
        The judgement counts.
    accuracy : float
        The accuracy of the counts in the range [0, 1].
    total_hits : int
        The number of judged objects.
    effective_misses : int or None
        The misses plus the estimated slider breaks. This is None until the
        difficulty attributes are known.
    """


class OsuPerformanceAttributes(namedtuple(
        'OsuPerformanceAttributes',
        [
            'attributes',
            'pp',
            'pp_aim',
            'pp_speed',
            'pp_acc',
            'pp_flashlight',
            'effective_misses',
        ])):
    """The result of a performance calculation.

    Parameters
    ----------
    attributes : OsuDifficultyAttributes
        The difficulty attributes used. These may be passed back to
        :class:`OsuPerformance` to skip recomputing them.
    pp : float
        The total performance value.
    pp_aim, pp_speed, pp_acc, pp_flashlight : float
        The per skill values.
    effective_misses : int
        The miss count used for the miss penalties.
    """
    @property
    def stars(self):
        return self.attributes.stars

    @property
    def max_combo(self):
        return self.attributes.max_combo


def no_fail_multiplier(effective_misses):
    """The global multiplier applied for the no fail mod.
    """
    return max(1 - 0.02 * effective_misses, 0.9)


def _base_value(rating):
    return (5 * max(rating / 0.0675, 1) - 4) ** 3 / 100000


def _length_bonus(total_hits):
    bonus = 0.95 + 0.4 * min(total_hits / 2000, 1)
    if total_hits > 2000:
        bonus += 0.5 * math.log10(total_hits / 2000)
    return bonus


def _miss_penalty(effective_misses, total_hits, exponent):
    base = max(
        1 - (effective_misses / max(total_hits, 1)) ** 0.775,
        0,
    )
    return 0.97 * base ** exponent


def _combo_scaling(combo, max_combo):
    if combo is None or max_combo <= 0:
        return 1.0
    return min((combo / max_combo) ** 0.8, 1.0)


def _ar_total_hits_factor(total_hits):
    return 1 / (1 + math.exp(-0.007 * (total_hits - 400)))


def aim_value(attributes, mods, state, combo=None):
    """The aim contribution of a play.

    Parameters
    ----------
    attributes : OsuDifficultyAttributes
        The difficulty of the map.
    mods : Mods
        The mods of the play.
    state : OsuScoreState
        The reconciled judgements, with ``effective_misses`` filled.
    combo : int, optional
        The highest combo of the play.

    Returns
    -------
    value : float
        The aim value.
    """
    total_hits = state.total_hits
    misses = state.effective_misses

    raw_aim = attributes.aim_strain
    if mods.touch_device:
        raw_aim **= 0.8

    value = _base_value(raw_aim)
    value *= _length_bonus(total_hits)

    if misses > 0:
        value *= _miss_penalty(misses, total_hits, misses)

    value *= _combo_scaling(combo, attributes.max_combo)

    ar = attributes.ar
    if ar > 10.33:
        ar_factor = ar - 10.33
    elif ar < 8:
        ar_factor = 0.025 * (8 - ar)
    else:
        ar_factor = 0.0

    ar_bonus = (
        1 + (0.03 + 0.37 * _ar_total_hits_factor(total_hits)) * ar_factor
    )

    if mods.hidden:
        value *= 1 + 0.04 * (12 - ar)

    value *= ar_bonus

    value *= 0.5 + state.accuracy / 2
    value *= 0.98 + attributes.od ** 2 / 2500
    return value


def speed_value(attributes, mods, state, combo=None):
    """The speed contribution of a play.

    See :func:`aim_value` for the parameters.
    """
    total_hits = state.total_hits
    misses = state.effective_misses

    value = _base_value(attributes.speed_strain)
    value *= _length_bonus(total_hits)

    if misses > 0:
        value *= _miss_penalty(misses, total_hits, misses ** 0.875)

    value *= _combo_scaling(combo, attributes.max_combo)

    ar = attributes.ar
    ar_factor = ar - 10.33 if ar > 10.33 else 0.0
    value *= (
        1 + (0.03 + 0.37 * _ar_total_hits_factor(total_hits)) * ar_factor
    )

    if mods.hidden:
        value *= 1 + 0.04 * (12 - ar)

    od = attributes.od
    od_factor = 0.95 + od ** 2 / 750
    accuracy_factor = state.accuracy ** ((14.5 - max(od, 8)) / 2)
    value *= od_factor * accuracy_factor

    # penalize 50s beyond one per 500 objects
    excess_50s = state.n50 - total_hits / 500
    if excess_50s >= 0:
        value *= 0.98 ** excess_50s

    return value


def accuracy_value(attributes, mods, state, combo=None):
    """The accuracy contribution of a play. This is 0 with relax.

    Only circles are judged on accuracy so the 300s are assumed to cover
    every slider and spinner first.
    """
    if mods.relax:
        return 0.0

    n_circles = attributes.n_circles
    if n_circles > 0:
        better_accuracy = max(
            (
                (state.n300 - (state.total_hits - n_circles)) * 6 +
                state.n100 * 2 +
                state.n50
            ) / (n_circles * 6),
            0,
        )
    else:
        better_accuracy = 0.0

    value = 1.52163 ** attributes.od * better_accuracy ** 24 * 2.83

    # bonus for many circles
    value *= min((n_circles / 1000) ** 0.3, 1.15)

    if mods.hidden:
        value *= 1.08

    if mods.flashlight:
        value *= 1.02

    return value


def flashlight_value(attributes, mods, state, combo=None):
    """The flashlight contribution of a play. This is 0 without flashlight.
    """
    if not mods.flashlight:
        return 0.0

    total_hits = state.total_hits
    misses = state.effective_misses

    raw_flashlight = attributes.flashlight_rating
    if mods.touch_device:
        raw_flashlight **= 0.8

    value = raw_flashlight ** 2 * 25

    if mods.hidden:
        value *= 1.3

    if misses > 0:
        value *= _miss_penalty(misses, total_hits, misses ** 0.875)

    value *= _combo_scaling(combo, attributes.max_combo)

    # short maps spend more of their time with a small flashlight radius
    length_factor = 0.7 + 0.1 * min(total_hits / 200, 1)
    if total_hits > 200:
        length_factor += 0.2 * min((total_hits - 200) / 200, 1)
    value *= length_factor

    value *= 0.5 + state.accuracy / 2
    value *= 0.98 + attributes.od ** 2 / 2500
    return value


def performance(attributes, mods, state, combo=None):
    """Combine the skill values of a play into its performance value.

    Parameters
    ----------
    attributes : OsuDifficultyAttributes
        The difficulty of the map for ``mods``.
    mods : int, str or Mods
        The mods of the play.
    state : OsuScoreState
        The reconciled judgements, with ``effective_misses`` filled.
    combo : int, optional
        The highest combo of the play.

    Returns
    -------
    performance : OsuPerformanceAttributes
        The total and per skill values.
    """
    mods = Mods.coerce(mods)
    multiplier = 1.12

    if mods.no_fail:
        multiplier *= no_fail_multiplier(state.effective_misses)

    if mods.spun_out and state.total_hits > 0:
        multiplier *= (
            1 - (attributes.n_spinners / state.total_hits) ** 0.85
        )

    if mods.relax:
        # every 100 and 50 is treated like a miss
        state = state._replace(
            effective_misses=state.effective_misses + state.n100 + state.n50,
        )
        multiplier *= 0.6

    aim = aim_value(attributes, mods, state, combo)
    speed = speed_value(attributes, mods, state, combo)
    accuracy = accuracy_value(attributes, mods, state, combo)
    flashlight = flashlight_value(attributes, mods, state, combo)

    pp = (
        aim ** 1.1 +
        speed ** 1.1 +
        accuracy ** 1.1 +
        flashlight ** 1.1
    ) ** (1 / 1.1) * multiplier

    return OsuPerformanceAttributes(
        attributes=attributes,
        pp=pp,
        pp_aim=aim,
        pp_speed=speed,
        pp_acc=accuracy,
        pp_flashlight=flashlight,
        effective_misses=state.effective_misses,
    )


class OsuPerformance(namedtuple(
        'OsuPerformance',
        [
            'mods',
            'combo',
            'accuracy',
            'n300',
            'n100',
            'n50',
            'misses',
            'passed_objects',
            'attributes',
        ])):
    """A request for the performance value of an osu! standard play.

    Parameters
    ----------
    mods : int, str or Mods, optional
        The mods of the play.
    combo : int, optional
        The highest combo of the play. Defaults to a full combo.
    accuracy : float, optional
        The accuracy of the play in the range [0, 100]. When given, the
        judgement counts are solved to reach it; ``n100`` and ``n50`` are
        kept fixed if given and ``n300`` is derived.
    n300, n100, n50 : int, optional
        Explicit judgement counts. Objects not covered by the counts are
        filled in, 300s first.
    misses : int, optional
        The number of misses.
    passed_objects : int, optional
        The number of objects played, for failed plays.
    attributes : OsuDifficultyAttributes or OsuPerformanceAttributes, optional
        Previously computed attributes for the same map and mods.

    Notes
    -----
    An ``OsuPerformance`` is an immutable value; use ``_replace`` to derive a
    new request. Nothing is computed until :meth:`finalize` or
    :meth:`calculate` is called.

    Examples
    --------
    >>> first = OsuPerformance(mods='HDDT', accuracy=98.5).calculate(beatmap)
    >>> second = OsuPerformance(
    ...     mods='HDDT',
    ...     accuracy=99.5,
    ...     attributes=first,
    ... ).calculate()
    """
    def __new__(cls,
                mods=0,
                combo=None,
                accuracy=None,
                n300=None,
                n100=None,
                n50=None,
                misses=0,
                passed_objects=None,
                attributes=None):
        if accuracy is not None and not 0 <= accuracy <= 100:
            raise ValueError(
                f'accuracy should be in the range [0, 100], got {accuracy!r}',
            )
        if combo is not None and combo < 0:
            raise ValueError(f'combo should be non-negative, got {combo!r}')
        if passed_objects is not None and passed_objects < 0:
            raise ValueError(
                'passed_objects should be non-negative, got'
                f' {passed_objects!r}',
            )

        if isinstance(attributes, OsuPerformanceAttributes):
            attributes = attributes.attributes
        if not (attributes is None or
                isinstance(attributes, OsuDifficultyAttributes)):
            raise TypeError(
                'attributes should be OsuDifficultyAttributes or'
                f' OsuPerformanceAttributes, got {attributes!r}',
            )

        return super().__new__(
            cls,
            Mods.coerce(mods),
            combo,
            accuracy,
            n300,
            n100,
            n50,
            misses,
            passed_objects,
            attributes,
        )

    def finalize(self, n_objects):
        """Reconcile the judgement counts against an object budget.

        Parameters
        ----------
        n_objects : int
            The number of objects in the map. ``passed_objects`` takes
            precedence when it is set.

        Returns
        -------
        state : OsuScoreState
            The judgements, which cover exactly the object budget. The
            ``effective_misses`` field is None.
        """
        if self.passed_objects is not None:
            n_objects = self.passed_objects

        if self.accuracy is not None:
            counts = solve_accuracy(
                n_objects,
                self.accuracy,
                self.misses,
                n100=self.n100,
                n50=self.n50,
            )
        else:
            counts = complete_counts(
                n_objects,
                self.n300,
                self.n100,
                self.n50,
                self.misses,
            )

        counts = trim_counts(counts, n_objects)
        return OsuScoreState(
            n300=counts.n300,
            n100=counts.n100,
            n50=counts.n50,
            misses=counts.misses,
            accuracy=weighted_accuracy(
                counts.n300,
                counts.n100,
                counts.n50,
                n_objects,
            ),
            total_hits=counts.total,
            effective_misses=None,
        )

    def difficulty(self, beatmap=None):
        """The difficulty attributes for this request.

        Parameters
        ----------
        beatmap : Beatmap, optional
            The map to rate. This may only be omitted when ``attributes`` was
            given.

        Returns
        -------
        attributes : OsuDifficultyAttributes
            The reused or freshly computed attributes.
        """
        if self.attributes is not None:
            return self.attributes

        if beatmap is None:
            raise ValueError('either a beatmap or attributes must be given')

        return stars(beatmap, self.mods, self.passed_objects)

    def calculate(self, beatmap=None):
        """Compute the performance value of this request.

        Parameters
        ----------
        beatmap : Beatmap, optional
            The map to rate. This may only be omitted when ``attributes`` was
            given.

        Returns
        -------
        performance : OsuPerformanceAttributes
            The total and per skill values.
        """
        attributes = self.difficulty(beatmap)
        state = self.finalize(attributes.n_objects)
        state = state._replace(effective_misses=effective_misses(
            attributes,
            self.combo,
            state.misses,
            state.total_hits,
        ))
        log.debug('reconciled %r into %r', self, state)
        return performance(attributes, self.mods, state, self.combo)


def performance_points(beatmap=None, **options):
    """Compute the performance value of a play on an osu! standard map.

    Parameters
    ----------
    beatmap : Beatmap, optional
        The map to rate.
    **options
        The fields of :class:`OsuPerformance`.

    Returns
    -------
    pp : float
        The performance value.
    """
    return OsuPerformance(**options).calculate(beatmap).pp
