"""Turning partial score information into a complete set of judgements.
"""
from collections import namedtuple
import math

from ..utils import round_half_up


class JudgementCounts(namedtuple('JudgementCounts', 'n300 n100 n50 misses')):
    """The judgements of a play.

    Parameters
    ----------
    n300, n100, n50 : int
        The hit counts per judgement.
    misses : int
        The number of misses.
    """
    @property
    def total(self):
        return self.n300 + self.n100 + self.n50 + self.misses

    @property
    def points(self):
        """The weighted points where a 300 is worth 6, a 100 is worth 2 and a
        50 is worth 1.
        """
        return 6 * self.n300 + 2 * self.n100 + self.n50


def _check_count(name, value):
    if value is None:
        return
    if not isinstance(value, int):
        raise TypeError(f'{name} should be an int, got {value!r}')
    if value < 0:
        raise ValueError(f'{name} should be non-negative, got {value!r}')


def _target_points(accuracy, n_objects, misses):
    target = round_half_up(accuracy / 100 * n_objects * 6)
    # every non-missed object is worth between 1 and 6 points
    hit = n_objects - misses
    return min(max(target, hit), 6 * hit)


def solve_accuracy(n_objects, accuracy, misses=0, n100=None, n50=None):
    """Find judgement counts which reach a target accuracy.

    Parameters
    ----------
    n_objects : int
        The number of objects the judgements are spread over.
    accuracy : float
        The target accuracy in the range [0, 100].
    misses : int, optional
        The number of misses.
    n100 : int, optional
        A fixed number of 100s.
    n50 : int, optional
        A fixed number of 50s.

    Returns
    -------
    counts : JudgementCounts
        The judgements. The accuracy of these counts is the closest integer
        solution found, not necessarily ``accuracy`` exactly.

    Notes
    -----
    When neither ``n100`` nor ``n50`` is given the solution uses as few 50s as
    possible: blocks of four 50s and one 300 are worth exactly as much as five
    100s.

    When only ``n50`` is given, 50s added to fill the object budget are moved
    back onto 100s the same way so that the result stays close to the given
    ``n50``.
    """
    for name, value in (('n_objects', n_objects),
                        ('misses', misses),
                        ('n100', n100),
                        ('n50', n50)):
        _check_count(name, value)

    misses = min(misses, n_objects)

    if n100 is None and n50 is None:
        target = _target_points(accuracy, n_objects, misses)
        delta = target - (n_objects - misses)

        n300 = delta // 5
        n100 = min(delta % 5, n_objects - n300 - misses)
        n50 = n_objects - n300 - n100 - misses

        # trade a 300 and four 50s for five 100s
        n = min(n300, n50 // 4)
        n300 -= n
        n100 += 5 * n
        n50 -= 4 * n

        return JudgementCounts(n300, n100, n50, misses)

    original_n50 = n50 if n100 is None else None
    n100 = n100 or 0
    n50 = n50 or 0

    placed_points = 2 * n100 + n50 + misses
    missing_objects = max(n_objects - n100 - n50 - misses, 0)
    missing_points = max(
        round_half_up(6 * accuracy / 100 * n_objects) - placed_points,
        0,
    )

    n300 = min(missing_objects, missing_points // 6)
    n50 += missing_objects - n300

    if original_n50 is not None:
        n = min(n300, (n50 - original_n50) // 4)
        n300 -= n
        n100 += 5 * n
        n50 -= 4 * n

    return JudgementCounts(n300, n100, n50, misses)


def complete_counts(n_objects, n300=None, n100=None, n50=None, misses=0):
    """Fill any objects not covered by the given judgements.

    Parameters
    ----------
    n_objects : int
        The number of objects the judgements are spread over.
    n300, n100, n50 : int, optional
        The given judgement counts.
    misses : int, optional
        The number of misses.

    Returns
    -------
    counts : JudgementCounts
        The judgements. The shortfall goes to the first of n300, n100, n50
        which was not given, or onto n300 when all three were given.
    """
    for name, value in (('n_objects', n_objects),
                        ('n300', n300),
                        ('n100', n100),
                        ('n50', n50),
                        ('misses', misses)):
        _check_count(name, value)

    remaining = max(
        n_objects - (n300 or 0) - (n100 or 0) - (n50 or 0) - misses,
        0,
    )

    if remaining:
        if n300 is None:
            n300 = remaining
        elif n100 is None:
            n100 = remaining
        elif n50 is None:
            n50 = remaining
        else:
            n300 += remaining

    return JudgementCounts(n300 or 0, n100 or 0, n50 or 0, misses)


def trim_counts(counts, n_objects):
    """Clamp judgements to an object budget.

    Parameters
    ----------
    counts : JudgementCounts
        The judgements to trim.
    n_objects : int
        The budget.

    Returns
    -------
    trimmed : JudgementCounts
        The judgements with the excess taken from the 50s first, then the
        100s, then the 300s. Misses are only clamped to the budget.
    """
    misses = min(counts.misses, n_objects)
    excess = counts.total - counts.misses + misses - n_objects

    n300, n100, n50 = counts.n300, counts.n100, counts.n50
    if excess > 0:
        dropped = min(n50, excess)
        n50 -= dropped
        excess -= dropped

        dropped = min(n100, excess)
        n100 -= dropped
        excess -= dropped

        n300 -= min(n300, excess)

    return JudgementCounts(n300, n100, n50, misses)


def effective_misses(attributes, combo, misses, total_hits):
    """Estimate the number of combo breaks in a play.

    Slider breaks drop combo without being counted as misses, so a play which
    falls short of the full combo is assumed to have broken combo about
    ``threshold / combo`` times.

    Parameters
    ----------
    attributes : OsuDifficultyAttributes
        The difficulty of the map; ``max_combo`` and ``n_sliders`` are read.
    combo : int or None
        The highest combo of the play, if known.
    misses : int
        The reported misses.
    total_hits : int
        The number of judged objects; the estimate never exceeds this.

    Returns
    -------
    effective_misses : int
        The larger of ``misses`` and the combo based estimate.
    """
    combo_based_misses = 0.0

    if attributes.n_sliders > 0 and combo is not None:
        full_combo_threshold = (
            attributes.max_combo - 0.1 * attributes.n_sliders
        )
        if combo < full_combo_threshold:
            combo_based_misses = full_combo_threshold / max(combo, 1)

    combo_based_misses = min(combo_based_misses, total_hits)
    return max(misses, math.floor(combo_based_misses))
