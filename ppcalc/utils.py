import math


class lazyval:
    """Decorator to lazily compute and cache a value.
    """
    def __init__(self, fget):
        self._fget = fget
        self._name = None

    def __set_name__(self, owner, name):
        self._name = name

    def __get__(self, instance, owner):
        if instance is None:
            return self

        value = self._fget(instance)
        vars(instance)[self._name] = value
        return value


class no_default:
    """Sentinel type; this should not be instantiated.

    This type is used so functions can tell the difference between no argument
    passed and an explicit value passed even if ``None`` is a valid value.

    Notes
    -----
    This is implemented as a type to make functions which use this as a default
    argument serializable.
    """
    def __new__(cls):
        raise TypeError('cannot create instances of sentinel type')


def accuracy(count_300, count_100, count_50, count_miss):
    """Calculate osu! standard accuracy from discrete hit counts.

    Parameters
    ----------
    count_300 : int
        The number of 300's hit.
    count_100 : int
        The number of 100's hit.
    count_50 : int
        The number of 50's hit.
    count_miss : int
        The number of misses

    Returns
    -------
    accuracy : float
        The accuracy in the range [0, 1]. A play with no judgements has an
        accuracy of 0.
    """
    total_hits = count_300 + count_100 + count_50 + count_miss
    return weighted_accuracy(count_300, count_100, count_50, total_hits)


def weighted_accuracy(count_300, count_100, count_50, n_objects):
    """Accuracy over an object budget using the 6/2/1 point weights.

    Parameters
    ----------
    count_300, count_100, count_50 : int
        The judgement counts.
    n_objects : int
        The number of objects the counts are spread over.

    Returns
    -------
    accuracy : float
        ``(6 * count_300 + 2 * count_100 + count_50) / (6 * n_objects)``, or
        0 when ``n_objects`` is 0.
    """
    if n_objects <= 0:
        return 0.0
    points = 6 * count_300 + 2 * count_100 + count_50
    return points / (6 * n_objects)


def round_half_up(value):
    """Round a non-negative float to the nearest int, ties away from zero.

    The builtin ``round`` rounds ties to even which would move accuracy
    targets that land exactly on ``.5``.
    """
    return int(math.floor(value + 0.5))


def norm(p, *values):
    """The ``p``-norm of ``values``.
    """
    return sum(v ** p for v in values) ** (1 / p)
