from .bit_enum import BitEnum


class Mod(BitEnum):
    """The mods in osu!
    """
    no_fail = 1
    easy = 1 << 1
    touch_device = 1 << 2  # used to be no_video
    hidden = 1 << 3
    hard_rock = 1 << 4
    sudden_death = 1 << 5
    double_time = 1 << 6
    relax = 1 << 7
    half_time = 1 << 8
    nightcore = 1 << 9  # always used with double_time
    flashlight = 1 << 10
    autoplay = 1 << 11
    spun_out = 1 << 12
    auto_pilot = 1 << 13
    perfect = 1 << 14
    fade_in = 1 << 20
    cinema = 1 << 22
    scoreV2 = 1 << 29

    @classmethod
    def parse(cls, cs):
        """Parse a mod mask out of a list of shortened mod names.

        Parameters
        ----------
        cs : str
            The mod string, for example ``'HDDT'``.

        Returns
        -------
        mod_mask : int
            The mod mask.
        """
        if len(cs) % 2 != 0:
            raise ValueError(f'malformed mods: {cs!r}')

        cs = cs.lower()
        mapping = {
            'nf': cls.no_fail,
            'ez': cls.easy,
            'td': cls.touch_device,
            'hd': cls.hidden,
            'hr': cls.hard_rock,
            'sd': cls.sudden_death,
            'dt': cls.double_time,
            'rx': cls.relax,
            'ht': cls.half_time,
            'nc': cls.nightcore | cls.double_time,
            'fl': cls.flashlight,
            'so': cls.spun_out,
            'ap': cls.auto_pilot,
            'pf': cls.perfect | cls.sudden_death,
        }

        mod = 0
        for n in range(0, len(cs), 2):
            try:
                mod |= mapping[cs[n:n + 2]]
            except KeyError:
                raise ValueError(f'unknown mod: {cs[n:n + 2]!r}')

        return mod


class Mods:
    """Read-only capability queries over a mod bitmask.

    Parameters
    ----------
    mask : int or Mods, optional
        The mod bitmask.

    Notes
    -----
    The calculators only ever ask questions of a ``Mods`` value; nothing
    mutates it once built.
    """
    __slots__ = ('_mask',)

    def __init__(self, mask=0):
        if isinstance(mask, Mods):
            mask = mask.mask
        if mask < 0:
            raise ValueError(f'mod mask must be non-negative, got {mask!r}')
        object.__setattr__(self, '_mask', int(mask))

    def __setattr__(self, name, value):
        raise AttributeError(f'{type(self).__qualname__} is immutable')

    @classmethod
    def coerce(cls, value):
        """Build a ``Mods`` from an int mask, an acronym string, or another
        ``Mods``.
        """
        if isinstance(value, str):
            return cls(Mod.parse(value))
        return cls(value)

    @property
    def mask(self):
        return self._mask

    def _has(self, mod):
        return bool(self._mask & mod)

    @property
    def no_fail(self):
        return self._has(Mod.no_fail)

    @property
    def easy(self):
        return self._has(Mod.easy)

    @property
    def touch_device(self):
        return self._has(Mod.touch_device)

    @property
    def hidden(self):
        return self._has(Mod.hidden)

    @property
    def hard_rock(self):
        return self._has(Mod.hard_rock)

    @property
    def double_time(self):
        return self._has(Mod.double_time) or self._has(Mod.nightcore)

    @property
    def relax(self):
        return self._has(Mod.relax)

    @property
    def half_time(self):
        return self._has(Mod.half_time)

    @property
    def flashlight(self):
        return self._has(Mod.flashlight)

    @property
    def spun_out(self):
        return self._has(Mod.spun_out)

    @property
    def clock_rate(self):
        """The speed multiplier the mods apply to the map's audio.
        """
        if self.double_time:
            return 1.5
        if self.half_time:
            return 0.75
        return 1.0

    def __int__(self):
        return self._mask

    def __eq__(self, other):
        if isinstance(other, Mods):
            return self._mask == other._mask
        if isinstance(other, int):
            return self._mask == other
        return NotImplemented

    def __hash__(self):
        return hash(self._mask)

    def __repr__(self):
        names = ''.join(
            f' {name}' for name in Mod.names(self._mask)
        )
        return f'<{type(self).__qualname__}:{names or " none"}>'


def ar_to_ms(ar):
    """Convert an approach rate value to milliseconds of time that an element
    appears on the screen before being hit.

    Parameters
    ----------
    ar : float
        The approach rate.

    Returns
    -------
    milliseconds : float
        The number of milliseconds that an element appears on the screen before
         being hit at the given approach rate.

    See Also
    --------
    :func:`ppcalc.mod.ms_to_ar`
    """
    # NOTE: The formula for ar_to_ms is different for ar >= 5 and ar < 5
    # see: https://osu.ppy.sh/wiki/Song_Setup#Approach_Rate
    if ar >= 5:
        return 1950 - (ar * 150)
    else:
        return 1800 - (ar * 120)


def ms_to_ar(ms):
    """Convert milliseconds to hit an element into an approach rate value.

    Parameters
    ----------
    ms : float
        The number of milliseconds that an element appears on the screen before
        being hit.

    Returns
    -------
    ar : float
        The approach rate value that produces the given millisecond value.

    See Also
    --------
    :func:`ppcalc.mod.ar_to_ms`
    """
    ar = (ms - 1950) / -150
    if ar < 5:
        # the ar lines cross at 5 but we use a different formula for the slower
        # approach rates.
        return (ms - 1800) / -120
    return ar


def circle_radius(cs):
    """Compute the ``CS`` attribute into a circle radius in osu! pixels.

    Parameters
    ----------
    cs : float
        The circle size.

    Returns
    -------
    radius : float
        The radius in osu! pixels.
    """
    return (512 / 16) * (1 - 0.7 * (cs - 5) / 5)


def od_to_ms_300(od):
    """Convert an overall difficulty value into milliseconds to hit an object
    at maximum accuracy.

    See Also
    --------
    :func:`ppcalc.mod.ms_300_to_od`
    """
    return 79.5 - 6 * od


def ms_300_to_od(ms):
    """Convert the milliseconds to score a 300 into an OD value.

    See Also
    --------
    :func:`ppcalc.mod.od_to_ms_300`
    """
    return (ms - 79.5) / -6


def od_to_taiko_great(od):
    """The osu!taiko great (300) hit window in milliseconds.

    Parameters
    ----------
    od : float
        The overall difficulty.

    Returns
    -------
    ms : float
        The great hit window. 50ms at OD 0, 35ms at OD 5 and 20ms at OD 10.
    """
    return 50 - 3 * od
