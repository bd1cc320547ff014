from bisect import bisect_right
from datetime import timedelta
import logging
import re

from .curve import Curve
from .game_mode import GameMode
from .mod import Mods, ar_to_ms, ms_to_ar, od_to_ms_300, ms_300_to_od
from .position import Position
from .utils import lazyval, no_default

log = logging.getLogger(__name__)


def _get(cs, ix, default=no_default):
    try:
        return cs[ix]
    except IndexError:
        if default is no_default:
            raise
        return default


class TimingPoint:
    """A timing point assigns properties to an offset into a beatmap.

    Parameters
    ----------
    offset : timedelta
        When this ``TimingPoint`` takes effect.
    ms_per_beat : float
        The milliseconds per beat, this is another representation of BPM.
        Inherited timing points store ``-100 / slider_velocity`` here.
    meter : int
        The number of beats per measure.
    parent : TimingPoint or None
        The parent of an inherited timing point. If this is not an inherited
        timing point the parent should be ``None``.
    kiai_mode : bool
        Whether or not kiai time effects are active.
    """
    def __init__(self, offset, ms_per_beat, meter, parent, kiai_mode=False):
        self.offset = offset
        self.ms_per_beat = ms_per_beat
        self.meter = meter
        self.parent = parent
        self.kiai_mode = kiai_mode

    @property
    def inherited(self):
        return self.parent is not None

    @property
    def beat_length(self):
        """The milliseconds per beat in effect at this point.
        """
        if self.inherited:
            return self.parent.ms_per_beat
        return self.ms_per_beat

    @property
    def slider_velocity(self):
        """The slider velocity multiplier in the range [0.1, 10].

        Uninherited timing points do not change the slider velocity.
        """
        if not self.inherited or self.ms_per_beat >= 0:
            return 1.0
        return min(max(-100 / self.ms_per_beat, 0.1), 10.0)

    @property
    def bpm(self):
        """The bpm of this timing point, or None for inherited points.
        """
        if self.inherited:
            return None
        return round(60000 / self.ms_per_beat)

    def __repr__(self):
        inherited = 'inherited ' if self.inherited else ''
        return (
            f'<{type(self).__qualname__}:'
            f' {inherited}{self.offset.total_seconds() * 1000:g}ms>'
        )

    @classmethod
    def parse(cls, data, parent):
        """Parse a TimingPoint object from a line in a ``.osu`` file.

        Parameters
        ----------
        data : str
            The line to parse.
        parent : TimingPoint or None
            The last non-inherited timing point.

        Returns
        -------
        timing_point : TimingPoint
            The parsed timing point.

        Raises
        ------
        ValueError
            Raised when ``data`` does not describe a ``TimingPoint`` object.
        """
        try:
            offset, ms_per_beat, *rest = data.split(',')
        except ValueError:
            raise ValueError(
                f'failed to parse {cls.__qualname__} from {data!r}',
            )

        try:
            offset = timedelta(milliseconds=float(offset))
        except ValueError:
            raise ValueError(f'offset should be a float, got {offset!r}')

        try:
            ms_per_beat = float(ms_per_beat)
        except ValueError:
            raise ValueError(
                f'ms_per_beat should be a float, got {ms_per_beat!r}',
            )

        raw_meter = _get(rest, 0, '4')
        try:
            meter = int(raw_meter)
        except ValueError:
            raise ValueError(f'meter should be an int, got {raw_meter!r}')

        raw_uninherited = _get(rest, 4, '1')
        try:
            inherited = not bool(int(raw_uninherited))
        except ValueError:
            raise ValueError(
                f'uninherited should be a bool, got {raw_uninherited!r}',
            )

        raw_kiai = _get(rest, 5, '0')
        try:
            kiai_mode = bool(int(raw_kiai) & 1)
        except ValueError:
            raise ValueError(f'kiai_mode should be a bool, got {raw_kiai!r}')

        # very old maps only mark inherited points with a negative beat length
        inherited = (inherited or ms_per_beat < 0) and parent is not None

        return cls(
            offset=offset,
            ms_per_beat=ms_per_beat,
            meter=meter,
            parent=parent if inherited else None,
            kiai_mode=kiai_mode,
        )


class HitObject:
    """An abstract hit element.

    Parameters
    ----------
    position : Position
        Where this element appears on the screen.
    time : timedelta
        When this element appears in the map.
    hitsound : int
        The hitsound bitmask to play when this object is hit.
    """
    whistle = 1 << 1
    finish = 1 << 2
    clap = 1 << 3

    def __init__(self, position, time, hitsound):
        self.position = position
        self.time = time
        self.hitsound = hitsound

    def __repr__(self):
        return (
            f'<{type(self).__qualname__}: {self.position},'
            f' {self.time.total_seconds() * 1000:g}ms>'
        )

    @property
    def time_ms(self):
        return self.time.total_seconds() * 1000

    @property
    def is_rim(self):
        """Would this object be a kat (rim hit) in osu!taiko?
        """
        return bool(self.hitsound & (self.whistle | self.clap))

    @classmethod
    def parse(cls, data):
        """Parse a HitObject object from a line in a ``.osu`` file.

        Parameters
        ----------
        data : str
            The line to parse.

        Returns
        -------
        hit_objects : HitObject
            The parsed hit object. This will be the concrete subclass given
            the type.

        Raises
        ------
        ValueError
            Raised when ``data`` does not describe a ``HitObject`` object.
        """
        try:
            x, y, time, type_, hitsound, *rest = data.split(',')
        except ValueError:
            raise ValueError(f'not enough elements in line, got {data!r}')

        try:
            position = Position(float(x), float(y))
        except ValueError:
            raise ValueError(f'x and y should be numbers, got {x!r}, {y!r}')

        try:
            time = timedelta(milliseconds=float(time))
        except ValueError:
            raise ValueError(f'time should be a number, got {time!r}')

        try:
            type_ = int(type_)
        except ValueError:
            raise ValueError(f'type should be an int, got {type_!r}')

        try:
            hitsound = int(hitsound)
        except ValueError:
            raise ValueError(f'hitsound should be an int, got {hitsound!r}')

        for subcls in (Circle, Slider, Spinner, HoldNote):
            if type_ & subcls.type_code:
                return subcls._parse(position, time, hitsound, rest)

        raise ValueError(f'unknown type code {type_!r}')


class Circle(HitObject):
    """A circle hit element.
    """
    type_code = 1

    @classmethod
    def _parse(cls, position, time, hitsound, rest):
        return cls(position, time, hitsound)


class _EndTimeObject(HitObject):
    def __init__(self, position, time, hitsound, end_time):
        super().__init__(position, time, hitsound)
        self.end_time = end_time

    @classmethod
    def _parse(cls, position, time, hitsound, rest):
        try:
            # hold notes pack the end time with the hit sample: ``end:sample``
            end_time = rest[0].split(':', 1)[0]
        except IndexError:
            raise ValueError('missing end_time')

        try:
            end_time = timedelta(milliseconds=float(end_time))
        except ValueError:
            raise ValueError(f'end_time should be a number, got {end_time!r}')

        return cls(position, time, hitsound, end_time)


class Spinner(_EndTimeObject):
    """A spinner hit element.

    Parameters
    ----------
    end_time : timedelta
        When this spinner ends in the map.
    """
    type_code = 8


class HoldNote(_EndTimeObject):
    """A hold note.

    Notes
    -----
    A ``HoldNote`` can only appear in an osu!mania map.
    """
    type_code = 128


class Slider(HitObject):
    """A slider hit element.

    Parameters
    ----------
    position : Position
        Where this slider appears on the screen.
    time : datetime.timedelta
        When this slider appears in the map.
    hitsound : int
        The hitsound bitmask.
    curve : Curve
        The slider's curve function.
    repeat : int
        The number of spans; 1 for a slider without reverse arrows.
    length : float
        The length of this slider in osu! pixels.
    """
    type_code = 2

    def __init__(self, position, time, hitsound, curve, repeat, length):
        super().__init__(position, time, hitsound)
        self.curve = curve
        self.repeat = repeat
        self.length = length

    @classmethod
    def _parse(cls, position, time, hitsound, rest):
        try:
            group_1, raw_repeat, *rest = rest
        except ValueError:
            raise ValueError(f'missing required slider data in {rest!r}')

        slider_type, *raw_points = group_1.split('|')

        points = [position]
        for point in raw_points:
            try:
                x, y = point.split(':')
                points.append(Position(float(x), float(y)))
            except ValueError:
                raise ValueError(
                    f'expected points in the form x:y, got {point!r}',
                )

        try:
            repeat = max(int(raw_repeat), 1)
        except ValueError:
            raise ValueError(f'repeat should be an int, got {raw_repeat!r}')

        raw_length = _get(rest, 0, '0')
        try:
            length = max(float(raw_length), 0.0)
        except ValueError:
            raise ValueError(
                f'pixel_length should be a float, got {raw_length!r}',
            )

        return cls(
            position,
            time,
            hitsound,
            Curve.from_kind_and_points(slider_type, points, length),
            repeat,
            length,
        )


def _get_field(groups, section, field, parse=str, default=no_default):
    """Lookup a field from a given section and parse it.

    Parameters
    ----------
    groups : dict[str, dict[str, str]]
        The grouped osu! file.
    section : str
        The section to read from.
    field : str
        The field to read.
    parse : callable, optional
        The function used to convert the raw string.
    default : any, optional
        A value to return if ``field`` is not in ``groups[section]``.
    """
    try:
        value = groups[section][field]
    except KeyError:
        if default is no_default:
            raise ValueError(f'missing field {field!r} in section {section!r}')
        return default

    try:
        return parse(value)
    except ValueError:
        raise ValueError(
            f'field {field!r} in section {section!r} should be parseable by'
            f' {parse.__name__}, got {value!r}',
        )


class Beatmap:
    """A beatmap.

    Parameters
    ----------
    format_version : int
        The version of the beatmap file.
    mode : GameMode
        The game mode the map was authored for.
    title : str
        The title of the song.
    artist : str
        The name of the song artist.
    creator : str
        The username of the mapper.
    version : str
        The name of the beatmap's difficulty.
    hp_drain_rate : float
        The ``HP`` attribute of the beatmap.
    circle_size : float
        The ``CS`` attribute of the beatmap.
    overall_difficulty : float
        The ``OD`` attribute of the beatmap.
    approach_rate : float
        The ``AR`` attribute of the beatmap.
    slider_multiplier : float
        The multiplier for slider velocity.
    slider_tick_rate : float
        How often slider ticks appear.
    timing_points : list[TimingPoint]
        The timing points the the map.
    hit_objects : list[HitObject]
        The hit objects in the map, in time order.

    Notes
    -----
    Only the data needed to rate a map is kept. Events, colours and the
    storyboard are ignored.
    """
    _version_regex = re.compile(r'^osu file format v(\d+)$')

    def __init__(self,
                 *,
                 format_version,
                 mode,
                 title,
                 artist,
                 creator,
                 version,
                 hp_drain_rate,
                 circle_size,
                 overall_difficulty,
                 approach_rate,
                 slider_multiplier,
                 slider_tick_rate,
                 timing_points,
                 hit_objects):
        self.format_version = format_version
        self.mode = mode
        self.title = title
        self.artist = artist
        self.creator = creator
        self.version = version
        self.hp_drain_rate = hp_drain_rate
        self.circle_size = circle_size
        self.overall_difficulty = overall_difficulty
        self.approach_rate = approach_rate
        self.slider_multiplier = slider_multiplier
        self.slider_tick_rate = slider_tick_rate
        self.timing_points = timing_points
        self._hit_objects = hit_objects

    @property
    def display_name(self):
        """The name of the map as it appears in game.
        """
        return f'{self.artist} - {self.title} [{self.version}]'

    def __repr__(self):
        return f'<{type(self).__qualname__}: {self.display_name}>'

    def hit_objects(self, *, circles=True, sliders=True, spinners=True):
        """Retrieve hit_objects.

        Parameters
        ----------
        circles : bool, optional
            If circles should be included.
        sliders : bool, optional
            If sliders should be included.
        spinners : bool, optional
            If spinners should be included.

        Returns
        -------
        hit_objects : tuple[HitObject]
            The selected objects. Hold notes are always included.
        """
        excluded = tuple(
            cls for cls, keep in (
                (Circle, circles),
                (Slider, sliders),
                (Spinner, spinners),
            ) if not keep
        )
        return tuple(
            ob for ob in self._hit_objects if not isinstance(ob, excluded)
        )

    @lazyval
    def _uninherited_timing_points(self):
        uninherited = [tp for tp in self.timing_points if not tp.inherited]
        return uninherited, [tp.offset for tp in uninherited]

    @lazyval
    def _timing_point_offsets(self):
        return [tp.offset for tp in self.timing_points]

    def timing_point_at(self, time):
        """Get the uninherited :class:`ppcalc.beatmap.TimingPoint` at the
        given time.

        Parameters
        ----------
        time : datetime.timedelta
            The time to lookup the :class:`ppcalc.beatmap.TimingPoint` for.

        Returns
        -------
        timing_point : TimingPoint
            The last uninherited timing point at or before ``time``, or the
            first uninherited timing point when ``time`` precedes them all.
        """
        uninherited, offsets = self._uninherited_timing_points
        if not uninherited:
            raise ValueError(f'{self!r} has no uninherited timing points')

        ix = bisect_right(offsets, time)
        return uninherited[max(ix - 1, 0)]

    def difficulty_point_at(self, time):
        """Get the inherited :class:`ppcalc.beatmap.TimingPoint` which controls
        the slider velocity at the given time.

        Parameters
        ----------
        time : datetime.timedelta
            The time to lookup.

        Returns
        -------
        timing_point : TimingPoint or None
            The last timing point at or before ``time`` if it is inherited,
            otherwise None.
        """
        ix = bisect_right(self._timing_point_offsets, time)
        if ix == 0:
            return None

        tp = self.timing_points[ix - 1]
        return tp if tp.inherited else None

    def hp(self, mods=0):
        """Compute the Health Drain (HP) value for different mods.
        """
        mods = Mods.coerce(mods)
        hp = self.hp_drain_rate
        if mods.hard_rock:
            hp = min(1.4 * hp, 10)
        elif mods.easy:
            hp /= 2
        return hp

    def cs(self, mods=0):
        """Compute the Circle Size (CS) value for different mods.
        """
        mods = Mods.coerce(mods)
        cs = self.circle_size
        if mods.hard_rock:
            cs = min(1.3 * cs, 10)
        elif mods.easy:
            cs /= 2
        return cs

    def od(self, mods=0, *, adjust_clock_rate=True):
        """Compute the effective Overall Difficulty (OD) value for different
        mods.

        Parameters
        ----------
        mods : int or Mods, optional
            The mods to apply. Clock rate changing mods change the effective
            hit windows and therefore the OD.
        adjust_clock_rate : bool, optional
            Apply the clock rate. When False only EZ and HR are applied.

        Returns
        -------
        od : float
            The OD value.
        """
        mods = Mods.coerce(mods)
        od = self.overall_difficulty
        if mods.hard_rock:
            od = min(1.4 * od, 10)
        elif mods.easy:
            od /= 2

        clock_rate = mods.clock_rate
        if adjust_clock_rate and clock_rate != 1:
            od = ms_300_to_od(od_to_ms_300(od) / clock_rate)

        return od

    def ar(self, mods=0):
        """Compute the effective Approach Rate (AR) value for different mods.

        Parameters
        ----------
        mods : int or Mods, optional
            The mods to apply.

        Returns
        -------
        ar : float
            The effective AR value.

        Notes
        -----
        Clock rate changing mods do not actually affect the in game AR;
        however, because the map is sped up or slowed down, the effective
        approach rate is changed.
        """
        mods = Mods.coerce(mods)
        ar = self.approach_rate
        if mods.easy:
            ar /= 2
        elif mods.hard_rock:
            ar = min(1.4 * ar, 10)

        clock_rate = mods.clock_rate
        if clock_rate != 1:
            ar = ms_to_ar(ar_to_ms(ar) / clock_rate)

        return ar

    @classmethod
    def from_path(cls, path):
        """Read in a ``Beatmap`` object from a file on disk.

        Parameters
        ----------
        path : str or pathlib.Path
            The path to the file to read from.

        Returns
        -------
        beatmap : Beatmap
            The parsed beatmap object.

        Raises
        ------
        ValueError
            Raised when the file cannot be parsed as a ``.osu`` file.
        """
        with open(path, encoding='utf-8-sig') as file:
            return cls.from_file(file)

    @classmethod
    def from_file(cls, file):
        """Read in a ``Beatmap`` object from an open file object.
        """
        return cls.parse(file.read())

    _mapping_groups = frozenset({
        'General',
        'Editor',
        'Metadata',
        'Difficulty',
    })

    @classmethod
    def _find_groups(cls, lines):
        """Split the input data into the named groups.

        Parameters
        ----------
        lines : iterator[str]
            The raw lines from the file.

        Returns
        -------
        groups : dict[str, list[str] or dict[str, str]]
            The lines in the section. If the section is a mapping section
            the the value will be a dict from key to value.
        """
        groups = {}
        current_group = None

        for line in lines:
            line = line.strip()
            if not line or line.startswith('//'):
                continue

            if line[0] == '[' and line[-1] == ']':
                current_group = line[1:-1]
                groups[current_group] = (
                    {} if current_group in cls._mapping_groups else []
                )
            elif current_group is None:
                continue
            elif current_group in cls._mapping_groups:
                key, _, value = line.partition(':')
                groups[current_group][key.strip()] = value.strip()
            else:
                groups[current_group].append(line)

        return groups

    @classmethod
    def parse(cls, data):
        """Parse a ``Beatmap`` from text in the ``.osu`` format.

        Parameters
        ----------
        data : str
            The data to parse.

        Returns
        -------
        beatmap : Beatmap
            The parsed beatmap object.

        Raises
        ------
        ValueError
            Raised when the data cannot be parsed in the ``.osu`` format.
        """
        lines = iter(data.lstrip().splitlines())
        line = next(lines, '')
        match = cls._version_regex.match(line.strip())
        if match is None:
            raise ValueError(f'missing osu file format specifier in: {line!r}')

        format_version = int(match.group(1))
        groups = cls._find_groups(lines)

        timing_points = []
        # the parent starts as None because the first timing point should
        # not be inherited
        parent = None
        for raw_timing_point in groups.get('TimingPoints', []):
            timing_point = TimingPoint.parse(raw_timing_point, parent)
            if not timing_point.inherited:
                parent = timing_point
            timing_points.append(timing_point)

        hit_objects = sorted(
            map(HitObject.parse, groups.get('HitObjects', [])),
            key=lambda ob: ob.time,
        )

        od = _get_field(groups, 'Difficulty', 'OverallDifficulty', float, 5.0)
        beatmap = cls(
            format_version=format_version,
            mode=GameMode(_get_field(groups, 'General', 'Mode', int, 0)),
            title=_get_field(groups, 'Metadata', 'Title', default=''),
            artist=_get_field(groups, 'Metadata', 'Artist', default=''),
            creator=_get_field(groups, 'Metadata', 'Creator', default=''),
            version=_get_field(groups, 'Metadata', 'Version', default=''),
            hp_drain_rate=_get_field(
                groups,
                'Difficulty',
                'HPDrainRate',
                float,
                5.0,
            ),
            circle_size=_get_field(
                groups,
                'Difficulty',
                'CircleSize',
                float,
                5.0,
            ),
            overall_difficulty=od,
            # old maps didn't have an AR so the OD is used as a default
            approach_rate=_get_field(
                groups,
                'Difficulty',
                'ApproachRate',
                float,
                od,
            ),
            slider_multiplier=_get_field(
                groups,
                'Difficulty',
                'SliderMultiplier',
                float,
                1.4,
            ),
            slider_tick_rate=_get_field(
                groups,
                'Difficulty',
                'SliderTickRate',
                float,
                1.0,
            ),
            timing_points=timing_points,
            hit_objects=hit_objects,
        )
        log.debug(
            'parsed %r: format v%d, %d timing points, %d hit objects',
            beatmap,
            format_version,
            len(timing_points),
            len(hit_objects),
        )
        return beatmap
