from collections import namedtuple

from ..beatmap import Circle


class TaikoObject(namedtuple('TaikoObject', 'time is_hit is_rim')):
    """A hit object as seen by osu!taiko.

    Parameters
    ----------
    time : float
        The start time in milliseconds.
    is_hit : bool
        Is this a don or kat? Drumrolls and swells are not hits.
    is_rim : bool
        Is this a kat? Always False for non-hits.
    """
    @classmethod
    def from_hit_object(cls, hit_object):
        if isinstance(hit_object, Circle):
            return cls(hit_object.time_ms, True, hit_object.is_rim)
        # sliders become drumrolls and spinners become swells
        return cls(hit_object.time_ms, False, False)


class HitObjectRhythm(namedtuple('HitObjectRhythm', 'ratio difficulty')):
    """A ratio between consecutive delta times and how hard it is to read.
    """


common_rhythms = tuple(
    HitObjectRhythm(numerator / denominator, difficulty)
    for numerator, denominator, difficulty in (
        (1, 1, 0.0),
        (2, 1, 0.3),
        (1, 2, 0.5),
        (3, 1, 0.3),
        (1, 3, 0.35),
        (3, 2, 0.6),
        (2, 3, 0.4),
        (5, 4, 0.5),
        (4, 5, 0.7),
    )
)


def closest_rhythm(delta_time, previous_delta_time):
    """Find the common rhythm closest to the ratio of two delta times.
    """
    if previous_delta_time <= 0:
        return common_rhythms[0]

    ratio = delta_time / previous_delta_time
    return min(common_rhythms, key=lambda rhythm: abs(rhythm.ratio - ratio))


class MonoStreak:
    """A run of consecutive hits of the same colour.

    Parameters
    ----------
    is_rim : bool
        The colour of the run.
    first : int
        The arena index of the first hit.
    """
    def __init__(self, is_rim, first):
        self.is_rim = is_rim
        self.first = first
        # arena indices of the hits in this run
        self.hits = []
        # the position of this run in its alternating pattern
        self.index = 0

    @property
    def run_length(self):
        return len(self.hits)


class AlternatingMonoPattern:
    """Consecutive mono streaks of equal length, alternating colour.
    """
    def __init__(self, first):
        self.first = first
        self.mono_streaks = []
        # the position of this pattern in its repeating pattern
        self.index = 0

    def has_identical_mono_length(self, other):
        return (
            self.mono_streaks[0].run_length ==
            other.mono_streaks[0].run_length
        )

    def is_repetition_of(self, other):
        return (
            self.has_identical_mono_length(other) and
            len(self.mono_streaks) == len(other.mono_streaks) and
            self.mono_streaks[0].is_rim == other.mono_streaks[0].is_rim
        )


class RepeatingHitPatterns:
    """Consecutive alternating patterns which repeat each other.

    Parameters
    ----------
    previous : RepeatingHitPatterns or None
        The pattern before this one.
    """
    max_repetition_interval = 16

    def __init__(self, previous, first):
        self.previous = previous
        self.first = first
        self.alternating_patterns = []
        self.repetition_interval = self.max_repetition_interval + 1

    def is_repetition_of(self, other):
        if len(self.alternating_patterns) != len(other.alternating_patterns):
            return False

        return all(
            a.has_identical_mono_length(b)
            for a, b in zip(
                self.alternating_patterns[:2],
                other.alternating_patterns[:2],
            )
        )

    def find_repetition_interval(self):
        """Count how many patterns back this pattern last appeared.
        """
        other = self.previous
        interval = 1
        while other is not None and interval < self.max_repetition_interval:
            if self.is_repetition_of(other):
                self.repetition_interval = interval
                return
            other = other.previous
            interval += 1

        self.repetition_interval = self.max_repetition_interval + 1


class TaikoColourData(namedtuple(
        'TaikoColourData',
        'mono_streak alternating_pattern repeating_pattern')):
    """The colour patterns a hit belongs to.
    """


class TaikoDifficultyObject:
    """One entry of the osu!taiko difficulty object arena.

    Parameters
    ----------
    index : int
        The position of this object in ``ObjectLists.all``.
    base : TaikoObject
        The object being rated.
    last_time, last_last_time : float
        The start times of the two objects before ``base``.
    clock_rate : float
        The speed multiplier of the play.
    lists : ObjectLists
        The arena being built; used to assign the same colour and note
        indices.
    """
    def __init__(self,
                 index,
                 base,
                 last_time,
                 last_last_time,
                 clock_rate,
                 lists):
        self.index = index
        self.base = base
        self.start_time = base.time / clock_rate
        self.delta_time = (base.time - last_time) / clock_rate
        self.rhythm = closest_rhythm(
            self.delta_time,
            (last_time - last_last_time) / clock_rate,
        )
        self.colour = None

        if base.is_hit:
            mono = lists.rims if base.is_rim else lists.centres
            self.mono_index = len(mono)
            self.note_index = len(lists.notes)
        else:
            self.mono_index = None
            self.note_index = None

    def __repr__(self):
        return f'<{type(self).__qualname__}: {self.index}, {self.base}>'


class ObjectLists:
    """The difficulty object arena.

    Attributes
    ----------
    all : list[TaikoDifficultyObject]
        Every difficulty object, in time order.
    centres : list[int]
        Indices into ``all`` of the dons.
    rims : list[int]
        Indices into ``all`` of the kats.
    notes : list[int]
        Indices into ``all`` of every hit.
    """
    def __init__(self):
        self.all = []
        self.centres = []
        self.rims = []
        self.notes = []

    def __len__(self):
        return len(self.all)

    def __getitem__(self, ix):
        return self.all[ix]

    def append(self, difficulty_object):
        ix = difficulty_object.index
        if difficulty_object.mono_index is not None:
            if difficulty_object.base.is_rim:
                self.rims.append(ix)
            else:
                self.centres.append(ix)
        if difficulty_object.note_index is not None:
            self.notes.append(ix)
        self.all.append(difficulty_object)

    def previous_mono(self, current, backwards_index):
        """The hit of the same colour ``backwards_index + 1`` hits before
        ``current``, or None.
        """
        if current.mono_index is None:
            return None

        mono = self.rims if current.base.is_rim else self.centres
        ix = current.mono_index - (backwards_index + 1)
        if ix < 0:
            return None
        return self.all[mono[ix]]

    def previous_note(self, current, backwards_index):
        """The hit ``backwards_index + 1`` hits before ``current``, or None.
        """
        if current.note_index is None:
            return None

        ix = current.note_index - (backwards_index + 1)
        if ix < 0:
            return None
        return self.all[self.notes[ix]]


def _encode_colours(lists):
    """Group the hits into mono streaks, alternating patterns and repeating
    patterns and attach them to the difficulty objects.
    """
    mono_streaks = []
    for ix in lists.notes:
        current = lists.all[ix]
        if not mono_streaks or mono_streaks[-1].is_rim != current.base.is_rim:
            mono_streaks.append(MonoStreak(current.base.is_rim, ix))
        mono_streaks[-1].hits.append(ix)

    alternating_patterns = []
    previous = None
    for streak in mono_streaks:
        if previous is None or streak.run_length != previous.run_length:
            alternating_patterns.append(AlternatingMonoPattern(streak.first))
        pattern = alternating_patterns[-1]
        streak.index = len(pattern.mono_streaks)
        pattern.mono_streaks.append(streak)
        previous = streak

    repeating_patterns = []
    ix = 0
    while ix < len(alternating_patterns):
        pattern = alternating_patterns[ix]
        repeating = RepeatingHitPatterns(
            repeating_patterns[-1] if repeating_patterns else None,
            pattern.first,
        )
        repeating.alternating_patterns.append(pattern)
        while (ix < len(alternating_patterns) - 1 and
               pattern.is_repetition_of(alternating_patterns[ix + 1])):
            ix += 1
            pattern = alternating_patterns[ix]
            pattern.index = len(repeating.alternating_patterns)
            repeating.alternating_patterns.append(pattern)
        repeating_patterns.append(repeating)
        ix += 1

    for repeating in repeating_patterns:
        repeating.find_repetition_interval()
        for pattern in repeating.alternating_patterns:
            for streak in pattern.mono_streaks:
                colour = TaikoColourData(streak, pattern, repeating)
                for hit in streak.hits:
                    lists.all[hit].colour = colour


def difficulty_objects(hit_objects, clock_rate):
    """Build the difficulty object arena for a sequence of hit objects.

    Parameters
    ----------
    hit_objects : sequence[HitObject]
        The map's objects in time order.
    clock_rate : float
        The speed multiplier of the play.

    Returns
    -------
    lists : ObjectLists
        The arena. The first two objects have no difficulty object because
        each difficulty object needs the two objects before it.
    """
    taiko_objects = [TaikoObject.from_hit_object(ob) for ob in hit_objects]

    lists = ObjectLists()
    for ix in range(2, len(taiko_objects)):
        lists.append(TaikoDifficultyObject(
            ix - 2,
            taiko_objects[ix],
            taiko_objects[ix - 1].time,
            taiko_objects[ix - 2].time,
            clock_rate,
            lists,
        ))

    _encode_colours(lists)
    return lists
