import logging

from ..mod import Mods
from .difficulty import TaikoDifficultyAttributes, hit_window, is_convert, rate
from .object import TaikoObject, difficulty_objects
from .skills import Peaks

log = logging.getLogger(__name__)


class TaikoGradualDifficulty:
    """Compute the difficulty attributes of an osu!taiko map one hit at a
    time.

    Each step admits difficulty objects until a hit has been admitted and
    returns the attributes of the map up to and including that hit.

    Parameters
    ----------
    beatmap : Beatmap
        The map to rate. Maps for other modes are rated as converts.
    mods : int, str or Mods, optional
        The mods to apply.

    Notes
    -----
    The iterator is finite and cannot be restarted. Every step mutates the
    running skill state so one instance must not be advanced from more than
    one thread.

    The first two objects of a map have no difficulty object because each
    difficulty object needs the two objects before it; if they are hits
    their steps report zero ratings.

    Examples
    --------
    >>> gradual = TaikoGradualDifficulty(beatmap, mods='DT')
    >>> first = gradual.step()
    >>> tenth = gradual.skip(9)
    >>> for attributes in gradual:
    ...     print(attributes.stars)
    """
    def __init__(self, beatmap, mods=0):
        mods = Mods.coerce(mods)
        hit_objects = beatmap.hit_objects()

        self._convert = is_convert(beatmap)
        self._hit_window = hit_window(beatmap, mods)
        self._peaks = Peaks()
        self._combo = 0
        self._index = 0
        self._cursor = 0

        if len(hit_objects) < 2:
            self._priming = []
            self._lists = difficulty_objects((), mods.clock_rate)
            self._total_hits = 0
            return

        self._priming = [
            TaikoObject.from_hit_object(ob).is_hit for ob in hit_objects[:2]
        ]
        self._lists = difficulty_objects(hit_objects, mods.clock_rate)
        self._total_hits = sum(self._priming) + sum(
            ob.base.is_hit for ob in self._lists.all
        )

    def __len__(self):
        """The number of steps left.
        """
        return self._total_hits - self._index

    def __iter__(self):
        return self

    def __next__(self):
        attributes = self.step()
        if attributes is None:
            raise StopIteration()
        return attributes

    def _advance(self):
        """Admit objects until a hit has been admitted.

        Returns
        -------
        advanced : bool
            False when the map is exhausted.
        """
        while self._priming:
            if self._priming.pop(0):
                self._combo += 1
                self._index += 1
                return True

        lists = self._lists
        while self._cursor < len(lists):
            current = lists[self._cursor]
            self._cursor += 1
            self._peaks.process(current, lists)

            if current.base.is_hit:
                self._combo += 1
                self._index += 1
                return True

        log.debug('exhausted after %d hits', self._index)
        return False

    def _attributes(self):
        ratings, star_rating = rate(
            self._peaks.difficulty_values(),
            self._convert,
        )
        return TaikoDifficultyAttributes(
            stamina=ratings.stamina,
            rhythm=ratings.rhythm,
            colour=ratings.colour,
            peak=ratings.combined,
            hit_window=self._hit_window,
            stars=star_rating,
            max_combo=self._combo,
        )

    def step(self):
        """Advance by one hit.

        Returns
        -------
        attributes : TaikoDifficultyAttributes or None
            The attributes up to the new hit, or None when the map is
            exhausted.
        """
        if not self._advance():
            return None
        return self._attributes()

    def skip(self, n):
        """Advance by ``n`` hits.

        This admits every object on the way, exactly like calling
        :meth:`step` ``n`` times, but only computes the final attributes.

        Parameters
        ----------
        n : int
            The number of hits to advance by.

        Returns
        -------
        attributes : TaikoDifficultyAttributes or None
            The attributes after ``n`` steps. None when ``n`` is 0 or the map
            is exhausted before ``n`` steps.
        """
        if n < 0:
            raise ValueError(f'cannot skip a negative number of hits: {n!r}')

        if n == 0:
            return None

        for _ in range(n):
            if not self._advance():
                return None

        return self._attributes()
