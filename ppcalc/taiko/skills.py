from collections import deque, namedtuple
import copy
import math

from ..skill import StrainDecaySkill
from ..utils import norm


def _sigmoid(value, center, width, middle, height):
    return math.tanh(math.e * -(value - center) / width) * height / 2 + middle


def _pattern_sigmoid(value):
    return _sigmoid(value, 2, 2, 0.5, 1)


def evaluate_colour(current):
    """The colour difficulty of a hit.

    Only the first hit of a mono streak, an alternating pattern or a
    repeating pattern adds difficulty; the patterns which start later in a
    repetition are worth less.
    """
    colour = current.colour
    if colour is None:
        return 0.0

    repeating = colour.repeating_pattern
    repeating_difficulty = 2 * (
        1 - _pattern_sigmoid(repeating.repetition_interval)
    )
    alternating_difficulty = (
        _pattern_sigmoid(colour.alternating_pattern.index) *
        repeating_difficulty
    )
    mono_difficulty = (
        _pattern_sigmoid(colour.mono_streak.index) *
        alternating_difficulty *
        0.5
    )

    difficulty = 0.0
    if colour.mono_streak.first == current.index:
        difficulty += mono_difficulty
    if colour.alternating_pattern.first == current.index:
        difficulty += alternating_difficulty
    if repeating.first == current.index:
        difficulty += repeating_difficulty
    return difficulty


class Colour(StrainDecaySkill):
    """Reading changes between dons and kats.
    """
    skill_multiplier = 0.12
    strain_decay_base = 0.8

    def strain_value_of(self, current, lists):
        return evaluate_colour(current)


class Rhythm(StrainDecaySkill):
    """Reading changes in the spacing between hits.

    The rhythm strain is tracked separately from the section strain: it
    decays per hit rather than with time and is reset by slow sections and
    by non-hits.
    """
    skill_multiplier = 10
    strain_decay_base = 0

    rhythm_decay = 0.96
    history_length = 8

    def __init__(self):
        super().__init__()
        self.rhythm_history = deque(maxlen=self.history_length)
        self.rhythm_strain = 0.0
        self.notes_since_rhythm_change = 0

    def _reset(self):
        self.rhythm_strain = 0.0
        self.notes_since_rhythm_change = 0

    def _same_pattern(self, start, length):
        history = self.rhythm_history
        return all(
            history[start + i][1] == history[len(history) - length + i][1]
            for i in range(length)
        )

    def _repetition_penalties(self, current):
        penalty = 1.0
        self.rhythm_history.append((current.index, current.rhythm))
        history = self.rhythm_history

        for length in range(2, self.history_length // 2 + 1):
            for start in range(len(history) - length - 1, -1, -1):
                if not self._same_pattern(start, length):
                    continue

                notes_since = current.index - history[start][0]
                penalty *= min(0.032 * notes_since, 1.0)
                break

        return penalty

    @staticmethod
    def _pattern_length_penalty(pattern_length):
        short_pattern_penalty = min(0.15 * pattern_length, 1.0)
        long_pattern_penalty = min(max(2.5 - 0.15 * pattern_length, 0.0), 1.0)
        return min(short_pattern_penalty, long_pattern_penalty)

    def _speed_penalty(self, delta_time):
        if delta_time < 80:
            return 1.0
        if delta_time < 210:
            return max(0.0, 1.4 - 0.005 * delta_time)

        self._reset()
        return 0.0

    def strain_value_of(self, current, lists):
        if not current.base.is_hit:
            self._reset()
            return 0.0

        self.rhythm_strain *= self.rhythm_decay
        self.notes_since_rhythm_change += 1

        # unchanged rhythm
        if current.rhythm.difficulty == 0.0:
            return 0.0

        strain = current.rhythm.difficulty
        strain *= self._repetition_penalties(current)
        strain *= self._pattern_length_penalty(self.notes_since_rhythm_change)
        strain *= self._speed_penalty(current.delta_time)

        self.notes_since_rhythm_change = 0
        self.rhythm_strain += strain
        return self.rhythm_strain


class Stamina(StrainDecaySkill):
    """Hitting the same key over and over.

    Each colour is played with its own key, so the interval that matters is
    the one to the hit two notes of the same colour back.
    """
    skill_multiplier = 1.1
    strain_decay_base = 0.4

    @staticmethod
    def _speed_bonus(interval):
        return 30 / max(interval, 50)

    def strain_value_of(self, current, lists):
        if not current.base.is_hit:
            return 0.0

        key_previous = lists.previous_mono(current, 1)
        if key_previous is None:
            return 0.0

        return 0.5 + self._speed_bonus(
            current.start_time - key_previous.start_time,
        )


class PeaksDifficultyValues(namedtuple(
        'PeaksDifficultyValues',
        'colour rhythm stamina combined')):
    """The ratings of the three taiko skills and their combination.
    """


class Peaks:
    """The colour, rhythm and stamina skills combined per section.

    The combined peak of a section is the 2-norm of the rhythm peak and the
    1.5-norm of the colour and stamina peaks.
    """
    final_multiplier = 0.0625
    rhythm_skill_multiplier = 0.2 * final_multiplier
    colour_skill_multiplier = 0.375 * final_multiplier
    stamina_skill_multiplier = 0.375 * final_multiplier

    decay_weight = 0.9

    def __init__(self):
        self.colour = Colour()
        self.rhythm = Rhythm()
        self.stamina = Stamina()

    def process(self, current, lists):
        self.rhythm.process(current, lists)
        self.colour.process(current, lists)
        self.stamina.process(current, lists)

    def difficulty_value(self):
        peaks = []
        for colour, rhythm, stamina in zip(self.colour.peaks(),
                                           self.rhythm.peaks(),
                                           self.stamina.peaks()):
            peak = norm(
                2,
                norm(
                    1.5,
                    colour * self.colour_skill_multiplier,
                    stamina * self.stamina_skill_multiplier,
                ),
                rhythm * self.rhythm_skill_multiplier,
            )
            if peak > 0:
                peaks.append(peak)

        difficulty = 0
        weight = 1
        for peak in sorted(peaks, reverse=True):
            difficulty += weight * peak
            weight *= self.decay_weight

        return difficulty

    def difficulty_values(self):
        """Compute every rating at once.

        Returns
        -------
        values : PeaksDifficultyValues
            The ratings. Computing them does not change the skills.
        """
        return PeaksDifficultyValues(
            colour=(
                self.colour.difficulty_value() * self.colour_skill_multiplier
            ),
            rhythm=(
                self.rhythm.difficulty_value() * self.rhythm_skill_multiplier
            ),
            stamina=(
                self.stamina.difficulty_value() *
                self.stamina_skill_multiplier
            ),
            combined=self.difficulty_value(),
        )

    def copy(self):
        """A disconnected copy of the running state of every skill.
        """
        return copy.deepcopy(self)
