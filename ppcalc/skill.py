from abc import ABCMeta, abstractmethod
import math


class StrainDecaySkill(metaclass=ABCMeta):
    """Accumulates the strain of one skill over a sequence of difficulty
    objects.

    The strain decays exponentially between objects. The map is cut into
    fixed length sections and the highest strain in each section is kept as
    that section's peak; the difficulty of the skill is a weighted sum of the
    peaks, hardest first.

    Subclasses implement :meth:`strain_value_of` and set the class level
    constants.

    Notes
    -----
    Difficulty objects must expose ``start_time`` and ``delta_time`` in
    milliseconds.
    """
    skill_multiplier = 1.0
    strain_decay_base = 1.0

    section_length = 400
    decay_weight = 0.9

    def __init__(self):
        self.current_strain = 0.0
        self.current_section_peak = 0.0
        self.current_section_end = None
        self.strain_peaks = []
        self._last_time = None

    @abstractmethod
    def strain_value_of(self, current, arena):
        """The raw strain added by ``current``.

        Parameters
        ----------
        current : difficulty object
            The object being processed.
        arena : sequence
            The object arena ``current`` belongs to, for neighbour lookups.
        """
        raise NotImplementedError('strain_value_of')

    def strain_decay(self, ms):
        return self.strain_decay_base ** (ms / 1000)

    def strain_value_at(self, current, arena):
        self.current_strain *= self.strain_decay(current.delta_time)
        self.current_strain += (
            self.strain_value_of(current, arena) * self.skill_multiplier
        )
        return self.current_strain

    def _initial_section_strain(self, time):
        if self._last_time is None:
            return 0.0
        return self.current_strain * self.strain_decay(time - self._last_time)

    def process(self, current, arena):
        """Fold ``current`` into the running section peaks.
        """
        section_length = self.section_length
        if self.current_section_end is None:
            self.current_section_end = (
                math.ceil(current.start_time / section_length) *
                section_length
            )

        while current.start_time > self.current_section_end:
            self.strain_peaks.append(self.current_section_peak)
            self.current_section_peak = self._initial_section_strain(
                self.current_section_end,
            )
            self.current_section_end += section_length

        self.current_section_peak = max(
            self.strain_value_at(current, arena),
            self.current_section_peak,
        )
        self._last_time = current.start_time

    def peaks(self):
        """The section peaks so far, including the unfinished section.

        Returns
        -------
        peaks : list[float]
            A new list; the skill's own state is not shared.
        """
        if self.current_section_end is None:
            return []
        return self.strain_peaks + [self.current_section_peak]

    def difficulty_value(self):
        """The weighted sum of the section peaks, hardest first.
        """
        difficulty = 0
        weight = 1

        decay_weight = self.decay_weight
        for strain in sorted(self.peaks(), reverse=True):
            difficulty += weight * strain
            weight *= decay_weight

        return difficulty
