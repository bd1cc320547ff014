from ..position import distance
from ..skill import StrainDecaySkill


class OsuDifficultyObject:
    """One entry of the difficulty object arena.

    Parameters
    ----------
    index : int
        The position of this object in the arena.
    base : OsuObject
        The normalized object.
    previous : OsuObject or None
        The normalized object before ``base``.
    scaling_factor : float
        The factor that normalizes distances to a circle radius of 52.
    clock_rate : float
        The speed multiplier of the play.

    Notes
    -----
    Neighbours are looked up through the arena by index rather than being
    referenced directly.
    """
    min_delta_time = 50

    def __init__(self, index, base, previous, scaling_factor, clock_rate):
        self.index = index
        self.base = base
        self.start_time = base.time / clock_rate
        self.position = base.position.scale(scaling_factor)
        self.end_position = base.end_position.scale(scaling_factor)

        if previous is None:
            self.delta_time = 0.0
            self.jump_distance = 0.0
            self.travel_distance = 0.0
        else:
            self.delta_time = (base.time - previous.time) / clock_rate
            self.jump_distance = distance(
                self.position,
                previous.end_position.scale(scaling_factor),
            )
            self.travel_distance = previous.travel_distance or 0.0

        self.strain_time = max(self.delta_time, self.min_delta_time)

    @property
    def is_spinner(self):
        return self.base.is_spinner

    def __repr__(self):
        return f'<{type(self).__qualname__}: {self.index}, {self.base}>'


class Aim(StrainDecaySkill):
    """Distance covered per unit time, including slider travel.
    """
    skill_multiplier = 26.25
    strain_decay_base = 0.15

    def strain_value_of(self, current, arena):
        if current.is_spinner:
            return 0.0

        distance = current.jump_distance + current.travel_distance
        return distance ** 0.99 / current.strain_time


class Speed(StrainDecaySkill):
    """Tapping pressure, weighted by how spaced out the objects are.
    """
    skill_multiplier = 1400
    strain_decay_base = 0.3

    almost_diameter = 90
    stream_spacing = 110
    single_spacing = 125

    def _spacing_weight(self, distance):
        if distance > self.single_spacing:
            return 2.5
        elif distance > self.stream_spacing:
            return (
                1.6 +
                0.9 *
                (distance - self.stream_spacing) /
                (self.single_spacing - self.stream_spacing)
            )
        elif distance > self.almost_diameter:
            return (
                1.2 +
                0.4 *
                (distance - self.almost_diameter) /
                (self.stream_spacing - self.almost_diameter)
            )
        elif distance > self.almost_diameter / 2:
            return (
                0.95 +
                0.25 *
                (distance - self.almost_diameter / 2) /
                (self.almost_diameter / 2)
            )
        return 0.95

    def strain_value_of(self, current, arena):
        if current.is_spinner:
            return 0.0

        distance = current.jump_distance + current.travel_distance
        return self._spacing_weight(distance) / current.strain_time


class Flashlight(StrainDecaySkill):
    """Memory pressure from recent objects spread across the screen.

    Unlike the other skills every section counts fully; long maps are harder
    to memorize.
    """
    skill_multiplier = 0.15
    strain_decay_base = 0.15

    history_length = 10
    history_decay = 0.8

    def strain_value_of(self, current, arena):
        if current.is_spinner:
            return 0.0

        result = 0.0
        cumulative_strain_time = 0.0
        for i in range(min(current.index, self.history_length)):
            previous = arena[current.index - 1 - i]
            # the strain time of the object after ``previous``
            cumulative_strain_time += arena[current.index - i].strain_time

            if previous.is_spinner:
                continue

            jump = distance(current.position, previous.end_position)
            result += self.history_decay ** i * jump / cumulative_strain_time

        return result ** 2

    def difficulty_value(self):
        return sum(self.peaks())
