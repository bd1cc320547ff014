from collections import namedtuple

from ..beatmap import Circle, Slider, Spinner
from ..position import distance

# osu!stable placed the last slider tick 36ms before the real end of the
# slider; the tail is judged at that time
LEGACY_LAST_TICK_OFFSET = 36


class ObjectCounts:
    """Running counts gathered while normalizing a map's objects.

    Attributes
    ----------
    n_circles : int
    n_sliders : int
    n_spinners : int
    max_combo : int
        The combo a perfect play reaches, counting every slider head, tick,
        repeat and tail.
    """
    def __init__(self):
        self.n_circles = 0
        self.n_sliders = 0
        self.n_spinners = 0
        self.max_combo = 0

    def __repr__(self):
        return (
            f'<{type(self).__qualname__}: circles={self.n_circles},'
            f' sliders={self.n_sliders}, spinners={self.n_spinners},'
            f' max_combo={self.max_combo}>'
        )


class OsuObject(namedtuple(
        'OsuObject',
        'time position end_position travel_distance')):
    """A hit object reduced to what the osu! skills need.

    Parameters
    ----------
    time : float
        The start time in milliseconds.
    position : Position
        Where the object starts.
    end_position : Position
        Where a lazy cursor ends up: the slider's end following the follow
        circle, or ``position`` for circles and spinners.
    travel_distance : float or None
        The scaled distance the cursor is forced to travel inside a slider.
        0 for circles and None for spinners.
    """
    @property
    def is_spinner(self):
        return self.travel_distance is None

    @classmethod
    def from_hit_object(cls,
                        hit_object,
                        beatmap,
                        radius,
                        scaling_factor,
                        counts,
                        *,
                        follow_leniency=True,
                        slider_travel=True):
        """Normalize one hit object.

        Parameters
        ----------
        hit_object : HitObject
            The object to normalize.
        beatmap : Beatmap
            The map the object belongs to; used for timing lookups.
        radius : float
            The circle radius in osu! pixels.
        scaling_factor : float
            The factor applied to travel distances.
        counts : ObjectCounts
            Updated in place with the object kind and combo.
        follow_leniency : bool, optional
            Only count slider movement that leaves a follow circle of three
            times the radius. When False the full displacement between
            visited points is counted.
        slider_travel : bool, optional
            When False sliders are treated like circles for distances; their
            combo is still counted.

        Returns
        -------
        osu_object : OsuObject or None
            The normalized object, or None for objects which do not belong in
            osu! standard (hold notes).
        """
        time = hit_object.time_ms

        if isinstance(hit_object, Circle):
            counts.max_combo += 1
            counts.n_circles += 1
            return cls(time, hit_object.position, hit_object.position, 0.0)

        if isinstance(hit_object, Spinner):
            counts.max_combo += 1
            counts.n_spinners += 1
            return cls(time, hit_object.position, hit_object.position, None)

        if not isinstance(hit_object, Slider):
            return None

        # the slider head
        counts.max_combo += 1
        counts.n_sliders += 1

        end_position, travel = _walk_slider(
            hit_object,
            beatmap,
            radius * 3 if follow_leniency else 0,
            counts,
        )
        if not slider_travel:
            return cls(time, hit_object.position, hit_object.position, 0.0)

        return cls(
            time,
            hit_object.position,
            end_position,
            travel * scaling_factor,
        )


def _walk_slider(slider, beatmap, follow_radius, counts):
    """Visit every tick, repeat and the tail of a slider.

    Returns
    -------
    end_position : Position
        Where a cursor which stays as far back inside the follow circle as it
        can ends up.
    travel : float
        The unscaled distance that cursor had to move.
    """
    start = slider.time_ms
    timing_point = beatmap.timing_point_at(slider.time)
    difficulty_point = beatmap.difficulty_point_at(slider.time)
    slider_velocity = (
        1.0 if difficulty_point is None else difficulty_point.slider_velocity
    )

    slider_multiplier = beatmap.slider_multiplier
    if slider_multiplier <= 0 or beatmap.slider_tick_rate <= 0:
        raise ValueError(
            f'{beatmap!r} has a non-positive slider multiplier or tick rate',
        )

    tick_distance = 100 * slider_multiplier / beatmap.slider_tick_rate
    if beatmap.format_version >= 8:
        tick_distance /= min(max(100 / slider_velocity, 10), 1000) / 100

    repeat = slider.repeat
    pixel_length = slider.length
    duration = (
        repeat *
        timing_point.beat_length *
        pixel_length /
        (slider_multiplier * slider_velocity) /
        100
    )
    span_duration = duration / repeat

    curve = slider.curve
    end_position = slider.position
    travel = 0.0

    def visit(time):
        nonlocal end_position, travel
        counts.max_combo += 1

        if span_duration > 0:
            progress = (time - start) / span_duration
        else:
            progress = 0.0

        # even spans run head to tail, odd spans run back
        if progress % 2 >= 1:
            progress = 1 - progress % 1
        else:
            progress %= 1

        current = curve(progress)
        dist = distance(end_position, current)
        if dist > follow_radius:
            dist -= follow_radius
            end_position = end_position.toward(current, dist)
            travel += dist

    # tick times of the first span; later spans replay the same positions
    ticks = []
    if tick_distance > 0 and pixel_length > 0:
        time_add = duration * (tick_distance / (pixel_length * repeat))
        target = pixel_length - tick_distance / 8

        current_distance = tick_distance
        tick_ix = 1
        while current_distance < target:
            time = start + time_add * tick_ix
            visit(time)
            ticks.append(time)
            current_distance += tick_distance
            tick_ix += 1

    for repeat_ix in range(1, repeat):
        # the reverse arrow
        visit(start + span_duration * repeat_ix)

        for time in (reversed(ticks) if repeat_ix % 2 else ticks):
            visit(time)

    final_span_start = start + (repeat - 1) * span_duration
    visit(max(
        start + duration / 2,
        final_span_start + span_duration - LEGACY_LAST_TICK_OFFSET,
    ))

    return end_position, travel
