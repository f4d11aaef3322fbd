from enum import IntEnum, unique
import logging

from .hit_object import Circle, Slider, Spinner
from .scaling import NORMALIZED_RADIUS
from .utils import clamp

# the radius of the follow circle a player can comfortably stay inside of
ASSUMED_SLIDER_RADIUS = NORMALIZED_RADIUS * 1.65

# the tail of a slider is judged this many milliseconds before the slider ends
LEGACY_LAST_TICK_OFFSET = 36

# ticks are never placed closer than this many ms of travel to a span end
TICK_END_GAP = 10

MAX_SLIDER_LENGTH = 100000

# every circle, slider head and spinner is judged as a 300, 100 or 50; a 300
# earns all of these timing judgements, a 100 earns one and a 50 earns none
TIMING_JUDGEMENTS = 5


def _ms(time):
    return time.total_seconds() * 1000


@unique
class ObjectKind(IntEnum):
    """The kind of a processed hit object.
    """
    circle = 0
    slider = 1
    spinner = 2


class OsuObject:
    """A hit object prepared for difficulty calculation.

    Parameters
    ----------
    kind : ObjectKind
        What sort of object this is.
    time : float
        The start time in milliseconds.
    pos : Position
        The position of the object before stacking.
    end_time : float, optional
        The end time in milliseconds. Defaults to ``time``.
    end_pos : Position, optional
        The position where the object ends before stacking. Defaults to
        ``pos``.
    lazy_end_pos : Position, optional
        Where a lazily moving cursor finishes a slider, before stacking.
    lazy_travel_dist : float, optional
        How far a lazily moving cursor travels through a slider, in
        normalized pixels.
    lazy_travel_time : float, optional
        The time between the slider head and its tail in milliseconds.

    Notes
    -----
    ``stack_height`` is filled in by :mod:`ppcalc.stacking` and the stacked
    positions are only meaningful after :meth:`apply_stacking` has been
    called.
    """
    def __init__(self,
                 kind,
                 time,
                 pos,
                 end_time=None,
                 end_pos=None,
                 lazy_end_pos=None,
                 lazy_travel_dist=0.0,
                 lazy_travel_time=0.0):
        self.kind = kind
        self.time = time
        self.pos = pos
        self.end_time = time if end_time is None else end_time
        self.end_pos = pos if end_pos is None else end_pos
        self.lazy_end_pos = self.end_pos if lazy_end_pos is None else lazy_end_pos
        self.lazy_travel_dist = lazy_travel_dist
        self.lazy_travel_time = lazy_travel_time

        self.stack_height = 0.0
        self.stacked_pos = pos
        self.stacked_end_pos = self.end_pos
        self.stacked_lazy_end_pos = self.lazy_end_pos

    @property
    def is_circle(self):
        return self.kind == ObjectKind.circle

    @property
    def is_slider(self):
        return self.kind == ObjectKind.slider

    @property
    def is_spinner(self):
        return self.kind == ObjectKind.spinner

    def apply_stacking(self, scaling_factor):
        """Move the stacked positions by this object's stack offset.

        Parameters
        ----------
        scaling_factor : ScalingFactor
            The geometry of the map.
        """
        offset = scaling_factor.stack_offset(self.stack_height)
        self.stacked_pos = self.pos + offset
        self.stacked_end_pos = self.end_pos + offset
        self.stacked_lazy_end_pos = self.lazy_end_pos + offset

    @property
    def cursor_pos(self):
        """Where the cursor is assumed to be once this object is finished.
        """
        if self.is_slider:
            return self.stacked_lazy_end_pos
        return self.stacked_pos

    def __repr__(self):
        return (
            f'<{type(self).__qualname__}: {self.kind.name} {self.pos},'
            f' {self.time:g}ms, stack={self.stack_height:g}>'
        )


class ObjectBuilder:
    """Converts raw hit objects into :class:`OsuObject` instances.

    Parameters
    ----------
    radius : float
        The circle radius of the map after mods.
    hard_rock : bool, optional
        Flip objects vertically.

    Attributes
    ----------
    max_combo : int
        The combo achievable on the objects built so far.
    n_circles, n_sliders, n_spinners : int
        The number of objects of each kind built so far.
    n_nested : int
        The number of combo-bearing slider parts built so far, not counting
        slider heads.
    n_timing : int
        The number of timing judgements on the objects built so far, see
        :data:`TIMING_JUDGEMENTS`.
    """
    def __init__(self, radius, *, hard_rock=False):
        self.radius = radius
        self.hard_rock = hard_rock

        self.max_combo = 0
        self.n_circles = 0
        self.n_sliders = 0
        self.n_spinners = 0
        self.n_nested = 0
        self.n_timing = 0

        # scratch buffers reused across sliders
        self._tick_progress = []
        self._tick_positions = []

    def _position(self, position):
        if self.hard_rock:
            return position.flip_vertical()
        return position

    def build(self, hit_object):
        """Build one object.

        Parameters
        ----------
        hit_object : HitObject
            The raw object.

        Returns
        -------
        osu_object : OsuObject or None
            The processed object or None if the object cannot be processed.
        """
        if isinstance(hit_object, Circle):
            self.n_circles += 1
            self.max_combo += 1
            self.n_timing += TIMING_JUDGEMENTS
            return OsuObject(
                ObjectKind.circle,
                _ms(hit_object.time),
                self._position(hit_object.position),
            )

        if isinstance(hit_object, Spinner):
            self.n_spinners += 1
            self.max_combo += 1
            self.n_timing += TIMING_JUDGEMENTS
            return OsuObject(
                ObjectKind.spinner,
                _ms(hit_object.time),
                self._position(hit_object.position),
                end_time=_ms(hit_object.end_time),
            )

        if isinstance(hit_object, Slider):
            self.n_sliders += 1
            self.n_timing += TIMING_JUDGEMENTS
            return self._build_slider(hit_object)

        logging.warning(f'skipping unsupported hit object: {hit_object!r}')
        return None

    def _nested(self, slider, start, duration, position_at):
        """The parts of a slider after its head in the order they are
        judged.

        Returns
        -------
        nested : list[(float, Position, bool)]
            The time, position and whether the part is a repeat. The last
            entry is the tail.
        """
        span_count = max(slider.repeat, 1)
        span_duration = duration / span_count
        length = min(MAX_SLIDER_LENGTH, slider.length)
        tick_distance = clamp(slider.tick_distance, 0, length)

        tick_progress = self._tick_progress
        tick_positions = self._tick_positions
        tick_progress.clear()
        tick_positions.clear()

        if tick_distance and duration > 0:
            velocity = length * span_count / duration
            min_distance_from_end = velocity * TICK_END_GAP

            distance = tick_distance
            while distance <= length:
                if distance >= length - min_distance_from_end:
                    break
                tick_progress.append(distance / length)
                distance += tick_distance

            # ticks sit at the same path positions on every span
            tick_positions.extend(position_at(p) for p in tick_progress)

        nested = []
        for span in range(span_count):
            span_start = start + span * span_duration
            reverse = span % 2 == 1

            ticks = [
                (
                    span_start + (1 - p if reverse else p) * span_duration,
                    pos,
                    False,
                )
                for p, pos in zip(tick_progress, tick_positions)
            ]
            if reverse:
                ticks.reverse()
            nested.extend(ticks)

            if span < span_count - 1:
                nested.append((
                    span_start + span_duration,
                    position_at((span + 1) % 2),
                    True,
                ))

        final_span_end = start + duration
        tail_time = max(
            start + duration / 2,
            final_span_end - LEGACY_LAST_TICK_OFFSET,
        )
        nested.append((tail_time, position_at(span_count % 2), False))
        return nested

    def _build_slider(self, slider):
        start = _ms(slider.time)
        end = _ms(slider.end_time)
        duration = max(end - start, 0)
        span_count = max(slider.repeat, 1)
        span_duration = duration / span_count

        def position_at(progress):
            return self._position(slider.curve(progress))

        pos = self._position(slider.position)
        nested = self._nested(slider, start, duration, position_at)
        self.max_combo += 1 + len(nested)
        self.n_nested += len(nested)

        tail_time, end_pos, _ = nested[-1]
        lazy_travel_time = tail_time - start

        if span_duration:
            end_progress = lazy_travel_time / span_duration
            if end_progress % 2 >= 1:
                end_progress = 1 - end_progress % 1
            else:
                end_progress %= 1
        else:
            end_progress = 0
        lazy_end_pos = position_at(end_progress)

        # lazy travel distances are scaled to the normalized radius
        scaling = NORMALIZED_RADIUS / self.radius
        cursor = pos
        travel_dist = 0.0
        last = len(nested) - 1
        for i, (_, nested_pos, is_repeat) in enumerate(nested):
            movement = nested_pos - cursor
            movement_length = scaling * movement.length
            required_movement = ASSUMED_SLIDER_RADIUS

            if i == last:
                # the player takes the shorter of the lazy end and the
                # true tail
                lazy_movement = lazy_end_pos - cursor
                if lazy_movement.length < movement.length:
                    movement = lazy_movement
                movement_length = scaling * movement.length
            elif is_repeat:
                required_movement = NORMALIZED_RADIUS

            if movement_length > required_movement:
                ratio = (movement_length - required_movement) / movement_length
                cursor = cursor + movement * ratio
                movement_length *= ratio
                travel_dist += movement_length

            if i == last:
                lazy_end_pos = cursor

        # bonus for repeat sliders
        travel_dist *= (1 + (span_count - 1) / 2.5) ** (1 / 2.5)

        return OsuObject(
            ObjectKind.slider,
            start,
            pos,
            end_time=end,
            end_pos=end_pos,
            lazy_end_pos=lazy_end_pos,
            lazy_travel_dist=travel_dist,
            lazy_travel_time=lazy_travel_time,
        )


def build_objects(hit_objects, radius, *, hard_rock=False, passed_objects=None):
    """Build the processed objects for the first ``passed_objects`` raw
    objects.

    Parameters
    ----------
    hit_objects : sequence[HitObject]
        The raw hit objects in chronological order.
    radius : float
        The circle radius after mods.
    hard_rock : bool, optional
        Flip objects vertically.
    passed_objects : int, optional
        Only consider this many raw objects. Defaults to all of them.

    Returns
    -------
    objects : list[OsuObject]
        The processed objects.
    builder : ObjectBuilder
        The builder, which holds the combo and object counts.
    """
    if passed_objects is not None:
        hit_objects = hit_objects[:passed_objects]

    builder = ObjectBuilder(radius, hard_rock=hard_rock)
    objects = []
    for hit_object in hit_objects:
        osu_object = builder.build(hit_object)
        if osu_object is not None:
            objects.append(osu_object)

    return objects, builder
