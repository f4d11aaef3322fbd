import numpy as np

from .scaling import NORMALIZED_RADIUS

# the shortest time between two objects that is considered when computing
# strains
MIN_DELTA_TIME = 25

MAXIMUM_SLIDER_RADIUS = NORMALIZED_RADIUS * 2.4
ASSUMED_SLIDER_RADIUS = NORMALIZED_RADIUS * 1.65


class DifficultyObject:
    """The features of one object relative to the objects before it.

    Parameters
    ----------
    base : OsuObject
        The current object, after stacking.
    previous : OsuObject
        The object immediately before ``base``.
    previous_previous : OsuObject or None
        The object before ``previous`` if there is one.
    scaling_factor : ScalingFactor
        The geometry of the map.
    clock_rate : float
        The speed multiplier of the mods.

    Attributes
    ----------
    start_time : float
        The clock-scaled start time of ``base`` in milliseconds.
    delta : float
        The clock-scaled time since ``previous`` started.
    strain_time : float
        ``delta``, but never less than :data:`MIN_DELTA_TIME`.
    jump_dist : float
        The normalized distance from where the cursor left ``previous`` to
        ``base``.
    movement_dist : float
        The normalized distance the cursor must move outside of slider
        follow circles.
    movement_time : float
        The time available for ``movement_dist``.
    travel_dist : float
        The normalized distance travelled through ``previous`` when it is a
        slider.
    travel_time : float
        The time spent travelling through ``previous`` when it is a slider.
    angle : float or None
        The angle in radians formed at ``previous`` by the cursor path, or
        None when there are not enough objects to form one.
    """
    def __init__(self,
                 base,
                 previous,
                 previous_previous,
                 scaling_factor,
                 clock_rate):
        self.base = base
        self.start_time = base.time / clock_rate
        self.delta = (base.time - previous.time) / clock_rate
        self.strain_time = max(self.delta, MIN_DELTA_TIME)

        self.jump_dist = 0.0
        self.movement_dist = 0.0
        self.movement_time = self.strain_time
        self.travel_dist = 0.0
        self.travel_time = 0.0
        self.angle = None

        if base.is_spinner or previous.is_spinner:
            return

        factor = scaling_factor.factor
        last_cursor = previous.cursor_pos
        self.jump_dist = (base.stacked_pos - last_cursor).length * factor

        if previous.is_slider:
            self.travel_dist = previous.lazy_travel_dist
            self.travel_time = max(
                previous.lazy_travel_time / clock_rate,
                MIN_DELTA_TIME,
            )
            self.movement_time = max(
                self.strain_time - self.travel_time,
                MIN_DELTA_TIME,
            )

            # the cursor may leave the follow circle before the tail, so the
            # movement is measured from whichever is closer
            tail_jump_dist = (
                (previous.stacked_end_pos - base.stacked_pos).length * factor
            )
            self.movement_dist = max(
                0,
                min(
                    self.jump_dist -
                    (MAXIMUM_SLIDER_RADIUS - ASSUMED_SLIDER_RADIUS),
                    tail_jump_dist - MAXIMUM_SLIDER_RADIUS,
                ),
            )
        else:
            self.movement_dist = self.jump_dist

        if previous_previous is not None and not previous_previous.is_spinner:
            v1 = previous_previous.cursor_pos - previous.stacked_pos
            v2 = base.stacked_pos - last_cursor

            dot = v1.dot(v2)
            det = v1.x * v2.y - v1.y * v2.x
            self.angle = abs(np.arctan2(det, dot))

    @property
    def is_slider(self):
        return self.base.is_slider

    @property
    def is_spinner(self):
        return self.base.is_spinner

    def __repr__(self):
        return (
            f'<{type(self).__qualname__}: {self.start_time:g}ms,'
            f' jump={self.jump_dist:g}>'
        )
