"""The raw hit objects of a beatmap, as produced by a beatmap parser.
"""


class HitObject:
    """An abstract hit element for osu! standard.

    Parameters
    ----------
    position : Position
        Where this element appears on the screen.
    time : timedelta
        When this element appears in the map.
    """
    def __init__(self, position, time):
        self.position = position
        self.time = time

    @property
    def end_time(self):
        return self.time

    def __repr__(self):
        return (
            f'<{type(self).__qualname__}: {self.position},'
            f' {self.time.total_seconds() * 1000:g}ms>'
        )


class Circle(HitObject):
    """A circle hit element.

    Parameters
    ----------
    position : Position
        Where this circle appears on the screen.
    time : timedelta
        When this circle appears in the map.
    """


class Spinner(HitObject):
    """A spinner hit element

    Parameters
    ----------
    position : Position
        Where this spinner appears on the screen.
    time : timedelta
        When this spinner appears in the map.
    end_time : timedelta
        When this spinner ends in the map.
    """
    def __init__(self, position, time, end_time):
        super().__init__(position, time)
        self._end_time = end_time

    @property
    def end_time(self):
        return self._end_time


class Slider(HitObject):
    """A slider hit element.

    Parameters
    ----------
    position : Position
        Where this slider appears on the screen.
    time : datetime.timedelta
        When this slider appears in the map.
    end_time : datetime.timedelta
        When this slider ends in the map
    curve : callable[float, Position]
        The slider's path, see :class:`ppcalc.curve.Curve`.
    repeat : int
        The number of spans of the slider; a slider without repeats has one
        span.
    length : float
        The length of one span of this slider in osu! pixels.
    num_beats : float
        The number of beats that this slider spans, over all spans.
    tick_rate : float
        The number of ticks per beat.
    """
    def __init__(self,
                 position,
                 time,
                 end_time,
                 curve,
                 repeat,
                 length,
                 num_beats,
                 tick_rate):
        super().__init__(position, time)
        self._end_time = end_time
        self.curve = curve
        self.repeat = repeat
        self.length = length
        self.num_beats = num_beats
        self.tick_rate = tick_rate

    @property
    def end_time(self):
        return self._end_time

    @property
    def tick_distance(self):
        """The distance in osu! pixels between two slider ticks.
        """
        if not self.num_beats or not self.tick_rate:
            return 0
        pixels_per_beat = self.length * self.repeat / self.num_beats
        return pixels_per_beat / self.tick_rate
