"""Slider path sampling.

A :class:`Curve` maps a progress value ``t`` in [0, 1] onto an absolute
playfield :class:`~ppcalc.position.Position`, where ``t`` is measured along
the requested (pixel) length of the slider. This is the only thing the object
builder needs from a path; any object with the same call signature can be
used in place of these implementations.
"""
from abc import ABCMeta, abstractmethod
import bisect
import math

import numpy as np
from scipy.special import comb

from .position import Position, distance
from .utils import lazyval


class Curve(metaclass=ABCMeta):
    """A slider path.

    Parameters
    ----------
    points : list[Position]
        The control points of the path, starting with the slider head.
    req_length : float
        The length of the slider in osu! pixels.
    """
    _kind_dispatch = {}
    kinds = ()

    def __init__(self, points, req_length):
        self.points = points
        self.req_length = req_length

    @classmethod
    def from_kind_and_points(cls, kind, points, req_length):
        try:
            subcls = cls._kind_dispatch[kind]
        except KeyError:
            raise ValueError(f'unknown curve type: {kind!r}')

        return subcls(points, req_length)

    @abstractmethod
    def __call__(self, t):
        """Compute the position of the curve at progress ``t``.

        Parameters
        ----------
        t : float
            The progress along the requested length in the range [0, 1]

        Returns
        -------
        position : Position
            The position of the curve.
        """
        raise NotImplementedError('__call__')

    def __init_subclass__(cls):
        for kind in cls.kinds:
            cls._kind_dispatch[kind] = cls


class Bezier(Curve):
    """A single bezier segment.
    """
    # number of points used to approximate the arc length
    _length_samples = 50

    def __init__(self, points, req_length):
        super().__init__(points, req_length)
        self._coordinates = np.array(points, dtype=np.float64).T

    def __call__(self, t):
        length = self.length
        if not length:
            return self.at(0)
        return self.at(min(1, t * self.req_length / length))

    def at(self, t):
        """The position at the bezier parameter ``t``.
        """
        n = len(self.points) - 1
        ixs = np.arange(n + 1)
        x, y = np.sum(
            comb(n, ixs) *
            (1 - t) ** (n - ixs) *
            t ** ixs *
            self._coordinates,
            axis=1,
        )
        return Position(float(x), float(y))

    @lazyval
    def length(self):
        """Approximates length as piecewise linear"""
        samples = [
            self.at(t)
            for t in np.linspace(0, 1, num=self._length_samples)
        ]
        return sum(distance(a, b) for a, b in zip(samples, samples[1:]))


class MetaCurve(Curve):
    """A chain of bezier segments split wherever a control point repeats.
    """
    kinds = 'B'

    def __init__(self, points, req_length):
        super().__init__(points, req_length)
        self._curves = [
            Bezier(subpoints, None)
            for subpoints in split_at_dupes(points)
            if len(subpoints) > 1
        ] or [Bezier(points[:1], None)]

    @lazyval
    def _ends(self):
        """The cumulative arc length at the end of each segment.
        """
        ends = []
        total = 0
        for curve in self._curves:
            total += curve.length
            ends.append(total)
        return ends

    def __call__(self, t):
        target = t * self.req_length
        ends = self._ends

        ix = min(bisect.bisect_left(ends, target), len(ends) - 1)
        curve = self._curves[ix]
        start = ends[ix - 1] if ix else 0

        if not curve.length:
            return curve.at(0)
        return curve.at(min(1, max(0, (target - start) / curve.length)))


class Linear(Curve):
    """A polyline through the control points.

    Notes
    -----
    If the requested length is longer than the polyline, the last segment is
    extended.
    """
    kinds = 'L'

    @lazyval
    def _ends(self):
        ends = []
        total = 0
        for a, b in zip(self.points, self.points[1:]):
            total += distance(a, b)
            ends.append(total)
        return ends

    def __call__(self, t):
        points = self.points
        if len(points) < 2:
            return Position(*points[0])

        target = t * self.req_length
        ends = self._ends
        ix = min(bisect.bisect_left(ends, target), len(ends) - 1)

        start = ends[ix - 1] if ix else 0
        segment_length = ends[ix] - start
        a = points[ix]
        b = points[ix + 1]
        if not segment_length:
            return Position(*a)

        ratio = (target - start) / segment_length
        return Position(
            a.x + (b.x - a.x) * ratio,
            a.y + (b.y - a.y) * ratio,
        )


class Perfect(Curve):
    """A circular arc through exactly three points.
    """
    kinds = 'P'

    def __new__(cls, points, req_length):
        if len(points) != 3:
            # osu! uses the bezier curve if there are not exactly 3 points
            return MetaCurve(points, req_length)

        try:
            center = get_center(*points)
        except ValueError:
            # collinear points cannot describe an arc; osu! also falls back
            # to a bezier here
            return MetaCurve(points, req_length)

        self = super().__new__(cls)
        self._center = center
        return self

    def __init__(self, points, req_length):
        super().__init__(points, req_length)

        coordinates = np.array(points, dtype=np.float64) - self._center

        # angles of the first and last point to the center
        start_angle, end_angle = np.arctan2(
            coordinates[::2, 1],
            coordinates[::2, 0],
        )

        # normalize so that the sweep is positive
        if end_angle < start_angle:
            end_angle += 2 * math.pi

        angle = end_angle - start_angle

        # switch direction if the middle point is on the other side
        a_to_c = coordinates[2] - coordinates[0]
        ortho_a_to_c = np.array((a_to_c[1], -a_to_c[0]))
        if np.dot(ortho_a_to_c, coordinates[1] - coordinates[0]) < 0:
            angle = -(2 * math.pi - angle)

        radius = math.hypot(coordinates[0][0], coordinates[0][1])
        if radius:
            # sweep exactly the requested length
            angle = math.copysign(req_length / radius, angle)

        self._angle = float(angle)

    def __call__(self, t):
        return rotate(self.points[0], self._center, self._angle * t)


def get_center(a, b, c):
    """Returns the Position of the center of the circle described by the 3
    points

    Parameters
    ----------
    a, b, c : Position
        The three positions.

    Returns
    -------
    center : Position
        The center of the three points.

    Raises
    ------
    ValueError
        Raised when the points are collinear or coincident.
    """
    a, b, c = np.array([a, b, c], dtype=np.float64)

    a_squared = np.sum(np.square(b - c))
    b_squared = np.sum(np.square(a - c))
    c_squared = np.sum(np.square(a - b))

    if np.isclose([a_squared, b_squared, c_squared], 0).any():
        raise ValueError('coincident points')

    s = a_squared * (b_squared + c_squared - a_squared)
    t = b_squared * (a_squared + c_squared - b_squared)
    u = c_squared * (a_squared + b_squared - c_squared)

    sum_ = s + t + u

    if np.isclose(sum_, 0):
        raise ValueError('collinear points')

    return Position(*((s * a + t * b + u * c) / sum_))


def rotate(position, center, radians):
    """Rotate ``position`` by ``radians`` around ``center``.
    """
    x_dist = position.x - center.x
    y_dist = position.y - center.y

    return Position(
        (x_dist * math.cos(radians) - y_dist * math.sin(radians)) + center.x,
        (x_dist * math.sin(radians) + y_dist * math.cos(radians)) + center.y,
    )


def split_at_dupes(points):
    """Split the control points into segments wherever a point is repeated.
    """
    out = []
    start = 0
    for i in range(1, len(points)):
        if points[i] == points[i - 1]:
            out.append(points[start:i])
            start = i
    out.append(points[start:])
    return out
