from collections import namedtuple

import numpy as np


class Position(namedtuple('Position', 'x y')):
    """A position on the osu! screen.

    Parameters
    ----------
    x : int or float
        The x coordinate in the range.
    y : int or float
        The y coordinate in the range.

    Notes
    -----
    The visible region of the osu! standard playfield is [0, 512] by [0, 384].
    Positions may fall outside of this range for slider curve control points
    and stacked objects.
    """
    x_max = 512
    y_max = 384

    def __eq__(self, other):
        return self.x == other.x and self.y == other.y

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash((self.x, self.y))

    def __add__(self, other):
        return Position(self.x + other.x, self.y + other.y)

    def __sub__(self, other):
        return Position(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar):
        return Position(self.x * scalar, self.y * scalar)

    __rmul__ = __mul__

    @property
    def length(self):
        return float(np.sqrt(self.x ** 2 + self.y ** 2))

    def dot(self, other):
        return self.x * other.x + self.y * other.y

    def flip_vertical(self):
        """The position mirrored over the horizontal center of the playfield,
        as with hard rock.
        """
        return Position(self.x, self.y_max - self.y)


def distance(start, end):
    return float(np.sqrt((start.x - end.x) ** 2 + (start.y - end.y) ** 2))
