from .mod import circle_radius
from .position import Position

# diameter of 100; easier mental maths.
NORMALIZED_RADIUS = 50

OBJECT_RADIUS = 64

# circles smaller than this get a bonus to their scaled distances
SMALL_CIRCLE_THRESHOLD = 30


class ScalingFactor:
    """The circle-size dependent geometry of a map.

    Parameters
    ----------
    cs : float
        The circle size after mods.

    Attributes
    ----------
    scale : float
        The size of a hit object relative to the default size.
    radius : float
        The hit object radius in osu! pixels.
    factor : float
        The multiplier which takes playfield distances to normalized distances,
        where every circle has a radius of :data:`NORMALIZED_RADIUS`.
    """
    def __init__(self, cs):
        self.radius = radius = circle_radius(cs)
        self.scale = radius / OBJECT_RADIUS

        factor = NORMALIZED_RADIUS / radius
        if radius < SMALL_CIRCLE_THRESHOLD:
            factor *= 1 + min(SMALL_CIRCLE_THRESHOLD - radius, 5) / 50
        self.factor = factor

    def stack_offset(self, stack_height):
        """The offset applied to an object with the given stack height.

        Objects stack up and to the left, so a positive height gives a
        negative offset on both axes.
        """
        offset = stack_height * self.scale * -6.4
        return Position(offset, offset)

    def __repr__(self):
        return (
            f'<{type(self).__qualname__}: radius={self.radius:g},'
            f' factor={self.factor:g}>'
        )
