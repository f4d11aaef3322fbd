from collections import namedtuple
import enum


class Mod(enum.IntEnum):
    """The bit values of the osu! mods which change difficulty or
    performance.
    """
    no_fail = 1
    easy = 1 << 1
    hidden = 1 << 3
    hard_rock = 1 << 4
    double_time = 1 << 6
    relax = 1 << 7
    half_time = 1 << 8
    nightcore = 1 << 9  # always used with double_time
    flashlight = 1 << 10

    @classmethod
    def parse(cls, cs):
        """Parse a mod mask out of a list of shortened mod names.

        Parameters
        ----------
        cs : str
            The mod string, for example ``'HDDT'``.

        Returns
        -------
        mod_mask : int
            The mod mask.
        """
        if len(cs) % 2 != 0:
            raise ValueError(f'malformed mods: {cs!r}')

        cs = cs.lower()
        mapping = {
            'nm': 0,
            'nf': cls.no_fail,
            'ez': cls.easy,
            'hd': cls.hidden,
            'hr': cls.hard_rock,
            'dt': cls.double_time,
            'nc': cls.nightcore | cls.double_time,
            'rx': cls.relax,
            'ht': cls.half_time,
            'fl': cls.flashlight,
        }

        mod = 0
        for n in range(0, len(cs), 2):
            try:
                mod |= mapping[cs[n:n + 2]]
            except KeyError:
                raise ValueError(f'unknown mod: {cs[n:n + 2]!r}')

        return mod


class Mods(namedtuple('Mods', (
        'hard_rock', 'easy', 'half_time', 'double_time', 'hidden',
        'flashlight', 'no_fail', 'relax'))):
    """The set of active mods for a calculation.

    Parameters
    ----------
    hard_rock, easy, half_time, double_time, hidden, flashlight, no_fail, relax
        Whether the mod is enabled. All default to ``False``.

    Notes
    -----
    ``Mods`` is hashable so it can key the attribute cache of a
    :class:`~ppcalc.beatmap.Beatmap`.
    """
    def __new__(cls,
                hard_rock=False,
                easy=False,
                half_time=False,
                double_time=False,
                hidden=False,
                flashlight=False,
                no_fail=False,
                relax=False):
        return super().__new__(
            cls,
            bool(hard_rock),
            bool(easy),
            bool(half_time),
            bool(double_time),
            bool(hidden),
            bool(flashlight),
            bool(no_fail),
            bool(relax),
        )

    @classmethod
    def from_mask(cls, mask):
        """Build the mod set from a bitmask of :class:`Mod` values.
        """
        return cls(
            hard_rock=mask & Mod.hard_rock,
            easy=mask & Mod.easy,
            half_time=mask & Mod.half_time,
            double_time=mask & (Mod.double_time | Mod.nightcore),
            hidden=mask & Mod.hidden,
            flashlight=mask & Mod.flashlight,
            no_fail=mask & Mod.no_fail,
            relax=mask & Mod.relax,
        )

    @classmethod
    def parse(cls, cs):
        """Build the mod set from a string like ``'HDHR'``.
        """
        return cls.from_mask(Mod.parse(cs))

    @property
    def clock_rate(self):
        """The speed multiplier applied to the map's clock.
        """
        if self.double_time:
            return 1.5
        if self.half_time:
            return 0.75
        return 1.0

    @property
    def od_ar_hp_multiplier(self):
        if self.hard_rock:
            return 1.4
        if self.easy:
            return 0.5
        return 1.0

    def __repr__(self):
        enabled = [name for name, value in self._asdict().items() if value]
        return f'<Mods: {", ".join(enabled) or "none"}>'


NO_MODS = Mods()


def difficulty_range(value, max_, avg, min_):
    """Map a difficulty setting in [0, 10] onto a time range.

    Parameters
    ----------
    value : float
        The difficulty setting.
    max_ : float
        The result at a setting of 10.
    avg : float
        The result at a setting of 5.
    min_ : float
        The result at a setting of 0.
    """
    if value > 5:
        return avg + (max_ - avg) * (value - 5) / 5
    if value < 5:
        return avg - (avg - min_) * (5 - value) / 5
    return avg


def ar_to_ms(ar):
    """Convert an approach rate value to milliseconds of time that an element
    appears on the screen before being hit.

    Parameters
    ----------
    ar : float
        The approach rate.

    Returns
    -------
    milliseconds : float
        The preempt time at the given approach rate.

    See Also
    --------
    :func:`ppcalc.mod.ms_to_ar`
    """
    return difficulty_range(ar, 450, 1200, 1800)


def ms_to_ar(ms):
    """Convert a preempt time in milliseconds into an approach rate value.

    See Also
    --------
    :func:`ppcalc.mod.ar_to_ms`
    """
    # the ar lines cross at 1200ms (ar 5)
    if ms > 1200:
        return (1800 - ms) / 120
    return 5 + (1200 - ms) / 150


def od_to_ms_300(od):
    """Convert an overall difficulty value into the width of the 300 hit
    window in milliseconds.

    See Also
    --------
    :func:`ppcalc.mod.ms_300_to_od`
    """
    return difficulty_range(od, 20, 50, 80)


def ms_300_to_od(ms):
    """Convert the milliseconds to score a 300 into an OD value.

    See Also
    --------
    :func:`ppcalc.mod.od_to_ms_300`
    """
    return (80 - ms) / 6


def circle_radius(cs):
    """Compute the ``CS`` attribute into a circle radius in osu! pixels.
    """
    return (512 / 16) * (1 - 0.7 * (cs - 5) / 5)


class BeatmapAttributes(namedtuple('BeatmapAttributes', 'ar od cs hp clock_rate')):
    """The map settings as they are experienced with a set of mods.

    Parameters
    ----------
    ar : float
        The effective approach rate, including the clock rate.
    od : float
        The overall difficulty after HR/EZ, before the clock rate.
    cs : float
        The circle size.
    hp : float
        The health drain rate.
    clock_rate : float
        The speed multiplier of the mods.
    """
    @classmethod
    def from_beatmap(cls, beatmap, mods):
        multiplier = mods.od_ar_hp_multiplier
        clock_rate = mods.clock_rate

        preempt = ar_to_ms(beatmap.approach_rate * multiplier)
        preempt = min(max(preempt, 450), 1800) / clock_rate

        cs = beatmap.circle_size
        if mods.hard_rock:
            cs = min(cs * 1.3, 10)
        elif mods.easy:
            cs *= 0.5

        return cls(
            ar=ms_to_ar(preempt),
            od=min(beatmap.overall_difficulty * multiplier, 10),
            cs=cs,
            hp=min(beatmap.hp_drain_rate * multiplier, 10),
            clock_rate=clock_rate,
        )

    @property
    def hit_window(self):
        """The clock-scaled width of the 300 hit window in milliseconds.
        """
        return od_to_ms_300(self.od) / self.clock_rate

    @property
    def effective_od(self):
        """The OD which produces :attr:`hit_window` at a clock rate of 1.
        """
        return ms_300_to_od(self.hit_window)
