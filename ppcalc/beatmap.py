import logging

from .difficulty import calculate_difficulty, calculate_strains
from .hit_object import Circle, Slider, Spinner
from .mod import NO_MODS, BeatmapAttributes
from .performance import Score, calculate_performance


class Beatmap:
    """An osu! standard beatmap.

    Parameters
    ----------
    format_version : int
        The version of the beatmap file. This selects the stacking algorithm.
    stack_leniency : float
        How often closely placed hit objects will be placed together.
    hp_drain_rate : float
        The ``HP`` attribute of the beatmap.
    circle_size : float
        The ``CS`` attribute of the beatmap.
    overall_difficulty : float
        The ``OD`` attribute of the beatmap.
    approach_rate : float
        The ``AR`` attribute of the beatmap.
    hit_objects : list[HitObject]
        The hit objects in the map in chronological order.

    Notes
    -----
    Difficulty attributes are cached per mods and number of passed objects,
    so the hit objects must not be changed after construction.
    """
    def __init__(self,
                 *,
                 format_version,
                 stack_leniency,
                 hp_drain_rate,
                 circle_size,
                 overall_difficulty,
                 approach_rate,
                 hit_objects):
        self.format_version = format_version
        self.stack_leniency = stack_leniency
        self.hp_drain_rate = hp_drain_rate
        self.circle_size = circle_size
        self.overall_difficulty = overall_difficulty
        self.approach_rate = approach_rate
        self._hit_objects = list(hit_objects)

        # cache the difficulty with different mods and passed objects
        self._difficulty_cache = {}

    def __repr__(self):
        return (
            f'<{type(self).__qualname__}: v{self.format_version},'
            f' {len(self._hit_objects)} hit objects>'
        )

    def hit_objects(self, *, circles=True, sliders=True, spinners=True):
        """Retrieve hit objects.

        Parameters
        ----------
        circles : bool, optional
            If circles should be included.
        sliders : bool, optional
            If sliders should be included.
        spinners : bool, optional
            If spinners should be included.

        Returns
        -------
        hit_objects : list[HitObject]
            The hit objects of the requested kinds in chronological order.
        """
        if circles and sliders and spinners:
            return list(self._hit_objects)

        kinds = []
        if circles:
            kinds.append(Circle)
        if sliders:
            kinds.append(Slider)
        if spinners:
            kinds.append(Spinner)
        kinds = tuple(kinds)

        return [ob for ob in self._hit_objects if isinstance(ob, kinds)]

    def attributes(self, mods=NO_MODS):
        """The map settings with a set of mods.

        Parameters
        ----------
        mods : Mods, optional
            The mods to apply.

        Returns
        -------
        attributes : BeatmapAttributes
            The adjusted settings.
        """
        return BeatmapAttributes.from_beatmap(self, mods)

    def hp(self, mods=NO_MODS):
        """Compute the Health Drain (HP) value with a set of mods.
        """
        return self.attributes(mods).hp

    def cs(self, mods=NO_MODS):
        """Compute the Circle Size (CS) value with a set of mods.
        """
        return self.attributes(mods).cs

    def od(self, mods=NO_MODS):
        """Compute the effective Overall Difficulty (OD) value with a set of
        mods.

        Notes
        -----
        Double time and half time do not change the in game OD; however,
        because the map is sped up or slowed down, the hit windows are
        effectively changed.
        """
        return self.attributes(mods).effective_od

    def ar(self, mods=NO_MODS):
        """Compute the effective Approach Rate (AR) value with a set of mods.

        Notes
        -----
        Double time and half time do not change the in game AR; however,
        because the map is sped up or slowed down, the effective approach
        rate is changed.
        """
        return self.attributes(mods).ar

    def difficulty(self, mods=NO_MODS, passed_objects=None):
        """Compute the difficulty attributes of the map.

        Parameters
        ----------
        mods : Mods, optional
            The mods to apply.
        passed_objects : int, optional
            Only consider the first ``passed_objects`` hit objects.

        Returns
        -------
        attributes : DifficultyAttributes
            The difficulty attributes.
        """
        key = mods, passed_objects
        try:
            attributes = self._difficulty_cache[key]
        except KeyError:
            attributes = self._difficulty_cache[key] = calculate_difficulty(
                self,
                mods,
                passed_objects,
            )
        else:
            logging.debug(f'using cached difficulty for {mods!r}')

        return attributes

    def stars(self, mods=NO_MODS):
        """The star rating of the map.
        """
        return self.difficulty(mods).stars

    @property
    def max_combo(self):
        """The highest achievable combo.
        """
        return self.difficulty().max_combo

    def strains(self, mods=NO_MODS):
        """The combined strain peak of each section of the map.

        See Also
        --------
        :func:`ppcalc.difficulty.calculate_strains`
        """
        return calculate_strains(self, mods)

    def performance_points(self, score=None):
        """Compute the performance points for a play of this map.

        Parameters
        ----------
        score : Score, optional
            The play. Defaults to an SS with no mods.

        Returns
        -------
        performance : PerformanceAttributes
            The performance points and how they were reached.
        """
        if score is None:
            score = Score()

        return calculate_performance(
            self,
            score,
            self.difficulty(score.mods, score.passed_objects),
        )
