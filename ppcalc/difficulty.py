from collections import deque, namedtuple
import logging
import math

import numpy as np

from .difficulty_object import DifficultyObject
from .mod import NO_MODS, BeatmapAttributes, ar_to_ms
from .osu_object import build_objects
from .scaling import ScalingFactor
from .skills import MAX_HISTORY_LENGTH, SECTION_LENGTH, Skills
from .stacking import resolve_stacking, resolve_stacking_legacy

# scales the square root of a skill's difficulty value to its rating
DIFFICULTY_MULTIPLIER = 0.0675

# beatmaps older than this use the legacy stacking algorithm
MODERN_STACKING_VERSION = 6


class DifficultyAttributes(namedtuple('DifficultyAttributes', (
        'aim_strain', 'speed_strain', 'flashlight_rating', 'slider_factor',
        'ar', 'od', 'hp', 'n_circles', 'n_sliders', 'n_spinners',
        'n_partial_objects', 'n_minor_objects', 'max_combo', 'stars'),
        defaults=(0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 0, 0, 0, 0, 0, 0, 0.0))):
    """The difficulty of a beatmap with a set of mods.

    Parameters
    ----------
    aim_strain : float
        The aim rating.
    speed_strain : float
        The speed rating.
    flashlight_rating : float
        The flashlight rating. This is 0 without flashlight.
    slider_factor : float
        The aim rating without sliders divided by the aim rating.
    ar : float
        The approach rate with mods.
    od : float
        The overall difficulty with mods, including the clock rate.
    hp : float
        The health drain rate with mods.
    n_circles, n_sliders, n_spinners : int
        The number of objects of each kind.
    n_partial_objects : int
        The number of combo-bearing slider parts which are not slider heads:
        ticks, repeats and tails.
    n_minor_objects : int
        The number of minor judgements, the timing judgements carried by
        every circle, slider head and spinner, see
        :data:`ppcalc.osu_object.TIMING_JUDGEMENTS`.
    max_combo : int
        The highest achievable combo.
    stars : float
        The star rating.
    """
    @property
    def n_full_objects(self):
        """The number of objects which give a full judgement.
        """
        return self.n_circles + self.n_sliders + self.n_spinners


class Strains(namedtuple('Strains', 'section_length strains')):
    """The strain peaks of a beatmap over time.

    Parameters
    ----------
    section_length : float
        The length of each section in unscaled milliseconds.
    strains : np.ndarray[float]
        The sum of the skills' peak strains in each section.
    """


def base_performance(rating):
    """Scale a skill rating to its contribution to performance.

    Parameters
    ----------
    rating : float or np.ndarray[float]
        The aim or speed rating.

    Returns
    -------
    performance : float or np.ndarray[float]
        The base performance.
    """
    return (
        (5 * np.maximum(1, rating / DIFFICULTY_MULTIPLIER) - 4) ** 3
    ) / 100000


def calculate_star_rating(aim_rating, speed_rating, flashlight_rating):
    """Combine the skill ratings into the star rating.

    Parameters
    ----------
    aim_rating : float
        The aim rating.
    speed_rating : float
        The speed rating.
    flashlight_rating : float
        The flashlight rating.

    Returns
    -------
    stars : float
        The star rating.
    """
    if aim_rating == speed_rating == flashlight_rating == 0:
        return 0.0

    combined = (
        base_performance(aim_rating) ** 1.1 +
        base_performance(speed_rating) ** 1.1 +
        (flashlight_rating ** 2 * 25) ** 1.1
    ) ** (1 / 1.1)

    # the cube root is unstable for tiny values
    if combined <= 0.00001:
        return 0.0

    return float(
        1.12 ** (1 / 3) *
        0.027 *
        (np.cbrt(100000 / 2 ** (1 / 1.1) * combined) + 4)
    )


def _stack_threshold(beatmap, mods):
    ar = beatmap.approach_rate
    if mods.hard_rock:
        ar = min(ar * 1.4, 10)
    elif mods.easy:
        ar *= 0.5

    return ar_to_ms(ar) * beatmap.stack_leniency


def _calculate_skills(beatmap, mods, passed_objects):
    """Run the objects of a beatmap through the skill trackers.

    Returns
    -------
    skills : Skills or None
        The skills after every object has been processed, or None when there
        are not enough objects to compute strains.
    attributes : DifficultyAttributes
        The attributes without any ratings filled in.
    """
    map_attributes = BeatmapAttributes.from_beatmap(beatmap, mods)
    degenerate = DifficultyAttributes(
        ar=map_attributes.ar,
        od=map_attributes.effective_od,
        hp=map_attributes.hp,
    )

    scaling_factor = ScalingFactor(map_attributes.cs)
    objects, builder = build_objects(
        beatmap.hit_objects(),
        scaling_factor.radius,
        hard_rock=mods.hard_rock,
        passed_objects=passed_objects,
    )

    if len(objects) < 2:
        logging.debug(
            f'only {len(objects)} usable objects, skipping strain'
            ' calculation',
        )
        return None, degenerate

    stack_threshold = _stack_threshold(beatmap, mods)
    if beatmap.format_version >= MODERN_STACKING_VERSION:
        logging.debug(f'resolving stacks with threshold {stack_threshold:g}')
        resolve_stacking(objects, stack_threshold)
    else:
        logging.debug(
            f'resolving legacy stacks for v{beatmap.format_version} beatmap'
            f' with threshold {stack_threshold:g}',
        )
        resolve_stacking_legacy(objects, stack_threshold)

    for ob in objects:
        ob.apply_stacking(scaling_factor)

    clock_rate = map_attributes.clock_rate
    first = objects[0]
    skills = Skills(
        map_attributes.hit_window,
        scaling_factor.radius,
        first.time / clock_rate,
        relax=mods.relax,
        flashlight=mods.flashlight,
    )

    # the first object has no strain so we begin at the following section
    section_end = (
        math.ceil(first.time / clock_rate / SECTION_LENGTH) * SECTION_LENGTH
    )

    history = deque(maxlen=MAX_HISTORY_LENGTH)
    previous_previous = None
    previous = first
    for current in objects[1:]:
        difficulty_object = DifficultyObject(
            current,
            previous,
            previous_previous,
            scaling_factor,
            clock_rate,
        )

        while difficulty_object.start_time > section_end:
            if history:
                skills.save_peak_and_start_new_section(section_end)
            else:
                skills.start_new_section_from(section_end)
            section_end += SECTION_LENGTH

        skills.process(difficulty_object, history)
        history.appendleft(difficulty_object)
        previous_previous, previous = previous, current

    skills.save_current_peak()

    return skills, degenerate._replace(
        n_circles=builder.n_circles,
        n_sliders=builder.n_sliders,
        n_spinners=builder.n_spinners,
        n_partial_objects=builder.n_nested,
        n_minor_objects=builder.n_timing,
        max_combo=builder.max_combo,
    )


def _rating(skill):
    if skill is None:
        return 0.0
    return float(np.sqrt(skill.difficulty_value()) * DIFFICULTY_MULTIPLIER)


def calculate_difficulty(beatmap, mods=NO_MODS, passed_objects=None):
    """Compute the difficulty attributes of a beatmap.

    Parameters
    ----------
    beatmap : Beatmap
        The beatmap to compute the difficulty of.
    mods : Mods, optional
        The mods to apply.
    passed_objects : int, optional
        Only consider the first ``passed_objects`` hit objects, for example
        for a failed play.

    Returns
    -------
    attributes : DifficultyAttributes
        The difficulty attributes. When fewer than two objects can be
        processed only ``ar``, ``od`` and ``hp`` are filled in.
    """
    skills, attributes = _calculate_skills(beatmap, mods, passed_objects)
    if skills is None:
        return attributes

    aim_rating = _rating(skills.aim)
    if aim_rating > 0:
        slider_factor = _rating(skills.aim_no_sliders) / aim_rating
    else:
        slider_factor = 1.0

    speed_rating = _rating(skills.speed)
    flashlight_rating = _rating(skills.flashlight)

    return attributes._replace(
        aim_strain=aim_rating,
        speed_strain=speed_rating,
        flashlight_rating=flashlight_rating,
        slider_factor=slider_factor,
        stars=calculate_star_rating(
            aim_rating,
            speed_rating,
            flashlight_rating,
        ),
    )


def calculate_strains(beatmap, mods=NO_MODS):
    """Compute the combined strain peak of each section of a beatmap.

    Parameters
    ----------
    beatmap : Beatmap
        The beatmap to compute the strains of.
    mods : Mods, optional
        The mods to apply.

    Returns
    -------
    strains : Strains
        The section peaks of aim, speed and flashlight summed together.
        This is empty when there are fewer than two objects.
    """
    section_length = SECTION_LENGTH * mods.clock_rate

    skills, _ = _calculate_skills(beatmap, mods, None)
    if skills is None:
        return Strains(section_length, np.array([], dtype=float))

    strains = np.array(skills.aim.strain_peaks, dtype=float)
    for skill in (skills.speed, skills.flashlight):
        if skill is not None:
            strains += skill.strain_peaks

    return Strains(section_length, strains)
