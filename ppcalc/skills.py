"""Strain trackers for the osu! standard skills.

Every skill accumulates a strain which decays exponentially over time and is
raised by each object. The strain is sampled in fixed width sections and the
section peaks are combined into the skill's difficulty value. The skills only
differ in how much strain an object adds, so a single :class:`Skill` driver
is parameterized by a :class:`SkillKind`.
"""
from collections import namedtuple
from enum import IntEnum, unique
from itertools import islice
import math

import numpy as np

from .utils import clamp, lerp

# the width of a strain section in clock-scaled milliseconds
SECTION_LENGTH = 400

REDUCED_STRAIN_BASELINE = 0.75

# aim
WIDE_ANGLE_MULTIPLIER = 1.5
ACUTE_ANGLE_MULTIPLIER = 2.0
SLIDER_MULTIPLIER = 1.5
VELOCITY_CHANGE_MULTIPLIER = 0.75

# speed
SINGLE_SPACING_THRESHOLD = 125
RHYTHM_MULTIPLIER = 0.75
HISTORY_TIME_MAX = 5000
MIN_SPEED_BONUS = 75
SPEED_BALANCING_FACTOR = 40


@unique
class SkillKind(IntEnum):
    """The skills that make up the star rating.
    """
    aim = 0
    aim_no_sliders = 1
    speed = 2
    flashlight = 3


def _wide_angle_bonus(angle):
    return math.sin(
        3 / 4 * (min(5 / 6 * math.pi, max(math.pi / 6, angle)) - math.pi / 6),
    ) ** 2


def _acute_angle_bonus(angle):
    return 1 - _wide_angle_bonus(angle)


def _velocity(current, with_sliders, last_is_slider):
    velocity = current.jump_dist / current.strain_time

    if last_is_slider and with_sliders:
        movement_velocity = current.movement_dist / current.movement_time
        travel_velocity = current.travel_dist / current.travel_time
        velocity = max(velocity, movement_velocity + travel_velocity)

    return velocity


def _aim_strain(skill, current, previous, *, with_sliders=True):
    if current.is_spinner or len(previous) <= 1 or previous[0].is_spinner:
        return 0

    last = previous[0]
    last_last = previous[1]

    curr_velocity = _velocity(current, with_sliders, last.is_slider)
    prev_velocity = _velocity(last, with_sliders, last_last.is_slider)

    wide_angle_bonus = 0
    acute_angle_bonus = 0
    slider_bonus = 0
    velocity_change_bonus = 0

    aim_strain = curr_velocity

    # only rhythmically consistent patterns get angle bonuses
    shortest_time = min(current.strain_time, last.strain_time)
    longest_time = max(current.strain_time, last.strain_time)
    if (longest_time < 1.25 * shortest_time and
            current.angle is not None and
            last.angle is not None and
            last_last.angle is not None):
        curr_angle = current.angle
        last_angle = last.angle
        last_last_angle = last_last.angle

        angle_bonus = min(curr_velocity, prev_velocity)

        wide_angle_bonus = _wide_angle_bonus(curr_angle)
        acute_angle_bonus = _acute_angle_bonus(curr_angle)

        if current.strain_time > 100:
            acute_angle_bonus = 0
        else:
            acute_angle_bonus *= (
                _acute_angle_bonus(last_angle) *
                min(angle_bonus, 125 / current.strain_time) *
                math.sin(
                    math.pi / 2 * min(1, (100 - current.strain_time) / 25),
                ) ** 2 *
                math.sin(
                    math.pi / 2 *
                    (clamp(current.jump_dist, 50, 100) - 50) / 50,
                ) ** 2
            )

        # penalize repeated wide and acute angles
        wide_angle_bonus *= angle_bonus * (
            1 - min(wide_angle_bonus, _wide_angle_bonus(last_angle) ** 3)
        )
        acute_angle_bonus *= 0.5 + 0.5 * (
            1 - min(acute_angle_bonus, _acute_angle_bonus(last_last_angle) ** 3)
        )

    if max(prev_velocity, curr_velocity) != 0:
        # use the average velocity over the whole object
        prev_velocity = (last.jump_dist + last.travel_dist) / last.strain_time
        curr_velocity = (
            (current.jump_dist + current.travel_dist) / current.strain_time
        )

        difference = abs(prev_velocity - curr_velocity)
        dist_ratio = math.sin(
            math.pi / 2 * difference / max(prev_velocity, curr_velocity),
        ) ** 2

        overlap_velocity_buff = min(125 / shortest_time, difference)
        non_overlap_velocity_buff = difference * math.sin(
            math.pi / 2 *
            min(1, min(current.jump_dist, last.jump_dist) / 100),
        ) ** 2

        velocity_change_bonus = (
            max(overlap_velocity_buff, non_overlap_velocity_buff) *
            dist_ratio *
            (shortest_time / longest_time) ** 2
        )

    if current.travel_time != 0:
        slider_bonus = current.travel_dist / current.travel_time

    aim_strain += max(
        acute_angle_bonus * ACUTE_ANGLE_MULTIPLIER,
        wide_angle_bonus * WIDE_ANGLE_MULTIPLIER +
        velocity_change_bonus * VELOCITY_CHANGE_MULTIPLIER,
    )

    if with_sliders:
        aim_strain += slider_bonus * SLIDER_MULTIPLIER

    return aim_strain


def _aim_no_sliders_strain(skill, current, previous):
    return _aim_strain(skill, current, previous, with_sliders=False)


def _speed_strain(skill, current, previous):
    if current.is_spinner:
        return 0

    last = previous[0] if previous else None

    strain_time = current.strain_time
    great_window_full = skill.hit_window * 2
    speed_window_ratio = strain_time / great_window_full

    # nerf very fast doubles with a long gap between them
    if (last is not None and
            strain_time < great_window_full and
            last.strain_time > strain_time):
        strain_time = lerp(last.strain_time, strain_time, speed_window_ratio)

    # cap the delta time to the 300 hit window
    strain_time /= clamp(strain_time / great_window_full / 0.93, 0.92, 1)

    speed_bonus = 1.0
    if strain_time < MIN_SPEED_BONUS:
        speed_bonus = 1 + 0.75 * (
            (MIN_SPEED_BONUS - strain_time) / SPEED_BALANCING_FACTOR
        ) ** 2

    travel_dist = last.travel_dist if last is not None else 0
    distance = min(
        SINGLE_SPACING_THRESHOLD,
        travel_dist + current.jump_dist,
    )

    return (
        speed_bonus +
        speed_bonus * (distance / SINGLE_SPACING_THRESHOLD) ** 3.5
    ) / strain_time


def _speed_rhythm(skill, current, previous):
    """The rhythm complexity bonus of the objects leading up to ``current``.
    """
    if current.is_spinner:
        return 0

    great_window = skill.hit_window

    previous_island_size = 0
    rhythm_complexity_sum = 0
    island_size = 1
    start_ratio = 0
    first_delta_switch = False

    count = len(previous)
    for i in range(count - 2, 0, -1):
        curr = previous[i - 1]
        prev = previous[i]
        last = previous[i + 1]

        historical_decay = max(
            0,
            HISTORY_TIME_MAX - (current.start_time - curr.start_time),
        ) / HISTORY_TIME_MAX
        if historical_decay == 0:
            continue

        # the oldest objects fade out of the history
        historical_decay = min((count - i) / count, historical_decay)

        curr_delta = curr.strain_time
        prev_delta = prev.strain_time
        last_delta = last.strain_time
        curr_ratio = 1.0 + 6.0 * min(
            0.5,
            math.sin(
                math.pi /
                (min(prev_delta, curr_delta) / max(prev_delta, curr_delta)),
            ) ** 2,
        )

        window_penalty = min(
            1,
            max(0, abs(prev_delta - curr_delta) - great_window * 0.6) /
            (great_window * 0.6),
        )
        effective_ratio = window_penalty * curr_ratio

        if first_delta_switch:
            if not (prev_delta > 1.25 * curr_delta or
                    prev_delta * 1.25 < curr_delta):
                # still in the same rhythm
                if island_size < 7:
                    island_size += 1
            else:
                if curr.is_slider:
                    effective_ratio *= 0.125
                if prev.is_slider:
                    effective_ratio *= 0.25
                if previous_island_size == island_size:
                    effective_ratio *= 0.25
                if previous_island_size % 2 == island_size % 2:
                    effective_ratio *= 0.5
                if (last_delta > prev_delta + 10 and
                        prev_delta > curr_delta + 10):
                    # previous increase happened a note ago
                    effective_ratio *= 0.125

                rhythm_complexity_sum += (
                    math.sqrt(effective_ratio * start_ratio) *
                    historical_decay *
                    math.sqrt(4 + island_size) / 2 *
                    math.sqrt(4 + previous_island_size) / 2
                )

                start_ratio = effective_ratio
                previous_island_size = island_size

                if prev_delta * 1.25 < curr_delta:
                    # we are slowing down, stop counting
                    first_delta_switch = False

                island_size = 1

        elif prev_delta > 1.25 * curr_delta:
            # we are speeding up
            first_delta_switch = True
            start_ratio = effective_ratio
            island_size = 1

    return math.sqrt(4 + rhythm_complexity_sum * RHYTHM_MULTIPLIER) / 2


def _flashlight_strain(skill, current, previous):
    if current.is_spinner:
        return 0

    scaling_factor = 52 / skill.radius
    small_dist_nerf = 1.0
    cumulative_strain_time = 0.0
    result = 0.0

    for i, prev in enumerate(previous):
        if prev.is_spinner:
            continue

        jump_dist = (
            current.base.stacked_pos - prev.base.stacked_end_pos
        ).length
        cumulative_strain_time += prev.strain_time

        # objects inside of the flashlight radius are easy to see
        if i == 0:
            small_dist_nerf = min(1.0, jump_dist / 75)

        # only the first object of a stack counts
        stack_nerf = min(1.0, prev.jump_dist / scaling_factor / 25)

        result += (
            0.8 ** i *
            stack_nerf *
            scaling_factor *
            jump_dist /
            cumulative_strain_time
        )

    return (small_dist_nerf * result) ** 2


class SkillParameters(namedtuple('SkillParameters', (
        'strain', 'rhythm', 'skill_multiplier', 'decay_base',
        'history_length', 'reduced_section_count', 'difficulty_multiplier',
        'decay_weight'))):
    """The constants and strain function of one :class:`SkillKind`.

    Parameters
    ----------
    strain : callable[(Skill, DifficultyObject, list), float]
        The strain added by an object before the skill multiplier.
    rhythm : callable[(Skill, DifficultyObject, list), float] or None
        A multiplier applied to the accumulated strain, if any.
    skill_multiplier : float
        The scale of :attr:`strain`.
    decay_base : float
        The fraction of strain left after one second.
    history_length : int
        The number of previous objects the strain function may look at.
    reduced_section_count : int
        The number of top section peaks which are scaled down.
    difficulty_multiplier : float
        The scale of the difficulty value.
    decay_weight : float
        The weight of each peak relative to the next higher one.
    """


SKILL_PARAMETERS = {
    SkillKind.aim: SkillParameters(
        strain=_aim_strain,
        rhythm=None,
        skill_multiplier=23.25,
        decay_base=0.15,
        history_length=2,
        reduced_section_count=10,
        difficulty_multiplier=1.06,
        decay_weight=0.9,
    ),
    SkillKind.aim_no_sliders: SkillParameters(
        strain=_aim_no_sliders_strain,
        rhythm=None,
        skill_multiplier=23.25,
        decay_base=0.15,
        history_length=2,
        reduced_section_count=10,
        difficulty_multiplier=1.06,
        decay_weight=0.9,
    ),
    SkillKind.speed: SkillParameters(
        strain=_speed_strain,
        rhythm=_speed_rhythm,
        skill_multiplier=1375,
        decay_base=0.3,
        history_length=32,
        reduced_section_count=5,
        difficulty_multiplier=1.04,
        decay_weight=0.9,
    ),
    SkillKind.flashlight: SkillParameters(
        strain=_flashlight_strain,
        rhythm=None,
        skill_multiplier=0.15,
        decay_base=0.15,
        history_length=10,
        reduced_section_count=10,
        difficulty_multiplier=1.06,
        decay_weight=1.0,
    ),
}

# the longest history any skill needs
MAX_HISTORY_LENGTH = max(p.history_length for p in SKILL_PARAMETERS.values())


class Skill:
    """The strain tracker for one skill.

    Parameters
    ----------
    kind : SkillKind
        The skill to track.
    hit_window : float
        The clock-scaled 300 hit window in milliseconds.
    radius : float
        The circle radius of the map.
    start_time : float
        The clock-scaled time of the first object of the map.

    Attributes
    ----------
    strain_peaks : list[float]
        The peak strain of each completed section.
    """
    def __init__(self, kind, hit_window, radius, start_time=0.0):
        self.kind = kind
        self.parameters = SKILL_PARAMETERS[kind]
        self.hit_window = hit_window
        self.radius = radius

        self.strain_peaks = []
        self.current_strain = 1.0
        self.current_rhythm = 1.0
        self.current_section_peak = 0.0
        self._last_time = start_time

    def __repr__(self):
        return f'<{type(self).__qualname__}: {self.kind.name}>'

    def _strain_decay(self, ms):
        return self.parameters.decay_base ** (ms / 1000)

    def start_new_section_from(self, time):
        """Begin a new section without recording the current peak.

        Parameters
        ----------
        time : float
            The clock-scaled time the section starts at.
        """
        self.current_section_peak = (
            self.current_strain *
            self.current_rhythm *
            self._strain_decay(time - self._last_time)
        )

    def save_peak_and_start_new_section(self, time):
        """Record the current peak and begin a new section.

        Parameters
        ----------
        time : float
            The clock-scaled time the section starts at.
        """
        self.save_current_peak()
        self.start_new_section_from(time)

    def save_current_peak(self):
        self.strain_peaks.append(self.current_section_peak)

    def process(self, current, history):
        """Add the strain of an object.

        Parameters
        ----------
        current : DifficultyObject
            The object to process.
        history : iterable[DifficultyObject]
            The previously processed objects, most recent first.
        """
        parameters = self.parameters
        previous = list(islice(history, parameters.history_length))

        self.current_strain *= self._strain_decay(current.delta)
        self.current_strain += (
            parameters.strain(self, current, previous) *
            parameters.skill_multiplier
        )
        if parameters.rhythm is not None:
            self.current_rhythm = parameters.rhythm(self, current, previous)

        self.current_section_peak = max(
            self.current_strain * self.current_rhythm,
            self.current_section_peak,
        )
        self._last_time = current.start_time

    def difficulty_value(self):
        """Combine the section peaks into a single value.

        The highest peaks are scaled down a little so that a single hard
        section does not dominate, then the peaks are summed from highest to
        lowest with geometrically decreasing weights.

        Returns
        -------
        difficulty : float
            The weighted sum of the section peaks.
        """
        parameters = self.parameters
        reduced_section_count = parameters.reduced_section_count

        strains = sorted(self.strain_peaks, reverse=True)
        for i in range(min(len(strains), reduced_section_count)):
            scale = np.log10(
                lerp(1, 10, clamp(i / reduced_section_count, 0, 1)),
            )
            strains[i] *= lerp(REDUCED_STRAIN_BASELINE, 1.0, scale)

        difficulty = 0
        weight = 1

        decay_weight = parameters.decay_weight
        for strain in sorted(strains, reverse=True):
            difficulty += strain * weight
            weight *= decay_weight

        return difficulty * parameters.difficulty_multiplier


class Skills:
    """The skill trackers needed for one set of mods.

    Parameters
    ----------
    hit_window : float
        The clock-scaled 300 hit window in milliseconds.
    radius : float
        The circle radius of the map.
    start_time : float
        The clock-scaled time of the first object of the map.
    relax : bool, optional
        Relax is enabled; speed is not tracked.
    flashlight : bool, optional
        Flashlight is enabled; flashlight is tracked.

    Attributes
    ----------
    aim, aim_no_sliders : Skill
        The aim trackers.
    speed : Skill or None
        The speed tracker.
    flashlight : Skill or None
        The flashlight tracker.
    """
    def __init__(self,
                 hit_window,
                 radius,
                 start_time=0.0,
                 *,
                 relax=False,
                 flashlight=False):
        def skill(kind):
            return Skill(kind, hit_window, radius, start_time)

        self.aim = skill(SkillKind.aim)
        self.aim_no_sliders = skill(SkillKind.aim_no_sliders)
        self.speed = None if relax else skill(SkillKind.speed)
        self.flashlight = skill(SkillKind.flashlight) if flashlight else None

    def __iter__(self):
        for skill in (self.aim, self.aim_no_sliders, self.speed,
                      self.flashlight):
            if skill is not None:
                yield skill

    def start_new_section_from(self, time):
        for skill in self:
            skill.start_new_section_from(time)

    def save_peak_and_start_new_section(self, time):
        for skill in self:
            skill.save_peak_and_start_new_section(time)

    def save_current_peak(self):
        for skill in self:
            skill.save_current_peak()

    def process(self, current, history):
        for skill in self:
            skill.process(current, history)
