from collections import namedtuple
import logging

import numpy as np

from .difficulty import base_performance, calculate_difficulty
from .mod import NO_MODS, Mods
from .utils import accuracy as calculate_accuracy, saturating_sub


class Score(namedtuple('Score', (
        'mods', 'combo', 'n_full', 'n_partial', 'n_minor', 'n_minor_misses',
        'n_misses', 'accuracy', 'passed_objects'))):
    """A play to compute the performance of.

    Parameters
    ----------
    mods : Mods, optional
        The mods used.
    combo : int, optional
        The highest combo reached. Combo is not taken into account if this
        is not given.
    n_full : int, optional
        The number of full judgements, circles and slider heads hit.
    n_partial : int, optional
        The number of partial judgements, slider ticks, repeats and tails
        hit.
    n_minor : int, optional
        The number of timing judgements earned. A 300 earns five, a 100
        earns one.
    n_minor_misses : int, optional
        The number of timing judgements lost.
    n_misses : int, optional
        The number of misses. Counts beyond the max combo are treated as
        missing every combo-bearing object.
    accuracy : float, optional
        The accuracy in percent in the range [0, 100]. When given, the
        judgements which were not given are reconstructed from it.
    passed_objects : int, optional
        The number of objects played, for a failed play.

    Raises
    ------
    ValueError
        Raised when a count is negative, the accuracy is out of range or
        ``mods`` is not a :class:`~ppcalc.mod.Mods`.
    """
    def __new__(cls,
                mods=NO_MODS,
                combo=None,
                n_full=None,
                n_partial=None,
                n_minor=None,
                n_minor_misses=None,
                n_misses=0,
                accuracy=None,
                passed_objects=None):
        if not isinstance(mods, Mods):
            raise ValueError(f'mods must be a Mods instance, got {mods!r}')

        counts = {
            'combo': combo,
            'n_full': n_full,
            'n_partial': n_partial,
            'n_minor': n_minor,
            'n_minor_misses': n_minor_misses,
            'n_misses': n_misses,
            'passed_objects': passed_objects,
        }
        for name, value in counts.items():
            if value is not None and value < 0:
                raise ValueError(f'{name} must be non-negative, got {value}')

        if accuracy is not None and not 0 <= accuracy <= 100:
            raise ValueError(
                f'accuracy must be in the range [0, 100], got {accuracy}',
            )

        return super().__new__(
            cls,
            mods,
            combo,
            n_full,
            n_partial,
            n_minor,
            n_minor_misses,
            n_misses,
            accuracy,
            passed_objects,
        )


class HitResults(namedtuple('HitResults', (
        'n_full', 'n_partial', 'n_minor', 'n_minor_misses', 'n_misses'))):
    """The judgement counts a performance is computed from.
    """
    @property
    def combo_hits(self):
        return self.n_full + self.n_partial + self.n_misses

    @property
    def accuracy(self):
        return calculate_accuracy(*self)


def reconstruct_hit_results(score, attributes):
    """Fill in the judgements a score does not give from its accuracy.

    Parameters
    ----------
    score : Score
        The score. Its ``accuracy`` must not be None.
    attributes : DifficultyAttributes
        The difficulty of the beatmap played.

    Returns
    -------
    hit_results : HitResults
        The reconstructed judgements. These are not yet checked against the
        beatmap, see :func:`resolve_hit_results`.
    """
    n_misses = min(score.n_misses, attributes.max_combo)

    n_partial = score.n_partial
    if n_partial is None:
        n_partial = saturating_sub(attributes.n_partial_objects, n_misses)

    n_full = score.n_full
    if n_full is None:
        n_full = saturating_sub(attributes.max_combo, n_misses, n_partial)

    n_minor_objects = attributes.n_minor_objects
    accuracy = score.accuracy / 100

    n_minor = score.n_minor
    if n_minor is None:
        n_minor = min(
            n_minor_objects,
            saturating_sub(
                int(round(accuracy * (attributes.max_combo + n_minor_objects))),
                n_full,
                n_partial,
            ),
        )

    return HitResults(
        n_full=n_full,
        n_partial=n_partial,
        n_minor=n_minor,
        n_minor_misses=saturating_sub(n_minor_objects, n_minor),
        n_misses=n_misses,
    )


def resolve_hit_results(hit_results, attributes):
    """Correct judgement counts which do not add up for the beatmap.

    Parameters
    ----------
    hit_results : HitResults
        The judgements to check. Counts which were not given are None.
    attributes : DifficultyAttributes
        The difficulty of the beatmap played.

    Returns
    -------
    hit_results : HitResults
        Judgements whose full, partial and miss counts add up to the max
        combo and whose minor counts add up to the number of minor objects.
        Consistent judgements are returned unchanged.
    """
    n_full, n_partial, n_minor, n_minor_misses, n_misses = hit_results
    if n_misses > attributes.max_combo:
        logging.debug(
            f'clamping {n_misses} misses to the max combo'
            f' {attributes.max_combo}',
        )
        n_misses = attributes.max_combo

    consistent = (
        n_full is not None and
        n_partial is not None and
        n_minor is not None and
        n_minor_misses is not None and
        n_full + n_partial + n_misses == attributes.max_combo and
        n_full >= saturating_sub(attributes.n_full_objects, n_misses) and
        n_partial >= saturating_sub(attributes.n_partial_objects, n_misses) and
        n_minor + n_minor_misses == attributes.n_minor_objects
    )

    n_full = n_full or 0
    n_partial = n_partial or 0
    n_minor = n_minor or 0
    n_minor_misses = n_minor_misses or 0

    if not consistent:
        missing = saturating_sub(
            attributes.max_combo,
            n_full,
            n_partial,
            n_misses,
        )
        # partial objects absorb what they can, the rest are full hits
        missing_full = saturating_sub(
            missing,
            saturating_sub(attributes.n_partial_objects, n_partial),
        )

        logging.debug(
            f'correcting hit results {hit_results}: {missing} missing'
            f' combo hits',
        )

        n_full += missing_full
        n_partial += missing - missing_full
        n_minor += saturating_sub(
            attributes.n_minor_objects,
            n_minor,
            n_minor_misses,
        )

    return HitResults(
        n_full=n_full,
        n_partial=n_partial,
        n_minor=n_minor,
        n_minor_misses=n_minor_misses,
        n_misses=n_misses,
    )


class PerformanceAttributes(namedtuple('PerformanceAttributes', (
        'difficulty', 'pp', 'pp_base', 'length_bonus', 'miss_penalty',
        'combo_scaling', 'ar_factor', 'hidden_bonus', 'flashlight_bonus',
        'accuracy_scaling', 'no_fail_penalty', 'accuracy', 'hit_results'))):
    """The performance of a play.

    Parameters
    ----------
    difficulty : DifficultyAttributes
        The difficulty the performance was computed from.
    pp : float
        The performance points.
    pp_base : float
        The performance from the star rating alone.
    length_bonus, miss_penalty, combo_scaling, ar_factor, hidden_bonus,
    flashlight_bonus, accuracy_scaling, no_fail_penalty : float
        The factors ``pp_base`` was multiplied by. Factors which do not apply
        are 1.
    accuracy : float
        The accuracy of the judgements in the range [0, 1].
    hit_results : HitResults
        The judgements the performance was computed from.
    """
    @property
    def stars(self):
        return self.difficulty.stars

    @property
    def max_combo(self):
        return self.difficulty.max_combo


def _pp_base(stars):
    if stars == 0:
        return 0.0
    return float(base_performance(stars))


def _length_bonus(combo_hits):
    bonus = 0.95 + 0.3 * min(1.0, combo_hits / 2500)
    if combo_hits > 2500:
        bonus += np.log10(combo_hits / 2500) * 0.475
    return float(bonus)


def _ar_factor(ar):
    factor = 1.0
    if ar > 9:
        factor += 0.1 * (ar - 9)
        if ar > 10:
            factor += 0.1 * (ar - 10)
    elif ar < 8:
        factor += 0.025 * (8 - ar)
    return factor


def _hidden_bonus(ar):
    if ar <= 10:
        return 1.05 + 0.075 * (10 - ar)
    return 1.01 + 0.04 * (11 - min(ar, 11))


def combo_scaling(combo, max_combo):
    """The factor a play is scaled by for missing combo.

    Parameters
    ----------
    combo : int or None
        The combo reached.
    max_combo : int
        The highest achievable combo.

    Returns
    -------
    scaling : float
        The factor in the range [0, 1]. This is 1 when ``combo`` is None or
        the beatmap has no combo.
    """
    if combo is None or max_combo == 0:
        return 1.0
    return min(1.0, (combo / max_combo) ** 0.8)


def calculate_performance(beatmap, score, attributes=None):
    """Compute the performance points of a play.

    Parameters
    ----------
    beatmap : Beatmap
        The beatmap played. This may be None when ``attributes`` is given.
    score : Score
        The play.
    attributes : DifficultyAttributes, optional
        Precomputed difficulty of the beatmap with the score's mods and
        passed objects.

    Returns
    -------
    performance : PerformanceAttributes
        The performance points and how they were reached.
    """
    if attributes is None:
        attributes = calculate_difficulty(
            beatmap,
            score.mods,
            score.passed_objects,
        )

    if score.accuracy is not None:
        hit_results = reconstruct_hit_results(score, attributes)
    else:
        hit_results = HitResults(
            n_full=score.n_full,
            n_partial=score.n_partial,
            n_minor=score.n_minor,
            n_minor_misses=score.n_minor_misses,
            n_misses=score.n_misses,
        )
    hit_results = resolve_hit_results(hit_results, attributes)

    mods = score.mods
    ar = attributes.ar

    pp_base = _pp_base(attributes.stars)

    combo_hits = hit_results.combo_hits or attributes.max_combo
    length_bonus = _length_bonus(combo_hits)
    miss_penalty = 0.97 ** hit_results.n_misses
    combo_factor = combo_scaling(score.combo, attributes.max_combo)
    ar_factor = _ar_factor(ar)
    hidden_bonus = _hidden_bonus(ar) if mods.hidden else 1.0
    flashlight_bonus = 1.35 * length_bonus if mods.flashlight else 1.0

    accuracy = hit_results.accuracy
    accuracy_scaling = accuracy ** 5.5
    no_fail_penalty = 0.9 if mods.no_fail else 1.0

    pp = (
        pp_base *
        length_bonus *
        miss_penalty *
        combo_factor *
        ar_factor *
        hidden_bonus *
        flashlight_bonus *
        accuracy_scaling *
        no_fail_penalty
    )

    return PerformanceAttributes(
        difficulty=attributes,
        pp=pp,
        pp_base=pp_base,
        length_bonus=length_bonus,
        miss_penalty=miss_penalty,
        combo_scaling=combo_factor,
        ar_factor=ar_factor,
        hidden_bonus=hidden_bonus,
        flashlight_bonus=flashlight_bonus,
        accuracy_scaling=accuracy_scaling,
        no_fail_penalty=no_fail_penalty,
        accuracy=accuracy,
        hit_results=hit_results,
    )
