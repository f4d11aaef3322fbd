from math import isclose, log10

import pytest

from ppcalc.difficulty import DifficultyAttributes, base_performance
from ppcalc.mod import Mods
from ppcalc.performance import (
    HitResults,
    Score,
    _ar_factor,
    _hidden_bonus,
    _length_bonus,
    calculate_performance,
    combo_scaling,
    reconstruct_hit_results,
    resolve_hit_results,
)


@pytest.fixture
def judgements():
    # a beatmap with every kind of judgement
    return DifficultyAttributes(
        n_circles=1234,
        n_partial_objects=567,
        n_minor_objects=2345,
        max_combo=1801,
    )


@pytest.fixture
def attributes():
    return DifficultyAttributes(
        stars=5.0,
        ar=9.0,
        od=8.0,
        n_circles=1000,
        max_combo=1000,
    )


def test_reconstruct_perfect_score(judgements):
    hit_results = reconstruct_hit_results(Score(accuracy=100), judgements)
    assert hit_results == HitResults(
        n_full=1234,
        n_partial=567,
        n_minor=2345,
        n_minor_misses=0,
        n_misses=0,
    )
    assert hit_results.accuracy == 1.0


def test_reconstruct_accuracy(judgements):
    hit_results = reconstruct_hit_results(Score(accuracy=95), judgements)

    assert hit_results.n_full == 1234
    assert hit_results.n_partial == 567
    assert hit_results.n_minor == 3939 - 1801
    assert hit_results.n_minor_misses == 2345 - 2138
    assert isclose(hit_results.accuracy, 0.95, abs_tol=0.01)


def test_reconstruct_with_misses(judgements):
    hit_results = reconstruct_hit_results(
        Score(accuracy=100, n_misses=10),
        judgements,
    )
    assert hit_results.n_partial == 557
    assert hit_results.n_full == 1234
    assert hit_results.n_misses == 10
    assert hit_results.n_minor + hit_results.n_minor_misses == 2345


def test_resolve_consistent(judgements):
    hit_results = HitResults(1234, 567, 2345, 0, 0)
    assert resolve_hit_results(hit_results, judgements) == hit_results


def test_resolve_missing_objects(judgements):
    hit_results = resolve_hit_results(
        HitResults(1224, 562, 2295, 20, 2),
        judgements,
    )
    assert hit_results == HitResults(
        n_full=1232,
        n_partial=567,
        n_minor=2325,
        n_minor_misses=20,
        n_misses=2,
    )


def test_resolve_unset_counts(judgements):
    hit_results = resolve_hit_results(
        HitResults(None, None, None, None, 1),
        judgements,
    )
    assert hit_results == HitResults(
        n_full=1233,
        n_partial=567,
        n_minor=2345,
        n_minor_misses=0,
        n_misses=1,
    )


@pytest.mark.parametrize('kwargs', [
    {'combo': -1},
    {'n_full': -1},
    {'n_partial': -1},
    {'n_minor': -1},
    {'n_minor_misses': -1},
    {'n_misses': -1},
    {'passed_objects': -1},
    {'accuracy': -0.5},
    {'accuracy': 100.5},
    {'mods': 'HDDT'},
])
def test_invalid_score(kwargs):
    with pytest.raises(ValueError):
        Score(**kwargs)


def test_combo_scaling():
    assert combo_scaling(None, 1000) == 1
    assert combo_scaling(500, 0) == 1
    assert combo_scaling(1000, 1000) == 1
    assert combo_scaling(1200, 1000) == 1
    assert isclose(combo_scaling(500, 1000), 0.5 ** 0.8)


def test_length_bonus():
    assert isclose(_length_bonus(0), 0.95)
    assert isclose(_length_bonus(1000), 1.07)
    assert isclose(_length_bonus(2500), 1.25)
    assert isclose(_length_bonus(5000), 1.25 + log10(2) * 0.475)


@pytest.mark.parametrize('ar, expected', [
    (10.5, 1.2),
    (10, 1.1),
    (9, 1),
    (8.5, 1),
    (8, 1),
    (7, 1.025),
])
def test_ar_factor(ar, expected):
    assert isclose(_ar_factor(ar), expected)


@pytest.mark.parametrize('ar, expected', [
    (9, 1.125),
    (10, 1.05),
    (10.5, 1.03),
    (11, 1.01),
])
def test_hidden_bonus(ar, expected):
    assert isclose(_hidden_bonus(ar), expected)


def test_perfect_play(attributes):
    performance = calculate_performance(None, Score(), attributes)

    assert performance.difficulty is attributes
    assert performance.stars == 5.0
    assert performance.max_combo == 1000
    assert performance.accuracy == 1.0
    assert performance.hit_results == HitResults(1000, 0, 0, 0, 0)

    assert isclose(performance.pp_base, base_performance(5.0))
    assert isclose(performance.length_bonus, 1.07)
    for factor in (performance.miss_penalty,
                   performance.combo_scaling,
                   performance.ar_factor,
                   performance.hidden_bonus,
                   performance.flashlight_bonus,
                   performance.accuracy_scaling,
                   performance.no_fail_penalty):
        assert factor == 1

    assert isclose(performance.pp, base_performance(5.0) * 1.07)


def test_zero_stars(attributes):
    performance = calculate_performance(
        None,
        Score(),
        attributes._replace(stars=0.0),
    )
    assert performance.pp_base == 0
    assert performance.pp == 0


def test_no_fail(attributes):
    nomod = calculate_performance(None, Score(), attributes)
    no_fail = calculate_performance(
        None,
        Score(mods=Mods(no_fail=True)),
        attributes,
    )
    assert isclose(no_fail.pp / nomod.pp, 0.9)


def test_hidden(attributes):
    nomod = calculate_performance(None, Score(), attributes)
    hidden = calculate_performance(
        None,
        Score(mods=Mods(hidden=True)),
        attributes,
    )
    assert isclose(hidden.hidden_bonus, 1.125)
    assert isclose(hidden.pp / nomod.pp, 1.125)


def test_flashlight(attributes):
    performance = calculate_performance(
        None,
        Score(mods=Mods(flashlight=True)),
        attributes,
    )
    assert isclose(performance.flashlight_bonus, 1.35 * 1.07)


def test_misses(attributes):
    performance = calculate_performance(None, Score(n_misses=3), attributes)

    assert isclose(performance.miss_penalty, 0.97 ** 3)
    assert performance.hit_results == HitResults(997, 0, 0, 0, 3)
    assert isclose(performance.accuracy, 0.997)
    assert isclose(performance.accuracy_scaling, 0.997 ** 5.5)


def test_combo(attributes):
    full_combo = calculate_performance(None, Score(combo=1000), attributes)
    half_combo = calculate_performance(None, Score(combo=500), attributes)

    assert full_combo.combo_scaling == 1
    assert isclose(half_combo.combo_scaling, 0.5 ** 0.8)
    assert half_combo.pp < full_combo.pp


def test_accuracy(attributes):
    # five timing judgements per circle
    timed = attributes._replace(n_minor_objects=5000)

    perfect = calculate_performance(None, Score(accuracy=100), timed)
    assert perfect.accuracy == 1.0

    lower = calculate_performance(None, Score(accuracy=90), timed)
    assert lower.hit_results == HitResults(1000, 0, 4400, 600, 0)
    assert isclose(lower.accuracy, 0.9)
    assert isclose(lower.accuracy_scaling, 0.9 ** 5.5)
    assert lower.pp < perfect.pp


def test_accuracy_without_timing_judgements(attributes):
    # without minor judgements there is nothing to lose accuracy on
    lower = calculate_performance(None, Score(accuracy=90), attributes)
    assert lower.accuracy == 1.0


@pytest.mark.parametrize('accuracy', [100, None])
def test_more_misses_than_combo(accuracy):
    attributes = DifficultyAttributes(
        stars=2.0,
        n_circles=10,
        n_minor_objects=50,
        max_combo=10,
    )
    performance = calculate_performance(
        None,
        Score(accuracy=accuracy, n_misses=15),
        attributes,
    )
    hit_results = performance.hit_results

    assert hit_results.n_misses == 10
    assert hit_results.n_full == hit_results.n_partial == 0
    assert hit_results.combo_hits == 10
    assert isclose(performance.miss_penalty, 0.97 ** 10)


def test_resolve_clamps_misses(judgements):
    hit_results = resolve_hit_results(
        HitResults(0, 0, 0, 2345, 5000),
        judgements,
    )
    assert hit_results.n_misses == 1801
    assert hit_results.combo_hits == 1801
