from datetime import timedelta
from math import isclose
import logging

import pytest

import ppcalc
from ppcalc import Beatmap, Circle, Mods, Position, Score, Slider, Spinner
from ppcalc.curve import Linear


def ms(n):
    return timedelta(milliseconds=n)


@pytest.fixture
def hit_objects():
    hit_objects = []
    for i in range(20):
        time = 1000 + 300 * i
        hit_objects.append(Circle(Position(50 + 20 * i, 100), ms(time)))
        hit_objects.append(Slider(
            Position(50 + 20 * i, 300),
            ms(time + 150),
            ms(time + 250),
            Linear([Position(50 + 20 * i, 300), Position(50 + 20 * i, 200)], 100),
            1,
            100,
            0.5,
            1,
        ))
    hit_objects.append(Spinner(Position(256, 192), ms(8000), ms(9000)))
    return hit_objects


@pytest.fixture
def beatmap(hit_objects):
    return Beatmap(
        format_version=14,
        stack_leniency=0.7,
        hp_drain_rate=6,
        circle_size=4,
        overall_difficulty=8,
        approach_rate=9,
        hit_objects=hit_objects,
    )


def test_version():
    assert ppcalc.__version__ == '0.1.0'


def test_hit_objects(beatmap, hit_objects):
    assert beatmap.hit_objects() == hit_objects
    # the returned list is a copy
    assert beatmap.hit_objects() is not beatmap.hit_objects()

    circles = beatmap.hit_objects(sliders=False, spinners=False)
    assert len(circles) == 20
    assert all(isinstance(ob, Circle) for ob in circles)

    sliders = beatmap.hit_objects(circles=False, spinners=False)
    assert len(sliders) == 20
    assert all(isinstance(ob, Slider) for ob in sliders)

    spinners = beatmap.hit_objects(circles=False, sliders=False)
    assert len(spinners) == 1

    assert beatmap.hit_objects(circles=False, sliders=False, spinners=False) == []


def test_attributes(beatmap):
    assert isclose(beatmap.ar(), 9)
    assert isclose(beatmap.od(), 8)
    assert beatmap.hp() == 6
    assert beatmap.cs() == 4


def test_attributes_hard_rock(beatmap):
    mods = Mods(hard_rock=True)
    assert isclose(beatmap.ar(mods), 10)
    assert isclose(beatmap.od(mods), 10)
    assert isclose(beatmap.hp(mods), 8.4)
    assert isclose(beatmap.cs(mods), 5.2)


def test_attributes_easy(beatmap):
    mods = Mods(easy=True)
    assert isclose(beatmap.ar(mods), 4.5)
    assert isclose(beatmap.od(mods), 4)
    assert beatmap.hp(mods) == 3
    assert beatmap.cs(mods) == 2


def test_attributes_double_time(beatmap):
    mods = Mods(double_time=True)
    assert isclose(beatmap.ar(mods), 5 + 800 / 150)
    assert isclose(beatmap.od(mods), (80 - 32 / 1.5) / 6)
    # the clock rate does not change the health drain or circle size
    assert beatmap.hp(mods) == 6
    assert beatmap.cs(mods) == 4


def test_difficulty_is_cached(beatmap, caplog):
    mods = Mods.parse('HDDT')
    first = beatmap.difficulty(mods)

    with caplog.at_level(logging.DEBUG):
        second = beatmap.difficulty(mods)

    assert first is second
    assert 'using cached difficulty for <Mods: double_time, hidden>' in (
        caplog.text
    )

    # a different number of passed objects is computed again
    assert beatmap.difficulty(mods, passed_objects=10) is not first


def test_difficulty(beatmap):
    attributes = beatmap.difficulty()

    assert attributes.n_circles == 20
    assert attributes.n_sliders == 20
    assert attributes.n_spinners == 1
    assert attributes.n_partial_objects == 20
    assert beatmap.max_combo == attributes.max_combo == 61
    assert beatmap.stars() == attributes.stars > 0
    assert beatmap.stars(Mods(double_time=True)) > beatmap.stars()


def test_strains(beatmap):
    strains = beatmap.strains()
    assert strains.section_length == 400
    assert len(strains.strains) > 0


def test_performance_points(beatmap):
    performance = beatmap.performance_points()

    assert performance.difficulty is beatmap.difficulty()
    assert performance.accuracy == 1.0
    assert performance.hit_results.n_full == 41
    assert performance.hit_results.n_partial == 20
    assert performance.pp > 0


def test_performance_points_accuracy():
    beatmap = Beatmap(
        format_version=14,
        stack_leniency=0.7,
        hp_drain_rate=5,
        circle_size=4,
        overall_difficulty=8,
        approach_rate=9,
        hit_objects=[
            Circle(Position(100 if i % 2 else 400, 192), ms(1000 + 150 * i))
            for i in range(200)
        ],
    )
    perfect = beatmap.performance_points(Score(accuracy=100))
    lower = beatmap.performance_points(Score(accuracy=80))

    assert perfect.accuracy == 1.0
    assert isclose(lower.accuracy, 0.8, abs_tol=0.01)
    assert lower.hit_results.n_full == 200
    assert lower.hit_results.n_minor_misses == 240
    assert lower.pp < perfect.pp


def test_performance_points_mods(beatmap):
    nomod = beatmap.performance_points()
    hidden = beatmap.performance_points(Score(mods=Mods(hidden=True)))
    misses = beatmap.performance_points(Score(n_misses=5, combo=30))

    assert hidden.pp > nomod.pp
    assert misses.pp < nomod.pp
    assert misses.hit_results.n_misses == 5
    assert misses.hit_results.combo_hits == 61


def test_performance_points_passed_objects(beatmap):
    performance = beatmap.performance_points(Score(passed_objects=10))
    assert performance.difficulty is beatmap.difficulty(passed_objects=10)
    assert performance.max_combo == 15
