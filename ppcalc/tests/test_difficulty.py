from datetime import timedelta
from math import isclose

import numpy as np
import pytest

from ppcalc import Beatmap, Circle, Mods, NO_MODS, Position, Slider, Spinner
from ppcalc.curve import Linear
from ppcalc.difficulty import (
    DifficultyAttributes,
    base_performance,
    calculate_difficulty,
    calculate_star_rating,
    calculate_strains,
)
from ppcalc.mod import BeatmapAttributes


def ms(n):
    return timedelta(milliseconds=n)


def make_beatmap(hit_objects, format_version=14):
    return Beatmap(
        format_version=format_version,
        stack_leniency=0.7,
        hp_drain_rate=6,
        circle_size=4,
        overall_difficulty=8,
        approach_rate=9,
        hit_objects=hit_objects,
    )


@pytest.fixture
def jumps():
    return make_beatmap([
        Circle(Position(100 if i % 2 else 400, 192), ms(1000 + 150 * i))
        for i in range(40)
    ])


@pytest.fixture
def mixed():
    hit_objects = []
    time = 1000
    for i in range(10):
        x = 50 + 40 * i
        hit_objects.append(Circle(Position(x, 100), ms(time)))
        time += 200
        hit_objects.append(Slider(
            Position(x, 200),
            ms(time),
            ms(time + 300),
            Linear([Position(x, 200), Position(x, 350)], 150),
            1,
            150,
            1,
            1,
        ))
        time += 500
    hit_objects.append(Spinner(Position(256, 192), ms(time), ms(time + 2000)))
    return make_beatmap(hit_objects)


def test_star_rating_zero_floor():
    assert calculate_star_rating(0, 0, 0) == 0


def test_star_rating_is_symmetric_in_aim_and_speed():
    assert isclose(
        calculate_star_rating(2.5, 0, 0),
        calculate_star_rating(0, 2.5, 0),
    )


def test_star_rating_increases():
    assert calculate_star_rating(1, 1, 0) < calculate_star_rating(2, 1, 0)
    assert calculate_star_rating(1, 1, 0) < calculate_star_rating(1, 2, 0)
    assert calculate_star_rating(1, 1, 0) < calculate_star_rating(1, 1, 1)


def test_star_rating_value():
    aim = speed = 0.0675 * 21
    base = ((5 * 21 - 4) ** 3) / 100000
    combined = (2 * base ** 1.1) ** (1 / 1.1)
    expected = 1.12 ** (1 / 3) * 0.027 * (
        np.cbrt(100000 / 2 ** (1 / 1.1) * combined) + 4
    )
    assert isclose(calculate_star_rating(aim, speed, 0), expected)


def test_base_performance():
    assert isclose(base_performance(0), 0.00001)
    assert isclose(base_performance(0.0675), 0.00001)
    assert isclose(base_performance(0.0675 * 2), 6 ** 3 / 100000)


@pytest.mark.parametrize('hit_objects', [
    [],
    [Circle(Position(0, 0), ms(1000))],
])
@pytest.mark.parametrize('mods', [NO_MODS, Mods.parse('HRDT'), Mods.parse('EZ')])
def test_degenerate(hit_objects, mods):
    beatmap = make_beatmap(hit_objects)
    attributes = calculate_difficulty(beatmap, mods)
    map_attributes = BeatmapAttributes.from_beatmap(beatmap, mods)

    assert attributes.stars == 0
    assert attributes.max_combo == 0
    assert attributes.aim_strain == 0
    assert attributes.n_circles == 0
    assert isclose(attributes.ar, map_attributes.ar)
    assert isclose(attributes.od, map_attributes.effective_od)
    assert isclose(attributes.hp, map_attributes.hp)


def test_degenerate_after_passed_objects(jumps):
    attributes = calculate_difficulty(jumps, passed_objects=1)
    assert attributes == DifficultyAttributes(
        ar=attributes.ar,
        od=attributes.od,
        hp=attributes.hp,
    )


def test_jumps(jumps):
    attributes = calculate_difficulty(jumps)

    assert attributes.stars > 0
    assert attributes.aim_strain > 0
    assert attributes.speed_strain > 0
    assert attributes.flashlight_rating == 0
    assert attributes.slider_factor == 1.0
    assert attributes.n_circles == 40
    assert attributes.n_sliders == 0
    assert attributes.n_spinners == 0
    assert attributes.n_partial_objects == 0
    assert attributes.n_minor_objects == 200
    assert attributes.n_full_objects == 40
    assert attributes.max_combo == 40
    assert isclose(attributes.ar, 9)
    assert isclose(attributes.od, 8)
    assert attributes.hp == 6


def test_jumps_are_harder_with_double_time(jumps):
    nomod = calculate_difficulty(jumps)
    double_time = calculate_difficulty(jumps, Mods(double_time=True))
    half_time = calculate_difficulty(jumps, Mods(half_time=True))

    assert double_time.aim_strain > nomod.aim_strain > half_time.aim_strain
    assert double_time.speed_strain > nomod.speed_strain
    assert double_time.stars > nomod.stars > half_time.stars


def test_jumps_are_harder_with_hard_rock(jumps):
    nomod = calculate_difficulty(jumps)
    hard_rock = calculate_difficulty(jumps, Mods(hard_rock=True))
    easy = calculate_difficulty(jumps, Mods(easy=True))

    assert hard_rock.aim_strain > nomod.aim_strain > easy.aim_strain


def test_relax(jumps):
    attributes = calculate_difficulty(jumps, Mods(relax=True))
    assert attributes.speed_strain == 0
    assert attributes.aim_strain == calculate_difficulty(jumps).aim_strain


def test_flashlight(jumps):
    attributes = calculate_difficulty(jumps, Mods(flashlight=True))
    nomod = calculate_difficulty(jumps)

    assert attributes.flashlight_rating > 0
    assert attributes.aim_strain == nomod.aim_strain
    assert attributes.stars > nomod.stars


def test_passed_objects(jumps):
    attributes = calculate_difficulty(jumps, passed_objects=10)
    assert attributes.n_circles == 10
    assert attributes.max_combo == 10
    assert attributes.n_minor_objects == 50
    assert 0 < attributes.stars <= calculate_difficulty(jumps).stars


def test_mixed(mixed):
    attributes = calculate_difficulty(mixed)

    assert attributes.n_circles == 10
    assert attributes.n_sliders == 10
    assert attributes.n_spinners == 1
    # each slider has a tail and no ticks
    assert attributes.n_partial_objects == 10
    assert attributes.n_minor_objects == 5 * 21
    assert attributes.max_combo == 31
    assert attributes.stars > 0
    assert 0 < attributes.slider_factor < 1


def test_legacy_stacking_is_used_for_old_beatmaps():
    hit_objects = [
        Circle(Position(256, 192), ms(1000 + 100 * i)) for i in range(10)
    ]
    modern = calculate_difficulty(make_beatmap(hit_objects))
    legacy = calculate_difficulty(make_beatmap(hit_objects, format_version=5))

    # both variants stack the objects the same way
    assert isclose(modern.aim_strain, legacy.aim_strain)


def test_stacked_objects_have_aim():
    hit_objects = [
        Circle(Position(256, 192), ms(1000 + 100 * i)) for i in range(10)
    ]
    unstacked = make_beatmap(hit_objects)
    # a leniency of 0 disables stacking
    unstacked.stack_leniency = 0

    stacked = calculate_difficulty(make_beatmap(hit_objects))
    assert stacked.aim_strain > calculate_difficulty(unstacked).aim_strain


def test_strains(jumps):
    strains = calculate_strains(jumps)
    assert strains.section_length == 400
    assert len(strains.strains) > 0
    assert (strains.strains > 0).all()

    # sections are measured in clock-scaled time
    double_time = calculate_strains(jumps, Mods(double_time=True))
    assert double_time.section_length == 600
    assert len(double_time.strains) < len(strains.strains)


def test_strains_degenerate():
    strains = calculate_strains(make_beatmap([]))
    assert strains.section_length == 400
    assert len(strains.strains) == 0
