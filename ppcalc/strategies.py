from datetime import timedelta

from hypothesis.strategies import (
    booleans,
    builds,
    composite,
    floats as _floats,
    integers,
    lists,
    one_of,
    sampled_from,
)

from ppcalc import Beatmap, Circle, Mods, Slider, Spinner, Position
from ppcalc.curve import Curve
from ppcalc.difficulty import DifficultyAttributes
from ppcalc.osu_object import TIMING_JUDGEMENTS


def floats(*args, **kwargs):
    # I don't really want to deal with these edge cases right now.
    return _floats(*args, allow_nan=False, allow_infinity=False, **kwargs)


def mods():
    return builds(
        Mods,
        hard_rock=booleans(),
        easy=booleans(),
        half_time=booleans(),
        double_time=booleans(),
        hidden=booleans(),
        flashlight=booleans(),
        no_fail=booleans(),
        relax=booleans(),
    )


def times():
    return integers(0, 600000).map(lambda ms: timedelta(milliseconds=ms))


@composite
def positions(draw):
    return Position(
        x=draw(integers(0, Position.x_max)),
        y=draw(integers(0, Position.y_max)),
    )


@composite
def circles(draw):
    return Circle(
        position=draw(positions()),
        time=draw(times()),
    )


@composite
def spinners(draw):
    time = draw(times())
    return Spinner(
        position=Position(256, 192),
        time=time,
        end_time=time + timedelta(milliseconds=draw(integers(0, 10000))),
    )


@composite
def curves(draw, start):
    kind = draw(sampled_from(['B', 'L', 'P']))
    points = [start] + draw(lists(positions(), min_size=1, max_size=4))
    return Curve.from_kind_and_points(
        kind=kind,
        points=points,
        req_length=draw(floats(10, 400)),
    )


@composite
def sliders(draw):
    position = draw(positions())
    time = draw(times())
    repeat = draw(integers(1, 4))
    num_beats = draw(floats(0.25, 8))
    ms_per_beat = draw(floats(200, 1000))
    curve = draw(curves(position))
    return Slider(
        position=position,
        time=time,
        end_time=time + timedelta(milliseconds=num_beats * ms_per_beat),
        curve=curve,
        repeat=repeat,
        length=curve.req_length,
        num_beats=num_beats,
        tick_rate=draw(sampled_from([0.5, 1, 2, 4])),
    )


def hit_objects():
    return one_of(circles(), sliders(), spinners())


@composite
def beatmaps(draw, *, min_size=0, max_size=30):
    hit_objs = draw(lists(hit_objects(), min_size=min_size, max_size=max_size))
    hit_objs = sorted(hit_objs, key=lambda hitobj: hitobj.time)
    return Beatmap(
        format_version=draw(integers(3, 14)),
        stack_leniency=draw(floats(0.2, 1)),
        hp_drain_rate=draw(floats(0, 10)),
        circle_size=draw(floats(0, 10)),
        overall_difficulty=draw(floats(0, 10)),
        approach_rate=draw(floats(0, 10)),
        hit_objects=hit_objs,
    )


@composite
def difficulty_attributes(draw):
    """Difficulty attributes with consistent object counts.
    """
    n_circles = draw(integers(0, 1000))
    n_sliders = draw(integers(0, 500))
    n_spinners = draw(integers(0, 20))
    n_partial_objects = draw(integers(n_sliders, n_sliders * 10))
    n_full_objects = n_circles + n_sliders + n_spinners
    return DifficultyAttributes(
        aim_strain=draw(floats(0, 5)),
        speed_strain=draw(floats(0, 5)),
        ar=draw(floats(-5, 11)),
        od=draw(floats(-5, 11)),
        hp=draw(floats(0, 10)),
        n_circles=n_circles,
        n_sliders=n_sliders,
        n_spinners=n_spinners,
        n_partial_objects=n_partial_objects,
        n_minor_objects=TIMING_JUDGEMENTS * n_full_objects,
        max_combo=n_full_objects + n_partial_objects,
        stars=draw(floats(0, 12)),
    )
