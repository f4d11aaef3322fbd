"""Stack height resolution.

Objects which are placed on top of each other within a short time of each
other are nudged apart so they can be told apart. There are two algorithms:
:func:`resolve_stacking` is used for beatmap versions 6 and up and
:func:`resolve_stacking_legacy` for older beatmaps. Both only assign
``stack_height``; the offsets are applied by
:meth:`ppcalc.osu_object.OsuObject.apply_stacking`.
"""
from .position import distance

# objects closer than this many osu! pixels are considered on top of each
# other
STACK_DISTANCE = 3


def resolve_stacking(hit_objects, stack_threshold):
    """Assign stack heights for beatmap versions 6 and up.

    Parameters
    ----------
    hit_objects : list[OsuObject]
        The objects to resolve stacking for, in chronological order. They are
        modified in place.
    stack_threshold : float
        The largest time in milliseconds between two objects which may stack.
    """
    if not hit_objects:
        return

    extended_start_ix = 0

    for i in range(len(hit_objects) - 1, 0, -1):
        n = i
        # We should check every note which has not yet got a stack.
        # Consider the case we have two interwound stacks and this will make
        # sense.
        #   o <-1      o <-2
        #    o <-3      o <-4
        # We first process starting from 4 and handle 2, then we come
        # backwards on the i loop iteration until we reach 3 and handle 1.
        # 2 and 1 will be ignored in the i loop because they already have a
        # stack value.
        ob_i = hit_objects[i]

        if ob_i.stack_height != 0 or ob_i.is_spinner:
            continue

        if ob_i.is_circle:
            # This either ends with a stack of circles only, or a stack of
            # circles that are underneath a slider.
            while n > 0:
                n -= 1
                ob_n = hit_objects[n]

                if ob_n.is_spinner:
                    continue

                if ob_i.time - ob_n.end_time > stack_threshold:
                    # We are no longer within stacking range of the previous
                    # object.
                    break

                # Objects before the specified update range haven't been
                # reset yet.
                if n < extended_start_ix:
                    ob_n.stack_height = 0
                    extended_start_ix = n

                # This is a special case where circles are moved DOWN and
                # RIGHT (negative stacking) if they are under the *last*
                # slider in a stacked pattern.
                #    o==o <- slider is at original location
                #        o <- circle has stack of -1
                #         o <- circle has stack of -2
                if (ob_n.is_slider and
                        distance(ob_n.end_pos, ob_i.pos) < STACK_DISTANCE):
                    offset = ob_i.stack_height - ob_n.stack_height + 1

                    for ob_j in hit_objects[n + 1:i + 1]:
                        # For each object which was declared under this
                        # slider, we will offset it to appear *below* the
                        # slider end (rather than above).
                        if distance(ob_n.end_pos, ob_j.pos) < STACK_DISTANCE:
                            ob_j.stack_height -= offset

                    # We have hit a slider. We should restart calculation
                    # using this as the new base. Breaking here will mean that
                    # the slider still has a stack height of 0, so it will be
                    # handled in the i-outer-loop.
                    break

                if distance(ob_n.pos, ob_i.pos) < STACK_DISTANCE:
                    # Keep processing as if there are no sliders. If we come
                    # across a slider, this gets cancelled out.
                    # NOTE: Sliders with start positions stacking are a
                    # special case that is also handled here.
                    ob_n.stack_height = ob_i.stack_height + 1
                    ob_i = ob_n

        elif ob_i.is_slider:
            # We have hit the first slider in a possible stack. From this
            # point on, we ALWAYS stack positive regardless.
            while n > 0:
                n -= 1
                ob_n = hit_objects[n]

                if ob_n.is_spinner:
                    continue

                if ob_i.time - ob_n.time > stack_threshold:
                    break

                if distance(ob_n.end_pos, ob_i.pos) < STACK_DISTANCE:
                    ob_n.stack_height = ob_i.stack_height + 1
                    ob_i = ob_n


def resolve_stacking_legacy(hit_objects, stack_threshold):
    """Assign stack heights for beatmap versions 5 and below.

    Parameters
    ----------
    hit_objects : list[OsuObject]
        The objects to resolve stacking for, in chronological order. They are
        modified in place.
    stack_threshold : float
        The largest time in milliseconds between two objects which may stack.
    """
    for i, ob_i in enumerate(hit_objects):
        if ob_i.stack_height != 0 and not ob_i.is_slider:
            continue

        start_time = ob_i.end_time
        slider_stack = 0

        for ob_j in hit_objects[i + 1:]:
            if ob_j.time - stack_threshold > start_time:
                break

            if distance(ob_j.pos, ob_i.pos) < STACK_DISTANCE:
                ob_i.stack_height += 1
                start_time = ob_j.end_time

            elif distance(ob_j.pos, ob_i.end_pos) < STACK_DISTANCE:
                # Case for sliders - bump notes down and right, rather than
                # up and left.
                slider_stack += 1
                ob_j.stack_height -= slider_stack
                start_time = ob_j.end_time
