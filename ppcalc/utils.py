class lazyval:
    """Decorator to lazily compute and cache a value.
    """
    def __init__(self, fget):
        self._fget = fget
        self._name = None
        self.__doc__ = fget.__doc__

    def __set_name__(self, owner, name):
        self._name = name

    def __get__(self, instance, owner):
        if instance is None:
            return self

        cache = vars(instance)
        if self._name in cache:
            return cache[self._name]

        value = self._fget(instance)
        cache[self._name] = value
        return value

    def __set__(self, instance, value):
        vars(instance)[self._name] = value


def saturating_sub(a, *bs):
    """Subtract each of ``bs`` from ``a`` in turn, stopping at zero.

    Parameters
    ----------
    a : int
        The starting count.
    *bs : int
        The counts to subtract.

    Returns
    -------
    difference : int
        ``a - sum(bs)`` clamped after every step so it is never negative.
    """
    for b in bs:
        a = max(a - b, 0)
    return a


def clamp(value, low, high):
    return min(max(value, low), high)


def lerp(start, end, amount):
    """Linearly interpolate between ``start`` and ``end``.
    """
    return start + (end - start) * amount


def accuracy(n_full, n_partial, n_minor, n_minor_misses, n_misses):
    """Calculate accuracy from judgement counts.

    Every successful judgement is worth the same, so accuracy is the fraction
    of judged objects which were hit.

    Parameters
    ----------
    n_full : int
        The number of full hits.
    n_partial : int
        The number of partial hits.
    n_minor : int
        The number of minor hits.
    n_minor_misses : int
        The number of missed minor objects.
    n_misses : int
        The number of misses.

    Returns
    -------
    accuracy : float
        The accuracy in the range [0, 1]. A play with no judgements has an
        accuracy of 1.
    """
    successful = n_full + n_partial + n_minor
    total = successful + n_minor_misses + n_misses
    if total == 0:
        return 1.0
    return clamp(successful / total, 0.0, 1.0)
