"""Ordering and membership operations."""

import functools

from .core import Seq, as_seq
from .reduction import collect


def natural_order(a, b):
    """Three-way comparison using the `<` and `>` operators."""
    return (a > b) - (a < b)


def _sign(x):
    return (x > 0) - (x < 0)


class Unique(Seq):
    def __init__(self, sequence):
        self.sequence = sequence

    def __call__(self, consumer):
        seen = set()

        def forward(x):
            if x in seen:
                return True

            seen.add(x)
            return consumer(x)

        self.sequence(forward)


def unique(sequence):
    """Return the first occurrence of each distinct element.

    Elements must be hashable. The set of elements seen so far only lives
    for the duration of a drive.
    """
    return Unique(as_seq(sequence))


class Sorted(Seq):
    def __init__(self, sequence, key=None, reverse=False):
        self.sequence = sequence
        self.key = key
        self.reverse = reverse
        self.items = None

    def __call__(self, consumer):
        if self.items is None:
            items = collect(self.sequence)
            items.sort(key=self.key, reverse=self.reverse)
            self.items = items

        for v in self.items:
            if not consumer(v):
                return


def sort(sequence, key=None, reverse=False):
    """Return a sorted view of a sequence.

    The source is drained and sorted the first time the result is driven,
    not when calling this function. The sorted elements are then kept in
    memory so that the result can be driven again.
    Sorting is stable, arguments are the same as for
    :func:`python:sorted`.
    """
    return Sorted(as_seq(sequence), key, reverse)


def sort_by(sequence, order):
    """Return a view of a sequence sorted with a three-way comparator.

    Args:
        sequence (Sequence): The source sequence.
        order (Callable[[Any, Any], int]): Returns a negative number, zero
            or a positive number when its first argument should come
            before, next to or after the second one.

    Example:

        >>> descending = lambda a, b: b - a
        >>> pushseq.collect(pushseq.sort_by([3, 1, 2], descending))
        [3, 2, 1]
    """
    if not callable(order):
        raise TypeError("order must be callable")

    return sort(sequence, key=functools.cmp_to_key(order))


def is_sorted(sequence, compare=natural_order):
    """Tell whether a sequence is monotonic.

    Each element is compared to the previous one with
    :code:`compare(element, previous)`. The sign of the first comparison
    sets the direction, any later comparison with a different sign ends
    the scan.

    Returns:
        int: `1` if the sequence is ascending, `-1` if it is descending,
        `0` otherwise. Sequences of less than two elements are considered
        ascending.

    Note that equal neighbours give a comparison of sign 0 which acts as
    a direction of its own: :code:`[2, 2, 2]` returns `0` and so does
    :code:`[1, 1, 2]`.
    """
    previous = None
    started = False
    direction = None
    monotonic = True

    def step(x):
        nonlocal previous, started, direction, monotonic
        if not started:
            started = True
            previous = x
            return True

        sign = _sign(compare(x, previous))
        previous = x

        if direction is None:
            direction = sign
        elif sign != direction:
            monotonic = False
            return False

        return True

    as_seq(sequence)(step)

    if not monotonic:
        return 0
    elif direction is None:
        return 1
    else:
        return direction
