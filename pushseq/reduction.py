"""Terminal operations: drive a sequence and return a result."""

from .core import as_seq


def reduce(sequence, func, init):
    """Accumulate the elements of a sequence.

    `func` is called as :code:`func(element, accumulator)` for every
    element and returns the new accumulator. The sequence is always driven
    to the end.

    Example:

        >>> pushseq.reduce([1, 2, 3], lambda x, total: total + x * x, 0)
        14
    """
    accumulator = init

    def step(x):
        nonlocal accumulator
        accumulator = func(x, accumulator)
        return True

    as_seq(sequence)(step)
    return accumulator


def _append(x, items):
    items.append(x)
    return items


def collect(sequence):
    """Return the elements of a sequence in a list."""
    return reduce(sequence, _append, [])


def first(sequence, predicate, default=None):
    """Return the first element matching `predicate`.

    Returns:
        (Any, bool): The element and True, or `default` and False if no
        element matched. The drive stops on the first match.
    """
    found = False
    result = default

    def step(x):
        nonlocal found, result
        if predicate(x):
            found = True
            result = x
            return False
        return True

    as_seq(sequence)(step)
    return result, found


def minimum(sequence, default=None):
    """Return the smallest element of a sequence.

    Returns:
        (Any, bool): The earliest of the smallest elements and True, or
        `default` and False when the sequence is empty.
    """
    found = False
    result = default

    def step(x):
        nonlocal found, result
        if not found or x < result:
            found = True
            result = x
        return True

    as_seq(sequence)(step)
    return result, found


def maximum(sequence, default=None):
    """Return the largest element of a sequence.

    Same as :func:`minimum` with the opposite order.
    """
    found = False
    result = default

    def step(x):
        nonlocal found, result
        if not found or x > result:
            found = True
            result = x
        return True

    as_seq(sequence)(step)
    return result, found
