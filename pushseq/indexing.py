from .core import Seq, Seq2, as_seq
from .utils import isint


class Take(Seq):
    def __init__(self, sequence, n):
        if not isint(n):
            raise TypeError("n must be an integer, not " + n.__class__.__name__)

        self.sequence = sequence
        self.n = n

    def __call__(self, consumer):
        n = self.n
        seen = 0

        def forward(x):
            nonlocal seen
            seen += 1
            if seen <= n:
                return consumer(x)
            else:
                return False

        self.sequence(forward)


def take(sequence, n):
    """Return the first `n` elements of a sequence.

    The element following the last one returned is still pulled from the
    source to find out that the limit is reached, but it is never passed
    downstream. With `n <= 0` nothing is returned.

    Example:

        >>> pushseq.collect(pushseq.take(pushseq.repeat('a'), 3))
        ['a', 'a', 'a']
    """
    return Take(as_seq(sequence), n)


class Skip(Seq):
    def __init__(self, sequence, n):
        if not isint(n):
            raise TypeError("n must be an integer, not " + n.__class__.__name__)

        self.sequence = sequence
        self.n = n

    def __call__(self, consumer):
        n = self.n
        seen = 0

        def forward(x):
            nonlocal seen
            seen += 1
            if seen <= n:
                return True
            else:
                return consumer(x)

        self.sequence(forward)


def skip(sequence, n):
    """Return all but the first `n` elements of a sequence."""
    return Skip(as_seq(sequence), n)


class TakeUntil(Seq):
    def __init__(self, sequence, predicate):
        if not callable(predicate):
            raise TypeError("predicate must be callable")

        self.sequence = sequence
        self.predicate = predicate

    def __call__(self, consumer):
        predicate = self.predicate

        def forward(x):
            if predicate(x):
                consumer(x)
                return False
            else:
                return consumer(x)

        self.sequence(forward)


def take_until(sequence, predicate):
    """Return elements up to and including the first one matching `predicate`.

    Unlike :func:`python:itertools.takewhile`, the element that ends the
    sequence is delivered: the drive stops right after it whatever the
    consumer answered.

    Example:

        >>> pushseq.collect(pushseq.take_until(range(10), lambda x: x * x > 10))
        [0, 1, 2, 3, 4]
    """
    return TakeUntil(as_seq(sequence), predicate)


class Indexed(Seq2):
    def __init__(self, sequence):
        self.sequence = sequence

    def __call__(self, consumer):
        i = 0

        def forward(x):
            nonlocal i
            more = consumer(i, x)
            i += 1
            return more

        self.sequence(forward)


def indexed(sequence):
    """Return a paired sequence of `(index, element)`, counting from 0.

    This is the push counterpart of :func:`python:enumerate`, use
    :func:`pushseq.pairs` to get tuples out of it.
    """
    return Indexed(as_seq(sequence))
