"""The sequence abstraction and basic sources.

A sequence is any callable that takes a *consumer* and calls it once per
element, in order, until either the elements run out or the consumer
returns a falsy value. Combinators in this package are small classes
implementing that protocol on top of another sequence.
"""

from abc import ABC, abstractmethod
from collections import namedtuple
from collections.abc import Iterable

from .utils import isint


class Seq(ABC):
    """Base class for sequences.

    Calling a sequence with a consumer *drives* it: the consumer receives
    the elements one at a time and returns whether it wants more. Once
    the consumer has returned a falsy value it is never called again
    during that drive.

    Subclasses only need to implement :meth:`__call__`. Plain functions
    with the same signature are accepted wherever a sequence is expected.
    """

    @abstractmethod
    def __call__(self, consumer):
        raise NotImplementedError


class Seq2(Seq):
    """Base class for paired sequences.

    Same as :class:`Seq` except that the consumer takes two positional
    arguments, for instance an index and a value or a value and an error.
    """


Pair = namedtuple('Pair', ['key', 'value'])
Pair.__doc__ = "The two values presented to a :class:`Seq2` consumer."


class Values(Seq):
    def __init__(self, iterable):
        self.iterable = iterable

    def __call__(self, consumer):
        for v in self.iterable:
            if not consumer(v):
                return


def values(iterable):
    """Return a sequence over the items of an iterable.

    The sequence can be driven several times if the iterable can be
    iterated several times (lists, tuples, ranges...). A one-shot iterator
    such as a generator is consumed by the first drive.

    Example:

        >>> out = []
        >>> values([1, 2, 3])(lambda x: out.append(x) or x < 2)
        >>> out
        [1, 2]
    """
    return Values(iterable)


def as_seq(obj):
    """Normalize `obj` into something that can be driven.

    Callables are assumed to already follow the sequence protocol and are
    returned unchanged, other iterables are wrapped with :func:`values`.
    """
    if callable(obj):
        return obj
    elif isinstance(obj, Iterable):
        return Values(obj)
    else:
        raise TypeError(
            "expected a sequence or an iterable, not "
            + obj.__class__.__name__)


class Arange(Seq):
    def __init__(self, start, stop=None, step=None):
        if stop is None and step is None:
            stop = start
            start = 0

        if step is None:
            step = 1

        if not (isint(start) and isint(stop) and isint(step)):
            raise TypeError("arange arguments must be integers")
        if step == 0:
            raise ValueError("arange step cannot be 0")

        self.start, self.stop, self.step = start, stop, step

    def __call__(self, consumer):
        for i in range(self.start, self.stop, self.step):
            if not consumer(i):
                return


def arange(start, stop=None, step=None):
    """Sequential equivalent of Python built-in :class:`python:range`."""
    return Arange(start, stop, step)


class Repeat(Seq):
    def __init__(self, value, times=None):
        if times is not None and not isint(times):
            raise TypeError("times must be an integer or None")

        self.value = value
        self.times = times

    def __call__(self, consumer):
        if self.times is None:
            while consumer(self.value):
                pass
        else:
            for _ in range(self.times):
                if not consumer(self.value):
                    return


def repeat(value, times=None):
    """Return a sequence repeating `value`, infinitely by default."""
    return Repeat(value, times)


class Pairs(Seq):
    def __init__(self, sequence):
        self.sequence = sequence

    def __call__(self, consumer):
        self.sequence(lambda k, v: consumer(Pair(k, v)))


def pairs(sequence):
    """Turn a paired sequence into a sequence of :class:`Pair` tuples.

    Example:

        >>> from pushseq import collect, indexed
        >>> collect(pairs(indexed(['a', 'b'])))
        [Pair(key=0, value='a'), Pair(key=1, value='b')]
    """
    return Pairs(as_seq(sequence))
