from .core import Seq, as_seq
from .errors import EvaluationError, format_stack, seterr


class Mapping(Seq):
    def __init__(self, f, sequence):
        if not callable(f):
            raise TypeError("f must be callable")

        self.sequence = as_seq(sequence)
        self.f = f
        self.stack = format_stack(2)

    def __call__(self, consumer):
        f = self.f
        i = 0

        def forward(x):
            nonlocal i
            try:
                value = f(x)
            except Exception as error:
                if seterr() == 'passthrough' or isinstance(error, EvaluationError):
                    raise
                msg = "Failed to evaluate item {} in {} created at:\n{}".format(
                    i, self.__class__.__name__, self.stack)
                raise EvaluationError(msg) from error

            i += 1
            return consumer(value)

        self.sequence(forward)


def smap(f, sequence):
    """Return a mapping of `f` over the sequence.

    Equivalent to :code:`(f(x) for x in sequence)` with on-demand
    evaluation: `f` is only called while the sequence is driven, once per
    element, and the consumer decides alone when to stop.

    Example:

        >>> def do(y):
        ...     print("computing now")
        ...     return y + 2
        ...
        >>> m = pushseq.smap(do, [1, 2, 3, 4])
        >>> pushseq.collect(pushseq.take(m, 2))
        computing now
        computing now
        computing now
        [3, 4]

    The third call comes from :func:`take` which needs to see a third
    element to decide to stop.
    """
    return Mapping(f, sequence)


def starmap(f, sequence):
    """Map a function over a sequence of argument tuples.

    A lazy equivalent of :func:`python:itertools.starmap`.
    """
    if not callable(f):
        raise TypeError("f must be callable")

    return smap(lambda x: f(*x), sequence)


class Filtering(Seq):
    def __init__(self, predicate, sequence):
        if not callable(predicate):
            raise TypeError("predicate must be callable")

        self.sequence = as_seq(sequence)
        self.predicate = predicate
        self.stack = format_stack(2)

    def __call__(self, consumer):
        predicate = self.predicate
        i = 0

        def forward(x):
            nonlocal i
            try:
                keep = predicate(x)
            except Exception as error:
                if seterr() == 'passthrough' or isinstance(error, EvaluationError):
                    raise
                msg = "Failed to evaluate item {} in {} created at:\n{}".format(
                    i, self.__class__.__name__, self.stack)
                raise EvaluationError(msg) from error

            i += 1
            if keep:
                return consumer(x)

            # downstream was not asked, keep going
            return True

        self.sequence(forward)


def sfilter(predicate, sequence):
    """Return the elements of the sequence for which `predicate` is true.

    Rejected elements never reach the consumer, so filtering never stops
    a drive by itself.

    Example:

        >>> pushseq.collect(pushseq.sfilter(lambda x: x % 2 == 0, range(7)))
        [0, 2, 4, 6]
    """
    return Filtering(predicate, sequence)
