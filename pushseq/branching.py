from .core import Seq, as_seq


class Tee(Seq):
    def __init__(self, sequence, side):
        if not callable(side):
            raise TypeError("side must be callable")

        self.sequence = sequence
        self.side = side

    def __call__(self, consumer):
        side = self.side
        side_more = True
        main_more = True

        def forward(x):
            nonlocal side_more, main_more
            if side_more:
                side_more = bool(side(x))
            if main_more:
                main_more = bool(consumer(x))

            # upstream stops only once both consumers gave up
            return side_more or main_more

        self.sequence(forward)


def tee(sequence, side):
    """Feed the elements of a sequence to a second consumer on the fly.

    Each element goes to `side` first, then to the consumer driving the
    returned sequence. Both consumers stop independently: one that has
    returned a falsy value is not called anymore, while the source keeps
    being driven for the other one. The source only stops when both
    consumers are done.

    Args:
        sequence (Sequence):
            The source sequence.
        side (Callable[[Any], bool]):
            A consumer which receives every element until it returns a
            falsy value.

    Example:

        >>> seen = []
        >>> t = pushseq.tee(range(5), lambda x: seen.append(x) or x < 1)
        >>> pushseq.collect(pushseq.take(t, 3))
        [0, 1, 2]
        >>> seen
        [0, 1]
    """
    return Tee(as_seq(sequence), side)
