"""Operations that regroup or extend the elements of a sequence."""

from .core import Seq, as_seq
from .utils import isint


class Batching(Seq):
    def __init__(self, sequence, batch_size, copy=False):
        if not isint(batch_size):
            raise TypeError(
                "batch_size must be an integer, not "
                + batch_size.__class__.__name__)
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")

        self.sequence = sequence
        self.batch_size = batch_size
        self.copy = copy

    def __call__(self, consumer):
        batch_size = self.batch_size
        buffer = [None] * batch_size
        fill = 0
        stopped = False

        def forward(x):
            nonlocal buffer, fill, stopped
            buffer[fill] = x
            fill += 1
            if fill < batch_size:
                return True

            fill = 0
            chunk = buffer
            if self.copy:
                buffer = [None] * batch_size

            if not consumer(chunk):
                stopped = True
                return False

            return True

        self.sequence(forward)

        if fill > 0 and not stopped:
            consumer(buffer[:fill])


def batch(sequence, k, copy=False):
    """Return a sequence of the elements grouped in lists of `k` items.

    The last list holds the remaining elements when the length of the
    sequence is not a multiple of `k`; it is never padded.

    .. warning::

        By default, full batches are all the *same* list object which is
        overwritten with the next elements once the consumer returns. A
        consumer that needs to keep a batch must copy it, or pass
        `copy=True` to get a freshly allocated list for every batch.
        The last incomplete batch is always a distinct list.

    Args:
        sequence (Sequence):
            The input sequence.
        k (int):
            Number of items by batch, at least 1.
        copy (bool):
            Whether to allocate a new list for every batch (default False).

    Return:
        Sequence: A sequence of lists.

    Example:

        >>> batches = pushseq.batch(range(7), 3, copy=True)
        >>> pushseq.collect(batches)
        [[0, 1, 2], [3, 4, 5], [6]]
    """
    return Batching(as_seq(sequence), k, copy)


class Prepending(Seq):
    def __init__(self, value, sequence):
        self.value = value
        self.sequence = sequence

    def __call__(self, consumer):
        if not consumer(self.value):
            return

        self.sequence(consumer)


def prepend(value, sequence):
    """Return a sequence starting with `value` followed by `sequence`.

    The wrapped sequence is not driven at all if the consumer stops
    after the first value, for instance to peek at a ticking clock
    without waiting for the next tick::

        for_ticks = pushseq.prepend(time.time(), pushseq.from_queue(ticks))
    """
    return Prepending(value, as_seq(sequence))


class Appending(Seq):
    def __init__(self, value, sequence):
        self.value = value
        self.sequence = sequence

    def __call__(self, consumer):
        more = True

        def forward(x):
            nonlocal more
            more = consumer(x)
            return more

        self.sequence(forward)

        if more:
            consumer(self.value)


def append(value, sequence):
    """Return `sequence` followed by `value`.

    `value` only comes out if the consumer accepted every element of
    `sequence`: when it stops early, nothing is appended.
    """
    return Appending(value, as_seq(sequence))
