"""Debugging tools."""

from time import monotonic, perf_counter

from .core import Seq, as_seq


class Debug(Seq):
    def __init__(self, sequence, func, max_calls, max_rate):
        self.sequence = sequence
        self.max_calls = max_calls
        self.max_rate = max_rate
        self.n_calls = 0
        self.last_call = monotonic()
        self.func = func

    def silence(self):
        if self.max_calls is not None:
            if self.n_calls >= self.max_calls:
                return True

        if self.max_rate is not None:
            elapsed = monotonic() - self.last_call
            if elapsed < (1.0 / self.max_rate):
                return True

        return False

    def __call__(self, consumer):
        i = 0

        def forward(x):
            nonlocal i
            if not self.silence():
                self.func(i, x)
                self.last_call = monotonic()
                self.n_calls += 1

            i += 1
            return consumer(x)

        self.sequence(forward)


def debug(sequence, func, max_calls=None, max_rate=None):
    """Wrap a sequence to trigger a function on each element.

    Args:
        sequence (Sequence):
            Source sequence.
        func (Callable):
            A function to call whenever an element goes through, must
            take the index and value of the element.
        max_calls (Optional[int]):
            An optional count limit on how many times `func` is invoked
            (default None), counted over all drives.
        max_rate (Optional[int]):
            An optional rate limit to avoid spamming `func`.

    Returns:
        (Sequence): The wrapped sequence, elements and stop requests go
        through unchanged.

    Example:

        .. testsetup::

           import pushseq
           from pushseq.instrument import debug

        >>> watchthis = debug([1, 2, 3, 4, 5], lambda i, v: print(v), 2)
        >>> pushseq.collect(watchthis)
        1
        2
        [1, 2, 3, 4, 5]
    """
    return Debug(as_seq(sequence), func, max_calls, max_rate)


class ThroughputMonitor(Seq):
    def __init__(self, sequence):
        self.sequence = sequence
        self.n_calls = 0
        self.time_spent = 0

    def reset(self):
        """Reset perf counter."""
        self.n_calls = 0
        self.time_spent = 0

    def throughput(self):
        """Returns average measured throughput."""
        if self.n_calls == 0:
            raise RuntimeError(
                "cannot measure throughput before any element was read")

        return self.n_calls / self.time_spent

    def read_delay(self):
        """Return average measured time spent producing elements."""
        if self.n_calls == 0:
            raise RuntimeError(
                "cannot measure read delay before any element was read")

        return self.time_spent / self.n_calls

    def __call__(self, consumer):
        t_start = perf_counter()

        def forward(x):
            nonlocal t_start
            self.time_spent += perf_counter() - t_start
            self.n_calls += 1

            more = consumer(x)

            t_start = perf_counter()
            return more

        self.sequence(forward)


def monitor_throughput(sequence):
    """Wrap a sequence in an object with three additional methods:

    * :code:`read_delay()` the average time it takes to produce an element.
    * :code:`throughput()` the invert of the above.
    * :code:`reset()` resets the accumulated statistics.

    Time spent by the consumer on each element is not counted.
    """
    return ThroughputMonitor(as_seq(sequence))
