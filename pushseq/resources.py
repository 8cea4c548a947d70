"""Sequences over external resources.

The adapters in this module take ownership of a resource (a database
cursor, an open file...) and release it exactly once, at the end of the
first drive, however that drive ends: exhaustion, early stop or error.
"""

import csv
import pickle as pkl
import queue as thread_queue
import sys
import traceback
from abc import abstractmethod

import ijson
import tblib
from tblib import pickling_support

from .core import Seq, Seq2, as_seq
from .errors import format_stack, reraise_err
from .utils import get_logger


pickling_support.install()

logger = get_logger(__name__)


# Resource ownership ----------------------------------------------------------

class ResourceSeq(Seq):
    """Base class for sequences that own a closeable resource."""

    def __init__(self, resource):
        self.resource = resource
        self.released = False

    def release(self):
        """Close the resource, subsequent calls do nothing."""
        if self.released:
            return

        self.released = True
        logger.debug("releasing %s", self.resource)
        self.resource.close()

    def __call__(self, consumer):
        if self.released:
            logger.warning(
                "%s driven after its resource was released",
                self.__class__.__name__)
            return

        try:
            self.drive(consumer)
        finally:
            self.release()

    @abstractmethod
    def drive(self, consumer):
        raise NotImplementedError


class RowScanner:
    """Decode one database row on demand."""

    __slots__ = ('row',)

    def __init__(self, row):
        self.row = row

    def __call__(self, *converters):
        """Return the row values, optionally converted column by column.

        Args:
            converters (Callable): One conversion function per column, or
                none to get the values as returned by the driver.
        """
        if len(converters) == 0:
            return tuple(self.row)

        if len(converters) != len(self.row):
            raise ValueError(
                "expected {} destination arguments, got {}".format(
                    len(self.row), len(converters)))

        return tuple(c(v) for c, v in zip(converters, self.row))

    def into(self, factory):
        """Return :code:`factory(*row)`."""
        return factory(*self.row)


class SqlRows(ResourceSeq):
    def drive(self, consumer):
        while True:
            row = self.resource.fetchone()
            if row is None:
                return

            if not consumer(RowScanner(row)):
                return


def sql(cursor):
    """Return a sequence over the rows of an executed DB-API cursor.

    Elements are :class:`RowScanner` objects which decode the row when
    called. The sequence takes ownership of the cursor and closes it once
    driven.

    Example:

        >>> conn = sqlite3.connect(":memory:")
        >>> _ = conn.execute("CREATE TABLE test (a INTEGER, b TEXT)")
        >>> _ = conn.execute("INSERT INTO test VALUES (314, 'hello')")
        >>> rows = pushseq.sql(conn.execute("SELECT a, b FROM test"))
        >>> pushseq.collect(pushseq.smap(lambda scan: scan(int, str), rows))
        [(314, 'hello')]
    """
    return SqlRows(cursor)


class CsvRows(ResourceSeq, Seq2):
    def __init__(self, stream, fmtparams):
        super().__init__(stream)
        self.fmtparams = fmtparams

    def drive(self, consumer):
        reader = csv.reader(self.resource, **self.fmtparams)

        while True:
            try:
                row = next(reader)
            except StopIteration:
                return
            except csv.Error as error:  # malformed record, reader can resume
                if not consumer(None, error):
                    return
                continue
            except Exception as error:
                consumer(None, error)
                return

            if len(row) == 0:  # blank line
                continue

            if not consumer(row, None):
                return


def csv_rows(stream, **fmtparams):
    """Return a paired sequence of `(row, error)` read from a csv stream.

    Each record comes out as `(row, None)`. A malformed record comes out
    as `(None, error)` and reading goes on with the next one; a failure of
    the stream itself is reported the same way and ends the sequence.
    Blank lines are skipped.

    Args:
        stream (TextIO): An open text file, preferably opened with
            :code:`newline=''`. It is closed once the sequence is driven.
        fmtparams: Formatting parameters for :func:`python:csv.reader`.
    """
    return CsvRows(stream, fmtparams)


class JsonTokens(ResourceSeq, Seq2):
    def __init__(self, stream, config):
        super().__init__(stream)
        self.config = config

    def drive(self, consumer):
        events = ijson.basic_parse(self.resource, **self.config)

        while True:
            try:
                token = next(events)
            except StopIteration:
                return
            except Exception as error:
                consumer(None, error)
                return

            if not consumer(token, None):
                return


def json_tokens(stream, multiple_values=True, **config):
    """Return a paired sequence of `(token, error)` parsed from a JSON stream.

    Tokens are the `(event, value)` tuples of :func:`ijson.basic_parse`,
    for instance :code:`('start_array', None)` or :code:`('number', 1)`.
    The document is parsed incrementally while the sequence is driven. A
    parse error comes out as `(None, error)` and ends the sequence.

    Args:
        stream (BinaryIO): An open binary file, closed once the sequence is
            driven.
        multiple_values (bool): Whether to accept several top-level values
            one after the other (default True).
        config: Other options for :func:`ijson.basic_parse`.
    """
    config['multiple_values'] = multiple_values
    return JsonTokens(stream, config)


# Errors ----------------------------------------------------------------------

class Elision(Seq):
    def __init__(self, sequence):
        self.sequence = sequence
        self.stack = format_stack(2)

    def __call__(self, consumer):
        i = 0

        def forward(value, error):
            nonlocal i
            if error is not None:
                reraise_err(i, error, self.stack, self.__class__.__name__)

            i += 1
            return consumer(value)

        self.sequence(forward)


def elide(sequence):
    """Turn a paired sequence of `(value, error)` into a sequence of values.

    This assumes that errors do not happen: the first error found is
    raised and aborts the drive (wrapped in
    :class:`pushseq.EvaluationError` if :func:`pushseq.seterr` is set to
    `'wrap'`). Use it for quick scripts, not for input that can actually
    be malformed.
    """
    return Elision(as_seq(sequence))


# Queues ----------------------------------------------------------------------

class _Closed:
    def __repr__(self):
        return "CLOSED"

    def __reduce__(self):
        return "CLOSED"


CLOSED = _Closed()
"""Marks the end of the items in a queue, survives pickling."""


class RemoteFailure:
    """Error raised while feeding a queue, with its traceback."""

    def __init__(self, error, tb):
        self.error = error
        self.tb = tb

    def restore(self):
        if self.error is None:  # error could not be transported
            return "".join(self.tb)

        return self.error.with_traceback(self.tb.as_traceback())


class QueueSource(Seq):
    def __init__(self, queue, sentinel):
        self.queue = queue
        self.sentinel = sentinel
        self.closed = False
        self.stack = format_stack(2)

    def __call__(self, consumer):
        i = 0

        while not self.closed:
            item = self.queue.get()

            if item is self.sentinel:
                self.closed = True
                return

            if isinstance(item, RemoteFailure):
                reraise_err(i, item.restore(), self.stack, "queue producer")

            i += 1
            if not consumer(item):
                return


def from_queue(queue, sentinel=CLOSED):
    """Return a sequence over the items put in a queue.

    Driving the sequence blocks until items are available, as with
    :meth:`python:queue.Queue.get`. It ends when `sentinel` is received,
    after which the sequence is empty. Items left in the queue after an
    early stop are returned by the next drive.

    Args:
        queue (queue.Queue): A thread or process queue.
        sentinel (Any): The object which marks the end of the items, it is
            compared by identity so it must survive pickling when used
            with process queues (:data:`CLOSED` and `None` do).
    """
    return QueueSource(queue, sentinel)


def feed(sequence, queue, sentinel=CLOSED):
    """Put the elements of a sequence in a queue, followed by `sentinel`.

    This is meant to run in a producer thread or process, while another
    one reads the queue with :func:`from_queue`. If driving the sequence
    fails, the error and its traceback are sent through the queue and
    raised by the reading side instead. Over a process queue, an error
    which cannot be pickled is replaced by its formatted traceback and the
    reading side raises :class:`EvaluationError` with that text.

    Example:

        >>> q = queue.Queue()
        >>> threading.Thread(target=pushseq.feed, args=(range(5), q)).start()
        >>> pushseq.collect(pushseq.batch(pushseq.from_queue(q), 2, copy=True))
        [[0, 1], [2, 3], [4]]
    """
    logger.debug("feeding %s", queue)

    def put(x):
        queue.put(x)
        return True

    try:
        as_seq(sequence)(put)

    except Exception:
        et, ev, tb = sys.exc_info()
        logger.debug("producer failed, sending error to the consumer")
        failure = RemoteFailure(ev, tblib.Traceback(tb))
        if not isinstance(queue, (thread_queue.Queue, thread_queue.SimpleQueue)):
            # process queues pickle items later on, in a background thread
            # which only logs failures
            try:
                pkl.loads(pkl.dumps(failure))
            except Exception as e:
                logger.debug("cannot transport producer error: %s", e)
                failure = RemoteFailure(
                    None, traceback.format_exception(et, ev, tb))
        queue.put(failure)

    finally:
        queue.put(sentinel)
        logger.debug("done feeding %s", queue)
