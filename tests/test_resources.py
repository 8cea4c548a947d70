import csv
import io
import multiprocessing
import pickle
import queue
import sqlite3
import threading
import traceback

import ijson
import pytest
from pushseq import CLOSED, EvaluationError, batch, collect, csv_rows, elide, \
    feed, from_queue, json_tokens, pairs, seterr, smap, sql, take, tee
from pushseq.resources import RemoteFailure, RowScanner


class CustomException(Exception):
    pass


@pytest.fixture
def restore_seterr():
    old = seterr()
    yield
    seterr(old)


# Release contract ------------------------------------------------------------

class TrackedCursor(sqlite3.Cursor):
    close_calls = 0

    def close(self):
        self.close_calls += 1
        super().close()


class TrackedStringIO(io.StringIO):
    close_calls = 0

    def close(self):
        self.close_calls += 1
        super().close()


class TrackedBytesIO(io.BytesIO):
    close_calls = 0
    fail_after = None

    def read(self, size=-1):
        if self.fail_after is not None and size and self.tell() >= self.fail_after:
            raise OSError("device not ready")
        return super().read(size)

    def close(self):
        self.close_calls += 1
        super().close()


class FakeCursor:
    """A cursor whose driver fails after a few rows."""
    def __init__(self, rows, fail_at):
        self.rows = list(rows)
        self.fail_at = fail_at
        self.fetched = 0
        self.close_calls = 0

    def fetchone(self):
        if self.fetched == self.fail_at:
            raise sqlite3.OperationalError("connection lost")
        if self.fetched == len(self.rows):
            return None
        self.fetched += 1
        return self.rows[self.fetched - 1]

    def close(self):
        self.close_calls += 1


@pytest.fixture
def connection():
    conn = sqlite3.connect(":memory:")
    conn.execute("CREATE TABLE test (a INTEGER, b TEXT)")
    conn.executemany(
        "INSERT INTO test VALUES (?, ?)",
        [(314, "hello"), (159, "goodbye"), (265, "again")])
    yield conn
    conn.close()


def query(connection):
    cursor = connection.cursor(TrackedCursor)
    cursor.execute("SELECT a, b FROM test ORDER BY rowid")
    return cursor


def test_sql(connection):
    cursor = query(connection)
    rows = sql(cursor)
    assert cursor.close_calls == 0

    assert collect(smap(lambda scan: scan(), rows)) == [
        (314, "hello"), (159, "goodbye"), (265, "again")]
    assert cursor.close_calls == 1

    # driving again does not touch the closed cursor
    assert collect(rows) == []
    assert cursor.close_calls == 1


def test_sql_release_on_early_stop(connection):
    cursor = query(connection)
    assert collect(take(smap(lambda scan: scan(str, str), sql(cursor)), 1)) \
        == [("314", "hello")]
    assert cursor.close_calls == 1


def test_sql_release_on_failure():
    cursor = FakeCursor([(1,), (2,), (3,)], fail_at=2)
    out = []
    with pytest.raises(sqlite3.OperationalError):
        sql(cursor)(lambda scan: out.append(scan()) or True)
    assert out == [(1,), (2,)]
    assert cursor.close_calls == 1

    cursor = FakeCursor([(1,), (2,), (3,)], fail_at=None)

    def consume(scan):
        raise CustomException

    with pytest.raises(CustomException):
        sql(cursor)(consume)
    assert cursor.close_calls == 1


def test_row_scanner():
    scan = RowScanner((1, "2.5", None))
    assert scan() == (1, "2.5", None)
    assert scan(str, float, lambda v: v) == ("1", 2.5, None)
    assert scan.into(lambda a, b, c: {"a": a, "b": b}) == {"a": 1, "b": "2.5"}

    with pytest.raises(ValueError):
        scan(int, float)


def test_csv():
    stream = TrackedStringIO("\na,b,c,d,e,f,g\n1,2,3,4,5,6,7\n\n")
    assert collect(pairs(csv_rows(stream))) == [
        (list("abcdefg"), None), (list("1234567"), None)]
    assert stream.close_calls == 1
    assert stream.closed

    stream = TrackedStringIO("a;b\nc;d\n")
    assert collect(elide(csv_rows(stream, delimiter=";"))) == [
        ["a", "b"], ["c", "d"]]


def test_csv_malformed_records():
    stream = TrackedStringIO('a,b\nx,"y"z\nc,d\n')
    out = collect(pairs(csv_rows(stream, strict=True)))

    assert len(out) == 3
    assert out[0] == (["a", "b"], None)
    assert out[1].key is None
    assert isinstance(out[1].value, csv.Error)
    assert out[2] == (["c", "d"], None)
    assert stream.close_calls == 1

    # stopping on the error
    stream = TrackedStringIO('x,"y"z\nc,d\n')
    out = []
    csv_rows(stream, strict=True)(lambda row, err: out.append((row, err)) or False)
    assert len(out) == 1
    assert stream.close_calls == 1


def test_csv_stream_failure():
    class FailingLines(TrackedStringIO):
        def __next__(self):
            line = super().__next__()
            if line.startswith("boom"):
                raise OSError("device not ready")
            return line

    stream = FailingLines("a,b\nboom\nc,d\n")
    out = collect(pairs(csv_rows(stream)))

    assert out[0] == (["a", "b"], None)
    assert isinstance(out[1].value, OSError)
    assert len(out) == 2
    assert stream.close_calls == 1


def test_csv_release_on_early_stop():
    stream = TrackedStringIO("a\nb\nc\n")
    out = []
    csv_rows(stream)(lambda row, err: out.append(row) or False)
    assert out == [["a"]]
    assert stream.close_calls == 1


def test_csv_release_on_failure():
    stream = TrackedStringIO("a\nb\nc\n")

    def consume(row, err):
        raise CustomException

    with pytest.raises(CustomException):
        csv_rows(stream)(consume)
    assert stream.close_calls == 1


def test_json():
    stream = TrackedBytesIO(b"[1, 2, 3, 4, 5]")
    tokens = collect(elide(json_tokens(stream)))

    assert tokens == [("start_array", None)] \
        + [("number", i) for i in range(1, 6)] \
        + [("end_array", None)]
    assert stream.close_calls == 1

    stream = TrackedBytesIO(b'{"a": true} {"b": null}')
    assert collect(elide(json_tokens(stream))) == [
        ("start_map", None), ("map_key", "a"), ("boolean", True),
        ("end_map", None),
        ("start_map", None), ("map_key", "b"), ("null", None),
        ("end_map", None)]


def test_json_errors():
    stream = TrackedBytesIO(b"[1, 2,, 3]")
    out = collect(pairs(json_tokens(stream)))

    assert out[0] == (("start_array", None), None)
    assert out[-1].key is None
    assert isinstance(out[-1].value, ijson.JSONError)
    assert all(err is None for _, err in out[:-1])
    assert stream.close_calls == 1

    stream = TrackedBytesIO(b"[1, 2, 3")
    stream.fail_after = 1
    out = collect(pairs(json_tokens(stream)))
    assert isinstance(out[-1].value, OSError)
    assert stream.close_calls == 1


def test_json_release_on_failure():
    stream = TrackedBytesIO(b"[1, 2, 3]")

    def consume(token, err):
        raise CustomException

    with pytest.raises(CustomException):
        json_tokens(stream)(consume)
    assert stream.close_calls == 1


def test_json_tee():
    side = []
    stream = TrackedBytesIO(b"[1, 2, 3, 4, 5]")
    t = tee(elide(json_tokens(stream)), lambda tok: side.append(tok) or False)

    assert len(collect(t)) == 7
    assert side == [("start_array", None)]
    assert stream.close_calls == 1


# Elision ---------------------------------------------------------------------

def test_elide(restore_seterr):
    def source(consumer):
        for v, e in [(1, None), (2, None), (3, None), (None, CustomException("bad"))]:
            if not consumer(v, e):
                return

    assert collect(take(elide(source), 2)) == [1, 2]

    with pytest.raises(CustomException):
        collect(elide(source))

    seterr('wrap')
    with pytest.raises(EvaluationError) as excinfo:
        collect(elide(source))
    assert isinstance(excinfo.value.__cause__, CustomException)


# Queues ----------------------------------------------------------------------

@pytest.mark.timeout(5)
def test_queue():
    q = queue.Queue()
    words = "to be or not to be that is the question".split()
    producer = threading.Thread(target=feed, args=(words, q))
    producer.start()

    chunks = collect(batch(from_queue(q), 4, copy=True))
    producer.join()

    assert chunks == [words[:4], words[4:8], words[8:]]


@pytest.mark.timeout(5)
def test_queue_early_stop():
    q = queue.Queue()
    feed(range(6), q)

    source = from_queue(q)
    assert collect(take(source, 2)) == [0, 1]
    # the element pulled by take to decide to stop is lost
    assert collect(source) == [3, 4, 5]
    # the sentinel was seen, nothing left to wait for
    assert collect(source) == []


@pytest.mark.timeout(5)
def test_queue_custom_sentinel():
    q = queue.Queue()
    for x in [1, 2, None]:
        q.put(x)

    assert collect(from_queue(q, sentinel=None)) == [1, 2]


def failing_source(consumer):
    consumer(1)
    consumer(2)
    raise CustomException("producer failed")


@pytest.mark.timeout(5)
def test_queue_producer_failure(restore_seterr):
    q = queue.Queue()
    producer = threading.Thread(target=feed, args=(failing_source, q))
    producer.start()
    producer.join()

    out = []
    with pytest.raises(CustomException) as excinfo:
        from_queue(q)(lambda x: out.append(x) or True)
    assert out == [1, 2]
    names = [f.name for f in traceback.extract_tb(excinfo.value.__traceback__)]
    assert "failing_source" in names

    q = queue.Queue()
    feed(failing_source, q)
    seterr('wrap')
    with pytest.raises(EvaluationError) as excinfo:
        collect(from_queue(q))
    assert isinstance(excinfo.value.__cause__, CustomException)


def test_queue_items_survive_pickling():
    assert pickle.loads(pickle.dumps(CLOSED)) is CLOSED

    q = queue.Queue()
    feed(failing_source, q)
    transported = queue.Queue()
    while not q.empty():
        transported.put(pickle.loads(pickle.dumps(q.get())))

    out = []
    with pytest.raises(CustomException):
        from_queue(transported)(lambda x: out.append(x) or True)
    assert out == [1, 2]


def test_remote_failure_without_error():
    q = queue.Queue()
    q.put(RemoteFailure(None, ["Traceback: something went wrong\n"]))
    with pytest.raises(EvaluationError, match="something went wrong"):
        collect(from_queue(q))


class LockedException(Exception):
    def __init__(self, msg):
        super().__init__(msg)
        self.lock = threading.Lock()


def unpicklable_failure(consumer):
    consumer(1)
    raise LockedException("producer failed")


@pytest.mark.timeout(10)
def test_process_queue_producer_failure(restore_seterr):
    q = multiprocessing.Queue()
    feed(failing_source, q)
    out = []
    with pytest.raises(CustomException):
        from_queue(q)(lambda x: out.append(x) or True)
    assert out == [1, 2]

    q = multiprocessing.Queue()
    feed(unpicklable_failure, q)
    out = []
    with pytest.raises(EvaluationError, match="LockedException: producer failed"):
        from_queue(q)(lambda x: out.append(x) or True)
    assert out == [1]
