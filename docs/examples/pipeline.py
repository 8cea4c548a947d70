import io
import queue
import sqlite3
import threading

import pushseq


s = [1, 2, 3, 4, 5, 6, 4, 3, 2]

# sum the squares of the even numbers
evens = pushseq.sfilter(lambda i: i % 2 == 0, s)
squares = pushseq.smap(lambda i: i * i, evens)
print(pushseq.reduce(squares, lambda x, total: x + total, 0))

# take the first two
print(pushseq.collect(pushseq.take(s, 2)))

# database rows, decoded on demand
db = sqlite3.connect(":memory:")
db.execute("CREATE TABLE test (a INTEGER, b TEXT)")
db.executemany("INSERT INTO test VALUES (?, ?)", [(314, "hello"), (159, "goodbye")])


def show_row(scan):
    a, b = scan(int, str)
    print(a, b)
    return True


pushseq.sql(db.execute("SELECT * FROM test"))(show_row)

# csv records
csv_text = io.StringIO("\na,b,c,d,e,f,g\n1,2,3,4,5,6,7\n")
print(pushseq.collect(pushseq.elide(pushseq.csv_rows(csv_text))))

print(pushseq.collect(pushseq.unique(s)))
print(pushseq.collect(pushseq.sort(s)))
print(pushseq.collect(pushseq.sort_by(s, lambda a, b: b - a)))

# items produced by another thread
words = queue.Queue()
threading.Thread(
    target=pushseq.feed,
    args=("to be or not to be that is the question".split(), words)).start()


def show_chunk(chunk):
    print(len(chunk), chunk)
    return True


pushseq.batch(pushseq.from_queue(words), 4)(show_chunk)

# inspect the first json token on the side
tokens = pushseq.elide(pushseq.json_tokens(io.BytesIO(b"[1, 2, 3, 4, 5]")))
tokens = pushseq.tee(tokens, lambda tok: print(type(tok[1]).__name__) and False)
print(pushseq.collect(tokens))

print(pushseq.collect(pushseq.prepend(1, s)))
print(pushseq.collect(pushseq.append(100, s)))

print(pushseq.is_sorted([1, 2, 3, 4]))
print(pushseq.is_sorted([1, 2, 4, 3]))
print(pushseq.is_sorted([4, 3, 2, 1]))
print(pushseq.minimum([-1, 190, -3]))
print(pushseq.maximum([-1, 190, -3]))
print(pushseq.first([-1, 190, -3], lambda i: i % 2 == 0))
