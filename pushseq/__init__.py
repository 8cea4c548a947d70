"""
A python library to build lazy pipelines over push-based sequences.

A sequence in the pushseq package is a function that takes a consumer
(a function of one element returning whether it wants more) and calls it
with each element in order until the elements run out or the consumer
asks to stop. Lists, ranges and other iterables are accepted wherever a
sequence is expected.

All functions that return a sequence are lazy: nothing is computed when
the pipeline is assembled, only when it is driven, and stop requests
travel back up to the source as soon as the consumer makes them. This
makes it safe to combine infinite sources, blocking queues, or resources
such as files and database cursors which are closed as soon as the drive
ends.
"""

from . import instrument
from .branching import tee
from .core import (
    Pair,
    Seq,
    Seq2,
    arange,
    as_seq,
    pairs,
    repeat,
    values,
)
from .errors import EvaluationError, seterr
from .indexing import indexed, skip, take, take_until
from .mapping import sfilter, smap, starmap
from .ordering import is_sorted, natural_order, sort, sort_by, unique
from .reduction import collect, first, maximum, minimum, reduce
from .resources import (
    CLOSED,
    csv_rows,
    elide,
    feed,
    from_queue,
    json_tokens,
    sql,
)
from .shape import append, batch, prepend

__all__ = [
    "Seq",
    "Seq2",
    "Pair",
    "EvaluationError",
    "seterr",
    "as_seq",
    "values",
    "arange",
    "repeat",
    "pairs",
    "smap",
    "starmap",
    "sfilter",
    "take",
    "skip",
    "take_until",
    "indexed",
    "batch",
    "prepend",
    "append",
    "tee",
    "unique",
    "sort",
    "sort_by",
    "is_sorted",
    "natural_order",
    "reduce",
    "collect",
    "first",
    "minimum",
    "maximum",
    "sql",
    "csv_rows",
    "json_tokens",
    "from_queue",
    "feed",
    "elide",
    "CLOSED",
]
