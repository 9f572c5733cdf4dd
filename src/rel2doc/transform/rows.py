"""Pull-based row stream with one row buffered ahead.

``RowStream`` wraps the raw rows returned by a ``DatabaseClient`` and
decodes each one into a ``{label: RowValue}`` mapping.  It always holds the
next decoded row while the consumer is rendering the current one.  Rows that
cannot be decoded are logged and skipped.

The stream is finite and cannot be restarted.  Used as a context manager it
closes the source on exit, so a generator holding a pooled connection is
released even when rendering fails halfway.

Usage:
    with RowStream(client.stream(sql)) as stream:
        for row in stream:
            render(row)
    print(stream.skipped)
"""

import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from rel2doc.transform.values import RowValue, classify

logger = logging.getLogger(__name__)

Row = dict[str, RowValue]

_EXHAUSTED = object()


class RowDecodeError(ValueError):
    """Raised when a raw row cannot be decoded into tagged values."""


def decode_row(raw: Mapping[str, Any]) -> Row:
    """Decode a raw row mapping into tagged values.

    Raises:
        RowDecodeError: If any value cannot be classified.
    """
    try:
        return {str(label): classify(value) for label, value in raw.items()}
    except Exception as e:
        raise RowDecodeError(f"Cannot decode row: {e}") from e


class RowStream:
    """Iterator of decoded rows, prefetching one row ahead.

    Only rows whose values fail to classify are skipped.  An exception raised
    by the source itself while fetching (a driver or connection error)
    propagates to the caller and ends the stream.

    Args:
        rows: Raw row mappings (label -> driver value).
    """

    def __init__(self, rows: Iterable[Mapping[str, Any]]):
        self._source: Iterator[Mapping[str, Any]] = iter(rows)
        self._pending: Any = None
        self._primed = False
        self.read = 0
        self.skipped = 0

    def __iter__(self) -> "RowStream":
        return self

    def __enter__(self) -> "RowStream":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """Close the source, if it can be closed, and drop the buffered row."""
        close = getattr(self._source, "close", None)
        if close is not None:
            close()
        self._pending = _EXHAUSTED
        self._primed = True

    def __next__(self) -> Row:
        if not self._primed:
            self._pending = self._fetch()
            self._primed = True

        current = self._pending
        if current is _EXHAUSTED:
            raise StopIteration

        # Buffer the next row before handing out the current one
        self._pending = self._fetch()
        return current

    def _fetch(self) -> Any:
        """Decode the next raw row, skipping undecodable ones."""
        for raw in self._source:
            self.read += 1
            try:
                return decode_row(raw)
            except RowDecodeError as e:
                self.skipped += 1
                logger.warning("Skipping row %d: %s", self.read, e)
        return _EXHAUSTED
