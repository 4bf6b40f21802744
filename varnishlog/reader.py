"""Transaction reader: assembles one transaction per call from a shared line stream.

The reader pulls from an iterator that is shared across calls (usually a
LineChannel fed by a producer thread), so each call resumes where the last
one stopped. Pass the same iterator every time, not a list.
"""

import logging
from typing import Generator, Iterable, Iterator

from varnishlog.errors import EndOfStream
from varnishlog.models import Transaction
from varnishlog.parser import (
    BEGIN_TAG,
    END_TAG,
    is_boundary,
    parse_boundary,
    parse_line,
    parse_reference,
)

logger = logging.getLogger(__name__)


def read_transaction(lines: Iterator[str]) -> Transaction:
    """Read lines until an End tag completes a transaction.

    Raises EndOfStream when the source is exhausted first, and any
    MalformedInput subclass raised while parsing.
    """
    tx = Transaction()
    started = False
    has_begin = False

    for raw in lines:
        line = raw.strip()

        if not line:
            continue

        if is_boundary(line):
            vxid = parse_boundary(line)
            if started:
                logger.warning(
                    "Transaction %d has no End tag, discarding %d line(s) at start of %d",
                    tx.vxid, len(tx.lines), vxid,
                )
            tx = Transaction(vxid=vxid)
            started = True
            has_begin = False
            continue

        entry = parse_line(line)
        tx.lines.append(entry)
        started = True

        if entry.tag == BEGIN_TAG:
            ref = parse_reference(entry.value)
            if has_begin:
                logger.debug("Transaction %d: ignoring repeated Begin %r", tx.vxid, entry.value)
            else:
                tx.begin = ref
                has_begin = True
        elif entry.tag == END_TAG:
            return tx

    if started:
        logger.warning(
            "Stream ended inside transaction %d, discarding %d line(s)",
            tx.vxid, len(tx.lines),
        )
    raise EndOfStream("line source closed")


def iter_transactions(lines: Iterable[str]) -> Generator[Transaction, None, None]:
    """Yield transactions until the source is exhausted."""
    lines = iter(lines)
    while True:
        try:
            tx = read_transaction(lines)
        except EndOfStream:
            return
        yield tx
