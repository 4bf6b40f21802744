"""Line-level parsers for varnishlog output: content lines, boundaries, references."""

import re

from varnishlog.errors import MalformedBoundary, MalformedLine, MalformedReference
from varnishlog.models import Line, Reference

# "-   ReqURL         /200" (nested groups use "--", "---", ...)
LINE_PATTERN = re.compile(r"^-+\s+(\w+)\s*(.*)$", re.ASCII)

VXID_PATTERN = re.compile(r"[0-9]+")
MAX_VXID = 2**64 - 1

BOUNDARY_MARKER = "*"
BEGIN_TAG = "Begin"
END_TAG = "End"


def _parse_vxid(text: str) -> int | None:
    """Parse an unsigned 64-bit decimal. Returns None if not one."""
    if not VXID_PATTERN.fullmatch(text):
        return None
    vxid = int(text)
    if vxid > MAX_VXID:
        return None
    return vxid


def parse_line(text: str) -> Line:
    """Parse a content line into a tag/value pair.

    Raises MalformedLine if the text does not match LINE_PATTERN.
    """
    match = LINE_PATTERN.fullmatch(text)
    if not match:
        raise MalformedLine(text)
    tag, value = match.groups()
    return Line(tag=tag, value=value)


def parse_reference(value: str) -> Reference:
    """Parse a Begin/Link value such as ``bereq 32770 fetch``.

    The value is split on single spaces and must have exactly three parts.
    """
    parts = value.split(" ")
    if len(parts) != 3:
        raise MalformedReference(value, f"expected 3 parts, got {len(parts)}")

    vxid = _parse_vxid(parts[1])
    if vxid is None:
        raise MalformedReference(value, f"invalid VXID {parts[1]!r}")

    return Reference(type=parts[0], vxid=vxid, reason=parts[2])


def is_boundary(text: str) -> bool:
    return text.startswith(BOUNDARY_MARKER)


def parse_boundary(text: str) -> int:
    """Return the VXID of a ``*   << Request  >> 32770`` marker line."""
    fields = text.split()
    vxid = _parse_vxid(fields[-1]) if fields else None
    if vxid is None:
        raise MalformedBoundary(text)
    return vxid
