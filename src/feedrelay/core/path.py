"""
Path expressions over untyped JSON.

A path such as ``response[0].cardmarket.prices.averageSellPrice`` is first
parsed into typed segments (``FieldSegment`` / ``IndexSegment``) and then
walked against the decoded JSON document.  Parsing and walking report
failures as ``PathExtractionError`` with a ``kind`` so callers can tell a
missing field from a bad index or a malformed expression.

Grammar::

    path    := segment ( ( "." segment ) | index )*
    segment := field | index
    field   := any characters except ".", "[" and "]"
    index   := "[" digit+ "]"

The empty path addresses the document root.
"""
import re
from typing import Any, List, NamedTuple, Union

from src.feedrelay.exceptions import PathErrorKind, PathExtractionError

_INDEX_RE = re.compile(r"[0-9]+")


class FieldSegment(NamedTuple):
    """Selects a member of a JSON object by exact key."""

    name: str


class IndexSegment(NamedTuple):
    """Selects an element of a JSON array by position."""

    index: int


Segment = Union[FieldSegment, IndexSegment]


def _malformed(message: str) -> PathExtractionError:
    return PathExtractionError(PathErrorKind.MALFORMED_PATH, message)


def parse_path(path: str) -> List[Segment]:
    """Tokenize *path* into field and index segments.

    Raises:
        PathExtractionError: ``MALFORMED_PATH`` for unbalanced brackets,
            empty field names or stray characters; ``INVALID_INDEX`` when
            the bracketed text is not a non-negative integer.
    """
    segments: List[Segment] = []
    pos = 0
    length = len(path)

    while pos < length:
        if path[pos] == "[":
            close = path.find("]", pos)
            if close == -1:
                raise _malformed("Missing closing bracket in field path")

            raw_index = path[pos + 1:close]
            if not _INDEX_RE.fullmatch(raw_index):
                raise PathExtractionError(
                    PathErrorKind.INVALID_INDEX,
                    f"Invalid array index: '{raw_index}'",
                )
            segments.append(IndexSegment(int(raw_index)))
            pos = close + 1

            # An index is followed by end of path, another index or a dot.
            if pos < length and path[pos] not in ".[":
                raise _malformed(
                    f"Unexpected character '{path[pos]}' after array index"
                )
        else:
            end = pos
            while end < length and path[end] not in ".[]":
                end += 1

            if end < length and path[end] == "]":
                raise _malformed("Unexpected ']' in field path")

            name = path[pos:end]
            if not name:
                raise _malformed("Empty field name in field path")
            segments.append(FieldSegment(name))
            pos = end

        if pos < length and path[pos] == ".":
            pos += 1
            if pos == length:
                raise _malformed("Field path ends with '.'")

    return segments


def extract(root: Any, path: str) -> Any:
    """Return the value addressed by *path* inside the JSON document *root*.

    Args:
        root: A decoded JSON value (``dict``, ``list``, ``str``, number,
              ``bool`` or ``None``).
        path: Path expression, e.g. ``"data[0].items[1].price"``.

    Raises:
        PathExtractionError: With ``path`` set to the full expression and
            ``kind`` identifying the failing step.
    """
    try:
        segments = parse_path(path)
    except PathExtractionError as e:
        e.path = path
        raise

    current = root
    for segment in segments:
        if isinstance(segment, FieldSegment):
            if not isinstance(current, dict) or segment.name not in current:
                raise PathExtractionError(
                    PathErrorKind.MISSING_FIELD,
                    f"Field '{segment.name}' not found",
                    path=path,
                )
            current = current[segment.name]
        else:
            if not isinstance(current, list) or segment.index >= len(current):
                raise PathExtractionError(
                    PathErrorKind.INDEX_OUT_OF_RANGE,
                    f"Array index {segment.index} not found or out of bounds",
                    path=path,
                )
            current = current[segment.index]

    return current
