"""
Line-oriented field extraction for the portal's HTML pages and XML callback fragments.

The portal renders its UI with a server-side framework whose output was never meant
to be read by a machine, so nothing here builds a DOM. Markup is split into lines,
lines are tagged with the marker that selected them, and values are cut out of a
line by position:

- HTML-attribute mode: ``ID="VALUE"`` inside a whitespace-delimited token.
- XML-tag mode: the text between the first ``>`` and the next ``<``.

Callers filter to lines that carry the expected marker before extracting.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, TypeVar

from clock_errors import MarkupError

T = TypeVar("T")

# len('ID="')
_ATTR_VALUE_OFFSET = 4


@dataclass(frozen=True)
class MarkedLine:
    marker: str
    text: str


def tagged_lines(markup: str, *markers: str) -> Iterator[MarkedLine]:
    """Yield each line containing one of ``markers``, tagged with the first marker it matched."""
    for line in markup.splitlines():
        for marker in markers:
            if marker in line:
                yield MarkedLine(marker, line)
                break


def attribute_value(line: str, attribute: str = "ID=") -> Optional[str]:
    """Value of the first whitespace token containing ``attribute``, or None if there is none.

    The value starts a fixed 4 characters into the token (past ``ID="``) and runs up
    to the closing quote.
    """
    token = next((t for t in line.split() if attribute in t), None)
    if token is None:
        return None
    return token[_ATTR_VALUE_OFFSET:].split('"', 1)[0]


def element_text(line: str) -> str:
    start = line.find(">")
    if start < 0:
        return ""
    return line[start + 1:].split("<", 1)[0]


def pairwise(items: Iterable[T]) -> List[Tuple[T, T]]:
    seq: Sequence[T] = list(items)
    if len(seq) % 2:
        raise MarkupError(f"Expected paired lines, got an odd count ({len(seq)})")
    return [(seq[i], seq[i + 1]) for i in range(0, len(seq), 2)]


def field_pairs(lines: Iterable[MarkedLine], value_marker: str) -> List[Tuple[MarkedLine, MarkedLine]]:
    """Pair each label line with the ``value_marker`` line that follows it.

    Every pair must be (label, value): a value line in the first slot or a label line
    in the second means the response is not laid out the way we read it.
    """
    pairs = pairwise(lines)
    for label, value in pairs:
        if label.marker == value_marker or value.marker != value_marker:
            raise MarkupError(
                f"Expected a label line then a {value_marker!r} line, got {label.text.strip()!r} then {value.text.strip()!r}"
            )
    return pairs
