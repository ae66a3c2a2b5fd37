"""
Header blocks for line-oriented formats.

A header is the run of lines at the top of a SAM/VCF file whose first
characters mark them as metadata ("@" for SAM, "#" for VCF). Lines are kept
verbatim and in order, so writing a header back out reproduces the block
exactly.
"""

import logging
from typing import ClassVar, Iterable, Iterator, List, Optional, TextIO, Tuple

logger = logging.getLogger(__name__)


def split_lines(text: str) -> List[str]:
    r"""
    Split text into lines on "\n" only, the way iterating a file does.

    ``str.splitlines`` also breaks on characters such as "\x85" and "\x0c"
    that may legitimately appear inside a field.

    Examples:
        >>> split_lines("a\x85b\nc\n")
        ['a\x85b', 'c']
    """
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


class Header:
    """
    Ordered collection of raw header lines.

    ``START_SYMBOLS`` lists the prefixes that identify a header line. The base
    class has none and accepts every line; format headers override it.

    Examples:
        >>> class FooHeader(Header):
        ...     START_SYMBOLS = ("ggg", "%")
        >>> header = FooHeader()
        >>> header.consume(["gggheader1", "%header2", "content"])
        'content'
        >>> header.lines
        ['gggheader1', '%header2']
    """

    START_SYMBOLS: ClassVar[Tuple[str, ...]] = ()

    def __init__(self, lines: Optional[Iterable[str]] = None):
        self.lines: List[str] = []
        for line in lines or ():
            self.append(line)

    @classmethod
    def is_header_line(cls, line: str) -> bool:
        if not cls.START_SYMBOLS:
            return True
        return line.startswith(cls.START_SYMBOLS)

    def append(self, line: str) -> None:
        """Store one line verbatim (the line terminator is dropped)."""
        self.lines.append(line.rstrip("\r\n"))

    def consume(self, lines: Iterable[str]) -> Optional[str]:
        """
        Append leading header lines from ``lines``.

        Returns:
            The first line that is not a header line, or None if ``lines``
            ran out first. Lines after it are left unread.
        """
        for line in lines:
            if not self.is_header_line(line):
                return line
            self.append(line)
        return None

    @classmethod
    def from_text(cls, text: str) -> "Header":
        header = cls()
        rest = header.consume(split_lines(text))
        if rest is not None:
            logger.debug("%s stopped at first non-header line", cls.__name__)
        return header

    def to_text(self) -> str:
        return "\n".join(self.lines)

    def write(self, handle: TextIO) -> None:
        for line in self.lines:
            handle.write(line + "\n")

    def __str__(self) -> str:
        return self.to_text()

    def __len__(self) -> int:
        return len(self.lines)

    def __iter__(self) -> Iterator[str]:
        return iter(self.lines)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Header):
            return NotImplemented
        return type(self) is type(other) and self.lines == other.lines

    def __repr__(self) -> str:
        return f"{type(self).__name__}({len(self.lines)} lines)"
