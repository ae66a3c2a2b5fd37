"""
Genomic Interval Utilities

An Interval is a half-open range ``[begin, end)`` on one strand of one
chromosome. Record types (SAM alignments, VCF variants) project themselves
onto an Interval so that overlap and containment questions can be asked the
same way regardless of where the coordinates came from.

Text form:
    [+|-]chrom[:begin[-end]|:pos[+]]

    "chr1"              whole chromosome, [0, MAX_POSITION)
    "chr1:100"          single base, [100, 101)
    "chr1:100+"         from 100 to the end of the chromosome
    "-chr1:1,000-2,000" reverse strand, digit-group commas are ignored

``str(interval)`` always emits the long form ``+chr1:100-200``.
"""

import re
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Tuple

from .errors import DomainError, ParseError

# Largest coordinate an interval may carry (unsigned 32-bit).
MAX_POSITION: int = 2 ** 32 - 1

CHROM_SEPARATOR = ":"
BEGIN_END_SEPARATOR = "-"
END_OF_CHROM = "+"
DIGIT_SEPARATOR = ","
STRANDS = ("+", "-")

EXPAND_POLICIES = ("saturate", "error")

_RANGE_RE = re.compile(r"^(\d+)(?:-(\d+)|(\+))?$")


@dataclass(frozen=True, order=True)
class Interval:
    """
    Half-open genomic interval.

    Instances order by ``(chrom, begin, end, strand)``.

    Examples:
        >>> Interval("chr1", 100, 200)
        Interval(chrom='chr1', begin=100, end=200, strand='+')
        >>> str(Interval.parse("-chr1:1,000-2,000"))
        '-chr1:1000-2000'
    """
    chrom: str
    begin: int
    end: int
    strand: str = "+"

    def __post_init__(self):
        if self.strand not in STRANDS:
            raise DomainError(f"Invalid strand symbol: {self.strand!r}")
        if self.begin < 0 or self.end > MAX_POSITION:
            raise DomainError(
                f"Coordinates out of range [0, {MAX_POSITION}]: {self.begin}-{self.end}"
            )
        if self.end < self.begin:
            raise DomainError(
                f"Interval end ({self.end}) must not be less than begin ({self.begin})"
            )

    @classmethod
    def parse(cls, text: str) -> "Interval":
        """
        Parse the textual interval form.

        Args:
            text: Interval string, e.g. ``"+chr1:100-200"``

        Returns:
            Parsed Interval

        Raises:
            ParseError: If the range part is malformed or end < begin
        """
        if not text:
            raise ParseError("Empty interval string")

        strand = "+"
        body = text
        if body[0] in STRANDS:
            strand = body[0]
            body = body[1:]

        if CHROM_SEPARATOR not in body:
            return cls(body, 0, MAX_POSITION, strand)

        chrom, remain = body.split(CHROM_SEPARATOR, 1)
        remain = remain.replace(DIGIT_SEPARATOR, "")
        match = _RANGE_RE.match(remain)
        if match is None:
            raise ParseError(f"Invalid interval range: {text!r}")

        begin = int(match.group(1))
        if match.group(2) is not None:
            end = int(match.group(2))
        elif match.group(3) is not None:
            end = MAX_POSITION
        else:
            end = begin + 1

        if end < begin:
            raise ParseError(f"Invalid interval string (end < begin): {text!r}")
        if end > MAX_POSITION:
            raise ParseError(f"Interval coordinate exceeds {MAX_POSITION}: {text!r}")
        return cls(chrom, begin, end, strand)

    @property
    def size(self) -> int:
        """Number of bases covered."""
        return self.end - self.begin

    @property
    def empty(self) -> bool:
        return self.size == 0

    def _same_sequence(self, other: "Interval") -> bool:
        return self.chrom == other.chrom and self.strand == other.strand

    def overlaps(self, other: "Interval") -> bool:
        """True if both intervals share chrom, strand and at least one base."""
        return (
            self._same_sequence(other)
            and self.begin < other.end
            and other.begin < self.end
        )

    def contains(self, other: "Interval") -> bool:
        """True if ``other`` lies entirely within this interval."""
        return (
            self._same_sequence(other)
            and self.begin <= other.begin
            and self.end >= other.end
        )

    def span_with(self, other: "Interval") -> "Interval":
        """
        Smallest interval covering both intervals.

        Raises:
            DomainError: If the intervals are on different chroms or strands
        """
        if self.chrom != other.chrom:
            raise DomainError(
                "Cannot get span for intervals on different chroms "
                f"({self.chrom} vs {other.chrom})"
            )
        if self.strand != other.strand:
            raise DomainError(
                "Cannot get span for intervals on different strands "
                f"({self.strand} vs {other.strand})"
            )
        return Interval(
            self.chrom,
            min(self.begin, other.begin),
            max(self.end, other.end),
            self.strand,
        )

    def expand_with(self, padding: int, policy: str = "saturate") -> "Interval":
        """
        Widen both ends by ``padding`` bases.

        Args:
            padding: Bases to add on each side (non-negative)
            policy: ``"saturate"`` clamps at 0 and MAX_POSITION,
                ``"error"`` raises instead

        Raises:
            DomainError: On negative padding, unknown policy, or when the
                ``"error"`` policy would leave the coordinate range

        Examples:
            >>> Interval("chr1", 5, 10).expand_with(10)
            Interval(chrom='chr1', begin=0, end=20, strand='+')
        """
        if padding < 0:
            raise DomainError(f"Padding must be non-negative, got {padding}")
        if policy not in EXPAND_POLICIES:
            raise DomainError(f"Unknown expand policy: {policy!r}")

        begin = self.begin - padding
        end = self.end + padding
        if policy == "error" and (begin < 0 or end > MAX_POSITION):
            raise DomainError(
                f"Padding {padding} moves {self} outside [0, {MAX_POSITION}]"
            )
        return replace(self, begin=max(begin, 0), end=min(end, MAX_POSITION))

    def to_string(self) -> str:
        return (
            f"{self.strand}{self.chrom}{CHROM_SEPARATOR}"
            f"{self.begin}{BEGIN_END_SEPARATOR}{self.end}"
        )

    def __str__(self) -> str:
        return self.to_string()


def merge_intervals(
    intervals: Iterable[Interval],
    merge_distance: int = 0
) -> List[Interval]:
    """
    Merge overlapping or nearby intervals on the same chrom and strand.

    Args:
        intervals: Intervals in any order
        merge_distance: Merge intervals separated by at most this many bases

    Returns:
        Sorted list of merged intervals

    Examples:
        >>> merged = merge_intervals([Interval("c", 0, 100), Interval("c", 90, 200)])
        >>> [str(iv) for iv in merged]
        ['+c:0-200']
    """
    by_sequence: Dict[Tuple[str, str], List[Interval]] = {}
    for iv in intervals:
        by_sequence.setdefault((iv.chrom, iv.strand), []).append(iv)

    merged: List[Interval] = []
    for key in sorted(by_sequence):
        ivs = sorted(by_sequence[key])
        current = ivs[0]
        for iv in ivs[1:]:
            if iv.begin <= current.end + merge_distance:
                current = replace(current, end=max(current.end, iv.end))
            else:
                merged.append(current)
                current = iv
        merged.append(current)

    return sorted(merged)
