"""
VCF Variant Records

VCF Format (tab-separated):
    Col 1:  CHROM   Chromosome
    Col 2:  POS     1-based position
    Col 3:  ID      Variant identifier ("." if none)
    Col 4:  REF     Reference allele
    Col 5:  ALT     Comma-separated alternate alleles
    Col 6:  QUAL    Phred-scaled quality ("." if missing)
    Col 7:  FILTER  PASS or semicolon-separated filter names
    Col 8:  INFO    Semicolon-separated key=value pairs
    Col 9:  FORMAT  Colon-separated sample field keys (optional)
    Col 10+: One column per sample

Header lines start with "#". INFO, FORMAT and sample columns are kept as
opaque strings.
"""

from dataclasses import dataclass
from functools import total_ordering
from typing import ClassVar, List, Optional, Tuple

from .errors import DomainError
from .headers import Header
from .intervals import Interval
from .records import FLOAT, STRING, TAIL, UINT32, HeaderableRecord, column


class VcfHeader(Header):
    START_SYMBOLS = ("#",)


@total_ordering
@dataclass(eq=False)
class VcfRecord(HeaderableRecord):
    """
    One VCF data line.

    Records order and compare by ``(chrom, pos)`` only. This is a genomic
    position ordering: two records at the same position with different ALT
    or INFO compare equal. Compare ``to_line()`` output for full equality.

    Examples:
        >>> r = VcfRecord.from_line("20\\t14370\\trs6054257\\tG\\tA\\t29\\tPASS\\tNS=3")
        >>> r.chrom, r.pos, r.qual, r.samples
        ('20', 14370, 29.0, [])
        >>> str(r.to_interval())
        '+20:14369-14370'
    """

    header_type: ClassVar[type] = VcfHeader

    chrom: str = column(STRING, default="")
    pos: int = column(UINT32, default=0)
    id: str = column(STRING, default=".")
    ref: str = column(STRING, default="")
    alt: str = column(STRING, default=".")
    qual: Optional[float] = column(FLOAT, default=None)
    filter: str = column(STRING, default=".")
    info: str = column(STRING, default=".")
    format: str = column(STRING, default="", required=False)
    samples: List[str] = column(TAIL)

    def alts(self) -> List[str]:
        """ALT split into individual alleles ("." gives an empty list)."""
        if self.alt in ("", "."):
            return []
        return self.alt.split(",")

    def is_snv(self) -> bool:
        alts = self.alts()
        return len(self.ref) == 1 and bool(alts) and all(len(a) == 1 for a in alts)

    def has_interval(self) -> bool:
        """False for POS 0 (telomere placeholder records)."""
        return self.pos > 0

    def to_interval(self) -> Interval:
        """
        Single-base interval anchored at POS.

        The span ignores REF/ALT lengths; deletions are not widened.

        Raises:
            DomainError: If POS is 0
        """
        if not self.has_interval():
            raise DomainError(f"VCF record at {self.chrom}:0 has no reference base")
        return Interval(self.chrom, self.pos - 1, self.pos, "+")

    def position_key(self) -> Tuple[str, int]:
        return (self.chrom, self.pos)

    def __eq__(self, other) -> bool:
        if not isinstance(other, VcfRecord):
            return NotImplemented
        return self.position_key() == other.position_key()

    def __lt__(self, other) -> bool:
        if not isinstance(other, VcfRecord):
            return NotImplemented
        return self.position_key() < other.position_key()
