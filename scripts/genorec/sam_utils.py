"""
SAM Alignment Records and Pair Geometry

SAM Format (tab-separated, 11 mandatory columns):
    Col 1:  QNAME  Query template name
    Col 2:  FLAG   Bitwise flag
    Col 3:  RNAME  Reference sequence name
    Col 4:  POS    1-based leftmost mapping position
    Col 5:  MAPQ   Mapping quality
    Col 6:  CIGAR  CIGAR string ("*" if unavailable)
    Col 7:  RNEXT  Reference name of the mate ("=" if same as RNAME)
    Col 8:  PNEXT  Position of the mate
    Col 9:  TLEN   Signed observed template length
    Col 10: SEQ    Segment sequence
    Col 11: QUAL   ASCII of Phred-scaled base quality + 33
    Col 12+: Optional TAG:TYPE:VALUE fields

Header lines start with "@".

Everything derived from a record (0-based span, orientation, interval
projection) is computed from the stored columns on each call.
"""

from dataclasses import dataclass
from enum import Enum, IntFlag
from functools import total_ordering
from typing import ClassVar, List, Tuple

import numpy as np

from .cigar import Cigar
from .errors import DomainError
from .headers import Header
from .intervals import Interval
from .quality_utils import ASCII_OFFSET, error_probs
from .records import (
    CIGAR,
    FLAG,
    INTEGER,
    STRING,
    TAIL,
    UINT32,
    HeaderableRecord,
    column,
    unsigned,
)

MAX_READ_LENGTH = 256

# Gap penalties expressed as quality characters, Phred 40 to open, 10 to extend
GAP_OPEN_PENALTY = chr(40 + ASCII_OFFSET) * MAX_READ_LENGTH
GAP_CONTINUATION_PENALTY = chr(10 + ASCII_OFFSET) * MAX_READ_LENGTH


class SamFlag(IntFlag):
    """Bitwise flags of a read alignment."""
    READ_PAIRED = 0x1
    PROPER_PAIR = 0x2
    READ_UNMAPPED = 0x4
    MATE_UNMAPPED = 0x8
    READ_REVERSE_STRAND = 0x10
    MATE_REVERSE_STRAND = 0x20
    FIRST_OF_PAIR = 0x40
    SECOND_OF_PAIR = 0x80
    SECONDARY_ALIGNMENT = 0x100
    READ_FAILS_QUALITY_CHECK = 0x200
    DUPLICATE_READ = 0x400
    SUPPLEMENTARY_ALIGNMENT = 0x800


class Orientation(Enum):
    """Relative strand orientation of a read and its mate."""
    FR = "FR"
    FF = "FF"
    RR = "RR"
    RF = "RF"


def compute_ori(read_forward: bool, mate_forward: bool) -> Orientation:
    """
    Classify the pair orientation.

    Examples:
        >>> compute_ori(True, False)
        <Orientation.FR: 'FR'>
        >>> compute_ori(False, False)
        <Orientation.RR: 'RR'>
    """
    if read_forward != mate_forward:
        return Orientation.FR if read_forward else Orientation.RF
    return Orientation.FF if read_forward else Orientation.RR


def _away_from_zero(tlen: int) -> int:
    if tlen == 0:
        return 0
    return tlen + (1 if tlen > 0 else -1)


def compute_tlen(
    read_pos: int,
    read_cigar: Cigar,
    read_forward: bool,
    mate_pos: int,
    mate_cigar: Cigar,
    mate_forward: bool
) -> int:
    """
    Signed template length of a read pair.

    The leftmost read is always treated as "self"; if the read lies to the
    right of its mate the arguments are swapped and the result negated.
    For FF, RR and RF pairs a non-zero length is pushed one further away
    from zero, so abutting same-strand reads still get a non-zero length.

    Args:
        read_pos: 1-based position of the read
        read_cigar: CIGAR of the read
        read_forward: Read maps to the forward strand
        mate_pos: 1-based position of the mate
        mate_cigar: CIGAR of the mate
        mate_forward: Mate maps to the forward strand

    Returns:
        Template length, positive when the read is leftmost

    Examples:
        >>> compute_tlen(100, Cigar("50M"), True, 300, Cigar("50M"), False)
        250
        >>> compute_tlen(300, Cigar("50M"), False, 100, Cigar("50M"), True)
        -250
    """
    if read_pos > mate_pos:
        return -compute_tlen(
            mate_pos, mate_cigar, mate_forward,
            read_pos, read_cigar, read_forward,
        )

    ori = compute_ori(read_forward, mate_forward)
    if ori is Orientation.FR:
        return mate_pos + mate_cigar.ref_size() - read_pos
    if ori is Orientation.FF:
        return _away_from_zero(
            mate_pos + mate_cigar.read_size() - (read_pos + read_cigar.read_size())
        )
    if ori is Orientation.RR:
        return _away_from_zero(
            mate_pos + mate_cigar.ref_size() - (read_pos + read_cigar.ref_size())
        )
    return _away_from_zero(mate_pos - (read_pos + read_cigar.ref_size()) + 1)


class SamHeader(Header):
    START_SYMBOLS = ("@",)


@total_ordering
@dataclass(eq=False)
class SamRecord(HeaderableRecord):
    """
    One SAM alignment line.

    Records compare by genomic position only, ``(rname, pos)``: two
    alignments of different reads at the same position are equal under
    ``==``. Compare ``to_line()`` output for full equality.

    Examples:
        >>> flag = SamFlag.READ_PAIRED | SamFlag.PROPER_PAIR
        >>> r = SamRecord(qname="r1", flag=flag, rname="ref", pos=2, cigar=Cigar("3M1D2M"))
        >>> r.proper_pair(), r.begin(), r.end()
        (True, 1, 7)
    """

    header_type: ClassVar[type] = SamHeader

    qname: str = column(STRING, default="")
    flag: int = column(FLAG, default=0)
    rname: str = column(STRING, default="")
    pos: int = column(UINT32, default=0)
    mapq: int = column(unsigned(255), default=0)
    cigar: Cigar = column(CIGAR, default_factory=Cigar)
    rnext: str = column(STRING, default="*")
    pnext: int = column(UINT32, default=0)
    tlen: int = column(INTEGER, default=0)
    seq: str = column(STRING, default="*")
    qual: str = column(STRING, default="*")
    optionals: List[str] = column(TAIL)

    # ------------------------------------------------------------------
    # Flag predicates
    # ------------------------------------------------------------------

    def _has(self, bit: SamFlag) -> bool:
        return bool(self.flag & bit)

    def read_paired(self) -> bool:
        return self._has(SamFlag.READ_PAIRED)

    def proper_pair(self) -> bool:
        return self._has(SamFlag.PROPER_PAIR)

    def read_unmapped(self) -> bool:
        return self._has(SamFlag.READ_UNMAPPED)

    def mate_unmapped(self) -> bool:
        return self._has(SamFlag.MATE_UNMAPPED)

    def read_reverse_strand(self) -> bool:
        return self._has(SamFlag.READ_REVERSE_STRAND)

    def mate_reverse_strand(self) -> bool:
        return self._has(SamFlag.MATE_REVERSE_STRAND)

    def first_of_pair(self) -> bool:
        return self._has(SamFlag.FIRST_OF_PAIR)

    def second_of_pair(self) -> bool:
        return self._has(SamFlag.SECOND_OF_PAIR)

    def secondary_alignment(self) -> bool:
        return self._has(SamFlag.SECONDARY_ALIGNMENT)

    def read_fails_quality_check(self) -> bool:
        return self._has(SamFlag.READ_FAILS_QUALITY_CHECK)

    def duplicate_read(self) -> bool:
        return self._has(SamFlag.DUPLICATE_READ)

    def supplementary_alignment(self) -> bool:
        return self._has(SamFlag.SUPPLEMENTARY_ALIGNMENT)

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    def size(self) -> int:
        """Number of stored bases (0 when SEQ is "*")."""
        return 0 if self.seq == "*" else len(self.seq)

    def empty(self) -> bool:
        return self.size() == 0

    def begin(self) -> int:
        """0-based position of the first aligned base."""
        return self.pos - 1

    def end(self) -> int:
        """0-based exclusive end of the aligned reference span."""
        return self.begin() + self.cigar.ref_size()

    def mate_begin(self) -> int:
        return self.tlen - 1

    def orientation(self) -> Orientation:
        return compute_ori(not self.read_reverse_strand(), not self.mate_reverse_strand())

    def tlen_well_defined(self) -> bool:
        """True if TLEN is meaningful for this (paired, mapped, FR/RF) read."""
        if self.tlen == 0:
            return False
        if not self.read_paired():
            return False
        if self.read_unmapped() or self.mate_unmapped():
            return False
        if self.read_reverse_strand() == self.mate_reverse_strand():
            return False
        if self.read_reverse_strand():
            return self.end() > self.mate_begin() + 1
        return self.begin() <= self.mate_begin() + self.tlen

    def template_length_with(self, mate: "SamRecord") -> int:
        """Template length of this read paired with ``mate``."""
        return compute_tlen(
            self.pos, self.cigar, not self.read_reverse_strand(),
            mate.pos, mate.cigar, not mate.read_reverse_strand(),
        )

    def has_interval(self) -> bool:
        """True if the read is mapped to a reference position."""
        return not self.read_unmapped() and self.pos > 0

    def to_interval(self) -> Interval:
        """
        Reference span of the alignment on the read's strand.

        Raises:
            DomainError: If the read is unmapped or has POS 0; check
                ``has_interval()`` first
        """
        if not self.has_interval():
            raise DomainError(
                f"Unmapped read {self.qname!r} (flag {int(self.flag)}, pos {self.pos}) "
                "has no reference span"
            )
        strand = "-" if self.read_reverse_strand() else "+"
        return Interval(self.rname, self.begin(), self.end(), strand)

    # ------------------------------------------------------------------
    # Qualities
    # ------------------------------------------------------------------

    # Penalty strings are capped at MAX_READ_LENGTH characters; reads longer
    # than that get a string shorter than size().

    def insertion_gop(self) -> str:
        return GAP_OPEN_PENALTY[:self.size()]

    def deletion_gop(self) -> str:
        return GAP_OPEN_PENALTY[:self.size()]

    def overall_gcp(self) -> str:
        return GAP_CONTINUATION_PENALTY[:self.size()]

    def base_error_probs(self) -> np.ndarray:
        return error_probs(self.qual)

    # ------------------------------------------------------------------
    # Position ordering
    # ------------------------------------------------------------------

    def position_key(self) -> Tuple[str, int]:
        return (self.rname, self.pos)

    def __eq__(self, other) -> bool:
        if not isinstance(other, SamRecord):
            return NotImplemented
        return self.position_key() == other.position_key()

    def __lt__(self, other) -> bool:
        if not isinstance(other, SamRecord):
            return NotImplemented
        return self.position_key() < other.position_key()
