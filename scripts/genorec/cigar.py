"""
CIGAR Utilities

A CIGAR string run-length encodes how a read aligns to the reference:

    Op  Meaning                    Consumes read  Consumes reference
    M   alignment match            yes            yes
    I   insertion to reference     yes            no
    D   deletion from reference    no             yes
    N   skipped reference region   no             yes
    S   soft clip                  yes            no
    H   hard clip                  no             no
    P   padding                    no             no
    =   sequence match             yes            yes
    X   sequence mismatch          yes            yes

Elements are kept in the order they were parsed or appended. Adjacent
elements with the same operation are only merged by an explicit
``compact()``, so ``str(Cigar(s)) == s`` holds for any well-formed ``s``.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Tuple, Union

from .errors import ParseError

CIGAR_OPS = "MIDNSHP=X"
REF_CONSUMING_OPS = frozenset("MDN=X")
READ_CONSUMING_OPS = frozenset("MIS=X")
CLIP_OPS = frozenset("SH")

_TOKEN_RE = re.compile(r"(\d+)([MIDNSHP=X])")


@dataclass(frozen=True)
class CigarElement:
    """A run of ``size`` residues sharing one operation."""
    size: int
    op: str

    def __str__(self) -> str:
        return f"{self.size}{self.op}"


def _to_elements(cigar_string: str) -> List[CigarElement]:
    elements = []
    pos = 0
    while pos < len(cigar_string):
        match = _TOKEN_RE.match(cigar_string, pos)
        if match is None:
            raise ParseError(
                f"Malformed CIGAR {cigar_string!r} at offset {pos}: "
                "expected <length><op> with op in " + CIGAR_OPS
            )
        elements.append(CigarElement(int(match.group(1)), match.group(2)))
        pos = match.end()
    return elements


class Cigar:
    """
    Ordered, mutable list of CIGAR elements.

    Examples:
        >>> cigar = Cigar("1M1M2D2D3I3I")
        >>> cigar.compact()
        >>> str(cigar)
        '2M4D6I'
        >>> Cigar("1M2D3N4=5X6H").ref_size()
        15
    """

    __slots__ = ("elements",)

    def __init__(self, cigar_string: str = ""):
        self.elements: List[CigarElement] = _to_elements(cigar_string)

    @classmethod
    def parse(cls, cigar_string: str) -> "Cigar":
        return cls(cigar_string)

    @classmethod
    def from_elements(cls, elements: Iterable[Union[CigarElement, Tuple[int, str]]]) -> "Cigar":
        cigar = cls()
        for element in elements:
            if isinstance(element, CigarElement):
                cigar.append(element)
            else:
                cigar.push(*element)
        return cigar

    @classmethod
    def from_tuples(cls, cigartuples: Iterable[Tuple[int, int]]) -> "Cigar":
        """
        Build from BAM-style ``(op_code, length)`` pairs, as exposed by
        pysam's ``AlignedSegment.cigartuples``.
        """
        cigar = cls()
        for op_code, length in cigartuples:
            if not 0 <= op_code < len(CIGAR_OPS):
                raise ParseError(f"Unknown CIGAR op code: {op_code}")
            cigar.push(length, CIGAR_OPS[op_code])
        return cigar

    def to_tuples(self) -> List[Tuple[int, int]]:
        return [(CIGAR_OPS.index(e.op), e.size) for e in self.elements]

    # ------------------------------------------------------------------
    # Derived lengths
    # ------------------------------------------------------------------

    def _sum_sizes(self, ops: frozenset) -> int:
        return sum(e.size for e in self.elements if e.op in ops)

    def ref_size(self) -> int:
        """Reference bases covered (M, D, N, =, X)."""
        return self._sum_sizes(REF_CONSUMING_OPS)

    def read_size(self) -> int:
        """Read bases consumed (M, I, S, =, X)."""
        return self._sum_sizes(READ_CONSUMING_OPS)

    def clip_size(self) -> int:
        """Soft and hard clipped bases (S, H)."""
        return self._sum_sizes(CLIP_OPS)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def compact(self) -> None:
        """Merge every run of adjacent elements sharing an operation."""
        if len(self.elements) <= 1:
            return
        merged = [self.elements[0]]
        for element in self.elements[1:]:
            last = merged[-1]
            if element.op == last.op:
                merged[-1] = CigarElement(last.size + element.size, last.op)
            else:
                merged.append(element)
        self.elements = merged

    def append(self, element: CigarElement) -> None:
        self.elements.append(element)

    def push(self, size: int, op: str) -> None:
        if op not in CIGAR_OPS or len(op) != 1:
            raise ParseError(f"Unknown CIGAR operation: {op!r}")
        if size < 0:
            raise ParseError(f"CIGAR element size must be non-negative, got {size}")
        self.elements.append(CigarElement(size, op))

    def extend(self, other: "Cigar") -> None:
        self.elements.extend(other.elements)

    def swap(self, other: "Cigar") -> None:
        self.elements, other.elements = other.elements, self.elements

    def pop_front(self) -> CigarElement:
        return self.elements.pop(0)

    def pop_back(self) -> CigarElement:
        return self.elements.pop()

    def reverse(self) -> None:
        self.elements.reverse()

    def clear(self) -> None:
        self.elements.clear()

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def front(self) -> CigarElement:
        # IndexError on an empty cigar: check len() first
        return self.elements[0]

    def back(self) -> CigarElement:
        return self.elements[-1]

    def contains(self, ops: str) -> bool:
        """True if any of the operation characters in ``ops`` occurs."""
        return any(e.op in ops for e in self.elements)

    def __contains__(self, op: str) -> bool:
        return self.contains(op)

    def __len__(self) -> int:
        return len(self.elements)

    def __iter__(self) -> Iterator[CigarElement]:
        return iter(self.elements)

    def __getitem__(self, index: int) -> CigarElement:
        return self.elements[index]

    def __eq__(self, other) -> bool:
        if not isinstance(other, Cigar):
            return NotImplemented
        return self.elements == other.elements

    def copy(self) -> "Cigar":
        return Cigar.from_elements(self.elements)

    def __str__(self) -> str:
        return "".join(str(e) for e in self.elements)

    def __repr__(self) -> str:
        return f"Cigar({str(self)!r})"
