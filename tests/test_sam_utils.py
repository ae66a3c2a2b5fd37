"""
Tests for SAM records, flags and pair geometry.
"""

import numpy as np
import pytest

from genorec.cigar import Cigar
from genorec.errors import DomainError, FormatError, ParseError
from genorec.intervals import Interval
from genorec.sam_utils import (
    GAP_CONTINUATION_PENALTY,
    GAP_OPEN_PENALTY,
    MAX_READ_LENGTH,
    Orientation,
    SamFlag,
    SamRecord,
    compute_ori,
    compute_tlen,
)


UNMAPPED = "u1\t4\t*\t0\t0\t*\t*\t0\t0\tACGT\tIIII"


def make_record(**kwargs) -> SamRecord:
    values = dict(qname="q", flag=0, rname="ref", pos=1, cigar=Cigar("10M"))
    values.update(kwargs)
    return SamRecord(**values)


# ============================================================================
# Tests: Parsing and Formatting
# ============================================================================

class TestSamRecordParse:
    """Tests for reading SAM alignment lines."""

    def test_fields(self, sam_lines):
        """Parse every mandatory column."""
        record = SamRecord.from_line(sam_lines[0])
        assert record.qname == "r001"
        assert record.flag == 99
        assert record.rname == "ref"
        assert record.pos == 7
        assert record.mapq == 30
        assert str(record.cigar) == "8M2I4M1D3M"
        assert record.rnext == "="
        assert record.pnext == 37
        assert record.tlen == 39
        assert record.seq == "TTAGATAAAGGATACTG"
        assert record.qual == "*"
        assert record.optionals == []

    def test_optional_tags(self, sam_lines):
        """Optional tags go to the tail."""
        record = SamRecord.from_line(sam_lines[-1])
        assert record.tlen == -39
        assert record.optionals == ["NM:i:1"]

    def test_round_trip(self, sam_lines):
        """Every example line formats back unchanged."""
        for line in sam_lines:
            assert SamRecord.from_line(line).to_line() == line

    def test_star_cigar(self):
        """'*' CIGAR parses to an empty CIGAR and back."""
        line = "u1\t4\t*\t0\t0\t*\t*\t0\t0\tACGT\tIIII"
        record = SamRecord.from_line(line)
        assert len(record.cigar) == 0
        assert record.to_line() == line

    def test_flag_out_of_range(self, sam_lines):
        """Flag above 16 bits raises ParseError."""
        line = sam_lines[0].replace("\t99\t", "\t70000\t")
        with pytest.raises(ParseError, match="flag"):
            SamRecord.from_line(line)

    def test_mapq_out_of_range(self, sam_lines):
        """MAPQ above 255 raises ParseError."""
        line = sam_lines[0].replace("\t30\t", "\t300\t")
        with pytest.raises(ParseError, match="mapq"):
            SamRecord.from_line(line)

    def test_bad_cigar(self, sam_lines):
        """Bad CIGAR raises ParseError naming the column."""
        line = sam_lines[0].replace("8M2I4M1D3M", "8M2Q")
        with pytest.raises(ParseError, match="cigar"):
            SamRecord.from_line(line)

    def test_negative_pos(self, sam_lines):
        """Negative POS raises ParseError."""
        line = sam_lines[1].replace("\t9\t", "\t-9\t")
        with pytest.raises(ParseError):
            SamRecord.from_line(line)

    def test_too_few_columns(self, sam_lines):
        """Ten columns raise FormatError."""
        line = "\t".join(sam_lines[1].split("\t")[:10])
        with pytest.raises(FormatError):
            SamRecord.from_line(line)

    def test_defaults(self):
        """Default record formats with SAM placeholders."""
        record = SamRecord()
        assert record.to_line() == "\t0\t\t0\t0\t*\t*\t0\t0\t*\t*"


# ============================================================================
# Tests: Flags
# ============================================================================

class TestFlags:
    """Tests for flag predicates."""

    def test_flag_99(self, sam_lines):
        """Flag 99 is a paired, proper, first-of-pair read."""
        record = SamRecord.from_line(sam_lines[0])
        assert record.read_paired()
        assert record.proper_pair()
        assert not record.read_unmapped()
        assert not record.mate_unmapped()
        assert not record.read_reverse_strand()
        assert record.mate_reverse_strand()
        assert record.first_of_pair()
        assert not record.second_of_pair()
        assert not record.secondary_alignment()
        assert not record.read_fails_quality_check()
        assert not record.duplicate_read()
        assert not record.supplementary_alignment()

    def test_flag_2064(self, sam_lines):
        """Flag 2064 is a reverse supplementary alignment."""
        record = SamRecord.from_line(sam_lines[4])
        assert record.flag == SamFlag.SUPPLEMENTARY_ALIGNMENT | SamFlag.READ_REVERSE_STRAND
        assert record.supplementary_alignment()
        assert record.read_reverse_strand()
        assert not record.read_paired()

    @pytest.mark.parametrize("bit, predicate", [
        (SamFlag.READ_UNMAPPED, "read_unmapped"),
        (SamFlag.MATE_UNMAPPED, "mate_unmapped"),
        (SamFlag.SECOND_OF_PAIR, "second_of_pair"),
        (SamFlag.SECONDARY_ALIGNMENT, "secondary_alignment"),
        (SamFlag.READ_FAILS_QUALITY_CHECK, "read_fails_quality_check"),
        (SamFlag.DUPLICATE_READ, "duplicate_read"),
    ])
    def test_single_bits(self, bit, predicate):
        """Each predicate tests its own bit."""
        assert getattr(make_record(flag=int(bit)), predicate)()
        assert not getattr(make_record(flag=0), predicate)()

    def test_flag_written_as_decimal(self):
        """IntFlag values are written as decimal."""
        flag = SamFlag.READ_PAIRED | SamFlag.FIRST_OF_PAIR
        assert make_record(flag=flag).to_line().split("\t")[1] == "65"


# ============================================================================
# Tests: Geometry
# ============================================================================

class TestGeometry:
    """Tests for begin/end/size and interval projection."""

    def test_begin_end(self, sam_lines):
        """0-based half-open span."""
        record = SamRecord.from_line(sam_lines[0])
        assert record.begin() == 6
        assert record.end() == 20

    def test_spliced_end(self, sam_lines):
        """N counts toward the reference span."""
        record = SamRecord.from_line(sam_lines[3])
        assert record.begin() == 15
        assert record.end() == 15 + 25

    def test_size(self, sam_lines):
        """Size is the SEQ length."""
        record = SamRecord.from_line(sam_lines[0])
        assert record.size() == 17
        assert not record.empty()
        assert make_record(seq="*").size() == 0
        assert make_record(seq="*").empty()

    def test_mate_begin(self, sam_lines):
        """mate_begin is tlen - 1."""
        assert SamRecord.from_line(sam_lines[0]).mate_begin() == 38

    def test_to_interval_forward(self, sam_lines):
        """Forward read projects onto '+'."""
        assert SamRecord.from_line(sam_lines[0]).to_interval() == Interval("ref", 6, 20, "+")

    def test_to_interval_reverse(self, sam_lines):
        """Reverse read projects onto '-'."""
        record = SamRecord.from_line(sam_lines[4])
        assert record.to_interval() == Interval("ref", 28, 33, "-")

    def test_unmapped_has_no_interval(self):
        """Unmapped read at POS 0 has no reference span."""
        record = SamRecord.from_line(UNMAPPED)
        assert not record.has_interval()
        with pytest.raises(DomainError, match="Unmapped read"):
            record.to_interval()

    def test_placed_unmapped_has_no_interval(self):
        """Unmapped read placed at its mate's position still has no span."""
        record = make_record(flag=int(SamFlag.READ_PAIRED | SamFlag.READ_UNMAPPED), pos=100)
        assert not record.has_interval()
        with pytest.raises(DomainError):
            record.to_interval()

    def test_pos_zero_has_no_interval(self):
        """POS 0 means no mapping position even without the unmapped flag."""
        assert not make_record(pos=0).has_interval()

    def test_mapped_has_interval(self, sam_lines):
        """Every example alignment is mapped."""
        assert all(SamRecord.from_line(line).has_interval() for line in sam_lines)


# ============================================================================
# Tests: Orientation and Template Length
# ============================================================================

class TestOrientation:
    """Tests for compute_ori."""

    @pytest.mark.parametrize("read_fwd, mate_fwd, expected", [
        (True, False, Orientation.FR),
        (True, True, Orientation.FF),
        (False, False, Orientation.RR),
        (False, True, Orientation.RF),
    ])
    def test_compute_ori(self, read_fwd, mate_fwd, expected):
        """All four orientations."""
        assert compute_ori(read_fwd, mate_fwd) is expected

    def test_record_orientation(self, sam_lines):
        """Orientation from record flags."""
        assert SamRecord.from_line(sam_lines[0]).orientation() is Orientation.FR
        assert SamRecord.from_line(sam_lines[-1]).orientation() is Orientation.RF


class TestComputeTlen:
    """Tests for compute_tlen."""

    def test_fr_example_pair(self):
        """FR length of the example pair."""
        assert compute_tlen(7, Cigar("8M2I4M1D3M"), True, 37, Cigar("9M"), False) == 39

    def test_fr(self):
        """FR length spans both reads."""
        assert compute_tlen(100, Cigar("50M"), True, 300, Cigar("50M"), False) == 250

    def test_fr_reversed_arguments(self):
        """Rightmost read gets a negative length."""
        assert compute_tlen(300, Cigar("50M"), False, 100, Cigar("50M"), True) == -250

    def test_ff(self):
        """FF length is pushed away from zero."""
        assert compute_tlen(100, Cigar("50M"), True, 200, Cigar("30M"), True) == 81

    def test_ff_zero(self):
        """FF length of zero stays zero."""
        assert compute_tlen(100, Cigar("50M"), True, 120, Cigar("30M"), True) == 0

    def test_ff_negative(self):
        """Negative FF length is pushed further negative."""
        assert compute_tlen(100, Cigar("50M"), True, 100, Cigar("20M"), True) == -31

    def test_rr_uses_reference_span(self):
        """RR uses reference spans."""
        assert compute_tlen(100, Cigar("10M5D"), False, 200, Cigar("20M"), False) == 106

    def test_rf(self):
        """RF length between the read ends."""
        assert compute_tlen(100, Cigar("50M"), False, 300, Cigar("50M"), True) == 152

    def test_rf_abutting_is_zero(self):
        """Abutting RF reads give zero."""
        assert compute_tlen(100, Cigar("50M"), False, 149, Cigar("50M"), True) == 0

    @pytest.mark.parametrize("a, b", [
        ((100, "50M", True), (300, "40M", False)),
        ((100, "50M", True), (200, "30M", True)),
        ((100, "10M5D", False), (200, "20M", False)),
        ((100, "50M", False), (300, "50M", True)),
    ])
    def test_antisymmetric(self, a, b):
        """Swapping read and mate negates the length."""
        (pa, ca, fa), (pb, cb, fb) = a, b
        forward = compute_tlen(pa, Cigar(ca), fa, pb, Cigar(cb), fb)
        backward = compute_tlen(pb, Cigar(cb), fb, pa, Cigar(ca), fa)
        assert forward == -backward

    def test_template_length_with(self, sam_lines):
        """Template length from two records."""
        read = SamRecord.from_line(sam_lines[0])
        mate = SamRecord.from_line(sam_lines[-1])
        assert read.template_length_with(mate) == 39
        assert mate.template_length_with(read) == -39


class TestTlenWellDefined:
    """Tests for tlen_well_defined."""

    def test_example_pair(self, sam_lines):
        """Both reads of the example pair are well defined."""
        assert SamRecord.from_line(sam_lines[0]).tlen_well_defined()
        assert SamRecord.from_line(sam_lines[-1]).tlen_well_defined()

    def test_unpaired(self):
        """Unpaired reads have no template length."""
        assert not make_record(flag=0, tlen=100).tlen_well_defined()

    def test_zero_tlen(self):
        """Zero TLEN is undefined."""
        assert not make_record(flag=99, tlen=0).tlen_well_defined()

    def test_same_strand(self):
        """Same-strand pairs are undefined."""
        flag = SamFlag.READ_PAIRED | SamFlag.READ_REVERSE_STRAND | SamFlag.MATE_REVERSE_STRAND
        assert not make_record(flag=int(flag), tlen=100).tlen_well_defined()

    def test_mate_unmapped(self):
        """Unmapped mate is undefined."""
        flag = SamFlag.READ_PAIRED | SamFlag.MATE_UNMAPPED | SamFlag.MATE_REVERSE_STRAND
        assert not make_record(flag=int(flag), tlen=100).tlen_well_defined()

    def test_forward_read_with_mate_too_far_left(self):
        """Forward read with mate span ending before it."""
        assert not make_record(flag=99, pos=100, tlen=-10).tlen_well_defined()


# ============================================================================
# Tests: Qualities
# ============================================================================

class TestQualities:
    """Tests for gap penalties and base error probabilities."""

    def test_penalty_tables(self):
        """Penalty tables hold MAX_READ_LENGTH characters."""
        assert len(GAP_OPEN_PENALTY) == MAX_READ_LENGTH
        assert set(GAP_OPEN_PENALTY) == {"I"}
        assert set(GAP_CONTINUATION_PENALTY) == {"+"}

    def test_gap_penalties_follow_read_size(self):
        """Penalty strings match the read length."""
        record = make_record(seq="ACGTA")
        assert record.insertion_gop() == "IIIII"
        assert record.deletion_gop() == "IIIII"
        assert record.overall_gcp() == "+++++"

    def test_gap_penalties_empty_for_star(self):
        """No SEQ gives empty penalties."""
        assert make_record(seq="*").insertion_gop() == ""

    def test_gap_penalties_capped_at_max_read_length(self):
        """Reads longer than MAX_READ_LENGTH get a capped penalty string."""
        record = make_record(seq="A" * (MAX_READ_LENGTH + 44))
        assert record.size() == MAX_READ_LENGTH + 44
        assert len(record.insertion_gop()) == MAX_READ_LENGTH
        assert len(record.overall_gcp()) == MAX_READ_LENGTH

    def test_base_error_probs(self):
        """Decode QUAL into error probabilities."""
        record = make_record(seq="ACG", qual="+5?")
        np.testing.assert_allclose(record.base_error_probs(), [0.1, 0.01, 0.001])

    def test_base_error_probs_missing(self):
        """'*' QUAL gives no probabilities."""
        assert make_record(qual="*").base_error_probs().size == 0


# ============================================================================
# Tests: Ordering
# ============================================================================

class TestOrdering:
    """Records order by (rname, pos) only."""

    def test_sort(self, sam_lines):
        """Sort the example alignments by position."""
        records = sorted(SamRecord.from_line(line) for line in sam_lines)
        assert [r.pos for r in records] == [7, 9, 9, 16, 29, 37]

    def test_same_position_compares_equal(self):
        """Same position compares equal."""
        a = make_record(qname="a", pos=10)
        b = make_record(qname="b", pos=10, cigar=Cigar("3S7M"))
        assert a == b
        assert not a < b
        assert a.to_line() != b.to_line()

    def test_reference_name_first(self):
        """Reference name orders before position."""
        assert make_record(rname="chr1", pos=500) < make_record(rname="chr2", pos=1)
        assert make_record(rname="chr2", pos=1) > make_record(rname="chr1", pos=500)
