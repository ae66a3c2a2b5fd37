"""
Reading and writing whole record files.

Glue between raw text (files, strings, any iterable of lines) and the record
and header types: header lines are routed to the header, everything else is
parsed as a record of the requested type.

Example:
    >>> from genorec.vcf_utils import VcfRecord
    >>> header, records = read_text("##fileformat=VCFv4.2\\n20\\t1\\t.\\tA\\tG\\t.\\tPASS\\t.\\n", VcfRecord)
    >>> header.lines, [r.pos for r in records]
    (['##fileformat=VCFv4.2'], [1])
"""

import gzip
import logging
from typing import Iterable, Iterator, List, Optional, TextIO, Tuple, Type, TypeVar

from .config_parser import CodecSettings
from .errors import GenorecError
from .headers import Header, split_lines
from .intervals import Interval, merge_intervals
from .records import HeaderableRecord

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=HeaderableRecord)


def _compact_cigar(record: HeaderableRecord) -> None:
    cigar = getattr(record, "cigar", None)
    if cigar is not None:
        cigar.compact()


def iter_records(
    lines: Iterable[str],
    record_type: Type[R],
    header: Header,
    settings: Optional[CodecSettings] = None
) -> Iterator[R]:
    """
    Parse records from lines, collecting header lines into ``header``.

    Args:
        lines: Text lines, with or without line terminators
        record_type: Record class to build (e.g. SamRecord)
        header: Header that receives header lines; records point back to it
        settings: Codec settings (defaults to strict parsing)

    Yields:
        One record per non-header line

    Raises:
        GenorecError: On a malformed line when ``settings.strict`` is set
    """
    settings = settings or CodecSettings()
    skipped = 0

    for line_no, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")
        if not line and settings.skip_blank_lines:
            continue
        if header.is_header_line(line):
            header.append(line)
            continue

        try:
            record = record_type.from_line(line, header=header)
        except GenorecError as e:
            if settings.strict:
                raise type(e)(f"line {line_no}: {e}") from e
            skipped += 1
            logger.warning(f"Skipping line {line_no}: {e}")
            continue

        if settings.compact_cigars:
            _compact_cigar(record)
        yield record

    if skipped:
        logger.info(f"{record_type.__name__}: skipped {skipped} malformed lines")


def read_lines(
    lines: Iterable[str],
    record_type: Type[R],
    settings: Optional[CodecSettings] = None
) -> Tuple[Header, List[R]]:
    """Read a header and all records from an iterable of lines."""
    header = record_type.header_type()
    records = list(iter_records(lines, record_type, header, settings))
    logger.debug(f"Read {len(header)} header lines and {len(records)} records")
    return header, records


def read_text(
    text: str,
    record_type: Type[R],
    settings: Optional[CodecSettings] = None
) -> Tuple[Header, List[R]]:
    """Read a header and records from a string, splitting on newlines only."""
    return read_lines(split_lines(text), record_type, settings)


def parse_file(
    path: str,
    record_type: Type[R],
    settings: Optional[CodecSettings] = None
) -> Tuple[Header, List[R]]:
    """
    Read a SAM/VCF-style text file (supports .gz).

    Args:
        path: Path to the file
        record_type: Record class to build
        settings: Codec settings

    Returns:
        (header, records); the caller owns the header and must keep it alive
        for as long as records should be able to reach it
    """
    opener = gzip.open if str(path).endswith('.gz') else open

    with opener(path, 'rt') as f:
        header, records = read_lines(f, record_type, settings)

    logger.info(f"Loaded {len(records)} {record_type.__name__} records from {path}")
    return header, records


def write_records(
    handle: TextIO,
    records: Iterable[HeaderableRecord],
    header: Optional[Header] = None
) -> int:
    """
    Write an optional header block followed by one line per record.

    Returns:
        Number of records written
    """
    if header is not None:
        header.write(handle)
    count = 0
    for record in records:
        handle.write(record.to_line() + "\n")
        count += 1
    return count


def collect_intervals(
    records: Iterable[HeaderableRecord],
    padding: int = 0,
    merge_distance: int = 0,
    settings: Optional[CodecSettings] = None
) -> List[Interval]:
    """
    Project records onto intervals, pad them and merge the result.

    Args:
        records: Records with ``has_interval()`` and ``to_interval()``;
            records without a reference span (unmapped reads) are skipped
        padding: Bases added on each side of every interval
        merge_distance: Merge intervals within this distance
        settings: Supplies the padding underflow policy

    Returns:
        Sorted, merged intervals
    """
    settings = settings or CodecSettings()
    intervals = []
    skipped = 0
    for record in records:
        if not record.has_interval():
            skipped += 1
            continue
        intervals.append(
            record.to_interval().expand_with(padding, policy=settings.expand_policy)
        )
    if skipped:
        logger.debug(f"Skipped {skipped} records without a reference span")
    return merge_intervals(intervals, merge_distance)
