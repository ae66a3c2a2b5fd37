"""
genorec - Genomic Record Codecs

Typed, line-oriented codecs for genomic text formats:
- Generic column codec: declare a dataclass, get a line parser/formatter
- CIGAR parsing and arithmetic
- SAM records: flags, pair orientation, template length
- VCF records
- Half-open genomic intervals shared by every record type
"""

from .errors import (
    GenorecError,
    ParseError,
    FormatError,
    DomainError,
)

from .intervals import (
    Interval,
    MAX_POSITION,
    merge_intervals,
)

from .cigar import (
    Cigar,
    CigarElement,
)

from .records import (
    Record,
    HeaderableRecord,
    column,
)

from .headers import Header

from .sam_utils import (
    SamFlag,
    Orientation,
    SamHeader,
    SamRecord,
    compute_ori,
    compute_tlen,
)

from .vcf_utils import (
    VcfHeader,
    VcfRecord,
)

from .reader import (
    iter_records,
    read_lines,
    read_text,
    parse_file,
    write_records,
    collect_intervals,
)

from .config_parser import CodecSettings, load_config

__version__ = "1.0.0"

__all__ = [
    # Errors
    "GenorecError",
    "ParseError",
    "FormatError",
    "DomainError",
    # Intervals
    "Interval",
    "MAX_POSITION",
    "merge_intervals",
    # CIGAR
    "Cigar",
    "CigarElement",
    # Record framework
    "Record",
    "HeaderableRecord",
    "Header",
    "column",
    # SAM
    "SamFlag",
    "Orientation",
    "SamHeader",
    "SamRecord",
    "compute_ori",
    "compute_tlen",
    # VCF
    "VcfHeader",
    "VcfRecord",
    # Files
    "iter_records",
    "read_lines",
    "read_text",
    "parse_file",
    "write_records",
    "collect_intervals",
    # Config
    "CodecSettings",
    "load_config",
]
