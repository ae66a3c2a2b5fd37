"""
Record Line Codec

Tab-delimited bioinformatics formats (SAM, VCF, PAF, BED, ...) all boil down
to "one record per line, one field per column". Instead of writing a parser
and a formatter per record type, a record is declared as a dataclass whose
fields carry a column codec:

    @dataclass
    class BedRecord(Record):
        chrom: str = column(STRING, default="")
        begin: int = column(UNSIGNED, default=0)
        end: int = column(UNSIGNED, default=0)

    record = BedRecord.from_line("chr1\\t100\\t200")
    record.to_line()  # 'chr1\\t100\\t200'

Columns are read and written in field declaration order. A ``TAIL`` column,
if present, must be declared last and absorbs every remaining column (SAM
optional tags, VCF sample columns). Columns declared with
``required=False`` may be missing at the end of a line. An optional column
that is empty is written only when a later column follows it, so a present
but empty trailing optional column is dropped on output.

Fields declared without ``column()`` are ordinary dataclass fields and are
ignored by the codec.
"""

import re
import weakref
from dataclasses import MISSING, Field, dataclass, field, fields
from typing import Any, Callable, ClassVar, Dict, List, Optional, Tuple

from .cigar import Cigar
from .errors import FormatError, ParseError
from .headers import Header

_INT_RE = re.compile(r"^-?\d+$")
_UINT_RE = re.compile(r"^\d+$")


# ============================================================================
# Column codecs
# ============================================================================

@dataclass(frozen=True)
class ColumnCodec:
    """
    How one column converts between text and a Python value.

    Attributes:
        name: Short type name used in error messages
        parse: Text -> value; raises ParseError (or ValueError) on bad input
        format: Value -> text
        variadic: Column absorbs the rest of the line as a list of strings
    """
    name: str
    parse: Callable[[str], Any]
    format: Callable[[Any], str]
    variadic: bool = False


def _parse_string(text: str) -> str:
    return text


def _parse_integer(text: str) -> int:
    if not _INT_RE.match(text):
        raise ParseError(f"not an integer: {text!r}")
    return int(text)


def _unsigned_parser(max_value: Optional[int]) -> Callable[[str], int]:
    def parse(text: str) -> int:
        if not _UINT_RE.match(text):
            raise ParseError(f"not an unsigned integer: {text!r}")
        value = int(text)
        if max_value is not None and value > max_value:
            raise ParseError(f"{value} exceeds maximum {max_value}")
        return value
    return parse


def _parse_float(text: str) -> Optional[float]:
    if text == ".":
        return None
    try:
        return float(text)
    except ValueError as e:
        raise ParseError(f"not a number: {text!r}") from e


def _format_float(value: Optional[float]) -> str:
    if value is None:
        return "."
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _parse_cigar(text: str) -> Cigar:
    if text == "*":
        return Cigar()
    return Cigar(text)


def _format_cigar(cigar: Cigar) -> str:
    return str(cigar) or "*"


def unsigned(max_value: Optional[int] = None) -> ColumnCodec:
    """Unsigned integer column, optionally bounded (e.g. 0xFFFF for uint16)."""
    name = "unsigned" if max_value is None else f"unsigned<={max_value}"
    return ColumnCodec(name, _unsigned_parser(max_value), lambda v: str(int(v)))


STRING = ColumnCodec("string", _parse_string, str)
INTEGER = ColumnCodec("integer", _parse_integer, lambda v: str(int(v)))
UNSIGNED = unsigned()
UINT16 = unsigned(0xFFFF)
UINT32 = unsigned(2 ** 32 - 1)
FLOAT = ColumnCodec("float", _parse_float, _format_float)
# SAM flags are decimal on the wire; int() strips IntFlag reprs on write
FLAG = ColumnCodec("flag", _unsigned_parser(0xFFFF), lambda v: str(int(v)))
CIGAR = ColumnCodec("cigar", _parse_cigar, _format_cigar)
TAIL = ColumnCodec("tail", lambda parts: list(parts), lambda v: "\t".join(v), variadic=True)


def column(
    codec: ColumnCodec,
    *,
    default: Any = MISSING,
    default_factory: Any = MISSING,
    required: bool = True,
    **kwargs: Any,
) -> Any:
    """
    Declare a dataclass field that maps to one text column.

    Args:
        codec: Column codec (STRING, INTEGER, FLOAT, ...)
        default: Default value, as for ``dataclasses.field``
        default_factory: Default factory, as for ``dataclasses.field``
        required: False if the column may be absent at the end of a line
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata["codec"] = codec
    metadata["required"] = required
    if codec.variadic and default is MISSING and default_factory is MISSING:
        default_factory = list
    return field(
        default=default,
        default_factory=default_factory,
        metadata=metadata,
        **kwargs,
    )


# ============================================================================
# Record base classes
# ============================================================================

class Record:
    """
    Mixin giving a dataclass a positional line codec.

    Subclasses must be dataclasses; the codec iterates ``dataclasses.fields``
    and uses every field declared with ``column()``.
    """

    DELIMITER: ClassVar[str] = "\t"

    @classmethod
    def schema(cls) -> List[Tuple[Field, ColumnCodec]]:
        """Ordered ``(field, codec)`` pairs that make up a line."""
        cols = [(f, f.metadata["codec"]) for f in fields(cls) if "codec" in f.metadata]
        for f, codec in cols[:-1]:
            if codec.variadic:
                raise TypeError(f"{cls.__name__}.{f.name}: tail column must be declared last")
        return cols

    @classmethod
    def column_names(cls) -> List[str]:
        return [f.name for f, _ in cls.schema()]

    @classmethod
    def parse_values(cls, line: str) -> Dict[str, Any]:
        """
        Parse a line into ``{field name: value}`` without building a record.

        Raises:
            FormatError: If the column count does not fit the schema
            ParseError: If a column fails to parse
        """
        parts = line.rstrip("\r\n").split(cls.DELIMITER)
        schema = cls.schema()

        fixed = [(f, c) for f, c in schema if not c.variadic]
        tail = [(f, c) for f, c in schema if c.variadic]
        n_required = sum(1 for f, _ in fixed if f.metadata["required"])

        if len(parts) < n_required or (not tail and len(parts) > len(fixed)):
            expected = f"at least {n_required}" if tail else (
                str(len(fixed)) if n_required == len(fixed)
                else f"{n_required}-{len(fixed)}"
            )
            raise FormatError(
                f"{cls.__name__}: expected {expected} columns, got {len(parts)}"
            )

        values: Dict[str, Any] = {}
        for index, (f, codec) in enumerate(fixed):
            if index >= len(parts):
                break
            try:
                values[f.name] = codec.parse(parts[index])
            except ValueError as e:
                raise ParseError(
                    f"{cls.__name__}: column {index + 1} ({f.name}, {codec.name}): {e}"
                ) from e

        if tail:
            tail_field, tail_codec = tail[0]
            values[tail_field.name] = tail_codec.parse(parts[len(fixed):])
        return values

    @classmethod
    def from_line(cls, line: str, **kwargs: Any) -> "Record":
        """Build a new record from one line of text."""
        return cls(**cls.parse_values(line), **kwargs)

    def read(self, line: str) -> None:
        """
        Overwrite this record's columns from a line.

        Every column is parsed before any attribute is assigned, so a failed
        parse leaves the record untouched. Optional columns missing from the
        line are reset to their defaults.
        """
        values = self.parse_values(line)
        for f, _ in self.schema():
            if f.name in values:
                continue
            if f.default is not MISSING:
                values[f.name] = f.default
            elif f.default_factory is not MISSING:
                values[f.name] = f.default_factory()
        for name, value in values.items():
            setattr(self, name, value)

    def to_line(self) -> str:
        """
        Format the columns back into one delimited line (no terminator).

        Empty optional columns with nothing after them are left out, so
        ``"a\\tb\\t"`` read into a record with an optional third column is
        written back as ``"a\\tb"``.
        """
        out: List[str] = []
        pending: List[str] = []
        for f, codec in self.schema():
            value = getattr(self, f.name)
            if codec.variadic:
                if value:
                    out.extend(pending)
                    pending = []
                    out.extend(str(v) for v in value)
                continue
            text = codec.format(value)
            if not f.metadata["required"] and not text:
                # optional columns are only written when something follows
                pending.append(text)
                continue
            out.extend(pending)
            pending = []
            out.append(text)
        return self.DELIMITER.join(out)

    def __str__(self) -> str:
        return self.to_line()


class HeaderableRecord(Record):
    """
    Record that may point back to the header of the file it came from.

    The record does not own its header: only a weak reference is kept, so
    ``header`` becomes None once whatever assembled the file lets go of it.
    """

    header_type: ClassVar[type] = Header
    _header_ref = None

    @property
    def header(self):
        if self._header_ref is None:
            return None
        return self._header_ref()

    @header.setter
    def header(self, header) -> None:
        self._header_ref = None if header is None else weakref.ref(header)

    @classmethod
    def from_line(cls, line: str, header=None, **kwargs: Any) -> "HeaderableRecord":
        record = cls(**cls.parse_values(line), **kwargs)
        record.header = header
        return record
