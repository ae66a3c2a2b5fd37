"""
Phred Quality Utilities

Phred-scaled base qualities are stored in SAM/FASTQ as ASCII characters with
an offset of 33 ('!'). The error probability for a Phred score Q is
``10 ** (-Q / 10)``.

``qual_to_error_prob`` indexes a precomputed 128-entry table by the raw value
it is given (a character's code point, or an int), so callers decide whether
to subtract ASCII_OFFSET first.
"""

from typing import Union

import numpy as np

from .errors import ParseError

ASCII_OFFSET: int = ord("!")

TABLE_SIZE: int = 128

_ERROR_PROB_TABLE = np.power(10.0, np.arange(TABLE_SIZE, dtype=np.float64) / -10.0)
_ERROR_PROB_TABLE.setflags(write=False)


def _table_index(qual: Union[str, int]) -> int:
    if isinstance(qual, str):
        if len(qual) != 1:
            raise ParseError(f"Expected a single quality character, got {qual!r}")
        qual = ord(qual)
    if not 0 <= qual < TABLE_SIZE:
        raise ParseError(f"Quality value {qual} outside [0, {TABLE_SIZE})")
    return int(qual)


def qual_to_error_prob(qual: Union[str, int]) -> float:
    """
    Look up the error probability for a Phred value.

    Args:
        qual: Phred value as an int, or a one-character string whose code
            point is used as the Phred value

    Returns:
        Error probability in (0, 1]

    Raises:
        ParseError: If the value is outside the lookup table

    Examples:
        >>> qual_to_error_prob(20)
        0.01
    """
    return float(_ERROR_PROB_TABLE[_table_index(qual)])


def qual_to_error_prob_log10(qual: float) -> float:
    return qual / -10.0


def qual_to_prob_log10(qual: Union[str, int]) -> float:
    """log10 of the probability that the base call is correct."""
    return float(np.log10(1.0 - qual_to_error_prob(qual)))


def phred_scale_error_rate(error_rate: float) -> float:
    """Convert an error rate back to a Phred score."""
    return float(-10.0 * np.log10(error_rate))


def error_probs(qual_string: str, offset: int = ASCII_OFFSET) -> np.ndarray:
    """
    Per-base error probabilities for an ASCII-encoded quality string.

    Args:
        qual_string: Quality string as stored in SAM/FASTQ (e.g. "II#")
        offset: ASCII offset of the encoding (33 for Sanger)

    Returns:
        Float array with one probability per base; empty for "*"

    Raises:
        ParseError: If a character decodes outside the lookup table
    """
    if qual_string in ("", "*"):
        return np.empty(0, dtype=np.float64)

    try:
        raw = qual_string.encode("ascii")
    except UnicodeEncodeError as e:
        raise ParseError(f"Quality string is not ASCII: {qual_string!r}") from e

    codes = np.frombuffer(raw, dtype=np.uint8).astype(np.int64)
    codes -= offset
    if codes.min() < 0 or codes.max() >= TABLE_SIZE:
        raise ParseError(f"Quality string has characters outside the offset-{offset} range")
    return _ERROR_PROB_TABLE[codes]
