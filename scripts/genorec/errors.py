"""
Exception types raised by the record codecs.

All of them derive from ValueError so callers that already catch ValueError
around ``int()``/``float()`` conversions keep working.
"""


class GenorecError(ValueError):
    """Base class for codec and domain failures."""


class ParseError(GenorecError):
    """A field, CIGAR token or interval string could not be parsed."""


class FormatError(ParseError):
    """A line has the wrong number of columns for its record type."""


class DomainError(GenorecError):
    """A value is well-formed but violates a domain rule."""
