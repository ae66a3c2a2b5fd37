"""
Tabular export of parsed records with pandas.

One row per record, one column per line column (in schema order). CIGARs are
rendered back to text and tail columns (SAM tags, VCF samples) stay as
Python lists.
"""

from typing import Any, Dict, Iterable, List, Optional, Type

import pandas as pd

from .records import Record


def records_to_dataframe(
    records: Iterable[Record],
    record_type: Optional[Type[Record]] = None,
    with_interval: bool = False
) -> pd.DataFrame:
    """
    Build a DataFrame from records.

    Args:
        records: Records of a single type
        record_type: Record class; required to name the columns of an empty
            input, otherwise taken from the first record
        with_interval: Add ``begin``/``end``/``strand`` columns from each
            record's ``to_interval()`` projection; they are missing (NA) for
            records without a reference span, such as unmapped reads

    Returns:
        DataFrame with columns in schema order
    """
    records = list(records)
    if record_type is None:
        if not records:
            return pd.DataFrame()
        record_type = type(records[0])

    schema = record_type.schema()
    columns = [f.name for f, _ in schema]
    if with_interval:
        columns += ["begin", "end", "strand"]

    rows: List[Dict[str, Any]] = []
    for record in records:
        row: Dict[str, Any] = {}
        for f, codec in schema:
            value = getattr(record, f.name)
            if codec.variadic:
                value = list(value)
            elif value is not None and not isinstance(value, (str, int, float)):
                # structured values such as Cigar
                value = codec.format(value)
            row[f.name] = value
        if with_interval:
            if record.has_interval():
                iv = record.to_interval()
                row.update(begin=iv.begin, end=iv.end, strand=iv.strand)
            else:
                row.update(begin=None, end=None, strand=None)
        rows.append(row)

    df = pd.DataFrame(rows, columns=columns)
    if with_interval:
        df = df.astype({"begin": "Int64", "end": "Int64"})
    return df
