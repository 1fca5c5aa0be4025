"""
Column type classification for SQL Dumper.

Numeric columns are written unquoted in INSERT statements, everything else
goes through the dialect's literal escaping.
"""

from typing import Optional

from .models import ColumnInfo, ColumnType

NUMERIC_TYPES = frozenset({
    'bit',
    'tinyint',
    'smallint',
    'mediumint',
    'int',
    'integer',
    'bigint',
    'real',
    'double',
    'float',
    'decimal',
    'numeric',
})


def parse_column_type(raw_type: str) -> ColumnType:
    """
    Decode a raw column type such as ``decimal(10,2) unsigned``.

    The first token up to an opening parenthesis is the base type (matched
    against NUMERIC_TYPES case-insensitively, SQLite reports ``INTEGER``), the
    parenthesized text is the length and whatever follows the first space
    is kept as the attributes string.
    """
    head, _, rest = raw_type.partition(' ')
    length: Optional[str] = None

    paren = head.find('(')
    if paren > 0:
        base_type = head[:paren]
        length = head[paren + 1:].replace(')', '')
    else:
        base_type = head

    return ColumnType(
        type=base_type,
        length=length,
        attributes=rest or None,
        is_numeric=base_type.lower() in NUMERIC_TYPES,
    )


def classify_columns(columns: list[ColumnInfo]) -> dict[str, bool]:
    """Map each column name to whether its values are written unquoted."""
    return {col.name: parse_column_type(col.type).is_numeric for col in columns}
