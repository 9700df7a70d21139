# Allow classes to use self-referencing Type hints in Python 3.7.
from __future__ import annotations

from collections import Counter
from typing import Any, Iterable, List, Mapping, NamedTuple, Sequence

import pyarrow as pa

from acidcat.constants import INVALID_INT_SENTINEL, INVALID_STRING_SENTINEL
from acidcat.exceptions import InvalidArgumentError, ValidationError


def sentinel_for(field: pa.Field) -> Any:
    """
    Returns the "not checked" marker substituted for a column that a test
    does not validate: -1 for integer columns and "INVALID" for text columns.
    """
    if pa.types.is_integer(field.type):
        return INVALID_INT_SENTINEL
    if pa.types.is_string(field.type) or pa.types.is_large_string(field.type):
        return INVALID_STRING_SENTINEL
    raise InvalidArgumentError(
        f"No sentinel defined for column `{field.name}` of type {field.type}"
    )


def sentinels(schema: pa.Schema) -> List[Any]:
    return [sentinel_for(field) for field in schema]


class RowRecord(tuple):
    """
    One logical row as an immutable ordered tuple of column values. Equality
    is structural over every column and hashing is consistent with it, so
    rows can be counted as a multiset.
    """

    @staticmethod
    def of(*values: Any) -> RowRecord:
        return RowRecord(values)

    @staticmethod
    def from_mapping(row: Mapping[str, Any], schema: pa.Schema) -> RowRecord:
        """
        Builds a row from a loosely typed mapping of column name to value.
        Columns missing from the mapping take their sentinel value, so a
        partially populated mapping is a legitimate row.
        """
        return RowRecord(
            row[field.name] if field.name in row else sentinel_for(field)
            for field in schema
        )

    def to_mapping(self, schema: pa.Schema) -> dict:
        return dict(zip(schema.names, self))

    def __repr__(self) -> str:
        return f"RowRecord{tuple.__repr__(self)}"


def rows_from_batches(
    batches: Iterable[pa.RecordBatch],
    schema: pa.Schema,
) -> List[RowRecord]:
    """
    Converts record batches returned by the engine under test into rows.
    Every batch must carry exactly one column per schema field; the column at
    each position fills the schema field at the same position, whatever name
    the engine gave it.
    """
    rows = []
    for batch in batches:
        if batch is None:
            continue
        if batch.num_columns != len(schema):
            raise ValidationError(
                f"Did not read required number of columns: expected "
                f"{len(schema)}, got {batch.num_columns}"
            )
        columns = [batch.column(idx).to_pylist() for idx in range(len(schema))]
        rows.extend(RowRecord(values) for values in zip(*columns))
    return rows


class RowComparison(NamedTuple):
    missing: List[RowRecord]
    unexpected: List[RowRecord]

    @property
    def matches(self) -> bool:
        return not self.missing and not self.unexpected


def compare_rows(
    actual: Sequence[RowRecord],
    expected: Sequence[RowRecord],
    ordered: bool = False,
) -> RowComparison:
    """
    Compares actual rows against expected rows. By default rows are compared
    as multisets: `missing` holds expected rows not produced (with
    multiplicity) and `unexpected` holds produced rows not expected. With
    `ordered=True` every position must match, and mismatching positions are
    reported in both lists.
    """
    if ordered:
        missing, unexpected = [], []
        for index in range(max(len(actual), len(expected))):
            actual_row = actual[index] if index < len(actual) else None
            expected_row = expected[index] if index < len(expected) else None
            if actual_row == expected_row:
                continue
            if expected_row is not None:
                missing.append(expected_row)
            if actual_row is not None:
                unexpected.append(actual_row)
        return RowComparison(missing, unexpected)
    actual_counts = Counter(actual)
    expected_counts = Counter(expected)
    return RowComparison(
        list((expected_counts - actual_counts).elements()),
        list((actual_counts - expected_counts).elements()),
    )
