import pyarrow as pa
import pytest

from acidcat.exceptions import InvalidArgumentError, ValidationError
from acidcat.storage.model.row import (
    RowRecord,
    compare_rows,
    rows_from_batches,
    sentinel_for,
    sentinels,
)

SCHEMA = pa.schema(
    [
        ("id", pa.int32()),
        ("name", pa.string()),
    ]
)


def test_sentinels():
    assert sentinels(SCHEMA) == [-1, "INVALID"]
    assert sentinel_for(pa.field("big", pa.int64())) == -1
    with pytest.raises(InvalidArgumentError):
        sentinel_for(pa.field("price", pa.float64()))


def test_row_equality_and_hash():
    assert RowRecord.of(1, "a") == RowRecord.of(1, "a")
    assert RowRecord.of(1, "a") != RowRecord.of(1, "b")
    assert len({RowRecord.of(1, "a"), RowRecord.of(1, "a")}) == 1
    assert repr(RowRecord.of(1, "a")) == "RowRecord(1, 'a')"


def test_from_mapping_fills_sentinels():
    assert RowRecord.from_mapping({"id": 3}, SCHEMA) == RowRecord.of(3, "INVALID")
    assert RowRecord.from_mapping({"name": "x"}, SCHEMA) == RowRecord.of(-1, "x")
    assert RowRecord.of(3, "x").to_mapping(SCHEMA) == {"id": 3, "name": "x"}


def test_rows_from_batches():
    batches = [
        pa.RecordBatch.from_pydict(
            {"id": [1, 2], "name": ["a", "b"]},
            schema=SCHEMA,
        ),
        None,
        pa.RecordBatch.from_pydict({"id": [3], "name": ["c"]}, schema=SCHEMA),
    ]
    assert rows_from_batches(batches, SCHEMA) == [
        RowRecord.of(1, "a"),
        RowRecord.of(2, "b"),
        RowRecord.of(3, "c"),
    ]


def test_rows_from_batches_matches_columns_by_position():
    batch = pa.RecordBatch.from_pydict(
        {
            "a": pa.array([1, 2], pa.int32()),
            "b": ["ARGENTINA", "BRAZIL"],
        }
    )
    assert rows_from_batches([batch], SCHEMA) == [
        RowRecord.of(1, "ARGENTINA"),
        RowRecord.of(2, "BRAZIL"),
    ]


def test_rows_from_batches_empty_batch():
    batch = pa.RecordBatch.from_pydict(
        {"id": pa.array([], pa.int32()), "name": pa.array([], pa.string())}
    )
    assert rows_from_batches([batch], SCHEMA) == []


def test_rows_from_batches_column_count_mismatch():
    batch = pa.RecordBatch.from_pydict({"id": pa.array([1], pa.int32())})
    with pytest.raises(ValidationError):
        rows_from_batches([batch], SCHEMA)


def test_compare_rows_as_multiset():
    expected = [RowRecord.of(1, "a"), RowRecord.of(1, "a"), RowRecord.of(2, "b")]
    actual = [RowRecord.of(2, "b"), RowRecord.of(1, "a"), RowRecord.of(3, "c")]
    comparison = compare_rows(actual, expected)
    assert not comparison.matches
    assert comparison.missing == [RowRecord.of(1, "a")]
    assert comparison.unexpected == [RowRecord.of(3, "c")]
    assert compare_rows(list(reversed(expected)), expected).matches


def test_compare_rows_ordered():
    expected = [RowRecord.of(1, "a"), RowRecord.of(2, "b")]
    assert compare_rows(expected, expected, ordered=True).matches
    comparison = compare_rows(list(reversed(expected)), expected, ordered=True)
    assert comparison.missing == expected
    assert comparison.unexpected == list(reversed(expected))
    comparison = compare_rows(expected[:1], expected, ordered=True)
    assert comparison.missing == [RowRecord.of(2, "b")]
    assert comparison.unexpected == []
