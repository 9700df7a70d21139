# Allow classes to use self-referencing Type hints in Python 3.7.
from __future__ import annotations

import logging
import re
from typing import Any, FrozenSet, Iterable, List, Optional, Sequence

import pyarrow as pa
import pyarrow.fs

from acidcat import logs
from acidcat.constants import BASE_ROW_DELIMITER, DEFAULT_REPLICATION_FACTOR
from acidcat.exceptions import (
    InvalidArgumentError,
    MalformedRowError,
    ParseError,
)
from acidcat.storage.model.delete_delta import (
    DeleteDeltaLocation,
    logical_row_id,
    validate_replication_factor,
)
from acidcat.storage.model.row import (
    RowComparison,
    RowRecord,
    compare_rows,
    sentinel_for,
)
from acidcat.utils.filesystem import read_text, resolve_path_and_filesystem

logger = logs.configure_acidcat_logger(logging.getLogger(__name__))

_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


class ExpectedRowSet(list):
    """
    Rows a correct reader must produce, in emission order (base line order,
    then replica order). Comparison is multiset-based unless ordered
    comparison is requested.
    """

    def compare(
        self,
        actual: Sequence[RowRecord],
        ordered: bool = False,
    ) -> RowComparison:
        return compare_rows(actual, self, ordered=ordered)

    def matches(self, actual: Sequence[RowRecord], ordered: bool = False) -> bool:
        return self.compare(actual, ordered=ordered).matches


def _parse_integer(value: str, field: pa.Field, line_number: int) -> int:
    if not _INTEGER_PATTERN.fullmatch(value):
        raise ParseError(
            f"Line {line_number}: column `{field.name}` value `{value}` is "
            f"not a base-10 integer"
        )
    parsed = int(value)
    bit_width = field.type.bit_width
    if pa.types.is_signed_integer(field.type):
        low, high = -(2 ** (bit_width - 1)), 2 ** (bit_width - 1) - 1
    else:
        low, high = 0, 2**bit_width - 1
    if not low <= parsed <= high:
        raise ParseError(
            f"Line {line_number}: column `{field.name}` value {parsed} "
            f"overflows {field.type}"
        )
    return parsed


def _parse_value(value: str, field: pa.Field, line_number: int) -> Any:
    if pa.types.is_integer(field.type):
        return _parse_integer(value, field, line_number)
    if pa.types.is_string(field.type) or pa.types.is_large_string(field.type):
        return value
    raise InvalidArgumentError(
        f"Unsupported column `{field.name}` of type {field.type}"
    )


def parse_base_row(
    line: str,
    schema: pa.Schema,
    only_for_column_id: Optional[int] = None,
    line_number: int = 0,
    delimiter: str = BASE_ROW_DELIMITER,
) -> RowRecord:
    """
    Parses one delimited base line into a row. When `only_for_column_id` is
    given, every other column holds its sentinel and is not parsed.
    Trailing fields beyond the schema (such as the empty field left by a
    trailing delimiter) are ignored.
    """
    fields = line.rstrip("\r\n").split(delimiter)
    if len(fields) < len(schema):
        raise MalformedRowError(
            f"Line {line_number}: expected {len(schema)} columns, got "
            f"{len(fields)}: `{line.rstrip()}`"
        )
    return RowRecord(
        _parse_value(fields[column_id], field, line_number)
        if only_for_column_id is None or only_for_column_id == column_id
        else sentinel_for(field)
        for column_id, field in enumerate(schema)
    )


def deleted_row_ids(
    delete_deltas: Iterable[DeleteDeltaLocation],
    replication_factor: int,
) -> FrozenSet[int]:
    """
    Maps delete delta locations to the union of the logical row ids they
    cover. Deletes are idempotent and commutative, so overlapping coverage
    removes a row once. Every location must have computed its row ids with
    `replication_factor`; otherwise its ids name different rows and an
    InvalidArgumentError is raised.
    """
    row_ids = set()
    for location in delete_deltas:
        if not location.directory.is_delete:
            raise InvalidArgumentError(
                f"Expected a delete delta directory, got {location.directory.name}"
            )
        if location.replication_factor != replication_factor:
            raise InvalidArgumentError(
                f"Delete delta {location.directory.name} covers row ids for "
                f"replication factor {location.replication_factor}, expected "
                f"{replication_factor}"
            )
        row_ids.update(location.covered_row_ids)
    return frozenset(row_ids)


def _validate_arguments(
    replication_factor: int,
    only_for_row_id: Optional[int],
    only_for_column_id: Optional[int],
) -> None:
    validate_replication_factor(replication_factor)
    if only_for_row_id is not None and only_for_row_id < 0:
        raise InvalidArgumentError(
            f"Row id must be non-negative, got {only_for_row_id}"
        )
    if only_for_column_id is not None and only_for_column_id < 0:
        raise InvalidArgumentError(
            f"Column id must be non-negative, got {only_for_column_id}"
        )


def expected_rows(
    base_rows: Iterable[str],
    schema: pa.Schema,
    replication_factor: int = DEFAULT_REPLICATION_FACTOR,
    only_for_row_id: Optional[int] = None,
    only_for_column_id: Optional[int] = None,
    invalid_rows: Optional[Iterable[int]] = None,
    delete_deltas: Optional[Iterable[DeleteDeltaLocation]] = None,
) -> ExpectedRowSet:
    """
    Computes the rows a correct reader must return for a base dataset.

    Each base line (numbered from zero in file order) is skipped if it is in
    `invalid_rows`, then skipped if `only_for_row_id` is given and does not
    match it. Every remaining line expands into `replication_factor` copies,
    with all columns other than `only_for_column_id` (if given) replaced by
    their sentinel. Finally, copies whose logical row id is covered by any
    of the given (visible) delete deltas are removed.

    Args:
        base_rows: Delimited base table lines in file order.
        schema: Column names and types of the base table.
        replication_factor: Logical rows emitted per base line.
        only_for_row_id: Restrict output to this zero-based base line.
        only_for_column_id: Validate only this zero-based column.
        invalid_rows: Base lines to exclude entirely.
        delete_deltas: Visible delete deltas with their covered row ids.

    Returns:
        The expected rows in base line order, then replica order.
    """
    _validate_arguments(replication_factor, only_for_row_id, only_for_column_id)
    invalid_rows = frozenset(invalid_rows or ())
    deleted = deleted_row_ids(delete_deltas or (), replication_factor)

    result = ExpectedRowSet()
    for line_number, line in enumerate(base_rows):
        if line_number in invalid_rows:
            continue
        if only_for_row_id is not None and only_for_row_id != line_number:
            continue
        row = parse_base_row(line, schema, only_for_column_id, line_number)
        result.extend(
            row
            for replica in range(replication_factor)
            if logical_row_id(line_number, replica, replication_factor) not in deleted
        )
    logger.debug(
        f"Computed {len(result)} expected rows (replication factor "
        f"{replication_factor}, {len(invalid_rows)} invalid rows, "
        f"{len(deleted)} deleted row ids)."
    )
    return result


def read_base_rows(
    path: str,
    filesystem: Optional[pyarrow.fs.FileSystem] = None,
) -> List[str]:
    """
    Reads the lines of a delimited base table file.
    """
    path, filesystem = resolve_path_and_filesystem(path, filesystem)
    return read_text(path, filesystem).splitlines()
