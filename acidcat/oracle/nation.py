"""
Fixtures built on the TPC-H `nation` table: `nation.tbl` as the base dataset
and `nation_delete_deltas/` as pre-built delete deltas, both resolved from the
test resource root rather than the warehouse.
"""
from __future__ import annotations

import logging
import posixpath
import re
from typing import Iterable, List, Optional

import pyarrow as pa
import pyarrow.fs

from acidcat import logs
from acidcat.constants import (
    ACIDCAT_TEST_RESOURCE_ROOT,
    DEFAULT_REPLICATION_FACTOR,
    DELETED_LINES_FILE_NAME,
    NATION_DELETE_DELTAS_DIR_NAME,
    NATION_FILE_NAME,
)
from acidcat.exceptions import ParseError
from acidcat.oracle.expected import ExpectedRowSet, expected_rows, read_base_rows
from acidcat.storage.model.delete_delta import (
    DeleteDeltaLocation,
    DeleteDeltaLocations,
    row_ids_for_lines,
)
from acidcat.storage.model.delta_directory import DeltaDirectory, is_delta_name
from acidcat.storage.model.types import DeltaKind
from acidcat.utils.filesystem import (
    list_subdirectory_names,
    read_text,
    resolve_path_and_filesystem,
)

logger = logs.configure_acidcat_logger(logging.getLogger(__name__))

_LINE_NUMBER_PATTERN = re.compile(r"[0-9]+")

NATION_SCHEMA = pa.schema(
    [
        ("n_nationkey", pa.int32()),
        ("n_name", pa.string()),
        ("n_regionkey", pa.int32()),
        ("n_comment", pa.string()),
    ]
)


def nation_rows(
    resource_root: str = ACIDCAT_TEST_RESOURCE_ROOT,
    filesystem: Optional[pyarrow.fs.FileSystem] = None,
) -> List[str]:
    return read_base_rows(posixpath.join(resource_root, NATION_FILE_NAME), filesystem)


def expected_nation_rows(
    only_for_row_id: Optional[int] = None,
    only_for_column_id: Optional[int] = None,
    invalid_rows: Optional[Iterable[int]] = None,
    replication_factor: int = DEFAULT_REPLICATION_FACTOR,
    delete_deltas: Optional[Iterable[DeleteDeltaLocation]] = None,
    resource_root: str = ACIDCAT_TEST_RESOURCE_ROOT,
) -> ExpectedRowSet:
    """
    Returns the expected rows for a nation table where each line of
    `nation.tbl` was exploded into `replication_factor` rows.
    """
    return expected_rows(
        nation_rows(resource_root),
        NATION_SCHEMA,
        replication_factor=replication_factor,
        only_for_row_id=only_for_row_id,
        only_for_column_id=only_for_column_id,
        invalid_rows=invalid_rows,
        delete_deltas=delete_deltas,
    )


def _read_deleted_lines(path: str, filesystem: pyarrow.fs.FileSystem):
    lines = []
    for entry in read_text(path, filesystem).split():
        if not _LINE_NUMBER_PATTERN.fullmatch(entry):
            raise ParseError(f"Invalid deleted line number `{entry}` in {path}")
        lines.append(int(entry))
    return lines


def add_nation_delete_delta(
    locations: DeleteDeltaLocations,
    min_write_id: int,
    max_write_id: int,
    statement_id: Optional[int] = 0,
    replication_factor: int = DEFAULT_REPLICATION_FACTOR,
    filesystem: Optional[pyarrow.fs.FileSystem] = None,
) -> DeleteDeltaLocation:
    """
    Adds the pre-built delete delta for the given range to `locations`. The
    rows it covers are every replica of the base lines listed in the delete
    delta's `_deleted_lines` file.
    """
    partition_location, filesystem = resolve_path_and_filesystem(
        locations.partition_location, filesystem
    )
    directory = DeltaDirectory.of(
        min_write_id, max_write_id, statement_id, DeltaKind.DELETE
    )
    deleted_lines = _read_deleted_lines(
        posixpath.join(directory.path(partition_location), DELETED_LINES_FILE_NAME),
        filesystem,
    )
    return locations.add_delete_delta(
        min_write_id,
        max_write_id,
        statement_id,
        row_ids_for_lines(deleted_lines, replication_factor),
        replication_factor,
    )


def nation_delete_delta_locations(
    resource_root: str = ACIDCAT_TEST_RESOURCE_ROOT,
    replication_factor: int = DEFAULT_REPLICATION_FACTOR,
    filesystem: Optional[pyarrow.fs.FileSystem] = None,
) -> DeleteDeltaLocations:
    """
    Builds locations for every delete delta found under
    `nation_delete_deltas/`, in canonical layout order.
    """
    partition_location, filesystem = resolve_path_and_filesystem(
        posixpath.join(resource_root, NATION_DELETE_DELTAS_DIR_NAME), filesystem
    )
    directories = sorted(
        (
            directory
            for directory in (
                DeltaDirectory.parse(name)
                for name in list_subdirectory_names(partition_location, filesystem)
                if is_delta_name(name)
            )
            if directory.is_delete
        ),
        key=DeltaDirectory.sort_key,
    )
    locations = DeleteDeltaLocations.of(partition_location)
    for directory in directories:
        add_nation_delete_delta(
            locations,
            directory.min_write_id,
            directory.max_write_id,
            directory.statement_id,
            replication_factor,
            filesystem,
        )
    logger.debug(
        f"Loaded {len(locations.delete_deltas)} nation delete deltas from "
        f"{partition_location}."
    )
    return locations
