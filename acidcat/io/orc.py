from __future__ import annotations

import logging
import posixpath
from typing import Iterator, List, Optional

import pyarrow as pa
import pyarrow.fs
import pyarrow.orc as orc

from acidcat import logs
from acidcat.storage.model.row import RowRecord, rows_from_batches
from acidcat.utils.filesystem import resolve_path_and_filesystem

logger = logs.configure_acidcat_logger(logging.getLogger(__name__))


def read_orc_schema(
    path: str,
    filesystem: Optional[pyarrow.fs.FileSystem] = None,
) -> pa.Schema:
    path, filesystem = resolve_path_and_filesystem(path, filesystem)
    with filesystem.open_input_file(path) as source:
        return orc.ORCFile(source).schema


def read_orc_batches(
    path: str,
    filesystem: Optional[pyarrow.fs.FileSystem] = None,
) -> Iterator[pa.RecordBatch]:
    """
    Yields one record batch per ORC stripe until the end of the file. The
    input file stays open until the iterator is exhausted or closed.
    """
    path, filesystem = resolve_path_and_filesystem(path, filesystem)
    with filesystem.open_input_file(path) as source:
        reader = orc.ORCFile(source)
        for stripe in range(reader.nstripes):
            yield reader.read_stripe(stripe)


def read_orc_rows(
    path: str,
    schema: pa.Schema,
    filesystem: Optional[pyarrow.fs.FileSystem] = None,
) -> List[RowRecord]:
    return rows_from_batches(read_orc_batches(path, filesystem), schema)


def write_orc_table(
    path: str,
    table: pa.Table,
    filesystem: Optional[pyarrow.fs.FileSystem] = None,
) -> None:
    path, filesystem = resolve_path_and_filesystem(path, filesystem)
    filesystem.create_dir(posixpath.dirname(path), recursive=True)
    with filesystem.open_output_stream(path) as sink:
        writer = orc.ORCWriter(sink)
        try:
            writer.write(table)
        finally:
            writer.close()


def copy_orc_file(
    src_path: str,
    dest_path: str,
    filesystem: Optional[pyarrow.fs.FileSystem] = None,
) -> int:
    """
    Copies every batch of the ORC file at `src_path` into a new ORC file at
    `dest_path` that has the source schema. The reader and writer are both
    closed on every exit path, including a failure partway through the copy.

    Returns:
        The number of rows copied.
    """
    src_path, filesystem = resolve_path_and_filesystem(src_path, filesystem)
    dest_path, filesystem = resolve_path_and_filesystem(dest_path, filesystem)
    filesystem.create_dir(posixpath.dirname(dest_path), recursive=True)
    row_count = 0
    with filesystem.open_input_file(src_path) as source:
        reader = orc.ORCFile(source)
        with filesystem.open_output_stream(dest_path) as sink:
            writer = orc.ORCWriter(sink)
            try:
                for stripe in range(reader.nstripes):
                    batch = reader.read_stripe(stripe)
                    writer.write(pa.Table.from_batches([batch]))
                    row_count += batch.num_rows
                if not reader.nstripes:
                    # keep the source schema even when there is nothing to copy
                    writer.write(reader.schema.empty_table())
            finally:
                writer.close()
    logger.debug(f"Copied {row_count} rows from {src_path} to {dest_path}.")
    return row_count
