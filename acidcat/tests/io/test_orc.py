import os

import pyarrow as pa
import pytest

from acidcat.exceptions import ValidationError
from acidcat.io.orc import (
    copy_orc_file,
    read_orc_batches,
    read_orc_rows,
    read_orc_schema,
    write_orc_table,
)
from acidcat.oracle.nation import NATION_SCHEMA, nation_rows
from acidcat.storage.model.row import RowRecord
from acidcat.tests.test_utils.orc import table_from_base_rows


@pytest.fixture
def nation_table():
    return table_from_base_rows(nation_rows())


def test_write_and_read(temp_dir, local_fs, nation_table):
    path = os.path.join(temp_dir, "delta_0000001_0000001_0000", "bucket_00000")
    write_orc_table(path, nation_table, local_fs)
    assert read_orc_schema(path, local_fs) == NATION_SCHEMA
    rows = read_orc_rows(path, NATION_SCHEMA, local_fs)
    assert len(rows) == 25
    assert rows[1][:2] == (1, "ARGENTINA")


def test_copy(temp_dir, local_fs, nation_table):
    src = os.path.join(temp_dir, "src", "bucket_00000")
    dest = os.path.join(temp_dir, "dest", "bucket_00000")
    write_orc_table(src, nation_table, local_fs)
    assert copy_orc_file(src, dest, local_fs) == 25
    assert read_orc_schema(dest, local_fs) == NATION_SCHEMA
    assert read_orc_rows(dest, NATION_SCHEMA, local_fs) == read_orc_rows(
        src, NATION_SCHEMA, local_fs
    )


def test_copy_twice_from_same_source(temp_dir, local_fs, nation_table):
    src = os.path.join(temp_dir, "src", "bucket_00000")
    write_orc_table(src, nation_table, local_fs)
    for name in ("first", "second"):
        dest = os.path.join(temp_dir, name, "bucket_00000")
        assert copy_orc_file(src, dest, local_fs) == 25
        assert len(read_orc_rows(dest, NATION_SCHEMA, local_fs)) == 25


def test_copy_empty_file_keeps_schema(temp_dir, local_fs):
    src = os.path.join(temp_dir, "src", "bucket_00000")
    dest = os.path.join(temp_dir, "dest", "bucket_00000")
    write_orc_table(src, NATION_SCHEMA.empty_table(), local_fs)
    assert copy_orc_file(src, dest, local_fs) == 0
    assert read_orc_schema(dest, local_fs) == NATION_SCHEMA
    assert read_orc_rows(dest, NATION_SCHEMA, local_fs) == []


def test_read_batches_checks_columns(temp_dir, local_fs):
    path = os.path.join(temp_dir, "bucket_00000")
    write_orc_table(path, pa.table({"n_nationkey": pa.array([1], pa.int32())}), local_fs)
    assert sum(batch.num_rows for batch in read_orc_batches(path, local_fs)) == 1
    with pytest.raises(ValidationError):
        read_orc_rows(path, NATION_SCHEMA, local_fs)


def test_copy_missing_source(temp_dir, local_fs):
    with pytest.raises(FileNotFoundError):
        copy_orc_file(
            os.path.join(temp_dir, "missing"),
            os.path.join(temp_dir, "dest", "bucket_00000"),
            local_fs,
        )


def test_rows_are_records(temp_dir, local_fs, nation_table):
    path = os.path.join(temp_dir, "bucket_00000")
    write_orc_table(path, nation_table, local_fs)
    assert all(isinstance(row, RowRecord) for row in read_orc_rows(path, NATION_SCHEMA, local_fs))
