"""
Fault injection for ACID tables: leaves behind an orphaned delta that belongs
to an aborted transaction but physically contains valid data, so that a
reader's visibility filtering can be verified.
"""
from __future__ import annotations

import logging
import posixpath
from typing import List, NamedTuple, Optional

import pyarrow.fs

from acidcat import logs
from acidcat.constants import ACIDCAT_METASTORE_USER, ACIDCAT_WAREHOUSE_DIR
from acidcat.exceptions import InvalidArgumentError
from acidcat.io.orc import copy_orc_file
from acidcat.metastore.client import MetastoreClientFactory
from acidcat.storage.model.delta_directory import DeltaDirectory
from acidcat.utils.filesystem import (
    delete_file,
    get_file_info,
    resolve_path_and_filesystem,
)

logger = logs.configure_acidcat_logger(logging.getLogger(__name__))


class AbortedTransaction(NamedTuple):
    txn_id: int
    write_id: int
    # the orphaned delta left behind by the abort
    directory: DeltaDirectory
    cloned_paths: List[str]


def simulate_aborted_hive_transaction(
    database: str,
    table_name: str,
    metastore_client_factory: MetastoreClientFactory,
    filesystem: Optional[pyarrow.fs.FileSystem] = None,
    warehouse_dir: str = ACIDCAT_WAREHOUSE_DIR,
    source_write_id: int = 1,
    bucket_id: int = 0,
    user: str = ACIDCAT_METASTORE_USER,
) -> AbortedTransaction:
    """
    Simulates an aborted transaction that leaves behind a delta directory
    with data in it.

    Opens a transaction, allocates it the next write id N of the table, and
    aborts it. Then, for every write id in (source_write_id, N], replaces that
    delta's bucket file with a copy of the source delta's bucket file. The
    committed deltas in that range keep valid content, and delta N (now
    owned by an aborted transaction) holds cloned data a correct reader must
    ignore.

    The source and every target bucket file must already exist: a missing
    one surfaces as FileNotFoundError before any file is deleted. Metastore and filesystem errors propagate
    unchanged, and the metastore client is closed on every exit path.
    """
    table_location = posixpath.join(warehouse_dir, table_name)
    table_location, filesystem = resolve_path_and_filesystem(
        table_location, filesystem
    )
    with metastore_client_factory() as client:
        txn_id = client.open_transaction(user)
        write_id = client.allocate_table_write_ids(database, table_name, [txn_id])[0]
        client.abort_transaction(txn_id)
    logger.info(
        f"Aborted transaction {txn_id} holding write id {write_id} on "
        f"{database}.{table_name}."
    )
    if write_id <= source_write_id:
        raise InvalidArgumentError(
            f"Aborted write id {write_id} does not follow source write id "
            f"{source_write_id}"
        )

    source_path = DeltaDirectory.of(source_write_id, source_write_id).bucket_path(
        table_location, bucket_id
    )
    target_paths = [
        DeltaDirectory.of(target_write_id, target_write_id).bucket_path(
            table_location, bucket_id
        )
        for target_write_id in range(source_write_id + 1, write_id + 1)
    ]
    # a missing source or target must fail before any target is deleted
    for path in [source_path] + target_paths:
        get_file_info(path, filesystem)
    for target_path in target_paths:
        delete_file(target_path, filesystem)
    for target_path in target_paths:
        copy_orc_file(source_path, target_path, filesystem)

    return AbortedTransaction(
        txn_id,
        write_id,
        DeltaDirectory.of(write_id, write_id),
        target_paths,
    )
