import os

import pytest

from acidcat.exceptions import InvalidArgumentError, TransactionNotFoundError
from acidcat.harness import simulate_aborted_hive_transaction
from acidcat.io.orc import read_orc_rows
from acidcat.metastore.local import LocalMetastoreClient
from acidcat.oracle.nation import NATION_SCHEMA, expected_nation_rows, nation_rows
from acidcat.storage.model.delta_directory import DeltaDirectory
from acidcat.storage.model.transaction import TransactionLedger
from acidcat.storage.visibility import VisibilitySet
from acidcat.tests.test_utils.orc import table_from_base_rows, write_delta_bucket
from acidcat.utils.filesystem import list_subdirectory_names

DATABASE = "default"
TABLE = "nation"


class RecordingClientFactory:
    def __init__(self, ledger: TransactionLedger):
        self.ledger = ledger
        self.clients = []

    def __call__(self) -> LocalMetastoreClient:
        client = LocalMetastoreClient(self.ledger)
        self.clients.append(client)
        return client


def _commit_write(ledger: TransactionLedger) -> int:
    txn_id = ledger.open("test").id
    write_id = ledger.allocate_write_id(txn_id, DATABASE, TABLE)
    ledger.commit(txn_id)
    return write_id


@pytest.fixture
def warehouse(temp_dir):
    """
    A nation table with committed deltas 1 and 2, plus a bucket file left
    at delta 3 by a writer that never reached the metastore.
    """
    ledger = TransactionLedger()
    table_location = os.path.join(temp_dir, TABLE)
    rows = nation_rows()
    write_delta_bucket(table_location, _commit_write(ledger), table_from_base_rows(rows))
    write_delta_bucket(
        table_location, _commit_write(ledger), table_from_base_rows(rows[:1])
    )
    write_delta_bucket(table_location, 3, table_from_base_rows(rows[:1]))
    return temp_dir, table_location, ledger


def test_aborted_delta_is_invisible(warehouse, local_fs):
    warehouse_dir, table_location, ledger = warehouse
    factory = RecordingClientFactory(ledger)

    aborted = simulate_aborted_hive_transaction(
        DATABASE,
        TABLE,
        factory,
        filesystem=local_fs,
        warehouse_dir=warehouse_dir,
    )

    assert aborted.write_id == 3
    assert aborted.directory == DeltaDirectory.of(3, 3)
    assert all(client.closed for client in factory.clients)

    # the orphaned delta physically holds a full copy of delta 1
    assert len(read_orc_rows(aborted.cloned_paths[-1], NATION_SCHEMA, local_fs)) == 25

    visibility = VisibilitySet(ledger.write_id_states(DATABASE, TABLE))
    assert visibility.visible([aborted.directory]) == []
    listing = list_subdirectory_names(table_location, local_fs)
    assert visibility.visible_names(listing) == [
        "delta_0000001_0000001_0000",
        "delta_0000002_0000002_0000",
    ]


def test_visible_deltas_match_expected_rows(warehouse, local_fs):
    warehouse_dir, table_location, ledger = warehouse
    simulate_aborted_hive_transaction(
        DATABASE,
        TABLE,
        RecordingClientFactory(ledger),
        filesystem=local_fs,
        warehouse_dir=warehouse_dir,
    )
    visibility = VisibilitySet(ledger.write_id_states(DATABASE, TABLE))
    actual = []
    for name in visibility.visible_names(list_subdirectory_names(table_location, local_fs)):
        actual.extend(
            read_orc_rows(
                DeltaDirectory.parse(name).bucket_path(table_location),
                NATION_SCHEMA,
                local_fs,
            )
        )
    # committed delta 2 now holds a clone of delta 1 as well
    assert expected_nation_rows(replication_factor=2).matches(actual)


def test_missing_target_bucket(temp_dir, local_fs):
    ledger = TransactionLedger()
    table_location = os.path.join(temp_dir, TABLE)
    write_delta_bucket(
        table_location, _commit_write(ledger), table_from_base_rows(nation_rows())
    )
    with pytest.raises(FileNotFoundError):
        simulate_aborted_hive_transaction(
            DATABASE,
            TABLE,
            RecordingClientFactory(ledger),
            filesystem=local_fs,
            warehouse_dir=temp_dir,
        )


def test_missing_source_bucket_keeps_targets(temp_dir, local_fs):
    ledger = TransactionLedger()
    table_location = os.path.join(temp_dir, TABLE)
    table = table_from_base_rows(nation_rows()[:1])
    _commit_write(ledger)
    targets = [
        write_delta_bucket(table_location, _commit_write(ledger), table),
        write_delta_bucket(table_location, 3, table),
    ]
    with pytest.raises(FileNotFoundError):
        simulate_aborted_hive_transaction(
            DATABASE,
            TABLE,
            RecordingClientFactory(ledger),
            filesystem=local_fs,
            warehouse_dir=temp_dir,
        )
    for target in targets:
        assert len(read_orc_rows(target, NATION_SCHEMA, local_fs)) == 1


def test_missing_later_target_keeps_earlier_targets(temp_dir, local_fs):
    ledger = TransactionLedger()
    table_location = os.path.join(temp_dir, TABLE)
    table = table_from_base_rows(nation_rows()[:1])
    write_delta_bucket(table_location, _commit_write(ledger), table)
    target = write_delta_bucket(table_location, _commit_write(ledger), table)
    with pytest.raises(FileNotFoundError):
        simulate_aborted_hive_transaction(
            DATABASE,
            TABLE,
            RecordingClientFactory(ledger),
            filesystem=local_fs,
            warehouse_dir=temp_dir,
        )
    assert len(read_orc_rows(target, NATION_SCHEMA, local_fs)) == 1


def test_aborted_write_id_must_follow_source(temp_dir, local_fs):
    factory = RecordingClientFactory(TransactionLedger())
    with pytest.raises(InvalidArgumentError):
        simulate_aborted_hive_transaction(
            DATABASE,
            TABLE,
            factory,
            filesystem=local_fs,
            warehouse_dir=temp_dir,
        )
    assert factory.clients[0].closed


def test_metastore_errors_propagate(temp_dir, local_fs):
    class FailingClient(LocalMetastoreClient):
        def abort_transaction(self, txn_id):
            raise TransactionNotFoundError(f"Transaction {txn_id} not found.")

    clients = []

    def factory():
        clients.append(FailingClient())
        return clients[-1]

    with pytest.raises(TransactionNotFoundError):
        simulate_aborted_hive_transaction(
            DATABASE,
            TABLE,
            factory,
            filesystem=local_fs,
            warehouse_dir=temp_dir,
        )
    assert clients[0].closed
