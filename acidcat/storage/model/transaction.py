from __future__ import annotations

import logging
import posixpath
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

import msgpack
import pyarrow.fs

from acidcat import logs
from acidcat.constants import TXN_LOG_FILE_NAME
from acidcat.exceptions import (
    InvalidArgumentError,
    InvalidStateError,
    TransactionNotFoundError,
)
from acidcat.storage.model.types import TransactionState
from acidcat.utils.filesystem import resolve_path_and_filesystem

logger = logs.configure_acidcat_logger(logging.getLogger(__name__))

TableKey = Tuple[str, str]


def _table_key(database: str, table: str) -> TableKey:
    if not database or not table:
        raise InvalidArgumentError(
            f"Database and table names are required, got `{database}`.`{table}`"
        )
    # "." separates database from table in qualified names
    if "." in database or "." in table:
        raise InvalidArgumentError(
            f"Database and table names must not contain `.`, got "
            f"`{database}`.`{table}`"
        )
    return database.lower(), table.lower()


def _qualified_name(table_key: TableKey) -> str:
    return ".".join(table_key)


class WriteTransaction(dict):
    """
    One write transaction's life cycle. A transaction starts OPEN, may own at
    most one write id per table while OPEN, and moves exactly once to either
    COMMITTED or ABORTED. Write ids are never retracted: aborting leaves every
    write id owned by the transaction permanently consumed and every delta
    written under it permanently invisible.
    """

    @staticmethod
    def of(txn_id: int, user: str) -> WriteTransaction:
        transaction = WriteTransaction()
        transaction["id"] = txn_id
        transaction["user"] = user
        transaction["state"] = TransactionState.OPEN
        transaction["writeIds"] = {}
        return transaction

    @property
    def id(self) -> int:
        return self["id"]

    @property
    def user(self) -> str:
        return self["user"]

    @property
    def state(self) -> TransactionState:
        return TransactionState(self["state"])

    @property
    def write_ids(self) -> Dict[str, int]:
        """
        Returns the write ids owned by this transaction, keyed by qualified
        `database.table` name.
        """
        return self["writeIds"]

    def write_id_for(self, database: str, table: str) -> Optional[int]:
        return self.write_ids.get(_qualified_name(_table_key(database, table)))

    def _require_open(self, operation: str) -> None:
        if self.state != TransactionState.OPEN:
            raise InvalidStateError(
                f"Cannot {operation} transaction {self.id} in state "
                f"{self.state.value}."
            )

    def allocate_write_id(self, database: str, table: str, write_id: int) -> int:
        """
        Records `write_id` as this transaction's write id for the given
        table. Raises InvalidStateError once the transaction is terminal.
        """
        self._require_open("allocate a write id for")
        qualified_name = _qualified_name(_table_key(database, table))
        existing = self.write_ids.get(qualified_name)
        if existing is not None and existing != write_id:
            raise InvalidStateError(
                f"Transaction {self.id} already owns write id {existing} "
                f"for table {qualified_name}."
            )
        self.write_ids[qualified_name] = write_id
        return write_id

    def commit(self) -> None:
        self._require_open("commit")
        self["state"] = TransactionState.COMMITTED

    def abort(self) -> None:
        self._require_open("abort")
        self["state"] = TransactionState.ABORTED


class TransactionLedger:
    """
    Local registry of write transactions and per-table write id allocation.
    Transaction ids and write ids are both monotonically increasing and never
    reused, and each write id is owned by exactly one transaction.
    """

    def __init__(self):
        self._transactions: Dict[int, WriteTransaction] = {}
        self._next_txn_id = 1
        self._next_write_ids: Dict[TableKey, int] = defaultdict(lambda: 1)
        self._write_id_owners: Dict[TableKey, Dict[int, int]] = defaultdict(dict)

    def open(self, user: str) -> WriteTransaction:
        transaction = WriteTransaction.of(self._next_txn_id, user)
        self._transactions[transaction.id] = transaction
        self._next_txn_id += 1
        logger.debug(f"Opened transaction {transaction.id} for user `{user}`.")
        return transaction

    def get(self, txn_id: int) -> WriteTransaction:
        transaction = self._transactions.get(txn_id)
        if transaction is None:
            raise TransactionNotFoundError(f"Transaction {txn_id} not found.")
        return transaction

    def transactions(self) -> List[WriteTransaction]:
        return [self._transactions[txn_id] for txn_id in sorted(self._transactions)]

    def allocate_write_id(self, txn_id: int, database: str, table: str) -> int:
        """
        Allocates the next write id of `database.table` to the given open
        transaction. A transaction that already owns a write id for the
        table gets that same write id back.
        """
        transaction = self.get(txn_id)
        existing = transaction.write_id_for(database, table)
        if existing is not None:
            # still raises if the transaction is no longer open
            return transaction.allocate_write_id(database, table, existing)
        key = _table_key(database, table)
        write_id = self._next_write_ids[key]
        transaction.allocate_write_id(database, table, write_id)
        self._next_write_ids[key] = write_id + 1
        self._write_id_owners[key][write_id] = transaction.id
        logger.debug(
            f"Allocated write id {write_id} on {_qualified_name(key)} to "
            f"transaction {transaction.id}."
        )
        return write_id

    def commit(self, txn_id: int) -> None:
        self.get(txn_id).commit()
        logger.debug(f"Committed transaction {txn_id}.")

    def abort(self, txn_id: int) -> None:
        self.get(txn_id).abort()
        logger.info(f"Aborted transaction {txn_id}.")

    def owner_of(self, database: str, table: str, write_id: int) -> Optional[int]:
        return self._write_id_owners[_table_key(database, table)].get(write_id)

    def write_id_states(self, database: str, table: str) -> Dict[int, TransactionState]:
        """
        Returns a snapshot mapping every allocated write id of `database.table`
        to the current state of its owning transaction.
        """
        owners = self._write_id_owners.get(_table_key(database, table), {})
        return {
            write_id: self._transactions[txn_id].state
            for write_id, txn_id in owners.items()
        }

    def to_serializable(self) -> dict:
        return {
            "transactions": [
                {
                    "id": txn.id,
                    "user": txn.user,
                    "state": txn.state.value,
                    "writeIds": dict(txn.write_ids),
                }
                for txn in self.transactions()
            ],
            "nextTxnId": self._next_txn_id,
            "nextWriteIds": {
                _qualified_name(key): next_write_id
                for key, next_write_id in self._next_write_ids.items()
            },
        }

    @staticmethod
    def from_serializable(serialized: dict) -> TransactionLedger:
        ledger = TransactionLedger()
        for txn in serialized["transactions"]:
            transaction = WriteTransaction.of(txn["id"], txn["user"])
            transaction["state"] = TransactionState(txn["state"])
            transaction["writeIds"] = dict(txn["writeIds"])
            ledger._transactions[transaction.id] = transaction
            for qualified_name, write_id in transaction.write_ids.items():
                key = _table_key(*qualified_name.split(".", 1))
                ledger._write_id_owners[key][write_id] = transaction.id
        ledger._next_txn_id = serialized["nextTxnId"]
        for qualified_name, next_write_id in serialized["nextWriteIds"].items():
            key = _table_key(*qualified_name.split(".", 1))
            ledger._next_write_ids[key] = next_write_id
        return ledger

    def write(
        self,
        log_dir: str,
        filesystem: Optional[pyarrow.fs.FileSystem] = None,
    ) -> str:
        """
        Writes this ledger as a msgpack transaction log under `log_dir` and
        returns the path written.
        """
        log_dir, filesystem = resolve_path_and_filesystem(log_dir, filesystem)
        filesystem.create_dir(log_dir, recursive=True)
        path = posixpath.join(log_dir, TXN_LOG_FILE_NAME)
        with filesystem.open_output_stream(path) as file:
            file.write(msgpack.dumps(self.to_serializable()))
        logger.debug(f"Wrote transaction ledger to {path}.")
        return path

    @staticmethod
    def read(
        log_dir: str,
        filesystem: Optional[pyarrow.fs.FileSystem] = None,
    ) -> TransactionLedger:
        """
        Reads a transaction log previously written by `write`.
        """
        log_dir, filesystem = resolve_path_and_filesystem(log_dir, filesystem)
        path = posixpath.join(log_dir, TXN_LOG_FILE_NAME)
        with filesystem.open_input_stream(path) as file:
            binary = file.readall()
        return TransactionLedger.from_serializable(
            msgpack.loads(binary, strict_map_key=False)
        )
