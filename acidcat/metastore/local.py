from __future__ import annotations

import logging
from typing import Dict, List, Optional

from acidcat import logs
from acidcat.constants import ACIDCAT_METASTORE_TIMEOUT_MS
from acidcat.metastore.client import MetastoreClient
from acidcat.storage.model.transaction import TransactionLedger
from acidcat.storage.model.types import TransactionState

logger = logs.configure_acidcat_logger(logging.getLogger(__name__))


class LocalMetastoreClient(MetastoreClient):
    """
    In-process metastore client backed by a TransactionLedger. Several
    clients may share one ledger to model independent connections to the
    same service.
    """

    def __init__(
        self,
        ledger: Optional[TransactionLedger] = None,
        timeout_ms: int = ACIDCAT_METASTORE_TIMEOUT_MS,
    ):
        self.ledger = ledger if ledger is not None else TransactionLedger()
        self.timeout_ms = timeout_ms
        self.closed = False

    def _check_open(self) -> None:
        if self.closed:
            raise ConnectionError("Metastore client is closed.")

    def open_transaction(self, user: str) -> int:
        self._check_open()
        return self.ledger.open(user).id

    def allocate_table_write_ids(
        self,
        database: str,
        table: str,
        txn_ids: List[int],
    ) -> List[int]:
        self._check_open()
        return [
            self.ledger.allocate_write_id(txn_id, database, table)
            for txn_id in txn_ids
        ]

    def commit_transaction(self, txn_id: int) -> None:
        self._check_open()
        self.ledger.commit(txn_id)

    def abort_transaction(self, txn_id: int) -> None:
        self._check_open()
        self.ledger.abort(txn_id)

    def get_write_id_states(
        self,
        database: str,
        table: str,
    ) -> Dict[int, TransactionState]:
        self._check_open()
        return self.ledger.write_id_states(database, table)

    def close(self) -> None:
        if not self.closed:
            logger.debug("Closing local metastore client.")
        self.closed = True
