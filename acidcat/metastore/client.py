from __future__ import annotations

from typing import Callable, Dict, List

from acidcat.storage.model.types import TransactionState


class MetastoreClient:
    """
    Client interface for the remote metastore service that owns transaction
    ids and per-table write id allocation. The service must allocate write
    ids atomically and monotonically across concurrent transactions on the
    same table; clients only consume that guarantee.

    Implementations surface transport errors (including expiry of their
    externally configured timeout) unchanged. Callers must not retry.
    """

    def open_transaction(self, user: str) -> int:
        """
        Opens a new transaction on behalf of `user` and returns its id.
        """
        raise NotImplementedError("open_transaction not implemented")

    def allocate_table_write_ids(
        self,
        database: str,
        table: str,
        txn_ids: List[int],
    ) -> List[int]:
        """
        Allocates one write id of `database.table` to each transaction and
        returns the write ids in the same order as `txn_ids`.
        """
        raise NotImplementedError("allocate_table_write_ids not implemented")

    def commit_transaction(self, txn_id: int) -> None:
        raise NotImplementedError("commit_transaction not implemented")

    def abort_transaction(self, txn_id: int) -> None:
        raise NotImplementedError("abort_transaction not implemented")

    def get_write_id_states(
        self,
        database: str,
        table: str,
    ) -> Dict[int, TransactionState]:
        """
        Returns the state of the transaction owning each allocated write id
        of `database.table`.
        """
        raise NotImplementedError("get_write_id_states not implemented")

    def close(self) -> None:
        pass

    def __enter__(self) -> MetastoreClient:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()


MetastoreClientFactory = Callable[[], MetastoreClient]
