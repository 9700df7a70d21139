import logging

import acidcat.logs  # noqa: F401
from acidcat.oracle.expected import ExpectedRowSet, expected_rows, read_base_rows
from acidcat.storage import (
    DeleteDeltaLocation,
    DeleteDeltaLocations,
    DeltaDirectory,
    DeltaKind,
    RowRecord,
    TransactionLedger,
    TransactionState,
    VisibilitySet,
    WriteTransaction,
)

acidcat.logs.configure_acidcat_logger(logging.getLogger(__name__))

__version__ = "0.1.0"


__all__ = [
    "__version__",
    "expected_rows",
    "read_base_rows",
    "DeleteDeltaLocation",
    "DeleteDeltaLocations",
    "DeltaDirectory",
    "DeltaKind",
    "ExpectedRowSet",
    "RowRecord",
    "TransactionLedger",
    "TransactionState",
    "VisibilitySet",
    "WriteTransaction",
]
