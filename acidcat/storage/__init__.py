from acidcat.storage.model.delete_delta import (
    DeleteDeltaLocation,
    DeleteDeltaLocations,
    logical_row_id,
    row_ids_for_lines,
)
from acidcat.storage.model.delta_directory import (
    DeltaDirectory,
    base_subdir,
    bucket_file,
    delete_delta_subdir,
    delta_subdir,
    name_of,
    parse,
)
from acidcat.storage.model.row import (
    RowComparison,
    RowRecord,
    compare_rows,
    rows_from_batches,
)
from acidcat.storage.model.transaction import (
    TransactionLedger,
    WriteTransaction,
)
from acidcat.storage.model.types import DeltaKind, TransactionState
from acidcat.storage.visibility import VisibilitySet

__all__ = [
    "DeleteDeltaLocation",
    "DeleteDeltaLocations",
    "DeltaDirectory",
    "DeltaKind",
    "RowComparison",
    "RowRecord",
    "TransactionLedger",
    "TransactionState",
    "VisibilitySet",
    "WriteTransaction",
    "base_subdir",
    "bucket_file",
    "compare_rows",
    "delete_delta_subdir",
    "delta_subdir",
    "logical_row_id",
    "name_of",
    "parse",
    "row_ids_for_lines",
    "rows_from_batches",
]
