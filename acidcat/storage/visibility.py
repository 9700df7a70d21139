"""
Reader-side visibility of delta directories.

A directory is visible under a snapshot iff every write id in its range is
owned by a transaction that is COMMITTED in that snapshot. Write ids owned by
OPEN or ABORTED transactions, and write ids the snapshot has never seen,
hide the directory. Unknown write ids are not an error because a reader may
race with an allocation.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping

from acidcat import logs
from acidcat.storage.model.delta_directory import DeltaDirectory, is_delta_name
from acidcat.storage.model.types import TransactionState

logger = logs.configure_acidcat_logger(logging.getLogger(__name__))


def is_visible(
    directory: DeltaDirectory,
    write_id_states: Mapping[int, TransactionState],
) -> bool:
    # a range wider than the snapshot must reference an unknown write id
    if directory.max_write_id - directory.min_write_id + 1 > len(write_id_states):
        return False
    return all(
        write_id_states.get(write_id) == TransactionState.COMMITTED
        for write_id in directory.write_ids()
    )


def visible(
    directories: Iterable[DeltaDirectory],
    write_id_states: Mapping[int, TransactionState],
) -> List[DeltaDirectory]:
    """
    Returns the distinct visible directories in canonical layout order.
    """
    distinct = {directory.name: directory for directory in directories}
    return sorted(
        (d for d in distinct.values() if is_visible(d, write_id_states)),
        key=DeltaDirectory.sort_key,
    )


class VisibilitySet:
    """
    A reader snapshot of write id states for one table.
    """

    def __init__(self, write_id_states: Mapping[int, TransactionState]):
        self._write_id_states: Dict[int, TransactionState] = {
            write_id: TransactionState(state)
            for write_id, state in write_id_states.items()
        }

    @property
    def write_id_states(self) -> Dict[int, TransactionState]:
        return dict(self._write_id_states)

    def is_visible(self, directory: DeltaDirectory) -> bool:
        return is_visible(directory, self._write_id_states)

    def visible(self, directories: Iterable[DeltaDirectory]) -> List[DeltaDirectory]:
        return visible(directories, self._write_id_states)

    def invisible(self, directories: Iterable[DeltaDirectory]) -> List[DeltaDirectory]:
        distinct = {directory.name: directory for directory in directories}
        return sorted(
            (d for d in distinct.values() if not self.is_visible(d)),
            key=DeltaDirectory.sort_key,
        )

    def visible_names(self, listing: Iterable[str]) -> List[str]:
        """
        Filters a table directory listing down to the names of visible delta
        and delete delta directories. Entries that are not delta directories
        (base directories, hidden or temporary entries) are skipped; entries
        that carry a delta prefix but are malformed raise MalformedNameError.
        """
        directories = [
            DeltaDirectory.parse(name) for name in listing if is_delta_name(name)
        ]
        result = self.visible(directories)
        logger.debug(
            f"{len(result)} of {len(directories)} delta directories visible."
        )
        return [directory.name for directory in result]
