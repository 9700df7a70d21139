# Allow classes to use self-referencing Type hints in Python 3.7.
from __future__ import annotations

from typing import FrozenSet, Iterable, List, Optional

from acidcat.constants import DEFAULT_REPLICATION_FACTOR
from acidcat.exceptions import InvalidArgumentError
from acidcat.storage.model.delta_directory import DeltaDirectory
from acidcat.storage.model.types import DeltaKind


def validate_replication_factor(replication_factor: int) -> None:
    if isinstance(replication_factor, bool) or not isinstance(replication_factor, int):
        raise InvalidArgumentError(
            f"Replication factor must be an integer, got {replication_factor!r}"
        )
    if replication_factor <= 0:
        raise InvalidArgumentError(
            f"Replication factor must be positive, got {replication_factor}"
        )


def logical_row_id(line_number: int, replica: int, replication_factor: int) -> int:
    """
    Identity of one logical row: the replica index within the copies emitted
    for a zero-based base line. Stable regardless of which other rows are
    filtered out.
    """
    return line_number * replication_factor + replica


def row_ids_for_lines(
    line_numbers: Iterable[int],
    replication_factor: int,
) -> FrozenSet[int]:
    """
    Returns the identities of every replica of the given base lines, i.e.
    what a delete delta that removed those base lines covers.
    """
    validate_replication_factor(replication_factor)
    return frozenset(
        logical_row_id(line_number, replica, replication_factor)
        for line_number in line_numbers
        for replica in range(replication_factor)
    )


class DeleteDeltaLocation(dict):
    """
    A delete delta directory together with the precomputed set of logical
    row ids it removes. Row ids only identify rows under the replication
    factor they were computed with, so that factor is kept alongside them.
    """

    @staticmethod
    def of(
        path: str,
        directory: DeltaDirectory,
        covered_row_ids: Optional[Iterable[int]] = None,
        replication_factor: int = DEFAULT_REPLICATION_FACTOR,
    ) -> DeleteDeltaLocation:
        if directory.kind != DeltaKind.DELETE:
            raise InvalidArgumentError(
                f"Expected a delete delta directory, got {directory.name}"
            )
        validate_replication_factor(replication_factor)
        location = DeleteDeltaLocation()
        location["path"] = path
        location["directory"] = directory
        location["coveredRowIds"] = frozenset(covered_row_ids or ())
        location["replicationFactor"] = replication_factor
        return location

    @property
    def path(self) -> str:
        return self["path"]

    @property
    def directory(self) -> DeltaDirectory:
        return self["directory"]

    @property
    def covered_row_ids(self) -> FrozenSet[int]:
        return self["coveredRowIds"]

    @property
    def replication_factor(self) -> int:
        return self["replicationFactor"]

    def covers(self, row_id: int) -> bool:
        return row_id in self.covered_row_ids


class DeleteDeltaLocations(dict):
    """
    The delete deltas of one partition, keyed by partition location.
    """

    @staticmethod
    def of(partition_location: str) -> DeleteDeltaLocations:
        locations = DeleteDeltaLocations()
        locations["partitionLocation"] = partition_location
        locations["deleteDeltas"] = []
        return locations

    @property
    def partition_location(self) -> str:
        return self["partitionLocation"]

    @property
    def delete_deltas(self) -> List[DeleteDeltaLocation]:
        return self["deleteDeltas"]

    @property
    def directories(self) -> List[DeltaDirectory]:
        return [location.directory for location in self.delete_deltas]

    def add_delete_delta(
        self,
        min_write_id: int,
        max_write_id: int,
        statement_id: Optional[int] = 0,
        covered_row_ids: Optional[Iterable[int]] = None,
        replication_factor: int = DEFAULT_REPLICATION_FACTOR,
    ) -> DeleteDeltaLocation:
        directory = DeltaDirectory.of(
            min_write_id,
            max_write_id,
            statement_id,
            DeltaKind.DELETE,
        )
        if directory in self.directories:
            raise InvalidArgumentError(
                f"Delete delta {directory.name} was already added to "
                f"{self.partition_location}"
            )
        location = DeleteDeltaLocation.of(
            directory.path(self.partition_location),
            directory,
            covered_row_ids,
            replication_factor,
        )
        self.delete_deltas.append(location)
        return location

    def restricted_to(self, directories: Iterable[DeltaDirectory]) -> List[DeleteDeltaLocation]:
        """
        Returns the delete deltas whose directory is among `directories`,
        typically the visible set.
        """
        names = {directory.name for directory in directories}
        return [
            location
            for location in self.delete_deltas
            if location.directory.name in names
        ]
