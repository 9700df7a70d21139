import pytest

from acidcat.exceptions import InvalidArgumentError
from acidcat.storage.model.delete_delta import (
    DeleteDeltaLocation,
    DeleteDeltaLocations,
    logical_row_id,
    row_ids_for_lines,
)
from acidcat.storage.model.delta_directory import DeltaDirectory
from acidcat.storage.model.types import DeltaKind


def test_logical_row_id():
    assert logical_row_id(0, 0, 1000) == 0
    assert logical_row_id(0, 999, 1000) == 999
    assert logical_row_id(5, 3, 1000) == 5003


def test_row_ids_for_lines():
    assert row_ids_for_lines([1, 3], 2) == frozenset({2, 3, 6, 7})
    assert row_ids_for_lines([], 1000) == frozenset()
    with pytest.raises(InvalidArgumentError):
        row_ids_for_lines([1], 0)


def test_location_requires_delete_delta():
    with pytest.raises(InvalidArgumentError):
        DeleteDeltaLocation.of("/t/delta_0000001_0000001_0000", DeltaDirectory.of(1, 1))


def test_location_covers():
    directory = DeltaDirectory.of(3, 3, 0, DeltaKind.DELETE)
    location = DeleteDeltaLocation.of("/t/" + directory.name, directory, [4, 5])
    assert location.covers(4)
    assert not location.covers(6)
    assert location.directory == directory
    assert location.replication_factor == 1000


def test_location_records_replication_factor():
    directory = DeltaDirectory.of(3, 3, 0, DeltaKind.DELETE)
    location = DeleteDeltaLocation.of(
        "/t/" + directory.name, directory, row_ids_for_lines([1], 10), 10
    )
    assert location.replication_factor == 10
    assert location.covered_row_ids == frozenset(range(10, 20))
    for replication_factor in (0, -3, True, 2.5):
        with pytest.raises(InvalidArgumentError):
            DeleteDeltaLocation.of("/t/" + directory.name, directory, [], replication_factor)


class TestDeleteDeltaLocations:
    def test_add_delete_delta(self):
        locations = DeleteDeltaLocations.of("/warehouse/nation")
        location = locations.add_delete_delta(3, 3, 0, [1])
        assert location.path == "/warehouse/nation/delete_delta_0000003_0000003_0000"
        assert location.directory.is_delete
        assert locations.delete_deltas == [location]
        assert locations.directories == [DeltaDirectory.of(3, 3, 0, DeltaKind.DELETE)]

    def test_duplicate_rejected(self):
        locations = DeleteDeltaLocations.of("/warehouse/nation")
        locations.add_delete_delta(3, 3)
        with pytest.raises(InvalidArgumentError):
            locations.add_delete_delta(3, 3)

    def test_restricted_to(self):
        locations = DeleteDeltaLocations.of("/warehouse/nation")
        third = locations.add_delete_delta(3, 3)
        locations.add_delete_delta(4, 4)
        assert locations.restricted_to([third.directory]) == [third]
        assert locations.restricted_to([]) == []
