# Allow classes to use self-referencing Type hints in Python 3.7.
from __future__ import annotations

import posixpath
import re
from typing import Iterator, Optional, Tuple

from acidcat.constants import (
    BASE_PREFIX,
    BUCKET_ID_WIDTH,
    BUCKET_PREFIX,
    DELETE_DELTA_PREFIX,
    DELTA_PREFIX,
    SIGNED_INT64_MAX_VALUE,
    STATEMENT_ID_WIDTH,
    WRITE_ID_WIDTH,
)
from acidcat.exceptions import InvalidRangeError, MalformedNameError
from acidcat.storage.model.types import DeltaKind

_KIND_TO_PREFIX = {
    DeltaKind.INSERT: DELTA_PREFIX,
    DeltaKind.DELETE: DELETE_DELTA_PREFIX,
}

_DELTA_NAME_PATTERN = re.compile(
    rf"^(?P<prefix>{DELETE_DELTA_PREFIX}|{DELTA_PREFIX})"
    rf"(?P<min>[0-9]{{{WRITE_ID_WIDTH},}})_"
    rf"(?P<max>[0-9]{{{WRITE_ID_WIDTH},}})"
    rf"(?:_(?P<stmt>[0-9]{{{STATEMENT_ID_WIDTH},}}))?$"
)

_BUCKET_NAME_PATTERN = re.compile(
    rf"^{BUCKET_PREFIX}(?P<bucket>[0-9]{{{BUCKET_ID_WIDTH},}})$"
)

# Legacy (statement-less) deltas sort ahead of every numbered statement.
_NO_STATEMENT_ORDINAL = -1
_KIND_ORDINAL = {
    DeltaKind.INSERT: 0,
    DeltaKind.DELETE: 1,
}


def _validate_id(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidRangeError(f"{name} must be an integer, got {value!r}")
    if value < 0 or value > SIGNED_INT64_MAX_VALUE:
        raise InvalidRangeError(
            f"{name} must be a non-negative 64-bit integer, got {value}"
        )


def validate_range(
    min_write_id: int,
    max_write_id: int,
    statement_id: Optional[int] = None,
) -> None:
    """
    Raises InvalidRangeError unless the write ids (and statement id, if
    given) are non-negative integers with min_write_id <= max_write_id.
    Ranges are never normalized.
    """
    _validate_id("min_write_id", min_write_id)
    _validate_id("max_write_id", max_write_id)
    if statement_id is not None:
        _validate_id("statement_id", statement_id)
    if min_write_id > max_write_id:
        raise InvalidRangeError(
            f"min_write_id {min_write_id} is greater than "
            f"max_write_id {max_write_id}"
        )


def name_of(
    min_write_id: int,
    max_write_id: int,
    statement_id: Optional[int],
    kind: DeltaKind,
) -> str:
    """
    Returns the canonical directory name of a delta or delete delta, e.g.
    `delta_0000001_0000001_0000`. A statement id of None produces the legacy
    two-field form without a statement suffix.
    """
    validate_range(min_write_id, max_write_id, statement_id)
    prefix = _KIND_TO_PREFIX[DeltaKind(kind)]
    name = (
        f"{prefix}{min_write_id:0{WRITE_ID_WIDTH}d}_"
        f"{max_write_id:0{WRITE_ID_WIDTH}d}"
    )
    if statement_id is not None:
        name = f"{name}_{statement_id:0{STATEMENT_ID_WIDTH}d}"
    return name


def delta_subdir(
    min_write_id: int,
    max_write_id: int,
    statement_id: Optional[int] = None,
) -> str:
    return name_of(min_write_id, max_write_id, statement_id, DeltaKind.INSERT)


def delete_delta_subdir(
    min_write_id: int,
    max_write_id: int,
    statement_id: Optional[int] = None,
) -> str:
    return name_of(min_write_id, max_write_id, statement_id, DeltaKind.DELETE)


def base_subdir(write_id: int) -> str:
    _validate_id("write_id", write_id)
    return f"{BASE_PREFIX}{write_id:0{WRITE_ID_WIDTH}d}"


def bucket_file(bucket_id: int) -> str:
    _validate_id("bucket_id", bucket_id)
    return f"{BUCKET_PREFIX}{bucket_id:0{BUCKET_ID_WIDTH}d}"


def parse_bucket_id(file_name: str) -> int:
    match = _BUCKET_NAME_PATTERN.match(file_name)
    if not match or bucket_file(int(match.group("bucket"))) != file_name:
        raise MalformedNameError(f"Not a bucket file name: `{file_name}`")
    return int(match.group("bucket"))


def is_delta_name(name: str) -> bool:
    return name.startswith(DELTA_PREFIX) or name.startswith(DELETE_DELTA_PREFIX)


def parse(name: str) -> Tuple[int, int, Optional[int], DeltaKind]:
    """
    Inverse of `name_of`. Returns (min_write_id, max_write_id, statement_id,
    kind) for a canonical delta or delete delta directory name.

    Raises MalformedNameError if the name does not match the layout,
    including non-canonical zero padding, and InvalidRangeError if the
    encoded range is inverted.
    """
    match = _DELTA_NAME_PATTERN.match(name) if isinstance(name, str) else None
    if not match:
        raise MalformedNameError(f"Not a delta directory name: `{name}`")
    kind = (
        DeltaKind.DELETE
        if match.group("prefix") == DELETE_DELTA_PREFIX
        else DeltaKind.INSERT
    )
    min_write_id = int(match.group("min"))
    max_write_id = int(match.group("max"))
    stmt = match.group("stmt")
    statement_id = None if stmt is None else int(stmt)
    if name_of(min_write_id, max_write_id, statement_id, kind) != name:
        raise MalformedNameError(
            f"Delta directory name `{name}` is not zero-padded canonically"
        )
    return min_write_id, max_write_id, statement_id, kind


class DeltaDirectory(dict):
    """
    A delta or delete delta directory identified by its inclusive write id
    range, statement id, and kind. Two directories with the same identifying
    tuple are equal and share the same canonical name.
    """

    @staticmethod
    def of(
        min_write_id: int,
        max_write_id: int,
        statement_id: Optional[int] = 0,
        kind: DeltaKind = DeltaKind.INSERT,
    ) -> DeltaDirectory:
        validate_range(min_write_id, max_write_id, statement_id)
        directory = DeltaDirectory()
        directory["minWriteId"] = min_write_id
        directory["maxWriteId"] = max_write_id
        directory["statementId"] = statement_id
        directory["kind"] = DeltaKind(kind)
        return directory

    @staticmethod
    def parse(name: str) -> DeltaDirectory:
        return DeltaDirectory.of(*parse(name))

    @property
    def min_write_id(self) -> int:
        return self["minWriteId"]

    @property
    def max_write_id(self) -> int:
        return self["maxWriteId"]

    @property
    def statement_id(self) -> Optional[int]:
        return self.get("statementId")

    @property
    def kind(self) -> DeltaKind:
        return DeltaKind(self["kind"])

    @property
    def is_delete(self) -> bool:
        return self.kind == DeltaKind.DELETE

    @property
    def name(self) -> str:
        return name_of(
            self.min_write_id,
            self.max_write_id,
            self.statement_id,
            self.kind,
        )

    def canonical_string(self) -> str:
        """
        Returns a unique string for this directory that can be used for
        equality checks (i.e. two directories are equal if they have the same
        canonical string).
        """
        return self.name

    def sort_key(self) -> Tuple[int, int, int, int]:
        """
        Orders directories by ascending min write id, then descending max
        write id so that wider ranges precede the ranges they cover, then
        insert deltas before delete deltas, then ascending statement id.
        """
        statement_id = self.statement_id
        return (
            self.min_write_id,
            -self.max_write_id,
            _KIND_ORDINAL[self.kind],
            _NO_STATEMENT_ORDINAL if statement_id is None else statement_id,
        )

    def contains(self, write_id: int) -> bool:
        return self.min_write_id <= write_id <= self.max_write_id

    def write_ids(self) -> Iterator[int]:
        return iter(range(self.min_write_id, self.max_write_id + 1))

    def path(self, partition_location: str) -> str:
        return posixpath.join(partition_location, self.name)

    def bucket_path(self, partition_location: str, bucket_id: int = 0) -> str:
        return posixpath.join(self.path(partition_location), bucket_file(bucket_id))

    def __hash__(self):
        return hash(self.sort_key())

    def __repr__(self) -> str:
        return f"DeltaDirectory({self.name})"
