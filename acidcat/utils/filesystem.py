from __future__ import annotations

import pathlib
import posixpath
from typing import List, Optional, Tuple, Union

import pyarrow
from pyarrow.fs import (
    _resolve_filesystem_and_path,
    FileInfo,
    FileSelector,
    FileSystem,
    FileType,
)


def resolve_path_and_filesystem(
    path: Union[str, pathlib.Path],
    filesystem: Optional[pyarrow.fs.FileSystem] = None,
) -> Tuple[str, pyarrow.fs.FileSystem]:
    """
    Resolves and normalizes the provided path, infers a filesystem from the
    path or validates the provided filesystem against the path.

    Args:
        path: A single file/directory path or URI.
        filesystem: The filesystem implementation that should be used for
            this path. If None, a filesystem will be inferred from the path.
    """
    if isinstance(path, pathlib.Path):
        path = str(path)
    if not isinstance(path, str) or not path:
        raise ValueError(f"Expected `path` to be a non-empty `str`, but got `{path}`.")
    if filesystem is not None and not isinstance(filesystem, FileSystem):
        raise TypeError(
            f"The filesystem passed must conform to pyarrow.fs.FileSystem. "
            f"The provided filesystem was: {filesystem}"
        )
    resolved_filesystem, resolved_path = _resolve_filesystem_and_path(path, filesystem)
    if filesystem is None:
        filesystem = resolved_filesystem
    return filesystem.normalize_path(resolved_path), filesystem


def list_directory(
    path: str,
    filesystem: pyarrow.fs.FileSystem,
    exclude_prefixes: Optional[List[str]] = None,
    ignore_missing_path: bool = False,
    recursive: bool = False,
) -> List[Tuple[str, FileType]]:
    """
    Expand the provided directory path to a list of child paths.

    Args:
        path: The directory path to expand.
        filesystem: The filesystem implementation that should be used for
            listing.
        exclude_prefixes: The child name prefixes that should be excluded from
            the returned set. Default excluded prefixes are "." and "_".
        ignore_missing_path: Return an empty list instead of raising if the
            directory does not exist.
        recursive: Whether to expand subdirectories or not.

    Returns:
        A sorted list of (path, file type) tuples.
    """
    if exclude_prefixes is None:
        exclude_prefixes = [".", "_"]

    selector = FileSelector(
        base_dir=path,
        recursive=recursive,
        allow_not_found=ignore_missing_path,
    )
    files = filesystem.get_file_info(selector)
    out = []
    for file_ in files:
        name = posixpath.basename(file_.path)
        if any(name.startswith(prefix) for prefix in exclude_prefixes):
            continue
        out.append((file_.path, file_.type))
    # We sort the paths to guarantee a stable order.
    return sorted(out)


def list_subdirectory_names(
    path: str,
    filesystem: pyarrow.fs.FileSystem,
    ignore_missing_path: bool = False,
) -> List[str]:
    return [
        posixpath.basename(child_path)
        for child_path, file_type in list_directory(
            path,
            filesystem,
            ignore_missing_path=ignore_missing_path,
        )
        if file_type == FileType.Directory
    ]


def get_file_info(
    path: str,
    filesystem: pyarrow.fs.FileSystem,
    ignore_missing_path: bool = False,
) -> FileInfo:
    """Get the file info for the provided path."""
    file_info = filesystem.get_file_info(path)
    if file_info.type == FileType.NotFound and not ignore_missing_path:
        raise FileNotFoundError(path)
    return file_info


def delete_file(path: str, filesystem: pyarrow.fs.FileSystem) -> None:
    """
    Deletes a single file. Deleting a missing file is an error: raises
    FileNotFoundError rather than silently succeeding.
    """
    get_file_info(path, filesystem)
    filesystem.delete_file(path)


def read_text(path: str, filesystem: pyarrow.fs.FileSystem) -> str:
    with filesystem.open_input_stream(path) as file:
        return file.readall().decode("utf-8")
