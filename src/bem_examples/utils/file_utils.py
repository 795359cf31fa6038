"""File system and path utilities."""

import asyncio
import os
import shutil
from pathlib import Path, PurePosixPath
from typing import Optional, Union

import aiofiles


async def read_bytes_async(path: Path) -> bytes:
    """Read a file's bytes asynchronously."""
    async with aiofiles.open(path, "rb") as f:
        return await f.read()


async def write_file_async(
    path: Path,
    content: Union[str, bytes],
    encoding: str = "utf-8",
    mkdir: bool = True,
) -> None:
    """Write content to a file asynchronously.

    Args:
        path: Path to the file.
        content: Text or bytes to write.
        encoding: Encoding used for text content.
        mkdir: Whether to create parent directories. Creation is idempotent,
            so concurrent writers sharing a parent never conflict.
    """
    if mkdir:
        path.parent.mkdir(parents=True, exist_ok=True)

    if isinstance(content, bytes):
        async with aiofiles.open(path, "wb") as f:
            await f.write(content)
    else:
        async with aiofiles.open(path, "w", encoding=encoding, newline="") as f:
            await f.write(content)


async def copy_file_async(source: Path, target: Path) -> Path:
    """Copy a file byte for byte, creating parent directories.

    Args:
        source: File to copy.
        target: Destination file; overwritten when present.

    Returns:
        The destination path.
    """
    await write_file_async(target, await read_bytes_async(source))
    return target


async def copy_tree_async(source: Path, target: Path) -> Path:
    """Copy a directory tree, merging into an existing destination."""
    await asyncio.to_thread(shutil.copytree, source, target, dirs_exist_ok=True)
    return target


def resolve_path(
    path: Union[str, Path],
    base: Optional[Path] = None,
) -> Path:
    """Resolve a path, optionally relative to a base.

    Args:
        path: Path to resolve.
        base: Base directory for relative paths.

    Returns:
        Resolved absolute path.
    """
    path = Path(path)

    if path.is_absolute():
        return path.resolve()

    if base is not None:
        return (base / path).resolve()

    return path.resolve()


def get_relative_path(path: Path, root: Path) -> str:
    """Get the POSIX path from root to path.

    Args:
        path: Target path.
        root: Root directory.

    Returns:
        Relative path, or the absolute path when path is outside root.
    """
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def normalize_graph_path(path: Union[str, Path]) -> str:
    """Normalize a build graph path to a root-relative POSIX string.

    ``"set\\button\\"``, ``"./set/button"`` and ``"set/button/"`` all become
    ``"set/button"``. The root itself is ``""``.
    """
    text = str(path).replace(os.sep, "/")
    parts = [part for part in PurePosixPath(text).parts if part not in (".", "/")]
    return "/".join(parts)


def path_depth(path: str) -> int:
    """Number of segments in a normalized graph path."""
    return len(path.split("/")) if path else 0


def is_within(path: str, parent: str) -> bool:
    """Whether ``path`` equals ``parent`` or lies beneath it."""
    if not parent:
        return True
    return path == parent or path.startswith(parent + "/")
