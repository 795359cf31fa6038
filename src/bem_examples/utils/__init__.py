"""Shared utilities for bem-examples."""

from bem_examples.utils.file_utils import (
    copy_file_async,
    copy_tree_async,
    get_relative_path,
    is_within,
    normalize_graph_path,
    path_depth,
    read_bytes_async,
    resolve_path,
    write_file_async,
)

__all__ = [
    "copy_file_async",
    "copy_tree_async",
    "get_relative_path",
    "is_within",
    "normalize_graph_path",
    "path_depth",
    "read_bytes_async",
    "resolve_path",
    "write_file_async",
]
