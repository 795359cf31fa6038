"""Replace placeholders with real, byte-identical copies of their sources."""

import logging
from pathlib import Path
from typing import Optional

from bem_examples.errors import UnsatisfiableTargetError
from bem_examples.models.placeholders import PlaceholderTable
from bem_examples.utils.file_utils import copy_file_async, copy_tree_async, is_within, path_depth

logger = logging.getLogger("bem_examples.output.materializer")


class Materializer:
    """Copies placeholder sources into the level-set on demand.

    Copies overwrite whatever is at the destination, so materializing the
    same placeholder twice leaves identical bytes.
    """

    def __init__(self, root: Path, placeholders: PlaceholderTable):
        """Initialize the materializer.

        Args:
            root: Project root; destinations are relative to it.
            placeholders: Table filled by the pseudo-level builder.
        """
        self._root = root
        self._placeholders = placeholders

    async def materialize(self, destination: str, target: Optional[str] = None) -> Path:
        """Copy the source behind a placeholder.

        Args:
            destination: Root-relative destination of the placeholder.
            target: Root-relative final path; the destination itself if None.

        Returns:
            Absolute path of the real file or directory.

        Raises:
            UnsatisfiableTargetError: If no placeholder exists for destination.
            OSError: If copying fails. Not recovered: a half-copied level-set
                must fail the pass.
        """
        placeholder = self._placeholders.get(destination)
        if placeholder is None:
            raise UnsatisfiableTargetError(destination, "no placeholder was resolved")

        final = self._root / (target or placeholder.destination)
        if placeholder.is_dir:
            await copy_tree_async(placeholder.source, final)
        else:
            await copy_file_async(placeholder.source, final)

        logger.debug(f"Materialized {placeholder.source} -> {final}")
        return final

    async def materialize_levels(self, file_depth: int) -> list[Path]:
        """Materialize every placeholder that belongs to a nested example level.

        Those are directory placeholders and files deeper than the example
        files themselves. They are consumed as levels by later steps rather
        than built as targets, so they are copied as soon as they are
        resolved. Anything inside a directory placeholder comes along with
        that directory.

        Args:
            file_depth: Path depth of per-example files.

        Returns:
            Absolute paths of the copies, in placeholder order.
        """
        nested = [
            p for p in self._placeholders
            if p.is_dir or path_depth(p.destination) > file_depth
        ]
        outermost = [
            p for p in nested
            if not any(
                other is not p and other.is_dir and is_within(p.destination, other.destination)
                for other in nested
            )
        ]
        return [await self.materialize(p.destination) for p in outermost]
