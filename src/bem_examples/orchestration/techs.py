"""Techs attached to level-set nodes during the configure phase."""

from pathlib import Path
from typing import Optional

from bem_examples.errors import UnsatisfiableTargetError
from bem_examples.orchestration.graph import NodeConfig, Tech
from bem_examples.models.placeholders import PlaceholderTable, strip_placeholder
from bem_examples.output.materializer import Materializer


class FileProvider(Tech):
    """Provides a file that already exists.

    With a placeholder table, a ``<name>.placeholder`` target is provided when
    the table holds an entry for ``<name>``; nothing is written.
    """

    def __init__(self, target: str, placeholders: Optional[PlaceholderTable] = None):
        self.target = target
        self._placeholders = placeholders

    async def run(self, node: NodeConfig) -> Path:
        graph_path = node.target_path(self.target)
        if self._placeholders is not None:
            if strip_placeholder(graph_path) in self._placeholders:
                return node.resolve_path(self.target)
            raise UnsatisfiableTargetError(graph_path, "no placeholder was resolved")

        path = node.resolve_path(self.target)
        if path.exists():
            return path
        raise UnsatisfiableTargetError(graph_path, "file does not exist")

    def __repr__(self) -> str:
        return f"FileProvider(target={self.target!r})"


class FileCopy(Tech):
    """Turns a provided placeholder into a real file under its final name."""

    def __init__(self, source: str, target: str, materializer: Materializer):
        self.source = source
        self.target = target
        self.dependencies = (source,)
        self._materializer = materializer

    async def run(self, node: NodeConfig) -> Path:
        return await self._materializer.materialize(
            strip_placeholder(node.target_path(self.source)),
            node.target_path(self.target),
        )

    def __repr__(self) -> str:
        return f"FileCopy(source={self.source!r}, target={self.target!r})"
