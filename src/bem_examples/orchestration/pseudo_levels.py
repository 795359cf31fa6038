"""Pseudo-level: a level-set synthesized from example tech folders.

A tech folder ``<entity>.<tech>`` inside a level contributes one example per
file or nested level it holds::

    blocks/button/button.examples/10-simple.bemjson.js
        -> <dest>/button/10-simple/10-simple.bemjson.js
    blocks/button/button.examples/10-simple.blocks/
        -> <dest>/button/10-simple/blocks/

Construction has two phases. First only the destinations the build asked
for are resolved into placeholders, with nothing copied. Then the configure
phase attaches a provider and a copy tech to each node, and the build copies
bytes only for the targets it actually builds.
"""

import asyncio
import logging
from pathlib import Path
from typing import Iterable, Optional

from bem_examples.config.models import LevelSetConfig
from bem_examples.context.scanner import LevelScanner, TechFolder, match_suffix
from bem_examples.models.example import ExamplesEvent, Placeholder
from bem_examples.models.placeholders import PlaceholderTable, placeholder_name
from bem_examples.naming import NotationParser, parse_notation
from bem_examples.orchestration.graph import BuildGraph, ConfigurableBuildGraph, NodeConfig
from bem_examples.orchestration.registrar import TargetRegistrar, canonical_depth, emit_examples
from bem_examples.orchestration.techs import FileCopy, FileProvider
from bem_examples.output.materializer import Materializer
from bem_examples.utils.file_utils import is_within, normalize_graph_path, path_depth

logger = logging.getLogger("bem_examples.orchestration.pseudo_levels")


class PseudoLevelBuilder:
    """Resolves destination paths of a pseudo-level to their real sources."""

    def __init__(
        self,
        dest_path: str,
        levels: list[Path],
        tech_suffixes: list[str],
        file_suffixes: list[str],
    ):
        """Initialize the builder.

        Args:
            dest_path: Root-relative level-set path.
            levels: Ordered search path; earlier levels shadow later ones.
            tech_suffixes: Suffixes of example folders.
            file_suffixes: Suffixes of example files inside those folders.
        """
        self.dest_path = dest_path
        self._scanner = LevelScanner(levels)
        self._tech_suffixes = tech_suffixes
        self._file_suffixes = file_suffixes
        self.canonical_depth = canonical_depth(dest_path)

    def _map(self, folder: TechFolder, child: Path) -> Optional[Placeholder]:
        scope = f"{self.dest_path}/{folder.entity}"

        if child.is_dir():
            example, _, tech = child.name.partition(".")
            if not example or not tech:
                return None
            return Placeholder(
                destination=f"{scope}/{example}/{tech}",
                source=child,
                is_dir=True,
            )

        suffix = match_suffix(child.name, self._file_suffixes)
        if suffix is None:
            return None
        example = child.name[: -len(suffix) - 1]
        return Placeholder(
            destination=f"{scope}/{example}/{example}.{suffix}",
            source=child,
        )

    def collect(self) -> PlaceholderTable:
        """Every placeholder the levels can provide.

        Returns:
            Table in level order; an entry shadowed by an earlier level is
            left out.
        """
        table = PlaceholderTable()
        for folder in self._scanner.find_tech_folders(self._tech_suffixes):
            for child in self._scanner.list_folder(folder):
                placeholder = self._map(folder, child)
                if placeholder is not None and not table.add(placeholder):
                    logger.debug(f"{child} is shadowed by an earlier level")
        return table

    def _matches(self, placeholder: Placeholder, request: str) -> bool:
        if is_within(self.dest_path, request):
            return True
        if path_depth(request) > self.canonical_depth:
            # A request for one file (or one nested level)
            return placeholder.destination == request
        return is_within(placeholder.destination, request)

    def _inside_directory(self, placeholder: Placeholder, request: str) -> Optional[Placeholder]:
        if not placeholder.is_dir or request == placeholder.destination:
            return None
        if not is_within(request, placeholder.destination):
            return None
        source = placeholder.source.joinpath(*request[len(placeholder.destination) + 1 :].split("/"))
        if not source.exists():
            return None
        return Placeholder(destination=request, source=source, is_dir=source.is_dir())

    def resolve(
        self,
        required: Iterable[str],
        table: Optional[PlaceholderTable] = None,
    ) -> PlaceholderTable:
        """Resolve the required destinations into placeholders.

        Only requested paths, or paths beneath a requested directory, get an
        entry. A request with no matching source produces no entry; that is
        not an error here, the build graph reports it as unsatisfiable.

        Args:
            required: Root-relative paths the build asked for.
            table: Table to fill; a new one when None.

        Returns:
            The filled table.
        """
        resolved = table if table is not None else PlaceholderTable()
        requests = [
            request for request in map(normalize_graph_path, required)
            if is_within(request, self.dest_path) or is_within(self.dest_path, request)
        ]
        if not requests:
            return resolved

        for placeholder in self.collect():
            for request in requests:
                if self._matches(placeholder, request):
                    resolved.add(placeholder)
                    break
                nested = self._inside_directory(placeholder, request)
                if nested is not None:
                    resolved.add(nested)

        return resolved


class PseudoLevelsPlugin:
    """Builds a level-set from example tech folders."""

    EVENT = "examples"

    def __init__(
        self,
        config: LevelSetConfig,
        root: Path,
        placeholders: PlaceholderTable,
        naming: NotationParser = parse_notation,
    ):
        """Initialize the plugin.

        Args:
            config: Level-set configuration.
            root: Project root.
            placeholders: Table shared with the other plugins of the set.
            naming: Notation parser for entity names.
        """
        self._config = config
        self._placeholders = placeholders
        self._naming = naming
        self._builder = PseudoLevelBuilder(
            dest_path=config.dest_path,
            levels=config.resolve_levels(root),
            tech_suffixes=config.tech_suffixes,
            file_suffixes=config.file_suffixes,
        )
        self._materializer = Materializer(root, placeholders)

    @property
    def dest_path(self) -> str:
        return self._config.dest_path

    async def prebuild(self, graph: BuildGraph) -> ExamplesEvent:
        """Resolve placeholders for the required targets and register them.

        Args:
            graph: Build graph of the current pass.

        Returns:
            The emitted ``examples`` event.
        """
        self._placeholders.clear()
        await asyncio.to_thread(
            self._builder.resolve,
            graph.get_required_targets(),
            self._placeholders,
        )
        logger.debug(f"{self.dest_path}: resolved {len(self._placeholders)} placeholders")

        await self._materializer.materialize_levels(self._builder.canonical_depth + 1)

        registrar = TargetRegistrar(graph, self.dest_path, self._config.file_suffixes, self._naming)
        examples = registrar.register(self._placeholders)
        return emit_examples(graph, self.EVENT, self.dest_path, examples)

    def configure(self, graph: ConfigurableBuildGraph, nodes: list[str]) -> None:
        """Attach provider and copy techs to nodes that have placeholders."""
        set_nodes = [node for node in nodes if is_within(node, self.dest_path)]
        graph.node_configs(set_nodes, self._configure_node)

    def _configure_node(self, node: NodeConfig) -> None:
        for suffix in self._config.file_suffixes:
            target = f"?.{suffix}"
            if node.target_path(target) not in self._placeholders:
                continue
            source = placeholder_name(target)
            node.add_techs([
                FileProvider(source, self._placeholders),
                FileCopy(source, target, self._materializer),
            ])
            node.add_target(target)
