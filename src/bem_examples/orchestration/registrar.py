"""Register resolved examples with the build graph and announce them."""

import logging

from bem_examples.models.example import ExampleRecord, ExamplesEvent
from bem_examples.models.placeholders import PlaceholderTable
from bem_examples.naming import NotationParser, parse_notation
from bem_examples.orchestration.graph import BuildGraph
from bem_examples.utils.file_utils import path_depth

logger = logging.getLogger("bem_examples.orchestration.registrar")


def canonical_depth(dest_path: str) -> int:
    """Depth of an example node: ``<dest>/<entity>/<example>``."""
    return path_depth(dest_path) + 2


def emit_examples(
    graph: BuildGraph,
    event_name: str,
    dest_path: str,
    examples: list[ExampleRecord],
) -> ExamplesEvent:
    """Emit the single per-pass notification for a level-set.

    Listeners receive ``(dest_path, examples)``. The notification fires even
    when no example was produced, with an empty list.
    """
    graph.event_channel.emit(event_name, dest_path, examples)
    event = ExamplesEvent(destination_root=dest_path, examples=examples)
    logger.info(f"{dest_path}: {len(examples)} examples ({event_name})")
    return event


class TargetRegistrar:
    """Turns resolved placeholders into registered nodes and targets."""

    def __init__(
        self,
        graph: BuildGraph,
        dest_path: str,
        file_suffixes: list[str],
        naming: NotationParser = parse_notation,
    ):
        """Initialize the registrar.

        Args:
            graph: Build graph to consult and register with.
            dest_path: Root-relative level-set path.
            file_suffixes: Per-example output file suffixes; when empty,
                each example registers as a node.
            naming: Notation parser for entity names.
        """
        self._graph = graph
        self._dest_path = dest_path
        self._file_suffixes = file_suffixes
        self._naming = naming
        self._depth = canonical_depth(dest_path)

    def register(self, placeholders: PlaceholderTable) -> list[ExampleRecord]:
        """Register every required example node found among the placeholders.

        Args:
            placeholders: Placeholders resolved for this pass.

        Returns:
            One record per registered example, in placeholder order.
        """
        examples: dict[str, ExampleRecord] = {}

        for placeholder in placeholders:
            if path_depth(placeholder.destination) <= self._depth:
                continue
            # Files inside a nested level belong to the example that holds the level
            node = "/".join(placeholder.destination.split("/")[: self._depth])
            if node in examples:
                continue
            if not self._graph.is_required_node(node):
                continue

            entity, basename = node.split("/")[-2:]
            registered = 0
            for suffix in self._file_suffixes:
                target = f"{node}/{basename}.{suffix}"
                if target in placeholders and self._graph.is_required_target(target):
                    self._graph.register_target(target)
                    registered += 1
            if not registered:
                self._graph.register_node(node)

            examples[node] = ExampleRecord(
                name=basename,
                path=node,
                notation=self._naming(entity),
            )

        return list(examples.values())
