"""Inline examples: fenced ``bemjson`` blocks in block documentation.

Each fragment becomes its own example node named by its content identity::

    blocks/button/button.md  ```bemjson ({ block: 'button' }) ```
        -> <dest>/button/<identity>/<identity>.bemjson.js

A changed fragment gets a new identity and so a new node; identical
fragments collapse into one.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

from bem_examples.config.defaults import INLINE_TARGET_SUFFIX
from bem_examples.config.models import EvaluationConfig, LevelSetConfig
from bem_examples.context.extractor import InlineExtractor
from bem_examples.context.scanner import LevelScanner
from bem_examples.errors import ExtractionError
from bem_examples.evaluators.sandbox import SandboxEvaluator
from bem_examples.evaluators.transformer import ExampleTransformer, resolve_callback
from bem_examples.models.example import (
    EvaluationFailure,
    ExampleRecord,
    ExamplesEvent,
    InlineFragment,
)
from bem_examples.models.placeholders import PlaceholderTable
from bem_examples.naming import NotationParser, parse_notation
from bem_examples.orchestration.graph import BuildGraph, ConfigurableBuildGraph, NodeConfig
from bem_examples.orchestration.registrar import emit_examples
from bem_examples.orchestration.techs import FileProvider
from bem_examples.output.writer import ArtifactWriter
from bem_examples.utils.file_utils import get_relative_path, is_within
from bem_examples.utils.logging import log_warning_action

logger = logging.getLogger("bem_examples.orchestration.inline")


class InlineExamplesPlugin:
    """Builds example nodes from fenced blocks in documentation files."""

    EVENT = "inline-examples"
    ACTION = "inline-bemjson"

    def __init__(
        self,
        config: LevelSetConfig,
        root: Path,
        placeholders: Optional[PlaceholderTable] = None,
        evaluation: Optional[EvaluationConfig] = None,
        max_concurrency: int = 8,
        naming: NotationParser = parse_notation,
    ):
        """Initialize the plugin.

        Args:
            config: Level-set configuration.
            root: Project root.
            placeholders: Table shared with the pseudo-level plugin of the
                same set; nodes it covers are not given a provider here.
            evaluation: Sandbox limits.
            max_concurrency: Max fragments evaluated and written at once.
            naming: Notation parser for document names.

        Raises:
            ConfigError: If the transform callback cannot be resolved.
        """
        evaluation = evaluation or EvaluationConfig()
        self._config = config
        self._root = root
        self._placeholders = placeholders if placeholders is not None else PlaceholderTable()
        self._naming = naming
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._scanner = LevelScanner(config.resolve_levels(root))
        self._extractor = InlineExtractor(config.code_tag)
        self._evaluator = SandboxEvaluator(
            max_source_length=evaluation.max_source_length,
            max_depth=evaluation.max_depth,
        )
        self._transformer = ExampleTransformer(resolve_callback(config.process_inline_bemjson))
        self._writer = ArtifactWriter(root)
        self.failures: list[EvaluationFailure] = []

    @property
    def dest_path(self) -> str:
        return self._config.dest_path

    def target_name(self, fragment: InlineFragment) -> str:
        """Root-relative path of the artifact written for a fragment."""
        return f"{fragment.path}/{fragment.name}.{INLINE_TARGET_SUFFIX}"

    async def collect(self) -> list[InlineFragment]:
        """Extract fragments from every document of the set's levels.

        Fragments are placed under ``<dest>/<block>/<identity>``. When two
        fragments land on the same path, the first one found is kept.

        Returns:
            Unique fragments in level and document order.
        """
        documents = await asyncio.to_thread(
            self._scanner.find_documents, self._config.doc_extensions
        )
        extracted = await asyncio.gather(*[self._extract(doc) for doc in documents])

        fragments: dict[str, InlineFragment] = {}
        for batch in extracted:
            for fragment in batch:
                fragments.setdefault(fragment.path, fragment)
        return list(fragments.values())

    async def _extract(self, document: Path) -> list[InlineFragment]:
        source_path = get_relative_path(document, self._root)

        notation = self._naming(document.name.split(".", 1)[0])
        if notation is None:
            logger.debug(f"{source_path}: name is not an entity, skipped")
            return []

        async with self._semaphore:
            try:
                fragments = await self._extractor.extract_file(document)
            except ExtractionError as e:
                log_warning_action(logger, self.ACTION, source_path, e.message)
                return []

        scope = f"{self.dest_path}/{notation.block}"
        return [
            fragment.model_copy(
                update={
                    "source_path": source_path,
                    "path": f"{scope}/{fragment.name}",
                    "notation": notation,
                }
            )
            for fragment in fragments
        ]

    async def _produce(self, fragment: InlineFragment) -> Optional[ExampleRecord]:
        async with self._semaphore:
            value = await asyncio.to_thread(
                self._evaluator.evaluate, fragment.source, fragment.source_path
            )
            if isinstance(value, EvaluationFailure):
                self.failures.append(value)
                log_warning_action(logger, self.ACTION, fragment.source_path, str(value))
                return None

            target = self.target_name(fragment)
            content = self._transformer.render(value, self._root / target, fragment.notation)
            await self._writer.write(target, content)

        return ExampleRecord(name=fragment.name, path=fragment.path, notation=fragment.notation)

    async def prebuild(self, graph: BuildGraph) -> ExamplesEvent:
        """Evaluate and write the required inline examples.

        A fragment that fails to evaluate is logged and left out; the rest
        of the batch is unaffected. A fragment whose node already holds a
        folder example of the same name is skipped, so the folder's file is
        the one that gets built.

        Args:
            graph: Build graph of the current pass.

        Returns:
            The emitted ``inline-examples`` event.
        """
        self.failures = []
        fragments = []
        for fragment in await self.collect():
            target = self.target_name(fragment)
            if not (graph.is_required_node(fragment.path) and graph.is_required_target(target)):
                continue
            if target in self._placeholders:
                logger.debug(f"{target}: provided by a folder example, fragment skipped")
                continue
            fragments.append(fragment)
        logger.debug(f"{self.dest_path}: {len(fragments)} inline fragments required")

        produced = await asyncio.gather(*[self._produce(fragment) for fragment in fragments])

        examples = []
        for fragment, example in zip(fragments, produced):
            if example is None:
                continue
            graph.register_target(self.target_name(fragment))
            examples.append(example)

        return emit_examples(graph, self.EVENT, self.dest_path, examples)

    def configure(self, graph: ConfigurableBuildGraph, nodes: list[str]) -> None:
        """Give prebuilt artifacts a provider so the build can pick them up."""
        set_nodes = [node for node in nodes if is_within(node, self.dest_path)]
        graph.node_configs(set_nodes, self._configure_node)

    def _configure_node(self, node: NodeConfig) -> None:
        target = f"?.{INLINE_TARGET_SUFFIX}"
        if node.target_path(target) in self._placeholders:
            return
        if not node.resolve_path(target).is_file():
            return
        node.add_tech(FileProvider(target))
        node.add_target(target)
