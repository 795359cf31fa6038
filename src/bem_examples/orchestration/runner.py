"""Main orchestration runner for bem-examples."""

import asyncio
import logging
from typing import Optional, Union

from pydantic import BaseModel, Field

from bem_examples.config.models import BemExamplesConfig
from bem_examples.errors import ConfigError
from bem_examples.models.example import EvaluationFailure, ExampleRecord, ExamplesEvent
from bem_examples.models.placeholders import PlaceholderTable
from bem_examples.orchestration.graph import ConfigurableBuildGraph, LocalBuildGraph
from bem_examples.orchestration.inline import InlineExamplesPlugin
from bem_examples.orchestration.pseudo_levels import PseudoLevelsPlugin

logger = logging.getLogger("bem_examples.orchestration.runner")

Plugin = Union[InlineExamplesPlugin, PseudoLevelsPlugin]


class BuildSummary(BaseModel):
    """Outcome of one build pass."""

    events: dict[str, list[ExamplesEvent]] = Field(default_factory=dict)
    built_targets: list[str] = Field(default_factory=list)
    failures: list[EvaluationFailure] = Field(default_factory=list)

    @property
    def example_count(self) -> int:
        """Examples announced across all events."""
        return sum(len(event.examples) for events in self.events.values() for event in events)


class LevelSetRunner:
    """Wires the example plugins of every configured level-set to a build graph."""

    def __init__(self, config: BemExamplesConfig, graph: ConfigurableBuildGraph):
        """Initialize the runner.

        Args:
            config: Configuration with at least one level-set.
            graph: Build graph of the pass.

        Raises:
            ConfigError: If a level is missing or a transform cannot be resolved.
        """
        self._config = config
        self._graph = graph
        self.sets: list[list[Plugin]] = []

        for set_config in config.sets:
            # One table per set: the inline plugin must see what the pseudo-level claimed
            placeholders = PlaceholderTable()
            plugins: list[Plugin] = []
            if set_config.pseudo_levels:
                plugins.append(PseudoLevelsPlugin(set_config, graph.root_path, placeholders))
            if set_config.inline:
                plugins.append(
                    InlineExamplesPlugin(
                        set_config,
                        graph.root_path,
                        placeholders=placeholders,
                        evaluation=config.evaluation,
                        max_concurrency=config.max_concurrency,
                    )
                )
            self.sets.append(plugins)

    @property
    def plugins(self) -> list[Plugin]:
        """Every plugin, set by set."""
        return [plugin for plugins in self.sets for plugin in plugins]

    async def _prebuild_set(self, plugins: list[Plugin]) -> list[ExamplesEvent]:
        # Folder examples resolve first so that inline fragments can defer to them
        return [await plugin.prebuild(self._graph) for plugin in plugins]

    async def prebuild(self) -> list[ExamplesEvent]:
        """Run the prebuild step of every level-set, sets concurrently."""
        events = await asyncio.gather(*[self._prebuild_set(plugins) for plugins in self.sets])
        return [event for batch in events for event in batch]

    def configure(self) -> None:
        """Let every plugin attach techs to the registered nodes."""
        for plugin in self.plugins:
            self._graph.configure(plugin.configure)

    async def run(self) -> BuildSummary:
        """Run one full pass: prebuild, configure, build.

        Returns:
            Summary of the pass.

        Raises:
            UnsatisfiableTargetError: If a requested target has no provider.
        """
        summary = BuildSummary()

        def collect(name: str):
            def listener(dest_path: str, examples: list[ExampleRecord]) -> None:
                event = ExamplesEvent(destination_root=dest_path, examples=examples)
                summary.events.setdefault(name, []).append(event)
            return listener

        for name in (InlineExamplesPlugin.EVENT, PseudoLevelsPlugin.EVENT):
            self._graph.event_channel.on(name, collect(name))

        await self.prebuild()
        self.configure()
        summary.built_targets = await self._graph.build()

        for plugin in self.plugins:
            if isinstance(plugin, InlineExamplesPlugin):
                summary.failures.extend(plugin.failures)

        logger.info(
            f"Build complete: {summary.example_count} examples, "
            f"{len(summary.built_targets)} targets, {len(summary.failures)} failures"
        )
        return summary


async def run_build(
    config: BemExamplesConfig,
    targets: Optional[list[str]] = None,
) -> BuildSummary:
    """Build the requested targets with a local build graph.

    Args:
        config: Loaded configuration.
        targets: Root-relative paths to build; every set's destination when None.

    Returns:
        Summary of the pass.

    Raises:
        ConfigError: If no level-set is configured.
    """
    if not config.sets:
        raise ConfigError("No level-sets configured; pass --dest and --level or a config file")

    requested = targets or [set_config.dest_path for set_config in config.sets]
    graph = LocalBuildGraph(
        config.root,
        requested,
        level_sets=[set_config.dest_path for set_config in config.sets],
    )
    return await LevelSetRunner(config, graph).run()
