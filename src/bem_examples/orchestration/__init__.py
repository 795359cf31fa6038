"""Orchestration: build graph, example plugins and the pass runner."""

from bem_examples.orchestration.graph import (
    BuildGraph,
    ConfigurableBuildGraph,
    EventChannel,
    LocalBuildGraph,
    NodeConfig,
)
from bem_examples.orchestration.inline import InlineExamplesPlugin
from bem_examples.orchestration.pseudo_levels import PseudoLevelBuilder, PseudoLevelsPlugin
from bem_examples.orchestration.registrar import TargetRegistrar, emit_examples
from bem_examples.orchestration.runner import BuildSummary, LevelSetRunner, run_build

__all__ = [
    "BuildGraph",
    "BuildSummary",
    "ConfigurableBuildGraph",
    "EventChannel",
    "InlineExamplesPlugin",
    "LevelSetRunner",
    "LocalBuildGraph",
    "NodeConfig",
    "PseudoLevelBuilder",
    "PseudoLevelsPlugin",
    "TargetRegistrar",
    "emit_examples",
    "run_build",
]
