"""Configuration management for bem-examples."""

from bem_examples.config.loader import load_config
from bem_examples.config.models import (
    BemExamplesConfig,
    EvaluationConfig,
    LevelSetConfig,
)

__all__ = [
    "BemExamplesConfig",
    "EvaluationConfig",
    "LevelSetConfig",
    "load_config",
]
