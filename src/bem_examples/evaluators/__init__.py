"""Evaluate and transform inline example fragments."""

from bem_examples.evaluators.sandbox import SandboxEvaluator, normalize_source
from bem_examples.evaluators.transformer import (
    ExampleTransformer,
    identity_transform,
    resolve_callback,
    serialize,
)

__all__ = [
    "ExampleTransformer",
    "SandboxEvaluator",
    "identity_transform",
    "normalize_source",
    "resolve_callback",
    "serialize",
]
