"""Domain models for example materialization."""

from bem_examples.models.example import (
    EvaluationFailure,
    ExampleRecord,
    ExamplesEvent,
    InlineFragment,
    Placeholder,
)
from bem_examples.models.placeholders import (
    PlaceholderTable,
    placeholder_name,
    strip_placeholder,
)

__all__ = [
    "EvaluationFailure",
    "ExampleRecord",
    "ExamplesEvent",
    "InlineFragment",
    "Placeholder",
    "PlaceholderTable",
    "placeholder_name",
    "strip_placeholder",
]
