"""Output layer: persisted example artifacts."""

from bem_examples.output.materializer import Materializer
from bem_examples.output.writer import ArtifactWriter

__all__ = [
    "ArtifactWriter",
    "Materializer",
]
