"""BEM Examples.

Content-addressed, demand-driven example materialization for BEM level-sets.
Discovers examples in tech-suffixed folders and in fenced ``bemjson`` blocks
inside block documentation, and exposes them as lazily built nodes of a
synthesized destination level-set.
"""

__version__ = "0.1.0"

from bem_examples.context.hasher import content_identity
from bem_examples.models.example import ExampleRecord, ExamplesEvent
from bem_examples.naming import Notation, parse_notation

__all__ = [
    "__version__",
    "ExampleRecord",
    "ExamplesEvent",
    "Notation",
    "content_identity",
    "parse_notation",
]
