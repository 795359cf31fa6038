"""Context layer: discover and read example sources from levels."""

from bem_examples.context.extractor import InlineExtractor, read_document
from bem_examples.context.hasher import content_identity, fix_base64
from bem_examples.context.scanner import LevelScanner, TechFolder

__all__ = [
    "InlineExtractor",
    "LevelScanner",
    "TechFolder",
    "content_identity",
    "fix_base64",
    "read_document",
]
