"""Extract inline examples from fenced code blocks in documentation."""

import logging
import re
from pathlib import Path

import aiofiles

from bem_examples.context.hasher import content_identity
from bem_examples.errors import ExtractionError
from bem_examples.models.example import InlineFragment

logger = logging.getLogger("bem_examples.context.extractor")

DEFAULT_TAG = "bemjson"


class InlineExtractor:
    """Finds fenced blocks tagged with a content type and turns them into fragments.

    A block opens with three or more backticks directly followed by the tag
    (case-insensitive) and closes at the first fence after it::

        ```bemjson
        ({ block: 'button', text: 'Click me!' })
        ```

    Fences are flat. Since the body may not contain a backtick, nested or
    unbalanced fences simply fail to match and yield nothing.
    """

    def __init__(self, tag: str = DEFAULT_TAG):
        """Initialize the extractor.

        Args:
            tag: Fence tag marking an inline example.
        """
        self.tag = tag
        self._pattern = re.compile(
            rf"`{{3,}}{re.escape(tag)}[ \t]*\r?\n([^`]*?)\r?\n`{{3,}}",
            re.IGNORECASE,
        )
        self._opening = re.compile(
            rf"^`{{3,}}{re.escape(tag)}[ \t]*$", re.IGNORECASE | re.MULTILINE
        )

    def extract(self, text: str) -> list[InlineFragment]:
        """Extract all tagged fragments from document text.

        Args:
            text: Document content.

        Returns:
            Fragments in document order; empty when nothing matches.
        """
        fragments = []
        for match in self._pattern.finditer(text):
            source = match.group(1)
            fragments.append(
                InlineFragment(name=content_identity(source), source=source)
            )

        unmatched = len(self._opening.findall(text)) - len(fragments)
        if unmatched > 0:
            logger.debug(
                f"Skipped {unmatched} unterminated or empty '{self.tag}' fence(s)"
            )

        return fragments

    async def extract_file(self, path: Path) -> list[InlineFragment]:
        """Read a document and extract its fragments.

        Args:
            path: Documentation file.

        Returns:
            Fragments found in the file.

        Raises:
            ExtractionError: If the file is not valid UTF-8 text.
        """
        return self.extract(await read_document(path))


async def read_document(path: Path, encoding: str = "utf-8") -> str:
    """Read a documentation file.

    Args:
        path: File to read.
        encoding: Text encoding.

    Returns:
        File contents.

    Raises:
        ExtractionError: If the bytes cannot be decoded.
    """
    async with aiofiles.open(path, "rb") as f:
        data = await f.read()

    try:
        return data.decode(encoding)
    except UnicodeDecodeError as e:
        raise ExtractionError(str(path), f"not {encoding} text ({e.reason})") from e
