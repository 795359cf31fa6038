"""Write generated example artifacts into the level-set."""

import logging
from pathlib import Path

from bem_examples.utils.file_utils import write_file_async

logger = logging.getLogger("bem_examples.output.writer")


class ArtifactWriter:
    """Writes text artifacts under the project root.

    Each example owns its own directory, so concurrent writes never touch
    the same file; shared parent directories are created idempotently.
    """

    def __init__(self, root: Path):
        self._root = root
        self.written: list[Path] = []

    async def write(self, target: str, content: str) -> Path:
        """Write an artifact.

        Args:
            target: Root-relative POSIX path of the file.
            content: Text to write.

        Returns:
            Absolute path of the written file.
        """
        path = self._root / target
        await write_file_async(path, content)
        self.written.append(path)
        logger.debug(f"Wrote {target}")
        return path
