"""Scan source levels for documentation files and example tech folders."""

import logging
import os
from pathlib import Path
from typing import Iterator, Optional

from pydantic import BaseModel

from bem_examples.errors import ConfigError

logger = logging.getLogger("bem_examples.context.scanner")


class TechFolder(BaseModel):
    """A directory named ``<entity>.<tech suffix>`` holding examples."""

    level: Path
    path: Path
    entity: str
    suffix: str

    @property
    def relative_path(self) -> str:
        """Path of the folder inside its level."""
        return self.path.relative_to(self.level).as_posix()


def match_suffix(name: str, suffixes: list[str]) -> Optional[str]:
    """Return the first suffix ``name`` ends with as ``.<suffix>``.

    The remaining stem must not be empty, so ``.examples`` alone never matches.
    """
    for suffix in suffixes:
        ending = "." + suffix
        if name.endswith(ending) and len(name) > len(ending):
            return suffix
    return None


class LevelScanner:
    """Walks an ordered list of levels.

    Results are always returned level by level, in the order the levels were
    given, and in sorted path order inside a level. Callers rely on that
    order for precedence: the earlier level shadows the later one.
    """

    def __init__(self, levels: list[Path]):
        """Initialize the scanner.

        Args:
            levels: Ordered search path of level directories.

        Raises:
            ConfigError: If a level does not exist or is not a directory.
        """
        for level in levels:
            if not level.is_dir():
                raise ConfigError(f"Level not found: {level}")
        self.levels = list(levels)

    def _walk(self, level: Path) -> Iterator[tuple[Path, list[str], list[str]]]:
        for dirpath, dirnames, filenames in os.walk(level):
            dirnames.sort()
            yield Path(dirpath), dirnames, sorted(filenames)

    def find_documents(self, extensions: list[str]) -> list[Path]:
        """Find documentation files across all levels.

        Args:
            extensions: File extensions to accept, e.g. ``[".md"]``.

        Returns:
            Matching file paths in precedence order.
        """
        wanted = {ext.lower() for ext in extensions}
        documents = []

        for level in self.levels:
            for dirpath, _, filenames in self._walk(level):
                for filename in filenames:
                    if Path(filename).suffix.lower() in wanted:
                        documents.append(dirpath / filename)

        logger.debug(f"Found {len(documents)} documents in {len(self.levels)} levels")
        return documents

    def find_tech_folders(self, tech_suffixes: list[str]) -> list[TechFolder]:
        """Find example tech folders across all levels.

        Tech folders are not descended into: nested levels inside an example
        belong to that example, not to the scanned level.

        Args:
            tech_suffixes: Folder name suffixes such as ``["examples"]``.

        Returns:
            Tech folders in precedence order.
        """
        folders = []

        for level in self.levels:
            for dirpath, dirnames, _ in self._walk(level):
                for dirname in dirnames:
                    suffix = match_suffix(dirname, tech_suffixes)
                    if suffix is None:
                        continue
                    folders.append(
                        TechFolder(
                            level=level,
                            path=dirpath / dirname,
                            entity=dirname[: -len(suffix) - 1],
                            suffix=suffix,
                        )
                    )
                dirnames[:] = [d for d in dirnames if match_suffix(d, tech_suffixes) is None]

        logger.debug(f"Found {len(folders)} tech folders in {len(self.levels)} levels")
        return folders

    @staticmethod
    def list_folder(folder: TechFolder) -> list[Path]:
        """List the direct children of a tech folder in sorted order."""
        return sorted(folder.path.iterdir())
