"""Placeholder table shared by the phases of one build pass."""

from typing import Iterator, Optional

from bem_examples.models.example import Placeholder
from bem_examples.utils.file_utils import normalize_graph_path


class PlaceholderTable:
    """Maps destination paths to the real sources they stand for.

    Entries are added in precedence order and the first one wins, so a later
    level can never replace what an earlier level provided.
    """

    def __init__(self) -> None:
        self._entries: dict[str, Placeholder] = {}

    def add(self, placeholder: Placeholder) -> bool:
        """Record a placeholder unless its destination is already taken.

        Returns:
            True if recorded, False if shadowed by an earlier entry.
        """
        if placeholder.destination in self._entries:
            return False
        self._entries[placeholder.destination] = placeholder
        return True

    def get(self, destination: str) -> Optional[Placeholder]:
        """Placeholder for a destination, if any."""
        return self._entries.get(normalize_graph_path(destination))

    def clear(self) -> None:
        """Drop every entry; placeholders never outlive a build pass."""
        self._entries.clear()

    def __contains__(self, destination: object) -> bool:
        return isinstance(destination, str) and normalize_graph_path(destination) in self._entries

    def __iter__(self) -> Iterator[Placeholder]:
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)


PLACEHOLDER_SUFFIX = ".placeholder"


def placeholder_name(name: str) -> str:
    """Target name under which a placeholder for ``name`` is provided."""
    return name + PLACEHOLDER_SUFFIX


def strip_placeholder(name: str) -> str:
    """Final name a placeholder target stands for."""
    if name.endswith(PLACEHOLDER_SUFFIX):
        return name[: -len(PLACEHOLDER_SUFFIX)]
    return name
