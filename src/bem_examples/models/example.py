"""Example domain models."""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from bem_examples.naming import Notation


class InlineFragment(BaseModel):
    """A fenced ``bemjson`` block extracted from a documentation file.

    ``name`` is the content identity of ``source`` and doubles as the cache
    key, so byte-identical fragments collapse into one example.
    """

    name: str
    source: str

    # Filled in once the containing document is known
    source_path: Optional[str] = None  # Document path relative to the root
    path: Optional[str] = None  # Destination scope: <dest>/<block>/<name>
    notation: Optional[Notation] = None


class Placeholder(BaseModel):
    """Transient mapping from a destination path to the real source it aliases.

    Lives only for one build pass. The materializer replaces it with a
    byte-identical copy once the build graph asks for the destination.
    """

    destination: str  # Root-relative POSIX path
    source: Path
    is_dir: bool = False

    model_config = ConfigDict(frozen=True)


class ExampleRecord(BaseModel):
    """An example actually produced by a build pass."""

    name: str
    path: str
    notation: Optional[Notation] = None

    def to_payload(self) -> dict:
        """Plain-dict form used in notification payloads."""
        return {
            "name": self.name,
            "path": self.path,
            "notation": self.notation.to_dict() if self.notation else None,
        }


class EvaluationFailure(BaseModel):
    """A fragment that did not evaluate. Logged and dropped, never fatal."""

    name: str  # Error class, e.g. "SyntaxError"
    message: str
    source_path: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.name}: {self.message}"


class ExamplesEvent(BaseModel):
    """Notification emitted once per build pass and level-set."""

    destination_root: str
    examples: list[ExampleRecord] = Field(default_factory=list)

    @property
    def names(self) -> list[str]:
        """Names of the produced examples, in production order."""
        return [example.name for example in self.examples]

    def to_payload(self) -> dict:
        """Plain-dict form for reporting collaborators."""
        return {
            "destinationRoot": self.destination_root,
            "examples": [example.to_payload() for example in self.examples],
        }
