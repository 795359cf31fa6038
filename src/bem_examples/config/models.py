"""Pydantic configuration models for bem-examples."""

from pathlib import Path
from typing import Callable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bem_examples.config.defaults import (
    DEFAULT_CODE_TAG,
    DEFAULT_CONCURRENCY,
    DEFAULT_DOC_EXTENSIONS,
    DEFAULT_FILE_SUFFIXES,
    DEFAULT_TECH_SUFFIXES,
)
from bem_examples.evaluators.sandbox import DEFAULT_MAX_DEPTH, DEFAULT_MAX_SOURCE_LENGTH
from bem_examples.utils.file_utils import normalize_graph_path, resolve_path


class EvaluationConfig(BaseModel):
    """Limits applied to sandboxed fragment evaluation."""

    max_source_length: int = Field(default=DEFAULT_MAX_SOURCE_LENGTH, ge=1)
    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, ge=1, le=10_000)


class LevelSetConfig(BaseModel):
    """One destination level-set and where its examples come from.

    Accepts the camelCase option names used by build configs
    (``destPath``, ``techSuffixes``, ``processInlineBemjson``...) as well as
    the snake_case field names.
    """

    dest_path: str = Field(alias="destPath")
    levels: list[Path] = Field(min_length=1)
    tech_suffixes: list[str] = Field(
        default_factory=lambda: list(DEFAULT_TECH_SUFFIXES), alias="techSuffixes"
    )
    file_suffixes: list[str] = Field(
        default_factory=lambda: list(DEFAULT_FILE_SUFFIXES), alias="fileSuffixes"
    )

    # Pipelines
    inline: bool = True
    pseudo_levels: bool = Field(default=True, alias="pseudoLevels")

    # Inline pipeline
    process_inline_bemjson: Optional[Union[str, Callable]] = Field(
        default=None, alias="processInlineBemjson"
    )
    doc_extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_DOC_EXTENSIONS), alias="docExtensions"
    )
    code_tag: str = Field(default=DEFAULT_CODE_TAG, alias="codeTag")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("dest_path")
    @classmethod
    def _check_dest_path(cls, value: str) -> str:
        if Path(value).is_absolute():
            raise ValueError("destPath must be relative to the project root")
        normalized = normalize_graph_path(value)
        if not normalized or ".." in normalized.split("/"):
            raise ValueError("destPath must name a directory inside the project root")
        return normalized

    @field_validator("tech_suffixes", "file_suffixes")
    @classmethod
    def _strip_dots(cls, value: list[str]) -> list[str]:
        return [suffix.lstrip(".") for suffix in value if suffix.strip(".")]

    @field_validator("doc_extensions")
    @classmethod
    def _dot_extensions(cls, value: list[str]) -> list[str]:
        return ["." + ext.lstrip(".") for ext in value]

    def resolve_levels(self, root: Path) -> list[Path]:
        """Absolute level paths, relative entries resolved against root."""
        return [resolve_path(level, root) for level in self.levels]


class BemExamplesConfig(BaseModel):
    """Root configuration model."""

    root_path: Path = Field(default=Path("."), alias="rootPath")
    sets: list[LevelSetConfig] = Field(default_factory=list)
    evaluation: EvaluationConfig = Field(default_factory=EvaluationConfig)
    max_concurrency: int = Field(default=DEFAULT_CONCURRENCY, ge=1, le=256, alias="maxConcurrency")

    # Output
    verbosity: int = Field(default=1, ge=0, le=3)
    log_file: Optional[Path] = Field(default=None, alias="logFile")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @property
    def root(self) -> Path:
        """Absolute project root."""
        return self.root_path.resolve()
