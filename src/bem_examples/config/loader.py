"""Configuration loading and merging logic."""

import json
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from bem_examples.config.defaults import CONFIG_SEARCH_PATHS, ROOT_ENV_VAR
from bem_examples.config.models import BemExamplesConfig
from bem_examples.errors import ConfigError


def find_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file.

    Args:
        explicit_path: Explicitly specified config file path (from CLI).

    Returns:
        Path to config file if found, None otherwise.

    Raises:
        ConfigError: If an explicit path does not exist.
    """
    if explicit_path is not None:
        if explicit_path.exists():
            return explicit_path
        raise ConfigError(f"Config file not found: {explicit_path}")

    for search_path in CONFIG_SEARCH_PATHS:
        if search_path.exists():
            return search_path

    return None


def load_config_file(path: Path) -> dict[str, Any]:
    """Load configuration from a JSON or YAML file.

    Args:
        path: Path to the configuration file.

    Returns:
        Parsed configuration dictionary.

    Raises:
        ConfigError: If the file cannot be parsed or is not a mapping.
    """
    text = path.read_text(encoding="utf-8")

    try:
        if path.suffix.lower() in (".yml", ".yaml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot parse {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")
    return data


def merge_cli_overrides(
    config: BemExamplesConfig,
    root: Optional[Path] = None,
    dest: Optional[str] = None,
    levels: Optional[list[Path]] = None,
    tech_suffixes: Optional[list[str]] = None,
    file_suffixes: Optional[list[str]] = None,
    transform: Optional[str] = None,
    verbose: Optional[int] = None,
    log_file: Optional[Path] = None,
    concurrency: Optional[int] = None,
) -> BemExamplesConfig:
    """Merge CLI overrides into the configuration.

    CLI arguments take precedence over config file values. ``dest`` together
    with ``levels`` defines a level-set that replaces the configured ones;
    the suffix and transform options then apply to that set, or to every
    configured set when no set is given on the command line.

    Args:
        config: Base configuration from file.
        root: Project root.
        dest: Destination level-set path.
        levels: Source levels for the destination.
        tech_suffixes: Example folder suffixes.
        file_suffixes: Example file suffixes.
        transform: Dotted path of the inline transform callback.
        verbose: Verbosity level override.
        log_file: Debug log file override.
        concurrency: Max concurrent example units.

    Returns:
        Configuration with CLI overrides applied.

    Raises:
        ConfigError: If the merged configuration is invalid.
    """
    data = config.model_dump()

    if root is not None:
        data["root_path"] = root
    if verbose is not None:
        data["verbosity"] = verbose
    if log_file is not None:
        data["log_file"] = log_file
    if concurrency is not None:
        data["max_concurrency"] = concurrency

    if dest is not None or levels:
        if dest is None or not levels:
            raise ConfigError("--dest and --level must be given together")
        data["sets"] = [{"dest_path": dest, "levels": levels}]

    for set_data in data["sets"]:
        if tech_suffixes:
            set_data["tech_suffixes"] = tech_suffixes
        if file_suffixes:
            set_data["file_suffixes"] = file_suffixes
        if transform is not None:
            set_data["process_inline_bemjson"] = transform

    try:
        return BemExamplesConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(str(e)) from e


def load_config(
    config_path: Optional[Path] = None,
    **cli_overrides: Any,
) -> BemExamplesConfig:
    """Load configuration with CLI overrides.

    Configuration is loaded from the following sources (in order of priority):
    1. CLI arguments (highest priority)
    2. Environment variables
    3. Config file (if found)
    4. Default values (lowest priority)

    Args:
        config_path: Explicit config file path (from --config CLI option).
        **cli_overrides: CLI argument overrides.

    Returns:
        Merged configuration object.

    Raises:
        ConfigError: If the configuration is missing pieces or invalid.
    """
    config = BemExamplesConfig()

    found_config = find_config_file(config_path)
    if found_config is not None:
        try:
            config = BemExamplesConfig.model_validate(load_config_file(found_config))
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in {found_config}: {e}") from e

    if root := os.environ.get(ROOT_ENV_VAR):
        if cli_overrides.get("root") is None:
            cli_overrides["root"] = Path(root)

    return merge_cli_overrides(config, **cli_overrides)
