"""Default configuration values for bem-examples."""

from pathlib import Path

# Default configuration file names, JSON first
DEFAULT_CONFIG_FILENAMES = ["bem-examples.config.json", "bem-examples.config.yml"]

# Search paths for configuration file (in order of priority)
CONFIG_SEARCH_PATHS = [
    *(Path.cwd() / name for name in DEFAULT_CONFIG_FILENAMES),
    Path.home() / ".config" / "bem-examples" / "config.json",
]

# Environment variable overriding the project root
ROOT_ENV_VAR = "BEM_EXAMPLES_ROOT"

# Example discovery
DEFAULT_TECH_SUFFIXES = ["examples"]
DEFAULT_FILE_SUFFIXES = ["bemjson.js"]
DEFAULT_DOC_EXTENSIONS = [".md"]
DEFAULT_CODE_TAG = "bemjson"

# Extension of the artifact written for an inline example
INLINE_TARGET_SUFFIX = "bemjson.js"

# Concurrent per-example units (reads, evaluations, writes)
DEFAULT_CONCURRENCY = 8
