"""Exception hierarchy for the example materialization pipeline."""

from typing import Optional


class BemExamplesError(Exception):
    """Base class for all errors raised by bem-examples."""


class ConfigError(BemExamplesError):
    """Configuration is missing or invalid. Fatal to the build pass."""


class ExtractionError(BemExamplesError):
    """A documentation file could not be read as text.

    Callers treat this as "no fragments here" and keep scanning.
    """

    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")


class EvaluationError(BemExamplesError):
    """A fragment failed to evaluate as a data literal.

    ``name`` follows the error class names a JavaScript engine would report
    (``SyntaxError``, ``ReferenceError``, ``TypeError``, ``RangeError``), so
    warnings read the same as they would for the consuming toolchain.
    """

    def __init__(self, name: str, message: str, line: Optional[int] = None):
        self.name = name
        self.message = message
        self.line = line
        super().__init__(f"{name}: {message}")


class UnsatisfiableTargetError(BemExamplesError):
    """A requested target has no provider and no placeholder to copy from."""

    def __init__(self, target: str, reason: str = "no example provides this path"):
        self.target = target
        super().__init__(f"Cannot build {target}: {reason}")
