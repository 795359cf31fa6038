"""Apply the user transform to evaluated examples and serialize the result."""

import importlib
import json
import math
from pathlib import Path
from typing import Any, Callable, Optional, Union

from pydantic import BaseModel

from bem_examples.errors import ConfigError
from bem_examples.evaluators.sandbox import UNDEFINED, to_js_string
from bem_examples.naming import Notation

TransformCallback = Callable[[Any, dict], Any]


def identity_transform(value: Any, meta: dict) -> Any:
    """Default transform: keep the evaluated value as is."""
    return value


def resolve_callback(
    ref: Union[str, TransformCallback, None],
) -> TransformCallback:
    """Resolve a transform callback from config.

    Args:
        ref: A callable, a dotted path (``package.module:function`` or
            ``package.module.function``), or None for the identity transform.

    Returns:
        The callback.

    Raises:
        ConfigError: If the path cannot be imported or is not callable.
    """
    if ref is None:
        return identity_transform
    if callable(ref):
        return ref

    module_name, sep, attr = ref.partition(":")
    if not sep:
        module_name, _, attr = ref.rpartition(".")
    if not module_name or not attr:
        raise ConfigError(f"Invalid transform path: {ref!r}")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(f"Cannot import transform module {module_name!r}: {e}") from e

    callback = getattr(module, attr, None)
    if not callable(callback):
        raise ConfigError(f"Transform {ref!r} is not a callable")
    return callback


def to_json_value(value: Any) -> Any:
    """Convert a transformed value into plain JSON data.

    Mirrors ``JSON.stringify``: non-finite numbers become null, whole numbers
    lose their fraction, ``undefined`` members are dropped from objects and
    become null in arrays.

    Raises:
        TypeError: If the value contains something with no JSON form.
    """
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if value is UNDEFINED or value is None:
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    # Integral numbers below 1e21 are written without a fraction
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return int(value)
    if isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, dict):
        return {
            (key if isinstance(key, str) else to_js_string(key)): to_json_value(item)
            for key, item in value.items()
            if item is not UNDEFINED
        }
    if isinstance(value, (list, tuple)):
        return [to_json_value(item) for item in value]
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def serialize(value: Any) -> str:
    """Serialize a value as a standalone parenthesized literal.

    The output evaluates back to an equal value, so a prebuilt artifact can be
    read by the same evaluator that reads inline fragments.
    """
    payload = json.dumps(to_json_value(value), ensure_ascii=False, separators=(",", ":"))
    return f"({payload})"


class ExampleTransformer:
    """Runs the configured transform with example metadata."""

    def __init__(self, callback: Optional[TransformCallback] = None):
        """Initialize the transformer.

        Args:
            callback: Transform taking ``(value, meta)``; identity when None.
        """
        self._callback = callback or identity_transform

    def transform(self, value: Any, filename: Path, notation: Optional[Notation]) -> Any:
        """Apply the transform.

        Args:
            value: Evaluated fragment.
            filename: Absolute path the artifact will be written to.
            notation: Notation of the documented entity.

        Returns:
            The transformed value.
        """
        meta = {
            "filename": str(filename),
            "notation": notation.to_dict() if notation else None,
        }
        return self._callback(value, meta)

    def render(self, value: Any, filename: Path, notation: Optional[Notation]) -> str:
        """Transform and serialize in one step."""
        return serialize(self.transform(value, filename, notation))
