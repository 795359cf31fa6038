"""Sandboxed evaluation of inline example fragments.

Fragments are data-construction expressions written in JavaScript literal
syntax::

    ({
        block: 'button',
        mods: { theme: 'islands', size: 'm' },
        content: ['Click ', 'me!'],
        js: true
    })

Nothing is executed. The text is normalized (comments removed, bare object
keys quoted), parsed with :mod:`ast` in ``eval`` mode and walked node by node,
accepting only literal constructs. There are no ambient bindings beyond
``true``, ``false``, ``null``, ``undefined``, ``NaN`` and ``Infinity``, so a
fragment cannot reach process state whatever it contains. The grammar has no
loops or calls, so evaluation time is linear in the source length, which is
bounded by ``max_source_length``; nesting is bounded by ``max_depth``.
"""

import ast
import json
import math
import re
import warnings
from typing import Any, Optional, Union

from bem_examples.errors import EvaluationError
from bem_examples.models.example import EvaluationFailure

DEFAULT_MAX_SOURCE_LENGTH = 1_000_000
DEFAULT_MAX_DEPTH = 200

IDENTIFIER = re.compile(r"(?:[^\W\d]|\$)[\w$]*")
NUMBER_TOKEN = re.compile(r"[\w.]+")
# Numeric separators sit between two digits only
MISPLACED_SEPARATOR = re.compile(r"(?<![0-9a-fA-F])_|_(?![0-9a-fA-F])|^0[xXoObB]_")
HEX_DIGITS = re.compile(r"[0-9a-fA-F]+")
OCTAL_ESCAPE = re.compile(r"[0-3][0-7]{0,2}|[4-7][0-7]?")
SURROGATE = re.compile("[\ud800-\udfff]")

SIMPLE_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v"}
LINE_TERMINATORS = "\n\r\u2028\u2029"

MAX_SAFE_INTEGER = 2**53


class _Undefined:
    """JavaScript ``undefined``: dropped from objects, ``null`` inside arrays."""

    _instance: Optional["_Undefined"] = None

    def __new__(cls) -> "_Undefined":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "undefined"


UNDEFINED = _Undefined()

GLOBALS: dict[str, Any] = {
    "true": True,
    "false": False,
    "null": None,
    "undefined": UNDEFINED,
    "NaN": math.nan,
    "Infinity": math.inf,
}


def _hex_escape(digits: str, message: str) -> str:
    if not HEX_DIGITS.fullmatch(digits):
        raise EvaluationError("SyntaxError", message)
    code = int(digits, 16)
    if code > 0x10FFFF:
        raise EvaluationError("SyntaxError", "Undefined Unicode code-point")
    return chr(code)


def _join_surrogates(text: str) -> str:
    """Combine UTF-16 surrogate pairs; lone surrogates are kept as they are."""
    if SURROGATE.search(text) is None:
        return text
    try:
        return text.encode("utf-16", "surrogatepass").decode("utf-16")
    except UnicodeDecodeError:
        return text


def read_string(source: str, start: int) -> tuple[str, int]:
    """Decode the JavaScript string literal opening at ``source[start]``.

    Escapes follow JavaScript rules: ``\\xHH``, ``\\uHHHH``, ``\\u{H...}``,
    legacy octal escapes and line continuations are decoded, and any other
    escaped character stands for itself (``'\\d'`` is ``d``).

    Returns:
        The decoded value and the index just past the closing quote.

    Raises:
        EvaluationError: On an unterminated string or a malformed escape.
    """
    quote = source[start]
    chars: list[str] = []
    i, n = start + 1, len(source)

    while i < n:
        ch = source[i]
        if ch == quote:
            return _join_surrogates("".join(chars)), i + 1
        if ch in "\n\r":
            break
        if ch != "\\":
            chars.append(ch)
            i += 1
            continue

        i += 1
        if i >= n:
            break
        escape = source[i]
        if escape in SIMPLE_ESCAPES:
            chars.append(SIMPLE_ESCAPES[escape])
            i += 1
        elif escape in LINE_TERMINATORS:
            i += 2 if source.startswith("\r\n", i) else 1
        elif escape == "x":
            digits = source[i + 1 : i + 3]
            if len(digits) != 2:
                raise EvaluationError("SyntaxError", "Invalid hexadecimal escape sequence")
            chars.append(_hex_escape(digits, "Invalid hexadecimal escape sequence"))
            i += 3
        elif escape == "u" and source.startswith("{", i + 1):
            end = source.find("}", i + 2)
            digits = source[i + 2 : end] if end != -1 else ""
            chars.append(_hex_escape(digits, "Invalid Unicode escape sequence"))
            i = end + 1
        elif escape == "u":
            digits = source[i + 1 : i + 5]
            if len(digits) != 4:
                raise EvaluationError("SyntaxError", "Invalid Unicode escape sequence")
            chars.append(_hex_escape(digits, "Invalid Unicode escape sequence"))
            i += 5
        elif (match := OCTAL_ESCAPE.match(source, i)) is not None:
            chars.append(chr(int(match.group(), 8)))
            i = match.end()
        else:
            chars.append(escape)
            i += 1

    raise EvaluationError("SyntaxError", "Invalid or unexpected token")


def quote_string(value: str) -> str:
    """Quote a decoded string so that :func:`ast.parse` reads it back unchanged."""
    quoted = json.dumps(value, ensure_ascii=False)
    return SURROGATE.sub(lambda m: f"\\u{ord(m.group()):04x}", quoted)


def normalize_source(source: str) -> str:
    """Turn JavaScript literal text into something :func:`ast.parse` accepts.

    Strips ``//`` and ``/* */`` comments outside of strings and quotes bare
    identifiers used as object keys (``{ class: 'x' }`` becomes
    ``{ "class": 'x' }``), which also covers keys that are Python keywords.
    String literals are decoded with JavaScript escape rules and re-emitted
    double-quoted, so Python string syntax never applies: prefixes such as
    ``r'...'`` and adjacent literals (``'a' 'b'``) are rejected.

    Args:
        source: Fragment text.

    Returns:
        Normalized text.

    Raises:
        EvaluationError: On an unterminated string or block comment, or on
            literal syntax JavaScript does not have.
    """
    out: list[str] = []
    last = ""  # Last significant character emitted
    after_string = False
    i, n = 0, len(source)

    while i < n:
        ch = source[i]

        if ch in "'\"":
            if after_string:
                raise EvaluationError("SyntaxError", "Unexpected string")
            value, i = read_string(source, i)
            out.append(quote_string(value))
            last = ch
            after_string = True
            continue

        if source.startswith("//", i):
            end = source.find("\n", i)
            i = n if end == -1 else end
            continue
        if source.startswith("/*", i):
            end = source.find("*/", i + 2)
            if end == -1:
                raise EvaluationError("SyntaxError", "Invalid or unexpected token")
            out.append(" ")
            i = end + 2
            continue
        if ch.isspace():
            out.append(ch)
            i += 1
            continue

        after_string = False
        if (match := IDENTIFIER.match(source, i)) is not None:
            word = match.group()
            k = match.end()
            if k < n and source[k] in "'\"":
                raise EvaluationError("SyntaxError", "Unexpected string")
            while k < n and source[k] in " \t\r\n":
                k += 1
            if last in "{," and k < n and source[k] == ":":
                out.append(f'"{word}"')
            else:
                out.append(word)
            last = word[-1]
            i = match.end()
        elif ch.isdigit() and (match := NUMBER_TOKEN.match(source, i)) is not None:
            token = match.group()
            if "_" in token and MISPLACED_SEPARATOR.search(token):
                raise EvaluationError("SyntaxError", "Numeric separators are only allowed between digits")
            out.append(token)
            last = token[-1]
            i = match.end()
        else:
            out.append(ch)
            last = ch
            i += 1

    return "".join(out)


def to_js_number(value: Any) -> Any:
    """Give an integer result the precision of a JavaScript number.

    Integers beyond 2**53 become floats (infinite past the float range),
    so arithmetic never leaves the double domain.
    """
    if isinstance(value, int) and not isinstance(value, bool) and abs(value) > MAX_SAFE_INTEGER:
        try:
            return float(value)
        except OverflowError:
            return math.inf if value > 0 else -math.inf
    return value


def to_js_string(value: Any) -> str:
    """String conversion with JavaScript semantics, for ``+`` concatenation."""
    if isinstance(value, str):
        return value
    if value is True:
        return "true"
    if value is False:
        return "false"
    if value is None:
        return "null"
    if value is UNDEFINED:
        return "undefined"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, list):
        return ",".join("" if v is None or v is UNDEFINED else to_js_string(v) for v in value)
    return "[object Object]"


def _to_number(value: Any) -> Union[int, float]:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    if value is None:
        return 0
    return math.nan


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class SandboxEvaluator:
    """Evaluates fragment text as an isolated literal expression."""

    def __init__(
        self,
        max_source_length: int = DEFAULT_MAX_SOURCE_LENGTH,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        """Initialize the evaluator.

        Args:
            max_source_length: Longest fragment accepted, in characters.
            max_depth: Deepest nesting of objects, arrays and operators.
        """
        self.max_source_length = max_source_length
        self.max_depth = max_depth

    def evaluate(
        self,
        source: str,
        source_path: Optional[str] = None,
    ) -> Union[Any, EvaluationFailure]:
        """Evaluate a fragment, reporting failure as a value.

        Args:
            source: Fragment text.
            source_path: Document the fragment came from, for diagnostics.

        Returns:
            The constructed value, or an EvaluationFailure. Never raises for
            bad fragment text.
        """
        try:
            return self.evaluate_strict(source)
        except EvaluationError as e:
            return EvaluationFailure(name=e.name, message=e.message, source_path=source_path)

    def evaluate_strict(self, source: str) -> Any:
        """Evaluate a fragment, raising on failure.

        Args:
            source: Fragment text.

        Returns:
            Nested dicts, lists, strings, numbers, booleans and None.

        Raises:
            EvaluationError: If the text is not a supported literal expression.
        """
        if len(source) > self.max_source_length:
            raise EvaluationError(
                "RangeError",
                f"Fragment is longer than {self.max_source_length} characters",
            )

        text = normalize_source(source)

        try:
            with warnings.catch_warnings():
                warnings.simplefilter("ignore")
                tree = ast.parse(f"({text}\n)", mode="eval")
        except SyntaxError as e:
            raise EvaluationError("SyntaxError", e.msg, e.lineno) from e
        except ValueError as e:
            raise EvaluationError("SyntaxError", str(e)) from e
        except (RecursionError, MemoryError) as e:
            raise EvaluationError("RangeError", "Maximum call stack size exceeded") from e

        try:
            value = self._eval(tree.body, 0)
        except RecursionError as e:
            raise EvaluationError("RangeError", "Maximum call stack size exceeded") from e
        except OverflowError as e:
            raise EvaluationError("RangeError", str(e)) from e
        return None if value is UNDEFINED else value

    def _eval(self, node: ast.AST, depth: int) -> Any:
        if depth > self.max_depth:
            raise EvaluationError("RangeError", "Maximum nesting depth exceeded")

        if isinstance(node, ast.Constant):
            return self._eval_constant(node)
        if isinstance(node, ast.Name):
            if node.id in GLOBALS:
                return GLOBALS[node.id]
            raise EvaluationError("ReferenceError", f"{node.id} is not defined", node.lineno)
        if isinstance(node, ast.Dict):
            return self._eval_dict(node, depth)
        if isinstance(node, ast.List):
            return [self._array_item(item, depth) for item in node.elts]
        if isinstance(node, ast.Tuple):
            # Comma operator: every operand is evaluated, the last one wins
            if not node.elts:
                raise EvaluationError("SyntaxError", "Unexpected end of input")
            values = [self._eval(item, depth + 1) for item in node.elts]
            return values[-1]
        if isinstance(node, ast.UnaryOp):
            return self._eval_unary(node, depth)
        if isinstance(node, ast.BinOp):
            return self._eval_binary(node, depth)
        if isinstance(node, ast.Call):
            callee = self._eval(node.func, depth + 1)
            raise EvaluationError(
                "TypeError", f"{to_js_string(callee)} is not a function", node.lineno
            )
        if isinstance(node, (ast.Attribute, ast.Subscript)):
            self._eval(node.value, depth + 1)
            raise EvaluationError(
                "TypeError", "Property access is not allowed in example literals", node.lineno
            )

        raise EvaluationError(
            "SyntaxError",
            f"Unexpected {type(node).__name__} expression",
            getattr(node, "lineno", None),
        )

    def _eval_constant(self, node: ast.Constant) -> Any:
        value = node.value
        if isinstance(value, (bool, type(None))):
            # Python spellings (True, None) are plain identifiers in JavaScript
            raise EvaluationError("ReferenceError", f"{value!r} is not defined", node.lineno)
        if isinstance(value, str):
            return value
        if isinstance(value, (int, float)):
            return to_js_number(value)
        raise EvaluationError("SyntaxError", "Invalid or unexpected token", node.lineno)

    def _eval_dict(self, node: ast.Dict, depth: int) -> dict:
        result: dict[str, Any] = {}
        for key_node, value_node in zip(node.keys, node.values):
            if key_node is None:
                raise EvaluationError("SyntaxError", "Unexpected token '**'", value_node.lineno)
            key = self._eval(key_node, depth + 1)
            if _is_number(key):
                key = to_js_string(key)
            elif not isinstance(key, str):
                raise EvaluationError(
                    "TypeError", "Object keys must be strings or numbers", key_node.lineno
                )
            value = self._eval(value_node, depth + 1)
            if value is UNDEFINED:
                result.pop(key, None)
            else:
                result[key] = value
        return result

    def _array_item(self, node: ast.AST, depth: int) -> Any:
        if isinstance(node, ast.Starred):
            raise EvaluationError("SyntaxError", "Unexpected token '*'", node.lineno)
        value = self._eval(node, depth + 1)
        return None if value is UNDEFINED else value

    def _eval_unary(self, node: ast.UnaryOp, depth: int) -> Any:
        operand = _to_number(self._eval(node.operand, depth + 1))
        if isinstance(node.op, ast.USub):
            return to_js_number(-operand)
        if isinstance(node.op, ast.UAdd):
            return operand
        raise EvaluationError("SyntaxError", "Unsupported unary operator", node.lineno)

    def _eval_binary(self, node: ast.BinOp, depth: int) -> Any:
        left = self._eval(node.left, depth + 1)
        right = self._eval(node.right, depth + 1)

        if isinstance(node.op, ast.Add):
            if isinstance(left, (str, list, dict)) or isinstance(right, (str, list, dict)):
                return to_js_string(left) + to_js_string(right)
            return to_js_number(_to_number(left) + _to_number(right))

        if not (_is_number(left) and _is_number(right)):
            raise EvaluationError(
                "TypeError", "Arithmetic is only supported between numbers", node.lineno
            )

        if isinstance(node.op, ast.Sub):
            return to_js_number(left - right)
        if isinstance(node.op, ast.Mult):
            return to_js_number(left * right)
        if isinstance(node.op, ast.Div):
            if right == 0:
                if left == 0 or math.isnan(left):
                    return math.nan
                return math.copysign(math.inf, left) * math.copysign(1, right)
            return left / right
        if isinstance(node.op, ast.Mod):
            if right == 0 or math.isinf(left) or math.isnan(left) or math.isnan(right):
                return math.nan
            if math.isinf(right):
                return left
            remainder = math.fmod(left, right)
            return int(remainder) if isinstance(left, int) and isinstance(right, int) else remainder

        raise EvaluationError("SyntaxError", "Unsupported binary operator", node.lineno)
