"""
Fault-tolerant JSON parsing for truncated and streamed documents.

Parses JSON text strictly first and, in partial mode, falls back to a
best-effort recovery of the top-level object when the text is incomplete.
Numbers can be kept as exact text, and duplicate-key and Inf/NaN policies
are configurable per parser.
"""

import logging
import math
from dataclasses import dataclass
from typing import IO
from typing import Any

from ._model import CacheMode
from ._model import DuplicateKeyError
from ._model import EmptyInputError
from ._model import FloatMode
from ._model import JSONDecodeError
from ._model import JsonValue
from ._model import JSONSyntaxError
from ._model import LosslessNumber
from ._model import NonFiniteNotAllowedError
from ._model import ParserConfig
from ._model import PartialMode
from ._recovery import MAX_RECOVERY_DEPTH
from ._recovery import RecoveryParser
from ._recovery import parse_partial
from ._recovery import resolve_scalar
from ._strict import MAX_NESTING_DEPTH
from ._strict import JsonLexer
from ._strict import JsonParser
from ._strict import parse_strict

__version__ = "0.1.0"

logging.getLogger("trunkjson").addHandler(logging.NullHandler())
logger = logging.getLogger("trunkjson.parser")

# More permissive type for values handed to the encoder
JsonValueLoose = Any


def walk_partial(value: JsonValue) -> JsonValue:
    """
    Visits a parsed value tree in place.

    Runs over successful strict results in partial mode. Nothing is
    transformed or copied; the same objects come back.
    """
    match value:
        case dict():
            for item in value.values():
                walk_partial(item)
        case list():
            for item in value:
                walk_partial(item)
    return value


class PartialJsonParser:
    """
    Parses JSON text under one immutable configuration.

    Strict parsing always runs first. When it fails and partial mode is on,
    the error is dropped and the recovered object is returned instead.
    """

    def __init__(
        self, config: ParserConfig | None = None, **options: Any
    ) -> None:
        if config is not None and options:
            raise TypeError(
                "pass either a ParserConfig or keyword options, not both"
            )
        if config is None:
            config = ParserConfig(**options)
        self.config = config

    def parse(self, text: str) -> JsonValue:
        """Parses ``text``, recovering truncated objects in partial mode."""
        if not isinstance(text, str):
            raise TypeError(
                f"the JSON object must be str, not {type(text).__name__}"
            )

        try:
            result = parse_strict(text, self.config)
        except EmptyInputError:
            raise
        except JSONDecodeError:
            if not self.config.partial:
                raise
            recovered = parse_partial(text, self.config)
            logger.debug(
                "Recovered %d key(s) from %d characters of incomplete JSON",
                len(recovered),
                len(text),
            )
            return recovered

        if self.config.partial and isinstance(result, dict | list):
            result = walk_partial(result)
        return result


def loads(s: str, **kwargs: Any) -> JsonValue:
    """
    Parses a JSON string with the given ParserConfig options.

    Accepts the ParserConfig fields as keyword arguments.
    """
    return PartialJsonParser(**kwargs).parse(s)


def load(fp: IO[str], **kwargs: Any) -> JsonValue:
    """
    Parses JSON read from a file-like object.
    """
    if not hasattr(fp, "read"):
        raise TypeError("fp must have a read() method")

    return loads(fp.read(), **kwargs)


@dataclass(frozen=True)
class EncodeConfig:
    """
    Configures JSON encoding behavior with immutable settings.

    Mirrors the standard library's dumps options.
    """

    skipkeys: bool = False
    ensure_ascii: bool = True
    sort_keys: bool = False
    indent: str | int | None = None
    separators: tuple[str, str] | None = None
    default: Any = None

    def __post_init__(self) -> None:
        if not isinstance(self.skipkeys, bool):
            raise TypeError("skipkeys must be a boolean")
        if not isinstance(self.ensure_ascii, bool):
            raise TypeError("ensure_ascii must be a boolean")
        if not isinstance(self.sort_keys, bool):
            raise TypeError("sort_keys must be a boolean")

    @property
    def item_separator(self) -> str:
        if self.separators:
            return self.separators[0]
        return "," if self.indent is not None else ", "

    @property
    def key_separator(self) -> str:
        return self.separators[1] if self.separators else ": "

    def indent_unit(self) -> str:
        if isinstance(self.indent, int):
            return " " * self.indent
        return self.indent or ""


_STRING_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}

_ASCII_LIMIT = 127
_CONTROL_LIMIT = 0x20
_BMP_LIMIT = 0xFFFF


def _encode_string(s: str, ensure_ascii: bool) -> str:
    """Encode string with proper escape sequences."""
    result = ['"']
    for char in s:
        code = ord(char)
        if char in _STRING_ESCAPES:
            result.append(_STRING_ESCAPES[char])
        elif code < _CONTROL_LIMIT:
            result.append(f"\\u{code:04x}")
        elif ensure_ascii and code > _ASCII_LIMIT:
            if code > _BMP_LIMIT:
                # Astral characters become a UTF-16 surrogate pair
                code -= 0x10000
                high = 0xD800 | (code >> 10)
                low = 0xDC00 | (code & 0x3FF)
                result.append(f"\\u{high:04x}\\u{low:04x}")
            else:
                result.append(f"\\u{code:04x}")
        else:
            result.append(char)
    result.append('"')
    return "".join(result)


def _encode_number(n: int | float) -> str:
    """Encode numeric values with JSON compliance."""
    if isinstance(n, float):
        if not math.isfinite(n):
            msg = "Out of range float values are not JSON compliant"
            raise ValueError(msg)
        return float.__repr__(n)
    return int.__repr__(n)


def _encode_key(key: Any, config: EncodeConfig) -> str | None:
    """Converts a dict key to its encoded form, or None to skip it."""
    if isinstance(key, str):
        str_key = key
    elif isinstance(key, bool):
        str_key = "true" if key else "false"
    elif isinstance(key, int | float):
        str_key = _encode_number(key)
    elif isinstance(key, LosslessNumber):
        str_key = key.value
    elif key is None:
        str_key = "null"
    elif config.skipkeys:
        return None
    else:
        msg = (
            "keys must be str, int, float, bool or None, "
            f"not {type(key).__name__}"
        )
        raise TypeError(msg)
    return _encode_string(str_key, config.ensure_ascii)


def _wrap(
    opener: str,
    closer: str,
    items: list[str],
    config: EncodeConfig,
    level: int,
) -> str:
    """Joins encoded members, indenting each nesting level."""
    if not items:
        return opener + closer
    if config.indent is None:
        return opener + config.item_separator.join(items) + closer

    unit = config.indent_unit()
    inner = "\n" + unit * (level + 1)
    return (
        opener
        + inner
        + (config.item_separator + inner).join(items)
        + "\n"
        + unit * level
        + closer
    )


def _encode_dict(d: dict[Any, Any], config: EncodeConfig, level: int) -> str:
    """Encode dictionary with key filtering and formatting."""
    entries = list(d.items())
    if config.sort_keys:
        entries.sort(key=lambda item: item[0])

    items = []
    for key, value in entries:
        encoded_key = _encode_key(key, config)
        if encoded_key is None:
            continue
        encoded_value = _encode_value(value, config, level + 1)
        items.append(f"{encoded_key}{config.key_separator}{encoded_value}")

    return _wrap("{", "}", items, config, level)


def _encode_value(  # noqa: PLR0911
    obj: JsonValueLoose, config: EncodeConfig, level: int
) -> str:
    """Encode any JSON-serializable value."""
    match obj:
        case None:
            return "null"
        case True:
            return "true"
        case False:
            return "false"
        case LosslessNumber():
            return obj.value
        case str():
            return _encode_string(obj, config.ensure_ascii)
        case int() | float():
            return _encode_number(obj)
        case dict():
            return _encode_dict(obj, config, level)
        case list() | tuple():
            items = [_encode_value(item, config, level + 1) for item in obj]
            return _wrap("[", "]", items, config, level)
        case _ if config.default is not None:
            return _encode_value(config.default(obj), config, level)
        case _:
            name = type(obj).__name__
            msg = f"Object of type {name} is not JSON serializable"
            raise TypeError(msg)


def dumps(obj: JsonValueLoose, **kwargs: Any) -> str:
    """
    Serializes parsed values back to JSON text.

    LosslessNumber values are written exactly as they were read.
    """
    config = EncodeConfig(**kwargs)
    return _encode_value(obj, config, 0)


def dump(obj: JsonValueLoose, fp: IO[str], **kwargs: Any) -> None:
    """
    Serializes values to a writable file-like object.
    """
    if not hasattr(fp, "write"):
        raise TypeError("fp must have a write() method")

    fp.write(dumps(obj, **kwargs))


__all__ = [
    "CacheMode",
    "DuplicateKeyError",
    "EmptyInputError",
    "EncodeConfig",
    "FloatMode",
    "JSONDecodeError",
    "JSONSyntaxError",
    "JsonLexer",
    "JsonParser",
    "JsonValue",
    "LosslessNumber",
    "MAX_NESTING_DEPTH",
    "MAX_RECOVERY_DEPTH",
    "NonFiniteNotAllowedError",
    "ParserConfig",
    "PartialJsonParser",
    "PartialMode",
    "RecoveryParser",
    "dump",
    "dumps",
    "load",
    "loads",
    "parse_partial",
    "parse_strict",
    "resolve_scalar",
    "walk_partial",
]
