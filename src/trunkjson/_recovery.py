"""
Best-effort recovery of truncated JSON objects.

Used when the strict parser rejects a document in partial mode. A single
left-to-right scan splits the top-level object into key and value segments,
tolerating a missing closing brace and a trailing incomplete value, and
resolves each value segment into a typed scalar.
"""

import re
from enum import Enum

from ._model import NON_FINITE_CONSTANTS
from ._model import JSONDecodeError
from ._model import JsonValue
from ._model import ParserConfig
from ._model import convert_number
from ._model import is_finite_literal
from ._strict import parse_strict

# Truncated objects nested deeper than this stay raw text
MAX_RECOVERY_DEPTH = 32

# Cheaper than the strict grammar: admits "+1", ".5", "1." and leading zeros
_LENIENT_NUMBER = re.compile(
    r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
)


class ScanState(Enum):
    """Segment the recovery scanner is currently accumulating."""

    NEUTRAL = "neutral"
    IN_KEY = "in_key"
    IN_VALUE = "in_value"
    IN_STRING = "in_string"


def _strip_quotes(text: str) -> str | None:
    if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
        return text[1:-1]
    return None


def resolve_scalar(
    text: str, config: ParserConfig, nesting: int = 0
) -> JsonValue:
    """
    Converts a trimmed value fragment into a typed value.

    Quoted text keeps its escape sequences verbatim. Bracketed fragments
    are parsed strictly when complete and recovered when they are a
    truncated object. Anything unrecognised comes back as the raw string.
    Objects more than MAX_RECOVERY_DEPTH levels down are left as text.
    """
    match text:
        case "true":
            return True
        case "false":
            return False
        case "null":
            return None

    unquoted = _strip_quotes(text)
    if unquoted is not None:
        return unquoted

    if text in NON_FINITE_CONSTANTS or _LENIENT_NUMBER.fullmatch(text):
        if not config.allow_inf_nan and not is_finite_literal(text):
            return text
        try:
            return convert_number(text, config)
        except ValueError:
            # Beyond the interpreter's int digit limit
            return text

    if text.startswith(("{", "[")):
        try:
            return parse_strict(text, config)
        except JSONDecodeError:
            if text.startswith("{") and nesting < MAX_RECOVERY_DEPTH:
                return parse_partial(text, config, nesting + 1)

    return text


class RecoveryParser:
    """
    Single-pass scanner assembling as much of a top-level object as it can.

    Never raises. Nested containers inside a value are carried through as
    one bracketed segment and handed to resolve_scalar.
    """

    def __init__(self, text: str, config: ParserConfig, nesting: int = 0):
        self.text = text.strip()
        self.config = config
        self.nesting = nesting
        self.result: dict[str, JsonValue] = {}
        self.state = ScanState.NEUTRAL
        self.buffer: list[str] = []
        self.pending_key: str | None = None
        self.depth = 0
        self.escaped = False

    def _append(self, char: str) -> None:
        self.buffer.append(char)
        if self.state is ScanState.NEUTRAL and not char.isspace():
            self.state = ScanState.IN_KEY

    def _take_buffer(self) -> str:
        text = "".join(self.buffer).strip()
        self.buffer = []
        return text

    def _scan_string_char(self, char: str) -> None:
        self.buffer.append(char)
        if self.escaped:
            self.escaped = False
        elif char == "\\":
            self.escaped = True
        elif char == '"':
            if self.pending_key is None:
                self.state = ScanState.IN_KEY
            else:
                self.state = ScanState.IN_VALUE

    def _scan_nested_char(self, char: str) -> None:
        self.buffer.append(char)
        if char == '"':
            self.state = ScanState.IN_STRING
        elif char in "{[":
            self.depth += 1
        elif char in "}]":
            self.depth -= 1

    def _end_key(self) -> None:
        raw = self._take_buffer()
        unquoted = _strip_quotes(raw)
        self.pending_key = raw if unquoted is None else unquoted
        self.state = ScanState.IN_VALUE

    def _end_value(self) -> None:
        text = self._take_buffer()
        if self.pending_key is not None:
            self.result[self.pending_key] = resolve_scalar(
                text, self.config, self.nesting
            )
            self.pending_key = None
        self.state = ScanState.NEUTRAL

    def _finish(self) -> None:
        if self.pending_key is None:
            return

        if self.state is ScanState.IN_STRING and self.depth == 0:
            # Unterminated string: keep the fragment without its quote
            text = self._take_buffer()
            if text.startswith('"'):
                text = text[1:]
            self.result[self.pending_key] = text
            self.pending_key = None
        else:
            self._end_value()

    def parse(self) -> dict[str, JsonValue]:
        """Scans the text and returns every member it could recover."""
        if not self.text.startswith("{"):
            return self.result

        for char in self.text[1:]:
            if self.state is ScanState.IN_STRING:
                self._scan_string_char(char)
            elif self.depth > 0:
                self._scan_nested_char(char)
            elif char == '"':
                self._append(char)
                self.state = ScanState.IN_STRING
            elif char == ":" and self.pending_key is None:
                self._end_key()
            elif char == ",":
                self._end_value()
            elif char == "}":
                self._end_value()
                return self.result
            elif char in "{[" and self.pending_key is not None:
                self._append(char)
                self.depth += 1
            else:
                self._append(char)

        self._finish()
        return self.result


def parse_partial(
    text: str, config: ParserConfig, nesting: int = 0
) -> dict[str, JsonValue]:
    """
    Recovers the members of a possibly truncated JSON object.

    ``nesting`` counts the enclosing recovered objects.
    """
    return RecoveryParser(text, config, nesting).parse()
