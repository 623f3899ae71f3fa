"""
Strict JSON lexer and recursive-descent parser.

Parses complete RFC 8259 documents, admitting the Infinity/NaN constants and
applying the configured number representation, duplicate-key policy and
string interning while the value tree is built.
"""

import string
from dataclasses import dataclass
from enum import Enum

from ._model import CacheMode
from ._model import DuplicateKeyError
from ._model import EmptyInputError
from ._model import JsonValue
from ._model import JSONSyntaxError
from ._model import NON_FINITE_CONSTANTS
from ._model import NonFiniteNotAllowedError
from ._model import ParserConfig
from ._model import Position
from ._model import convert_number
from ._model import is_finite_literal

_WHITESPACE = " \t\n\r"
_DIGITS = "0123456789"
_HEX_DIGITS = frozenset(string.hexdigits)

_ESCAPES = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}

# Raw token length up to which strings are interned in CacheMode.SMALL
SMALL_STRING_LIMIT = 64

# Deepest container nesting accepted, bounding parse_value recursion
MAX_NESTING_DEPTH = 200

_CONTROL_LIMIT = 0x20


class TokenType(Enum):
    """Kinds of token produced by the lexer."""

    PUNCT = "punct"
    STRING = "string"
    NUMBER = "number"
    LITERAL = "literal"


@dataclass(frozen=True)
class JsonToken:
    """
    Represents a JSON token with position information.

    ``value`` is the exact source slice, quotes included for strings.
    """

    type: TokenType
    value: str
    start: Position
    end: Position


class JsonLexer:
    """
    Tokenizes JSON input for the recursive-descent parser.

    Scans character by character between ``start`` and ``end`` so that
    error positions refer to the caller's untrimmed document.
    """

    def __init__(self, text: str, start: int = 0, end: int | None = None):
        self.text = text
        self.pos = start
        self.length = len(text) if end is None else end

    def peek(self) -> str:
        """Returns current character without advancing."""
        return self.text[self.pos] if self.pos < self.length else "\0"

    def advance(self) -> str:
        """Returns current character and advances position."""
        char = self.peek()
        if self.pos < self.length:
            self.pos += 1
        return char

    def skip_whitespace(self) -> None:
        while self.pos < self.length and self.text[self.pos] in _WHITESPACE:
            self.pos += 1

    def scan_string(self) -> JsonToken:
        """Scans a JSON string token including quotes."""
        start = self.pos
        self.advance()

        while self.pos < self.length:
            char = self.advance()
            if char == '"':
                return JsonToken(
                    TokenType.STRING,
                    self.text[start : self.pos],
                    start,
                    self.pos,
                )
            elif char == "\\":
                if self.pos >= self.length:
                    break
                self.advance()
            elif ord(char) < _CONTROL_LIMIT:
                raise JSONSyntaxError(
                    "Invalid control character at", self.text, self.pos - 1
                )

        raise JSONSyntaxError(
            "Unterminated string starting at", self.text, start
        )

    def _scan_digits(self) -> None:
        while self.peek() in _DIGITS:
            self.advance()

    def scan_number(self) -> JsonToken:
        """Scans a JSON number token, or the -Infinity constant."""
        start = self.pos

        if self.text.startswith("-Infinity", self.pos, self.length):
            self.pos += len("-Infinity")
            return JsonToken(TokenType.LITERAL, "-Infinity", start, self.pos)

        if self.peek() == "-":
            self.advance()

        if self.peek() not in _DIGITS:
            raise JSONSyntaxError("Expecting value", self.text, start)
        if self.advance() == "0":
            if self.peek() in _DIGITS:
                raise JSONSyntaxError(
                    "Leading zeros not allowed", self.text, start
                )
        else:
            self._scan_digits()

        if self.peek() == ".":
            self.advance()
            if self.peek() not in _DIGITS:
                raise JSONSyntaxError(
                    "Invalid decimal number", self.text, start
                )
            self._scan_digits()

        if self.peek() in "eE":
            self.advance()
            if self.peek() in "+-":
                self.advance()
            if self.peek() not in _DIGITS:
                raise JSONSyntaxError("Invalid exponent", self.text, start)
            self._scan_digits()

        return JsonToken(
            TokenType.NUMBER, self.text[start : self.pos], start, self.pos
        )

    def scan_literal(self) -> JsonToken:
        """Scans literal tokens: true, false, null, Infinity and NaN."""
        start = self.pos
        for literal in ("true", "false", "null", "Infinity", "NaN"):
            if self.text.startswith(literal, start, self.length):
                self.pos += len(literal)
                return JsonToken(TokenType.LITERAL, literal, start, self.pos)
        raise JSONSyntaxError("Expecting value", self.text, start)

    def next_token(self) -> JsonToken | None:
        """Returns the next token or None if at end."""
        self.skip_whitespace()

        if self.pos >= self.length:
            return None

        char = self.peek()
        start = self.pos

        if char in "{}[],:":
            self.advance()
            return JsonToken(TokenType.PUNCT, char, start, self.pos)
        elif char == '"':
            return self.scan_string()
        elif char in _DIGITS or char == "-":
            return self.scan_number()
        elif char in "tfnIN":
            return self.scan_literal()
        else:
            raise JSONSyntaxError("Expecting value", self.text, self.pos)


def _parse_hex4(inner: str, index: int, doc: str, pos: Position) -> int:
    digits = inner[index : index + 4]
    if len(digits) != 4 or not _HEX_DIGITS.issuperset(digits):
        raise JSONSyntaxError("Invalid \\uXXXX escape", doc, pos)
    return int(digits, 16)


def decode_string(token: JsonToken, doc: str) -> str:
    """Strips the quotes from a string token and decodes its escapes."""
    inner = token.value[1:-1]
    if "\\" not in inner:
        return inner

    parts: list[str] = []
    i = 0
    while i < len(inner):
        char = inner[i]
        if char != "\\":
            parts.append(char)
            i += 1
            continue

        # The lexer guarantees a character follows every backslash
        escape = inner[i + 1]
        pos = token.start + 1 + i
        if escape in _ESCAPES:
            parts.append(_ESCAPES[escape])
            i += 2
            continue
        if escape != "u":
            raise JSONSyntaxError("Invalid \\escape", doc, pos)

        code = _parse_hex4(inner, i + 2, doc, pos)
        i += 6
        if 0xD800 <= code <= 0xDBFF and inner.startswith("\\u", i):
            low = _parse_hex4(inner, i + 2, doc, token.start + 1 + i)
            if 0xDC00 <= low <= 0xDFFF:
                code = 0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00)
                i += 6
        parts.append(chr(code))

    return "".join(parts)


class JsonParser:
    """
    Recursive-descent parser over the lexer's token stream.

    Applies the number transform, the Inf/NaN policy, duplicate-key
    detection and per-parse string interning from its ParserConfig.
    """

    def __init__(self, lexer: JsonLexer, config: ParserConfig):
        self.lexer = lexer
        self.config = config
        self.current_token: JsonToken | None = None
        self._string_cache: dict[str, str] = {}
        self.depth = 0

    def advance_token(self) -> JsonToken | None:
        """Advances to next token and returns it."""
        self.current_token = self.lexer.next_token()
        return self.current_token

    def _error_pos(self) -> Position:
        if self.current_token:
            return self.current_token.start
        return self.lexer.pos

    def expect_token(self, expected_value: str) -> JsonToken:
        """Expects a specific punctuation token and advances."""
        token = self.current_token
        if (
            not token
            or token.type != TokenType.PUNCT
            or token.value != expected_value
        ):
            raise JSONSyntaxError(
                f"Expecting '{expected_value}' delimiter",
                self.lexer.text,
                self._error_pos(),
            )
        self.advance_token()
        return token

    def _is_punct(self, value: str) -> bool:
        token = self.current_token
        return (
            token is not None
            and token.type == TokenType.PUNCT
            and token.value == value
        )

    def parse_value(self) -> JsonValue:
        """Parses any JSON value based on current token."""
        token = self.current_token
        if not token:
            raise JSONSyntaxError(
                "Expecting value", self.lexer.text, self.lexer.pos
            )

        if token.type == TokenType.STRING:
            self.advance_token()
            return self._string_value(token)
        elif token.type == TokenType.NUMBER:
            self.advance_token()
            return self._number_value(token)
        elif token.type == TokenType.LITERAL:
            self.advance_token()
            return self._literal_value(token)
        elif token.value == "{":
            return self.parse_object()
        elif token.value == "[":
            return self.parse_array()
        else:
            raise JSONSyntaxError(
                "Expecting value", self.lexer.text, token.start
            )

    def _string_value(self, token: JsonToken) -> str:
        """
        Decodes a string token, interning it per the cache mode.

        Identical raw tokens map to the same str object within one parse.
        """
        mode = self.config.cache_mode
        if mode is CacheMode.NONE or (
            mode is CacheMode.SMALL and len(token.value) > SMALL_STRING_LIMIT
        ):
            return decode_string(token, self.lexer.text)

        cached = self._string_cache.get(token.value)
        if cached is None:
            cached = decode_string(token, self.lexer.text)
            self._string_cache[token.value] = cached
        return cached

    def _number_value(self, token: JsonToken) -> JsonValue:
        if not self.config.allow_inf_nan and not is_finite_literal(
            token.value
        ):
            raise NonFiniteNotAllowedError(
                token.value, self.lexer.text, token.start
            )
        try:
            return convert_number(token.value, self.config)
        except ValueError as e:
            # int() refuses literals beyond sys.get_int_max_str_digits()
            raise JSONSyntaxError(
                "Number too large", self.lexer.text, token.start
            ) from e

    def _literal_value(self, token: JsonToken) -> JsonValue:
        if token.value in NON_FINITE_CONSTANTS:
            return self._number_value(token)
        return {"true": True, "false": False, "null": None}[token.value]

    def _parse_object_key(self) -> JsonToken:
        """Consumes an object key, which must be a string token."""
        token = self.current_token
        if not token or token.type != TokenType.STRING:
            raise JSONSyntaxError(
                "Expecting property name enclosed in double quotes",
                self.lexer.text,
                self._error_pos(),
            )
        self.advance_token()
        return token

    def _handle_continuation(self, closer: str, container: str) -> bool:
        """Consumes ',' or the closing bracket; True means more members."""
        if self._is_punct(closer):
            self.advance_token()
            return False
        if not self._is_punct(","):
            raise JSONSyntaxError(
                "Expecting ',' delimiter", self.lexer.text, self._error_pos()
            )

        comma_pos = self._error_pos()
        self.advance_token()
        if self._is_punct(closer):
            raise JSONSyntaxError(
                f"Illegal trailing comma before end of {container}",
                self.lexer.text,
                comma_pos,
            )
        return True

    def _enter_container(self) -> None:
        self.depth += 1
        if self.depth > MAX_NESTING_DEPTH:
            raise JSONSyntaxError(
                "Maximum nesting depth exceeded",
                self.lexer.text,
                self._error_pos(),
            )

    def parse_object(self) -> dict[str, JsonValue]:
        """Parses a JSON object, preserving key insertion order."""
        self._enter_container()
        self.expect_token("{")

        obj: dict[str, JsonValue] = {}
        if self._is_punct("}"):
            self.advance_token()
            self.depth -= 1
            return obj

        while True:
            key_token = self._parse_object_key()
            key = self._string_value(key_token)
            self.expect_token(":")
            value = self.parse_value()

            if self.config.catch_duplicate_keys and key in obj:
                raise DuplicateKeyError(
                    key, self.lexer.text, key_token.start
                )
            obj[key] = value

            if not self._handle_continuation("}", "object"):
                self.depth -= 1
                return obj

    def parse_array(self) -> list[JsonValue]:
        """Parses a JSON array."""
        self._enter_container()
        self.expect_token("[")

        values: list[JsonValue] = []
        if self._is_punct("]"):
            self.advance_token()
            self.depth -= 1
            return values

        while True:
            values.append(self.parse_value())
            if not self._handle_continuation("]", "array"):
                self.depth -= 1
                return values


def parse_strict(text: str, config: ParserConfig) -> JsonValue:
    """
    Parses a complete JSON document or raises a JSONDecodeError subclass.

    Surrounding whitespace is ignored; positions in raised errors index into
    ``text`` as given.
    """
    stripped = text.strip()
    if not stripped:
        raise EmptyInputError(text)

    start = len(text) - len(text.lstrip())
    end = start + len(stripped)

    if text[start] == "\ufeff":
        raise JSONSyntaxError(
            "Unexpected UTF-8 BOM (decode using utf-8-sig)", text, start
        )

    lexer = JsonLexer(text, start, end)
    parser = JsonParser(lexer, config)
    parser.advance_token()

    result = parser.parse_value()

    if parser.current_token:
        raise JSONSyntaxError("Extra data", text, parser.current_token.start)

    return result
