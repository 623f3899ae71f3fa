"""
Value model, configuration and error taxonomy shared by both parsers.

Holds the immutable parser configuration, the lossless number wrapper and
the numeric transform that the strict and recovery parsers apply to every
number literal they meet.
"""

import decimal
import math
from dataclasses import dataclass
from enum import Enum

type Position = int


@dataclass(frozen=True)
class LosslessNumber:
    """
    Keeps a JSON number as the exact text it was written with.

    Produced instead of a binary float when the parser runs with
    ``float_mode="lossless"``, so that high-precision decimals and very
    large integers survive parsing unchanged.
    """

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise TypeError("LosslessNumber value must be a string")

    def to_float(self) -> float:
        """Converts to a binary float, losing precision where needed."""
        return float(self.value)

    def to_decimal(self) -> decimal.Decimal:
        """Converts to an exact decimal.Decimal."""
        return decimal.Decimal(self.value)

    def __float__(self) -> float:
        return self.to_float()

    def __int__(self) -> int:
        if is_integral_literal(self.value):
            return int(self.value)
        return int(self.to_decimal())

    def __str__(self) -> str:
        return self.value


# Recursive value definition; LosslessNumber only appears in lossless mode
JsonValue = (
    str
    | int
    | float
    | bool
    | None
    | LosslessNumber
    | dict[str, "JsonValue"]
    | list["JsonValue"]
)


class CacheMode(Enum):
    """String interning policy applied while building keys and values."""

    ALL = "all"
    NONE = "none"
    SMALL = "small"


class PartialMode(Enum):
    """Whether failed strict parses fall back to best-effort recovery."""

    OFF = "off"
    ON = "on"


class FloatMode(Enum):
    """Representation chosen for number literals."""

    NUMBER = "number"
    STRING = "string"
    LOSSLESS = "lossless"


def _coerce_mode[E: Enum](
    value: E | str, enum_type: type[E], name: str
) -> E:
    if isinstance(value, enum_type):
        return value
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a string or {enum_type.__name__}")
    try:
        return enum_type(value)
    except ValueError as e:
        choices = ", ".join(repr(m.value) for m in enum_type)
        raise ValueError(
            f"{name} must be one of {choices}, not {value!r}"
        ) from e


@dataclass(frozen=True)
class ParserConfig:
    """
    Configures parsing policies with immutable settings.

    Every default lives here. Mode fields accept either the enum member or
    its string value and are normalised to the enum on construction.
    """

    allow_inf_nan: bool = True
    cache_mode: CacheMode | str = CacheMode.ALL
    partial_mode: PartialMode | str = PartialMode.OFF
    catch_duplicate_keys: bool = False
    float_mode: FloatMode | str = FloatMode.NUMBER

    def __post_init__(self) -> None:
        if not isinstance(self.allow_inf_nan, bool):
            raise TypeError("allow_inf_nan must be a boolean")
        if not isinstance(self.catch_duplicate_keys, bool):
            raise TypeError("catch_duplicate_keys must be a boolean")

        # Frozen dataclass: normalise through object.__setattr__
        object.__setattr__(
            self,
            "cache_mode",
            _coerce_mode(self.cache_mode, CacheMode, "cache_mode"),
        )
        object.__setattr__(
            self,
            "partial_mode",
            _coerce_mode(self.partial_mode, PartialMode, "partial_mode"),
        )
        object.__setattr__(
            self,
            "float_mode",
            _coerce_mode(self.float_mode, FloatMode, "float_mode"),
        )

    @property
    def partial(self) -> bool:
        """True when failed parses are recovered instead of raised."""
        return self.partial_mode is PartialMode.ON


class JSONDecodeError(ValueError):
    """
    Handles JSON parsing failures with precise position information.

    Base of the error taxonomy. Carries the document, the offending position
    and the derived line and column numbers.
    """

    def __init__(self, msg: str, doc: str = "", pos: Position = 0) -> None:
        if not isinstance(msg, str):
            raise TypeError("msg must be a string")
        if not isinstance(pos, int) or pos < 0:
            raise ValueError("pos must be a non-negative integer")

        self.msg = msg
        self.doc = doc
        self.pos = pos

        self.lineno = doc.count("\n", 0, pos) + 1 if doc else 1
        self.colno = pos - doc.rfind("\n", 0, pos) if doc else pos + 1

        super().__init__(f"{msg} at line {self.lineno}, column {self.colno}")


class EmptyInputError(JSONDecodeError):
    """Raised when the input is empty or only whitespace."""

    def __init__(self, doc: str = "") -> None:
        super().__init__("Empty JSON string", doc, 0)


class JSONSyntaxError(JSONDecodeError):
    """Raised on any grammar violation."""


class NonFiniteNotAllowedError(JSONDecodeError):
    """Raised for Infinity, NaN or overflowing numbers when disallowed."""

    def __init__(self, literal: str, doc: str = "", pos: Position = 0):
        self.literal = literal
        super().__init__(f"Inf/NaN not allowed: {literal}", doc, pos)


class DuplicateKeyError(JSONDecodeError):
    """Raised when an object repeats a key and duplicates are caught."""

    def __init__(self, key: str, doc: str = "", pos: Position = 0) -> None:
        self.key = key
        super().__init__(f"Duplicate key {key!r}", doc, pos)


NON_FINITE_CONSTANTS = {
    "Infinity": math.inf,
    "-Infinity": -math.inf,
    "NaN": math.nan,
}

# Decimal point positions ECMAScript prints in plain notation
_PLAIN_POINT_MAX = 21
_PLAIN_POINT_MIN = -6


def number_to_text(value: float) -> str:
    """
    Formats a float the way ECMAScript's Number#toString does.

    Starts from the shortest round-tripping digits of ``repr`` and places
    the decimal point by the ECMAScript rules: plain notation, zero padded
    past the significant digits, for magnitudes from 1e-6 below 1e21,
    and ``d.ddde+N`` exponent notation outside that range.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    _, digit_tuple, exponent = decimal.Decimal(repr(abs(value))).as_tuple()
    digits = "".join(map(str, digit_tuple)).rstrip("0")
    # value == 0.<digits> * 10**point
    point = int(exponent) + len(digit_tuple)
    count = len(digits)

    if count <= point <= _PLAIN_POINT_MAX:
        text = digits + "0" * (point - count)
    elif 0 < point <= _PLAIN_POINT_MAX:
        text = digits[:point] + "." + digits[point:]
    elif _PLAIN_POINT_MIN < point <= 0:
        text = "0." + "0" * -point + digits
    else:
        power = point - 1
        mantissa = digits if count == 1 else digits[0] + "." + digits[1:]
        text = f"{mantissa}e{'+' if power > 0 else '-'}{abs(power)}"
    return sign + text


def is_integral_literal(literal: str) -> bool:
    """Checks whether a numeric literal has no fraction or exponent."""
    return not any(c in literal for c in ".eE")


def is_finite_literal(literal: str) -> bool:
    """Checks whether a numeric literal converts to a finite float."""
    if literal in NON_FINITE_CONSTANTS:
        return False
    return math.isfinite(float(literal))


def convert_number(literal: str, config: ParserConfig) -> JsonValue:
    """
    Transforms a raw numeric literal according to the configured float mode.

    Callers check the Inf/NaN policy first; this function only chooses the
    representation. Raises ValueError for integers beyond the interpreter's
    digit limit.
    """
    constant = NON_FINITE_CONSTANTS.get(literal)

    match config.float_mode:
        case FloatMode.LOSSLESS:
            if constant is not None:
                return constant
            return LosslessNumber(literal)
        case FloatMode.STRING:
            if constant is not None:
                return number_to_text(constant)
            return number_to_text(float(literal))
        case _:
            if constant is not None:
                return constant
            if is_integral_literal(literal):
                return int(literal)
            return float(literal)
