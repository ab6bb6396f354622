"""Typed values that parse flag arguments from strings and format them back."""

from __future__ import annotations

import math
import re
import struct
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import Any, Sequence

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"
_INT_BITS = (8, 16, 32, 64)
_FLOAT_BITS = (32, 64)


@dataclass(frozen=True)
class NoConfig:
    """Configuration for value types that take none."""


@dataclass(frozen=True)
class IntegerConfig:
    """Configuration for integer values.

    ``base`` 0 accepts ``0x``, ``0o``, ``0b`` and leading-zero octal prefixes
    and formats in base 10.
    """

    base: int = 0


@dataclass(frozen=True)
class TimestampConfig:
    """Configuration for timestamp values.

    ``layouts`` are ``strptime`` formats tried in order. A layout without a
    date takes today's date; one without a year takes the current year.
    """

    timezone: tzinfo | None = None
    layouts: Sequence[str] = ()


def _syntax_error(s: str) -> ValueError:
    return ValueError(f'parsing "{s}": invalid syntax')


def _range_error(s: str) -> ValueError:
    return ValueError(f'parsing "{s}": value out of range')


def _underscore_ok(s: str) -> bool:
    """Underscores may only separate digits, or follow a base prefix."""
    saw = "^"
    if s[:1] in ("+", "-"):
        s = s[1:]
    is_hex = False
    start = 0
    if len(s) >= 2 and s[0] == "0" and s[1].lower() in "box":
        start = 2
        saw = "0"
        is_hex = s[1].lower() == "x"
    for ch in s[start:]:
        if ch.isascii() and (ch.isdigit() or (is_hex and ch.lower() in "abcdef")):
            saw = "0"
            continue
        if ch == "_":
            if saw != "0":
                return False
            saw = "_"
            continue
        if saw == "_":
            return False
        saw = "!"
    return saw != "_"


def _parse_unsigned(s: str, base: int, bits: int, original: str | None = None) -> int:
    original = s if original is None else original
    if not s:
        raise _syntax_error(original)

    base_prefixed = base == 0
    if base == 0:
        base = 10
        if s[0] == "0":
            marker = s[1].lower() if len(s) >= 3 else ""
            if marker == "b":
                base, s = 2, s[2:]
            elif marker == "o":
                base, s = 8, s[2:]
            elif marker == "x":
                base, s = 16, s[2:]
            else:
                base, s = 8, s[1:]
    elif not 2 <= base <= 36:
        raise ValueError(f'parsing "{original}": invalid base {base}')

    max_value = (1 << bits) - 1
    n = 0
    underscores = False
    for ch in s:
        if ch == "_" and base_prefixed:
            underscores = True
            continue
        digit = _DIGITS.find(ch.lower()) if ch.isascii() else -1
        if digit < 0 or digit >= base:
            raise _syntax_error(original)
        n = n * base + digit
        if n > max_value:
            raise _range_error(original)

    if underscores and not _underscore_ok(original.lstrip("+-") if original[:1] in "+-" else original):
        raise _syntax_error(original)
    return n


def _parse_signed(s: str, base: int, bits: int) -> int:
    if not s:
        raise _syntax_error(s)
    body, negative = s, False
    if s[0] in "+-":
        body, negative = s[1:], s[0] == "-"
    magnitude = _parse_unsigned(body, base, bits, original=s)
    cutoff = 1 << (bits - 1)
    if (not negative and magnitude >= cutoff) or (negative and magnitude > cutoff):
        raise _range_error(s)
    return -magnitude if negative else magnitude


def _format_int(n: int, base: int) -> str:
    if base == 0:
        base = 10
    if not 2 <= base <= 36:
        raise ValueError(f"invalid base {base}")
    if n == 0:
        return "0"
    sign = "-" if n < 0 else ""
    n = abs(n)
    out = []
    while n:
        n, rem = divmod(n, base)
        out.append(_DIGITS[rem])
    return sign + "".join(reversed(out))


def _to_float32(v: float) -> float:
    return struct.unpack("<f", struct.pack("<f", v))[0]


def _parse_float(s: str, bits: int) -> float:
    if not s or s != s.strip():
        raise _syntax_error(s)
    body = s[1:] if s[0] in "+-" else s
    lowered = body.lower()

    if lowered in ("inf", "infinity", "nan"):
        value = float(s)
    elif lowered.startswith("0x"):
        if "p" not in lowered or not _underscore_ok(s):
            raise _syntax_error(s)
        try:
            value = float.fromhex(s.replace("_", ""))
        except OverflowError:
            raise _range_error(s) from None
        except ValueError:
            raise _syntax_error(s) from None
    else:
        if not body or any(ch not in "0123456789._eE+-" for ch in body):
            raise _syntax_error(s)
        try:
            value = float(s)
        except ValueError:
            raise _syntax_error(s) from None
        if math.isinf(value):
            raise _range_error(s)

    if bits == 32 and math.isfinite(value):
        try:
            value = _to_float32(value)
        except OverflowError:
            raise _range_error(s) from None
    return value


def _shortest_digits(v: float, bits: int) -> tuple[str, int]:
    """Shortest decimal digits that round-trip ``v`` and its decimal exponent."""
    text = f"{v:.16e}"
    for precision in range(1, 18):
        candidate = f"{v:.{precision - 1}e}"
        back = float(candidate)
        if bits == 32:
            try:
                back = _to_float32(back)
            except OverflowError:
                continue
        if back == v:
            text = candidate
            break
    mantissa, exponent = text.split("e")
    digits = mantissa.replace(".", "").rstrip("0") or "0"
    return digits, int(exponent)


def _format_float(v: float, bits: int) -> str:
    if math.isnan(v):
        return "NaN"
    if math.isinf(v):
        return "+Inf" if v > 0 else "-Inf"
    sign = "-" if math.copysign(1.0, v) < 0 else ""
    v = abs(v)
    if v == 0:
        return sign + "0"

    digits, exponent = _shortest_digits(v, bits)
    if exponent < -4 or exponent >= 6:
        mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
        exp_sign = "-" if exponent < 0 else "+"
        return f"{sign}{mantissa}e{exp_sign}{abs(exponent):02d}"

    point = exponent + 1
    if point <= 0:
        return f"{sign}0.{'0' * -point}{digits}"
    if point >= len(digits):
        return sign + digits + "0" * (point - len(digits))
    return f"{sign}{digits[:point]}.{digits[point:]}"


class Value(ABC):
    """A flag value: parsed from strings by :meth:`set`, read by :meth:`get`."""

    type_name = ""

    def __init__(self, value: Any = None) -> None:
        self._value = value

    @abstractmethod
    def set(self, s: str) -> None:
        """Parse ``s`` and store the result, raising ``ValueError`` if it is invalid."""

    def get(self) -> Any:
        """Return the current value."""
        return self._value

    @abstractmethod
    def to_string(self, value: Any) -> str:
        """Format ``value`` the way this value type displays it."""

    def is_bool_flag(self) -> bool:
        """Tell whether the value can be given without an argument."""
        return False

    def __str__(self) -> str:
        return self.to_string(self.get())


class StringValue(Value):
    """A plain string value."""

    type_name = "string"

    def __init__(self, value: str = "", config: Any = None) -> None:
        super().__init__(value)

    def set(self, s: str) -> None:
        self._value = s

    def to_string(self, value: Any) -> str:
        return "" if value is None else str(value)


class IntValue(Value):
    """A signed integer of ``bits`` width, parsed in the configured base."""

    type_name = "int"

    def __init__(self, value: int = 0, config: IntegerConfig | None = None, bits: int = 64) -> None:
        if bits not in _INT_BITS:
            raise ValueError(f"unsupported integer width {bits}")
        super().__init__(value)
        self.base = (config or IntegerConfig()).base
        self.bits = bits

    def set(self, s: str) -> None:
        self._value = _parse_signed(s, self.base, self.bits)

    def get(self) -> int:
        return self._value

    def to_string(self, value: int) -> str:
        return _format_int(int(value), self.base)


class UintValue(Value):
    """An unsigned integer of ``bits`` width, parsed in the configured base."""

    type_name = "uint"

    def __init__(self, value: int = 0, config: IntegerConfig | None = None, bits: int = 64) -> None:
        if bits not in _INT_BITS:
            raise ValueError(f"unsupported integer width {bits}")
        super().__init__(value)
        self.base = (config or IntegerConfig()).base
        self.bits = bits

    def set(self, s: str) -> None:
        self._value = _parse_unsigned(s, self.base, self.bits)

    def get(self) -> int:
        return self._value

    def to_string(self, value: int) -> str:
        return _format_int(int(value), self.base)


class FloatValue(Value):
    """A floating-point value of single (32) or double (64) precision."""

    type_name = "float"

    def __init__(self, value: float = 0.0, config: NoConfig | None = None, bits: int = 64) -> None:
        if bits not in _FLOAT_BITS:
            raise ValueError(f"unsupported float width {bits}")
        if bits == 32 and math.isfinite(value):
            value = _to_float32(value)
        super().__init__(float(value))
        self.bits = bits

    def set(self, s: str) -> None:
        self._value = _parse_float(s, self.bits)

    def get(self) -> float:
        return self._value

    def to_string(self, value: float) -> str:
        return _format_float(float(value), self.bits)


class GenericValue(Value):
    """Wraps any other :class:`Value`, delegating to it when present."""

    def __init__(self, value: Value | None = None, config: NoConfig | None = None) -> None:
        super().__init__(value)

    @property
    def wrapped(self) -> Value | None:
        """The wrapped value, if any."""
        return self._value

    def set(self, s: str) -> None:
        if self._value is not None:
            self._value.set(s)

    def get(self) -> Any:
        return self._value.get() if self._value is not None else None

    def to_string(self, value: Any) -> str:
        return "" if value is None else str(value)

    def is_bool_flag(self) -> bool:
        return self._value is not None and self._value.is_bool_flag()

    def __str__(self) -> str:
        return "" if self._value is None else str(self._value)


_YEAR_DIRECTIVES = frozenset("YyGcx")
_DATE_DIRECTIVES = _YEAR_DIRECTIVES | frozenset("mbBdjUWV")


def _parse_in_location(s: str, layout: str, location: tzinfo) -> datetime:
    directives = set(re.findall(r"%(.)", layout.replace("%%", "")))
    now = datetime.now(location)
    text, fmt = s, layout
    if not directives & _DATE_DIRECTIVES:
        text = f"{now.year:04d}-{now.month:02d}-{now.day:02d}|{s}"
        fmt = "%Y-%m-%d|" + layout
    elif not directives & _YEAR_DIRECTIVES:
        text = f"{now.year:04d}|{s}"
        fmt = "%Y|" + layout
    parsed = datetime.strptime(text, fmt)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=location)
    return parsed


class TimestampValue(Value):
    """A point in time parsed with the first matching configured layout."""

    type_name = "time"

    def __init__(self, value: datetime | None = None, config: TimestampConfig | None = None) -> None:
        super().__init__(value)
        config = config or TimestampConfig()
        self.layouts = list(config.layouts)
        self.location = config.timezone
        self.has_been_set = False

    def set(self, s: str) -> None:
        if self.location is None:
            self.location = timezone.utc
        if not self.layouts:
            raise ValueError("no timestamp layouts configured")

        errors: list[str] = []
        for layout in self.layouts:
            try:
                parsed = _parse_in_location(s, layout, self.location)
            except ValueError as exc:
                errors.append(str(exc))
                continue
            break
        else:
            raise ValueError("\n".join(errors))

        self._value = parsed
        self.has_been_set = True

    def get(self) -> datetime | None:
        return self._value

    def to_string(self, value: datetime | None) -> str:
        return "" if value is None else str(value)