"""Command-line flags built on typed values, and mutually exclusive flag groups."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence

from clikit.multivalue import MapValue, SliceValue
from clikit.values import (
    FloatValue,
    GenericValue,
    IntegerConfig,
    IntValue,
    NoConfig,
    StringValue,
    TimestampConfig,
    TimestampValue,
    UintValue,
    Value,
)

ShellCompleteFunc = Callable[[Any, Any], None]
BeforeFunc = Callable[[Any, Any], Any]
AfterFunc = Callable[[Any, Any], None]
ActionFunc = Callable[[Any, Any], None]
CommandNotFoundFunc = Callable[[Any, Any, str], None]
ConfigureShellCompletionCommand = Callable[[Any], None]
OnUsageErrorFunc = Callable[[Any, Any, BaseException, bool], Optional[BaseException]]
InvalidFlagAccessFunc = Callable[[Any, Any, str], None]
ExitErrHandlerFunc = Callable[[Any, Any, BaseException], None]
FlagStringFunc = Callable[[Any], str]
FlagNamePrefixFunc = Callable[[Sequence[str], str], str]
FlagEnvHintFunc = Callable[[Sequence[str], str], str]
FlagFileHintFunc = Callable[[str, str], str]

FlagAction = Callable[[Any, Any, Any], Any]
FlagValidator = Callable[[Any], None]


class FlagError(ValueError):
    """A flag was used in a way its definition does not allow."""


class MutuallyExclusiveError(FlagError):
    """Two flags of a mutually exclusive group were both set."""

    def __init__(self, first: str, second: str) -> None:
        super().__init__(f"option {first} cannot be set along with option {second}")
        self.first = first
        self.second = second


class MutuallyExclusiveRequiredError(FlagError):
    """A required mutually exclusive group had none of its flags set."""

    def __init__(self, group: "MutuallyExclusiveFlags") -> None:
        options = [
            " ".join("--" + name for name in flag.names())
            for flags in group.flags
            for flag in flags
        ]
        super().__init__(
            "one of these flags needs to be provided: " + ", ".join(options)
        )
        self.group = group


def _format_default(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(_format_default(item) for item in value) + "]"
    if isinstance(value, dict):
        body = " ".join(f"{key}:{_format_default(value[key])}" for key in sorted(value))
        return f"map[{body}]"
    return str(value)


@dataclass(eq=False)
class FlagBase(ABC):
    """Common behaviour of every flag.

    ``value`` is the default; ``env_vars`` name environment variables the
    value may be read from. ``validator`` raises ``ValueError`` to reject a
    value; ``action`` is called as ``action(ctx, cmd, value)``.
    """

    name: str = ""
    category: str = ""
    default_text: str = ""
    hide_default: bool = False
    usage: str = ""
    env_vars: Sequence[str] = ()
    required: bool = False
    hidden: bool = False
    local: bool = False
    value: Any = None
    aliases: Sequence[str] = ()
    takes_file: bool = False
    action: Optional[FlagAction] = None
    config: Any = None
    only_once: bool = False
    validator: Optional[FlagValidator] = None
    validate_defaults: bool = False

    _count: int = field(default=0, init=False, repr=False)
    _has_been_set: bool = field(default=False, init=False, repr=False)
    _applied: bool = field(default=False, init=False, repr=False)
    _value: Optional[Value] = field(default=None, init=False, repr=False)

    _is_bool_type = False
    _is_string_type = False

    def __post_init__(self) -> None:
        if self.value is None:
            self.value = self._zero()
        if self.config is None:
            self.config = self._default_config()
        self.aliases = list(self.aliases)
        self.env_vars = list(self.env_vars)

    def _zero(self) -> Any:
        return None

    def _default_config(self) -> Any:
        return NoConfig()

    @abstractmethod
    def _make_value(self, default: Any, config: Any) -> Value:
        """Create the value object holding ``default``."""

    def names(self) -> list[str]:
        """The flag's name followed by its aliases."""
        return [n.strip() for n in [self.name, *self.aliases] if n.strip()]

    def pre_parse(self) -> None:
        """Create the value holder from the default, validating it if asked."""
        self._value = self._make_value(self.value, self.config)
        if self.validator is not None and self.validate_defaults:
            self.validator(self._value.get())
        self._applied = True

    def post_parse(self) -> None:
        """Fill the flag from its environment variables if it was not set."""
        if self._has_been_set:
            return
        for key in self.env_vars:
            if key not in os.environ:
                continue
            val = os.environ[key]
            if val != "" or self._is_string_type:
                try:
                    self.set(self.name, val)
                except ValueError as exc:
                    raise FlagError(
                        f'could not parse "{val}" as {self.type_name()} value from '
                        f'environment variable "{key}" for flag {self.name}: {exc}'
                    ) from exc
            elif self._is_bool_type:
                self.set(self.name, "false")
            self._has_been_set = True
            return

    def set(self, name: str, val: str) -> None:
        """Apply ``val`` from the command line or another source."""
        if not self._applied or self.local:
            self.pre_parse()
        if self._count == 1 and self.only_once:
            raise FlagError("cant duplicate this flag")
        self._count += 1
        self._value.set(val)
        self._has_been_set = True
        if self.validator is not None:
            self.validator(self._value.get())

    def get(self) -> Any:
        """The current value, or the default before the flag was applied."""
        if self._value is not None:
            return self._value.get()
        return self.value

    def get_value(self) -> str:
        """The default as text, or ``""`` for flags that take no value."""
        if not self.takes_value():
            return ""
        return _format_default(self.value)

    def type_name(self) -> str:
        """The generic name of the value type, such as ``int`` or ``string=string``."""
        return self._make_value(self.value, self._default_config()).type_name

    def takes_value(self) -> bool:
        """Whether the flag needs an argument."""
        return not self._is_bool_type

    def get_default_text(self) -> str:
        """Text shown as the default in help output."""
        if self.default_text:
            return self.default_text
        return self._make_value(self.value, self._default_config()).to_string(self.value)

    def is_set(self) -> bool:
        """Whether the flag was given a value from any source."""
        return self._has_been_set

    def is_required(self) -> bool:
        return self.required

    def is_visible(self) -> bool:
        return not self.hidden

    def is_default_visible(self) -> bool:
        return not self.hide_default

    def is_multi_value_flag(self) -> bool:
        """Whether the flag collects several values (lists and mappings)."""
        return isinstance(self.value, (list, dict))

    def is_local(self) -> bool:
        """Whether the flag applies only to its own command."""
        return self.local

    def is_bool_flag(self) -> bool:
        """Whether the current value holder can be given without an argument."""
        return self._value is not None and self._value.is_bool_flag()

    def count(self) -> int:
        """How many times the flag has been set."""
        return self._count

    def run_action(self, ctx: Any, cmd: Any) -> Any:
        """Call the flag's action with its current value, if there is one."""
        if self.action is not None:
            return self.action(ctx, cmd, self.get())
        return None


class _IntegerFlag(FlagBase):
    _value_class: type = IntValue
    _bits = 64

    def _zero(self) -> int:
        return 0

    def _default_config(self) -> IntegerConfig:
        return IntegerConfig()

    def _make_value(self, default: Any, config: Any) -> Value:
        return self._value_class(default, config, bits=self._bits)


class IntFlag(_IntegerFlag):
    """A 64-bit signed integer flag."""


class Int8Flag(_IntegerFlag):
    """An 8-bit signed integer flag."""

    _bits = 8


class Int16Flag(_IntegerFlag):
    """A 16-bit signed integer flag."""

    _bits = 16


class Int32Flag(_IntegerFlag):
    """A 32-bit signed integer flag."""

    _bits = 32


class Int64Flag(_IntegerFlag):
    """A 64-bit signed integer flag."""


class UintFlag(_IntegerFlag):
    """A 64-bit unsigned integer flag."""

    _value_class = UintValue


class Uint8Flag(UintFlag):
    """An 8-bit unsigned integer flag."""

    _bits = 8


class Uint16Flag(UintFlag):
    """A 16-bit unsigned integer flag."""

    _bits = 16


class Uint32Flag(UintFlag):
    """A 32-bit unsigned integer flag."""

    _bits = 32


class Uint64Flag(UintFlag):
    """A 64-bit unsigned integer flag."""


class FloatFlag(FlagBase):
    """A double-precision floating-point flag."""

    _bits = 64

    def _zero(self) -> float:
        return 0.0

    def _make_value(self, default: Any, config: Any) -> Value:
        return FloatValue(default, config, bits=self._bits)


class Float32Flag(FloatFlag):
    """A single-precision floating-point flag."""

    _bits = 32


class Float64Flag(FloatFlag):
    """A double-precision floating-point flag."""


class GenericFlag(FlagBase):
    """A flag whose value is any :class:`Value` object supplied as default."""

    def _make_value(self, default: Any, config: Any) -> Value:
        return GenericValue(default, config)


class TimestampFlag(FlagBase):
    """A flag holding a point in time parsed with the configured layouts."""

    def _default_config(self) -> TimestampConfig:
        return TimestampConfig()

    def _make_value(self, default: Any, config: Any) -> Value:
        return TimestampValue(default, config)


class _SliceFlag(FlagBase):
    def _zero(self) -> list:
        return []

    def __post_init__(self) -> None:
        super().__post_init__()
        self.value = list(self.value)

    @abstractmethod
    def _element(self, config: Any) -> Value:
        """Create the value parsing a single item."""

    def _make_value(self, default: Any, config: Any) -> Value:
        return SliceValue(self._element(config), default)


class IntSliceFlag(_SliceFlag):
    """A flag collecting signed integers."""

    def _default_config(self) -> IntegerConfig:
        return IntegerConfig()

    def _element(self, config: Any) -> Value:
        return IntValue(0, config, bits=64)


class UintSliceFlag(_SliceFlag):
    """A flag collecting unsigned integers."""

    def _default_config(self) -> IntegerConfig:
        return IntegerConfig()

    def _element(self, config: Any) -> Value:
        return UintValue(0, config, bits=64)


class FloatSliceFlag(_SliceFlag):
    """A flag collecting floating-point numbers."""

    def _element(self, config: Any) -> Value:
        return FloatValue(0.0, config, bits=64)


class StringSliceFlag(_SliceFlag):
    """A flag collecting strings."""

    def _element(self, config: Any) -> Value:
        return StringValue("", config)


class StringMapFlag(FlagBase):
    """A flag collecting ``key=value`` string pairs."""

    def _zero(self) -> dict:
        return {}

    def __post_init__(self) -> None:
        super().__post_init__()
        self.value = dict(self.value)

    def _make_value(self, default: Any, config: Any) -> Value:
        return MapValue(StringValue("", config), default)


@dataclass
class MutuallyExclusiveFlags:
    """Alternative sets of flags of which only one may be used.

    Each entry of ``flags`` is one alternative.
    """

    flags: list = field(default_factory=list)
    required: bool = False
    category: str = ""

    def check(self) -> None:
        """Raise if two alternatives are set, or none is set in a required group."""
        first: Optional[str] = None
        for group in self.flags:
            for flag in group:
                if flag.is_set():
                    if first is not None:
                        raise MutuallyExclusiveError(first, flag.names()[0])
                    first = flag.names()[0]
                    break
                if first is not None:
                    break
        if first is None and self.required:
            raise MutuallyExclusiveRequiredError(self)

    def propagate_category(self) -> None:
        """Give every flag of the group the group's category."""
        for group in self.flags:
            for flag in group:
                if hasattr(flag, "category"):
                    flag.category = self.category