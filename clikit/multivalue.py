"""Flag values that collect several items: lists and string-keyed mappings."""

from __future__ import annotations

import json
from typing import Any, Iterable, Mapping

from clikit.values import FloatValue, IntValue, StringValue, UintValue, Value

SLICE_SEPARATOR = ","
MAP_KEY_VALUE_SEPARATOR = "="
SERIALIZE_PREFIX = "sl:::"


def split_multi_values(value: str) -> list[str]:
    """Split one command-line argument into the items it lists."""
    return value.split(SLICE_SEPARATOR)


def _coerce(element: Value, item: Any) -> Any:
    """Convert a decoded JSON item to the element's Python type."""
    if isinstance(element, FloatValue):
        return float(item)
    if isinstance(element, (IntValue, UintValue)):
        if isinstance(item, float) and not item.is_integer():
            raise ValueError(f"{item!r} is not an integer")
        return int(item)
    if isinstance(element, StringValue):
        if not isinstance(item, str):
            raise ValueError(f"{item!r} is not a string")
        return item
    return item


def _deserialize(text: str) -> Any:
    return json.loads(text.replace(SERIALIZE_PREFIX, "", 1))


class SliceValue(Value):
    """A list of items, each parsed by ``element``.

    The first :meth:`set` replaces the defaults; later calls append.
    """

    def __init__(self, element: Value, values: Iterable[Any] = ()) -> None:
        super().__init__(list(values))
        self._element = element
        self.has_been_set = False

    @property
    def type_name(self) -> str:  # type: ignore[override]
        return self._element.type_name

    def set(self, value: str) -> None:
        if not self.has_been_set:
            self._value = []
            self.has_been_set = True

        if value.startswith(SERIALIZE_PREFIX):
            try:
                decoded = _deserialize(value)
                if isinstance(decoded, list):
                    self._value = [_coerce(self._element, item) for item in decoded]
            except (ValueError, TypeError):
                pass
            return

        for item in split_multi_values(value):
            self._element.set(item.strip())
            self._value.append(self._element.get())

    def get(self) -> list[Any]:
        return self._value

    def serialize(self) -> str:
        """Encode the items so that :meth:`set` can restore them."""
        return SERIALIZE_PREFIX + json.dumps(self._value, separators=(",", ":"))

    def to_string(self, values: Iterable[Any]) -> str:
        return ", ".join(self._element.to_string(item) for item in values)

    def __str__(self) -> str:
        if isinstance(self._element, StringValue):
            return "[" + " ".join(self._value) + "]"
        return f"[]{self._element.type_name}{{{self.to_string(self._value)}}}"


class MapValue(Value):
    """A mapping of string keys to items parsed by ``element``.

    Items are given as ``key=value``. The first :meth:`set` replaces the
    defaults; later calls add or overwrite keys.
    """

    def __init__(self, element: Value, mapping: Mapping[str, Any] | None = None) -> None:
        super().__init__(dict(mapping or {}))
        self._element = element
        self.has_been_set = False

    @property
    def type_name(self) -> str:  # type: ignore[override]
        return f"string={self._element.type_name}"

    def set(self, value: str) -> None:
        if not self.has_been_set:
            self._value = {}
            self.has_been_set = True

        if value.startswith(SERIALIZE_PREFIX):
            try:
                decoded = _deserialize(value)
                if isinstance(decoded, dict):
                    self._value = {
                        str(key): _coerce(self._element, item) for key, item in decoded.items()
                    }
            except (ValueError, TypeError):
                pass
            return

        for item in split_multi_values(value):
            key, sep, raw = item.partition(MAP_KEY_VALUE_SEPARATOR)
            if not sep:
                raise ValueError(
                    f'item "{item}" is missing separator "{MAP_KEY_VALUE_SEPARATOR}"'
                )
            self._element.set(raw)
            self._value[key] = self._element.get()

    def get(self) -> dict[str, Any]:
        return self._value

    def serialize(self) -> str:
        """Encode the mapping so that :meth:`set` can restore it."""
        return SERIALIZE_PREFIX + json.dumps(self._value, separators=(",", ":"), sort_keys=True)

    def to_string(self, mapping: Mapping[str, Any]) -> str:
        return ", ".join(
            f"{key}{MAP_KEY_VALUE_SEPARATOR}{self._element.to_string(mapping[key])}"
            for key in sorted(mapping)
        )

    def __str__(self) -> str:
        if isinstance(self._element, StringValue):
            body = " ".join(f"{key}:{self._value[key]}" for key in sorted(self._value))
            return f"map[{body}]"
        return f"map[string]{self._element.type_name}{{{self.to_string(self._value)}}}"