# clikit

Building blocks for command-line applications: typed flag values,
list and mapping flags, mutually exclusive flag groups, help-text
layout helpers and "did you mean" suggestions. It uses only the
standard library.

## Installation

```
pip install clikit
```

To run the test suite:

```
pip install clikit[test]
pytest
```

## Typed values (`clikit.values`)

Every value type derives from `Value`: `set(s)` parses a string and stores
the result, `get()` returns it, `to_string(value)` formats a value the way
the type displays it.

- `StringValue` – a plain string.
- `IntValue` and `UintValue` – signed and unsigned integers of 8, 16, 32 or
  64 bits (`bits=`), range-checked. `IntegerConfig(base=...)` sets the base;
  base 0 (the default) accepts `0x`, `0o`, `0b` and leading-zero octal
  prefixes and formats in base 10.
- `FloatValue` – 32- or 64-bit floats; 32-bit values are rounded to single
  precision.
- `GenericValue` – wraps another `Value` and delegates to it.
- `TimestampValue` – parses with the `strptime` layouts of a
  `TimestampConfig`, tried in order, in the configured `timezone` (UTC if
  none). A layout without a date takes today's date; one without a year
  takes the current year.

Invalid input raises `ValueError`.

```python
from clikit.values import IntValue, IntegerConfig

value = IntValue(config=IntegerConfig(base=16))
value.set("ff")
assert value.get() == 255
```

## Lists and mappings (`clikit.multivalue`)

`SliceValue(element)` collects comma-separated items, each parsed by
`element`; `MapValue(element)` collects `key=value` pairs. The first `set`
replaces the defaults, later calls add to them. `serialize()` encodes the
contents so that `set` can restore them. `split_multi_values` does the
splitting on its own.

## Flags (`clikit.flag`)

`FlagBase` holds what all flags share: `name`, `aliases`, `usage`,
`category`, `value` (the default), `env_vars`, `required`, `hidden`,
`local`, `only_once`, `validator`, `validate_defaults` and `action`. The
typed kinds are `IntFlag`, `Int8Flag`, `Int16Flag`, `Int32Flag`,
`Int64Flag`, `UintFlag`, `Uint8Flag`, `Uint16Flag`, `Uint32Flag`,
`Uint64Flag`, `FloatFlag`, `Float32Flag`, `Float64Flag`, `GenericFlag`,
`TimestampFlag`, `IntSliceFlag`, `UintSliceFlag`, `FloatSliceFlag`,
`StringSliceFlag` and `StringMapFlag`.

```python
from clikit.flag import IntSliceFlag

numbers = IntSliceFlag(name="numbers", aliases=["n"])
numbers.set("numbers", "1,2")
numbers.set("numbers", "3,4")
assert numbers.get() == [1, 2, 3, 4]
assert numbers.names() == ["numbers", "n"]
assert numbers.count() == 2
```

`set` raises `ValueError` when the value cannot be parsed, and lets a
validator's exception through. `FlagError` (a `ValueError`) is raised when
a flag marked `only_once` is given twice, and by `post_parse()` when a
value read from one of `env_vars` cannot be parsed.

`MutuallyExclusiveFlags` groups alternatives. `check()` raises
`MutuallyExclusiveError` when more than one alternative is set, and
`MutuallyExclusiveRequiredError` when the group is required and none is
set. `propagate_category()` gives every flag the group's category.

## Help text and suggestions

`clikit.textutil` has layout helpers: `wrap`, `wrap_line`, `indent`,
`nindent`, `offset`, `offset_names`, `subtract`, the sort order
`lexicographic_less`, `cli_arg_contains`, and `print_flag_suggestions`,
which writes completion candidates for a partly typed flag.

`clikit.suggestions` has `jaro_distance`, `jaro_winkler`, `suggest_flag`,
`suggest_command` and `did_you_mean`:

```python
from clikit.suggestions import jaro_winkler, did_you_mean

assert jaro_winkler("aa", "aa") == 1
print(did_you_mean("--help"))   # Did you mean "--help"?
```

## What is not included

There is no command object, argument parser or runner: flags are set by
calling them directly. Help output is not rendered from templates, and
there is no help or shell-completion command; the package gives the
pieces such features are built from.