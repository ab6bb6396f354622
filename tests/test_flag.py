import pytest

from clikit.flag import (
    FlagError,
    Float32Flag,
    FloatFlag,
    FloatSliceFlag,
    GenericFlag,
    Int16Flag,
    Int64Flag,
    IntFlag,
    IntSliceFlag,
    MutuallyExclusiveError,
    MutuallyExclusiveFlags,
    MutuallyExclusiveRequiredError,
    StringMapFlag,
    StringSliceFlag,
    TimestampFlag,
    Uint8Flag,
    UintFlag,
    UintSliceFlag,
)
from clikit.values import IntegerConfig, StringValue, Value


def _new_group(required=False):
    i = Int64Flag(name="i")
    s = StringSliceFlag(name="s", env_vars=["S_VAR"])
    b = IntFlag(name="b")
    t = Int64Flag(name="t", aliases=["ai"], env_vars=["T_VAR"])
    group = MutuallyExclusiveFlags(flags=[[i, s, b], [t]], required=required)
    return group, i, s, t


def test_mutex_simple():
    group, *_ = _new_group()
    assert group.check() is None


@pytest.mark.parametrize("required", [False, True])
def test_mutex_one_flag_set(required):
    group, i, _, _ = _new_group(required)
    i.set("i", "10")
    assert group.check() is None
    assert i.get() == 10


@pytest.mark.parametrize("required", [False, True])
def test_mutex_both_set(required):
    group, i, _, t = _new_group(required)
    i.set("i", "11")
    t.set("ai", "12")
    with pytest.raises(MutuallyExclusiveError, match="option i cannot be set along with option t"):
        group.check()


def test_mutex_required_none_set():
    group, *_ = _new_group(required=True)
    with pytest.raises(MutuallyExclusiveRequiredError, match="one of these flags needs to be provided"):
        group.check()


def test_mutex_env_var(monkeypatch):
    monkeypatch.setenv("S_VAR", "some")
    monkeypatch.delenv("T_VAR", raising=False)
    group, i, s, t = _new_group(required=True)
    for flag in (i, s, t):
        flag.post_parse()
    assert group.check() is None
    assert s.get() == ["some"]


def test_propagate_category():
    a = IntFlag(name="a", category="overridden")
    b = IntFlag(name="b", category="other")
    MutuallyExclusiveFlags(flags=[[a], [b]], category="cat1").propagate_category()
    assert (a.category, b.category) == ("cat1", "cat1")


def test_propagate_empty_category():
    a = IntFlag(name="a", category="ignored")
    MutuallyExclusiveFlags(flags=[[a]]).propagate_category()
    assert a.category == ""


def test_names_include_aliases():
    assert IntFlag(name="number", aliases=["n"]).names() == ["number", "n"]


def test_int_set_and_get():
    f = IntFlag(name="number", aliases=["n"])
    f.set("number", "-234567")
    assert f.get() == -234567
    assert f.is_set()


def test_out_of_range_raises():
    with pytest.raises(ValueError):
        Int16Flag(name="number").set("number", "32768")


def test_invalid_float_raises():
    with pytest.raises(ValueError):
        FloatFlag(name="number").set("number", "gopher")


def test_only_once():
    f = IntFlag(name="n", only_once=True)
    f.set("n", "1")
    with pytest.raises(FlagError, match="cant duplicate this flag"):
        f.set("n", "2")


def test_count():
    f = IntFlag(name="n")
    f.set("n", "1")
    f.set("n", "2")
    assert f.count() == 2
    assert f.get() == 2


def test_slice_appends_across_sets():
    f = IntSliceFlag(name="numbers")
    f.set("numbers", "1,2")
    f.set("numbers", "3,4")
    assert f.get() == [1, 2, 3, 4]


def test_slice_replaces_defaults():
    f = UintSliceFlag(name="numbers", value=[9])
    assert f.get() == [9]
    f.set("numbers", "1")
    assert f.get() == [1]


def test_local_slice_reapplied_each_time():
    f = FloatSliceFlag(name="numbers", local=True)
    f.set("numbers", "1,2")
    f.set("numbers", "3,4")
    assert f.get() == [3.0, 4.0]


def _reject_large(v):
    if v > 3:
        raise ValueError("too large")


def test_validator_rejects():
    f = IntFlag(name="n", validator=_reject_large)
    with pytest.raises(ValueError, match="too large"):
        f.set("n", "5")


def test_validator_accepts():
    f = IntFlag(name="n", validator=_reject_large)
    f.set("n", "2")
    assert f.get() == 2


def test_validate_defaults():
    f = IntFlag(name="n", value=10, validator=_reject_large, validate_defaults=True)
    with pytest.raises(ValueError, match="too large"):
        f.pre_parse()


def test_default_text():
    assert IntFlag(value=255, config=IntegerConfig(base=16)).get_default_text() == "255"
    assert IntFlag(default_text="x").get_default_text() == "x"
    assert FloatFlag(value=1.5).get_default_text() == "1.5"
    assert IntSliceFlag(value=[1, 2]).get_default_text() == "1, 2"
    assert StringMapFlag(value={"b": "2", "a": "1"}).get_default_text() == "a=1, b=2"
    assert TimestampFlag().get_default_text() == ""


@pytest.mark.parametrize(
    "flag, expected",
    [
        (IntFlag(), "int"),
        (Uint8Flag(), "uint"),
        (Float32Flag(), "float"),
        (StringSliceFlag(), "string"),
        (IntSliceFlag(), "int"),
        (StringMapFlag(), "string=string"),
        (TimestampFlag(), "time"),
        (GenericFlag(), ""),
    ],
)
def test_type_name(flag, expected):
    assert flag.type_name() == expected


def test_multi_value():
    assert IntSliceFlag().is_multi_value_flag() is True
    assert StringMapFlag().is_multi_value_flag() is True
    assert IntFlag().is_multi_value_flag() is False


def test_get_value():
    assert IntFlag(value=3).get_value() == "3"
    assert IntSliceFlag(value=[1, 2]).get_value() == "[1 2]"
    assert FloatFlag(value=2.0).get_value() == "2"
    assert UintFlag().takes_value() is True


def test_run_action():
    calls = []
    f = IntFlag(name="n", action=lambda ctx, cmd, v: calls.append((ctx, cmd, v)))
    f.set("n", "7")
    f.run_action("ctx", "cmd")
    assert calls == [("ctx", "cmd", 7)]


def test_run_action_without_action():
    assert IntFlag(name="n").run_action("ctx", "cmd") is None


def test_post_parse_from_env(monkeypatch):
    monkeypatch.setenv("NUM_VAR", "42")
    f = IntFlag(name="num", env_vars=["NUM_VAR"])
    f.post_parse()
    assert f.get() == 42
    assert f.is_set()


def test_post_parse_bad_env(monkeypatch):
    monkeypatch.setenv("NUM_VAR", "abc")
    f = IntFlag(name="num", env_vars=["NUM_VAR"])
    with pytest.raises(FlagError, match="could not parse"):
        f.post_parse()


def test_post_parse_empty_env(monkeypatch):
    monkeypatch.setenv("NUM_VAR", "")
    f = IntFlag(name="num", env_vars=["NUM_VAR"])
    f.post_parse()
    assert f.is_set()
    assert f.get() == 0


def test_post_parse_missing_env(monkeypatch):
    monkeypatch.delenv("NUM_VAR", raising=False)
    f = IntFlag(name="num", env_vars=["NUM_VAR"])
    f.post_parse()
    assert f.is_set() is False


class _BoolLike(Value):
    def set(self, s):
        self._value = s == "true"

    def to_string(self, value):
        return "true" if value else "false"

    def is_bool_flag(self):
        return True


def test_generic_bool_flag():
    f = GenericFlag(value=_BoolLike(False))
    assert f.is_bool_flag() is False
    f.pre_parse()
    assert f.is_bool_flag() is True


def test_generic_delegates_set():
    f = GenericFlag(name="g", value=StringValue("a"))
    f.set("g", "b")
    assert f.get() == "b"


def test_visibility_and_requirement():
    f = IntFlag(required=True, hidden=True, hide_default=True, local=True)
    assert f.is_required() is True
    assert f.is_visible() is False
    assert f.is_default_visible() is False
    assert f.is_local() is True


def test_string_map_set():
    f = StringMapFlag(name="m", value={"z": "0"})
    f.set("m", "a=1,b=2")
    assert f.get() == {"a": "1", "b": "2"}