import dataclasses
import enum
import json

from gmailctl.reporting import prettify


class Color(enum.Enum):
    RED = "red"


@dataclasses.dataclass
class Inner:
    name: str
    color: Color


@dataclasses.dataclass
class Outer:
    items: list
    inner: Inner


def test_compact_format():
    assert prettify({"a": [1, 2]}, True) == '{"a":[1,2]}'


def test_indented_format():
    assert prettify({"a": 1}, False) == '{\n  "a": 1\n}'


def test_html_characters_escaped():
    assert prettify("<a&b>", True) == '"\\u003ca\\u0026b\\u003e"'


def test_round_trip_plain_data():
    data = {"x": [1, 2, {"y": "z"}], "flag": True, "none": None}
    assert json.loads(prettify(data, False)) == data
    assert json.loads(prettify(data, True)) == data


def test_compact_has_no_whitespace_between_tokens():
    data = {"x": [1, 2, {"y": "z"}]}
    out = prettify(data, True)
    assert "\n" not in out
    assert " " not in out


def test_dataclass_and_enum():
    obj = Outer(items=["a", "b"], inner=Inner(name="n", color=Color.RED))
    decoded = json.loads(prettify(obj, False))
    assert decoded == {"items": ["a", "b"], "inner": {"name": "n", "color": "red"}}


def test_invalid_object():
    out = prettify(object(), True)
    assert out.startswith("(invalid) ")


def test_nan_is_invalid():
    out = prettify(float("nan"), False)
    assert out.startswith("(invalid) ")