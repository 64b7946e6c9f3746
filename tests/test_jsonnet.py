import io
import json
import re
from dataclasses import dataclass

import pytest

from gmailctl.gmail import Category
from gmailctl.jsonnet import marshal_jsonnet


def render(value, header=""):
    buf = io.StringIO()
    marshal_jsonnet(value, buf, header)
    return buf.getvalue()


def requote(text):
    lines = [
        re.sub(r'^( *)([a-zA-Z01]+):', r'\1"\2":', line)
        for line in text.splitlines()
        if not line.lstrip().startswith("//")
    ]
    return json.loads("\n".join(lines))


def test_worked_example():
    value = {"version": "v1alpha3", "labels": [{"name": "a"}]}
    got = render(value, "// header\n")
    expected = (
        "// header\n"
        "{\n"
        '  version: "v1alpha3",\n'
        "  // Note: labels management is optional. If you prefer to use the\n"
        "  // GMail interface to add and remove labels, you can safely remove\n"
        "  // this section of the config.\n"
        "  labels: [\n"
        "    {\n"
        '      name: "a"\n'
        "    }\n"
        "  ]\n"
        "}\n"
    )
    assert got == expected


def test_header_comes_first():
    got = render({"a": 1}, "// generated\n")
    assert got.startswith("// generated\n{")
    assert got.endswith("}\n")


def test_round_trip_after_requoting():
    value = {
        "version": "v1alpha3",
        "author": {"name": "Someone", "email": "someone@example.com"},
        "rules": [{"filter": {"from": "a"}, "actions": {"archive": True}}],
    }
    assert requote(render(value, "// h\n")) == value


def test_keys_with_other_chars_stay_quoted():
    got = render({"foo-bar": 1, "simple": 2})
    assert '"foo-bar": 1' in got
    assert "  simple: 2" in got


def test_values_are_not_unquoted():
    got = render({"key": "value:"})
    assert 'key: "value:"' in got


def test_empty_labels_get_no_comment():
    got = render({"labels": []})
    assert "//" not in got
    assert requote(got) == {"labels": []}


def test_dataclasses_and_enums_are_encoded():
    @dataclass
    class Item:
        name: str
        category: Category

    got = render({"items": [Item("x", Category.SOCIAL)]})
    assert requote(got) == {"items": [{"name": "x", "category": "social"}]}


def test_html_characters_are_escaped():
    got = render({"q": "<a&b>"})
    assert "<" not in got and "&" not in got
    assert requote(got) == {"q": "<a&b>"}


def test_unencodable_value_raises_and_writes_nothing():
    buf = io.StringIO()
    with pytest.raises(TypeError):
        marshal_jsonnet({"a": object()}, buf, "// h\n")
    assert buf.getvalue() == ""


def test_nan_is_rejected():
    with pytest.raises(ValueError):
        render({"a": float("nan")})