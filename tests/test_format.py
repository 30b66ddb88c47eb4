import pytest
import yaml

from helmify.format import (
    fix_unterminated_quotes,
    indent_text,
    marshal_yaml,
    remove_trailing_whitespaces,
)
from helmify.values import Values

BROKEN_LINES = "\n".join(
    [
        "kind: Secret",
        "data:",
        '  TOKEN: {{ required "app.token',
        '    is required" .Values.app.token | b64enc',
        "    | quote }}",
        '  OTHER: {{ required "app.other is required" .Values.app.other',
        "    | quote }}",
        "type: opaque",
    ]
)

JOINED_LINES = "\n".join(
    [
        "kind: Secret",
        "data:",
        '  TOKEN: {{ required "app.token is required" .Values.app.token | b64enc',
        "    | quote }}",
        '  OTHER: {{ required "app.other is required" .Values.app.other',
        "    | quote }}",
        "type: opaque",
    ]
)


def test_fix_unterminated_quotes_joins_broken_line():
    assert fix_unterminated_quotes(BROKEN_LINES) == JOINED_LINES


def test_fix_unterminated_quotes_leaves_balanced_text():
    text = 'a: "b"\nc: d'
    assert fix_unterminated_quotes(text) == text


def test_fix_unterminated_quotes_single_break():
    text = 'k: "one\n   two"\nz: 1'
    assert fix_unterminated_quotes(text) == 'k: "one two"\nz: 1'


@pytest.mark.parametrize(
    "text, want",
    [
        ("abc   ", "abc"),
        ("abc   \nedf", "abc\nedf"),
        ("abc   \nedf   ", "abc\nedf"),
        ("abc   .\nedf   .", "abc   .\nedf   ."),
    ],
)
def test_remove_trailing_whitespaces(text, want):
    assert remove_trailing_whitespaces(text) == want


def test_indent_text():
    assert indent_text("a\nb", 2) == "  a\n  b"
    assert indent_text("a\nb", -1) == "a\nb"


def test_marshal_sorts_keys():
    assert marshal_yaml({"b": 1, "a": "x"}, 0) == "a: x\nb: 1"


def test_marshal_indents():
    assert marshal_yaml({"b": 1, "a": "x"}, 2) == "  a: x\n  b: 1"


def test_marshal_quotes_numeric_strings_with_double_quotes():
    assert marshal_yaml({"v": "123"}, 0) == 'v: "123"'
    assert marshal_yaml({"v": "true"}, 0) == 'v: "true"'


def test_marshal_template_string_single_quoted():
    assert marshal_yaml({"v": "{{ .Values.x }}"}, 0) == "v: '{{ .Values.x }}'"


def test_marshal_multiline_as_literal():
    assert marshal_yaml({"data": "a\nb"}, 0) == "data: |-\n  a\n  b"


def test_marshal_lists_and_values_mapping():
    values = Values({"l": [1, 2]})
    assert marshal_yaml(values, 0) == "l:\n- 1\n- 2"


def test_marshal_empty_mapping():
    assert marshal_yaml({}, 0) == "{}"


def test_marshal_round_trip():
    data = {"a": {"b": ["x", "y"], "c": 3}, "d": "text"}
    assert yaml.safe_load(marshal_yaml(data, 0)) == data