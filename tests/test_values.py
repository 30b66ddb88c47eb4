import pytest

from helmify.values import Template, Values, lower_camel, to_camel_case


def test_quote_added_for_string_values():
    values = Values()
    result = values.add("abc", "a", "b")
    assert "quote" in result
    assert values == {"a": {"b": "abc"}}


@pytest.mark.parametrize("value", [1, True, 420.69])
def test_quote_not_added_for_non_string_values(value):
    values = Values()
    result = values.add(value, "a", "b")
    assert "quote" not in result
    assert values["a"]["b"] == value


def test_name_path_is_dot_formatted():
    result = Values().add(1, "a", "b")
    assert " .Values.a.b " in result
    assert result == "{{ .Values.a.b }}"


@pytest.mark.parametrize("name", ["my_name", "MY_NAME", "my-name", "my.name"])
def test_names_camel_cased(name):
    values = Values()
    result = values.add(420.69, name)
    assert name not in result
    assert "myName" in result
    assert values == {"myName": 420.69}


def test_add_list_uses_to_yaml():
    values = Values()
    assert values.add(["x"], "a", "b") == "{{ toYaml .Values.a.b | nindent 4 }}"


def test_add_through_scalar_raises():
    values = Values()
    values.add("x", "a")
    with pytest.raises(ValueError):
        values.add("y", "a", "b")


def test_add_secret_base64():
    values = Values()
    result = values.add_secret(True, "a", "b")
    assert "b64enc" in result
    assert result == '{{ required "a.b is required" .Values.a.b | b64enc | quote }}'
    assert values == {"a": {"b": ""}}


def test_add_secret_not_encoded():
    result = Values().add_secret(False, "a", "b")
    assert "b64enc" not in result
    assert result == '{{ required "a.b is required" .Values.a.b | quote }}'


def test_add_yaml_variants():
    values = Values()
    assert values.add_yaml({"k": 1}, 2, True, "a") == "{{ .Values.a | toYaml | nindent 2 }}"
    assert values.add_yaml({"k": 1}, 1, False, "b") == "{{ .Values.b | toYaml | indent 1 }}"
    assert values.add_yaml({"k": 1}, 0, False, "c") == "{{ .Values.c | toYaml }}"
    assert values["a"] == {"k": 1}


def test_add_copies_value():
    source = {"k": [1]}
    values = Values()
    values.add_yaml(source, 0, False, "a")
    source["k"].append(2)
    assert values["a"] == {"k": [1]}


def test_merge_keeps_existing_and_adds_missing():
    values = Values({"a": {"b": 1}, "c": "x"})
    values.merge({"a": {"d": 2}, "c": "y", "e": 3})
    assert values == {"a": {"b": 1, "d": 2}, "c": "x", "e": 3}


def test_merge_appends_lists_and_fills_empty():
    values = Values({"l": [1], "empty": ""})
    values.merge({"l": [2], "empty": "filled"})
    assert values == {"l": [1, 2], "empty": "filled"}


@pytest.mark.parametrize(
    "text, want",
    [
        ("my_name", "myName"),
        ("test-container", "testContainer"),
        ("host-data", "hostData"),
        ("MyName", "myName"),
        ("var1", "var1"),
        ("", ""),
    ],
)
def test_lower_camel(text, want):
    assert lower_camel(text) == want


def test_to_camel_case_lowers_upper_names():
    assert to_camel_case(["MY_NAME", "VAR1", "some-key"]) == ["myName", "var1", "someKey"]


def test_template_is_abstract():
    with pytest.raises(TypeError):
        Template()