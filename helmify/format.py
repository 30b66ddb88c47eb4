"""Text helpers for producing Helm templates from YAML."""

from __future__ import annotations

import re
from typing import Any

import yaml
from yaml.representer import SafeRepresenter

_STR_TAG = "tag:yaml.org,2002:str"
_TRAILING_WHITESPACE = re.compile(r"([\t\n\f\r ]+)(\n|\Z)")


def fix_unterminated_quotes(text: str) -> str:
    """Join lines broken inside a double-quoted string back onto one line."""
    lines = text.split("\n")
    last = len(lines) - 1
    parts = []
    unterminated = False
    for index, line in enumerate(lines):
        if unterminated:
            line = " " + line.strip()
            unterminated = False
        else:
            unterminated = line.count('"') % 2 != 0
        parts.append(line)
        if not unterminated and index != last:
            parts.append("\n")
    return "".join(parts)


def remove_trailing_whitespaces(text: str) -> str:
    """Strip whitespace at the end of every line."""
    return _TRAILING_WHITESPACE.sub(r"\2", text)


class _Dumper(yaml.SafeDumper):
    pass


def _represent_str(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    style = None
    if "\n" in data:
        style = "|"
    elif dumper.resolve(yaml.ScalarNode, data, (True, False)) != _STR_TAG:
        style = '"'
    return dumper.represent_scalar(_STR_TAG, data, style=style)


_Dumper.add_representer(str, _represent_str)
_Dumper.add_multi_representer(dict, SafeRepresenter.represent_dict)
_Dumper.add_multi_representer(list, SafeRepresenter.represent_list)


def _fresh_tree(value: Any) -> Any:
    """Copy mappings and sequences so no container is shared, which keeps anchors out."""
    if isinstance(value, dict):
        return {key: _fresh_tree(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_fresh_tree(item) for item in value]
    return value


def indent_text(text: str, indent: int) -> str:
    """Prefix every line of text with the given number of spaces."""
    if indent < 0:
        return text
    prefix = " " * indent
    return prefix + text.replace("\n", "\n" + prefix)


def marshal_yaml(value: Any, indent: int) -> str:
    """Serialize value as block YAML with sorted keys, indented by indent spaces."""
    text = yaml.dump(
        _fresh_tree(value),
        Dumper=_Dumper,
        default_flow_style=False,
        sort_keys=True,
        allow_unicode=True,
    )
    return indent_text(text, indent).rstrip("\n ")