"""Helm values tree and the processor and template interfaces."""

from __future__ import annotations

import copy
import re
from abc import ABC, abstractmethod
from typing import IO, TYPE_CHECKING, Any, Iterable

if TYPE_CHECKING:
    from helmify.decoder import Resource
    from helmify.metadata import AppMetadata

_NUMBER_SEQUENCE = re.compile(r"([a-zA-Z])([0-9]+)([a-zA-Z]?)")


def lower_camel(text: str) -> str:
    """Convert snake, kebab, dotted or spaced text to lowerCamelCase."""
    if not text:
        return text
    if "A" <= text[0] <= "Z":
        text = text[0].lower() + text[1:]
    text = _NUMBER_SEQUENCE.sub(r"\1 \2 \3", text).strip(" ")
    parts = []
    cap_next = False
    for char in text:
        if "A" <= char <= "Z" or "0" <= char <= "9":
            parts.append(char)
        elif "a" <= char <= "z":
            parts.append(char.upper() if cap_next else char)
        cap_next = char in "_ -."
    return "".join(parts)


def to_camel_case(names: Iterable[str]) -> list[str]:
    """Camel-case every name of a values path; all-upper names are lowered first."""
    result = []
    for name in names:
        camel = lower_camel(name.lower() if name == name.upper() else name)
        result.append(camel)
    return result


def _set_nested(target: dict, value: Any, path: list[str]) -> None:
    if not path:
        raise ValueError("value path must not be empty")
    node = target
    for depth, key in enumerate(path[:-1]):
        if key in node:
            child = node[key]
            if not isinstance(child, dict):
                joined = ".".join(path[: depth + 1])
                raise ValueError(f"value cannot be set because {joined} is not a mapping")
        else:
            child = {}
            node[key] = child
        node = child
    node[path[-1]] = copy.deepcopy(value)


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, (str, int, float, dict, list)) and not value)


def _merge_into(target: dict, source: dict) -> None:
    for key, value in source.items():
        if key not in target:
            target[key] = copy.deepcopy(value)
            continue
        current = target[key]
        if isinstance(current, dict) and isinstance(value, dict):
            _merge_into(current, value)
        elif isinstance(current, list) and isinstance(value, list):
            target[key] = current + copy.deepcopy(value)
        elif _is_empty(current):
            target[key] = copy.deepcopy(value)


class Values(dict):
    """The tree written to a chart's values.yaml."""

    def merge(self, other: dict) -> None:
        """Merge other in: missing keys are added, lists appended, set values kept."""
        _merge_into(self, other)

    def add(self, value: Any, *names: str) -> str:
        """Store value under the camel-cased path and return its template reference."""
        path = to_camel_case(names)
        try:
            _set_nested(self, value, path)
        except ValueError as error:
            raise ValueError(f"{error}: unable to set value: {path}") from error
        joined = ".".join(path)
        if isinstance(value, str):
            return "{{ .Values." + joined + " | quote }}"
        if isinstance(value, list):
            return "{{ toYaml .Values." + joined + f" | nindent {len(path) * 2}" + " }}"
        return "{{ .Values." + joined + " }}"

    def add_yaml(self, value: Any, indent: int, new_line: bool, *names: str) -> str:
        """Store value and return a reference rendering it with toYaml.

        An indent of zero or less adds no indentation function.
        """
        path = to_camel_case(names)
        try:
            _set_nested(self, value, path)
        except ValueError as error:
            raise ValueError(f"{error}: unable to set value: {path}") from error
        joined = ".".join(path)
        if indent > 0:
            func = "nindent" if new_line else "indent"
            return "{{ .Values." + joined + f" | toYaml | {func} {indent}" + " }}"
        return "{{ .Values." + joined + " | toYaml }}"

    def add_secret(self, to_base64: bool, *names: str) -> str:
        """Store an empty required secret value and return its template reference."""
        path = to_camel_case(names)
        joined = ".".join(path)
        try:
            _set_nested(self, "", path)
        except ValueError as error:
            raise ValueError(f"{error}: unable to set value: {joined}") from error
        result = '{{ required "' + joined + ' is required" .Values.' + joined
        if to_base64:
            result += " | b64enc"
        return result + " | quote }}"


class Template(ABC):
    """A Helm template destined for the chart's templates directory."""

    @property
    @abstractmethod
    def filename(self) -> str:
        """The name of the file the template is written to."""

    @property
    @abstractmethod
    def values(self) -> Values:
        """The values the template refers to."""

    @abstractmethod
    def write(self, stream: IO[str]) -> None:
        """Write the rendered template text to stream."""


class Processor(ABC):
    """Turns a Kubernetes resource of a particular kind into a Helm template."""

    @abstractmethod
    def handles(self, obj: Resource) -> bool:
        """Whether this processor is responsible for obj."""

    @abstractmethod
    def process(self, app_meta: AppMetadata, obj: Resource) -> Template | None:
        """Convert obj to a template, or return None when nothing is to be written."""