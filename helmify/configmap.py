"""Conversion of ConfigMap resources into templates."""

from __future__ import annotations

import logging
from typing import Any

from helmify.decoder import Resource
from helmify.format import marshal_yaml, remove_trailing_whitespaces
from helmify.metadata import AppMetadata
from helmify.processor import StaticTemplate, process_obj_meta
from helmify.values import Processor, Template, Values

logger = logging.getLogger(__name__)

_CONFIG_MAP_GVK = ("", "v1", "ConfigMap")


def _string_map(value: Any) -> dict[str, str] | None:
    if not isinstance(value, dict) or not all(isinstance(v, str) for v in value.values()):
        return None
    return dict(value)


def parse_properties(properties: str, path: list[str], values: Values) -> str:
    """Move each key=value line of a properties file into values.

    Returns the properties text with values replaced by template references.
    Raises ValueError for a line that is not a single key=value pair.
    """
    lines = []
    for line in properties.removesuffix("\n").split("\n"):
        prop = line.split("=")
        if len(prop) != 2:
            raise ValueError(f"wrong property format in {path}: {line}")
        prop_name, prop_value = prop
        templated = values.add(prop_value, *path, *prop_name.split("."))
        lines.append(f"{prop_name}={templated}\n")
    return "".join(lines)


def parse_map_data(data: dict[str, str], config_name: str) -> tuple[dict[str, str], Values]:
    """Move ConfigMap data entries into values and template the entries."""
    values = Values()
    result = dict(data)
    for key, value in data.items():
        path = [config_name, key]
        try:
            if key.endswith(".properties"):
                result[key] = parse_properties(value, path, values)
            elif "\n" in value:
                result[key] = values.add_yaml(remove_trailing_whitespaces(value), 1, False, *path)
            else:
                result[key] = values.add(value, *path)
        except ValueError as error:
            logger.error("unable to process configmap data %s: %s", path, error)
    return result, values


class ConfigMapProcessor(Processor):
    """Turns ConfigMaps into templates with their data in values."""

    def handles(self, obj: Resource) -> bool:
        return obj.group_version_kind == _CONFIG_MAP_GVK

    def process(self, app_meta: AppMetadata, obj: Resource) -> Template | None:
        parts = [process_obj_meta(app_meta, obj)]

        immutable = obj.data.get("immutable")
        if isinstance(immutable, bool):
            parts.append(marshal_yaml({"immutable": immutable}, 0))

        binary_data = _string_map(obj.data.get("binaryData"))
        if binary_data is not None:
            parts.append(marshal_yaml({"binaryData": binary_data}, 0))

        name = app_meta.trim_name(obj.name)
        values = Values()
        data = _string_map(obj.data.get("data"))
        if data is not None:
            templated, values = parse_map_data(data, name)
            parts.append(marshal_yaml({"data": templated}, 0).replace("'", ""))

        text = "\n".join(part for part in parts if part)
        return StaticTemplate(name + ".yaml", text, values)