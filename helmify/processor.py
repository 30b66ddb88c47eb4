"""Shared object metadata templating and the processor for unknown resources."""

from __future__ import annotations

import logging
from typing import IO, Any

from helmify.decoder import Resource
from helmify.format import marshal_yaml
from helmify.metadata import AppMetadata
from helmify.values import Processor, Template, Values, lower_camel

logger = logging.getLogger(__name__)

_NAMESPACE_GVK = ("", "v1", "Namespace")

_HELM_PROVIDED_LABELS = (
    "app.kubernetes.io/name",
    "app.kubernetes.io/instance",
    "app.kubernetes.io/version",
    "app.kubernetes.io/managed-by",
    "helm.sh/chart",
)

_META_TEMPLATE = (
    "apiVersion: {api_version}\n"
    "kind: {kind}\n"
    "metadata:\n"
    "  name: {name}\n"
    "{namespace}\n"
    "  labels:\n"
    "{labels}\n"
    '  {{{{- include "{chart}.labels" . | nindent 4 }}}}\n'
    "{annotations}"
)


def _set_annotations(values: dict, annotations: dict[str, str], *path: str) -> None:
    node = values
    for key in path:
        child = node.setdefault(key, {})
        if not isinstance(child, dict):
            raise ValueError(f"value cannot be set because {key} is not a mapping")
        node = child
    node["annotations"] = dict(annotations)


def process_obj_meta(app_meta: AppMetadata, obj: Resource, values: dict | None = None) -> str:
    """Render apiVersion, kind and metadata of obj as a Helm template.

    When values is given, the annotations are moved into it under
    <name>.<kind>.annotations and the template refers to them there.
    """
    labels = ""
    object_labels = obj.labels
    for key in _HELM_PROVIDED_LABELS:
        object_labels.pop(key, None)
    if object_labels:
        labels = marshal_yaml(object_labels, 4)

    annotations = ""
    object_annotations = obj.annotations
    if object_annotations:
        annotations = marshal_yaml({"annotations": object_annotations}, 2)

    namespace = ""
    if obj.namespace and app_meta.config.preserve_ns:
        namespace = marshal_yaml({"namespace": obj.namespace}, 2)

    group, version, kind = obj.group_version_kind
    api_version = f"{group}/{version}" if group else version

    if values is not None:
        name_key = lower_camel(app_meta.trim_name(obj.name))
        kind_key = lower_camel(kind)
        _set_annotations(values, object_annotations, name_key, kind_key)
        annotations = (
            "  annotations:\n"
            "    {{- toYaml .Values." + name_key + "." + kind_key + ".annotations | nindent 4 }}"
        )

    text = _META_TEMPLATE.format(
        api_version=api_version,
        kind=kind,
        name=app_meta.templated_name(obj.name),
        namespace=namespace,
        labels=labels,
        chart=app_meta.chart_name,
        annotations=annotations,
    )
    return text.strip(" \n").replace("\n\n", "\n")


class StaticTemplate(Template):
    """A template whose text is fully rendered up front."""

    def __init__(self, filename: str, data: str, values: Values | None = None) -> None:
        self._filename = filename
        self._data = data
        self._values = values if values is not None else Values()

    @property
    def filename(self) -> str:
        return self._filename

    @property
    def values(self) -> Values:
        return self._values

    def write(self, stream: IO[str]) -> None:
        stream.write(self._data)


class DefaultProcessor(Processor):
    """Templates the name and metadata of resources no other processor knows."""

    def handles(self, obj: Resource) -> bool:
        return True

    def process(self, app_meta: AppMetadata, obj: Resource) -> Template | None:
        if obj.group_version_kind == _NAMESPACE_GVK:
            # Helm manages the release namespace itself.
            return None
        logger.warning(
            "Unsupported resource: using default processor. ApiVersion=%s Kind=%s Name=%s",
            obj.api_version,
            obj.kind,
            obj.name,
        )
        name = app_meta.trim_name(obj.name)
        meta = process_obj_meta(app_meta, obj)
        body: dict[str, Any] = {
            key: value
            for key, value in obj.data.items()
            if key not in ("apiVersion", "kind", "metadata")
        }
        return StaticTemplate(name + ".yaml", meta + "\n" + marshal_yaml(body, 0))