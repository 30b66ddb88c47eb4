"""Information shared by all objects of the chart being generated."""

from __future__ import annotations

import logging
import os

from helmify.config import Config
from helmify.decoder import Resource

logger = logging.getLogger(__name__)

_NAME_TEMPLATE = '{{{{ include "{chart}.fullname" . }}}}-{name}'
_NAMESPACE_GVK = ("", "v1", "Namespace")
_CRD_GVK = ("apiextensions.k8s.io", "v1", "CustomResourceDefinition")


def common_prefix(one: str, two: str) -> str:
    """The longest common leading part of two strings."""
    return os.path.commonprefix([one, two])


def _extract_app_namespace(obj: Resource) -> str:
    if obj.group_version_kind == _NAMESPACE_GVK:
        return obj.name
    return obj.namespace


def _detect_common_prefix(obj: Resource, previous: str) -> str:
    if obj.group_version_kind in (_CRD_GVK, _NAMESPACE_GVK):
        return previous
    if not previous:
        return obj.name
    return common_prefix(obj.name, previous)


class AppMetadata:
    """Namespace, common name prefix and object names of the application."""

    def __init__(self, config: Config | None = None) -> None:
        self.config = config if config is not None else Config()
        self._common_prefix = ""
        self._namespace = ""
        self._names: set[str] = set()

    def load(self, obj: Resource) -> None:
        """Record an object before processing to learn the app's shared traits."""
        self._names.add(obj.name)
        self._common_prefix = _detect_common_prefix(obj, self._common_prefix)
        object_namespace = _extract_app_namespace(obj)
        if not object_namespace:
            return
        if self._namespace and self._namespace != object_namespace:
            logger.warning(
                "Two different namespaces for app detected: %s and %s. "
                "Resulted chart will have single namespace.",
                object_namespace,
                self._namespace,
            )
        self._namespace = object_namespace

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def chart_name(self) -> str:
        return self.config.chart_name

    def trim_name(self, name: str) -> str:
        """Drop the app's common prefix from name, or return name unchanged."""
        trimmed = name.removeprefix(self._common_prefix).lstrip("-./_ ")
        return trimmed or name

    def templated_name(self, name: str) -> str:
        """The Helm templated form of an object name known to the app."""
        if self.config.original_name or name not in self._names:
            return name
        return _NAME_TEMPLATE.format(chart=self.chart_name, name=self.trim_name(name))

    def templated_string(self, text: str) -> str:
        """Prefix text with the chart's full name template."""
        return _NAME_TEMPLATE.format(chart=self.chart_name, name=self.trim_name(text))