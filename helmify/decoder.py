"""Decoding of Kubernetes manifests from a YAML stream."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import IO, Any, Iterator

import yaml

logger = logging.getLogger(__name__)

_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class _Loader(yaml.SafeLoader):
    """Safe loader that keeps timestamps as plain strings."""


_Loader.yaml_implicit_resolvers = {
    first: [(tag, pattern) for tag, pattern in resolvers if tag != _TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


@dataclass
class Resource:
    """A Kubernetes object held as its plain mapping."""

    data: dict[str, Any] = field(default_factory=dict)

    def _metadata(self) -> dict[str, Any]:
        metadata = self.data.get("metadata")
        return metadata if isinstance(metadata, dict) else {}

    def _string_map(self, key: str) -> dict[str, str]:
        mapping = self._metadata().get(key)
        if not isinstance(mapping, dict) or not all(isinstance(v, str) for v in mapping.values()):
            return {}
        return dict(mapping)

    @property
    def api_version(self) -> str:
        value = self.data.get("apiVersion")
        return value if isinstance(value, str) else ""

    @property
    def kind(self) -> str:
        value = self.data.get("kind")
        return value if isinstance(value, str) else ""

    @property
    def name(self) -> str:
        value = self._metadata().get("name")
        return value if isinstance(value, str) else ""

    @property
    def namespace(self) -> str:
        value = self._metadata().get("namespace")
        return value if isinstance(value, str) else ""

    @property
    def labels(self) -> dict[str, str]:
        """A copy of the labels; empty when any label value is not a string."""
        return self._string_map("labels")

    @property
    def annotations(self) -> dict[str, str]:
        """A copy of the annotations; empty when any value is not a string."""
        return self._string_map("annotations")

    @property
    def group_version_kind(self) -> tuple[str, str, str]:
        """The (group, version, kind) triple taken from apiVersion and kind."""
        parts = self.api_version.split("/")
        if len(parts) == 1:
            group, version = "", parts[0]
        elif len(parts) == 2:
            group, version = parts
        else:
            group, version = "", ""
        return group, version, self.kind


def _documents(stream: IO) -> Iterator[str]:
    buffer: list[str] = []
    for line in stream:
        if isinstance(line, bytes):
            line = line.decode("utf-8")
        if line.startswith("---"):
            rest = line[3:].strip()
            if not rest or rest.startswith("#"):
                if buffer:
                    yield "".join(buffer)
                    buffer = []
                continue
        buffer.append(line)
    if buffer:
        yield "".join(buffer)


def _normalize(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(key): _normalize(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_normalize(item) for item in value]
    return value


def decode(stream: IO, stop: threading.Event | None = None) -> Iterator[Resource]:
    """Yield every valid Kubernetes object found in a YAML stream.

    Documents that cannot be parsed or are not objects with a kind are logged
    and skipped. Decoding ends early once stop is set.
    """
    logger.debug("Start processing...")
    for document in _documents(stream):
        if stop is not None and stop.is_set():
            logger.debug("Exiting: received stop signal")
            return
        try:
            parsed = yaml.load(document, Loader=_Loader)
        except yaml.YAMLError as error:
            logger.error("unable to decode yaml from input: %s", error)
            continue
        if parsed is None:
            continue
        if not isinstance(parsed, dict):
            logger.error("unable to decode yaml: document is not an object")
            continue
        data = _normalize(parsed)
        if not isinstance(data.get("kind"), str) or not data["kind"]:
            logger.error("unable to decode yaml: object 'Kind' is missing")
            continue
        resource = Resource(data)
        logger.debug(
            "decoded ApiVersion=%s Kind=%s Name=%s",
            resource.api_version,
            resource.kind,
            resource.name,
        )
        yield resource
    logger.debug("EOF received. Finishing input objects decoding.")