"""Turning a stream of Kubernetes manifests into a Helm chart."""

from __future__ import annotations

import contextlib
import dataclasses
import logging
import signal
import threading
from typing import IO, Iterator, Protocol, Sequence

from helmify.chart import ChartOutput
from helmify.config import Config
from helmify.configmap import ConfigMapProcessor
from helmify.crd import CrdProcessor
from helmify.decoder import Resource, decode
from helmify.files import walk
from helmify.metadata import AppMetadata
from helmify.processor import DefaultProcessor
from helmify.values import Processor, Template

logger = logging.getLogger(__name__)

_PACKAGE_LOGGER = logging.getLogger(__name__.partition(".")[0])


class _Output(Protocol):
    def create(
        self,
        chart_dir: str,
        chart_name: str,
        crd: bool,
        cert_manager_as_subchart: bool,
        cert_manager_version: str,
        cert_manager_install_crd: bool,
        templates: Sequence[Template],
        filenames: Sequence[str],
    ) -> None: ...


class AppContext:
    """Collects the objects of an application and turns them into a chart."""

    def __init__(self, config: Config, output: _Output) -> None:
        self.config = config
        self.output = output
        self.app_meta = AppMetadata(config)
        self._processors: list[Processor] = []
        self._default_processor: Processor | None = None
        self._objects: list[tuple[Resource, str]] = []

    def with_processors(self, *processors: Processor) -> AppContext:
        """Register processors, tried in order, and return the context."""
        self._processors.extend(processors)
        return self

    def with_default_processor(self, processor: Processor) -> AppContext:
        """Set the processor for resources no other processor handles."""
        self._default_processor = processor
        return self

    def add(self, obj: Resource, filename: str = "") -> None:
        """Record an object; all objects are loaded before any is processed."""
        self.app_meta.load(obj)
        self._objects.append((obj, filename))

    def create_helm(self, stop: threading.Event | None = None) -> None:
        """Process the recorded objects and write the chart.

        Nothing is written when stop is set during processing.
        """
        logger.info(
            "creating a chart ChartName=%s Namespace=%s",
            self.app_meta.chart_name,
            self.app_meta.namespace,
        )
        templates: list[Template] = []
        filenames: list[str] = []
        for obj, filename in self._objects:
            template = self._process(obj)
            if template is not None:
                templates.append(template)
                filenames.append(filename or template.filename)
            if stop is not None and stop.is_set():
                return
        self.output.create(
            self.config.chart_dir,
            self.config.chart_name,
            self.config.crd,
            self.config.cert_manager_as_subchart,
            self.config.cert_manager_version,
            self.config.cert_manager_install_crd,
            templates,
            filenames,
        )

    def _process(self, obj: Resource) -> Template | None:
        for processor in self._processors:
            if processor.handles(obj):
                template = processor.process(self.app_meta, obj)
                logger.debug(
                    "processed ApiVersion=%s Kind=%s Name=%s", obj.api_version, obj.kind, obj.name
                )
                return template
        if self._default_processor is None:
            logger.warning(
                "Skipping: no suitable processor for resource. ApiVersion=%s Kind=%s Name=%s",
                obj.api_version,
                obj.kind,
                obj.name,
            )
            return None
        return self._default_processor.process(self.app_meta, obj)


def _set_log_level(config: Config) -> None:
    level = logging.ERROR
    if config.verbose:
        level = logging.INFO
    if config.very_verbose:
        level = logging.DEBUG
    _PACKAGE_LOGGER.setLevel(level)


@contextlib.contextmanager
def _stop_on_signals(stop: threading.Event) -> Iterator[None]:
    """Set stop on SIGINT or SIGTERM while the block runs in the main thread."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def handler(signum: int, frame: object) -> None:
        logger.debug("Received termination, signaling shutdown")
        stop.set()

    previous = {sig: signal.signal(sig, handler) for sig in (signal.SIGINT, signal.SIGTERM)}
    try:
        yield
    finally:
        for sig, old in previous.items():
            signal.signal(sig, old if old is not None else signal.SIG_DFL)


def start(stream: IO, config: Config) -> None:
    """Read manifests from config.files, or from stream, and write a Helm chart.

    Raises ValueError for an invalid chart name or resource, OSError when the
    chart cannot be written.
    """
    config = dataclasses.replace(config)
    config.validate()
    _set_log_level(config)
    stop = threading.Event()
    context = (
        AppContext(config, ChartOutput())
        .with_processors(ConfigMapProcessor(), CrdProcessor())
        .with_default_processor(DefaultProcessor())
    )
    with _stop_on_signals(stop):
        if config.files:
            for filename, file_stream in walk(config.files, config.files_recursively):
                for obj in decode(file_stream, stop):
                    context.add(obj, filename)
        else:
            for obj in decode(stream, stop):
                context.add(obj, "")
        context.create_helm(stop)