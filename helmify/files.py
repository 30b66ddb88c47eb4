"""Reading manifest files and directories named on the command line."""

from __future__ import annotations

import logging
import os
from typing import IO, Iterator

logger = logging.getLogger(__name__)


def _open_file(path: str) -> IO[str]:
    return open(path, encoding="utf-8")


def _walk_tree(root: str) -> Iterator[tuple[str, IO[str]]]:
    """Yield every file under root in lexical order; OSError ends the walk."""
    with os.scandir(root) as scanner:
        entries = sorted(scanner, key=lambda entry: entry.name)
    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            yield from _walk_tree(entry.path)
            continue
        with _open_file(entry.path) as stream:
            yield entry.name, stream


def walk(paths: list[str], recursively: bool = False) -> Iterator[tuple[str, IO[str]]]:
    """Yield (file name, open text stream) for each file among paths.

    A path may be a file or a directory. Directories are read one level deep
    unless recursively is set. Paths that cannot be read are logged and
    skipped. Each stream is closed once the consumer moves on.
    """
    for path in paths:
        if not os.path.exists(path):
            logger.warning("no such file or directory %r", path)
            continue

        if not os.path.isdir(path):
            try:
                stream = _open_file(path)
            except OSError as error:
                logger.warning("unable to open file %r: %s", path, error)
                continue
            with stream:
                yield os.path.basename(path), stream
            continue

        if not recursively:
            try:
                with os.scandir(path) as scanner:
                    entries = sorted(scanner, key=lambda entry: entry.name)
            except OSError as error:
                logger.warning("unable to read directory %r: %s", path, error)
                continue
            for entry in entries:
                if entry.is_dir(follow_symlinks=False):
                    continue
                try:
                    stream = _open_file(entry.path)
                except OSError as error:
                    logger.warning("unable to open file %r: %s", entry.path, error)
                    continue
                with stream:
                    yield entry.name, stream
            continue

        try:
            yield from _walk_tree(path)
        except OSError as error:
            logger.warning("unable to open %r: %s", os.path.basename(path), error)