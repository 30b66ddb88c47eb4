"""Command line entry point."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from typing import IO, Sequence

from helmify.app import start
from helmify.config import Config

logger = logging.getLogger(__name__)

VERSION = "development"
BUILD_DATE = "not set"
COMMIT = "not set"

HELP_TEXT = """Helmify parses kubernetes resources from std.in and converts it to a Helm chart.

Example 1: 'kustomize build <kustomize_dir> | helmify mychart' 
  - will create 'mychart' directory with Helm chart from kustomize output.

Example 2: 'cat my-app.yaml | helmify mychart' 
  - will create 'mychart' directory with Helm chart from yaml file.

Example 3: 'helmify -f ./test_data/dir  mychart' 
  - will scan directory ./test_data/dir for files with k8s manifests and create 'mychart' directory with Helm chart.

Example 4: 'helmify -f ./test_data/dir -r  mychart' 
  - will scan directory ./test_data/dir recursively and  create 'mychart' directory with Helm chart.

Example 5: 'helmify -f ./test_data/dir -f ./test_data/sample-app.yaml -f ./test_data/dir/another_dir  mychart' 
  - will scan provided multiple files and directories and  create 'mychart' directory with Helm chart.

Example 6: 'awk 'FNR==1 && NR!=1  {print "---"}{print}' /my_directory/*.yaml | helmify mychart' 
  - will create 'mychart' directory with Helm chart from all yaml files in my_directory directory.

Usage:
  helmify [flags] CHART_NAME  -  CHART_NAME is optional. Default is 'chart'. Can be a directory, e.g. 'deploy/charts/mychart'.

Flags:
"""


@dataclass(frozen=True)
class _Flag:
    name: str
    usage: str
    # A bool or str default gives the flag's type; None marks a repeatable value.
    default: bool | str | None = False


_FLAGS = (
    _Flag("h", "Print help. Example: helmify -h"),
    _Flag("help", "Print help. Example: helmify -help"),
    _Flag("version", "Print helmify version. Example: helmify -version"),
    _Flag("v", "Enable verbose output (print WARN & INFO). Example: helmify -v"),
    _Flag("vv", "Enable very verbose output. Same as verbose but with DEBUG. Example: helmify -vv"),
    _Flag(
        "crd-dir",
        "Enable crd install into 'crds' directory.\n"
        "Warning: CRDs placed in 'crds' directory will not be templated by Helm.\n"
        "See the Helm chart best practices on custom resource definitions.\n"
        "Example: helmify -crd-dir",
    ),
    _Flag(
        "image-pull-secrets",
        "Allows the user to use existing secrets as imagePullSecrets in values.yaml",
    ),
    _Flag(
        "generate-defaults",
        "Allows the user to add empty placeholders for typical customization options in "
        "values.yaml. Currently covers: topology constraints, node selectors, tolerances",
    ),
    _Flag("cert-manager-as-subchart", "Allows the user to add cert-manager as a subchart"),
    _Flag(
        "cert-manager-version",
        "Allows the user to specify cert-manager subchart version. "
        "Only useful with cert-manager-as-subchart.",
        "v1.12.2",
    ),
    _Flag(
        "cert-manager-install-crd",
        "Allows the user to install cert-manager CRD. Only useful with cert-manager-as-subchart.",
        True,
    ),
    _Flag("r", "Scan dirs from -f option recursively"),
    _Flag(
        "original-name",
        "Use the object's original name instead of adding the chart's release name "
        "as the common prefix.",
    ),
    _Flag("f", "File or directory containing k8s manifests", None),
    _Flag(
        "preserve-ns",
        "Use the object's original namespace instead of adding all the resources "
        "to a common namespace",
    ),
    _Flag("add-webhook-option", "Allows the user to add webhook option in values.yaml"),
)

_FLAGS_BY_NAME = {flag.name: flag for flag in _FLAGS}

_TRUE_WORDS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_WORDS = frozenset({"0", "f", "F", "FALSE", "false", "False"})


class _UsageError(ValueError):
    pass


def _parse_bool(name: str, text: str) -> bool:
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    raise _UsageError(f'invalid boolean value "{text}" for -{name}')


def _print_defaults(stream: IO[str]) -> None:
    for flag in sorted(_FLAGS, key=lambda item: item.name):
        line = f"  -{flag.name}"
        if not isinstance(flag.default, bool):
            line += " string" if isinstance(flag.default, str) else " value"
        line += "\t" if len(line) <= 4 else "\n    \t"
        line += flag.usage.replace("\n", "\n    \t")
        if flag.default is True:
            line += " (default true)"
        elif isinstance(flag.default, str) and flag.default:
            line += f' (default "{flag.default}")'
        print(line, file=stream)


def _parse(argv: Sequence[str]) -> tuple[dict, list[str]]:
    """Parse single- or double-dash flags up to the first positional argument."""
    values: dict = {
        flag.name: [] if flag.default is None else flag.default for flag in _FLAGS
    }
    args = list(argv)
    while args:
        arg = args[0]
        if len(arg) < 2 or not arg.startswith("-"):
            break
        args.pop(0)
        if arg == "--":
            break
        body = arg[2:] if arg.startswith("--") else arg[1:]
        if not body or body[0] in "-=":
            raise _UsageError(f"bad flag syntax: {arg}")
        name, has_value, text = body.partition("=")
        flag = _FLAGS_BY_NAME.get(name)
        if flag is None:
            raise _UsageError(f"flag provided but not defined: -{name}")
        if isinstance(flag.default, bool):
            values[name] = _parse_bool(name, text) if has_value else True
            continue
        if not has_value:
            if not args:
                raise _UsageError(f"flag needs an argument: -{name}")
            text = args.pop(0)
        if flag.default is None:
            values[name].append(text)
        else:
            values[name] = text
    return values, args


def print_version() -> str:
    """Print version, build time and commit of this build and return the text."""
    text = "".join(
        f"{label:<12}{value}\n"
        for label, value in (
            ("Version:", VERSION),
            ("Build Time:", BUILD_DATE),
            ("Git Commit:", COMMIT),
        )
    )
    sys.stdout.write(text)
    return text


def read_flags(argv: Sequence[str] | None = None) -> Config:
    """Build the configuration from command line arguments.

    Prints help or the version and exits with status 0 when asked to; exits
    with status 2 on a usage error.
    """
    if argv is None:
        argv = sys.argv[1:]
    try:
        values, positional = _parse(argv)
    except _UsageError as error:
        print(error, file=sys.stderr)
        print("Usage of helmify:", file=sys.stderr)
        _print_defaults(sys.stderr)
        raise SystemExit(2) from error

    if values["h"] or values["help"]:
        print(HELP_TEXT, end="")
        _print_defaults(sys.stderr)
        raise SystemExit(0)
    if values["version"]:
        print_version()
        raise SystemExit(0)

    config = Config(
        verbose=values["v"],
        very_verbose=values["vv"],
        crd=values["crd-dir"],
        image_pull_secrets=values["image-pull-secrets"],
        generate_defaults=values["generate-defaults"],
        cert_manager_as_subchart=values["cert-manager-as-subchart"],
        cert_manager_version=values["cert-manager-version"],
        cert_manager_install_crd=values["cert-manager-install-crd"],
        files=values["f"],
        files_recursively=values["r"],
        original_name=values["original-name"],
        preserve_ns=values["preserve-ns"],
        add_webhook_option=values["add-webhook-option"],
    )
    name = positional[0] if positional else ""
    if name:
        config.chart_name = os.path.basename(name.rstrip("/")) or name
        config.chart_dir = os.path.dirname(name) or "."
    return config


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command and return its exit status."""
    logging.basicConfig(format="%(levelname)s %(message)s")
    config = read_flags(argv)
    if not config.files:
        try:
            interactive = sys.stdin.isatty()
        except (AttributeError, OSError, ValueError) as error:
            logger.error("stdin error: %s", error)
            return 1
        if interactive:
            logger.error("no data piped in stdin")
            return 1
    try:
        start(sys.stdin, config)
    except (OSError, ValueError) as error:
        logger.error("helmify finished with error: %s", error)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())