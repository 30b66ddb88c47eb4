"""Writing templates to a filesystem as a Helm chart."""

from __future__ import annotations

import json
import logging
import os
import re
from typing import Sequence

from helmify.config import DEFAULT_DOMAIN, DOMAIN_KEY
from helmify.format import marshal_yaml
from helmify.values import Template, Values

logger = logging.getLogger(__name__)

CHART_NAME_PATTERN = "^[a-zA-Z0-9._-]+$"
MAX_CHART_NAME_LENGTH = 250
_CHART_NAME = re.compile(CHART_NAME_PATTERN)

_TRIM = '| trunc 63 | trimSuffix "-"'
_END = "{{- end }}"


def _build_helm_ignore() -> str:
    lines = [
        "# Paths excluded when the chart is packaged.",
        "# Shell globs, relative paths and negation with a leading ! are supported,",
        "# one pattern per line.",
        ".DS_Store",
        "# version control",
    ]
    for vcs in ("git", "bzr", "hg"):
        lines += [f".{vcs}/", f".{vcs}ignore"]
    lines.append(".svn/")
    lines.append("# editor and backup leftovers")
    lines += [f"*.{ext}" for ext in ("swp", "bak", "tmp", "orig")]
    lines.append("*~")
    lines.append("# IDE settings")
    lines += [".project", ".idea/", "*.tmproj", ".vscode/"]
    return "\n".join(lines) + "\n"


HELM_IGNORE = _build_helm_ignore()


def validate_chart_name(name: str) -> None:
    """Raise ValueError unless name is usable as a chart directory name."""
    if not name or len(name) > MAX_CHART_NAME_LENGTH:
        raise ValueError(f"chart name must be between 1 and {MAX_CHART_NAME_LENGTH} characters")
    if not _CHART_NAME.fullmatch(name):
        raise ValueError(f"chart name must match the regular expression {json.dumps(CHART_NAME_PATTERN)}")


def chart_yaml(app_name: str, cert_manager_as_subchart: bool, cert_manager_version: str) -> str:
    """The content of Chart.yaml, optionally declaring cert-manager as a dependency."""
    lines = [
        "apiVersion: v2",
        f"name: {app_name}",
        "description: A Helm chart for Kubernetes",
        "# An 'application' chart deploys resources; a 'library' chart only offers",
        "# helpers to other charts and cannot be installed by itself.",
        "type: application",
        "# Chart version (SemVer); bump it whenever the chart or its templates change.",
        "version: 0.1.0",
        "# Version of the packaged application; keep it quoted.",
        'appVersion: "0.1.0"',
    ]
    if cert_manager_as_subchart:
        lines += [
            "",
            "dependencies:",
            "  - name: cert-manager",
            "    repository: https://charts.jetstack.io",
            "    condition: certmanager.enabled",
            "    alias: certmanager",
            f"    version: {json.dumps(cert_manager_version)}",
        ]
    return "\n".join(lines) + "\n"


def _action(body: str) -> str:
    return "{{- " + body + " }}"


def helpers_tpl(chart_name: str) -> str:
    """The content of templates/_helpers.tpl for the named chart."""

    def include(name: str) -> str:
        return '{{ include "' + f"{chart_name}.{name}" + '" . }}'

    blocks = [
        (
            "Chart name, honouring nameOverride.",
            "name",
            [_action(f"default .Chart.Name .Values.nameOverride {_TRIM}")],
        ),
        (
            "Fully qualified app name, cut to 63 characters (DNS label limit).\n"
            "The release name alone is used when it already contains the chart name.",
            "fullname",
            [
                _action("if .Values.fullnameOverride"),
                _action(f".Values.fullnameOverride {_TRIM}"),
                _action("else"),
                _action("$name := default .Chart.Name .Values.nameOverride"),
                _action("if contains $name .Release.Name"),
                _action(f".Release.Name {_TRIM}"),
                _action("else"),
                _action(f'printf "%s-%s" .Release.Name $name {_TRIM}'),
                _END,
                _END,
            ],
        ),
        (
            "Chart name and version for the chart label.",
            "chart",
            [_action(f'printf "%s-%s" .Chart.Name .Chart.Version | replace "+" "_" {_TRIM}')],
        ),
        (
            "Labels shared by all resources.",
            "labels",
            [
                "helm.sh/chart: " + include("chart"),
                include("selectorLabels"),
                _action("if .Chart.AppVersion"),
                "app.kubernetes.io/version: {{ .Chart.AppVersion | quote }}",
                _END,
                "app.kubernetes.io/managed-by: {{ .Release.Service }}",
            ],
        ),
        (
            "Labels used by selectors.",
            "selectorLabels",
            [
                "app.kubernetes.io/name: " + include("name"),
                "app.kubernetes.io/instance: {{ .Release.Name }}",
            ],
        ),
        (
            "Service account name.",
            "serviceAccountName",
            [
                _action("if .Values.serviceAccount.create"),
                _action(f'default (include "{chart_name}.fullname" .) .Values.serviceAccount.name'),
                _action("else"),
                _action('default "default" .Values.serviceAccount.name'),
                _END,
            ],
        ),
    ]
    rendered = []
    for doc, name, body in blocks:
        parts = ["{{/*", doc, "*/}}", '{{- define "' + f"{chart_name}.{name}" + '" -}}', *body, _END]
        rendered.append("\n".join(parts) + "\n")
    return "\n".join(rendered)


def _write_new_file(path: str, content: str) -> None:
    with open(path, "w", encoding="utf-8") as stream:
        stream.write(content)
    logger.info("created %s", path)


def _create_common_files(
    chart_dir: str,
    chart_name: str,
    crd: bool,
    cert_manager_as_subchart: bool,
    cert_manager_version: str,
) -> None:
    chart_path = os.path.join(chart_dir, chart_name)
    os.makedirs(os.path.join(chart_path, "templates"), mode=0o750, exist_ok=True)
    if crd:
        os.makedirs(os.path.join(chart_path, "crds"), mode=0o750, exist_ok=True)
    _write_new_file(
        os.path.join(chart_path, "Chart.yaml"),
        chart_yaml(chart_name, cert_manager_as_subchart, cert_manager_version),
    )
    _write_new_file(os.path.join(chart_path, ".helmignore"), HELM_IGNORE)
    _write_new_file(os.path.join(chart_path, "templates", "_helpers.tpl"), helpers_tpl(chart_name))


def init_chart_dir(
    chart_dir: str,
    chart_name: str,
    crd: bool,
    cert_manager_as_subchart: bool,
    cert_manager_version: str,
) -> None:
    """Create the chart skeleton unless its Chart.yaml already exists."""
    validate_chart_name(chart_name)
    if os.path.exists(os.path.join(chart_dir, chart_name, "Chart.yaml")):
        logger.info("Skip creating Chart skeleton: Chart.yaml already exists.")
        return
    _create_common_files(chart_dir, chart_name, crd, cert_manager_as_subchart, cert_manager_version)


def _overwrite_template_file(
    filename: str, chart_path: str, crd: bool, templates: Sequence[Template]
) -> None:
    if "crd" in filename and crd:
        subdir = "crds"
        os.makedirs(os.path.join(chart_path, subdir), mode=0o750, exist_ok=True)
    else:
        subdir = "templates"
    path = os.path.join(chart_path, subdir, filename)
    with open(path, "w", encoding="utf-8") as stream:
        for index, template in enumerate(templates):
            logger.debug("writing a template into %s", path)
            if index:
                stream.write("\n---\n")
            template.write(stream)
        if templates:
            stream.write("\n")
    logger.info("overwritten %s", path)


def _overwrite_values_file(
    chart_path: str, values: Values, cert_manager_as_subchart: bool, cert_manager_install_crd: bool
) -> None:
    if cert_manager_as_subchart:
        values.add(cert_manager_install_crd, "certmanager", "installCRDs")
        values.add(True, "certmanager", "enabled")
    path = os.path.join(chart_path, "values.yaml")
    with open(path, "w", encoding="utf-8") as stream:
        stream.write(marshal_yaml(values, 0) + "\n")
    logger.info("overwritten %s", path)


class ChartOutput:
    """Writes processed templates to disk in Helm chart layout.

    values.yaml and the generated template files are overwritten on every run.
    """

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
    ) -> None:
        """Create or update the chart chart_dir/chart_name from templates."""
        init_chart_dir(chart_dir, chart_name, crd, cert_manager_as_subchart, cert_manager_version)
        files: dict[str, list[Template]] = {}
        values = Values({DOMAIN_KEY: DEFAULT_DOMAIN})
        for template, filename in zip(templates, filenames):
            files.setdefault(filename, []).append(template)
            values.merge(template.values)
        chart_path = os.path.join(chart_dir, chart_name)
        for filename, grouped in files.items():
            _overwrite_template_file(filename, chart_path, crd, grouped)
        _overwrite_values_file(chart_path, values, cert_manager_as_subchart, cert_manager_install_crd)