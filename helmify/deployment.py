"""Text fixes applied to rendered Deployment pod specs."""

from __future__ import annotations

import re

_SINGLE_QUOTED_TEMPLATE = re.compile(r"'({{((.*|.*\n.*))}}.*)'")

_WEBHOOK_OPTION_HEADER = "      {{- if .Values.webhook.enabled }}"
_WEBHOOK_OPTION_FOOTER = "      {{- end }}"

_CERT_VOLUME = (
    "      - name: cert\n"
    "        secret:\n"
    "          defaultMode: 420\n"
    "          secretName: webhook-server-cert"
)

_CERT_VOLUME_MOUNT = (
    "        - mountPath: /tmp/k8s-webhook-server/serving-certs\n"
    "          name: cert\n"
    "          readOnly: true"
)

_WEBHOOK_PORT = re.compile(
    r"        - containerPort: [0-9]+\n"
    r"          name: webhook-server\n"
    r"          protocol: TCP"
)


def replace_single_quotes(text: str) -> str:
    """Remove the single quotes YAML puts around values holding template actions."""
    return _SINGLE_QUOTED_TEMPLATE.sub(r"\1", text)


def _wrap_in_webhook_option(block: str) -> str:
    return f"{_WEBHOOK_OPTION_HEADER}\n{block}\n{_WEBHOOK_OPTION_FOOTER}"


def add_webhook_option(manifest: str) -> str:
    """Make the webhook certificate volume, its mount and port conditional.

    Every webhook port block is replaced by the first one found, wrapped in
    a condition on .Values.webhook.enabled.
    """
    manifest = manifest.replace(_CERT_VOLUME, _wrap_in_webhook_option(_CERT_VOLUME))
    manifest = manifest.replace(_CERT_VOLUME_MOUNT, _wrap_in_webhook_option(_CERT_VOLUME_MOUNT))
    port = _WEBHOOK_PORT.search(manifest)
    if port is not None:
        wrapped = _wrap_in_webhook_option(port.group(0))
        manifest = _WEBHOOK_PORT.sub(lambda _match: wrapped, manifest)
    return manifest