"""Conversion of CustomResourceDefinition resources into templates."""

from __future__ import annotations

import copy
import logging
from typing import Any

from helmify.decoder import Resource
from helmify.format import marshal_yaml
from helmify.metadata import AppMetadata
from helmify.processor import StaticTemplate
from helmify.values import Processor, Template

logger = logging.getLogger(__name__)

_CRD_GVK = ("apiextensions.k8s.io", "v1", "CustomResourceDefinition")
_INJECT_CA_ANNOTATION = "cert-manager.io/inject-ca-from"
_WEBHOOK_STRATEGY = "Webhook"

_HELM_PROVIDED_LABELS = (
    "app.kubernetes.io/name",
    "app.kubernetes.io/instance",
    "app.kubernetes.io/version",
    "app.kubernetes.io/managed-by",
    "helm.sh/chart",
)

_CRD_TEMPLATE = (
    "apiVersion: apiextensions.k8s.io/v1\n"
    "kind: CustomResourceDefinition\n"
    "metadata:\n"
    "  name: {name}\n"
    "{annotations}\n"
    "  labels:\n"
    "{labels}\n"
    '  {{{{- include "{chart}.labels" . | nindent 4 }}}}\n'
    "spec:\n"
    "{spec}\n"
    "status:\n"
    "  acceptedNames:\n"
    '    kind: ""\n'
    '    plural: ""\n'
    "  conditions: []\n"
    "  storedVersions: []"
)


def _singular_name(obj: Resource) -> str:
    spec = obj.data.get("spec")
    names = spec.get("names") if isinstance(spec, dict) else None
    singular = names.get("singular") if isinstance(names, dict) else None
    if not isinstance(singular, str):
        raise ValueError("spec.names.singular is missing: unable to create crd template")
    return singular


def _template_conversion_webhook(spec: dict[str, Any], app_meta: AppMetadata) -> None:
    conversion = spec.get("conversion")
    if not isinstance(conversion, dict) or conversion.get("strategy") != _WEBHOOK_STRATEGY:
        return
    webhook = conversion.get("webhook")
    client_config = webhook.get("clientConfig") if isinstance(webhook, dict) else None
    service = client_config.get("service") if isinstance(client_config, dict) else None
    if not isinstance(service, dict):
        return
    service["name"] = app_meta.templated_name(str(service.get("name", "")))
    namespace = str(service.get("namespace", ""))
    service["namespace"] = namespace.replace(app_meta.namespace, "{{ .Release.Namespace }}")


class CrdProcessor(Processor):
    """Turns CustomResourceDefinitions into templates, or plain files for the crds dir."""

    def handles(self, obj: Resource) -> bool:
        return obj.group_version_kind == _CRD_GVK

    def process(self, app_meta: AppMetadata, obj: Resource) -> Template | None:
        name = _singular_name(obj)
        filename = name + "-crd.yaml"

        if app_meta.config.crd:
            logger.info("put CRD %s under crds dir without templating", name)
            return StaticTemplate(filename, marshal_yaml(obj.data, 0) + "\n")

        annotations = ""
        object_annotations = obj.annotations
        if object_annotations:
            cert_name = object_annotations.get(_INJECT_CA_ANNOTATION, "")
            if cert_name:
                cert_name = cert_name.removeprefix(app_meta.namespace + "/")
                cert_name = app_meta.trim_name(cert_name)
                object_annotations[_INJECT_CA_ANNOTATION] = (
                    "{{ .Release.Namespace }}/"
                    f'{{{{ include "{app_meta.chart_name}.fullname" . }}}}-{cert_name}'
                )
            annotations = marshal_yaml({"annotations": object_annotations}, 2)

        labels = ""
        object_labels = obj.labels
        for key in _HELM_PROVIDED_LABELS:
            object_labels.pop(key, None)
        if object_labels:
            labels = marshal_yaml(object_labels, 4).strip("\n")

        spec = obj.data.get("spec")
        if not isinstance(spec, dict):
            raise ValueError("spec is missing: unable to create crd template")
        spec = copy.deepcopy(spec)
        _template_conversion_webhook(spec, app_meta)

        text = _CRD_TEMPLATE.format(
            name=obj.name,
            chart=app_meta.chart_name,
            annotations=annotations,
            labels=labels,
            spec=marshal_yaml(spec, 2),
        )
        return StaticTemplate(filename, text.replace("\n\n", "\n"))