# helmify

`helmify` reads Kubernetes resource manifests and writes a Helm chart from
them: a `Chart.yaml`, a `.helmignore`, a `templates/_helpers.tpl`, template
files for the resources and a `values.yaml`.

## Installation

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Usage

Pipe manifests in on standard input and name the chart:

```
kustomize build ./config/default | helmify mychart
cat my-app.yaml | helmify mychart
```

Or point it at files and directories:

```
helmify -f ./manifests mychart
helmify -f ./manifests -r mychart
helmify -f ./manifests -f ./extra/app.yaml mychart
```

The chart name is optional and defaults to `chart`. It must be a lowercase
DNS-1123 subdomain (letters, digits, `-` and `.`). It may be given as a path
such as `deploy/charts/mychart`; the last part is the chart name and the chart
is created in `deploy/charts/mychart`.

When reading standard input, each resource goes into a template file named
after the resource. When reading with `-f`, resources are written into a
template file with the same name as the file they were read from.

Running again overwrites `values.yaml` and the generated templates. An
existing `Chart.yaml` is kept, together with `.helmignore` and
`_helpers.tpl`. Those three files are only written when `Chart.yaml` is
missing.

The command exits with status 1 when no files are given and standard input
is a terminal, or when the chart cannot be generated.

### Flags

Flags take one dash or two. Boolean flags also accept `-flag=false`.

| Flag | Meaning |
| --- | --- |
| `-h`, `-help` | Print help and exit |
| `-version` | Print version, build time and commit, then exit |
| `-v` | Log warnings and info |
| `-vv` | Log warnings, info and debug messages |
| `-f PATH` | File or directory with manifests; may be repeated |
| `-r` | Scan directories given with `-f` recursively |
| `-crd-dir` | Write CustomResourceDefinitions untemplated into `crds/` |
| `-cert-manager-as-subchart` | Declare cert-manager as a chart dependency and add `certmanager.enabled` and `certmanager.installCRDs` to values |
| `-cert-manager-version V` | Version for the cert-manager dependency (default `v1.12.2`) |
| `-cert-manager-install-crd` | Value of `certmanager.installCRDs` (default true) |
| `-original-name` | Keep resource names instead of templating them with the chart's full name |
| `-preserve-ns` | Keep each resource's `namespace` in its metadata |
| `-image-pull-secrets`, `-generate-defaults`, `-add-webhook-option` | Accepted and stored in the configuration; no resource handling uses them yet |

## What is generated

For every resource the metadata is templated:

- the name gets the chart's full name as prefix, with the prefix shared by
  all the application's resources dropped, unless `-original-name` is set;
- the labels Helm supplies itself (`app.kubernetes.io/name`, `instance`,
  `version`, `managed-by` and `helm.sh/chart`) are removed and the chart's
  common labels are included instead.

`Namespace` resources are dropped; Helm supplies the release namespace.

Resources get specialised handling by kind:

- **ConfigMap**: each `data` entry is moved into `values.yaml` under the
  config map's name. Single-line entries are quoted, multi-line entries are
  rendered with `toYaml`, and entries whose key ends in `.properties` are
  split into one value per `key=value` line.
- **CustomResourceDefinition**: written to `<singular>-crd.yaml` with its
  spec kept, a `cert-manager.io/inject-ca-from` annotation pointing at the
  release's certificate, and a conversion webhook service templated to the
  release. With `-crd-dir` the definition is written to `crds/` as plain
  YAML instead.
- **Everything else**: only the metadata is templated; the rest of the
  object is written as it was.

`values.yaml` always holds `kubernetesClusterDomain: cluster.local`.

## What it does not do

Deployments, StatefulSets, DaemonSets, Jobs, CronJobs, Services, Ingresses,
Secrets, RBAC objects, storage and webhook resources have no specialised
handling: they pass through the generic path described above, so their
images, replica counts, resources and similar settings are not moved into
`values.yaml`. The flags `-image-pull-secrets`, `-generate-defaults` and
`-add-webhook-option` therefore have no effect on the output.

## Library use

```python
import sys
from helmify.app import start
from helmify.config import Config

start(sys.stdin, Config(chart_name="mychart"))
```

`start` raises `ValueError` for an invalid chart name or resource and
`OSError` when the chart cannot be written.

The pieces can also be used on their own:

- `helmify.decoder.decode(stream)` yields `Resource` objects from a
  multi-document YAML stream, skipping documents that cannot be parsed.
- `helmify.app.AppContext` collects resources with `add()` and writes a chart
  with `create_helm()`, using the processors registered through
  `with_processors()` and `with_default_processor()`.
- `helmify.values.Values` is the values tree; `add()`, `add_yaml()` and
  `add_secret()` store a value under a camel-cased path and return the
  template reference to it. New resource kinds are supported by subclassing
  `helmify.values.Processor` and returning a `helmify.values.Template`
  (for fixed text, `helmify.processor.StaticTemplate`).
- `helmify.chart.ChartOutput` writes templates and values to a chart
  directory.
- `helmify.format` holds the YAML and text helpers, and
  `helmify.deployment` the text fixes `replace_single_quotes()` and
  `add_webhook_option()` for rendered pod specs.