import io
import threading

from helmify.decoder import Resource, decode

VALID_OBJECTS_2 = """apiVersion: v1
kind: Service
metadata:
  name: my-operator-webhook-service
  namespace: my-operator-system
spec:
  ports:
  - port: 443
    targetPort: 9443
  selector:
    control-plane: controller-manager
---
apiVersion: v1
kind: Namespace
metadata:
  labels:
    control-plane: controller-manager
  name: my-operator-system
"""

VALID_OBJECTS_2_WITH_INVALID = """ajrcmq84xpru038um9q8
wqprux934ur8wcnqwp8urxqwrxuqweruncw
---
apiVersion: v1
kind: Service
metadata:
  name: my-operator-webhook-service
  namespace: my-operator-system
spec:
  ports:
  - port: 443
    targetPort: 9443
  selector:
    control-plane: controller-manager
---
---
---
8umx9284ru 82q983y49q
q 3408tuqw8e
q 49tuqw[fa iwfaowoewihfe4hf
---
apiVersion: v1
kind: Namespace
metadata:
  labels:
    control-plane: controller-manager
  name: my-operator-system
---
apiVersion: v1
metadata:
  labels:
"""

VALID_OBJECTS_0 = """---
---
---
"""


def test_decode_ok():
    assert len(list(decode(io.StringIO(VALID_OBJECTS_2)))) == 2


def test_decode_empty_objects():
    assert list(decode(io.StringIO(VALID_OBJECTS_0))) == []


def test_decode_invalid_objects_skipped():
    objects = list(decode(io.StringIO(VALID_OBJECTS_2_WITH_INVALID)))
    assert [obj.kind for obj in objects] == ["Service", "Namespace"]


def test_decode_bytes_stream():
    objects = list(decode(io.BytesIO(VALID_OBJECTS_2.encode())))
    assert len(objects) == 2


def test_decode_stops_when_signalled():
    stop = threading.Event()
    stop.set()
    assert list(decode(io.StringIO(VALID_OBJECTS_2), stop)) == []


def test_resource_accessors():
    service, namespace = decode(io.StringIO(VALID_OBJECTS_2))
    assert service.name == "my-operator-webhook-service"
    assert service.namespace == "my-operator-system"
    assert service.group_version_kind == ("", "v1", "Service")
    assert namespace.labels == {"control-plane": "controller-manager"}
    assert namespace.annotations == {}


def test_timestamps_kept_as_strings():
    text = "apiVersion: v1\nkind: Pod\nmetadata:\n  name: p\n  creationTimestamp: 2020-01-01T00:00:00Z\n"
    (obj,) = decode(io.StringIO(text))
    assert obj.data["metadata"]["creationTimestamp"] == "2020-01-01T00:00:00Z"


def test_group_version_kind_with_group():
    obj = Resource({"apiVersion": "apps/v1", "kind": "Deployment"})
    assert obj.group_version_kind == ("apps", "v1", "Deployment")


def test_labels_with_non_string_value_are_empty():
    obj = Resource({"kind": "X", "metadata": {"labels": {"example": True}}})
    assert obj.labels == {}


def test_labels_are_a_copy():
    obj = Resource({"kind": "X", "metadata": {"labels": {"a": "b"}}})
    labels = obj.labels
    labels.pop("a")
    assert obj.labels == {"a": "b"}