from typing import List

from node_impact.annotations import (
    TARGET_TYPE_ANNOTATION,
    AnnotationStore,
    IngressAnnotations,
    ReaderAnnotationStore,
)
from node_impact.classifier import TargetModeClassifier
from node_impact.exceptions import ClusterReadError, InvalidAnnotation
from node_impact.models import Ingress, NamespacedName, ReconcileRequest, TargetMode
from node_impact.reader import SnapshotReader
from node_impact.resolver import ImpactResolver
from node_impact.workqueue import ReconcileQueue


class RecordingQueue(ReconcileQueue):
    def __init__(self):
        self.requests: List[ReconcileRequest] = []

    def add(self, request: ReconcileRequest) -> None:
        self.requests.append(request)

    def keys(self) -> List[str]:
        return [r.key for r in self.requests]


class RecordingReader(SnapshotReader):
    def __init__(self, snapshot):
        super().__init__(snapshot)
        self.fetched: List[str] = []

    def get_service(self, namespace: str, name: str):
        self.fetched.append(f"{namespace}/{name}")
        return super().get_service(namespace, name)


class BrokenListReader(SnapshotReader):
    def list_ingresses(self):
        raise ClusterReadError("cache not synced")


class FailingStore(AnnotationStore):
    def __init__(self, inner: AnnotationStore, failing_key: str):
        self._inner = inner
        self._failing_key = failing_key

    def get_ingress_annotations(self, key: str) -> IngressAnnotations:
        if key == self._failing_key:
            raise ClusterReadError(f"annotations for {key} unavailable")
        return self._inner.get_ingress_annotations(key)


def ingress(namespace, name, *, ingress_class="alb", target_type=None, services=()):
    annotations = {"kubernetes.io/ingress.class": ingress_class}
    if target_type is not None:
        annotations[TARGET_TYPE_ANNOTATION] = target_type
    return {
        "kind": "Ingress",
        "metadata": {"namespace": namespace, "name": name, "annotations": annotations},
        "spec": {
            "rules": [
                {
                    "http": {
                        "paths": [
                            {"path": f"/{svc}", "backend": {"serviceName": svc, "servicePort": 80}}
                            for svc in services
                        ]
                    }
                }
            ]
        },
    }


def service(namespace, name, type_="ClusterIP"):
    return {
        "kind": "Service",
        "metadata": {"namespace": namespace, "name": name},
        "spec": {"type": type_},
    }


def build_resolver(reader, queue, *, ingress_class="alb", store=None, workers=1):
    store = store or ReaderAnnotationStore(reader)
    return ImpactResolver(
        ingress_class, reader, TargetModeClassifier(store), queue, workers=workers
    )


def test_instance_mode_ingress_is_enqueued_once():
    reader = SnapshotReader.from_manifests(
        [ingress("ns", "a", target_type="instance", services=["svc1", "svc2"])]
    )
    queue = RecordingQueue()

    impacted = build_resolver(reader, queue).enqueue_impacted_ingresses()

    assert impacted == {NamespacedName("ns", "a")}
    assert queue.keys() == ["ns/a"]


def test_ingress_without_target_type_defaults_to_instance():
    reader = SnapshotReader.from_manifests([ingress("ns", "a", services=["svc1"])])
    queue = RecordingQueue()

    build_resolver(reader, queue).enqueue_impacted_ingresses()

    assert queue.keys() == ["ns/a"]


def test_ip_mode_short_circuits_on_first_nodeport_backend():
    manifests = [
        ingress("ns", "b", target_type="ip", services=["svca", "svcb", "svcc"]),
        service("ns", "svca", "ClusterIP"),
        service("ns", "svcb", "NodePort"),
        service("ns", "svcc", "ClusterIP"),
    ]
    reader = RecordingReader(SnapshotReader.from_manifests(manifests).snapshot)
    queue = RecordingQueue()

    build_resolver(reader, queue).enqueue_impacted_ingresses()

    assert queue.keys() == ["ns/b"]
    assert reader.fetched == ["ns/svca", "ns/svcb"]


def test_ip_mode_without_nodeport_backend_is_not_impacted():
    manifests = [
        ingress("ns", "b", target_type="ip", services=["svca", "svcb"]),
        service("ns", "svca"),
        service("ns", "svcb"),
    ]
    reader = SnapshotReader.from_manifests(manifests)
    queue = RecordingQueue()

    impacted = build_resolver(reader, queue).enqueue_impacted_ingresses()

    assert impacted == set()
    assert queue.requests == []


def test_missing_backend_service_is_skipped():
    manifests = [
        ingress("ns", "b", target_type="ip", services=["missing", "np"]),
        service("ns", "np", "NodePort"),
    ]
    reader = RecordingReader(SnapshotReader.from_manifests(manifests).snapshot)
    queue = RecordingQueue()

    build_resolver(reader, queue).enqueue_impacted_ingresses()

    assert reader.fetched == ["ns/missing", "ns/np"]
    assert queue.keys() == ["ns/b"]


def test_foreign_ingress_class_is_never_enqueued():
    manifests = [
        ingress("other", "c", ingress_class="nginx", target_type="instance"),
        ingress("other", "d", ingress_class="nginx", target_type="ip", services=["np"]),
        service("other", "np", "NodePort"),
    ]
    reader = RecordingReader(SnapshotReader.from_manifests(manifests).snapshot)
    queue = RecordingQueue()

    build_resolver(reader, queue).enqueue_impacted_ingresses()

    assert queue.requests == []
    assert reader.fetched == []


def test_ownership_filter_runs_before_annotation_lookup():
    class ExplodingStore(AnnotationStore):
        def get_ingress_annotations(self, key):
            raise AssertionError(f"annotations of {key} should not be read")

    reader = SnapshotReader.from_manifests(
        [ingress("other", "c", ingress_class="nginx")]
    )
    queue = RecordingQueue()

    build_resolver(reader, queue, store=ExplodingStore()).enqueue_impacted_ingresses()

    assert queue.requests == []


def test_annotation_failure_only_skips_that_ingress():
    manifests = [
        ingress("ns", "broken", target_type="instance"),
        ingress("ns", "ok", target_type="instance"),
    ]
    reader = SnapshotReader.from_manifests(manifests)
    store = FailingStore(ReaderAnnotationStore(reader), "ns/broken")
    queue = RecordingQueue()

    impacted = build_resolver(reader, queue, store=store).enqueue_impacted_ingresses()

    assert impacted == {NamespacedName("ns", "ok")}
    assert queue.keys() == ["ns/ok"]


def test_invalid_target_type_only_skips_that_ingress():
    manifests = [
        ingress("ns", "bad", target_type="pods"),
        ingress("ns", "good", target_type="instance"),
    ]
    reader = SnapshotReader.from_manifests(manifests)
    queue = RecordingQueue()

    build_resolver(reader, queue).enqueue_impacted_ingresses()

    assert queue.keys() == ["ns/good"]


def test_list_failure_aborts_without_dispatch():
    reader = BrokenListReader(
        SnapshotReader.from_manifests([ingress("ns", "a")]).snapshot
    )
    queue = RecordingQueue()

    impacted = build_resolver(reader, queue).enqueue_impacted_ingresses()

    assert impacted == set()
    assert queue.requests == []


def test_empty_ingress_class_claims_unclassed_and_alb():
    manifests = [
        {"kind": "Ingress", "metadata": {"namespace": "ns", "name": "plain"}, "spec": {}},
        ingress("ns", "alb", ingress_class="alb"),
        ingress("ns", "nginx", ingress_class="nginx"),
    ]
    reader = SnapshotReader.from_manifests(manifests)
    queue = RecordingQueue()

    build_resolver(reader, queue, ingress_class="").enqueue_impacted_ingresses()

    assert sorted(queue.keys()) == ["ns/alb", "ns/plain"]


def test_parallel_workers_produce_the_same_set():
    manifests = [service("ns", "np", "NodePort"), service("ns", "cip")]
    for idx in range(20):
        if idx % 3 == 0:
            manifests.append(ingress("ns", f"ing-{idx}", target_type="instance"))
        elif idx % 3 == 1:
            manifests.append(ingress("ns", f"ing-{idx}", target_type="ip", services=["cip", "np"]))
        else:
            manifests.append(ingress("ns", f"ing-{idx}", target_type="ip", services=["cip"]))
    reader = SnapshotReader.from_manifests(manifests)

    sequential_queue = RecordingQueue()
    sequential = build_resolver(reader, sequential_queue).enqueue_impacted_ingresses()
    parallel_queue = RecordingQueue()
    parallel = build_resolver(reader, parallel_queue, workers=4).enqueue_impacted_ingresses()

    assert parallel == sequential
    assert len(sequential) == 14
    assert sorted(parallel_queue.keys()) == sorted(sequential_queue.keys())
    assert len(parallel_queue.keys()) == len(set(parallel_queue.keys()))


def test_resolving_twice_yields_the_same_set():
    manifests = [
        ingress("ns", "a", target_type="instance"),
        ingress("ns", "b", target_type="ip", services=["np"]),
        service("ns", "np", "NodePort"),
    ]
    reader = SnapshotReader.from_manifests(manifests)
    resolver = build_resolver(reader, RecordingQueue())

    assert resolver.enqueue_impacted_ingresses() == resolver.enqueue_impacted_ingresses()


def test_is_impacted_propagates_annotation_errors():
    reader = SnapshotReader.from_manifests([ingress("ns", "bad", target_type="pods")])
    resolver = build_resolver(reader, RecordingQueue())

    try:
        resolver.is_impacted(reader.get_ingress("ns", "bad"))
    except InvalidAnnotation:
        pass
    else:
        raise AssertionError("invalid target type did not raise InvalidAnnotation")


def test_resolver_rejects_zero_workers():
    reader = SnapshotReader()

    try:
        build_resolver(reader, RecordingQueue(), workers=0)
    except ValueError:
        pass
    else:
        raise AssertionError("workers=0 did not raise ValueError")


def test_classifier_without_store_parses_ingress_annotations():
    default_ip = TargetModeClassifier(default_target_type=TargetMode.IP)
    unannotated = Ingress.from_manifest(ingress("ns", "a", services=("svc1",)))
    instance = Ingress.from_manifest(ingress("ns", "b", target_type="instance"))

    assert default_ip.classify(unannotated).mode is TargetMode.IP
    assert default_ip.classify(unannotated).backends[0].name == "svc1"
    assert default_ip.classify(instance).mode is TargetMode.INSTANCE
