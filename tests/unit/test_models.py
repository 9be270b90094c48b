import pytest

from node_impact.backends import extract_target_group_backends
from node_impact.classes import is_valid_ingress
from node_impact.eligibility import is_node_suitable_as_traffic_proxy
from node_impact.exceptions import InvalidAnnotation
from node_impact.models import (
    Ingress,
    NamespacedName,
    Node,
    Service,
    ServiceRef,
    ServiceType,
    TargetMode,
)


def test_namespaced_name_round_trips_key():
    name = NamespacedName.parse("ns/a")

    assert name == NamespacedName("ns", "a")
    assert str(name) == "ns/a"


@pytest.mark.parametrize("key", ["ns", "/a", "ns/", "a/b/c"])
def test_namespaced_name_rejects_malformed_keys(key):
    with pytest.raises(ValueError):
        NamespacedName.parse(key)


def test_target_mode_parse_is_case_insensitive():
    assert TargetMode.parse("IP") is TargetMode.IP
    assert TargetMode.parse(" instance ") is TargetMode.INSTANCE
    with pytest.raises(InvalidAnnotation):
        TargetMode.parse("pod")


def test_service_defaults_to_cluster_ip():
    svc = Service.from_manifest({"metadata": {"namespace": "ns", "name": "s"}})

    assert svc.type is ServiceType.CLUSTER_IP
    assert svc.namespaced_name == NamespacedName("ns", "s")


def test_ingress_parses_v1beta1_and_v1_backends():
    ing = Ingress.from_manifest(
        {
            "metadata": {"namespace": "ns", "name": "web"},
            "spec": {
                "ingressClassName": "alb",
                "defaultBackend": {"service": {"name": "fallback", "port": {"name": "http"}}},
                "rules": [
                    {
                        "http": {
                            "paths": [
                                {"backend": {"serviceName": "legacy", "servicePort": 8080}},
                                {"backend": {"service": {"name": "api", "port": {"number": 80}}}},
                                {"backend": {"resource": {"kind": "Bucket", "name": "static"}}},
                            ]
                        }
                    },
                    {"host": "no-http.example.com"},
                ],
            },
        }
    )

    assert ing.key == "ns/web"
    assert ing.class_name == "alb"
    assert ing.default_backend == ServiceRef("fallback", "http")
    assert list(ing.rule_backends) == [ServiceRef("legacy", 8080), ServiceRef("api", 80)]


def test_manifest_without_name_is_rejected():
    with pytest.raises(ValueError):
        Node.from_manifest({"metadata": {}})


def test_extract_backends_orders_dedupes_and_skips_actions():
    ing = Ingress(
        namespace="ns",
        name="web",
        default_backend=ServiceRef("api", 80),
        rule_backends=(
            ServiceRef("redirect", "use-annotation"),
            ServiceRef("web", 80),
            ServiceRef("api", 80),
            ServiceRef("api", 443),
        ),
    )

    assert extract_target_group_backends(ing) == [
        ServiceRef("api", 80),
        ServiceRef("web", 80),
        ServiceRef("api", 443),
    ]


def test_ingress_class_annotation_wins_over_spec():
    ing = Ingress(
        namespace="ns",
        name="web",
        annotations={"kubernetes.io/ingress.class": "nginx"},
        class_name="alb",
    )

    assert not is_valid_ingress("alb", ing)
    assert is_valid_ingress("nginx", ing)


def test_spec_ingress_class_is_used_without_annotation():
    ing = Ingress(namespace="ns", name="web", class_name="alb")

    assert is_valid_ingress("alb", ing)
    assert is_valid_ingress("", ing)
    assert not is_valid_ingress("internal", ing)


def ready_node(status="True", **labels):
    return Node.from_manifest(
        {
            "metadata": {"name": "n1", "labels": labels},
            "status": {"conditions": [{"type": "Ready", "status": status}]},
        }
    )


def test_ready_node_is_suitable():
    assert is_node_suitable_as_traffic_proxy(ready_node())


@pytest.mark.parametrize("status", ["False", "Unknown"])
def test_not_ready_node_is_not_suitable(status):
    assert not is_node_suitable_as_traffic_proxy(ready_node(status))


def test_node_without_conditions_is_not_suitable():
    assert not is_node_suitable_as_traffic_proxy(Node(name="n1"))


@pytest.mark.parametrize(
    "label",
    [
        "node-role.kubernetes.io/master",
        "node.kubernetes.io/exclude-from-external-load-balancers",
        "alpha.service-controller.kubernetes.io/exclude-balancer",
    ],
)
def test_excluding_labels_make_node_unsuitable(label):
    assert not is_node_suitable_as_traffic_proxy(ready_node(**{label: "true"}))
