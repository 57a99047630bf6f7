import pytest

from conftest import STABLE_URL, FakeCloud, FakeReader
from cloudup.assignments import (
    DEFAULT_NETWORK_CIDR,
    DEFAULT_NON_MASQUERADE_CIDR,
    perform_assignments,
)
from cloudup.errors import (
    ChannelLoadError,
    LatestVersionFetchError,
    NetworkCIDRMissingError,
    NetworkLookupError,
    SubnetAllocationError,
    UnsupportedCloudError,
)
from cloudup.models import (
    ClusterSpec,
    ClusterSubnetSpec,
    EgressProxySpec,
    SubnetType,
    Topology,
    TopologySpec,
    VpcInfo,
)


def make_spec(**kwargs) -> ClusterSpec:
    defaults = {
        "name": "k8s.example.com",
        "channel": "stable",
        "subnets": [
            {"name": "us-east-1a", "zone": "us-east-1a", "type": "private"},
            {"name": "utility-us-east-1a", "zone": "us-east-1a", "type": "utility"},
        ],
    }
    defaults.update(kwargs)
    return ClusterSpec.model_validate(defaults)


def test_fills_all_defaults(cloud, reader, settings):
    spec = make_spec(egress_proxy={"proxy_excludes": ""})

    perform_assignments(spec, cloud=cloud, reader=reader, settings=settings)

    assert spec.topology == TopologySpec(masters=Topology.PUBLIC, nodes=Topology.PUBLIC)
    assert spec.network_cidr == DEFAULT_NETWORK_CIDR
    assert spec.non_masquerade_cidr == DEFAULT_NON_MASQUERADE_CIDR
    assert spec.master_public_name == "api.k8s.example.com"
    assert [s.cidr for s in spec.subnets] == ["172.20.32.0/19", "172.20.0.0/22"]
    assert spec.kubernetes_version == "1.6.2"
    assert spec.egress_proxy.proxy_excludes == (
        "127.0.0.1,localhost,169.254.169.254,api.k8s.example.com,"
        "k8s.example.com,100.64.0.1,100.64.0.0/10"
    )
    # Not a shared VPC, so the cloud is never consulted
    assert cloud.calls == []


def test_second_pass_changes_nothing(cloud, reader, settings):
    spec = make_spec(
        network_id="vpc-1",
        cluster_dns_domain="cluster.local",
        egress_proxy={"proxy_excludes": "internal.example.com"},
    )

    perform_assignments(spec, cloud=cloud, reader=reader, settings=settings)
    first = spec.model_dump()

    perform_assignments(spec, cloud=cloud, reader=reader, settings=settings)

    assert spec.model_dump() == first
    # The shared VPC CIDR was only looked up while it was unset
    assert cloud.calls == ["vpc-1"]


def test_does_not_overwrite_populated_fields(cloud, reader, settings):
    spec = make_spec(
        network_cidr="10.1.0.0/16",
        non_masquerade_cidr="100.96.0.0/11",
        topology={"masters": "private", "nodes": "private"},
        master_public_name="api.internal.example.com",
        kubernetes_version="v1.2.3",
        subnets=[{"name": "a", "zone": "us-east-1a", "type": "private", "cidr": "10.1.64.0/19"}],
    )

    perform_assignments(spec, cloud=cloud, reader=reader, settings=settings)

    assert spec.network_cidr == "10.1.0.0/16"
    assert spec.non_masquerade_cidr == "100.96.0.0/11"
    assert spec.topology.masters == Topology.PRIVATE
    assert spec.topology.nodes == Topology.PRIVATE
    assert spec.master_public_name == "api.internal.example.com"
    assert spec.kubernetes_version == "v1.2.3"
    assert spec.subnets[0].cidr == "10.1.64.0/19"
    assert reader.calls == []


def test_kubernetes_version_survives_failing_collaborators(settings):
    reader = FakeReader({STABLE_URL: LatestVersionFetchError(STABLE_URL, "boom")})
    spec = make_spec(kubernetes_version="v1.2.3", channel="missing")

    perform_assignments(spec, reader=reader, settings=settings)

    assert spec.kubernetes_version == "v1.2.3"
    assert reader.calls == []


def test_empty_strings_are_treated_as_unset(cloud, reader, settings):
    spec = make_spec(network_cidr="", non_masquerade_cidr="", master_public_name="")

    perform_assignments(spec, cloud=cloud, reader=reader, settings=settings)

    assert spec.network_cidr == DEFAULT_NETWORK_CIDR
    assert spec.non_masquerade_cidr == DEFAULT_NON_MASQUERADE_CIDR
    assert spec.master_public_name == "api.k8s.example.com"


def test_master_public_name_needs_cluster_name(cloud, reader, settings):
    spec = make_spec(name=None)

    perform_assignments(spec, cloud=cloud, reader=reader, settings=settings)

    assert spec.master_public_name is None


def test_shared_vpc_uses_cidr_from_cloud(cloud, reader, settings):
    spec = make_spec(network_id="vpc-1")

    perform_assignments(spec, cloud=cloud, reader=reader, settings=settings)

    assert cloud.calls == ["vpc-1"]
    assert spec.network_cidr == "10.10.0.0/16"
    assert spec.subnets[0].cidr == "10.10.32.0/19"


def test_shared_vpc_with_cidr_skips_lookup(cloud, reader, settings):
    spec = make_spec(network_id="vpc-1", network_cidr="10.20.0.0/16")

    perform_assignments(spec, cloud=cloud, reader=reader, settings=settings)

    assert cloud.calls == []
    assert spec.network_cidr == "10.20.0.0/16"


def test_shared_vpc_without_cidr_fails(reader, settings):
    cloud = FakeCloud(VpcInfo(cidr=""))
    spec = make_spec(network_id="vpc-1", network_cidr="")

    with pytest.raises(NetworkCIDRMissingError):
        perform_assignments(spec, cloud=cloud, reader=reader, settings=settings)

    assert spec.network_cidr is None
    assert spec.topology is None


def test_shared_vpc_not_found(reader, settings):
    spec = make_spec(network_id="vpc-missing")

    with pytest.raises(NetworkLookupError, match="vpc-missing"):
        perform_assignments(spec, cloud=FakeCloud(None), reader=reader, settings=settings)


def test_shared_vpc_lookup_error_is_wrapped(reader, settings):
    cloud = FakeCloud(error=RuntimeError("throttled"))
    spec = make_spec(network_id="vpc-1")

    with pytest.raises(NetworkLookupError, match="throttled") as exc_info:
        perform_assignments(spec, cloud=cloud, reader=reader, settings=settings)

    assert isinstance(exc_info.value.__cause__, RuntimeError)


def test_shared_vpc_on_unsupported_cloud(reader, settings):
    spec = make_spec(network_id="vpc-1", cloud_provider="openstack")

    with pytest.raises(UnsupportedCloudError):
        perform_assignments(spec, reader=reader, settings=settings)


def test_subnet_error_stops_before_version(reader, settings):
    subnets = [{"name": f"s{i}", "zone": "us-east-1a", "type": "private"} for i in range(8)]
    spec = make_spec(subnets=subnets, egress_proxy={"proxy_excludes": ""})

    with pytest.raises(SubnetAllocationError):
        perform_assignments(spec, reader=reader, settings=settings)

    # Earlier steps stay applied
    assert spec.network_cidr == DEFAULT_NETWORK_CIDR
    assert spec.egress_proxy.proxy_excludes == ""
    assert spec.kubernetes_version is None
    assert reader.calls == []


def test_channel_error_propagates(settings):
    spec = make_spec(channel="missing")

    with pytest.raises(ChannelLoadError):
        perform_assignments(spec, reader=FakeReader(), settings=settings)

    assert spec.network_cidr == DEFAULT_NETWORK_CIDR
    assert spec.kubernetes_version is None


def test_latest_version_fallback_without_channel(reader, settings):
    spec = make_spec(channel=None)

    perform_assignments(spec, reader=reader, settings=settings)

    assert spec.kubernetes_version == "v1.7.0"
    assert reader.calls == [STABLE_URL]


def test_no_proxy_stays_none(reader, settings):
    spec = make_spec()

    perform_assignments(spec, reader=reader, settings=settings)

    assert spec.egress_proxy is None


def test_proxy_exclusions_use_assigned_values(reader, settings):
    spec = make_spec(
        name="prod",
        egress_proxy=EgressProxySpec(proxy_excludes="10.0.0.0/8"),
        subnets=[ClusterSubnetSpec(name="a", zone="us-east-1a", type=SubnetType.PUBLIC)],
    )

    perform_assignments(spec, reader=reader, settings=settings)

    excludes = spec.egress_proxy.proxy_excludes.split(",")
    assert excludes[0] == "10.0.0.0/8"
    assert "api.prod" in excludes
    assert excludes[-1] == DEFAULT_NON_MASQUERADE_CIDR
