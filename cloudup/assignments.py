import logging
from typing import Optional

from cloudup.errors import NetworkCIDRMissingError, NetworkLookupError
from cloudup.models import ClusterSpec, Topology, TopologySpec
from cloudup.proxy import assign_proxy_exclusions
from cloudup.services.cloud import CloudProvider, build_cloud
from cloudup.services.vfs import FileReader, build_file_reader
from cloudup.settings import Settings, get_settings
from cloudup.subnets import assign_cidrs_to_subnets
from cloudup.versions import ensure_kubernetes_version

logger = logging.getLogger(__name__)

DEFAULT_NETWORK_CIDR = "172.20.0.0/16"
DEFAULT_NON_MASQUERADE_CIDR = "100.64.0.0/10"
MASTER_PUBLIC_NAME_PREFIX = "api."


def perform_assignments(
    spec: ClusterSpec,
    cloud: Optional[CloudProvider] = None,
    reader: Optional[FileReader] = None,
    settings: Optional[Settings] = None,
) -> None:
    """Populate values that are required and must stay stable once chosen.

    Called on create as well as on every update, so only unset fields are
    ever assigned. The spec is mutated in place; on error, assignments made
    by earlier steps are kept.
    """
    settings = settings or get_settings()

    if spec.shared_vpc and spec.network_cidr is None:
        spec.network_cidr = _lookup_shared_network_cidr(spec, cloud or build_cloud(spec, settings))

    if spec.topology is None:
        spec.topology = TopologySpec(masters=Topology.PUBLIC, nodes=Topology.PUBLIC)

    if spec.network_cidr is None and not spec.shared_vpc:
        spec.network_cidr = DEFAULT_NETWORK_CIDR

    if spec.non_masquerade_cidr is None:
        spec.non_masquerade_cidr = DEFAULT_NON_MASQUERADE_CIDR

    if spec.master_public_name is None and spec.name is not None:
        spec.master_public_name = MASTER_PUBLIC_NAME_PREFIX + spec.name

    assign_cidrs_to_subnets(spec)

    spec.egress_proxy = assign_proxy_exclusions(spec)

    if reader is not None:
        ensure_kubernetes_version(spec, reader, settings)
        return

    reader = build_file_reader(settings)
    try:
        ensure_kubernetes_version(spec, reader, settings)
    finally:
        reader.close()


def _lookup_shared_network_cidr(spec: ClusterSpec, cloud: CloudProvider) -> str:
    network_id = spec.network_id
    logger.debug("Looking up CIDR of shared VPC %s", network_id)

    try:
        vpc_info = cloud.find_vpc_info(network_id)
    except Exception as e:
        raise NetworkLookupError(network_id, str(e)) from e

    if vpc_info is None:
        raise NetworkLookupError(network_id, "VPC not found")
    if vpc_info.cidr is None:
        raise NetworkCIDRMissingError(network_id)

    logger.info("Using CIDR %s from shared VPC %s", vpc_info.cidr, network_id)
    return vpc_info.cidr
