import ipaddress
import logging

from cloudup.errors import SubnetAllocationError
from cloudup.models import ClusterSpec, SubnetType

logger = logging.getLogger(__name__)


def split_into_8(network: ipaddress.IPv4Network | ipaddress.IPv6Network) -> list:
    """Split a network into 8 equal blocks, e.g. a /16 into /19s."""
    if network.prefixlen + 3 > network.max_prefixlen:
        raise SubnetAllocationError(f"network {network} is too small to split into 8 subnets")
    return list(network.subnets(prefixlen_diff=3))


def assign_cidrs_to_subnets(spec: ClusterSpec) -> None:
    """Assign CIDRs to the subnets that do not have one yet.

    The network is split into 8 blocks. The first block is split again into
    8 smaller blocks used for utility subnets; the remaining 7 go to public
    and private subnets. Blocks overlapping a subnet's existing CIDR are
    never handed out.
    """
    pending = [s for s in spec.subnets if s.cidr is None]
    if not pending:
        return

    if spec.network_cidr is None:
        raise SubnetAllocationError("network CIDR must be set to assign subnet CIDRs")

    try:
        network = ipaddress.ip_network(spec.network_cidr, strict=False)
    except ValueError as e:
        raise SubnetAllocationError(f"invalid network CIDR {spec.network_cidr!r}: {e}") from e

    big_cidrs = split_into_8(network)
    little_cidrs = split_into_8(big_cidrs[0])
    big_cidrs = big_cidrs[1:]

    reserved = []
    for subnet in spec.subnets:
        if subnet.cidr is None:
            continue
        existing = ipaddress.ip_network(subnet.cidr, strict=False)
        if existing.version != network.version:
            continue
        reserved.append(existing)

    def available(blocks: list) -> list:
        return [b for b in blocks if not any(b.overlaps(r) for r in reserved)]

    big_cidrs = available(big_cidrs)
    little_cidrs = available(little_cidrs)

    for subnet in pending:
        if subnet.type == SubnetType.UTILITY:
            if not little_cidrs:
                raise SubnetAllocationError(
                    f"insufficient (little) CIDRs remaining for automatic CIDR allocation to subnet {subnet.name!r}"
                )
            subnet.cidr = str(little_cidrs.pop(0))
        else:
            if not big_cidrs:
                raise SubnetAllocationError(
                    f"insufficient (big) CIDRs remaining for automatic CIDR allocation to subnet {subnet.name!r}"
                )
            subnet.cidr = str(big_cidrs.pop(0))

        logger.info("Assigned CIDR %s to subnet %s", subnet.cidr, subnet.name)
