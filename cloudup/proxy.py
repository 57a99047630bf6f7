import logging
from typing import Optional

from cloudup.models import ClusterSpec, EgressProxySpec

logger = logging.getLogger(__name__)

LOOPBACK_ADDRESS = "127.0.0.1"
METADATA_SERVICE_ADDRESS = "169.254.169.254"
NON_MASQUERADE_GATEWAY = "100.64.0.1"


def assign_proxy_exclusions(spec: ClusterSpec) -> Optional[EgressProxySpec]:
    """Add the default no_proxy exclusions when an egress proxy is configured."""
    egress_proxy = spec.egress_proxy
    if egress_proxy is None:
        logger.debug("Not setting up Proxy Excludes")
        return None

    existing = egress_proxy.proxy_excludes
    excludes: list[str] = existing.split(",") if existing else []
    original_entries = [e for e in excludes if e]

    for exclude in (
        LOOPBACK_ADDRESS,
        "localhost",
        METADATA_SERVICE_ADDRESS,
        spec.cluster_dns_domain,
        spec.master_public_name,
        spec.name,
        NON_MASQUERADE_GATEWAY,
        spec.non_masquerade_cidr,
    ):
        if not exclude:
            continue
        if _already_excluded(exclude, existing, original_entries):
            continue
        excludes.append(exclude)

    egress_proxy.proxy_excludes = ",".join(excludes)
    logger.debug("Completed setting up Proxy Excludes: %r", egress_proxy.proxy_excludes)

    return egress_proxy


def _already_excluded(candidate: str, existing: str, original_entries: list[str]) -> bool:
    # Plain substring matching in both directions, against the user's entries only.
    # Appended defaults are not compared with each other.
    return candidate in existing or any(entry in candidate for entry in original_entries)
