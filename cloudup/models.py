import ipaddress
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def _empty_to_none(v: Optional[str]) -> Optional[str]:
    if isinstance(v, str) and v == "":
        return None
    return v


class Topology(str, Enum):
    """Placement of masters or nodes."""

    PUBLIC = "public"
    PRIVATE = "private"


class SubnetType(str, Enum):
    """Role of a cluster subnet."""

    PUBLIC = "public"
    PRIVATE = "private"
    UTILITY = "utility"  # Load balancers and NAT for private topologies


class TopologySpec(BaseModel):
    """Where masters and nodes are placed."""

    masters: Topology = Field(default=Topology.PUBLIC)
    nodes: Topology = Field(default=Topology.PUBLIC)


class HttpProxySpec(BaseModel):
    host: str
    port: int = Field(default=3128, ge=1, le=65535)


class EgressProxySpec(BaseModel):
    """Outbound HTTP(S) proxy configuration."""

    http_proxy: Optional[HttpProxySpec] = None
    proxy_excludes: str = Field(
        default="",
        description="Comma-separated hosts/CIDRs that bypass the proxy",
    )


class ClusterSubnetSpec(BaseModel):
    """A subnet of the cluster network."""

    model_config = ConfigDict(validate_assignment=True)

    name: str
    zone: str
    type: SubnetType = Field(default=SubnetType.PUBLIC)
    cidr: Optional[str] = Field(default=None, description="Assigned automatically when unset")
    provider_id: Optional[str] = None

    @field_validator("cidr", "provider_id", mode="before")
    @classmethod
    def normalize_empty(cls, v: Optional[str]) -> Optional[str]:
        return _empty_to_none(v)

    @field_validator("cidr")
    @classmethod
    def validate_cidr(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        try:
            ipaddress.ip_network(v, strict=False)
        except ValueError as e:
            raise ValueError(f"Invalid CIDR block: {e}") from e
        return v


class ClusterSpec(BaseModel):
    """Cluster specification, partially filled by the user.

    Unset fields are None. Empty strings are treated as unset so that a
    field is either absent or holds a real value.
    """

    model_config = ConfigDict(validate_assignment=True)

    name: Optional[str] = Field(default=None, description="Cluster name")
    cloud_provider: str = Field(default="aws")

    network_id: Optional[str] = Field(
        default=None,
        description="ID of an existing (shared) VPC",
    )
    network_cidr: Optional[str] = None
    non_masquerade_cidr: Optional[str] = None

    topology: Optional[TopologySpec] = None

    master_public_name: Optional[str] = None
    cluster_dns_domain: Optional[str] = None

    kubernetes_version: Optional[str] = None
    channel: Optional[str] = Field(
        default=None,
        description="Release channel name or location",
    )

    egress_proxy: Optional[EgressProxySpec] = None

    subnets: list[ClusterSubnetSpec] = Field(default_factory=list)

    @field_validator(
        "name",
        "network_id",
        "network_cidr",
        "non_masquerade_cidr",
        "master_public_name",
        "cluster_dns_domain",
        "kubernetes_version",
        "channel",
        mode="before",
    )
    @classmethod
    def normalize_empty(cls, v: Optional[str]) -> Optional[str]:
        return _empty_to_none(v)

    @property
    def shared_vpc(self) -> bool:
        """Whether the cluster runs in a VPC it does not manage."""
        return self.network_id is not None


class VpcInfo(BaseModel):
    """Details of an existing VPC, as reported by the cloud."""

    id: Optional[str] = None
    cidr: Optional[str] = None

    @field_validator("cidr", mode="before")
    @classmethod
    def normalize_empty(cls, v: Optional[str]) -> Optional[str]:
        return _empty_to_none(v)


def _require_quoted_version(v):
    # YAML reads an unquoted 1.10 as the float 1.1, so numbers are refused
    # rather than turned back into a different version string.
    if isinstance(v, (int, float)):
        raise ValueError(f"version {v!r} must be a quoted string")
    return v


class _ChannelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class KopsVersionSpec(_ChannelModel):
    range: str = ""
    recommended_version: Optional[str] = None
    required_version: Optional[str] = None
    kubernetes_version: Optional[str] = None

    @field_validator("range", "recommended_version", "required_version", "kubernetes_version", mode="before")
    @classmethod
    def require_quoted_version(cls, v):
        return _require_quoted_version(v)


class KubernetesVersionSpec(_ChannelModel):
    range: str = ""
    recommended_version: Optional[str] = None
    required_version: Optional[str] = None

    @field_validator("range", "recommended_version", "required_version", mode="before")
    @classmethod
    def require_quoted_version(cls, v):
        return _require_quoted_version(v)


class ChannelMetadata(_ChannelModel):
    name: str = ""


class ChannelSpec(_ChannelModel):
    kops_versions: list[KopsVersionSpec] = Field(default_factory=list)
    kubernetes_versions: list[KubernetesVersionSpec] = Field(default_factory=list)


class Channel(_ChannelModel):
    """Release channel descriptor."""

    metadata: ChannelMetadata = Field(default_factory=ChannelMetadata)
    spec: ChannelSpec = Field(default_factory=ChannelSpec)


class AssignmentErrorResponse(BaseModel):
    """Structured assignment error response."""

    error: str
    message: str
