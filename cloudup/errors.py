"""Errors raised while assigning defaults to a cluster spec."""

from cloudup.models import AssignmentErrorResponse


class AssignmentError(Exception):
    """Base class for failures that abort an assignment pass."""

    error = "assignment_error"

    def to_response(self) -> AssignmentErrorResponse:
        """Convert to API response format."""
        return AssignmentErrorResponse(error=self.error, message=str(self))


class NetworkLookupError(AssignmentError):
    """The shared network could not be resolved through the cloud."""

    error = "network_lookup_failed"

    def __init__(self, network_id: str, reason: str):
        self.network_id = network_id
        super().__init__(f"unable to find VPC ID {network_id!r}: {reason}")


class NetworkCIDRMissingError(AssignmentError):
    """The shared network was found but reports no CIDR."""

    error = "network_cidr_missing"

    def __init__(self, network_id: str):
        self.network_id = network_id
        super().__init__(
            f"Unable to infer NetworkCIDR from VPC ID {network_id!r}, "
            "please specify the network CIDR explicitly"
        )


class ChannelLoadError(AssignmentError):
    """The release channel could not be read or parsed."""

    error = "channel_load_failed"

    def __init__(self, location: str, reason: str):
        self.location = location
        super().__init__(f"error loading channel {location!r}: {reason}")


class LatestVersionFetchError(AssignmentError):
    """The latest stable Kubernetes version could not be fetched."""

    error = "latest_version_fetch_failed"

    def __init__(self, url: str, reason: str):
        self.url = url
        super().__init__(
            f"KubernetesVersion not specified, and unable to download latest version from {url!r}: {reason}"
        )


class SubnetAllocationError(AssignmentError):
    error = "subnet_allocation_failed"


class UnsupportedCloudError(AssignmentError):
    error = "unsupported_cloud"

    def __init__(self, cloud_provider: str):
        self.cloud_provider = cloud_provider
        super().__init__(f"unsupported cloud provider {cloud_provider!r}")


class FileReadError(Exception):
    """A location could not be read by the file reader."""

    def __init__(self, location: str, reason: str):
        self.location = location
        self.reason = reason
        super().__init__(f"error reading {location!r}: {reason}")
