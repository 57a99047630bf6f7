import logging
from abc import ABC, abstractmethod
from typing import Optional

import boto3
from botocore.exceptions import ClientError

from cloudup.errors import UnsupportedCloudError
from cloudup.models import ClusterSpec, VpcInfo
from cloudup.settings import Settings

logger = logging.getLogger(__name__)


class CloudProvider(ABC):

    @abstractmethod
    def find_vpc_info(self, vpc_id: str) -> Optional[VpcInfo]:
        """Look up an existing VPC. Returns None if it does not exist."""
        pass


class AwsCloud(CloudProvider):
    """AWS implementation backed by the EC2 API."""

    def __init__(self, region: str, client=None):
        self.region = region
        self._client = client

    @property
    def ec2(self):
        if self._client is None:
            self._client = boto3.client("ec2", region_name=self.region)
        return self._client

    def find_vpc_info(self, vpc_id: str) -> Optional[VpcInfo]:
        logger.debug("Calling DescribeVpcs for VPC %s", vpc_id)
        try:
            response = self.ec2.describe_vpcs(VpcIds=[vpc_id])
        except ClientError as e:
            if e.response["Error"]["Code"] == "InvalidVpcID.NotFound":
                return None
            raise

        vpcs = response.get("Vpcs", [])
        if not vpcs:
            return None
        if len(vpcs) != 1:
            raise ValueError(f"found multiple VPCs for {vpc_id!r}")

        vpc = vpcs[0]
        return VpcInfo(id=vpc.get("VpcId", vpc_id), cidr=vpc.get("CidrBlock"))


def region_from_zone(zone: str) -> str:
    """us-east-1a -> us-east-1"""
    return zone[:-1] if zone and zone[-1].isalpha() else zone


def build_cloud(spec: ClusterSpec, settings: Settings) -> CloudProvider:
    """Build the cloud collaborator for the cluster's provider."""
    if spec.cloud_provider.lower() == "aws":
        zones = [s.zone for s in spec.subnets if s.zone]
        region = region_from_zone(zones[0]) if zones else settings.aws_region
        return AwsCloud(region=region)

    raise UnsupportedCloudError(spec.cloud_provider)
