"""
Pytest fixtures for cloudup tests.

Fakes stand in for the cloud and for remote file reads, so nothing here
touches AWS or the network.
"""
from typing import Optional, Union

import pytest

from cloudup.errors import FileReadError
from cloudup.models import VpcInfo
from cloudup.services.cloud import CloudProvider
from cloudup.services.vfs import FileReader
from cloudup.settings import Settings

CHANNEL_BASE_URL = "https://channels.example.com/"
STABLE_URL = "https://releases.example.com/release/stable.txt"

STABLE_CHANNEL = b"""
apiVersion: kops/v1alpha2
kind: Channel
metadata:
  name: stable
spec:
  kubernetesVersions:
  - range: ">=1.6.0"
    recommendedVersion: 1.6.2
    requiredVersion: 1.6.0
  kopsVersions:
  - range: ">=1.6.0-alpha.1"
    recommendedVersion: 1.6.0
    kubernetesVersion: 1.6.2
  - range: ">=1.5.0-alpha1"
    recommendedVersion: 1.5.1
    kubernetesVersion: v1.5.4
"""


class FakeReader(FileReader):
    """FileReader serving canned responses and recording every read."""

    def __init__(self, files: Optional[dict[str, Union[bytes, Exception]]] = None):
        self.files = dict(files or {})
        self.calls: list[str] = []

    def read_file(self, location: str) -> bytes:
        self.calls.append(location)
        result = self.files.get(location)
        if result is None:
            raise FileReadError(location, "file does not exist")
        if isinstance(result, Exception):
            raise result
        return result

    def call_count(self, location: str) -> int:
        return self.calls.count(location)


class FakeCloud(CloudProvider):
    """CloudProvider returning a fixed VPC lookup result."""

    def __init__(self, vpc_info: Optional[VpcInfo] = None, error: Optional[Exception] = None):
        self.vpc_info = vpc_info
        self.error = error
        self.calls: list[str] = []

    def find_vpc_info(self, vpc_id: str) -> Optional[VpcInfo]:
        self.calls.append(vpc_id)
        if self.error is not None:
            raise self.error
        return self.vpc_info


@pytest.fixture
def settings() -> Settings:
    return Settings(
        tool_version="1.6.0",
        aws_region="eu-west-1",
        channel_base_url=CHANNEL_BASE_URL,
        stable_version_url=STABLE_URL,
    )


@pytest.fixture
def reader() -> FakeReader:
    """Reader with a stable channel and a latest-version file."""
    return FakeReader(
        {
            CHANNEL_BASE_URL + "stable": STABLE_CHANNEL,
            STABLE_URL: b"v1.7.0\n",
        }
    )


@pytest.fixture
def cloud() -> FakeCloud:
    return FakeCloud(VpcInfo(id="vpc-1", cidr="10.10.0.0/16"))
