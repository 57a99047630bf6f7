"""Reading files from local paths, HTTP(S) URLs and S3."""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import boto3
import httpx
from botocore.exceptions import BotoCoreError, ClientError

from cloudup.errors import FileReadError
from cloudup.settings import Settings

logger = logging.getLogger(__name__)


class FileReader(ABC):

    @abstractmethod
    def read_file(self, location: str) -> bytes:
        """Read the full contents of a location, raising FileReadError."""
        pass

    def close(self) -> None:
        """Release any transport held by the reader."""
        pass


class VfsContext(FileReader):
    """FileReader that dispatches on the location's scheme."""

    def __init__(
        self,
        timeout: float = 30.0,
        http_client: Optional[httpx.Client] = None,
        s3_client=None,
    ):
        self.timeout = timeout
        self._http_client = http_client
        self._s3_client = s3_client

    @property
    def http_client(self) -> httpx.Client:
        if self._http_client is None:
            self._http_client = httpx.Client(timeout=self.timeout, follow_redirects=True)
        return self._http_client

    @property
    def s3_client(self):
        if self._s3_client is None:
            self._s3_client = boto3.client("s3")
        return self._s3_client

    def read_file(self, location: str) -> bytes:
        parsed = urlparse(location)
        scheme = parsed.scheme.lower()

        if scheme in ("http", "https"):
            return self._read_http(location)
        if scheme == "s3":
            return self._read_s3(location, parsed.netloc, parsed.path.lstrip("/"))
        if scheme in ("", "file"):
            return self._read_local(location, parsed.path if scheme == "file" else location)

        raise FileReadError(location, f"unsupported scheme {scheme!r}")

    def _read_http(self, url: str) -> bytes:
        logger.debug("Performing HTTP request: GET %s", url)
        try:
            response = self.http_client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FileReadError(url, f"unexpected response code {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise FileReadError(url, str(e)) from e
        return response.content

    def _read_s3(self, location: str, bucket: str, key: str) -> bytes:
        if not bucket or not key:
            raise FileReadError(location, "S3 location must include a bucket and a key")

        logger.debug("Reading s3://%s/%s", bucket, key)
        try:
            response = self.s3_client.get_object(Bucket=bucket, Key=key)
            return response["Body"].read()
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            raise FileReadError(location, f"{code or 'error'}: {e}") from e
        except BotoCoreError as e:
            raise FileReadError(location, str(e)) from e

    def _read_local(self, location: str, path: str) -> bytes:
        try:
            return Path(path).read_bytes()
        except OSError as e:
            raise FileReadError(location, e.strerror or str(e)) from e

    def close(self) -> None:
        if self._http_client is not None:
            self._http_client.close()
            self._http_client = None


def build_file_reader(settings: Settings) -> FileReader:
    return VfsContext(timeout=settings.http_timeout)
