"""Release channels: where recommended Kubernetes versions come from."""

import logging
import re
from typing import NamedTuple, Optional
from urllib.parse import urljoin

import yaml
from pydantic import ValidationError

from cloudup.errors import ChannelLoadError, FileReadError
from cloudup.models import Channel
from cloudup.services.vfs import FileReader
from cloudup.settings import Settings

logger = logging.getLogger(__name__)

_VERSION_RE = re.compile(
    r"^v?(?P<major>\d+)(?:\.(?P<minor>\d+))?(?:\.(?P<patch>\d+))?"
    r"(?:-(?P<pre>[0-9A-Za-z.-]+))?(?:\+[0-9A-Za-z.-]+)?$"
)
_COMPARATOR_RE = re.compile(r"^(>=|<=|>|<|=)?(.+)$")


class Version(NamedTuple):
    major: int
    minor: int
    patch: int
    pre: str = ""

    def sort_key(self) -> tuple:
        # A release sorts after any of its pre-releases. Numeric pre-release
        # identifiers compare as numbers and sort before alphanumeric ones.
        if not self.pre:
            return (self.major, self.minor, self.patch, 1, ())
        identifiers = tuple(
            (0, int(part), "") if part.isdigit() else (1, 0, part) for part in self.pre.split(".")
        )
        return (self.major, self.minor, self.patch, 0, identifiers)

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        return f"{base}-{self.pre}" if self.pre else base


def parse_version(value: str) -> Version:
    """Parse a version tolerantly: "v1.6", "1.6.0-beta.1" and "1.6.2" are all accepted."""
    match = _VERSION_RE.match(value.strip())
    if not match:
        raise ValueError(f"unable to parse version {value!r}")
    return Version(
        major=int(match.group("major")),
        minor=int(match.group("minor") or 0),
        patch=int(match.group("patch") or 0),
        pre=match.group("pre") or "",
    )


def version_in_range(version: Version, version_range: str) -> bool:
    """Check a version against a space-separated list of comparators.

    An empty range matches everything.
    """
    key = version.sort_key()
    for comparator in version_range.split():
        match = _COMPARATOR_RE.match(comparator)
        op = match.group(1) or "="
        bound = parse_version(match.group(2)).sort_key()

        if op == ">=" and not key >= bound:
            return False
        if op == ">" and not key > bound:
            return False
        if op == "<=" and not key <= bound:
            return False
        if op == "<" and not key < bound:
            return False
        if op == "=" and key != bound:
            return False
    return True


def resolve_channel_location(name: str, base_url: str) -> str:
    """Bare channel names are looked up relative to the channel base URL."""
    if "/" in name or "://" in name:
        return name
    return urljoin(base_url if base_url.endswith("/") else base_url + "/", name)


def load_channel(name: str, reader: FileReader, settings: Settings) -> Channel:
    """Load and parse a channel descriptor."""
    location = resolve_channel_location(name, settings.channel_base_url)
    logger.info("Loading channel from %s", location)

    try:
        data = reader.read_file(location)
    except FileReadError as e:
        raise ChannelLoadError(location, e.reason) from e

    try:
        document = yaml.safe_load(data)
    except yaml.YAMLError as e:
        raise ChannelLoadError(location, f"error parsing channel: {e}") from e

    if not isinstance(document, dict):
        raise ChannelLoadError(location, "channel is not a YAML mapping")

    try:
        channel = Channel.model_validate(document)
    except ValidationError as e:
        raise ChannelLoadError(location, f"invalid channel: {e}") from e

    if not channel.metadata.name:
        channel.metadata.name = name
    return channel


def recommended_kubernetes_version(channel: Channel, tool_version: str) -> Optional[str]:
    """Return the Kubernetes version the channel recommends for this tool version."""
    try:
        current = parse_version(tool_version)
    except ValueError:
        logger.warning("Unable to parse tool version %r", tool_version)
        return None

    for spec in channel.spec.kops_versions:
        try:
            if not version_in_range(current, spec.range):
                continue
        except ValueError:
            logger.warning("Unable to parse range %r in channel %r", spec.range, channel.metadata.name)
            continue

        # Only the first matching entry counts, even when it names no version
        if not spec.kubernetes_version:
            return None

        try:
            return str(parse_version(spec.kubernetes_version))
        except ValueError:
            logger.warning(
                "Unable to parse kubernetes version %r in channel %r",
                spec.kubernetes_version,
                channel.metadata.name,
            )
            return None

    return None
