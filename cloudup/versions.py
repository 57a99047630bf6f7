import logging

from cloudup.channels import load_channel, recommended_kubernetes_version
from cloudup.errors import FileReadError, LatestVersionFetchError
from cloudup.models import ClusterSpec
from cloudup.services.vfs import FileReader
from cloudup.settings import Settings

logger = logging.getLogger(__name__)


def ensure_kubernetes_version(spec: ClusterSpec, reader: FileReader, settings: Settings) -> None:
    """Populate kubernetes_version if it is not already set.

    The channel's recommendation is preferred; the latest stable release is
    used when there is no channel or the channel has no recommendation.
    """
    if spec.kubernetes_version is not None:
        return

    if spec.channel is not None:
        channel = load_channel(spec.channel, reader, settings)
        kubernetes_version = recommended_kubernetes_version(channel, settings.tool_version)
        if kubernetes_version is not None:
            spec.kubernetes_version = kubernetes_version
            logger.info(
                "Using KubernetesVersion %r from channel %r",
                spec.kubernetes_version,
                spec.channel,
            )
        else:
            logger.warning(
                "Cannot determine recommended kubernetes version from channel %r",
                spec.channel,
            )
    else:
        logger.warning("Channel is not set; cannot determine KubernetesVersion from channel")

    if spec.kubernetes_version is None:
        latest_version = find_latest_kubernetes_version(reader, settings)
        logger.info("Using kubernetes latest stable version: %s", latest_version)
        spec.kubernetes_version = latest_version


def find_latest_kubernetes_version(reader: FileReader, settings: Settings) -> str:
    """Return the latest stable Kubernetes release.

    Legacy source: prefer the version recommended by a channel.
    """
    stable_url = settings.stable_version_url
    logger.warning("Loading latest kubernetes version from %r", stable_url)

    try:
        data = reader.read_file(stable_url)
    except FileReadError as e:
        raise LatestVersionFetchError(stable_url, e.reason) from e

    latest_version = data.decode("utf-8", errors="replace").strip()
    if not latest_version:
        raise LatestVersionFetchError(stable_url, "empty response")
    return latest_version
