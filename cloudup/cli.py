"""
Fill in the defaults of a cluster spec file and print the result.

Usage:
    cloudup-assign cluster.yaml
    cloudup-assign cluster.json --log-level DEBUG
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from cloudup.assignments import perform_assignments
from cloudup.errors import AssignmentError
from cloudup.models import ClusterSpec
from cloudup.settings import get_settings

logger = logging.getLogger(__name__)


def load_cluster_spec(path: Path) -> ClusterSpec:
    """Load a cluster spec from a YAML or JSON file (JSON is valid YAML)."""
    document = yaml.safe_load(path.read_text())
    return ClusterSpec.model_validate(document or {})


def main(argv: Optional[list[str]] = None) -> None:
    settings = get_settings()

    parser = argparse.ArgumentParser(
        description="Assign defaults to a partially specified cluster spec."
    )
    parser.add_argument(
        "path",
        type=Path,
        help="Cluster spec file (YAML or JSON)",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help="Logging level (default: %(default)s)",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(message)s",
        stream=sys.stderr,
    )

    try:
        spec = load_cluster_spec(args.path)
    except (OSError, yaml.YAMLError, ValidationError) as e:
        logger.error("Unable to read cluster spec %s: %s", args.path, e)
        sys.exit(1)

    try:
        perform_assignments(spec, settings=settings)
    except AssignmentError as e:
        logger.error("%s", e)
        sys.exit(1)

    sys.stdout.write(yaml.safe_dump(spec.model_dump(mode="json", exclude_none=True), sort_keys=False))


if __name__ == "__main__":
    main()
