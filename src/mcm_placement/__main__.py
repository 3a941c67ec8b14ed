"""Entry point for the mcm-placement command."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from mcm_placement import __version__
from mcm_placement.config import AuthMode, LogLevel, PlacementConfig
from mcm_placement.models import Placement
from mcm_placement.placement import is_local_placement, resolve_clusters
from mcm_placement.registry import KubernetesClusterRegistry
from mcm_placement.utils.errors import PlacementError
from mcm_placement.watchdog import ClusterRegistryWatchdog, exit_for_restart

logger = logging.getLogger(__name__)


def setup_logging(level: LogLevel) -> None:
    """Configure logging for the command."""
    logging.basicConfig(
        level=level.value,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="mcm-placement",
        description="Resolve cluster placements against the cluster registry",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    # Auth options
    parser.add_argument(
        "--auth-mode",
        choices=["auto", "kubeconfig", "in_cluster"],
        default=None,
        help="Authentication mode (default: auto)",
    )
    parser.add_argument(
        "--kubeconfig",
        default=None,
        help="Path to kubeconfig file",
    )
    parser.add_argument(
        "--context",
        default=None,
        help="Kubeconfig context to use",
    )

    # Logging
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    resolve = subparsers.add_parser(
        "resolve",
        help="Print the clusters a placement resolves to",
    )
    resolve.add_argument(
        "placement_file",
        type=Path,
        help="YAML or JSON placement, or an object with the placement under 'spec'",
    )

    watch = subparsers.add_parser(
        "watch-registry",
        help="Wait for the cluster registry and exit with status 1 once it is available",
    )
    watch.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Seconds between readiness probes (default: 10)",
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> PlacementConfig:
    """Build config from args, falling back to environment/defaults."""
    config_kwargs: dict[str, Any] = {}

    if args.auth_mode:
        config_kwargs["auth_mode"] = AuthMode(args.auth_mode)

    if args.kubeconfig:
        config_kwargs["kubeconfig_path"] = args.kubeconfig

    if args.context:
        config_kwargs["kubeconfig_context"] = args.context

    if args.log_level:
        config_kwargs["log_level"] = LogLevel(args.log_level)

    if getattr(args, "interval", None) is not None:
        config_kwargs["registry_poll_interval"] = args.interval

    return PlacementConfig(**config_kwargs)


def load_placement(path: Path) -> Placement:
    """Load a placement from a YAML or JSON file.

    Raises:
        ValueError: If the file does not hold a placement.
    """
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path} does not contain a placement object")

    # Accept a whole PlacementRule-style object as well as a bare placement
    if isinstance(data.get("spec"), dict):
        data = data["spec"]

    try:
        return Placement.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid placement in {path}: {e}") from e


def run_resolve(config: PlacementConfig, placement_file: Path) -> int:
    try:
        placement = load_placement(placement_file)
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error(f"Cannot read placement: {e}")
        return 1

    registry = KubernetesClusterRegistry(config)
    try:
        clusters = resolve_clusters(placement, registry)
    except PlacementError as e:
        logger.error(f"Placement resolution failed: {e}")
        return 1

    result = {
        "local": is_local_placement(placement),
        "clusters": sorted(clusters),
    }
    print(json.dumps(result, indent=2))
    return 0


async def _watch(config: PlacementConfig) -> int:
    registry = KubernetesClusterRegistry(config)
    watchdog = ClusterRegistryWatchdog(
        registry,
        on_ready=exit_for_restart,
        poll_interval=config.registry_poll_interval,
    )
    task = await watchdog.start()
    if task is None:
        logger.info("Cluster registry already available, nothing to wait for")
        return 0

    await task
    return 0


def run_watch(config: PlacementConfig) -> int:
    try:
        return asyncio.run(_watch(config))
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping cluster registry watchdog")
        return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = build_config(args)
    except ValidationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    setup_logging(config.log_level)
    logger.debug(f"mcm-placement v{__version__}")

    if args.command == "resolve":
        return run_resolve(config, args.placement_file)
    return run_watch(config)


if __name__ == "__main__":
    sys.exit(main())
