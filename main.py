"""
Command line entry point
 - Loads a trip canvas from the configured store
 - Optionally repacks it and saves the result
 - Prints the computed pixel layout
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from config import ConfigurationError, EnvironmentConfiguration
from tripcanvas.api_client import ConvexGateway, GatewayError
from tripcanvas.cache_manager import CacheError, LocalCanvasStore
from tripcanvas.canvas_coordinator import CanvasCoordinator
from tripcanvas.ui_logic.reflow import find_overlaps, reflow

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Show the grid layout of a trip canvas")
    parser.add_argument("--trip", required=True, help="Trip id")
    parser.add_argument("--width", type=float, default=390, help="Canvas width in pixels")
    parser.add_argument("--store", type=Path, default=None,
                        help="Local JSON store to use instead of the remote deployment")
    parser.add_argument("--reflow", action="store_true", help="Repack the canvas and save it")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = EnvironmentConfiguration.from_env()
    except ConfigurationError as e:
        logger.error("Invalid configuration: %s", e)
        return 2

    if args.store is not None:
        gateway = LocalCanvasStore(args.store)
    elif config.use_remote_store:
        gateway = ConvexGateway(config.convex_url, config.auth_token, timeout=config.request_timeout)
    else:
        gateway = LocalCanvasStore(config.store_path)

    coordinator = CanvasCoordinator(args.trip, gateway, config)
    try:
        items = coordinator.open(args.width)
    except (GatewayError, CacheError) as e:
        logger.error("Failed to load trip %s: %s", args.trip, e)
        return 1

    if args.reflow:
        items = reflow(items)
        result = gateway.save_items(items)
        if not result:
            logger.error("Failed to save reflowed positions: %s", result.error)
            coordinator.close()
            return 1
        coordinator.controller.replace_items(items)

    overlaps = find_overlaps(items)
    layouts = coordinator.layout()
    print(f"Trip {args.trip}: {len(items)} moments, canvas {args.width:.0f}px")
    for item in items:
        layout = layouts.get(item.id)
        if layout is None:
            continue
        print(f"  {item.id:<24} col={item.column} row={item.row:<5} "
              f"{item.width}x{item.height:<4} -> x={layout.x:.1f} y={layout.y:.1f} "
              f"w={layout.width:.1f} h={layout.height:.1f}")
    print(f"Content height: {coordinator.content_height():.1f}px")
    if overlaps:
        print(f"Overlapping pairs: {overlaps}")

    coordinator.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
