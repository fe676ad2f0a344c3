#!/usr/bin/env python3
"""
Fan Activator - Entry Point

Observes a peer's temperature resource, keeps a rolling mean and drives
the fan actuator at a rate that follows the deviation from the threshold.

Usage:
    fan-activator                      # Start with default config
    fan-activator --config my.yaml     # Use custom config file
    fan-activator --dry-run            # Print config and exit
    fan-activator --verbose            # Enable debug logging
"""

import argparse
import asyncio
import logging
import os
import sys

from activator import __version__
from activator.common.config import ActivatorConfig, find_config_path, load_config_file
from activator.common.exceptions import ConfigError
from activator.common.logging_setup import reconfigure_service_loggers, setup_logging
from activator.service import ActivatorService


def print_startup_banner(config: ActivatorConfig, config_path: str | None) -> None:
    """Print startup information."""
    control = config.control

    print()
    print("=" * 60)
    print(f"  FAN ACTIVATOR v{__version__}")
    print("=" * 60)
    print()
    print(f"  Node ID:     {config.node_id}")
    print(f"  Config:      {config_path or 'built-in defaults'}")
    print(f"  Observing:   {config.observe_url}")
    print(f"  History:     {config.history.capacity} readings")
    print(f"  Threshold:   {control.default_threshold} C")
    print(f"  Weighting:   {control.weighting}")
    print(f"  Intensity:   0..{control.max_intensity}")
    if config.command.enabled:
        print(f"  Commands:    http://{config.command.host}:{config.command.port}/treshold")
    else:
        print("  Commands:    disabled")
    print()
    print("=" * 60)
    print()


async def main_async(config: ActivatorConfig, verbose: bool = False) -> None:
    """
    Async main function that runs the activator until shutdown.

    Args:
        config: Loaded configuration
        verbose: Enable verbose logging
    """
    if verbose:
        # Module loggers were configured from the environment at import time
        reconfigure_service_loggers("DEBUG", json_format=False)
    log_level = "DEBUG" if verbose else os.environ.get("ACTIVATOR_LOG_LEVEL", "INFO")
    setup_logging("main", log_level=log_level, json_format=not verbose)

    logger = logging.getLogger("activator.main")
    logger.info("Starting fan activator")

    service = ActivatorService(config)
    try:
        await service.start()
    finally:
        await service.stop()


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Fan Activator - adaptive fan control from a remote temperature feed",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    fan-activator                      # Start with default config
    fan-activator --config my.yaml     # Use custom config file
    fan-activator --dry-run            # Validate config and exit
    fan-activator -v                   # Enable debug logging

Remote threshold update:
    curl -X POST -d treshold=28 http://127.0.0.1:5684/treshold
        """
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to configuration file (default: /etc/fan-activator/config.yaml or ./config.yaml)"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate configuration and exit without starting"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (debug) logging"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Fan Activator v{__version__}"
    )

    args = parser.parse_args()

    config_path = args.config or find_config_path()

    try:
        config = load_config_file(config_path)
    except ConfigError as e:
        print(f"Error: {e.message}")
        sys.exit(1)

    print_startup_banner(config, config_path)

    if args.dry_run:
        print("Dry run mode - configuration valid")
        print("Exiting without starting")
        sys.exit(0)

    print("Press Ctrl+C to stop")
    print()

    try:
        asyncio.run(main_async(config, verbose=args.verbose))
    except KeyboardInterrupt:
        print("\nStopped by user")
    except Exception as e:
        print(f"\nFatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
