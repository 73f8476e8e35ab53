"""
hostfacts - Main Entry Point.

Prints the facts of the local host: FQDN, network interfaces, resource
limits and resource list counts.
"""

import argparse
import json
import logging
import logging.handlers
import sys
from pathlib import Path

from .collectors.local_collector import LocalCollector
from .context import HostContext
from .core.config import Config, LoggingConfig, get_default_config_path
from .core.formatting import format_size
from .core.models import FIELD_NOTIMPL, inet_ntoa
from .core.rlimits import RLIMIT_TABLE


logger = logging.getLogger(__name__)


def setup_logging(config: LoggingConfig, verbose: bool = False):
    """Configure the root logger from the logging section."""
    level = logging.DEBUG if verbose else getattr(logging, config.level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format=config.format)

    if config.file_path:
        handler = logging.handlers.RotatingFileHandler(
            config.file_path,
            maxBytes=config.max_file_size_mb * 1024 * 1024,
            backupCount=config.backup_count,
        )
        handler.setFormatter(logging.Formatter(config.format))
        logging.getLogger().addHandler(handler)


def print_interfaces(context: HostContext):
    """Print every interface in ifconfig style."""
    with context.net_interface_list() as iflist:
        for name in iflist:
            try:
                ifconfig = context.net_interface_config(name)
            except OSError as e:
                print(f"{name}: {e.strerror}")
                continue

            print(f"{ifconfig.name}\tHWaddr {ifconfig.hwaddr}")
            print(
                f"\tinet addr:{inet_ntoa(ifconfig.address)}"
                f"  Bcast:{inet_ntoa(ifconfig.broadcast)}"
                f"  Mask:{inet_ntoa(ifconfig.netmask)}"
            )
            print(
                f"\t{' '.join(ifconfig.flag_names)}"
                f"  MTU:{ifconfig.mtu}  Metric:{ifconfig.metric}"
            )


def print_limits(context: HostContext):
    """Print resource limits like ``ulimit -a``."""
    limit = context.resource_limit()

    def show(value: int) -> str:
        if value == FIELD_NOTIMPL:
            return "-"
        if value == limit.unlimited:
            return "unlimited"
        return str(value)

    for spec in RLIMIT_TABLE:
        cur = getattr(limit, f"{spec.name}_cur")
        max_ = getattr(limit, f"{spec.name}_max")
        print(f"{spec.name:<16}{show(cur):>20}{show(max_):>20}")


def print_snapshot(snapshot):
    """Print a human readable summary of a snapshot."""
    print("=" * 60)
    print(f"Host: {snapshot.fqdn}")
    print("=" * 60)

    print("\n--- Network Interfaces ---")
    for iface in snapshot.interfaces:
        print(f"  {iface.name:<12} {inet_ntoa(iface.address):<16} {iface.hwaddr}  MTU {iface.mtu}")

    print("\n--- Resource Lists ---")
    for name, count in snapshot.counts.items():
        print(f"  {name:<14} {count}")

    print("\n--- Resource Limits ---")
    limit = snapshot.resource_limit
    # open_files and processes are counts; only stack is in bytes.
    for name, render in (("open_files", str), ("processes", str), ("stack", format_size)):
        cur = getattr(limit, f"{name}_cur")
        if cur == limit.unlimited:
            text = "unlimited"
        elif cur == FIELD_NOTIMPL:
            text = "-"
        else:
            text = render(cur)
        print(f"  {name:<14} {text}")

    print(f"\nCollection Time: {snapshot.collection_duration_ms:.1f} ms")
    if snapshot.errors:
        print(f"Errors: {len(snapshot.errors)}")
        for err in snapshot.errors:
            print(f"  - {err}")


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Print facts about the local host"
    )

    parser.add_argument(
        "-c", "--config",
        default=None,
        help="Path to configuration file (YAML)"
    )

    parser.add_argument(
        "--fqdn",
        action="store_true",
        help="Print the fully-qualified domain name only"
    )

    parser.add_argument(
        "--interfaces",
        action="store_true",
        help="Print network interface configuration only"
    )

    parser.add_argument(
        "--limits",
        action="store_true",
        help="Print resource limits only"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full snapshot as JSON"
    )

    parser.add_argument(
        "--backend",
        choices=["auto", "linux", "psutil"],
        default=None,
        help="Platform backend (default: auto)"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    parser.add_argument(
        "--generate-config",
        action="store_true",
        help="Generate a sample configuration file"
    )

    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    # Generate sample config if requested
    if args.generate_config:
        config = Config()
        config_path = "config/hostfacts.yaml"
        Path("config").mkdir(exist_ok=True)
        config.to_yaml(config_path)
        print(f"Generated sample configuration: {config_path}")
        return 0

    # Load configuration
    config_path = args.config or get_default_config_path()
    config = Config.from_yaml(config_path)
    setup_logging(config.logging, args.verbose)
    logger.debug(f"Loaded configuration from {config_path}")

    # Apply command line overrides
    if args.backend:
        config.collector.backend = args.backend

    try:
        with HostContext.open(config.collector) as context:
            if args.fqdn:
                print(context.fqdn())
            elif args.interfaces:
                print_interfaces(context)
            elif args.limits:
                print_limits(context)
            else:
                snapshot = LocalCollector(context).collect_all()
                if args.json:
                    print(json.dumps(snapshot.to_dict(), indent=2, default=str))
                else:
                    print_snapshot(snapshot)
    except OSError as e:
        logger.error(f"hostfacts failed: {e}")
        return 1

    return 0


def run():
    """Entry point for the application."""
    sys.exit(main())


if __name__ == "__main__":
    run()
