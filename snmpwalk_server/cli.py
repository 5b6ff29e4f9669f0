"""
Command-line entry point.

Usage:
    snmpwalk-server [options]
    python -m snmpwalk_server [options]

Flags override environment settings (SNMPWALK_*); the merged Settings is
built once and never mutated afterwards.
"""
from __future__ import annotations

import argparse
import logging
from typing import Sequence

import uvicorn

from snmpwalk_server import __version__
from snmpwalk_server.core.config import Settings, get_settings
from snmpwalk_server.main import configure_logging, create_app

logger = logging.getLogger(__name__)


def build_parser(defaults: Settings) -> argparse.ArgumentParser:
    reg = defaults.registry
    parser = argparse.ArgumentParser(
        prog="snmpwalk-server",
        description="SNMP v2c bulk-walk HTTP gateway with optional Consul registration",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  snmpwalk-server                          # listen on 0.0.0.0:8085
  snmpwalk-server -p 9000                  # custom port
  snmpwalk-server -r -s 172.18.0.3:8500    # register into Consul
        """,
    )
    parser.add_argument(
        "-l", dest="listen_addr", default=defaults.listen_addr,
        help=f"Listen address, e.g. 0.0.0.0 (default: {defaults.listen_addr})",
    )
    parser.add_argument(
        "-p", dest="listen_port", type=int, default=defaults.listen_port,
        help=f"Listen port (default: {defaults.listen_port})",
    )
    parser.add_argument(
        "-r", dest="register", action="store_true", default=reg.enabled,
        help="Register into Consul at startup",
    )
    parser.add_argument(
        "-a", dest="service_addr", default=reg.service_addr,
        help="Advertised address for Consul, e.g. 172.18.0.2; never 0.0.0.0 "
             "(default: autodetected intranet IPv4)",
    )
    parser.add_argument(
        "-s", dest="server_addr", default=reg.server_addr,
        help=f"Consul server address (default: {reg.server_addr})",
    )
    parser.add_argument(
        "-n", dest="service_name", default=reg.service_name,
        help=f"Consul service name (default: {reg.service_name})",
    )
    parser.add_argument(
        "--strict", action="store_true", default=defaults.snmp_strict,
        help="Fail walks on any non-zero agent error status",
    )
    parser.add_argument(
        "--reject-malformed", dest="reject_malformed", action="store_true",
        default=defaults.reject_malformed_body,
        help="Answer 400 to unparseable walk requests",
    )
    parser.add_argument(
        "--debug", action="store_true", default=defaults.app_debug,
        help="Debug logging",
    )
    parser.add_argument(
        "--version", action="version", version=f"snmpwalk-server {__version__}",
    )
    return parser


def settings_from_args(args: argparse.Namespace, base: Settings) -> Settings:
    """Merge parsed flags over the environment settings."""
    registry = base.registry.model_copy(update={
        "enabled": args.register,
        "service_addr": args.service_addr or None,
        "server_addr": args.server_addr,
        "service_name": args.service_name,
    })
    return base.model_copy(update={
        "listen_addr": args.listen_addr,
        "listen_port": args.listen_port,
        "registry": registry,
        "snmp_strict": args.strict,
        "reject_malformed_body": args.reject_malformed,
        "app_debug": args.debug,
    })


def parse_settings(argv: Sequence[str] | None = None, base: Settings | None = None) -> Settings:
    base = base or get_settings()
    args = build_parser(base).parse_args(argv)
    return settings_from_args(args, base)


def main(argv: Sequence[str] | None = None) -> None:
    settings = parse_settings(argv)
    configure_logging(settings.app_debug)

    if settings.registry.service_addr == "0.0.0.0":
        logger.warning("Advertising 0.0.0.0 to Consul; health checks will not reach this host")

    uvicorn.run(
        create_app(settings),
        host=settings.listen_addr,
        port=settings.listen_port,
        log_level="debug" if settings.app_debug else "info",
    )


if __name__ == "__main__":
    main()
