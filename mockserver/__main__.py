"""
Command line entry point: ``python -m mockserver``.
"""

import argparse
import sys
from pathlib import Path

import uvicorn

from mockserver.config import EnvironmentSettings, load_config_from_environment
from mockserver.main import create_app


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="mockserver",
        description="Intercepting HTTP mock server"
    )
    parser.add_argument(
        "--config-dir",
        type=Path,
        help="Directory holding mockserver.yaml and environment overlays"
    )
    parser.add_argument(
        "--environment",
        "-e",
        help="Environment overlay to load (e.g. development, production)"
    )
    parser.add_argument(
        "--settings-file",
        "-s",
        type=Path,
        help="Endpoint settings document (default: settings.json)"
    )
    parser.add_argument("--host", help="Address to listen on")
    parser.add_argument("--port", "-p", type=int, help="Port to listen on")
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error", "critical"],
        help="Log level"
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    overrides = {}
    if args.config_dir is not None:
        overrides["config_dir"] = args.config_dir
    if args.environment is not None:
        overrides["environment"] = args.environment
    if args.settings_file is not None:
        overrides["settings_file"] = args.settings_file

    config = load_config_from_environment(EnvironmentSettings(**overrides))

    server_overrides = {}
    if args.host is not None:
        server_overrides["host"] = args.host
    if args.port is not None:
        server_overrides["port"] = args.port
    if args.log_level is not None:
        server_overrides["log_level"] = args.log_level
    if server_overrides:
        config = config.model_copy(
            update={"server": config.server.model_copy(update=server_overrides)}
        )

    uvicorn.run(
        create_app(config),
        host=config.server.host,
        port=config.server.port,
        log_config=None,
        access_log=config.server.access_log
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
