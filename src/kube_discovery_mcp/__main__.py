"""Entry point for the Kubernetes discovery MCP server."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from kube_discovery_mcp import __version__
from kube_discovery_mcp.config import (
    DeclarationSourceMode,
    KubeDiscoveryConfig,
    LogLevel,
    TransportMode,
)


def setup_logging(level: LogLevel) -> None:
    """Configure logging for the server.

    Logs go to stderr; stdout carries the stdio transport.
    """
    logging.basicConfig(
        level=level.value,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="kube-discovery-mcp",
        description="MCP server for discovering the Kubernetes client API",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    # Transport options
    parser.add_argument(
        "--transport",
        choices=["stdio", "sse", "streamable-http"],
        default=None,
        help="Transport mode (default: from config or stdio)",
    )
    parser.add_argument(
        "--host",
        default=None,
        help="Host to bind HTTP server to (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to bind HTTP server to (default: 8000)",
    )

    # Catalog options
    parser.add_argument(
        "--registry",
        default=None,
        help="YAML file listing API groupings (default: introspect the kubernetes client)",
    )
    parser.add_argument(
        "--no-prewarm",
        action="store_true",
        help="Build the search index on first search instead of at startup",
    )
    parser.add_argument(
        "--scripts-dir",
        default=None,
        help="Directory agents save reusable scripts to",
    )

    # Type lookup options
    parser.add_argument(
        "--declaration-source",
        choices=["kubernetes", "directory"],
        default=None,
        help="Where type declarations come from (default: kubernetes)",
    )
    parser.add_argument(
        "--declarations",
        default=None,
        help="Directory of <TypeName>.d.ts files for the directory declaration source",
    )

    # Logging
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)",
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> KubeDiscoveryConfig:
    """Build config from args, falling back to environment/defaults."""
    config_kwargs: dict[str, Any] = {}

    if args.transport:
        config_kwargs["transport"] = TransportMode(args.transport)

    if args.host:
        config_kwargs["host"] = args.host

    if args.port:
        config_kwargs["port"] = args.port

    if args.registry:
        config_kwargs["registry_path"] = Path(args.registry)

    if args.no_prewarm:
        config_kwargs["prewarm_index"] = False

    if args.scripts_dir:
        config_kwargs["scripts_dir"] = Path(args.scripts_dir)

    if args.declaration_source:
        config_kwargs["declaration_source"] = DeclarationSourceMode(args.declaration_source)

    if args.declarations:
        config_kwargs["declarations_path"] = Path(args.declarations)
        config_kwargs.setdefault("declaration_source", DeclarationSourceMode.DIRECTORY)

    if args.log_level:
        config_kwargs["log_level"] = LogLevel(args.log_level)

    return KubeDiscoveryConfig(**config_kwargs)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    config = build_config(args)

    setup_logging(config.log_level)

    logger = logging.getLogger(__name__)
    logger.info(f"Starting Kubernetes discovery MCP server v{__version__}")

    try:
        warnings = config.validate_declaration_config()
        for warning in warnings:
            logger.warning(warning)
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    from kube_discovery_mcp.server import create_server

    mcp = create_server(config)

    if config.transport == TransportMode.STDIO:
        logger.info("Running with stdio transport")
    else:
        logger.info(f"Running with {config.transport.value} transport on {config.host}:{config.port}")
    mcp.run(transport=config.transport.value)

    return 0


if __name__ == "__main__":
    sys.exit(main())
