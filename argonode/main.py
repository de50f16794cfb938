#!/usr/bin/env python3
"""
argonode - tunneled proxy node bootstrap

Renders the proxy engine configuration, fetches and starts the proxy
engine, tunnel client and optional monitoring agent, discovers the public
tunnel hostname, writes the subscription and serves it over HTTP.

Usage:
    python -m argonode [options]

Options:
    --config FILE    Path to a secrets file with KEY=value lines
    --help           Show this help message
"""

import logging
import signal
import sys
from typing import List, Optional

from argonode.core.config import NodeConfig
from argonode.core.utils import mask_secret, setup_logging
from argonode.orchestrator import NodeOrchestrator
from argonode.web.server import create_app, start_server

logger = logging.getLogger("argonode")


def print_config_info(config):
    logger.info(f"Python {sys.version.split()[0]} on {sys.platform}")
    logger.info(f"Working directory: {config.file_path}")
    logger.info(f"UUID: {mask_secret(config.uuid)}")
    logger.info(f"Tunnel: {'fixed ' + config.argo_domain if config.fixed_tunnel else 'quick'}")
    logger.info(f"Monitoring: {'push' if config.monitoring_push_mode else 'pull' if config.monitoring_enabled else 'disabled'}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    argv = sys.argv[1:] if argv is None else argv
    secrets_file = None
    if argv:
        if argv[0] in ("--help", "-h"):
            print(__doc__)
            return 0
        elif argv[0] == "--config" and len(argv) == 2:
            secrets_file = argv[1]
        else:
            print(f"Unrecognized arguments: {' '.join(argv)}", file=sys.stderr)
            print(__doc__)
            return 1

    setup_logging()

    node_config = NodeConfig(secrets_file)
    errors = node_config.validate()
    if errors:
        logger.error("Configuration errors:")
        for error in errors:
            logger.error(f"  - {error}")
        return 1

    config = node_config.snapshot()
    print_config_info(config)

    orchestrator = NodeOrchestrator(config)

    def signal_handler(signum, frame):
        logger.info(f"Received signal {signum}, shutting down...")
        orchestrator.stop()
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    orchestrator.run()

    try:
        start_server(create_app(orchestrator), port=config.port)
    except OSError as e:
        logger.error(f"Failed to start server: {e}")
        orchestrator.stop()
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
