"""Run the ride companion service for the watch platform."""

from __future__ import annotations

import argparse
from concurrent.futures import ThreadPoolExecutor
import logging

from src.config import load_config
from src.logging_setup import configure_logging
from src.server import build_service, create_server

logger = logging.getLogger("ride_companion")


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--config",
        default="config/config.yaml",
        help="Path to the YAML config file",
    )
    parser.add_argument("--port", type=int, default=None, help="Override server.port")
    args = parser.parse_args()

    config = load_config(args.config)
    configure_logging(config.log)

    port = args.port if args.port is not None else config.server.port
    with ThreadPoolExecutor(
        max_workers=config.server.worker_threads, thread_name_prefix="collaborator"
    ) as executor:
        service = build_service(config, executor)
        server = create_server(service, config.server.host, port)
        logger.info(
            "Ride companion server started on %s:%s (sandbox=%s)",
            config.server.host,
            port,
            config.provider.sandbox,
        )
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            logger.info("Shutting down")
        finally:
            server.server_close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
