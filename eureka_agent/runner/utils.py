"""
Eureka agent runner utilities.
"""

import argparse
import logging
from typing import List, Optional

from eureka_agent.agent import AgentConfig

LOG_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s"


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments

    Returns:
        Parsed argument namespace
    """
    parser = argparse.ArgumentParser(description="Keep a service instance registered with Eureka")

    parser.add_argument(
        "--registry-url",
        type=str,
        default="http://localhost:8761/eureka",
        help="Eureka registry base URL"
    )

    parser.add_argument(
        "--app-name",
        type=str,
        required=True,
        help="Application name to register"
    )

    parser.add_argument(
        "--port",
        type=str,
        default="8080",
        help="Port the service listens on"
    )

    parser.add_argument("--username", type=str, default="", help="Registry basic-auth user")
    parser.add_argument("--password", type=str, default="", help="Registry basic-auth password")

    parser.add_argument(
        "--retry-interval",
        type=float,
        default=10.0,
        help="Seconds between registration attempts"
    )

    parser.add_argument(
        "--heartbeat-interval",
        type=float,
        default=10.0,
        help="Seconds between heartbeats"
    )

    parser.add_argument(
        "--grace-period",
        type=float,
        default=3.0,
        help="Seconds to wait after deregistering before exit"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log every heartbeat and enable debug output"
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> AgentConfig:
    return AgentConfig(
        registry_url=args.registry_url,
        app_name=args.app_name,
        port=args.port,
        username=args.username,
        password=args.password,
        verbose=args.verbose,
        retry_interval=args.retry_interval,
        heartbeat_interval=args.heartbeat_interval,
        grace_period=args.grace_period,
    )


def configure_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )
    # urllib3 logs every connection at debug
    logging.getLogger("urllib3").setLevel(logging.WARNING)
