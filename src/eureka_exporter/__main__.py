"""Command-line entry point.

Usage:
    python -m eureka_exporter [host:]<port>:<yaml configuration file>
"""

import argparse
import logging
import re
import sys
from dataclasses import dataclass

import uvicorn

from eureka_exporter.adapters.collector import EurekaCollector
from eureka_exporter.adapters.frameworks.asgi import create_asgi_app
from eureka_exporter.core.config import load_config_file
from eureka_exporter.core.errors import ConfigError

logger = logging.getLogger("eureka_exporter")

DEFAULT_HOST = "0.0.0.0"
USAGE = "[host:]<port>:<yaml configuration file>"

_AGENT_ARGS_RE = re.compile(
    r"^(?:((?:[\w.]+)|(?:\[.+])):)?"  # host name, ipv4, or bracketed ipv6
    r"(\d{1,5}):"  # port
    r"(.+)$"  # config file
)


@dataclass(frozen=True)
class AgentArgs:
    """Parsed listener address and configuration path."""

    host: str
    port: int
    config_file: str


def parse_agent_args(args: str, default_host: str = DEFAULT_HOST) -> AgentArgs:
    """Parse ``[host:]<port>:<config file>``.

    Raises:
        ValueError: If args does not match the expected format.
    """
    match = _AGENT_ARGS_RE.match(args)
    if match is None:
        raise ValueError(f"Malformed arguments - {args}")
    host, port, config_file = match.groups()
    if not host:
        host = default_host
    return AgentArgs(host=host.strip("[]"), port=int(port), config_file=config_file)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="eureka_exporter",
        description="Export Eureka registry state as Prometheus metrics.",
    )
    parser.add_argument("agent_args", metavar="ARGS", help=USAGE)
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
    )
    options = parser.parse_args(argv)

    logging.basicConfig(
        level=options.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        agent_args = parse_agent_args(options.agent_args)
        config = load_config_file(agent_args.config_file)
    except (ValueError, ConfigError) as exc:
        print(f"Usage: python -m eureka_exporter {USAGE} {exc}", file=sys.stderr)
        return 1

    logger.info("eureka metric scrape agent is starting...")
    app = create_asgi_app(EurekaCollector(config))
    uvicorn.run(
        app,
        host=agent_args.host,
        port=agent_args.port,
        log_level=options.log_level.lower(),
    )
    logger.info("eureka metric scrape agent stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
