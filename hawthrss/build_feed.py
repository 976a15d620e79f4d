"""
HawthRSS Feed Builder
This script fetches the configured comic, video and feed sources, filters
and normalizes their items, and writes one newest-first HTML page.
"""

import argparse
import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional

from hawthrss.consumers.base import DEFAULT_TIMEOUT
from hawthrss.consumers.registry import build_consumers
from hawthrss.errors import ConfigurationError, HawthRSSError
from hawthrss.pipeline import build_feed
from hawthrss.services.renderer import HtmlRenderer

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = "output.html"


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def default_config_path() -> str:
    """HAWTHRSS_CONFIG if set, otherwise the config.json next to this module."""
    env_path = os.environ.get("HAWTHRSS_CONFIG")
    if env_path:
        return env_path
    base_dir = os.path.dirname(os.path.abspath(__file__))
    return os.path.join(base_dir, "config.json")


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Loads the run configuration from a JSON file."""
    config_path = config_path or default_config_path()
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = json.load(f)
    except FileNotFoundError:
        logger.warning("Config file not found at %s. Using empty config.", config_path)
        return {"sources": []}
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid config file {config_path}: {e}") from e

    if not isinstance(config, dict) or not isinstance(config.get("sources", []), list):
        raise ConfigurationError(
            f"Config file {config_path} must be an object with a 'sources' list"
        )
    return config


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="hawthrss", description="Build a single HTML feed from several sources."
    )
    parser.add_argument("--config", help="path to the JSON run configuration")
    parser.add_argument("--output", help="path of the HTML file to write")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser.parse_args(argv)


def run(config: Dict[str, Any], output: Optional[str] = None) -> int:
    """Builds and writes the feed; returns the number of items written."""
    consumers = build_consumers(
        config.get("sources", []), timeout=config.get("timeout", DEFAULT_TIMEOUT)
    )
    if not consumers:
        logger.warning("No sources configured.")

    items = build_feed(consumers, max_workers=config.get("max_workers"))

    renderer = HtmlRenderer(
        title=config.get("title", "HawthRSS"),
        stylesheet=config.get("stylesheet", "assets/style.css"),
    )
    renderer.write(items, output or config.get("output", DEFAULT_OUTPUT))
    return len(items)


def main(argv: Optional[List[str]] = None) -> None:
    """Main execution entry point."""
    args = parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = load_config(args.config)
        run(config, args.output)
    except HawthRSSError as e:
        logger.error("Error: %s. No output written.", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
