"""
Main entry point for RSS Slack Notifier.

Loads the configuration, prepares the ledger and runs a single delivery
pass over all configured feeds.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from urllib.parse import urlparse

import coloredlogs

from rss_slack_notifier.config import ConfigError, load_config
from rss_slack_notifier.coordinator import DeliveryCoordinator, RunCounters
from rss_slack_notifier.feed_source import FeedSource
from rss_slack_notifier.ledger import LedgerError, SentLedger
from rss_slack_notifier.slack import SlackNotifier

logger = logging.getLogger(__name__)


def redact_proxy_url(proxy_url: str) -> str:
    """
    Redact credentials from a proxy URL for safe logging.

    Parameters
    ----------
    proxy_url : str
        The proxy URL potentially containing credentials.

    Returns
    -------
    str
        The proxy URL with password redacted.
    """
    try:
        parsed = urlparse(proxy_url)
        if parsed.password:
            netloc = parsed.hostname or ""
            if parsed.port:
                netloc = f"{netloc}:{parsed.port}"
            if parsed.username:
                netloc = f"{parsed.username}:****@{netloc}"
            return f"{parsed.scheme}://{netloc}{parsed.path}"
        return proxy_url
    except ValueError:
        return "<proxy url>"


class FeedRelay:
    """
    Application wrapper around a single delivery run.

    Owns the ledger, feed source and notifier for the duration of the run.
    """

    def __init__(self, config_path: str | Path, sent_news_path: str | Path | None = None):
        """
        Initialize the relay.

        Parameters
        ----------
        config_path : str | Path
            Path to the YAML configuration file.
        sent_news_path : str | Path | None
            Ledger path overriding the configured ``sent_news_file``.

        Raises
        ------
        ConfigError
            If the configuration cannot be loaded.
        """
        self.config = load_config(config_path)
        self.ledger = SentLedger(sent_news_path or self.config.sent_news_file)
        self.source: FeedSource | None = None
        self.notifier: SlackNotifier | None = None

    async def run(self) -> RunCounters:
        """
        Run one delivery pass.

        Returns
        -------
        RunCounters
            Counts for the run.

        Raises
        ------
        LedgerError
            If the ledger cannot be created or read.
        """
        logger.info("Starting RSS Slack Notifier")
        self.ledger.ensure_exists()

        proxy_url = self.config.proxy
        if proxy_url:
            logger.info("Using proxy: %s", redact_proxy_url(proxy_url))

        self.source = FeedSource(
            timeout=self.config.request_timeout,
            user_agent=self.config.user_agent,
            proxy_url=proxy_url,
        )
        self.notifier = SlackNotifier(
            self.config.slack_webhook,
            timeout=self.config.webhook_timeout,
            proxy_url=proxy_url,
        )
        logger.info("Delivering to Slack webhook at %s", self.notifier.webhook_host)

        try:
            coordinator = DeliveryCoordinator(
                feeds=self.config.rss_feeds,
                source=self.source,
                notifier=self.notifier,
                ledger=self.ledger,
                max_news_count=self.config.max_news_count,
            )
            return await coordinator.run()
        finally:
            await self.close()

    async def close(self) -> None:
        """Close network resources."""
        if self.source:
            await self.source.close()
        if self.notifier:
            await self.notifier.close()


def setup_logging(verbose: bool = False) -> None:
    """
    Configure application logging.

    Parameters
    ----------
    verbose : bool
        If True, set log level to DEBUG.
    """
    level = logging.DEBUG if verbose else logging.INFO

    coloredlogs.install(
        level=level,
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Reduce noise from third-party libraries
    logging.getLogger("aiohttp").setLevel(logging.WARNING)


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Send new RSS items to a Slack webhook",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "-c",
        "--config",
        default="config.yaml",
        help="Path to configuration file",
    )
    parser.add_argument(
        "-s",
        "--sent-news",
        default=None,
        help="Path to the sent news file (overrides sent_news_file)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    try:
        relay = FeedRelay(args.config, args.sent_news)
    except ConfigError as e:
        logger.critical("Failed to load config: %s", e)
        sys.exit(1)

    try:
        asyncio.run(relay.run())
    except LedgerError as e:
        logger.critical("Failed to initialize sent news file: %s", e)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")


if __name__ == "__main__":
    main()
