"""
Delivery loop.

Walks the configured feeds in order, skips items recorded in the ledger,
delivers new ones up to the per-run cap and reports what was deferred.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from rss_slack_notifier.feed_source import FeedFetchError, FeedItem, FeedSource
from rss_slack_notifier.ledger import LedgerError, SentLedger
from rss_slack_notifier.notifier import DeliveryError, Notifier

logger = logging.getLogger(__name__)


@dataclass
class RunCounters:
    """
    Counts collected during a single run.

    Attributes
    ----------
    total_sent_count : int
        Items actually delivered this run.
    unsent_item_count : int
        Items not found in the ledger, deferred ones included.
    failed_feed_count : int
        Feeds that could not be fetched.
    failed_delivery_count : int
        Items whose delivery was rejected or errored.
    summary_sent : bool
        Whether the limit summary was delivered.
    """

    total_sent_count: int = 0
    unsent_item_count: int = 0
    failed_feed_count: int = 0
    failed_delivery_count: int = 0
    summary_sent: bool = False

    @property
    def remaining_news(self) -> int:
        """Unsent items left for a later run."""
        return self.unsent_item_count - self.total_sent_count

    @property
    def limit_reached(self) -> bool:
        """Whether a limit summary is due; never when nothing was sent."""
        return self.unsent_item_count > self.total_sent_count and self.total_sent_count > 0


def format_item_message(item: FeedItem) -> str:
    """Build the message text for a feed item."""
    return f"Title: {item.title}\nLink: {item.identifier}\nPublished: {item.published}"


def format_summary_message(counters: RunCounters) -> str:
    """Build the message sent when the per-run cap deferred items."""
    return (
        f"Limit reached. Sent {counters.total_sent_count} out of "
        f"{counters.unsent_item_count} unsent news items. "
        f"{counters.remaining_news} news items will be considered in the next run."
    )


class DeliveryCoordinator:
    """
    Runs one pass over all feeds.

    The ledger is read once at the start of :meth:`run`; items delivered
    during the run are added to the in-memory set as well as appended to
    the ledger file.
    """

    def __init__(
        self,
        feeds: Sequence[str],
        source: FeedSource,
        notifier: Notifier,
        ledger: SentLedger,
        max_news_count: int,
    ):
        """
        Initialize the coordinator.

        Parameters
        ----------
        feeds : Sequence[str]
            Feed URLs, processed in this order.
        source : FeedSource
            Fetches items for a feed URL.
        notifier : Notifier
            Delivers message text.
        ledger : SentLedger
            Record of already delivered identifiers.
        max_news_count : int
            Maximum number of deliveries in one run.
        """
        self.feeds = list(feeds)
        self.source = source
        self.notifier = notifier
        self.ledger = ledger
        self.max_news_count = max_news_count

    async def run(self) -> RunCounters:
        """
        Process every feed once.

        Returns
        -------
        RunCounters
            Counts for this run.

        Raises
        ------
        LedgerError
            If the ledger cannot be read.
        """
        sent = self.ledger.load()
        counters = RunCounters()

        logger.info(
            "Checking %d feed(s) against %d sent item(s)", len(self.feeds), len(sent)
        )

        for feed_url in self.feeds:
            await self._process_feed(feed_url, sent, counters)

        if counters.limit_reached:
            await self._send_summary(counters)

        logger.info(
            "Run finished: sent %d of %d unsent item(s), %d failed deliver%s, %d failed feed(s)",
            counters.total_sent_count,
            counters.unsent_item_count,
            counters.failed_delivery_count,
            "y" if counters.failed_delivery_count == 1 else "ies",
            counters.failed_feed_count,
        )
        return counters

    async def _process_feed(
        self, feed_url: str, sent: set[str], counters: RunCounters
    ) -> None:
        """
        Handle every item of one feed.

        Parameters
        ----------
        feed_url : str
            URL of the feed.
        sent : set[str]
            Identifiers delivered so far, updated in place.
        counters : RunCounters
            Counters for the current run, updated in place.
        """
        try:
            items = await self.source.fetch_items(feed_url)
        except FeedFetchError as e:
            logger.warning("Skipping feed %s: %s", feed_url, e)
            counters.failed_feed_count += 1
            return

        for item in items:
            if item.identifier in sent:
                continue

            counters.unsent_item_count += 1
            if counters.total_sent_count >= self.max_news_count:
                # Deferred until a later run
                logger.debug("Limit reached, deferring %s", item.identifier)
                continue

            await self._deliver_item(item, sent, counters)

    async def _deliver_item(
        self, item: FeedItem, sent: set[str], counters: RunCounters
    ) -> None:
        """Deliver one item and record it when the notifier accepts it."""
        try:
            await self.notifier.deliver(format_item_message(item))
        except DeliveryError as e:
            logger.error(
                "Error sending Slack notification for %s (feed %s): %s",
                item.identifier,
                item.feed_url,
                e,
            )
            counters.failed_delivery_count += 1
            return

        counters.total_sent_count += 1
        sent.add(item.identifier)
        logger.info("Sent notification for: %s", item.title[:50] or item.identifier)

        try:
            self.ledger.append(item.identifier)
        except LedgerError as e:
            logger.error("Failed to record sent item %s: %s", item.identifier, e)

    async def _send_summary(self, counters: RunCounters) -> None:
        """Send the limit summary; a failure is only logged."""
        logger.info(
            "Limit reached, %d item(s) left for the next run", counters.remaining_news
        )
        try:
            await self.notifier.deliver(format_summary_message(counters))
        except DeliveryError as e:
            logger.warning("Failed to send limit summary: %s", e)
            return
        counters.summary_sent = True
