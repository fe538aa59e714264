"""
Shared fixtures for RSS Slack Notifier tests.

Provides common test fixtures for use across all test modules.
"""

from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from rss_slack_notifier.feed_source import FeedFetchError, FeedItem
from rss_slack_notifier.ledger import SentLedger


# Path to test fixtures directory
FIXTURES_DIR = Path(__file__).parent / "fixtures"

WEBHOOK_URL = "https://hooks.slack.com/services/T000/B000/XXXX"


@pytest.fixture(autouse=True)
def clear_webhook_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a real SLACK_WEBHOOK from leaking into tests."""
    monkeypatch.delenv("SLACK_WEBHOOK", raising=False)


@pytest.fixture
def fixtures_dir() -> Path:
    """Return path to fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture
def sample_rss_content(fixtures_dir: Path) -> str:
    """Return contents of sample RSS feed."""
    return (fixtures_dir / "sample_rss.xml").read_text()


@pytest.fixture
def sample_atom_content(fixtures_dir: Path) -> str:
    """Return contents of sample Atom feed."""
    return (fixtures_dir / "sample_atom.xml").read_text()


@pytest.fixture
def sample_config_path(fixtures_dir: Path) -> Path:
    """Return path to sample config file."""
    return fixtures_dir / "sample_config.yaml"


@pytest.fixture
def minimal_config_dict() -> dict[str, Any]:
    """
    Create a minimal valid configuration dictionary.

    Returns
    -------
    dict
        Configuration dictionary that can be used to create AppConfig.
    """
    return {
        "rss_feeds": ["https://a.example.com/feed.xml"],
        "slack_webhook": WEBHOOK_URL,
        "max_news_count": 3,
    }


@pytest.fixture
def ledger(tmp_path: Path) -> SentLedger:
    """Create an initialized ledger in a temporary directory."""
    sent_ledger = SentLedger(tmp_path / "sent_news.txt")
    sent_ledger.ensure_exists()
    return sent_ledger


@pytest.fixture
def make_items() -> Callable[..., list[FeedItem]]:
    """
    Return a factory building numbered feed items.

    Returns
    -------
    Callable
        ``make_items(feed_url, count, prefix="item")``.
    """

    def _make(feed_url: str, count: int, prefix: str = "item") -> list[FeedItem]:
        base = feed_url.rsplit("/", 1)[0]
        return [
            FeedItem(
                identifier=f"{base}/{prefix}-{i}",
                title=f"{prefix.title()} {i}",
                published=f"2024-01-0{(i % 9) + 1}T12:00:00Z",
                feed_url=feed_url,
            )
            for i in range(1, count + 1)
        ]

    return _make


@pytest.fixture
def feeds() -> dict[str, list[FeedItem] | Exception]:
    """Mapping of feed URL to items or an exception, read by ``mock_source``."""
    return {}


@pytest.fixture
def mock_source(feeds: dict[str, list[FeedItem] | Exception]) -> MagicMock:
    """
    Create a mock feed source backed by the ``feeds`` mapping.

    Unknown URLs fail with FeedFetchError.
    """

    async def fetch_items(url: str) -> list[FeedItem]:
        result = feeds.get(url)
        if result is None:
            raise FeedFetchError(url, "not found")
        if isinstance(result, Exception):
            raise result
        return list(result)

    source = MagicMock()
    source.fetch_items = AsyncMock(side_effect=fetch_items)
    source.close = AsyncMock()
    return source


@pytest.fixture
def mock_notifier() -> MagicMock:
    """
    Create a mock notifier that accepts every message.

    Returns
    -------
    MagicMock
        A notifier with ``deliver`` and ``close`` mocked.
    """
    notifier = MagicMock()
    notifier.deliver = AsyncMock(return_value=None)
    notifier.close = AsyncMock()
    return notifier
