"""Pytest configuration and fixtures."""

import pytest
from datetime import datetime, timedelta, timezone

from alert_pipeline.models import Item
from alert_pipeline.config import load_config


NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    """Fixed reference time."""
    return NOW


@pytest.fixture
def clock():
    """Clock that always returns the reference time."""
    return lambda: NOW


@pytest.fixture
def security_item():
    """Fresh security item that should rank as critical."""
    return Item(
        title="Critical Security Vulnerability Discovered in Popular Framework",
        content=(
            "A critical flaw lets attackers breach corporate networks. "
            "Security teams report severe malware and ransomware activity and urge an emergency patch."
        ),
        url="https://example.com/security-alert",
        published_at=NOW - timedelta(minutes=10),
    )


@pytest.fixture
def calm_item():
    """Older, neutral business item."""
    return Item(
        title="Quarterly Results Published",
        content="The company reported revenue in line with the market outlook for the year.",
        url="https://example.com/earnings",
        published_at=NOW - timedelta(days=2),
    )


@pytest.fixture
def spanish_item():
    """Item written in Spanish."""
    return Item(
        title="El mercado de la energía",
        content="El precio de la electricidad y el gas que es alto para la industria",
        url="https://example.com/es",
        published_at=NOW - timedelta(hours=5),
    )


@pytest.fixture
def sample_items(security_item, calm_item, spanish_item):
    """Sample items for testing."""
    return [security_item, calm_item, spanish_item]


@pytest.fixture
def test_config():
    """Test configuration."""
    config = load_config()
    config['notifications']['recipients'] = ['oncall@example.com']
    config['notifications']['send_delay'] = 0
    return config


@pytest.fixture
def sample_alert_records():
    """Stored alert rows as returned by AlertStore."""
    return [
        {
            'id': 1,
            'category_id': 2,
            'title': 'Ransomware hits hospital',
            'content': 'Systems were encrypted, "all" services down',
            'urgency_level': 5,
            'sentiment_score': -0.6,
            'keywords_matched': ['ransomware', 'breach'],
            'url': 'https://example.com/1',
            'published_at': '2026-10-17T11:00:00+00:00',
            'created_at': '2026-10-17T11:05:00+00:00',
            'is_read': False,
            'is_archived': False,
        },
        {
            'id': 2,
            'category_id': 1,
            'title': 'New AI model, faster training',
            'content': 'A machine learning breakthrough.\nMore to follow.',
            'urgency_level': 2,
            'sentiment_score': 0.3,
            'keywords_matched': ['ai', 'machine learning'],
            'url': 'https://example.com/2',
            'published_at': '2026-10-16T09:00:00+00:00',
            'created_at': '2026-10-16T09:05:00+00:00',
            'is_read': True,
            'is_archived': False,
        },
        {
            'id': 3,
            'category_id': 2,
            'title': 'Phishing campaign reported',
            'content': 'Users targeted by phishing emails.',
            'urgency_level': 3,
            'sentiment_score': -0.1,
            'keywords_matched': ['phishing'],
            'url': 'https://example.com/3',
            'published_at': '2026-10-10T09:00:00+00:00',
            'created_at': '2026-10-10T09:05:00+00:00',
            'is_read': False,
            'is_archived': False,
        },
    ]
