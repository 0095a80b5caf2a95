"""Data collection from configured sources.

Collection is simulated: each source type yields a fixed set of sample
items timestamped relative to the collector's clock.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

from .models import Item

logger = logging.getLogger(__name__)

SOURCE_TYPES = ('rss', 'api', 'web_scraping')


@dataclass
class Source:
    """A configured content source."""
    id: int
    name: str
    url: str
    type: str
    status: str = 'active'


@dataclass
class CollectionResult:
    """Items collected from one source."""
    source_id: int
    items: List[Item] = field(default_factory=list)
    success: bool = True
    error: Optional[str] = None


SAMPLE_ITEMS: Dict[str, List[Dict]] = {
    'rss': [
        {
            'title': 'Breaking: New AI Model Achieves Human-Level Performance',
            'content': ('A new artificial intelligence model has demonstrated human-level '
                        'performance across multiple benchmarks. Researchers describe the '
                        'result as a breakthrough for machine learning.'),
            'path': 'article-1',
            'age': timedelta(hours=3),
        },
        {
            'title': 'Critical Security Update Released for Popular Framework',
            'content': ('Developers are urged to update immediately as a critical vulnerability '
                        'has been discovered. Attackers could use the flaw to breach servers.'),
            'path': 'article-2',
            'age': timedelta(minutes=40),
        },
    ],
    'web_scraping': [
        {
            'title': 'Market Analysis: Tech Stocks Show Strong Growth',
            'content': ('Technology stocks continue to outperform the market with significant '
                        'gains in AI and cloud computing sectors. Revenue growth beat estimates.'),
            'path': 'market-analysis',
            'age': timedelta(hours=8),
        },
    ],
    'api': [
        {
            'title': 'Health Alert: New Vaccine Recommendations',
            'content': ('Health authorities have updated vaccination guidelines based on recent '
                        'research findings. Hospitals expect more patients to seek treatment.'),
            'path': 'health-alert',
            'age': timedelta(hours=2),
        },
    ],
}


class DataCollector:
    """Collect items from sources."""

    def __init__(self, clock: Callable[[], datetime] = None):
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def collect_from_source(self, source: Source, since: datetime = None) -> CollectionResult:
        """Collect items from one source.

        Args:
            source: Source to collect from
            since: Only return items published after this time

        Returns:
            CollectionResult; unknown source types give a failed result
        """
        if source.type not in SOURCE_TYPES:
            return CollectionResult(
                source_id=source.id,
                success=False,
                error=f"Unknown source type: {source.type}"
            )

        now = self.clock()
        base_url = source.url.rstrip('/')
        items = [
            Item(
                title=sample['title'],
                content=sample['content'],
                url=f"{base_url}/{sample['path']}",
                published_at=now - sample['age']
            )
            for sample in SAMPLE_ITEMS[source.type]
        ]

        if since is not None:
            items = [item for item in items if item.published_at > since]

        return CollectionResult(source_id=source.id, items=items)

    def collect_from_all_sources(self, sources: List[Source], since: datetime = None) -> List[CollectionResult]:
        """Collect from every source in order.

        Args:
            sources: Sources to collect from
            since: Only return items published after this time

        Returns:
            One CollectionResult per source
        """
        results = []
        for source in sources:
            result = self.collect_from_source(source, since)
            if result.success:
                logger.info("Collected %d items from %s", len(result.items), source.name)
            else:
                logger.error("Failed to collect from %s: %s", source.name, result.error)
            results.append(result)
        return results
