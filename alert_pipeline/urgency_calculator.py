"""Urgency Calculation System.

Combines recency, urgent keywords, sentiment and keyword density into an
urgency level from 1 (info) to 5 (critical).
"""

import math
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List


class UrgencyLevel(Enum):
    """Urgency levels for alerts."""
    CRITICAL = 5
    HIGH = 4
    MEDIUM = 3
    LOW = 2
    INFO = 1

    @classmethod
    def from_value(cls, value: int) -> 'UrgencyLevel':
        return cls(max(1, min(5, int(value))))


class UrgencyCalculator:
    """Calculate alert urgency."""

    def __init__(self, config: Dict = None):
        """Initialize urgency calculator.

        Args:
            config: Configuration dictionary with keywords and thresholds
        """
        self.config = config or self._get_default_config()

    @staticmethod
    def _get_default_config() -> Dict:
        """Return default configuration."""
        return {
            'urgent_keywords': [
                'breaking', 'urgent', 'critical', 'emergency', 'alert', 'warning',
                'immediate', 'vulnerability', 'breach', 'attack', 'pandemic', 'outbreak'
            ],
            # (max age in hours, bonus), checked in order
            'recency_bonuses': [(1, 0.5), (6, 0.3), (24, 0.1)],
            'keyword_bonus': 0.5,
            # (sentiment below, bonus), checked in order
            'sentiment_bonuses': [(-0.5, 1.0), (-0.2, 0.5)],
            # (more matched keywords than, bonus), checked in order
            'density_bonuses': [(5, 1.0), (3, 0.5)],
            'baseline': {
                'urgent_keywords': [
                    'critical', 'urgent', 'breaking', 'emergency', 'vulnerability', 'breach', 'pandemic'
                ],
                'keyword_bonus': 2,
                'sentiment_threshold': -0.5,
                'density_threshold': 3,
            }
        }

    @staticmethod
    def round_half_up(value: float) -> int:
        return int(math.floor(value + 0.5))

    @staticmethod
    def clamp(value: int) -> int:
        return max(1, min(5, value))

    def calculate_recency_bonus(self, published_at: datetime, now: datetime = None) -> float:
        """Bonus for fresh content.

        Args:
            published_at: Publication timestamp (naive values are taken as UTC)
            now: Reference time (defaults to the current time)

        Returns:
            Recency bonus
        """
        now = now or datetime.now(timezone.utc)
        if published_at.tzinfo is None:
            published_at = published_at.replace(tzinfo=timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

        hours_old = (now - published_at).total_seconds() / 3600

        for max_hours, bonus in self.config['recency_bonuses']:
            if hours_old < max_hours:
                return bonus
        return 0.0

    def find_urgent_keywords(self, text: str, keywords: List[str] = None) -> List[str]:
        """Return the urgent keywords contained in text."""
        keywords = keywords if keywords is not None else self.config['urgent_keywords']
        text_lower = text.lower() if isinstance(text, str) else ''
        return [kw for kw in keywords if kw in text_lower]

    def calculate_sentiment_bonus(self, sentiment: float) -> float:
        for threshold, bonus in self.config['sentiment_bonuses']:
            if sentiment < threshold:
                return bonus
        return 0.0

    def calculate_density_bonus(self, matched_keywords: List[str]) -> float:
        for threshold, bonus in self.config['density_bonuses']:
            if len(matched_keywords) > threshold:
                return bonus
        return 0.0

    def calculate_urgency(
        self,
        text: str,
        sentiment: float,
        matched_keywords: List[str],
        published_at: datetime,
        now: datetime = None
    ) -> int:
        """Calculate urgency with recency (enhanced scoring).

        Args:
            text: Combined title and body
            sentiment: Sentiment score (-1 to 1)
            matched_keywords: Category keywords found in the text
            published_at: Publication timestamp
            now: Reference time for recency

        Returns:
            Urgency level (1-5)
        """
        urgency = 1.0
        urgency += self.calculate_recency_bonus(published_at, now)
        urgency += len(self.find_urgent_keywords(text)) * self.config['keyword_bonus']
        urgency += self.calculate_sentiment_bonus(sentiment)
        urgency += self.calculate_density_bonus(matched_keywords)

        return self.clamp(self.round_half_up(urgency))

    def calculate_baseline_urgency(self, text: str, sentiment: float, matched_keywords: List[str]) -> int:
        """Calculate urgency without recency (baseline scoring).

        Args:
            text: Combined title and body
            sentiment: Sentiment score (-1 to 1)
            matched_keywords: Category keywords found in the text

        Returns:
            Urgency level (1-5)
        """
        baseline = self.config['baseline']
        urgency = 1

        if self.find_urgent_keywords(text, baseline['urgent_keywords']):
            urgency += baseline['keyword_bonus']
        if sentiment < baseline['sentiment_threshold']:
            urgency += 1
        if len(matched_keywords) > baseline['density_threshold']:
            urgency += 1

        return self.clamp(urgency)
