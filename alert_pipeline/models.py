"""Data records shared by the analysis components."""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class Item:
    """A collected item, immutable once created."""
    title: str
    content: str
    url: str
    published_at: datetime

    @property
    def full_text(self) -> str:
        return f"{self.title} {self.content}"


@dataclass
class LanguageDetection:
    """Language detection result."""
    language: str
    confidence: float
    alternatives: List[Dict[str, float]] = field(default_factory=list)


@dataclass
class SummaryResult:
    """Summarization result."""
    summary: str
    key_points: List[str]
    reading_time: int
    word_count: int


@dataclass
class DuplicateResult:
    """Duplicate check result."""
    is_duplicate: bool
    similarity: float
    matched_content: Optional[str] = None


@dataclass
class CategoryMatch:
    """Category classification result."""
    category_id: int
    matched_keywords: List[str]
    confidence: float
    alternative_categories: List[Dict[str, float]] = field(default_factory=list)


@dataclass(frozen=True)
class AnalyzedAlert:
    """Enriched record produced by the pipeline for one item.

    Sequence fields are tuples so the record cannot change once built.
    """
    title: str
    content: str
    url: str
    published_at: datetime
    detected_language: str
    language_confidence: float
    language_alternatives: Tuple[Dict[str, float], ...]
    sentiment_score: float
    category_id: int
    category_confidence: float
    keywords_matched: Tuple[str, ...]
    alternative_categories: Tuple[Dict[str, float], ...]
    urgency_level: int
    summary: str
    key_points: Tuple[str, ...]
    reading_time: int
    word_count: int
    is_duplicate: bool
    similarity_score: float
    content_fingerprint: str
    translated_content: Optional[str] = None

    def to_dict(self) -> Dict:
        """Return a plain dictionary (datetimes as ISO strings)."""
        record = asdict(self)
        record['published_at'] = self.published_at.isoformat()
        for name in ('language_alternatives', 'keywords_matched', 'alternative_categories', 'key_points'):
            record[name] = list(record[name])
        return record
