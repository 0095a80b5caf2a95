"""Main Content Analysis Pipeline.

Orchestrates all analysis modules to turn collected items into alerts.
"""

import logging
import json
from collections import Counter
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple

from .models import Item, AnalyzedAlert
from .language_detector import LanguageDetector
from .summarizer import ContentSummarizer
from .duplicate_detector import DuplicateDetector
from .sentiment_scorer import SentimentScorer
from .category_classifier import CategoryClassifier
from .urgency_calculator import UrgencyCalculator, UrgencyLevel
from .events import EventBus, AlertEvent, ALERT_PROCESSED, HIGH_URGENCY_ALERT

SCORING_MODES = ('enhanced', 'baseline')


class ContentAnalysisPipeline:
    """Main pipeline for content analysis."""

    def __init__(
        self,
        config: Dict = None,
        event_bus: EventBus = None,
        clock: Callable[[], datetime] = None
    ):
        """Initialize the pipeline.

        Args:
            config: Configuration dictionary
            event_bus: Optional bus receiving alert events
            clock: Returns the current time (used for recency scoring)
        """
        self.config = config or {}
        self.event_bus = event_bus
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.logger = self._setup_logger()

        self.mode = self.config.get('scoring_mode', 'enhanced')
        if self.mode not in SCORING_MODES:
            raise ValueError(f"Unknown scoring mode: {self.mode}")

        self.last_alerts: List[AnalyzedAlert] = []
        self.target_language = self.config.get('target_language', 'en')
        self.high_urgency_threshold = self.config.get('high_urgency_threshold', UrgencyLevel.HIGH.value)

        # Initialize modules
        self.language_detector = LanguageDetector()
        self.summarizer = ContentSummarizer()
        self.duplicate_detector = DuplicateDetector(
            similarity_threshold=self.config.get('duplicate_threshold', 0.7)
        )

        if self.mode == 'baseline':
            self.sentiment_scorer = SentimentScorer.baseline()
            self.category_classifier = CategoryClassifier.baseline()
        else:
            self.sentiment_scorer = SentimentScorer()
            self.category_classifier = CategoryClassifier()

        self.urgency_calculator = UrgencyCalculator(config=self.config.get('urgency'))

        self.logger.info(f"Content Analysis Pipeline initialized ({self.mode} scoring)")

    def _setup_logger(self) -> logging.Logger:
        """Setup logger for pipeline."""
        logger = logging.getLogger('ContentAnalysisPipeline')
        logger.setLevel(logging.INFO)

        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        return logger

    @staticmethod
    def translate_content(content: str, target_language: str, source_language: str) -> str:
        """Placeholder translation.

        Marks the text with the language pair instead of translating it.
        """
        if source_language == target_language:
            return content
        return f"[Translated from {source_language} to {target_language}] {content}"

    def process_item(
        self,
        item: Item,
        target_language: str = None,
        existing_content: List[str] = None
    ) -> AnalyzedAlert:
        """Analyze a single item.

        Args:
            item: Collected item
            target_language: Language alerts should be presented in
            existing_content: Texts the item is checked against for duplicates

        Returns:
            AnalyzedAlert record
        """
        target_language = target_language or self.target_language
        existing_content = existing_content or []
        full_text = item.full_text

        language = self.language_detector.detect_language(full_text)
        summary = self.summarizer.generate_summary(item.content)

        duplicate_check = self.duplicate_detector.check_for_duplicates(full_text, existing_content)
        fingerprint = self.duplicate_detector.generate_fingerprint(full_text)

        sentiment = self.sentiment_scorer.analyze_sentiment(full_text)
        category = self.category_classifier.find_best_category(full_text)

        if self.mode == 'baseline':
            urgency = self.urgency_calculator.calculate_baseline_urgency(
                full_text, sentiment, category.matched_keywords
            )
        else:
            urgency = self.urgency_calculator.calculate_urgency(
                full_text, sentiment, category.matched_keywords, item.published_at, now=self.clock()
            )

        translated = None
        if language.language != target_language:
            translated = self.translate_content(item.content, target_language, language.language)

        return AnalyzedAlert(
            title=item.title,
            content=item.content,
            url=item.url,
            published_at=item.published_at,
            detected_language=language.language,
            language_confidence=language.confidence,
            language_alternatives=tuple(dict(a) for a in language.alternatives),
            sentiment_score=sentiment,
            category_id=category.category_id,
            category_confidence=category.confidence,
            keywords_matched=tuple(category.matched_keywords),
            alternative_categories=tuple(dict(a) for a in category.alternative_categories),
            urgency_level=urgency,
            summary=summary.summary,
            key_points=tuple(summary.key_points),
            reading_time=summary.reading_time,
            word_count=summary.word_count,
            is_duplicate=duplicate_check.is_duplicate,
            similarity_score=duplicate_check.similarity,
            content_fingerprint=fingerprint,
            translated_content=translated
        )

    def process_items(self, items: List[Item], target_language: str = None) -> List[AnalyzedAlert]:
        """Analyze items in order with duplicate detection across the batch.

        Each item is checked only against the items before it.

        Args:
            items: Collected items
            target_language: Language alerts should be presented in

        Returns:
            List of AnalyzedAlert records in input order
        """
        self.logger.info(f"Processing {len(items)} items")
        start_time = datetime.now()

        processed = []
        existing_content = []

        for item in items:
            alert = self.process_item(item, target_language, existing_content)
            existing_content.append(item.full_text)
            processed.append(alert)
            self._emit(alert)

        self.last_alerts = processed
        duration = (datetime.now() - start_time).total_seconds()
        duplicates = sum(1 for a in processed if a.is_duplicate)
        self.logger.info(
            f"Processed {len(processed)} items in {duration:.2f} seconds ({duplicates} duplicates)"
        )

        return processed

    def _emit(self, alert: AnalyzedAlert):
        if self.event_bus is None:
            return

        self.event_bus.emit(AlertEvent(ALERT_PROCESSED, alert))
        if alert.urgency_level >= self.high_urgency_threshold and not alert.is_duplicate:
            self.event_bus.emit(AlertEvent(HIGH_URGENCY_ALERT, alert))

    def detect_duplicates(
        self,
        alerts: List[AnalyzedAlert],
        threshold: float = None
    ) -> List[Tuple[int, int, float]]:
        """Find similar alert pairs by position in the list."""
        documents = [(i, f"{a.title} {a.content}") for i, a in enumerate(alerts)]
        duplicates = self.duplicate_detector.find_duplicates(documents, threshold)
        self.logger.info(f"Found {len(duplicates)} duplicate pairs")
        return duplicates

    def compute_statistics(self, alerts: List[AnalyzedAlert]) -> Dict:
        """Compute summary statistics."""
        stats = {
            'total_alerts': len(alerts),
            'duplicates': sum(1 for a in alerts if a.is_duplicate),
            'average_sentiment': 0.0,
            'urgency_distribution': {level.name: 0 for level in UrgencyLevel},
            'category_distribution': dict(Counter(a.category_id for a in alerts)),
            'languages': dict(Counter(a.detected_language for a in alerts)),
        }

        if alerts:
            stats['average_sentiment'] = sum(a.sentiment_score for a in alerts) / len(alerts)

        for alert in alerts:
            stats['urgency_distribution'][UrgencyLevel.from_value(alert.urgency_level).name] += 1

        return stats

    def save_results(
        self,
        alerts: List[AnalyzedAlert],
        output_path: str = 'pipeline_results.json',
        statistics: Optional[Dict] = None
    ):
        """Save alerts to a JSON file.

        Args:
            alerts: Alerts from process_items()
            output_path: Output file path
            statistics: Optional statistics to include
        """
        results = {
            'metadata': {
                'timestamp': self.clock().isoformat(),
                'total_alerts': len(alerts),
                'scoring_mode': self.mode,
            },
            'statistics': statistics or self.compute_statistics(alerts),
            'alerts': [alert.to_dict() for alert in alerts],
        }

        try:
            with open(output_path, 'w') as f:
                json.dump(results, f, indent=2)
            self.logger.info(f"Results saved to {output_path}")
        except OSError as e:
            self.logger.error(f"Error saving results: {e}")
