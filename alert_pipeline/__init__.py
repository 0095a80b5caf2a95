"""Alert Analysis Pipeline.

A system for turning collected text items into ranked alerts including:
- Language detection
- Extractive summarization
- Duplicate detection
- Sentiment, category and urgency scoring
- Scheduled background tasks
- Batched notifications and health monitoring
"""

from .models import Item, AnalyzedAlert
from .language_detector import LanguageDetector
from .summarizer import ContentSummarizer
from .duplicate_detector import DuplicateDetector
from .sentiment_scorer import SentimentScorer
from .category_classifier import CategoryClassifier, Category, DEFAULT_CATEGORIES
from .urgency_calculator import UrgencyCalculator, UrgencyLevel
from .pipeline import ContentAnalysisPipeline
from .events import EventBus, AlertEvent
from .scheduler import TaskScheduler, ScheduledTask, TaskRunResult, TaskStatus
from .notifications import NotificationQueue, Notification, Priority
from .monitor import SystemMonitor, HealthCheck, HealthStatus
from .app import AlertSystem

__version__ = '1.0.0'

__all__ = [
    'Item',
    'AnalyzedAlert',
    'LanguageDetector',
    'ContentSummarizer',
    'DuplicateDetector',
    'SentimentScorer',
    'CategoryClassifier',
    'Category',
    'DEFAULT_CATEGORIES',
    'UrgencyCalculator',
    'UrgencyLevel',
    'ContentAnalysisPipeline',
    'EventBus',
    'AlertEvent',
    'TaskScheduler',
    'ScheduledTask',
    'TaskRunResult',
    'TaskStatus',
    'NotificationQueue',
    'Notification',
    'Priority',
    'SystemMonitor',
    'HealthCheck',
    'HealthStatus',
    'AlertSystem',
]
