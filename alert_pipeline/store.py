"""SQLite-backed alert storage.

Stands in for the production datastore. Alerts are stored as flat rows;
read/archive state lives here, not on the immutable AnalyzedAlert.
"""

import sqlite3
import json
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from .models import AnalyzedAlert
from .category_classifier import Category, DEFAULT_CATEGORIES

logger = logging.getLogger(__name__)

SCHEMA = """
    CREATE TABLE IF NOT EXISTS alerts (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        category_id INTEGER,
        title TEXT,
        content TEXT,
        translated_content TEXT,
        summary TEXT,
        key_points TEXT,
        sentiment_score REAL,
        urgency_level INTEGER,
        keywords_matched TEXT,
        detected_language TEXT,
        is_duplicate INTEGER,
        similarity_score REAL,
        content_fingerprint TEXT,
        word_count INTEGER,
        reading_time INTEGER,
        url TEXT,
        published_at TEXT,
        created_at TEXT,
        is_read INTEGER DEFAULT 0,
        is_archived INTEGER DEFAULT 0
    )
"""


def _utc_iso(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


class AlertStore:
    """Store and query analyzed alerts."""

    def __init__(self, db_path: str = ':memory:', categories: List[Category] = None):
        """Initialize the store.

        Args:
            db_path: Path to SQLite database (in-memory by default)
            categories: Known categories
        """
        self.db_path = db_path
        self.categories = categories or DEFAULT_CATEGORIES
        self.conn = sqlite3.connect(db_path)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute(SCHEMA)
        self.conn.commit()

    def close(self):
        self.conn.close()

    def add_alerts(self, alerts: List[AnalyzedAlert], created_at: datetime = None) -> List[int]:
        """Insert alerts.

        Args:
            alerts: Alerts to store
            created_at: Insert timestamp (defaults to now)

        Returns:
            Ids of the inserted rows
        """
        created = _utc_iso(created_at or datetime.now(timezone.utc))
        cursor = self.conn.cursor()
        ids = []

        for alert in alerts:
            cursor.execute("""
                INSERT INTO alerts
                (category_id, title, content, translated_content, summary, key_points,
                 sentiment_score, urgency_level, keywords_matched, detected_language,
                 is_duplicate, similarity_score, content_fingerprint, word_count,
                 reading_time, url, published_at, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                alert.category_id,
                alert.title,
                alert.content,
                alert.translated_content,
                alert.summary,
                json.dumps(alert.key_points),
                alert.sentiment_score,
                alert.urgency_level,
                json.dumps(alert.keywords_matched),
                alert.detected_language,
                int(alert.is_duplicate),
                alert.similarity_score,
                alert.content_fingerprint,
                alert.word_count,
                alert.reading_time,
                alert.url,
                _utc_iso(alert.published_at),
                created
            ))
            ids.append(cursor.lastrowid)

        self.conn.commit()
        logger.info("Stored %d alerts", len(ids))
        return ids

    @staticmethod
    def _to_dict(row: sqlite3.Row) -> Dict:
        record = dict(row)
        record['keywords_matched'] = json.loads(record['keywords_matched'] or '[]')
        record['key_points'] = json.loads(record['key_points'] or '[]')
        for flag in ('is_duplicate', 'is_read', 'is_archived'):
            record[flag] = bool(record[flag])
        return record

    def get_alerts(
        self,
        category_id: int = None,
        min_urgency: int = None,
        is_read: bool = None,
        include_archived: bool = True,
        limit: int = None
    ) -> List[Dict]:
        """Query alerts, newest id first.

        Args:
            category_id: Filter by category
            min_urgency: Minimum urgency level
            is_read: Filter by read state
            include_archived: Include archived alerts
            limit: Maximum number of alerts

        Returns:
            List of alert dictionaries
        """
        query = "SELECT * FROM alerts WHERE 1 = 1"
        params = []

        if category_id is not None:
            query += " AND category_id = ?"
            params.append(category_id)

        if min_urgency is not None:
            query += " AND urgency_level >= ?"
            params.append(min_urgency)

        if is_read is not None:
            query += " AND is_read = ?"
            params.append(int(is_read))

        if not include_archived:
            query += " AND is_archived = 0"

        query += " ORDER BY id DESC"

        if limit:
            query += " LIMIT ?"
            params.append(limit)

        rows = self.conn.execute(query, params).fetchall()
        return [self._to_dict(row) for row in rows]

    def fetch_since(self, last_id: Optional[int] = None) -> Tuple[List[Dict], int]:
        """Fetch alerts stored after a watermark.

        Args:
            last_id: Highest alert id already seen (None for all)

        Returns:
            Tuple of (new alerts oldest first, new watermark)
        """
        watermark = last_id or 0
        rows = self.conn.execute(
            "SELECT * FROM alerts WHERE id > ? ORDER BY id ASC", (watermark,)
        ).fetchall()

        alerts = [self._to_dict(row) for row in rows]
        if alerts:
            watermark = alerts[-1]['id']
        return alerts, watermark

    def mark_read(self, alert_id: int, is_read: bool = True) -> bool:
        cursor = self.conn.execute(
            "UPDATE alerts SET is_read = ? WHERE id = ?", (int(is_read), alert_id)
        )
        self.conn.commit()
        return cursor.rowcount > 0

    def archive(self, alert_id: int) -> bool:
        cursor = self.conn.execute("UPDATE alerts SET is_archived = 1 WHERE id = ?", (alert_id,))
        self.conn.commit()
        return cursor.rowcount > 0

    def delete_older_than(self, cutoff: datetime) -> int:
        """Delete alerts published before cutoff.

        Returns:
            Number of deleted alerts
        """
        cursor = self.conn.execute(
            "DELETE FROM alerts WHERE published_at < ?", (_utc_iso(cutoff),)
        )
        self.conn.commit()
        logger.info("Deleted %d alerts older than %s", cursor.rowcount, cutoff.isoformat())
        return cursor.rowcount

    def count(self) -> int:
        return self.conn.execute("SELECT COUNT(*) FROM alerts").fetchone()[0]

    def get_categories(self) -> List[Category]:
        return list(self.categories)
