"""Export alerts to CSV, JSON and HTML."""

import html
import json
from collections import Counter
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Dict, List, Optional

import pandas as pd

from .category_classifier import Category

ALL_FIELDS = [
    'id', 'title', 'content', 'category', 'urgency_level', 'sentiment_score',
    'keywords_matched', 'url', 'published_at', 'created_at', 'is_read', 'is_archived',
]

URGENCY_CLASSES = ['info', 'low', 'medium', 'high', 'critical']


class ExportError(Exception):
    """Raised when an export cannot be produced."""
    pass


@dataclass
class ExportOptions:
    """Export settings.

    filters accepts category_id, urgency_level (minimum), is_read and
    date_range as a (start, end) pair of datetimes.
    """
    format: str = 'json'
    filters: Dict = field(default_factory=dict)
    fields: Optional[List[str]] = None
    include_analytics: bool = False


@dataclass
class ExportResult:
    filename: str
    data: str
    mime_type: str
    size: int


def _parse_time(value) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class ExportService:
    """Format alerts for download."""

    def __init__(self, clock=None):
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def _filename(self, prefix: str, extension: str) -> str:
        return f"{prefix}-{self.clock().date().isoformat()}.{extension}"

    @staticmethod
    def _result(filename: str, data: str, mime_type: str) -> ExportResult:
        return ExportResult(filename, data, mime_type, len(data.encode('utf-8')))

    @staticmethod
    def apply_filters(alerts: List[Dict], filters: Dict = None) -> List[Dict]:
        """Keep alerts matching every given filter."""
        if not filters:
            return list(alerts)

        filtered = []
        for alert in alerts:
            if filters.get('category_id') and alert.get('category_id') != filters['category_id']:
                continue
            if filters.get('urgency_level') and alert.get('urgency_level', 0) < filters['urgency_level']:
                continue
            if filters.get('is_read') is not None and bool(alert.get('is_read')) != filters['is_read']:
                continue
            if filters.get('date_range'):
                start, end = (_parse_time(v) for v in filters['date_range'])
                published = _parse_time(alert['published_at'])
                if published < start or published > end:
                    continue
            filtered.append(alert)

        return filtered

    def export_to_csv(self, alerts: List[Dict], categories: List[Category], options: ExportOptions) -> ExportResult:
        category_names = {c.id: c.name for c in categories}
        fields = options.fields or ALL_FIELDS

        rows = []
        for alert in alerts:
            row = dict(alert)
            row['category'] = category_names.get(alert.get('category_id'), 'Unknown')
            row['keywords_matched'] = '; '.join(alert.get('keywords_matched') or [])
            for text_field in ('title', 'content'):
                if row.get(text_field):
                    row[text_field] = row[text_field].replace('\n', ' ')
            rows.append(row)

        frame = pd.DataFrame(rows).reindex(columns=fields)
        data = frame.to_csv(index=False)

        return self._result(self._filename('alerts-export', 'csv'), data, 'text/csv')

    def export_to_json(self, alerts: List[Dict], categories: List[Category], options: ExportOptions) -> ExportResult:
        category_map = {c.id: asdict(c) for c in categories}

        metadata = {
            'exportDate': self.clock().isoformat(),
            'totalAlerts': len(alerts),
            'filters': options.filters,
            'version': '1.0',
        }
        if options.include_analytics:
            metadata['analytics'] = self.generate_analytics(alerts, categories)

        export_data = {
            'metadata': metadata,
            'categories': list(category_map.values()),
            'alerts': [
                {**alert, 'category': category_map.get(alert.get('category_id'))}
                for alert in alerts
            ],
        }

        data = json.dumps(export_data, indent=2, default=str)
        return self._result(self._filename('alerts-export', 'json'), data, 'application/json')

    def export_to_html(self, alerts: List[Dict], categories: List[Category], options: ExportOptions) -> ExportResult:
        category_names = {c.id: c.name for c in categories}
        sections = []

        for alert in alerts:
            level = alert.get('urgency_level', 1)
            css_class = URGENCY_CLASSES[level - 1] if 1 <= level <= 5 else 'info'
            keywords = alert.get('keywords_matched') or []

            parts = [
                f'<div class="alert {css_class}">',
                f'<h3>{html.escape(alert.get("title", ""))}</h3>',
                '<div class="meta">Category: {} | Urgency: {}/5 | Date: {}</div>'.format(
                    html.escape(category_names.get(alert.get('category_id'), 'Unknown')),
                    level,
                    html.escape(str(alert.get('published_at', '')))
                ),
                f'<p>{html.escape(alert.get("content", ""))}</p>',
            ]
            if keywords:
                parts.append(f'<div class="keywords">Keywords: {html.escape(", ".join(keywords))}</div>')
            if alert.get('url'):
                parts.append(f'<p><a href="{html.escape(alert["url"])}">Source Link</a></p>')
            parts.append('</div>')
            sections.append('\n'.join(parts))

        data = '\n'.join([
            '<!DOCTYPE html>',
            '<html>',
            '<head><title>Alerts Report</title></head>',
            '<body>',
            '<div class="header">',
            '<h1>Alerts Report</h1>',
            f'<p>Generated on: {self.clock().isoformat()}</p>',
            f'<p>Total Alerts: {len(alerts)}</p>',
            '</div>',
            *sections,
            '</body>',
            '</html>',
        ])

        return self._result(self._filename('alerts-report', 'html'), data, 'text/html')

    @staticmethod
    def generate_analytics(alerts: List[Dict], categories: List[Category], top_keywords: int = 10) -> Dict:
        """Summary statistics for an alert set."""
        urgency_counts = Counter(a.get('urgency_level') for a in alerts)
        category_counts = Counter(a.get('category_id') for a in alerts)
        keyword_counts = Counter(kw for a in alerts for kw in (a.get('keywords_matched') or []))

        return {
            'totalAlerts': len(alerts),
            'urgencyDistribution': {
                name: urgency_counts.get(level, 0)
                for level, name in zip(range(5, 0, -1), reversed(URGENCY_CLASSES))
            },
            'categoryDistribution': [
                {'name': c.name, 'count': category_counts.get(c.id, 0)} for c in categories
            ],
            'readStatus': {
                'read': sum(1 for a in alerts if a.get('is_read')),
                'unread': sum(1 for a in alerts if not a.get('is_read')),
            },
            'averageSentiment': (
                sum(a.get('sentiment_score') or 0 for a in alerts) / len(alerts) if alerts else 0.0
            ),
            'topKeywords': [
                {'keyword': kw, 'count': count} for kw, count in keyword_counts.most_common(top_keywords)
            ],
        }

    def export_alerts(self, alerts: List[Dict], categories: List[Category], options: ExportOptions) -> ExportResult:
        """Filter alerts and export them in the requested format.

        Raises:
            ExportError: For unsupported formats
        """
        filtered = self.apply_filters(alerts, options.filters)

        exporters = {
            'csv': self.export_to_csv,
            'json': self.export_to_json,
            'html': self.export_to_html,
        }
        exporter = exporters.get(options.format)
        if exporter is None:
            raise ExportError(f"Unsupported export format: {options.format}")

        return exporter(filtered, categories, options)
