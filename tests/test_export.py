"""Tests for alert export."""

import io
import json
import pytest
import pandas as pd
from datetime import datetime, timezone

from alert_pipeline.category_classifier import DEFAULT_CATEGORIES
from alert_pipeline.export import ExportService, ExportOptions, ExportError, ALL_FIELDS


class TestExportService:
    """Test ExportService class."""

    def test_json_export(self, clock, sample_alert_records):
        """Test JSON export keeps every alert and its category."""
        service = ExportService(clock=clock)
        result = service.export_alerts(sample_alert_records, DEFAULT_CATEGORIES, ExportOptions(format='json'))

        data = json.loads(result.data)
        assert result.mime_type == 'application/json'
        assert result.filename == 'alerts-export-2026-10-17.json'
        assert data['metadata']['totalAlerts'] == 3
        assert len(data['alerts']) == 3
        assert [a['category']['name'] for a in data['alerts']] == ['Security', 'Technology', 'Security']
        assert len(data['categories']) == 5

    def test_csv_export(self, clock, sample_alert_records):
        """Test CSV export parses back to the same alerts."""
        service = ExportService(clock=clock)
        result = service.export_alerts(sample_alert_records, DEFAULT_CATEGORIES, ExportOptions(format='csv'))

        frame = pd.read_csv(io.StringIO(result.data))
        assert result.mime_type == 'text/csv'
        assert list(frame.columns) == ALL_FIELDS
        assert len(frame) == 3
        assert list(frame['category']) == ['Security', 'Technology', 'Security']
        assert frame['content'][0] == 'Systems were encrypted, "all" services down'
        assert frame['content'][1] == 'A machine learning breakthrough. More to follow.'
        assert frame['keywords_matched'][0] == 'ransomware; breach'

    def test_csv_selected_fields(self, clock, sample_alert_records):
        """Test exporting a subset of columns."""
        service = ExportService(clock=clock)
        options = ExportOptions(format='csv', fields=['id', 'title'])
        result = service.export_alerts(sample_alert_records, DEFAULT_CATEGORIES, options)

        assert result.data.splitlines()[0] == 'id,title'

    def test_html_export(self, clock, sample_alert_records):
        """Test HTML export escapes text."""
        sample_alert_records[0]['title'] = '<script>alert(1)</script>'
        service = ExportService(clock=clock)
        result = service.export_alerts(sample_alert_records, DEFAULT_CATEGORIES, ExportOptions(format='html'))

        assert result.mime_type == 'text/html'
        assert '<script>' not in result.data
        assert '&lt;script&gt;' in result.data
        assert 'class="alert critical"' in result.data
        assert 'Total Alerts: 3' in result.data

    def test_unsupported_format(self, sample_alert_records):
        """Test unknown formats raise."""
        service = ExportService()
        with pytest.raises(ExportError):
            service.export_alerts(sample_alert_records, DEFAULT_CATEGORIES, ExportOptions(format='pdf'))

    @pytest.mark.parametrize("filters,expected", [
        ({'category_id': 2}, [1, 3]),
        ({'urgency_level': 4}, [1]),
        ({'is_read': False}, [1, 3]),
        ({'date_range': (datetime(2026, 10, 15, tzinfo=timezone.utc),
                         datetime(2026, 10, 18, tzinfo=timezone.utc))}, [1, 2]),
        ({}, [1, 2, 3]),
    ])
    def test_apply_filters(self, sample_alert_records, filters, expected):
        """Test export filters."""
        filtered = ExportService.apply_filters(sample_alert_records, filters)
        assert [a['id'] for a in filtered] == expected

    def test_analytics(self, clock, sample_alert_records):
        """Test analytics included in JSON metadata."""
        service = ExportService(clock=clock)
        options = ExportOptions(format='json', include_analytics=True)
        data = json.loads(service.export_alerts(sample_alert_records, DEFAULT_CATEGORIES, options).data)

        analytics = data['metadata']['analytics']
        assert analytics['urgencyDistribution'] == {
            'critical': 1, 'high': 0, 'medium': 1, 'low': 1, 'info': 0
        }
        assert analytics['readStatus'] == {'read': 1, 'unread': 2}
        assert analytics['categoryDistribution'][1] == {'name': 'Security', 'count': 2}
        assert analytics['averageSentiment'] == pytest.approx(-0.4 / 3)
