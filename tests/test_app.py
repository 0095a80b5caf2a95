"""Tests for the application context."""

import asyncio
import json
import pytest
from datetime import timedelta

from alert_pipeline.app import AlertSystem
from alert_pipeline.events import NEW_ALERTS
from alert_pipeline.export import ExportOptions
from alert_pipeline.scheduler import TaskStatus


class MutableClock:
    """Clock that can be moved forward."""

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def system(test_config, clock):
    """Alert system with a fixed clock."""
    alert_system = AlertSystem(config=test_config, clock=clock)
    yield alert_system
    alert_system.store.close()


class TestAlertSystem:
    """Test AlertSystem class."""

    def test_tasks_registered(self, system):
        """Test configured tasks are scheduled."""
        assert [t.id for t in system.scheduler.get_tasks()] == ['data-collection', 'cleanup']
        assert system.scheduler.get_interval('cleanup') == 24 * 60 * 60

    def test_unknown_task(self, test_config):
        """Test tasks without a handler are rejected."""
        test_config['scheduler']['tasks'] = [{'id': 'mystery', 'schedule': '0 * * * *'}]
        with pytest.raises(ValueError):
            AlertSystem(config=test_config)

    def test_collection_cycle(self, system):
        """Test a cycle collects, stores and queues notifications."""
        result = system.run_collection_cycle()

        assert result.success
        assert system.store.count() == 4
        assert sum(1 for a in system.pipeline.last_alerts if a.is_duplicate) == 2
        assert system.notifications.get_queue_status()['priority_breakdown']['high'] == 1

        metrics = system.monitor.get_metrics()
        assert metrics[-1].alerts_processed == 4
        assert metrics[-1].error_rate == 0.0

    def test_second_cycle_skips_seen_items(self, system):
        """Test items are only collected once."""
        system.run_collection_cycle()
        result = system.run_collection_cycle()

        assert result.success
        assert system.store.count() == 4

    def test_failed_sources(self, test_config, clock):
        """Test a cycle where every source fails."""
        test_config['sources'] = [{'id': 9, 'name': 'Mail', 'url': 'imap://x', 'type': 'imap'}]
        system = AlertSystem(config=test_config, clock=clock)
        result = system.run_collection_cycle()

        assert not result.success
        assert system.monitor.get_metrics()[-1].error_rate == 1.0

    def test_cleanup(self, test_config, now):
        """Test retention cleanup."""
        clock = MutableClock(now)
        system = AlertSystem(config=test_config, clock=clock)
        system.run_collection_cycle()

        assert system.run_cleanup().message == 'Deleted 0 alerts'

        clock.now = now + timedelta(days=31)
        system.run_cleanup()
        assert system.store.count() == 0

    def test_poll_new_alerts(self, system):
        """Test polling announces each alert once."""
        announced = []
        system.event_bus.subscribe(NEW_ALERTS, announced.append)

        assert system.poll_new_alerts() == []
        system.run_collection_cycle()

        assert len(system.poll_new_alerts()) == 4
        assert system.poll_new_alerts() == []
        assert len(announced) == 1
        assert system.last_seen_alert_id == 4

    def test_scheduled_collection(self, system):
        """Test running the collection task through the scheduler."""
        result = asyncio.run(system.scheduler.run_task_now('data-collection'))

        assert result.success
        assert result.message == 'Collected 4 alerts from 2/2 sources'
        assert system.scheduler.get_task('data-collection').error_count == 0

    def test_check_health(self, system):
        """Test health probes."""
        status = asyncio.run(system.check_health())

        assert status['overall'] == 'healthy'
        assert {s.service for s in status['services']} == {'database', 'notification-queue', 'scheduler'}

    def test_check_health_task_error(self, system):
        """Test a task in error degrades health."""
        system.scheduler.get_task('cleanup').status = TaskStatus.ERROR
        status = asyncio.run(system.check_health())

        assert status['overall'] == 'warning'

    def test_export(self, system):
        """Test exporting stored alerts."""
        system.run_collection_cycle()
        result = system.export(ExportOptions(format='json', filters={'urgency_level': 5}))

        data = json.loads(result.data)
        assert data['metadata']['totalAlerts'] == 2
        assert all(a['category']['name'] == 'Security' for a in data['alerts'])

    def test_start_and_stop(self, test_config, clock):
        """Test background tasks start and stop cleanly."""
        sent = []

        async def sender(notification):
            sent.append(notification.subject)

        test_config['notifications']['drain_interval'] = 0.01
        system = AlertSystem(config=test_config, clock=clock, sender=sender)
        system.run_collection_cycle()

        async def run():
            system.start()
            await asyncio.sleep(0.1)
            await system.stop()

        asyncio.run(run())

        assert len(sent) == 1
        assert sent[0].startswith('Critical Alert:')
