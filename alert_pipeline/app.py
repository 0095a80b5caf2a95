"""Application context wiring every component together.

Components are built once per AlertSystem and shared through it; nothing
is kept in module-level globals.
"""

import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

from .collector import DataCollector, Source
from .config import load_config
from .events import EventBus, AlertEvent, NEW_ALERTS
from .export import ExportOptions, ExportResult, ExportService
from .monitor import SystemMonitor
from .notifications import NotificationQueue, Sender, subscribe_high_urgency
from .pipeline import ContentAnalysisPipeline
from .scheduler import ScheduledTask, TaskRunResult, TaskScheduler, TaskStatus
from .store import AlertStore

logger = logging.getLogger(__name__)


class AlertSystem:
    """Collect, analyze, store and notify on a schedule."""

    def __init__(
        self,
        config: Dict = None,
        clock: Callable[[], datetime] = None,
        sender: Sender = None
    ):
        """Build all components.

        Args:
            config: Configuration (defaults from load_config())
            clock: Returns the current time
            sender: Notification sender (simulated if None)
        """
        self.config = config or load_config()
        self.clock = clock or (lambda: datetime.now(timezone.utc))

        notification_config = self.config.get('notifications', {})
        scheduler_config = self.config.get('scheduler', {})

        self.event_bus = EventBus()
        self.pipeline = ContentAnalysisPipeline(self.config, event_bus=self.event_bus, clock=self.clock)
        self.store = AlertStore(self.config.get('database', {}).get('path', ':memory:'))
        self.collector = DataCollector(clock=self.clock)
        self.scheduler = TaskScheduler(
            strict_schedules=scheduler_config.get('strict_schedules', False),
            clock=self.clock
        )
        self.notifications = NotificationQueue(
            sender=sender,
            batch_size=notification_config.get('batch_size', 5),
            drain_interval=notification_config.get('drain_interval', 5.0),
            send_delay=notification_config.get('send_delay', 1.0)
        )
        self.monitor = SystemMonitor()
        self.exporter = ExportService(clock=self.clock)

        self.sources = [Source(**source) for source in self.config.get('sources', [])]
        self.last_collected_at: Optional[datetime] = None
        self.last_seen_alert_id = 0

        recipients = notification_config.get('recipients') or []
        if recipients:
            subscribe_high_urgency(
                self.event_bus,
                self.notifications,
                recipients,
                {c.id: c.name for c in self.store.get_categories()}
            )

        self._register_tasks(scheduler_config.get('tasks', []))

    def _register_tasks(self, task_configs: List[Dict]):
        handlers = {
            'data-collection': self.run_collection_cycle,
            'cleanup': self.run_cleanup,
            'alert-poll': self._run_poll,
        }

        for task_config in task_configs:
            handler = handlers.get(task_config['id'])
            if handler is None:
                raise ValueError(f"No handler for task {task_config['id']}")

            self.scheduler.add_task(
                ScheduledTask(
                    id=task_config['id'],
                    name=task_config.get('name', task_config['id']),
                    schedule=task_config['schedule'],
                    max_retries=task_config.get('max_retries', 3)
                ),
                handler
            )

    def run_collection_cycle(self) -> TaskRunResult:
        """Collect from active sources, analyze and store the alerts.

        Runs synchronously, so as a scheduled task it blocks the event loop
        for the length of the cycle.
        """
        start = time.monotonic()
        now = self.clock()

        active = [s for s in self.sources if s.status == 'active']
        results = self.collector.collect_from_all_sources(active, since=self.last_collected_at)

        items = [item for result in results if result.success for item in result.items]
        failures = sum(1 for result in results if not result.success)

        alerts = self.pipeline.process_items(items)
        self.store.add_alerts(alerts, created_at=now)
        self.last_collected_at = now

        duration = time.monotonic() - start
        self.monitor.record_metrics(
            alerts_processed=len(alerts),
            average_processing_time=duration / len(alerts) if alerts else 0.0,
            error_rate=failures / len(active) if active else 0.0,
            queue_size=self.notifications.get_queue_status()['size']
        )

        successes = len(results) - failures
        logger.info("Collection cycle stored %d alerts in %.2f seconds", len(alerts), duration)
        return TaskRunResult(
            success=successes > 0,
            message=f"Collected {len(alerts)} alerts from {successes}/{len(active)} sources"
        )

    def run_cleanup(self) -> TaskRunResult:
        """Delete alerts older than the retention period."""
        cutoff = self.clock() - timedelta(days=self.config.get('retention_days', 30))
        deleted = self.store.delete_older_than(cutoff)
        return TaskRunResult(success=True, message=f"Deleted {deleted} alerts")

    def poll_new_alerts(self) -> List[Dict]:
        """Fetch alerts stored since the last poll and announce them."""
        alerts, self.last_seen_alert_id = self.store.fetch_since(self.last_seen_alert_id)
        if alerts:
            self.event_bus.emit(AlertEvent(NEW_ALERTS, alerts))
        return alerts

    def _run_poll(self) -> TaskRunResult:
        alerts = self.poll_new_alerts()
        return TaskRunResult(success=True, message=f"{len(alerts)} new alerts")

    async def check_health(self) -> Dict:
        """Probe the store, the notification queue and the scheduler."""
        def probe_store():
            return {'success': True, 'message': f"{self.store.count()} alerts stored"}

        def probe_queue():
            size = self.notifications.get_queue_status()['size']
            return {
                'success': size <= self.monitor.thresholds['queue_size'],
                'message': f"{size} notifications pending"
            }

        def probe_scheduler():
            failed = [t.id for t in self.scheduler.get_tasks() if t.status == TaskStatus.ERROR]
            if failed:
                return {'success': False, 'message': f"Tasks in error: {', '.join(failed)}"}
            return {'success': True, 'message': 'All tasks healthy'}

        await self.monitor.perform_health_check('database', probe_store)
        await self.monitor.perform_health_check('notification-queue', probe_queue)
        await self.monitor.perform_health_check('scheduler', probe_scheduler)

        return self.monitor.get_system_status()

    def export(self, options: ExportOptions) -> ExportResult:
        return self.exporter.export_alerts(
            self.store.get_alerts(), self.store.get_categories(), options
        )

    def start(self):
        """Start scheduled tasks and the notification drain loop."""
        self.scheduler.start()
        self.notifications.start()

    async def stop(self):
        """Stop timers and wait for in-flight work to finish."""
        self.scheduler.stop_all()
        await self.scheduler.wait_stopped()
        await self.notifications.stop()

