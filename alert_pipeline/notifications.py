"""Notification Queue.

Accumulates outbound notifications and drains them in priority-sorted
batches on a fixed cadence. Delivery is best-effort and at most once: a
failed send is logged and dropped, never retried.
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional

from .events import AlertEvent, EventBus, HIGH_URGENCY_ALERT

logger = logging.getLogger(__name__)

PLACEHOLDER = re.compile(r'\{\{(\w+)\}\}')


class Priority(Enum):
    LOW = 'low'
    NORMAL = 'normal'
    HIGH = 'high'

    @property
    def rank(self) -> int:
        return {'low': 1, 'normal': 2, 'high': 3}[self.value]


@dataclass
class Notification:
    """An outbound message."""
    recipients: List[str]
    subject: str
    body: str
    priority: Priority = Priority.NORMAL
    alert_id: Optional[int] = None


@dataclass
class NotificationTemplate:
    """Message template with {{name}} placeholders."""
    id: str
    name: str
    subject: str
    body_template: str


DEFAULT_TEMPLATES = [
    NotificationTemplate(
        id='critical-alert',
        name='Critical Alert',
        subject='Critical Alert: {{title}}',
        body_template=(
            '<h2>Critical Alert Detected</h2>\n'
            '<p><strong>Title:</strong> {{title}}</p>\n'
            '<p><strong>Category:</strong> {{category}}</p>\n'
            '<p><strong>Urgency:</strong> {{urgency}}/5</p>\n'
            '<p><strong>Time:</strong> {{timestamp}}</p>\n'
            '<h3>Summary:</h3>\n<p>{{content}}</p>\n'
            '<h3>Keywords Matched:</h3>\n<ul>{{keywords}}</ul>\n'
            '<p><a href="{{url}}">View source</a></p>\n'
        ),
    ),
    NotificationTemplate(
        id='daily-summary',
        name='Daily Summary',
        subject='Daily Alert Summary - {{date}}',
        body_template=(
            '<h2>Daily Alert Summary</h2>\n'
            '<p><strong>Date:</strong> {{date}}</p>\n'
            '<ul>\n'
            '  <li>Total Alerts: {{totalAlerts}}</li>\n'
            '  <li>Critical Alerts: {{criticalAlerts}}</li>\n'
            '  <li>New Categories: {{newCategories}}</li>\n'
            '</ul>\n'
            '<h3>Top Alerts:</h3>\n{{topAlerts}}\n'
            '<p><a href="{{dashboardUrl}}">View Full Dashboard</a></p>\n'
        ),
    ),
    NotificationTemplate(
        id='system-health',
        name='System Health Alert',
        subject='System Health Alert',
        body_template=(
            '<h2>System Health Alert</h2>\n'
            '<p><strong>Status:</strong> {{status}}</p>\n'
            '<p><strong>Time:</strong> {{timestamp}}</p>\n'
            '<h3>Issues Detected:</h3>\n{{issues}}\n'
            '<ul>\n'
            '  <li>Error Rate: {{errorRate}}%</li>\n'
            '  <li>Memory Usage: {{memoryUsage}}%</li>\n'
            '  <li>Response Time: {{responseTime}}ms</li>\n'
            '</ul>\n'
        ),
    ),
]

Sender = Callable[[Notification], Awaitable[None]]


def render_template(template: str, variables: Dict[str, object]) -> str:
    """Substitute {{name}} placeholders; unknown names are left as is."""
    def replace(match):
        name = match.group(1)
        if name in variables:
            return str(variables[name])
        return match.group(0)

    return PLACEHOLDER.sub(replace, template)


class NotificationQueue:
    """Priority queue of outbound notifications with batched dispatch."""

    def __init__(
        self,
        sender: Sender = None,
        batch_size: int = 5,
        drain_interval: float = 5.0,
        send_delay: float = 1.0,
        templates: List[NotificationTemplate] = None
    ):
        """Initialize the queue.

        Args:
            sender: Coroutine delivering one notification (simulated if None)
            batch_size: Notifications dispatched per drain cycle
            drain_interval: Seconds between drain attempts
            send_delay: Simulated network delay of the default sender
            templates: Templates available to enqueue_from_template
        """
        self.sender = sender or self._simulated_send
        self.batch_size = batch_size
        self.drain_interval = drain_interval
        self.send_delay = send_delay

        self._queue: List[Notification] = []
        self._templates: Dict[str, NotificationTemplate] = {
            t.id: t for t in (templates or DEFAULT_TEMPLATES)
        }
        self._is_processing = False
        self._drain_task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None
        self.sent_count = 0
        self.failed_count = 0

    @property
    def is_processing(self) -> bool:
        return self._is_processing

    def enqueue(self, notification: Notification):
        self._queue.append(notification)
        logger.info("Notification queued: %s", notification.subject)

    def enqueue_from_template(
        self,
        template_id: str,
        recipients: List[str],
        variables: Dict[str, object],
        priority: Priority = Priority.NORMAL,
        alert_id: Optional[int] = None
    ):
        """Render a template and queue the result.

        Args:
            template_id: Id of a registered template
            recipients: Recipient addresses
            variables: Placeholder values
            priority: Priority (enum or its string value)
            alert_id: Optional alert reference
        """
        template = self._templates.get(template_id)
        if template is None:
            logger.error("Template not found: %s", template_id)
            return

        self.enqueue(Notification(
            recipients=list(recipients),
            subject=render_template(template.subject, variables),
            body=render_template(template.body_template, variables),
            priority=Priority(priority),
            alert_id=alert_id
        ))

    def get_templates(self) -> List[NotificationTemplate]:
        return list(self._templates.values())

    def get_queue_status(self) -> Dict:
        breakdown = {p.value: 0 for p in (Priority.HIGH, Priority.NORMAL, Priority.LOW)}
        for notification in self._queue:
            breakdown[notification.priority.value] += 1

        return {
            'size': len(self._queue),
            'is_processing': self._is_processing,
            'priority_breakdown': breakdown,
        }

    async def process_batch(self) -> int:
        """Run one drain cycle.

        Sorts the queue by priority, removes up to batch_size notifications
        and sends them one by one. Does nothing if a cycle is already
        running or the queue is empty.

        Returns:
            Number of notifications taken from the queue
        """
        if self._is_processing or not self._queue:
            return 0

        self._is_processing = True
        try:
            self._queue.sort(key=lambda n: n.priority.rank, reverse=True)
            batch = self._queue[:self.batch_size]
            del self._queue[:self.batch_size]

            for notification in batch:
                await self._dispatch(notification)

            return len(batch)
        finally:
            self._is_processing = False

    async def _dispatch(self, notification: Notification):
        try:
            await self.sender(notification)
            self.sent_count += 1
        except Exception:
            self.failed_count += 1
            logger.exception("Failed to send notification: %s", notification.subject)

    async def _simulated_send(self, notification: Notification):
        logger.info("Sending notification to %s: %s (%s)",
                    ', '.join(notification.recipients), notification.subject,
                    notification.priority.value)
        await asyncio.sleep(self.send_delay)
        logger.info("Notification sent: %s", notification.subject)

    def start(self):
        """Start the periodic drain loop. Must run inside an event loop."""
        if self._drain_task is not None and not self._drain_task.done():
            return
        self._stop_event = asyncio.Event()
        self._drain_task = asyncio.ensure_future(self._drain_loop(self._stop_event))

    async def _drain_loop(self, stop_event: asyncio.Event):
        while not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.drain_interval)
            except asyncio.TimeoutError:
                if not self._is_processing and self._queue:
                    await self.process_batch()

    async def stop(self):
        """Stop the drain loop after any running cycle completes."""
        if self._stop_event is not None:
            self._stop_event.set()
        if self._drain_task is not None:
            await self._drain_task
            self._drain_task = None


def subscribe_high_urgency(
    bus: EventBus,
    queue: NotificationQueue,
    recipients: List[str],
    category_names: Dict[int, str] = None
):
    """Queue a critical-alert notification for every high urgency event."""
    category_names = category_names or {}

    def on_high_urgency(event: AlertEvent):
        alert = event.alert
        queue.enqueue_from_template(
            'critical-alert',
            recipients,
            {
                'title': alert.title,
                'category': category_names.get(alert.category_id, 'Unknown'),
                'urgency': alert.urgency_level,
                'timestamp': event.timestamp.isoformat(),
                'content': alert.summary or alert.content,
                'keywords': ''.join(f'<li>{kw}</li>' for kw in alert.keywords_matched),
                'url': alert.url,
            },
            priority=Priority.HIGH
        )

    bus.subscribe(HIGH_URGENCY_ALERT, on_high_urgency)
    return on_high_urgency
