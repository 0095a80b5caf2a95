"""Tests for the notification queue."""

import asyncio

from alert_pipeline.events import EventBus
from alert_pipeline.notifications import (
    NotificationQueue, Notification, Priority, render_template, subscribe_high_urgency
)
from alert_pipeline.pipeline import ContentAnalysisPipeline


def note(subject, priority=Priority.NORMAL):
    return Notification(['ops@example.com'], subject, 'body', priority)


class RecordingSender:
    """Async sender that records subjects and fails on request."""

    def __init__(self, fail_on=()):
        self.sent = []
        self.fail_on = set(fail_on)

    async def __call__(self, notification):
        if notification.subject in self.fail_on:
            raise ConnectionError("smtp down")
        self.sent.append(notification.subject)


class TestRenderTemplate:
    """Test template rendering."""

    def test_substitution(self):
        """Test known placeholders are replaced."""
        assert render_template('Hi {{name}}, {{count}} new', {'name': 'Ana', 'count': 3}) == 'Hi Ana, 3 new'

    def test_unknown_placeholder_kept(self):
        """Test unresolved placeholders stay verbatim."""
        assert render_template('{{title}} in {{category}}', {'title': 'Breach'}) == 'Breach in {{category}}'


class TestNotificationQueue:
    """Test NotificationQueue class."""

    def test_default_templates(self):
        """Test built-in templates."""
        queue = NotificationQueue()
        assert {t.id for t in queue.get_templates()} == {'critical-alert', 'daily-summary', 'system-health'}

    def test_enqueue_from_template(self):
        """Test rendering a template into the queue."""
        queue = NotificationQueue()
        queue.enqueue_from_template('critical-alert', ['a@example.com'], {'title': 'Breach'}, priority='high')

        status = queue.get_queue_status()
        assert status['size'] == 1
        assert status['priority_breakdown'] == {'high': 1, 'normal': 0, 'low': 0}

    def test_unknown_template(self):
        """Test unknown templates queue nothing."""
        queue = NotificationQueue()
        queue.enqueue_from_template('missing', ['a@example.com'], {})
        assert queue.get_queue_status()['size'] == 0

    def test_priority_order(self):
        """Test high priority is sent first, ties keep queue order."""
        sender = RecordingSender()
        queue = NotificationQueue(sender=sender)
        queue.enqueue(note('l1', Priority.LOW))
        queue.enqueue(note('n1'))
        queue.enqueue(note('h1', Priority.HIGH))
        queue.enqueue(note('l2', Priority.LOW))
        queue.enqueue(note('h2', Priority.HIGH))

        assert asyncio.run(queue.process_batch()) == 5
        assert sender.sent == ['h1', 'h2', 'n1', 'l1', 'l2']

    def test_batch_size(self):
        """Test one cycle sends at most batch_size notifications."""
        sender = RecordingSender()
        queue = NotificationQueue(sender=sender, batch_size=5)
        for i in range(7):
            queue.enqueue(note(f'n{i}'))

        assert asyncio.run(queue.process_batch()) == 5
        assert queue.get_queue_status()['size'] == 2
        assert queue.sent_count == 5

    def test_failed_send_is_dropped(self):
        """Test a failed notification is not retried."""
        sender = RecordingSender(fail_on={'bad'})
        queue = NotificationQueue(sender=sender)
        for subject in ('ok1', 'bad', 'ok2'):
            queue.enqueue(note(subject))

        asyncio.run(queue.process_batch())

        assert sender.sent == ['ok1', 'ok2']
        assert queue.failed_count == 1
        assert queue.get_queue_status()['size'] == 0

    def test_empty_queue(self):
        """Test draining an empty queue."""
        queue = NotificationQueue()
        assert asyncio.run(queue.process_batch()) == 0

    def test_concurrent_cycle_is_skipped(self):
        """Test a second cycle does nothing while one is running."""
        sent = []

        async def run():
            release = asyncio.Event()

            async def sender(notification):
                await release.wait()
                sent.append(notification.subject)

            queue = NotificationQueue(sender=sender)
            queue.enqueue(note('first'))

            first = asyncio.ensure_future(queue.process_batch())
            await asyncio.sleep(0)
            assert queue.is_processing

            queue.enqueue(note('late'))
            assert await queue.process_batch() == 0

            release.set()
            assert await first == 1
            return queue

        queue = asyncio.run(run())

        assert sent == ['first']
        assert not queue.is_processing
        assert queue.get_queue_status()['size'] == 1

    def test_drain_loop(self):
        """Test the periodic drain empties the queue."""
        queue = NotificationQueue(drain_interval=0.01, send_delay=0)
        for i in range(7):
            queue.enqueue(note(f'n{i}'))

        async def run():
            queue.start()
            await asyncio.sleep(0.2)
            await queue.stop()

        asyncio.run(run())

        assert queue.sent_count == 7
        assert queue.get_queue_status()['size'] == 0


class TestHighUrgencySubscription:
    """Test wiring high urgency events to notifications."""

    def test_critical_alert_queued(self, clock, security_item, calm_item):
        """Test only high urgency alerts are queued."""
        bus = EventBus()
        queue = NotificationQueue()
        subscribe_high_urgency(bus, queue, ['oncall@example.com'], {2: 'Security'})

        pipeline = ContentAnalysisPipeline(event_bus=bus, clock=clock)
        pipeline.process_items([security_item, calm_item])

        assert queue.get_queue_status()['priority_breakdown']['high'] == 1

        sender = RecordingSender()
        queue.sender = sender
        asyncio.run(queue.process_batch())
        assert sender.sent == [f"Critical Alert: {security_item.title}"]
