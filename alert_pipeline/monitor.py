"""System monitoring and health checks."""

import inspect
import logging
import time
from collections import deque
from dataclasses import dataclass, field, asdict, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Awaitable, Callable, Deque, Dict, List, Optional, Union

import pandas as pd

logger = logging.getLogger(__name__)

METRICS_LIMIT = 1000


class HealthStatus(Enum):
    HEALTHY = 'healthy'
    WARNING = 'warning'
    CRITICAL = 'critical'


@dataclass
class SystemMetrics:
    """Snapshot of operational metrics."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    alerts_processed: int = 0
    average_processing_time: float = 0.0
    error_rate: float = 0.0
    memory_usage: float = 0.0
    active_connections: int = 0
    queue_size: int = 0


@dataclass
class HealthCheck:
    """Probe result for one service."""
    service: str
    status: HealthStatus
    message: str
    response_time: float
    timestamp: datetime


ProbeResult = Union[Dict, bool, None]
Probe = Callable[[], Union[ProbeResult, Awaitable[ProbeResult]]]


class SystemMonitor:
    """Record metrics and per-service health."""

    def __init__(self, thresholds: Dict = None):
        """Initialize the monitor.

        Args:
            thresholds: Overrides for error_rate, response_time (ms),
                memory_usage and queue_size thresholds
        """
        self.thresholds = {
            'error_rate': 0.1,
            'response_time': 5000,
            'memory_usage': 0.8,
            'queue_size': 1000,
        }
        self.thresholds.update(thresholds or {})

        self._metrics: Deque[SystemMetrics] = deque(maxlen=METRICS_LIMIT)
        self._health_checks: Dict[str, HealthCheck] = {}

    def record_metrics(self, metrics: Dict = None, **values) -> List[str]:
        """Record a metrics snapshot and check thresholds.

        Args:
            metrics: Partial metrics; missing fields default to zero
            **values: Metric fields given as keywords

        Returns:
            List of threshold warnings that were logged
        """
        values = {**(metrics or {}), **values}
        known = {f.name for f in fields(SystemMetrics)}
        unknown = set(values) - known
        if unknown:
            raise ValueError(f"Unknown metric fields: {', '.join(sorted(unknown))}")

        snapshot = SystemMetrics(**values)
        self._metrics.append(snapshot)

        return self._check_thresholds(snapshot)

    def _check_thresholds(self, metrics: SystemMetrics) -> List[str]:
        warnings = []

        if metrics.error_rate > self.thresholds['error_rate']:
            warnings.append(f"High error rate: {metrics.error_rate * 100:.1f}%")

        if metrics.memory_usage > self.thresholds['memory_usage']:
            warnings.append(f"High memory usage: {metrics.memory_usage * 100:.1f}%")

        if metrics.queue_size > self.thresholds['queue_size']:
            warnings.append(f"Large queue size: {metrics.queue_size} items")

        if warnings:
            logger.warning("System alerts: %s", '; '.join(warnings))

        return warnings

    async def perform_health_check(self, service: str, probe: Probe) -> HealthCheck:
        """Time a probe and store its health check.

        A probe returns {'success': bool, 'message': str} (or a bool). An
        unsuccessful probe is a warning, a raising probe is critical and a
        slow one is downgraded to a warning.

        Args:
            service: Service name; replaces any previous check for it
            probe: Sync or async callable

        Returns:
            The stored HealthCheck
        """
        start = time.monotonic()

        try:
            result = probe()
            if inspect.isawaitable(result):
                result = await result
            response_time = (time.monotonic() - start) * 1000

            if isinstance(result, dict):
                success = bool(result.get('success', True))
                message = result.get('message', '')
            else:
                success = result is None or bool(result)
                message = 'ok' if success else 'check failed'

            status = HealthStatus.HEALTHY if success else HealthStatus.WARNING

            if response_time > self.thresholds['response_time']:
                status = HealthStatus.WARNING
                message += f" (Slow response: {response_time:.0f}ms)"

        except Exception as e:
            response_time = (time.monotonic() - start) * 1000
            status = HealthStatus.CRITICAL
            message = str(e) or 'Health check failed'
            logger.error("Health check for %s failed: %s", service, message)

        check = HealthCheck(
            service=service,
            status=status,
            message=message,
            response_time=response_time,
            timestamp=datetime.now(timezone.utc)
        )
        self._health_checks[service] = check
        return check

    def get_metrics(self, limit: int = 100) -> List[SystemMetrics]:
        if limit <= 0:
            return []
        return list(self._metrics)[-limit:]

    def get_health_checks(self) -> List[HealthCheck]:
        return list(self._health_checks.values())

    def get_system_status(self) -> Dict:
        """Overall status: critical beats warning beats healthy."""
        services = self.get_health_checks()
        statuses = {s.status for s in services}

        if HealthStatus.CRITICAL in statuses:
            overall = HealthStatus.CRITICAL
        elif HealthStatus.WARNING in statuses:
            overall = HealthStatus.WARNING
        else:
            overall = HealthStatus.HEALTHY

        return {
            'overall': overall.value,
            'services': services,
            'metrics': self._metrics[-1] if self._metrics else None,
        }

    def metrics_frame(self, limit: Optional[int] = None) -> pd.DataFrame:
        """Recorded metrics as a DataFrame, oldest first."""
        snapshots = self.get_metrics(limit) if limit else list(self._metrics)
        columns = [f.name for f in fields(SystemMetrics)]
        return pd.DataFrame([asdict(m) for m in snapshots], columns=columns)

    def summarize_metrics(self) -> Dict[str, Dict[str, float]]:
        """Mean, min and max of each numeric metric."""
        frame = self.metrics_frame()
        if frame.empty:
            return {}

        numeric = frame.drop(columns=['timestamp'])
        summary = numeric.agg(['mean', 'min', 'max'])
        return {
            column: {stat: float(summary.loc[stat, column]) for stat in summary.index}
            for column in summary.columns
        }
