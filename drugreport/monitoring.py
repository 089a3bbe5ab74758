"""
Simple Monitoring for DrugReport

Tracks request counts, pipeline outcomes and response times in memory.
"""

import time
import logging
from typing import Dict, List, Any, Optional
from datetime import datetime
from collections import Counter, deque
import threading

logger = logging.getLogger(__name__)


class SimpleMonitor:
    """In-memory request metrics, shared by all requests of the process."""

    def __init__(self, history_size: int = 1000):
        self._lock = threading.Lock()
        self._history_size = history_size
        self._init_metrics()

    def _init_metrics(self):
        self.total_requests = 0
        self.successful_requests = 0
        self.failed_requests = 0
        self.outcomes = Counter()
        self.response_times = deque(maxlen=self._history_size)
        self.request_history = deque(maxlen=self._history_size)

    def record_request(self, success: bool, response_time_ms: float = 0.0, endpoint: str = "unknown",
                       query: Optional[str] = None, outcome: Optional[str] = None):
        """Record a request with its outcome and response time."""
        with self._lock:
            self.total_requests += 1
            if success:
                self.successful_requests += 1
            else:
                self.failed_requests += 1

            if outcome:
                self.outcomes[outcome] += 1

            if response_time_ms > 0:
                self.response_times.append(response_time_ms)

            self.request_history.append({
                'timestamp': time.time(),
                'success': success,
                'response_time_ms': response_time_ms,
                'endpoint': endpoint,
                'query': query,
                'outcome': outcome,
            })

    def get_metrics_summary(self) -> Dict[str, Any]:
        """Get a metrics summary."""
        with self._lock:
            success_rate = 0.0
            error_rate = 0.0
            if self.total_requests > 0:
                success_rate = (self.successful_requests / self.total_requests) * 100
                error_rate = (self.failed_requests / self.total_requests) * 100

            avg_response_time = 0.0
            if self.response_times:
                avg_response_time = sum(self.response_times) / len(self.response_times)

            return {
                'total_requests': self.total_requests,
                'successful_requests': self.successful_requests,
                'failed_requests': self.failed_requests,
                'success_rate': round(success_rate, 2),
                'error_rate': round(error_rate, 2),
                'average_response_time_ms': round(avg_response_time, 2),
                'outcomes': dict(self.outcomes),
            }

    def get_recent_requests(self, limit: int = 50) -> List[Dict[str, Any]]:
        """Get recent request history, newest last."""
        with self._lock:
            recent_requests = list(self.request_history)[-limit:]
        return [
            {
                **req,
                "time_formatted": datetime.fromtimestamp(req["timestamp"]).strftime("%I:%M:%S %p"),
            }
            for req in recent_requests
        ]

    def reset_metrics(self):
        """Reset all metrics (useful for testing)."""
        with self._lock:
            self._init_metrics()
        logger.info("Monitoring metrics reset")


# Global monitor instance
monitor = SimpleMonitor()
