from __future__ import annotations

import logging
from typing import Optional

from prometheus_client import Counter, Gauge

logger = logging.getLogger(__name__)

REQUESTS_SENT = Counter("mptrack_requests_sent", "Requests sent to Mixpanel", ["endpoint"])
REQUESTS_COMPLETED = Counter(
    "mptrack_requests_completed", "Requests finished, by outcome", ["endpoint", "status"]
)
REQUEST_DURATION = Gauge(
    "mptrack_request_duration_seconds", "Duration of the last request", ["endpoint"]
)


def track_request(endpoint: str) -> None:
    logger.debug("prometheus track_request %s", endpoint)
    REQUESTS_SENT.labels(endpoint).inc()


def track_response(endpoint: str, status: str, duration: Optional[float] = None) -> None:
    logger.debug("prometheus track_response %s status=%s duration=%s", endpoint, status, duration)
    REQUESTS_COMPLETED.labels(endpoint, status).inc()
    if duration is not None:
        REQUEST_DURATION.labels(endpoint).set(duration)
