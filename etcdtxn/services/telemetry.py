"""Statsig events for adapter failures.

Events are keyed by cluster member so failure rates can be compared per node
while a nemesis is active. Without `statsig_server_secret` every call here is
a no-op.
"""
from __future__ import annotations

import logging
import threading
from typing import Any

from statsig.statsig_event import StatsigEvent
from statsig.statsig_options import StatsigOptions
from statsig.statsig_server import StatsigServer
from statsig.statsig_user import StatsigUser

from etcdtxn.config import get_settings
from etcdtxn.services.diagnostics.error_classifier import ClassifiedError

logger = logging.getLogger(__name__)


class FailureTelemetry:
    def __init__(self, secret_key: str | None, environment: str):
        self._server: StatsigServer | None = None
        if not secret_key:
            return

        try:
            server = StatsigServer()
            server.initialize(secret_key, StatsigOptions(environment={"tier": environment}))
            self._server = server
        except Exception as exc:  # noqa: BLE001
            logger.warning("Statsig initialization failed: %s", exc)

    @property
    def enabled(self) -> bool:
        return self._server is not None

    def emit(self, node: str, event_name: str, metadata: dict[str, Any]) -> None:
        if self._server is None:
            return
        try:
            self._server.log_event(
                StatsigEvent(StatsigUser(node), event_name, metadata=metadata)
            )
        except Exception as exc:  # noqa: BLE001
            logger.debug("Statsig event %s failed: %s", event_name, exc)

    def classified_failure(self, node: str, error: ClassifiedError) -> None:
        self.emit(
            node,
            "etcdctl_txn_failed",
            {"kind": error.kind.value, "definite": str(error.definite).lower()},
        )

    def protocol_violation(self, node: str, reason: str) -> None:
        self.emit(node, "etcdctl_protocol_violation", {"reason": reason[:200]})

    def shutdown(self) -> None:
        if self._server is None:
            return
        try:
            self._server.shutdown()
        except Exception as exc:  # noqa: BLE001
            logger.debug("Statsig shutdown failed: %s", exc)


_telemetry: FailureTelemetry | None = None
_telemetry_lock = threading.Lock()


def get_telemetry() -> FailureTelemetry:
    """Process-wide telemetry; clients on several threads share one StatsigServer."""
    global _telemetry
    with _telemetry_lock:
        if _telemetry is None:
            settings = get_settings()
            _telemetry = FailureTelemetry(settings.statsig_server_secret, settings.environment)
        return _telemetry
