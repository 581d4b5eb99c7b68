"""EventEmitterPort implementations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ha_arbiter.domain.events import FailoverEventType

if TYPE_CHECKING:
    from collections.abc import Callable

    from ha_arbiter.domain.events import FailoverEvent

logger = logging.getLogger(__name__)

_WARNING_EVENTS = frozenset(
    {
        FailoverEventType.LEASE_LOST,
        FailoverEventType.STORE_UNREACHABLE_DEMOTION,
        FailoverEventType.HEALTH_DEMOTION,
        FailoverEventType.NODE_UNAVAILABLE,
    }
)


class LoggingEventEmitter:
    """Writes every failover event to the ha_arbiter event log."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    def emit(self, event: FailoverEvent) -> None:
        level = logging.WARNING if event.event_type in _WARNING_EVENTS else logging.INFO
        self._log.log(
            level,
            "HA event %s node=%s term=%s reason=%s",
            event.event_type.value,
            event.node_name,
            event.term,
            event.reason,
        )


class CompositeEventEmitter:
    """Fans events out to several emitters and callbacks.

    A failing observer is logged and skipped so the heartbeat loop never
    sees an exception from emit().
    """

    def __init__(
        self,
        *emitters: object,
        callbacks: list[Callable[[FailoverEvent], None]] | None = None,
    ) -> None:
        self._emitters = list(emitters)
        self._callbacks = list(callbacks or [])

    def subscribe(self, callback: Callable[[FailoverEvent], None]) -> None:
        self._callbacks.append(callback)

    def emit(self, event: FailoverEvent) -> None:
        observers = [getattr(e, "emit") for e in self._emitters] + self._callbacks
        for observer in observers:
            try:
                observer(event)
            except Exception:
                logger.exception(
                    "Failover event observer failed for %s", event.event_type.value
                )
