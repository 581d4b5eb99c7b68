"""Liveness checker use case for determining if the heartbeat loop runs."""

from __future__ import annotations

from typing import Protocol

from ha_arbiter.domain.health import LivenessResult


class HeartbeatLoopProtocol(Protocol):
    """Protocol for the heartbeat loop."""

    def is_running(self) -> bool:
        ...


class LivenessChecker:
    """Checks if the heartbeat loop is running (liveness probe).

    A node whose loop has stopped no longer heartbeats, so peers will
    declare it UNAVAILABLE; restarting the process is the only remedy.
    """

    def __init__(self, loop: HeartbeatLoopProtocol) -> None:
        self._loop = loop

    def check_liveness(self) -> LivenessResult:
        if self._loop.is_running():
            return LivenessResult(is_live=True)
        return LivenessResult(is_live=False, error="heartbeat loop is not running")
