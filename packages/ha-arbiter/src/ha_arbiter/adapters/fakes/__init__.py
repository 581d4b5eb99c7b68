"""Fake adapters for testing.

This module provides test doubles for port interfaces, enabling
deterministic testing without real clocks or metric backends.
"""

from ha_arbiter.adapters.fakes.fake_metrics import FakeMetricsAdapter, MetricCall
from ha_arbiter.adapters.fakes.fake_time import FakeTimeProvider

__all__ = [
    "FakeMetricsAdapter",
    "FakeTimeProvider",
    "MetricCall",
]
