"""
Root conftest.py for the ha-arbiter test suite.

Pytest plugin enforcing TRA (Test Responsibility Architecture) and tier markers.
- Warns (or fails with TRA_ENFORCE=1) when a test lacks a TRA or tier marker
- Applies a pytest-timeout per tier

Usage:
    @pytest.mark.tier(1)
    @pytest.mark.tra("Domain.Invariant.LeaseTermIncreases")
    def test_something():
        ...
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from _pytest.config import Config
    from _pytest.nodes import Item


VALID_TRA_PREFIXES = (
    "Domain.Invariant",
    "Domain.Policy",
    "UseCase",
    "Port",
    "Adapter",
    "Contract",
)

# Tier timeout limits in seconds (0 = no limit)
TIER_TIMEOUTS: dict[int, float] = {
    0: 0.1,
    1: 2.0,
    2: 30.0,
    3: 300.0,
    4: 0,
}


def pytest_configure(config: Config) -> None:
    """Register custom markers for TRA and tier enforcement."""
    config.addinivalue_line(
        "markers",
        "tra(anchor): Test Responsibility Anchor. Must start with one of: "
        + ", ".join(VALID_TRA_PREFIXES),
    )
    config.addinivalue_line(
        "markers",
        "tier(level): Test tier (0=instant, 1=fast, 2=standard, 3=slow, 4=manual). "
        "Determines the timeout.",
    )
    config.addinivalue_line("markers", "property: Property-based tests using Hypothesis")


def _get_tier(item: Item) -> int | None:
    marker = item.get_closest_marker("tier")
    if marker is not None and marker.args:
        tier = marker.args[0]
        if isinstance(tier, int) and tier in TIER_TIMEOUTS:
            return tier
    return None


def _marker_errors(items: list[Item]) -> list[str]:
    errors = []
    for item in items:
        tra = item.get_closest_marker("tra")
        if tra is None or not tra.args:
            errors.append(f"{item.nodeid}: missing @pytest.mark.tra('...')")
        elif not str(tra.args[0]).startswith(VALID_TRA_PREFIXES):
            errors.append(f"{item.nodeid}: invalid TRA anchor {tra.args[0]!r}")

        if _get_tier(item) is None:
            errors.append(f"{item.nodeid}: missing or invalid @pytest.mark.tier()")
    return errors


def _apply_tier_timeouts(items: list[Item]) -> None:
    """Add a timeout marker per tier when pytest-timeout is installed."""
    try:
        import pytest_timeout as _  # type: ignore[import-untyped]  # noqa: F401
    except ImportError:
        return

    multiplier = float(os.environ.get("TIER_TIMEOUT_MULTIPLIER", "1.0"))
    for item in items:
        tier = _get_tier(item)
        if tier is None or item.get_closest_marker("timeout") is not None:
            continue
        timeout = TIER_TIMEOUTS[tier]
        if timeout > 0:
            item.add_marker(pytest.mark.timeout(timeout * multiplier))


@pytest.hookimpl(tryfirst=True)
def pytest_collection_modifyitems(config: Config, items: list[Item]) -> None:
    errors = _marker_errors(items)
    if errors:
        if os.environ.get("TRA_ENFORCE", "warn") == "1":
            pytest.fail(
                "TRA/Tier Enforcement Errors:\n" + "\n".join(f"  - {e}" for e in errors),
                pytrace=False,
            )
        print("\nTRA/Tier Enforcement Warnings:")
        for error in errors:
            print(f"  {error}")

    _apply_tier_timeouts(items)


@pytest.hookimpl(trylast=True)
def pytest_report_header(config: Config) -> str:
    return f"TRA enforcement: {os.environ.get('TRA_ENFORCE', 'warn')}"
