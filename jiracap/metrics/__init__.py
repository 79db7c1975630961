"""Derived metrics over a snapshot. All functions are pure."""

from jiracap.metrics.capacity import (
    BURNOUT_THRESHOLD,
    capacity_forecast,
    member_load,
    sprint_health,
)
from jiracap.metrics.profitability import GroupBy, client_profitability
from jiracap.metrics.time_tracking import accuracy_distribution, time_summary

__all__ = [
    "BURNOUT_THRESHOLD",
    "GroupBy",
    "accuracy_distribution",
    "capacity_forecast",
    "client_profitability",
    "member_load",
    "sprint_health",
    "time_summary",
]
