"""Shared helpers."""

from arena.utils.time_utils import ensure_utc, previous_week_bounds, week_bounds

__all__ = ["ensure_utc", "previous_week_bounds", "week_bounds"]
