"""Timing defaults for client-side analysis status polling."""

from __future__ import annotations

POLL_INTERVAL_SECONDS = 120.0
MAX_POLL_DURATION_SECONDS = 30 * 60.0
POLL_COOLDOWN_SECONDS = 5.0
