"""
Rate limiting for money-moving endpoints.

DRF's ScopedRateThrottle only understands one-unit periods ("5/minute").
WindowedScopedRateThrottle also accepts a multiplier, so settings can say
"5/5m" (five requests per five minutes).

Usage:
    class InitiatePaymentView(APIView):
        throttle_classes = [WindowedScopedRateThrottle]
        throttle_scope = "payment_initiate"
"""

from __future__ import annotations

import re

from rest_framework.throttling import ScopedRateThrottle

PERIOD_PATTERN = re.compile(r"^(\d*)\s*([smhd])")

PERIOD_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400}


class WindowedScopedRateThrottle(ScopedRateThrottle):
    """ScopedRateThrottle that accepts "<requests>/<N><unit>" rates."""

    def parse_rate(self, rate):
        if rate is None:
            return (None, None)

        num, period = rate.split("/")
        match = PERIOD_PATTERN.match(period.strip().lower())
        if match is None:
            raise ValueError(f"Invalid throttle period: {period!r}")

        multiplier = int(match.group(1) or 1)
        return (int(num), multiplier * PERIOD_SECONDS[match.group(2)])
