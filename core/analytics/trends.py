"""
Period-over-period comparison of governance and treasury metrics.
"""
from typing import Any, Dict

from .aggregations import round_half_up
from .metrics import GovernanceMetrics

GOVERNANCE_RATES = (
    "participationRate",
    "consentAlignmentScore",
    "objectionResolutionRate",
    "invalidObjectionRate",
)


class TrendAnalyzer:
    """Compares the current period against the previous one"""

    def __init__(self, digits: int = 2):
        self.digits = digits

    def delta(self, current: float, previous: float) -> float:
        return round_half_up(current - previous, self.digits)

    def direction(self, delta: float) -> str:
        if delta > 0:
            return "up"
        if delta < 0:
            return "down"
        return "flat"

    def analyze_trends(
        self,
        current: GovernanceMetrics,
        current_treasury_usd: float,
        previous: Dict[str, Any],
    ) -> Dict[str, Any]:
        """Deltas (current - previous) for each compared metric."""
        current_rates = current.rates_dict()
        previous_rates = previous["governance"]
        deltas: Dict[str, Any] = {}
        for name in GOVERNANCE_RATES:
            value = self.delta(current_rates[name], previous_rates[name])
            deltas[name] = {"delta": value, "direction": self.direction(value)}

        treasury_delta = self.delta(current_treasury_usd, previous["treasury"]["totalUSD"])
        deltas["treasuryUSD"] = {"delta": treasury_delta, "direction": self.direction(treasury_delta)}
        return deltas
