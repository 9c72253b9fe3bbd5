"""
Governance analytics aggregator.

Loads the datasets for a window (and optionally the previous window of equal
length), computes the dashboard metrics and assembles a single result.
"""
import asyncio
from typing import Any, Dict, Optional

from utils.logger import get_logger
from .metrics import (
    Participation, aggregate_treasury, diversity_metrics, governance_metrics,
    participant_summary, previous_treasury_metrics, treasury_metrics, workgroup_summary
)
from .repository import AnalyticsRepository
from .timeseries import monthly_series
from .trends import TrendAnalyzer
from .types import AnalyticsDatasets, PeriodDatasets
from .window import AnalyticsQuery

logger = get_logger(__name__)


class MetricsAggregator:
    """Computes governance analytics for one request. Holds no state between calls."""

    def __init__(self, repository: AnalyticsRepository, trend_analyzer: Optional[TrendAnalyzer] = None):
        self.repository = repository
        self.trend_analyzer = trend_analyzer or TrendAnalyzer()

    async def aggregate(self, query: AnalyticsQuery) -> Dict[str, Any]:
        """Load and compute the full analytics result for ``query``."""
        window, filters = query.window, query.filters
        logger.info(
            f"Aggregating analytics: periodDays={window.period_days} compare={query.compare} "
            f"workGroupId={filters.work_group_id} country={filters.country} "
            f"proposalType={filters.proposal_type}"
        )
        datasets = await self.load_datasets(query)
        return self.compute(query, datasets)

    async def load_datasets(self, query: AnalyticsQuery) -> AnalyticsDatasets:
        """Issue the reads for the window; any failing read aborts the whole load."""
        window = query.window
        workgroups, users, memberships, current = await asyncio.gather(
            self.repository.list_workgroups(),
            self.repository.list_users(),
            self.repository.list_memberships(),
            self._load_period(query, window.since, window.until),
        )
        previous = None
        if query.compare:
            previous = await self._load_period(query, window.prev_since, window.since)

        logger.debug(
            f"Loaded {len(workgroups)} workgroups, {len(users)} users, "
            f"{len(current.proposals)} proposals, {len(current.votes)} votes, "
            f"{len(current.consensus_votes)} consensus votes, {len(current.objections)} objections"
        )
        return AnalyticsDatasets(
            workgroups=workgroups,
            users=users,
            memberships=memberships,
            current=current,
            previous=previous,
        )

    async def _load_period(self, query: AnalyticsQuery, start, end) -> PeriodDatasets:
        filters = query.filters
        proposals, votes, consensus_votes, objections = await asyncio.gather(
            self.repository.list_proposals(
                start, end,
                proposal_type=filters.proposal_type,
                work_group_id=filters.work_group_id,
            ),
            self.repository.list_votes(start, end),
            self.repository.list_consensus_votes(start, end),
            self.repository.list_objections(start, end),
        )
        return PeriodDatasets(
            proposals=proposals,
            votes=votes,
            consensus_votes=consensus_votes,
            objections=objections,
        )

    def compute(self, query: AnalyticsQuery, datasets: AnalyticsDatasets) -> Dict[str, Any]:
        """Derive every metric from already loaded datasets. No I/O."""
        window, filters = query.window, query.filters
        current = datasets.current

        participation = Participation.build(datasets.users, current, filters)
        governance = governance_metrics(participation, current)
        treasury = aggregate_treasury(current.proposals, datasets.workgroups)

        result: Dict[str, Any] = {
            "workGroups": workgroup_summary(datasets.workgroups),
            "participants": participant_summary(datasets.users, window.until),
            "activity": {"topWorkGroups": []},
            "governance": governance.to_dict(),
            "diversity": diversity_metrics(datasets.users, datasets.memberships, participation.voter_ids),
            "treasury": treasury_metrics(treasury),
            "timeSeries": {
                "monthly": monthly_series(window.since, window.until, current.proposals, participation),
            },
        }

        if query.compare and datasets.previous is not None:
            previous = self._previous_period(query, datasets)
            previous["deltas"] = self.trend_analyzer.analyze_trends(governance, treasury.total_usd, previous)
            result["previousPeriod"] = previous

        return result

    def _previous_period(self, query: AnalyticsQuery, datasets: AnalyticsDatasets) -> Dict[str, Any]:
        window = query.window
        previous = datasets.previous
        participation = Participation.build(datasets.users, previous, query.filters)
        governance = governance_metrics(participation, previous)
        treasury = aggregate_treasury(previous.proposals, datasets.workgroups)
        return {
            "periodDays": window.period_days,
            "start": _iso(window.prev_since),
            "end": _iso(window.prev_until),
            "governance": governance.rates_dict(),
            "treasury": previous_treasury_metrics(treasury),
        }


def _iso(value) -> str:
    # Millisecond precision with a Z suffix, e.g. 2024-01-15T00:00:00.000Z
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"
