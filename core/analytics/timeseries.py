"""
Monthly time series for the analytics dashboard.

Buckets are UTC calendar months from the window start through the current
month, inclusive, and are emitted even when a month saw no activity.
"""
from datetime import datetime
from typing import Any, Dict, List, Sequence, Set

from .aggregations import percentage, ratio_percent, round_half_up
from .metrics import Participation, RoundTally
from .types import ProposalRecord, ensure_utc


def month_key(value: datetime) -> str:
    value = ensure_utc(value)
    return f"{value.year:04d}-{value.month:02d}"


def build_month_keys(start: datetime, end: datetime) -> List[str]:
    """Year-month keys covering every month from ``start`` through ``end``."""
    start, end = ensure_utc(start), ensure_utc(end)
    year, month = start.year, start.month
    keys = []
    while (year, month) <= (end.year, end.month):
        keys.append(f"{year:04d}-{month:02d}")
        month += 1
        if month > 12:
            month = 1
            year += 1
    return keys


class MonthlyBucketer:
    """Accumulates per-month activity for a fixed, ordered set of month keys."""

    def __init__(self, keys: Sequence[str]):
        self.keys = list(keys)
        self.treasury: Dict[str, float] = {k: 0.0 for k in self.keys}
        self.voters: Dict[str, Set[str]] = {k: set() for k in self.keys}
        self.core_voters: Dict[str, Set[str]] = {k: set() for k in self.keys}
        self.objections: Dict[str, Dict[str, int]] = {k: {"total": 0, "resolved": 0} for k in self.keys}
        self.consensus: Dict[str, RoundTally] = {k: RoundTally() for k in self.keys}

    def _bucket(self, when: datetime):
        key = month_key(when)
        return key if key in self.treasury else None

    def add_treasury(self, when: datetime, amount: float) -> None:
        key = self._bucket(when)
        if key:
            self.treasury[key] += amount

    def add_voter(self, when: datetime, user_id: str, is_core: bool) -> None:
        key = self._bucket(when)
        if key:
            self.voters[key].add(user_id)
            if is_core:
                self.core_voters[key].add(user_id)

    def add_consensus_vote(self, when: datetime, vote_type: str) -> None:
        key = self._bucket(when)
        if key:
            self.consensus[key].add(vote_type)

    def add_objection(self, when: datetime, resolved: bool) -> None:
        key = self._bucket(when)
        if key:
            self.objections[key]["total"] += 1
            if resolved:
                self.objections[key]["resolved"] += 1

    def rows(self, core_contributors: int) -> List[Dict[str, Any]]:
        rows = []
        for key in self.keys:
            tally = self.consensus[key]
            objections = self.objections[key]
            rows.append({
                "month": key,
                "voters": len(self.voters[key]),
                "coreVotersCount": len(self.core_voters[key]),
                "participationRate": percentage(len(self.core_voters[key]), core_contributors, digits=1),
                "treasuryUSD": int(round_half_up(self.treasury[key], 0)),
                "objectionResolutionRate": percentage(objections["resolved"], objections["total"], digits=1),
                "consentAlignmentRate": ratio_percent(tally.ratio, 1) if tally.total > 0 else 0.0,
            })
        return rows


def monthly_series(
    since: datetime,
    until: datetime,
    proposals: Sequence[ProposalRecord],
    participation: Participation,
) -> List[Dict[str, Any]]:
    """Build the monthly rows for the current window's filtered datasets."""
    bucketer = MonthlyBucketer(build_month_keys(since, until))
    core_ids = participation.core_contributor_ids

    for proposal in proposals:
        bucketer.add_treasury(proposal.created_at, proposal.budget_total)
    for vote in participation.votes:
        bucketer.add_voter(vote.created_at, vote.user_id, vote.user_id in core_ids)
    for cv in participation.consensus_votes:
        bucketer.add_voter(cv.created_at, cv.user_id, cv.user_id in core_ids)
        bucketer.add_consensus_vote(cv.created_at, cv.vote_type)
    for objection in participation.objections:
        bucketer.add_objection(objection.created_at, objection.is_resolved)

    return bucketer.rows(len(core_ids))
