"""
Governance, diversity, treasury and population metrics.

All functions here are pure: they take loaded records and return plain
values or dicts ready to be serialized.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Sequence, Set

from .aggregations import Histogram, average, evenness_score, percentage, ratio_percent
from .types import (
    AVAILABLE, UNKNOWN, UNKNOWN_PROPOSAL_TYPE, ConsensusVoteRecord, ConsensusVoteType,
    MembershipRecord, ObjectionRecord, PeriodDatasets, ProposalRecord, TreasurySummary,
    UserRecord, VoteRecord, WorkGroupRecord, WorkGroupStatus
)
from .window import AnalyticsFilters


def workgroup_summary(workgroups: Sequence[WorkGroupRecord]) -> Dict[str, Any]:
    by_type = Histogram(wg.type or UNKNOWN for wg in workgroups)
    return {
        "total": len(workgroups),
        "active": len([wg for wg in workgroups if wg.status == WorkGroupStatus.ACTIVE.value]),
        "inactive": len([wg for wg in workgroups if wg.status == WorkGroupStatus.INACTIVE.value]),
        "byType": [{"type": t, "count": count} for t, count in by_type.most_common()],
    }


def participant_summary(users: Sequence[UserRecord], now: datetime) -> Dict[str, Any]:
    by_role = Histogram(user.role or "USER" for user in users)
    return {
        "total": len(users),
        "active": len([u for u in users if u.status == AVAILABLE]),
        "newThisMonth": len([
            u for u in users
            if u.created_at.year == now.year and u.created_at.month == now.month
        ]),
        "byRole": [{"role": role, "count": count} for role, count in by_role.most_common()],
    }


@dataclass
class RoundTally:
    """Favor / contra / objetar counts for a consensus round or a month."""
    favor: int = 0
    contra: int = 0
    objetar: int = 0

    def add(self, vote_type: str) -> None:
        if vote_type == ConsensusVoteType.A_FAVOR.value:
            self.favor += 1
        elif vote_type == ConsensusVoteType.EN_CONTRA.value:
            self.contra += 1
        elif vote_type == ConsensusVoteType.OBJETAR.value:
            self.objetar += 1

    @property
    def total(self) -> int:
        return self.favor + self.contra + self.objetar

    @property
    def ratio(self) -> float:
        return self.favor / self.total if self.total > 0 else 0.0


def consent_alignment_score(consensus_votes: Sequence[ConsensusVoteRecord]) -> float:
    """Mean per-round share of A_FAVOR votes, as a percentage."""
    rounds: Dict[str, RoundTally] = {}
    for cv in consensus_votes:
        rounds.setdefault(cv.round_id, RoundTally()).add(cv.vote_type)
    return ratio_percent(average(tally.ratio for tally in rounds.values()))


@dataclass
class Participation:
    """
    Who took part in a period once the request filters are applied.

    Votes are limited to the filtered proposal set; votes, consensus votes and
    objections are limited to users matching the country filter. Objections
    are joined to their consensus vote to find the voter, and dropped when a
    country filter is active and the vote is not in the period.
    """
    users_by_id: Dict[str, UserRecord]
    core_contributor_ids: Set[str]
    votes: List[VoteRecord]
    consensus_votes: List[ConsensusVoteRecord]
    objections: List[ObjectionRecord]
    voter_ids: Set[str] = field(default_factory=set)
    core_voter_ids: Set[str] = field(default_factory=set)

    @classmethod
    def build(cls, users: Sequence[UserRecord], period: PeriodDatasets,
              filters: AnalyticsFilters) -> "Participation":
        users_by_id = {u.id: u for u in users}
        core_contributor_ids = {
            u.id for u in users if u.is_core_contributor and filters.matches_country(u)
        }

        proposal_ids = {p.id for p in period.proposals}
        votes = [
            v for v in period.votes
            if v.proposal_id in proposal_ids and filters.matches_country(users_by_id.get(v.user_id))
        ]
        consensus_votes = [
            cv for cv in period.consensus_votes
            if filters.matches_country(users_by_id.get(cv.user_id))
        ]

        consensus_by_id = {cv.id: cv for cv in period.consensus_votes}
        objections = []
        for objection in period.objections:
            if filters.country:
                parent = consensus_by_id.get(objection.vote_id)
                if parent is None or not filters.matches_country(users_by_id.get(parent.user_id)):
                    continue
            objections.append(objection)

        voter_ids = {v.user_id for v in votes} | {cv.user_id for cv in consensus_votes}
        return cls(
            users_by_id=users_by_id,
            core_contributor_ids=core_contributor_ids,
            votes=votes,
            consensus_votes=consensus_votes,
            objections=objections,
            voter_ids=voter_ids,
            core_voter_ids=voter_ids & core_contributor_ids,
        )


@dataclass
class GovernanceMetrics:
    participation_rate: float
    consent_alignment_score: float
    objection_resolution_rate: float
    invalid_objection_rate: float
    core_contributors: int
    core_contributors_participating: int
    votes_count: int
    consensus_votes_count: int
    objections_total: int
    objections_resolved: int
    objections_invalid: int

    def rates_dict(self) -> Dict[str, float]:
        return {
            "participationRate": self.participation_rate,
            "consentAlignmentScore": self.consent_alignment_score,
            "objectionResolutionRate": self.objection_resolution_rate,
            "invalidObjectionRate": self.invalid_objection_rate,
        }

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = self.rates_dict()
        data["counts"] = {
            "coreContributors": self.core_contributors,
            "coreContributorsParticipating": self.core_contributors_participating,
            "votesCount": self.votes_count,
            "consensusVotesCount": self.consensus_votes_count,
            "objectionsTotal": self.objections_total,
            "objectionsResolved": self.objections_resolved,
            "objectionsInvalid": self.objections_invalid,
        }
        return data


def governance_metrics(participation: Participation, period: PeriodDatasets) -> GovernanceMetrics:
    objections = participation.objections
    resolved = len([o for o in objections if o.is_resolved])
    invalid = len([o for o in objections if o.is_invalid])
    core_total = len(participation.core_contributor_ids)

    return GovernanceMetrics(
        participation_rate=percentage(len(participation.core_voter_ids), core_total),
        # Alignment looks at every round in the window, independent of the filters
        consent_alignment_score=consent_alignment_score(period.consensus_votes),
        objection_resolution_rate=percentage(resolved, len(objections)),
        invalid_objection_rate=percentage(invalid, len(objections)),
        core_contributors=core_total,
        core_contributors_participating=len(participation.core_voter_ids),
        votes_count=len(period.votes),
        consensus_votes_count=len(period.consensus_votes),
        objections_total=len(objections),
        objections_resolved=resolved,
        objections_invalid=invalid,
    )


def diversity_metrics(
    users: Sequence[UserRecord],
    memberships: Sequence[MembershipRecord],
    voter_ids: Set[str],
) -> Dict[str, Any]:
    voters = [u for u in users if u.id in voter_ids]

    by_country = Histogram((u.country or UNKNOWN).strip() or UNKNOWN for u in voters)

    voter_memberships = [m for m in memberships if m.user_id in voter_ids]
    by_type = Histogram(m.work_group_type or UNKNOWN for m in voter_memberships)
    # Floored at one membership rather than the zero-denominator convention
    type_denominator = max(1, len(voter_memberships))

    return {
        "score": ratio_percent(evenness_score(by_country.counts())),
        "byCountry": [
            {"country": country, "count": count, "percent": percentage(count, len(voters))}
            for country, count in by_country.most_common()
        ],
        "byWorkGroupType": [
            {"type": t, "count": count, "percent": percentage(count, type_denominator)}
            for t, count in by_type.most_common()
        ],
    }


def aggregate_treasury(
    proposals: Sequence[ProposalRecord],
    workgroups: Sequence[WorkGroupRecord],
) -> TreasurySummary:
    """Sum proposal budgets overall, by admin/operative split, workgroup and type."""
    admin_usd = 0.0
    operative_usd = 0.0
    workgroup_index = {wg.id: wg for wg in workgroups}
    by_work_group: Dict[str, Dict[str, Any]] = {}
    by_proposal_type: Dict[str, float] = {}

    for proposal in proposals:
        proposal_total = 0.0
        for item in proposal.budget_items:
            amount = item.amount
            proposal_total += amount
            if item.is_admin:
                admin_usd += amount
            else:
                operative_usd += amount

        proposal_type = proposal.proposal_type or UNKNOWN_PROPOSAL_TYPE
        by_proposal_type[proposal_type] = by_proposal_type.get(proposal_type, 0.0) + proposal_total

        # Each associated workgroup receives the full proposal total
        for wg_id in proposal.work_group_ids:
            entry = by_work_group.get(wg_id)
            if entry is None:
                wg = workgroup_index.get(wg_id)
                entry = {
                    "id": wg_id,
                    "name": wg.name if wg else wg_id,
                    "type": (wg.type if wg else None) or UNKNOWN,
                    "totalUSD": 0.0,
                }
                by_work_group[wg_id] = entry
            entry["totalUSD"] += proposal_total

    return TreasurySummary(
        total_usd=admin_usd + operative_usd,
        admin_usd=admin_usd,
        operative_usd=operative_usd,
        by_work_group=sorted(by_work_group.values(), key=lambda e: e["totalUSD"], reverse=True),
        by_proposal_type=sorted(
            ({"proposalType": t, "totalUSD": total} for t, total in by_proposal_type.items()),
            key=lambda e: e["totalUSD"],
            reverse=True,
        ),
    )


def allocation_percents(summary: TreasurySummary) -> Dict[str, float]:
    denominator = summary.admin_usd + summary.operative_usd
    return {
        "adminPercent": percentage(summary.admin_usd, denominator),
        "operativePercent": percentage(summary.operative_usd, denominator),
    }


def treasury_metrics(summary: TreasurySummary) -> Dict[str, Any]:
    allocation: Dict[str, Any] = {
        "adminUSD": summary.admin_usd,
        "operativeUSD": summary.operative_usd,
    }
    allocation.update(allocation_percents(summary))
    return {
        "totalUSD": summary.total_usd,
        "byWorkGroup": summary.by_work_group,
        "byProposalType": summary.by_proposal_type,
        "allocation": allocation,
    }


def previous_treasury_metrics(summary: TreasurySummary) -> Dict[str, Any]:
    return {
        "totalUSD": summary.total_usd,
        "allocation": allocation_percents(summary),
    }

