"""
Data access for governance analytics.

The aggregator only talks to ``AnalyticsRepository``; the SQLAlchemy adapter
below maps ORM rows to the immutable records in ``types``.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from core.database.models import (
    WorkGroup, User, WorkGroupMember, Proposal, Vote, ConsensusVote, Objection
)
from utils.logger import get_logger
from .types import (
    BudgetItem, ConsensusVoteRecord, MembershipRecord, ObjectionRecord, ProposalRecord,
    UserRecord, VoteRecord, WorkGroupRecord, ensure_utc
)

logger = get_logger(__name__)


class AnalyticsRepository(ABC):
    """Read-only port over the governance store. Ranges are half-open ``[start, end)``."""

    @abstractmethod
    async def list_workgroups(self) -> List[WorkGroupRecord]:
        pass

    @abstractmethod
    async def list_users(self) -> List[UserRecord]:
        pass

    @abstractmethod
    async def list_proposals(
        self,
        start: datetime,
        end: datetime,
        proposal_type: Optional[str] = None,
        work_group_id: Optional[str] = None,
    ) -> List[ProposalRecord]:
        pass

    @abstractmethod
    async def list_votes(self, start: datetime, end: datetime) -> List[VoteRecord]:
        pass

    @abstractmethod
    async def list_consensus_votes(self, start: datetime, end: datetime) -> List[ConsensusVoteRecord]:
        pass

    @abstractmethod
    async def list_objections(self, start: datetime, end: datetime) -> List[ObjectionRecord]:
        pass

    @abstractmethod
    async def list_memberships(self) -> List[MembershipRecord]:
        pass

    async def count_users(self) -> int:
        return len(await self.list_users())


def _as_naive_utc(value: datetime) -> datetime:
    # DateTime columns store naive UTC timestamps
    return ensure_utc(value).replace(tzinfo=None)


def _id_list(value) -> tuple:
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(str(item) for item in value if item is not None)


def proposal_to_record(proposal: Proposal) -> ProposalRecord:
    items = proposal.budget_items if isinstance(proposal.budget_items, list) else []
    return ProposalRecord(
        id=proposal.id,
        created_at=ensure_utc(proposal.created_at),
        proposal_type=proposal.proposal_type,
        work_group_id=proposal.workgroup_id,
        work_group_ids=_id_list(proposal.work_group_ids),
        budget_items=tuple(BudgetItem.from_raw(item) for item in items),
    )


class SQLAlchemyAnalyticsRepository(AnalyticsRepository):
    """Repository backed by a SQLAlchemy session."""

    def __init__(self, session: Session):
        self.session = session

    async def list_workgroups(self) -> List[WorkGroupRecord]:
        member_counts = dict(
            self.session.query(WorkGroupMember.work_group_id, func.count(WorkGroupMember.id))
            .group_by(WorkGroupMember.work_group_id)
            .all()
        )
        return [
            WorkGroupRecord(
                id=wg.id,
                name=wg.name,
                type=wg.type,
                status=wg.status,
                member_count=member_counts.get(wg.id, 0),
            )
            for wg in self.session.query(WorkGroup).order_by(WorkGroup.created_at, WorkGroup.id).all()
        ]

    async def list_users(self) -> List[UserRecord]:
        return [
            UserRecord(
                id=user.id,
                name=user.name,
                email=user.email,
                role=user.role,
                status=user.status,
                country=user.country,
                created_at=ensure_utc(user.created_at),
            )
            for user in self.session.query(User).order_by(User.created_at, User.id).all()
        ]

    async def list_proposals(
        self,
        start: datetime,
        end: datetime,
        proposal_type: Optional[str] = None,
        work_group_id: Optional[str] = None,
    ) -> List[ProposalRecord]:
        query = self.session.query(Proposal).filter(
            Proposal.created_at >= _as_naive_utc(start),
            Proposal.created_at < _as_naive_utc(end),
        )
        if proposal_type:
            query = query.filter(Proposal.proposal_type == proposal_type)

        records = [proposal_to_record(p) for p in query.order_by(Proposal.created_at, Proposal.id).all()]

        if work_group_id:
            # JSON array membership is checked here to stay portable across backends
            records = [r for r in records if r.belongs_to(work_group_id)]

        logger.debug(f"Loaded {len(records)} proposals created in [{start}, {end})")
        return records

    async def list_votes(self, start: datetime, end: datetime) -> List[VoteRecord]:
        rows = (
            self.session.query(Vote)
            .filter(Vote.created_at >= _as_naive_utc(start), Vote.created_at < _as_naive_utc(end))
            .order_by(Vote.created_at, Vote.id)
            .all()
        )
        return [
            VoteRecord(id=v.id, user_id=v.user_id, proposal_id=v.proposal_id, created_at=ensure_utc(v.created_at))
            for v in rows
        ]

    async def list_consensus_votes(self, start: datetime, end: datetime) -> List[ConsensusVoteRecord]:
        rows = (
            self.session.query(ConsensusVote)
            .filter(
                ConsensusVote.created_at >= _as_naive_utc(start),
                ConsensusVote.created_at < _as_naive_utc(end),
            )
            .order_by(ConsensusVote.created_at, ConsensusVote.id)
            .all()
        )
        return [
            ConsensusVoteRecord(
                id=cv.id,
                user_id=cv.user_id,
                round_id=cv.round_id,
                vote_type=cv.vote_type,
                created_at=ensure_utc(cv.created_at),
            )
            for cv in rows
        ]

    async def list_objections(self, start: datetime, end: datetime) -> List[ObjectionRecord]:
        rows = (
            self.session.query(Objection)
            .filter(Objection.created_at >= _as_naive_utc(start), Objection.created_at < _as_naive_utc(end))
            .order_by(Objection.created_at, Objection.id)
            .all()
        )
        return [
            ObjectionRecord(
                id=o.id,
                status=o.status,
                vote_id=o.vote_id,
                created_at=ensure_utc(o.created_at),
                resolved_at=ensure_utc(o.resolved_at) if o.resolved_at else None,
            )
            for o in rows
        ]

    async def list_memberships(self) -> List[MembershipRecord]:
        rows = (
            self.session.query(WorkGroupMember.user_id, WorkGroupMember.work_group_id, WorkGroup.type)
            .join(WorkGroup, WorkGroup.id == WorkGroupMember.work_group_id)
            .order_by(WorkGroupMember.id)
            .all()
        )
        return [
            MembershipRecord(user_id=user_id, work_group_id=wg_id, work_group_type=wg_type)
            for user_id, wg_id, wg_type in rows
        ]

    async def count_users(self) -> int:
        return self.session.query(User).count()
