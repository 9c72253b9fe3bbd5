import os
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pytest
from unittest.mock import patch

# Set test environment variables before importing app modules
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["ALLOWED_ORIGINS"] = "http://localhost:3000"
os.environ["LOG_LEVEL"] = "WARNING"

from core.analytics.repository import AnalyticsRepository
from core.analytics.types import (
    BudgetItem, ConsensusVoteRecord, MembershipRecord, ObjectionRecord, ProposalRecord,
    UserRecord, VoteRecord, WorkGroupRecord
)

NOW = datetime(2024, 3, 15, 12, 0, 0, tzinfo=timezone.utc)


def days_ago(days: float) -> datetime:
    return NOW - timedelta(days=days)


class FakeAnalyticsRepository(AnalyticsRepository):
    """In-memory store applying the same range and filter rules as the database."""

    def __init__(self):
        self.workgroups: List[WorkGroupRecord] = []
        self.users: List[UserRecord] = []
        self.proposals: List[ProposalRecord] = []
        self.votes: List[VoteRecord] = []
        self.consensus_votes: List[ConsensusVoteRecord] = []
        self.objections: List[ObjectionRecord] = []
        self.memberships: List[MembershipRecord] = []
        self.calls: List[str] = []

    # Builders

    def add_user(self, user_id, role="USER", country=None, status="AVAILABLE", created_at=None):
        user = UserRecord(
            id=user_id, name=user_id, email=f"{user_id}@example.org", role=role,
            status=status, country=country, created_at=created_at or days_ago(400),
        )
        self.users.append(user)
        return user

    def add_workgroup(self, wg_id, name=None, type="Technical", status="Active"):
        wg = WorkGroupRecord(id=wg_id, name=name or wg_id, type=type, status=status)
        self.workgroups.append(wg)
        return wg

    def add_proposal(self, proposal_id, created_at, proposal_type="COMMUNITY", work_group_ids=(),
                     budget_items=(), work_group_id=None):
        proposal = ProposalRecord(
            id=proposal_id,
            created_at=created_at,
            proposal_type=proposal_type,
            work_group_id=work_group_id,
            work_group_ids=tuple(work_group_ids),
            budget_items=tuple(BudgetItem.from_raw(item) for item in budget_items),
        )
        self.proposals.append(proposal)
        return proposal

    def add_vote(self, vote_id, user_id, proposal_id, created_at):
        vote = VoteRecord(id=vote_id, user_id=user_id, proposal_id=proposal_id, created_at=created_at)
        self.votes.append(vote)
        return vote

    def add_consensus_vote(self, vote_id, user_id, round_id, vote_type, created_at):
        cv = ConsensusVoteRecord(
            id=vote_id, user_id=user_id, round_id=round_id, vote_type=vote_type, created_at=created_at
        )
        self.consensus_votes.append(cv)
        return cv

    def add_objection(self, objection_id, vote_id, status, created_at):
        objection = ObjectionRecord(id=objection_id, status=status, vote_id=vote_id, created_at=created_at)
        self.objections.append(objection)
        return objection

    def add_membership(self, user_id, wg_id, wg_type):
        membership = MembershipRecord(user_id=user_id, work_group_id=wg_id, work_group_type=wg_type)
        self.memberships.append(membership)
        return membership

    # AnalyticsRepository

    async def list_workgroups(self):
        self.calls.append("workgroups")
        return list(self.workgroups)

    async def list_users(self):
        self.calls.append("users")
        return list(self.users)

    async def list_proposals(self, start, end, proposal_type=None, work_group_id=None):
        self.calls.append("proposals")
        return [
            p for p in self.proposals
            if start <= p.created_at < end
            and (not proposal_type or p.proposal_type == proposal_type)
            and (not work_group_id or p.belongs_to(work_group_id))
        ]

    async def list_votes(self, start, end):
        self.calls.append("votes")
        return [v for v in self.votes if start <= v.created_at < end]

    async def list_consensus_votes(self, start, end):
        self.calls.append("consensus_votes")
        return [cv for cv in self.consensus_votes if start <= cv.created_at < end]

    async def list_objections(self, start, end):
        self.calls.append("objections")
        return [o for o in self.objections if start <= o.created_at < end]

    async def list_memberships(self):
        self.calls.append("memberships")
        return list(self.memberships)


class FailingAnalyticsRepository(FakeAnalyticsRepository):
    """Repository whose vote reads fail, as a broken database connection would."""

    def __init__(self, error: Optional[Exception] = None):
        super().__init__()
        self.error = error or RuntimeError("connection reset")

    async def list_votes(self, start, end):
        raise self.error

    async def count_users(self):
        raise self.error


@pytest.fixture(autouse=True)
def mock_settings():
    """Mock settings for all tests."""
    with patch.dict(os.environ, {
        "DATABASE_URL": "sqlite:///:memory:",
        "ALLOWED_ORIGINS": "http://localhost:3000",
    }):
        yield


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def repository():
    return FakeAnalyticsRepository()


@pytest.fixture
def failing_repository():
    return FailingAnalyticsRepository()


@pytest.fixture
def governance_repository():
    """
    A small organization used across aggregator and route tests.

    Two core contributors (Argentina, Chile) and one regular user (Argentina).
    One proposal in the window with a 130 USD budget, voted by core-1.
    One consensus round with 3 A_FAVOR and 1 EN_CONTRA.
    """
    repo = FakeAnalyticsRepository()
    repo.add_workgroup("wg-dev", name="Development", type="Technical")
    repo.add_workgroup("wg-ops", name="Operations", type="Operational", status="Inactive")

    repo.add_user("core-1", role="CORE_CONTRIBUTOR", country="Argentina")
    repo.add_user("core-2", role="CORE_CONTRIBUTOR", country="Chile", status="BUSY")
    repo.add_user("member-1", role="USER", country="argentina", created_at=days_ago(3))
    repo.add_user("member-2", role="USER", country=None, created_at=days_ago(5))
    repo.add_user("member-3", role="USER", country="Chile")

    repo.add_membership("core-1", "wg-dev", "Technical")
    repo.add_membership("core-2", "wg-ops", "Operational")
    repo.add_membership("member-1", "wg-dev", "Technical")

    repo.add_proposal(
        "p-1", days_ago(10), proposal_type="COMMUNITY", work_group_ids=["wg-dev"],
        budget_items=[{"quantity": 2, "unitPrice": 50}, {"total": 30, "type": "admin"}],
    )
    repo.add_vote("v-1", "core-1", "p-1", days_ago(9))

    for index, (user_id, vote_type) in enumerate([
        ("member-1", "A_FAVOR"),
        ("member-2", "A_FAVOR"),
        ("member-3", "A_FAVOR"),
        ("member-3", "EN_CONTRA"),
    ]):
        repo.add_consensus_vote(f"cv-{index}", user_id, "round-1", vote_type, days_ago(8))

    return repo
