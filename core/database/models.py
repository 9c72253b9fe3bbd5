"""
Database models for workgroups, participants, proposals and consensus voting.
"""
import uuid
from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, DateTime, ForeignKey, Index, JSON
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


class WorkGroup(Base):
    """Workgroup of the organization."""
    __tablename__ = "workgroups"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    type = Column(String(100), nullable=True)
    status = Column(String(20), nullable=False, default="Active")  # Active, Inactive
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    members = relationship("WorkGroupMember", back_populates="work_group", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<WorkGroup(id={self.id}, name='{self.name}', status='{self.status}')>"


class User(Base):
    """Registered participant."""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True, unique=True)
    role = Column(String(50), nullable=False, default="USER", index=True)  # CORE_CONTRIBUTOR, ADMIN, USER
    status = Column(String(30), nullable=True)  # AVAILABLE, BUSY, ...
    country = Column(String(100), nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    memberships = relationship("WorkGroupMember", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User(id={self.id}, role='{self.role}', country='{self.country}')>"


class WorkGroupMember(Base):
    """Membership of a user in a workgroup."""
    __tablename__ = "workgroup_members"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    work_group_id = Column(String(36), ForeignKey("workgroups.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="memberships")
    work_group = relationship("WorkGroup", back_populates="members")

    __table_args__ = (
        Index('idx_member_user_workgroup', 'user_id', 'work_group_id', unique=True),
    )


class Proposal(Base):
    """Governance proposal with an optional budget."""
    __tablename__ = "proposals"

    id = Column(String(36), primary_key=True, default=_uuid)
    title = Column(String(500), nullable=False, default="")
    proposal_type = Column(String(50), nullable=True, index=True)
    status = Column(String(30), nullable=False, default="PENDING")
    workgroup_id = Column(String(36), ForeignKey("workgroups.id"), nullable=True, index=True)
    work_group_ids = Column(JSON, nullable=False, default=list)  # associated workgroup ids
    budget_items = Column(JSON, nullable=False, default=list)  # [{quantity, unitPrice, total, type}]
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    votes = relationship("Vote", back_populates="proposal", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Proposal(id={self.id}, type='{self.proposal_type}', status='{self.status}')>"


class Vote(Base):
    """Simple proposal-level vote."""
    __tablename__ = "votes"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    proposal_id = Column(String(36), ForeignKey("proposals.id"), nullable=False, index=True)
    vote_type = Column(String(20), nullable=True)  # POSITIVE, NEGATIVE, ABSTAIN
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    proposal = relationship("Proposal", back_populates="votes")


class ConsensusVote(Base):
    """Vote cast during a consensus round."""
    __tablename__ = "consensus_votes"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    round_id = Column(String(36), nullable=False, index=True)
    vote_type = Column(String(20), nullable=False)  # A_FAVOR, EN_CONTRA, OBJETAR
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    objections = relationship("Objection", back_populates="vote", cascade="all, delete-orphan")


class Objection(Base):
    """Objection raised through a consensus vote."""
    __tablename__ = "objections"

    id = Column(String(36), primary_key=True, default=_uuid)
    vote_id = Column(String(36), ForeignKey("consensus_votes.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="PENDIENTE")  # VALIDA, INVALIDA, PENDIENTE
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    resolved_at = Column(DateTime, nullable=True)

    vote = relationship("ConsensusVote", back_populates="objections")
