"""
Shared types for governance analytics.

Entity records are the read-only view of the store rows the aggregator
consumes. They are built once at the repository boundary so the metric code
never has to deal with missing or malformed values.
"""
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

CORE_CONTRIBUTOR = "CORE_CONTRIBUTOR"
AVAILABLE = "AVAILABLE"
UNKNOWN = "Unknown"
UNKNOWN_PROPOSAL_TYPE = "UNKNOWN"
ADMIN_BUDGET_TYPES = ("admin", "administrative", "administration")


class WorkGroupStatus(Enum):
    """Workgroup lifecycle status"""
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class ConsensusVoteType(Enum):
    """Vote options in a consensus round"""
    A_FAVOR = "A_FAVOR"
    EN_CONTRA = "EN_CONTRA"
    OBJETAR = "OBJETAR"


class ObjectionStatus(Enum):
    """Objection review status"""
    VALIDA = "VALIDA"
    INVALIDA = "INVALIDA"
    PENDIENTE = "PENDIENTE"


RESOLVED_OBJECTION_STATUSES = (ObjectionStatus.VALIDA.value, ObjectionStatus.INVALIDA.value)


def ensure_utc(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC and normalize aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_amount(value: Any) -> Optional[float]:
    """Coerce a budget amount to a non-negative float, None when unusable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(amount) or math.isinf(amount):
        return None
    return max(0.0, amount)


@dataclass(frozen=True)
class WorkGroupRecord:
    id: str
    name: str
    type: Optional[str]
    status: Optional[str]
    member_count: int = 0


@dataclass(frozen=True)
class UserRecord:
    id: str
    name: Optional[str]
    email: Optional[str]
    role: Optional[str]
    status: Optional[str]
    country: Optional[str]
    created_at: datetime

    @property
    def is_core_contributor(self) -> bool:
        return self.role == CORE_CONTRIBUTOR


@dataclass(frozen=True)
class BudgetItem:
    """A single proposal budget line"""
    quantity: float = 0.0
    unit_price: float = 0.0
    total: Optional[float] = None
    type: str = ""

    @classmethod
    def from_raw(cls, raw: Any) -> "BudgetItem":
        """Build a budget item from a stored JSON object, coercing amounts."""
        if not isinstance(raw, dict):
            return cls()
        item_type = raw.get("type")
        return cls(
            quantity=to_amount(raw.get("quantity")) or 0.0,
            unit_price=to_amount(raw.get("unitPrice")) or 0.0,
            total=to_amount(raw.get("total")),
            type=item_type if isinstance(item_type, str) else "",
        )

    @property
    def amount(self) -> float:
        if self.total is not None:
            return self.total
        return self.quantity * self.unit_price

    @property
    def is_admin(self) -> bool:
        return self.type.lower() in ADMIN_BUDGET_TYPES


@dataclass(frozen=True)
class ProposalRecord:
    id: str
    created_at: datetime
    proposal_type: Optional[str] = None
    work_group_id: Optional[str] = None  # primary workgroup
    work_group_ids: Tuple[str, ...] = ()
    budget_items: Tuple[BudgetItem, ...] = ()

    def belongs_to(self, work_group_id: str) -> bool:
        return self.work_group_id == work_group_id or work_group_id in self.work_group_ids

    @property
    def budget_total(self) -> float:
        return sum(item.amount for item in self.budget_items)


@dataclass(frozen=True)
class VoteRecord:
    id: str
    user_id: str
    proposal_id: str
    created_at: datetime


@dataclass(frozen=True)
class ConsensusVoteRecord:
    id: str
    user_id: str
    round_id: str
    vote_type: str
    created_at: datetime


@dataclass(frozen=True)
class ObjectionRecord:
    id: str
    status: Optional[str]
    vote_id: str
    created_at: datetime
    resolved_at: Optional[datetime] = None

    @property
    def is_resolved(self) -> bool:
        return self.status in RESOLVED_OBJECTION_STATUSES

    @property
    def is_invalid(self) -> bool:
        return self.status == ObjectionStatus.INVALIDA.value


@dataclass(frozen=True)
class MembershipRecord:
    user_id: str
    work_group_id: str
    work_group_type: Optional[str] = None


@dataclass
class PeriodDatasets:
    """Rows that depend on the time window"""
    proposals: List[ProposalRecord] = field(default_factory=list)
    votes: List[VoteRecord] = field(default_factory=list)
    consensus_votes: List[ConsensusVoteRecord] = field(default_factory=list)
    objections: List[ObjectionRecord] = field(default_factory=list)


@dataclass
class AnalyticsDatasets:
    """Everything loaded for one analytics request"""
    workgroups: List[WorkGroupRecord]
    users: List[UserRecord]
    memberships: List[MembershipRecord]
    current: PeriodDatasets
    previous: Optional[PeriodDatasets] = None


@dataclass
class TreasurySummary:
    """Treasury aggregation over a proposal set"""
    total_usd: float = 0.0
    admin_usd: float = 0.0
    operative_usd: float = 0.0
    by_work_group: List[Dict[str, Any]] = field(default_factory=list)
    by_proposal_type: List[Dict[str, Any]] = field(default_factory=list)
