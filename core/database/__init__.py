"""
Database module for governance data storage.
"""

from .database import db_manager, get_db_session, initialize_database
from .models import (
    WorkGroup, User, WorkGroupMember, Proposal, Vote, ConsensusVote, Objection
)

__all__ = [
    "db_manager",
    "get_db_session",
    "initialize_database",
    "WorkGroup",
    "User",
    "WorkGroupMember",
    "Proposal",
    "Vote",
    "ConsensusVote",
    "Objection"
]
