"""
Shared FastAPI dependencies.
"""
from datetime import datetime, timezone
from typing import Callable

from fastapi import Depends

from core.analytics import AnalyticsRepository, SQLAlchemyAnalyticsRepository
from core.database import get_db_session


def get_analytics_repository(db_session=Depends(get_db_session)) -> AnalyticsRepository:
    """Repository over the request's database session."""
    return SQLAlchemyAnalyticsRepository(db_session)


def get_clock() -> Callable[[], datetime]:
    """Clock used for window computation; overridden in tests."""
    return lambda: datetime.now(timezone.utc)
