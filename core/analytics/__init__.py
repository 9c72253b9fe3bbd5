"""
Governance analytics: participation, consent alignment, objections,
diversity, treasury allocation and monthly time series.
"""

from .aggregator import MetricsAggregator
from .exporter import ReportExporter
from .repository import AnalyticsRepository, SQLAlchemyAnalyticsRepository
from .trends import TrendAnalyzer
from .window import AnalyticsQuery, resolve_query

__all__ = [
    'MetricsAggregator',
    'ReportExporter',
    'AnalyticsRepository',
    'SQLAlchemyAnalyticsRepository',
    'TrendAnalyzer',
    'AnalyticsQuery',
    'resolve_query'
]
