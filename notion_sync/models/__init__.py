"""Sync models - re-exports all models and Base.metadata."""

from .base import Base, UUIDMixin, TimestampMixin, TenantMixin, SourceSyncMixin
from .tenant import Tenant
from .database_link import TenantDatabaseLink, normalize_database_id
from .person import Person
from .media import Media
from .todo import Todo
from .finance import FinanceAsset, FinancePlace, FinanceInvestment
from .tracking import TrackingEntry, TRACKING_PERIODS

__all__ = [
    "Base",
    "UUIDMixin",
    "TimestampMixin",
    "TenantMixin",
    "SourceSyncMixin",
    "Tenant",
    "TenantDatabaseLink",
    "normalize_database_id",
    "Person",
    "Media",
    "Todo",
    "FinanceAsset",
    "FinancePlace",
    "FinanceInvestment",
    "TrackingEntry",
    "TRACKING_PERIODS",
]
