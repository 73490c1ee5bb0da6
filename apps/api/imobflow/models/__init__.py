"""Expose ORM models."""
from .activity import ActivityType, LeadActivity
from .lead import Lead
from .lead_status import LeadStatus
from .notification import Notification

__all__ = [
    "ActivityType",
    "Lead",
    "LeadActivity",
    "LeadStatus",
    "Notification",
]
