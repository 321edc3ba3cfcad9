from sasktask.db.models.analysis import DisputeAnalysis
from sasktask.db.models.audit import AuditTrailEvent
from sasktask.db.models.dispute import Dispute
from sasktask.db.models.evidence import (
    ChecklistCompletion,
    DisputeEvidence,
    TaskChecklist,
    TaskCheckin,
    WorkEvidence,
)
from sasktask.db.models.task import Booking, Task
from sasktask.db.models.user import Badge, Profile

__all__ = [
    "AuditTrailEvent",
    "Badge",
    "Booking",
    "ChecklistCompletion",
    "Dispute",
    "DisputeAnalysis",
    "DisputeEvidence",
    "Profile",
    "Task",
    "TaskChecklist",
    "TaskCheckin",
    "WorkEvidence",
]
