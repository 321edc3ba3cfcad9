import enum


class TaskStatus(str, enum.Enum):
    OPEN = "open"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TaskPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    DISPUTED = "disputed"


class DisputeStatus(str, enum.Enum):
    OPEN = "open"
    UNDER_REVIEW = "under_review"
    RESOLVED = "resolved"
    CLOSED = "closed"


class DisputeReason(str, enum.Enum):
    NO_SHOW = "no_show"
    INCOMPLETE_WORK = "incomplete_work"
    POOR_QUALITY = "poor_quality"
    PAYMENT_ISSUE = "payment_issue"
    DAMAGE = "damage"
    SAFETY = "safety"
    OTHER = "other"


class CheckinType(str, enum.Enum):
    START = "start"
    END = "end"
    PAUSE = "pause"
    RESUME = "resume"


class ChecklistStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class AnalysisType(str, enum.Enum):
    INITIAL = "initial"
    REANALYSIS = "reanalysis"


class Recommendation(str, enum.Enum):
    FAVOR_GIVER = "favor_giver"
    FAVOR_DOER = "favor_doer"
    SPLIT = "split"
    ESCALATE = "escalate"
    INSUFFICIENT_EVIDENCE = "insufficient_evidence"


class ScoringModel(str, enum.Enum):
    AI_BACKED = "ai-backed"
    RULE_BASED = "rule-based"
