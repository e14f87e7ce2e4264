from enum import Enum


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class InviteStatus(str, Enum):
    SENT = "sent"
    REDEEMED = "redeemed"


class ImportedInviteStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    ACCEPTED = "accepted"


class ImportBatchStatus(str, Enum):
    COMMITTED = "committed"


class NotificationType(str, Enum):
    EVENT_CREATED = "event_created"
    PROFILE_APPROVED = "profile_approved"
    PROFILE_REJECTED = "profile_rejected"


class AttendeeStatus(str, Enum):
    REGISTERED = "registered"
