from app.core.models.profile import Profile
from app.core.models.alumni_detail import AlumniDetail, StagedAlumniDetail
from app.core.models.admin_flag import AdminFlag, StatusTransition
from app.core.models.career import Education, Skill, WorkHistory
from app.core.models.imports import ImportBatch, ImportedAlumni
from app.core.models.invite import Invite
from app.core.models.event import Event, EventAttendee
from app.core.models.notification import Notification
from app.core.models.content import GalleryItem, Job, NewsArticle

__all__ = [
    "AdminFlag",
    "AlumniDetail",
    "Education",
    "Event",
    "EventAttendee",
    "GalleryItem",
    "ImportBatch",
    "ImportedAlumni",
    "Invite",
    "Job",
    "NewsArticle",
    "Notification",
    "Profile",
    "Skill",
    "StagedAlumniDetail",
    "StatusTransition",
    "WorkHistory",
]
