"""
ORM models. Importing this package registers every table with
`Base.metadata` (used by `Database.create_tables()` and Alembic).
"""

from pelayanan.models.admin import Admin
from pelayanan.models.enums import NotificationChannel, SendStatus, SubmissionStatus
from pelayanan.models.notification_log import NotificationLog
from pelayanan.models.submission import Submission

__all__ = [
    "Admin",
    "NotificationChannel",
    "NotificationLog",
    "SendStatus",
    "Submission",
    "SubmissionStatus",
]
