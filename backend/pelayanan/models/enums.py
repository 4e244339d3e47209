"""Enumerations shared by the ORM models, schemas, and services."""

import enum


class SubmissionStatus(str, enum.Enum):
    """Lifecycle of a citizen's service request."""

    PENGAJUAN_BARU = "PENGAJUAN_BARU"  # new
    DIPROSES = "DIPROSES"              # in progress
    SELESAI = "SELESAI"                # done
    DITOLAK = "DITOLAK"                # rejected

    @classmethod
    def values(cls) -> list:
        return [member.value for member in cls]


class NotificationChannel(str, enum.Enum):
    WHATSAPP = "WHATSAPP"
    EMAIL = "EMAIL"


class SendStatus(str, enum.Enum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
