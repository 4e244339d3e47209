"""Persistence helpers: every query the services issue lives here."""

from pelayanan.repositories.admin_repository import admin_repository
from pelayanan.repositories.submission_repository import submission_repository

__all__ = ["admin_repository", "submission_repository"]
