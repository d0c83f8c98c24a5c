from jobtracker.models.resume import Resume
from jobtracker.models.application import Application
from jobtracker.models.status_history import StatusHistoryEntry
from jobtracker.models.tag import Tag, application_tags
from jobtracker.models.cover_letter import CoverLetter

__all__ = ["Resume", "Application", "StatusHistoryEntry", "Tag", "application_tags", "CoverLetter"]
