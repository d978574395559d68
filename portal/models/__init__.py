"""SQLAlchemy ORM models."""

from portal.models.account import AccountRow
from portal.models.base import Base, UTCDateTime
from portal.models.content import NewsRow, ProjectRow
from portal.models.session import SessionRow

__all__ = ["AccountRow", "Base", "NewsRow", "ProjectRow", "SessionRow", "UTCDateTime"]
