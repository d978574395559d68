"""ORM model for login sessions."""

from sqlalchemy import Column, ForeignKey, Integer, String

from portal.models.base import Base, UTCDateTime


class SessionRow(Base):
    """One active (or expired, not yet purged) login session."""

    __tablename__ = "sessions"

    id = Column(String(64), primary_key=True)
    account_id = Column(
        Integer,
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    expires_at = Column(UTCDateTime(), nullable=False, index=True)
