"""ORM model for user accounts (credentials, profile and role)."""

from sqlalchemy import Column, Integer, String, Text, func

from portal.models.base import Base, UTCDateTime


class AccountRow(Base):
    """
    Registered account.

    role: 'admin' or 'user'. username is unique at the storage layer so
    concurrent registrations cannot both succeed.
    """

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    avatar = Column(Text, nullable=True)
    bio = Column(String(500), nullable=True)
    role = Column(String(32), nullable=False, default="user", server_default="user")
    created_at = Column(
        UTCDateTime(),
        nullable=False,
        server_default=func.now(),
    )
