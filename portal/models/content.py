"""ORM models for news items and project listings."""

from sqlalchemy import JSON, Column, Integer, String, Text, func

from portal.models.base import Base, UTCDateTime


class NewsRow(Base):
    """News item; user_id is the owning account."""

    __tablename__ = "news"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    files = Column(JSON, nullable=False, default=list)
    user_id = Column(Integer, nullable=False, index=True)
    created_at = Column(UTCDateTime(), nullable=False, server_default=func.now())
    updated_at = Column(UTCDateTime(), nullable=False, server_default=func.now())


class ProjectRow(Base):
    """Project listing; user_id is the owning account."""

    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    image_url = Column(Text, nullable=False, default="", server_default="")
    url = Column(Text, nullable=False, default="", server_default="")
    files = Column(JSON, nullable=False, default=list)
    user_id = Column(Integer, nullable=False, index=True)
    created_at = Column(UTCDateTime(), nullable=False, server_default=func.now())
    updated_at = Column(UTCDateTime(), nullable=False, server_default=func.now())
