"""SQLAlchemy model for public user profiles."""

from sqlalchemy import Column, String

from app.infrastructure.database import Base


class ProfileModel(Base):
    """Public profile maintained by the identity provider."""

    __tablename__ = "profiles"

    user_id = Column(String(36), primary_key=True)
    display_name = Column(String(120), nullable=True)
    avatar_url = Column(String(500), nullable=True)


__all__ = ["ProfileModel"]
