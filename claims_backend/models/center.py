"""Center model definitions."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from claims_backend.database import Base


class Center(Base):
    """Top-level organizational unit run by exactly one coordinator."""
    __tablename__ = "centers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(191), unique=True, nullable=False)
    # unique: a coordinator runs at most one center
    coordinator_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    coordinator = relationship("User", back_populates="coordinated_center", foreign_keys=[coordinator_id])
    lecturers = relationship("User", back_populates="lecturer_center", foreign_keys="User.lecturer_center_id")
    departments = relationship("Department", back_populates="center")
    claims = relationship("Claim", back_populates="center")
