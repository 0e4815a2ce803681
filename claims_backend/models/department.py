"""Department model definitions."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from claims_backend.database import Base


class Department(Base):
    """Represents a department inside a center."""
    __tablename__ = "departments"
    __table_args__ = (
        UniqueConstraint("name", "center_id", name="uq_departments_name_center"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    center_id = Column(Integer, ForeignKey("centers.id"), index=True, nullable=False)
    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    center = relationship("Center", back_populates="departments")
    lecturers = relationship("User", back_populates="department")
