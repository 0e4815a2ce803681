"""User model definitions."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from claims_backend.core.enums import Role
from claims_backend.database import Base


class User(Base):
    """Represents a registry member, a center coordinator or a lecturer."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(191), unique=True, index=True, nullable=False)
    name = Column(String(100))
    hashed_password = Column(String, nullable=False)
    role = Column(Enum(Role, native_enum=False, length=20), nullable=False)
    lecturer_center_id = Column(
        Integer,
        ForeignKey("centers.id", use_alter=True, name="fk_users_lecturer_center_id"),
        index=True,
    )
    department_id = Column(
        Integer,
        ForeignKey("departments.id", use_alter=True, name="fk_users_department_id"),
        index=True,
    )
    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    coordinated_center = relationship(
        "Center",
        back_populates="coordinator",
        foreign_keys="Center.coordinator_id",
        uselist=False,
    )
    lecturer_center = relationship("Center", back_populates="lecturers", foreign_keys=[lecturer_center_id])
    department = relationship("Department", back_populates="lecturers")
