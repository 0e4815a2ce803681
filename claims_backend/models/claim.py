"""Claim model definitions."""

from datetime import datetime

from sqlalchemy import Column, Date, DateTime, Enum, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from claims_backend.core.enums import ClaimStatus, ClaimType, SupervisionRank, ThesisType, TransportType
from claims_backend.database import Base


class Claim(Base):
    """Represents a claim submitted by a lecturer.

    Type-specific columns are nullable and only populated for the matching
    ``claim_type``.
    """
    __tablename__ = "claims"

    id = Column(Integer, primary_key=True, index=True)
    claim_type = Column(Enum(ClaimType, native_enum=False, length=20), nullable=False)
    status = Column(
        Enum(ClaimStatus, native_enum=False, length=20),
        default=ClaimStatus.PENDING,
        nullable=False,
        index=True,
    )
    description = Column(Text)
    submitted_by_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    center_id = Column(Integer, ForeignKey("centers.id"), index=True, nullable=False)
    submitted_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)
    processed_at = Column(DateTime)
    processed_by_id = Column(Integer, ForeignKey("users.id"), index=True)

    teaching_date = Column(Date)
    teaching_start_time = Column(String(5))
    teaching_end_time = Column(String(5))
    teaching_hours = Column(Float)

    transport_type = Column(Enum(TransportType, native_enum=False, length=10))
    transport_destination_from = Column(String(191))
    transport_destination_to = Column(String(191))
    transport_reg_number = Column(String(50))
    transport_cubic_capacity = Column(Integer)
    transport_amount = Column(Float)

    thesis_type = Column(Enum(ThesisType, native_enum=False, length=20))
    thesis_supervision_rank = Column(Enum(SupervisionRank, native_enum=False, length=20))
    thesis_exam_course_code = Column(String(50))
    thesis_exam_date = Column(Date)

    submitted_by = relationship("User", foreign_keys=[submitted_by_id])
    processed_by = relationship("User", foreign_keys=[processed_by_id])
    center = relationship("Center", back_populates="claims")
    supervised_students = relationship(
        "SupervisedStudent",
        back_populates="claim",
        cascade="all, delete-orphan",
        order_by="SupervisedStudent.id",
    )


class SupervisedStudent(Base):
    """A student listed on a thesis supervision claim."""
    __tablename__ = "supervised_students"

    id = Column(Integer, primary_key=True)
    claim_id = Column(Integer, ForeignKey("claims.id", ondelete="CASCADE"), index=True, nullable=False)
    supervisor_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    student_name = Column(String(191), nullable=False)
    thesis_title = Column(String(255), nullable=False)

    claim = relationship("Claim", back_populates="supervised_students")
