"""Claim persistence and lookups."""

import logging

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from claims_backend.core.enums import ClaimStatus, ClaimType
from claims_backend.models.claim import Claim, SupervisedStudent
from claims_backend.models.user import User
from claims_backend.services.claim_validation import ClaimDraft, claim_columns, supervised_students

logger = logging.getLogger(__name__)

# PENDING first, then the processed ones
STATUS_ORDER = {ClaimStatus.PENDING: 0, ClaimStatus.APPROVED: 1, ClaimStatus.REJECTED: 2}


def create_claim(db: Session, submitted_by_id: int, center_id: int, draft: ClaimDraft) -> Claim:
    """Store a validated draft as a PENDING claim, with its supervised students."""
    claim = Claim(
        status=ClaimStatus.PENDING,
        submitted_by_id=submitted_by_id,
        center_id=center_id,
        **claim_columns(draft),
    )
    for student in supervised_students(draft):
        claim.supervised_students.append(
            SupervisedStudent(
                supervisor_id=submitted_by_id,
                student_name=student.student_name,
                thesis_title=student.thesis_title,
            )
        )

    db.add(claim)
    db.commit()
    db.refresh(claim)

    logger.info('Created %s claim %s for center %s', claim.claim_type.value, claim.id, center_id)
    return claim


def get_claim(db: Session, claim_id: int) -> Claim | None:
    return db.query(Claim).options(selectinload(Claim.supervised_students)).filter(Claim.id == claim_id).first()


def _matching_enum(enum_type, query: str):
    normalized = query.strip().upper()
    for member in enum_type:
        if member.value == normalized:
            return member
    return None


def search_center_claims(db: Session, center_id: int, query: str | None = None) -> list[Claim]:
    """Claims of a center, optionally filtered by a free-text query.

    The query matches the claim id, the submitter's name or email, the claim
    type, the transport destinations, the exam course code or the status.
    """
    claims_query = db.query(Claim).join(User, Claim.submitted_by_id == User.id).filter(Claim.center_id == center_id)

    search = (query or '').strip()
    if search:
        pattern = f'%{search}%'
        conditions = [
            User.name.ilike(pattern),
            User.email.ilike(pattern),
            Claim.transport_destination_to.ilike(pattern),
            Claim.transport_destination_from.ilike(pattern),
            Claim.thesis_exam_course_code.ilike(pattern),
        ]
        if search.isdigit():
            conditions.append(Claim.id == int(search))
        claim_type = _matching_enum(ClaimType, search)
        if claim_type is not None:
            conditions.append(Claim.claim_type == claim_type)
        status = _matching_enum(ClaimStatus, search)
        if status is not None:
            conditions.append(Claim.status == status)
        claims_query = claims_query.filter(or_(*conditions))

    claims = claims_query.order_by(Claim.submitted_at.desc(), Claim.id.desc()).all()
    # stable sort keeps newest-first inside each status
    return sorted(claims, key=lambda claim: STATUS_ORDER[ClaimStatus(claim.status)])


def list_claims_for_submitter(db: Session, submitted_by_id: int) -> list[Claim]:
    return db.query(Claim).filter(
        Claim.submitted_by_id == submitted_by_id,
    ).order_by(Claim.submitted_at.desc(), Claim.id.desc()).all()


def claim_summary(db: Session, center_id: int) -> dict[str, int]:
    counts = {status.value: 0 for status in ClaimStatus}
    rows = db.query(Claim.status, func.count(Claim.id)).filter(
        Claim.center_id == center_id,
    ).group_by(Claim.status).all()
    for status, count in rows:
        counts[ClaimStatus(status).value] = count
    counts['TOTAL'] = sum(counts.values())
    return counts
