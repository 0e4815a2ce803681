"""Structural invariants of the center / department / lecturer graph.

Single-item operations commit on their own. The bulk variants call them once
per lecturer and report a per-item outcome; they are not transactional across
the batch.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from claims_backend.core.enums import ClaimStatus, Role
from claims_backend.core.errors import DATABASE_FAILURE, ConflictError, DomainError, NotFoundError, ValidationError
from claims_backend.models.center import Center
from claims_backend.models.claim import Claim, SupervisedStudent
from claims_backend.models.department import Department
from claims_backend.models.user import User
from claims_backend.services.directory import (
    LECTURER_NOT_IN_CENTER,
    require_center,
    require_department,
    require_lecturer,
)
from claims_backend.services.persistence import commit_or_conflict

logger = logging.getLogger(__name__)


@dataclass
class BatchFailure:
    id: int
    reason: str


@dataclass
class BatchOutcome:
    succeeded: list[int] = field(default_factory=list)
    failed: list[BatchFailure] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            'succeeded': list(self.succeeded),
            'failed': [{'id': failure.id, 'reason': failure.reason} for failure in self.failed],
        }


def _lecturer_in_center(db: Session, center_id: int, lecturer_id: int):
    return db.query(User).filter(
        User.id == lecturer_id,
        User.lecturer_center_id == center_id,
        User.role == Role.LECTURER,
    )


def assign_lecturer_to_department(db: Session, center_id: int, department_id: int, lecturer_id: int) -> User:
    """Point a lecturer of the center at one of its departments.

    The center membership is re-checked by the UPDATE itself, so a lecturer
    moved to another center after the lookup is reported as not found instead
    of ending up with a department from their old center.
    """
    require_department(db, center_id, department_id)
    lecturer = require_lecturer(db, center_id, lecturer_id)

    if lecturer.department_id == department_id:
        return lecturer

    updated = _lecturer_in_center(db, center_id, lecturer_id).update(
        {User.department_id: department_id, User.updated_at: datetime.now()},
        synchronize_session=False,
    )
    if updated == 0:
        db.rollback()
        raise NotFoundError(LECTURER_NOT_IN_CENTER)

    commit_or_conflict(db, 'Lecturer assignment changed concurrently. Reload and try again.')
    db.refresh(lecturer)

    logger.info('Assigned lecturer %s to department %s in center %s', lecturer_id, department_id, center_id)
    return lecturer


def unassign_lecturer_from_department(db: Session, center_id: int, lecturer_id: int) -> bool:
    """Clear the lecturer's department. Returns False when there was nothing to clear."""
    lecturer = require_lecturer(db, center_id, lecturer_id)
    if lecturer.department_id is None:
        return False

    updated = _lecturer_in_center(db, center_id, lecturer_id).update(
        {User.department_id: None, User.updated_at: datetime.now()},
        synchronize_session=False,
    )
    if updated == 0:
        db.rollback()
        raise NotFoundError(LECTURER_NOT_IN_CENTER)
    db.commit()
    db.refresh(lecturer)

    logger.info('Unassigned lecturer %s from their department in center %s', lecturer_id, center_id)
    return True


def _run_batch(db: Session, lecturer_ids: list[int], action: Callable[[int], object]) -> BatchOutcome:
    outcome = BatchOutcome()
    for lecturer_id in dict.fromkeys(lecturer_ids):
        try:
            action(lecturer_id)
        except DomainError as exc:
            db.rollback()
            outcome.failed.append(BatchFailure(id=lecturer_id, reason=exc.message))
        except SQLAlchemyError:
            # earlier items are already committed and stay in the outcome
            db.rollback()
            logger.exception('Batch item for lecturer %s failed with a database error', lecturer_id)
            outcome.failed.append(BatchFailure(id=lecturer_id, reason=DATABASE_FAILURE))
        else:
            outcome.succeeded.append(lecturer_id)
    return outcome


def assign_lecturers_to_department(
    db: Session,
    center_id: int,
    department_id: int,
    lecturer_ids: list[int],
) -> BatchOutcome:
    outcome = _run_batch(
        db,
        lecturer_ids,
        lambda lecturer_id: assign_lecturer_to_department(db, center_id, department_id, lecturer_id),
    )
    if outcome.failed:
        logger.warning(
            'Bulk assignment to department %s: %d succeeded, %d failed',
            department_id,
            len(outcome.succeeded),
            len(outcome.failed),
        )
    return outcome


def unassign_lecturers_from_department(db: Session, center_id: int, lecturer_ids: list[int]) -> BatchOutcome:
    outcome = _run_batch(
        db,
        lecturer_ids,
        lambda lecturer_id: unassign_lecturer_from_department(db, center_id, lecturer_id),
    )
    if outcome.failed:
        logger.warning(
            'Bulk unassignment in center %s: %d succeeded, %d failed',
            center_id,
            len(outcome.succeeded),
            len(outcome.failed),
        )
    return outcome


def change_center_coordinator(db: Session, center_id: int, new_coordinator_id: int) -> Center:
    """Point a center at a different coordinator in a single UPDATE.

    The previous coordinator is left without a center. The unique constraint on
    ``centers.coordinator_id`` rejects a concurrent assignment of the same user
    to a second center.
    """
    center = require_center(db, center_id)

    new_coordinator = db.get(User, new_coordinator_id)
    if new_coordinator is None:
        raise NotFoundError('Coordinator not found.')
    if new_coordinator.role != Role.COORDINATOR:
        raise ValidationError({'newCoordinatorId': 'Selected user is not a coordinator.'})

    if center.coordinator_id == new_coordinator_id:
        return center

    other_center = db.query(Center.id).filter(
        Center.coordinator_id == new_coordinator_id,
        Center.id != center_id,
    ).first()
    if other_center is not None:
        raise ConflictError('Selected coordinator already manages another center.')

    previous_coordinator_id = center.coordinator_id
    db.query(Center).filter(Center.id == center_id).update(
        {Center.coordinator_id: new_coordinator_id, Center.updated_at: datetime.now()},
        synchronize_session=False,
    )
    commit_or_conflict(db, 'Selected coordinator already manages another center.')
    db.refresh(center)

    logger.info(
        'Center %s coordinator changed from %s to %s',
        center_id,
        previous_coordinator_id,
        new_coordinator_id,
    )
    return center


def assign_lecturer_to_center(db: Session, center_id: int, lecturer_id: int) -> User:
    require_center(db, center_id)

    lecturer = db.get(User, lecturer_id)
    if lecturer is None:
        raise NotFoundError('Lecturer not found.')
    if lecturer.role != Role.LECTURER:
        raise ValidationError({'lecturerId': 'Selected user is not a lecturer.'})

    if lecturer.lecturer_center_id == center_id:
        return lecturer
    if lecturer.lecturer_center_id is not None:
        raise ConflictError('Lecturer is already assigned to another center.')

    updated = db.query(User).filter(
        User.id == lecturer_id,
        User.role == Role.LECTURER,
        User.lecturer_center_id.is_(None),
    ).update(
        {User.lecturer_center_id: center_id, User.department_id: None, User.updated_at: datetime.now()},
        synchronize_session=False,
    )
    if updated == 0:
        db.rollback()
        raise ConflictError('Lecturer is already assigned to another center.')

    commit_or_conflict(db, 'Lecturer assignment changed concurrently. Reload and try again.')
    db.refresh(lecturer)

    logger.info('Assigned lecturer %s to center %s', lecturer_id, center_id)
    return lecturer


def remove_lecturer_from_center(db: Session, center_id: int, lecturer_id: int) -> User:
    lecturer = require_lecturer(db, center_id, lecturer_id)

    updated = _lecturer_in_center(db, center_id, lecturer_id).update(
        {User.lecturer_center_id: None, User.department_id: None, User.updated_at: datetime.now()},
        synchronize_session=False,
    )
    if updated == 0:
        db.rollback()
        raise NotFoundError(LECTURER_NOT_IN_CENTER)
    db.commit()
    db.refresh(lecturer)

    logger.info('Removed lecturer %s from center %s', lecturer_id, center_id)
    return lecturer



def delete_department(db: Session, center_id: int, department_id: int) -> str:
    """Unassign the department's lecturers, then delete it. Returns its name."""
    department = require_department(db, center_id, department_id)
    name = department.name

    unassigned = db.query(User).filter(User.department_id == department_id).update(
        {User.department_id: None},
        synchronize_session=False,
    )
    db.delete(department)
    db.commit()

    if unassigned:
        logger.info('Unassigned %d lecturers from department %s', unassigned, department_id)
    logger.info('Deleted department %s from center %s', department_id, center_id)
    return name


def _pending_claim_count(db: Session, center_id: int) -> int:
    return db.query(Claim.id).filter(
        Claim.center_id == center_id,
        Claim.status == ClaimStatus.PENDING,
    ).count()


def delete_center(db: Session, center_id: int) -> str:
    """Delete a center that has no PENDING claims. Returns its name.

    Lecturers lose their center and department, departments and processed
    claims are removed, and the coordinator is left free for another center.
    PENDING claims are never deleted here: one submitted after the count
    keeps its foreign key to the center, and the center delete fails with a
    conflict.
    """
    center = require_center(db, center_id)
    name = center.name

    pending = _pending_claim_count(db, center_id)
    if pending:
        raise ConflictError(f'Center has {pending} pending claim(s). Process them before deleting the center.')

    department_ids = select(Department.id).where(Department.center_id == center_id)
    processed_claim_ids = select(Claim.id).where(
        Claim.center_id == center_id,
        Claim.status != ClaimStatus.PENDING,
    )

    try:
        db.query(User).filter(User.lecturer_center_id == center_id).update(
            {User.lecturer_center_id: None, User.department_id: None},
            synchronize_session=False,
        )
        db.query(User).filter(User.department_id.in_(department_ids)).update(
            {User.department_id: None},
            synchronize_session=False,
        )
        db.query(SupervisedStudent).filter(SupervisedStudent.claim_id.in_(processed_claim_ids)).delete(
            synchronize_session=False,
        )
        db.query(Claim).filter(
            Claim.center_id == center_id,
            Claim.status != ClaimStatus.PENDING,
        ).delete(synchronize_session=False)
        db.query(Department).filter(Department.center_id == center_id).delete(synchronize_session=False)
        db.query(Center).filter(Center.id == center_id).delete(synchronize_session=False)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError('Center changed while it was being deleted. Reload and try again.') from exc
    db.expire_all()

    logger.info('Deleted center %s', center_id)
    return name
