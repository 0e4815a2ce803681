"""Claim lifecycle: PENDING -> APPROVED | REJECTED."""

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from claims_backend.core.enums import ClaimStatus
from claims_backend.core.errors import ClaimAlreadyProcessed, NotFoundError
from claims_backend.models.claim import Claim

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = frozenset({ClaimStatus.APPROVED, ClaimStatus.REJECTED})


def transition_claim(
    db: Session,
    claim_id: int,
    new_status: ClaimStatus,
    processed_by_id: int,
    center_id: int | None = None,
) -> Claim:
    """Move a PENDING claim to a terminal status with one conditional UPDATE.

    The status check and the write are the same statement, so of two
    concurrent callers exactly one updates a row; the other sees zero rows
    and gets ``ClaimAlreadyProcessed``. Nothing is written on failure.
    """
    if new_status not in TERMINAL_STATUSES:
        raise ValueError(f'{new_status} is not a terminal claim status.')

    now = datetime.now()
    query = db.query(Claim).filter(
        Claim.id == claim_id,
        Claim.status == ClaimStatus.PENDING,
    )
    if center_id is not None:
        query = query.filter(Claim.center_id == center_id)

    updated = query.update(
        {
            Claim.status: new_status,
            Claim.processed_at: now,
            Claim.processed_by_id: processed_by_id,
            Claim.updated_at: now,
        },
        synchronize_session=False,
    )

    if updated == 0:
        db.rollback()
        current = db.query(Claim.status).filter(Claim.id == claim_id)
        if center_id is not None:
            current = current.filter(Claim.center_id == center_id)
        row = current.first()
        if row is None:
            raise NotFoundError('Claim not found.')
        raise ClaimAlreadyProcessed(ClaimStatus(row.status).value)

    db.commit()
    claim = db.get(Claim, claim_id)
    db.refresh(claim)
    logger.info('Claim %s moved to %s by user %s', claim_id, new_status.value, processed_by_id)
    return claim


def approve_claim(db: Session, claim_id: int, processed_by_id: int, center_id: int | None = None) -> Claim:
    return transition_claim(db, claim_id, ClaimStatus.APPROVED, processed_by_id, center_id)


def reject_claim(db: Session, claim_id: int, processed_by_id: int, center_id: int | None = None) -> Claim:
    return transition_claim(db, claim_id, ClaimStatus.REJECTED, processed_by_id, center_id)
