from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from claims_backend.core.errors import ConflictError


def commit_or_conflict(db: Session, conflict_message: str) -> None:
    """Commit, turning a unique/foreign key violation into ``ConflictError``."""
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(conflict_message) from exc
