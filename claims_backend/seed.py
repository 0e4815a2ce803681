"""Create the initial registry account.

Usage:
    SEED_REGISTRY_EMAIL=... SEED_REGISTRY_PASSWORD=... python -m claims_backend.seed
"""
import logging
import sys

from claims_backend.core import config
from claims_backend.core.enums import Role
from claims_backend.database import Base, SessionLocal, engine, ensure_claim_schema
from claims_backend.models import center, claim, department, user  # noqa: F401
from claims_backend.services import directory

logger = logging.getLogger(__name__)


def seed_registry(db, email: str, password: str, name: str | None = None):
    """Create the registry user unless one with this email exists. Returns (user, created)."""
    existing = directory.find_user_by_email(db, email)
    if existing is not None:
        return existing, False

    registry_user = directory.create_user(
        db,
        email=email,
        password=password,
        role=Role.REGISTRY,
        name=name,
        allow_registry=True,
    )
    return registry_user, True


def main() -> None:
    logging.basicConfig(level=config.LOG_LEVEL)

    if not config.SEED_REGISTRY_EMAIL or not config.SEED_REGISTRY_PASSWORD:
        print('SEED_REGISTRY_EMAIL and SEED_REGISTRY_PASSWORD must be set.', file=sys.stderr)
        sys.exit(1)

    Base.metadata.create_all(bind=engine)
    ensure_claim_schema()

    db = SessionLocal()
    try:
        registry_user, created = seed_registry(
            db,
            config.SEED_REGISTRY_EMAIL,
            config.SEED_REGISTRY_PASSWORD,
            config.SEED_REGISTRY_NAME,
        )
    finally:
        db.close()

    if created:
        print(f'Created registry user {registry_user.email}.')
    else:
        print(f'User {registry_user.email} already exists, skipping.')


if __name__ == '__main__':
    main()
