import os
from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite://')
os.environ.setdefault('BCRYPT_ROUNDS', '4')

from claims_backend.core.enums import ClaimStatus, ClaimType, Role  # noqa: E402
from claims_backend.database import Base  # noqa: E402
from claims_backend.models.center import Center  # noqa: E402
from claims_backend.models.claim import Claim, SupervisedStudent  # noqa: E402, F401
from claims_backend.models.department import Department  # noqa: E402
from claims_backend.models.user import User  # noqa: E402


@pytest.fixture
def engine():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def add_user(db, email: str, role: Role, *, name: str | None = None, center_id=None, department_id=None) -> User:
    user = User(
        email=email,
        name=name,
        hashed_password='not-a-real-hash',
        role=role,
        lecturer_center_id=center_id,
        department_id=department_id,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def add_center(db, name: str, coordinator: User) -> Center:
    center = Center(name=name, coordinator_id=coordinator.id)
    db.add(center)
    db.commit()
    db.refresh(center)
    return center


def add_department(db, center: Center, name: str) -> Department:
    department = Department(name=name, center_id=center.id)
    db.add(department)
    db.commit()
    db.refresh(department)
    return department


def add_claim(db, submitter: User, center: Center, *, status: ClaimStatus = ClaimStatus.PENDING, **columns) -> Claim:
    columns.setdefault('claim_type', ClaimType.TEACHING)
    claim = Claim(submitted_by_id=submitter.id, center_id=center.id, status=status, **columns)
    db.add(claim)
    db.commit()
    db.refresh(claim)
    return claim


@pytest.fixture
def org(db):
    """Two centers, each with a coordinator, a department and a lecturer, plus a registry user."""
    registry = add_user(db, 'registry@example.edu', Role.REGISTRY, name='Registry Admin')

    coordinator = add_user(db, 'coordinator@example.edu', Role.COORDINATOR, name='Main Coordinator')
    center = add_center(db, 'Main Campus', coordinator)
    department = add_department(db, center, 'Mathematics')
    lecturer = add_user(db, 'lecturer@example.edu', Role.LECTURER, name='Ada Lovelace', center_id=center.id)

    other_coordinator = add_user(db, 'other.coordinator@example.edu', Role.COORDINATOR, name='Other Coordinator')
    other_center = add_center(db, 'North Campus', other_coordinator)
    other_department = add_department(db, other_center, 'Physics')
    other_lecturer = add_user(
        db,
        'other.lecturer@example.edu',
        Role.LECTURER,
        name='Alan Turing',
        center_id=other_center.id,
    )

    free_coordinator = add_user(db, 'free.coordinator@example.edu', Role.COORDINATOR, name='Free Coordinator')
    free_lecturer = add_user(db, 'free.lecturer@example.edu', Role.LECTURER, name='Grace Hopper')

    return SimpleNamespace(
        registry=registry,
        coordinator=coordinator,
        center=center,
        department=department,
        lecturer=lecturer,
        other_coordinator=other_coordinator,
        other_center=other_center,
        other_department=other_department,
        other_lecturer=other_lecturer,
        free_coordinator=free_coordinator,
        free_lecturer=free_lecturer,
    )


@pytest.fixture
def file_session_factory(tmp_path):
    """Sessions on a file database, so two sessions see each other's commits."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'claims.db'}",
        connect_args={'check_same_thread': False, 'timeout': 30},
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        engine.dispose()
