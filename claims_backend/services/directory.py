"""Organizational directory: users, centers and departments."""

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from claims_backend.auth.passwords import hash_password
from claims_backend.core.enums import Role
from claims_backend.core.errors import ConflictError, NotFoundError, ValidationError
from claims_backend.models.center import Center
from claims_backend.models.department import Department
from claims_backend.models.user import User
from claims_backend.services.persistence import commit_or_conflict

logger = logging.getLogger(__name__)


def get_center(db: Session, center_id: int | None) -> Center | None:
    if center_id is None:
        return None
    return db.get(Center, center_id)


def require_center(db: Session, center_id: int) -> Center:
    center = get_center(db, center_id)
    if center is None:
        raise NotFoundError('Center not found.')
    return center


def require_department(db: Session, center_id: int, department_id: int) -> Department:
    department = db.query(Department).filter(
        Department.id == department_id,
        Department.center_id == center_id,
    ).first()
    if department is None:
        raise NotFoundError('Department not found in this center.')
    return department


LECTURER_NOT_IN_CENTER = 'Lecturer not found or not assigned to this center.'


def require_lecturer(db: Session, center_id: int, lecturer_id: int) -> User:
    lecturer = db.query(User).filter(
        User.id == lecturer_id,
        User.lecturer_center_id == center_id,
        User.role == Role.LECTURER,
    ).first()
    if lecturer is None:
        raise NotFoundError(LECTURER_NOT_IN_CENTER)
    return lecturer


def find_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email.strip().lower()).first()


def create_user(
    db: Session,
    *,
    email: str,
    password: str,
    role: Role,
    name: str | None = None,
    allow_registry: bool = False,
) -> User:
    if role == Role.REGISTRY and not allow_registry:
        raise ValidationError({'role': 'Registry accounts cannot be created here.'})

    normalized_email = email.strip().lower()
    if find_user_by_email(db, normalized_email) is not None:
        raise ConflictError(f'A user with the email {normalized_email} already exists.')

    user = User(
        email=normalized_email,
        name=name,
        hashed_password=hash_password(password),
        role=role,
    )
    db.add(user)
    commit_or_conflict(db, f'A user with the email {normalized_email} already exists.')
    db.refresh(user)

    logger.info('Created %s user %s', role.value, user.id)
    return user


def create_center(db: Session, *, name: str, coordinator_id: int) -> Center:
    coordinator = db.get(User, coordinator_id)
    if coordinator is None:
        raise NotFoundError('Coordinator not found.')
    if coordinator.role != Role.COORDINATOR:
        raise ValidationError({'coordinatorId': 'Selected user is not a coordinator.'})

    if db.query(Center.id).filter(Center.coordinator_id == coordinator_id).first() is not None:
        raise ConflictError('Selected coordinator already manages another center.')
    if db.query(Center.id).filter(Center.name == name).first() is not None:
        raise ConflictError(f'A center named "{name}" already exists.')

    center = Center(name=name, coordinator_id=coordinator_id)
    db.add(center)
    commit_or_conflict(db, 'Center name or coordinator is already in use.')
    db.refresh(center)

    logger.info('Created center %s with coordinator %s', center.id, coordinator_id)
    return center


def update_center_name(db: Session, center_id: int, new_name: str) -> Center:
    center = require_center(db, center_id)
    if center.name == new_name:
        return center

    duplicate = db.query(Center.id).filter(Center.name == new_name, Center.id != center_id).first()
    if duplicate is not None:
        raise ConflictError(f'A center named "{new_name}" already exists.')

    center.name = new_name
    commit_or_conflict(db, f'A center named "{new_name}" already exists.')
    db.refresh(center)
    return center


def create_department(db: Session, center_id: int, name: str) -> Department:
    require_center(db, center_id)

    duplicate = db.query(Department.id).filter(
        Department.center_id == center_id,
        Department.name == name,
    ).first()
    if duplicate is not None:
        raise ConflictError(f'A department named "{name}" already exists in this center.')

    department = Department(name=name, center_id=center_id)
    db.add(department)
    commit_or_conflict(db, f'A department named "{name}" already exists in this center.')
    db.refresh(department)

    logger.info('Created department %s in center %s', department.id, center_id)
    return department


def update_department(db: Session, center_id: int, department_id: int, name: str) -> Department:
    department = require_department(db, center_id, department_id)
    if department.name == name:
        return department

    duplicate = db.query(Department.id).filter(
        Department.center_id == center_id,
        Department.name == name,
        Department.id != department_id,
    ).first()
    if duplicate is not None:
        raise ConflictError(f'A department named "{name}" already exists in this center.')

    department.name = name
    commit_or_conflict(db, f'A department named "{name}" already exists in this center.')
    db.refresh(department)
    return department


def create_lecturer_for_center(
    db: Session,
    center_id: int,
    *,
    email: str,
    password: str,
    name: str | None = None,
    department_id: int | None = None,
) -> User:
    require_center(db, center_id)
    if department_id is not None:
        department = db.query(Department.id).filter(
            Department.id == department_id,
            Department.center_id == center_id,
        ).first()
        if department is None:
            raise ValidationError({'departmentId': 'Selected department does not belong to this center.'})

    normalized_email = email.strip().lower()
    if find_user_by_email(db, normalized_email) is not None:
        raise ConflictError(f'A user with the email {normalized_email} already exists.')

    lecturer = User(
        email=normalized_email,
        name=name,
        hashed_password=hash_password(password),
        role=Role.LECTURER,
        lecturer_center_id=center_id,
        department_id=department_id,
    )
    db.add(lecturer)
    commit_or_conflict(db, f'A user with the email {normalized_email} already exists.')
    db.refresh(lecturer)

    logger.info('Created lecturer %s for center %s', lecturer.id, center_id)
    return lecturer


# Read-side queries for the registry and coordinator screens.

def list_users(db: Session) -> list[User]:
    return db.query(User).options(
        joinedload(User.coordinated_center),
        joinedload(User.lecturer_center),
        joinedload(User.department),
    ).order_by(User.created_at.desc(), User.id.desc()).all()


def list_centers(db: Session) -> list[Center]:
    return db.query(Center).options(joinedload(Center.coordinator)).order_by(
        Center.created_at.desc(),
        Center.id.desc(),
    ).all()


def list_departments(db: Session, center_id: int) -> list[tuple[Department, int]]:
    """Departments of a center by name, each with its number of lecturers."""
    require_center(db, center_id)
    return db.query(Department, func.count(User.id)).outerjoin(
        User,
        User.department_id == Department.id,
    ).filter(
        Department.center_id == center_id,
    ).group_by(Department.id).order_by(Department.name).all()


def list_center_lecturers(db: Session, center_id: int) -> list[User]:
    require_center(db, center_id)
    return db.query(User).options(joinedload(User.department)).filter(
        User.role == Role.LECTURER,
        User.lecturer_center_id == center_id,
    ).order_by(User.name, User.email).all()


def list_available_lecturers(db: Session) -> list[User]:
    return db.query(User).filter(
        User.role == Role.LECTURER,
        User.lecturer_center_id.is_(None),
    ).order_by(User.name, User.email).all()


def list_available_coordinators(db: Session) -> list[User]:
    """Coordinators that do not run any center yet."""
    assigned = select(Center.coordinator_id)
    return db.query(User).filter(
        User.role == Role.COORDINATOR,
        User.id.not_in(assigned),
    ).order_by(User.name, User.email).all()


def registry_counts(db: Session) -> dict[str, int]:
    return {
        'centerCount': db.query(Center.id).count(),
        'coordinatorCount': db.query(User.id).filter(User.role == Role.COORDINATOR).count(),
        'lecturerCount': db.query(User.id).filter(User.role == Role.LECTURER).count(),
    }
