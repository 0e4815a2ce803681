"""Named operations consumed by the HTTP layer.

Each operation takes a session, the acting user and a structured argument
object, and always returns an ``ActionResult``. The authorization check runs
first, before arguments are validated or any state is read for the decision.
"""

import logging
from collections.abc import Mapping
from functools import wraps
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from claims_backend.core.errors import (
    DATABASE_FAILURE,
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
    field_errors_from_pydantic,
)
from claims_backend.schemas import (
    ActionResult,
    AssignLecturerArgs,
    BulkAssignLecturersArgs,
    BulkUnassignLecturersArgs,
    CenterArgs,
    CenterLecturerView,
    CenterListItem,
    CenterView,
    ChangeCoordinatorArgs,
    ClaimListItem,
    ClaimView,
    CreateCenterArgs,
    CreateDepartmentArgs,
    CreateLecturerArgs,
    CreateUserArgs,
    DeleteDepartmentArgs,
    DepartmentListItem,
    DepartmentView,
    LecturerCenterArgs,
    ManageClaimArgs,
    PersonView,
    UnassignLecturerArgs,
    UpdateCenterNameArgs,
    UpdateDepartmentArgs,
    UserDirectoryEntry,
    UserView,
    dump,
)
from claims_backend.services import assignments, claim_state, claims, directory
from claims_backend.services.authorization import Actor, Operation, Target, center_target, claim_target, require
from claims_backend.services.claim_validation import validate_claim

logger = logging.getLogger(__name__)

GENERIC_FAILURE = 'An internal error occurred. Please try again.'


def _failure(exc: DomainError) -> ActionResult:
    if isinstance(exc, ValidationError):
        first_message = next(iter(exc.field_errors.values()), exc.message)
        return ActionResult(success=False, message=first_message, errors=exc.field_errors, error=exc.kind)
    return ActionResult(success=False, message=exc.message, error=exc.kind)


def operation(func):
    """Run an operation and normalize every failure into an ``ActionResult``."""

    @wraps(func)
    def wrapper(db: Session, actor, *args, **kwargs) -> ActionResult:
        name = func.__name__
        try:
            actor = _as_actor(actor)
            logger.info('%s requested by user %s', name, actor.user_id)
            return func(db, actor, *args, **kwargs)
        except ValidationError as exc:
            db.rollback()
            logger.warning('%s rejected invalid data: %s', name, exc.field_errors)
            return _failure(exc)
        except DomainError as exc:
            db.rollback()
            logger.info('%s failed (%s): %s', name, exc.kind, exc.message)
            return _failure(exc)
        except IntegrityError:
            db.rollback()
            logger.warning('%s hit a storage constraint', name, exc_info=True)
            return _failure(ConflictError('The change conflicts with the current data. Reload and try again.'))
        except SQLAlchemyError:
            db.rollback()
            logger.exception('%s failed with a database error', name)
            return ActionResult(success=False, message=DATABASE_FAILURE, error='internal')
        except Exception:
            db.rollback()
            logger.exception('%s failed unexpectedly', name)
            return ActionResult(success=False, message=GENERIC_FAILURE, error='internal')

    return wrapper


def _as_actor(actor) -> Actor:
    if isinstance(actor, Actor):
        return actor
    return Actor.from_user(actor)


def _parse(model: type[BaseModel], values: Any):
    if isinstance(values, model):
        return values
    if isinstance(values, BaseModel):
        values = values.model_dump()
    try:
        return model.model_validate(values if values is not None else {})
    except PydanticValidationError as exc:
        raise ValidationError(field_errors_from_pydantic(exc)) from exc


def _raw_id(values: Any, *keys: str) -> int | None:
    """Best-effort id lookup used to pick the authorization target."""
    if isinstance(values, BaseModel):
        values = values.model_dump()
    if not isinstance(values, Mapping):
        return None
    for key in keys:
        raw = values.get(key)
        if isinstance(raw, int) and not isinstance(raw, bool):
            return raw
        if isinstance(raw, str) and raw.strip().isdigit():
            return int(raw.strip())
    return None


def _require_for_center(db: Session, actor: Actor, op: Operation, values: Any) -> None:
    center = directory.get_center(db, _raw_id(values, 'centerId', 'center_id'))
    require(actor, op, center_target(center))


# --- Claims ---

@operation
def create_claim(db: Session, actor: Actor, payload: Any) -> ActionResult:
    require(actor, Operation.SUBMIT_CLAIM, Target(center_id=actor.lecturer_center_id))

    draft = validate_claim(payload)
    claim = claims.create_claim(db, actor.user_id, actor.lecturer_center_id, draft)

    return ActionResult(success=True, message='Claim submitted successfully.', data={'claimId': claim.id})


def _process_claim(db: Session, actor: Actor, values: Any, op: Operation) -> ActionResult:
    _require_for_center(db, actor, op, values)
    args = _parse(ManageClaimArgs, values)

    if op == Operation.APPROVE_CLAIM:
        claim = claim_state.approve_claim(db, args.claim_id, actor.user_id, center_id=args.center_id)
        message = 'Claim approved successfully.'
    else:
        claim = claim_state.reject_claim(db, args.claim_id, actor.user_id, center_id=args.center_id)
        message = 'Claim rejected successfully.'

    return ActionResult(success=True, message=message, data=dump(ClaimView, claim))


@operation
def approve_claim(db: Session, actor: Actor, values: Any) -> ActionResult:
    return _process_claim(db, actor, values, Operation.APPROVE_CLAIM)


@operation
def reject_claim(db: Session, actor: Actor, values: Any) -> ActionResult:
    return _process_claim(db, actor, values, Operation.REJECT_CLAIM)


@operation
def get_claim(db: Session, actor: Actor, claim_id: int) -> ActionResult:
    claim = claims.get_claim(db, claim_id)
    require(actor, Operation.VIEW_CLAIM, claim_target(claim) if claim is not None else Target())
    if claim is None:
        raise NotFoundError('Claim not found.')

    return ActionResult(success=True, data=dump(ClaimView, claim))


@operation
def list_my_claims(db: Session, actor: Actor) -> ActionResult:
    items = claims.list_claims_for_submitter(db, actor.user_id)
    return ActionResult(success=True, data=[dump(ClaimListItem, claim) for claim in items])


@operation
def list_center_claims(db: Session, actor: Actor, values: Any, query: str | None = None) -> ActionResult:
    _require_for_center(db, actor, Operation.LIST_CENTER_CLAIMS, values)
    args = _parse(CenterArgs, values)
    directory.require_center(db, args.center_id)

    items = claims.search_center_claims(db, args.center_id, query)
    return ActionResult(success=True, data=[dump(ClaimListItem, claim) for claim in items])


@operation
def claim_summary(db: Session, actor: Actor, values: Any) -> ActionResult:
    _require_for_center(db, actor, Operation.LIST_CENTER_CLAIMS, values)
    args = _parse(CenterArgs, values)
    directory.require_center(db, args.center_id)

    return ActionResult(success=True, data=claims.claim_summary(db, args.center_id))


# --- Departments and lecturers ---

@operation
def create_department(db: Session, actor: Actor, values: Any) -> ActionResult:
    _require_for_center(db, actor, Operation.CREATE_DEPARTMENT, values)
    args = _parse(CreateDepartmentArgs, values)

    department = directory.create_department(db, args.center_id, args.name)
    return ActionResult(
        success=True,
        message=f'Department "{department.name}" created successfully.',
        data=dump(DepartmentView, department),
    )


@operation
def update_department(db: Session, actor: Actor, values: Any) -> ActionResult:
    _require_for_center(db, actor, Operation.RENAME_DEPARTMENT, values)
    args = _parse(UpdateDepartmentArgs, values)

    department = directory.update_department(db, args.center_id, args.department_id, args.name)
    return ActionResult(
        success=True,
        message='Department name updated successfully.',
        data=dump(DepartmentView, department),
    )


@operation
def delete_department(db: Session, actor: Actor, values: Any) -> ActionResult:
    _require_for_center(db, actor, Operation.DELETE_DEPARTMENT, values)
    args = _parse(DeleteDepartmentArgs, values)

    name = assignments.delete_department(db, args.center_id, args.department_id)
    return ActionResult(success=True, message=f'Department "{name}" deleted successfully.')


@operation
def assign_lecturer_to_department(db: Session, actor: Actor, values: Any) -> ActionResult:
    _require_for_center(db, actor, Operation.ASSIGN_LECTURER, values)
    args = _parse(AssignLecturerArgs, values)

    lecturer = assignments.assign_lecturer_to_department(db, args.center_id, args.department_id, args.lecturer_id)
    return ActionResult(
        success=True,
        message='Lecturer assigned to department successfully.',
        data=dump(UserView, lecturer),
    )


@operation
def unassign_lecturer_from_department(db: Session, actor: Actor, values: Any) -> ActionResult:
    _require_for_center(db, actor, Operation.UNASSIGN_LECTURER, values)
    args = _parse(UnassignLecturerArgs, values)

    changed = assignments.unassign_lecturer_from_department(db, args.center_id, args.lecturer_id)
    if not changed:
        return ActionResult(success=True, message='Lecturer is not currently assigned to any department.')
    return ActionResult(success=True, message='Lecturer unassigned from department successfully.')


def _batch_result(outcome: assignments.BatchOutcome, verb: str) -> ActionResult:
    message = f'{len(outcome.succeeded)} lecturer(s) {verb}.'
    if outcome.failed:
        message += f' {len(outcome.failed)} failed.'
    return ActionResult(success=not outcome.failed, message=message, data=outcome.as_dict())


@operation
def assign_lecturers_to_department(db: Session, actor: Actor, values: Any) -> ActionResult:
    _require_for_center(db, actor, Operation.ASSIGN_LECTURER, values)
    args = _parse(BulkAssignLecturersArgs, values)

    outcome = assignments.assign_lecturers_to_department(db, args.center_id, args.department_id, args.lecturer_ids)
    return _batch_result(outcome, 'assigned')


@operation
def unassign_lecturers_from_department(db: Session, actor: Actor, values: Any) -> ActionResult:
    _require_for_center(db, actor, Operation.UNASSIGN_LECTURER, values)
    args = _parse(BulkUnassignLecturersArgs, values)

    outcome = assignments.unassign_lecturers_from_department(db, args.center_id, args.lecturer_ids)
    return _batch_result(outcome, 'unassigned')


@operation
def create_lecturer_for_center(db: Session, actor: Actor, values: Any) -> ActionResult:
    _require_for_center(db, actor, Operation.CREATE_LECTURER, values)
    args = _parse(CreateLecturerArgs, values)

    lecturer = directory.create_lecturer_for_center(
        db,
        args.center_id,
        email=args.email,
        password=args.password,
        name=args.name,
        department_id=args.department_id,
    )
    return ActionResult(
        success=True,
        message=f'Lecturer {lecturer.email} created successfully.',
        data=dump(UserView, lecturer),
    )


# --- Registry ---

@operation
def update_center_name(db: Session, actor: Actor, values: Any) -> ActionResult:
    require(actor, Operation.RENAME_CENTER)
    args = _parse(UpdateCenterNameArgs, values)

    center = directory.update_center_name(db, args.center_id, args.new_name)
    return ActionResult(success=True, message='Center name updated successfully.', data=dump(CenterView, center))


@operation
def change_center_coordinator(db: Session, actor: Actor, values: Any) -> ActionResult:
    require(actor, Operation.CHANGE_CENTER_COORDINATOR)
    args = _parse(ChangeCoordinatorArgs, values)

    center = assignments.change_center_coordinator(db, args.center_id, args.new_coordinator_id)
    return ActionResult(success=True, message='Center coordinator changed successfully.', data=dump(CenterView, center))


@operation
def create_center(db: Session, actor: Actor, values: Any) -> ActionResult:
    require(actor, Operation.CREATE_CENTER)
    args = _parse(CreateCenterArgs, values)

    center = directory.create_center(db, name=args.name, coordinator_id=args.coordinator_id)
    return ActionResult(
        success=True,
        message=f'Center "{center.name}" created successfully.',
        data=dump(CenterView, center),
    )


@operation
def delete_center(db: Session, actor: Actor, values: Any) -> ActionResult:
    require(actor, Operation.DELETE_CENTER)
    args = _parse(CenterArgs, values)

    name = assignments.delete_center(db, args.center_id)
    return ActionResult(success=True, message=f'Center "{name}" deleted successfully.')


@operation
def create_user(db: Session, actor: Actor, values: Any) -> ActionResult:
    require(actor, Operation.CREATE_USER)
    args = _parse(CreateUserArgs, values)

    user = directory.create_user(db, email=args.email, password=args.password, role=args.role, name=args.name)
    return ActionResult(success=True, message=f'User {user.email} created successfully.', data=dump(UserView, user))


@operation
def assign_lecturer_to_center(db: Session, actor: Actor, values: Any) -> ActionResult:
    require(actor, Operation.ASSIGN_LECTURER_TO_CENTER)
    args = _parse(LecturerCenterArgs, values)

    lecturer = assignments.assign_lecturer_to_center(db, args.center_id, args.lecturer_id)
    return ActionResult(success=True, message='Lecturer assigned to center successfully.', data=dump(UserView, lecturer))


@operation
def remove_lecturer_from_center(db: Session, actor: Actor, values: Any) -> ActionResult:
    require(actor, Operation.ASSIGN_LECTURER_TO_CENTER)
    args = _parse(LecturerCenterArgs, values)

    lecturer = assignments.remove_lecturer_from_center(db, args.center_id, args.lecturer_id)
    return ActionResult(success=True, message='Lecturer removed from center successfully.', data=dump(UserView, lecturer))


# --- Directory reads ---

@operation
def list_departments(db: Session, actor: Actor, values: Any) -> ActionResult:
    _require_for_center(db, actor, Operation.LIST_DEPARTMENTS, values)
    args = _parse(CenterArgs, values)

    rows = directory.list_departments(db, args.center_id)
    data = [
        dump(
            DepartmentListItem,
            {
                'id': department.id,
                'name': department.name,
                'center_id': department.center_id,
                'lecturer_count': count,
            },
        )
        for department, count in rows
    ]
    return ActionResult(success=True, data=data)


@operation
def list_center_lecturers(db: Session, actor: Actor, values: Any) -> ActionResult:
    _require_for_center(db, actor, Operation.LIST_CENTER_LECTURERS, values)
    args = _parse(CenterArgs, values)

    lecturers = directory.list_center_lecturers(db, args.center_id)
    return ActionResult(success=True, data=[dump(CenterLecturerView, lecturer) for lecturer in lecturers])


@operation
def list_users(db: Session, actor: Actor) -> ActionResult:
    require(actor, Operation.LIST_USERS)
    return ActionResult(success=True, data=[dump(UserDirectoryEntry, user) for user in directory.list_users(db)])


@operation
def list_centers(db: Session, actor: Actor) -> ActionResult:
    require(actor, Operation.LIST_CENTERS)
    return ActionResult(success=True, data=[dump(CenterListItem, center) for center in directory.list_centers(db)])


@operation
def list_available_lecturers(db: Session, actor: Actor) -> ActionResult:
    require(actor, Operation.LIST_AVAILABLE_LECTURERS)
    lecturers = directory.list_available_lecturers(db)
    return ActionResult(success=True, data=[dump(PersonView, lecturer) for lecturer in lecturers])


@operation
def list_available_coordinators(db: Session, actor: Actor) -> ActionResult:
    require(actor, Operation.LIST_AVAILABLE_COORDINATORS)
    coordinators = directory.list_available_coordinators(db)
    return ActionResult(success=True, data=[dump(PersonView, coordinator) for coordinator in coordinators])


@operation
def registry_summary(db: Session, actor: Actor) -> ActionResult:
    require(actor, Operation.VIEW_REGISTRY_SUMMARY)
    return ActionResult(success=True, data=directory.registry_counts(db))
