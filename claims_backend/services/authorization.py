"""Role and relationship based permission checks.

Every operation is listed once in ``POLICY``. A check only looks at the actor
and a ``Target`` snapshot, so it can run before any validation or state change
and can be tested without a database.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable

from claims_backend.core.enums import Role
from claims_backend.core.errors import AuthorizationError

NOT_PERMITTED = 'not permitted'


class Operation(str, Enum):
    SUBMIT_CLAIM = 'submit_claim'
    APPROVE_CLAIM = 'approve_claim'
    REJECT_CLAIM = 'reject_claim'
    VIEW_CLAIM = 'view_claim'
    LIST_CENTER_CLAIMS = 'list_center_claims'
    CREATE_DEPARTMENT = 'create_department'
    RENAME_DEPARTMENT = 'rename_department'
    DELETE_DEPARTMENT = 'delete_department'
    ASSIGN_LECTURER = 'assign_lecturer'
    UNASSIGN_LECTURER = 'unassign_lecturer'
    CREATE_LECTURER = 'create_lecturer'
    RENAME_CENTER = 'rename_center'
    CHANGE_CENTER_COORDINATOR = 'change_center_coordinator'
    CREATE_CENTER = 'create_center'
    DELETE_CENTER = 'delete_center'
    CREATE_USER = 'create_user'
    ASSIGN_LECTURER_TO_CENTER = 'assign_lecturer_to_center'
    LIST_DEPARTMENTS = 'list_departments'
    LIST_CENTER_LECTURERS = 'list_center_lecturers'
    LIST_USERS = 'list_users'
    LIST_CENTERS = 'list_centers'
    LIST_AVAILABLE_LECTURERS = 'list_available_lecturers'
    LIST_AVAILABLE_COORDINATORS = 'list_available_coordinators'
    VIEW_REGISTRY_SUMMARY = 'view_registry_summary'


@dataclass(frozen=True)
class Actor:
    user_id: int
    role: Role
    lecturer_center_id: int | None = None

    @classmethod
    def from_user(cls, user) -> 'Actor':
        return cls(user_id=user.id, role=Role(user.role), lecturer_center_id=user.lecturer_center_id)


@dataclass(frozen=True)
class Target:
    """What the actor is acting on, as far as permissions are concerned."""

    center_id: int | None = None
    center_coordinator_id: int | None = None
    owner_id: int | None = None


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str | None = None


Rule = Callable[[Actor, Target], bool]


def _is_registry(actor: Actor, target: Target) -> bool:
    return actor.role == Role.REGISTRY


def _is_center_coordinator(actor: Actor, target: Target) -> bool:
    return (
        actor.role == Role.COORDINATOR
        and target.center_coordinator_id is not None
        and target.center_coordinator_id == actor.user_id
    )


def _is_center_lecturer(actor: Actor, target: Target) -> bool:
    return (
        actor.role == Role.LECTURER
        and actor.lecturer_center_id is not None
        and actor.lecturer_center_id == target.center_id
    )


def _is_owner(actor: Actor, target: Target) -> bool:
    return target.owner_id is not None and target.owner_id == actor.user_id


def _any_of(*rules: Rule) -> Rule:
    def rule(actor: Actor, target: Target) -> bool:
        return any(check(actor, target) for check in rules)

    return rule


_registry_only = _is_registry
_center_manager = _any_of(_is_center_coordinator, _is_registry)

POLICY: dict[Operation, Rule] = {
    Operation.SUBMIT_CLAIM: _is_center_lecturer,
    Operation.APPROVE_CLAIM: _center_manager,
    Operation.REJECT_CLAIM: _center_manager,
    Operation.VIEW_CLAIM: _any_of(_is_owner, _is_center_coordinator, _is_registry),
    Operation.LIST_CENTER_CLAIMS: _center_manager,
    Operation.CREATE_DEPARTMENT: _center_manager,
    Operation.RENAME_DEPARTMENT: _center_manager,
    Operation.DELETE_DEPARTMENT: _center_manager,
    Operation.ASSIGN_LECTURER: _center_manager,
    Operation.UNASSIGN_LECTURER: _center_manager,
    Operation.CREATE_LECTURER: _center_manager,
    Operation.RENAME_CENTER: _registry_only,
    Operation.CHANGE_CENTER_COORDINATOR: _registry_only,
    Operation.CREATE_CENTER: _registry_only,
    Operation.DELETE_CENTER: _registry_only,
    Operation.CREATE_USER: _registry_only,
    Operation.ASSIGN_LECTURER_TO_CENTER: _registry_only,
    Operation.LIST_DEPARTMENTS: _center_manager,
    Operation.LIST_CENTER_LECTURERS: _center_manager,
    Operation.LIST_USERS: _registry_only,
    Operation.LIST_CENTERS: _registry_only,
    Operation.LIST_AVAILABLE_LECTURERS: _registry_only,
    Operation.LIST_AVAILABLE_COORDINATORS: _registry_only,
    Operation.VIEW_REGISTRY_SUMMARY: _registry_only,
}


def authorize(actor: Actor, operation: Operation, target: Target | None = None) -> Decision:
    rule = POLICY.get(operation)
    if rule is None or not rule(actor, target or Target()):
        return Decision(allowed=False, reason=NOT_PERMITTED)
    return Decision(allowed=True)


def require(actor: Actor, operation: Operation, target: Target | None = None) -> None:
    decision = authorize(actor, operation, target)
    if not decision.allowed:
        raise AuthorizationError(decision.reason or NOT_PERMITTED)


def center_target(center) -> Target:
    if center is None:
        return Target()
    return Target(center_id=center.id, center_coordinator_id=center.coordinator_id)


def claim_target(claim) -> Target:
    return Target(
        center_id=claim.center_id,
        center_coordinator_id=claim.center.coordinator_id if claim.center else None,
        owner_id=claim.submitted_by_id,
    )
