import pytest

from claims_backend.core.enums import Role
from claims_backend.core.errors import AuthorizationError
from claims_backend.services.authorization import (
    POLICY,
    Actor,
    Operation,
    Target,
    authorize,
    center_target,
    require,
)

REGISTRY = Actor(user_id=1, role=Role.REGISTRY)
COORDINATOR = Actor(user_id=2, role=Role.COORDINATOR)
LECTURER = Actor(user_id=3, role=Role.LECTURER, lecturer_center_id=10)
UNASSIGNED_LECTURER = Actor(user_id=4, role=Role.LECTURER)

OWN_CENTER = Target(center_id=10, center_coordinator_id=2)
OTHER_CENTER = Target(center_id=20, center_coordinator_id=99)

CENTER_MANAGED = [
    Operation.APPROVE_CLAIM,
    Operation.REJECT_CLAIM,
    Operation.LIST_CENTER_CLAIMS,
    Operation.CREATE_DEPARTMENT,
    Operation.RENAME_DEPARTMENT,
    Operation.DELETE_DEPARTMENT,
    Operation.ASSIGN_LECTURER,
    Operation.UNASSIGN_LECTURER,
    Operation.CREATE_LECTURER,
    Operation.LIST_DEPARTMENTS,
    Operation.LIST_CENTER_LECTURERS,
]

REGISTRY_ONLY = [
    Operation.RENAME_CENTER,
    Operation.CHANGE_CENTER_COORDINATOR,
    Operation.CREATE_CENTER,
    Operation.DELETE_CENTER,
    Operation.CREATE_USER,
    Operation.ASSIGN_LECTURER_TO_CENTER,
    Operation.LIST_USERS,
    Operation.LIST_CENTERS,
    Operation.LIST_AVAILABLE_LECTURERS,
    Operation.LIST_AVAILABLE_COORDINATORS,
    Operation.VIEW_REGISTRY_SUMMARY,
]


def test_every_operation_has_a_rule() -> None:
    assert set(POLICY) == set(Operation)


@pytest.mark.parametrize('operation', CENTER_MANAGED)
def test_center_operations_allow_the_center_coordinator_and_registry(operation: Operation) -> None:
    assert authorize(COORDINATOR, operation, OWN_CENTER).allowed
    assert authorize(REGISTRY, operation, OWN_CENTER).allowed
    assert authorize(REGISTRY, operation, OTHER_CENTER).allowed


@pytest.mark.parametrize('operation', CENTER_MANAGED)
def test_center_operations_deny_coordinators_of_other_centers(operation: Operation) -> None:
    decision = authorize(COORDINATOR, operation, OTHER_CENTER)

    assert not decision.allowed
    assert decision.reason == 'not permitted'


@pytest.mark.parametrize('operation', CENTER_MANAGED)
@pytest.mark.parametrize('target', [OWN_CENTER, OTHER_CENTER, Target(), None])
def test_center_operations_deny_lecturers_whatever_the_target(operation: Operation, target) -> None:
    assert not authorize(LECTURER, operation, target).allowed


@pytest.mark.parametrize('operation', REGISTRY_ONLY)
def test_registry_operations_deny_everyone_else(operation: Operation) -> None:
    assert authorize(REGISTRY, operation).allowed
    assert not authorize(COORDINATOR, operation, OWN_CENTER).allowed
    assert not authorize(LECTURER, operation, OWN_CENTER).allowed


def test_coordinator_without_a_center_is_denied() -> None:
    assert not authorize(COORDINATOR, Operation.APPROVE_CLAIM, Target()).allowed


def test_submit_claim_requires_a_lecturer_of_that_center() -> None:
    assert authorize(LECTURER, Operation.SUBMIT_CLAIM, Target(center_id=10)).allowed
    assert not authorize(LECTURER, Operation.SUBMIT_CLAIM, Target(center_id=20)).allowed
    assert not authorize(UNASSIGNED_LECTURER, Operation.SUBMIT_CLAIM, Target()).allowed
    assert not authorize(COORDINATOR, Operation.SUBMIT_CLAIM, OWN_CENTER).allowed
    assert not authorize(REGISTRY, Operation.SUBMIT_CLAIM, OWN_CENTER).allowed


def test_view_claim_allows_owner_center_coordinator_and_registry() -> None:
    owned = Target(center_id=10, center_coordinator_id=2, owner_id=LECTURER.user_id)
    not_owned = Target(center_id=10, center_coordinator_id=2, owner_id=42)

    assert authorize(LECTURER, Operation.VIEW_CLAIM, owned).allowed
    assert not authorize(LECTURER, Operation.VIEW_CLAIM, not_owned).allowed
    assert authorize(COORDINATOR, Operation.VIEW_CLAIM, not_owned).allowed
    assert authorize(REGISTRY, Operation.VIEW_CLAIM, Target()).allowed


def test_require_raises_authorization_error() -> None:
    with pytest.raises(AuthorizationError) as exception_info:
        require(LECTURER, Operation.APPROVE_CLAIM, OWN_CENTER)

    assert exception_info.value.message == 'not permitted'
    assert exception_info.value.kind == 'authorization'


def test_center_target_of_missing_center_is_empty() -> None:
    assert center_target(None) == Target()
