import pytest
from sqlalchemy.exc import IntegrityError

from claims_backend.auth.passwords import verify_password
from claims_backend.core.enums import Role
from claims_backend.core.errors import ConflictError, NotFoundError, ValidationError
from claims_backend.models.center import Center
from claims_backend.models.department import Department
from claims_backend.services import directory


def test_create_department_rejects_duplicate_name_in_same_center(db, org) -> None:
    with pytest.raises(ConflictError) as exception_info:
        directory.create_department(db, org.center.id, 'Mathematics')

    assert exception_info.value.message == 'A department named "Mathematics" already exists in this center.'


def test_create_department_allows_same_name_in_another_center(db, org) -> None:
    department = directory.create_department(db, org.other_center.id, 'Mathematics')

    assert department.center_id == org.other_center.id
    assert department.name == 'Mathematics'


def test_create_department_in_missing_center_is_not_found(db, org) -> None:
    with pytest.raises(NotFoundError):
        directory.create_department(db, 9999, 'Chemistry')


def test_database_enforces_unique_department_names_per_center(db, org) -> None:
    db.add(Department(name='Mathematics', center_id=org.center.id))

    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_update_department_rejects_name_of_sibling(db, org) -> None:
    chemistry = directory.create_department(db, org.center.id, 'Chemistry')

    with pytest.raises(ConflictError):
        directory.update_department(db, org.center.id, chemistry.id, 'Mathematics')


def test_update_department_renames(db, org) -> None:
    department = directory.update_department(db, org.center.id, org.department.id, 'Applied Mathematics')

    assert department.name == 'Applied Mathematics'


def test_update_department_of_another_center_is_not_found(db, org) -> None:
    with pytest.raises(NotFoundError) as exception_info:
        directory.update_department(db, org.center.id, org.other_department.id, 'Astronomy')

    assert exception_info.value.message == 'Department not found in this center.'


def test_create_center_with_free_coordinator(db, org) -> None:
    center = directory.create_center(db, name='South Campus', coordinator_id=org.free_coordinator.id)

    assert center.coordinator_id == org.free_coordinator.id


def test_create_center_rejects_coordinator_of_another_center(db, org) -> None:
    with pytest.raises(ConflictError) as exception_info:
        directory.create_center(db, name='South Campus', coordinator_id=org.coordinator.id)

    assert exception_info.value.message == 'Selected coordinator already manages another center.'


def test_create_center_rejects_non_coordinator(db, org) -> None:
    with pytest.raises(ValidationError) as exception_info:
        directory.create_center(db, name='South Campus', coordinator_id=org.free_lecturer.id)

    assert exception_info.value.field_errors == {'coordinatorId': 'Selected user is not a coordinator.'}


def test_create_center_rejects_duplicate_name(db, org) -> None:
    with pytest.raises(ConflictError):
        directory.create_center(db, name='Main Campus', coordinator_id=org.free_coordinator.id)


def test_database_enforces_one_center_per_coordinator(db, org) -> None:
    db.add(Center(name='South Campus', coordinator_id=org.coordinator.id))

    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_update_center_name_rejects_existing_name(db, org) -> None:
    with pytest.raises(ConflictError):
        directory.update_center_name(db, org.center.id, 'North Campus')

    renamed = directory.update_center_name(db, org.center.id, 'Central Campus')
    assert renamed.name == 'Central Campus'


def test_create_user_hashes_password_and_normalizes_email(db) -> None:
    user = directory.create_user(db, email=' New.Person@Example.EDU ', password='s3cret-pass', role=Role.COORDINATOR)

    assert user.email == 'new.person@example.edu'
    assert user.hashed_password != 's3cret-pass'
    assert verify_password('s3cret-pass', user.hashed_password)


def test_create_user_rejects_duplicate_email(db, org) -> None:
    with pytest.raises(ConflictError):
        directory.create_user(db, email='LECTURER@example.edu', password='s3cret-pass', role=Role.LECTURER)


def test_create_user_refuses_registry_role(db) -> None:
    with pytest.raises(ValidationError) as exception_info:
        directory.create_user(db, email='boss@example.edu', password='s3cret-pass', role=Role.REGISTRY)

    assert 'role' in exception_info.value.field_errors


def test_create_lecturer_for_center_with_department(db, org) -> None:
    lecturer = directory.create_lecturer_for_center(
        db,
        org.center.id,
        email='new.lecturer@example.edu',
        password='s3cret-pass',
        name='New Lecturer',
        department_id=org.department.id,
    )

    assert lecturer.role == Role.LECTURER
    assert lecturer.lecturer_center_id == org.center.id
    assert lecturer.department_id == org.department.id


def test_create_lecturer_for_center_rejects_department_of_another_center(db, org) -> None:
    with pytest.raises(ValidationError) as exception_info:
        directory.create_lecturer_for_center(
            db,
            org.center.id,
            email='new.lecturer@example.edu',
            password='s3cret-pass',
            department_id=org.other_department.id,
        )

    assert exception_info.value.field_errors == {
        'departmentId': 'Selected department does not belong to this center.',
    }


def test_require_lecturer_ignores_non_lecturers(db, org) -> None:
    with pytest.raises(NotFoundError):
        directory.require_lecturer(db, org.center.id, org.coordinator.id)


def test_list_departments_counts_lecturers(db, org) -> None:
    directory.create_department(db, org.center.id, 'Chemistry')
    org.lecturer.department_id = org.department.id
    db.commit()

    rows = directory.list_departments(db, org.center.id)

    assert [(department.name, count) for department, count in rows] == [('Chemistry', 0), ('Mathematics', 1)]


def test_list_departments_of_missing_center_is_not_found(db, org) -> None:
    with pytest.raises(NotFoundError):
        directory.list_departments(db, 9999)


def test_list_center_lecturers_only_returns_that_center(db, org) -> None:
    lecturers = directory.list_center_lecturers(db, org.center.id)

    assert [lecturer.id for lecturer in lecturers] == [org.lecturer.id]


def test_available_lecturers_and_coordinators_have_no_center(db, org) -> None:
    assert [user.id for user in directory.list_available_lecturers(db)] == [org.free_lecturer.id]
    assert [user.id for user in directory.list_available_coordinators(db)] == [org.free_coordinator.id]


def test_list_users_newest_first(db, org) -> None:
    users = directory.list_users(db)

    assert len(users) == 7
    assert users[0].id == org.free_lecturer.id
    assert users[-1].id == org.registry.id


def test_list_centers_newest_first_with_coordinator(db, org) -> None:
    centers = directory.list_centers(db)

    assert [center.name for center in centers] == ['North Campus', 'Main Campus']
    assert centers[0].coordinator.email == 'other.coordinator@example.edu'


def test_registry_counts(db, org) -> None:
    assert directory.registry_counts(db) == {'centerCount': 2, 'coordinatorCount': 3, 'lecturerCount': 3}
