import pytest
from fastapi.testclient import TestClient

from claims_backend.auth.dependencies import get_current_user
from claims_backend.database import get_db
from claims_backend.main import app
from claims_backend.services.authorization import Actor

from conftest import add_claim


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _act_as(user) -> None:
    actor = Actor.from_user(user)
    app.dependency_overrides[get_current_user] = lambda: actor


def test_root_reports_status(client) -> None:
    response = client.get('/')

    assert response.status_code == 200
    assert response.json() == {'status': 'Claims API Running'}


def test_submit_claim_returns_201(client, org) -> None:
    _act_as(org.lecturer)

    response = client.post(
        '/claims/',
        json={'claimType': 'TEACHING', 'date': '2025-03-10', 'startTime': '09:00', 'endTime': '10:00'},
    )

    assert response.status_code == 201
    assert response.json()['success'] is True
    assert 'claimId' in response.json()['data']


def test_invalid_claim_returns_400_with_field_errors(client, org) -> None:
    _act_as(org.lecturer)

    response = client.post('/claims/', json={'claimType': 'TEACHING', 'startTime': '10:00', 'endTime': '09:00'})

    body = response.json()
    assert response.status_code == 400
    assert body['error'] == 'validation'
    assert body['errors'] == {'date': 'This field is required.', 'endTime': 'End time must be after start time.'}


def test_lecturer_cannot_approve(client, db, org) -> None:
    claim = add_claim(db, org.lecturer, org.center)
    _act_as(org.lecturer)

    response = client.post(f'/claims/{claim.id}/approve', json={'centerId': org.center.id})

    assert response.status_code == 403
    assert response.json() == {'success': False, 'message': 'not permitted', 'error': 'authorization'}


def test_approve_then_reject_returns_409(client, db, org) -> None:
    claim = add_claim(db, org.lecturer, org.center)
    _act_as(org.coordinator)

    approved = client.post(f'/claims/{claim.id}/approve', json={'centerId': org.center.id})
    rejected = client.post(f'/claims/{claim.id}/reject', json={'centerId': org.center.id})

    assert approved.status_code == 200
    assert approved.json()['data']['status'] == 'APPROVED'
    assert rejected.status_code == 409
    assert rejected.json()['message'] == 'Claim is already approved. Cannot change status.'


def test_registry_gets_404_for_missing_claim(client, org) -> None:
    _act_as(org.registry)

    response = client.get('/claims/9999')

    assert response.status_code == 404
    assert response.json()['error'] == 'not_found'


def test_center_claim_listing(client, db, org) -> None:
    add_claim(db, org.lecturer, org.center)
    _act_as(org.coordinator)

    response = client.get(f'/centers/{org.center.id}/claims', params={'query': 'lovelace'})

    assert response.status_code == 200
    assert len(response.json()['data']) == 1


def test_bulk_assignment_route(client, org) -> None:
    _act_as(org.coordinator)

    response = client.post(
        f'/centers/{org.center.id}/departments/{org.department.id}/lecturers',
        json={'lecturerIds': [org.lecturer.id]},
    )

    assert response.status_code == 200
    assert response.json()['data'] == {'succeeded': [org.lecturer.id], 'failed': []}


def test_registry_route_denies_coordinator(client, org) -> None:
    _act_as(org.coordinator)

    response = client.post('/registry/centers', json={'name': 'South Campus', 'coordinatorId': org.free_coordinator.id})

    assert response.status_code == 403


def test_registry_creates_center(client, org) -> None:
    _act_as(org.registry)

    response = client.post('/registry/centers', json={'name': 'South Campus', 'coordinatorId': org.free_coordinator.id})

    assert response.status_code == 201
    assert response.json()['data']['coordinatorId'] == org.free_coordinator.id


def test_center_department_listing(client, org) -> None:
    _act_as(org.coordinator)

    response = client.get(f'/centers/{org.center.id}/departments')

    assert response.status_code == 200
    assert response.json()['data'][0]['lecturerCount'] == 0


def test_center_lecturer_listing_denies_other_coordinator(client, org) -> None:
    _act_as(org.other_coordinator)

    response = client.get(f'/centers/{org.center.id}/lecturers')

    assert response.status_code == 403


def test_registry_summary_route(client, org) -> None:
    _act_as(org.registry)

    response = client.get('/registry/summary')

    assert response.status_code == 200
    assert response.json()['data'] == {'centerCount': 2, 'coordinatorCount': 3, 'lecturerCount': 3}


def test_registry_available_coordinators_route(client, org) -> None:
    _act_as(org.registry)

    response = client.get('/registry/coordinators/available')

    assert response.status_code == 200
    assert [entry['id'] for entry in response.json()['data']] == [org.free_coordinator.id]


def test_registry_user_listing_denies_coordinator(client, org) -> None:
    _act_as(org.coordinator)

    response = client.get('/registry/users')

    assert response.status_code == 403
