import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from pydantic import ValidationError

from claims_backend.auth import jwt_handler
from claims_backend.auth.dependencies import get_current_user
from claims_backend.auth.passwords import hash_password, verify_password
from claims_backend.core import config
from claims_backend.core.enums import Role
from claims_backend.routes import auth_routes
from claims_backend.schemas import LoginRequest, SignupRequest


def _signup(db, email: str = 'New.Lecturer@Example.edu', password: str = 'correct-horse'):
    return auth_routes.signup(SignupRequest(name='New Lecturer', email=email, password=password), db=db)


def test_signup_request_normalizes_email() -> None:
    request = SignupRequest(name='Someone', email='  PERSON@EXAMPLE.EDU ', password='long-enough')

    assert request.email == 'person@example.edu'


@pytest.mark.parametrize('email', ['not-an-email', 'missing@tld', '@example.edu'])
def test_signup_request_rejects_invalid_email(email: str) -> None:
    with pytest.raises(ValidationError):
        SignupRequest(name='Someone', email=email, password='long-enough')


def test_signup_request_rejects_short_password() -> None:
    with pytest.raises(ValidationError):
        SignupRequest(name='Someone', email='person@example.edu', password='short')


def test_signup_creates_unassigned_lecturer(db) -> None:
    token = _signup(db)

    payload = jwt_handler.decode_access_token(token.access_token)
    user = get_current_user(HTTPAuthorizationCredentials(scheme='Bearer', credentials=token.access_token), db=db)

    assert token.role == Role.LECTURER
    assert payload['role'] == 'LECTURER'
    assert payload['sub'] == str(user.id)
    assert user.email == 'new.lecturer@example.edu'
    assert user.lecturer_center_id is None
    assert user.department_id is None


def test_signup_rejects_existing_email(db) -> None:
    _signup(db)

    with pytest.raises(HTTPException) as exception_info:
        _signup(db, email='new.lecturer@example.edu')

    assert exception_info.value.status_code == 409


def test_login_returns_token_for_valid_credentials(db) -> None:
    _signup(db)

    token = auth_routes.login(LoginRequest(email='NEW.LECTURER@example.edu', password='correct-horse'), db=db)

    assert token.token_type == 'bearer'
    assert jwt_handler.decode_access_token(token.access_token)['role'] == 'LECTURER'


@pytest.mark.parametrize(
    ('email', 'password'),
    [('new.lecturer@example.edu', 'wrong-horse'), ('nobody@example.edu', 'correct-horse')],
)
def test_login_rejects_bad_credentials(db, email: str, password: str) -> None:
    _signup(db)

    with pytest.raises(HTTPException) as exception_info:
        auth_routes.login(LoginRequest(email=email, password=password), db=db)

    assert exception_info.value.status_code == 401
    assert exception_info.value.detail == 'Invalid email or password.'


def test_me_returns_current_user(db, org) -> None:
    assert auth_routes.me(current_user=org.coordinator) is org.coordinator


def test_get_current_user_rejects_garbage_token(db) -> None:
    with pytest.raises(HTTPException) as exception_info:
        get_current_user(HTTPAuthorizationCredentials(scheme='Bearer', credentials='garbage'), db=db)

    assert exception_info.value.status_code == 401


def test_get_current_user_rejects_token_for_deleted_user(db) -> None:
    token = jwt_handler.create_access_token(subject='9999', role='LECTURER')

    with pytest.raises(HTTPException) as exception_info:
        get_current_user(HTTPAuthorizationCredentials(scheme='Bearer', credentials=token), db=db)

    assert exception_info.value.detail == 'User not found'


def test_get_current_user_rejects_expired_token(db, org) -> None:
    token = jwt_handler.create_access_token(subject=str(org.lecturer.id), role='LECTURER', expires_minutes=-5)

    with pytest.raises(HTTPException) as exception_info:
        get_current_user(HTTPAuthorizationCredentials(scheme='Bearer', credentials=token), db=db)

    assert exception_info.value.detail == 'Invalid token'


def test_verify_password_handles_missing_or_malformed_hashes() -> None:
    hashed = hash_password('correct-horse')

    assert verify_password('correct-horse', hashed)
    assert not verify_password('wrong-horse', hashed)
    assert not verify_password('correct-horse', None)
    assert not verify_password('correct-horse', 'not-a-bcrypt-hash')


def test_validate_runtime_config_refuses_default_secret_in_production(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, 'APP_ENV', 'production')
    monkeypatch.setattr(config, 'JWT_SECRET_KEY', 'change-me')

    with pytest.raises(RuntimeError):
        config.validate_runtime_config()

    monkeypatch.setattr(config, 'JWT_SECRET_KEY', 'a-real-secret')
    config.validate_runtime_config()
