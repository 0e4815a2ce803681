import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from claims_backend.auth import jwt_handler
from claims_backend.auth.dependencies import get_current_user
from claims_backend.auth.passwords import verify_password
from claims_backend.core.enums import Role
from claims_backend.core.errors import ConflictError
from claims_backend.database import get_db
from claims_backend.models.user import User
from claims_backend.schemas import LoginRequest, SignupRequest, TokenResponse, UserView
from claims_backend.services import directory

router = APIRouter(tags=['auth'])

logger = logging.getLogger(__name__)


def issue_token(user: User) -> TokenResponse:
    role = Role(user.role)
    token = jwt_handler.create_access_token(subject=str(user.id), role=role.value)
    return TokenResponse(access_token=token, role=role)


@router.post('/login', response_model=TokenResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    user = directory.find_user_by_email(db, data.email)
    if user is None or not verify_password(data.password, user.hashed_password):
        logger.info('Failed login attempt for %s', data.email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Invalid email or password.')

    return issue_token(user)


@router.post('/signup', response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def signup(data: SignupRequest, db: Session = Depends(get_db)):
    try:
        user = directory.create_user(
            db,
            email=data.email,
            password=data.password,
            role=Role.LECTURER,
            name=data.name,
        )
    except ConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.message) from exc

    return issue_token(user)


@router.get('/me', response_model=UserView, response_model_by_alias=True)
def me(current_user: User = Depends(get_current_user)):
    return current_user
