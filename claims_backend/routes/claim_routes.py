from typing import Any

from fastapi import APIRouter, Body, Depends, Response, status
from sqlalchemy.orm import Session

from claims_backend import operations
from claims_backend.auth.dependencies import get_current_user
from claims_backend.database import get_db
from claims_backend.models.user import User
from claims_backend.routes.responses import respond

router = APIRouter(tags=['claims'])


@router.post('/')
def submit_claim(
    response: Response,
    payload: dict[str, Any] = Body(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = operations.create_claim(db, current_user, payload)
    return respond(result, response, success_status=status.HTTP_201_CREATED)


@router.get('/mine')
def list_my_claims(
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return respond(operations.list_my_claims(db, current_user), response)


@router.get('/{claim_id}')
def get_claim(
    claim_id: int,
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return respond(operations.get_claim(db, current_user, claim_id), response)


@router.post('/{claim_id}/approve')
def approve_claim(
    claim_id: int,
    response: Response,
    payload: dict[str, Any] | None = Body(default=None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = operations.approve_claim(db, current_user, {**(payload or {}), 'claimId': claim_id})
    return respond(result, response)


@router.post('/{claim_id}/reject')
def reject_claim(
    claim_id: int,
    response: Response,
    payload: dict[str, Any] | None = Body(default=None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = operations.reject_claim(db, current_user, {**(payload or {}), 'claimId': claim_id})
    return respond(result, response)
