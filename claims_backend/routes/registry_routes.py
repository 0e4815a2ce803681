"""Registry administration endpoints."""

from typing import Any

from fastapi import APIRouter, Body, Depends, Response, status
from sqlalchemy.orm import Session

from claims_backend import operations
from claims_backend.auth.dependencies import get_current_user
from claims_backend.database import get_db
from claims_backend.models.user import User
from claims_backend.routes.responses import respond

router = APIRouter(tags=['registry'])


@router.get('/summary')
def registry_summary(
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return respond(operations.registry_summary(db, current_user), response)


@router.get('/users')
def list_users(
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return respond(operations.list_users(db, current_user), response)


@router.get('/centers')
def list_centers(
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return respond(operations.list_centers(db, current_user), response)


@router.get('/lecturers/available')
def list_available_lecturers(
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return respond(operations.list_available_lecturers(db, current_user), response)


@router.get('/coordinators/available')
def list_available_coordinators(
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return respond(operations.list_available_coordinators(db, current_user), response)


@router.post('/users')
def create_user(
    response: Response,
    payload: dict[str, Any] = Body(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = operations.create_user(db, current_user, payload)
    return respond(result, response, success_status=status.HTTP_201_CREATED)


@router.post('/centers')
def create_center(
    response: Response,
    payload: dict[str, Any] = Body(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = operations.create_center(db, current_user, payload)
    return respond(result, response, success_status=status.HTTP_201_CREATED)


@router.patch('/centers/{center_id}')
def update_center_name(
    center_id: int,
    response: Response,
    payload: dict[str, Any] = Body(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = operations.update_center_name(db, current_user, {**payload, 'centerId': center_id})
    return respond(result, response)


@router.put('/centers/{center_id}/coordinator')
def change_center_coordinator(
    center_id: int,
    response: Response,
    payload: dict[str, Any] = Body(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = operations.change_center_coordinator(db, current_user, {**payload, 'centerId': center_id})
    return respond(result, response)


@router.delete('/centers/{center_id}')
def delete_center(
    center_id: int,
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return respond(operations.delete_center(db, current_user, {'centerId': center_id}), response)


@router.post('/centers/{center_id}/lecturers/{lecturer_id}')
def assign_lecturer_to_center(
    center_id: int,
    lecturer_id: int,
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    values = {'centerId': center_id, 'lecturerId': lecturer_id}
    return respond(operations.assign_lecturer_to_center(db, current_user, values), response)


@router.delete('/centers/{center_id}/lecturers/{lecturer_id}')
def remove_lecturer_from_center(
    center_id: int,
    lecturer_id: int,
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    values = {'centerId': center_id, 'lecturerId': lecturer_id}
    return respond(operations.remove_lecturer_from_center(db, current_user, values), response)
