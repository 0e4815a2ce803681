"""Coordinator-facing endpoints scoped to one center."""

from typing import Any

from fastapi import APIRouter, Body, Depends, Query, Response, status
from sqlalchemy.orm import Session

from claims_backend import operations
from claims_backend.auth.dependencies import get_current_user
from claims_backend.database import get_db
from claims_backend.models.user import User
from claims_backend.routes.responses import respond

router = APIRouter(tags=['centers'])


@router.get('/{center_id}/claims')
def list_center_claims(
    center_id: int,
    response: Response,
    query: str | None = Query(default=None, max_length=191),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = operations.list_center_claims(db, current_user, {'centerId': center_id}, query=query)
    return respond(result, response)


@router.get('/{center_id}/claims/summary')
def claim_summary(
    center_id: int,
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return respond(operations.claim_summary(db, current_user, {'centerId': center_id}), response)


@router.get('/{center_id}/departments')
def list_departments(
    center_id: int,
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return respond(operations.list_departments(db, current_user, {'centerId': center_id}), response)


@router.get('/{center_id}/lecturers')
def list_center_lecturers(
    center_id: int,
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return respond(operations.list_center_lecturers(db, current_user, {'centerId': center_id}), response)


@router.post('/{center_id}/departments')
def create_department(
    center_id: int,
    response: Response,
    payload: dict[str, Any] = Body(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = operations.create_department(db, current_user, {**payload, 'centerId': center_id})
    return respond(result, response, success_status=status.HTTP_201_CREATED)


@router.patch('/{center_id}/departments/{department_id}')
def update_department(
    center_id: int,
    department_id: int,
    response: Response,
    payload: dict[str, Any] = Body(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    values = {**payload, 'centerId': center_id, 'departmentId': department_id}
    return respond(operations.update_department(db, current_user, values), response)


@router.delete('/{center_id}/departments/{department_id}')
def delete_department(
    center_id: int,
    department_id: int,
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    values = {'centerId': center_id, 'departmentId': department_id}
    return respond(operations.delete_department(db, current_user, values), response)


@router.post('/{center_id}/departments/{department_id}/lecturers/{lecturer_id}')
def assign_lecturer_to_department(
    center_id: int,
    department_id: int,
    lecturer_id: int,
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    values = {'centerId': center_id, 'departmentId': department_id, 'lecturerId': lecturer_id}
    return respond(operations.assign_lecturer_to_department(db, current_user, values), response)


@router.post('/{center_id}/departments/{department_id}/lecturers')
def assign_lecturers_to_department(
    center_id: int,
    department_id: int,
    response: Response,
    payload: dict[str, Any] = Body(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    values = {**payload, 'centerId': center_id, 'departmentId': department_id}
    return respond(operations.assign_lecturers_to_department(db, current_user, values), response)


@router.delete('/{center_id}/lecturers/{lecturer_id}/department')
def unassign_lecturer_from_department(
    center_id: int,
    lecturer_id: int,
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    values = {'centerId': center_id, 'lecturerId': lecturer_id}
    return respond(operations.unassign_lecturer_from_department(db, current_user, values), response)


@router.post('/{center_id}/lecturers/unassign')
def unassign_lecturers_from_department(
    center_id: int,
    response: Response,
    payload: dict[str, Any] = Body(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    values = {**payload, 'centerId': center_id}
    return respond(operations.unassign_lecturers_from_department(db, current_user, values), response)


@router.post('/{center_id}/lecturers')
def create_lecturer(
    center_id: int,
    response: Response,
    payload: dict[str, Any] = Body(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = operations.create_lecturer_for_center(db, current_user, {**payload, 'centerId': center_id})
    return respond(result, response, success_status=status.HTTP_201_CREATED)
