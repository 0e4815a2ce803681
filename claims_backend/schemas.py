"""Request arguments, response views and the uniform operation result."""

import re
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from claims_backend.core.enums import ClaimStatus, ClaimType, Role, SupervisionRank, ThesisType, TransportType

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
MIN_PASSWORD_LENGTH = 8


def normalize_email(value: str) -> str:
    normalized = value.strip().lower()
    if not EMAIL_PATTERN.match(normalized):
        raise ValueError('Invalid email format.')
    return normalized


class ActionResult(BaseModel):
    success: bool
    message: str | None = None
    data: Any = None
    errors: dict[str, str] | None = None
    error: str | None = None


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        from_attributes=True,
    )


class ManageClaimArgs(_CamelModel):
    claim_id: int
    center_id: int


class CenterArgs(_CamelModel):
    center_id: int


class CreateDepartmentArgs(_CamelModel):
    center_id: int
    name: str = Field(min_length=2, max_length=100)


class UpdateDepartmentArgs(_CamelModel):
    department_id: int
    center_id: int
    name: str = Field(min_length=2, max_length=100)


class DeleteDepartmentArgs(_CamelModel):
    department_id: int
    center_id: int


class AssignLecturerArgs(_CamelModel):
    center_id: int
    department_id: int
    lecturer_id: int


class UnassignLecturerArgs(_CamelModel):
    center_id: int
    lecturer_id: int


class BulkAssignLecturersArgs(_CamelModel):
    center_id: int
    department_id: int
    lecturer_ids: list[int] = Field(min_length=1)


class BulkUnassignLecturersArgs(_CamelModel):
    center_id: int
    lecturer_ids: list[int] = Field(min_length=1)


class CreateLecturerArgs(_CamelModel):
    center_id: int
    name: str | None = Field(default=None, min_length=2, max_length=100)
    email: str
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)
    department_id: int | None = None

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)


class UpdateCenterNameArgs(_CamelModel):
    center_id: int
    new_name: str = Field(min_length=3, max_length=191)


class ChangeCoordinatorArgs(_CamelModel):
    center_id: int
    new_coordinator_id: int


class CreateCenterArgs(_CamelModel):
    name: str = Field(min_length=3, max_length=191)
    coordinator_id: int


class LecturerCenterArgs(_CamelModel):
    center_id: int
    lecturer_id: int


class CreateUserArgs(_CamelModel):
    name: str | None = Field(default=None, min_length=2, max_length=100)
    email: str
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)
    role: Role

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator('role', mode='before')
    @classmethod
    def normalize_role(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value


class LoginRequest(_CamelModel):
    email: str
    password: str = Field(min_length=1)

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)


class SignupRequest(_CamelModel):
    name: str = Field(min_length=2, max_length=100)
    email: str
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = 'bearer'
    role: Role


class UserView(_CamelModel):
    id: int
    email: str
    name: str | None = None
    role: Role
    lecturer_center_id: int | None = None
    department_id: int | None = None


class CenterView(_CamelModel):
    id: int
    name: str
    coordinator_id: int


class DepartmentView(_CamelModel):
    id: int
    name: str
    center_id: int


class NamedRef(_CamelModel):
    id: int
    name: str


class PersonView(_CamelModel):
    id: int
    name: str | None = None
    email: str


class UserDirectoryEntry(_CamelModel):
    id: int
    name: str | None = None
    email: str
    role: Role
    created_at: datetime
    coordinated_center: NamedRef | None = None
    lecturer_center: NamedRef | None = None
    department: NamedRef | None = None


class CenterListItem(_CamelModel):
    id: int
    name: str
    created_at: datetime
    coordinator: PersonView


class DepartmentListItem(_CamelModel):
    id: int
    name: str
    center_id: int
    lecturer_count: int


class CenterLecturerView(PersonView):
    department: NamedRef | None = None


class SupervisedStudentView(_CamelModel):
    student_name: str
    thesis_title: str


class ClaimListItem(_CamelModel):
    id: int
    claim_type: ClaimType
    status: ClaimStatus
    submitted_at: datetime
    processed_at: datetime | None = None
    submitted_by: PersonView
    teaching_date: date | None = None
    transport_destination_from: str | None = None
    transport_destination_to: str | None = None
    transport_amount: float | None = None
    thesis_type: ThesisType | None = None
    thesis_exam_course_code: str | None = None


class ClaimView(_CamelModel):
    id: int
    claim_type: ClaimType
    status: ClaimStatus
    description: str | None = None
    submitted_by_id: int
    center_id: int
    submitted_at: datetime
    updated_at: datetime
    processed_at: datetime | None = None
    processed_by_id: int | None = None

    teaching_date: date | None = None
    teaching_start_time: str | None = None
    teaching_end_time: str | None = None
    teaching_hours: float | None = None

    transport_type: TransportType | None = None
    transport_destination_from: str | None = None
    transport_destination_to: str | None = None
    transport_reg_number: str | None = None
    transport_cubic_capacity: int | None = None
    transport_amount: float | None = None

    thesis_type: ThesisType | None = None
    thesis_supervision_rank: SupervisionRank | None = None
    thesis_exam_course_code: str | None = None
    thesis_exam_date: date | None = None
    supervised_students: list[SupervisedStudentView] = Field(default_factory=list)


def dump(view_type: type[BaseModel], obj: Any) -> dict:
    return view_type.model_validate(obj).model_dump(mode='json', by_alias=True)
