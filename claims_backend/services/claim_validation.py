"""Claim payload validation.

A submission arrives as an untyped mapping with a ``claimType`` discriminant.
``validate_claim`` dispatches on that discriminant to one pydantic model per
claim type and returns the typed draft, or raises ``ValidationError`` with a
map from payload field name to message. Fields that do not belong to the
chosen type (or thesis/transport sub-type) are dropped before validation, so
nothing leaks across types into the stored record.
"""

import math
import re
from collections.abc import Mapping
from datetime import date
from typing import Any, ClassVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from claims_backend.core.enums import ClaimType, SupervisionRank, ThesisType, TransportType
from claims_backend.core.errors import ValidationError, field_errors_from_pydantic

MAX_DESCRIPTION_LENGTH = 1000
MAX_SUPERVISED_STUDENTS = 10
MAX_NAME_LENGTH = 191
MAX_THESIS_TITLE_LENGTH = 255
MAX_CODE_LENGTH = 50
MAX_CUBIC_CAPACITY = 100_000
NOT_A_NUMBER = 'not-a-number'
TIME_PATTERN = re.compile(r'^([01]\d|2[0-3]):([0-5]\d)$')

TYPED_COLUMNS = (
    'teaching_date',
    'teaching_start_time',
    'teaching_end_time',
    'teaching_hours',
    'transport_type',
    'transport_destination_from',
    'transport_destination_to',
    'transport_reg_number',
    'transport_cubic_capacity',
    'transport_amount',
    'thesis_type',
    'thesis_supervision_rank',
    'thesis_exam_course_code',
    'thesis_exam_date',
)


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _normalize_choice(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().upper()
    return value


def coerce_number(value: Any) -> float | None:
    """Accept numbers or numeric strings; anything else is ``not-a-number``."""
    value = _blank_to_none(value)
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(NOT_A_NUMBER)
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            raise ValueError(NOT_A_NUMBER) from None
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ValueError(NOT_A_NUMBER)
    return value


class _ClaimInput(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra='ignore')

    claim_type: ClassVar[ClaimType]

    description: str | None = Field(default=None, max_length=MAX_DESCRIPTION_LENGTH)

    @field_validator('description', mode='before')
    @classmethod
    def blank_description_is_none(cls, value: Any) -> Any:
        return _blank_to_none(value)


class TeachingClaimInput(_ClaimInput):
    claim_type: ClassVar[ClaimType] = ClaimType.TEACHING

    teaching_date: date = Field(alias='date')
    start_time: str = Field(alias='startTime')
    end_time: str = Field(alias='endTime')
    contact_hours: float | None = Field(default=None, alias='contactHours', ge=0)

    @field_validator('start_time')
    @classmethod
    def validate_start_time(cls, value: str) -> str:
        if not TIME_PATTERN.match(value):
            raise ValueError('Invalid start time (HH:MM).')
        return value

    @field_validator('end_time')
    @classmethod
    def validate_end_time(cls, value: str, info: ValidationInfo) -> str:
        if not TIME_PATTERN.match(value):
            raise ValueError('Invalid end time (HH:MM).')

        start_time = info.data.get('start_time')
        # zero-padded HH:MM compares correctly as text
        if start_time is not None and value <= start_time:
            raise ValueError('End time must be after start time.')

        return value

    @field_validator('contact_hours', mode='before')
    @classmethod
    def coerce_contact_hours(cls, value: Any) -> Any:
        return coerce_number(value)


class TransportationClaimInput(_ClaimInput):
    claim_type: ClassVar[ClaimType] = ClaimType.TRANSPORTATION

    transport_type: TransportType = Field(alias='transportType')
    destination_from: str = Field(alias='destinationFrom', min_length=1, max_length=MAX_NAME_LENGTH)
    destination_to: str = Field(alias='destinationTo', min_length=1, max_length=MAX_NAME_LENGTH)
    reg_number: str | None = Field(
        default=None,
        alias='regNumber',
        max_length=MAX_CODE_LENGTH,
        validate_default=True,
    )
    cubic_capacity: int | None = Field(default=None, alias='cubicCapacity', validate_default=True)
    amount: float | None = Field(default=None, alias='amount', ge=0)

    @model_validator(mode='before')
    @classmethod
    def discard_private_fields_for_public_transport(cls, data: Any) -> Any:
        if isinstance(data, Mapping) and _normalize_choice(data.get('transportType')) == TransportType.PUBLIC.value:
            data = {key: value for key, value in data.items() if key not in {'regNumber', 'cubicCapacity'}}
        return data

    @field_validator('transport_type', mode='before')
    @classmethod
    def normalize_transport_type(cls, value: Any) -> Any:
        return _normalize_choice(value)

    @field_validator('destination_from', 'destination_to', mode='before')
    @classmethod
    def blank_destination_is_none(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator('reg_number', mode='before')
    @classmethod
    def blank_reg_number_is_none(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator('reg_number')
    @classmethod
    def require_reg_number_for_private(cls, value: str | None, info: ValidationInfo) -> str | None:
        if value is None and info.data.get('transport_type') == TransportType.PRIVATE:
            raise ValueError('Registration number is required for private transport.')
        return value

    @field_validator('cubic_capacity', mode='before')
    @classmethod
    def coerce_cubic_capacity(cls, value: Any) -> Any:
        number = coerce_number(value)
        if number is None:
            return None
        if number != int(number):
            raise ValueError('Capacity must be a whole number.')
        return int(number)

    @field_validator('cubic_capacity')
    @classmethod
    def validate_cubic_capacity(cls, value: int | None, info: ValidationInfo) -> int | None:
        if value is None:
            if info.data.get('transport_type') == TransportType.PRIVATE:
                raise ValueError('Cubic capacity is required for private transport.')
            return None
        if value <= 0:
            raise ValueError('Capacity must be positive.')
        if value > MAX_CUBIC_CAPACITY:
            raise ValueError(f'Capacity must be at most {MAX_CUBIC_CAPACITY}.')
        return value

    @field_validator('amount', mode='before')
    @classmethod
    def coerce_amount(cls, value: Any) -> Any:
        return coerce_number(value)


class SupervisedStudentInput(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra='ignore')

    student_name: str = Field(alias='studentName', min_length=1, max_length=MAX_NAME_LENGTH)
    thesis_title: str = Field(alias='thesisTitle', min_length=1, max_length=MAX_THESIS_TITLE_LENGTH)


class ThesisProjectClaimInput(_ClaimInput):
    claim_type: ClassVar[ClaimType] = ClaimType.THESIS_PROJECT

    thesis_type: ThesisType = Field(alias='thesisType')
    supervision_rank: SupervisionRank | None = Field(default=None, alias='supervisionRank', validate_default=True)
    students: list[SupervisedStudentInput] | None = Field(default=None, alias='students', validate_default=True)
    course_code: str | None = Field(
        default=None,
        alias='courseCode',
        max_length=MAX_CODE_LENGTH,
        validate_default=True,
    )
    exam_date: date | None = Field(default=None, alias='examDate', validate_default=True)

    @model_validator(mode='before')
    @classmethod
    def discard_fields_of_other_thesis_type(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data

        thesis_type = _normalize_choice(data.get('thesisType'))
        if thesis_type == ThesisType.SUPERVISION.value:
            dropped = {'courseCode', 'examDate'}
        elif thesis_type == ThesisType.EXAMINATION.value:
            dropped = {'supervisionRank', 'students'}
        else:
            return data

        return {key: value for key, value in data.items() if key not in dropped}

    @field_validator('thesis_type', 'supervision_rank', mode='before')
    @classmethod
    def normalize_choices(cls, value: Any) -> Any:
        return _normalize_choice(_blank_to_none(value))

    @field_validator('supervision_rank')
    @classmethod
    def require_rank_for_supervision(cls, value: SupervisionRank | None, info: ValidationInfo) -> SupervisionRank | None:
        if value is None and info.data.get('thesis_type') == ThesisType.SUPERVISION:
            raise ValueError('Supervision rank is required.')
        return value

    @field_validator('students', mode='before')
    @classmethod
    def limit_student_count(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)) and len(value) > MAX_SUPERVISED_STUDENTS:
            raise ValueError(f'No more than {MAX_SUPERVISED_STUDENTS} students can be listed.')
        return value

    @field_validator('students')
    @classmethod
    def require_students_for_supervision(
        cls,
        value: list[SupervisedStudentInput] | None,
        info: ValidationInfo,
    ) -> list[SupervisedStudentInput] | None:
        if not value:
            if info.data.get('thesis_type') == ThesisType.SUPERVISION:
                raise ValueError('At least one student is required for supervision.')
            return None
        return value

    @field_validator('course_code', 'exam_date', mode='before')
    @classmethod
    def blank_examination_field_is_none(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator('course_code')
    @classmethod
    def require_course_code_for_examination(cls, value: str | None, info: ValidationInfo) -> str | None:
        if value is None and info.data.get('thesis_type') == ThesisType.EXAMINATION:
            raise ValueError('Course code is required for examination.')
        return value

    @field_validator('exam_date')
    @classmethod
    def require_exam_date_for_examination(cls, value: date | None, info: ValidationInfo) -> date | None:
        if value is None and info.data.get('thesis_type') == ThesisType.EXAMINATION:
            raise ValueError('Examination date is required.')
        return value


ClaimDraft = Union[TeachingClaimInput, TransportationClaimInput, ThesisProjectClaimInput]

CLAIM_SCHEMAS: dict[ClaimType, type[_ClaimInput]] = {
    ClaimType.TEACHING: TeachingClaimInput,
    ClaimType.TRANSPORTATION: TransportationClaimInput,
    ClaimType.THESIS_PROJECT: ThesisProjectClaimInput,
}


def parse_claim_type(value: Any) -> ClaimType:
    try:
        return ClaimType(_normalize_choice(value))
    except ValueError:
        raise ValidationError({'claimType': 'Invalid claim type selected.'}) from None


def validate_claim(payload: Any) -> ClaimDraft:
    """Validate a raw submission and return the typed draft for its claim type."""
    if not isinstance(payload, Mapping):
        raise ValidationError({'claimType': 'Invalid claim type selected.'})

    claim_type = parse_claim_type(payload.get('claimType'))
    schema = CLAIM_SCHEMAS[claim_type]

    try:
        return schema.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(field_errors_from_pydantic(exc, root_field='claimType')) from exc


def claim_columns(draft: ClaimDraft) -> dict[str, Any]:
    """Map a draft onto ``Claim`` column values, nulling every other typed column."""
    columns: dict[str, Any] = dict.fromkeys(TYPED_COLUMNS)
    columns['claim_type'] = draft.claim_type
    columns['description'] = draft.description

    if isinstance(draft, TeachingClaimInput):
        columns.update(
            teaching_date=draft.teaching_date,
            teaching_start_time=draft.start_time,
            teaching_end_time=draft.end_time,
            teaching_hours=draft.contact_hours,
        )
    elif isinstance(draft, TransportationClaimInput):
        is_private = draft.transport_type == TransportType.PRIVATE
        columns.update(
            transport_type=draft.transport_type,
            transport_destination_from=draft.destination_from,
            transport_destination_to=draft.destination_to,
            transport_reg_number=draft.reg_number if is_private else None,
            transport_cubic_capacity=draft.cubic_capacity if is_private else None,
            transport_amount=draft.amount,
        )
    elif isinstance(draft, ThesisProjectClaimInput):
        is_supervision = draft.thesis_type == ThesisType.SUPERVISION
        columns.update(
            thesis_type=draft.thesis_type,
            thesis_supervision_rank=draft.supervision_rank if is_supervision else None,
            thesis_exam_course_code=None if is_supervision else draft.course_code,
            thesis_exam_date=None if is_supervision else draft.exam_date,
        )
    else:
        raise TypeError(f'Unsupported claim draft: {type(draft).__name__}')

    return columns


def supervised_students(draft: ClaimDraft) -> list[SupervisedStudentInput]:
    if isinstance(draft, ThesisProjectClaimInput) and draft.thesis_type == ThesisType.SUPERVISION:
        return list(draft.students or [])
    return []
