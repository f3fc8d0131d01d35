"""New-request form schema.

Validation runs before any store or upload call. `validate_request_form`
never raises; it returns the parsed form or a field -> message dict.
"""

import re
from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationInfo, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError

from models import TaskType, Urgency
from storage import IMAGE_TYPE_ERROR, is_allowed_image

EMPLOYEE_ID_PATTERN = re.compile(r"^\d{4}-\d{3}$")

# pydantic field name -> form field name
_FIELD_ALIASES = {'has_image': 'image', 'image_filename': 'image'}


def _check_length(value, label, min_length, max_length, too_short=None):
    if len(value) < min_length:
        raise PydanticCustomError(
            'too_short', too_short or f"{label} must be at least {min_length} characters")
    if len(value) > max_length:
        raise PydanticCustomError(
            'too_long', f"{label} must be at most {max_length} characters")
    return value


class NewRequestForm(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    employee_id: str
    full_name: str
    branch: str
    email: Optional[EmailStr] = None
    task_type: TaskType = TaskType.OTHER
    task_description: str
    target_completion_date: date
    urgency: Urgency = Urgency.CAN_WAIT
    notes: Optional[str] = None
    has_image: bool = Field(default=False, validate_default=True)
    image_filename: Optional[str] = None

    @field_validator('employee_id')
    @classmethod
    def check_employee_id(cls, v):
        if not v:
            raise PydanticCustomError('required', 'Employee ID is required')
        if not EMPLOYEE_ID_PATTERN.match(v):
            raise PydanticCustomError(
                'pattern', 'Employee ID must be in format YYYY-NNN (e.g., 2025-322)')
        return v

    @field_validator('full_name')
    @classmethod
    def check_full_name(cls, v):
        return _check_length(v, 'Full name', 2, 100)

    @field_validator('branch')
    @classmethod
    def check_branch(cls, v):
        return _check_length(v, 'Branch', 2, 100, too_short='Branch is required')

    @field_validator('task_description')
    @classmethod
    def check_description(cls, v):
        return _check_length(v, 'Description', 10, 1000)

    @field_validator('email', 'notes', 'image_filename', mode='before')
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator('notes')
    @classmethod
    def check_notes(cls, v):
        if v is not None and len(v) > 500:
            raise PydanticCustomError('too_long', 'Notes must be at most 500 characters')
        return v

    @field_validator('target_completion_date', mode='before')
    @classmethod
    def require_date(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            raise PydanticCustomError('required', 'Target completion date is required')
        return v

    @field_validator('target_completion_date')
    @classmethod
    def not_in_past(cls, v, info: ValidationInfo):
        today = (info.context or {}).get('today') or date.today()
        if v < today:
            raise PydanticCustomError('past_date', 'Target completion date cannot be in the past')
        return v

    @field_validator('has_image')
    @classmethod
    def image_for_social_posts(cls, v, info: ValidationInfo):
        if info.data.get('task_type') == TaskType.SOCIAL_MEDIA_CONTENT and not v:
            raise PydanticCustomError('required', 'Facebook post image is required.')
        return v

    @field_validator('image_filename')
    @classmethod
    def image_type_for_social_posts(cls, v, info: ValidationInfo):
        if v and info.data.get('task_type') == TaskType.SOCIAL_MEDIA_CONTENT and not is_allowed_image(v):
            raise PydanticCustomError('image_type', IMAGE_TYPE_ERROR)
        return v

    def notes_with_urgency(self):
        prefix = f"Urgency: {self.urgency.label}"
        return f"{prefix}\n{self.notes}" if self.notes else prefix


def validate_request_form(data, today=None):
    """Return (form, {}) on success or (None, {field: message}) on failure."""
    try:
        form = NewRequestForm.model_validate(dict(data), context={'today': today})
    except PydanticValidationError as e:
        errors = {}
        for err in e.errors():
            field = str(err['loc'][0]) if err['loc'] else '__all__'
            field = _FIELD_ALIASES.get(field, field)
            if err['type'] == 'missing':
                message = 'This field is required'
            else:
                message = err['msg']
            errors.setdefault(field, message)
        return None, errors
    return form, {}
