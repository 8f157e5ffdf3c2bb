"""
Form Validation Helpers

Submitted forms are validated with Pydantic models. Failures are returned as a
flat field -> message map so handlers can re-render the form with inline
errors instead of surfacing an exception to the visitor.
"""

from typing import Any, Dict, Mapping, Optional, Tuple, Type, TypeVar

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_core import PydanticCustomError

FieldErrors = Dict[str, str]

FormT = TypeVar("FormT", bound=BaseModel)


def validate_form(
    schema: Type[FormT],
    form_data: Mapping[str, Any],
) -> Tuple[Optional[FormT], FieldErrors]:
    """
    Validate raw form data against a schema.

    Returns (model, {}) on success and (None, errors) on failure, where errors
    maps each failing field (dotted path, by alias) to its first message.
    """
    try:
        return schema.model_validate(dict(form_data)), {}
    except ValidationError as e:
        errors: FieldErrors = {}
        for issue in e.errors():
            path = ".".join(str(part) for part in issue["loc"])
            errors.setdefault(path, issue["msg"])
        return None, errors


def _not_blank(value: Any, message: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise PydanticCustomError("blank", message)
    return value.strip()


class LoginForm(BaseModel):
    """Email submitted on the login page."""
    email: str = Field("", validate_default=True)

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, v: Any) -> Any:
        return _not_blank(v, "Email cannot be blank")

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        # The submitted address is kept as typed; lookups are exact
        try:
            validate_email(v, check_deliverability=False)
        except EmailNotValidError as e:
            raise PydanticCustomError(
                "value_error",
                "value is not a valid email address: {reason}",
                {"reason": str(e)},
            )
        return v


class SignupForm(BaseModel):
    """Names submitted to complete a magic-link signup."""

    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field("", alias="firstName", validate_default=True)
    last_name: str = Field("", alias="lastName", validate_default=True)

    @field_validator("first_name", mode="before")
    @classmethod
    def first_name_not_blank(cls, v: Any) -> str:
        return _not_blank(v, "First name cannot be blank")

    @field_validator("last_name", mode="before")
    @classmethod
    def last_name_not_blank(cls, v: Any) -> str:
        return _not_blank(v, "Last name cannot be blank")
