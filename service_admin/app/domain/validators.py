"""
Request validation for admin routes.

Optional fields are modelled as present/absent (``model_fields_set``)
rather than truthy/falsy, so ``{"isActive": false}`` is an update and an
explicit ``null`` is rejected.
"""

import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError, field_validator

from shared.errors import ValidationError

OBJECT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
ROLE_RE = re.compile(r"^[a-z][a-z0-9_-]*$")

MIN_PASSWORD_LENGTH = 6


def is_valid_object_id(value: Any) -> bool:
    return isinstance(value, str) and bool(OBJECT_ID_RE.match(value))


def is_valid_email(value: Any) -> bool:
    return isinstance(value, str) and len(value) <= 254 and bool(EMAIL_RE.match(value))


def is_valid_password(value: Any) -> bool:
    return (
        isinstance(value, str)
        and len(value) >= MIN_PASSWORD_LENGTH
        and any(c.isalpha() for c in value)
        and any(c.isdigit() for c in value)
    )


def is_valid_roles(value: Any) -> bool:
    return (
        isinstance(value, list)
        and len(value) > 0
        and all(isinstance(role, str) and ROLE_RE.match(role) for role in value)
    )


class UserUpdate(BaseModel):
    """Fields an admin may change on a user."""

    model_config = ConfigDict(extra="forbid", strict=True, populate_by_name=True)

    first_name: Optional[str] = Field(default=None, alias="firstName", min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, alias="lastName", min_length=1, max_length=100)
    email: Optional[str] = None
    password: Optional[str] = None
    phone_number: Optional[str] = Field(default=None, alias="phoneNumber", max_length=32)
    roles: Optional[List[str]] = None
    is_active: Optional[bool] = Field(default=None, alias="isActive")
    is_email_verified: Optional[bool] = Field(default=None, alias="isEmailVerified")

    @field_validator("*", mode="before")
    @classmethod
    def _present_means_not_null(cls, value):
        if value is None:
            raise ValueError("must not be null when present")
        return value

    @field_validator("email")
    @classmethod
    def _check_email(cls, value):
        if not is_valid_email(value):
            raise ValueError("invalid email")
        return value

    @field_validator("password")
    @classmethod
    def _check_password(cls, value):
        if not is_valid_password(value):
            raise ValueError("password too weak")
        return value

    @field_validator("roles")
    @classmethod
    def _check_roles(cls, value):
        if not is_valid_roles(value):
            raise ValueError("invalid roles")
        return value

    def changes(self) -> Dict[str, Any]:
        """Only the fields the caller actually sent, in wire naming."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class OrderStatusUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    status: str = Field(min_length=1, max_length=50)
    reason: Optional[str] = Field(default=None, max_length=500)
    notes: Optional[str] = Field(default=None, max_length=1000)


class PasswordResetRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", strict=True)

    email: str

    @field_validator("email")
    @classmethod
    def _check_email(cls, value):
        if not is_valid_email(value):
            raise ValueError("invalid email")
        return value


class FailPaymentRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", strict=True)

    reason: Optional[str] = Field(default=None, max_length=500)


USER_FIELD_MESSAGES = {
    "roles": "Invalid roles",
    "isActive": "Invalid isActive value",
    "email": "Invalid email",
    "password": "Invalid password",
}


def _first_field(exc: PydanticValidationError) -> Optional[str]:
    errors = exc.errors()
    if not errors or not errors[0]["loc"]:
        return None
    return str(errors[0]["loc"][0])


def _field_errors(exc: PydanticValidationError) -> List[str]:
    return [".".join(str(part) for part in err["loc"]) or "body" for err in exc.errors()]


def validate_object_id(value: str, label: str = "user") -> str:
    if not is_valid_object_id(value):
        raise ValidationError(f"Invalid {label} ID")
    return value


def validate_user_update(body: Any) -> UserUpdate:
    if not isinstance(body, dict) or not body:
        raise ValidationError("Invalid update payload")
    try:
        return UserUpdate.model_validate(body)
    except PydanticValidationError as e:
        message = USER_FIELD_MESSAGES.get(_first_field(e), "Invalid update payload")
        raise ValidationError(message, details={"fields": _field_errors(e)}) from None


def validate_order_status_update(body: Any) -> OrderStatusUpdate:
    if not isinstance(body, dict):
        raise ValidationError("Invalid status payload")
    try:
        return OrderStatusUpdate.model_validate(body)
    except PydanticValidationError as e:
        raise ValidationError("Invalid status payload", details={"fields": _field_errors(e)}) from None


def validate_password_reset(body: Any) -> PasswordResetRequest:
    if not isinstance(body, dict):
        raise ValidationError("Valid email is required")
    try:
        return PasswordResetRequest.model_validate(body)
    except PydanticValidationError:
        raise ValidationError("Valid email is required") from None


def validate_fail_payment(body: Any) -> FailPaymentRequest:
    if body is None:
        return FailPaymentRequest()
    if not isinstance(body, dict):
        raise ValidationError("Invalid fail-payment payload")
    try:
        return FailPaymentRequest.model_validate(body)
    except PydanticValidationError as e:
        raise ValidationError("Invalid fail-payment payload", details={"fields": _field_errors(e)}) from None
