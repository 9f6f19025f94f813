"""
Unit tests for admin request validation.
"""

import pytest

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from shared.errors import ValidationError
from service_admin.app.domain.validators import (
    is_valid_email,
    is_valid_object_id,
    is_valid_password,
    is_valid_roles,
    validate_fail_payment,
    validate_object_id,
    validate_order_status_update,
    validate_password_reset,
    validate_user_update,
)


class TestPrimitives:
    """Test cases for the single-value checks."""

    @pytest.mark.parametrize("value,expected", [
        ("64b7f0c2a1b2c3d4e5f60718", True),
        ("64B7F0C2A1B2C3D4E5F60718", True),
        ("64b7f0c2a1b2c3d4e5f6071", False),
        ("zzb7f0c2a1b2c3d4e5f60718", False),
        (None, False),
    ])
    def test_object_id(self, value, expected):
        assert is_valid_object_id(value) is expected

    @pytest.mark.parametrize("value,expected", [
        ("a@b.co", True),
        ("no-at-sign", False),
        ("a b@c.d", False),
        (42, False),
    ])
    def test_email(self, value, expected):
        assert is_valid_email(value) is expected

    @pytest.mark.parametrize("value,expected", [
        ("abc123", True),
        ("abcdef", False),
        ("123456", False),
        ("a1", False),
    ])
    def test_password(self, value, expected):
        assert is_valid_password(value) is expected

    @pytest.mark.parametrize("value,expected", [
        (["admin"], True),
        (["customer", "admin"], True),
        ([], False),
        ("admin", False),
        (["Admin!"], False),
    ])
    def test_roles(self, value, expected):
        assert is_valid_roles(value) is expected


class TestUserUpdate:
    """Test cases for user update payloads."""

    def test_false_flag_counts_as_present(self):
        update = validate_user_update({"isActive": False})
        assert update.changes() == {"isActive": False}

    def test_only_sent_fields_are_forwarded(self):
        update = validate_user_update({"firstName": "Ada", "roles": ["admin"]})
        assert update.changes() == {"firstName": "Ada", "roles": ["admin"]}

    @pytest.mark.parametrize("body", [None, {}, [], "text"])
    def test_empty_or_non_object_rejected(self, body):
        with pytest.raises(ValidationError) as exc_info:
            validate_user_update(body)
        assert exc_info.value.message == "Invalid update payload"

    @pytest.mark.parametrize("body,message", [
        ({"roles": "admin"}, "Invalid roles"),
        ({"roles": []}, "Invalid roles"),
        ({"isActive": "yes"}, "Invalid isActive value"),
        ({"isActive": None}, "Invalid isActive value"),
        ({"email": "nope"}, "Invalid email"),
        ({"password": "short"}, "Invalid password"),
        ({"nickname": "x"}, "Invalid update payload"),
    ])
    def test_field_messages(self, body, message):
        with pytest.raises(ValidationError) as exc_info:
            validate_user_update(body)
        assert exc_info.value.message == message
        assert exc_info.value.status_code == 400


class TestOtherPayloads:
    """Test cases for the remaining request bodies."""

    def test_object_id_label(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_object_id("bad", "order")
        assert exc_info.value.message == "Invalid order ID"

    def test_order_status_update(self):
        update = validate_order_status_update({"status": "shipped", "notes": "left at door"})
        assert update.model_dump(exclude_none=True) == {"status": "shipped", "notes": "left at door"}

    @pytest.mark.parametrize("body", [None, {}, {"status": ""}, {"status": 3}, {"status": "x", "extra": 1}])
    def test_order_status_update_rejected(self, body):
        with pytest.raises(ValidationError) as exc_info:
            validate_order_status_update(body)
        assert exc_info.value.message == "Invalid status payload"

    def test_password_reset(self):
        assert validate_password_reset({"email": "a@b.co"}).email == "a@b.co"

    @pytest.mark.parametrize("body", [None, {}, {"email": "nope"}])
    def test_password_reset_rejected(self, body):
        with pytest.raises(ValidationError) as exc_info:
            validate_password_reset(body)
        assert exc_info.value.message == "Valid email is required"

    def test_fail_payment_body_is_optional(self):
        assert validate_fail_payment(None).reason is None
        assert validate_fail_payment({"reason": "card declined"}).reason == "card declined"

    def test_fail_payment_rejects_non_string_reason(self):
        with pytest.raises(ValidationError):
            validate_fail_payment({"reason": 12})
