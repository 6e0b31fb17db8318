"""Field validation rules shared by every write path."""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from package_tracker.exceptions import ValidationFailedError

NAME_PATTERN = re.compile(r"^[A-Za-z\s]+$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
ADDRESS_PATTERN = re.compile(r"^[a-zA-Z0-9\s,.'-]+$")

PACKAGE_STATUSES = ("pending", "in-transit", "delivered", "not-delivered")

CONTACT_MIN_DIGITS = 10
CONTACT_MAX_DIGITS = 15
ADDRESS_MIN_LENGTH = 10
ADDRESS_MAX_LENGTH = 100


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    reason: str = ""

    def __bool__(self) -> bool:
        return self.ok


PASSED = ValidationResult(True)


def _fail(reason: str) -> ValidationResult:
    return ValidationResult(False, reason)


def check_name(value: Any) -> ValidationResult:
    if isinstance(value, str) and NAME_PATTERN.match(value):
        return PASSED
    return _fail(
        f"{value} is not a valid name! Only letters and spaces are allowed."
    )


def check_email(value: Any) -> ValidationResult:
    if isinstance(value, str) and EMAIL_PATTERN.match(value):
        return PASSED
    return _fail(f"{value} is not a valid email address")


def check_contact(value: Any) -> ValidationResult:
    digits = str(value)
    if (
        not isinstance(value, bool)
        and isinstance(value, (int, str))
        and digits.isdigit()
        and CONTACT_MIN_DIGITS <= len(digits) <= CONTACT_MAX_DIGITS
    ):
        return PASSED
    return _fail(
        f"{value} is not a valid phone number. "
        f"Must be {CONTACT_MIN_DIGITS} to {CONTACT_MAX_DIGITS} digits long"
    )


def check_address(value: Any) -> ValidationResult:
    if not isinstance(value, str):
        return _fail(f"{value} is not a valid address format")
    if len(value) < ADDRESS_MIN_LENGTH:
        return _fail(
            f"Address must be at least {ADDRESS_MIN_LENGTH} characters long"
        )
    if len(value) > ADDRESS_MAX_LENGTH:
        return _fail(f"Address cannot exceed {ADDRESS_MAX_LENGTH} characters")
    if not ADDRESS_PATTERN.match(value):
        return _fail(f"{value} is not a valid address format")
    return PASSED


def check_status(value: Any) -> ValidationResult:
    if value in PACKAGE_STATUSES:
        return PASSED
    return _fail(
        f"{value} is not a valid status! "
        f"Allowed values: {', '.join(PACKAGE_STATUSES)}."
    )


def has_two_decimal_places(value: Any) -> bool:
    """True for positive finite numbers with at most 2 fractional digits."""
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return False
    if isinstance(value, float) and not math.isfinite(value):
        return False
    if value <= 0:
        return False
    try:
        exponent = Decimal(str(value)).as_tuple().exponent
    except InvalidOperation:
        return False
    return isinstance(exponent, int) and exponent >= -2


def check_weight(value: Any) -> ValidationResult:
    if has_two_decimal_places(value):
        return PASSED
    return _fail(
        f"{value} must be a weight in kilograms with up to 2 decimal places"
    )


def check_price(value: Any) -> ValidationResult:
    if has_two_decimal_places(value):
        return PASSED
    return _fail(
        f"{value} is not a valid price! "
        "Must be a positive number with up to 2 decimal places"
    )


@dataclass(frozen=True)
class Rule:
    """Validation rule for one stored field.

    ``label`` is the field name clients see on the wire.
    """

    label: str
    check: Callable[[Any], ValidationResult] | None = None
    nullable: bool = False


PACKAGE_RULES: dict[str, Rule] = {
    "status": Rule("Status", check_status),
    "send_date": Rule("SendDate", nullable=True),
    "sender_name": Rule("SenderName", check_name),
    "recipient_id": Rule("RecipientId"),
    "origin": Rule("Origin", check_name),
    "destination": Rule("Destination", check_name),
    "description": Rule("Description", nullable=True),
    "package_weight": Rule("PackageWeight", check_weight),
    "price": Rule("Price", check_price),
}

PACKAGE_REQUIRED = (
    "status",
    "sender_name",
    "recipient_id",
    "origin",
    "destination",
    "package_weight",
    "price",
)

RECIPIENT_RULES: dict[str, Rule] = {
    "recipient_name": Rule("RecipientName", check_name),
    "recipient_email": Rule("RecipientEmail", check_email),
    "recipient_contact": Rule("RecipientContact", check_contact),
    "address": Rule("Address", check_address),
}

RECIPIENT_REQUIRED = (
    "recipient_name",
    "recipient_email",
    "recipient_contact",
    "address",
)


def check_field(
    rules: Mapping[str, Rule], field: str, value: Any
) -> ValidationResult:
    rule = rules.get(field)
    if rule is None:
        return _fail(f"{field} is not a known field")
    if rule.check is None:
        return PASSED
    return rule.check(value)


def ensure_valid(
    rules: Mapping[str, Rule],
    data: Mapping[str, Any],
    required: Iterable[str] = (),
) -> None:
    """Raise ``ValidationFailedError`` for the first failing field.

    Only the fields present in ``data`` are checked, so the same call
    serves full writes (with ``required``) and partial updates.
    """
    for field in required:
        if data.get(field) in (None, ""):
            label = rules[field].label
            raise ValidationFailedError(label, f"{label} is required")

    for field, value in data.items():
        rule = rules.get(field)
        if rule is not None and value is None:
            if rule.nullable:
                continue
            raise ValidationFailedError(rule.label, f"{rule.label} is required")
        result = check_field(rules, field, value)
        if not result:
            label = rule.label if rule is not None else field
            raise ValidationFailedError(label, result.reason, value=value)
