# Overview: Boundary parsing of raw request payloads into typed command objects.

"""
Command Parsing

Clients send quantities and prices as free-form JSON values (numbers or
strings typed into a form). Everything is parsed here, once, into frozen
dataclasses before the state machine sees it. Anything that does not parse
cleanly is rejected with ValidationError; nothing is coerced.

Money is converted to integer cents. A value with more than two decimal
places is rejected rather than rounded.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from .errors import ValidationError
from .models import OrderStatus, PaymentMethod, PaymentStatus
from .time_utils import parse_iso_datetime


MAX_QUANTITY = 1_000_000
# 99,999,999.99 in major units
MAX_AMOUNT_CENTS = 9_999_999_999


def _require_mapping(payload: Any) -> dict:
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    return payload


def parse_positive_int(value: Any, field: str, *, maximum: int = MAX_QUANTITY) -> int:
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} must be a positive integer", field=field)

    if isinstance(value, int):
        number = value
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped or not stripped.lstrip("-").isdigit():
            raise ValidationError(f"{field} must be a positive integer", field=field)
        try:
            number = int(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be a positive integer", field=field)
    else:
        # Floats (even 10.0) are rejected; items are counted in whole units
        raise ValidationError(f"{field} must be a positive integer", field=field)

    if number <= 0:
        raise ValidationError(f"{field} must be greater than 0", field=field)
    if number > maximum:
        raise ValidationError(f"{field} cannot exceed {maximum}", field=field)
    return number


def parse_money_cents(value: Any, field: str) -> int:
    """Parse a positive major-unit amount (e.g. "250", 250.5) into cents."""
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} must be a positive number", field=field)

    if isinstance(value, str):
        text = value.strip().replace(",", "")
    elif isinstance(value, (int, float, Decimal)):
        text = str(value)
    else:
        raise ValidationError(f"{field} must be a positive number", field=field)

    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise ValidationError(f"{field} must be a positive number", field=field)

    if not amount.is_finite():
        raise ValidationError(f"{field} must be a positive number", field=field)
    if amount <= 0:
        raise ValidationError(f"{field} must be greater than 0", field=field)
    if amount.as_tuple().exponent < -2:
        raise ValidationError(f"{field} cannot have more than 2 decimal places", field=field)

    cents = int(amount * 100)
    if cents > MAX_AMOUNT_CENTS:
        raise ValidationError(f"{field} is too large", field=field)
    return cents


def parse_optional_text(value: Any, field: str, *, max_length: int = 2000) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be text", field=field)
    text = value.strip()
    if not text:
        return None
    if len(text) > max_length:
        raise ValidationError(f"{field} exceeds max length {max_length}", field=field)
    return text


def parse_required_text(value: Any, field: str, *, max_length: int = 255) -> str:
    text = parse_optional_text(value, field, max_length=max_length)
    if text is None:
        raise ValidationError(f"{field} is required", field=field)
    return text


def parse_payment_method(value: Any, *, default: PaymentMethod | None = None) -> PaymentMethod:
    if value is None or (isinstance(value, str) and not value.strip()):
        if default is None:
            raise ValidationError("payment_method is required", field="payment_method")
        return default
    if isinstance(value, str):
        wanted = value.strip().lower()
        for method in PaymentMethod:
            if method.value.lower() == wanted:
                return method
    allowed = ", ".join(m.value for m in PaymentMethod)
    raise ValidationError(f"Invalid payment_method. Must be one of: {allowed}", field="payment_method")


def _parse_id(value: Any, field: str) -> int:
    if value is None or value == "":
        raise ValidationError(f"{field} is required", field=field)
    return parse_positive_int(value, field, maximum=2**31 - 1)


@dataclass(frozen=True)
class CreateOrderCommand:
    item_id: int
    supplier_id: int
    quantity: int
    unit_price_cents: int
    notes: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "CreateOrderCommand":
        data = _require_mapping(payload)
        return cls(
            item_id=_parse_id(data.get("item_id"), "item_id"),
            supplier_id=_parse_id(data.get("supplier_id"), "supplier_id"),
            quantity=parse_positive_int(data.get("quantity"), "quantity"),
            unit_price_cents=parse_money_cents(data.get("unit_price"), "unit_price"),
            notes=parse_optional_text(data.get("notes"), "notes"),
        )


@dataclass(frozen=True)
class RejectCommand:
    reason: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "RejectCommand":
        data = _require_mapping(payload)
        return cls(reason=parse_optional_text(data.get("reason"), "reason"))


@dataclass(frozen=True)
class SubmitPaymentCommand:
    # None means "the order's total cost"
    amount_cents: int | None = None
    payment_method: PaymentMethod = PaymentMethod.BANK_TRANSFER
    notes: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "SubmitPaymentCommand":
        data = _require_mapping(payload)
        raw_amount = data.get("amount")
        return cls(
            amount_cents=None if raw_amount in (None, "") else parse_money_cents(raw_amount, "amount"),
            payment_method=parse_payment_method(
                data.get("payment_method"), default=PaymentMethod.BANK_TRANSFER
            ),
            notes=parse_optional_text(data.get("notes"), "notes"),
        )


@dataclass(frozen=True)
class ProcessPaymentCommand:
    payment_method: PaymentMethod
    amount_paid_cents: int
    transaction_id: str | None = None
    notes: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "ProcessPaymentCommand":
        data = _require_mapping(payload)
        return cls(
            payment_method=parse_payment_method(data.get("payment_method")),
            amount_paid_cents=parse_money_cents(data.get("amount_paid"), "amount_paid"),
            transaction_id=parse_optional_text(data.get("transaction_id"), "transaction_id", max_length=128),
            notes=parse_optional_text(data.get("notes"), "notes"),
        )


@dataclass(frozen=True)
class MarkPaidCommand:
    # None means "keep what the payment record already holds"
    payment_method: PaymentMethod | None = None
    transaction_id: str | None = None
    notes: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "MarkPaidCommand":
        data = _require_mapping(payload)
        raw_method = data.get("payment_method")
        return cls(
            payment_method=None if raw_method in (None, "") else parse_payment_method(raw_method),
            transaction_id=parse_optional_text(data.get("transaction_id"), "transaction_id", max_length=128),
            notes=parse_optional_text(data.get("notes"), "notes"),
        )


@dataclass(frozen=True)
class ConfirmReceiptCommand:
    transaction_proof: str
    notes: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "ConfirmReceiptCommand":
        data = _require_mapping(payload)
        return cls(
            transaction_proof=parse_required_text(data.get("transaction_proof"), "transaction_proof"),
            notes=parse_optional_text(data.get("notes"), "notes"),
        )


@dataclass(frozen=True)
class StockAdjustmentCommand:
    quantity: int
    note: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "StockAdjustmentCommand":
        data = _require_mapping(payload)
        return cls(
            quantity=parse_positive_int(data.get("quantity"), "quantity"),
            note=parse_optional_text(data.get("note"), "note", max_length=255),
        )


def _parse_choice(value: Any, enum_cls, field: str):
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        wanted = value.strip().lower()
        for member in enum_cls:
            if member.value.lower() == wanted:
                return member
    allowed = ", ".join(m.value for m in enum_cls)
    raise ValidationError(f"Invalid {field}. Must be one of: {allowed}", field=field)


def parse_order_status(value: Any) -> OrderStatus | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return _parse_choice(value, OrderStatus, "status")


def parse_payment_status(value: Any, *, allow_all: bool = False) -> PaymentStatus | None:
    """"All" (when allowed) and blank both mean no filter."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if allow_all and isinstance(value, str) and value.strip().lower() == "all":
        return None
    return _parse_choice(value, PaymentStatus, "payment_status")


def parse_datetime_param(value: Any, field: str) -> datetime | None:
    try:
        return parse_iso_datetime(value)
    except (TypeError, ValueError, AttributeError):
        raise ValidationError(f"{field} must be an ISO-8601 datetime", field=field)
