"""
services/validation.py
----------------------
Field checks shared by the subscription and invoice forms.

Each check appends to an `errors` dict instead of raising, so a form can
report every bad field at once; call `raise_if_errors` at the end.
"""

import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

from config import SUPPORTED_CURRENCIES
from models.subscription import FREQUENCIES
from utils.dates import to_date
from utils.errors import ValidationError

_EMAIL_RE = re.compile(r"\S+@\S+\.\S+")


def require_text(errors: dict, field: str, value: Optional[str], label: str) -> str:
    text = (value or "").strip()
    if not text:
        errors[field] = f"{label} is required"
    return text


def check_email(errors: dict, value: Optional[str]) -> str:
    email = (value or "").strip()
    if not email:
        errors["client_email"] = "Client email is required"
    elif not _EMAIL_RE.search(email):
        errors["client_email"] = "Please enter a valid email address"
    return email


def check_amount(errors: dict, value) -> Optional[Decimal]:
    """Parse a positive decimal amount."""
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        amount = None
    if amount is None or not amount.is_finite() or amount <= 0:
        errors["amount"] = "Please enter a valid amount"
        return None
    return amount


def check_currency(errors: dict, value: Optional[str]) -> str:
    currency = (value or "").strip().upper()
    if currency not in SUPPORTED_CURRENCIES:
        errors["currency"] = f"Currency must be one of {', '.join(SUPPORTED_CURRENCIES)}"
    return currency


def check_frequency(errors: dict, value: Optional[str]) -> str:
    frequency = (value or "").strip().lower()
    if frequency not in FREQUENCIES:
        errors["frequency"] = f"Frequency must be one of {', '.join(FREQUENCIES)}"
    return frequency


def check_date(errors: dict, field: str, value, label: str, required: bool = True) -> Optional[date]:
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            errors[field] = f"{label} is required"
        return None
    try:
        return to_date(value, field)
    except ValueError as e:
        errors[field] = str(e)
        return None


def raise_if_errors(errors: dict) -> None:
    if errors:
        raise ValidationError(errors)
