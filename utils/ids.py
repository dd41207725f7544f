"""
utils/ids.py
------------
Opaque id generation for subscriptions and invoices.
"""

import secrets
import time

_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def _base36(number: int) -> str:
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_ALPHABET[rem])
    return "".join(reversed(digits)) or "0"


def _token() -> str:
    """9 random base36 characters followed by the millisecond clock in base36."""
    rand = "".join(secrets.choice(_ALPHABET) for _ in range(9))
    return rand + _base36(int(time.time() * 1000))


def generate_invoice_id() -> str:
    return "inv_" + _token()


def generate_subscription_id() -> str:
    return "rec_" + _token()
