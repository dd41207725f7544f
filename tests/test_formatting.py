from decimal import Decimal

import pytest

from utils.formatting import (
    format_currency, format_fiat, frequency_label, mock_fiat_equivalent, payment_uri,
)
from utils.ids import generate_invoice_id, generate_subscription_id


@pytest.mark.parametrize("amount, currency, expected", [
    (Decimal("0.5"), "BTC", "0.50000000 BTC"),
    (Decimal("1.2345678"), "ETH", "1.234568 ETH"),
    (Decimal("99.999"), "USDT", "100.00 USDT"),
    (10, "USDC", "10.00 USDC"),
])
def test_format_currency(amount, currency, expected):
    assert format_currency(amount, currency) == expected


def test_format_fiat():
    assert format_fiat(Decimal("1234.5")) == "$1,234.50"
    assert format_fiat(0) == "$0.00"


def test_frequency_label_defaults_to_monthly():
    assert frequency_label("quarterly") == "Quarterly"
    assert frequency_label("hourly") == "Monthly"


@pytest.mark.parametrize("currency, expected", [
    ("BTC", "bitcoin:addr?amount=1"),
    ("ETH", "ethereum:addr?value=1"),
    ("USDC", "ethereum:addr?value=1"),
    ("SOL", "sol:addr?amount=1"),
])
def test_payment_uri(currency, expected):
    assert payment_uri(currency, "addr", 1) == expected


def test_mock_fiat_equivalent():
    assert mock_fiat_equivalent("BTC", Decimal("0.01")) == Decimal("430.00")
    assert mock_fiat_equivalent("usdt", "12.345") == Decimal("12.35")
    assert mock_fiat_equivalent("XYZ", 7) == Decimal("7.00")


def test_ids_are_prefixed_and_unique():
    assert generate_invoice_id().startswith("inv_")
    assert generate_subscription_id().startswith("rec_")
    assert len({generate_invoice_id() for _ in range(100)}) == 100
