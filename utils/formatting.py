"""
utils/formatting.py
-------------------
Display helpers for amounts, frequencies and payment links,
plus the mock USD rate table used for fiat valuation snapshots.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

Number = Union[Decimal, int, float, str]

# Mock exchange rates (USD per unit). Stand-in for a price oracle.
MOCK_USD_RATES: dict[str, Decimal] = {
    "BTC": Decimal("43000"),
    "ETH": Decimal("2400"),
    "USDT": Decimal("1"),
    "USDC": Decimal("1"),
}

_CRYPTO_DECIMALS = {"BTC": 8, "ETH": 6}

_FREQUENCY_LABELS = {
    "weekly": "Weekly",
    "monthly": "Monthly",
    "quarterly": "Quarterly",
    "yearly": "Yearly",
}


def mock_fiat_equivalent(currency: str, amount: Number) -> Decimal:
    """
    USD value of `amount` at the mock rate, rounded to cents.
    Unknown currencies are valued 1:1.
    """
    rate = MOCK_USD_RATES.get(currency.upper(), Decimal("1"))
    return (Decimal(str(amount)) * rate).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def format_currency(amount: Number, currency: str) -> str:
    """
    Format a crypto amount: 8 decimals for BTC, 6 for ETH, 2 otherwise.

    >>> format_currency(Decimal("0.5"), "BTC")
    '0.50000000 BTC'
    """
    places = _CRYPTO_DECIMALS.get(currency, 2)
    quantum = Decimal(1).scaleb(-places)
    value = Decimal(str(amount)).quantize(quantum, rounding=ROUND_HALF_UP)
    return f"{value:f} {currency}"


def format_fiat(amount: Number) -> str:
    """Format a USD amount, e.g. '$1,234.50'."""
    value = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def frequency_label(frequency: str) -> str:
    return _FREQUENCY_LABELS.get(frequency, "Monthly")


def payment_uri(currency: str, address: str, amount: Number) -> str:
    """
    Build a wallet payment URI.

    BTC uses the bitcoin: scheme, ETH and the ERC-20 stablecoins use
    ethereum: with a value parameter, anything else uses its own ticker.
    """
    code = currency.lower()
    if code == "btc":
        return f"bitcoin:{address}?amount={amount}"
    if code in ("eth", "usdt", "usdc"):
        return f"ethereum:{address}?value={amount}"
    return f"{code}:{address}?amount={amount}"
