from datetime import date
from decimal import Decimal

from main import _summary_text
from models.invoice import Invoice
from services.generation_service import GenerationIssue, GenerationResult


def _invoice(client_name):
    return Invoice(
        id="inv_abc",
        amount=Decimal("250"),
        currency="USDC",
        job_description="Hosting",
        wallet_address="0xAbC",
        due_date=date(2024, 2, 15),
        client_name=client_name,
        subscription_id="rec_1",
        is_recurring=True,
    )


def test_summary_escapes_markdown_in_client_names():
    result = GenerationResult(invoices_created=1, invoices=[_invoice("snake_case *Co*")])

    text = _summary_text(result)

    assert "snake\\_case \\*Co\\*" in text
    assert "`inv_abc`" in text


def test_summary_mentions_failures():
    result = GenerationResult(failures=[GenerationIssue("rec_1", "boom")])
    assert "1 subscription(s) failed" in _summary_text(result)
