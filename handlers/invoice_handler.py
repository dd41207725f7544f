"""
handlers/invoice_handler.py
---------------------------
Handles invoice interactions: list, show, create ad hoc, and mark paid.
"""

from telegram import Update
from telegram.ext import ContextTypes

from services.invoice_service import InvoiceService
from security.auth import authorized_only
from security.rate_limiter import rate_limited
from utils.errors import NotFoundError, ValidationError
from utils.logger import get_logger

logger = get_logger(__name__)
invoice_service = InvoiceService()

_FIELDS = ("amount", "currency", "wallet_address", "job_description", "due_date", "custom_notes")
_REQUIRED = 5

NEW_USAGE = (
    "📝 *New invoice*\n\n"
    "*Format:*\n"
    "`/new_invoice amount | currency | wallet | job | due date [| notes]`\n\n"
    "*Example:*\n"
    "• `/new_invoice 0.05 | ETH | 0xAbC123 | Logo design | 2026-12-01`"
)


def _parse_manual(text: str) -> dict | None:
    """Split the pipe-separated /new_invoice arguments into form fields."""
    parts = [p.strip() for p in text.split("|")]
    if len(parts) < _REQUIRED:
        return None
    form = dict(zip(_FIELDS[:_REQUIRED], parts))
    form["custom_notes"] = " | ".join(parts[_REQUIRED:])
    return form


@authorized_only
@rate_limited
async def invoices_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /invoices - list the newest invoices."""
    await update.message.reply_text(invoice_service.list_summary())


@authorized_only
@rate_limited
async def invoice_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /invoice <id> - show one invoice with its payment link."""
    if not context.args:
        await update.message.reply_text("⚠️ Usage: /invoice <id>")
        return
    try:
        invoice = invoice_service.get(context.args[0].strip())
    except NotFoundError as e:
        await update.message.reply_text(f"⚠️ {e}")
        return
    await update.message.reply_text(invoice_service.describe(invoice))


@authorized_only
@rate_limited
async def new_invoice_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /new_invoice - create an ad hoc invoice."""
    form = _parse_manual(" ".join(context.args)) if context.args else None
    if form is None:
        await update.message.reply_text(NEW_USAGE, parse_mode="Markdown")
        return

    try:
        invoice = invoice_service.create(**form)
    except ValidationError as e:
        problems = "\n".join(f"• {msg}" for msg in e.errors.values())
        await update.message.reply_text(f"🤔 Please fix:\n{problems}")
        return

    await update.message.reply_text(f"🧾 Invoice created:\n\n{invoice_service.describe(invoice)}")


@authorized_only
@rate_limited
async def pay_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /pay <id> - mark an invoice as paid.
    The payment is taken on the user's word; nothing is checked on-chain.
    """
    if not context.args:
        await update.message.reply_text("⚠️ Usage: /pay <invoice id>")
        return
    try:
        invoice, changed = invoice_service.mark_paid(context.args[0].strip())
    except NotFoundError as e:
        await update.message.reply_text(f"⚠️ {e}")
        return

    if changed:
        await update.message.reply_text(f"✅ Invoice {invoice.id} marked as paid.")
    else:
        await update.message.reply_text(f"ℹ️ Invoice {invoice.id} was already paid.")
