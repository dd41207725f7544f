"""
handlers/subscription_handler.py
--------------------------------
Handles subscription (recurring payment) interactions:
create, list, show, pause/resume, cancel, delete and generate now.
"""

from datetime import date

from telegram import Update
from telegram.ext import ContextTypes

from services.generation_service import GenerationService
from services.subscription_service import SubscriptionService
from security.auth import authorized_only
from security.rate_limiter import rate_limited
from utils.errors import ConcurrentUpdateError, NotFoundError, ValidationError
from utils.formatting import format_currency
from utils.logger import get_logger

logger = get_logger(__name__)
subscription_service = SubscriptionService()
generation_service = GenerationService()

_FIELDS = (
    "client_name", "client_email", "amount", "currency", "frequency",
    "wallet_address", "job_description", "start_date", "end_date", "custom_notes",
)
_REQUIRED = 8

ADD_USAGE = (
    "📝 *New recurring payment*\n\n"
    "*Format:*\n"
    "`/add_subscription name | email | amount | currency | frequency | wallet | job | start [| end] [| notes]`\n\n"
    "*Example:*\n"
    "• `/add_subscription Acme Ltd | billing@acme.io | 250 | USDC | monthly | 0xAbC123 | Site maintenance | 2026-11-01`\n\n"
    "*Currency:* BTC, ETH, USDT, USDC\n"
    "*Frequency:* weekly, monthly, quarterly, yearly"
)


def _parse_manual(text: str) -> dict | None:
    """
    Split the pipe-separated /add_subscription arguments into form fields.

    Returns None when fewer than the required fields are present; the
    values themselves are validated by SubscriptionService.create.
    """
    parts = [p.strip() for p in text.split("|")]
    if len(parts) < _REQUIRED:
        return None
    form = dict(zip(_FIELDS, parts))
    form["end_date"] = form.get("end_date") or None
    # Notes may themselves contain pipes
    form["custom_notes"] = " | ".join(parts[len(_FIELDS) - 1:]) if len(parts) >= len(_FIELDS) else ""
    return form


def _single_id(context: ContextTypes.DEFAULT_TYPE) -> str | None:
    return context.args[0].strip() if context.args else None


@authorized_only
@rate_limited
async def subscriptions_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /subscriptions - list every recurring payment."""
    await update.message.reply_text(subscription_service.list_summary())


@authorized_only
@rate_limited
async def subscription_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /subscription <id> - show one recurring payment."""
    sub_id = _single_id(context)
    if not sub_id:
        await update.message.reply_text("⚠️ Usage: /subscription <id>")
        return
    try:
        sub = subscription_service.get(sub_id)
    except NotFoundError as e:
        await update.message.reply_text(f"⚠️ {e}")
        return
    invoices = subscription_service.invoices_for(sub.id)
    await update.message.reply_text(subscription_service.describe(sub, invoices))


@authorized_only
@rate_limited
async def add_subscription_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /add_subscription - create a recurring payment from pipe-separated fields."""
    if not context.args:
        await update.message.reply_text(ADD_USAGE, parse_mode="Markdown")
        return

    form = _parse_manual(" ".join(context.args))
    if form is None:
        await update.message.reply_text(ADD_USAGE, parse_mode="Markdown")
        return

    try:
        sub = subscription_service.create(**form)
    except ValidationError as e:
        problems = "\n".join(f"• {msg}" for msg in e.errors.values())
        await update.message.reply_text(f"🤔 Please fix:\n{problems}")
        return

    await update.message.reply_text(f"🔁 Recurring payment added:\n\n{subscription_service.describe(sub)}")


@authorized_only
@rate_limited
async def toggle_subscription_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /toggle_subscription <id> - pause an active subscription or resume a paused one."""
    sub_id = _single_id(context)
    if not sub_id:
        await update.message.reply_text("⚠️ Usage: /toggle_subscription <id>")
        return
    try:
        sub = subscription_service.toggle_status(sub_id)
    except (NotFoundError, ConcurrentUpdateError, ValueError) as e:
        await update.message.reply_text(f"⚠️ {e}")
        return
    icon = "▶️" if sub.is_active() else "⏸️"
    await update.message.reply_text(f"{icon} Subscription {sub.id} is now {sub.status}.")


@authorized_only
@rate_limited
async def cancel_subscription_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /cancel_subscription <id> - stop a subscription permanently."""
    sub_id = _single_id(context)
    if not sub_id:
        await update.message.reply_text("⚠️ Usage: /cancel_subscription <id>")
        return
    try:
        sub = subscription_service.cancel(sub_id)
    except (NotFoundError, ConcurrentUpdateError) as e:
        await update.message.reply_text(f"⚠️ {e}")
        return
    await update.message.reply_text(f"🛑 Subscription {sub.id} cancelled.")


@authorized_only
@rate_limited
async def delete_subscription_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /delete_subscription <id> - remove a subscription.
    Invoices it already generated are kept.
    """
    sub_id = _single_id(context)
    if not sub_id:
        await update.message.reply_text("⚠️ Usage: /delete_subscription <id>")
        return
    if subscription_service.delete(sub_id):
        await update.message.reply_text(f"🗑️ Subscription {sub_id} deleted. Its invoices are kept.")
    else:
        await update.message.reply_text(f"⚠️ Subscription {sub_id} not found.")


@authorized_only
@rate_limited
async def generate_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /generate <id> - issue the next invoice of a subscription right now."""
    sub_id = _single_id(context)
    if not sub_id:
        await update.message.reply_text("⚠️ Usage: /generate <subscription id>")
        return

    result = generation_service.generate_now(sub_id, date.today())
    if result.invoices:
        inv = result.invoices[0]
        await update.message.reply_text(
            f"🧾 Invoice {inv.id} generated: {format_currency(inv.amount, inv.currency)}, due {inv.due_date}."
        )
        return

    issue = (result.failures or result.skipped)[0]
    await update.message.reply_text(f"⚠️ Nothing generated for {issue.subscription_id}: {issue.reason}")
