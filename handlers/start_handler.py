"""
handlers/start_handler.py
--------------------------
Handles /start and /help commands.
/start also runs a generation pass, so anything that fell due while the
user was away is billed as soon as they come back.
"""

from datetime import date

from telegram import Update
from telegram.ext import ContextTypes

from services.generation_service import GenerationService
from security.auth import authorized_only
from security.rate_limiter import rate_limited
from utils.logger import get_logger

logger = get_logger(__name__)
generation_service = GenerationService()

HELP_TEXT = """
🤖 *Welcome to InvoiceFlow!*
Crypto invoices and recurring billing 🧾

*🧾 Invoices:*
/invoices - list invoices
/invoice <id> - invoice details and payment link
/new\\_invoice - create a one-off invoice
/pay <id> - mark an invoice as paid

*🔁 Recurring payments:*
/subscriptions - list recurring payments
/subscription <id> - recurring payment details
/add\\_subscription - create a recurring payment
/generate <id> - issue the next invoice now
/toggle\\_subscription <id> - pause or resume
/cancel\\_subscription <id> - cancel for good
/delete\\_subscription <id> - delete (invoices are kept)

/myid - show your Telegram ID
"""


@authorized_only
@rate_limited
async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start command - catch up on due invoices and show welcome message."""
    user = update.effective_user
    logger.info(f"User {user.id} ({user.first_name}) started the bot.")

    result = generation_service.run_generation_pass(date.today())
    catch_up = (
        f"\n🧾 {result.invoices_created} recurring invoice(s) generated since your last visit."
        if result.invoices_created
        else ""
    )

    await update.message.reply_text(
        f"Hello {user.first_name}! 👋\n"
        f"I create crypto invoices and bill your recurring clients on schedule.{catch_up}\n\n"
        f"Send /help to see every command."
    )


@authorized_only
@rate_limited
async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help command - show all available commands."""
    await update.message.reply_text(HELP_TEXT, parse_mode="Markdown")


@authorized_only
async def myid_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /myid command - show user's Telegram ID for whitelisting."""
    user = update.effective_user
    await update.message.reply_text(
        f"🆔 Your Telegram ID: `{user.id}`\n"
        f"Add it to `ALLOWED_USER_IDS` in `.env` to lock the bot down.",
        parse_mode="Markdown",
    )
