"""
main.py
-------
Entry point for the InvoiceFlow Telegram bot.

Responsibilities:
    - Initialize the database connection pool and schema.
    - Configure and start the Telegram bot with all handlers.
    - Run a recurring-invoice pass at start-up and once a day after that.
"""

from datetime import date, time as dt_time

from telegram import BotCommand
from telegram.ext import Application, CommandHandler
from telegram.helpers import escape_markdown

from config import ALLOWED_USER_IDS, GENERATION_HOUR, STORE_BACKEND, TELEGRAM_BOT_TOKEN
from db.connection import init_pool, close_pool
from db.init_db import create_tables
from handlers.start_handler import start_command, help_command, myid_command
from handlers.subscription_handler import (
    subscriptions_command,
    subscription_command,
    add_subscription_command,
    toggle_subscription_command,
    cancel_subscription_command,
    delete_subscription_command,
    generate_command,
)
from handlers.invoice_handler import (
    invoices_command,
    invoice_command,
    new_invoice_command,
    pay_command,
)
from services.generation_service import GenerationResult, GenerationService
from utils.formatting import format_currency
from utils.logger import get_logger

logger = get_logger(__name__)


def _summary_text(result: GenerationResult) -> str:
    lines = [f"🧾 *{result.invoices_created} recurring invoice(s) generated*\n"]
    for inv in result.invoices:
        lines.append(
            f"• `{inv.id}` {escape_markdown(inv.client_name or '')}: "
            f"{format_currency(inv.amount, inv.currency)}, due {inv.due_date}"
        )
    if result.failures:
        lines.append(f"\n⚠️ {len(result.failures)} subscription(s) failed, see logs.")
    return "\n".join(lines)


async def _notify(bot, result: GenerationResult) -> None:
    """Tell every whitelisted user what a pass produced. Silent when nothing happened."""
    if not result.invoices and not result.failures:
        return
    text = _summary_text(result)
    for user_id in ALLOWED_USER_IDS:
        try:
            await bot.send_message(chat_id=user_id, text=text, parse_mode="Markdown")
        except Exception as e:
            logger.error(f"Failed to notify {user_id} about generated invoices: {e}")


async def run_daily_generation(context) -> None:
    """
    Scheduled job: bill every subscription that has fallen due.
    Runs daily at GENERATION_HOUR:00.
    """
    result = GenerationService().run_generation_pass(date.today())
    await _notify(context.bot, result)


async def on_startup(application: Application) -> None:
    """Register the command menu and catch up on anything due since the last run."""
    commands = [
        BotCommand("start", "🚀 Start the bot"),
        BotCommand("help", "📖 Show help"),
        BotCommand("invoices", "🧾 List invoices"),
        BotCommand("invoice", "🔎 Invoice details"),
        BotCommand("new_invoice", "➕ Create an invoice"),
        BotCommand("pay", "✅ Mark an invoice paid"),
        BotCommand("subscriptions", "🔁 List recurring payments"),
        BotCommand("subscription", "🔎 Recurring payment details"),
        BotCommand("add_subscription", "➕ Create a recurring payment"),
        BotCommand("generate", "⚡ Generate the next invoice now"),
        BotCommand("toggle_subscription", "⏯️ Pause or resume"),
        BotCommand("cancel_subscription", "🛑 Cancel a recurring payment"),
        BotCommand("delete_subscription", "🗑️ Delete a recurring payment"),
        BotCommand("myid", "🆔 Your Telegram ID"),
    ]
    await application.bot.set_my_commands(commands)
    logger.info("Bot commands menu registered successfully.")

    result = GenerationService().run_generation_pass(date.today())
    await _notify(application.bot, result)


def main() -> None:
    """Initialize and run the bot."""

    # ── 1. Database setup ─────────────────────────────────
    if STORE_BACKEND == "memory":
        logger.warning("STORE_BACKEND=memory: data will be lost when the bot stops.")
    else:
        logger.info("Initializing database...")
        init_pool()
        create_tables()

    # ── 2. Build the Telegram application ─────────────────
    logger.info("Starting Telegram bot...")
    app = Application.builder().token(TELEGRAM_BOT_TOKEN).post_init(on_startup).build()

    # ── 3. Register command handlers ──────────────────────
    app.add_handler(CommandHandler("start", start_command))
    app.add_handler(CommandHandler("help", help_command))
    app.add_handler(CommandHandler("myid", myid_command))
    app.add_handler(CommandHandler("invoices", invoices_command))
    app.add_handler(CommandHandler("invoice", invoice_command))
    app.add_handler(CommandHandler("new_invoice", new_invoice_command))
    app.add_handler(CommandHandler("pay", pay_command))
    app.add_handler(CommandHandler("subscriptions", subscriptions_command))
    app.add_handler(CommandHandler("subscription", subscription_command))
    app.add_handler(CommandHandler("add_subscription", add_subscription_command))
    app.add_handler(CommandHandler("generate", generate_command))
    app.add_handler(CommandHandler("toggle_subscription", toggle_subscription_command))
    app.add_handler(CommandHandler("cancel_subscription", cancel_subscription_command))
    app.add_handler(CommandHandler("delete_subscription", delete_subscription_command))

    # ── 4. Schedule jobs ──────────────────────────────────
    job_queue = app.job_queue
    if job_queue:
        job_queue.run_daily(
            run_daily_generation,
            time=dt_time(hour=GENERATION_HOUR, minute=0),
            name="daily_invoice_generation",
        )
        logger.info(f"Scheduled daily invoice generation ({GENERATION_HOUR:02d}:00)")

    # ── 5. Start polling ──────────────────────────────────
    logger.info("🚀 InvoiceFlow is running! Press Ctrl+C to stop.")
    app.run_polling(drop_pending_updates=True, allowed_updates=["message"])

    # ── 6. Cleanup on shutdown ────────────────────────────
    close_pool()
    logger.info("InvoiceFlow stopped.")


if __name__ == "__main__":
    main()
