"""
services/generation_service.py
------------------------------
Turns due subscriptions into invoices.

A pass reads every subscription, and for each one that is due materializes
an invoice and advances the schedule, writing both in one transaction. The
subscription replace is conditional on the version read at the start of the
pass, so two sessions running at once cannot bill the same cycle twice.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from models.invoice import Invoice
from models.subscription import Subscription
from repositories import get_store
from repositories.base import Store
from services.materializer import materialize
from services.schedule import advance, is_due
from utils.dates import DateLike, to_date
from utils.errors import ConcurrentUpdateError
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class GenerationIssue:
    """A subscription the pass did not bill, and why."""
    subscription_id: str
    reason: str


@dataclass
class GenerationResult:
    """
    Outcome of a generation pass (or of a single 'generate now').

    Attributes:
        invoices_created: Invoices written.
        subscriptions_advanced: Subscriptions whose schedule moved on.
        invoices: The invoices written, in processing order.
        skipped: Not found, not active, or changed by someone else.
        failures: Errors raised while billing a subscription.
    """
    invoices_created: int = 0
    subscriptions_advanced: int = 0
    invoices: list[Invoice] = field(default_factory=list)
    skipped: list[GenerationIssue] = field(default_factory=list)
    failures: list[GenerationIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class GenerationService:
    """
    Drives invoice generation against a Store.

    Responsibilities:
        - Run a pass over every subscription (start-up, login, daily job).
        - Generate one invoice on demand for a single subscription.
        - Keep each subscription's invoice and schedule update atomic.
    """

    def __init__(self, store: Optional[Store] = None):
        self.store = store or get_store()

    def run_generation_pass(self, today: Optional[DateLike] = None) -> GenerationResult:
        """
        Bill every Active subscription whose next invoice date has arrived.

        Each due subscription yields exactly one invoice per pass, however
        many cycles it is behind. A failure on one subscription is recorded
        and the pass moves on to the next.

        Args:
            today: The date to evaluate against (defaults to the local date).

        Returns:
            A GenerationResult summarizing the pass.
        """
        today = to_date(today or date.today(), "today")
        result = GenerationResult()

        for sub in self.store.list_subscriptions():
            try:
                if not is_due(sub, today):
                    continue
                self._bill(sub, today, result)
            except ConcurrentUpdateError as e:
                logger.warning(f"Skipped subscription {sub.id}: {e}")
                result.skipped.append(GenerationIssue(sub.id, str(e)))
            except Exception as e:
                logger.error(f"Failed to generate invoice for subscription {sub.id}: {e}")
                result.failures.append(GenerationIssue(sub.id, str(e)))

        logger.info(
            f"Generation pass for {today}: {result.invoices_created} invoice(s) created, "
            f"{len(result.skipped)} skipped, {len(result.failures)} failed"
        )
        return result

    def generate_now(self, subscription_id: str, today: Optional[DateLike] = None) -> GenerationResult:
        """
        Generate an invoice for one subscription right away, due or not.

        Missing and non-Active subscriptions are reported as skipped.
        """
        today = to_date(today or date.today(), "today")
        result = GenerationResult()

        sub = self.store.get_subscription(subscription_id)
        if sub is None:
            logger.warning(f"Generate now: subscription {subscription_id} not found")
            result.skipped.append(GenerationIssue(subscription_id, "not found"))
            return result
        if not sub.is_active():
            result.skipped.append(GenerationIssue(subscription_id, f"subscription is {sub.status}"))
            return result

        try:
            self._bill(sub, today, result)
        except ConcurrentUpdateError as e:
            logger.warning(f"Skipped subscription {sub.id}: {e}")
            result.skipped.append(GenerationIssue(sub.id, str(e)))
        except Exception as e:
            logger.error(f"Failed to generate invoice for subscription {sub.id}: {e}")
            result.failures.append(GenerationIssue(sub.id, str(e)))
        return result

    def _bill(self, sub: Subscription, today: date, result: GenerationResult) -> None:
        """Materialize, advance and persist one cycle. Raises on any failure."""
        invoice = materialize(sub, generation_date=today)
        updated = advance(sub, today)

        with self.store.atomic():
            # Replace first: the version check must pass before the invoice exists
            if not self.store.replace_subscription(updated, expected_version=sub.version):
                raise ConcurrentUpdateError(sub.id, sub.version)
            saved = self.store.insert_invoice(invoice)

        result.invoices_created += 1
        result.subscriptions_advanced += 1
        result.invoices.append(saved)
        logger.info(
            f"Generated invoice {saved.id} from subscription {sub.id}; "
            f"next invoice on {updated.next_invoice_date}"
        )
