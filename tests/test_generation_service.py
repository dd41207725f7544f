from datetime import date
from decimal import Decimal

from models.invoice import PENDING_PAYMENT
from models.subscription import CANCELLED, PAUSED, WEEKLY
from repositories.memory_store import InMemoryStore
from services.generation_service import GenerationService
from services.schedule import advance


class FlakyStore(InMemoryStore):
    """Fails invoice inserts for the listed subscription ids."""

    def __init__(self, failing_ids):
        super().__init__()
        self.failing_ids = set(failing_ids)

    def insert_invoice(self, invoice):
        if invoice.subscription_id in self.failing_ids:
            raise RuntimeError("disk full")
        return super().insert_invoice(invoice)


def test_end_to_end_monthly_pass(store, saved_subscription):
    sub = saved_subscription(next_invoice_date=date(2024, 1, 1), total_invoices_generated=0)

    result = GenerationService(store).run_generation_pass(date(2024, 1, 15))

    assert result.invoices_created == 1
    assert result.subscriptions_advanced == 1
    assert result.ok

    invoices = store.list_invoices()
    assert len(invoices) == 1
    assert invoices[0].status == PENDING_PAYMENT
    assert invoices[0].subscription_id == sub.id
    assert invoices[0].due_date == date(2024, 2, 15)

    updated = store.get_subscription(sub.id)
    assert updated.next_invoice_date == date(2024, 2, 15)
    assert updated.last_invoice_date == date(2024, 1, 15)
    assert updated.total_invoices_generated == 1
    assert updated.version == 1


def test_next_date_counts_from_the_generation_date(store, saved_subscription):
    sub = saved_subscription(next_invoice_date=date(2024, 1, 1))
    GenerationService(store).run_generation_pass(date(2024, 1, 1))
    assert store.get_subscription(sub.id).next_invoice_date == date(2024, 2, 1)


def test_second_pass_same_day_creates_nothing(store, saved_subscription):
    saved_subscription(next_invoice_date=date(2024, 1, 1))
    service = GenerationService(store)

    service.run_generation_pass(date(2024, 1, 15))
    second = service.run_generation_pass(date(2024, 1, 15))

    assert second.invoices_created == 0
    assert len(store.list_invoices()) == 1


def test_overdue_subscription_gets_one_invoice_per_pass(store, saved_subscription):
    sub = saved_subscription(frequency=WEEKLY, next_invoice_date=date(2024, 1, 1))
    service = GenerationService(store)

    result = service.run_generation_pass(date(2024, 4, 1))

    assert result.invoices_created == 1
    assert store.get_subscription(sub.id).next_invoice_date == date(2024, 4, 8)


def test_paused_and_cancelled_generate_nothing(store, saved_subscription):
    paused = saved_subscription(status=PAUSED, next_invoice_date=date(2023, 6, 1))
    saved_subscription(status=CANCELLED, next_invoice_date=date(2023, 6, 1))

    result = GenerationService(store).run_generation_pass(date(2024, 1, 15))

    assert result.invoices_created == 0
    assert store.list_invoices() == []
    assert store.get_subscription(paused.id).total_invoices_generated == 0


def test_only_due_subscriptions_are_billed(store, saved_subscription):
    due = saved_subscription(next_invoice_date=date(2024, 1, 10))
    saved_subscription(next_invoice_date=date(2024, 1, 20))

    result = GenerationService(store).run_generation_pass(date(2024, 1, 15))

    assert [i.subscription_id for i in result.invoices] == [due.id]


def test_failed_insert_leaves_subscription_unadvanced(make_subscription):
    store = FlakyStore(failing_ids={"rec_broken"})
    broken = make_subscription(id="rec_broken")
    healthy = make_subscription(id="rec_healthy")
    store.add_subscription(broken)
    store.add_subscription(healthy)

    result = GenerationService(store).run_generation_pass(date(2024, 1, 15))

    assert result.invoices_created == 1
    assert [f.subscription_id for f in result.failures] == ["rec_broken"]
    assert "disk full" in result.failures[0].reason
    assert not result.ok

    untouched = store.get_subscription("rec_broken")
    assert untouched.next_invoice_date == date(2024, 1, 1)
    assert untouched.total_invoices_generated == 0
    assert untouched.version == 0
    assert store.get_subscription("rec_healthy").total_invoices_generated == 1


def test_concurrent_advance_discards_the_draft(store, saved_subscription, monkeypatch):
    sub = saved_subscription(next_invoice_date=date(2024, 1, 1))
    stale = store.list_subscriptions()

    # Another session bills the cycle after this pass has read the subscriptions
    store.replace_subscription(advance(sub, date(2024, 1, 15)), expected_version=0)
    monkeypatch.setattr(store, "list_subscriptions", lambda: stale)

    result = GenerationService(store).run_generation_pass(date(2024, 1, 15))

    assert result.invoices_created == 0
    assert [s.subscription_id for s in result.skipped] == [sub.id]
    assert result.ok
    assert store.list_invoices() == []
    assert store.get_subscription(sub.id).total_invoices_generated == 1


def test_subscription_deleted_mid_pass_is_skipped(store, saved_subscription, monkeypatch):
    sub = saved_subscription()
    stale = store.list_subscriptions()
    store.delete_subscription(sub.id)
    monkeypatch.setattr(store, "list_subscriptions", lambda: stale)

    result = GenerationService(store).run_generation_pass(date(2024, 1, 15))

    assert result.invoices_created == 0
    assert len(result.skipped) == 1
    assert store.list_invoices() == []


def test_malformed_date_is_reported_not_raised(store, saved_subscription):
    saved_subscription(id="rec_bad", next_invoice_date="not-a-date")
    good = saved_subscription(id="rec_good")

    result = GenerationService(store).run_generation_pass(date(2024, 1, 15))

    assert [f.subscription_id for f in result.failures] == ["rec_bad"]
    assert [i.subscription_id for i in result.invoices] == [good.id]


class TestGenerateNow:
    def test_bypasses_the_due_check(self, store, saved_subscription):
        sub = saved_subscription(next_invoice_date=date(2024, 6, 1), amount=Decimal("99"))

        result = GenerationService(store).generate_now(sub.id, date(2024, 1, 15))

        assert result.invoices_created == 1
        assert result.invoices[0].amount == Decimal("99")
        updated = store.get_subscription(sub.id)
        assert updated.next_invoice_date == date(2024, 2, 15)
        assert updated.last_invoice_date == date(2024, 1, 15)

    def test_unknown_id_is_skipped(self, store):
        result = GenerationService(store).generate_now("rec_missing", date(2024, 1, 15))
        assert result.invoices_created == 0
        assert result.skipped[0].reason == "not found"

    def test_paused_subscription_is_skipped(self, store, saved_subscription):
        sub = saved_subscription(status=PAUSED)
        result = GenerationService(store).generate_now(sub.id, date(2024, 1, 15))
        assert result.invoices_created == 0
        assert "Paused" in result.skipped[0].reason
        assert store.list_invoices() == []

    def test_write_failure_is_reported(self, make_subscription):
        store = FlakyStore(failing_ids={"rec_x"})
        store.add_subscription(make_subscription(id="rec_x"))

        result = GenerationService(store).generate_now("rec_x", date(2024, 1, 15))

        assert result.failures[0].subscription_id == "rec_x"
        assert store.get_subscription("rec_x").total_invoices_generated == 0
