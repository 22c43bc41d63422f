from dataclasses import replace
from datetime import date

import structlog

from models.recurring_item import RecurringItem
from models.recurring_history import RecurringHistoryEntry
from models.transaction import FinancialTransaction
from models.notification import Notification
from models.processing import ProcessingResult, ProcessingRun
from models.forecast import CommitmentSummary
from database.recurring_dao import RecurringDAO
from database.transaction_dao import TransactionDAO
from database.history_dao import HistoryDAO
from database.notification_dao import NotificationDAO
from services.errors import ScheduleConflictError
from utils.constants import CONTEXTS, FREQUENCIES, ITEM_TYPES
from utils.context import in_context
from utils.currency import format_currency, round_cents
from utils.date_helpers import clamp_day_to_month, parse_date, format_date, today, now_iso
from utils.frequency import advance_due_date

log = structlog.get_logger(__name__)


def plan_item(
    item: RecurringItem, reference_date: date, processed_at: str = ""
) -> list[ProcessingResult]:
    """Decide every cycle of `item` that is due on or before reference_date.

    Pure: nothing is written. Missed cycles are caught up oldest first, one
    result per cycle. Cycles falling after the item's end_date are never
    produced; the cursor is left for the user to retire the item.
    """
    if not item.is_active:
        return []
    cursor = parse_date(item.next_due_date)
    if cursor is None:
        raise ValueError(f"Invalid next due date '{item.next_due_date}'.")
    end = parse_date(item.end_date) if item.end_date else None
    start = parse_date(item.start_date)
    processed_on = format_date(reference_date)

    results: list[ProcessingResult] = []
    while cursor <= reference_date:
        if end is not None and cursor > end:
            break
        new_due = advance_due_date(cursor, item.frequency, _anchor_day(cursor, start))
        results.append(_plan_cycle(item, cursor, new_due, processed_at, processed_on))
        cursor = new_due
    return results


def _anchor_day(cursor: date, start: date | None) -> int:
    """Day a month-based step should land on.

    The cursor's own day, unless the cursor is the clamped month end of a
    later start day (Feb 29 for a schedule started on the 31st).
    """
    if start and start.day > cursor.day:
        if clamp_day_to_month(cursor.year, cursor.month, start.day) == cursor.day:
            return start.day
    return cursor.day


def plan_due_items(
    items: list[RecurringItem], reference_date: date, processed_at: str = ""
) -> list[ProcessingResult]:
    results: list[ProcessingResult] = []
    for item in items:
        results.extend(plan_item(item, reference_date, processed_at))
    return results


def _plan_cycle(
    item: RecurringItem, due: date, new_due: date, processed_at: str, processed_on: str
) -> ProcessingResult:
    due_str = format_date(due)
    amount = round_cents(item.amount)
    transaction = None

    if item.auto_create_transaction:
        transaction = FinancialTransaction(
            id=None,
            transaction_type="expense" if item.item_type == "expense" else "income",
            status="completed",
            amount=amount,
            currency=item.currency,
            transaction_date=due_str,
            context=item.context,
            category_id=item.category_id,
            bank_account_id=item.bank_account_id,
            description=f"Auto: {item.name}",
            payee_name=item.payee_name,
            recurring_item_id=item.id,
        )
        # transaction_id is filled in once the transaction row exists
        entry = RecurringHistoryEntry(
            recurring_item_id=item.id,
            expected_date=due_str,
            expected_amount=amount,
            actual_amount=amount,
            status="matched",
            variance_amount_pct=0.0,
        )
        kind = "expense" if item.item_type == "expense" else "income"
        notification = Notification(
            title=f"Auto-recorded: {item.name}",
            body=f"{format_currency(amount)} {kind} was automatically recorded.",
            severity="info",
            key=f"recurring:{item.id}:{due_str}",
        )
    else:
        entry = RecurringHistoryEntry(
            recurring_item_id=item.id,
            expected_date=due_str,
            expected_amount=amount,
        )
        payee = f" ({item.payee_name})" if item.payee_name else ""
        notification = Notification(
            title=f"{item.name} is due",
            body=(
                f"{format_currency(amount)} {item.type_label} due on "
                f"{due.strftime('%d %b %Y')}{payee}. Record this transaction?"
            ),
            severity="warning",
            key=f"recurring:{item.id}:{due_str}",
        )

    return ProcessingResult(
        item_id=item.id,
        due_date=due_str,
        new_next_due_date=format_date(new_due),
        history_entry=entry,
        notification=notification,
        transaction=transaction,
        processed_at=processed_at,
        processed_on=processed_on,
    )


class RecurringService:
    def __init__(
        self,
        recurring_dao: RecurringDAO,
        tx_dao: TransactionDAO,
        history_dao: HistoryDAO,
        notification_dao: NotificationDAO,
    ):
        self._dao = recurring_dao
        self._tx_dao = tx_dao
        self._history_dao = history_dao
        self._notification_dao = notification_dao
        self._has_run = False

    def get_all(self) -> list[RecurringItem]:
        return self._dao.get_all()

    def get_active(self, context: str | None = None) -> list[RecurringItem]:
        return [i for i in self._dao.get_active() if in_context(i.context, context)]

    def get_by_id(self, item_id: int) -> RecurringItem | None:
        return self._dao.get_by_id(item_id)

    def get_history(self, item_id: int) -> list[RecurringHistoryEntry]:
        return self._history_dao.get_for_item(item_id)

    def create(
        self,
        name: str,
        item_type: str,
        amount: float,
        frequency: str,
        start_date: str,
        context: str = "business",
        currency: str = "ZAR",
        end_date: str | None = None,
        next_due_date: str | None = None,
        auto_create_transaction: bool = False,
        category_id: int | None = None,
        bank_account_id: int | None = None,
        payee_name: str = "",
        description: str = "",
    ) -> RecurringItem:
        next_due_date = next_due_date or start_date
        self._validate(
            name, item_type, amount, frequency, start_date, end_date, next_due_date, context
        )
        return self._dao.create(
            name=name.strip(), item_type=item_type, amount=round_cents(amount),
            frequency=frequency, start_date=start_date, next_due_date=next_due_date,
            context=context, currency=currency, end_date=end_date or None,
            auto_create_transaction=auto_create_transaction,
            category_id=category_id, bank_account_id=bank_account_id,
            payee_name=payee_name.strip(), description=description,
        )

    def update(
        self,
        item_id: int,
        name: str,
        item_type: str,
        amount: float,
        frequency: str,
        start_date: str,
        next_due_date: str,
        context: str = "business",
        currency: str = "ZAR",
        end_date: str | None = None,
        auto_create_transaction: bool = False,
        category_id: int | None = None,
        bank_account_id: int | None = None,
        payee_name: str = "",
        description: str = "",
        is_active: bool = True,
    ) -> RecurringItem:
        self._validate(
            name, item_type, amount, frequency, start_date, end_date, next_due_date, context
        )
        return self._dao.update(
            item_id=item_id, name=name.strip(), item_type=item_type,
            amount=round_cents(amount), frequency=frequency, start_date=start_date,
            next_due_date=next_due_date, context=context, currency=currency,
            end_date=end_date or None, auto_create_transaction=auto_create_transaction,
            category_id=category_id, bank_account_id=bank_account_id,
            payee_name=payee_name.strip(), description=description,
            is_active=is_active,
        )

    def set_active(self, item_id: int, is_active: bool):
        """Soft delete / restore. Items are never removed while history points at them."""
        self._dao.set_active(item_id, is_active)

    def get_due_items(self, reference_date: date | None = None) -> list[RecurringItem]:
        ref = reference_date or today()
        return self._dao.get_due(format_date(ref))

    def get_commitment_summary(self, context: str | None = None) -> CommitmentSummary:
        """Monthly-normalized totals of what active items commit in and out."""
        monthly_out = 0.0
        monthly_in = 0.0
        for item in self.get_active(context):
            if item.item_type == "expense":
                monthly_out += item.monthly_amount
            elif item.is_income:
                monthly_in += item.monthly_amount
        return CommitmentSummary(
            monthly_out=round_cents(monthly_out), monthly_in=round_cents(monthly_in)
        )

    # ── Processing ───────────────────────────────────────────────────────────

    def run_once(self, reference_date: date | None = None) -> ProcessingRun | None:
        """Session-start entry point. Later calls on the same instance return None."""
        if self._has_run:
            return None
        self._has_run = True
        return self.process_due_items(reference_date)

    def process_due_items(
        self, reference_date: date | None = None, processed_at: str | None = None
    ) -> ProcessingRun:
        """
        Process every due cycle of every due item up to reference_date
        (default: today). Items are handled one at a time; a failing item is
        logged and skipped without affecting the others.
        """
        ref = reference_date or today()
        stamp = processed_at or now_iso()
        run = ProcessingRun()

        for item in self.get_due_items(ref):
            try:
                for result in plan_item(item, ref, stamp):
                    applied = self.apply_result(result)
                    run.processed.append(applied)
                    log.info(
                        "recurring.cycle_processed",
                        item_id=item.id,
                        due_date=applied.due_date,
                        next_due_date=applied.new_next_due_date,
                        status=applied.history_entry.status,
                    )
            except Exception as exc:
                log.error(
                    "recurring.item_failed",
                    item_id=item.id,
                    name=item.name,
                    error=str(exc),
                    exc_info=True,
                )
                run.failures.append((item.id, str(exc)))

        log.info(
            "recurring.run_complete",
            reference_date=format_date(ref),
            processed=len(run.processed),
            failed=len(run.failures),
        )
        return run

    def apply_result(self, result: ProcessingResult) -> ProcessingResult:
        """Write one planned cycle atomically: cursor, transaction, history, notification.

        The cursor update is a compare-and-set on the due date the cycle was
        planned from, so a cycle already taken by another session raises
        ScheduleConflictError and leaves nothing behind.
        """
        with self._dao.unit_of_work():
            claimed = self._dao.claim_cycle(
                result.item_id,
                expected_due=result.due_date,
                new_due=result.new_next_due_date,
                generated_at=result.processed_at or now_iso(),
                processed_date=result.processed_on or format_date(today()),
                commit=False,
            )
            if not claimed:
                raise ScheduleConflictError(result.item_id, result.due_date)

            transaction = None
            entry = result.history_entry
            if result.transaction is not None:
                transaction = self._tx_dao.create(result.transaction, commit=False)
                entry = replace(entry, transaction_id=transaction.id)
            entry = self._history_dao.append(entry, commit=False)
            self._notification_dao.add(result.notification, commit=False)

        return replace(result, transaction=transaction, history_entry=entry)

    def _validate(
        self, name, item_type, amount, frequency, start_date, end_date, next_due_date, context
    ):
        if not name or not name.strip():
            raise ValueError("Name cannot be empty.")
        if item_type not in ITEM_TYPES:
            raise ValueError("Type must be expense, income or retainer.")
        if amount is None or amount <= 0:
            raise ValueError("Amount must be positive.")
        if frequency not in FREQUENCIES:
            raise ValueError("Invalid frequency.")
        if context not in CONTEXTS:
            raise ValueError("Context must be business or personal.")
        start = parse_date(start_date)
        if not start:
            raise ValueError("Invalid start date.")
        if not parse_date(next_due_date):
            raise ValueError("Invalid next due date.")
        if end_date:
            end = parse_date(end_date)
            if not end:
                raise ValueError("Invalid end date.")
            if end < start:
                raise ValueError("End date cannot be before start date.")
