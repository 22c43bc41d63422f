from datetime import date

import structlog

from models.budget import Budget
from models.notification import Notification
from models.transaction import FinancialTransaction
from database.budget_dao import BudgetDAO
from database.transaction_dao import TransactionDAO
from database.notification_dao import NotificationDAO
from utils.constants import (
    BUDGET_ALERT_THRESHOLD, BUDGET_OVER_THRESHOLD, CONTEXTS, PERIOD_MONTHS, PERIOD_TYPES,
)
from utils.context import in_context
from utils.currency import format_currency, round_cents
from utils.date_helpers import add_months, format_date, parse_date, today

log = structlog.get_logger(__name__)


def compute_spent(budget: Budget, transactions: list[FinancialTransaction]) -> float:
    """Non-void expenses in the budget's category within [period_start, period_end)."""
    start, end = budget.period_start, budget.period_end
    return round_cents(sum(
        t.amount or 0.0 for t in transactions
        if t.transaction_type == "expense"
        and not t.is_void
        and t.category_id == budget.category_id
        and start <= t.transaction_date < end
    ))


class BudgetService:
    def __init__(
        self,
        budget_dao: BudgetDAO,
        tx_dao: TransactionDAO,
        notification_dao: NotificationDAO | None = None,
    ):
        self._budget_dao = budget_dao
        self._tx_dao = tx_dao
        self._notification_dao = notification_dao

    def create(
        self,
        category_id: int,
        period_type: str,
        period_start: str,
        amount: float,
        rollover: bool = False,
        currency: str = "ZAR",
        context: str = "business",
    ) -> Budget:
        if amount is None or amount < 0:
            raise ValueError("Budget amount must be non-negative.")
        if period_type not in PERIOD_TYPES:
            raise ValueError("Period type must be monthly, quarterly or yearly.")
        if not parse_date(period_start):
            raise ValueError("Invalid period start date.")
        if context not in CONTEXTS:
            raise ValueError("Context must be business or personal.")
        return self._budget_dao.create(
            category_id=category_id, period_type=period_type,
            period_start=period_start, amount=round_cents(amount),
            rollover=rollover, currency=currency, context=context,
        )

    def delete(self, budget_id: int):
        self._budget_dao.delete(budget_id)

    def get_budget_status(
        self, context: str | None = None, reference_date: date | None = None
    ) -> list[Budget]:
        """Budgets whose period contains reference_date, with spent amounts filled in."""
        ref = format_date(reference_date or today())
        transactions = self._tx_dao.get_all()
        budgets = [
            b for b in self._budget_dao.get_all()
            if in_context(b.context, context) and b.period_start <= ref < b.period_end
        ]
        for b in budgets:
            b.spent_amount = compute_spent(b, transactions)
        return budgets

    def get_summary(
        self, context: str | None = None, reference_date: date | None = None
    ) -> dict:
        budgets = self.get_budget_status(context, reference_date)
        total_budgeted = round_cents(sum(b.effective_amount for b in budgets))
        total_spent = round_cents(sum(b.spent_amount for b in budgets))
        return {
            "total_budgeted": total_budgeted,
            "total_spent": total_spent,
            "remaining": round_cents(total_budgeted - total_spent),
            "over_budget_count": sum(
                1 for b in budgets if b.utilization_pct >= BUDGET_OVER_THRESHOLD
            ),
            "near_limit_count": sum(
                1 for b in budgets
                if BUDGET_ALERT_THRESHOLD <= b.utilization_pct < BUDGET_OVER_THRESHOLD
            ),
            "budget_count": len(budgets),
        }

    def get_alerts(
        self,
        context: str | None = None,
        reference_date: date | None = None,
        threshold: float = BUDGET_ALERT_THRESHOLD,
    ) -> list[dict]:
        """[{category_name, utilization, is_over, variance}] highest utilization first."""
        flagged = [
            b for b in self.get_budget_status(context, reference_date)
            if b.utilization_pct >= threshold
        ]
        flagged.sort(key=lambda b: b.utilization_pct, reverse=True)
        return [
            {
                "category_name": b.category_name or "Unknown",
                "utilization": round(b.utilization_pct, 2),
                "is_over": b.utilization_pct >= BUDGET_OVER_THRESHOLD,
                "variance": round_cents(b.variance),
            }
            for b in flagged
        ]

    def notify_over_budget(
        self, context: str | None = None, reference_date: date | None = None
    ) -> list[Notification]:
        """Send a warning for every over-budget category; returns what was sent."""
        notifications = [
            Notification(
                title=f"Budget exceeded: {alert['category_name']}",
                body=(
                    f"Over budget by {format_currency(abs(alert['variance']))} "
                    f"({alert['utilization']:.1f}% utilization)"
                ),
                severity="warning",
                key=f"budget:{alert['category_name']}",
            )
            for alert in self.get_alerts(context, reference_date)
            if alert["is_over"]
        ]
        if self._notification_dao is not None:
            for n in notifications:
                self._notification_dao.add(n)
        return notifications

    def process_rollovers(self, period_start: str) -> int:
        """
        Carry unused budget into rollover-enabled budgets starting at period_start.

        The carried amount is what was left of the previous period's budget
        (same category and period type), never negative. Returns the number
        of budgets updated.
        """
        start = parse_date(period_start)
        if start is None:
            raise ValueError(f"Invalid period start: {period_start}")
        transactions = self._tx_dao.get_all()
        all_budgets = self._budget_dao.get_all()
        updated = 0

        for target in all_budgets:
            if target.period_start != period_start or not target.rollover:
                continue
            prev_start = format_date(add_months(start, -PERIOD_MONTHS[target.period_type]))
            previous = next(
                (
                    b for b in all_budgets
                    if b.category_id == target.category_id
                    and b.period_type == target.period_type
                    and b.context == target.context
                    and b.period_start == prev_start
                ),
                None,
            )
            if previous is None:
                continue
            carried = round_cents(
                max(0.0, previous.effective_amount - compute_spent(previous, transactions))
            )
            if carried > 0:
                self._budget_dao.update_rollover(target.id, carried)
                updated += 1
                log.info(
                    "budget.rollover_applied",
                    budget_id=target.id,
                    category_id=target.category_id,
                    rollover_amount=carried,
                )
        return updated

    def copy_period(
        self, source_start: str, target_start: str, context: str | None = None
    ) -> int:
        """Use one period's budgets as a template for another. Returns count copied."""
        if not parse_date(target_start):
            raise ValueError(f"Invalid period start: {target_start}")
        existing = {
            (b.category_id, b.period_type, b.context)
            for b in self._budget_dao.get_by_period_start(target_start)
        }
        count = 0
        for b in self._budget_dao.get_by_period_start(source_start):
            if not in_context(b.context, context):
                continue
            if (b.category_id, b.period_type, b.context) in existing:
                continue
            self._budget_dao.create(
                category_id=b.category_id, period_type=b.period_type,
                period_start=target_start, amount=b.amount, rollover=b.rollover,
                rollover_amount=0.0, currency=b.currency, context=b.context,
            )
            count += 1
        return count
