import os
import sys

import structlog

# Ensure project root is on sys.path when run directly
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from database.db_manager import DatabaseManager
from database.account_dao import AccountDAO
from database.transaction_dao import TransactionDAO
from database.recurring_dao import RecurringDAO
from database.history_dao import HistoryDAO
from database.budget_dao import BudgetDAO
from database.notification_dao import NotificationDAO

from services.account_service import AccountService
from services.recurring_service import RecurringService
from services.report_service import ReportService
from services.forecast_service import ForecastService
from services.budget_service import BudgetService

from utils.app_config import get_db_folder, get_financial_context
from utils.logging_config import configure_logging

log = structlog.get_logger(__name__)


def main():
    configure_logging(json=os.environ.get("CASHFLOW_LOG_JSON") == "1")

    # ── Database ─────────────────────────────────────────────────────────────
    db = DatabaseManager.open(db_folder=get_db_folder())

    # ── DAOs ─────────────────────────────────────────────────────────────────
    account_dao = AccountDAO(db)
    tx_dao = TransactionDAO(db)
    recurring_dao = RecurringDAO(db)
    history_dao = HistoryDAO(db)
    budget_dao = BudgetDAO(db)
    notification_dao = NotificationDAO(db)

    # ── Services ─────────────────────────────────────────────────────────────
    account_svc = AccountService(account_dao)
    recurring_svc = RecurringService(recurring_dao, tx_dao, history_dao, notification_dao)
    report_svc = ReportService(tx_dao)
    forecast_svc = ForecastService(recurring_svc, report_svc, account_svc)
    budget_svc = BudgetService(budget_dao, tx_dao, notification_dao)

    try:
        # ── Session start: process due recurring items once ──────────────────
        run = recurring_svc.run_once()

        # ── Forecast snapshot for the configured context ─────────────────────
        context = get_financial_context()
        forecast = forecast_svc.get_forecast(context=context)
        summary = forecast.summary
        log.info(
            "session.ready",
            processed=len(run.processed) if run else 0,
            failed=len(run.failures) if run else 0,
            scenario=forecast.scenario,
            cash_position=summary.cash_position,
            end_balance=summary.end_balance,
            lowest_balance=summary.lowest_balance,
            runway_months=summary.runway_months,
            over_budget=budget_svc.get_summary(context)["over_budget_count"],
            unread_notifications=len(notification_dao.get_unread()),
        )
    finally:
        db.close()


if __name__ == "__main__":
    main()
