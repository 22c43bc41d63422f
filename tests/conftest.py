import pytest

from database.db_manager import DatabaseManager
from database.account_dao import AccountDAO
from database.budget_dao import BudgetDAO
from database.history_dao import HistoryDAO
from database.notification_dao import NotificationDAO
from database.recurring_dao import RecurringDAO
from database.transaction_dao import TransactionDAO
from services.account_service import AccountService
from services.budget_service import BudgetService
from services.forecast_service import ForecastService
from services.recurring_service import RecurringService
from services.report_service import ReportService


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep every test away from the real ~/.cashflow config."""
    monkeypatch.setenv("CASHFLOW_CONFIG_DIR", str(tmp_path / "config"))


@pytest.fixture
def db():
    manager = DatabaseManager(":memory:")
    manager.initialize()
    yield manager
    manager.close()


@pytest.fixture
def account_dao(db):
    return AccountDAO(db)


@pytest.fixture
def tx_dao(db):
    return TransactionDAO(db)


@pytest.fixture
def recurring_dao(db):
    return RecurringDAO(db)


@pytest.fixture
def history_dao(db):
    return HistoryDAO(db)


@pytest.fixture
def budget_dao(db):
    return BudgetDAO(db)


@pytest.fixture
def notification_dao(db):
    return NotificationDAO(db)


@pytest.fixture
def category_ids(db):
    rows = db.get_connection().execute("SELECT id, name FROM categories").fetchall()
    return {r["name"]: r["id"] for r in rows}


@pytest.fixture
def account_svc(account_dao):
    return AccountService(account_dao)


@pytest.fixture
def recurring_svc(recurring_dao, tx_dao, history_dao, notification_dao):
    return RecurringService(recurring_dao, tx_dao, history_dao, notification_dao)


@pytest.fixture
def report_svc(tx_dao):
    return ReportService(tx_dao)


@pytest.fixture
def forecast_svc(recurring_svc, report_svc, account_svc):
    return ForecastService(recurring_svc, report_svc, account_svc)


@pytest.fixture
def budget_svc(budget_dao, tx_dao, notification_dao):
    return BudgetService(budget_dao, tx_dao, notification_dao)
