from models.account import BankAccount
from database.account_dao import AccountDAO
from utils.constants import CONTEXTS
from utils.context import in_context
from utils.currency import round_cents


def cash_position(accounts: list[BankAccount], context: str | None = None) -> float:
    """Sum of current balances over active accounts in the context."""
    return round_cents(sum(
        a.current_balance or 0.0 for a in accounts
        if a.is_active and in_context(a.context, context)
    ))


class AccountService:
    def __init__(self, account_dao: AccountDAO):
        self._dao = account_dao

    def get_all(self) -> list[BankAccount]:
        return self._dao.get_all()

    def get_active(self, context: str | None = None) -> list[BankAccount]:
        return [a for a in self._dao.get_active() if in_context(a.context, context)]

    def get_cash_position(self, context: str | None = None) -> float:
        return cash_position(self._dao.get_active(), context)

    def create(
        self,
        name: str,
        current_balance: float = 0.0,
        currency: str = "ZAR",
        context: str = "business",
    ) -> BankAccount:
        name = name.strip()
        if not name:
            raise ValueError("Account name cannot be empty.")
        if self._dao.get_by_name(name):
            raise ValueError(f"An account named '{name}' already exists.")
        if context not in CONTEXTS:
            raise ValueError(
                f"Invalid context '{context}'. Must be one of: {', '.join(CONTEXTS)}."
            )
        return self._dao.create(name, round_cents(current_balance), currency, context)

    def set_balance(self, account_id: int, current_balance: float):
        self._dao.update_balance(account_id, round_cents(current_balance))

    def set_active(self, account_id: int, is_active: bool):
        self._dao.set_active(account_id, is_active)
