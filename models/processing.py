from dataclasses import dataclass, field
from typing import Optional
from models.notification import Notification
from models.recurring_history import RecurringHistoryEntry
from models.transaction import FinancialTransaction


@dataclass
class ProcessingResult:
    """One due cycle of one recurring item, decided but not yet written."""
    item_id: int
    due_date: str               # cursor value this cycle consumes
    new_next_due_date: str
    history_entry: RecurringHistoryEntry
    notification: Notification
    transaction: Optional[FinancialTransaction] = None
    processed_at: str = ""      # timestamp recorded as last_generated_at
    processed_on: str = ""      # run date, recorded as last_processed_date


@dataclass
class ProcessingRun:
    processed: list[ProcessingResult] = field(default_factory=list)
    failures: list[tuple[int, str]] = field(default_factory=list)

    @property
    def notifications(self) -> list[Notification]:
        return [r.notification for r in self.processed]

    @property
    def transactions(self) -> list[FinancialTransaction]:
        return [r.transaction for r in self.processed if r.transaction is not None]
