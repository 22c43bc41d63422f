class ProcessingError(Exception):
    """A recurring item could not be processed for a due cycle."""

    def __init__(self, item_id: int, message: str):
        super().__init__(message)
        self.item_id = item_id


class ScheduleConflictError(ProcessingError):
    """The item's cursor moved underneath us; another session owns the cycle."""

    def __init__(self, item_id: int, due_date: str):
        super().__init__(
            item_id, f"Recurring item {item_id} cycle {due_date} was already processed."
        )
        self.due_date = due_date
