from utils.constants import ALL_CONTEXTS


def in_context(record_context: str, context: str | None) -> bool:
    """True when a record belongs to the requested context ('all'/None = every context)."""
    if context is None or context == ALL_CONTEXTS:
        return True
    return record_context == context
