"""Errors raised by the finance engine.

Services raise; callers (the CLI) decide how to present them. Input
validation keeps using plain ValueError with a user-facing message.
"""


class FinanceError(Exception):
    """Base class for engine errors."""


class NotFoundError(FinanceError, LookupError):
    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} '{entity_id}' not found.")
        self.entity = entity
        self.entity_id = entity_id


class InsufficientFundsError(FinanceError, ValueError):
    def __init__(self, budget_id: str, requested: float, funded: float):
        super().__init__(
            f"Budget '{budget_id}' holds {funded:.2f}; cannot move {requested:.2f}."
        )
        self.budget_id = budget_id
        self.requested = requested
        self.funded = funded


class ImportFormatError(FinanceError, ValueError):
    """Import document rejected before any stored state was touched."""


class PersistenceError(FinanceError):
    """Storage read or write failed; in-memory state may be ahead of disk."""
