import logging
import uuid
from dataclasses import replace

from database.finance_store import FinanceStore
from models.income import Income
from services.allocation_service import AllocationService
from utils.constants import RECURRENCE_TYPES
from utils.currency import require_positive_money, round_money
from utils.date_helpers import parse_date, today_str

logger = logging.getLogger(__name__)

# allocated_amount belongs to the allocation engine
_EDITABLE_FIELDS = {
    "amount", "date", "description", "category", "source", "notes",
    "is_recurring", "recurrence_type", "recurrence_end",
}


class IncomeService:
    def __init__(self, store: FinanceStore, allocation_service: AllocationService):
        self._store = store
        self._allocation = allocation_service

    def get_all(self) -> list[Income]:
        return list(self._store.incomes)

    def get_by_id(self, income_id: str) -> Income:
        return self._store.get_income(income_id)

    def add(
        self,
        amount: float,
        date: str | None = None,
        description: str = "",
        category: str = "",
        source: str | None = None,
        notes: str | None = None,
        is_recurring: bool = False,
        recurrence_type: str | None = None,
        recurrence_end: str | None = None,
    ) -> Income:
        income = Income(
            id=str(uuid.uuid4()),
            amount=round_money(amount),
            date=date or today_str(),
            description=description.strip(),
            category=category,
            source=source,
            notes=notes,
            is_recurring=is_recurring,
            recurrence_type=recurrence_type,
            recurrence_end=recurrence_end,
        )
        validate_income(income)
        self._store.incomes.append(income)
        self._store.save_incomes()
        logger.info("Added income %s (%.2f on %s)", income.id, income.amount, income.date)
        return income

    def update(self, income_id: str, **changes) -> Income:
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update income field(s): {', '.join(sorted(unknown))}")
        current = self._store.get_income(income_id)
        if "amount" in changes:
            changes["amount"] = round_money(changes["amount"])
        updated = replace(current, **changes)
        validate_income(updated)
        if updated.amount < updated.allocated_amount:
            raise ValueError(
                f"Income amount cannot drop below the {updated.allocated_amount:.2f} "
                "already allocated to budgets."
            )
        idx = self._store.incomes.index(current)
        self._store.incomes[idx] = updated
        self._store.save_incomes()
        return updated

    def delete(self, income_id: str):
        """Delete an income and withdraw its funding from every budget."""
        income = self._store.get_income(income_id)
        touched = self._allocation.release_income(income_id)
        self._store.incomes.remove(income)
        self._store.save_sets("incomes", "budgets")
        logger.info("Deleted income %s; defunded %d budget(s)", income_id, len(touched))


def validate_income(income: Income):
    require_positive_money(income.amount)
    if not parse_date(income.date):
        raise ValueError("Invalid date format. Use YYYY-MM-DD.")
    if income.recurrence_type is not None and income.recurrence_type not in RECURRENCE_TYPES:
        raise ValueError(f"Invalid recurrence type: {income.recurrence_type}")
