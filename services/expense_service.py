import logging
import uuid
from dataclasses import replace

from database.finance_store import FinanceStore
from models.expense import Expense
from services.spend_tracker import SpendTracker
from utils.constants import RECURRENCE_TYPES
from utils.currency import require_positive_money, round_money
from utils.date_helpers import parse_date, today_str

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = {
    "amount", "date", "description", "category", "vendor", "notes", "budget_id",
    "is_recurring", "recurrence_type", "recurrence_end",
}


class ExpenseService:
    def __init__(self, store: FinanceStore, spend_tracker: SpendTracker):
        self._store = store
        self._tracker = spend_tracker

    def get_all(self) -> list[Expense]:
        return list(self._store.expenses)

    def get_for_budget(self, budget_id: str) -> list[Expense]:
        return [e for e in self._store.expenses if e.budget_id == budget_id]

    def add(
        self,
        amount: float,
        date: str | None = None,
        description: str = "",
        category: str = "",
        budget_id: str | None = None,
        vendor: str | None = None,
        notes: str | None = None,
        is_recurring: bool = False,
        recurrence_type: str | None = None,
        recurrence_end: str | None = None,
    ) -> Expense:
        expense = Expense(
            id=str(uuid.uuid4()),
            amount=round_money(amount),
            date=date or today_str(),
            description=description.strip(),
            category=category,
            vendor=vendor,
            notes=notes,
            budget_id=budget_id or None,
            is_recurring=is_recurring,
            recurrence_type=recurrence_type,
            recurrence_end=recurrence_end,
        )
        self._validate(expense)
        self._store.expenses.append(expense)
        touched = self._tracker.on_expense_added(expense)
        self._save(touched)
        logger.info("Added expense %s (%.2f, budget %s)", expense.id, expense.amount, expense.budget_id)
        return expense

    def update(self, expense_id: str, **changes) -> Expense:
        """Apply changes; pass budget_id=None to unlink from its budget."""
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update expense field(s): {', '.join(sorted(unknown))}")
        current = self._store.get_expense(expense_id)
        if "amount" in changes:
            changes["amount"] = round_money(changes["amount"])
        if "budget_id" in changes:
            changes["budget_id"] = changes["budget_id"] or None
        updated = replace(current, **changes)
        self._validate(updated, previous_budget_id=current.budget_id)
        idx = self._store.expenses.index(current)
        self._store.expenses[idx] = updated
        touched = self._tracker.on_expense_updated(current, updated)
        self._save(touched)
        return updated

    def delete(self, expense_id: str):
        expense = self._store.get_expense(expense_id)
        self._store.expenses.remove(expense)
        touched = self._tracker.on_expense_removed(expense)
        self._save(touched)
        logger.info("Deleted expense %s", expense_id)

    def _save(self, touched_budgets: list):
        if touched_budgets:
            self._store.save_sets("expenses", "budgets")
        else:
            self._store.save_expenses()

    def _validate(self, expense: Expense, previous_budget_id: str | None = None):
        validate_expense(expense)
        # A link that already existed may point at a since-deleted budget
        if expense.budget_id and expense.budget_id != previous_budget_id:
            self._store.get_budget(expense.budget_id)


def validate_expense(expense: Expense):
    """Field checks only; the budget link is checked against the store by the service."""
    require_positive_money(expense.amount)
    if not parse_date(expense.date):
        raise ValueError("Invalid date format. Use YYYY-MM-DD.")
    if expense.recurrence_type is not None and expense.recurrence_type not in RECURRENCE_TYPES:
        raise ValueError(f"Invalid recurrence type: {expense.recurrence_type}")
