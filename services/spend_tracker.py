"""The only code path that changes Budget.spent_amount.

Callers mutate the expense list and persist it; the tracker keeps the linked
budgets in step and returns the budgets it changed.
"""
import logging

from database.finance_store import FinanceStore
from models.budget import Budget
from models.expense import Expense
from services.budget_status import refresh_status
from utils.currency import round_money

logger = logging.getLogger(__name__)


class SpendTracker:
    def __init__(self, store: FinanceStore):
        self._store = store

    def on_expense_added(self, expense: Expense) -> list[Budget]:
        return self._shift(expense.budget_id, expense.amount)

    def on_expense_removed(self, expense: Expense) -> list[Budget]:
        return self._shift(expense.budget_id, -expense.amount)

    def on_expense_updated(self, old: Expense, new: Expense) -> list[Budget]:
        """Reverse the old contribution, then apply the new one.

        Handles relinking: the old and new budget may differ, and either may
        be None.
        """
        touched = self._shift(old.budget_id, -old.amount)
        applied = self._shift(new.budget_id, new.amount)
        if new.budget_id != old.budget_id:
            touched += applied
        return touched

    def rebuild(self, budgets: list[Budget], expenses: list[Expense]):
        """Derive every budget's spent_amount from the expenses linked to it."""
        spent = {b.id: 0.0 for b in budgets}
        for expense in expenses:
            if expense.budget_id in spent:
                spent[expense.budget_id] += expense.amount
        for budget in budgets:
            budget.spent_amount = round_money(spent[budget.id])
            refresh_status(budget)

    def _shift(self, budget_id: str | None, delta: float) -> list[Budget]:
        if not budget_id:
            return []
        budget = self._store.find_budget(budget_id)
        if budget is None:
            # Budget deleted since the expense was linked
            logger.debug("Expense linked to missing budget %s; nothing to update", budget_id)
            return []
        budget.spent_amount = round_money(budget.spent_amount + delta)
        refresh_status(budget)
        return [budget]
