import logging
import uuid
from dataclasses import replace

from database.finance_store import FinanceStore
from models.budget import Budget, AvailableBudget
from services.allocation_service import AllocationService
from services.budget_status import refresh_status
from utils.constants import BUDGET_PERIODS
from utils.currency import require_non_negative_money, round_money
from utils.date_helpers import parse_date, today_str

logger = logging.getLogger(__name__)

# funded/spent/status/allocations are owned by the engine
_EDITABLE_FIELDS = {"name", "category", "amount", "period", "start_date", "end_date", "is_active"}


class BudgetService:
    def __init__(self, store: FinanceStore, allocation_service: AllocationService):
        self._store = store
        self._allocation = allocation_service

    def get_all(self) -> list[Budget]:
        return list(self._store.budgets)

    def get_by_id(self, budget_id: str) -> Budget:
        return self._store.get_budget(budget_id)

    def get_available_budgets(self) -> list[AvailableBudget]:
        """Active budgets with funded money left to spend."""
        return [
            AvailableBudget(
                id=b.id,
                name=b.name,
                category=b.category,
                available_amount=round_money(b.available_amount),
            )
            for b in self._store.budgets
            if b.is_active and b.funded_amount > b.spent_amount
        ]

    def add(
        self,
        name: str,
        amount: float,
        period: str = "monthly",
        start_date: str | None = None,
        category: str | None = None,
        end_date: str | None = None,
        is_active: bool = True,
    ) -> Budget:
        budget = Budget(
            id=str(uuid.uuid4()),
            name=name.strip(),
            amount=round_money(amount),
            period=period,
            start_date=start_date or today_str(),
            category=category or None,
            end_date=end_date or None,
            is_active=is_active,
        )
        validate_budget(budget)
        refresh_status(budget)
        self._store.budgets.append(budget)
        self._store.save_budgets()
        logger.info("Added budget %s '%s' (target %.2f)", budget.id, budget.name, budget.amount)
        return budget

    def update(self, budget_id: str, **changes) -> Budget:
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update budget field(s): {', '.join(sorted(unknown))}")
        current = self._store.get_budget(budget_id)
        if "amount" in changes:
            changes["amount"] = round_money(changes["amount"])
        if "name" in changes:
            changes["name"] = (changes["name"] or "").strip()
        updated = replace(current, **changes)
        validate_budget(updated)
        refresh_status(updated)
        idx = self._store.budgets.index(current)
        self._store.budgets[idx] = updated
        self._store.save_budgets()
        return updated

    def delete(self, budget_id: str):
        """Delete a budget, returning its funding to the incomes behind it.

        Expenses linked to the budget are kept but unlinked.
        """
        budget = self._store.get_budget(budget_id)
        self._allocation.release_budget(budget)
        unlinked = 0
        for expense in self._store.expenses:
            if expense.budget_id == budget_id:
                expense.budget_id = None
                unlinked += 1
        self._store.budgets.remove(budget)
        self._store.save_sets("incomes", "expenses", "budgets")
        logger.info(
            "Deleted budget %s; released %.2f, unlinked %d expense(s)",
            budget_id, budget.funded_amount, unlinked,
        )


def validate_budget(budget: Budget):
    if not budget.name:
        raise ValueError("Budget name cannot be empty.")
    require_non_negative_money(budget.amount, "Budget amount")
    if budget.period not in BUDGET_PERIODS:
        raise ValueError(
            f"Invalid period '{budget.period}'. Must be one of: {', '.join(BUDGET_PERIODS)}."
        )
    start = parse_date(budget.start_date)
    if not start:
        raise ValueError("Invalid start date. Use YYYY-MM-DD.")
    if budget.end_date:
        end = parse_date(budget.end_date)
        if not end:
            raise ValueError("Invalid end date. Use YYYY-MM-DD.")
        if end < start:
            raise ValueError("End date cannot be before start date.")
