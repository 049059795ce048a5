"""Budget funding engine.

Incomes are earmarked to budgets through BudgetAllocation records. A budget's
funded_amount is always the sum of its records, and for every income the sum
of its records across all budgets equals its allocated_amount. Records are
never edited: reallocation appends a transfer_out/transfer_in pair per income
it draws on.
"""
import logging
import uuid
from dataclasses import dataclass, field

from database.finance_store import FinanceStore
from models.budget import Budget, BudgetAllocation, AllocationSuggestion
from models.income import Income
from services.budget_status import refresh_status
from services.errors import InsufficientFundsError
from utils.currency import require_positive_money, round_money, sum_money
from utils.date_helpers import chronological_key, now_iso

logger = logging.getLogger(__name__)


@dataclass
class AllocationResult:
    budget_id: str
    requested_amount: float
    allocated_amount: float
    new_allocations: list[BudgetAllocation] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return self.allocated_amount < self.requested_amount


@dataclass
class ReallocationResult:
    from_budget_id: str
    to_budget_id: str
    amount: float
    transfers_out: list[BudgetAllocation] = field(default_factory=list)
    transfers_in: list[BudgetAllocation] = field(default_factory=list)


def _new_id() -> str:
    return str(uuid.uuid4())


class AllocationService:
    def __init__(self, store: FinanceStore):
        self._store = store

    # ── Queries ──────────────────────────────────────────────────────────────

    def get_unallocated_income(self) -> float:
        return sum_money(i.amount - i.allocated_amount for i in self._store.incomes)

    def get_available_income_for_allocation(self) -> list[Income]:
        """Incomes with money left to earmark, oldest first."""
        available = [i for i in self._store.incomes if round_money(i.available) > 0]
        return sorted(available, key=lambda i: chronological_key(i.date))

    def suggest_budget_allocations(self) -> list[AllocationSuggestion]:
        """Spread unallocated income over underfunded budgets, earliest start first.

        Read-only; commit a suggestion with allocate().
        """
        remaining = self.get_unallocated_income()
        underfunded = sorted(
            (b for b in self._store.budgets if b.funded_amount < b.amount),
            key=lambda b: chronological_key(b.start_date),
        )
        suggestions: list[AllocationSuggestion] = []
        for budget in underfunded:
            if remaining <= 0:
                break
            suggested = round_money(min(budget.remaining_need, remaining))
            suggestions.append(AllocationSuggestion(budget.id, suggested))
            remaining = round_money(remaining - suggested)
        return suggestions

    # ── Funding ──────────────────────────────────────────────────────────────

    def allocate(self, budget_id: str, requested_amount: float) -> AllocationResult:
        """Fund a budget from available income, oldest income first.

        Allocates less than requested when income runs out; check
        result.is_partial.
        """
        requested = require_positive_money(round_money(requested_amount), "Allocation amount")
        budget = self._store.get_budget(budget_id)

        remaining = requested
        stamp = now_iso()
        new_allocations: list[BudgetAllocation] = []
        for income in self.get_available_income_for_allocation():
            if remaining <= 0:
                break
            draw = round_money(min(income.available, remaining))
            new_allocations.append(BudgetAllocation(
                id=_new_id(),
                income_id=income.id,
                amount=draw,
                date=stamp,
            ))
            income.allocated_amount = round_money(income.allocated_amount + draw)
            remaining = round_money(remaining - draw)

        allocated = round_money(requested - remaining)
        result = AllocationResult(budget.id, requested, allocated, new_allocations)
        if not new_allocations:
            logger.warning("No unallocated income to fund budget %s", budget.id)
            return result

        budget.allocations.extend(new_allocations)
        refresh_status(budget)
        self._store.save_sets("incomes", "budgets")

        if result.is_partial:
            logger.warning(
                "Budget %s: allocated %.2f of %.2f requested", budget.id, allocated, requested
            )
        else:
            logger.info("Budget %s: allocated %.2f", budget.id, allocated)
        return result

    def apply_suggestions(self) -> list[AllocationResult]:
        return [
            self.allocate(s.budget_id, s.suggested_amount)
            for s in self.suggest_budget_allocations()
        ]

    def reallocate(self, from_budget_id: str, to_budget_id: str, amount: float) -> ReallocationResult:
        """Move funded money between budgets. Incomes are not touched.

        Raises InsufficientFundsError, without changing anything, when the
        source holds less than amount.
        """
        amount = require_positive_money(round_money(amount), "Reallocation amount")
        if from_budget_id == to_budget_id:
            raise ValueError("Cannot reallocate a budget to itself.")
        source = self._store.get_budget(from_budget_id)
        target = self._store.get_budget(to_budget_id)
        if source.funded_amount < amount:
            raise InsufficientFundsError(source.id, amount, source.funded_amount)

        # Draw on the income that funded the source first
        plan: list[tuple[str, float]] = []
        remaining = amount
        for income_id, held in source.holdings_by_income().items():
            if remaining <= 0:
                break
            held = round_money(held)
            if held <= 0:
                continue
            draw = round_money(min(held, remaining))
            plan.append((income_id, draw))
            remaining = round_money(remaining - draw)

        stamp = now_iso()
        result = ReallocationResult(source.id, target.id, amount)
        for income_id, draw in plan:
            out = BudgetAllocation(_new_id(), income_id, -draw, stamp, "transfer_out", target.id)
            in_ = BudgetAllocation(_new_id(), income_id, draw, stamp, "transfer_in", source.id)
            source.allocations.append(out)
            target.allocations.append(in_)
            result.transfers_out.append(out)
            result.transfers_in.append(in_)

        refresh_status(source)
        refresh_status(target)
        self._store.save_budgets()
        logger.info("Reallocated %.2f from budget %s to %s", amount, source.id, target.id)
        return result

    # ── Deletion cascades ────────────────────────────────────────────────────

    def release_income(self, income_id: str) -> list[Budget]:
        """Drop every record drawn from income_id; returns the budgets changed."""
        touched: list[Budget] = []
        for budget in self._store.budgets:
            kept = [a for a in budget.allocations if a.income_id != income_id]
            if len(kept) == len(budget.allocations):
                continue
            budget.allocations = kept
            refresh_status(budget)
            touched.append(budget)
        return touched

    def release_budget(self, budget: Budget) -> list[Income]:
        """Return a budget's holdings to the incomes that funded it."""
        touched: list[Income] = []
        for income_id, held in budget.holdings_by_income().items():
            income = self._store.find_income(income_id)
            if income is None:
                logger.debug("Budget %s holds from missing income %s", budget.id, income_id)
                continue
            income.allocated_amount = round_money(max(0.0, income.allocated_amount - held))
            touched.append(income)
        return touched


def reconcile_funding(incomes: list[Income], budgets: list[Budget]) -> None:
    """Re-derive allocated/funded totals from the allocation records.

    Raises ValueError when the records cannot back a consistent ledger.
    """
    by_id = {i.id: i for i in incomes}
    totals = {i.id: 0.0 for i in incomes}
    for budget in budgets:
        for income_id, held in budget.holdings_by_income().items():
            if income_id not in by_id:
                raise ValueError(
                    f"Budget '{budget.id}' references unknown income '{income_id}'"
                )
            if round_money(held) < 0:
                raise ValueError(
                    f"Budget '{budget.id}' holds a negative amount from income '{income_id}'"
                )
            totals[income_id] = round_money(totals[income_id] + held)
        refresh_status(budget)
    for income_id, total in totals.items():
        income = by_id[income_id]
        if total > income.amount:
            raise ValueError(
                f"Income '{income_id}' is allocated {total:.2f} but only {income.amount:.2f} was received"
            )
        income.allocated_amount = total
