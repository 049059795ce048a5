from dataclasses import dataclass, field
from typing import Optional


@dataclass
class BudgetAllocation:
    id: str
    income_id: str
    amount: float           # negative for 'transfer_out'
    date: str               # ISO-8601 timestamp
    kind: str = "allocation"    # 'allocation' | 'transfer_in' | 'transfer_out'
    counterpart_budget_id: Optional[str] = None


@dataclass
class Budget:
    id: str
    name: str
    amount: float           # target
    period: str             # 'monthly' | 'yearly' | 'custom'
    start_date: str         # 'YYYY-MM-DD'
    category: Optional[str] = None   # None = general budget
    end_date: Optional[str] = None
    is_active: bool = True
    funded_amount: float = 0.0
    spent_amount: float = 0.0
    status: str = "unfunded"
    allocations: list[BudgetAllocation] = field(default_factory=list)

    @property
    def remaining_need(self) -> float:
        return max(0.0, self.amount - self.funded_amount)

    @property
    def available_amount(self) -> float:
        """Funded money not yet spent (negative when spending outran funding)."""
        return self.funded_amount - self.spent_amount

    def holdings_by_income(self) -> dict[str, float]:
        """Net amount held from each income, keyed in first-funded order."""
        holdings: dict[str, float] = {}
        for alloc in self.allocations:
            holdings[alloc.income_id] = holdings.get(alloc.income_id, 0.0) + alloc.amount
        return holdings


@dataclass
class AvailableBudget:
    id: str
    name: str
    category: Optional[str]
    available_amount: float


@dataclass
class AllocationSuggestion:
    budget_id: str
    suggested_amount: float
