from models.budget import Budget
from utils.currency import sum_money


def derive_status(funded: float, spent: float, target: float) -> str:
    """Budget status from its funded, spent and target amounts.

    First match wins: overspent, unfunded, partially_funded, fully_funded.
    A zero target with zero funding is 'unfunded', not 'fully_funded'.
    """
    if spent > target:
        return "overspent"
    if funded == 0:
        return "unfunded"
    if funded < target:
        return "partially_funded"
    return "fully_funded"


def refresh_status(budget: Budget) -> Budget:
    """Re-derive funded_amount from the allocation records, then the status."""
    budget.funded_amount = sum_money(a.amount for a in budget.allocations)
    budget.status = derive_status(budget.funded_amount, budget.spent_amount, budget.amount)
    return budget
