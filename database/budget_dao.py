from database.document_dao import DocumentDAO, require_str, opt_str, money, flag
from models.budget import Budget, BudgetAllocation
from utils.constants import BUDGET_STORAGE_KEY, ALLOCATION_KINDS


class BudgetDAO(DocumentDAO):
    KEY = BUDGET_STORAGE_KEY

    def _allocation_from_row(self, row: dict) -> BudgetAllocation:
        kind = row.get("kind") or "allocation"
        if kind not in ALLOCATION_KINDS:
            raise ValueError(f"Unknown allocation kind '{kind}'")
        return BudgetAllocation(
            id=require_str(row, "id"),
            income_id=require_str(row, "incomeId"),
            amount=money(row, "amount"),
            date=row.get("date") or "",
            kind=kind,
            counterpart_budget_id=opt_str(row, "counterpartBudgetId"),
        )

    def _allocation_to_row(self, alloc: BudgetAllocation) -> dict:
        row = {
            "id": alloc.id,
            "incomeId": alloc.income_id,
            "amount": alloc.amount,
            "date": alloc.date,
            "kind": alloc.kind,
        }
        if alloc.counterpart_budget_id:
            row["counterpartBudgetId"] = alloc.counterpart_budget_id
        return row

    def _row_to_model(self, row: dict) -> Budget:
        allocations = row.get("allocations") or []
        if not isinstance(allocations, list):
            raise TypeError("'allocations' must be a list")
        return Budget(
            id=require_str(row, "id"),
            name=require_str(row, "name"),
            amount=money(row, "amount"),
            period=row.get("period") or "monthly",
            start_date=require_str(row, "startDate"),
            category=opt_str(row, "category"),
            end_date=opt_str(row, "endDate"),
            is_active=flag(row, "isActive", True),
            funded_amount=money(row, "fundedAmount", 0.0),
            spent_amount=money(row, "spentAmount", 0.0),
            status=row.get("status") or "unfunded",
            allocations=[self._allocation_from_row(a) for a in allocations],
        )

    def _model_to_row(self, budget: Budget) -> dict:
        return {
            "id": budget.id,
            "name": budget.name,
            "category": budget.category,
            "amount": budget.amount,
            "fundedAmount": budget.funded_amount,
            "spentAmount": budget.spent_amount,
            "period": budget.period,
            "startDate": budget.start_date,
            "endDate": budget.end_date,
            "isActive": budget.is_active,
            "status": budget.status,
            "allocations": [self._allocation_to_row(a) for a in budget.allocations],
        }
