from database.document_dao import DocumentDAO, require_str, opt_str, money, flag
from models.expense import Expense
from utils.constants import EXPENSE_STORAGE_KEY


class ExpenseDAO(DocumentDAO):
    KEY = EXPENSE_STORAGE_KEY

    def _row_to_model(self, row: dict) -> Expense:
        return Expense(
            id=require_str(row, "id"),
            amount=money(row, "amount"),
            date=require_str(row, "date"),
            description=row.get("description") or "",
            category=row.get("category") or "",
            vendor=opt_str(row, "vendor"),
            notes=opt_str(row, "notes"),
            budget_id=opt_str(row, "budgetId"),
            is_recurring=flag(row, "isRecurring"),
            recurrence_type=opt_str(row, "recurrenceType"),
            recurrence_end=opt_str(row, "recurrenceEnd"),
        )

    def _model_to_row(self, expense: Expense) -> dict:
        return {
            "id": expense.id,
            "type": "expense",
            "amount": expense.amount,
            "date": expense.date,
            "description": expense.description,
            "category": expense.category,
            "vendor": expense.vendor,
            "notes": expense.notes,
            "budgetId": expense.budget_id,
            "isRecurring": expense.is_recurring,
            "recurrenceType": expense.recurrence_type,
            "recurrenceEnd": expense.recurrence_end,
        }
