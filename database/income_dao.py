from database.document_dao import DocumentDAO, require_str, opt_str, money, flag
from models.income import Income
from utils.constants import INCOME_STORAGE_KEY


class IncomeDAO(DocumentDAO):
    KEY = INCOME_STORAGE_KEY

    def _row_to_model(self, row: dict) -> Income:
        return Income(
            id=require_str(row, "id"),
            amount=money(row, "amount"),
            date=require_str(row, "date"),
            description=row.get("description") or "",
            category=row.get("category") or "",
            source=opt_str(row, "source"),
            notes=opt_str(row, "notes"),
            is_recurring=flag(row, "isRecurring"),
            recurrence_type=opt_str(row, "recurrenceType"),
            recurrence_end=opt_str(row, "recurrenceEnd"),
            allocated_amount=money(row, "allocatedAmount", 0.0),
        )

    def _model_to_row(self, income: Income) -> dict:
        return {
            "id": income.id,
            "type": "income",
            "amount": income.amount,
            "date": income.date,
            "description": income.description,
            "category": income.category,
            "source": income.source,
            "notes": income.notes,
            "isRecurring": income.is_recurring,
            "recurrenceType": income.recurrence_type,
            "recurrenceEnd": income.recurrence_end,
            "allocated": income.is_fully_allocated,
            "allocatedAmount": income.allocated_amount,
        }
