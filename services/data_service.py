"""Export and import all user data (incomes, expenses, subscriptions, budgets,
categories, settings) as JSON, plus a CSV-in-ZIP export for spreadsheets.
"""
import csv
import io
import json
import logging
import zipfile
from datetime import datetime

from database.finance_store import FinanceStore
from database.income_dao import IncomeDAO
from database.expense_dao import ExpenseDAO
from database.budget_dao import BudgetDAO
from database.subscription_dao import SubscriptionDAO
from database.category_dao import CategoryDAO, SettingsDAO
from services.allocation_service import reconcile_funding
from services.budget_service import validate_budget
from services.errors import ImportFormatError, PersistenceError
from services.expense_service import validate_expense
from services.income_service import validate_income
from services.spend_tracker import SpendTracker
from services.subscription_service import validate_subscription
from utils.constants import EXPORT_FILE_PREFIX
from utils.date_helpers import today_str

logger = logging.getLogger(__name__)

ENTITY_SECTIONS = ("incomes", "expenses", "subscriptions", "budgets")


class DataService:
    def __init__(
        self,
        store: FinanceStore,
        income_dao: IncomeDAO,
        expense_dao: ExpenseDAO,
        budget_dao: BudgetDAO,
        subscription_dao: SubscriptionDAO,
        category_dao: CategoryDAO,
        settings_dao: SettingsDAO,
        spend_tracker: SpendTracker,
    ):
        self._store = store
        self._income_dao = income_dao
        self._expense_dao = expense_dao
        self._budget_dao = budget_dao
        self._subscription_dao = subscription_dao
        self._category_dao = category_dao
        self._settings_dao = settings_dao
        self._tracker = spend_tracker

    # ── Export ────────────────────────────────────────────────────────────────

    def export_json(self) -> dict:
        """Return a full export dict (caller writes to disk)."""
        data = self._store.snapshot()
        data["exportDate"] = datetime.now().isoformat()
        return data

    def write_export(self, path: str | None = None) -> str:
        path = path or f"{EXPORT_FILE_PREFIX}{today_str()}.json"
        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(self.export_json(), f, indent=2)
        except OSError as e:
            raise PersistenceError(f"Could not write export to {path}: {e}") from e
        logger.info("Exported data to %s", path)
        return path

    def export_csv_zip(self, path: str) -> None:
        """Write a ZIP archive containing one CSV per entity type.

        Budget allocations get their own CSV keyed by budgetId.
        """
        data = self.export_json()
        tables = {key: data[key] for key in ENTITY_SECTIONS}
        allocations = []
        for budget in tables["budgets"]:
            for alloc in budget["allocations"]:
                allocations.append({"budgetId": budget["id"], **alloc})
        tables["budgets"] = [
            {k: v for k, v in b.items() if k != "allocations"} for b in tables["budgets"]
        ]
        tables["allocations"] = allocations

        try:
            with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
                for key, rows in tables.items():
                    if not rows:
                        continue
                    fieldnames = list(dict.fromkeys(k for row in rows for k in row))
                    buf = io.StringIO()
                    writer = csv.DictWriter(buf, fieldnames=fieldnames)
                    writer.writeheader()
                    writer.writerows(rows)
                    zf.writestr(f"{key}.csv", buf.getvalue())
        except OSError as e:
            raise PersistenceError(f"Could not write export to {path}: {e}") from e

    # ── Import ────────────────────────────────────────────────────────────────

    def read_import(self, path: str) -> dict:
        """Load and import a JSON export file. Returns stats like import_json."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise ImportFormatError(f"Could not read import file {path}: {e}") from e
        except ValueError as e:
            raise ImportFormatError(f"{path} is not valid JSON: {e}") from e
        return self.import_json(data)

    def import_json(self, data: dict) -> dict:
        """Replace all stored data with a previously exported JSON dict.

        Missing top-level sections default. The whole document is validated,
        and funding/spending totals re-derived from the records, before
        anything is written; on any problem ImportFormatError is raised and
        stored state is left untouched.
        Returns stats dict with counts of imported entities.
        """
        if not isinstance(data, dict):
            raise ImportFormatError("Import document must be a JSON object.")
        try:
            incomes = self._income_dao.from_rows(self._section(data, "incomes"))
            expenses = self._expense_dao.from_rows(self._section(data, "expenses"))
            subscriptions = self._subscription_dao.from_rows(self._section(data, "subscriptions"))
            budgets = self._budget_dao.from_rows(self._section(data, "budgets"))
            categories = self._category_dao.from_document(data.get("categories"))
            settings = self._settings_dao.from_document(data.get("settings"))

            for key, items, validate in (
                ("incomes", incomes, validate_income),
                ("expenses", expenses, validate_expense),
                ("subscriptions", subscriptions, validate_subscription),
                ("budgets", budgets, validate_budget),
            ):
                self._check_unique_ids(key, items)
                self._check_valid(key, items, validate)

            budget_ids = {b.id for b in budgets}
            for expense in expenses:
                if expense.budget_id and expense.budget_id not in budget_ids:
                    logger.warning(
                        "Expense %s links to unknown budget %s; unlinking",
                        expense.id, expense.budget_id,
                    )
                    expense.budget_id = None

            reconcile_funding(incomes, budgets)
            self._tracker.rebuild(budgets, expenses)
        except KeyError as e:
            raise ImportFormatError(f"Invalid import file: missing field {e}") from e
        except (TypeError, ValueError) as e:
            raise ImportFormatError(f"Invalid import file: {e}") from e

        self._store.replace_all(incomes, expenses, subscriptions, budgets, categories, settings)
        stats = {
            "incomes": len(incomes),
            "expenses": len(expenses),
            "subscriptions": len(subscriptions),
            "budgets": len(budgets),
        }
        logger.info("Imported %s", stats)
        return stats

    # ── Private helpers ───────────────────────────────────────────────────────

    @staticmethod
    def _section(data: dict, key: str) -> list:
        value = data.get(key)
        return [] if value is None else value

    @staticmethod
    def _check_unique_ids(key: str, items: list):
        seen: set[str] = set()
        for item in items:
            if item.id in seen:
                raise ValueError(f"Duplicate id '{item.id}' in {key}")
            seen.add(item.id)

    @staticmethod
    def _check_valid(key: str, items: list, validate):
        for item in items:
            try:
                validate(item)
            except ValueError as e:
                raise ValueError(f"{key} '{item.id}': {e}") from e
