"""In-memory entity state, loaded from the database at startup.

Services hold a reference to one FinanceStore and mutate its lists directly,
then call the matching save_* method. Each save replaces the whole document
for that entity set.
"""
import logging

from database.db_manager import DatabaseManager
from database.income_dao import IncomeDAO
from database.expense_dao import ExpenseDAO
from database.budget_dao import BudgetDAO
from database.subscription_dao import SubscriptionDAO
from database.category_dao import CategoryDAO, SettingsDAO
from models.income import Income
from models.expense import Expense
from models.budget import Budget
from models.subscription import Subscription
from models.settings import Categories, Settings
from services.errors import NotFoundError, PersistenceError
from utils.constants import CATEGORIES_STORAGE_KEY, SETTINGS_STORAGE_KEY

logger = logging.getLogger(__name__)


class FinanceStore:
    def __init__(
        self,
        db: DatabaseManager,
        income_dao: IncomeDAO,
        expense_dao: ExpenseDAO,
        budget_dao: BudgetDAO,
        subscription_dao: SubscriptionDAO,
        category_dao: CategoryDAO,
        settings_dao: SettingsDAO,
    ):
        self._db = db
        self._income_dao = income_dao
        self._expense_dao = expense_dao
        self._budget_dao = budget_dao
        self._subscription_dao = subscription_dao
        self._category_dao = category_dao
        self._settings_dao = settings_dao

        self.incomes: list[Income] = []
        self.expenses: list[Expense] = []
        self.budgets: list[Budget] = []
        self.subscriptions: list[Subscription] = []
        self.categories = Categories()
        self.settings = Settings()

    def load(self) -> "FinanceStore":
        """Read every entity set from the database, replacing in-memory state."""
        try:
            incomes = self._income_dao.load_all()
            expenses = self._expense_dao.load_all()
            budgets = self._budget_dao.load_all()
            subscriptions = self._subscription_dao.load_all()
            categories = self._category_dao.load()
            settings = self._settings_dao.load()
        except (KeyError, TypeError, ValueError) as e:
            raise PersistenceError(f"Stored data is corrupt: {e}") from e
        self.incomes = incomes
        self.expenses = expenses
        self.budgets = budgets
        self.subscriptions = subscriptions
        self.categories = categories
        self.settings = settings
        logger.info(
            "Loaded %d incomes, %d expenses, %d budgets, %d subscriptions",
            len(incomes), len(expenses), len(budgets), len(subscriptions),
        )
        return self

    # ── Lookups ──────────────────────────────────────────────────────────────

    def find_income(self, income_id: str) -> Income | None:
        return next((i for i in self.incomes if i.id == income_id), None)

    def find_budget(self, budget_id: str) -> Budget | None:
        return next((b for b in self.budgets if b.id == budget_id), None)

    def find_expense(self, expense_id: str) -> Expense | None:
        return next((e for e in self.expenses if e.id == expense_id), None)

    def find_subscription(self, subscription_id: str) -> Subscription | None:
        return next((s for s in self.subscriptions if s.id == subscription_id), None)

    def get_income(self, income_id: str) -> Income:
        income = self.find_income(income_id)
        if income is None:
            raise NotFoundError("Income", income_id)
        return income

    def get_budget(self, budget_id: str) -> Budget:
        budget = self.find_budget(budget_id)
        if budget is None:
            raise NotFoundError("Budget", budget_id)
        return budget

    def get_expense(self, expense_id: str) -> Expense:
        expense = self.find_expense(expense_id)
        if expense is None:
            raise NotFoundError("Expense", expense_id)
        return expense

    def get_subscription(self, subscription_id: str) -> Subscription:
        sub = self.find_subscription(subscription_id)
        if sub is None:
            raise NotFoundError("Subscription", subscription_id)
        return sub

    # ── Persistence ──────────────────────────────────────────────────────────

    def save_incomes(self):
        self._income_dao.save_all(self.incomes)

    def save_expenses(self):
        self._expense_dao.save_all(self.expenses)

    def save_budgets(self):
        self._budget_dao.save_all(self.budgets)

    def save_subscriptions(self):
        self._subscription_dao.save_all(self.subscriptions)

    def save_categories(self):
        self._category_dao.save(self.categories)

    def save_settings(self):
        self._settings_dao.save(self.settings)

    def save_sets(self, *names: str):
        """Write several entity lists in one transaction.

        names: any of 'incomes', 'expenses', 'budgets', 'subscriptions'.
        """
        daos = {
            "incomes": self._income_dao,
            "expenses": self._expense_dao,
            "budgets": self._budget_dao,
            "subscriptions": self._subscription_dao,
        }
        self._db.set_documents({
            daos[name].KEY: daos[name].to_rows(getattr(self, name)) for name in names
        })

    def replace_all(
        self,
        incomes: list[Income],
        expenses: list[Expense],
        subscriptions: list[Subscription],
        budgets: list[Budget],
        categories: Categories,
        settings: Settings,
    ):
        """Write every entity set in one transaction, then swap in-memory state.

        If the write fails nothing in memory changes.
        """
        self._db.set_documents({
            self._income_dao.KEY: self._income_dao.to_rows(incomes),
            self._expense_dao.KEY: self._expense_dao.to_rows(expenses),
            self._subscription_dao.KEY: self._subscription_dao.to_rows(subscriptions),
            self._budget_dao.KEY: self._budget_dao.to_rows(budgets),
            CATEGORIES_STORAGE_KEY: self._category_dao.to_document(categories),
            SETTINGS_STORAGE_KEY: self._settings_dao.to_document(settings),
        })
        self.incomes = incomes
        self.expenses = expenses
        self.subscriptions = subscriptions
        self.budgets = budgets
        self.categories = categories
        self.settings = settings

    def snapshot(self) -> dict:
        """Export-shaped dict of the current state (camelCase rows)."""
        return {
            "incomes": self._income_dao.to_rows(self.incomes),
            "expenses": self._expense_dao.to_rows(self.expenses),
            "subscriptions": self._subscription_dao.to_rows(self.subscriptions),
            "budgets": self._budget_dao.to_rows(self.budgets),
            "categories": self._category_dao.to_document(self.categories),
            "settings": self._settings_dao.to_document(self.settings),
        }

