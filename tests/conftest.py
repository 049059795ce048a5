import pytest

from database.db_manager import DatabaseManager
from database.income_dao import IncomeDAO
from database.expense_dao import ExpenseDAO
from database.budget_dao import BudgetDAO
from database.subscription_dao import SubscriptionDAO
from database.category_dao import CategoryDAO, SettingsDAO
from database.finance_store import FinanceStore
from services.allocation_service import AllocationService
from services.spend_tracker import SpendTracker
from services.income_service import IncomeService
from services.expense_service import ExpenseService
from services.budget_service import BudgetService
from services.subscription_service import SubscriptionService
from services.category_service import CategoryService
from services.settings_service import SettingsService
from services.data_service import DataService


def _open_store(db):
    return FinanceStore(
        db,
        IncomeDAO(db),
        ExpenseDAO(db),
        BudgetDAO(db),
        SubscriptionDAO(db),
        CategoryDAO(db),
        SettingsDAO(db),
    ).load()


@pytest.fixture
def db():
    manager = DatabaseManager(":memory:")
    manager.initialize()
    yield manager
    manager.close()


@pytest.fixture
def reopen(db):
    """Build a fresh store over the same database, as a restart would."""
    return lambda: _open_store(db)


@pytest.fixture
def store(db):
    return _open_store(db)


@pytest.fixture
def allocation(store):
    return AllocationService(store)


@pytest.fixture
def tracker(store):
    return SpendTracker(store)


@pytest.fixture
def incomes(store, allocation):
    return IncomeService(store, allocation)


@pytest.fixture
def expenses(store, tracker):
    return ExpenseService(store, tracker)


@pytest.fixture
def budgets(store, allocation):
    return BudgetService(store, allocation)


@pytest.fixture
def subscriptions(store):
    return SubscriptionService(store)


@pytest.fixture
def categories(store):
    return CategoryService(store)


@pytest.fixture
def settings(store):
    return SettingsService(store)


@pytest.fixture
def data(db, store, tracker):
    return DataService(
        store,
        IncomeDAO(db),
        ExpenseDAO(db),
        BudgetDAO(db),
        SubscriptionDAO(db),
        CategoryDAO(db),
        SettingsDAO(db),
        tracker,
    )
