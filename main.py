import argparse
import logging
import sys

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
from services.errors import FinanceError

from ui.budget_chart import save_funding_chart
from utils.app_config import get_db_folder, get_log_level
from utils.constants import APP_NAME, BUDGET_PERIODS, CHART_FILE
from utils.currency import format_currency
from utils.logging_config import configure_logging

logger = logging.getLogger(__name__)


class App:
    """Wires the storage layer and services together for one CLI run."""

    def __init__(self, db: DatabaseManager):
        # ── DAOs ─────────────────────────────────────────────────────────────
        income_dao = IncomeDAO(db)
        expense_dao = ExpenseDAO(db)
        budget_dao = BudgetDAO(db)
        subscription_dao = SubscriptionDAO(db)
        category_dao = CategoryDAO(db)
        settings_dao = SettingsDAO(db)

        # ── In-memory state ──────────────────────────────────────────────────
        self.store = FinanceStore(
            db, income_dao, expense_dao, budget_dao,
            subscription_dao, category_dao, settings_dao,
        ).load()

        # ── Services ─────────────────────────────────────────────────────────
        self.allocation = AllocationService(self.store)
        self.tracker = SpendTracker(self.store)
        self.incomes = IncomeService(self.store, self.allocation)
        self.expenses = ExpenseService(self.store, self.tracker)
        self.budgets = BudgetService(self.store, self.allocation)
        self.subscriptions = SubscriptionService(self.store)
        self.categories = CategoryService(self.store)
        self.settings = SettingsService(self.store)
        self.data = DataService(
            self.store, income_dao, expense_dao, budget_dao,
            subscription_dao, category_dao, settings_dao, self.tracker,
        )

    def money(self, amount: float) -> str:
        return format_currency(amount, self.settings.get().currency)


# ── Commands ─────────────────────────────────────────────────────────────────

def cmd_summary(app: App, args):
    incomes = app.incomes.get_all()
    budgets = app.budgets.get_all()
    total_income = sum(i.amount for i in incomes)
    total_funded = sum(b.funded_amount for b in budgets)
    total_spent = sum(b.spent_amount for b in budgets)
    print(f"{APP_NAME} summary")
    print(f"  Income received:    {app.money(total_income)}")
    print(f"  Unallocated income: {app.money(app.allocation.get_unallocated_income())}")
    print(f"  Funded to budgets:  {app.money(total_funded)}")
    print(f"  Spent from budgets: {app.money(total_spent)}")
    print(f"  Budgets: {len(budgets)}  Expenses: {len(app.expenses.get_all())}")
    upcoming = app.subscriptions.get_upcoming()
    if upcoming:
        print("  Upcoming subscriptions:")
        for sub in upcoming:
            status = app.subscriptions.payment_status(sub)
            print(f"    {sub.name:<24} {app.money(sub.amount):>12}  {status}")


def cmd_incomes(app: App, args):
    incomes = app.incomes.get_all()
    if not incomes:
        print("No incomes.")
        return
    for i in incomes:
        print(
            f"{i.id}  {i.date}  {app.money(i.amount):>12}  "
            f"available {app.money(i.available):>12}  {i.description}"
        )


def cmd_budgets(app: App, args):
    budgets = app.budgets.get_all()
    if not budgets:
        print("No budgets.")
        return
    for b in budgets:
        print(
            f"{b.id}  {b.name:<20} target {app.money(b.amount):>12}  "
            f"funded {app.money(b.funded_amount):>12}  "
            f"spent {app.money(b.spent_amount):>12}  {b.status}"
        )


def cmd_add_income(app: App, args):
    income = app.incomes.add(
        amount=args.amount,
        date=args.date,
        description=args.description,
        category=args.category,
        source=args.source,
    )
    print(f"Added income {income.id}")


def cmd_add_expense(app: App, args):
    expense = app.expenses.add(
        amount=args.amount,
        date=args.date,
        description=args.description,
        category=args.category,
        budget_id=args.budget,
        vendor=args.vendor,
    )
    print(f"Added expense {expense.id}")


def cmd_add_budget(app: App, args):
    budget = app.budgets.add(
        name=args.name,
        amount=args.amount,
        period=args.period,
        start_date=args.start,
        category=args.category,
        end_date=args.end,
    )
    print(f"Added budget {budget.id}")


def cmd_delete_income(app: App, args):
    app.incomes.delete(args.income_id)
    print(f"Deleted income {args.income_id}")


def cmd_delete_budget(app: App, args):
    app.budgets.delete(args.budget_id)
    print(f"Deleted budget {args.budget_id}")


def cmd_allocate(app: App, args):
    result = app.allocation.allocate(args.budget_id, args.amount)
    print(
        f"Allocated {app.money(result.allocated_amount)} "
        f"of {app.money(result.requested_amount)} requested"
    )
    if result.is_partial:
        print("Not enough unallocated income to fund the full amount.")


def cmd_reallocate(app: App, args):
    result = app.allocation.reallocate(args.from_budget, args.to_budget, args.amount)
    print(f"Moved {app.money(result.amount)} from {result.from_budget_id} to {result.to_budget_id}")


def cmd_suggest(app: App, args):
    suggestions = app.allocation.suggest_budget_allocations()
    if not suggestions:
        print("Nothing to suggest.")
        return
    for s in suggestions:
        budget = app.budgets.get_by_id(s.budget_id)
        print(f"{budget.name:<20} {app.money(s.suggested_amount):>12}")


def cmd_apply_suggestions(app: App, args):
    results = app.allocation.apply_suggestions()
    total = sum(r.allocated_amount for r in results)
    print(f"Funded {len(results)} budget(s) with {app.money(total)}")


def cmd_export(app: App, args):
    if args.csv:
        app.data.export_csv_zip(args.csv)
        print(f"Exported CSV archive to {args.csv}")
        return
    path = app.data.write_export(args.path)
    print(f"Exported data to {path}")


def cmd_import(app: App, args):
    stats = app.data.read_import(args.path)
    print("Imported " + ", ".join(f"{n} {k}" for k, n in stats.items()))


def cmd_chart(app: App, args):
    path = save_funding_chart(app.budgets.get_all(), args.output)
    print(f"Saved chart to {path}")


# ── Argument parsing ─────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fintrack", description=f"{APP_NAME} budget funding")
    parser.add_argument("--db-folder", help="Folder holding the database (default: config or CWD)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("summary", help="Totals and upcoming subscriptions").set_defaults(func=cmd_summary)
    sub.add_parser("incomes", help="List incomes").set_defaults(func=cmd_incomes)
    sub.add_parser("budgets", help="List budgets").set_defaults(func=cmd_budgets)

    p = sub.add_parser("add-income", help="Record received income")
    p.add_argument("amount", type=float)
    p.add_argument("--date", help="YYYY-MM-DD (default: today)")
    p.add_argument("--description", default="")
    p.add_argument("--category", default="")
    p.add_argument("--source")
    p.set_defaults(func=cmd_add_income)

    p = sub.add_parser("add-expense", help="Record an expense, optionally against a budget")
    p.add_argument("amount", type=float)
    p.add_argument("--budget", help="Budget id to spend from")
    p.add_argument("--date", help="YYYY-MM-DD (default: today)")
    p.add_argument("--description", default="")
    p.add_argument("--category", default="")
    p.add_argument("--vendor")
    p.set_defaults(func=cmd_add_expense)

    p = sub.add_parser("add-budget", help="Create a budget")
    p.add_argument("name")
    p.add_argument("amount", type=float)
    p.add_argument("--period", choices=BUDGET_PERIODS, default="monthly")
    p.add_argument("--start", help="YYYY-MM-DD (default: today)")
    p.add_argument("--end")
    p.add_argument("--category")
    p.set_defaults(func=cmd_add_budget)

    p = sub.add_parser("delete-income", help="Delete an income and withdraw its funding")
    p.add_argument("income_id")
    p.set_defaults(func=cmd_delete_income)

    p = sub.add_parser("delete-budget", help="Delete a budget and release its funding")
    p.add_argument("budget_id")
    p.set_defaults(func=cmd_delete_budget)

    p = sub.add_parser("allocate", help="Fund a budget from unallocated income")
    p.add_argument("budget_id")
    p.add_argument("amount", type=float)
    p.set_defaults(func=cmd_allocate)

    p = sub.add_parser("reallocate", help="Move funding between budgets")
    p.add_argument("from_budget")
    p.add_argument("to_budget")
    p.add_argument("amount", type=float)
    p.set_defaults(func=cmd_reallocate)

    sub.add_parser("suggest", help="Show suggested allocations").set_defaults(func=cmd_suggest)
    sub.add_parser(
        "apply-suggestions", help="Allocate every suggestion"
    ).set_defaults(func=cmd_apply_suggestions)

    p = sub.add_parser("export", help="Export all data as JSON")
    p.add_argument("path", nargs="?", help="Output file (default: dated file in CWD)")
    p.add_argument("--csv", metavar="ZIP", help="Write a ZIP of CSV files instead")
    p.set_defaults(func=cmd_export)

    p = sub.add_parser("import", help="Replace all data from a JSON export")
    p.add_argument("path")
    p.set_defaults(func=cmd_import)

    p = sub.add_parser("chart", help="Save a budget funding chart as PNG")
    p.add_argument("--output", default=CHART_FILE)
    p.set_defaults(func=cmd_chart)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose, level=get_log_level())

    db = None
    try:
        # ── Bootstrap: read DB folder from pre-DB config ──────────────────────
        db = DatabaseManager.open_in_folder(args.db_folder or get_db_folder())
        app = App(db)
        args.func(app, args)
    except (FinanceError, ValueError, OSError) as e:
        logger.error("%s failed: %s", args.command, e)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        if db is not None:
            db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
