APP_NAME = "FinTrack"
DB_FILE = "fintrack.db"
CHART_FILE = "budget_funding.png"

DATE_FORMAT = "%Y-%m-%d"
EXPORT_FILE_PREFIX = "fintrack_export_"

# Document keys in the key-value store, one full entity set per key
INCOME_STORAGE_KEY = "fintrack_incomes"
EXPENSE_STORAGE_KEY = "fintrack_expenses"
SUBSCRIPTION_STORAGE_KEY = "fintrack_subscriptions"
BUDGET_STORAGE_KEY = "fintrack_budgets"
CATEGORIES_STORAGE_KEY = "fintrack_categories"
SETTINGS_STORAGE_KEY = "fintrack_settings"

BUDGET_PERIODS = ("monthly", "yearly", "custom")
RECURRENCE_TYPES = ("one-time", "daily", "weekly", "monthly", "yearly")
CURRENCIES = ("USD", "ZAR")
CATEGORY_TYPES = ("income", "expense", "subscription")

ALLOCATION_KINDS = ("allocation", "transfer_in", "transfer_out")

DEFAULT_CURRENCY = "USD"

DEFAULT_INCOME_CATEGORIES = ["Salary", "Business", "Investments", "Freelance", "Other"]
DEFAULT_EXPENSE_CATEGORIES = [
    "Housing", "Food", "Transportation", "Entertainment", "Utilities",
    "Healthcare", "Shopping", "Education", "Travel", "Other",
]
DEFAULT_SUBSCRIPTION_CATEGORIES = ["Streaming", "Software", "Membership", "Service", "Other"]

UPCOMING_SUBSCRIPTION_LIMIT = 3
SUBSCRIPTION_SOON_DAYS = 3

CURRENCY_SYMBOLS = {
    "USD": "$",
    "ZAR": "R",
}

BUDGET_CHART_COLORS = {
    "target": "#9E9E9E",
    "funded": "#2196F3",
    "spent":  "#F44336",
}
