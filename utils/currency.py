import math

from utils.constants import CURRENCY_SYMBOLS


def round_money(amount: float) -> float:
    """Round to cents so stored amounts reconcile exactly when summed."""
    # +0.0 folds -0.0 into 0.0
    return round(float(amount), 2) + 0.0


def sum_money(amounts) -> float:
    return round_money(sum(amounts, 0.0))


def require_positive_money(amount: float, label: str = "Amount") -> float:
    """Raise ValueError unless amount is a finite number above zero."""
    if not (math.isfinite(amount) and amount > 0):
        raise ValueError(f"{label} must be positive.")
    return amount


def require_non_negative_money(amount: float, label: str = "Amount") -> float:
    if not (math.isfinite(amount) and amount >= 0):
        raise ValueError(f"{label} must be non-negative.")
    return amount


def currency_symbol(currency: str) -> str:
    return CURRENCY_SYMBOLS.get(currency, "$")


def format_currency(amount: float, currency: str = "USD") -> str:
    """Format a float as currency string, e.g. '$1,234.56'."""
    symbol = currency_symbol(currency)
    if amount < 0:
        return f"-{symbol}{abs(amount):,.2f}"
    return f"{symbol}{amount:,.2f}"
