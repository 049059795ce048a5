from dataclasses import dataclass, field
from utils.constants import (
    DEFAULT_CURRENCY,
    DEFAULT_INCOME_CATEGORIES,
    DEFAULT_EXPENSE_CATEGORIES,
    DEFAULT_SUBSCRIPTION_CATEGORIES,
)


@dataclass
class Settings:
    currency: str = DEFAULT_CURRENCY


@dataclass
class Categories:
    income: list[str] = field(default_factory=lambda: list(DEFAULT_INCOME_CATEGORIES))
    expense: list[str] = field(default_factory=lambda: list(DEFAULT_EXPENSE_CATEGORIES))
    subscription: list[str] = field(default_factory=lambda: list(DEFAULT_SUBSCRIPTION_CATEGORIES))

    def for_type(self, type_: str) -> list[str]:
        return getattr(self, type_)
