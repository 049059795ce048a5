from database.finance_store import FinanceStore
from models.settings import Settings
from utils.constants import CURRENCIES


class SettingsService:
    def __init__(self, store: FinanceStore):
        self._store = store

    def get(self) -> Settings:
        return self._store.settings

    def update(self, currency: str | None = None) -> Settings:
        if currency is not None:
            if currency not in CURRENCIES:
                raise ValueError(
                    f"Unsupported currency '{currency}'. Must be one of: {', '.join(CURRENCIES)}."
                )
            self._store.settings.currency = currency
        self._store.save_settings()
        return self._store.settings
