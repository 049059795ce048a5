from database.db_manager import DatabaseManager
from models.settings import Categories, Settings
from utils.constants import (
    CATEGORIES_STORAGE_KEY,
    SETTINGS_STORAGE_KEY,
    CATEGORY_TYPES,
    CURRENCIES,
    DEFAULT_CURRENCY,
)


class CategoryDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def load(self) -> Categories:
        return self.from_document(self._db.get_document(CATEGORIES_STORAGE_KEY))

    def save(self, categories: Categories):
        self._db.set_document(CATEGORIES_STORAGE_KEY, self.to_document(categories))

    def from_document(self, doc) -> Categories:
        """Missing lists fall back to the defaults."""
        if doc is None:
            return Categories()
        if not isinstance(doc, dict):
            raise TypeError("'categories' must be an object")
        categories = Categories()
        for type_ in CATEGORY_TYPES:
            names = doc.get(type_)
            if names is None:
                continue
            if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
                raise TypeError(f"'categories.{type_}' must be a list of strings")
            setattr(categories, type_, list(names))
        return categories

    def to_document(self, categories: Categories) -> dict:
        return {type_: list(categories.for_type(type_)) for type_ in CATEGORY_TYPES}


class SettingsDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def load(self) -> Settings:
        return self.from_document(self._db.get_document(SETTINGS_STORAGE_KEY))

    def save(self, settings: Settings):
        self._db.set_document(SETTINGS_STORAGE_KEY, self.to_document(settings))

    def from_document(self, doc) -> Settings:
        if doc is None:
            return Settings()
        if not isinstance(doc, dict):
            raise TypeError("'settings' must be an object")
        currency = doc.get("currency") or DEFAULT_CURRENCY
        if currency not in CURRENCIES:
            raise ValueError(f"Unsupported currency '{currency}'")
        return Settings(currency=currency)

    def to_document(self, settings: Settings) -> dict:
        return {"currency": settings.currency}
