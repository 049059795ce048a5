from database.finance_store import FinanceStore
from utils.constants import CATEGORY_TYPES


class CategoryService:
    def __init__(self, store: FinanceStore):
        self._store = store

    def get_all(self, type_: str) -> list[str]:
        self._validate_type(type_)
        return list(self._store.categories.for_type(type_))

    def add(self, type_: str, name: str) -> str:
        self._validate_type(type_)
        name = name.strip()
        if not name:
            raise ValueError("Category name cannot be empty.")
        names = self._store.categories.for_type(type_)
        if name.lower() in (n.lower() for n in names):
            raise ValueError(f"A category named '{name}' already exists.")
        names.append(name)
        self._store.save_categories()
        return name

    def delete(self, type_: str, name: str):
        """Remove a category name. Entries already using it keep the label."""
        self._validate_type(type_)
        names = self._store.categories.for_type(type_)
        if name not in names:
            raise ValueError(f"No {type_} category named '{name}'.")
        names.remove(name)
        self._store.save_categories()

    @staticmethod
    def _validate_type(type_: str):
        if type_ not in CATEGORY_TYPES:
            raise ValueError(
                f"Invalid category type '{type_}'. "
                f"Must be one of: {', '.join(CATEGORY_TYPES)}."
            )
