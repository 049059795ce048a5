import math

from database.db_manager import DatabaseManager
from utils.currency import round_money


class DocumentDAO:
    """Loads and saves one entity list stored as a single JSON document.

    Subclasses set KEY and implement _row_to_model / _model_to_row. Rows use
    the camelCase field names of the export format.
    """

    KEY = ""

    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row: dict):
        raise NotImplementedError

    def _model_to_row(self, model) -> dict:
        raise NotImplementedError

    def load_all(self) -> list:
        return self.from_rows(self._db.get_document(self.KEY, []))

    def save_all(self, models: list):
        self._db.set_document(self.KEY, self.to_rows(models))

    def from_rows(self, rows) -> list:
        """Build models from raw rows; raises ValueError/KeyError/TypeError on bad data."""
        if not isinstance(rows, list):
            raise TypeError(f"'{self.KEY}' must be a list, got {type(rows).__name__}")
        return [self._row_to_model(r) for r in rows]

    def to_rows(self, models: list) -> list[dict]:
        return [self._model_to_row(m) for m in models]


# ── Field coercion shared by the DAOs ──────────────────────────────────────────

def require_str(row: dict, key: str) -> str:
    value = row[key]
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"'{key}' must be a non-empty string")
    return value


def opt_str(row: dict, key: str) -> str | None:
    value = row.get(key)
    if value is None or value == "":
        return None
    return str(value)


def money(row: dict, key: str, default: float | None = None) -> float:
    value = row.get(key, default)
    if value is None:
        raise KeyError(key)
    if isinstance(value, bool):
        raise TypeError(f"'{key}' must be a number")
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"'{key}' must be a finite number")
    return round_money(value)


def flag(row: dict, key: str, default: bool = False) -> bool:
    value = row.get(key, default)
    if isinstance(value, bool):
        return value
    return str(value).strip() in ("1", "True", "true")
