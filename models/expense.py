from dataclasses import dataclass
from typing import Optional


@dataclass
class Expense:
    id: str
    amount: float
    date: str               # ISO-8601 date or timestamp
    description: str = ""
    category: str = ""
    vendor: Optional[str] = None
    notes: Optional[str] = None
    budget_id: Optional[str] = None
    is_recurring: bool = False
    recurrence_type: Optional[str] = None
    recurrence_end: Optional[str] = None
