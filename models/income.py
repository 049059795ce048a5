from dataclasses import dataclass
from typing import Optional


@dataclass
class Income:
    id: str
    amount: float
    date: str               # ISO-8601 date or timestamp
    description: str = ""
    category: str = ""
    source: Optional[str] = None
    notes: Optional[str] = None
    is_recurring: bool = False
    recurrence_type: Optional[str] = None
    recurrence_end: Optional[str] = None
    allocated_amount: float = 0.0

    @property
    def available(self) -> float:
        return self.amount - self.allocated_amount

    @property
    def is_fully_allocated(self) -> bool:
        return self.allocated_amount >= self.amount
