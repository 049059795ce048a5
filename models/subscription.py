from dataclasses import dataclass
from typing import Optional


@dataclass
class Subscription:
    id: str
    name: str
    amount: float
    category: str
    start_date: str
    billing_cycle: str          # 'one-time' | 'daily' | 'weekly' | 'monthly' | 'yearly'
    next_payment_date: str
    description: Optional[str] = None
    website: Optional[str] = None
    is_active: bool = True
