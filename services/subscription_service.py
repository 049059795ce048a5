import logging
import uuid
from dataclasses import replace
from datetime import date

from database.finance_store import FinanceStore
from models.subscription import Subscription
from utils.constants import RECURRENCE_TYPES, UPCOMING_SUBSCRIPTION_LIMIT, SUBSCRIPTION_SOON_DAYS
from utils.currency import require_positive_money, round_money
from utils.date_helpers import parse_date, today_str, chronological_key, days_until

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = {
    "name", "amount", "category", "start_date", "billing_cycle",
    "next_payment_date", "description", "website", "is_active",
}


class SubscriptionService:
    def __init__(self, store: FinanceStore):
        self._store = store

    def get_all(self) -> list[Subscription]:
        return list(self._store.subscriptions)

    def get_upcoming(self, limit: int = UPCOMING_SUBSCRIPTION_LIMIT) -> list[Subscription]:
        """Active subscriptions, soonest payment first."""
        active = [s for s in self._store.subscriptions if s.is_active]
        active.sort(key=lambda s: chronological_key(s.next_payment_date))
        return active[:limit]

    def monthly_cost(self) -> float:
        """Active recurring subscriptions normalised to a monthly amount."""
        factors = {"daily": 365 / 12, "weekly": 52 / 12, "monthly": 1.0, "yearly": 1 / 12}
        return round_money(sum(
            s.amount * factors.get(s.billing_cycle, 0.0)
            for s in self._store.subscriptions
            if s.is_active
        ))

    def add(
        self,
        name: str,
        amount: float,
        category: str = "",
        start_date: str | None = None,
        billing_cycle: str = "monthly",
        next_payment_date: str | None = None,
        description: str | None = None,
        website: str | None = None,
        is_active: bool = True,
    ) -> Subscription:
        start = start_date or today_str()
        sub = Subscription(
            id=str(uuid.uuid4()),
            name=name.strip(),
            amount=round_money(amount),
            category=category,
            start_date=start,
            billing_cycle=billing_cycle,
            next_payment_date=next_payment_date or start,
            description=description,
            website=website,
            is_active=is_active,
        )
        validate_subscription(sub)
        self._store.subscriptions.append(sub)
        self._store.save_subscriptions()
        logger.info("Added subscription %s '%s'", sub.id, sub.name)
        return sub

    def update(self, subscription_id: str, **changes) -> Subscription:
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update subscription field(s): {', '.join(sorted(unknown))}")
        current = self._store.get_subscription(subscription_id)
        if "amount" in changes:
            changes["amount"] = round_money(changes["amount"])
        updated = replace(current, **changes)
        validate_subscription(updated)
        idx = self._store.subscriptions.index(current)
        self._store.subscriptions[idx] = updated
        self._store.save_subscriptions()
        return updated

    def delete(self, subscription_id: str):
        sub = self._store.get_subscription(subscription_id)
        self._store.subscriptions.remove(sub)
        self._store.save_subscriptions()
        logger.info("Deleted subscription %s", subscription_id)

    @staticmethod
    def payment_status(sub: Subscription, ref: date | None = None) -> str:
        """'Overdue', 'Today', 'Soon' (within a few days) or 'N days'."""
        days_left = days_until(sub.next_payment_date, ref)
        if days_left is None:
            return "Unknown"
        if days_left < 0:
            return "Overdue"
        if days_left == 0:
            return "Today"
        if days_left <= SUBSCRIPTION_SOON_DAYS:
            return "Soon"
        return f"{days_left} days"


def validate_subscription(sub: Subscription):
    if not sub.name:
        raise ValueError("Subscription name cannot be empty.")
    require_positive_money(sub.amount)
    if sub.billing_cycle not in RECURRENCE_TYPES:
        raise ValueError(f"Invalid billing cycle: {sub.billing_cycle}")
    if not parse_date(sub.start_date):
        raise ValueError("Invalid start date. Use YYYY-MM-DD.")
    if not parse_date(sub.next_payment_date):
        raise ValueError("Invalid next payment date. Use YYYY-MM-DD.")
