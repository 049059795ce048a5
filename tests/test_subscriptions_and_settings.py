from datetime import date

import pytest

from services.errors import NotFoundError
from services.subscription_service import SubscriptionService


def test_upcoming_sorted_active_only(subscriptions):
    subscriptions.add("Gym", 30, start_date="2024-01-01", next_payment_date="2024-03-10")
    music = subscriptions.add("Music", 10, start_date="2024-01-01", next_payment_date="2024-03-01")
    subscriptions.add("Paused", 5, start_date="2024-01-01", next_payment_date="2024-02-01",
                      is_active=False)
    news = subscriptions.add("News", 8, start_date="2024-01-01", next_payment_date="2024-03-05")
    subscriptions.add("Cloud", 3, start_date="2024-01-01", next_payment_date="2024-04-01")

    upcoming = subscriptions.get_upcoming()

    assert [s.name for s in upcoming] == [music.name, news.name, "Gym"]


def test_monthly_cost_normalises_cycles(subscriptions):
    subscriptions.add("Monthly", 10, billing_cycle="monthly")
    subscriptions.add("Yearly", 120, billing_cycle="yearly")
    subscriptions.add("Off", 50, billing_cycle="monthly", is_active=False)

    assert subscriptions.monthly_cost() == pytest.approx(20)


@pytest.mark.parametrize(
    "next_payment, expected",
    [
        ("2024-03-09", "Overdue"),
        ("2024-03-10", "Today"),
        ("2024-03-12", "Soon"),
        ("2024-03-20", "10 days"),
        ("", "Unknown"),
    ],
)
def test_payment_status(subscriptions, next_payment, expected):
    sub = subscriptions.add("Music", 10, start_date="2024-01-01", next_payment_date="2024-03-10")
    sub.next_payment_date = next_payment

    assert SubscriptionService.payment_status(sub, ref=date(2024, 3, 10)) == expected


def test_subscription_update_and_delete(subscriptions, reopen):
    sub = subscriptions.add("Music", 10)

    updated = subscriptions.update(sub.id, amount=12.5, name="Music+")
    assert reopen().get_subscription(sub.id).name == "Music+"
    assert updated.amount == pytest.approx(12.5)

    with pytest.raises(ValueError):
        subscriptions.update(sub.id, billing_cycle="fortnightly")

    subscriptions.delete(sub.id)
    assert subscriptions.get_all() == []
    with pytest.raises(NotFoundError):
        subscriptions.delete(sub.id)


def test_subscription_validation(subscriptions):
    with pytest.raises(ValueError):
        subscriptions.add("", 10)
    for amount in (0, float("nan"), float("inf")):
        with pytest.raises(ValueError):
            subscriptions.add("Music", amount)


# ── Categories ───────────────────────────────────────────────────────────────

def test_categories_default_and_add(categories, reopen):
    assert "Salary" in categories.get_all("income")

    categories.add("expense", "  Pets ")

    assert "Pets" in categories.get_all("expense")
    assert "Pets" in reopen().categories.expense
    with pytest.raises(ValueError):
        categories.add("expense", "pets")


def test_categories_delete_and_bad_type(categories):
    categories.delete("subscription", "Streaming")

    assert "Streaming" not in categories.get_all("subscription")
    with pytest.raises(ValueError):
        categories.delete("subscription", "Streaming")
    with pytest.raises(ValueError):
        categories.get_all("budget")


# ── Settings ─────────────────────────────────────────────────────────────────

def test_settings_currency(settings, reopen):
    assert settings.get().currency == "USD"

    settings.update(currency="ZAR")

    assert reopen().settings.currency == "ZAR"
    with pytest.raises(ValueError):
        settings.update(currency="GBP")
