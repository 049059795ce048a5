from database.document_dao import DocumentDAO, require_str, opt_str, money, flag
from models.subscription import Subscription
from utils.constants import SUBSCRIPTION_STORAGE_KEY


class SubscriptionDAO(DocumentDAO):
    KEY = SUBSCRIPTION_STORAGE_KEY

    def _row_to_model(self, row: dict) -> Subscription:
        return Subscription(
            id=require_str(row, "id"),
            name=require_str(row, "name"),
            amount=money(row, "amount"),
            category=row.get("category") or "",
            start_date=require_str(row, "startDate"),
            billing_cycle=row.get("billingCycle") or "monthly",
            next_payment_date=require_str(row, "nextPaymentDate"),
            description=opt_str(row, "description"),
            website=opt_str(row, "website"),
            is_active=flag(row, "isActive", True),
        )

    def _model_to_row(self, sub: Subscription) -> dict:
        return {
            "id": sub.id,
            "name": sub.name,
            "amount": sub.amount,
            "category": sub.category,
            "startDate": sub.start_date,
            "billingCycle": sub.billing_cycle,
            "nextPaymentDate": sub.next_payment_date,
            "description": sub.description,
            "website": sub.website,
            "isActive": sub.is_active,
        }
