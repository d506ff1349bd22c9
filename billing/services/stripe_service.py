# billing/services/stripe_service.py

"""
STRIPE SERVICE

Thin wrapper over the Stripe SDK:
1. Checkout session creation (membership subscription)
2. Checkout session and subscription retrieval
3. Idempotent membership product/price initialisation
4. Admin product catalogue (list, create with a recurring price)
5. Webhook signature verification

The SDK's module-level settings are applied once per distinct config by
configure_stripe, not on every request.

Every call is bounded by BILLING_CONFIG["TIMEOUT_SECONDS"]. SDK errors are
translated into core.exceptions.NotFound / TransientFailure.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

import stripe
from django.conf import settings

from core.exceptions import NotFound, TransientFailure, ValidationError

logger = logging.getLogger(__name__)

PLANS = ("monthly", "yearly")
INTERVALS = ("day", "week", "month", "year")

# (secret key, timeout, retries) currently applied to the SDK
_applied_config = None


# =========================
# SNAPSHOT
# =========================

@dataclass(frozen=True)
class CheckoutSnapshot:
    """What we need from a Stripe checkout session"""
    session_id: str
    user_reference: Optional[str] = None
    customer_id: Optional[str] = None
    customer_email: Optional[str] = None
    subscription_id: Optional[str] = None
    subscription_status: Optional[str] = None
    price_id: Optional[str] = None
    started_at: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    program_id: Optional[str] = None
    amount_total: Optional[int] = None
    currency: Optional[str] = None


def field(obj: Any, name: str, default=None):
    """Read a field from a StripeObject or a plain dict."""
    if obj is None:
        return default
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def timestamp_to_datetime(ts) -> Optional[datetime]:
    if ts is None:
        return None
    try:
        return datetime.fromtimestamp(int(ts), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError):
        return None


def subscription_price_id(subscription) -> Optional[str]:
    items = field(subscription, "items")
    data = field(items, "data") or []
    if not data:
        return None
    price = field(data[0], "price")
    return field(price, "id")


def subscription_period_end(subscription) -> Optional[datetime]:
    """
    Newer API versions moved `current_period_end` onto the subscription items.
    """
    end = field(subscription, "current_period_end")
    if end is None:
        items = field(subscription, "items")
        ends = [
            field(item, "current_period_end")
            for item in (field(items, "data") or [])
            if field(item, "current_period_end") is not None
        ]
        end = max(ends) if ends else None
    return timestamp_to_datetime(end)


def snapshot_from_session(session) -> CheckoutSnapshot:
    """Reduce a checkout session (subscription expanded or not) to a snapshot"""
    metadata = field(session, "metadata") or {}
    subscription = field(session, "subscription")

    subscription_id = None
    subscription_status = None
    price_id = None
    started_at = None
    period_end = None

    if isinstance(subscription, str):
        subscription_id = subscription
    elif subscription is not None:
        subscription_id = field(subscription, "id")
        subscription_status = field(subscription, "status")
        price_id = subscription_price_id(subscription)
        started_at = timestamp_to_datetime(
            field(subscription, "start_date") or field(subscription, "created")
        )
        period_end = subscription_period_end(subscription)

    customer_details = field(session, "customer_details")

    return CheckoutSnapshot(
        session_id=field(session, "id"),
        user_reference=field(metadata, "userId") or field(session, "client_reference_id"),
        customer_id=field(session, "customer"),
        customer_email=field(session, "customer_email") or field(customer_details, "email"),
        subscription_id=subscription_id,
        subscription_status=subscription_status,
        price_id=price_id,
        started_at=started_at,
        current_period_end=period_end,
        program_id=field(metadata, "programId"),
        amount_total=field(session, "amount_total"),
        currency=field(session, "currency"),
    )


def format_amount(unit_amount: int, currency: str) -> str:
    amount = unit_amount / 100
    if currency.lower() == "usd":
        return f"${amount:,.2f}"
    return f"{amount:,.2f} {currency.upper()}"


def price_summary(price) -> dict:
    recurring = field(price, "recurring")
    return {
        "id": field(price, "id"),
        "amount": (field(price, "unit_amount") or 0) / 100,
        "currency": field(price, "currency"),
        "interval": field(recurring, "interval"),
        "intervalCount": field(recurring, "interval_count") or 1,
        "active": field(price, "active"),
    }


def configure_stripe(config: dict) -> None:
    """Apply key, retries and HTTP client to the SDK; no-op when unchanged."""
    global _applied_config

    wanted = (
        config["STRIPE_SECRET_KEY"],
        config.get("TIMEOUT_SECONDS", 5),
        config.get("MAX_NETWORK_RETRIES", 0),
    )
    if wanted == _applied_config:
        return

    secret_key, timeout, retries = wanted
    stripe.api_key = secret_key
    stripe.max_network_retries = retries
    stripe.default_http_client = stripe.RequestsClient(timeout=timeout)
    _applied_config = wanted
    logger.info(f"Stripe client configured (timeout {timeout}s, retries {retries})")


# =========================
# SERVICE
# =========================

class StripeService:
    """Service for all Stripe calls"""

    def __init__(self, config: Optional[dict] = None):
        self.config = config or settings.BILLING_CONFIG
        configure_stripe(self.config)

    def _call(self, description: str, func, /, *args, **kwargs):
        """Run one SDK call and translate its errors"""
        try:
            return func(*args, **kwargs)
        except stripe.InvalidRequestError as exc:
            logger.warning(f"Stripe {description}: invalid request ({exc.code}): {exc.user_message}")
            raise NotFound(f"Billing record not found ({description}).")
        except stripe.APIConnectionError as exc:
            logger.error(f"Stripe {description}: connection error: {exc}")
            raise TransientFailure()
        except stripe.StripeError as exc:
            logger.error(f"Stripe {description}: provider error: {exc}")
            raise TransientFailure()

    # ---------- checkout ----------

    def create_checkout_session(self, user, plan: str = "monthly") -> dict:
        """Create a hosted checkout session for the membership"""
        if plan not in PLANS:
            raise ValidationError(f"Unknown plan '{plan}'. Use one of: {', '.join(PLANS)}")

        if not user.email:
            raise ValidationError("User email required for checkout")

        price_id = self.get_price_id(plan)
        user_reference = str(user.id)

        session = self._call(
            "create checkout session",
            stripe.checkout.Session.create,
            mode="subscription",
            payment_method_types=["card"],
            line_items=[{"price": price_id, "quantity": 1}],
            subscription_data={"metadata": {"userId": user_reference}},
            metadata={"userId": user_reference, "plan": plan},
            client_reference_id=user_reference,
            customer_email=user.email,
            success_url=self.config["CHECKOUT_SUCCESS_URL"],
            cancel_url=self.config["CHECKOUT_CANCEL_URL"],
        )

        logger.info(f"Checkout session {field(session, 'id')} created for user {user.id} ({plan})")

        return {
            "session_id": field(session, "id"),
            "session_url": field(session, "url"),
        }

    def retrieve_checkout_session(self, session_id: str) -> CheckoutSnapshot:
        session = self._call(
            "retrieve checkout session",
            stripe.checkout.Session.retrieve,
            session_id,
            expand=["subscription"],
        )
        return snapshot_from_session(session)

    def retrieve_customer_email(self, customer_id: str) -> Optional[str]:
        customer = self._call("retrieve customer", stripe.Customer.retrieve, customer_id)
        return field(customer, "email")

    def retrieve_subscription(self, subscription_id: str):
        """Live subscription object; webhooks often carry only its id"""
        return self._call("retrieve subscription", stripe.Subscription.retrieve, subscription_id)

    # ---------- prices ----------

    def ensure_subscription_prices(self) -> dict:
        """
        Find the membership product and its monthly/yearly prices by metadata,
        creating whatever is missing. Safe to call repeatedly.
        """
        marker = self.config["PRODUCT_MARKER"]

        products = self._call("list products", stripe.Product.list, limit=100, active=True)
        product = next(
            (p for p in field(products, "data") or [] if (field(p, "metadata") or {}).get("type") == marker),
            None,
        )

        prices = {}
        if product is not None:
            listed = self._call(
                "list prices",
                stripe.Price.list,
                product=field(product, "id"),
                type="recurring",
                active=True,
            )
            for price in field(listed, "data") or []:
                plan = (field(price, "metadata") or {}).get("plan_type")
                if plan in PLANS and plan not in prices:
                    prices[plan] = price
        else:
            product = self._call(
                "create product",
                stripe.Product.create,
                name=self.config["PRODUCT_NAME"],
                description="Premium access to all fitness programs, courses, and video content",
                metadata={"type": marker},
            )
            logger.info(f"Created membership product {field(product, 'id')}")

        intervals = {"monthly": "month", "yearly": "year"}
        amounts = {
            "monthly": self.config["MONTHLY_AMOUNT_CENTS"],
            "yearly": self.config["YEARLY_AMOUNT_CENTS"],
        }

        for plan in PLANS:
            if plan in prices:
                continue
            prices[plan] = self._call(
                "create price",
                stripe.Price.create,
                product=field(product, "id"),
                unit_amount=amounts[plan],
                currency=self.config["CURRENCY"],
                recurring={"interval": intervals[plan]},
                metadata={"plan_type": plan},
            )
            logger.info(f"Created {plan} price {field(prices[plan], 'id')}")

        return {
            "product_id": field(product, "id"),
            "monthly_price_id": field(prices["monthly"], "id"),
            "yearly_price_id": field(prices["yearly"], "id"),
            "prices": prices,
        }

    def get_price_id(self, plan: str) -> str:
        configured = self.config.get(f"{plan.upper()}_PRICE_ID")
        if configured:
            return configured
        return self.ensure_subscription_prices()[f"{plan}_price_id"]

    def price_labels(self) -> dict:
        """Display labels for both plans, e.g. {"monthly": "$29.00", ...}"""
        prices = self.ensure_subscription_prices()["prices"]
        return {
            plan: format_amount(field(price, "unit_amount"), field(price, "currency") or "usd")
            for plan, price in prices.items()
        }

    # ---------- admin catalogue ----------

    def list_products(self) -> list:
        """Active products with their recurring prices, amounts in major units"""
        products = self._call("list products", stripe.Product.list, limit=100, active=True)

        catalogue = []
        for product in field(products, "data") or []:
            prices = self._call(
                "list prices",
                stripe.Price.list,
                product=field(product, "id"),
                type="recurring",
                limit=10,
            )
            catalogue.append({
                "id": field(product, "id"),
                "name": field(product, "name"),
                "description": field(product, "description"),
                "prices": [price_summary(price) for price in field(prices, "data") or []],
            })
        return catalogue

    def create_product(self, name: str, amount, description: str = "", currency: str = "usd",
                       interval: str = "month") -> dict:
        """Create a product and one recurring price; `amount` is in major units (29.99)"""
        try:
            unit_amount = int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
        except (InvalidOperation, TypeError, ValueError):
            unit_amount = 0

        if not name or unit_amount <= 0:
            raise ValidationError("Name and a positive amount are required")
        if interval not in INTERVALS:
            raise ValidationError(f"Unknown interval '{interval}'. Use one of: {', '.join(INTERVALS)}")

        product = self._call(
            "create product",
            stripe.Product.create,
            name=name,
            description=description or "",
        )
        price = self._call(
            "create price",
            stripe.Price.create,
            product=field(product, "id"),
            unit_amount=unit_amount,
            currency=currency,
            recurring={"interval": interval},
        )
        logger.info(f"Created product {field(product, 'id')} with price {field(price, 'id')}")

        return {
            "product": {
                "id": field(product, "id"),
                "name": field(product, "name"),
                "description": field(product, "description"),
            },
            "price": price_summary(price),
        }

    # ---------- webhooks ----------

    def construct_event(self, payload: bytes, signature: str):
        """Verify the signature; raises stripe.SignatureVerificationError or ValueError"""
        secret = self.config.get("STRIPE_WEBHOOK_SECRET")
        if not secret:
            raise RuntimeError("Stripe webhook secret not configured")
        return stripe.Webhook.construct_event(payload=payload, sig_header=signature, secret=secret)
