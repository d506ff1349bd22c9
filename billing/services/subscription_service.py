# billing/services/subscription_service.py

"""
SUBSCRIPTION CONFIRMATION

After Stripe redirects back from checkout, the member's row is updated from
the checkout session without waiting for the webhook:

1. Retrieve the checkout session (subscription expanded)
2. Reject sessions that do not belong to the caller (NotFound)
3. No subscription attached yet -> NotCompleted, nothing written
4. Overwrite the user's subscription fields from the snapshot
5. Return the confirmed snapshot

Re-confirming the same session rewrites the same values.
"""

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from django.conf import settings
from django.db import DatabaseError

from core.exceptions import (
    BusinessLogicException,
    NotCompleted,
    NotFound,
    TransientFailure,
    ValidationError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfirmResult:
    subscription_id: str
    subscription_status: str
    price_id: Optional[str] = None
    started_at: Optional[datetime] = None
    current_period_end: Optional[datetime] = None

    def as_dict(self):
        return {
            "subscription_id": self.subscription_id,
            "subscription_status": self.subscription_status,
            "price_id": self.price_id,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "current_period_end": (
                self.current_period_end.isoformat() if self.current_period_end else None
            ),
        }


def confirm_subscription(checkout_session_id, user, provider=None) -> ConfirmResult:
    """
    Confirm a checkout session for `user`.

    `provider` defaults to StripeService; anything with
    retrieve_checkout_session(id) -> CheckoutSnapshot works.
    """
    from users.models import User

    if not checkout_session_id:
        raise ValidationError("sessionId is required")

    if provider is None:
        from billing.services.stripe_service import StripeService
        provider = StripeService()

    snapshot = provider.retrieve_checkout_session(checkout_session_id)

    if snapshot.user_reference is None or str(snapshot.user_reference) != str(user.pk):
        logger.warning(
            f"Checkout session {checkout_session_id} does not belong to user {user.pk} "
            f"(reference {snapshot.user_reference})"
        )
        raise NotFound("Checkout session not found.")

    if not snapshot.subscription_id or not snapshot.subscription_status:
        logger.info(f"Checkout session {checkout_session_id} has no subscription yet")
        raise NotCompleted("No subscription found for this checkout session yet.")

    try:
        User.objects.filter(pk=user.pk).update(
            subscription_id=snapshot.subscription_id,
            subscription_status=snapshot.subscription_status,
            subscription_price_id=snapshot.price_id,
            subscription_start_date=snapshot.started_at,
            subscription_end_date=snapshot.current_period_end,
        )
    except DatabaseError as exc:
        logger.error(f"Failed to store subscription for user {user.pk}: {exc}")
        raise TransientFailure()

    logger.info(
        f"Subscription {snapshot.subscription_id} ({snapshot.subscription_status}) "
        f"confirmed for user {user.pk}"
    )

    return ConfirmResult(
        subscription_id=snapshot.subscription_id,
        subscription_status=snapshot.subscription_status,
        price_id=snapshot.price_id,
        started_at=snapshot.started_at,
        current_period_end=snapshot.current_period_end,
    )


# =========================
# CLIENT RETRY CONTRACT
# =========================

class ConfirmationState(str, enum.Enum):
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    CONTACT_SUPPORT = "contact_support"


@dataclass
class ConfirmationProgress:
    """
    Tracks confirmation attempts against the retry budget.

    NotCompleted and TransientFailure keep the state at PROCESSING while
    attempts remain; NotFound or an exhausted budget ends in CONTACT_SUPPORT.
    """
    max_attempts: int = field(
        default_factory=lambda: settings.BILLING_CONFIG.get("CONFIRM_MAX_ATTEMPTS", 3)
    )
    attempts: int = 0
    state: Optional[ConfirmationState] = None
    result: Optional[ConfirmResult] = None
    message: str = ""

    @property
    def attempts_left(self):
        return max(self.max_attempts - self.attempts, 0)

    @property
    def retryable(self):
        return self.state == ConfirmationState.PROCESSING

    def record_success(self, result: ConfirmResult) -> ConfirmationState:
        self.attempts += 1
        self.result = result
        self.state = ConfirmationState.CONFIRMED
        self.message = "Your subscription is active."
        return self.state

    def record_failure(self, exc: BusinessLogicException) -> ConfirmationState:
        self.attempts += 1
        self.message = str(exc.detail)

        if exc.retryable and self.attempts_left > 0:
            self.state = ConfirmationState.PROCESSING
        else:
            self.state = ConfirmationState.CONTACT_SUPPORT
            if exc.retryable:
                self.message = (
                    "We could not confirm your subscription yet. "
                    "Please contact support if you were charged."
                )
        return self.state

    def attempt(self, checkout_session_id, user, provider=None) -> ConfirmationState:
        if self.state in (ConfirmationState.CONFIRMED, ConfirmationState.CONTACT_SUPPORT):
            return self.state
        try:
            result = confirm_subscription(checkout_session_id, user, provider=provider)
        except (NotFound, NotCompleted, TransientFailure, ValidationError) as exc:
            return self.record_failure(exc)
        return self.record_success(result)

    def as_dict(self):
        return {
            "state": self.state.value if self.state else None,
            "message": self.message,
            "attempts": self.attempts,
            "attempts_left": self.attempts_left,
            "retryable": self.retryable,
            "subscription": self.result.as_dict() if self.result else None,
        }
