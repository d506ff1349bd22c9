"""
Checkout confirmation and the client retry contract.
"""

from datetime import datetime, timezone

from django.test import TestCase

from billing.services.stripe_service import CheckoutSnapshot
from billing.services.subscription_service import (
    ConfirmationProgress,
    ConfirmationState,
    confirm_subscription,
)
from core.exceptions import NotCompleted, NotFound, TransientFailure, ValidationError
from users.models import User


STARTED = datetime(2026, 1, 1, tzinfo=timezone.utc)
PERIOD_END = datetime(2026, 2, 1, tzinfo=timezone.utc)


class FakeProvider:
    """Stands in for StripeService.retrieve_checkout_session"""

    def __init__(self, snapshot=None, error=None):
        self.snapshot = snapshot
        self.error = error
        self.calls = []

    def retrieve_checkout_session(self, session_id):
        self.calls.append(session_id)
        if self.error is not None:
            raise self.error
        return self.snapshot


def completed_snapshot(user, **overrides):
    values = {
        "session_id": "cs_123",
        "user_reference": str(user.pk),
        "subscription_id": "sub_456",
        "subscription_status": "active",
        "price_id": "price_monthly",
        "started_at": STARTED,
        "current_period_end": PERIOD_END,
    }
    values.update(overrides)
    return CheckoutSnapshot(**values)


class TestConfirmSubscription(TestCase):

    def setUp(self):
        self.user = User.objects.create_user("member@example.com", "pass12345")

    def test_completed_session_updates_user(self):
        result = confirm_subscription("cs_123", self.user, provider=FakeProvider(completed_snapshot(self.user)))

        self.assertEqual(result.subscription_id, "sub_456")
        self.assertEqual(result.subscription_status, "active")

        self.user.refresh_from_db()
        self.assertEqual(self.user.subscription_id, "sub_456")
        self.assertEqual(self.user.subscription_status, "active")
        self.assertEqual(self.user.subscription_price_id, "price_monthly")
        self.assertEqual(self.user.subscription_start_date, STARTED)
        self.assertEqual(self.user.subscription_end_date, PERIOD_END)

    def test_confirming_twice_is_idempotent(self):
        provider = FakeProvider(completed_snapshot(self.user))

        first = confirm_subscription("cs_123", self.user, provider=provider)
        self.user.refresh_from_db()
        after_first = (self.user.subscription_id, self.user.subscription_status, self.user.subscription_end_date)

        second = confirm_subscription("cs_123", self.user, provider=provider)
        self.user.refresh_from_db()
        after_second = (self.user.subscription_id, self.user.subscription_status, self.user.subscription_end_date)

        self.assertEqual(first, second)
        self.assertEqual(after_first, after_second)

    def test_session_without_subscription_is_not_completed_and_writes_nothing(self):
        provider = FakeProvider(completed_snapshot(self.user, subscription_id=None, subscription_status=None))

        with self.assertRaises(NotCompleted) as ctx:
            confirm_subscription("cs_123", self.user, provider=provider)

        self.assertTrue(ctx.exception.retryable)
        self.user.refresh_from_db()
        self.assertIsNone(self.user.subscription_id)
        self.assertIsNone(self.user.subscription_status)

    def test_session_of_another_user_is_not_found(self):
        other = User.objects.create_user("other@example.com", "pass12345")
        provider = FakeProvider(completed_snapshot(other))

        with self.assertRaises(NotFound):
            confirm_subscription("cs_123", self.user, provider=provider)

        self.user.refresh_from_db()
        other.refresh_from_db()
        self.assertIsNone(self.user.subscription_id)
        self.assertIsNone(other.subscription_id)

    def test_provider_failure_propagates_as_transient(self):
        provider = FakeProvider(error=TransientFailure())

        with self.assertRaises(TransientFailure):
            confirm_subscription("cs_123", self.user, provider=provider)

    def test_missing_session_id(self):
        provider = FakeProvider(completed_snapshot(self.user))

        with self.assertRaises(ValidationError):
            confirm_subscription("", self.user, provider=provider)
        self.assertEqual(provider.calls, [])


class TestConfirmationProgress(TestCase):

    def setUp(self):
        self.user = User.objects.create_user("member@example.com", "pass12345")

    def test_not_completed_retries_until_budget_exhausted(self):
        provider = FakeProvider(error=NotCompleted())
        progress = ConfirmationProgress(max_attempts=3)

        self.assertEqual(progress.attempt("cs_123", self.user, provider), ConfirmationState.PROCESSING)
        self.assertEqual(progress.attempt("cs_123", self.user, provider), ConfirmationState.PROCESSING)
        self.assertEqual(progress.attempt("cs_123", self.user, provider), ConfirmationState.CONTACT_SUPPORT)

        self.assertFalse(progress.retryable)
        self.assertEqual(progress.attempts_left, 0)
        self.assertIn("contact support", progress.message)

        # Terminal state makes no further calls
        progress.attempt("cs_123", self.user, provider)
        self.assertEqual(len(provider.calls), 3)

    def test_not_found_is_terminal_immediately(self):
        progress = ConfirmationProgress(max_attempts=3)
        state = progress.attempt("cs_123", self.user, FakeProvider(error=NotFound("Checkout session not found.")))

        self.assertEqual(state, ConfirmationState.CONTACT_SUPPORT)
        self.assertEqual(progress.attempts, 1)

    def test_transient_then_success(self):
        progress = ConfirmationProgress(max_attempts=3)

        progress.attempt("cs_123", self.user, FakeProvider(error=TransientFailure()))
        self.assertTrue(progress.retryable)

        state = progress.attempt("cs_123", self.user, FakeProvider(completed_snapshot(self.user)))
        self.assertEqual(state, ConfirmationState.CONFIRMED)

        payload = progress.as_dict()
        self.assertEqual(payload["state"], "confirmed")
        self.assertEqual(payload["subscription"]["subscription_id"], "sub_456")
        self.assertEqual(payload["attempts"], 2)

    def test_default_budget_comes_from_settings(self):
        self.assertEqual(ConfirmationProgress().max_attempts, 3)
