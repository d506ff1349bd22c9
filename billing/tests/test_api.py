"""
Checkout, confirmation, success page, pricing and trainer revenue endpoints.
Stripe is replaced through billing.api.views.get_stripe_service.
"""

from decimal import Decimal
from unittest import mock

from django.test import TestCase
from rest_framework.test import APIClient

from billing.models import Payment
from billing.tests.test_subscription import completed_snapshot
from core.exceptions import NotCompleted, TransientFailure
from programs.models import Program, Enrollment
from users.models import User


class BillingAPITestCase(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.member = User.objects.create_user("member@example.com", "pass12345")
        self.client.force_authenticate(self.member)

        patcher = mock.patch("billing.api.views.get_stripe_service")
        self.get_service = patcher.start()
        self.addCleanup(patcher.stop)
        self.stripe = self.get_service.return_value


class TestCheckout(BillingAPITestCase):

    def test_creates_session(self):
        self.stripe.create_checkout_session.return_value = {
            "session_id": "cs_1",
            "session_url": "https://checkout.stripe.com/c/cs_1",
        }

        response = self.client.post("/api/checkout/", {"plan": "yearly"}, format="json")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["sessionId"], "cs_1")
        self.stripe.create_checkout_session.assert_called_once_with(self.member, "yearly")

    def test_requires_authentication(self):
        self.client.force_authenticate(None)
        response = self.client.post("/api/checkout/", {}, format="json")
        self.assertIn(response.status_code, (401, 403))


class TestConfirm(BillingAPITestCase):

    def test_confirm_updates_subscription(self):
        self.stripe.retrieve_checkout_session.return_value = completed_snapshot(self.member)

        response = self.client.post("/api/checkout/confirm/", {"sessionId": "cs_123"}, format="json")

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data["success"])
        self.assertEqual(response.data["subscription"]["subscription_id"], "sub_456")
        self.member.refresh_from_db()
        self.assertEqual(self.member.subscription_status, "active")

    def test_not_completed_is_retryable_conflict(self):
        self.stripe.retrieve_checkout_session.side_effect = NotCompleted()

        response = self.client.post("/api/checkout/confirm/", {"sessionId": "cs_123"}, format="json")

        self.assertEqual(response.status_code, 409)
        self.assertTrue(response.data["retryable"])
        self.assertEqual(response.data["error_code"], "not_completed")

    def test_foreign_session_is_404(self):
        other = User.objects.create_user("other@example.com", "pass12345")
        self.stripe.retrieve_checkout_session.return_value = completed_snapshot(other)

        response = self.client.post("/api/checkout/confirm/", {"sessionId": "cs_123"}, format="json")

        self.assertEqual(response.status_code, 404)
        self.assertFalse(response.data["retryable"])

    def test_missing_session_id_is_400(self):
        response = self.client.post("/api/checkout/confirm/", {}, format="json")
        self.assertEqual(response.status_code, 400)


class TestSuccessPage(BillingAPITestCase):

    def test_processing_offers_next_attempt(self):
        self.stripe.retrieve_checkout_session.side_effect = NotCompleted()

        response = self.client.get("/api/checkout/success/", {"session_id": "cs_123"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["state"], "processing")
        self.assertEqual(response.data["next_attempt"], 2)

    def test_last_attempt_ends_in_contact_support(self):
        self.stripe.retrieve_checkout_session.side_effect = NotCompleted()

        response = self.client.get("/api/checkout/success/", {"session_id": "cs_123", "attempt": 3})

        self.assertEqual(response.data["state"], "contact_support")
        self.assertNotIn("next_attempt", response.data)

    def test_confirmed(self):
        self.stripe.retrieve_checkout_session.return_value = completed_snapshot(self.member)

        response = self.client.get("/api/checkout/success/", {"session_id": "cs_123"})

        self.assertEqual(response.data["state"], "confirmed")
        self.assertEqual(response.data["subscription"]["subscription_status"], "active")


class TestPrices(BillingAPITestCase):

    def test_labels(self):
        self.stripe.price_labels.return_value = {"monthly": "$29.00", "yearly": "$249.00"}
        self.client.force_authenticate(None)

        response = self.client.get("/api/subscription/price/")

        self.assertEqual(response.data, {"monthly": "$29.00", "yearly": "$249.00", "price": "$29.00"})

    def test_provider_down_returns_nulls(self):
        self.stripe.price_labels.side_effect = TransientFailure()

        response = self.client.get("/api/subscription/price/")

        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.data["monthly"])


class TestTrainerRevenue(BillingAPITestCase):

    def test_revenue_counts_succeeded_payments_only(self):
        trainer = User.objects.create_user("trainer@example.com", "pass12345", role=User.Role.TRAINER)
        program = Program.objects.create(trainer=trainer, title="Strength", published=True)
        Enrollment.objects.create(user=self.member, program=program)
        Payment.objects.create(user=self.member, program=program, amount=Decimal("49.00"), stripe_payment_id="pi_1")
        Payment.objects.create(
            user=self.member,
            program=program,
            amount=Decimal("49.00"),
            status=Payment.Status.FAILED,
            stripe_payment_id="pi_2",
        )

        self.client.force_authenticate(trainer)
        response = self.client.get("/api/trainer/revenue/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(Decimal(response.data["total_revenue"]), Decimal("49"))
        self.assertEqual(response.data["payment_count"], 1)
        self.assertEqual(response.data["active_enrollments"], 1)
        self.assertEqual(Decimal(response.data["programs"][0]["revenue"]), Decimal("49"))

    def test_members_cannot_see_revenue(self):
        response = self.client.get("/api/trainer/revenue/")
        self.assertEqual(response.status_code, 403)
