"""
Verified Stripe events applied to users, enrollments and payments.
"""

import hashlib
import hmac
import json
import time
from decimal import Decimal
from unittest import mock

from django.test import TestCase
from rest_framework.test import APIClient

from billing.models import Payment, StripeEvent
from billing.services.webhook_service import WebhookService
from core.exceptions import TransientFailure
from programs.models import Program, Enrollment
from programs.services.access import AccessDecision, load_program_access, resolve_access
from users.models import User
from users.services.session import SessionSnapshot, load_subscription_snapshot


def sign(payload: str, secret: str = "whsec_dummy") -> str:
    timestamp = int(time.time())
    signed = f"{timestamp}.{payload}".encode("utf-8")
    signature = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def live_subscription(subscription_id, status, **extra):
    return {
        "id": subscription_id,
        "status": status,
        "start_date": 1767225600,
        "items": {"data": [{"price": {"id": "price_m"}, "current_period_end": 1769904000}]},
        **extra,
    }


class WebhookTestCase(TestCase):

    def setUp(self):
        self.trainer = User.objects.create_user("trainer@example.com", "pass12345", role=User.Role.TRAINER)
        self.member = User.objects.create_user("member@example.com", "pass12345")
        self.program = Program.objects.create(trainer=self.trainer, title="Strength", published=True)

    def member_access(self):
        self.member.refresh_from_db()
        return resolve_access(
            SessionSnapshot.from_user(self.member),
            load_program_access(self.program, self.member.pk),
            load_subscription_snapshot(self.member.pk),
        )

    def purchase_event(self, event_id="evt_purchase"):
        return {
            "id": event_id,
            "type": "checkout.session.completed",
            "data": {"object": {
                "id": "cs_purchase",
                "mode": "payment",
                "metadata": {"userId": str(self.member.pk), "programId": str(self.program.pk)},
                "amount_total": 4900,
                "currency": "usd",
                "payment_intent": "pi_1",
            }},
        }


class TestWebhookService(WebhookTestCase):

    def test_program_purchase_creates_enrollment_and_payment(self):
        result = WebhookService().process_event(self.purchase_event())

        self.assertTrue(result["processed"])
        self.assertTrue(Enrollment.objects.filter(user=self.member, program=self.program, active=True).exists())

        payment = Payment.objects.get()
        self.assertEqual(payment.stripe_payment_id, "pi_1")
        self.assertEqual(payment.amount, Decimal("49"))
        self.assertEqual(payment.program, self.program)

    def test_redelivered_event_is_applied_once(self):
        service = WebhookService()
        service.process_event(self.purchase_event())
        again = service.process_event(self.purchase_event())

        self.assertFalse(again["processed"])
        self.assertTrue(again["idempotent"])
        self.assertEqual(Payment.objects.count(), 1)
        self.assertEqual(Enrollment.objects.count(), 1)
        self.assertEqual(StripeEvent.objects.count(), 1)

    def test_subscription_checkout_matched_by_email(self):
        event = {
            "id": "evt_sub",
            "type": "checkout.session.completed",
            "data": {"object": {
                "id": "cs_sub",
                "mode": "subscription",
                "customer_email": "MEMBER@example.com",
                "subscription": "sub_9",
            }},
        }

        provider = mock.Mock()
        provider.retrieve_subscription.return_value = live_subscription("sub_9", "active")

        result = WebhookService(provider=provider).process_event(event)

        provider.retrieve_subscription.assert_called_once_with("sub_9")
        self.assertTrue(result["matched_user"])
        self.member.refresh_from_db()
        self.assertEqual(self.member.subscription_id, "sub_9")
        self.assertEqual(self.member.subscription_status, "active")
        self.assertEqual(self.member.subscription_price_id, "price_m")
        self.assertIsNotNone(self.member.subscription_end_date)

    def subscription_checkout_event(self, subscription_id):
        return {
            "id": f"evt_{subscription_id}",
            "type": "checkout.session.completed",
            "data": {"object": {
                "id": "cs_sub",
                "mode": "subscription",
                "metadata": {"userId": str(self.member.pk)},
                "subscription": subscription_id,
            }},
        }

    def test_incomplete_subscription_checkout_does_not_grant_access(self):
        provider = mock.Mock()
        provider.retrieve_subscription.return_value = live_subscription("sub_incomplete", "incomplete")

        result = WebhookService(provider=provider).process_event(
            self.subscription_checkout_event("sub_incomplete")
        )

        self.assertEqual(result["status"], "incomplete")
        self.member.refresh_from_db()
        self.assertEqual(self.member.subscription_id, "sub_incomplete")
        self.assertEqual(self.member.subscription_status, "incomplete")

        self.assertEqual(self.member_access(), AccessDecision.LOCKED)

    def test_subscription_lookup_outage_leaves_event_for_redelivery(self):
        provider = mock.Mock()
        provider.retrieve_subscription.side_effect = TransientFailure()

        with self.assertRaises(TransientFailure):
            WebhookService(provider=provider).process_event(self.subscription_checkout_event("sub_9"))

        self.assertEqual(StripeEvent.objects.count(), 0)
        self.member.refresh_from_db()
        self.assertIsNone(self.member.subscription_id)

    def test_late_delete_of_old_subscription_keeps_current_one(self):
        User.objects.filter(pk=self.member.pk).update(subscription_id="sub_new", subscription_status="active")
        event = {
            "id": "evt_old_del",
            "type": "customer.subscription.deleted",
            "data": {"object": live_subscription(
                "sub_old", "canceled", metadata={"userId": str(self.member.pk)}, ended_at=1767225600,
            )},
        }

        result = WebhookService().process_event(event)

        self.assertTrue(result["ignored"])
        self.member.refresh_from_db()
        self.assertEqual(self.member.subscription_id, "sub_new")
        self.assertEqual(self.member.subscription_status, "active")

        self.assertEqual(self.member_access(), AccessDecision.SUBSCRIBED)

    def test_late_update_of_old_subscription_keeps_current_one(self):
        User.objects.filter(pk=self.member.pk).update(subscription_id="sub_new", subscription_status="active")
        event = {
            "id": "evt_old_upd",
            "type": "customer.subscription.updated",
            "data": {"object": live_subscription("sub_old", "past_due", metadata={"userId": str(self.member.pk)})},
        }

        WebhookService().process_event(event)

        self.member.refresh_from_db()
        self.assertEqual(self.member.subscription_id, "sub_new")
        self.assertEqual(self.member.subscription_status, "active")

    def test_new_active_subscription_replaces_lapsed_one(self):
        User.objects.filter(pk=self.member.pk).update(subscription_id="sub_old", subscription_status="canceled")
        event = {
            "id": "evt_new",
            "type": "customer.subscription.created",
            "data": {"object": live_subscription("sub_new", "active", metadata={"userId": str(self.member.pk)})},
        }

        WebhookService().process_event(event)

        self.member.refresh_from_db()
        self.assertEqual(self.member.subscription_id, "sub_new")
        self.assertEqual(self.member.subscription_status, "active")

    def test_subscription_deleted_cancels(self):
        User.objects.filter(pk=self.member.pk).update(subscription_id="sub_1", subscription_status="active")
        event = {
            "id": "evt_del",
            "type": "customer.subscription.deleted",
            "data": {"object": {
                "id": "sub_1",
                "status": "canceled",
                "metadata": {},
                "ended_at": 1767225600,
                "items": {"data": [{"price": {"id": "price_m"}, "current_period_end": 1767225600}]},
            }},
        }

        WebhookService().process_event(event)

        self.member.refresh_from_db()
        self.assertEqual(self.member.subscription_status, "canceled")
        self.assertEqual(self.member.subscription_price_id, "price_m")
        self.assertIsNotNone(self.member.subscription_end_date)

    def test_subscription_user_found_through_customer_email(self):
        provider = mock.Mock()
        provider.retrieve_customer_email.return_value = "member@example.com"
        event = {
            "id": "evt_upd",
            "type": "customer.subscription.updated",
            "data": {"object": {"id": "sub_new", "status": "active", "customer": "cus_1"}},
        }

        result = WebhookService(provider=provider).process_event(event)

        provider.retrieve_customer_email.assert_called_once_with("cus_1")
        self.assertEqual(result["user_id"], self.member.pk)
        self.member.refresh_from_db()
        self.assertEqual(self.member.subscription_id, "sub_new")

    def test_failed_invoice_marks_past_due(self):
        User.objects.filter(pk=self.member.pk).update(subscription_id="sub_1", subscription_status="active")
        event = {
            "id": "evt_inv",
            "type": "invoice.payment_failed",
            "data": {"object": {"id": "in_1", "subscription": "sub_1"}},
        }

        WebhookService().process_event(event)

        self.member.refresh_from_db()
        self.assertEqual(self.member.subscription_status, "past_due")

    def test_unmatched_and_unknown_events(self):
        unmatched = WebhookService().process_event({
            "id": "evt_x",
            "type": "invoice.payment_failed",
            "data": {"object": {"id": "in_2", "subscription": "sub_unknown"}},
        })
        unknown = WebhookService().process_event({"id": "evt_y", "type": "charge.refunded", "data": {"object": {}}})

        self.assertFalse(unmatched["matched_user"])
        self.assertFalse(unknown["handled"])

    def test_event_without_id_is_ignored(self):
        result = WebhookService().process_event({"type": "checkout.session.completed"})
        self.assertFalse(result["processed"])
        self.assertEqual(StripeEvent.objects.count(), 0)


class TestWebhookEndpoint(WebhookTestCase):

    def setUp(self):
        super().setUp()
        self.client = APIClient()

    def test_signed_payload_is_processed(self):
        payload = json.dumps(self.purchase_event())

        response = self.client.post(
            "/api/webhooks/stripe/",
            data=payload,
            content_type="application/json",
            HTTP_STRIPE_SIGNATURE=sign(payload),
        )

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data["received"])
        self.assertEqual(Payment.objects.count(), 1)

    def test_bad_signature_rejected(self):
        payload = json.dumps(self.purchase_event())

        response = self.client.post(
            "/api/webhooks/stripe/",
            data=payload,
            content_type="application/json",
            HTTP_STRIPE_SIGNATURE=sign(payload, secret="whsec_wrong"),
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(Payment.objects.count(), 0)

    def test_missing_secret_is_service_unavailable(self):
        from django.conf import settings

        config = {**settings.BILLING_CONFIG, "STRIPE_WEBHOOK_SECRET": ""}
        with self.settings(BILLING_CONFIG=config):
            response = self.client.post(
                "/api/webhooks/stripe/",
                data="{}",
                content_type="application/json",
                HTTP_STRIPE_SIGNATURE="t=1,v1=x",
            )

        self.assertEqual(response.status_code, 503)
