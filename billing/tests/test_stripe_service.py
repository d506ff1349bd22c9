"""
StripeService against a patched SDK.
"""

from unittest import mock

import stripe
from django.test import SimpleTestCase

from billing.services.stripe_service import (
    StripeService,
    format_amount,
    snapshot_from_session,
)
from core.exceptions import NotFound, TransientFailure, ValidationError


class FakeUser:
    id = 7
    pk = 7
    email = "member@example.com"


class TestSnapshot(SimpleTestCase):

    def test_expanded_subscription(self):
        session = {
            "id": "cs_1",
            "metadata": {"userId": "7"},
            "customer": "cus_1",
            "customer_details": {"email": "member@example.com"},
            "subscription": {
                "id": "sub_1",
                "status": "active",
                "start_date": 1767225600,
                "items": {"data": [{"price": {"id": "price_m"}, "current_period_end": 1769904000}]},
            },
        }

        snapshot = snapshot_from_session(session)

        self.assertEqual(snapshot.user_reference, "7")
        self.assertEqual(snapshot.customer_email, "member@example.com")
        self.assertEqual(snapshot.subscription_id, "sub_1")
        self.assertEqual(snapshot.subscription_status, "active")
        self.assertEqual(snapshot.price_id, "price_m")
        self.assertEqual(snapshot.current_period_end.year, 2026)

    def test_unexpanded_subscription_has_no_status(self):
        snapshot = snapshot_from_session({"id": "cs_1", "client_reference_id": "7", "subscription": "sub_1"})

        self.assertEqual(snapshot.user_reference, "7")
        self.assertEqual(snapshot.subscription_id, "sub_1")
        self.assertIsNone(snapshot.subscription_status)

    def test_format_amount(self):
        self.assertEqual(format_amount(2900, "usd"), "$29.00")
        self.assertEqual(format_amount(24900, "eur"), "249.00 EUR")


class TestStripeService(SimpleTestCase):

    def setUp(self):
        self.service = StripeService()

    @mock.patch("stripe.checkout.Session.create")
    def test_checkout_session_carries_user_reference(self, create):
        create.return_value = {"id": "cs_1", "url": "https://checkout.stripe.com/c/cs_1"}

        result = self.service.create_checkout_session(FakeUser(), "monthly")

        self.assertEqual(result, {"session_id": "cs_1", "session_url": "https://checkout.stripe.com/c/cs_1"})
        kwargs = create.call_args.kwargs
        self.assertEqual(kwargs["mode"], "subscription")
        self.assertEqual(kwargs["line_items"], [{"price": "price_monthly_dummy", "quantity": 1}])
        self.assertEqual(kwargs["metadata"]["userId"], "7")
        self.assertEqual(kwargs["subscription_data"]["metadata"]["userId"], "7")
        self.assertEqual(kwargs["client_reference_id"], "7")

    @mock.patch("stripe.checkout.Session.create")
    def test_unknown_plan_rejected_before_calling_stripe(self, create):
        with self.assertRaises(ValidationError):
            self.service.create_checkout_session(FakeUser(), "weekly")
        create.assert_not_called()

    @mock.patch("stripe.checkout.Session.retrieve")
    def test_sdk_errors_are_translated(self, retrieve):
        retrieve.side_effect = stripe.InvalidRequestError("No such checkout.session", "id")
        with self.assertRaises(NotFound):
            self.service.retrieve_checkout_session("cs_missing")

        retrieve.side_effect = stripe.APIConnectionError("timeout")
        with self.assertRaises(TransientFailure):
            self.service.retrieve_checkout_session("cs_1")

    @mock.patch("stripe.checkout.Session.retrieve")
    def test_retrieve_expands_subscription(self, retrieve):
        retrieve.return_value = {"id": "cs_1", "metadata": {"userId": "7"}}

        snapshot = self.service.retrieve_checkout_session("cs_1")

        retrieve.assert_called_once_with("cs_1", expand=["subscription"])
        self.assertEqual(snapshot.session_id, "cs_1")

    @mock.patch("stripe.Price.create")
    @mock.patch("stripe.Price.list")
    @mock.patch("stripe.Product.list")
    def test_ensure_prices_creates_only_missing(self, product_list, price_list, price_create):
        product_list.return_value = {"data": [
            {"id": "prod_other", "metadata": {}},
            {"id": "prod_1", "metadata": {"type": "fitpro_subscription"}},
        ]}
        price_list.return_value = {"data": [
            {"id": "price_m", "unit_amount": 2900, "currency": "usd", "metadata": {"plan_type": "monthly"}},
        ]}
        price_create.return_value = {
            "id": "price_y", "unit_amount": 24900, "currency": "usd", "metadata": {"plan_type": "yearly"},
        }

        result = self.service.ensure_subscription_prices()

        self.assertEqual(result["product_id"], "prod_1")
        self.assertEqual(result["monthly_price_id"], "price_m")
        self.assertEqual(result["yearly_price_id"], "price_y")
        price_create.assert_called_once()
        self.assertEqual(price_create.call_args.kwargs["recurring"], {"interval": "year"})

        self.assertEqual(self.service.price_labels(), {"monthly": "$29.00", "yearly": "$249.00"})

    def test_construct_event_requires_secret(self):
        service = StripeService(config={"STRIPE_SECRET_KEY": "sk_test_dummy", "STRIPE_WEBHOOK_SECRET": ""})
        with self.assertRaises(RuntimeError):
            service.construct_event(b"{}", "t=1,v1=x")

    @mock.patch("stripe.Subscription.retrieve")
    def test_retrieve_subscription(self, retrieve):
        retrieve.return_value = {"id": "sub_1", "status": "incomplete"}

        subscription = self.service.retrieve_subscription("sub_1")

        retrieve.assert_called_once_with("sub_1")
        self.assertEqual(subscription["status"], "incomplete")

        retrieve.side_effect = stripe.APIConnectionError("timeout")
        with self.assertRaises(TransientFailure):
            self.service.retrieve_subscription("sub_1")

    @mock.patch("stripe.Price.list")
    @mock.patch("stripe.Product.list")
    def test_list_products_with_recurring_prices(self, product_list, price_list):
        product_list.return_value = {"data": [{"id": "prod_1", "name": "Membership", "description": "All access"}]}
        price_list.return_value = {"data": [{
            "id": "price_m",
            "unit_amount": 2900,
            "currency": "usd",
            "recurring": {"interval": "month", "interval_count": 1},
            "active": True,
        }]}

        products = self.service.list_products()

        price_list.assert_called_once_with(product="prod_1", type="recurring", limit=10)
        self.assertEqual(products[0]["name"], "Membership")
        self.assertEqual(products[0]["prices"], [{
            "id": "price_m", "amount": 29.0, "currency": "usd",
            "interval": "month", "intervalCount": 1, "active": True,
        }])

    @mock.patch("stripe.Price.create")
    @mock.patch("stripe.Product.create")
    def test_create_product_converts_amount_to_cents(self, product_create, price_create):
        product_create.return_value = {"id": "prod_2", "name": "Coaching", "description": ""}
        price_create.return_value = {
            "id": "price_2", "unit_amount": 4999, "currency": "usd", "recurring": {"interval": "year"},
        }

        result = self.service.create_product("Coaching", "49.99", interval="year")

        kwargs = price_create.call_args.kwargs
        self.assertEqual(kwargs["unit_amount"], 4999)
        self.assertEqual(kwargs["recurring"], {"interval": "year"})
        self.assertEqual(kwargs["product"], "prod_2")
        self.assertEqual(result["product"]["id"], "prod_2")
        self.assertEqual(result["price"]["amount"], 49.99)
        self.assertEqual(result["price"]["intervalCount"], 1)

    @mock.patch("stripe.Product.create")
    def test_create_product_validates_before_calling_stripe(self, product_create):
        for name, amount, interval in (("", 10, "month"), ("Plan", 0, "month"), ("Plan", "abc", "month"),
                                       ("Plan", 10, "fortnight")):
            with self.assertRaises(ValidationError):
                self.service.create_product(name, amount, interval=interval)
        product_create.assert_not_called()


class TestStripeConfiguration(SimpleTestCase):

    def test_sdk_client_is_configured_once(self):
        StripeService()
        client = stripe.default_http_client

        StripeService()
        StripeService()

        self.assertIs(stripe.default_http_client, client)
        self.assertEqual(stripe.api_key, "sk_test_dummy")

    def test_changed_key_reconfigures_sdk(self):
        from django.conf import settings

        StripeService()
        client = stripe.default_http_client

        StripeService(config={**settings.BILLING_CONFIG, "STRIPE_SECRET_KEY": "sk_test_other"})
        self.assertEqual(stripe.api_key, "sk_test_other")
        self.assertIsNot(stripe.default_http_client, client)

        StripeService()
        self.assertEqual(stripe.api_key, "sk_test_dummy")
