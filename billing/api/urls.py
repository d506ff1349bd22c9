# billing/api/urls.py
from django.urls import path

from .views import (
    CheckoutView,
    ConfirmSubscriptionView,
    CheckoutSuccessView,
    SubscriptionPriceView,
    StripeWebhookView,
    TrainerRevenueView,
)

app_name = "billing"

urlpatterns = [
    # Checkout
    path("checkout/", CheckoutView.as_view(), name="checkout"),
    path("checkout/confirm/", ConfirmSubscriptionView.as_view(), name="checkout-confirm"),
    path("checkout/success/", CheckoutSuccessView.as_view(), name="checkout-success"),

    # Pricing
    path("subscription/price/", SubscriptionPriceView.as_view(), name="subscription-price"),

    # Stripe
    path("webhooks/stripe/", StripeWebhookView.as_view(), name="stripe-webhook"),

    # Trainer reporting
    path("trainer/revenue/", TrainerRevenueView.as_view(), name="trainer-revenue"),
]
