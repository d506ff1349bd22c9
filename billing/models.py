# billing/models.py

import uuid
from django.db import models
from django.conf import settings


# =========================
# PAYMENT
# =========================

class Payment(models.Model):
    """One-off program purchase recorded from a completed checkout"""

    class Status(models.TextChoices):
        SUCCEEDED = "succeeded", "Succeeded"
        PENDING = "pending", "Pending"
        FAILED = "failed", "Failed"
        REFUNDED = "refunded", "Refunded"

    class Meta:
        db_table = "billing_payment"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "created_at"], name="billing_pay_user_id_4b1e9f_idx"),
            models.Index(fields=["status"], name="billing_pay_status_8d2a6c_idx"),
        ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="payments"
    )
    program = models.ForeignKey(
        "programs.Program",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payments"
    )

    amount = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default="usd")
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.SUCCEEDED)

    # Checkout session id; unique so a redelivered event cannot double-record
    stripe_payment_id = models.CharField(max_length=255, unique=True)

    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.user} {self.amount} {self.currency} ({self.status})"


# =========================
# STRIPE EVENT LEDGER
# =========================

class StripeEvent(models.Model):
    """
    Webhook events already processed.

    Inserting the event id first makes redelivered events a no-op.
    """

    class Meta:
        db_table = "billing_stripe_event"
        ordering = ["-created_at"]

    event_id = models.CharField(max_length=255, unique=True)
    event_type = models.CharField(max_length=100)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.event_type} {self.event_id}"
