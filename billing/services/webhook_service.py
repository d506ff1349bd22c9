# billing/services/webhook_service.py

"""
STRIPE WEBHOOK PROCESSING

Signature verification happens in the view; this module only handles
verified events. Each event id is recorded in StripeEvent first, so a
redelivered event is acknowledged without being applied twice.

Handled events:
- checkout.session.completed: program purchase (Enrollment + Payment)
  and/or membership sync; a subscription delivered as a bare id is
  retrieved from Stripe for its real status
- customer.subscription.created / updated / deleted: membership sync.
  Events for a subscription other than the one on record never cancel
  or downgrade the member's current active subscription
- invoice.payment_failed: status -> past_due
"""

import logging
from decimal import Decimal
from typing import Any, Optional

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction, IntegrityError

from billing.models import Payment, StripeEvent
from billing.services.stripe_service import (
    field,
    snapshot_from_session,
    subscription_price_id,
    subscription_period_end,
    timestamp_to_datetime,
)

logger = logging.getLogger(__name__)

SUBSCRIPTION_EVENTS = (
    "customer.subscription.created",
    "customer.subscription.updated",
    "customer.subscription.deleted",
)


def _is_active_status(status) -> bool:
    config = getattr(settings, "ACCESS_CONFIG", {})
    return status in config.get("ACTIVE_SUBSCRIPTION_STATUSES", ["active"])


def _subscription_fields(subscription) -> dict:
    return {
        "subscription_status": field(subscription, "status"),
        "subscription_price_id": subscription_price_id(subscription),
        "subscription_start_date": timestamp_to_datetime(
            field(subscription, "start_date") or field(subscription, "created")
        ),
        "subscription_end_date": subscription_period_end(subscription),
    }


def _find_user_by_reference(reference) -> Optional[Any]:
    from users.models import User

    if not reference:
        return None
    try:
        return User.objects.filter(pk=int(reference)).first()
    except (TypeError, ValueError):
        return None


def _find_user_by_email(email) -> Optional[Any]:
    from users.models import User

    if not email:
        return None
    return User.objects.filter(email=email.strip().lower()).first()


def _find_user_by_subscription(subscription_id) -> Optional[Any]:
    from users.models import User

    if not subscription_id:
        return None
    return User.objects.filter(subscription_id=subscription_id).first()


class WebhookService:
    """Apply verified Stripe events to our database"""

    def __init__(self, provider=None):
        # StripeService unless given; used for subscription and customer lookups
        self.provider = provider

    def _stripe(self):
        if self.provider is None:
            from billing.services.stripe_service import StripeService
            self.provider = StripeService()
        return self.provider

    def process_event(self, event) -> dict:
        event_id = str(field(event, "id") or "")
        event_type = str(field(event, "type") or "")

        if not event_id:
            return {"processed": False, "reason": "missing_event_id"}

        data = field(event, "data")
        obj = field(data, "object")

        with transaction.atomic():
            try:
                with transaction.atomic():
                    StripeEvent.objects.create(event_id=event_id, event_type=event_type or "unknown")
            except IntegrityError:
                logger.info(f"Stripe event {event_id} already processed")
                return {"processed": False, "idempotent": True, "event_id": event_id}

            if event_type == "checkout.session.completed":
                outcome = self._checkout_completed(obj)
            elif event_type in SUBSCRIPTION_EVENTS:
                outcome = self._subscription_changed(obj, deleted=event_type.endswith(".deleted"))
            elif event_type == "invoice.payment_failed":
                outcome = self._invoice_failed(obj)
            else:
                outcome = {"handled": False}

        logger.info(f"Stripe event {event_id} ({event_type}) processed: {outcome}")
        return {"processed": True, "event_id": event_id, "event_type": event_type, **outcome}

    # ---------- handlers ----------

    def _checkout_completed(self, session) -> dict:
        from programs.models import Program, Enrollment

        snapshot = snapshot_from_session(session)
        user = _find_user_by_reference(snapshot.user_reference) or _find_user_by_email(
            snapshot.customer_email
        )
        if user is None:
            logger.warning(f"Checkout session {snapshot.session_id} could not be mapped to a user")
            return {"matched_user": False}

        outcome = {"matched_user": True, "user_id": user.pk}

        if snapshot.program_id:
            try:
                program = Program.objects.filter(pk=snapshot.program_id).first()
            except DjangoValidationError:
                program = None
            if program is None:
                logger.warning(f"Checkout session {snapshot.session_id} names unknown program {snapshot.program_id}")
            else:
                enrollment, created = Enrollment.objects.get_or_create(
                    user=user,
                    program=program,
                    defaults={"active": True},
                )
                if not created and not enrollment.active:
                    enrollment.active = True
                    enrollment.save(update_fields=["active"])

                payment_intent = field(session, "payment_intent")
                if not isinstance(payment_intent, str):
                    payment_intent = field(payment_intent, "id")
                payment_reference = payment_intent or snapshot.session_id

                Payment.objects.get_or_create(
                    stripe_payment_id=payment_reference,
                    defaults={
                        "user": user,
                        "program": program,
                        "amount": Decimal(snapshot.amount_total or 0) / 100,
                        "currency": snapshot.currency or "usd",
                        "status": Payment.Status.SUCCEEDED,
                    },
                )
                outcome["enrolled_program"] = str(program.pk)

        if snapshot.subscription_id:
            updates = {"subscription_id": snapshot.subscription_id}
            if snapshot.subscription_status:
                updates.update({
                    "subscription_status": snapshot.subscription_status,
                    "subscription_price_id": snapshot.price_id,
                    "subscription_start_date": snapshot.started_at,
                    "subscription_end_date": snapshot.current_period_end,
                })
            else:
                # Unexpanded: a paid session can still carry an incomplete subscription
                subscription = self._stripe().retrieve_subscription(snapshot.subscription_id)
                updates.update(_subscription_fields(subscription))
            type(user).objects.filter(pk=user.pk).update(**updates)
            outcome["subscription_id"] = snapshot.subscription_id
            outcome["status"] = updates["subscription_status"]

        return outcome

    def _subscription_changed(self, subscription, deleted=False) -> dict:
        subscription_id = field(subscription, "id")
        metadata = field(subscription, "metadata") or {}

        user = (
            _find_user_by_reference(field(metadata, "userId"))
            or _find_user_by_subscription(subscription_id)
        )
        if user is None:
            customer_id = field(subscription, "customer")
            if customer_id:
                user = _find_user_by_email(self._stripe().retrieve_customer_email(customer_id))

        if user is None:
            logger.warning(f"Subscription {subscription_id} could not be mapped to a user")
            return {"matched_user": False}

        updates = _subscription_fields(subscription)
        status = updates["subscription_status"]
        if deleted:
            status = updates["subscription_status"] = status or "canceled"
            ended_at = timestamp_to_datetime(field(subscription, "ended_at"))
            if ended_at is not None:
                updates["subscription_end_date"] = ended_at

        if user.subscription_id and user.subscription_id != subscription_id:
            replaces_active = _is_active_status(user.subscription_status)
            if deleted or (replaces_active and not _is_active_status(status)):
                logger.info(
                    f"Ignoring {status} subscription {subscription_id} for user {user.pk}; "
                    f"current subscription is {user.subscription_id} ({user.subscription_status})"
                )
                return {"matched_user": True, "user_id": user.pk, "ignored": True, "status": status}

        type(user).objects.filter(pk=user.pk).update(subscription_id=subscription_id, **updates)
        return {"matched_user": True, "user_id": user.pk, "status": status}

    def _invoice_failed(self, invoice) -> dict:
        details = field(invoice, "subscription_details") or {}
        metadata = field(details, "metadata") or {}

        user = (
            _find_user_by_reference(field(metadata, "userId"))
            or _find_user_by_subscription(field(invoice, "subscription"))
            or _find_user_by_email(field(invoice, "customer_email"))
        )
        if user is None:
            logger.warning(f"Failed invoice {field(invoice, 'id')} could not be mapped to a user")
            return {"matched_user": False}

        type(user).objects.filter(pk=user.pk).update(subscription_status="past_due")
        return {"matched_user": True, "user_id": user.pk, "status": "past_due"}
