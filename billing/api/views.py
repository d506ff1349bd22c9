# billing/api/views.py
import logging

import stripe
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import IsAuthenticated, AllowAny

from core.exceptions import BusinessLogicException
from core.permissions import IsTrainerOrAdmin
from ..services.stripe_service import StripeService
from ..services.subscription_service import ConfirmationProgress, confirm_subscription
from ..services.webhook_service import WebhookService
from ..services.revenue_service import RevenueService

logger = logging.getLogger(__name__)


def get_stripe_service():
    return StripeService()


class CheckoutView(APIView):
    """Create a Stripe checkout session for the membership."""
    permission_classes = [IsAuthenticated]

    def post(self, request):
        plan = request.data.get("plan", "monthly")
        session = get_stripe_service().create_checkout_session(request.user, plan)

        return Response({
            "sessionId": session["session_id"],
            "sessionUrl": session["session_url"],
        })


class ConfirmSubscriptionView(APIView):
    """
    Confirm a completed checkout for the caller.

    Errors come back as 404 (not yours / unknown), 409 (still processing,
    retryable) or 503 (provider unavailable, retryable).
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        session_id = request.data.get("sessionId") or request.data.get("session_id")
        result = confirm_subscription(session_id, request.user, provider=get_stripe_service())

        return Response({
            "success": True,
            "subscription": result.as_dict(),
        })


class CheckoutSuccessView(APIView):
    """
    Payload for the post-checkout page.

    Makes one confirmation attempt; `attempt` is the client's 1-based counter
    so the retry budget spans requests.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        session_id = request.query_params.get("session_id")

        try:
            attempt = max(int(request.query_params.get("attempt", 1)), 1)
        except ValueError:
            attempt = 1

        progress = ConfirmationProgress(attempts=attempt - 1)
        progress.attempt(session_id, request.user, provider=get_stripe_service())

        logger.info(
            f"Checkout success page for user {request.user.id}: "
            f"{progress.state.value} after {progress.attempts} attempt(s)"
        )

        payload = progress.as_dict()
        payload["session_id"] = session_id
        if progress.retryable:
            payload["next_attempt"] = progress.attempts + 1
        return Response(payload)


class SubscriptionPriceView(APIView):
    """Membership price labels; null labels when Stripe is unavailable."""
    permission_classes = [AllowAny]

    def get(self, request):
        try:
            labels = get_stripe_service().price_labels()
        except BusinessLogicException as exc:
            logger.warning(f"Could not fetch subscription prices: {exc.detail}")
            labels = {"monthly": None, "yearly": None}

        return Response({
            "monthly": labels.get("monthly"),
            "yearly": labels.get("yearly"),
            "price": labels.get("monthly"),
        })


class StripeWebhookView(APIView):
    """Stripe webhook endpoint. Unsigned or mis-signed payloads are rejected."""
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        signature = request.META.get("HTTP_STRIPE_SIGNATURE", "")
        service = get_stripe_service()

        try:
            event = service.construct_event(request.body, signature)
        except (ValueError, stripe.SignatureVerificationError) as exc:
            logger.warning(f"Rejected Stripe webhook: {exc}")
            return Response(
                {"success": False, "message": "Invalid webhook signature"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        except RuntimeError as exc:
            logger.error(f"Stripe webhook not configured: {exc}")
            return Response(
                {"success": False, "message": "Webhook not configured"},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )

        result = WebhookService(provider=service).process_event(event)
        return Response({"received": True, **result})


class TrainerRevenueView(APIView):
    """Revenue across the caller's programs."""
    permission_classes = [IsTrainerOrAdmin]

    def get(self, request):
        summary = RevenueService().trainer_revenue(request.user)
        return Response(summary.as_dict())
