# admin_moderation/api/views.py
import logging

from django.db.models import Count
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status

from billing.services.stripe_service import StripeService
from core.permissions import IsAdmin
from programs.api.serializers import ProgramSerializer, EnrollmentSerializer
from programs.models import Program, Enrollment
from users.api.serializers import UserSerializer
from users.models import User
from ..services.admin_service import AdminService
from ..services.audit_log import AuditLog

logger = logging.getLogger(__name__)


class AdminUsersView(APIView):
    """All users with their enrollment counts."""
    permission_classes = [IsAdmin]

    def get(self, request):
        users = User.objects.annotate(enrollment_count=Count("enrollments")).order_by("-date_joined")

        data = []
        for user in users:
            item = UserSerializer(user).data
            item["enrollment_count"] = user.enrollment_count
            data.append(item)

        return Response(data)


class AdminUserRoleView(APIView):
    permission_classes = [IsAdmin]

    def patch(self, request, user_id):
        service = AdminService()
        target = service.get_user(user_id)
        user = service.change_role(request.user, target, request.data.get("role"))

        return Response({"success": True, "user": UserSerializer(user).data})


class AdminUserSubscriptionView(APIView):
    """Grant (POST) or revoke (DELETE) a membership, bypassing billing."""
    permission_classes = [IsAdmin]

    def post(self, request, user_id):
        service = AdminService()
        target = service.get_user(user_id)
        change = service.grant_subscription(
            request.user,
            target,
            subscription_id=request.data.get("subscriptionId"),
        )

        return Response({
            "success": True,
            "user": {
                "id": change.user_id,
                "email": target.email,
                "subscription_status": change.subscription_status,
                "subscription_id": change.subscription_id,
            },
        })

    def delete(self, request, user_id):
        service = AdminService()
        target = service.get_user(user_id)
        change = service.revoke_subscription(request.user, target)

        return Response({
            "success": True,
            "user": {
                "id": change.user_id,
                "email": target.email,
                "subscription_status": change.subscription_status,
                "subscription_id": change.subscription_id,
            },
        })


class AdminUserEnrollmentsView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request, user_id):
        target = AdminService().get_user(user_id)
        enrollments = (
            Enrollment.objects.filter(user=target)
            .select_related("program", "program__trainer")
        )
        return Response(EnrollmentSerializer(enrollments, many=True).data)


class AdminEnrollmentDetailView(APIView):
    permission_classes = [IsAdmin]

    def delete(self, request, pk):
        AdminService().remove_enrollment(request.user, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)


class AdminProgramsView(APIView):
    """Every program, published or not."""
    permission_classes = [IsAdmin]

    def get(self, request):
        programs = (
            Program.objects.select_related("trainer")
            .annotate(enrollment_count=Count("enrollments"))
        )
        return Response(ProgramSerializer(programs, many=True).data)


class AdminReportsView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request):
        return Response(AdminService().reports())


class AdminAuditLogView(APIView):
    """Most recent admin actions, newest first."""
    permission_classes = [IsAdmin]

    def get(self, request):
        try:
            limit = int(request.query_params.get("limit", 0)) or None
        except ValueError:
            limit = None

        return Response({"entries": AuditLog().tail(limit)})


class AdminSubscriptionSetupView(APIView):
    """Create (or look up) the membership product and prices on Stripe."""
    permission_classes = [IsAdmin]

    def post(self, request):
        prices = StripeService().ensure_subscription_prices()
        logger.info(f"Admin {request.user.id} initialised membership prices")

        return Response({
            "success": True,
            "product_id": prices["product_id"],
            "monthly_price_id": prices["monthly_price_id"],
            "yearly_price_id": prices["yearly_price_id"],
        })


class AdminProductsView(APIView):
    """Stripe product catalogue: list active products, create one with a recurring price."""
    permission_classes = [IsAdmin]

    def get(self, request):
        return Response({"products": StripeService().list_products()})

    def post(self, request):
        created = StripeService().create_product(
            name=request.data.get("name"),
            amount=request.data.get("amount"),
            description=request.data.get("description") or "",
            currency=request.data.get("currency") or "usd",
            interval=request.data.get("interval") or "month",
        )
        logger.info(f"Admin {request.user.id} created product {created['product']['id']}")

        return Response(created, status=status.HTTP_201_CREATED)
