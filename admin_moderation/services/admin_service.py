# admin_moderation/services/admin_service.py

"""
ADMIN SERVICE

Direct overrides performed from the admin console:
1. Grant / revoke a membership without going through billing
2. Change a user's role
3. Remove an enrollment

Every subscription and role change is appended to the audit log.
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional

from django.db import transaction
from django.db.models import Count, Sum
from django.utils import timezone

from admin_moderation.services.audit_log import AuditLog
from core.exceptions import NotFound, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class SubscriptionChange:
    user_id: int
    subscription_id: Optional[str]
    subscription_status: str


class AdminService:

    def __init__(self, audit_log: Optional[AuditLog] = None):
        self.audit_log = audit_log or AuditLog()

    def get_user(self, user_id):
        from users.models import User

        try:
            return User.objects.get(pk=user_id)
        except (User.DoesNotExist, ValueError, TypeError):
            raise NotFound("User not found")

    # ---------- subscriptions ----------

    @transaction.atomic
    def grant_subscription(self, admin, target, subscription_id=None) -> SubscriptionChange:
        subscription_id = subscription_id or f"admin-{int(time.time() * 1000)}"

        target.subscription_status = "active"
        target.subscription_id = subscription_id
        target.subscription_start_date = timezone.now()
        target.subscription_end_date = None
        target.save(update_fields=[
            "subscription_status",
            "subscription_id",
            "subscription_start_date",
            "subscription_end_date",
        ])

        self.audit_log.append(
            "grant_subscription",
            admin,
            target.pk,
            subscriptionId=subscription_id,
        )
        return SubscriptionChange(target.pk, subscription_id, "active")

    @transaction.atomic
    def revoke_subscription(self, admin, target) -> SubscriptionChange:
        previous_id = target.subscription_id

        target.subscription_status = "inactive"
        target.subscription_id = None
        target.subscription_end_date = timezone.now()
        target.save(update_fields=[
            "subscription_status",
            "subscription_id",
            "subscription_end_date",
        ])

        self.audit_log.append(
            "revoke_subscription",
            admin,
            target.pk,
            subscriptionId=previous_id,
        )
        return SubscriptionChange(target.pk, None, "inactive")

    # ---------- roles ----------

    def change_role(self, admin, target, role):
        from users.models import User

        if role not in User.Role.values:
            raise ValidationError(f"Invalid role. Use one of: {', '.join(User.Role.values)}")

        if target.pk == admin.pk:
            raise ValidationError("You cannot change your own role")

        previous_role = target.role
        target.role = role
        target.save(update_fields=["role"])

        self.audit_log.append(
            "change_role",
            admin,
            target.pk,
            role=role,
            previousRole=previous_role,
        )
        return target

    # ---------- enrollments ----------

    def remove_enrollment(self, admin, enrollment_id):
        from programs.models import Enrollment

        deleted, _ = Enrollment.objects.filter(pk=enrollment_id).delete()
        if not deleted:
            raise NotFound("Enrollment not found")

        logger.info(f"Admin {admin.pk} removed enrollment {enrollment_id}")

    # ---------- reports ----------

    def reports(self) -> dict:
        from billing.models import Payment
        from programs.models import Program, Enrollment
        from users.models import User

        revenue = Payment.objects.filter(
            status=Payment.Status.SUCCEEDED
        ).aggregate(total=Sum("amount"))["total"]

        top_programs = (
            Program.objects.annotate(enrollment_count=Count("enrollments"))
            .order_by("-enrollment_count", "-created_at")[:5]
        )

        return {
            "total_users": User.objects.count(),
            "total_programs": Program.objects.count(),
            "total_enrollments": Enrollment.objects.count(),
            "total_revenue": str(revenue or 0),
            "active_subscriptions": User.objects.filter(subscription_status="active").count(),
            "top_programs": [
                {
                    "id": str(program.id),
                    "title": program.title,
                    "enrollment_count": program.enrollment_count,
                }
                for program in top_programs
            ],
        }
