# billing/services/revenue_service.py

"""
TRAINER REVENUE

Totals across a trainer's programs: succeeded program purchases and
active enrollments.
"""

from dataclasses import dataclass
from decimal import Decimal

from django.db.models import Count, Q, Sum

from billing.models import Payment


@dataclass(frozen=True)
class RevenueSummary:
    total_revenue: Decimal
    payment_count: int
    active_enrollments: int
    programs: list

    def as_dict(self):
        return {
            "total_revenue": str(self.total_revenue),
            "payment_count": self.payment_count,
            "active_enrollments": self.active_enrollments,
            "programs": self.programs,
        }


class RevenueService:

    def trainer_revenue(self, trainer) -> RevenueSummary:
        from programs.models import Program

        payments = Payment.objects.filter(
            program__trainer=trainer,
            status=Payment.Status.SUCCEEDED,
        )
        totals = payments.aggregate(total=Sum("amount"), count=Count("id"))

        programs = (
            Program.objects.filter(trainer=trainer)
            .annotate(
                active_enrollments=Count(
                    "enrollments",
                    filter=Q(enrollments__active=True),
                    distinct=True,
                ),
            )
            .order_by("-created_at")
        )

        revenue_by_program = dict(
            payments.order_by().values_list("program_id").annotate(total=Sum("amount"))
        )

        rows = [
            {
                "program_id": str(program.id),
                "title": program.title,
                "active_enrollments": program.active_enrollments,
                "revenue": str(revenue_by_program.get(program.id) or Decimal("0.00")),
            }
            for program in programs
        ]

        return RevenueSummary(
            total_revenue=totals["total"] or Decimal("0.00"),
            payment_count=totals["count"] or 0,
            active_enrollments=sum(row["active_enrollments"] for row in rows),
            programs=rows,
        )
