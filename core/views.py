# core/views.py

"""
CORE VIEWS

System-level views including health checks and error handlers.
"""

import logging
from django.http import JsonResponse
from django.db import connection, DatabaseError
from django.core.cache import cache
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny

logger = logging.getLogger(__name__)


class HealthCheckView(APIView):
    """
    Health check endpoint.

    Checks:
    - Database connectivity
    - Cache connectivity
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request):
        health_status = {
            "status": "healthy",
            "checks": {}
        }

        try:
            with connection.cursor() as cursor:
                cursor.execute("SELECT 1")
            health_status["checks"]["database"] = "ok"
        except DatabaseError as e:
            logger.error(f"Health check database failure: {e}")
            health_status["checks"]["database"] = f"error: {e}"
            health_status["status"] = "unhealthy"

        cache.set("health_check", "ok", 10)
        if cache.get("health_check") == "ok":
            health_status["checks"]["cache"] = "ok"
        else:
            health_status["checks"]["cache"] = "error: cache read failed"
            health_status["status"] = "degraded"

        status_code = 200 if health_status["status"] == "healthy" else 503
        return Response(health_status, status=status_code)


class ReadinessCheckView(APIView):
    """
    Readiness probe endpoint.

    Returns 200 if the service is ready to accept traffic.
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request):
        try:
            with connection.cursor() as cursor:
                cursor.execute("SELECT 1")
            return Response({"status": "ready"})
        except DatabaseError as e:
            logger.error(f"Readiness check failed: {e}")
            return Response(
                {"status": "not ready", "error": str(e)},
                status=503
            )


class LivenessCheckView(APIView):
    """Liveness probe"""

    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request):
        return Response({"status": "alive"})


def custom_404(request, exception=None):
    """Custom 404 error handler"""
    return JsonResponse(
        {
            "success": False,
            "error_code": "not_found",
            "message": "The requested resource was not found.",
        },
        status=404
    )


def custom_500(request):
    """Custom 500 error handler"""
    return JsonResponse(
        {
            "success": False,
            "error_code": "server_error",
            "message": "Server error. Please try again later.",
        },
        status=500
    )
