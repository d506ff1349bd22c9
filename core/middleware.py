# core/middleware.py

"""
CUSTOM MIDDLEWARE

- RequestLoggingMiddleware: request id (propagated from X-Request-ID when
  the caller sends a sane one), timing headers and one log line per request
- SecurityHeadersMiddleware: browser hardening headers; API responses are
  access-shaped per caller, so they are never stored by shared caches
- ExceptionHandlerMiddleware: JSON 500 envelope for anything DRF did not handle

Tunables live in settings.REQUEST_LOGGING.
"""

import logging
import re
import time
import uuid

from django.conf import settings
from django.http import JsonResponse
from django.utils.cache import patch_cache_control, patch_vary_headers
from django.utils.deprecation import MiddlewareMixin

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "HTTP_X_REQUEST_ID"
REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def _logging_config():
    return getattr(settings, "REQUEST_LOGGING", {})


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


def incoming_request_id(request):
    """Caller-supplied id, if it is safe to echo into logs and headers."""
    value = request.META.get(REQUEST_ID_HEADER, "").strip()
    if value and REQUEST_ID_PATTERN.match(value):
        return value
    return None


class RequestLoggingMiddleware(MiddlewareMixin):

    def process_request(self, request):
        request.request_id = incoming_request_id(request) or new_request_id()
        request.started_at = time.perf_counter()

    def process_response(self, request, response):
        request_id = getattr(request, "request_id", None)
        if request_id is None:
            return response
        response["X-Request-ID"] = request_id

        started_at = getattr(request, "started_at", None)
        if started_at is None:
            return response

        duration_ms = (time.perf_counter() - started_at) * 1000
        response["X-Request-Duration-Ms"] = f"{duration_ms:.2f}"

        config = _logging_config()
        summary = f"[{request_id}] {request.method} {request.path} -> {response.status_code} ({duration_ms:.2f}ms)"

        if duration_ms > config.get("SLOW_REQUEST_MS", 1000):
            logger.warning(f"Slow request {summary}")
        elif request.path in config.get("QUIET_PATHS", ()):
            logger.debug(summary)
        else:
            logger.info(summary)

        return response


class SecurityHeadersMiddleware(MiddlewareMixin):

    API_PREFIX = "/api/"

    def process_response(self, request, response):
        response.setdefault("X-Content-Type-Options", "nosniff")
        response.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        response.setdefault("Permissions-Policy", "camera=(), geolocation=(), microphone=(), payment=(self)")

        if request.path.startswith(self.API_PREFIX):
            # Program payloads differ per caller (teaser vs full content)
            if not response.has_header("Cache-Control"):
                patch_cache_control(response, no_store=True, private=True)
            patch_vary_headers(response, ("Authorization",))

        return response


class ExceptionHandlerMiddleware(MiddlewareMixin):

    def process_exception(self, request, exception):
        request_id = getattr(request, "request_id", None)
        logger.exception(f"[{request_id}] Unhandled {type(exception).__name__} in {request.method} {request.path}")

        return JsonResponse(
            {
                "success": False,
                "error_code": "server_error",
                "message": "Something went wrong. Please try again later.",
                "request_id": request_id,
            },
            status=500,
        )
