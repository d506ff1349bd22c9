# core/exceptions.py

"""
CUSTOM EXCEPTIONS

Application-specific exceptions with a consistent error payload.
"""

from rest_framework.exceptions import APIException
from rest_framework import status


class BusinessLogicException(APIException):
    """Base exception for business logic errors"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "The request could not be processed."
    default_code = "business_error"
    retryable = False


class NotFound(BusinessLogicException):
    """Checkout session or user missing, or not owned by the caller"""
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found. Please contact support if this persists."
    default_code = "not_found"


class NotCompleted(BusinessLogicException):
    """Checkout exists but has not produced a subscription yet"""
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Your payment is still being processed."
    default_code = "not_completed"
    retryable = True


class TransientFailure(BusinessLogicException):
    """Network or billing provider error"""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Service temporarily unavailable. Please try again."
    default_code = "transient_failure"
    retryable = True


class Unauthorized(BusinessLogicException):
    """Role check failed"""
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You do not have access to this resource."
    default_code = "unauthorized"


class ValidationError(BusinessLogicException):
    """Malformed input"""
    default_detail = "Invalid input."
    default_code = "validation_error"


# Exception handler for DRF
def custom_exception_handler(exc, context):
    """
    Custom exception handler for consistent error responses.
    """
    from rest_framework.views import exception_handler

    response = exception_handler(exc, context)

    if response is not None:
        if isinstance(response.data, dict):
            payload = dict(response.data)
        else:
            payload = {"detail": response.data}

        payload["error_code"] = getattr(exc, "default_code", "error")

        if "detail" in payload:
            payload["message"] = payload.pop("detail")

        if isinstance(exc, BusinessLogicException):
            payload["retryable"] = exc.retryable

        payload["success"] = False
        response.data = payload

    return response
