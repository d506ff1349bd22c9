# users/api/views.py
import logging

from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import IsAuthenticated, AllowAny

from ..services.session import issue_token_pair
from .serializers import SignupSerializer, UserSerializer, ProfileUpdateSerializer

logger = logging.getLogger(__name__)


# ============================================================
# ACCOUNT VIEWS
# ============================================================

class SignupView(APIView):
    """Create a member account and return JWT tokens."""
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = SignupSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()

        logger.info(f"User {user.id} signed up")

        return Response(
            {
                "user": UserSerializer(user).data,
                "tokens": issue_token_pair(user),
            },
            status=status.HTTP_201_CREATED,
        )


class SessionRefreshView(APIView):
    """
    Re-issue tokens from the current database row.

    Called after checkout so the token claims pick up the new subscription.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        user = request.user
        user.refresh_from_db()

        return Response(
            {
                "user": UserSerializer(user).data,
                "tokens": issue_token_pair(user),
            }
        )


class MeView(APIView):
    """Current user's profile."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(UserSerializer(request.user).data)

    def patch(self, request):
        serializer = ProfileUpdateSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(UserSerializer(request.user).data)
