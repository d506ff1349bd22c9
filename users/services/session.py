# users/services/session.py

"""
SESSION & SUBSCRIPTION SNAPSHOTS

The JWT access token carries a snapshot of the user's role and subscription
taken when the token was issued. It can go stale (e.g. right after checkout),
so access decisions prefer a fresh database read and only fall back to the
subscription claims when that read fails. Role is always read from the
authenticated user row.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from django.db import DatabaseError
from rest_framework_simplejwt.tokens import RefreshToken

logger = logging.getLogger(__name__)

SNAPSHOT_CLAIMS = ("role", "email", "subscription_status", "subscription_id")


@dataclass(frozen=True)
class SessionSnapshot:
    """Authenticated caller as seen by the current request"""
    user_id: int
    role: str
    email: str = ""
    subscription_status: Optional[str] = None
    subscription_id: Optional[str] = None

    @classmethod
    def from_user(cls, user):
        if user is None or not getattr(user, "is_authenticated", False):
            return None
        return cls(
            user_id=user.pk,
            role=user.role,
            email=user.email,
            subscription_status=user.subscription_status,
            subscription_id=user.subscription_id,
        )

    @classmethod
    def from_token(cls, token, user):
        """
        Build from the authenticated row plus the token's subscription claims.

        Role and email always come from the row JWTAuthentication loaded, so a
        demoted account loses its rights even with a refreshed token.
        Subscription claims absent from older tokens use the row as well.
        """
        fallback = cls.from_user(user)
        if token is None or fallback is None:
            return fallback

        def claim(name, default):
            try:
                return token[name]
            except KeyError:
                return default

        return cls(
            user_id=fallback.user_id,
            role=fallback.role,
            email=fallback.email,
            subscription_status=claim("subscription_status", fallback.subscription_status),
            subscription_id=claim("subscription_id", fallback.subscription_id),
        )

    @classmethod
    def from_request(cls, request):
        return cls.from_token(getattr(request, "auth", None), getattr(request, "user", None))


@dataclass(frozen=True)
class SubscriptionSnapshot:
    """Subscription fields freshly read from the database"""
    subscription_id: Optional[str]
    subscription_status: Optional[str]


def load_subscription_snapshot(user_id) -> Optional[SubscriptionSnapshot]:
    """
    Read the user's subscription fields.

    Returns None when the user is missing or the database is unavailable;
    callers then fall back to the session snapshot.
    """
    from users.models import User

    try:
        row = (
            User.objects.filter(pk=user_id)
            .values("subscription_id", "subscription_status")
            .first()
        )
    except DatabaseError as exc:
        logger.error(f"Subscription lookup failed for user {user_id}: {exc}")
        return None

    if row is None:
        logger.warning(f"Subscription lookup found no user {user_id}")
        return None

    return SubscriptionSnapshot(
        subscription_id=row["subscription_id"],
        subscription_status=row["subscription_status"],
    )


def add_snapshot_claims(token, user):
    token["role"] = user.role
    token["email"] = user.email
    token["subscription_status"] = user.subscription_status
    token["subscription_id"] = user.subscription_id
    return token


def issue_token_pair(user):
    """Issue a fresh refresh/access pair carrying the current snapshot."""
    refresh = add_snapshot_claims(RefreshToken.for_user(user), user)
    access = refresh.access_token
    return {"refresh": str(refresh), "access": str(access)}
