# programs/services/access.py

"""
PROGRAM ACCESS RESOLVER

Decides whether a caller may see the full content of a program
(workouts, exercise videos, course outline) or only a teaser.

resolve_access() is a pure function over already-fetched data:
- the session snapshot (JWT claims, possibly stale)
- the program's owner and the caller's active enrollments for it
- a fresh subscription read from the database (None if the read failed)

Fetching is done by load_program_access() / load_subscription_snapshot().
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from django.conf import settings
from django.db import DatabaseError

from users.services.session import (
    SessionSnapshot,
    SubscriptionSnapshot,
    load_subscription_snapshot,
)

logger = logging.getLogger(__name__)

ADMIN_ROLE = "ADMIN"


class AccessDecision(str, enum.Enum):
    OWNER = "owner"
    SUBSCRIBED = "subscribed"
    ENROLLED = "enrolled"
    LOCKED = "locked"
    ANONYMOUS = "anonymous"

    @property
    def grants_full_content(self):
        return self in (AccessDecision.OWNER, AccessDecision.SUBSCRIBED, AccessDecision.ENROLLED)


@dataclass(frozen=True)
class ProgramAccess:
    """What the resolver needs to know about a program for one caller"""
    program_id: object
    trainer_id: object
    published: bool
    enrollments: Sequence = field(default_factory=tuple)


def _access_config():
    return getattr(settings, "ACCESS_CONFIG", {})


def is_owner_or_admin(session: Optional[SessionSnapshot], program) -> bool:
    """
    The single ownership rule: the program's trainer, or any admin.

    `program` is a Program model or a ProgramAccess.
    """
    if session is None:
        return False
    if session.role == ADMIN_ROLE:
        return True
    return session.user_id is not None and session.user_id == program.trainer_id


def has_active_subscription(snapshot) -> bool:
    """
    True when the snapshot's status is an active one.

    A subscription id without an active status only counts when
    ACCESS_CONFIG["SUBSCRIPTION_ID_GRANTS_ACCESS"] is enabled; a canceled
    subscription often keeps its id.
    """
    if snapshot is None:
        return False

    config = _access_config()
    active_statuses = config.get("ACTIVE_SUBSCRIPTION_STATUSES", ["active"])

    if snapshot.subscription_status in active_statuses:
        return True

    if config.get("SUBSCRIPTION_ID_GRANTS_ACCESS", False):
        return bool(snapshot.subscription_id)

    return False


def resolve_access(
    session: Optional[SessionSnapshot],
    program,
    db_user: Optional[SubscriptionSnapshot],
) -> AccessDecision:
    """
    First match wins:
    1. no session -> ANONYMOUS
    2. trainer of the program or admin -> OWNER
    3. active subscription (fresh read, else session claims) -> SUBSCRIBED
    4. an active enrollment in this program -> ENROLLED
    5. otherwise LOCKED
    """
    if session is None:
        return AccessDecision.ANONYMOUS

    if is_owner_or_admin(session, program):
        return AccessDecision.OWNER

    if db_user is not None:
        subscribed = has_active_subscription(db_user)
    else:
        logger.warning(
            f"Subscription read unavailable for user {session.user_id}; "
            f"using session snapshot for program {getattr(program, 'program_id', None)}"
        )
        subscribed = has_active_subscription(session)

    if subscribed:
        return AccessDecision.SUBSCRIBED

    if len(program.enrollments) > 0:
        return AccessDecision.ENROLLED

    return AccessDecision.LOCKED


# =========================
# LOADERS (persistence reads)
# =========================

def load_program_access(program, user_id) -> ProgramAccess:
    """Attach the caller's active enrollments for this program."""
    from programs.models import Enrollment

    enrollments = ()
    if user_id is not None:
        try:
            enrollments = tuple(
                Enrollment.objects.filter(program=program, user_id=user_id, active=True)
            )
        except DatabaseError as exc:
            # Masking content is the safe default
            logger.error(f"Enrollment lookup failed for user {user_id}: {exc}")

    return ProgramAccess(
        program_id=program.pk,
        trainer_id=program.trainer_id,
        published=program.published,
        enrollments=enrollments,
    )


def decide_for_request(request, program) -> AccessDecision:
    """Fetch what the resolver needs for this request and decide."""
    session = SessionSnapshot.from_request(request)
    user_id = session.user_id if session else None

    access = load_program_access(program, user_id)
    db_user = load_subscription_snapshot(user_id) if session else None

    return resolve_access(session, access, db_user)
