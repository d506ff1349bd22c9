# admin_moderation/services/audit_log.py

"""
ADMIN AUDIT LOG

Append-only newline-delimited JSON file. Each line is one record:
    {"action", "adminId", "adminEmail", "targetUserId", "subscriptionId"?,
     "role"?, "timestamp"}

A failed write is logged and never blocks the admin action. Reading skips
lines that are not valid JSON.
"""

import json
import logging
import os
import threading
from pathlib import Path

from django.conf import settings
from django.utils import timezone

logger = logging.getLogger(__name__)

_write_lock = threading.Lock()


def _config():
    return getattr(settings, "AUDIT_CONFIG", {})


class AuditLog:

    def __init__(self, path=None):
        self.path = Path(path or _config().get("LOG_PATH") or "logs/admin-actions.log")

    def build_record(self, action, admin, target_user_id, **extra):
        record = {
            "action": action,
            "adminId": admin.pk,
            "adminEmail": admin.email,
            "targetUserId": target_user_id,
        }
        record.update({key: value for key, value in extra.items() if value is not None})
        record["timestamp"] = timezone.now().isoformat()
        return record

    def append(self, action, admin, target_user_id, **extra) -> bool:
        """Returns False when the record could not be written."""
        record = self.build_record(action, admin, target_user_id, **extra)
        line = json.dumps(record, default=str) + "\n"

        try:
            with _write_lock:
                os.makedirs(self.path.parent, exist_ok=True)
                with open(self.path, "a", encoding="utf-8") as fh:
                    fh.write(line)
        except OSError as exc:
            logger.error(f"Failed to write admin audit record {action} to {self.path}: {exc}")
            return False

        logger.info(f"Admin {admin.pk} {action} on user {target_user_id}")
        return True

    def tail(self, limit=None):
        """Newest records first, at most `limit` (capped at MAX_LIMIT)."""
        config = _config()
        limit = min(limit or config.get("DEFAULT_LIMIT", 20), config.get("MAX_LIMIT", 200))
        if limit <= 0:
            return []

        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                lines = [line for line in fh if line.strip()]
        except FileNotFoundError:
            return []
        except OSError as exc:
            logger.error(f"Failed to read admin audit log {self.path}: {exc}")
            return []

        records = []
        for line in reversed(lines):
            try:
                records.append(json.loads(line))
            except json.JSONDecodeError:
                logger.warning(f"Skipping malformed audit line: {line[:80]!r}")
                continue
            if len(records) >= limit:
                break

        return records
