"""
Activity log service: append-only audit trail per attempt.
Best-effort: a failed insert is logged and never rolls back the calling transition.
"""
import logging

from django.db import DatabaseError, transaction
from django.utils import timezone

from exams.models import ActivityLog, ExamAttempt

logger = logging.getLogger(__name__)


def record_activity(attempt: ExamAttempt, action: str, metadata=None, at=None):
    """
    Append one event for the attempt. Returns the ActivityLog or None when the
    append was refused (attempt already submitted) or failed.
    """
    if attempt.is_submitted and action != ActivityLog.ACTION_EXAM_SUBMITTED:
        logger.warning(
            "activity_log attempt_id=%s action=%s refused_after_submit", attempt.pk, action
        )
        return None

    at = at or timezone.now()
    payload = dict(metadata or {})
    payload.setdefault('timestamp', at.isoformat())
    try:
        # Own savepoint so a failed insert leaves the outer transaction usable
        with transaction.atomic():
            return ActivityLog.objects.create(
                attempt=attempt,
                action=action,
                metadata=payload,
                created_at=at,
            )
    except DatabaseError:
        logger.exception("activity_log attempt_id=%s action=%s append_failed", attempt.pk, action)
        return None
