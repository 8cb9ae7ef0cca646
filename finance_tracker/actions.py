"""
Action boundary.

Every user action (submit, sign in, fetch, delete) runs through
run_action, which turns any failure into one message for the UI. Tracker
errors keep their own message; anything unexpected is logged with its
traceback and reported generically. Nothing is retried.
"""

from typing import Awaitable, Optional, TypeVar

import structlog

from finance_tracker.audit import AuditLogger
from finance_tracker.errors import NotFoundError, TrackerError


logger = structlog.get_logger(__name__)

T = TypeVar("T")


async def run_action(
    action: str,
    awaitable: Awaitable[T],
    audit_logger: Optional[AuditLogger] = None,
) -> tuple[Optional[T], Optional[str]]:
    """
    Await one user action.

    Returns:
        (result, None) on success, (None, message) on failure
    """
    try:
        return await awaitable, None
    except NotFoundError as e:
        # Benign: the target vanished (deleted elsewhere). Report, don't alarm.
        logger.info("action_target_missing", action=action, error=e.message)
        return None, e.user_message()
    except TrackerError as e:
        if audit_logger:
            audit_logger.log_action_failed(action, type(e).__name__, e.message)
        return None, e.user_message()
    except Exception as e:
        logger.exception("action_crashed", action=action)
        if audit_logger:
            audit_logger.log_action_failed(action, type(e).__name__, str(e))
        return None, f"Something went wrong while trying to {action}. Please try again."
