"""
Audit Logger

Every user action and every failed backend call is written as one
structured (JSON) log line through structlog. The audit logger never
raises: a broken log sink must not turn a successful save into an error.
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from finance_tracker.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


_configured = False


def configure_logging(level: str = "INFO") -> None:
    """Configure stdlib logging and structlog once per process."""
    global _configured
    if _configured:
        return

    logging.basicConfig(format="%(message)s", level=getattr(logging, level, logging.INFO))
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True


class AuditLogger:
    """
    Central audit logging service.

    Keeps the emitted events in memory (bounded) as well, so the settings
    page can show the recent history of the current session.
    """

    def __init__(self, keep_last: int = 200):
        self._logger = structlog.get_logger("finance_tracker.audit")
        self._keep_last = keep_last
        self._recent: list[AuditEvent] = []

    @property
    def recent_events(self) -> list[AuditEvent]:
        """Most recent events, newest first."""
        return list(reversed(self._recent))

    def log(self, event: AuditEvent) -> None:
        self._recent.append(event)
        del self._recent[:-self._keep_last]

        log_dict = event.to_log_dict()
        try:
            if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
                self._logger.error("audit_event", **log_dict)
            elif event.severity is AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity is AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            logging.getLogger(__name__).warning("audit log write failed: %s", e)

    def log_signed_in(self, user_id: str, email: Optional[str]) -> None:
        self.log(AuditEventBuilder.signed_in(user_id=user_id, email=email))

    def log_signed_up(self, email: str, user_id: Optional[str]) -> None:
        self.log(AuditEventBuilder.signed_up(email=email, user_id=user_id))

    def log_signed_out(self, user_id: Optional[str]) -> None:
        self.log(AuditEventBuilder.signed_out(user_id=user_id))

    def log_auth_failed(self, action: str, email: str, error_message: str) -> None:
        self.log(AuditEventBuilder.auth_failed(action=action, email=email, error_message=error_message))

    def log_session_changed(self, user_id: Optional[str]) -> None:
        self.log(AuditEventBuilder.session_changed(user_id=user_id))

    def log_record_created(
        self,
        entity_id: str,
        user_id: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.record_created(
            entity_id=entity_id,
            user_id=user_id,
            amount=amount,
            correlation_id=correlation_id,
        ))

    def log_record_updated(self, entity_id: str, user_id: str) -> None:
        self.log(AuditEventBuilder.record_updated(entity_id=entity_id, user_id=user_id))

    def log_record_moved(
        self,
        old_entity_id: str,
        new_entity_id: str,
        user_id: str,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.record_moved(
            old_entity_id=old_entity_id,
            new_entity_id=new_entity_id,
            user_id=user_id,
            correlation_id=correlation_id,
        ))

    def log_record_lost(
        self,
        old_entity_id: str,
        user_id: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.record_lost(
            old_entity_id=old_entity_id,
            user_id=user_id,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_record_deleted(self, entity_id: str, user_id: str) -> None:
        self.log(AuditEventBuilder.record_deleted(entity_id=entity_id, user_id=user_id))

    def log_validation_failed(self, kind: str, field_errors: dict[str, str]) -> None:
        self.log(AuditEventBuilder.validation_failed(kind=kind, field_errors=field_errors))

    def log_records_fetched(
        self,
        user_id: str,
        income_count: Optional[int],
        expense_count: Optional[int],
    ) -> None:
        self.log(AuditEventBuilder.records_fetched(
            user_id=user_id,
            income_count=income_count,
            expense_count=expense_count,
        ))

    def log_fetch_failed(self, kind: str, user_id: str, error_message: str) -> None:
        self.log(AuditEventBuilder.fetch_failed(kind=kind, user_id=user_id, error_message=error_message))

    def log_action_failed(self, action: str, error_type: str, error_message: str) -> None:
        self.log(AuditEventBuilder.action_failed(
            action=action,
            error_type=error_type,
            error_message=error_message,
        ))

    def log_external_service_error(self, service: str, operation: str, error_message: str) -> None:
        self.log(AuditEventBuilder.external_service_error(
            service=service,
            operation=operation,
            error_message=error_message,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    One kind-change move logs its delete and insert under the same id.
    """
    return uuid4()
