"""
Audit Models for Finance Tracker

Every user action (sign in, record created, record moved between kinds,
record deleted) and every failed store call produces one AuditEvent.
Events are written to the structured log; they are never modified.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Session
    SIGNED_IN = "signed_in"
    SIGNED_UP = "signed_up"
    SIGNED_OUT = "signed_out"
    AUTH_FAILED = "auth_failed"
    SESSION_CHANGED = "session_changed"

    # Records
    RECORD_CREATED = "record_created"
    RECORD_UPDATED = "record_updated"
    RECORD_MOVED = "record_moved"
    RECORD_DELETED = "record_deleted"
    RECORD_LOST = "record_lost"
    VALIDATION_FAILED = "validation_failed"

    # Fetching
    RECORDS_FETCHED = "records_fetched"
    FETCH_FAILED = "fetch_failed"

    # System events
    ACTION_FAILED = "action_failed"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """A single audit event."""

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context. Record ids are only unique per kind, so entity_id is the
    # "<kind>-<id>" list key, not the bare id.
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'record', 'session')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )
    user_id: Optional[str] = Field(
        default=None,
        description="Authenticated user, when there is one"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., delete + insert of one move)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "user_id": self.user_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.signed_in(user_id, email)
        event = AuditEventBuilder.record_deleted("expense-3", user_id)
    """

    @staticmethod
    def signed_in(user_id: str, email: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SIGNED_IN,
            entity_type="session",
            user_id=user_id,
            description="User signed in",
            details={"email": email},
            is_user_action=True,
        )

    @staticmethod
    def signed_up(email: str, user_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SIGNED_UP,
            entity_type="session",
            user_id=user_id,
            description="New account created",
            details={"email": email},
            is_user_action=True,
        )

    @staticmethod
    def signed_out(user_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SIGNED_OUT,
            entity_type="session",
            user_id=user_id,
            description="User signed out",
            is_user_action=True,
        )

    @staticmethod
    def auth_failed(action: str, email: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AUTH_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="session",
            description=f"{action} failed",
            details={"email": email},
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def session_changed(user_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_CHANGED,
            severity=AuditSeverity.DEBUG,
            entity_type="session",
            user_id=user_id,
            description="Session changed" if user_id else "Session cleared",
        )

    @staticmethod
    def record_created(
        entity_id: str,
        user_id: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_CREATED,
            entity_type="record",
            entity_id=entity_id,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Record created: {entity_id}",
            details={"amount": amount},
            is_user_action=True,
        )

    @staticmethod
    def record_updated(entity_id: str, user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_UPDATED,
            entity_type="record",
            entity_id=entity_id,
            user_id=user_id,
            description=f"Record updated: {entity_id}",
            is_user_action=True,
        )

    @staticmethod
    def record_moved(
        old_entity_id: str,
        new_entity_id: str,
        user_id: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_MOVED,
            entity_type="record",
            entity_id=new_entity_id,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Record moved: {old_entity_id} -> {new_entity_id}",
            details={"previous": old_entity_id},
            is_user_action=True,
        )

    @staticmethod
    def record_lost(
        old_entity_id: str,
        user_id: str,
        error_message: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_LOST,
            severity=AuditSeverity.CRITICAL,
            entity_type="record",
            entity_id=old_entity_id,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Record deleted but not re-inserted: {old_entity_id}",
            error_message=error_message,
        )

    @staticmethod
    def record_deleted(entity_id: str, user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_DELETED,
            entity_type="record",
            entity_id=entity_id,
            user_id=user_id,
            description=f"Record deleted: {entity_id}",
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(kind: str, field_errors: dict[str, str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="record",
            description=f"Entry rejected with {len(field_errors)} field errors",
            details={"kind": kind, "fields": sorted(field_errors)},
            is_user_action=True,
        )

    @staticmethod
    def records_fetched(user_id: str, income_count: Optional[int], expense_count: Optional[int]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORDS_FETCHED,
            severity=AuditSeverity.DEBUG,
            user_id=user_id,
            description="Record lists fetched",
            details={"income": income_count, "expense": expense_count},
        )

    @staticmethod
    def fetch_failed(kind: str, user_id: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FETCH_FAILED,
            severity=AuditSeverity.ERROR,
            user_id=user_id,
            description=f"Fetching {kind} records failed",
            details={"kind": kind},
            error_message=error_message,
        )

    @staticmethod
    def action_failed(
        action: str,
        error_type: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACTION_FAILED,
            severity=AuditSeverity.ERROR,
            description=f"Action failed: {action}",
            error_message=error_message,
            details={"error_type": error_type},
        )

    @staticmethod
    def external_service_error(
        service: str,
        operation: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={
                "service": service,
                "operation": operation,
            },
        )
