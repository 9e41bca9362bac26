"""
Result types for explicit success/failure tracking during event replay.

The accounting core raises typed exceptions. When a whole event log is
applied (CLI ``replay``), each event outcome is wrapped in a Result so that
one rejected notification does not hide the others, and the outcomes are
aggregated into a ReplaySummary.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

from ido_rewards.shared.exceptions import RewardsException

T = TypeVar("T")


class ErrorSeverity(Enum):

    WARNING = "warning"  # Event applied, something worth noting
    ERROR = "error"  # Event rejected, continue with the next one
    CRITICAL = "critical"  # Stop processing entirely


@dataclass
class ProcessingError:
    """
    One problem met while applying an event.

    Attributes:
        source: Event type ("register", "swap", "add", "remove", "claim")
        message: Human-readable description
        severity: WARNING keeps the event, ERROR rejects it, CRITICAL stops
        context: campaign_id, user, timestamp and event index
        exception: Raised exception, if any
    """

    source: str
    message: str
    severity: ErrorSeverity
    context: Dict[str, Any] = field(default_factory=dict)
    exception: Optional[Exception] = None

    @property
    def kind(self) -> Optional[str]:
        """Core error kind (e.g. "OutsideWindow") when raised by the core."""
        if isinstance(self.exception, RewardsException):
            return self.exception.kind
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "message": self.message,
            "severity": self.severity.value,
            "kind": self.kind,
            "context": self.context,
        }


@dataclass
class Result(Generic[T]):
    """
    Outcome of applying one event.

    A successful event may still carry WARNING entries (it was applied but
    had no effect worth noting); a rejected one carries the ERROR or
    CRITICAL entry explaining why.
    """

    success: bool
    data: Optional[T] = None
    errors: List[ProcessingError] = field(default_factory=list)

    @classmethod
    def ok(cls, data: T) -> "Result[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail_with_message(
        cls,
        source: str,
        message: str,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: Optional[Dict[str, Any]] = None,
        exception: Optional[Exception] = None,
    ) -> "Result[T]":
        error = ProcessingError(
            source=source,
            message=message,
            severity=severity,
            context=context or {},
            exception=exception,
        )
        return cls(success=False, errors=[error])

    @classmethod
    def from_exception(
        cls,
        source: str,
        exception: Exception,
        context: Optional[Dict[str, Any]] = None,
    ) -> "Result[T]":
        """
        Rejected result for a raised exception.

        Core rewards errors reject the event (ERROR); anything else is
        CRITICAL and stops the replay. The exception's own context is merged
        under the caller's.
        """
        merged = dict(getattr(exception, "context", {}) or {})
        merged.update(context or {})
        severity = (
            ErrorSeverity.ERROR
            if isinstance(exception, RewardsException)
            else ErrorSeverity.CRITICAL
        )
        return cls.fail_with_message(
            source, str(exception), severity, merged, exception
        )

    def add_warning(
        self,
        source: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> "Result[T]":
        self.errors.append(
            ProcessingError(
                source=source,
                message=message,
                severity=ErrorSeverity.WARNING,
                context=context or {},
            )
        )
        return self

    def has_warnings(self) -> bool:
        return any(e.severity == ErrorSeverity.WARNING for e in self.errors)

    def get_error_messages(self) -> List[str]:
        return [e.message for e in self.errors]


@dataclass
class ReplaySummary:
    """
    Summary of an event-log replay.

    Counts applied and rejected events per event type and keeps every error
    for reporting.
    """

    events_total: int = 0
    events_applied: int = 0
    events_rejected: int = 0
    applied_by_type: Dict[str, int] = field(default_factory=dict)
    rejected_by_type: Dict[str, int] = field(default_factory=dict)
    errors: List[ProcessingError] = field(default_factory=list)

    def record(self, event_type: str, result: Result) -> None:
        """Account for one event outcome."""
        self.events_total += 1
        if result.success:
            self.events_applied += 1
            self.applied_by_type[event_type] = (
                self.applied_by_type.get(event_type, 0) + 1
            )
        else:
            self.events_rejected += 1
            self.rejected_by_type[event_type] = (
                self.rejected_by_type.get(event_type, 0) + 1
            )
        self.errors.extend(result.errors)

    def has_critical_errors(self) -> bool:
        return any(e.severity == ErrorSeverity.CRITICAL for e in self.errors)

    def error_count(self) -> int:
        """Rejected events, warnings excluded."""
        return sum(
            1
            for e in self.errors
            if e.severity in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL)
        )

    def warning_count(self) -> int:
        return sum(
            1 for e in self.errors if e.severity == ErrorSeverity.WARNING
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "events_total": self.events_total,
            "events_applied": self.events_applied,
            "events_rejected": self.events_rejected,
            "applied_by_type": dict(self.applied_by_type),
            "rejected_by_type": dict(self.rejected_by_type),
            "error_count": self.error_count(),
            "warning_count": self.warning_count(),
            "errors": [e.to_dict() for e in self.errors],
        }
