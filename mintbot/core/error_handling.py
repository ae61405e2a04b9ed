"""
Error Tracking

Classifies and records the failures that the collect-and-mint path swallows,
so they stay visible in logs and can be counted by kind even though the
conversation itself carries on unaffected.
"""

import logging
import traceback
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional

from ..exceptions import (
    CacheAccessError,
    ChainSubmissionError,
    ConfigurationError,
    ExtractionError,
    IncompleteRecordError,
    MetadataUploadError,
    NameResolutionError,
)

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Error severity levels for classification and response."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Kinds of failure along the collect-and-mint path."""
    CACHE = "cache"
    EXTRACTION = "extraction"
    VALIDATION = "validation"
    UPLOAD = "upload"
    NAME_RESOLUTION = "name_resolution"
    CHAIN_SUBMISSION = "chain_submission"
    CONFIGURATION = "configuration"
    UNKNOWN = "unknown"


_CATEGORY_BY_TYPE = (
    (CacheAccessError, ErrorCategory.CACHE),
    (ExtractionError, ErrorCategory.EXTRACTION),
    (IncompleteRecordError, ErrorCategory.VALIDATION),
    (MetadataUploadError, ErrorCategory.UPLOAD),
    (NameResolutionError, ErrorCategory.NAME_RESOLUTION),
    (ChainSubmissionError, ErrorCategory.CHAIN_SUBMISSION),
    (ConfigurationError, ErrorCategory.CONFIGURATION),
)

# Failures that leave a complete record unminted are worth an error log line
_HIGH_SEVERITY = {
    ErrorCategory.UPLOAD,
    ErrorCategory.NAME_RESOLUTION,
    ErrorCategory.CHAIN_SUBMISSION,
    ErrorCategory.CONFIGURATION,
}


def categorize_error(error: BaseException) -> ErrorCategory:
    for error_type, category in _CATEGORY_BY_TYPE:
        if isinstance(error, error_type):
            return category
    return ErrorCategory.UNKNOWN


@dataclass
class ErrorContext:
    """Context information for error tracking and analysis."""
    error_id: str
    timestamp: datetime
    component: str
    operation: str
    error_type: str
    message: str
    severity: ErrorSeverity
    category: ErrorCategory
    metadata: Dict[str, Any] = field(default_factory=dict)
    stack_trace: Optional[str] = None


class ErrorTracker:
    """Keeps a bounded history of swallowed errors and logs each one."""

    def __init__(self, max_history: int = 1000):
        self.error_history: List[ErrorContext] = []
        self.error_counts: Dict[str, int] = defaultdict(int)
        self.max_history = max_history

    def register_error(
        self,
        error: BaseException,
        component: str,
        operation: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> ErrorContext:
        """Register an error for tracking and log it."""
        category = categorize_error(error)
        severity = ErrorSeverity.HIGH if category in _HIGH_SEVERITY else ErrorSeverity.MEDIUM

        error_context = ErrorContext(
            error_id=f"{component}_{operation}_{int(datetime.now().timestamp())}",
            timestamp=datetime.now(),
            component=component,
            operation=operation,
            error_type=type(error).__name__,
            message=str(error),
            severity=severity,
            category=category,
            metadata=context or {},
            stack_trace="".join(
                traceback.format_exception(type(error), error, error.__traceback__)
            ),
        )

        self.error_history.append(error_context)
        self.error_counts[category.value] += 1

        if len(self.error_history) > self.max_history:
            self.error_history = self.error_history[-self.max_history:]

        self._log_error(error_context)
        return error_context

    def get_error_analytics(self, hours: int = 24) -> Dict[str, Any]:
        """Summarize errors recorded in the last ``hours`` hours."""
        cutoff_time = datetime.now() - timedelta(hours=hours)
        recent_errors = [err for err in self.error_history if err.timestamp >= cutoff_time]

        category_counts: Dict[str, int] = defaultdict(int)
        component_counts: Dict[str, int] = defaultdict(int)
        for error in recent_errors:
            category_counts[error.category.value] += 1
            component_counts[error.component] += 1

        return {
            "total_errors": len(recent_errors),
            "time_period_hours": hours,
            "by_category": dict(category_counts),
            "by_component": dict(component_counts),
        }

    def _log_error(self, error_context: ErrorContext) -> None:
        log_message = (
            f"[{error_context.component}] {error_context.operation}: "
            f"{error_context.error_type}: {error_context.message}"
        )
        if error_context.severity == ErrorSeverity.HIGH:
            logger.error(log_message)
        else:
            logger.warning(log_message)
