"""Error Hierarchy — typed, categorized exceptions for every bridge failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - UnknownToolError is the only error the dispatcher raises itself
    - Handlers convert ToolValidationError / PrlctlExecutionError (and, as
      InternalToolError, anything unexpected) into error-shaped
      ToolResults; only UnknownToolError reaches the protocol surface
    - to_response() produces the REST envelope used by the HTTP surface

Design Decisions:
    - Single hierarchy with BridgeError base: one FastAPI handler catches all
    - ErrorContext as dataclass: observability without coupling to logging
"""

from dataclasses import dataclass, field
from enum import Enum
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    PROTOCOL = "protocol"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    EXTERNAL_PROCESS = "external_process"
    TIMEOUT = "timeout"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    tool_name: str | None = None
    argv: list[str] | None = None


@dataclass(frozen=True)
class FieldViolation:
    """One failed constraint on one tool argument."""
    field: str
    message: str


class BridgeError(Exception):
    """Base exception for all bridge errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {"tool_name": self.context.tool_name},
            }
        }


# ─── Client / Protocol Errors (400-level) ───────────────────────

class ToolValidationError(BridgeError):
    """Tool arguments failed one or more named constraints."""
    def __init__(
        self,
        violations: list[FieldViolation],
        context: ErrorContext | None = None,
    ):
        details = "; ".join(f"{v.field}: {v.message}" for v in violations)
        super().__init__(
            f"Invalid arguments: {details}" if details else "Invalid arguments",
            "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.violations = violations

    @property
    def fields(self) -> list[str]:
        return [v.field for v in self.violations]


class UnknownToolError(BridgeError):
    """A tool name was dispatched that was never registered."""
    def __init__(self, tool_name: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.tool_name = tool_name
        super().__init__(
            f"Unknown tool: {tool_name}",
            "UNKNOWN_TOOL", ErrorCategory.PROTOCOL,
            ErrorSeverity.ERROR, ctx, 404,
        )
        self.tool_name = tool_name


class ResourceNotFoundError(BridgeError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


# ─── Infrastructure Errors (500-level) ──────────────────────────

class InternalToolError(BridgeError):
    """A handler failed in a way no other error class describes."""
    def __init__(self, tool_name: str, cause: BaseException):
        super().__init__(
            f"Unexpected {type(cause).__name__} while running {tool_name}: {cause}",
            "INTERNAL_ERROR", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, ErrorContext(tool_name=tool_name), 500,
        )
        self.cause = cause


class PrlctlExecutionError(BridgeError):
    """prlctl exited non-zero, could not be spawned, or timed out."""
    def __init__(
        self,
        message: str,
        *,
        exit_code: int | None = None,
        stdout: str = "",
        stderr: str = "",
        code: str = "PRLCTL_FAILED",
        category: ErrorCategory = ErrorCategory.EXTERNAL_PROCESS,
        http_status: int = 502,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, category, ErrorSeverity.ERROR, context, http_status,
        )
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr


class CommandTimeoutError(PrlctlExecutionError):
    """prlctl did not finish within the configured timeout."""
    def __init__(
        self, timeout_seconds: float, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"prlctl command timed out after {timeout_seconds:g}s",
            code="PRLCTL_TIMEOUT",
            category=ErrorCategory.TIMEOUT,
            http_status=504,
            context=context,
        )
        self.timeout_seconds = timeout_seconds


class DatabaseError(BridgeError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
