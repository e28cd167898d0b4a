"""Unified error model for actiongen.

Two families live here. Request-time errors never escape an action: they
are converted into the ``{"data", "error"}`` envelope every action
returns. Generation-time errors are fatal and raised before any artifact
is produced.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Mapping, Optional, Sequence, TypedDict, Union

INTERNAL_ERROR_MESSAGE = "Internal server error"
VALIDATION_ERROR_MESSAGE = "Validation error"
MALFORMED_JSON_MESSAGE = "Malformed JSON in request body"


class ErrorCode(str, Enum):
    """Error codes produced by the action wrapper itself."""

    INPUT_VALIDATION_ERROR = "INPUT_VALIDATION_ERROR"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


class IssuePayload(TypedDict):
    path: List[Union[str, int]]
    message: str
    code: str


class _ErrorFields(TypedDict):
    message: str
    code: str


class ErrorEnvelope(_ErrorFields, total=False):
    """Wire form of an error: ``message``, ``code`` and optionally ``issue``."""

    issue: IssuePayload


class ResultEnvelope(TypedDict):
    """Wire form of every action response; exactly one field is non-null."""

    data: Any
    error: Optional[ErrorEnvelope]


@dataclass(frozen=True)
class ValidationIssue:
    """A single schema failure: where it happened and why."""

    path: List[Union[str, int]] = field(default_factory=list)
    message: str = VALIDATION_ERROR_MESSAGE
    code: str = "invalid"

    @classmethod
    def from_pydantic(cls, error: Mapping[str, Any]) -> "ValidationIssue":
        loc: Sequence[Union[str, int]] = error.get("loc") or ()
        code = str(error.get("type") or "invalid")
        if code == "json_invalid":
            message = MALFORMED_JSON_MESSAGE
        else:
            message = str(error.get("msg") or VALIDATION_ERROR_MESSAGE)
        return cls(path=list(loc), message=message, code=code)

    def to_dict(self) -> IssuePayload:
        return {"path": list(self.path), "message": self.message, "code": self.code}


class ActionError(Exception):
    """Typed application error a handler raises on purpose.

    Its ``message`` and ``code`` reach the caller unchanged; any other
    exception is reported as a generic internal error.
    """

    def __init__(
        self,
        message: str,
        *,
        code: str = ErrorCode.INTERNAL_SERVER_ERROR.value,
        issue: Optional[ValidationIssue] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code.value if isinstance(code, ErrorCode) else str(code)
        self.issue = issue

    def to_dict(self) -> ErrorEnvelope:
        payload: ErrorEnvelope = {"message": self.message, "code": self.code}
        if self.issue is not None:
            payload["issue"] = self.issue.to_dict()
        return payload

    def __repr__(self) -> str:
        return f"ActionError(message={self.message!r}, code={self.code!r})"


def internal_error() -> ActionError:
    """The sanitised error reported for every unrecognised failure."""
    return ActionError(INTERNAL_ERROR_MESSAGE, code=ErrorCode.INTERNAL_SERVER_ERROR)


def validation_error(issue: Optional[ValidationIssue]) -> ActionError:
    message = issue.message if issue is not None and issue.message else VALIDATION_ERROR_MESSAGE
    return ActionError(message, code=ErrorCode.INPUT_VALIDATION_ERROR, issue=issue)


def success_envelope(data: Any) -> ResultEnvelope:
    return {"data": data, "error": None}


def failure_envelope(error: ActionError) -> ResultEnvelope:
    return {"data": None, "error": error.to_dict()}


@dataclass
class ActionResult:
    """Client-side view of an action response envelope."""

    data: Any = None
    error: Optional[ActionError] = None
    status: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def from_envelope(cls, payload: Mapping[str, Any], *, status: Optional[int] = None) -> "ActionResult":
        raw_error = payload.get("error")
        if raw_error is None:
            return cls(data=payload.get("data"), error=None, status=status)
        issue = None
        raw_issue = raw_error.get("issue")
        if isinstance(raw_issue, Mapping):
            issue = ValidationIssue(
                path=list(raw_issue.get("path") or []),
                message=str(raw_issue.get("message") or VALIDATION_ERROR_MESSAGE),
                code=str(raw_issue.get("code") or "invalid"),
            )
        error = ActionError(
            str(raw_error.get("message") or INTERNAL_ERROR_MESSAGE),
            code=str(raw_error.get("code") or ErrorCode.INTERNAL_SERVER_ERROR.value),
            issue=issue,
        )
        return cls(data=None, error=error, status=status)

    def unwrap(self) -> Any:
        """Return ``data`` or raise the envelope's :class:`ActionError`."""
        if self.error is not None:
            raise self.error
        return self.data


class ConfigurationError(Exception):
    """Base class for fatal generation/configuration errors."""

    code: str = "CONFIGURATION_ERROR"
    hint: Optional[str] = None

    def __init__(self, message: str, *, hint: Optional[str] = None, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        if hint is not None:
            self.hint = hint
        if code is not None:
            self.code = code

    def format(self) -> str:
        if self.hint:
            return f"{self.message} (Hint: {self.hint})"
        return self.message


class UnsupportedAdapterError(ConfigurationError):
    """Raised when an adapter id is not one of the supported targets."""

    code = "UNSUPPORTED_ADAPTER"

    def __init__(self, adapter: object, *, hint: Optional[str] = None) -> None:
        value = getattr(adapter, "value", adapter)
        super().__init__(f"Unsupported adapter: {value}", hint=hint)
        self.adapter = value


class ReservedBasePathError(ConfigurationError):
    """Raised when the configured base path collides with a host-owned route."""

    code = "RESERVED_BASE_PATH"


class InvalidActionNameError(ConfigurationError):
    """Raised when an action name cannot be used as a URL path segment."""

    code = "INVALID_ACTION_NAME"


class ActionsNotFoundError(ConfigurationError):
    """Raised when the actions module or its action map cannot be found."""

    code = "ACTIONS_NOT_FOUND"


__all__ = [
    "INTERNAL_ERROR_MESSAGE",
    "VALIDATION_ERROR_MESSAGE",
    "MALFORMED_JSON_MESSAGE",
    "ErrorEnvelope",
    "IssuePayload",
    "ResultEnvelope",
    "ErrorCode",
    "ValidationIssue",
    "ActionError",
    "ActionResult",
    "internal_error",
    "validation_error",
    "success_envelope",
    "failure_envelope",
    "ConfigurationError",
    "UnsupportedAdapterError",
    "ReservedBasePathError",
    "InvalidActionNameError",
    "ActionsNotFoundError",
]
