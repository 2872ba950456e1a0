"""Routing error kinds.

Every failure the router can surface is a :class:`RoutingError` carrying an
:class:`ErrorKind`, so callers branch on ``exc.kind`` instead of parsing
messages. Caller mistakes map to HTTP 400; everything else to 500.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    INVALID_STRATEGY = "invalid_strategy"
    INVALID_THRESHOLD = "invalid_threshold"
    INVALID_MODEL_FORMAT = "invalid_model_format"
    ESTIMATION_FAILURE = "estimation_failure"
    UPSTREAM_FAILURE = "upstream_failure"


class RoutingError(Exception):
    """Base class for all routing failures."""

    kind: ErrorKind
    http_status: int = 500
    retryable: bool = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.http_status < 500

    def to_dict(self) -> dict[str, str]:
        return {"error": self.message, "kind": self.kind.value}


class InvalidStrategy(RoutingError):
    """Strategy name is empty or not registered on the controller."""

    kind = ErrorKind.INVALID_STRATEGY
    http_status = 400


class InvalidThreshold(RoutingError):
    """Threshold is missing, unparseable, or outside [0, 1]."""

    kind = ErrorKind.INVALID_THRESHOLD
    http_status = 400


class InvalidModelFormat(RoutingError):
    """Model identifier is not of the form ``router-<name>-<threshold>``."""

    kind = ErrorKind.INVALID_MODEL_FORMAT
    http_status = 400


class EstimationFailure(RoutingError):
    """Rating optimizer did not converge, so no sound score exists."""

    kind = ErrorKind.ESTIMATION_FAILURE


class UpstreamFailure(RoutingError):
    """Embedding or completion backend failed or timed out."""

    kind = ErrorKind.UPSTREAM_FAILURE

    def __init__(
        self,
        message: str,
        *,
        retryable: bool = True,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.retryable = retryable
        self.status_code = status_code
