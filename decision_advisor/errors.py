"""Error types raised along the analysis pipeline."""

from enum import Enum
from typing import List, Optional


class ValidationError(ValueError):
    """The inbound scenario is malformed. Reported to the caller as a 400."""


class ModelErrorKind(str, Enum):
    UNAUTHORIZED = "unauthorized"
    RATE_LIMITED = "rate_limited"
    TIMEOUT = "timeout"
    OTHER = "other"


class ModelInvocationError(Exception):
    """The external model call failed.

    Attributes:
        kind: Which kind of failure, used to pick the HTTP status.
        message: The underlying error message, kept verbatim.
    """

    def __init__(self, kind: ModelErrorKind, message: str) -> None:
        self.kind = kind
        self.message = message
        super().__init__(message)


class MalformedModelOutput(Exception):
    """The model answered, but its text could not be parsed as a JSON object.

    Attributes:
        stage: Which step failed ("json_parse" or "schema").
        errors: Human-readable error descriptions.
        raw_response: The original text returned by the model.
    """

    def __init__(
        self,
        stage: str,
        errors: List[str],
        raw_response: Optional[str],
    ) -> None:
        self.stage = stage
        self.errors = errors
        self.raw_response = raw_response
        super().__init__(
            f"Model output could not be parsed at stage '{stage}': " + "; ".join(errors)
        )
