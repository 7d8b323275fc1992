"""
Failure envelope for API responses.

A request that does not succeed is answered with an ApiResponse whose
`outcome` tells the front end what kind of notification to show:

- refusal: a deck-building rule said no (fifth copy, second ACE SPEC)
- known_failure: bad input, a missing collection or deck, a catalog outage
- unknown_failure: anything the service did not anticipate

Failed operations are never retried here; the user repeats the action.
"""

from enum import Enum
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """What went wrong, in terms the front end can branch on."""

    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    DECK_RULE_VIOLATION = "deck_rule_violation"
    EXTERNAL_API_ERROR = "external_api_error"
    UNKNOWN = "unknown"


class OutcomeType(str, Enum):
    SUCCESS = "success"
    REFUSAL = "refusal"
    KNOWN_FAILURE = "known_failure"
    UNKNOWN_FAILURE = "unknown_failure"


T = TypeVar("T")


class FailureDetail(BaseModel):
    """Explanation shown to the user in a transient notification."""

    kind: FailureKind
    message: str = Field(..., description="Sentence shown to the user")
    detail: str | None = Field(default=None, description="Technical context, if any")
    suggestion: str | None = Field(default=None, description="What the user can do next")


class ApiResponse(BaseModel, Generic[T]):
    """Envelope for every response that is not a plain success payload."""

    outcome: OutcomeType
    data: T | None = None
    failure: FailureDetail | None = None

    @classmethod
    def from_failure(
        cls,
        outcome: OutcomeType,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ) -> "ApiResponse[Any]":
        return cls(
            outcome=outcome,
            failure=FailureDetail(kind=kind, message=message, detail=detail, suggestion=suggestion),
        )

    @classmethod
    def unknown_failure(cls, detail: str | None = None) -> "ApiResponse[Any]":
        return cls.from_failure(
            OutcomeType.UNKNOWN_FAILURE,
            FailureKind.UNKNOWN,
            "Something went wrong. Please try again.",
            detail=detail,
            suggestion="If this keeps happening, please report it.",
        )


class ServiceError(Exception):
    """
    Base for failures the service can explain.

    Subclasses choose the outcome reported to the client and the HTTP
    status the exception handler answers with.
    """

    outcome: ClassVar[OutcomeType] = OutcomeType.KNOWN_FAILURE

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ApiResponse[Any]:
        return ApiResponse.from_failure(
            self.outcome, self.kind, self.message, self.detail, self.suggestion
        )


class KnownError(ServiceError):
    """Bad input, a missing row or an unreachable catalog. Defaults to HTTP 400."""


class RefusalError(ServiceError):
    """A collecting or deck-building rule forbids the operation (HTTP 409)."""

    outcome = OutcomeType.REFUSAL

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ):
        super().__init__(kind, message, detail, suggestion, status_code=409)


class NotFoundError(KnownError):
    """Raised when a user-scoped row (collection, deck, entry) does not exist."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=f"{resource} '{identifier}' not found",
            status_code=404,
        )
