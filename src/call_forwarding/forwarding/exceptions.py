"""Exception classes for the call forwarding workflow."""

from typing import Any

from call_forwarding.dial_codes.constants import Transition
from call_forwarding.forwarding.constants import (
    GENERIC_FAILURE_MESSAGE,
    RATE_LIMIT_COOLDOWN_MESSAGE,
    REFRESH_FAILED_MESSAGE,
    ForwardingErrorCode,
)


class ForwardingError(Exception):
    """Base exception for everything the forwarding workflow surfaces.

    Carries the carrier and transition being attempted so support can follow
    up on what the operator saw.
    """

    error_code: ForwardingErrorCode = ForwardingErrorCode.TRANSIENT_NETWORK_FAILURE

    def __init__(
        self,
        message: str,
        carrier: str | None = None,
        transition: Transition | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.carrier = carrier
        self.transition = transition

    def with_context(
        self, carrier: str | None = None, transition: Transition | None = None
    ) -> "ForwardingError":
        """Attach carrier/transition context if not already set."""
        if self.carrier is None:
            self.carrier = carrier
        if self.transition is None:
            self.transition = transition
        return self

    def __str__(self) -> str:
        context = [
            value
            for value in (self.carrier, self.transition.value if self.transition else None)
            if value
        ]
        if context:
            return f"{self.message} ({', '.join(context)})"
        return self.message


class NoNumberAssignedError(ForwardingError):
    """The target has no assigned number; forwarding cannot be expressed."""

    error_code = ForwardingErrorCode.NO_NUMBER_ASSIGNED


class CarrierUnsetError(ForwardingError):
    """The carrier must be selected before any forwarding toggle."""

    error_code = ForwardingErrorCode.CARRIER_UNSET

    def __init__(
        self,
        message: str = "Select a mobile carrier before changing forwarding.",
        carrier: str | None = None,
        transition: Transition | None = None,
    ) -> None:
        super().__init__(message, carrier=carrier, transition=transition)


class UnknownCarrierError(ForwardingError):
    """The carrier is not in the catalog."""

    error_code = ForwardingErrorCode.UNKNOWN_CARRIER


class UnsupportedTransitionError(ForwardingError):
    """The carrier offers no code for this transition. Not retryable."""

    error_code = ForwardingErrorCode.UNSUPPORTED_TRANSITION


class AppManagedTransition(ForwardingError):
    """Not a failure: the transition is completed in the carrier's own app,
    so there is nothing to confirm here."""

    error_code = ForwardingErrorCode.APP_MANAGED_TRANSITION


class InvalidIssueReportError(ForwardingError, ValueError):
    """An issue report was submitted without a reason."""

    error_code = ForwardingErrorCode.INVALID_ISSUE_REPORT


class ForwardingAPIError(ForwardingError):
    """Base exception for failures talking to the backend."""

    def __init__(
        self,
        message: str = GENERIC_FAILURE_MESSAGE,
        status_code: int | None = None,
        response_data: dict[str, Any] | None = None,
        carrier: str | None = None,
        transition: Transition | None = None,
    ) -> None:
        super().__init__(message, carrier=carrier, transition=transition)
        self.status_code = status_code
        self.response_data = response_data


class RateLimitedError(ForwardingAPIError):
    """The backend throttled forwarding toggles (429). Never retried."""

    error_code = ForwardingErrorCode.RATE_LIMITED

    def __init__(
        self,
        message: str = "Too Many Requests",
        retry_after: int | None = None,
        default_cooldown: int = 60,
        response_data: dict[str, Any] | None = None,
        carrier: str | None = None,
        transition: Transition | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=429,
            response_data=response_data,
            carrier=carrier,
            transition=transition,
        )
        self.retry_after = retry_after
        self.cooldown_message = RATE_LIMIT_COOLDOWN_MESSAGE.format(
            seconds=retry_after if retry_after is not None else default_cooldown
        )


class ValidationRejectedError(ForwardingAPIError):
    """The backend rejected the update as invalid (4xx)."""

    error_code = ForwardingErrorCode.VALIDATION_REJECTED


class SessionExpiredError(ForwardingAPIError):
    """The operator's token is no longer accepted (401)."""

    error_code = ForwardingErrorCode.SESSION_EXPIRED

    def __init__(
        self,
        message: str = "Token expired. Please sign in again.",
        response_data: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, status_code=401, response_data=response_data)


class TransientNetworkFailure(ForwardingAPIError):
    """Connection problems, timeouts, 5xx or unreadable responses.

    The operator may retry manually; nothing retries automatically because a
    patch may already have been applied server-side.
    """

    error_code = ForwardingErrorCode.TRANSIENT_NETWORK_FAILURE


class StateRefreshError(TransientNetworkFailure):
    """The write succeeded but the authoritative record could not be re-read."""

    error_code = ForwardingErrorCode.STATE_REFRESH_FAILED
    write_applied = True

    def __init__(
        self,
        message: str = REFRESH_FAILED_MESSAGE,
        carrier: str | None = None,
        transition: Transition | None = None,
    ) -> None:
        super().__init__(message=message, carrier=carrier, transition=transition)
