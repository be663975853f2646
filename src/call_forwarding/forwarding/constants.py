"""
Call forwarding constants and enums.

This module contains the backend endpoints, workflow enums and the
operator-facing copy used across the forwarding workflow.
"""

from enum import Enum


class ForwardingEndpoint(str, Enum):
    """Backend endpoints consumed by the forwarding workflow."""

    STATE = "/call-forwarding/state"
    CARRIERS = "/call-forwarding/carriers"
    ASSIGNED_NUMBER = "/phone-numbers/assigned"


class UserRole(str, Enum):
    """Who a forwarding record belongs to."""

    PROPERTY_MANAGER = "property_manager"
    REALTOR = "realtor"


class TargetKind(str, Enum):
    """Whose forwarding the operator is managing."""

    SELF = "self"
    REALTOR = "realtor"


class ConfirmationStatus(str, Enum):
    """What the operator asserted with a patch."""

    CARRIER_SELECTED = "carrier_selected"
    CONFIRMED = "confirmed"
    FAILURE_REPORTED = "failure_reported"
    NOTES_UPDATED = "notes_updated"


class PanelStage(str, Enum):
    """Top-level state of the forwarding panel."""

    LOADING = "loading"
    NOT_ASSIGNED = "not_assigned"
    CARRIER_SELECTION = "carrier_selection"
    READY = "ready"


class StepKind(str, Enum):
    """What the operator is offered for one transition."""

    LITERAL = "literal"
    APP_MANAGED = "app_managed"
    UNAVAILABLE = "unavailable"
    BLOCKED = "blocked"


class BlockReason(str, Enum):
    """Preconditions that stop a transition before a code is resolved."""

    NO_NUMBER = "no_number"
    CARRIER_UNSET = "carrier_unset"


class WorkflowAction(str, Enum):
    """Follow-up actions offered after a literal code is shown."""

    CONFIRM_SUCCESS = "confirm_success"
    REPORT_ISSUE = "report_issue"


class ForwardingErrorCode(str, Enum):
    """Stable error codes surfaced to the dashboard."""

    NO_NUMBER_ASSIGNED = "NO_NUMBER_ASSIGNED"
    CARRIER_UNSET = "CARRIER_UNSET"
    UNKNOWN_CARRIER = "UNKNOWN_CARRIER"
    UNSUPPORTED_TRANSITION = "UNSUPPORTED_TRANSITION"
    APP_MANAGED_TRANSITION = "APP_MANAGED_TRANSITION"
    INVALID_ISSUE_REPORT = "INVALID_ISSUE_REPORT"
    RATE_LIMITED = "RATE_LIMITED"
    VALIDATION_REJECTED = "VALIDATION_REJECTED"
    SESSION_EXPIRED = "SESSION_EXPIRED"
    TRANSIENT_NETWORK_FAILURE = "TRANSIENT_NETWORK_FAILURE"
    STATE_REFRESH_FAILED = "STATE_REFRESH_FAILED"


NO_NUMBER_MESSAGES = {
    UserRole.REALTOR: (
        "No phone number assigned to you. Please ask your Property manager "
        "to assign you a number."
    ),
    UserRole.PROPERTY_MANAGER: (
        "This user doesn't have a phone number assigned yet. Please assign a "
        "phone number first to enable call forwarding."
    ),
}

CARRIER_SELECTION_MESSAGE = (
    "We need to know your carrier to provide the correct forwarding codes. "
    "Each carrier uses different dial codes."
)

DIAL_INSTRUCTIONS = (
    "This code will open in your dialer. Tap CALL, wait for 3 beeps, then "
    "return here to confirm."
)

GENERIC_FAILURE_MESSAGE = (
    "We couldn't reach the forwarding service. Please try again in a moment."
)

RATE_LIMIT_COOLDOWN_MESSAGE = (
    "Too many forwarding changes in a short time. Please wait {seconds} seconds "
    "before trying again."
)

REFRESH_FAILED_MESSAGE = (
    "Your update was saved, but the latest forwarding state could not be "
    "loaded. Reload before confirming again."
)
