"""
Call forwarding workflow.

This package holds the forwarding state record, the synchronizer that keeps
it consistent with the backend, and the controller that walks the operator
through dialing and confirming carrier codes.
"""

from call_forwarding.forwarding.client import ForwardingAPIClient
from call_forwarding.forwarding.controller import ForwardingController
from call_forwarding.forwarding.exceptions import (
    AppManagedTransition,
    CarrierUnsetError,
    ForwardingAPIError,
    ForwardingError,
    NoNumberAssignedError,
    RateLimitedError,
    TransientNetworkFailure,
    UnsupportedTransitionError,
)
from call_forwarding.forwarding.schemas import (
    ForwardingStatePatch,
    ForwardingStateRecord,
    ForwardingTarget,
    NotAssigned,
)
from call_forwarding.forwarding.synchronizer import StateSynchronizer

__all__ = [
    "AppManagedTransition",
    "CarrierUnsetError",
    "ForwardingAPIClient",
    "ForwardingAPIError",
    "ForwardingController",
    "ForwardingError",
    "ForwardingStatePatch",
    "ForwardingStateRecord",
    "ForwardingTarget",
    "NoNumberAssignedError",
    "NotAssigned",
    "RateLimitedError",
    "StateSynchronizer",
    "TransientNetworkFailure",
    "UnsupportedTransitionError",
]
