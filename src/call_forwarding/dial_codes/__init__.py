"""
Dial code resolution.

Turns a carrier profile and an assigned number into the literal code to
dial for each forwarding transition, or explains why none exists.
"""

from call_forwarding.dial_codes.constants import (
    ForwardingMode,
    Transition,
    UnavailableReason,
)
from call_forwarding.dial_codes.resolver import (
    format_number_for_family,
    resolve,
    resolve_all,
)
from call_forwarding.dial_codes.schemas import (
    AppManaged,
    DialCode,
    ForwardingCodes,
    LiteralCode,
    Unavailable,
)

__all__ = [
    "AppManaged",
    "DialCode",
    "ForwardingCodes",
    "ForwardingMode",
    "LiteralCode",
    "Transition",
    "Unavailable",
    "UnavailableReason",
    "format_number_for_family",
    "resolve",
    "resolve_all",
]
