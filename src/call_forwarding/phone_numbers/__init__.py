"""
Assigned phone numbers.

Read-only view of the number the assignment service has bound to a user,
plus the normalisation helpers used wherever a number is rendered.
"""

from call_forwarding.phone_numbers.formatting import (
    is_default_region,
    to_display,
    to_e164,
    to_national_digits,
)
from call_forwarding.phone_numbers.schemas import AssignedNumber

__all__ = [
    "AssignedNumber",
    "is_default_region",
    "to_display",
    "to_e164",
    "to_national_digits",
]
