"""
Dial code resolver.

Pure functions turning a carrier profile, an assigned number and a requested
transition into the exact code an operator dials. This is the only place a
destination number is embedded into a carrier code.
"""

from call_forwarding.carriers.constants import NUMBER_PLACEHOLDER, CarrierFamily
from call_forwarding.carriers.schemas import CarrierProfile
from call_forwarding.dial_codes.constants import (
    UNAVAILABLE_MESSAGES,
    ForwardingMode,
    Transition,
    UnavailableReason,
)
from call_forwarding.dial_codes.schemas import (
    AppManaged,
    DialCode,
    ForwardingCodes,
    LiteralCode,
    Unavailable,
)
from call_forwarding.phone_numbers.formatting import (
    is_default_region,
    to_e164,
    to_national_digits,
)
from call_forwarding.phone_numbers.schemas import AssignedNumber


def format_number_for_family(number: str, family: CarrierFamily) -> str:
    """
    Render a destination number in the grammar a carrier family expects.

    GSM codes embed the full international number between the `*` and `#`
    markers; CDMA-style feature codes take the national number after a space.
    CDMA-style carriers fall back to the international number for
    destinations outside the default region.
    """
    if family == CarrierFamily.CDMA_STYLE and is_default_region(number):
        return to_national_digits(number)
    return to_e164(number)


def _unavailable(reason: UnavailableReason, profile: CarrierProfile) -> Unavailable:
    return Unavailable(
        reason=reason,
        message=UNAVAILABLE_MESSAGES[reason].format(carrier=profile.name),
    )


def resolve(
    profile: CarrierProfile,
    number: AssignedNumber | None,
    transition: Transition,
) -> DialCode:
    """
    Resolve the code for one transition.

    Args:
        profile: Catalog entry for the target's carrier
        number: The target's assigned number, None when unassigned
        transition: The requested forwarding change

    Returns:
        LiteralCode, AppManaged or Unavailable
    """
    if number is None or not number.has_number:
        return _unavailable(UnavailableReason.NO_NUMBER, profile)

    if profile.family == CarrierFamily.APP_MANAGED:
        return AppManaged(instructions=profile.app_instructions)

    if transition.mode == ForwardingMode.CONDITIONAL and not profile.supports_conditional:
        return _unavailable(UnavailableReason.MODE_NOT_SUPPORTED, profile)

    template = profile.template(transition.template_slot)
    if not template:
        return _unavailable(UnavailableReason.NO_TEMPLATE, profile)

    destination = format_number_for_family(number.number_value, profile.family)
    return LiteralCode(code=template.replace(NUMBER_PLACEHOLDER, destination))


def resolve_all(profile: CarrierProfile, number: AssignedNumber | None) -> ForwardingCodes:
    """Resolve all four transitions for a carrier and number."""
    return ForwardingCodes(
        **{
            transition.template_slot.value: resolve(profile, number, transition)
            for transition in Transition
        }
    )
