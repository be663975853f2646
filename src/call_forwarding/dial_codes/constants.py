"""
Dial code constants and enums.
"""

from enum import Enum

from call_forwarding.carriers.constants import CodeTemplate


class ForwardingMode(str, Enum):
    """The two independent forwarding axes."""

    CONDITIONAL = "conditional"
    UNCONDITIONAL = "unconditional"


class Transition(str, Enum):
    """A requested change on one forwarding axis."""

    ENABLE_CONDITIONAL = "enable_conditional"
    DISABLE_CONDITIONAL = "disable_conditional"
    ENABLE_UNCONDITIONAL = "enable_unconditional"
    DISABLE_UNCONDITIONAL = "disable_unconditional"

    @property
    def mode(self) -> ForwardingMode:
        if self in (Transition.ENABLE_CONDITIONAL, Transition.DISABLE_CONDITIONAL):
            return ForwardingMode.CONDITIONAL
        return ForwardingMode.UNCONDITIONAL

    @property
    def enables(self) -> bool:
        """The boolean value the axis holds once this transition is confirmed."""
        return self in (Transition.ENABLE_CONDITIONAL, Transition.ENABLE_UNCONDITIONAL)

    @property
    def template_slot(self) -> CodeTemplate:
        return _TEMPLATE_SLOTS[self]

    @classmethod
    def for_mode(cls, mode: ForwardingMode, enable: bool) -> "Transition":
        if mode == ForwardingMode.CONDITIONAL:
            return cls.ENABLE_CONDITIONAL if enable else cls.DISABLE_CONDITIONAL
        return cls.ENABLE_UNCONDITIONAL if enable else cls.DISABLE_UNCONDITIONAL


_TEMPLATE_SLOTS = {
    Transition.ENABLE_CONDITIONAL: CodeTemplate.CONDITIONAL_ENABLE,
    Transition.DISABLE_CONDITIONAL: CodeTemplate.CONDITIONAL_DISABLE,
    Transition.ENABLE_UNCONDITIONAL: CodeTemplate.UNCONDITIONAL_ENABLE,
    Transition.DISABLE_UNCONDITIONAL: CodeTemplate.UNCONDITIONAL_DISABLE,
}


class UnavailableReason(str, Enum):
    """Why no dial code can be offered."""

    NO_NUMBER = "no_number"
    MODE_NOT_SUPPORTED = "mode_not_supported"
    NO_TEMPLATE = "no_template"


UNAVAILABLE_MESSAGES = {
    UnavailableReason.NO_NUMBER: "Assign a phone number before setting up forwarding.",
    UnavailableReason.MODE_NOT_SUPPORTED: (
        "{carrier} doesn't support 25-second forwarding. Only unconditional "
        "forwarding (forward all calls) is available."
    ),
    UnavailableReason.NO_TEMPLATE: "Code unavailable for {carrier}.",
}
