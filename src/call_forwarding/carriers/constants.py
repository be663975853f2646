"""
Carrier catalog constants and enums.

This module contains the carrier families and the dial-code grammar each
family uses for the two forwarding modes.
"""

from enum import Enum

CATALOG_VERSION = "2025.07"

# Placeholder substituted by the dial code resolver.
NUMBER_PLACEHOLDER = "{number}"

DEFAULT_APP_INSTRUCTIONS = (
    "Configure forwarding in your carrier's app: Settings → Calls → Call forwarding"
)


class CarrierFamily(str, Enum):
    """How a carrier exposes forwarding control."""

    GSM = "gsm"
    CDMA_STYLE = "cdma-style"
    APP_MANAGED = "app-managed"


class CodeTemplate(str, Enum):
    """The four template slots a carrier profile may fill."""

    CONDITIONAL_ENABLE = "conditional_enable"
    CONDITIONAL_DISABLE = "conditional_disable"
    UNCONDITIONAL_ENABLE = "unconditional_enable"
    UNCONDITIONAL_DISABLE = "unconditional_disable"


# GSM MMI codes: 61 = forward on no reply (25 second timer), 21 = forward all.
GSM_TEMPLATES: dict[CodeTemplate, str] = {
    CodeTemplate.CONDITIONAL_ENABLE: "**61*{number}**25#",
    CodeTemplate.CONDITIONAL_DISABLE: "##61#",
    CodeTemplate.UNCONDITIONAL_ENABLE: "**21*{number}#",
    CodeTemplate.UNCONDITIONAL_DISABLE: "##21#",
}

# CDMA-style feature codes: *71 no-answer, *72 all calls, *73 cancels both.
CDMA_STYLE_TEMPLATES: dict[CodeTemplate, str] = {
    CodeTemplate.CONDITIONAL_ENABLE: "*71 {number}",
    CodeTemplate.CONDITIONAL_DISABLE: "*73",
    CodeTemplate.UNCONDITIONAL_ENABLE: "*72 {number}",
    CodeTemplate.UNCONDITIONAL_DISABLE: "*73",
}

FAMILY_TEMPLATES: dict[CarrierFamily, dict[CodeTemplate, str]] = {
    CarrierFamily.GSM: GSM_TEMPLATES,
    CarrierFamily.CDMA_STYLE: CDMA_STYLE_TEMPLATES,
    CarrierFamily.APP_MANAGED: {},
}
