"""
Built-in carrier reference list.

Bump CATALOG_VERSION in constants.py whenever an entry changes so support can
tell which list an operator was looking at.
"""

from call_forwarding.carriers.constants import CarrierFamily, CodeTemplate

CARRIERS: list[dict] = [
    {
        "name": "AT&T",
        "family": CarrierFamily.GSM,
        "supports_conditional": True,
        "notes": "Wait for the confirmation tone before hanging up.",
    },
    {
        "name": "T-Mobile",
        "family": CarrierFamily.GSM,
        "supports_conditional": True,
        "notes": "A text message confirms the change within a minute.",
    },
    {
        "name": "Verizon",
        "family": CarrierFamily.CDMA_STYLE,
        "supports_conditional": True,
        "notes": "*73 turns off both missed-call and all-call forwarding.",
    },
    {
        "name": "US Cellular",
        "family": CarrierFamily.CDMA_STYLE,
        "supports_conditional": True,
        "notes": "*73 turns off both missed-call and all-call forwarding.",
    },
    {
        "name": "Sprint",
        "family": CarrierFamily.GSM,
        "supports_conditional": True,
        "notes": "Sprint lines have moved to the T-Mobile network and use its codes.",
    },
    {
        "name": "Google Fi",
        "family": CarrierFamily.APP_MANAGED,
        "supports_conditional": False,
        "notes": "Dial codes are ignored on Fi; use the Google Fi app.",
        "app_instructions": (
            "Configure forwarding in the Google Fi app: Settings → Calls → Call forwarding"
        ),
    },
    {
        "name": "Mint Mobile",
        "family": CarrierFamily.GSM,
        "supports_conditional": True,
        "notes": "Runs on the T-Mobile network.",
    },
    {
        "name": "Metro by T-Mobile",
        "family": CarrierFamily.GSM,
        "supports_conditional": True,
        "notes": None,
    },
    {
        "name": "Cricket Wireless",
        "family": CarrierFamily.GSM,
        "supports_conditional": True,
        "notes": "Registers forwarding with single-star codes.",
        "templates": {
            CodeTemplate.CONDITIONAL_ENABLE: "*61*{number}#",
            CodeTemplate.CONDITIONAL_DISABLE: "#61#",
            CodeTemplate.UNCONDITIONAL_ENABLE: "*21*{number}#",
            CodeTemplate.UNCONDITIONAL_DISABLE: "#21#",
        },
    },
    {
        "name": "Boost Mobile",
        "family": CarrierFamily.GSM,
        "supports_conditional": True,
        "notes": None,
    },
    {
        "name": "Consumer Cellular",
        "family": CarrierFamily.GSM,
        "supports_conditional": True,
        "notes": None,
    },
    {
        "name": "Visible",
        "family": CarrierFamily.CDMA_STYLE,
        "supports_conditional": False,
        "notes": "Only forward-all (*72) is offered on Visible plans.",
    },
    {
        "name": "Xfinity Mobile",
        "family": CarrierFamily.CDMA_STYLE,
        "supports_conditional": True,
        "notes": "Runs on the Verizon network.",
    },
    {
        "name": "Spectrum Mobile",
        "family": CarrierFamily.CDMA_STYLE,
        "supports_conditional": True,
        "notes": "Runs on the Verizon network.",
    },
    {
        "name": "Total Wireless",
        "family": CarrierFamily.CDMA_STYLE,
        "supports_conditional": True,
        "notes": None,
    },
    {
        "name": "Straight Talk",
        "family": CarrierFamily.GSM,
        "supports_conditional": False,
        "notes": "No-answer forwarding depends on the SIM; only forward-all is reliable.",
    },
    {
        "name": "Tracfone",
        "family": CarrierFamily.GSM,
        "supports_conditional": False,
        "notes": None,
    },
    {
        "name": "Page Plus",
        "family": CarrierFamily.CDMA_STYLE,
        "supports_conditional": False,
        "notes": None,
    },
    {
        "name": "Tello",
        "family": CarrierFamily.GSM,
        "supports_conditional": True,
        "notes": None,
    },
    {
        "name": "Ting",
        "family": CarrierFamily.GSM,
        "supports_conditional": True,
        "notes": None,
    },
    {
        "name": "Republic Wireless",
        "family": CarrierFamily.APP_MANAGED,
        "supports_conditional": False,
        "notes": "Forwarding is set in the Republic Anywhere app.",
        "app_instructions": (
            "Configure forwarding in the Republic Anywhere app: Settings → Call forwarding"
        ),
    },
]
