"""
Pydantic schemas for carrier reference data.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from call_forwarding.carriers.constants import (
    DEFAULT_APP_INSTRUCTIONS,
    FAMILY_TEMPLATES,
    CarrierFamily,
    CodeTemplate,
)

_FAMILY_ALIASES = {
    "gsm": CarrierFamily.GSM,
    "cdma": CarrierFamily.CDMA_STYLE,
    "cdma-style": CarrierFamily.CDMA_STYLE,
    "cdma_style": CarrierFamily.CDMA_STYLE,
    "app-managed": CarrierFamily.APP_MANAGED,
    "app_managed": CarrierFamily.APP_MANAGED,
    "app-only": CarrierFamily.APP_MANAGED,
    "app_only": CarrierFamily.APP_MANAGED,
}


def normalize_family(value: object) -> object:
    """Map the spellings the backend has used for a family onto CarrierFamily."""
    if isinstance(value, str):
        return _FAMILY_ALIASES.get(value.strip().lower(), value)
    return value


class CarrierProfile(BaseModel):
    """Immutable catalog entry describing one mobile carrier."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Carrier display name")
    family: CarrierFamily = Field(..., description="Dial-code grammar family")
    supports_conditional: bool = Field(
        default=True,
        description="Whether the carrier offers forward-if-unanswered",
    )
    notes: str | None = Field(None, description="Operator-facing carrier notes")
    app_instructions: str | None = Field(
        None, description="Where to configure forwarding for app-managed carriers"
    )
    templates: dict[CodeTemplate, str] = Field(
        default_factory=dict,
        description="Dial-code templates with a {number} placeholder",
    )

    @field_validator("family", mode="before")
    @classmethod
    def coerce_family(cls, v: object) -> object:
        return normalize_family(v)

    @model_validator(mode="after")
    def fill_family_defaults(self) -> "CarrierProfile":
        """Carriers without explicit templates use their family's grammar."""
        if self.family == CarrierFamily.APP_MANAGED:
            if self.templates:
                object.__setattr__(self, "templates", {})
            if not self.app_instructions:
                object.__setattr__(self, "app_instructions", DEFAULT_APP_INSTRUCTIONS)
        elif not self.templates:
            object.__setattr__(self, "templates", dict(FAMILY_TEMPLATES[self.family]))
        return self

    @property
    def is_app_managed(self) -> bool:
        return self.family == CarrierFamily.APP_MANAGED

    def template(self, slot: CodeTemplate) -> str | None:
        return self.templates.get(slot)


class RemoteCarrierEntry(BaseModel):
    """One row of the backend carrier catalog listing."""

    name: str
    family: CarrierFamily
    supports_conditional: bool = True
    notes: str | None = None

    @field_validator("family", mode="before")
    @classmethod
    def coerce_family(cls, v: object) -> object:
        return normalize_family(v)
