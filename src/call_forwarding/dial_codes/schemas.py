"""
Pydantic schemas for resolved dial codes.

A resolved code is one of three shapes, discriminated by `kind`:
LiteralCode (dial this string), AppManaged (use the carrier's app) or
Unavailable (nothing can be offered).
"""

from typing import Annotated, Literal
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field, computed_field

from call_forwarding.dial_codes.constants import Transition, UnavailableReason


class LiteralCode(BaseModel):
    """A dial string with the destination number already embedded."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["literal"] = "literal"
    code: str = Field(..., min_length=1)

    @computed_field
    @property
    def dial_uri(self) -> str:
        """tel: URI that opens the handset dialer with the code prefilled."""
        return "tel:" + quote(self.code.replace(" ", ""), safe="+")


class AppManaged(BaseModel):
    """No dial-code grammar exists; the operator uses the carrier's app."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["app_managed"] = "app_managed"
    instructions: str


class Unavailable(BaseModel):
    """No code can be offered for this transition."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["unavailable"] = "unavailable"
    reason: UnavailableReason
    message: str


DialCode = Annotated[
    LiteralCode | AppManaged | Unavailable, Field(discriminator="kind")
]


class ForwardingCodes(BaseModel):
    """All four codes for one carrier and number. Derived, never persisted."""

    model_config = ConfigDict(frozen=True)

    conditional_enable: DialCode
    conditional_disable: DialCode
    unconditional_enable: DialCode
    unconditional_disable: DialCode

    def for_transition(self, transition: Transition) -> LiteralCode | AppManaged | Unavailable:
        return getattr(self, transition.template_slot.value)
