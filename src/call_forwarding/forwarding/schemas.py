"""
Call forwarding Pydantic schemas for request and response models.

This module contains the forwarding state record as the backend stores it,
the partial update sent to the backend, and the operator-facing views built
on top of them.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from call_forwarding.carriers.schemas import CarrierProfile
from call_forwarding.dial_codes.constants import ForwardingMode, Transition
from call_forwarding.forwarding.constants import (
    ConfirmationStatus,
    ForwardingErrorCode,
    PanelStage,
    StepKind,
    TargetKind,
    UserRole,
    WorkflowAction,
)


# Core domain models
class ForwardingTarget(BaseModel):
    """Whose forwarding is being managed: the operator or one of their realtors."""

    model_config = ConfigDict(frozen=True)

    kind: TargetKind = TargetKind.SELF
    realtor_id: str | None = None

    @model_validator(mode="after")
    def check_realtor_id(self) -> "ForwardingTarget":
        if self.kind == TargetKind.REALTOR and not self.realtor_id:
            raise ValueError("realtor targets need a realtor_id")
        if self.kind == TargetKind.SELF and self.realtor_id is not None:
            raise ValueError("self target cannot carry a realtor_id")
        return self

    @classmethod
    def parse(cls, key: str | None) -> "ForwardingTarget":
        """Parse the dashboard's target keys: "self" or "realtor-<id>"."""
        if not key or key == TargetKind.SELF.value:
            return cls()
        prefix = f"{TargetKind.REALTOR.value}-"
        if key.startswith(prefix) and len(key) > len(prefix):
            return cls(kind=TargetKind.REALTOR, realtor_id=key[len(prefix):])
        raise ValueError(f"Unrecognised forwarding target: {key!r}")

    @property
    def key(self) -> str:
        if self.kind == TargetKind.REALTOR:
            return f"{TargetKind.REALTOR.value}-{self.realtor_id}"
        return TargetKind.SELF.value

    def query_params(self) -> dict[str, str]:
        if self.kind == TargetKind.REALTOR:
            return {"realtor_id": self.realtor_id}
        return {}


class ForwardingStateRecord(BaseModel):
    """The persisted forwarding record for one managed user.

    Reflects what the operator has asserted, never a verified carrier-side
    fact. Only the synchronizer's patch changes it.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    carrier: str | None = Field(None, description="Selected carrier name")
    conditional_forwarding_enabled: bool = Field(
        default=False,
        alias="conditional_enabled",
        description="Forward-if-unanswered asserted on",
    )
    unconditional_forwarding_enabled: bool = Field(
        default=False,
        alias="unconditional_enabled",
        description="Forward-all asserted on",
    )
    last_unconditional_change_at: datetime | None = Field(
        None, description="When the unconditional axis last changed"
    )
    last_failure_reason: str | None = Field(
        None, alias="failure_reason", description="Last carrier issue reported"
    )
    operator_notes: str | None = Field(None, alias="notes", description="Operator notes")

    # Display metadata echoed by the backend
    assigned_number: str | None = None
    user_id: str | None = None
    user_type: UserRole | None = None
    message: str | None = None

    @field_validator("carrier", "last_failure_reason", "operator_notes", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("user_type", mode="before")
    @classmethod
    def known_role_or_none(cls, v: Any) -> Any:
        if isinstance(v, UserRole):
            return v
        if v in [role.value for role in UserRole]:
            return v
        return None

    @property
    def carrier_set(self) -> bool:
        return self.carrier is not None

    def is_enabled(self, mode: ForwardingMode) -> bool:
        if mode == ForwardingMode.CONDITIONAL:
            return self.conditional_forwarding_enabled
        return self.unconditional_forwarding_enabled


class NotAssigned(BaseModel):
    """Valid terminal display state: the target has no assigned number."""

    model_config = ConfigDict(frozen=True)

    target: ForwardingTarget
    message: str


ForwardingState = ForwardingStateRecord | NotAssigned


class ForwardingStatePatch(BaseModel):
    """Partial update sent to the backend. Unset fields are left alone."""

    model_config = ConfigDict(populate_by_name=True)

    confirmation_status: ConfirmationStatus
    carrier: str | None = None
    conditional_forwarding_enabled: bool | None = Field(None, alias="conditional_enabled")
    unconditional_forwarding_enabled: bool | None = Field(
        None, alias="unconditional_enabled"
    )
    last_unconditional_change_at: datetime | None = None
    failure_reason: str | None = None
    notes: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# Request schemas
TARGET_DESCRIPTION = 'Whose forwarding the request acts on: "self" or "realtor-<id>"'


class CarrierUpdateRequest(BaseModel):
    """Request schema for selecting a carrier."""

    target: str = Field("self", description=TARGET_DESCRIPTION)
    carrier: str = Field(..., min_length=1, description="Carrier name from the catalog")


class ConfirmationRequest(BaseModel):
    """Request schema for confirming a dialed code worked."""

    target: str = Field("self", description=TARGET_DESCRIPTION)
    transition: Transition
    notes: str | None = Field(None, description="Optional operator notes")


class IssueReportRequest(BaseModel):
    """Request schema for reporting that the carrier did not honor a code."""

    target: str = Field("self", description=TARGET_DESCRIPTION)
    reason: str = Field(..., min_length=1, description="What the operator heard")
    transition: Transition | None = None
    notes: str | None = None


class NotesDraftRequest(BaseModel):
    """Request schema for staging notes sent with the next update."""

    target: str = Field("self", description=TARGET_DESCRIPTION)
    notes: str | None = None


# Response schemas
class DialStep(BaseModel):
    """What the operator is shown for one transition."""

    transition: Transition
    kind: StepKind
    code: str | None = Field(None, description="Literal code to dial")
    dial_uri: str | None = Field(None, description="tel: URI for the dialer")
    instructions: str | None = Field(None, description="Operator guidance")
    reason: str | None = Field(None, description="Why the step is blocked/unavailable")
    actions: list[WorkflowAction] = Field(default_factory=list)


class ForwardingPanel(BaseModel):
    """Everything the call forwarding tab renders for the active target."""

    target: str
    stage: PanelStage
    message: str | None = None
    carrier: str | None = None
    carrier_notes: str | None = None
    limited_support: bool = Field(
        default=False, description="Carrier has no conditional forwarding"
    )
    app_managed: bool = False
    assigned_number: str | None = None
    assigned_number_display: str | None = None
    user_id: str | None = None
    user_type: UserRole | None = None
    conditional_enabled: bool = False
    unconditional_enabled: bool = False
    last_unconditional_change_at: datetime | None = None
    last_failure_reason: str | None = None
    notes: str | None = None
    notes_draft: str | None = None
    conditional_step: DialStep | None = None
    unconditional_step: DialStep | None = None
    carriers: list[str] = Field(default_factory=list)


class CarrierListResponse(BaseModel):
    """The carrier catalog as shown in the picker and QA checklist."""

    version: str
    carriers: list[CarrierProfile]


class ForwardingErrorResponse(BaseModel):
    """Error body returned to the dashboard."""

    error_code: ForwardingErrorCode
    message: str
    carrier: str | None = None
    transition: Transition | None = None
    retry_after: int | None = None
    cooldown_message: str | None = None
