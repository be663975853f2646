"""
Response builder functions for the call forwarding API.

Converts the controller's session state into the panel the dashboard renders.
"""

from call_forwarding.carriers.schemas import CarrierProfile
from call_forwarding.dial_codes.constants import ForwardingMode, Transition
from call_forwarding.forwarding.constants import CARRIER_SELECTION_MESSAGE, PanelStage
from call_forwarding.forwarding.controller import ForwardingController
from call_forwarding.forwarding.schemas import (
    CarrierListResponse,
    ForwardingPanel,
    NotAssigned,
)


def build_panel(controller: ForwardingController) -> ForwardingPanel:
    """Build the ForwardingPanel for the controller's active target."""
    state = controller.state
    catalog = controller.catalog
    base = {"target": controller.target.key, "carriers": catalog.names()}

    if state is None:
        return ForwardingPanel(stage=PanelStage.LOADING, **base)

    if isinstance(state, NotAssigned):
        return ForwardingPanel(
            stage=PanelStage.NOT_ASSIGNED, message=state.message, **base
        )

    number = controller.synchronizer.assigned_number
    profile: CarrierProfile | None = catalog.lookup(state.carrier)
    panel = ForwardingPanel(
        stage=PanelStage.READY if profile else PanelStage.CARRIER_SELECTION,
        message=None if profile else CARRIER_SELECTION_MESSAGE,
        carrier=profile.name if profile else state.carrier,
        carrier_notes=profile.notes if profile else None,
        limited_support=bool(profile and not profile.supports_conditional),
        app_managed=bool(profile and profile.is_app_managed),
        assigned_number=number.number_value if number else state.assigned_number,
        assigned_number_display=number.display if number else None,
        user_id=state.user_id,
        user_type=state.user_type,
        conditional_enabled=state.conditional_forwarding_enabled,
        unconditional_enabled=state.unconditional_forwarding_enabled,
        last_unconditional_change_at=state.last_unconditional_change_at,
        last_failure_reason=state.last_failure_reason,
        notes=state.operator_notes,
        notes_draft=controller.notes_draft,
        **base,
    )

    if profile is not None:
        # Offer the opposite of what is currently asserted on each axis.
        for mode, field in (
            (ForwardingMode.CONDITIONAL, "conditional_step"),
            (ForwardingMode.UNCONDITIONAL, "unconditional_step"),
        ):
            transition = Transition.for_mode(mode, enable=not state.is_enabled(mode))
            setattr(panel, field, controller.step_for(state, transition))

    return panel


def build_carrier_list(controller: ForwardingController) -> CarrierListResponse:
    """Build the carrier catalog listing."""
    catalog = controller.catalog
    return CarrierListResponse(version=catalog.version, carriers=catalog.profiles())
