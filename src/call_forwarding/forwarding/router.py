"""
Call forwarding router.

Operator-facing endpoints for the call forwarding tab: the carrier list,
the panel for the selected user, dial-code steps, confirmations and issue
reports.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from call_forwarding.dial_codes.constants import Transition
from call_forwarding.forwarding.constants import TargetKind, UserRole
from call_forwarding.forwarding.controller import ForwardingController
from call_forwarding.forwarding.dependencies import get_forwarding_controller
from call_forwarding.forwarding.exceptions import (
    AppManagedTransition,
    CarrierUnsetError,
    ForwardingError,
    InvalidIssueReportError,
    NoNumberAssignedError,
    RateLimitedError,
    SessionExpiredError,
    StateRefreshError,
    UnknownCarrierError,
    UnsupportedTransitionError,
    ValidationRejectedError,
)
from call_forwarding.forwarding.response_builders import build_carrier_list, build_panel
from call_forwarding.forwarding.schemas import (
    TARGET_DESCRIPTION,
    CarrierListResponse,
    CarrierUpdateRequest,
    ConfirmationRequest,
    DialStep,
    ForwardingErrorResponse,
    ForwardingPanel,
    ForwardingTarget,
    IssueReportRequest,
    NotesDraftRequest,
)
from call_forwarding.utils.logger import logger

router = APIRouter(prefix="/call-forwarding", tags=["Call Forwarding"])

_STATUS_BY_ERROR: list[tuple[type[ForwardingError], int]] = [
    (RateLimitedError, status.HTTP_429_TOO_MANY_REQUESTS),
    (SessionExpiredError, status.HTTP_401_UNAUTHORIZED),
    (StateRefreshError, status.HTTP_502_BAD_GATEWAY),
    (ValidationRejectedError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (NoNumberAssignedError, status.HTTP_409_CONFLICT),
    (CarrierUnsetError, status.HTTP_409_CONFLICT),
    (AppManagedTransition, status.HTTP_409_CONFLICT),
    (UnknownCarrierError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (UnsupportedTransitionError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (InvalidIssueReportError, status.HTTP_422_UNPROCESSABLE_ENTITY),
]


def to_http_exception(error: ForwardingError) -> HTTPException:
    """Translate a forwarding error into the response the dashboard shows."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    for error_type, mapped_status in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            status_code = mapped_status
            break

    body = ForwardingErrorResponse(
        error_code=error.error_code,
        message=error.message,
        carrier=error.carrier,
        transition=error.transition,
    )
    headers = None
    if isinstance(error, RateLimitedError):
        body.retry_after = error.retry_after
        body.cooldown_message = error.cooldown_message
        if error.retry_after is not None:
            headers = {"Retry-After": str(error.retry_after)}

    logger.warning(
        "Forwarding request failed",
        error_code=error.error_code.value,
        status_code=status_code,
        carrier=error.carrier,
        transition=error.transition.value if error.transition else None,
    )
    return HTTPException(
        status_code=status_code, detail=body.model_dump(mode="json"), headers=headers
    )


def _select_target(controller: ForwardingController, target: str) -> ForwardingTarget:
    """Point the controller at the target the request names.

    Must be called with `controller.lock` held so the selection and the
    operation that follows act on the same user.
    """
    try:
        parsed = ForwardingTarget.parse(target)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)
        ) from e
    if controller.operator_role == UserRole.REALTOR and parsed.kind != TargetKind.SELF:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Realtors can only manage their own call forwarding.",
        )
    controller.select_target(parsed)
    return parsed


@router.get("/carriers", response_model=CarrierListResponse)
async def list_carriers(
    controller: ForwardingController = Depends(get_forwarding_controller),
) -> CarrierListResponse:
    """
    List supported carriers for the picker and the QA checklist.

    Args:
        controller: The operator's forwarding controller

    Returns:
        CarrierListResponse: Catalog version and carrier profiles
    """
    await controller.load_catalog()
    return build_carrier_list(controller)


@router.get("", response_model=ForwardingPanel)
async def get_forwarding_panel(
    target: str = Query("self", description=TARGET_DESCRIPTION),
    controller: ForwardingController = Depends(get_forwarding_controller),
) -> ForwardingPanel:
    """
    Select a managed user and return their forwarding panel.

    Args:
        target: Which user's forwarding to show
        controller: The operator's forwarding controller

    Returns:
        ForwardingPanel: The panel for the selected user

    Raises:
        HTTPException: If the backend could not be read
    """
    async with controller.lock:
        _select_target(controller, target)
        try:
            await controller.refresh()
        except ForwardingError as e:
            raise to_http_exception(e) from e
        return build_panel(controller)


@router.put("/carrier", response_model=ForwardingPanel)
async def update_carrier(
    request: CarrierUpdateRequest,
    controller: ForwardingController = Depends(get_forwarding_controller),
) -> ForwardingPanel:
    """
    Save the selected user's mobile carrier.

    Args:
        request: The target and the carrier to record
        controller: The operator's forwarding controller

    Returns:
        ForwardingPanel: The panel after the backend re-read
    """
    async with controller.lock:
        _select_target(controller, request.target)
        try:
            await controller.set_carrier(request.carrier)
        except ForwardingError as e:
            raise to_http_exception(e) from e
        return build_panel(controller)


@router.get("/dial/{transition}", response_model=DialStep)
async def get_dial_step(
    transition: Transition,
    target: str = Query("self", description=TARGET_DESCRIPTION),
    controller: ForwardingController = Depends(get_forwarding_controller),
) -> DialStep:
    """
    Return the code (or the blocking condition) for a transition.

    Showing a code never changes the forwarding record.
    """
    async with controller.lock:
        _select_target(controller, target)
        try:
            return await controller.prepare(transition)
        except ForwardingError as e:
            raise to_http_exception(e) from e


@router.post("/confirm", response_model=ForwardingPanel)
async def confirm_transition(
    request: ConfirmationRequest,
    controller: ForwardingController = Depends(get_forwarding_controller),
) -> ForwardingPanel:
    """
    Record that the operator dialed a code and the carrier accepted it.

    Args:
        request: The target, the confirmed transition and optional notes
        controller: The operator's forwarding controller

    Returns:
        ForwardingPanel: The panel after the backend re-read

    Raises:
        HTTPException: If the transition cannot be confirmed or the write failed
    """
    async with controller.lock:
        _select_target(controller, request.target)
        try:
            await controller.confirm(request.transition, notes=request.notes)
        except ForwardingError as e:
            raise to_http_exception(e) from e
        return build_panel(controller)


@router.post("/issues", response_model=ForwardingPanel)
async def report_issue(
    request: IssueReportRequest,
    controller: ForwardingController = Depends(get_forwarding_controller),
) -> ForwardingPanel:
    """
    Send a carrier issue to support. Forwarding toggles are not rolled back.

    Args:
        request: The target, what the operator heard, and the transition attempted
        controller: The operator's forwarding controller

    Returns:
        ForwardingPanel: The panel after the backend re-read
    """
    async with controller.lock:
        _select_target(controller, request.target)
        try:
            await controller.report_issue(
                request.reason, transition=request.transition, notes=request.notes
            )
        except ForwardingError as e:
            raise to_http_exception(e) from e
        return build_panel(controller)


@router.put("/notes", response_model=ForwardingPanel)
async def stage_notes(
    request: NotesDraftRequest,
    controller: ForwardingController = Depends(get_forwarding_controller),
) -> ForwardingPanel:
    """Stage internal notes; they are sent with the next forwarding update."""
    async with controller.lock:
        _select_target(controller, request.target)
        controller.set_notes_draft(request.notes)
        return build_panel(controller)
