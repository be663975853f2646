"""
Confirmation workflow controller.

Sequences carrier selection, dial-code presentation, operator confirmation
and failure reporting for the active target. The record only ever reflects
what the operator asserts: showing a code changes nothing, and a reported
carrier failure never rolls a toggle back.
"""

import asyncio
from datetime import UTC, datetime

from call_forwarding.carriers.catalog import CarrierCatalog
from call_forwarding.carriers.schemas import CarrierProfile
from call_forwarding.dial_codes.constants import ForwardingMode, Transition
from call_forwarding.dial_codes.resolver import resolve
from call_forwarding.dial_codes.schemas import AppManaged, Unavailable
from call_forwarding.forwarding.client import ForwardingAPIClient
from call_forwarding.forwarding.constants import (
    CARRIER_SELECTION_MESSAGE,
    DIAL_INSTRUCTIONS,
    BlockReason,
    ConfirmationStatus,
    StepKind,
    UserRole,
    WorkflowAction,
)
from call_forwarding.forwarding.exceptions import (
    AppManagedTransition,
    CarrierUnsetError,
    ForwardingAPIError,
    ForwardingError,
    InvalidIssueReportError,
    NoNumberAssignedError,
    UnknownCarrierError,
    UnsupportedTransitionError,
)
from call_forwarding.forwarding.schemas import (
    DialStep,
    ForwardingState,
    ForwardingStatePatch,
    ForwardingStateRecord,
    ForwardingTarget,
    NotAssigned,
)
from call_forwarding.forwarding.synchronizer import StateSynchronizer
from call_forwarding.utils.logger import logger


class ForwardingController:
    """Drives the call forwarding workflow for one operator session."""

    def __init__(
        self,
        client: ForwardingAPIClient,
        catalog: CarrierCatalog | None = None,
        operator_role: UserRole = UserRole.PROPERTY_MANAGER,
        use_remote_catalog: bool = False,
    ) -> None:
        self.client = client
        self.operator_role = operator_role
        self.synchronizer = StateSynchronizer(client, operator_role=operator_role)
        self._catalog = catalog
        self._use_remote_catalog = use_remote_catalog
        self.notes_draft: str | None = None
        # Held by the HTTP layer for the whole of select-target + operation.
        self.lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Session state
    # ------------------------------------------------------------------

    @property
    def target(self) -> ForwardingTarget:
        return self.synchronizer.active_target

    @property
    def state(self) -> ForwardingState | None:
        return self.synchronizer.current

    async def load_catalog(self) -> CarrierCatalog:
        """Load the carrier catalog once per session."""
        if self._catalog is not None:
            return self._catalog

        if self._use_remote_catalog:
            try:
                entries = await self.client.get_carrier_catalog()
            except ForwardingAPIError as e:
                logger.warning(
                    "Carrier catalog unavailable, using packaged list", error=str(e)
                )
            else:
                if entries:
                    self._catalog = CarrierCatalog.from_remote(entries)
                    logger.info(
                        "Loaded remote carrier catalog", carriers=len(self._catalog)
                    )
                    return self._catalog

        self._catalog = CarrierCatalog.builtin()
        return self._catalog

    @property
    def catalog(self) -> CarrierCatalog:
        if self._catalog is None:
            self._catalog = CarrierCatalog.builtin()
        return self._catalog

    def select_target(self, target: ForwardingTarget) -> bool:
        """Switch the managed user; drafts belong to the previous target."""
        changed = self.synchronizer.select_target(target)
        if changed:
            self.notes_draft = None
        return changed

    async def refresh(self) -> ForwardingState | None:
        """Fetch the active target's record. None if superseded meanwhile."""
        await self.load_catalog()
        return await self.synchronizer.fetch(self.target)

    def set_notes_draft(self, notes: str | None) -> None:
        """Stage notes; they are sent with the next update of any kind."""
        self.notes_draft = notes.strip() if notes and notes.strip() else None

    # ------------------------------------------------------------------
    # Gates
    # ------------------------------------------------------------------

    async def _current_record(self) -> ForwardingStateRecord:
        state = self.state
        if state is None:
            state = await self.refresh()
        if state is None:
            # Superseded while loading; whatever is displayed now wins.
            state = self.state
        if state is None or isinstance(state, NotAssigned):
            message = state.message if isinstance(state, NotAssigned) else None
            raise NoNumberAssignedError(
                message or "Assign a phone number first to enable call forwarding."
            )
        return state

    def _profile_for(self, record: ForwardingStateRecord) -> CarrierProfile | None:
        return self.catalog.lookup(record.carrier)

    def _gate(
        self, record: ForwardingStateRecord, transition: Transition
    ) -> CarrierProfile:
        if self.synchronizer.assigned_number is None:
            raise NoNumberAssignedError(
                "Assign a phone number first to enable call forwarding.",
                transition=transition,
            )
        profile = self._profile_for(record)
        if profile is None:
            raise CarrierUnsetError(carrier=record.carrier, transition=transition)

        code = resolve(profile, self.synchronizer.assigned_number, transition)
        if isinstance(code, AppManaged):
            raise AppManagedTransition(
                code.instructions, carrier=profile.name, transition=transition
            )
        if isinstance(code, Unavailable):
            raise UnsupportedTransitionError(
                code.message, carrier=profile.name, transition=transition
            )
        return profile

    def _take_notes(self, notes: str | None) -> str | None:
        if notes and notes.strip():
            return notes.strip()
        return self.notes_draft

    async def _patch(
        self, target: ForwardingTarget, update: ForwardingStatePatch
    ) -> ForwardingStateRecord:
        record = await self.synchronizer.patch(target, update)
        self.notes_draft = None
        return record

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def step_for(
        self, state: ForwardingState | None, transition: Transition
    ) -> DialStep:
        """Work out what to show the operator for a transition."""
        if state is None or isinstance(state, NotAssigned) or (
            self.synchronizer.assigned_number is None
        ):
            return DialStep(
                transition=transition,
                kind=StepKind.BLOCKED,
                reason=BlockReason.NO_NUMBER.value,
                instructions=state.message if isinstance(state, NotAssigned) else None,
            )

        profile = self._profile_for(state)
        if profile is None:
            return DialStep(
                transition=transition,
                kind=StepKind.BLOCKED,
                reason=BlockReason.CARRIER_UNSET.value,
                instructions=CARRIER_SELECTION_MESSAGE,
            )

        code = resolve(profile, self.synchronizer.assigned_number, transition)
        if isinstance(code, Unavailable):
            return DialStep(
                transition=transition,
                kind=StepKind.UNAVAILABLE,
                reason=code.reason.value,
                instructions=code.message,
            )
        if isinstance(code, AppManaged):
            return DialStep(
                transition=transition,
                kind=StepKind.APP_MANAGED,
                instructions=code.instructions,
            )
        return DialStep(
            transition=transition,
            kind=StepKind.LITERAL,
            code=code.code,
            dial_uri=code.dial_uri,
            instructions=DIAL_INSTRUCTIONS,
            actions=[WorkflowAction.CONFIRM_SUCCESS, WorkflowAction.REPORT_ISSUE],
        )

    async def prepare(self, transition: Transition) -> DialStep:
        """Resolve the code to show for a transition. Never changes the record."""
        state = self.state
        if state is None:
            state = await self.refresh() or self.state
        step = self.step_for(state, transition)
        logger.info(
            "Prepared dial step",
            target=self.target.key,
            transition=transition.value,
            kind=step.kind.value,
        )
        return step

    async def set_carrier(self, carrier_name: str) -> ForwardingStateRecord:
        """Record the target's carrier. No dial code is involved."""
        target = self.target
        await self.load_catalog()
        record = await self._current_record()
        profile = self.catalog.lookup(carrier_name)
        if profile is None:
            raise UnknownCarrierError(
                f"{carrier_name} is not a supported carrier.", carrier=carrier_name
            )

        update = ForwardingStatePatch(
            confirmation_status=ConfirmationStatus.CARRIER_SELECTED,
            carrier=profile.name,
            notes=self._take_notes(None),
        )
        try:
            result = await self._patch(target, update)
        except ForwardingError as e:
            e.with_context(carrier=profile.name)
            raise
        logger.info(
            "Carrier selected",
            target=self.target.key,
            previous=record.carrier,
            carrier=profile.name,
        )
        return result

    async def confirm(
        self, transition: Transition, notes: str | None = None
    ) -> ForwardingStateRecord:
        """
        Record the operator's assertion that a dialed code worked.

        Only the transition's own axis changes. Confirming a state that is
        already asserted is not an error: nothing is written unless notes
        were supplied, in which case only the notes are updated.

        Raises:
            NoNumberAssignedError: No assigned number
            CarrierUnsetError: Carrier not selected yet
            AppManagedTransition: Transition is handled in the carrier's app
            UnsupportedTransitionError: Carrier has no code for the transition
            ForwardingAPIError: The backend write failed (never retried)
        """
        target = self.target
        record = await self._current_record()
        profile = self._gate(record, transition)
        notes = self._take_notes(notes)

        if record.is_enabled(transition.mode) == transition.enables:
            logger.info(
                "Confirmation matches recorded state",
                target=self.target.key,
                transition=transition.value,
            )
            if notes is None or notes == record.operator_notes:
                return record
            update = ForwardingStatePatch(
                confirmation_status=ConfirmationStatus.NOTES_UPDATED, notes=notes
            )
        elif transition.mode == ForwardingMode.CONDITIONAL:
            update = ForwardingStatePatch(
                confirmation_status=ConfirmationStatus.CONFIRMED,
                conditional_forwarding_enabled=transition.enables,
                notes=notes,
            )
        else:
            update = ForwardingStatePatch(
                confirmation_status=ConfirmationStatus.CONFIRMED,
                unconditional_forwarding_enabled=transition.enables,
                last_unconditional_change_at=datetime.now(UTC),
                notes=notes,
            )

        try:
            result = await self._patch(target, update)
        except ForwardingError as e:
            e.with_context(carrier=profile.name, transition=transition)
            raise
        logger.info(
            "Forwarding confirmed",
            target=self.target.key,
            carrier=profile.name,
            transition=transition.value,
        )
        return result

    async def report_issue(
        self,
        reason: str,
        transition: Transition | None = None,
        notes: str | None = None,
    ) -> ForwardingStateRecord:
        """
        Record that the carrier did not honor a code.

        The forwarding toggles are left exactly as last confirmed.
        """
        if not reason or not reason.strip():
            raise InvalidIssueReportError(
                "Describe what you heard before sending the issue to support.",
                transition=transition,
            )
        target = self.target
        record = await self._current_record()
        update = ForwardingStatePatch(
            confirmation_status=ConfirmationStatus.FAILURE_REPORTED,
            failure_reason=reason.strip(),
            notes=self._take_notes(notes),
        )
        try:
            result = await self._patch(target, update)
        except ForwardingError as e:
            e.with_context(carrier=record.carrier, transition=transition)
            raise
        logger.info(
            "Carrier issue reported",
            target=self.target.key,
            carrier=record.carrier,
            transition=transition.value if transition else None,
        )
        return result
