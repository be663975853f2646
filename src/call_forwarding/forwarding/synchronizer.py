"""
State synchronizer.

Keeps the displayed forwarding record for the active target consistent with
the backend. Every fetch and patch takes a ticket when it is issued; a result
is only applied if its ticket is newer than the last applied one and its
target is still the one being displayed. Switching targets cancels in-flight
fetches for the previous target.
"""

import asyncio
import itertools

from call_forwarding.forwarding.client import ForwardingAPIClient
from call_forwarding.forwarding.constants import NO_NUMBER_MESSAGES, UserRole
from call_forwarding.forwarding.exceptions import (
    ForwardingAPIError,
    NoNumberAssignedError,
    StateRefreshError,
)
from call_forwarding.forwarding.schemas import (
    ForwardingState,
    ForwardingStatePatch,
    ForwardingStateRecord,
    ForwardingTarget,
    NotAssigned,
)
from call_forwarding.phone_numbers.schemas import AssignedNumber
from call_forwarding.utils.logger import logger

_Loaded = tuple[ForwardingState, AssignedNumber | None]


class StateSynchronizer:
    """Reconciles the operator's view with the backend forwarding record."""

    def __init__(
        self,
        client: ForwardingAPIClient,
        operator_role: UserRole = UserRole.PROPERTY_MANAGER,
    ) -> None:
        self.client = client
        self.operator_role = operator_role
        self._tickets = itertools.count(1)
        self._applied_ticket = 0
        self._active_target: ForwardingTarget | None = None
        self._pending: dict[str, set[asyncio.Task]] = {}
        self.current: ForwardingState | None = None
        self.assigned_number: AssignedNumber | None = None

    @property
    def active_target(self) -> ForwardingTarget:
        if self._active_target is None:
            self._active_target = ForwardingTarget()
        return self._active_target

    def select_target(self, target: ForwardingTarget) -> bool:
        """
        Make `target` the displayed target.

        Clears the displayed state, cancels fetches still running for other
        targets and invalidates every ticket issued so far.

        Returns:
            True if the target changed
        """
        if target == self._active_target:
            return False

        previous = self._active_target
        self._active_target = target
        self.current = None
        self.assigned_number = None
        self._applied_ticket = next(self._tickets)

        cancelled = 0
        for key, tasks in self._pending.items():
            if key == target.key:
                continue
            for task in tasks:
                if task.cancel():
                    cancelled += 1
        logger.info(
            "Switched forwarding target",
            previous=previous.key if previous else None,
            target=target.key,
            cancelled_fetches=cancelled,
        )
        return True

    def _no_number_message(self, record: ForwardingStateRecord | None = None) -> str:
        if record is not None and record.message:
            return record.message
        return NO_NUMBER_MESSAGES[self.operator_role]

    async def _load(self, target: ForwardingTarget) -> _Loaded:
        number = await self.client.get_assigned_number(target)
        if number is None:
            return NotAssigned(target=target, message=self._no_number_message()), None

        record = await self.client.get_forwarding_state(target)
        record = record.model_copy(update={"assigned_number": number.number_value})
        return record, number

    def _apply(
        self,
        ticket: int,
        target: ForwardingTarget,
        state: ForwardingState,
        number: AssignedNumber | None,
    ) -> bool:
        if target != self._active_target or ticket <= self._applied_ticket:
            logger.info(
                "Discarded superseded forwarding state",
                target=target.key,
                ticket=ticket,
                applied_ticket=self._applied_ticket,
            )
            return False
        self._applied_ticket = ticket
        self.current = state
        self.assigned_number = number
        return True

    def _is_stale(self, ticket: int, target: ForwardingTarget) -> bool:
        return target != self._active_target or ticket <= self._applied_ticket

    async def fetch(self, target: ForwardingTarget | None = None) -> ForwardingState | None:
        """
        Fetch the forwarding record for a target.

        Args:
            target: Target to fetch; defaults to the active target

        Returns:
            The record, NotAssigned when no number is assigned, or None when
            the response was superseded (target switched, or a newer fetch or
            patch already applied) and therefore discarded.

        Raises:
            ForwardingAPIError: If a still-current fetch fails
        """
        target = target or self.active_target
        ticket = next(self._tickets)
        task = asyncio.create_task(self._load(target))
        self._pending.setdefault(target.key, set()).add(task)

        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            pending = self._pending.get(target.key)
            if pending is not None:
                pending.discard(task)
                if not pending:
                    del self._pending[target.key]

        if task.cancelled():
            logger.info("Fetch cancelled after target switch", target=target.key)
            return None

        error = task.exception()
        if error is not None:
            if self._is_stale(ticket, target):
                logger.info(
                    "Ignored failure of superseded fetch",
                    target=target.key,
                    error=str(error),
                )
                return None
            raise error

        state, number = task.result()
        if self._apply(ticket, target, state, number):
            return state
        return None

    async def patch(
        self, target: ForwardingTarget, update: ForwardingStatePatch
    ) -> ForwardingStateRecord:
        """
        Write a partial update, then re-read the authoritative record.

        Any fetch issued before this patch is superseded. Never retried.

        Returns:
            The record as the backend resolved it after the write

        Raises:
            ForwardingAPIError: If the write fails
            StateRefreshError: If the write succeeded but the re-read failed
            NoNumberAssignedError: If the number was unassigned meanwhile
        """
        ticket = next(self._tickets)
        if target == self._active_target:
            self._applied_ticket = max(self._applied_ticket, ticket)

        await self.client.patch_forwarding_state(target, update)

        refetch_ticket = next(self._tickets)
        try:
            state, number = await self._load(target)
        except ForwardingAPIError as e:
            logger.error(
                "Forwarding state saved but refresh failed",
                target=target.key,
                confirmation_status=update.confirmation_status.value,
            )
            raise StateRefreshError() from e

        self._apply(refetch_ticket, target, state, number)
        if isinstance(state, NotAssigned):
            raise NoNumberAssignedError(state.message)
        return state
