"""Tests for the forwarding state synchronizer."""

import asyncio
from unittest.mock import AsyncMock

import httpx
import pytest

from call_forwarding.forwarding.client import ForwardingAPIClient
from call_forwarding.forwarding.constants import (
    NO_NUMBER_MESSAGES,
    ConfirmationStatus,
    UserRole,
)
from call_forwarding.forwarding.exceptions import (
    NoNumberAssignedError,
    RateLimitedError,
    StateRefreshError,
    TransientNetworkFailure,
)
from call_forwarding.forwarding.schemas import (
    ForwardingStatePatch,
    ForwardingStateRecord,
    ForwardingTarget,
    NotAssigned,
)
from call_forwarding.forwarding.synchronizer import StateSynchronizer
from call_forwarding.phone_numbers import AssignedNumber

SELF = ForwardingTarget()
REALTOR_A = ForwardingTarget.parse("realtor-1")
REALTOR_B = ForwardingTarget.parse("realtor-2")

CONFIRM_CONDITIONAL = ForwardingStatePatch(
    confirmation_status=ConfirmationStatus.CONFIRMED,
    conditional_forwarding_enabled=True,
)


class TestStateSynchronizerWithBackend:
    """Synchronizer against the in-memory backend."""

    @pytest.fixture
    def synchronizer(self, api_client):
        return StateSynchronizer(api_client)

    @pytest.mark.asyncio
    async def test_fetch_applies_record(self, synchronizer, backend):
        backend.add_user(carrier="CarrierX")

        state = await synchronizer.fetch()

        assert isinstance(state, ForwardingStateRecord)
        assert synchronizer.current is state
        assert state.assigned_number == "+15551234567"
        assert synchronizer.assigned_number.number == "+15551234567"
        assert synchronizer.active_target == SELF

    @pytest.mark.asyncio
    async def test_fetch_without_number_is_not_assigned(self, backend, api_client):
        backend.add_user("realtor-1", number=None)
        synchronizer = StateSynchronizer(api_client, operator_role=UserRole.REALTOR)
        synchronizer.select_target(REALTOR_A)

        state = await synchronizer.fetch()

        assert isinstance(state, NotAssigned)
        assert state.message == NO_NUMBER_MESSAGES[UserRole.REALTOR]
        assert backend.calls("GET", "/call-forwarding/state") == []

    @pytest.mark.asyncio
    async def test_patch_refetches_authoritative_record(self, synchronizer, backend):
        backend.add_user(carrier="CarrierX")
        await synchronizer.fetch()

        record = await synchronizer.patch(SELF, CONFIRM_CONDITIONAL)

        assert record.conditional_forwarding_enabled is True
        assert synchronizer.current is record
        assert len(backend.calls("PATCH", "/call-forwarding/state")) == 1
        assert len(backend.calls("GET", "/call-forwarding/state")) == 2

    @pytest.mark.asyncio
    async def test_patch_failure_is_not_retried(self, synchronizer, backend):
        backend.add_user(carrier="CarrierX")
        await synchronizer.fetch()
        before = synchronizer.current
        backend.queue(
            "PATCH",
            "/call-forwarding/state",
            httpx.Response(429, json={"detail": "Rate limit exceeded"}),
        )

        with pytest.raises(RateLimitedError):
            await synchronizer.patch(SELF, CONFIRM_CONDITIONAL)

        assert len(backend.calls("PATCH", "/call-forwarding/state")) == 1
        assert synchronizer.current is before
        assert backend.records["self"]["conditional_enabled"] is False

    @pytest.mark.asyncio
    async def test_refresh_failure_after_write(self, synchronizer, backend):
        backend.add_user(carrier="CarrierX")
        await synchronizer.fetch()
        # The write lands; the re-read of the record does not.
        backend.queue("GET", "/call-forwarding/state", httpx.Response(500))

        with pytest.raises(StateRefreshError) as exc_info:
            await synchronizer.patch(SELF, CONFIRM_CONDITIONAL)

        assert exc_info.value.write_applied is True
        assert backend.records["self"]["conditional_enabled"] is True

    @pytest.mark.asyncio
    async def test_patch_after_number_unassigned(self, synchronizer, backend):
        backend.add_user(carrier="CarrierX")
        await synchronizer.fetch()
        del backend.numbers["self"]

        with pytest.raises(NoNumberAssignedError):
            await synchronizer.patch(SELF, CONFIRM_CONDITIONAL)

        assert isinstance(synchronizer.current, NotAssigned)


class TestStateSynchronizerOrdering:
    """Late responses never overwrite newer state."""

    @pytest.fixture
    def gates(self):
        return {key: asyncio.Event() for key in ("self", "realtor-1", "realtor-2")}

    @pytest.fixture
    def records(self):
        return {
            "self": ForwardingStateRecord(carrier="CarrierX"),
            "realtor-1": ForwardingStateRecord(carrier="CarrierA"),
            "realtor-2": ForwardingStateRecord(carrier="CarrierB"),
        }

    @pytest.fixture
    def client(self, gates, records):
        client = AsyncMock(spec=ForwardingAPIClient)

        async def get_assigned_number(target):
            await gates[target.key].wait()
            return AssignedNumber(number="+15551234567")

        async def get_forwarding_state(target):
            return records[target.key]

        client.get_assigned_number.side_effect = get_assigned_number
        client.get_forwarding_state.side_effect = get_forwarding_state
        return client

    @pytest.mark.asyncio
    async def test_target_switch_discards_previous_fetch(self, client, gates):
        synchronizer = StateSynchronizer(client)
        synchronizer.select_target(REALTOR_A)
        fetch_a = asyncio.create_task(synchronizer.fetch())
        await asyncio.sleep(0)

        assert synchronizer.select_target(REALTOR_B) is True
        fetch_b = asyncio.create_task(synchronizer.fetch())
        gates["realtor-2"].set()
        state_b = await fetch_b
        gates["realtor-1"].set()
        state_a = await fetch_a

        assert state_a is None
        assert state_b.carrier == "CarrierB"
        assert synchronizer.current.carrier == "CarrierB"
        assert synchronizer.active_target == REALTOR_B

    @pytest.mark.asyncio
    async def test_late_response_for_old_target_is_ignored(self, client, gates):
        synchronizer = StateSynchronizer(client)
        synchronizer.select_target(REALTOR_A)
        fetch_a = asyncio.create_task(synchronizer.fetch(REALTOR_A))
        await asyncio.sleep(0)
        synchronizer.select_target(REALTOR_B)

        # Responses for realtor 2 arrive first, then realtor 1 completes.
        gates["realtor-2"].set()
        await synchronizer.fetch()
        gates["realtor-1"].set()
        await fetch_a

        assert synchronizer.current.carrier == "CarrierB"

    @pytest.mark.asyncio
    async def test_patch_supersedes_earlier_fetch(self, client, gates, records):
        synchronizer = StateSynchronizer(client)
        synchronizer.select_target(SELF)
        stale_fetch = asyncio.create_task(synchronizer.fetch())
        await asyncio.sleep(0)

        async def patch_forwarding_state(target, update):
            records["self"] = records["self"].model_copy(
                update={"conditional_forwarding_enabled": True}
            )

        client.patch_forwarding_state.side_effect = patch_forwarding_state
        patch_task = asyncio.create_task(synchronizer.patch(SELF, CONFIRM_CONDITIONAL))
        await asyncio.sleep(0)
        gates["self"].set()
        record = await patch_task
        assert await stale_fetch is None

        assert record.conditional_forwarding_enabled is True
        assert synchronizer.current.conditional_forwarding_enabled is True
        client.patch_forwarding_state.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_superseded_fetch_failure_is_swallowed(self, client, gates):
        calls = []

        async def flaky_number(target):
            calls.append(target)
            first = len(calls) == 1
            await gates[target.key].wait()
            if first:
                raise TransientNetworkFailure()
            return AssignedNumber(number="+15551234567")

        client.get_assigned_number.side_effect = flaky_number
        synchronizer = StateSynchronizer(client)
        synchronizer.select_target(SELF)
        stale_fetch = asyncio.create_task(synchronizer.fetch())
        await asyncio.sleep(0)
        patch_task = asyncio.create_task(synchronizer.patch(SELF, CONFIRM_CONDITIONAL))
        await asyncio.sleep(0)
        gates["self"].set()

        record = await patch_task
        assert await stale_fetch is None
        assert synchronizer.current is not None
        assert synchronizer.current.carrier == record.carrier == "CarrierX"

    @pytest.mark.asyncio
    async def test_current_fetch_failure_raises(self, client):
        client.get_assigned_number.side_effect = TransientNetworkFailure()
        synchronizer = StateSynchronizer(client)

        with pytest.raises(TransientNetworkFailure):
            await synchronizer.fetch()

        assert synchronizer.current is None

    @pytest.mark.asyncio
    async def test_finished_fetches_are_forgotten(self, client, gates):
        synchronizer = StateSynchronizer(client)
        synchronizer.select_target(REALTOR_A)
        fetch_a = asyncio.create_task(synchronizer.fetch())
        await asyncio.sleep(0)
        assert set(synchronizer._pending) == {"realtor-1"}

        synchronizer.select_target(REALTOR_B)
        gates["realtor-2"].set()
        await synchronizer.fetch()
        await fetch_a

        assert synchronizer._pending == {}

    def test_select_same_target_is_noop(self, client):
        synchronizer = StateSynchronizer(client)
        assert synchronizer.select_target(SELF) is True
        assert synchronizer.select_target(ForwardingTarget.parse("self")) is False
