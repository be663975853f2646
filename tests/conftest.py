"""Shared fixtures: an in-memory forwarding backend served over httpx.MockTransport."""

import json
from collections import defaultdict

import httpx
import pytest
import pytest_asyncio

from call_forwarding.carriers.catalog import CarrierCatalog
from call_forwarding.carriers.constants import CarrierFamily
from call_forwarding.carriers.schemas import CarrierProfile
from call_forwarding.forwarding.client import ForwardingAPIClient
from call_forwarding.forwarding.config import ForwardingSettings
from call_forwarding.forwarding.controller import ForwardingController

ASSISTANT_NUMBER = "+15551234567"

_PATCHABLE = (
    "carrier",
    "conditional_enabled",
    "unconditional_enabled",
    "last_unconditional_change_at",
    "failure_reason",
    "notes",
)


class FakeForwardingBackend:
    """Minimal stand-in for the forwarding state store and assignment service."""

    def __init__(self):
        self.records: dict[str, dict] = {}
        self.numbers: dict[str, str] = {}
        self.carriers: list[dict] = [
            {"name": "CarrierX", "family": "gsm", "supports_conditional": True, "notes": None},
        ]
        self.requests: list[httpx.Request] = []
        self.patches: list[dict] = []
        self._queued: dict[tuple[str, str], list[httpx.Response]] = defaultdict(list)

    def add_user(
        self,
        key: str = "self",
        number: str | None = ASSISTANT_NUMBER,
        **record,
    ) -> dict:
        self.records[key] = {
            "carrier": None,
            "conditional_enabled": False,
            "unconditional_enabled": False,
            "last_unconditional_change_at": None,
            "failure_reason": None,
            "notes": None,
            "user_id": key.split("-")[-1] if key != "self" else "1",
            "user_type": "realtor" if key != "self" else "property_manager",
            **record,
        }
        if number is not None:
            self.numbers[key] = number
        return self.records[key]

    def queue(self, method: str, path: str, response: httpx.Response) -> None:
        """Serve `response` for the next matching request instead of the default."""
        self._queued[(method, path)].append(response)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    @staticmethod
    def _key(request: httpx.Request) -> str:
        realtor_id = request.url.params.get("realtor_id")
        return f"realtor-{realtor_id}" if realtor_id else "self"

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queued = self._queued.get((request.method, request.url.path))
        if queued:
            return queued.pop(0)

        key = self._key(request)
        path = request.url.path

        if path == "/phone-numbers/assigned":
            if key not in self.numbers:
                return httpx.Response(404, json={"detail": "No phone number assigned"})
            return httpx.Response(200, json={"number": self.numbers[key]})

        if path == "/call-forwarding/carriers":
            return httpx.Response(200, json=self.carriers)

        if path == "/call-forwarding/state":
            if key not in self.records:
                return httpx.Response(404, json={"detail": "Unknown user"})
            record = self.records[key]
            if request.method == "PATCH":
                body = json.loads(request.content)
                self.patches.append(body)
                for field in _PATCHABLE:
                    if field in body:
                        record[field] = body[field]
            return httpx.Response(200, json=record)

        return httpx.Response(404, json={"detail": "Not found"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def settings():
    """Test settings."""
    return ForwardingSettings(
        api_base_url="https://backend.test",
        timeout=5,
        rate_limit_cooldown_seconds=30,
        use_remote_catalog=False,
    )


@pytest.fixture
def backend():
    return FakeForwardingBackend()


@pytest.fixture
def catalog():
    """Catalog with one carrier of each shape."""
    return CarrierCatalog(
        [
            CarrierProfile(name="CarrierX", family=CarrierFamily.GSM, supports_conditional=True),
            CarrierProfile(name="CarrierY", family=CarrierFamily.APP_MANAGED),
            CarrierProfile(
                name="CarrierZ",
                family=CarrierFamily.CDMA_STYLE,
                supports_conditional=False,
                notes="Forward-all only",
            ),
        ],
        version="test",
    )


@pytest_asyncio.fixture
async def api_client(settings, backend):
    client = ForwardingAPIClient(settings, access_token="token-123", transport=backend.transport)
    yield client
    await client.close()


@pytest.fixture
def controller(api_client, catalog):
    return ForwardingController(api_client, catalog=catalog)
