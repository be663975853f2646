"""Async client for the backend forwarding state store and assignment service."""

from typing import Any

import httpx
from pydantic import ValidationError

from call_forwarding.carriers.schemas import RemoteCarrierEntry
from call_forwarding.forwarding.config import ForwardingSettings
from call_forwarding.forwarding.constants import (
    GENERIC_FAILURE_MESSAGE,
    ForwardingEndpoint,
)
from call_forwarding.forwarding.exceptions import (
    RateLimitedError,
    SessionExpiredError,
    TransientNetworkFailure,
    ValidationRejectedError,
)
from call_forwarding.forwarding.schemas import (
    ForwardingStatePatch,
    ForwardingStateRecord,
    ForwardingTarget,
)
from call_forwarding.phone_numbers.schemas import AssignedNumber
from call_forwarding.utils.logger import logger


def extract_server_message(response: httpx.Response) -> str | None:
    """Pull the human-readable message out of an error response, if any."""
    try:
        body = response.json()
    except ValueError:
        text = response.text.strip()
        if text and len(text) <= 300 and not text.startswith("<"):
            return text
        return None

    if not isinstance(body, dict):
        return None
    for key in ("detail", "message", "error"):
        value = body.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
        if isinstance(value, list) and value:
            # FastAPI validation errors: [{"msg": ...}, ...]
            messages = [item.get("msg") for item in value if isinstance(item, dict)]
            messages = [m for m in messages if m]
            if messages:
                return "; ".join(messages)
    return None


def _parse_retry_after(response: httpx.Response) -> int | None:
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return max(0, int(value))
    except ValueError:
        return None


class ForwardingAPIClient:
    """Async client for the forwarding backend.

    Every call is issued exactly once. Failures are translated into the
    forwarding exception hierarchy and raised to the caller; nothing here
    retries, because a repeated PATCH could flip a toggle twice.
    """

    def __init__(
        self,
        settings: ForwardingSettings,
        access_token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the forwarding client.

        Args:
            settings: Forwarding settings with the backend base URL and timeout
            access_token: The operator's bearer token, forwarded to the backend
            transport: Optional httpx transport (used by tests)
        """
        self.settings = settings
        self.access_token = access_token
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "ForwardingAPIClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _ensure_client(self) -> None:
        """Ensure HTTP client is initialized."""
        if self._client is None:
            headers = {"Content-Type": "application/json"}
            if self.access_token:
                headers["Authorization"] = f"Bearer {self.access_token}"
            self._client = httpx.AsyncClient(
                base_url=self.settings.api_base_url,
                headers=headers,
                timeout=self.settings.timeout,
                transport=self._transport,
            )

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, str] | None = None,
        data: dict | None = None,
        allow_not_found: bool = False,
    ) -> Any:
        """Make one HTTP request to the backend.

        Args:
            method: HTTP method (GET, PATCH)
            endpoint: API endpoint path
            params: Optional query parameters
            data: Optional JSON body
            allow_not_found: Return None on 404 instead of raising

        Returns:
            Decoded JSON body (None for empty bodies and allowed 404s)

        Raises:
            ForwardingAPIError: For every transport or HTTP failure
        """
        await self._ensure_client()

        try:
            response = await self._client.request(
                method, endpoint, params=params or None, json=data
            )
        except httpx.TimeoutException as e:
            logger.warning("Forwarding backend timed out", endpoint=endpoint, method=method)
            raise TransientNetworkFailure() from e
        except httpx.RequestError as e:
            logger.warning(
                "Forwarding backend unreachable",
                endpoint=endpoint,
                method=method,
                error=str(e),
            )
            raise TransientNetworkFailure() from e

        status_code = response.status_code
        if status_code == 404 and allow_not_found:
            return None
        if status_code >= 400:
            message = extract_server_message(response)
            response_data = self._json_or_none(response)
            logger.warning(
                "Forwarding backend returned an error",
                endpoint=endpoint,
                method=method,
                status_code=status_code,
                server_message=message,
            )
            if status_code == 401:
                raise SessionExpiredError(response_data=response_data)
            if status_code == 429:
                raise RateLimitedError(
                    message=message or "Too Many Requests",
                    retry_after=_parse_retry_after(response),
                    default_cooldown=self.settings.rate_limit_cooldown_seconds,
                    response_data=response_data,
                )
            if status_code >= 500:
                raise TransientNetworkFailure(
                    message=message or GENERIC_FAILURE_MESSAGE,
                    status_code=status_code,
                    response_data=response_data,
                )
            raise ValidationRejectedError(
                message=message or "The forwarding service rejected the request.",
                status_code=status_code,
                response_data=response_data,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.error("Forwarding backend returned invalid JSON", endpoint=endpoint)
            raise TransientNetworkFailure(status_code=status_code) from e

    @staticmethod
    def _json_or_none(response: httpx.Response) -> dict | None:
        try:
            body = response.json()
        except ValueError:
            return None
        return body if isinstance(body, dict) else None

    async def get_forwarding_state(self, target: ForwardingTarget) -> ForwardingStateRecord:
        """Read the forwarding record for a target."""
        response_data = await self._make_request(
            "GET", ForwardingEndpoint.STATE.value, params=target.query_params()
        )
        try:
            return ForwardingStateRecord.model_validate(response_data or {})
        except ValidationError as e:
            logger.error("Failed to parse forwarding state", error=str(e), target=target.key)
            raise TransientNetworkFailure() from e

    async def patch_forwarding_state(
        self, target: ForwardingTarget, patch: ForwardingStatePatch
    ) -> Any:
        """Send a partial update. The response body is not trusted as the new state."""
        payload = patch.to_payload()
        logger.info(
            "Patching forwarding state",
            target=target.key,
            confirmation_status=patch.confirmation_status.value,
            fields=sorted(payload),
        )
        return await self._make_request(
            "PATCH",
            ForwardingEndpoint.STATE.value,
            params=target.query_params(),
            data=payload,
        )

    async def get_carrier_catalog(self) -> list[RemoteCarrierEntry]:
        """List the carriers the backend supports."""
        response_data = await self._make_request("GET", ForwardingEndpoint.CARRIERS.value)
        if isinstance(response_data, dict):
            response_data = response_data.get("carriers", [])
        try:
            return [RemoteCarrierEntry.model_validate(item) for item in response_data or []]
        except ValidationError as e:
            logger.error("Failed to parse carrier catalog", error=str(e))
            raise TransientNetworkFailure() from e

    async def get_assigned_number(self, target: ForwardingTarget) -> AssignedNumber | None:
        """Read the target's assigned number; None when nothing is assigned."""
        response_data = await self._make_request(
            "GET",
            ForwardingEndpoint.ASSIGNED_NUMBER.value,
            params=target.query_params(),
            allow_not_found=True,
        )
        if not isinstance(response_data, dict) or not response_data.get("number"):
            return None
        try:
            assigned = AssignedNumber.model_validate(response_data)
        except ValidationError as e:
            logger.error("Failed to parse assigned number", error=str(e), target=target.key)
            raise TransientNetworkFailure() from e
        return assigned if assigned.has_number else None
