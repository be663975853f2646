"""
FastAPI dependencies for the call forwarding workflow.

Each operator (identified by their bearer token and role) gets one
ForwardingController, so target switches and stale-response discarding span
requests the same way they span clicks in the dashboard.
"""

import asyncio
import hashlib
import time

from cachetools import TTLCache
from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from call_forwarding.forwarding.client import ForwardingAPIClient
from call_forwarding.forwarding.config import ForwardingSettings, get_forwarding_settings
from call_forwarding.forwarding.constants import UserRole
from call_forwarding.forwarding.controller import ForwardingController
from call_forwarding.utils.logger import logger

bearer_scheme = HTTPBearer()


class ForwardingSessions:
    """In-memory registry of per-operator controllers.

    Sessions are keyed by token and role and expire after
    `session_ttl_seconds` without a request. Bearer tokens rotate, so an
    expired or evicted session's HTTP client is closed once nothing is
    using it.
    """

    def __init__(self, settings: ForwardingSettings, timer=time.monotonic) -> None:
        self.settings = settings
        self._controllers: TTLCache = TTLCache(
            maxsize=settings.max_sessions,
            ttl=settings.session_ttl_seconds,
            timer=timer,
        )
        self._open: dict[tuple[str, UserRole], ForwardingController] = {}
        self._lock = asyncio.Lock()

    @staticmethod
    def _session_key(access_token: str, operator_role: UserRole) -> tuple[str, UserRole]:
        return hashlib.sha256(access_token.encode()).hexdigest(), operator_role

    def _take_evicted(self) -> list[ForwardingController]:
        self._controllers.expire()
        evicted = [key for key in self._open if key not in self._controllers]
        return [self._open.pop(key) for key in evicted]

    async def get(self, access_token: str, operator_role: UserRole) -> ForwardingController:
        key = self._session_key(access_token, operator_role)
        async with self._lock:
            controller = self._controllers.get(key)
            if controller is None:
                client = ForwardingAPIClient(self.settings, access_token=access_token)
                controller = ForwardingController(
                    client,
                    operator_role=operator_role,
                    use_remote_catalog=self.settings.use_remote_catalog,
                )
                self._open[key] = controller
                logger.info("Opened forwarding session", operator_role=operator_role.value)
            # Re-inserting restarts the idle timeout.
            self._controllers[key] = controller
            evicted = self._take_evicted()

        await self._close(evicted)
        return controller

    @staticmethod
    async def _close(controllers: list[ForwardingController]) -> None:
        for controller in controllers:
            # Wait for any request still running on this session.
            async with controller.lock:
                await controller.client.close()
        if controllers:
            logger.info("Closed expired forwarding sessions", closed=len(controllers))

    async def close_all(self) -> None:
        async with self._lock:
            controllers = list(self._open.values())
            self._open.clear()
            self._controllers.clear()
        await self._close(controllers)

    def __len__(self) -> int:
        return len(self._open)


# Global session registry
_forwarding_sessions: ForwardingSessions | None = None


def get_forwarding_sessions() -> ForwardingSessions:
    """
    Get the global session registry.

    Returns:
        ForwardingSessions: The registry shared by all requests
    """
    global _forwarding_sessions
    if _forwarding_sessions is None:
        _forwarding_sessions = ForwardingSessions(get_forwarding_settings())
    return _forwarding_sessions


def get_access_token(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> str:
    """Bearer token of the operator, forwarded to the backend as-is."""
    return credentials.credentials


def get_operator_role(
    x_user_type: str | None = Header(default=None),
) -> UserRole:
    """Role of the signed-in operator; property manager unless stated otherwise."""
    if x_user_type == UserRole.REALTOR.value:
        return UserRole.REALTOR
    return UserRole.PROPERTY_MANAGER


async def get_forwarding_controller(
    access_token: str = Depends(get_access_token),
    operator_role: UserRole = Depends(get_operator_role),
    sessions: ForwardingSessions = Depends(get_forwarding_sessions),
) -> ForwardingController:
    """
    FastAPI dependency for the operator's forwarding controller.

    Returns:
        ForwardingController: The controller bound to this operator's session
    """
    return await sessions.get(access_token, operator_role)
