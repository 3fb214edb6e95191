import logging
from typing import Any

import httpx
from pydantic import ValidationError

from ..errors import GatewayError
from .types import ListedUser, RemoteUser, UserPayload

logger = logging.getLogger(__name__)

USERS_PATH = "/users"


class UserGateway:
    """Issues the four calls against the remote /users collection.

    Every call opens its own client and is sent exactly once. The gateway
    holds no state beyond its connection settings.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def list_users(self) -> list[ListedUser]:
        data = await self._request("GET", USERS_PATH)
        if not isinstance(data, list):
            raise GatewayError(f"Expected a list of users, got {type(data).__name__}")
        try:
            users = [ListedUser.model_validate(item) for item in data]
        except ValidationError as e:
            raise GatewayError(f"Malformed user in response: {e}") from e

        ids = [u.id for u in users]
        if len(set(ids)) != len(ids):
            raise GatewayError("Duplicate user ids in response")
        return users

    async def create_user(self, payload: UserPayload) -> RemoteUser:
        data = await self._request("POST", USERS_PATH, payload)
        return self._parse_user(data)

    async def update_user(self, user_id: int, payload: UserPayload) -> RemoteUser:
        data = await self._request("PUT", f"{USERS_PATH}/{user_id}", payload)
        return self._parse_user(data)

    async def delete_user(self, user_id: int) -> None:
        await self._request("DELETE", f"{USERS_PATH}/{user_id}")

    async def _request(self, method: str, path: str, payload: UserPayload | None = None) -> Any:
        url = f"{self.base_url}{path}"
        body = payload.model_dump(exclude_none=True) if payload is not None else None

        logger.debug(f"Sending {method} {url}")
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.request(method, url, json=body)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise GatewayError(f"{method} {url} returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise GatewayError(f"{method} {url} failed: {e}") from e

        logger.debug(f"Received {response.status_code} for {method} {url} ({len(response.content)} bytes)")

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise GatewayError(f"{method} {url} returned invalid JSON") from e

    @staticmethod
    def _parse_user(data: Any) -> RemoteUser:
        # Write responses are echoes, not stored records; callers never rely on them.
        if not isinstance(data, dict):
            return RemoteUser()
        try:
            return RemoteUser.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Ignoring malformed user echo: {e}")
            return RemoteUser()
