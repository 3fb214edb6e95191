"""The local, authoritative list of users.

The remote API echoes writes without storing them, so after every remote
call that succeeds the store applies the change to its own list and treats
that list as the truth. New records get a locally computed id
(len(users) + 1); the id in the API's response is never used.
"""

import asyncio
import dataclasses
import logging
from dataclasses import dataclass
from typing import Callable

from .api.client import UserGateway
from .api.types import Company, ListedUser, UserPayload
from .errors import (
    CreateFailure,
    DeleteFailure,
    FetchFailure,
    GatewayError,
    UnknownUserError,
    UpdateFailure,
)
from .types import UNKNOWN_DEPARTMENT, FormValues, UserRecord

logger = logging.getLogger(__name__)

USER_ADDED = "User added successfully!"
USER_UPDATED = "User updated successfully!"
USER_DELETED = "User deleted successfully!"


@dataclass(frozen=True)
class StoreState:
    users: tuple[UserRecord, ...] = ()
    loading: bool = False
    error: str | None = None
    success_message: str | None = None


Listener = Callable[[StoreState], None]


def record_from_remote(user: ListedUser) -> UserRecord:
    return UserRecord(
        id=user.id,
        full_name=user.name,
        email=user.email,
        department=user.department or UNKNOWN_DEPARTMENT,
    )


def next_user_id(users: tuple[UserRecord, ...]) -> int:
    candidate = len(users) + 1
    if any(u.id == candidate for u in users):
        # len + 1 can land on a surviving id after a delete
        return max(u.id for u in users) + 1
    return candidate


def append_record(users: tuple[UserRecord, ...], record: UserRecord) -> tuple[UserRecord, ...]:
    return users + (record,)


def replace_record(users: tuple[UserRecord, ...], record: UserRecord) -> tuple[UserRecord, ...]:
    return tuple(record if u.id == record.id else u for u in users)


def remove_record(users: tuple[UserRecord, ...], user_id: int) -> tuple[UserRecord, ...]:
    return tuple(u for u in users if u.id != user_id)


def payload_from_values(values: FormValues) -> UserPayload:
    return UserPayload(
        name=values.full_name,
        email=values.email,
        company=Company(name=values.department),
    )


class UserListStore:
    def __init__(self, gateway: UserGateway):
        self.gateway = gateway
        self.state = StoreState()
        self._listeners: list[Listener] = []
        self._lock = asyncio.Lock()

    @property
    def users(self) -> tuple[UserRecord, ...]:
        return self.state.users

    @property
    def loading(self) -> bool:
        return self.state.loading

    @property
    def error(self) -> str | None:
        return self.state.error

    @property
    def success_message(self) -> str | None:
        return self.state.success_message

    def get(self, user_id: int) -> UserRecord:
        for user in self.state.users:
            if user.id == user_id:
                return user
        raise UnknownUserError(user_id)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dismiss_error(self) -> None:
        if self.state.error is not None:
            self._set_state(error=None)

    def dismiss_success(self) -> None:
        if self.state.success_message is not None:
            self._set_state(success_message=None)

    async def fetch_all(self) -> tuple[UserRecord, ...]:
        async with self._lock:
            self._set_state(loading=True)
            try:
                remote_users = await self.gateway.list_users()
            except GatewayError as e:
                logger.warning(f"Fetching users failed: {e}")
                failure = FetchFailure()
                self._set_state(loading=False, error=failure.message)
                raise failure from e

            users = tuple(record_from_remote(u) for u in remote_users)
            logger.info(f"Loaded {len(users)} users")
            self._set_state(users=users, loading=False, error=None)
            return users

    async def create(self, values: FormValues) -> UserRecord:
        async with self._lock:
            try:
                await self.gateway.create_user(payload_from_values(values))
            except GatewayError as e:
                logger.warning(f"Creating user failed: {e}")
                failure = CreateFailure()
                self._set_state(error=failure.message)
                raise failure from e

            record = UserRecord(
                id=next_user_id(self.state.users),
                full_name=values.full_name,
                email=values.email,
                department=values.department,
            )
            logger.info(f"Added user {record.id}")
            self._set_state(
                users=append_record(self.state.users, record),
                error=None,
                success_message=USER_ADDED,
            )
            return record

    async def update(self, user_id: int, values: FormValues) -> UserRecord:
        async with self._lock:
            self.get(user_id)
            try:
                await self.gateway.update_user(user_id, payload_from_values(values))
            except GatewayError as e:
                logger.warning(f"Updating user {user_id} failed: {e}")
                failure = UpdateFailure()
                self._set_state(error=failure.message)
                raise failure from e

            record = UserRecord(
                id=user_id,
                full_name=values.full_name,
                email=values.email,
                department=values.department,
            )
            logger.info(f"Updated user {user_id}")
            self._set_state(
                users=replace_record(self.state.users, record),
                error=None,
                success_message=USER_UPDATED,
            )
            return record

    async def delete(self, user_id: int) -> None:
        async with self._lock:
            self.get(user_id)
            try:
                await self.gateway.delete_user(user_id)
            except GatewayError as e:
                logger.warning(f"Deleting user {user_id} failed: {e}")
                failure = DeleteFailure()
                self._set_state(error=failure.message)
                raise failure from e

            logger.info(f"Deleted user {user_id}")
            self._set_state(
                users=remove_record(self.state.users, user_id),
                error=None,
                success_message=USER_DELETED,
            )

    def _set_state(self, **changes) -> None:
        self.state = dataclasses.replace(self.state, **changes)
        for listener in list(self._listeners):
            listener(self.state)
