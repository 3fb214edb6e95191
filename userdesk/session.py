import logging
import math
from dataclasses import dataclass
from typing import Any, Sequence, TypeVar

from .errors import UserStoreError
from .forms import Intent, IntentKind, UserFormController, ValidationFailure
from .store import UserListStore
from .types import FormValues, UserRecord

logger = logging.getLogger(__name__)

DEFAULT_ROWS_PER_PAGE = 5

T = TypeVar("T")


def page_slice(items: Sequence[T], page: int, size: int) -> list[T]:
    start = page * size
    return list(items[start:start + size])


def page_count(total: int, size: int) -> int:
    if size <= 0:
        return 0
    return math.ceil(total / size)


@dataclass
class DeleteDialog:
    open: bool = False
    user_id: int | None = None


class ManagementSession:
    """Everything the user-management screen tracks besides rendering.

    Store failures are caught here and left on the store's error banner so
    that a presentation layer only ever reads state.
    """

    def __init__(self, store: UserListStore, rows_per_page: int = DEFAULT_ROWS_PER_PAGE):
        self.store = store
        self.form = UserFormController()
        self.delete_dialog = DeleteDialog()
        self.page = 0
        self.rows_per_page = rows_per_page

    @property
    def users(self) -> tuple[UserRecord, ...]:
        return self.store.users

    @property
    def visible_users(self) -> list[UserRecord]:
        return page_slice(self.store.users, self.page, self.rows_per_page)

    @property
    def page_count(self) -> int:
        return page_count(len(self.store.users), self.rows_per_page)

    async def load(self) -> bool:
        try:
            await self.store.fetch_all()
        except UserStoreError as e:
            logger.error(f"Initial load failed: {e}")
            return False
        return True

    async def submit(self, raw: FormValues | dict[str, Any] | None = None) -> Intent | ValidationFailure | None:
        """Validate the form and apply the resulting intent to the store.

        Returns the ValidationFailure when the form is invalid, the applied
        Intent on success, or None when the store rejected the intent.
        """
        editing = self.form.editing
        result = self.form.submit(raw)
        if isinstance(result, ValidationFailure):
            return result

        try:
            if result.kind == IntentKind.UPDATE:
                assert result.target_id is not None
                await self.store.update(result.target_id, result.values)
            else:
                await self.store.create(result.values)
        except UserStoreError as e:
            logger.error(f"Submitting {result.kind.value} failed: {e}")
            if editing is not None and result.kind == IntentKind.UPDATE:
                # keep the record in edit mode so the user can retry
                self.form.edit(editing)
            return None
        return result

    def start_edit(self, user_id: int) -> FormValues:
        return self.form.edit(self.store.get(user_id))

    def cancel_edit(self) -> None:
        self.form.cancel()
        self.store.dismiss_error()

    def request_delete(self, user_id: int) -> None:
        self.delete_dialog = DeleteDialog(open=True, user_id=user_id)

    def cancel_delete(self) -> None:
        self.delete_dialog = DeleteDialog()

    async def confirm_delete(self) -> bool:
        user_id = self.delete_dialog.user_id
        if not self.delete_dialog.open or user_id is None:
            return False
        try:
            await self.store.delete(user_id)
        except UserStoreError as e:
            logger.error(f"Deleting user {user_id} failed: {e}")
            return False
        finally:
            self.cancel_delete()

        if self.page > 0 and self.page >= self.page_count:
            self.page = self.page_count - 1
        return True

    def set_page(self, page: int) -> None:
        self.page = max(0, min(page, max(self.page_count - 1, 0)))

    def set_rows_per_page(self, rows_per_page: int) -> None:
        if rows_per_page <= 0:
            raise ValueError("rows per page must be positive")
        self.rows_per_page = rows_per_page
        self.page = 0

    def dismiss_messages(self) -> None:
        self.store.dismiss_error()
        self.store.dismiss_success()
