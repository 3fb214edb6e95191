class GatewayError(Exception):
    """A remote call failed, either in transport or with a non-2xx status."""

    message: str

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class UserStoreError(Exception):
    message: str

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class FetchFailure(UserStoreError):
    def __init__(self, message: str = "Failed to fetch users"):
        super().__init__(message)


class CreateFailure(UserStoreError):
    def __init__(self, message: str = "Failed to add user"):
        super().__init__(message)


class UpdateFailure(UserStoreError):
    def __init__(self, message: str = "Failed to update user"):
        super().__init__(message)


class DeleteFailure(UserStoreError):
    def __init__(self, message: str = "Failed to delete user"):
        super().__init__(message)


class UnknownUserError(UserStoreError):
    user_id: int

    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"No user with id {user_id}")


class FieldValidationFailure(Exception):
    field: str
    message: str

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")
