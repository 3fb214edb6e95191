import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from pydantic import ConfigDict, ValidationError, field_validator

from .errors import FieldValidationFailure
from .types import FormValues, UserRecord

logger = logging.getLogger(__name__)

DEPARTMENTS = [
    "Romaguera-Crona",
    "Deckow-Crist",
    "Romaguera-Jacobson",
    "Robel-Corkery",
    "Keebler LLC",
    "Considine-Lockman",
    "Johns Group",
    "Abernathy Group",
    "Yost and Sons",
    "Hoeger LLC",
]

EMAIL_PATTERN = re.compile(
    r"^[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)+$"
)

FIELDS = ("first_name", "last_name", "email", "department")


def check_first_name(value: str) -> str | None:
    if not value.strip():
        return "First Name is required"
    return None


def check_last_name(value: str) -> str | None:
    return None


def check_email(value: str) -> str | None:
    value = value.strip()
    if not value:
        return "Email is required"
    if not EMAIL_PATTERN.match(value):
        return "Invalid email format"
    return None


def check_department(value: str) -> str | None:
    if not value.strip():
        return "Department is required"
    return None


RULES: dict[str, Callable[[str], str | None]] = {
    "first_name": check_first_name,
    "last_name": check_last_name,
    "email": check_email,
    "department": check_department,
}


class ValidatedFormValues(FormValues):
    """FormValues that only construct when every rule passes.

    Values are trimmed on the way in.
    """
    model_config = ConfigDict(validate_default=True)

    @field_validator("first_name", "last_name", "email", "department")
    @classmethod
    def _apply_rule(cls, value: str, info) -> str:
        error = RULES[info.field_name](value)
        if error:
            raise ValueError(error)
        return value.strip()


def validate_field(name: str, value: str) -> str | None:
    rule = RULES.get(name)
    if rule is None:
        raise KeyError(f"Unknown form field: {name}")
    return rule(value)


def validate_form(values: FormValues | dict[str, Any]) -> tuple[ValidatedFormValues | None, dict[str, str]]:
    """Run every rule and return (validated values, errors by field).

    All failing fields are reported together. Exactly one of the two
    return values is meaningful: errors is empty iff validation passed.
    """
    if isinstance(values, FormValues):
        values = values.model_dump()

    try:
        return ValidatedFormValues.model_validate(values), {}
    except ValidationError as e:
        errors: dict[str, str] = {}
        for error in e.errors():
            name = str(error["loc"][0]) if error["loc"] else "__root__"
            ctx_error = error.get("ctx", {}).get("error")
            errors.setdefault(name, str(ctx_error) if ctx_error is not None else error["msg"])
        return None, errors


class FormMode(str, Enum):
    CREATE = "create"
    EDIT = "edit"


class IntentKind(str, Enum):
    CREATE = "create"
    UPDATE = "update"


@dataclass(frozen=True)
class Intent:
    kind: IntentKind
    values: FormValues
    target_id: int | None = None


@dataclass(frozen=True)
class ValidationFailure:
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def failures(self) -> list[FieldValidationFailure]:
        return [FieldValidationFailure(name, message) for name, message in self.errors.items()]


class UserFormController:
    """Create/Edit form state.

    In Create mode the form starts empty; in Edit mode it is pre-filled from
    the record being edited. A valid submit produces an Intent and resets
    the form back to an empty Create form. An invalid submit keeps the
    values and records the errors.
    """

    def __init__(self):
        self.mode = FormMode.CREATE
        self.editing: UserRecord | None = None
        self.values = FormValues()
        self.errors: dict[str, str] = {}
        self.touched: set[str] = set()

    def load(self, record: UserRecord | None = None) -> FormValues:
        if record is None:
            self.mode = FormMode.CREATE
            self.editing = None
            self.values = FormValues()
        else:
            self.mode = FormMode.EDIT
            self.editing = record
            self.values = FormValues.from_record(record)
        self.errors = {}
        self.touched = set()
        return self.values

    def edit(self, record: UserRecord) -> FormValues:
        logger.debug(f"Editing user {record.id}")
        return self.load(record)

    def cancel(self) -> FormValues:
        return self.load(None)

    @property
    def title(self) -> str:
        return "Edit User" if self.mode == FormMode.EDIT else "Add New User"

    @property
    def submit_label(self) -> str:
        return "Update User" if self.mode == FormMode.EDIT else "Add User"

    @property
    def visible_errors(self) -> dict[str, str]:
        return {name: message for name, message in self.errors.items() if name in self.touched}

    def blur(self, name: str, value: str) -> str | None:
        error = validate_field(name, value)
        self.values = self.values.model_copy(update={name: value})
        self.touched.add(name)
        if error:
            self.errors[name] = error
        else:
            self.errors.pop(name, None)
        return error

    def submit(self, raw: FormValues | dict[str, Any] | None = None) -> Intent | ValidationFailure:
        if raw is None:
            raw = self.values
        elif not isinstance(raw, FormValues):
            raw = FormValues.model_validate(raw)

        validated, errors = validate_form(raw)
        self.touched = set(FIELDS)

        if validated is None:
            self.values = raw
            self.errors = errors
            logger.debug(f"Form rejected: {', '.join(errors)}")
            return ValidationFailure(errors)

        values = FormValues.model_validate(validated.model_dump())
        if self.mode == FormMode.EDIT and self.editing is not None:
            intent = Intent(IntentKind.UPDATE, values, self.editing.id)
        else:
            intent = Intent(IntentKind.CREATE, values)

        self.load(None)
        return intent
