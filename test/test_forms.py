import pytest

from userdesk.errors import FieldValidationFailure
from userdesk.forms import (
    FormMode,
    Intent,
    IntentKind,
    UserFormController,
    ValidationFailure,
    validate_field,
    validate_form,
)
from userdesk.types import FormValues, UserRecord

VALID = {
    "first_name": "John",
    "last_name": "Doe",
    "email": "john.doe@example.com",
    "department": "Romaguera-Crona",
}

LEANNE = UserRecord(id=1, full_name="Leanne Graham", email="Sincere@april.biz", department="Romaguera-Crona")


class TestValidateField:
    def test_first_name_required(self):
        assert validate_field("first_name", "") == "First Name is required"
        assert validate_field("first_name", "   ") == "First Name is required"
        assert validate_field("first_name", "John") is None

    def test_last_name_optional(self):
        assert validate_field("last_name", "") is None

    def test_email_required(self):
        assert validate_field("email", "") == "Email is required"

    @pytest.mark.parametrize("email", ["john", "john@", "@example.com", "john doe@example.com", "john@example"])
    def test_email_format(self, email):
        assert validate_field("email", email) == "Invalid email format"

    @pytest.mark.parametrize("email", ["Sincere@april.biz", "john.doe@example.com", "a+b@sub.example.org"])
    def test_valid_email(self, email):
        assert validate_field("email", email) is None

    def test_department_required(self):
        assert validate_field("department", "") == "Department is required"

    def test_unknown_field(self):
        with pytest.raises(KeyError):
            validate_field("phone", "123")


class TestValidateForm:
    def test_valid(self):
        validated, errors = validate_form(VALID)
        assert errors == {}
        assert validated.first_name == "John"

    def test_trims_values(self):
        validated, errors = validate_form({**VALID, "first_name": "  John ", "email": " john.doe@example.com"})
        assert errors == {}
        assert validated.first_name == "John"
        assert validated.email == "john.doe@example.com"

    def test_reports_every_failing_field(self):
        validated, errors = validate_form(FormValues())
        assert validated is None
        assert errors == {
            "first_name": "First Name is required",
            "email": "Email is required",
            "department": "Department is required",
        }

    def test_invalid_email_with_other_fields_valid(self):
        _, errors = validate_form({**VALID, "email": "not-an-email"})
        assert errors == {"email": "Invalid email format"}

    def test_empty_dict_reports_required_fields(self):
        validated, errors = validate_form({})
        assert validated is None
        assert errors == {
            "first_name": "First Name is required",
            "email": "Email is required",
            "department": "Department is required",
        }

    def test_missing_department_key(self):
        validated, errors = validate_form({"first_name": "John", "email": "john@example.com"})
        assert validated is None
        assert errors == {"department": "Department is required"}


class TestUserFormController:
    def test_starts_in_create_mode(self):
        form = UserFormController()
        assert form.mode == FormMode.CREATE
        assert form.values == FormValues()
        assert form.title == "Add New User"
        assert form.submit_label == "Add User"

    def test_load_record_prefills(self):
        form = UserFormController()
        values = form.load(LEANNE)
        assert form.mode == FormMode.EDIT
        assert values.first_name == "Leanne"
        assert values.last_name == "Graham"
        assert values.email == "Sincere@april.biz"
        assert values.department == "Romaguera-Crona"
        assert form.title == "Edit User"
        assert form.submit_label == "Update User"

    def test_load_none_is_empty(self):
        form = UserFormController()
        form.load(LEANNE)
        values = form.load(None)
        assert form.mode == FormMode.CREATE
        assert values == FormValues()

    def test_submit_create_intent(self):
        form = UserFormController()
        result = form.submit(VALID)
        assert isinstance(result, Intent)
        assert result.kind == IntentKind.CREATE
        assert result.target_id is None
        assert result.values.full_name == "John Doe"
        assert form.values == FormValues()

    def test_submit_update_intent_returns_to_create(self):
        form = UserFormController()
        form.edit(LEANNE)
        result = form.submit({**form.values.model_dump(), "first_name": "Jane"})
        assert isinstance(result, Intent)
        assert result.kind == IntentKind.UPDATE
        assert result.target_id == 1
        assert result.values.full_name == "Jane Graham"
        assert form.mode == FormMode.CREATE
        assert form.editing is None

    def test_submit_without_args_uses_current_values(self):
        form = UserFormController()
        for name, value in VALID.items():
            form.blur(name, value)
        result = form.submit()
        assert isinstance(result, Intent)
        assert result.values.email == "john.doe@example.com"

    def test_invalid_submit_keeps_values(self):
        form = UserFormController()
        form.edit(LEANNE)
        result = form.submit({**form.values.model_dump(), "first_name": "", "department": ""})
        assert isinstance(result, ValidationFailure)
        assert set(result.errors) == {"first_name", "department"}
        assert form.mode == FormMode.EDIT
        assert form.values.last_name == "Graham"
        assert form.visible_errors == result.errors

    def test_failure_lists_field_failures(self):
        result = UserFormController().submit({})
        assert isinstance(result, ValidationFailure)
        failures = result.failures
        assert all(isinstance(f, FieldValidationFailure) for f in failures)
        assert [f.field for f in failures] == ["first_name", "email", "department"]

    def test_blur_only_shows_touched_errors(self):
        form = UserFormController()
        assert form.blur("email", "bad") == "Invalid email format"
        assert form.visible_errors == {"email": "Invalid email format"}
        assert form.blur("email", "good@example.com") is None
        assert form.visible_errors == {}

    def test_cancel_clears_errors(self):
        form = UserFormController()
        form.edit(LEANNE)
        form.submit({"first_name": ""})
        form.cancel()
        assert form.mode == FormMode.CREATE
        assert form.errors == {}

    def test_values_serialize_with_camel_case(self):
        values = FormValues(first_name="John", last_name="Doe")
        assert values.model_dump(by_alias=True)["firstName"] == "John"
