from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

from .utils.names import combine_name, split_full_name

UNKNOWN_DEPARTMENT = "N/A"


@dataclass(frozen=True)
class UserRecord:
    id: int
    full_name: str
    email: str
    department: str = UNKNOWN_DEPARTMENT

    @property
    def first_name(self) -> str:
        return split_full_name(self.full_name)[0]

    @property
    def last_name(self) -> str:
        return split_full_name(self.full_name)[1]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.full_name,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "department": self.department,
        }


class FormValues(BaseModel):
    """The values a user form holds, before or after validation."""
    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(default="", serialization_alias="firstName")
    last_name: str = Field(default="", serialization_alias="lastName")
    email: str = ""
    department: str = ""

    @property
    def full_name(self) -> str:
        return combine_name(self.first_name, self.last_name)

    @classmethod
    def from_record(cls, record: UserRecord) -> "FormValues":
        first_name, last_name = split_full_name(record.full_name)
        return cls(
            first_name=first_name,
            last_name=last_name,
            email=record.email,
            department=record.department,
        )
