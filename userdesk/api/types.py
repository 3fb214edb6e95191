"""Wire models for the remote /users collection."""

from pydantic import BaseModel, ConfigDict


class Company(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str | None = None


class RemoteUser(BaseModel):
    """A user as the remote API returns it.

    The API sends many more fields (username, address, phone, website);
    only the ones the table shows are kept.
    """
    model_config = ConfigDict(extra="ignore")

    id: int | None = None
    name: str = ""
    email: str = ""
    company: Company | None = None

    @property
    def department(self) -> str | None:
        if self.company is None:
            return None
        return self.company.name or None


class ListedUser(RemoteUser):
    """A stored user from the collection listing; these always carry an id."""
    id: int


class UserPayload(BaseModel):
    """Request body for create and update."""
    name: str
    email: str
    company: Company | None = None
