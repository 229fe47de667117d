from uuid import UUID

from pydantic import BaseModel


class CurrentUser(BaseModel):
    """Caller resolved from the bearer token."""

    id: UUID
    role: str
