"""Wire models for the Pterodactyl application API."""

from datetime import datetime
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict


class PartialUser(BaseModel):
    """User attributes sent on create and update."""

    username: str
    email: str
    first_name: str
    last_name: str


class User(BaseModel):
    """User entity as returned by the panel."""

    model_config = ConfigDict(extra="ignore")

    id: int
    username: str
    email: str
    first_name: str
    last_name: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_envelope(cls, body: Dict[str, Any]) -> "User":
        """Parse a ``{"object": "user", "attributes": {...}}`` response body."""
        return cls.model_validate(body.get("attributes", body))
