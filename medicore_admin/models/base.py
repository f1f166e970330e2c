"""Base model for MediCore API payloads."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class APIModel(BaseModel):
    """
    Base for server payloads.

    - Accepts the server's camelCase aliases and snake_case field names.
    - Keeps unknown fields so snapshots round-trip the server's shape.
    - Frozen: cached items are replaced, never edited in place.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="allow",
        frozen=True,
    )

    def to_payload(self) -> dict[str, Any]:
        """Serialize back to the server's JSON shape."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class Identified(APIModel):
    """Payload carrying a server-assigned ``_id``."""

    id: str = Field(alias="_id")
