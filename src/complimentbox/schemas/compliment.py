"""Pydantic schemas for compliments.

The browser client posts camelCase (`recipientCode`); snake_case is accepted
too. Both fields are optional at the schema level so that missing values
reach the service and come back as a 400 rather than a schema error.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ─── Submit (sender → platform) ─────────────────────────


class ComplimentCreate(BaseModel):
    """Anonymous sender submits a compliment."""

    model_config = ConfigDict(populate_by_name=True)

    recipient_code: Optional[str] = Field(
        None, alias="recipientCode", description="Recipient code the compliment is for"
    )
    message: Optional[str] = Field(None, description="The compliment text")


# ─── Read (platform → client) ───────────────────────────


class ComplimentRead(BaseModel):
    """A stored compliment, as returned by the API and pushed over WebSocket."""

    id: int
    recipient_code: str
    message: str
    created_at: datetime

    model_config = {"from_attributes": True}


class ComplimentList(BaseModel):
    """History response — newest first."""

    compliments: list[ComplimentRead]
