from __future__ import annotations

from datetime import datetime  # noqa: TC003 - Pydantic needs this at runtime

from pydantic import BaseModel, ConfigDict

# Title column shared by the tags, manual list and smart list databases
NAME_PROPERTY = "name"


class NamedItem(BaseModel):
    """A row of a database whose only meaningful column is its name."""

    model_config = ConfigDict(extra="ignore")

    id: str = ""
    name: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
