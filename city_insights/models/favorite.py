"""Favourite city models."""

import json
from datetime import datetime, timezone
from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints

NonEmpty = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class FavoriteRequest(BaseModel):
    """Favourite add request."""

    city: NonEmpty
    country: NonEmpty


class FavoriteEntry(BaseModel):
    """A city saved as favourite, identified by exact (city, country)."""

    city: str
    country: str
    saved_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def key(self) -> str:
        """Hash field for the exact (city, country) pair."""
        return json.dumps([self.city, self.country])


class FavoriteActionResponse(BaseModel):
    """Outcome of a favourite add request."""

    added: bool
    favorite: FavoriteEntry
