"""Record models for locations, connections and drawable segments."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Location(BaseModel):
    """A named point on the map (a visited country's centroid)."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(gt=0)
    longitude: float = Field(ge=-180, le=180)
    latitude: float = Field(ge=-90, le=90)
    name: str

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be empty")
        return value


class Connection(BaseModel):
    """A trip between two locations."""

    model_config = ConfigDict(frozen=True)

    from_id: int
    to_id: int
    weight: float = Field(gt=0, le=1)
    category: str

    @field_validator("category")
    @classmethod
    def category_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("category must not be empty")
        return value


class Segment(BaseModel):
    """One renderable line: a connection with both endpoint coordinates."""

    model_config = ConfigDict(frozen=True)

    from_id: int
    to_id: int
    weight: float
    category: str
    x: float
    y: float
    xend: float
    yend: float
