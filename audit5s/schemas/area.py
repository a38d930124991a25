from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Area(BaseModel):
    """A physical location under audit. Built by the caller, never mutated."""

    name: str = Field(min_length=1)
    image_path: str = Field(validation_alias=AliasChoices("image_path", "imagePath"))
    department: str | None = None
    assessed_by: str | None = Field(
        default=None, validation_alias=AliasChoices("assessed_by", "assessedBy"),
    )
    date: str | None = None

    model_config = ConfigDict(frozen=True, populate_by_name=True)
