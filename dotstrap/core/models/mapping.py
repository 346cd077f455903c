"""FileMapping: one dotfile source and the place it is linked to."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, field_validator


class FileMapping(BaseModel):
    """A ``source`` file in the repository linked at ``destination``.

    Both paths must be absolute.
    """

    source: Path
    destination: Path

    @field_validator("source", "destination")
    @classmethod
    def _must_be_absolute(cls, value: Path) -> Path:
        if not value.is_absolute():
            raise ValueError(f"path must be absolute: {value}")
        return value
