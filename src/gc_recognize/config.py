"""Tunable limits for a recognition run."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ParserSettings(BaseModel):
    """Configurable limits for preprocessing and unknown-line reporting."""

    model_config = ConfigDict(frozen=True)

    # Number of unrecognized lines kept verbatim for reporting
    unknown_sample_limit: int = Field(default=20, ge=0)

    # A fragment still open after this many physical lines is discarded
    max_fragment_lines: int = Field(default=500, ge=1)

    drop_statistics: bool = True
