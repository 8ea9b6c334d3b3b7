from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class MockOptions(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True, frozen=True)

    strict_wildcards: bool = False
    thread_safe: bool = False
    wrap_deferred_results: bool = True
    name: Optional[str] = Field(default=None, min_length=1)


DEFAULT_OPTIONS = MockOptions()
