"""Pydantic models describing a Site-Searcher run."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_CONCURRENCY = 20
DEFAULT_TIMEOUT_SECONDS = 10.0


class HttpConfig(BaseModel):
    """Transport settings shared by every request of a run."""

    timeout: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    follow_redirects: bool = True
    user_agent: str | None = None
    verify_tls: bool = True
    # Prepended to targets given as bare hostnames
    default_scheme: str = "http://"
    # Off by default: the body of any status is searched
    fail_on_http_error: bool = False

    @field_validator("default_scheme")
    @classmethod
    def _check_scheme(cls, value: str) -> str:
        value = value.strip()
        if value.endswith(":"):
            value += "//"
        elif not value.endswith("://"):
            value += "://"
        if value not in ("http://", "https://"):
            raise ValueError("default_scheme must be http:// or https://")
        return value


class SearchConfig(BaseModel):
    """Full definition of a search run."""

    in_file: Path = Field(default=Path("urls.txt"))
    out_file: Path = Field(default=Path("results.txt"))
    search_term: str = "Treasure"
    ignore_case: bool = False
    literal: bool = False
    concurrency: int = Field(default=DEFAULT_CONCURRENCY, ge=1)
    target_column: int = Field(default=1, ge=0)
    skip_header: bool = True
    output_format: Literal["csv", "jsonl", "sqlite"] = "csv"
    http: HttpConfig = Field(default_factory=HttpConfig)

    @field_validator("in_file", "out_file", mode="before")
    @classmethod
    def _coerce_path(cls, value: Any) -> Path:
        if value in (None, ""):
            raise ValueError("path cannot be empty")
        return Path(value).expanduser()

    @field_validator("output_format", mode="before")
    @classmethod
    def _normalise_format(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip().lower()
            if value == "json":
                return "jsonl"
        return value

    @model_validator(mode="after")
    def _validate_paths(self) -> "SearchConfig":
        if self.in_file.resolve() == self.out_file.resolve():
            raise ValueError("in_file and out_file must be different files")
        return self


__all__ = ["DEFAULT_CONCURRENCY", "DEFAULT_TIMEOUT_SECONDS", "HttpConfig", "SearchConfig"]
