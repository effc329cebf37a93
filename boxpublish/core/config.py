"""
Run configuration for a single publish.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List

import httpx
from pydantic import BaseModel, Field, field_validator

from boxpublish.domain.errors import ConfigError
from boxpublish.domain.models import PackageIdentity

DEFAULT_EXPORT_COMMAND = ["vagrant", "package", "--output", "{output}"]


class PublishSettings(BaseModel):
    """
    Everything a publish run needs, resolved from CLI flags and environment.
    """

    name: str = Field(
        description="Qualified box name in the form 'namespace/boxname'.",
    )
    target_url: str = Field(
        description="Base URL the box and its metadata.json are published under.",
    )
    version: str = Field(
        description="Version string to publish (e.g., '1.0.0').",
    )
    work_dir: Path = Field(
        default_factory=Path.cwd,
        description="Directory the namespace directory is created in.",
    )
    export_command: List[str] = Field(
        default_factory=lambda: list(DEFAULT_EXPORT_COMMAND),
        description="Export command; '{output}' is replaced by the artifact path.",
    )
    box_extension: str = Field(
        default="box",
        description="File extension of the exported artifact.",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level name (DEBUG, INFO, WARNING, ERROR).",
    )

    @field_validator("name")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        try:
            PackageIdentity.parse(value)
        except ConfigError as e:
            raise ValueError(e.message) from e
        return value.strip()

    @field_validator("target_url")
    @classmethod
    def _http_url(cls, value: str) -> str:
        value = value.strip()
        try:
            url = httpx.URL(value)
        except httpx.InvalidURL as e:
            raise ValueError(f"invalid URL: {e}") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise ValueError("must be an absolute http:// or https:// URL")
        return value

    @field_validator("version", "box_extension")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("export_command")
    @classmethod
    def _command_not_empty(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {value!r}")
        return level

    @property
    def identity(self) -> PackageIdentity:
        return PackageIdentity.parse(self.name)
