"""
Pydantic models for the box publisher.

This module defines all data models used throughout the application, including:
- Package identity (namespace / box name)
- Artifact descriptors produced by an export
- The metadata.json index document and its version/provider entries
- Precondition and run results

All models use Pydantic for validation, serialization, and type safety.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from boxpublish.domain.errors import ConfigError


NAME_SEPARATOR = "/"
PROVIDER_NAME = "virtualbox"
CHECKSUM_TYPE = "sha1"
INDEX_FILENAME = "metadata.json"


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------


class PackageIdentity(BaseModel):
    """
    A qualified box name split into its namespace and box name.

    The qualified form is 'namespace/boxname'. The namespace doubles as the
    local directory the artifact and index are written to.
    """

    model_config = ConfigDict(frozen=True)

    namespace: str = Field(
        description="Publisher-scoped prefix of the qualified name.",
    )
    box_name: str = Field(
        description="Box name within the namespace.",
    )

    @classmethod
    def parse(cls, qualified_name: str) -> PackageIdentity:
        """
        Split 'namespace/boxname' on the single separator.

        Raises ConfigError unless there is exactly one separator and both
        halves are non-empty.
        """
        value = (qualified_name or "").strip()
        parts = value.split(NAME_SEPARATOR)
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise ConfigError(
                reason_code="MALFORMED_IDENTITY",
                message=f"name must have the form 'namespace{NAME_SEPARATOR}boxname', got {qualified_name!r}",
            )
        return cls(namespace=parts[0], box_name=parts[1])

    @property
    def qualified_name(self) -> str:
        return f"{self.namespace}{NAME_SEPARATOR}{self.box_name}"

    @property
    def sanitized_name(self) -> str:
        return self.qualified_name.replace(NAME_SEPARATOR, "_")

    def artifact_path(self, version: str, extension: str = "box") -> str:
        """Relative path of the artifact: '<namespace>/<sanitized>-<version>.<ext>'."""
        return f"{self.namespace}/{self.sanitized_name}-{version}.{extension}"


# ---------------------------------------------------------------------------
# Index document (metadata.json)
# ---------------------------------------------------------------------------


class IndexProvider(BaseModel):
    """
    One downloadable artifact for a version, targeting a single provider.

    Unknown keys from a fetched index are kept so re-serializing never drops them.
    """

    model_config = ConfigDict(extra="allow")

    name: str = Field(
        description="Virtualization provider the artifact targets (e.g., 'virtualbox').",
    )
    url: str = Field(
        description="Absolute download URL of the artifact.",
    )
    checksum: Optional[str] = Field(
        default=None,
        description="Hex digest of the artifact contents.",
    )
    checksum_type: Optional[str] = Field(
        default=None,
        description="Digest algorithm used for checksum (e.g., 'sha1').",
    )


class IndexVersion(BaseModel):
    """
    A published version and the providers it is available for.
    """

    model_config = ConfigDict(extra="allow")

    version: str = Field(
        description="Version string (e.g., '1.0.0').",
    )
    providers: List[IndexProvider] = Field(
        default_factory=list,
        description="Artifacts published for this version, one per provider.",
    )


class PackageIndex(BaseModel):
    """
    The metadata.json document enumerating all published versions of a box.

    Versions are append-only: existing entries are never reordered, changed
    or dropped when a new version is merged in.

    Persisted at: <WORK_DIR>/<namespace>/metadata.json
    """

    model_config = ConfigDict(extra="allow")

    name: str = Field(
        description="Qualified box name ('namespace/boxname').",
    )
    versions: List[IndexVersion] = Field(
        default_factory=list,
        description="Published versions in publication order.",
    )

    @classmethod
    def empty(cls, identity: PackageIdentity) -> PackageIndex:
        return cls(name=identity.qualified_name, versions=[])

    def has_version(self, version: str) -> bool:
        return any(v.version == version for v in self.versions)

    def to_json(self) -> str:
        # Defaults a fetched document never carried are not written back.
        return self.model_dump_json(indent=2, exclude_unset=True) + "\n"


# ---------------------------------------------------------------------------
# Artifact descriptor
# ---------------------------------------------------------------------------


class ArtifactDescriptor(BaseModel):
    """
    Describes a freshly exported artifact. Immutable once created.
    """

    model_config = ConfigDict(frozen=True)

    version: str = Field(
        description="Version the artifact was exported as.",
    )
    provider_name: Literal["virtualbox"] = Field(
        default=PROVIDER_NAME,
        description="Provider the artifact targets. Only 'virtualbox' is supported.",
    )
    download_url: str = Field(
        description="URL clients will download the artifact from once published.",
    )
    checksum: str = Field(
        description="SHA-1 hex digest of the artifact contents.",
    )
    checksum_type: Literal["sha1"] = Field(
        default=CHECKSUM_TYPE,
        description="Digest algorithm of checksum.",
    )

    def to_index_version(self) -> IndexVersion:
        return IndexVersion(
            version=self.version,
            providers=[
                IndexProvider(
                    name=self.provider_name,
                    url=self.download_url,
                    checksum=self.checksum,
                    checksum_type=self.checksum_type,
                )
            ],
        )


# ---------------------------------------------------------------------------
# Run bookkeeping
# ---------------------------------------------------------------------------


class PreconditionResult(BaseModel):
    """
    Outcome of a named filesystem precondition check.
    """

    check: str = Field(
        description="Name of the check (e.g., 'artifact_absent').",
    )
    path: Path = Field(
        description="Path the check inspected.",
    )
    ok: bool = Field(
        description="True if the precondition holds.",
    )
    detail: Optional[str] = Field(
        default=None,
        description="Human readable reason when the check failed.",
    )


class PublishResult(BaseModel):
    """
    Summary of a completed publish run.
    """

    identity: PackageIdentity
    version: str
    artifact_path: str = Field(
        description="Artifact path relative to the work directory.",
    )
    checksum: str
    download_url: str
    index_path: Path = Field(
        description="Location of the written metadata.json.",
    )
    version_count: int = Field(
        description="Number of versions in the written index.",
    )
    remote_index_found: bool = Field(
        description="False when no remote index existed (first publish).",
    )
