"""
Merge a new artifact into a box index and write it to the work directory.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import aiofiles

from boxpublish.domain.box_utils import join_url
from boxpublish.domain.errors import ConflictError
from boxpublish.domain.models import (
    INDEX_FILENAME,
    ArtifactDescriptor,
    PackageIdentity,
    PackageIndex,
    PreconditionResult,
)
from boxpublish.storage.preconditions import INDEX_ABSENT, check_absent, require

logger = logging.getLogger(__name__)


def merge_descriptor(
    index: PackageIndex,
    descriptor: ArtifactDescriptor,
    log: Optional[logging.Logger] = None,
) -> PackageIndex:
    """
    Return a copy of index with descriptor appended as the newest version.

    Existing versions are carried over untouched and in order. A version that
    is already listed is logged and appended again.
    """
    if index.has_version(descriptor.version):
        (log or logger).warning(f"Version {descriptor.version} is already listed in the index for {index.name}")
    merged = index.model_copy(deep=True)
    merged.versions = [*merged.versions, descriptor.to_index_version()]
    return merged


class IndexWriter:
    """Writes metadata.json next to the exported artifact."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def index_path(parent_dir: Path) -> Path:
        return parent_dir / INDEX_FILENAME

    def check_preconditions(self, parent_dir: Path) -> List[PreconditionResult]:
        return [check_absent(INDEX_ABSENT, self.index_path(parent_dir))]

    async def write(
        self,
        identity: PackageIdentity,
        parent_dir: Path,
        checksum: str,
        artifact_path: str,
        target_url: str,
        existing_index: Optional[PackageIndex],
        version: str,
    ) -> PackageIndex:
        """
        Append the artifact to existing_index (or a fresh index) and write it
        to <parent_dir>/metadata.json.

        Returns the merged index. Raises ConflictError if metadata.json
        already exists; the existing file is left untouched.
        """
        for result in self.check_preconditions(parent_dir):
            require(result)

        descriptor = ArtifactDescriptor(
            version=version,
            download_url=join_url(target_url, identity.qualified_name, artifact_path),
            checksum=checksum,
        )
        base = existing_index if existing_index is not None else PackageIndex.empty(identity)
        merged = merge_descriptor(base, descriptor, self.logger)

        path = self.index_path(parent_dir)
        try:
            # Exclusive create: an index appearing after the check is not clobbered either.
            async with aiofiles.open(path, "x", encoding="utf-8") as f:
                await f.write(merged.to_json())
        except FileExistsError as e:
            raise ConflictError(
                f"{path} already exists; remove it before publishing again",
                reason_code=INDEX_ABSENT.upper(),
                path=str(path),
            ) from e

        self.logger.info(f"Wrote {path} with {len(merged.versions)} version(s)")
        return merged
