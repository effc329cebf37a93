"""
The publish run: export, checksum, fetch the remote index, merge, write.

Steps run strictly in that order and every failure aborts the run. Nothing
is rolled back: an artifact exported before a later step fails stays on
disk, and the operator clears it before retrying.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from boxpublish.core.config import PublishSettings
from boxpublish.domain.box_utils import join_url
from boxpublish.domain.models import PreconditionResult, PublishResult
from boxpublish.services.exporter import ArtifactExporter
from boxpublish.services.index_fetcher import IndexFetcher
from boxpublish.storage.index_writer import IndexWriter


class Publisher:
    def __init__(
        self,
        settings: PublishSettings,
        exporter: ArtifactExporter,
        fetcher: IndexFetcher,
        writer: IndexWriter,
        logger: Optional[logging.Logger] = None,
    ):
        self.settings = settings
        self.identity = settings.identity
        self.exporter = exporter
        self.fetcher = fetcher
        self.writer = writer
        self.logger = logger or logging.getLogger(__name__)

    @property
    def parent_dir(self) -> Path:
        return self.exporter.namespace_dir(self.identity)

    def preflight(self) -> List[PreconditionResult]:
        """
        Evaluate every filesystem precondition of the run up front, before
        anything is exported.
        """
        results = self.exporter.check_preconditions(self.identity, self.settings.version)
        results.extend(self.writer.check_preconditions(self.parent_dir))
        return results

    async def run(self) -> PublishResult:
        identity = self.identity
        version = self.settings.version
        target_url = self.settings.target_url

        checksum, artifact_path = await self.exporter.export(identity, version)

        existing = await self.fetcher.fetch(identity, target_url)

        merged = await self.writer.write(
            identity,
            self.parent_dir,
            checksum,
            artifact_path,
            target_url,
            existing,
            version,
        )

        result = PublishResult(
            identity=identity,
            version=version,
            artifact_path=artifact_path,
            checksum=checksum,
            download_url=join_url(target_url, identity.qualified_name, artifact_path),
            index_path=self.writer.index_path(self.parent_dir),
            version_count=len(merged.versions),
            remote_index_found=existing is not None,
        )
        self.logger.info(
            f"Published {identity.qualified_name} {version}: upload {result.artifact_path} "
            f"and {result.index_path} to {join_url(target_url, identity.qualified_name)}"
        )
        return result
