"""
Export a local VM into a box file and checksum the result.
"""
from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import aiofiles

from boxpublish.domain.box_utils import render_command
from boxpublish.domain.errors import ExportFailure
from boxpublish.domain.models import PackageIdentity, PreconditionResult
from boxpublish.services.process_runner import ProcessRunner
from boxpublish.storage.preconditions import (
    ARTIFACT_ABSENT,
    NAMESPACE_DIR_IS_DIRECTORY,
    check_absent,
    check_directory_or_absent,
    require,
)

CHUNK_SIZE = 1024 * 1024


async def sha1_file(path: Path) -> str:
    """Return the SHA-1 hex digest of a file, reading it once in chunks."""
    hasher = hashlib.sha1()
    async with aiofiles.open(path, "rb") as f:
        while True:
            chunk = await f.read(CHUNK_SIZE)
            if not chunk:
                break
            hasher.update(chunk)
    return hasher.hexdigest()


class ArtifactExporter:
    """Runs the export command for a box and checksums the produced file."""

    def __init__(
        self,
        work_dir: Path,
        export_command: Sequence[str],
        runner: ProcessRunner,
        box_extension: str = "box",
        logger: Optional[logging.Logger] = None,
    ):
        self.work_dir = work_dir
        self.export_command = list(export_command)
        self.runner = runner
        self.box_extension = box_extension
        self.logger = logger or logging.getLogger(__name__)

    def namespace_dir(self, identity: PackageIdentity) -> Path:
        return self.work_dir / identity.namespace

    def check_preconditions(self, identity: PackageIdentity, version: str) -> List[PreconditionResult]:
        artifact_path = identity.artifact_path(version, self.box_extension)
        return [
            check_directory_or_absent(NAMESPACE_DIR_IS_DIRECTORY, self.namespace_dir(identity)),
            check_absent(ARTIFACT_ABSENT, self.work_dir / artifact_path),
        ]

    async def export(self, identity: PackageIdentity, version: str) -> Tuple[str, str]:
        """
        Export the box and return (sha1 checksum, artifact path relative to work_dir).

        Raises ConflictError if the namespace path is a file or the artifact
        already exists, and ExportFailure if the export command fails.
        """
        for result in self.check_preconditions(identity, version):
            require(result)

        self.namespace_dir(identity).mkdir(parents=True, exist_ok=True)

        artifact_path = identity.artifact_path(version, self.box_extension)
        # Absolute, since the command runs with cwd=work_dir.
        output = (self.work_dir / artifact_path).absolute()
        cmd = render_command(self.export_command, str(output))

        self.logger.info(f"Exporting {identity.qualified_name} {version} to {output}")
        self.logger.debug(f"Export command: {cmd}")
        try:
            exit_code = await self.runner.run(cmd, self.logger.info, self.logger.error, cwd=self.work_dir)
        except OSError as e:
            raise ExportFailure(
                f"could not start export command {cmd[0]!r}: {e}",
                reason_code="EXPORT_NOT_STARTED",
                path=str(output),
            ) from e

        if exit_code != 0:
            raise ExportFailure(
                f"export command exited with status {exit_code}",
                exit_code=exit_code,
                path=str(output),
            )
        if not output.is_file():
            raise ExportFailure(
                "export command succeeded but produced no artifact",
                reason_code="EXPORT_NO_ARTIFACT",
                exit_code=exit_code,
                path=str(output),
            )

        checksum = await sha1_file(output)
        self.logger.info(f"Exported {artifact_path} (sha1 {checksum})")
        return checksum, artifact_path
