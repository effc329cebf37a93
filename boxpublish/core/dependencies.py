from __future__ import annotations

import logging
import os
import shlex
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from boxpublish.core.config import DEFAULT_EXPORT_COMMAND, PublishSettings
from boxpublish.domain.errors import ConfigError
from boxpublish.services.exporter import ArtifactExporter
from boxpublish.services.index_fetcher import IndexFetcher
from boxpublish.services.process_runner import AsyncioProcessRunner, ProcessRunner
from boxpublish.services.publisher import Publisher
from boxpublish.services.transport import HttpxTransport, IndexTransport
from boxpublish.storage.index_writer import IndexWriter

WORK_DIR_ENV_VAR = "BOXPUBLISH_WORK_DIR"
EXPORT_COMMAND_ENV_VAR = "BOXPUBLISH_EXPORT_COMMAND"
LOG_LEVEL_ENV_VAR = "BOXPUBLISH_LOG_LEVEL"


def get_work_dir(cli_value: Optional[str] = None) -> Path:
    """
    Determine the work directory.

    Priority:
    1. --work-dir
    2. Environment variable BOXPUBLISH_WORK_DIR
    3. The current working directory
    """
    value = cli_value or os.environ.get(WORK_DIR_ENV_VAR)
    if value:
        return Path(value).expanduser().absolute()
    return Path.cwd()


def get_export_command(cli_value: Optional[str] = None) -> List[str]:
    value = cli_value or os.environ.get(EXPORT_COMMAND_ENV_VAR)
    if value:
        return shlex.split(value)
    return list(DEFAULT_EXPORT_COMMAND)


def get_log_level(cli_value: Optional[str] = None) -> str:
    return cli_value or os.environ.get(LOG_LEVEL_ENV_VAR) or "INFO"


def build_settings(
    name: str,
    target_url: str,
    version: str,
    work_dir: Optional[str] = None,
    export_command: Optional[str] = None,
    log_level: Optional[str] = None,
) -> PublishSettings:
    """Resolve CLI values and environment fallbacks into validated settings."""
    try:
        return PublishSettings(
            name=name,
            target_url=target_url,
            version=version,
            work_dir=get_work_dir(work_dir),
            export_command=get_export_command(export_command),
            log_level=get_log_level(log_level),
        )
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigError(f"invalid configuration: {problems}") from e
    except ValueError as e:
        # shlex.split on an unbalanced quote
        raise ConfigError(f"invalid configuration: {e}") from e


def get_process_runner() -> ProcessRunner:
    return AsyncioProcessRunner()


def get_index_transport() -> IndexTransport:
    return HttpxTransport()


def build_publisher(
    settings: PublishSettings,
    runner: Optional[ProcessRunner] = None,
    transport: Optional[IndexTransport] = None,
    logger: Optional[logging.Logger] = None,
) -> Publisher:
    exporter = ArtifactExporter(
        settings.work_dir,
        settings.export_command,
        runner or get_process_runner(),
        box_extension=settings.box_extension,
        logger=logger,
    )
    fetcher = IndexFetcher(transport or get_index_transport(), logger=logger)
    writer = IndexWriter(logger=logger)
    return Publisher(settings, exporter, fetcher, writer, logger=logger)
