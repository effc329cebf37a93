"""
Command line entry point: package a VM as a versioned box and write the
merged metadata.json next to it.
"""
from __future__ import annotations

import argparse
import asyncio
import logging
from typing import List, Optional

from boxpublish.core.dependencies import build_publisher, build_settings
from boxpublish.domain.errors import BoxPublishError, ConfigError
from boxpublish.services.process_runner import ProcessRunner
from boxpublish.services.transport import IndexTransport
from boxpublish.storage.preconditions import failed

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2
EXIT_CONFLICT = 3

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="boxpublish",
        description="Package a local VM into a versioned box and update its metadata.json index.",
    )
    parser.add_argument("--name", "-n", required=True, help="Qualified box name (namespace/boxname)")
    parser.add_argument("--target-url", "-t", required=True, help="Base URL boxes are published under")
    parser.add_argument("--version", "-v", required=True, help="Version to publish (e.g. 1.0.0)")
    parser.add_argument(
        "--work-dir",
        "-w",
        default=None,
        help="Directory to write <namespace>/ into (default: $BOXPUBLISH_WORK_DIR or the current directory)",
    )
    parser.add_argument(
        "--export-command",
        default=None,
        help="Export command; {output} is replaced by the box path "
        "(default: $BOXPUBLISH_EXPORT_COMMAND or 'vagrant package --output {output}')",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: $BOXPUBLISH_LOG_LEVEL or INFO)",
    )
    return parser


def main(
    argv: Optional[List[str]] = None,
    runner: Optional[ProcessRunner] = None,
    transport: Optional[IndexTransport] = None,
) -> int:
    args = _build_parser().parse_args(argv)

    try:
        settings = build_settings(
            name=args.name,
            target_url=args.target_url,
            version=args.version,
            work_dir=args.work_dir,
            export_command=args.export_command,
            log_level=args.log_level,
        )
    except ConfigError as e:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
        logger.error(e.format_human())
        return EXIT_USAGE

    logging.basicConfig(level=getattr(logging, settings.log_level), format=LOG_FORMAT)

    publisher = build_publisher(settings, runner=runner, transport=transport)

    conflicts = failed(publisher.preflight())
    if conflicts:
        for result in conflicts:
            logger.error(f"Precondition {result.check} failed: {result.detail}")
        return EXIT_CONFLICT

    try:
        result = asyncio.run(publisher.run())
    except BoxPublishError as e:
        logger.error(f"Publish aborted: {e.format_human()}")
        return EXIT_FAILED

    logger.info(f"Artifact: {result.artifact_path} (sha1 {result.checksum})")
    logger.info(f"Index: {result.index_path} ({result.version_count} version(s))")
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
