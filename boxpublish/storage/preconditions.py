"""
Named filesystem preconditions.

The local work directory doubles as the publisher's only state, so every
step checks that it is about to create something new rather than clobber
a leftover from an earlier run. Checks return a PreconditionResult; only
`require` turns a failed check into an exception.
"""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

from boxpublish.domain.errors import ConflictError
from boxpublish.domain.models import PreconditionResult

NAMESPACE_DIR_IS_DIRECTORY = "namespace_dir_is_directory"
ARTIFACT_ABSENT = "artifact_absent"
INDEX_ABSENT = "index_absent"


def check_directory_or_absent(check: str, path: Path) -> PreconditionResult:
    """Holds when path is a directory or does not exist yet."""
    if path.exists() and not path.is_dir():
        return PreconditionResult(
            check=check,
            path=path,
            ok=False,
            detail=f"{path} exists and is not a directory",
        )
    return PreconditionResult(check=check, path=path, ok=True)


def check_absent(check: str, path: Path) -> PreconditionResult:
    """Holds when nothing exists at path."""
    if path.exists():
        return PreconditionResult(
            check=check,
            path=path,
            ok=False,
            detail=f"{path} already exists; remove it before publishing again",
        )
    return PreconditionResult(check=check, path=path, ok=True)


def failed(results: Iterable[PreconditionResult]) -> List[PreconditionResult]:
    return [r for r in results if not r.ok]


def require(result: PreconditionResult) -> None:
    if not result.ok:
        raise ConflictError(
            result.detail or f"precondition {result.check} failed",
            reason_code=result.check.upper(),
            path=str(result.path),
        )
