"""Scoped temporary workspace for prompt files."""

import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import structlog

log = structlog.get_logger(__name__)

WORKSPACE_PREFIX = "claude-code-"


@contextmanager
def prompt_workspace(prefix: str = WORKSPACE_PREFIX) -> Iterator[Path]:
    """Create a fresh temporary directory and remove it on every exit path.

    Removal is recursive and best-effort: a failure is logged as a warning
    and never replaces the outcome of the body.

    Yields:
        Path to the new directory
    """
    workspace = Path(tempfile.mkdtemp(prefix=prefix))
    log.debug("workspace_created", path=str(workspace))
    try:
        yield workspace
    finally:
        try:
            shutil.rmtree(workspace)
            log.debug("workspace_removed", path=str(workspace))
        except OSError as e:
            log.warning("workspace_cleanup_failed", path=str(workspace), error=str(e))
