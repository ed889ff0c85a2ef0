"""Read the staged (not yet committed) change from git."""
import logging
import subprocess
from pathlib import Path

from review_gate.errors import ErrorKind, ReviewGateError

logger = logging.getLogger(__name__)

STAGED_DIFF_COMMAND = ["git", "diff", "--cached"]


def get_staged_diff(root: Path) -> str:
    """Return the output of ``git diff --cached`` run in *root*.

    An empty string means nothing is staged.

    Raises:
        ReviewGateError: CHANGE_SOURCE when git is missing or exits non-zero.
    """
    try:
        proc = subprocess.run(
            STAGED_DIFF_COMMAND,
            cwd=str(root),
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
    except OSError as exc:
        raise ReviewGateError(ErrorKind.CHANGE_SOURCE, f"Cannot run git: {exc}") from exc

    if proc.returncode != 0:
        raise ReviewGateError(
            ErrorKind.CHANGE_SOURCE,
            f"'{' '.join(STAGED_DIFF_COMMAND)}' failed ({proc.returncode}): {proc.stderr.strip()}",
        )

    logger.debug("[GitDiff] staged diff: %d chars", len(proc.stdout))
    return proc.stdout
