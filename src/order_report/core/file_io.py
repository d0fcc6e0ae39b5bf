"""Safe report file output.

Reports are written all-or-nothing: every file goes to a temporary
sibling first and is ``fsync``'d; only when all of them are on disk are
they moved into place with ``os.replace``.  A failure while staging
removes the temporaries and leaves the final names untouched.
"""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Mapping
from pathlib import Path

from .errors import ReportWriteError

logger = logging.getLogger(__name__)


def _write_temp(path: Path, text: str) -> Path:
    """Write *text* to a temporary file next to *path* and return it."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
    )
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    return tmp


def write_reports(reports: Mapping[str | Path, str]) -> list[Path]:
    """Write every ``path -> text`` entry, or none of them.

    Returns the final paths in the order given.

    Raises:
        ReportWriteError: Any file could not be written.
    """
    staged: list[tuple[Path, Path]] = []
    try:
        for raw_path, text in reports.items():
            path = Path(raw_path)
            staged.append((_write_temp(path, text), path))
        for tmp, path in staged:
            os.replace(tmp, path)
    except OSError as exc:
        for tmp, _ in staged:
            tmp.unlink(missing_ok=True)
        target = getattr(exc, "filename", None) or "report"
        raise ReportWriteError(f"Cannot write {target}: {exc.strerror or exc}") from exc

    written = [path for _, path in staged]
    logger.debug("Wrote %d report file(s): %s", len(written), [str(p) for p in written])
    return written
