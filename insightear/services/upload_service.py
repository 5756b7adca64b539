"""
File uploads: validate and persist files sent to POST /upload.

Responsibility: Enforce the per-file size limit, sanitize names, and write files under
data/uploads/ with a millisecond timestamp prefix. Called by the API layer; no HTTP or
FastAPI here. Uploads are recorded on the session but not sent to the assistant.
"""

import logging
import re
import time
from dataclasses import dataclass
from pathlib import Path

from insightear.core.config import MAX_UPLOAD_BYTES, MAX_UPLOAD_FILES, UPLOAD_DIR_NAME

logger = logging.getLogger(__name__)


class UploadTooLargeError(Exception):
    """Raised when one or more files exceed MAX_UPLOAD_BYTES."""

    def __init__(self, rejected: list[str]) -> None:
        self.rejected = rejected
        super().__init__(f"Too large: {', '.join(rejected)}")


class TooManyFilesError(Exception):
    """Raised when more than MAX_UPLOAD_FILES files are sent at once."""

    def __init__(self, count: int) -> None:
        self.count = count
        super().__init__(f"{count} files sent; at most {MAX_UPLOAD_FILES} allowed")


@dataclass
class SaveUploadResult:
    """Result of saving uploaded files to disk."""

    files_saved: int
    paths: list[str]
    records: list[dict]


def _project_root() -> Path:
    return Path(__file__).resolve().parent.parent.parent


def _sanitize_filename(filename: str) -> str:
    """Sanitize filename to prevent path traversal (../). Returns safe basename."""
    if not filename or not filename.strip():
        return "unnamed"
    base = Path(filename).name
    safe = base.replace("..", "").replace("/", "").replace("\\", "")
    safe = re.sub(r"[^\w.\-]", "_", safe)
    return safe.strip() or "unnamed"


def save_uploaded_files(
    items: list[tuple[str, str, bytes]],
    root: Path | None = None,
) -> SaveUploadResult:
    """
    Validate and persist uploaded files under data/uploads/.

    Args:
        items: List of (filename, content_type, raw_bytes) for each file.
        root: Project root to save under; defaults to the repository root.

    Returns:
        SaveUploadResult with files_saved, relative paths, and one record per file
        ({original_name, filename, path, size, mimetype, upload_time}) for the session.

    Raises:
        TooManyFilesError: more than MAX_UPLOAD_FILES items.
        UploadTooLargeError: any file larger than MAX_UPLOAD_BYTES (nothing is written).
        OSError: creating the upload dir or writing a file fails.
    """
    if len(items) > MAX_UPLOAD_FILES:
        raise TooManyFilesError(len(items))
    too_large = [name or "unnamed" for name, _, content in items if len(content) > MAX_UPLOAD_BYTES]
    if too_large:
        raise UploadTooLargeError(too_large)

    upload_dir = (root or _project_root()) / UPLOAD_DIR_NAME
    upload_dir.mkdir(parents=True, exist_ok=True)

    paths: list[str] = []
    records: list[dict] = []
    for filename, content_type, content in items:
        stamp = int(time.time() * 1000)
        safe_name = f"{stamp}-{_sanitize_filename(filename)}"
        dest = upload_dir / safe_name
        n = 1
        while dest.exists():
            dest = upload_dir / f"{stamp}-{n}-{_sanitize_filename(filename)}"
            n += 1
        dest.write_bytes(content)
        rel_path = f"{UPLOAD_DIR_NAME}/{dest.name}"
        paths.append(rel_path)
        records.append({
            "original_name": filename or "unnamed",
            "filename": dest.name,
            "path": rel_path,
            "size": len(content),
            "mimetype": content_type or "application/octet-stream",
            "upload_time": time.time(),
        })
        logger.info("[upload_service] stored %s (%d bytes)", rel_path, len(content))

    return SaveUploadResult(files_saved=len(paths), paths=paths, records=records)
