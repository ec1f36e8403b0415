"""Local blob storage for uploaded media, served under /uploads."""

import logging
from dataclasses import dataclass
from pathlib import Path

from app.config import settings

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/uploads"


@dataclass
class StoredBlob:
    path: str
    url: str
    size: int


def upload_root() -> Path:
    return Path(settings.UPLOAD_DIR)


def store_blob(key: str, content: bytes) -> StoredBlob:
    """
    Write `content` under `key` (a relative path) and return where it can
    be fetched from.
    """
    root = upload_root().resolve()
    file_path = (root / key).resolve()
    if root not in file_path.parents:
        raise ValueError(f"Blob key escapes upload root: {key}")

    file_path.parent.mkdir(parents=True, exist_ok=True)
    with open(file_path, "wb") as f:
        f.write(content)

    return StoredBlob(
        path=str(file_path),
        url=f"{PUBLIC_PREFIX}/{key}",
        size=len(content),
    )


def delete_blob(path: str) -> None:
    file_path = Path(path)
    try:
        file_path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Could not delete blob %s: %s", path, e)
