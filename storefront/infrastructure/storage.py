"""Local filesystem storage for uploaded images and catalog assets."""

import os
import uuid
from pathlib import Path
from typing import BinaryIO, Optional

CHUNK_SIZE = 64 * 1024

class UploadTooLarge(Exception):
    def __init__(self, limit: int):
        super().__init__(f"Uploaded file exceeds the {limit} byte limit")
        self.limit = limit

def _suffix(filename: Optional[str]) -> str:
    suffix = Path(filename or "").suffix.lower()
    if 1 < len(suffix) <= 10 and suffix[1:].isalnum():
        return suffix
    return ""

def save_upload(stream: BinaryIO, original_name: Optional[str], uploads_dir: str, max_bytes: int) -> str:
    """Copy an upload into uploads_dir under a generated name and return that name.

    The partial file is removed when the stream is larger than max_bytes.
    """
    os.makedirs(uploads_dir, exist_ok=True)
    stored_name = f"{uuid.uuid4().hex}{_suffix(original_name)}"
    target = Path(uploads_dir) / stored_name
    written = 0
    try:
        with open(target, "wb") as out:
            while True:
                chunk = stream.read(CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > max_bytes:
                    raise UploadTooLarge(max_bytes)
                out.write(chunk)
    except BaseException:
        target.unlink(missing_ok=True)
        raise
    return stored_name

def resolve_asset(assets_dir: str, filename: str) -> Optional[Path]:
    """Locate a file in assets_dir by its base name only.

    Any directory part in filename is discarded, so "../../etc/passwd"
    resolves to "<assets_dir>/passwd".
    """
    base = os.path.basename(filename.replace("\\", "/"))
    if not base or base in (".", ".."):
        return None
    path = Path(assets_dir) / base
    if not path.is_file():
        return None
    return path
