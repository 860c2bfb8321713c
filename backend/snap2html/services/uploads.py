"""Transient storage for uploaded screenshots.

Each upload is copied into a uniquely named file under the upload directory,
read once, and removed when the request finishes. Removal never raises: a file
that is already gone or cannot be deleted is logged and left to the operator.
"""

import mimetypes
import os
import pathlib
import shutil
import tempfile
from dataclasses import dataclass
from typing import BinaryIO, Optional

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_IMAGE_MIME = "image/png"


@dataclass(frozen=True)
class StagedUpload:
    path: str
    filename: str

    @property
    def mime_type(self) -> str:
        return mime_type_for(self.filename)


def mime_type_for(filename: Optional[str]) -> str:
    ext = pathlib.Path(filename or "").suffix.lower().lstrip(".")
    if not ext:
        return DEFAULT_IMAGE_MIME
    guessed, _ = mimetypes.guess_type(f"upload.{ext}")
    if guessed and guessed.startswith("image/"):
        return guessed
    return f"image/{ext}"


def stage_upload(fileobj: BinaryIO, filename: Optional[str], upload_dir: str) -> StagedUpload:
    os.makedirs(upload_dir, exist_ok=True)
    suffix = pathlib.Path(filename or "").suffix
    with tempfile.NamedTemporaryFile(
        mode="wb", dir=upload_dir, prefix="screenshot-", suffix=suffix, delete=False
    ) as tmp:
        try:
            shutil.copyfileobj(fileobj, tmp)
        except Exception:
            discard_upload(tmp.name)
            raise
    return StagedUpload(path=tmp.name, filename=filename or os.path.basename(tmp.name))


def read_upload(staged: StagedUpload) -> bytes:
    with open(staged.path, "rb") as f:
        return f.read()


def discard_upload(path: str) -> bool:
    try:
        os.remove(path)
    except FileNotFoundError:
        logger.warning("upload.cleanup_failed", path=path, reason="already removed")
        return False
    except OSError as exc:
        logger.warning("upload.cleanup_failed", path=path, reason=str(exc))
        return False
    return True
