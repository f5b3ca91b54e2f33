import asyncio
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path

from app.errors import UpstreamError, ValidationError

logger = logging.getLogger(__name__)

NDA_FOLDER = "rfp-nda-documents"
PRICING_FOLDER = "rfp-pricing-documents"
PDF_CONTENT_TYPES = ("application/pdf",)
PRICING_CONTENT_TYPES = (
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
)


@dataclass
class StoredObject:
    url: str
    storage_id: str
    file_name: str


def ensure_upload_dir(upload_dir: Path) -> Path:
    upload_dir.mkdir(parents=True, exist_ok=True)
    return upload_dir


def validate_document(
    content: bytes,
    content_type: str | None,
    *,
    allowed_types: tuple[str, ...],
    max_bytes: int,
    label: str,
) -> None:
    """Raise ValidationError unless the upload is non-empty, of an allowed type and within max_bytes."""
    if not content:
        raise ValidationError(f"{label} file is empty")
    if (content_type or "").lower() not in allowed_types:
        if allowed_types == PDF_CONTENT_TYPES:
            raise ValidationError(f"Only PDF files are allowed for {label}")
        raise ValidationError(f"Unsupported file type for {label}")
    if len(content) > max_bytes:
        raise ValidationError(f"{label} file too large (max {max_bytes // (1024 * 1024)}MB)")


class LocalDocumentStorage:
    """Object storage on local disk, served by the app under /static."""

    def __init__(self, upload_dir: Path, public_prefix: str = "/static") -> None:
        self.upload_dir = upload_dir
        self.public_prefix = public_prefix.rstrip("/")

    def _write(self, content: bytes, suggested_name: str, folder: str) -> StoredObject:
        target_dir = ensure_upload_dir(self.upload_dir / folder)
        ext = Path(suggested_name or "bin").suffix
        unique_name = f"{uuid.uuid4().hex}{ext}"
        with open(target_dir / unique_name, "wb") as f:
            f.write(content)
        storage_id = f"{folder}/{unique_name}"
        return StoredObject(
            url=f"{self.public_prefix}/{storage_id}",
            storage_id=storage_id,
            file_name=suggested_name or unique_name,
        )

    async def upload(self, content: bytes, suggested_name: str, folder: str = NDA_FOLDER) -> StoredObject:
        try:
            stored = await asyncio.to_thread(self._write, content, suggested_name, folder)
        except OSError as e:
            logger.exception("document upload failed: name=%s folder=%s", suggested_name, folder)
            raise UpstreamError("Failed to upload document", details=str(e)) from e
        logger.info("document stored: storage_id=%s", stored.storage_id)
        return stored
