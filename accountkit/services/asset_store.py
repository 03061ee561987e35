"""Asset store for uploaded profile images (local disk)."""

from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import Protocol

from accountkit.core.errors import InternalError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".gif", ".webp"})


class AssetStore(Protocol):
    def save(self, content: bytes, filename: str, content_type: str | None = None) -> str:
        """Store the bytes and return a stable reference (path or URL)."""
        ...

    def delete(self, reference: str) -> None:
        """Remove a previously saved asset; missing assets are ignored."""
        ...


class LocalAssetStore:
    """
    Writes files under base_dir with a random name and returns url_prefix/<name>.

    The original filename is only used for its extension.
    """

    def __init__(
        self,
        base_dir: str | Path,
        url_prefix: str = "/uploads",
        max_bytes: int = 5 * 1024 * 1024,
    ) -> None:
        self.base_dir = Path(base_dir)
        self.url_prefix = url_prefix.rstrip("/")
        self.max_bytes = max_bytes

    def save(self, content: bytes, filename: str, content_type: str | None = None) -> str:
        if not content:
            raise ValidationError("No file uploaded.")
        if len(content) > self.max_bytes:
            raise ValidationError(
                f"File size must not exceed {self.max_bytes // 1024} KB."
            )
        suffix = Path(filename or "").suffix.lower()
        if suffix not in ALLOWED_IMAGE_EXTENSIONS:
            raise ValidationError(
                "Profile image must be one of: "
                + ", ".join(sorted(ALLOWED_IMAGE_EXTENSIONS))
            )
        if content_type and not content_type.lower().startswith("image/"):
            raise ValidationError("Profile image must have an image/* content type.")

        stored_name = f"{uuid.uuid4().hex}{suffix}"
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            (self.base_dir / stored_name).write_bytes(content)
        except OSError as e:
            logger.exception("Could not write asset %s: %s", stored_name, e)
            raise InternalError() from e
        logger.info("Stored asset %s (%d bytes)", stored_name, len(content))
        return f"{self.url_prefix}/{stored_name}"

    def delete(self, reference: str) -> None:
        """Remove a file saved by this store. Unknown references and missing files are ignored."""
        prefix = f"{self.url_prefix}/"
        if not reference.startswith(prefix):
            return
        stored_name = Path(reference[len(prefix):]).name
        try:
            (self.base_dir / stored_name).unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not remove asset %s: %s", stored_name, e)
            return
        logger.info("Removed asset %s", stored_name)
