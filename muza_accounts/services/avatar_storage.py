"""
Local disk storage for profile images.

WHAT: Validates, writes and deletes avatar files under UPLOAD_DIR/profiles.

WHY: Avatars are served back by the StaticFiles mount at /uploads, so the
stored path doubles as the public URL path.

HOW: Files are named profile-<epoch ms>-<random><ext>. Disk IO runs in the
threadpool so the event loop is not blocked.
"""

import logging
import os
import secrets
import shutil
import time
from pathlib import Path
from typing import BinaryIO, Optional

from starlette.concurrency import run_in_threadpool

from muza_accounts.core.config import settings
from muza_accounts.core.exceptions import InputError, StorageError
from muza_accounts.core.messages import get_message

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/uploads"
PROFILE_SUBDIR = "profiles"


class ProfileImageStorage:
    """Stores profile images on the local filesystem."""

    def __init__(self, upload_dir: Optional[str] = None, max_bytes: Optional[int] = None):
        self.root = Path(upload_dir or settings.UPLOAD_DIR)
        self.max_bytes = max_bytes or settings.MAX_PROFILE_IMAGE_BYTES

    @property
    def profile_dir(self) -> Path:
        return self.root / PROFILE_SUBDIR

    def validate(self, file: BinaryIO, content_type: Optional[str]) -> int:
        """
        Check the upload is an image within the size limit.

        Returns:
            File size in bytes

        Raises:
            InputError: If the type is not image/* or the file is too large
        """
        if not content_type or not content_type.startswith("image/"):
            raise InputError(
                message=get_message("image_type_invalid"),
                content_type=content_type,
            )

        file.seek(0, 2)
        size = file.tell()
        file.seek(0)

        if size == 0:
            raise InputError(message=get_message("image_required"))
        if size > self.max_bytes:
            raise InputError(
                message=get_message("image_too_large", max_mb=self.max_bytes // (1024 * 1024)),
                file_size=size,
                max_size=self.max_bytes,
            )
        return size

    @staticmethod
    def build_filename(original_filename: Optional[str]) -> str:
        ext = Path(original_filename or "").suffix.lower()
        return f"profile-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{ext}"

    def _write(self, file: BinaryIO, filename: str) -> None:
        self.profile_dir.mkdir(parents=True, exist_ok=True)
        with open(self.profile_dir / filename, "wb") as out:
            shutil.copyfileobj(file, out)

    async def save(
        self,
        file: BinaryIO,
        original_filename: Optional[str],
        content_type: Optional[str],
    ) -> str:
        """
        Validate and store an image.

        Returns:
            Relative public path, e.g. /uploads/profiles/profile-1-2.png

        Raises:
            InputError: On invalid type or size
            StorageError: If the file cannot be written
        """
        size = self.validate(file, content_type)
        filename = self.build_filename(original_filename)

        try:
            await run_in_threadpool(self._write, file, filename)
        except OSError as e:
            raise StorageError(operation="write_profile_image", reason=str(e)) from e

        logger.info("Profile image stored", extra={"stored_filename": filename, "size": size})
        return f"{PUBLIC_PREFIX}/{PROFILE_SUBDIR}/{filename}"

    def resolve(self, public_path: str) -> Optional[Path]:
        """
        Map a stored public path back to a file under the upload root.

        Returns None for paths outside the upload root (absolute URLs,
        traversal attempts).
        """
        if not public_path.startswith(f"{PUBLIC_PREFIX}/"):
            return None
        candidate = (self.root / public_path[len(PUBLIC_PREFIX) + 1:]).resolve()
        root = self.root.resolve()
        if root not in candidate.parents:
            return None
        return candidate

    async def delete(self, public_path: Optional[str]) -> bool:
        """
        Best-effort removal of a stored image.

        Returns:
            True if a file was removed; missing files are not an error
        """
        if not public_path:
            return False
        path = self.resolve(public_path)
        if path is None:
            return False

        try:
            await run_in_threadpool(os.remove, path)
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning(
                f"Could not remove profile image: {e}",
                extra={"path": str(path)},
            )
            return False
        return True
