"""
Upload staging service.

Turns the file parts of a multipart form into an upload table: each file is
written to a temporary location and described by an UploadDescriptor, the
way the web platform stages uploads before a handler runs.
"""

import logging
import aiofiles
from pathlib import Path
from typing import Any, Dict, Optional

from starlette.datastructures import UploadFile

from core.config import settings
from models.upload import UploadDescriptor, UploadError, UploadTable
from utils.file_utils import ensure_directory, temp_filename, detect_mime_type

logger = logging.getLogger(__name__)


class UploadService:
    """Service for staging uploaded files for validation"""

    def __init__(
        self,
        temp_dir: Optional[str] = None,
        max_upload_size: Optional[int] = None,
        detect_mime: Optional[bool] = None
    ):
        self.temp_dir = Path(temp_dir or settings.TEMP_DIR)
        self.max_upload_size = (
            settings.MAX_UPLOAD_SIZE if max_upload_size is None else max_upload_size
        )
        self.detect_mime = settings.DETECT_MIME_TYPE if detect_mime is None else detect_mime

    async def stage_file(self, upload: UploadFile) -> UploadDescriptor:
        """
        Stage a single uploaded file.

        Returns:
            Descriptor with NO_FILE for an empty file input, INI_SIZE when the
            body exceeds the upload limit, CANT_WRITE when the temp file
            could not be written, otherwise OK with the temp path set
        """
        filename = upload.filename or ""
        content = await upload.read()

        if not filename and not content:
            return UploadDescriptor(error=UploadError.NO_FILE)

        if len(content) > self.max_upload_size:
            logger.info(
                f"Upload '{filename}' rejected: {len(content)} bytes "
                f"exceeds {self.max_upload_size}"
            )
            return UploadDescriptor(error=UploadError.INI_SIZE, name=filename)

        content_type = upload.content_type or ""
        if self.detect_mime and content:
            content_type = detect_mime_type(content)

        try:
            ensure_directory(str(self.temp_dir))
            tmp_path = self.temp_dir / temp_filename(filename)
            async with aiofiles.open(tmp_path, 'wb') as f:
                await f.write(content)
        except OSError as e:
            logger.error(f"Could not stage upload '{filename}': {str(e)}")
            return UploadDescriptor(
                error=UploadError.CANT_WRITE,
                size=len(content),
                type=content_type,
                name=filename
            )

        return UploadDescriptor(
            error=UploadError.OK,
            size=len(content),
            type=content_type,
            tmp_path=str(tmp_path),
            name=filename
        )

    async def stage(self, form: Any) -> Dict[str, UploadDescriptor]:
        """
        Stage every file part of a form.

        Args:
            form: Starlette FormData (or any multi-dict with ``multi_items``)

        Returns:
            Field name -> descriptor; non-file fields are left out
        """
        table: Dict[str, UploadDescriptor] = {}
        for name, value in form.multi_items():
            if not isinstance(value, UploadFile):
                continue
            if name in table:
                # Only the first file of a repeated field is kept
                logger.debug(f"Ignoring extra file for field '{name}'")
                continue
            try:
                table[name] = await self.stage_file(value)
            except Exception:
                # Files staged so far would otherwise be left behind
                await self.cleanup(table)
                raise
        return table

    async def cleanup(self, table: UploadTable) -> int:
        """Remove staged temp files; returns how many were deleted"""
        removed = 0
        for descriptor in table.values():
            if descriptor is None or not descriptor.tmp_path:
                continue
            try:
                Path(descriptor.tmp_path).unlink()
                removed += 1
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.warning(f"Could not remove staged file {descriptor.tmp_path}: {str(e)}")
        return removed


# Singleton instance
upload_service = UploadService()
