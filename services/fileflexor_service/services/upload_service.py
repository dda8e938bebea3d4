import re
import time
import random
from typing import Optional
from pathlib import Path
import logging

from fastapi import UploadFile

from ..config import Settings, StoragePaths
from ..errors import FileFlexorError, InvalidFileType, InternalFailure, MissingParameter, PayloadTooLarge
from ..models import UploadedFile
from ..utils import ALLOWED_MIME_TYPES, format_file_size

logger = logging.getLogger(__name__)

_EXTENSION_RE = re.compile(r'^\.[A-Za-z0-9]{1,10}$')

class UploadService:
    """Validates incoming uploads and stores them in the intake area"""
    
    FIELD_NAME = "file"
    CHUNK_SIZE = 1024 * 1024
    
    def __init__(self, settings: Settings, paths: StoragePaths):
        self.settings = settings
        self.paths = paths
        self.max_size = settings.max_upload_size
    
    def generate_file_id(self, original_name: str) -> str:
        """
        Build a storage name: <field>-<epoch millis>-<9 digit random><ext>
        
        The original extension is kept so that processing can dispatch on it.
        Names already present in the intake area are never handed out again.
        """
        ext = Path(Path(original_name).name).suffix
        if not _EXTENSION_RE.match(ext):
            ext = ""
        
        while True:
            file_id = f"{self.FIELD_NAME}-{int(time.time() * 1000)}-{random.randint(100000000, 999999999)}{ext}"
            if not (self.paths.upload_dir / file_id).exists():
                return file_id
    
    def validate(self, upload: Optional[UploadFile]) -> None:
        if upload is None or not upload.filename:
            raise MissingParameter("No file uploaded", field=self.FIELD_NAME)
        
        if upload.content_type not in ALLOWED_MIME_TYPES:
            logger.warning(f"Rejected upload {upload.filename!r} with type {upload.content_type}")
            raise InvalidFileType()
        
        if upload.size is not None and upload.size > self.max_size:
            raise PayloadTooLarge(self.max_size)
    
    async def save_upload(self, upload: Optional[UploadFile]) -> UploadedFile:
        """
        Validate an upload and persist it under a generated name
        
        Args:
            upload: The multipart file part
        
        Returns:
            Description of the stored file
        """
        self.validate(upload)
        
        file_id = self.generate_file_id(upload.filename)
        destination = self.paths.upload_dir / file_id
        
        size = 0
        try:
            with open(destination, 'wb') as f:
                while True:
                    chunk = await upload.read(self.CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > self.max_size:
                        raise PayloadTooLarge(self.max_size)
                    f.write(chunk)
        except FileFlexorError:
            destination.unlink(missing_ok=True)
            raise
        except OSError as e:
            destination.unlink(missing_ok=True)
            logger.error(f"Failed to store upload {upload.filename!r}: {str(e)}")
            raise InternalFailure("Upload failed")
        
        logger.info(f"Stored upload {upload.filename!r} as {file_id} ({format_file_size(size)})")
        
        return UploadedFile(
            id=file_id,
            original_name=upload.filename,
            size=size,
            formatted_size=format_file_size(size),
            type=upload.content_type
        )
